from __future__ import annotations

import logging
from typing import Dict, Protocol

from .config import Settings
from .errors import AuthenticationError

logger = logging.getLogger(__name__)


class IdentityVerifier(Protocol):
    async def verify(self, token: str) -> str:
        """Return the caller's user id, or raise AuthenticationError."""
        ...


def parse_static_tokens(raw: str) -> Dict[str, str]:
    """'tok1:uid1,tok2:uid2' -> {'tok1': 'uid1', 'tok2': 'uid2'}"""
    tokens: Dict[str, str] = {}
    for pair in raw.split(","):
        token, sep, uid = pair.strip().partition(":")
        if sep and token and uid:
            tokens[token] = uid
    return tokens


class StaticTokenVerifier:
    """Fixed token table, for local development only."""

    def __init__(self, tokens: Dict[str, str]):
        self._tokens = dict(tokens)

    async def verify(self, token: str) -> str:
        uid = self._tokens.get(token)
        if uid is None:
            raise AuthenticationError()
        return uid


def get_identity_verifier(settings: Settings) -> IdentityVerifier:
    backend = settings.identity_backend
    logger.info("Identity backend: %s", backend)

    if backend == "firebase":
        from .firebase import FirebaseIdentityVerifier
        return FirebaseIdentityVerifier(settings)

    if backend == "supabase":
        from .supabase_store import SupabaseIdentityVerifier
        return SupabaseIdentityVerifier(settings)

    if backend == "static":
        tokens = parse_static_tokens(settings.static_auth_tokens)
        if not tokens:
            raise RuntimeError("IDENTITY_BACKEND=static requires STATIC_AUTH_TOKENS")
        logger.warning("Using static auth tokens; do not run this in production.")
        return StaticTokenVerifier(tokens)

    raise RuntimeError(f"Unknown IDENTITY_BACKEND: {backend!r}")
