from __future__ import annotations

import logging
from typing import Dict, Optional

import httpx

from .config import Settings
from .errors import AuthenticationError

logger = logging.getLogger(__name__)


def _require(settings: Settings) -> None:
    if not (settings.supabase_url and settings.supabase_key):
        raise RuntimeError("Supabase is not configured (missing SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY).")


class SupabaseDocumentStore:
    """
    Read-only document access through PostgREST (no extra SDK dependency).
    Each collection is a table with columns `id text primary key` and `data jsonb`.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        _require(settings)
        self._url = settings.supabase_url
        self._key = settings.supabase_key
        self._timeout = settings.supabase_timeout_seconds
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self._key,
            "Authorization": f"Bearer {self._key}",
            "Accept": "application/json",
        }

    def _rest_url(self, table: str) -> str:
        return f"{self._url}/rest/v1/{table}"

    async def get(self, collection: str, key: str) -> Optional[dict]:
        params = {
            "select": "data",
            "id": f"eq.{key}",
            "limit": "1",
        }
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            r = await client.get(self._rest_url(collection), headers=self._headers(), params=params)
            r.raise_for_status()
            rows = r.json() if r.content else []

        if not rows:
            return None
        data = rows[0].get("data")
        return data if isinstance(data, dict) else None


class SupabaseIdentityVerifier:
    """Validates a Supabase access token by asking GoTrue who it belongs to."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        _require(settings)
        self._url = settings.supabase_url
        self._apikey = settings.supabase_anon_key or settings.supabase_key
        self._timeout = settings.supabase_timeout_seconds
        self._transport = transport

    async def verify(self, token: str) -> str:
        headers = {"apikey": self._apikey, "Authorization": f"Bearer {token}"}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                r = await client.get(f"{self._url}/auth/v1/user", headers=headers)
        except httpx.HTTPError as e:
            logger.warning("Supabase auth unavailable: %s", type(e).__name__)
            raise AuthenticationError()

        if not r.is_success:
            raise AuthenticationError()
        try:
            user = r.json()
        except ValueError:
            raise AuthenticationError()
        uid = user.get("id") if isinstance(user, dict) else None
        if not uid:
            raise AuthenticationError()
        return str(uid)
