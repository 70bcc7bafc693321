"""
Firebase Admin backends: ID token verification (Firebase Auth) and
document reads (Cloud Firestore). Both share one process-wide Firebase app.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import firebase_admin
from firebase_admin import auth, credentials, firestore_async

from .config import Settings
from .errors import AuthenticationError

logger = logging.getLogger(__name__)


def init_firebase_app(settings: Settings) -> firebase_admin.App:
    """Initialize the default Firebase app once; later calls return the same app."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    cred = credentials.Certificate(settings.firebase_credentials_file) if settings.firebase_credentials_file else None
    options = {"projectId": settings.firebase_project_id} if settings.firebase_project_id else None
    app = firebase_admin.initialize_app(cred, options)
    logger.info("Firebase app initialized (project=%s)", app.project_id or "default")
    return app


class FirebaseIdentityVerifier:
    def __init__(self, settings: Optional[Settings] = None, app: Optional[firebase_admin.App] = None):
        self._app = app or init_firebase_app(settings or Settings())

    async def verify(self, token: str) -> str:
        try:
            decoded = await asyncio.to_thread(auth.verify_id_token, token, self._app)
        except Exception as e:
            # Invalid, expired, revoked, malformed, or the key fetch failed.
            logger.info("ID token rejected: %s", type(e).__name__)
            raise AuthenticationError()
        return decoded["uid"]


class FirestoreDocumentStore:
    def __init__(self, settings: Optional[Settings] = None, client: Any = None):
        if client is None:
            client = firestore_async.client(init_firebase_app(settings or Settings()))
        self._db = client

    async def get(self, collection: str, key: str) -> Optional[dict]:
        snap = await self._db.collection(collection).document(key).get()
        if not snap.exists:
            return None
        return snap.to_dict() or {}
