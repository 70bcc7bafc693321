from __future__ import annotations
import json
import logging
from typing import Any, Dict, Optional, Protocol

from .config import Settings

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    async def get(self, collection: str, key: str) -> Optional[dict]:
        ...


class InMemoryStore:
    def __init__(self, documents: Optional[Dict[str, Dict[str, dict]]] = None):
        self._db: Dict[str, Dict[str, dict]] = {c: dict(docs) for c, docs in (documents or {}).items()}

    async def get(self, collection: str, key: str) -> Optional[dict]:
        return self._db.get(collection, {}).get(key)

    @classmethod
    def from_file(cls, path: str) -> "InMemoryStore":
        """Seed from a JSON file shaped {collection: {key: document}}."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Seed file {path} must contain a JSON object")
        return cls(data)


class RedisStore:
    """Documents stored as JSON strings under '{prefix}{collection}/{key}'."""

    def __init__(self, client: Any, prefix: str = "assistant_proxy:"):
        self._r = client
        self._prefix = prefix

    def _key(self, collection: str, key: str) -> str:
        return f"{self._prefix}{collection}/{key}"

    async def get(self, collection: str, key: str) -> Optional[dict]:
        raw = await self._r.get(self._key(collection, key))
        if not raw:
            return None
        doc = json.loads(raw)
        return doc if isinstance(doc, dict) else None


def get_document_store(settings: Settings) -> DocumentStore:
    backend = settings.document_store_backend
    logger.info("Document store backend: %s", backend)

    if backend == "memory":
        if settings.document_store_seed_file:
            return InMemoryStore.from_file(settings.document_store_seed_file)
        return InMemoryStore()

    if backend == "redis":
        if not settings.redis_url:
            raise RuntimeError("DOCUMENT_STORE_BACKEND=redis requires REDIS_URL")
        import redis.asyncio as redis
        return RedisStore(redis.from_url(settings.redis_url, decode_responses=True), settings.redis_key_prefix)

    if backend == "supabase":
        from .supabase_store import SupabaseDocumentStore
        return SupabaseDocumentStore(settings)

    if backend == "firestore":
        from .firebase import FirestoreDocumentStore
        return FirestoreDocumentStore(settings)

    raise RuntimeError(f"Unknown DOCUMENT_STORE_BACKEND: {backend!r}")
