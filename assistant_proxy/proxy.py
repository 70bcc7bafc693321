"""
Chat proxy pipeline.

Each step either returns its result or raises a ProxyError that ends the
request with a fixed status/body:

  authenticate -> load_api_key -> load_assistant -> build_body -> upstream -> extract_reply

The API key and the assistant prompt never leave this module except in the
outbound upstream request.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from .config import Settings
from .document_store import DocumentStore
from .errors import AssistantNotFoundError, ConfigurationError, InternalError, RequestTimeoutError
from .identity import IdentityVerifier
from .openai_client import ResponsesClient
from .payload import build_input_messages, build_upstream_body, extract_reply, resolve_model
from .schemas import AssistantConfig, ChatRequest, ChatResponse

logger = logging.getLogger(__name__)


class ChatProxy:
    def __init__(
        self,
        verifier: IdentityVerifier,
        store: DocumentStore,
        upstream: ResponsesClient,
        settings: Optional[Settings] = None,
    ):
        self.verifier = verifier
        self.store = store
        self.upstream = upstream
        self.settings = settings or Settings()

    async def handle(self, req: ChatRequest) -> ChatResponse:
        timeout = self.settings.request_timeout_seconds
        try:
            return await asyncio.wait_for(self._run_guarded(req), timeout=timeout if timeout > 0 else None)
        except asyncio.TimeoutError:
            logger.warning("Chat request exceeded %ss (assistant=%s)", timeout, req.assistant_id)
            raise RequestTimeoutError()

    async def _run_guarded(self, req: ChatRequest) -> ChatResponse:
        # A collaborator's own TimeoutError is not the request deadline.
        try:
            return await self._run(req)
        except asyncio.TimeoutError:
            logger.exception("Collaborator timed out (assistant=%s)", req.assistant_id)
            raise InternalError()

    async def _run(self, req: ChatRequest) -> ChatResponse:
        uid = await self.authenticate(req.id_token)
        logger.debug("Chat request from uid=%s assistant=%s", uid, req.assistant_id)

        api_key = await self.load_api_key()
        assistant = await self.load_assistant(req.assistant_id)

        model = resolve_model(assistant, self.settings.default_model)
        body = self.build_body(req, assistant, model)
        data = await self.upstream.create(api_key, body)

        return ChatResponse(
            reply=extract_reply(data),
            model=model,
            usage=data.get("usage"),
        )

    async def authenticate(self, id_token: str) -> str:
        # Any authenticated user may use any assistant.
        return await self.verifier.verify(id_token)

    async def load_api_key(self) -> str:
        s = self.settings
        doc = await self.store.get(s.config_collection, s.config_document)
        api_key = (doc or {}).get(s.api_key_field)
        if not api_key or not isinstance(api_key, str):
            logger.error("Missing %s in %s/%s", s.api_key_field, s.config_collection, s.config_document)
            raise ConfigurationError()
        return api_key

    async def load_assistant(self, assistant_id: str) -> AssistantConfig:
        doc = await self.store.get(self.settings.assistants_collection, assistant_id)
        if doc is None:
            raise AssistantNotFoundError()
        return AssistantConfig.model_validate(doc)

    def build_body(self, req: ChatRequest, assistant: AssistantConfig, model: str) -> Dict[str, Any]:
        s = self.settings
        input_messages = build_input_messages(
            assistant.prompt or s.default_prompt,
            req.messages,
            max_chars=s.max_message_chars,
        )
        return build_upstream_body(
            model,
            input_messages,
            reasoning_prefixes=s.reasoning_model_prefixes,
            reasoning_effort=s.reasoning_effort,
            web_search_tool=s.web_search_tool,
        )
