from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, load_settings
from .document_store import get_document_store
from .errors import (
    InternalError,
    InvalidRequestError,
    MethodNotAllowedError,
    MissingFieldsError,
    ProxyError,
)
from .identity import get_identity_verifier
from .openai_client import ResponsesClient
from .proxy import ChatProxy
from .schemas import REQUIRED_FIELDS, ChatRequest, ChatResponse, ErrorResponse

logger = logging.getLogger(__name__)

_EMPTY_ERRORS = {"missing", "string_too_short", "too_short"}


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def build_proxy(settings: Settings) -> ChatProxy:
    """Create the process-wide collaborators; called once at startup."""
    return ChatProxy(
        verifier=get_identity_verifier(settings),
        store=get_document_store(settings),
        upstream=ResponsesClient(settings.openai_base_url, timeout=settings.openai_timeout_seconds),
        settings=settings,
    )


def _is_missing_field(err: Dict[str, Any]) -> bool:
    loc = tuple(err.get("loc") or ())
    if loc == ("body",):
        return err.get("type") == "missing"
    if len(loc) != 2 or loc[0] != "body" or loc[1] not in REQUIRED_FIELDS:
        return False
    return err.get("type") in _EMPTY_ERRORS or err.get("input") is None


def classify_validation_errors(errors: List[Dict[str, Any]]) -> ProxyError:
    if any(_is_missing_field(e) for e in errors):
        return MissingFieldsError()
    # Field paths and messages only; submitted values are never echoed.
    detail = [
        {"field": ".".join(str(p) for p in (e.get("loc") or ())[1:]), "message": e.get("msg", "")}
        for e in errors
    ]
    return InvalidRequestError(detail=detail)


def get_proxy(request: Request) -> ChatProxy:
    return request.app.state.proxy


def create_app(settings: Optional[Settings] = None, proxy: Optional[ChatProxy] = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if app.state.proxy is None:
            app.state.proxy = build_proxy(settings)
        logger.info("Assistant proxy ready (default model=%s)", settings.default_model)
        yield

    app = FastAPI(title="Assistant Proxy", version="1.0.0", lifespan=lifespan)
    app.state.proxy = proxy

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ProxyError)
    async def proxy_error_handler(request: Request, exc: ProxyError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        err = classify_validation_errors(list(exc.errors()))
        return JSONResponse(status_code=err.status_code, content=err.to_body())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 405:
            return JSONResponse(status_code=405, content=MethodNotAllowedError().to_body())
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.get("/health")
    async def health():
        return {"ok": True}

    @app.post(
        "/chat",
        response_model=ChatResponse,
        responses={code: {"model": ErrorResponse} for code in (400, 401, 404, 405, 500, 502, 504)},
    )
    async def chat(req: ChatRequest, proxy: ChatProxy = Depends(get_proxy)):
        try:
            return await proxy.handle(req)
        except ProxyError:
            raise
        except Exception:
            # Caught inside the route so the 500 still passes through CORSMiddleware.
            logger.exception("Chat function error")
            raise InternalError()

    return app


app = create_app()
