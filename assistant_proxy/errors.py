from __future__ import annotations

from typing import Any, Dict, Optional


class ProxyError(Exception):
    """A terminal failure of one pipeline step, carrying the client-facing response."""

    status_code: int = 500
    error: str = "Internal server error"

    def __init__(self, error: Optional[str] = None, detail: Any = None):
        self.error = error or self.error
        self.detail = detail
        super().__init__(self.error)

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error}
        if self.detail is not None:
            body["detail"] = self.detail
        return body


class InvalidRequestError(ProxyError):
    status_code = 400
    error = "Invalid request body"


class MissingFieldsError(InvalidRequestError):
    error = "Missing required fields: assistantId, messages, idToken"


class AuthenticationError(ProxyError):
    status_code = 401
    error = "Invalid auth token"


class AssistantNotFoundError(ProxyError):
    status_code = 404
    error = "Assistant not found"


class MethodNotAllowedError(ProxyError):
    status_code = 405
    error = "Method not allowed"


class ConfigurationError(ProxyError):
    status_code = 500
    error = "API key not configured"


class UpstreamError(ProxyError):
    status_code = 502
    error = "AI service error"


class RequestTimeoutError(ProxyError):
    status_code = 504
    error = "Request timed out"


class InternalError(ProxyError):
    status_code = 500
    error = "Internal server error"
