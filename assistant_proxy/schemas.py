from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List, Literal, Optional

REQUIRED_FIELDS = ("assistantId", "messages", "idToken")


class ChatMessage(BaseModel):
    # Clients often keep ids/timestamps on their message objects; those are dropped.
    model_config = ConfigDict(extra="ignore")

    role: str
    content: str


class ChatRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    assistant_id: str = Field(..., alias="assistantId", min_length=1)
    messages: List[ChatMessage] = Field(..., min_length=1)  # oldest first
    id_token: str = Field(..., alias="idToken", min_length=1)


class ChatResponse(BaseModel):
    reply: str
    model: str
    usage: Optional[Any] = None


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[Any] = None


class AssistantConfig(BaseModel):
    """Persona document stored under assistants/{assistantId}; written out-of-band by admins."""

    model_config = ConfigDict(extra="ignore")

    prompt: Optional[str] = None
    model: Optional[str] = None


class UpstreamMessage(BaseModel):
    role: Literal["developer", "user", "assistant"]
    content: str
