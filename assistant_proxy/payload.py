from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence

from .schemas import AssistantConfig, ChatMessage, UpstreamMessage

MAX_MESSAGE_CHARS = 10_000
NO_RESPONSE = "No response"


def truncate_content(content: str, limit: int = MAX_MESSAGE_CHARS) -> str:
    return content[:limit]


def normalize_role(role: str) -> str:
    return "assistant" if role == "assistant" else "user"


def build_input_messages(
    prompt: str,
    messages: Iterable[ChatMessage],
    max_chars: int = MAX_MESSAGE_CHARS,
) -> List[UpstreamMessage]:
    """Developer prompt first, then the client's turns in their original order."""
    out = [UpstreamMessage(role="developer", content=prompt)]
    for m in messages:
        out.append(UpstreamMessage(role=normalize_role(m.role), content=truncate_content(m.content, max_chars)))
    return out


def resolve_model(assistant: AssistantConfig, default_model: str) -> str:
    return assistant.model or default_model


def is_reasoning_model(model: str, prefixes: Sequence[str]) -> bool:
    name = model.lower()
    return any(name.startswith(p.lower()) for p in prefixes if p)


def build_upstream_body(
    model: str,
    input_messages: Sequence[UpstreamMessage],
    *,
    reasoning_prefixes: Sequence[str],
    reasoning_effort: str = "none",
    web_search_tool: str = "web_search_preview",
) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "model": model,
        "input": [m.model_dump() for m in input_messages],
        "tools": [{"type": web_search_tool}],
    }
    if is_reasoning_model(model, reasoning_prefixes):
        body["reasoning"] = {"effort": reasoning_effort}
    return body


def _error_message(data: Dict[str, Any]) -> Optional[str]:
    err = data.get("error")
    if isinstance(err, dict):
        msg = err.get("message")
        if isinstance(msg, str) and msg:
            return msg
    return None


def extract_reply(data: Dict[str, Any]) -> str:
    """
    Joins every output_text segment of every message item, in emission order.
    Falls back to the upstream's own error message, then to "No response".
    """
    parts: List[str] = []
    for item in data.get("output") or []:
        if not isinstance(item, dict) or item.get("type") != "message":
            continue
        for segment in item.get("content") or []:
            if isinstance(segment, dict) and segment.get("type") == "output_text":
                parts.append(str(segment.get("text") or ""))

    reply = "".join(parts)
    if reply:
        return reply
    return _error_message(data) or NO_RESPONSE


def upstream_error_detail(data: Dict[str, Any], status_code: int) -> str:
    return _error_message(data) or f"Status {status_code}"
