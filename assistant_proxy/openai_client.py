from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .errors import UpstreamError
from .payload import upstream_error_detail

logger = logging.getLogger(__name__)


def _json_object(r: httpx.Response) -> Dict[str, Any]:
    """Response body as a dict; empty, unparsable or non-object bodies become {}."""
    if not r.content:
        return {}
    try:
        data = r.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


class ResponsesClient:
    """
    Thin client for the OpenAI Responses API (POST {base_url}/responses).
    One request per call, no retries.
    """

    def __init__(
        self,
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 110.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def create(self, api_key: str, body: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/responses"
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.post(url, headers=headers, json=body)
        except httpx.TimeoutException as e:
            logger.error("OpenAI request timed out: %s", type(e).__name__)
            raise UpstreamError(detail="Upstream request timed out")
        except httpx.HTTPError as e:
            logger.error("OpenAI request failed: %s", type(e).__name__)
            raise UpstreamError(detail=f"Upstream request failed ({type(e).__name__})")

        if not r.is_success:
            err_data = _json_object(r)
            logger.error("OpenAI error: %s %s", r.status_code, err_data)
            raise UpstreamError(detail=upstream_error_detail(err_data, r.status_code))

        try:
            data = r.json()
        except ValueError:
            logger.error("OpenAI returned a non-JSON body (status %s)", r.status_code)
            raise UpstreamError(detail=f"Invalid response from upstream (status {r.status_code})")
        if not isinstance(data, dict):
            logger.error("OpenAI returned a non-object body (status %s)", r.status_code)
            raise UpstreamError(detail=f"Invalid response from upstream (status {r.status_code})")
        return data
