from __future__ import annotations

import json
import logging
import os
from typing import Any

import httpx

from hotel_search.errors import UpstreamCallError

UPSTREAM_URL = os.getenv("OFFER_PROVIDER_URL", "http://localhost:8100/mcp")
API_KEY = os.getenv("OFFER_PROVIDER_API_KEY") or None
REQUEST_TIMEOUT_SECONDS = float(os.getenv("OFFER_PROVIDER_TIMEOUT_SECONDS", "30"))
RETRY_ATTEMPTS = int(os.getenv("OFFER_PROVIDER_RETRY_ATTEMPTS", "2"))

logger = logging.getLogger(__name__)


def call_upstream(
    tool_name: str,
    arguments: dict[str, Any],
    *,
    url: str = UPSTREAM_URL,
    api_key: str | None = API_KEY,
    timeout: float = REQUEST_TIMEOUT_SECONDS,
    retry_attempts: int = RETRY_ATTEMPTS,
    transport: httpx.BaseTransport | None = None,
) -> dict[str, Any]:
    """Invoke ``tool_name`` on the upstream JSON-RPC endpoint and return its structured result.

    Transport and HTTP status errors are retried ``retry_attempts`` times.
    Raises ``UpstreamCallError`` once attempts run out or when the body holds
    no structured result.
    """
    headers = {
        "Content-Type": "application/json",
        "Accept": "text/event-stream, application/json",
    }
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"

    payload = {
        "jsonrpc": "2.0",
        "id": 1,
        "method": "tools/call",
        "params": {"name": tool_name, "arguments": arguments},
    }

    last_error: Exception | None = None
    for attempt in range(retry_attempts + 1):
        try:
            with httpx.Client(timeout=timeout, transport=transport) as client:
                response = client.post(url, json=payload, headers=headers)
                response.raise_for_status()
        except (httpx.RequestError, httpx.HTTPStatusError) as exc:
            last_error = exc
            logger.warning(
                "upstream_call_failed",
                extra={"tool": tool_name, "attempt": attempt + 1, "error": str(exc)},
            )
            continue

        structured = parse_upstream_response(response.text, response.headers.get("content-type", ""))
        if structured is None:
            logger.warning("upstream_response_unparsed", extra={"tool": tool_name})
            raise UpstreamCallError(tool_name, "response carried no structured result")
        return structured

    logger.error(
        "upstream_call_exhausted",
        extra={"tool": tool_name, "attempts": retry_attempts + 1, "error": str(last_error)},
    )
    raise UpstreamCallError(tool_name, f"gave up after {retry_attempts + 1} attempts: {last_error}")


def parse_upstream_response(response_text: str, content_type: str = "") -> dict[str, Any] | None:
    """Extract the tool result from a JSON or server-sent-events body."""
    envelope = None
    if "text/event-stream" in content_type or "data:" in response_text:
        envelope = _first_sse_object(response_text)
    if envelope is None:
        envelope = _load_object(response_text)
    if envelope is None:
        return None

    if "error" in envelope and isinstance(envelope["error"], dict):
        message = envelope["error"].get("message") or "upstream returned an error"
        raise UpstreamCallError("tools/call", str(message))

    result = envelope.get("result")
    if not isinstance(result, dict):
        return None

    structured = result.get("structuredContent")
    if isinstance(structured, dict):
        return structured

    text = _first_text_content(result)
    if text is None:
        return None
    return _load_object(text)


def _first_sse_object(response_text: str) -> dict[str, Any] | None:
    for line in response_text.splitlines():
        if not line.startswith("data:"):
            continue
        data = line.removeprefix("data:").strip()
        if not data or data == "[DONE]":
            continue
        parsed = _load_object(data)
        if parsed is not None:
            return parsed
    return None


def _first_text_content(result: dict[str, Any]) -> str | None:
    content = result.get("content")
    if not isinstance(content, list) or not content:
        return None
    first = content[0]
    if not isinstance(first, dict):
        return None
    text = first.get("text")
    return text if isinstance(text, str) and text.strip() else None


def _load_object(text: str) -> dict[str, Any] | None:
    try:
        raw = json.loads(text)
    except json.JSONDecodeError:
        return None
    return raw if isinstance(raw, dict) else None
