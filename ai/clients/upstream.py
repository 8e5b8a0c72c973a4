"""
Upstream Response Protocol
==========================

Shared plumbing for every call the proxy makes to an LLM provider.

Provider APIs are not trusted to return well-formed JSON, even on 200:
- Transport failures become a TRANSPORT error, no retry
- The body is read as text first; empty or non-JSON bodies are reported
  with the status and at most the first 200 characters of the body
- Non-2xx statuses are reported with the provider's own error message
"""

import json
import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel

from ai.errors import ErrorKind, ProviderError

logger = logging.getLogger(__name__)

BODY_PREVIEW_CHARS = 200


class ChatResult(BaseModel):
    """Normalized answer produced by a provider adapter"""
    text: str
    provider: str
    model: Optional[str] = None
    version: Optional[str] = None


def truncate(raw: str, limit: int = BODY_PREVIEW_CHARS) -> str:
    return raw[:limit]


def error_status(status_code: Optional[int]) -> int:
    """Status to report for a broken upstream body"""
    if status_code and status_code >= 400:
        return status_code
    return 502


def is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


def describe_cause(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


async def send(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    provider: str,
    label: str,
    **kwargs,
) -> httpx.Response:
    """
    Issue one upstream request.

    Raises:
        ProviderError: TRANSPORT when the provider could not be reached,
            UPSTREAM_PROTOCOL when its response could not be read
    """
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.TransportError as e:
        logger.error(f"{label} {method} failed: {describe_cause(e)}")
        raise ProviderError(
            ErrorKind.TRANSPORT,
            f"Failed to connect to {label}: {describe_cause(e)}",
            status_code=502,
            provider=provider,
        ) from e
    except httpx.RequestError as e:
        # e.g. DecodingError for a body that does not match its Content-Encoding
        logger.error(f"{label} {method} unreadable response: {describe_cause(e)}")
        raise ProviderError(
            ErrorKind.UPSTREAM_PROTOCOL,
            f"{label} returned unreadable response: {describe_cause(e)}",
            status_code=502,
            provider=provider,
        ) from e

    logger.info(f"{label} {method} {response.url.path} -> {response.status_code}")
    return response


def decode_body(response: httpx.Response, provider: str, label: str) -> Any:
    """
    Read the response as text and decode it as JSON.

    Raises:
        ProviderError: UPSTREAM_PROTOCOL for an empty or non-JSON body
    """
    raw = response.text
    status = response.status_code

    if not raw:
        raise ProviderError(
            ErrorKind.UPSTREAM_PROTOCOL,
            f"{label} returned empty response ({status})",
            status_code=error_status(status),
            provider=provider,
        )

    try:
        return json.loads(raw)
    except ValueError:
        preview = truncate(raw)
        logger.warning(f"{label} returned non-JSON body ({status}): {preview[:80]}")
        raise ProviderError(
            ErrorKind.UPSTREAM_PROTOCOL,
            f"{label} returned invalid JSON ({status}): {preview}",
            status_code=error_status(status),
            provider=provider,
            body=preview,
        )


def extract_error_message(data: Any) -> str:
    """
    Pull a readable message out of a provider error body.

    Known shapes, checked in order:
    - {"error": {"message": "..."}}  (OpenAI/Groq, Google)
    - {"error": "..."}
    - {"message": "..."}
    - "..."
    Anything else is rendered as JSON.
    """
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str) and error["message"]:
            return error["message"]
        if isinstance(error, str) and error:
            return error
        message = data.get("message")
        if isinstance(message, str) and message:
            return message
    if isinstance(data, str) and data:
        return data
    return json.dumps(data)


def raise_for_upstream_error(
    response: httpx.Response,
    data: Any,
    provider: str,
    message_prefix: str,
) -> None:
    """Raise UPSTREAM_APPLICATION when the provider answered with a failure status"""
    if is_success(response.status_code):
        return
    message = extract_error_message(data)
    logger.error(f"{message_prefix}: {message}")
    raise ProviderError(
        ErrorKind.UPSTREAM_APPLICATION,
        f"{message_prefix}: {message}",
        status_code=response.status_code,
        provider=provider,
    )


def empty_content(provider: str, label: str) -> ProviderError:
    return ProviderError(
        ErrorKind.EMPTY_CONTENT,
        f"{label} returned no content",
        status_code=500,
        provider=provider,
    )
