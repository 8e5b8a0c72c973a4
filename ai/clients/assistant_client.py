"""
Assistant API Client
====================

Client used by the chat UI to ask the proxy a question.

Picks the route for the chosen provider, adds the Nilgiri College preface to
the prompt and re-checks the proxy's envelope before handing the text to the
UI. Failures are raised as AIReplyError, keeping the error kind the proxy
reported.
"""

import json
import logging
from enum import Enum
from typing import Any, Dict, Optional, Union

import httpx
from pydantic import BaseModel

from ai.errors import ErrorKind
from ai.prompts import wrap_for_nilgiri

logger = logging.getLogger(__name__)


class Provider(str, Enum):
    """Providers served by the proxy"""
    GEMINI = "gemini"
    GROQ = "groq"


ENDPOINTS: Dict[Provider, str] = {
    Provider.GEMINI: "/api/ai/gemini",
    Provider.GROQ: "/api/ai/groq",
}


class AssistantReply(BaseModel):
    text: str
    provider: Provider
    model: Optional[str] = None
    version: Optional[str] = None


class AIReplyError(Exception):
    """Failure to obtain an answer, with a message suitable for display"""

    def __init__(
        self,
        message: str,
        kind: ErrorKind,
        provider: Provider,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.provider = provider
        self.status_code = status_code


def _kind_from_envelope(envelope: Dict[str, Any], default: ErrorKind) -> ErrorKind:
    try:
        return ErrorKind(envelope.get("kind"))
    except ValueError:
        return default


class AssistantClient:
    """
    Async client for the proxy's chat routes.

    Usage:
        client = AssistantClient("http://localhost:8003")
        reply = await client.reply("What courses are offered?", "groq")
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def reply(self, prompt: str, provider: Union[Provider, str]) -> AssistantReply:
        """
        Ask the proxy for an answer.

        Raises:
            ValueError: unknown provider
            AIReplyError: the proxy could not produce an answer
        """
        provider = Provider(provider)
        name = provider.value
        url = f"{self.base_url}{ENDPOINTS[provider]}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(url, json={"prompt": wrap_for_nilgiri(prompt)})
        except httpx.TransportError as e:
            cause = str(e) or "Network error"
            logger.error(f"Assistant request to {name} failed: {cause}")
            raise AIReplyError(
                f"Failed to connect to {name}: {cause}", ErrorKind.TRANSPORT, provider
            ) from e
        except httpx.RequestError as e:
            cause = str(e) or type(e).__name__
            logger.error(f"Assistant response from {name} unreadable: {cause}")
            raise AIReplyError(
                f"{name} returned unreadable response: {cause}", ErrorKind.UPSTREAM_PROTOCOL, provider
            ) from e

        status = response.status_code
        raw = response.text
        if not raw:
            raise AIReplyError(
                f"{name} returned empty response ({status})",
                ErrorKind.UPSTREAM_PROTOCOL,
                provider,
                status,
            )

        try:
            envelope = json.loads(raw)
        except ValueError:
            raise AIReplyError(
                f"{name} returned invalid JSON ({status}): {raw[:200]}",
                ErrorKind.UPSTREAM_PROTOCOL,
                provider,
                status,
            )

        if not isinstance(envelope, dict):
            envelope = {}

        if not response.is_success or envelope.get("error"):
            message = envelope.get("error") or f"{name} API error ({status})"
            raise AIReplyError(
                str(message),
                _kind_from_envelope(envelope, ErrorKind.UPSTREAM_APPLICATION),
                provider,
                status,
            )

        text = envelope.get("text")
        if not isinstance(text, str) or not text:
            raise AIReplyError(
                f"{name} returned empty response", ErrorKind.EMPTY_CONTENT, provider, status
            )

        return AssistantReply(
            text=text,
            provider=provider,
            model=envelope.get("model"),
            version=envelope.get("version"),
        )
