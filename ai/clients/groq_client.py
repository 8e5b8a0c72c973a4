"""
Groq API Client
===============

Async client for the Groq OpenAI-compatible chat completions API.

One fixed-shape request per prompt:
- Model: llama-3.1-8b-instant
- Messages: EduNex system instruction + user prompt
- temperature 0.5, max_tokens 1024
"""

import logging
from typing import Any, Dict, Optional

import httpx

from ai.clients import upstream
from ai.clients.upstream import ChatResult
from ai.config import DEFAULT_GROQ_BASE_URL
from ai.errors import ErrorKind, ProviderError
from ai.prompts import GROQ_SYSTEM_INSTRUCTION, groq_user_message

logger = logging.getLogger(__name__)

PROVIDER = "groq"
LABEL = "Groq"
GROQ_MODEL = "llama-3.1-8b-instant"
TEMPERATURE = 0.5
MAX_TOKENS = 1024


class GroqClient:
    """
    Async client for Groq chat completions.

    Usage:
        client = GroqClient(api_key=settings.groq_api_key)
        result = await client.complete("What courses are offered?")
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_GROQ_BASE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key:
            raise ProviderError(
                ErrorKind.CONFIGURATION,
                "GROQ_API_KEY not configured",
                status_code=500,
                provider=PROVIDER,
            )
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @property
    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    @staticmethod
    def build_payload(prompt: str) -> Dict[str, Any]:
        return {
            "model": GROQ_MODEL,
            "messages": [
                {"role": "system", "content": GROQ_SYSTEM_INSTRUCTION},
                {"role": "user", "content": groq_user_message(prompt)},
            ],
            "temperature": TEMPERATURE,
            "max_tokens": MAX_TOKENS,
        }

    @staticmethod
    def extract_text(data: Any) -> str:
        """Answer text from choices[0].message.content, or "" """
        if not isinstance(data, dict):
            return ""
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            return ""
        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        return content if isinstance(content, str) else ""

    async def complete(self, prompt: str) -> ChatResult:
        """
        Send the prompt to Groq and return the normalized answer.

        Raises:
            ProviderError: on transport, protocol, API or empty-content failures
        """
        logger.info(f"Groq completion: prompt length {len(prompt)} chars, model={GROQ_MODEL}")

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await upstream.send(
                client,
                "POST",
                f"{self.base_url}/chat/completions",
                provider=PROVIDER,
                label=LABEL,
                headers=self._headers,
                json=self.build_payload(prompt),
            )

        data = upstream.decode_body(response, PROVIDER, LABEL)
        upstream.raise_for_upstream_error(
            response, data, PROVIDER, f"Groq API Error ({response.status_code})"
        )

        text = self.extract_text(data)
        if not text:
            raise upstream.empty_content(PROVIDER, LABEL)

        return ChatResult(text=text, provider=PROVIDER)
