"""
Gemini API Client
=================

Async client for the Google Generative Language REST API.

Architecture:
- Lists the models visible to the API key at request time (v1, then v1beta)
- Selects a model supporting generateContent (see services.model_discovery)
- Sends the prompt to that model on the API version it was listed under
"""

import logging
from typing import Any, Dict, Optional

import httpx

from ai.clients import upstream
from ai.clients.upstream import ChatResult
from ai.config import DEFAULT_GEMINI_BASE_URL
from ai.errors import ErrorKind, ProviderError
from ai.prompts import gemini_prompt
from ai.services.model_discovery import (
    V1,
    V1BETA,
    ListedModel,
    ModelListing,
    SelectedModel,
    needs_fallback,
    select_model,
)

logger = logging.getLogger(__name__)

PROVIDER = "gemini"
TEMPERATURE = 0.5
MAX_OUTPUT_TOKENS = 1024
LISTING_PREVIEW_CHARS = 120


class GeminiClient:
    """
    Async client for Gemini content generation with runtime model discovery.

    Usage:
        client = GeminiClient(api_key=settings.gemini_api_key)
        result = await client.generate("What courses are offered?")
        result.model, result.version  # e.g. "gemini-1.5-flash", "v1"
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_GEMINI_BASE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key:
            raise ProviderError(
                ErrorKind.CONFIGURATION,
                "GEMINI_API_KEY not configured",
                status_code=500,
                provider=PROVIDER,
            )
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def list_models(self, client: httpx.AsyncClient, version: str) -> ModelListing:
        """
        Call ListModels for one API version.

        Never raises: failures are recorded on the returned listing so that
        discovery can move on to the next version.
        """
        try:
            response = await client.get(
                f"{self.base_url}/{version}/models",
                params={"key": self.api_key},
                headers={"Content-Type": "application/json"},
            )
        except httpx.RequestError as e:
            logger.warning(f"Gemini ListModels {version} failed: {upstream.describe_cause(e)}")
            return ModelListing(
                version=version,
                error=f"ListModels fetch failed for {version}: {upstream.describe_cause(e)}",
            )

        status = response.status_code
        logger.info(f"Gemini GET /{version}/models -> {status}")

        raw = response.text
        if not raw:
            return ModelListing(
                version=version,
                error=f"ListModels empty response ({status}) for {version}",
            )

        try:
            data = response.json()
        except ValueError:
            return ModelListing(
                version=version,
                error=(
                    f"ListModels invalid JSON ({status}) for {version}: "
                    f"{upstream.truncate(raw, LISTING_PREVIEW_CHARS)}"
                ),
            )

        if not upstream.is_success(status):
            return ModelListing(
                version=version,
                error=f"ListModels API error ({status}) for {version}: {upstream.extract_error_message(data)}",
            )

        entries = data.get("models") if isinstance(data, dict) else None
        models = []
        for entry in entries if isinstance(entries, list) else []:
            model = ListedModel.from_api(entry) if isinstance(entry, dict) else None
            if model is not None:
                models.append(model)

        logger.info(f"Gemini {version} lists {len(models)} models")
        return ModelListing(version=version, models=tuple(models))

    async def discover(self, client: httpx.AsyncClient) -> SelectedModel:
        """
        Run model discovery for one request.

        Raises:
            DiscoveryExhaustedError: no usable model in v1 or v1beta
        """
        v1 = await self.list_models(client, V1)
        if needs_fallback(v1):
            v1beta = await self.list_models(client, V1BETA)
        else:
            v1beta = ModelListing(version=V1BETA)

        selected = select_model(v1, v1beta)
        logger.info(f"Gemini selected {selected.name} on {selected.version}")
        return selected

    @staticmethod
    def build_payload(prompt: str) -> Dict[str, Any]:
        return {
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": gemini_prompt(prompt)}],
                }
            ],
            "generationConfig": {
                "temperature": TEMPERATURE,
                "maxOutputTokens": MAX_OUTPUT_TOKENS,
            },
        }

    @staticmethod
    def extract_text(data: Any) -> str:
        """Join the text parts of the first candidate with newlines"""
        if not isinstance(data, dict):
            return ""
        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            return ""
        first = candidates[0]
        content = first.get("content") if isinstance(first, dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            return ""
        texts = [
            p["text"] for p in parts
            if isinstance(p, dict) and isinstance(p.get("text"), str) and p["text"]
        ]
        return "\n".join(texts)

    async def generate(self, prompt: str) -> ChatResult:
        """
        Discover a model and generate an answer for the prompt.

        Raises:
            ProviderError: on discovery, transport, protocol, API or empty-content failures
        """
        async with self._client() as client:
            selected = await self.discover(client)
            bare = selected.bare_name
            label = f"Gemini {selected.version}/{bare}"

            logger.info(f"Gemini generateContent: prompt length {len(prompt)} chars, model={bare}")
            response = await upstream.send(
                client,
                "POST",
                f"{self.base_url}/{selected.version}/models/{bare}:generateContent",
                provider=PROVIDER,
                label=label,
                headers={
                    "Content-Type": "application/json",
                    "x-goog-api-key": self.api_key,
                },
                json=self.build_payload(prompt),
            )

        data = upstream.decode_body(response, PROVIDER, label)
        upstream.raise_for_upstream_error(
            response,
            data,
            PROVIDER,
            f"Gemini API Error ({selected.version}/{bare} - {response.status_code})",
        )

        text = self.extract_text(data)
        if not text:
            raise upstream.empty_content(PROVIDER, label)

        return ChatResult(text=text, provider=PROVIDER, model=bare, version=selected.version)
