"""
Text AI Routes
==============

Chat endpoints for the EduNex assistant:
- Groq (llama-3.1-8b-instant)
- Gemini (model discovered at request time)

Both accept {"prompt": "..."} and answer with
{"text", "provider", "model"?, "version"?} or {"error", "kind"}.
"""

import asyncio
import logging
import traceback
from typing import Any, Awaitable, Callable, Optional

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ai.clients.gemini_client import GeminiClient
from ai.clients.groq_client import GroqClient
from ai.clients.upstream import ChatResult
from ai.config import Settings, get_settings
from ai.errors import ErrorKind, ProviderError

logger = logging.getLogger(__name__)
router = APIRouter()


# Response Models
class ChatResponse(BaseModel):
    text: str
    provider: str
    model: Optional[str] = None
    version: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str
    kind: Optional[str] = None


def get_upstream_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Transport for upstream calls; None uses the network"""
    return None


def error_response(status_code: int, message: str, kind: ErrorKind) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "kind": kind.value},
    )


async def read_prompt(request: Request) -> str:
    """
    Validate the inbound body and return its prompt.

    Raises:
        ProviderError: REQUEST_VALIDATION (400)
    """
    try:
        body: Any = await request.json()
    except ValueError:
        raise ProviderError(ErrorKind.REQUEST_VALIDATION, "Invalid request body", status_code=400)

    prompt = body.get("prompt") if isinstance(body, dict) else None
    if not prompt or not isinstance(prompt, str):
        raise ProviderError(ErrorKind.REQUEST_VALIDATION, "Missing prompt", status_code=400)
    return prompt


async def run_chat(
    request: Request,
    display_name: str,
    settings: Settings,
    call: Callable[[str], Awaitable[ChatResult]],
) -> JSONResponse:
    try:
        prompt = await read_prompt(request)
        logger.info(f"{display_name} request: prompt length {len(prompt)} chars")

        result = await asyncio.wait_for(call(prompt), timeout=settings.request_deadline)

        logger.info(f"{display_name} answered with {len(result.text)} chars")
        return JSONResponse(
            status_code=200,
            content=ChatResponse(**result.model_dump()).model_dump(exclude_none=True),
        )

    except ProviderError as e:
        logger.warning(f"{display_name} request failed ({e.kind.value}, {e.status_code}): {e.message}")
        return JSONResponse(status_code=e.status_code, content=e.to_payload())
    except asyncio.TimeoutError:
        logger.error(f"{display_name} request exceeded {settings.request_deadline:g}s deadline")
        return error_response(
            504,
            f"{display_name} request exceeded {settings.request_deadline:g}s deadline",
            ErrorKind.TIMEOUT,
        )
    except Exception as e:
        logger.error(f"{display_name} error: {type(e).__name__}: {e}")
        logger.error(f"Traceback: {traceback.format_exc()}")
        return error_response(500, f"{display_name} route failed", ErrorKind.INTERNAL)


@router.post(
    "/groq",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def groq_endpoint(
    request: Request,
    settings: Settings = Depends(get_settings),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_upstream_transport),
):
    """
    Groq chat endpoint

    Features:
    - llama-3.1-8b-instant with the EduNex system instruction
    - temperature 0.5, max 1024 tokens

    Accepts: {"prompt": "your question"}

    Errors: {"error": "...", "kind": "..."} where kind names the failure
    category (request_validation, configuration, transport, upstream_protocol,
    upstream_application, empty_content, discovery_exhausted, timeout, internal)
    """
    async def call(prompt: str) -> ChatResult:
        client = GroqClient(
            api_key=settings.groq_api_key,
            base_url=settings.groq_base_url,
            timeout=settings.request_timeout,
            transport=transport,
        )
        return await client.complete(prompt)

    return await run_chat(request, "Groq", settings, call)


@router.post(
    "/gemini",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def gemini_endpoint(
    request: Request,
    settings: Settings = Depends(get_settings),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_upstream_transport),
):
    """
    Gemini chat endpoint

    Features:
    - Lists the models available to the API key (v1, then v1beta)
    - Prefers flash models, then pro models
    - Answer includes the model and API version that served it

    Accepts: {"prompt": "your question"}

    Errors: {"error": "...", "kind": "..."} where kind names the failure
    category (request_validation, configuration, transport, upstream_protocol,
    upstream_application, empty_content, discovery_exhausted, timeout, internal)
    """
    async def call(prompt: str) -> ChatResult:
        client = GeminiClient(
            api_key=settings.gemini_api_key,
            base_url=settings.gemini_base_url,
            timeout=settings.request_timeout,
            transport=transport,
        )
        return await client.generate(prompt)

    return await run_chat(request, "Gemini", settings, call)


@router.get("/providers")
async def list_providers(settings: Settings = Depends(get_settings)):
    """List chat providers and whether they are configured"""
    return {
        "providers": [
            {
                "id": "groq",
                "model": "llama-3.1-8b-instant",
                "endpoint": "/api/ai/groq",
                "configured": bool(settings.groq_api_key),
            },
            {
                "id": "gemini",
                "model": "discovered per request",
                "endpoint": "/api/ai/gemini",
                "configured": bool(settings.gemini_api_key),
            },
        ]
    }
