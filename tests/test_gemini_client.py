"""
Tests for the Gemini adapter: model discovery over the stubbed ListModels
endpoints, then generateContent against the selected model.
"""

import json

import httpx
import pytest

from ai.clients.gemini_client import GeminiClient
from ai.errors import DiscoveryExhaustedError, ErrorKind, ProviderError
from ai.prompts import GEMINI_INSTRUCTION
from conftest import gemini_answer, listed

BASE = "https://gemini.example.test"


def make_client(upstream):
    return GeminiClient(api_key="AIza-test", base_url=BASE, transport=upstream.transport)


def test_missing_key_is_configuration_error():
    with pytest.raises(ProviderError) as exc_info:
        GeminiClient(api_key="")
    assert exc_info.value.message == "GEMINI_API_KEY not configured"
    assert exc_info.value.status_code == 500


def test_extract_text_joins_parts():
    data = {"candidates": [{"content": {"parts": [{"text": "a"}, {"inlineData": {}}, {"text": "b"}]}}]}
    assert GeminiClient.extract_text(data) == "a\nb"
    assert GeminiClient.extract_text({"candidates": []}) == ""
    assert GeminiClient.extract_text(["not", "a", "dict"]) == ""


@pytest.mark.asyncio
async def test_generate_with_v1_model(upstream):
    upstream.json("GET", "/v1/models", 200, {"models": [
        listed("models/gemini-1.5-pro", "generateContent", "countTokens"),
        listed("models/gemini-1.5-flash-8b", "generateContent"),
        listed("models/embedding-001", "embedContent"),
    ]})
    upstream.json("POST", "/v1/models/gemini-1.5-flash-8b:generateContent", 200,
                  gemini_answer("Nilgiri College offers B.Sc and B.Com programmes."))

    result = await make_client(upstream).generate("What courses are offered?")

    assert result.text == "Nilgiri College offers B.Sc and B.Com programmes."
    assert result.provider == "gemini"
    assert result.model == "gemini-1.5-flash-8b"
    assert result.version == "v1"

    # v1beta never listed when v1 had models
    assert upstream.paths() == ["/v1/models", "/v1/models/gemini-1.5-flash-8b:generateContent"]

    listing_request, generate_request = upstream.requests
    assert listing_request.url.params["key"] == "AIza-test"
    assert generate_request.headers["x-goog-api-key"] == "AIza-test"
    body = json.loads(generate_request.content)
    assert body["generationConfig"] == {"temperature": 0.5, "maxOutputTokens": 1024}
    assert body["contents"][0]["role"] == "user"
    text = body["contents"][0]["parts"][0]["text"]
    assert text.startswith(GEMINI_INSTRUCTION)
    assert text.endswith("User question:\nWhat courses are offered?")


@pytest.mark.asyncio
async def test_falls_back_to_v1beta_when_v1_empty(upstream):
    upstream.json("GET", "/v1/models", 200, {"models": []})
    upstream.json("GET", "/v1beta/models", 200, {"models": [
        listed("models/gemini-2.0-flash", "generateContent"),
    ]})
    upstream.json("POST", "/v1beta/models/gemini-2.0-flash:generateContent", 200, gemini_answer("ok"))

    result = await make_client(upstream).generate("hi")

    assert result.version == "v1beta"
    assert result.model == "gemini-2.0-flash"
    assert upstream.paths()[:2] == ["/v1/models", "/v1beta/models"]


@pytest.mark.asyncio
async def test_falls_back_to_v1beta_when_v1_listing_fails(upstream):
    def refuse(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    upstream.add("GET", "/v1/models", refuse)
    upstream.json("GET", "/v1beta/models", 200, {"models": [listed("models/gemini-pro", "generateContent")]})
    upstream.json("POST", "/v1beta/models/gemini-pro:generateContent", 200, gemini_answer("ok"))

    result = await make_client(upstream).generate("hi")

    assert result.version == "v1beta"
    assert result.model == "gemini-pro"


@pytest.mark.asyncio
async def test_incapable_v1_listing_does_not_consult_v1beta(upstream):
    upstream.json("GET", "/v1/models", 200, {"models": [listed("models/x-flash", "countTokens")]})
    upstream.json("GET", "/v1beta/models", 200, {"models": [listed("models/y-pro", "generateContent")]})

    with pytest.raises(DiscoveryExhaustedError) as exc_info:
        await make_client(upstream).generate("hi")

    assert upstream.paths() == ["/v1/models"]
    err = exc_info.value
    assert err.kind == ErrorKind.DISCOVERY_EXHAUSTED
    assert "v1 models (1): models/x-flash" in err.message
    assert "v1beta models (0): none" in err.message


@pytest.mark.asyncio
async def test_discovery_failure_aggregates_both_versions(upstream):
    upstream.json("GET", "/v1/models", 403, {"error": {"message": "API key not valid"}})
    upstream.add("GET", "/v1beta/models", httpx.Response(200, content=b"<html>oops</html>"))

    with pytest.raises(DiscoveryExhaustedError) as exc_info:
        await make_client(upstream).generate("hi")

    message = exc_info.value.message
    assert "v1: ListModels API error (403) for v1: API key not valid" in message
    assert "v1beta: ListModels invalid JSON (200) for v1beta: <html>oops</html>" in message
    assert "v1 models (0): none" in message
    assert "v1beta models (0): none" in message
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_generate_api_error(upstream):
    upstream.json("GET", "/v1/models", 200, {"models": [listed("models/gemini-1.5-flash", "generateContent")]})
    upstream.json("POST", "/v1/models/gemini-1.5-flash:generateContent", 429,
                  {"error": {"code": 429, "message": "Resource has been exhausted"}})

    with pytest.raises(ProviderError) as exc_info:
        await make_client(upstream).generate("hi")

    err = exc_info.value
    assert err.kind == ErrorKind.UPSTREAM_APPLICATION
    assert err.status_code == 429
    assert err.message == "Gemini API Error (v1/gemini-1.5-flash - 429): Resource has been exhausted"


@pytest.mark.asyncio
async def test_generate_without_candidates(upstream):
    upstream.json("GET", "/v1/models", 200, {"models": [listed("models/gemini-1.5-flash", "generateContent")]})
    upstream.json("POST", "/v1/models/gemini-1.5-flash:generateContent", 200,
                  {"promptFeedback": {"blockReason": "SAFETY"}})

    with pytest.raises(ProviderError) as exc_info:
        await make_client(upstream).generate("hi")

    err = exc_info.value
    assert err.kind == ErrorKind.EMPTY_CONTENT
    assert err.message == "Gemini v1/gemini-1.5-flash returned no content"
    assert err.status_code == 500


@pytest.mark.asyncio
async def test_corrupt_v1_listing_falls_back_to_v1beta(upstream):
    upstream.add("GET", "/v1/models", httpx.Response(
        200, headers={"Content-Encoding": "gzip"}, content=b"not gzip"
    ))
    upstream.json("GET", "/v1beta/models", 200, {"models": [listed("models/y-pro", "generateContent")]})
    upstream.json("POST", "/v1beta/models/y-pro:generateContent", 200, gemini_answer("ok"))

    result = await make_client(upstream).generate("hi")

    assert result.version == "v1beta"
    assert result.model == "y-pro"


@pytest.mark.asyncio
async def test_corrupt_listing_recorded_on_listing(upstream):
    upstream.add("GET", "/v1/models", httpx.Response(
        200, headers={"Content-Encoding": "gzip"}, content=b"not gzip"
    ))

    async with httpx.AsyncClient(transport=upstream.transport) as client:
        listing = await make_client(upstream).list_models(client, "v1")

    assert listing.models == ()
    assert listing.error.startswith("ListModels fetch failed for v1: ")


def _flash_listing(upstream):
    upstream.json("GET", "/v1/models", 200, {"models": [listed("models/gemini-1.5-flash", "generateContent")]})


GENERATE_PATH = "/v1/models/gemini-1.5-flash:generateContent"


@pytest.mark.asyncio
async def test_generate_empty_body(upstream):
    _flash_listing(upstream)
    upstream.add("POST", GENERATE_PATH, httpx.Response(503, content=b""))

    with pytest.raises(ProviderError) as exc_info:
        await make_client(upstream).generate("hi")

    err = exc_info.value
    assert err.kind == ErrorKind.UPSTREAM_PROTOCOL
    assert err.message == "Gemini v1/gemini-1.5-flash returned empty response (503)"
    assert err.status_code == 503


@pytest.mark.asyncio
async def test_generate_invalid_json(upstream):
    _flash_listing(upstream)
    raw = "<html>" + "z" * 400
    upstream.add("POST", GENERATE_PATH, httpx.Response(200, content=raw.encode()))

    with pytest.raises(ProviderError) as exc_info:
        await make_client(upstream).generate("hi")

    err = exc_info.value
    assert err.kind == ErrorKind.UPSTREAM_PROTOCOL
    assert err.message == f"Gemini v1/gemini-1.5-flash returned invalid JSON (200): {raw[:200]}"
    assert err.status_code == 502


@pytest.mark.asyncio
async def test_generate_transport_failure(upstream):
    _flash_listing(upstream)

    def refuse(request):
        raise httpx.ReadTimeout("read timed out", request=request)

    upstream.add("POST", GENERATE_PATH, refuse)

    with pytest.raises(ProviderError) as exc_info:
        await make_client(upstream).generate("hi")

    err = exc_info.value
    assert err.kind == ErrorKind.TRANSPORT
    assert err.message == "Failed to connect to Gemini v1/gemini-1.5-flash: read timed out"


@pytest.mark.asyncio
async def test_generate_unreadable_body(upstream):
    _flash_listing(upstream)
    upstream.add("POST", GENERATE_PATH, httpx.Response(
        200, headers={"Content-Encoding": "gzip"}, content=b"not gzip"
    ))

    with pytest.raises(ProviderError) as exc_info:
        await make_client(upstream).generate("hi")

    err = exc_info.value
    assert err.kind == ErrorKind.UPSTREAM_PROTOCOL
    assert err.message.startswith("Gemini v1/gemini-1.5-flash returned unreadable response: ")
    assert err.status_code == 502
