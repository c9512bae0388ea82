"""Tests for the Gemini provider adapter."""

import json

import httpx
import pytest

from nomad.prompts import TRAIL_SCHEMA
from nomad.providers.base import (
    EmptyResponseError,
    GenerationRequest,
    HealthStatus,
    ProviderDownError,
    ProviderError,
    RateLimitError,
)
from nomad.providers.gemini import GeminiAdapter


def make_adapter(handler, api_key: str | None = "test-key") -> GeminiAdapter:
    """Create an adapter whose HTTP traffic goes to handler."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GeminiAdapter(api_key=api_key, base_url="https://gemini.test/v1beta", client=client)


def gemini_body(*texts: str, finish_reason: str = "STOP") -> dict:
    return {
        "candidates": [
            {
                "content": {"role": "model", "parts": [{"text": t} for t in texts]},
                "finishReason": finish_reason,
            }
        ],
        "usageMetadata": {"promptTokenCount": 10, "candidatesTokenCount": 20},
        "modelVersion": "gemini-2.5-flash",
    }


class TestGeminiAdapter:
    """Test request building and response handling."""

    @pytest.fixture
    def request_obj(self) -> GenerationRequest:
        return GenerationRequest(
            prompt="Generate an event",
            model="gemini-2.5-flash",
            system_instruction="You are the Game Master",
            temperature=0.7,
            response_schema=TRAIL_SCHEMA,
        )

    async def test_generate_returns_text(self, request_obj: GenerationRequest) -> None:
        """Text parts of the first candidate are joined."""
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["key"] = request.headers.get("x-goog-api-key")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=gemini_body('{"title": ', '"T"}'))

        adapter = make_adapter(handler)
        response = await adapter.generate(request_obj)
        await adapter.close()

        assert response.text == '{"title": "T"}'
        assert response.provider == "gemini"
        assert response.finish_reason == "STOP"
        assert seen["url"] == "https://gemini.test/v1beta/models/gemini-2.5-flash:generateContent"
        assert seen["key"] == "test-key"
        assert seen["body"]["generationConfig"]["responseMimeType"] == "application/json"
        assert seen["body"]["generationConfig"]["responseSchema"] == TRAIL_SCHEMA
        assert seen["body"]["systemInstruction"]["parts"][0]["text"] == "You are the Game Master"

    def test_grounded_request_uses_search_without_json_mode(self) -> None:
        """Search grounding sends the tool and leaves the schema out."""
        adapter = GeminiAdapter(api_key="k")
        payload = adapter.build_payload(
            GenerationRequest(
                prompt="p",
                model="m",
                response_schema=TRAIL_SCHEMA,
                search_grounding=True,
                temperature=0.7,
            )
        )

        assert payload["tools"] == [{"google_search": {}}]
        assert "responseSchema" not in payload["generationConfig"]
        assert payload["generationConfig"]["temperature"] == 0.7

    def test_no_generation_config_when_nothing_set(self) -> None:
        adapter = GeminiAdapter(api_key="k")
        payload = adapter.build_payload(GenerationRequest(prompt="p", model="m"))

        assert "generationConfig" not in payload
        assert "systemInstruction" not in payload

    async def test_missing_key_is_provider_down(self, request_obj: GenerationRequest) -> None:
        """No API key fails before any request is sent."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("request should not be sent")

        adapter = make_adapter(handler, api_key=None)

        with pytest.raises(ProviderDownError, match="API key not configured"):
            await adapter.generate(request_obj)

    async def test_rate_limit(self, request_obj: GenerationRequest) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, headers={"retry-after": "7"})

        adapter = make_adapter(handler)

        with pytest.raises(RateLimitError) as exc_info:
            await adapter.generate(request_obj)

        assert exc_info.value.retry_after == 7

    async def test_invalid_key(self, request_obj: GenerationRequest) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403, json={"error": {"message": "denied"}})

        adapter = make_adapter(handler)

        with pytest.raises(ProviderDownError, match="Invalid Gemini API key"):
            await adapter.generate(request_obj)

    async def test_server_error_carries_message(self, request_obj: GenerationRequest) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"error": {"message": "Internal error"}})

        adapter = make_adapter(handler)

        with pytest.raises(ProviderDownError, match="500 Internal error"):
            await adapter.generate(request_obj)

    async def test_connect_error(self, request_obj: GenerationRequest) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        adapter = make_adapter(handler)

        with pytest.raises(ProviderDownError, match="Cannot connect"):
            await adapter.generate(request_obj)

    @pytest.mark.parametrize(
        "error_cls",
        [httpx.ReadError, httpx.RemoteProtocolError, httpx.WriteError],
    )
    async def test_other_transport_errors_are_provider_down(
        self, request_obj: GenerationRequest, error_cls: type[httpx.RequestError]
    ) -> None:
        """Dropped connections mid-request surface as provider errors."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise error_cls("connection reset", request=request)

        adapter = make_adapter(handler)

        with pytest.raises(ProviderDownError, match="Gemini request failed"):
            await adapter.generate(request_obj)

    @pytest.mark.parametrize(
        "body",
        [
            {"candidates": [None]},
            [],
            {"candidates": [{"content": "x"}]},
            {"candidates": [{"content": {"parts": [{"text": None}]}}]},
            {"candidates": "x"},
        ],
    )
    async def test_unexpected_shape_is_provider_error(
        self, request_obj: GenerationRequest, body
    ) -> None:
        """Bodies that do not look like generateContent output never crash."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=body)

        adapter = make_adapter(handler)

        with pytest.raises(ProviderError):
            await adapter.generate(request_obj)

    async def test_top_level_list_is_provider_down(self, request_obj: GenerationRequest) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[{"candidates": []}])

        adapter = make_adapter(handler)

        with pytest.raises(ProviderDownError, match="unexpected response shape"):
            await adapter.generate(request_obj)

    async def test_empty_candidate_is_empty_response(self, request_obj: GenerationRequest) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"candidates": [{"finishReason": "SAFETY"}]})

        adapter = make_adapter(handler)

        with pytest.raises(EmptyResponseError) as exc_info:
            await adapter.generate(request_obj)

        assert exc_info.value.finish_reason == "SAFETY"

    async def test_health_check(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"models": [{"name": "models/gemini-2.5-flash"}, {"name": "models/embedding-001"}]},
            )

        adapter = make_adapter(handler)
        health = await adapter.health_check()

        assert health.status == HealthStatus.HEALTHY
        assert health.models_available == ["gemini-2.5-flash"]
        assert await adapter.list_models() == ["gemini-2.5-flash"]

    async def test_health_check_without_key(self) -> None:
        adapter = GeminiAdapter(api_key=None)
        health = await adapter.health_check()
        await adapter.close()

        assert health.status == HealthStatus.UNHEALTHY
        assert await adapter.list_models() == []

    async def test_health_check_with_non_json_body(self) -> None:
        """A 200 that is not JSON is degraded, not an exception."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>maintenance</html>")

        adapter = make_adapter(handler)
        health = await adapter.health_check()

        assert health.status == HealthStatus.DEGRADED
        assert health.error == "Model list is not valid JSON"
        assert await adapter.list_models() == []
