"""Gemini provider adapter for scenario generation."""

import logging
import time
from datetime import datetime
from typing import Any

import httpx

from nomad.providers.base import (
    EmptyResponseError,
    GenerationRequest,
    GenerationResponse,
    HealthStatus,
    ProviderAdapter,
    ProviderDownError,
    ProviderHealth,
    RateLimitError,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiAdapter(ProviderAdapter):
    """
    Adapter for the Google Gemini REST API.

    Talks to the generateContent endpoint directly. Requires an API key.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def name(self) -> str:
        return "gemini"

    def _get_headers(self) -> dict[str, str]:
        """Get request headers with auth."""
        if not self.api_key:
            raise ProviderDownError(self.name, "Gemini API key not configured")

        return {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }

    def build_payload(self, request: GenerationRequest) -> dict[str, Any]:
        """Translate a GenerationRequest into a generateContent body."""
        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": request.prompt}]}],
        }

        if request.system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": request.system_instruction}]}

        generation_config: dict[str, Any] = {}
        if request.temperature is not None:
            generation_config["temperature"] = request.temperature

        if request.search_grounding:
            # JSON mode is rejected alongside tools; the schema lives in the prompt
            payload["tools"] = [{"google_search": {}}]
        elif request.response_schema is not None:
            generation_config["responseMimeType"] = "application/json"
            generation_config["responseSchema"] = request.response_schema

        if generation_config:
            payload["generationConfig"] = generation_config

        return payload

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        """Send a generateContent request to Gemini."""
        start_time = time.monotonic()

        try:
            response = await self._client.post(
                f"{self.base_url}/models/{request.model}:generateContent",
                headers=self._get_headers(),
                json=self.build_payload(request),
            )

            latency_ms = int((time.monotonic() - start_time) * 1000)

            if response.status_code == 429:
                retry_after = response.headers.get("retry-after")
                raise RateLimitError(
                    self.name,
                    retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
                )

            response.raise_for_status()
            data = response.json()

        except httpx.ConnectError:
            raise ProviderDownError(self.name, "Cannot connect to Gemini API")
        except httpx.TimeoutException:
            raise ProviderDownError(self.name, "Gemini API request timed out")
        except httpx.HTTPStatusError as e:
            if e.response.status_code in {401, 403}:
                raise ProviderDownError(self.name, "Invalid Gemini API key")
            raise ProviderDownError(
                self.name, f"Gemini error: {e.response.status_code} {self._error_message(e.response)}".strip()
            )
        except ValueError:
            raise ProviderDownError(self.name, "Gemini returned a non-JSON response")
        except httpx.RequestError as e:
            raise ProviderDownError(self.name, f"Gemini request failed: {type(e).__name__}: {e}")

        if not isinstance(data, dict):
            raise ProviderDownError(self.name, "Gemini returned an unexpected response shape")

        text, finish_reason = self._extract_text(data)

        if not text.strip():
            raise EmptyResponseError(self.name, finish_reason=finish_reason)

        logger.info(f"Gemini {request.model} answered in {latency_ms}ms")

        usage = data.get("usageMetadata")
        return GenerationResponse(
            text=text,
            model=str(data.get("modelVersion") or request.model),
            provider=self.name,
            latency_ms=latency_ms,
            usage=usage if isinstance(usage, dict) else None,
            finish_reason=finish_reason,
        )

    @staticmethod
    def _extract_text(data: dict[str, Any]) -> tuple[str, str | None]:
        """Join the text parts of the first candidate, skipping anything malformed."""
        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
            return "", None

        candidate = candidates[0]
        finish_reason = candidate.get("finishReason")
        if not isinstance(finish_reason, str):
            finish_reason = None

        content = candidate.get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            return "", finish_reason

        texts = [p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]
        return "".join(texts), finish_reason

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Pull the message out of a Gemini error body, if there is one."""
        try:
            return response.json().get("error", {}).get("message", "")
        except ValueError:
            return ""

    async def health_check(self) -> ProviderHealth:
        """Check Gemini API availability."""
        if not self.api_key:
            return ProviderHealth(
                status=HealthStatus.UNHEALTHY,
                last_check=datetime.utcnow(),
                error="API key not configured",
            )

        start_time = time.monotonic()

        try:
            response = await self._client.get(
                f"{self.base_url}/models",
                headers=self._get_headers(),
            )
            latency_ms = int((time.monotonic() - start_time) * 1000)

            if response.status_code == 200:
                try:
                    models = self._model_names(response.json())
                except ValueError:
                    return ProviderHealth(
                        status=HealthStatus.DEGRADED,
                        latency_ms=latency_ms,
                        last_check=datetime.utcnow(),
                        error="Model list is not valid JSON",
                    )

                return ProviderHealth(
                    status=HealthStatus.HEALTHY,
                    latency_ms=latency_ms,
                    last_check=datetime.utcnow(),
                    models_available=models[:10],
                )

            return ProviderHealth(
                status=HealthStatus.DEGRADED,
                latency_ms=latency_ms,
                last_check=datetime.utcnow(),
                error=f"Unexpected status: {response.status_code}",
            )

        except httpx.ConnectError:
            return ProviderHealth(
                status=HealthStatus.UNHEALTHY,
                last_check=datetime.utcnow(),
                error="Cannot connect to Gemini API",
            )
        except httpx.HTTPError as e:
            return ProviderHealth(
                status=HealthStatus.UNHEALTHY,
                last_check=datetime.utcnow(),
                error=str(e),
            )

    async def list_models(self) -> list[str]:
        """List Gemini models available to this key."""
        if not self.api_key:
            return []

        try:
            response = await self._client.get(
                f"{self.base_url}/models",
                headers=self._get_headers(),
            )
        except httpx.HTTPError as e:
            logger.warning(f"Listing Gemini models failed: {e}")
            return []

        if response.status_code != 200:
            return []
        try:
            return self._model_names(response.json())
        except ValueError:
            return []

    @staticmethod
    def _model_names(data: Any) -> list[str]:
        models = data.get("models") if isinstance(data, dict) else None
        if not isinstance(models, list):
            return []
        names = [m["name"] for m in models if isinstance(m, dict) and isinstance(m.get("name"), str)]
        return [n.removeprefix("models/") for n in names if "gemini" in n.lower()]

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
