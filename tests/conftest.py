"""Shared fixtures."""

import pytest

from nomad.providers.base import (
    GenerationRequest,
    GenerationResponse,
    HealthStatus,
    ProviderAdapter,
    ProviderHealth,
)


class FakeProvider(ProviderAdapter):
    """Provider that replays canned text and records requests."""

    def __init__(self, text: str = "{}", error: Exception | None = None):
        self.text = text
        self.error = error
        self.requests: list[GenerationRequest] = []

    @property
    def name(self) -> str:
        return "fake"

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        self.requests.append(request)
        if self.error:
            raise self.error
        return GenerationResponse(text=self.text, model=request.model, provider=self.name)

    async def health_check(self) -> ProviderHealth:
        return ProviderHealth(status=HealthStatus.HEALTHY)

    async def list_models(self) -> list[str]:
        return ["fake-model"]


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()
