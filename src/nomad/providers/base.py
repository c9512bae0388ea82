"""Base provider adapter interface and types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class HealthStatus(str, Enum):
    """Provider health status."""

    HEALTHY = "HEALTHY"
    DEGRADED = "DEGRADED"
    UNHEALTHY = "UNHEALTHY"
    UNKNOWN = "UNKNOWN"


@dataclass
class ProviderHealth:
    """Current health status of a provider."""

    status: HealthStatus
    latency_ms: int | None = None
    last_check: datetime | None = None
    error: str | None = None
    models_available: list[str] | None = None


@dataclass
class GenerationRequest:
    """Request for scenario generation."""

    prompt: str
    model: str
    system_instruction: str | None = None
    temperature: float | None = None
    response_schema: dict[str, Any] | None = None  # Constrains output shape
    search_grounding: bool = False  # Let the model consult web search


@dataclass
class GenerationResponse:
    """Response from the generation service."""

    text: str
    model: str
    provider: str
    usage: dict[str, int] | None = None  # tokens used
    latency_ms: int = 0
    finish_reason: str | None = None


class ProviderAdapter(ABC):
    """
    Abstract base class for generation service adapters.

    Each provider implements this interface.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name (e.g., 'gemini')."""
        ...

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        """
        Send a generation request to the provider.

        Args:
            request: The generation request

        Returns:
            GenerationResponse with raw model text

        Raises:
            ProviderError on failure
        """
        ...

    @abstractmethod
    async def health_check(self) -> ProviderHealth:
        """
        Check provider health and availability.

        Returns:
            ProviderHealth with current status
        """
        ...

    @abstractmethod
    async def list_models(self) -> list[str]:
        """
        List available models from this provider.

        Returns:
            List of model identifiers
        """
        ...

    async def close(self) -> None:
        """Close provider connections. Override in subclasses if needed."""
        pass


class ProviderError(Exception):
    """Base exception for provider errors."""

    def __init__(self, message: str, provider: str):
        super().__init__(message)
        self.provider = provider


class RateLimitError(ProviderError):
    """Rate limit exceeded."""

    def __init__(self, provider: str, retry_after: int | None = None):
        super().__init__(f"Rate limit exceeded for {provider}", provider)
        self.retry_after = retry_after


class ProviderDownError(ProviderError):
    """Provider is unavailable."""

    def __init__(self, provider: str, message: str = "Provider unavailable"):
        super().__init__(message, provider)


class EmptyResponseError(ProviderError):
    """Provider answered without any text."""

    def __init__(self, provider: str, finish_reason: str | None = None):
        message = "AI returned no content."
        if finish_reason:
            message = f"AI returned no content (finish reason: {finish_reason})."
        super().__init__(message, provider)
        self.finish_reason = finish_reason
