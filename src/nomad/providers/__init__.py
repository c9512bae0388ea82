"""Provider adapters for the generation service."""

from nomad.providers.base import (
    GenerationRequest,
    GenerationResponse,
    ProviderAdapter,
    ProviderError,
    ProviderHealth,
)
from nomad.providers.gemini import GeminiAdapter

__all__ = [
    "GeminiAdapter",
    "GenerationRequest",
    "GenerationResponse",
    "ProviderAdapter",
    "ProviderError",
    "ProviderHealth",
]
