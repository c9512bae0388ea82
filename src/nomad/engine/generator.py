"""
Scenario Generator - Main generation pipeline.

The generator is responsible for:
1. Building the prompt and request for a schema variant
2. Calling the generation service once
3. Normalizing the raw output into a CanonicalScenario

Nothing is retried here. Callers decide whether to try again.
"""

import logging

from nomad.config import Settings, get_settings
from nomad.core.models import CanonicalScenario, SchemaVariant
from nomad.core.normalizer import ResponseNormalizer
from nomad.prompts import RESPONSE_SCHEMAS, SYSTEM_INSTRUCTIONS, build_prompt
from nomad.providers.base import GenerationRequest, ProviderAdapter, ProviderError

logger = logging.getLogger(__name__)


class ScenarioGenerationError(Exception):
    """Generation failed upstream or produced an unparseable payload."""

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ScenarioGenerator:
    """
    Generation engine for both games.

    One generator is shared by all requests. It holds no per-request
    state; each call builds its own request and result.
    """

    def __init__(
        self,
        provider: ProviderAdapter,
        normalizer: ResponseNormalizer | None = None,
        settings: Settings | None = None,
    ):
        self.provider = provider
        self.normalizer = normalizer or ResponseNormalizer()
        self.settings = settings or get_settings()

    def build_request(
        self, variant: SchemaVariant, profession: str | None = None
    ) -> GenerationRequest:
        """Build the generation request for a variant."""
        if variant == SchemaVariant.SURVIVAL:
            return GenerationRequest(
                prompt=build_prompt(variant),
                model=self.settings.survival_model,
                system_instruction=SYSTEM_INSTRUCTIONS[variant],
                temperature=self.settings.survival_temperature,
                response_schema=RESPONSE_SCHEMAS[variant],
                search_grounding=self.settings.survival_search_grounding,
            )

        return GenerationRequest(
            prompt=build_prompt(variant, profession),
            model=self.settings.trail_model,
            system_instruction=SYSTEM_INSTRUCTIONS[variant],
            temperature=self.settings.trail_temperature,
            response_schema=RESPONSE_SCHEMAS[variant],
        )

    async def generate(
        self, variant: SchemaVariant, profession: str | None = None
    ) -> CanonicalScenario:
        """
        Generate and normalize one scenario.

        Args:
            variant: Which game the scenario is for
            profession: Player profession (nomad trail only)

        Returns:
            CanonicalScenario with every field populated

        Raises:
            ScenarioGenerationError when the service fails or the payload
            cannot be decoded
        """
        request = self.build_request(variant, profession)

        try:
            response = await self.provider.generate(request)
        except ProviderError as e:
            logger.error(f"{e.provider} generation failed for {variant.value}: {e}")
            raise ScenarioGenerationError("Failed to generate scenario", details=str(e)) from e

        result = self.normalizer.normalize(response.text, variant)
        if not result.success or result.scenario is None:
            message = result.error.message if result.error else "unknown parse failure"
            raise ScenarioGenerationError("Failed to generate scenario", details=message)

        if result.issues:
            logger.info(
                f"{variant.value} scenario from {response.model} needed "
                f"{len(result.issues)} repair(s): {[i.code for i in result.issues]}"
            )

        return result.scenario
