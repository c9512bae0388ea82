"""Tests for the Scenario Generator."""

import pytest

from nomad.config import Settings
from nomad.core.models import SchemaVariant
from nomad.engine import ScenarioGenerationError, ScenarioGenerator
from nomad.providers.base import ProviderDownError


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        gemini_api_key="k",
        survival_model="survival-model",
        survival_temperature=0.7,
        survival_search_grounding=True,
        trail_model="trail-model",
    )


@pytest.fixture
def generator(provider, settings: Settings) -> ScenarioGenerator:
    return ScenarioGenerator(provider, settings=settings)


class TestScenarioGenerator:
    """Test the generate pipeline."""

    async def test_survival_scenario(self, generator: ScenarioGenerator, provider) -> None:
        """Fenced survival output is normalized."""
        provider.text = '```json\n{"scenario_text": "Storm.", "options": ["A", "B", "C"]}\n```'

        scenario = await generator.generate(SchemaVariant.SURVIVAL)

        assert scenario.narrative == "Storm."
        assert scenario.to_payload()["choices"] == ["A", "B", "C"]
        sent = provider.requests[0]
        assert sent.model == "survival-model"
        assert sent.search_grounding
        assert sent.temperature == 0.7

    async def test_trail_prompt_carries_profession(self, generator: ScenarioGenerator, provider) -> None:
        """The profession is part of the trail prompt."""
        scenario = await generator.generate(SchemaVariant.NOMAD_TRAIL, profession="UX designer")

        sent = provider.requests[0]
        assert "UX designer" in sent.prompt
        assert sent.model == "trail-model"
        assert sent.response_schema is not None
        assert not sent.search_grounding
        assert len(scenario.choices) == 2

    async def test_trail_requires_profession(self, generator: ScenarioGenerator, provider) -> None:
        with pytest.raises(ValueError):
            await generator.generate(SchemaVariant.NOMAD_TRAIL)

        assert provider.requests == []

    async def test_provider_failure_is_wrapped(self, generator: ScenarioGenerator, provider) -> None:
        """Upstream errors surface with their message as details."""
        provider.error = ProviderDownError("fake", "Cannot connect")

        with pytest.raises(ScenarioGenerationError) as exc_info:
            await generator.generate(SchemaVariant.SURVIVAL)

        assert exc_info.value.message == "Failed to generate scenario"
        assert exc_info.value.details == "Cannot connect"

    async def test_malformed_output_is_not_retried(self, generator: ScenarioGenerator, provider) -> None:
        """Undecodable output fails after exactly one upstream call."""
        provider.text = "Sorry, I can't help with that."

        with pytest.raises(ScenarioGenerationError) as exc_info:
            await generator.generate(SchemaVariant.SURVIVAL)

        assert "Invalid JSON" in exc_info.value.details
        assert len(provider.requests) == 1

    async def test_each_call_is_independent(self, generator: ScenarioGenerator, provider) -> None:
        """A failed request does not affect the next one."""
        provider.text = "garbage"
        with pytest.raises(ScenarioGenerationError):
            await generator.generate(SchemaVariant.SURVIVAL)

        provider.text = '{"scenario_text": "Calm.", "options": ["A"]}'
        scenario = await generator.generate(SchemaVariant.SURVIVAL)

        assert scenario.narrative == "Calm."
