"""Scenario generation engine."""

from nomad.engine.generator import ScenarioGenerationError, ScenarioGenerator

__all__ = ["ScenarioGenerationError", "ScenarioGenerator"]
