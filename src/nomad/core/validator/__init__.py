"""Validator - Alias resolution, defaulting and clamping."""

from nomad.core.validator.validator import (
    ScenarioValidator,
    ValidationIssue,
    ValidationResult,
)

__all__ = ["ScenarioValidator", "ValidationIssue", "ValidationResult"]
