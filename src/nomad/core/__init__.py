"""Nomad Core - Scenario contracts and response normalization."""

from nomad.core.models import (
    CanonicalScenario,
    Choice,
    LogicalField,
    SchemaVariant,
)

__all__ = [
    "CanonicalScenario",
    "Choice",
    "LogicalField",
    "SchemaVariant",
]
