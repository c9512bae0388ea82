"""Core domain models and contracts for Nomad Trail.

These models define the contracts every consumer relies on:
- Schema variants with their alias and default tables
- Structured choices with bounded effects
- The canonical scenario returned to callers
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================


class SchemaVariant(str, Enum):
    """Expected output shapes. One per calling context, never merged."""

    SURVIVAL = "SURVIVAL"  # scenario_text + three string options
    NOMAD_TRAIL = "NOMAD_TRAIL"  # title + description + two structured choices


class LogicalField(str, Enum):
    """Logical scenario fields, independent of the wire names used for them."""

    TITLE = "title"
    NARRATIVE = "narrative"
    CHOICES = "choices"


# =============================================================================
# Alias and default tables
# =============================================================================

# Wire names per logical field, in lookup order. The first name is canonical.
SCHEMA_ALIASES: dict[SchemaVariant, dict[LogicalField, tuple[str, ...]]] = {
    SchemaVariant.SURVIVAL: {
        LogicalField.NARRATIVE: ("scenario_text", "description"),
        LogicalField.CHOICES: ("options", "choices"),
    },
    SchemaVariant.NOMAD_TRAIL: {
        LogicalField.TITLE: ("title",),
        LogicalField.NARRATIVE: ("description", "scenario_text"),
        LogicalField.CHOICES: ("choices",),
    },
}

# Number of choices each game presents
CHOICE_COUNTS: dict[SchemaVariant, int] = {
    SchemaVariant.SURVIVAL: 3,
    SchemaVariant.NOMAD_TRAIL: 2,
}

# Inclusive ranges for structured choice effects
EFFECT_RANGES: dict[str, tuple[int, int]] = {
    "effect_cash": (-200, 200),
    "effect_laptop": (-30, 15),
    "effect_mental": (-20, 10),
}

DEFAULT_TITLE = "A Quiet Stretch of Road"
DEFAULT_NARRATIVE = (
    "The news feeds are quiet and nothing seems to be happening for now. "
    "You take a moment to catch your breath and decide what to do next."
)
DEFAULT_OUTCOME = "Nothing much changes."

DEFAULT_VALUES: dict[SchemaVariant, dict[LogicalField, Any]] = {
    SchemaVariant.SURVIVAL: {
        LogicalField.NARRATIVE: DEFAULT_NARRATIVE,
        LogicalField.CHOICES: [
            "Stay where you are and wait for more information.",
            "Gather supplies and prepare for the worst.",
            "Head to the nearest town to find out what is going on.",
        ],
    },
    SchemaVariant.NOMAD_TRAIL: {
        LogicalField.TITLE: DEFAULT_TITLE,
        LogicalField.NARRATIVE: DEFAULT_NARRATIVE,
        LogicalField.CHOICES: [
            {
                "option": "Keep working from where you are",
                "effect_cash": 0,
                "effect_laptop": 0,
                "effect_mental": 0,
                "outcome_text": DEFAULT_OUTCOME,
            },
            {
                "option": "Pack up and move on",
                "effect_cash": 0,
                "effect_laptop": 0,
                "effect_mental": 0,
                "outcome_text": DEFAULT_OUTCOME,
            },
        ],
    },
}


def default_for(variant: SchemaVariant, logical: LogicalField) -> Any:
    """Get a fresh copy of the default value for a logical field."""
    value = DEFAULT_VALUES[variant][logical]
    if isinstance(value, list):
        return [dict(item) if isinstance(item, dict) else item for item in value]
    return value


# =============================================================================
# Scenario Models
# =============================================================================


class Choice(BaseModel):
    """A structured player choice with bounded stat effects."""

    option: str
    effect_cash: int = Field(default=0, ge=-200, le=200)
    effect_laptop: int = Field(default=0, ge=-30, le=15)
    effect_mental: int = Field(default=0, ge=-20, le=10)
    outcome_text: str = DEFAULT_OUTCOME


class CanonicalScenario(BaseModel):
    """
    Normalized scenario, guaranteed complete for its variant.

    Values are stored once per logical field and exposed under every
    wire name of the variant by `to_payload()`.
    """

    variant: SchemaVariant
    narrative: str
    choices: list[str] | list[Choice]
    title: str | None = None

    def get(self, logical: LogicalField) -> Any:
        """Get the value of a logical field."""
        if logical == LogicalField.TITLE:
            return self.title
        if logical == LogicalField.NARRATIVE:
            return self.narrative
        return [c.model_dump() if isinstance(c, Choice) else c for c in self.choices]

    def to_payload(self) -> dict[str, Any]:
        """Render the scenario with every canonical and alias name populated."""
        payload: dict[str, Any] = {}
        for logical, names in SCHEMA_ALIASES[self.variant].items():
            value = self.get(logical)
            for name in names:
                # Each wire name gets its own list
                payload[name] = list(value) if isinstance(value, list) else value
        return payload
