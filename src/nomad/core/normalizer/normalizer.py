"""
Response Normalizer - Turn raw model output into a CanonicalScenario.

The normalizer is the first line of defense between the generation
service and the game client. Models wrap JSON in markdown fences, drop
fields or invent out-of-range numbers even when given a schema.

Flow:
1. Strip code-fence markers and surrounding whitespace
2. Strict JSON decode (failure here is the only hard error)
3. Hand the decoded object to the validator for alias resolution,
   defaulting and clamping
"""

import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from nomad.core.models import CanonicalScenario, SchemaVariant
from nomad.core.validator import ScenarioValidator, ValidationIssue

logger = logging.getLogger(__name__)


class ParseErrorKind(str, Enum):
    """Kinds of parse failure."""

    MALFORMED = "MALFORMED"


@dataclass
class ParseError:
    """Why a payload could not be turned into a scenario."""

    kind: ParseErrorKind
    message: str
    text: str  # the offending text, for diagnostics


@dataclass
class ScenarioResult:
    """Result of a normalization attempt."""

    success: bool
    scenario: CanonicalScenario | None = None
    error: ParseError | None = None
    issues: list[ValidationIssue] = field(default_factory=list)


class ResponseNormalizer:
    """Extract, decode and shape scenario JSON from model output."""

    # Patterns for fence stripping
    LEADING_FENCE_PATTERN = re.compile(r"^```[\w+-]*[ \t]*(?:\r?\n)?")
    TRAILING_FENCE_PATTERN = re.compile(r"(?:\r?\n)?[ \t]*```$")

    def __init__(self, validator: ScenarioValidator | None = None):
        self.validator = validator or ScenarioValidator()

    def extract_json(self, raw: str) -> str:
        """
        Strip code-fence markers and surrounding whitespace.

        Best effort: the result is not guaranteed to be valid JSON.
        Stripping repeats until nothing changes, so applying this twice
        gives the same result as applying it once.

        Args:
            raw: Raw string output from the model

        Returns:
            The remaining text, otherwise unmodified
        """
        text = raw.strip()
        while True:
            stripped = self.LEADING_FENCE_PATTERN.sub("", text, count=1)
            stripped = self.TRAILING_FENCE_PATTERN.sub("", stripped, count=1).strip()
            if stripped == text:
                return text
            text = stripped

    def parse_scenario(self, json_text: str, variant: SchemaVariant) -> ScenarioResult:
        """
        Decode JSON text and shape it into a CanonicalScenario.

        Args:
            json_text: Text expected to be a JSON object
            variant: Which schema variant the payload should follow

        Returns:
            ScenarioResult with a complete scenario, or a MALFORMED error
            and no scenario
        """
        try:
            data = json.loads(json_text, parse_constant=self._reject_constant)
        except (ValueError, RecursionError) as e:  # JSONDecodeError included
            return self._malformed(f"Invalid JSON: {e}", json_text)

        if not isinstance(data, dict):
            return self._malformed(
                f"Expected a JSON object, got: {type(data).__name__}", json_text
            )

        validation = self.validator.validate(data, variant)
        return ScenarioResult(
            success=True,
            scenario=validation.scenario,
            issues=validation.issues,
        )

    def normalize(self, raw_output: str, variant: SchemaVariant) -> ScenarioResult:
        """Extract and parse in one step."""
        return self.parse_scenario(self.extract_json(raw_output), variant)

    def _malformed(self, message: str, text: str) -> ScenarioResult:
        preview = text if len(text) <= 200 else text[:197] + "..."
        logger.warning(f"Malformed scenario payload ({message}): {preview!r}")
        return ScenarioResult(
            success=False,
            error=ParseError(kind=ParseErrorKind.MALFORMED, message=message, text=text),
        )

    @staticmethod
    def _reject_constant(name: str) -> Any:
        # NaN and Infinity are not JSON
        raise ValueError(f"Non-standard JSON constant: {name}")
