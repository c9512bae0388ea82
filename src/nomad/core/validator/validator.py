"""
Validator - Shape enforcement for decoded scenario payloads.

The validator turns a decoded JSON object into a CanonicalScenario:
1. Alias resolution - each logical field is looked up under every wire name
2. Defaulting - missing or unusable fields get the variant's default
3. Clamping - numeric effects are forced into their inclusive range

It never rejects a decoded object. Every problem it repairs is recorded
as an issue so callers can log what the model got wrong.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any

from nomad.core.models import (
    CHOICE_COUNTS,
    EFFECT_RANGES,
    SCHEMA_ALIASES,
    CanonicalScenario,
    Choice,
    LogicalField,
    SchemaVariant,
    default_for,
)

logger = logging.getLogger(__name__)


@dataclass
class ValidationIssue:
    """A single repaired problem in the decoded payload."""

    field: str
    message: str
    code: str  # e.g., "MISSING_FIELD", "INVALID_TYPE", "OUT_OF_RANGE", "TRUNCATED"


@dataclass
class ValidationResult:
    """Result of validation. Always carries a complete scenario."""

    scenario: CanonicalScenario
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def defaults_applied(self) -> list[str]:
        """Logical fields that fell back to their default."""
        return [i.field for i in self.issues if i.code in {"MISSING_FIELD", "INVALID_TYPE"}]


class ScenarioValidator:
    """
    Coerce decoded payloads into the shape of a schema variant.

    Enforces:
    - Non-empty narrative and title strings
    - Choice lists of the variant's item type, at most the variant's count
    - Effect values as integers inside EFFECT_RANGES
    """

    def validate(self, data: dict[str, Any], variant: SchemaVariant) -> ValidationResult:
        """
        Build a canonical scenario from decoded JSON.

        Args:
            data: Decoded JSON object from model output
            variant: Which schema variant the payload should follow

        Returns:
            ValidationResult with the scenario and the issues repaired
        """
        issues: list[ValidationIssue] = []
        aliases = SCHEMA_ALIASES[variant]

        narrative = self._resolve_text(data, variant, LogicalField.NARRATIVE, issues)

        title = None
        if LogicalField.TITLE in aliases:
            title = self._resolve_text(data, variant, LogicalField.TITLE, issues)

        if variant == SchemaVariant.NOMAD_TRAIL:
            choices: list[Any] = self._resolve_structured_choices(data, variant, issues)
        else:
            choices = self._resolve_string_choices(data, variant, issues)

        scenario = CanonicalScenario(
            variant=variant,
            narrative=narrative,
            choices=choices,
            title=title,
        )

        if issues:
            logger.debug(f"Repaired {len(issues)} issue(s) in {variant.value} payload: {issues}")

        return ValidationResult(scenario=scenario, issues=issues)

    def _lookup(
        self, data: dict[str, Any], variant: SchemaVariant, logical: LogicalField
    ) -> tuple[str | None, Any]:
        """Return (wire name, value) of the first alias present in data."""
        for name in SCHEMA_ALIASES[variant][logical]:
            if name in data and data[name] is not None:
                return name, data[name]
        return None, None

    def _resolve_text(
        self,
        data: dict[str, Any],
        variant: SchemaVariant,
        logical: LogicalField,
        issues: list[ValidationIssue],
    ) -> str:
        """Resolve a string field, falling back to its default."""
        name, value = self._lookup(data, variant, logical)
        if name is None:
            issues.append(
                ValidationIssue(
                    field=logical.value,
                    message=f"Missing field: {logical.value}",
                    code="MISSING_FIELD",
                )
            )
            return default_for(variant, logical)

        if not isinstance(value, str) or not value.strip():
            issues.append(
                ValidationIssue(
                    field=logical.value,
                    message=f"{name} must be a non-empty string, got: {type(value).__name__}",
                    code="INVALID_TYPE",
                )
            )
            return default_for(variant, logical)

        return value.strip()

    def _resolve_choice_list(
        self,
        data: dict[str, Any],
        variant: SchemaVariant,
        issues: list[ValidationIssue],
    ) -> list[Any] | None:
        """Find the raw choice list, or None when it is missing or not a list."""
        name, value = self._lookup(data, variant, LogicalField.CHOICES)
        if name is None:
            issues.append(
                ValidationIssue(
                    field=LogicalField.CHOICES.value,
                    message="Missing field: choices",
                    code="MISSING_FIELD",
                )
            )
            return None

        if not isinstance(value, list):
            issues.append(
                ValidationIssue(
                    field=LogicalField.CHOICES.value,
                    message=f"{name} must be a list, got: {type(value).__name__}",
                    code="INVALID_TYPE",
                )
            )
            return None

        return value

    def _finish_choices(
        self,
        choices: list[Any],
        variant: SchemaVariant,
        issues: list[ValidationIssue],
    ) -> list[Any]:
        """Apply the variant's choice count, defaulting empty lists."""
        if not choices:
            issues.append(
                ValidationIssue(
                    field=LogicalField.CHOICES.value,
                    message="No usable choices in payload",
                    code="INVALID_TYPE",
                )
            )
            return default_for(variant, LogicalField.CHOICES)

        expected = CHOICE_COUNTS[variant]
        if len(choices) > expected:
            issues.append(
                ValidationIssue(
                    field=LogicalField.CHOICES.value,
                    message=f"Got {len(choices)} choices, keeping the first {expected}",
                    code="TRUNCATED",
                )
            )
            choices = choices[:expected]

        return choices

    def _resolve_string_choices(
        self,
        data: dict[str, Any],
        variant: SchemaVariant,
        issues: list[ValidationIssue],
    ) -> list[str]:
        """Resolve a list of option strings."""
        raw = self._resolve_choice_list(data, variant, issues)
        if raw is None:
            return default_for(variant, LogicalField.CHOICES)

        choices: list[str] = []
        for i, item in enumerate(raw):
            # Models sometimes answer with the structured shape anyway
            if isinstance(item, dict):
                item = item.get("option")
            if isinstance(item, str) and item.strip():
                choices.append(item.strip())
            else:
                issues.append(
                    ValidationIssue(
                        field=f"choices[{i}]",
                        message=f"Choice must be a non-empty string, got: {type(item).__name__}",
                        code="INVALID_TYPE",
                    )
                )

        return self._finish_choices(choices, variant, issues)

    def _resolve_structured_choices(
        self,
        data: dict[str, Any],
        variant: SchemaVariant,
        issues: list[ValidationIssue],
    ) -> list[Choice]:
        """Resolve a list of structured choices with clamped effects."""
        raw = self._resolve_choice_list(data, variant, issues)
        if raw is None:
            return [Choice(**c) for c in default_for(variant, LogicalField.CHOICES)]

        choices: list[Choice] = []
        for i, item in enumerate(raw):
            if isinstance(item, str) and item.strip():
                item = {"option": item}
            if not isinstance(item, dict):
                issues.append(
                    ValidationIssue(
                        field=f"choices[{i}]",
                        message=f"Choice must be an object, got: {type(item).__name__}",
                        code="INVALID_TYPE",
                    )
                )
                continue
            choices.append(self._build_choice(item, i, issues))

        finished = self._finish_choices(choices, variant, issues)
        return [c if isinstance(c, Choice) else Choice(**c) for c in finished]

    def _build_choice(
        self, item: dict[str, Any], index: int, issues: list[ValidationIssue]
    ) -> Choice:
        """Build one choice, defaulting its label and clamping its effects."""
        option = item.get("option")
        if not isinstance(option, str) or not option.strip():
            issues.append(
                ValidationIssue(
                    field=f"choices[{index}].option",
                    message="Choice label missing",
                    code="MISSING_FIELD",
                )
            )
            option = f"Option {chr(ord('A') + index)}"

        effects = {
            name: self._clamp_effect(item.get(name), name, index, issues)
            for name in EFFECT_RANGES
        }

        outcome = item.get("outcome_text")
        extra: dict[str, Any] = {}
        if isinstance(outcome, str) and outcome.strip():
            extra["outcome_text"] = outcome.strip()

        return Choice(option=option.strip(), **effects, **extra)

    def _clamp_effect(
        self, value: Any, name: str, index: int, issues: list[ValidationIssue]
    ) -> int:
        """Coerce an effect to int and clamp it into its inclusive range."""
        field_name = f"choices[{index}].{name}"
        number = self._to_number(value)
        if number is None:
            issues.append(
                ValidationIssue(
                    field=field_name,
                    message=f"Effect must be a number, got: {type(value).__name__}",
                    code="MISSING_FIELD" if value is None else "INVALID_TYPE",
                )
            )
            return 0

        low, high = EFFECT_RANGES[name]
        clamped = min(max(round(number), low), high)
        if not low <= number <= high:
            issues.append(
                ValidationIssue(
                    field=field_name,
                    message=f"{name}={value} outside [{low}, {high}], clamped to {clamped}",
                    code="OUT_OF_RANGE",
                )
            )
        return clamped

    @staticmethod
    def _to_number(value: Any) -> float | None:
        """Accept ints, floats and numeric strings. Booleans are not numbers."""
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return value if math.isfinite(value) else None
        if isinstance(value, str):
            try:
                number = float(value.strip())
            except ValueError:
                return None
            return number if math.isfinite(number) else None
        return None
