"""Response Normalizer - Extract and shape scenario JSON from model output."""

from nomad.core.normalizer.normalizer import (
    ParseError,
    ParseErrorKind,
    ResponseNormalizer,
    ScenarioResult,
)

__all__ = ["ParseError", "ParseErrorKind", "ResponseNormalizer", "ScenarioResult"]
