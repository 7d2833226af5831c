"""Tests for the fallback registry and the response schemas it serves."""

import pytest

from vibeprompt.errors import ValidationError
from vibeprompt.fallbacks import FALLBACKS, get_fallback
from vibeprompt.schemas import AnalyzerResult, InteractionGradeResult, schema_validator


@pytest.mark.parametrize("use_case", sorted(FALLBACKS))
def test_every_fallback_validates_against_its_schema(use_case):
    entry = FALLBACKS[use_case]

    entry.schema.model_validate(get_fallback(use_case))


def test_get_fallback_returns_independent_copies():
    first = get_fallback("profile-analyzer")
    first["conversationOpeners"].clear()

    second = get_fallback("profile-analyzer")

    assert len(second["conversationOpeners"]) == 8


def test_unknown_use_case_has_no_fallback():
    assert get_fallback("nope") is None


def test_registry_is_read_only():
    with pytest.raises(TypeError):
        FALLBACKS["new"] = FALLBACKS["compatibility"]


def test_schema_validator_wraps_pydantic_errors():
    validate = schema_validator(InteractionGradeResult)

    with pytest.raises(ValidationError) as exc_info:
        validate({"siq_delta": 500, "feedback_summary": "short", "skill_metrics": {}})

    assert exc_info.value.details
    assert "InteractionGradeResult" in str(exc_info.value)


def test_analyzer_requires_exactly_eight_openers():
    payload = get_fallback("profile-analyzer")
    payload["conversationOpeners"] = payload["conversationOpeners"][:7]

    with pytest.raises(ValidationError):
        schema_validator(AnalyzerResult)(payload)


def test_strict_schemas_reject_extra_keys():
    payload = get_fallback("grade-interaction")
    payload["bonus"] = 1

    with pytest.raises(ValidationError):
        schema_validator(InteractionGradeResult)(payload)
