"""Locate and parse the JSON payload inside freeform model output."""

import json
import re
from typing import Any

from .errors import ParseError

_FENCE_OPEN_RE = re.compile(r"^\s*```[a-zA-Z0-9_-]*\s*\n?")
_FENCE_CLOSE_RE = re.compile(r"\n?```\s*$")

_CLOSER = {"{": "}", "[": "]"}


def strip_code_fences(text: str) -> str:
    """Remove a leading ```lang fence and a trailing ``` fence if present."""
    cleaned = _FENCE_OPEN_RE.sub("", text, count=1)
    cleaned = _FENCE_CLOSE_RE.sub("", cleaned, count=1)
    return cleaned.strip()


def _span_from(text: str, start: int) -> str | None:
    end = text.rfind(_CLOSER[text[start]])
    if end <= start:
        return None
    return text[start:end + 1].strip()


def json_candidates(text: str) -> list[str]:
    """
    Candidate {...} / [...] spans of ``text``, earliest opener first.

    Each span runs from an opener to the last occurrence of its matching
    closer. Prose like ``See [1]: {...}`` yields both the bracket span and
    the object span, so a caller can fall through to the one that parses.
    """
    starts = sorted(i for i in (text.find("{"), text.find("[")) if i != -1)
    spans = (_span_from(text, start) for start in starts)
    return [span for span in spans if span is not None]


def extract_json_candidate(text: str) -> str | None:
    """Return the outermost {...} or [...] span of ``text``, or None."""
    candidates = json_candidates(text)
    return candidates[0] if candidates else None


def _decode(candidate: str) -> Any:
    try:
        return json.loads(candidate)
    except json.JSONDecodeError as exc:
        first_error = exc
    # Trailing prose can contain a stray closer; decode the first complete value instead.
    try:
        value, _ = json.JSONDecoder().raw_decode(candidate)
        return value
    except json.JSONDecodeError:
        raise first_error


def parse_json_response(raw: str | None) -> Any:
    """Parse the JSON payload in ``raw``. Raises ParseError when none parses."""
    if raw is None or not raw.strip():
        raise ParseError("Model returned empty output", raw_output=raw)

    cleaned = strip_code_fences(raw)
    candidates = json_candidates(cleaned)
    if not candidates:
        raise ParseError(
            f"No JSON object or array found in model output (length={len(cleaned)})",
            raw_output=raw,
        )

    first_error = None
    for candidate in candidates:
        try:
            return _decode(candidate)
        except json.JSONDecodeError as exc:
            first_error = first_error or exc

    raise ParseError(
        f"Invalid JSON in model output: {first_error.msg} "
        f"(line {first_error.lineno} col {first_error.colno}, length={len(cleaned)})",
        raw_output=raw,
    ) from first_error
