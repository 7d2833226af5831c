"""Error taxonomy for the prompt-and-response reliability layer."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .engine import GenerationAttempt


class VibePromptError(Exception):
    """Base class for every error raised by vibeprompt."""


class TransportError(VibePromptError):
    """A single upstream call failed: network, status, timeout or content policy.

    ``kind`` is one of ``network``, ``timeout``, ``status``,
    ``content_rejected``, ``empty_response`` or ``model_unsupported``.
    """

    def __init__(
        self,
        message: str,
        kind: str = "network",
        model: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.model = model
        self.status_code = status_code


class ModelUnsupportedError(TransportError):
    """The provider does not know (or no longer serves) the requested model."""

    def __init__(self, message: str, model: str | None = None, status_code: int | None = None):
        super().__init__(message, kind="model_unsupported", model=model, status_code=status_code)


class ParseError(VibePromptError):
    """Raw model output did not contain a parseable JSON payload."""

    def __init__(self, message: str, raw_output: str | None = None):
        super().__init__(message)
        self.raw_output = raw_output


class ValidationError(VibePromptError):
    """Parsed JSON did not conform to the target schema."""

    def __init__(self, message: str, raw_output: str | None = None, details: list | None = None):
        super().__init__(message)
        self.raw_output = raw_output
        self.details = details or []


class GenerationExhaustedError(VibePromptError):
    """Every attempt (across every candidate model) failed."""

    def __init__(
        self,
        message: str,
        last_raw_output: str | None = None,
        reason: str = "",
        attempts: list["GenerationAttempt"] | None = None,
        models_tried: list[str] | None = None,
        last_error: Exception | None = None,
    ):
        super().__init__(message)
        self.last_raw_output = last_raw_output
        self.reason = reason
        self.attempts = attempts or []
        self.models_tried = models_tried or []
        self.last_error = last_error

    @property
    def attempt_count(self) -> int:
        return len(self.attempts)


class CacheUnavailableError(VibePromptError):
    """The cache store could not be reached. Never escapes the cache layer."""
