"""
Structured generation engine.

Turns "prompt in, freeform text out" into "prompt in, schema-valid value out":
each attempt calls the client, extracts the JSON payload, runs the caller's
validator, and on failure waits a bounded backoff before trying again. A list
of candidate models can be given; a model the provider does not serve is
skipped without spending the attempt budget.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

from .errors import (
    GenerationExhaustedError,
    ModelUnsupportedError,
    ParseError,
    TransportError,
    ValidationError,
)
from .llm_clients import GenerativeClient, ImageInput
from .parsing import parse_json_response
from .schemas import Validator
from .utils import BASE_DELAY, MAX_ATTEMPTS, MAX_DELAY, backoff_delay

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ATTEMPT_TIMEOUT = 60.0

RETRY_HINT = (
    "\n\nRETRY #{number}: the previous output could not be used ({reason}). "
    "Respond with ONLY a single valid JSON value matching the Output schema above. "
    "No markdown, no code fences, no commentary."
)


@dataclass
class GenerationAttempt:
    """Bookkeeping for one upstream call. Never persisted."""

    attempt_number: int
    model: str
    raw_model_output: str | None = None
    error_kind: str | None = None


@dataclass(frozen=True)
class GenerationSuccess(Generic[T]):
    value: T
    attempt_count: int
    model: str
    duration_ms: int


@dataclass(frozen=True)
class GenerationOutcome(Generic[T]):
    """Either a success or the exhaustion error, never both."""

    success: GenerationSuccess[T] | None = None
    error: GenerationExhaustedError | None = None

    @property
    def ok(self) -> bool:
        return self.success is not None

    @property
    def value(self) -> T | None:
        return self.success.value if self.success is not None else None


def duration_ms_since(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def _error_kind(exc: Exception) -> str:
    if isinstance(exc, TransportError):
        return exc.kind
    if isinstance(exc, ParseError):
        return "parse"
    if isinstance(exc, ValidationError):
        return "validation"
    return type(exc).__name__


class StructuredGenerationEngine:
    """Retrying, validating wrapper around a GenerativeClient."""

    def __init__(
        self,
        client: GenerativeClient,
        max_attempts: int = MAX_ATTEMPTS,
        base_delay: float = BASE_DELAY,
        max_delay: float = MAX_DELAY,
        attempt_timeout: float | None = DEFAULT_ATTEMPT_TIMEOUT,
        retry_hint: bool = True,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self.client = client
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.attempt_timeout = attempt_timeout
        self.retry_hint = retry_hint

    def _prompt_for_attempt(self, prompt: str, attempt: int, previous: Exception | None) -> str:
        if not self.retry_hint or attempt == 1 or previous is None:
            return prompt
        return prompt + RETRY_HINT.format(number=attempt - 1, reason=_error_kind(previous))

    async def _call(
        self,
        client: GenerativeClient,
        prompt: str,
        images: Sequence[ImageInput] | None,
    ) -> str:
        if images:
            call = client.generate_multimodal(prompt, images)
        else:
            call = client.generate_text(prompt)
        try:
            return await asyncio.wait_for(call, timeout=self.attempt_timeout)
        except asyncio.TimeoutError as exc:
            raise TransportError(
                f"Attempt exceeded {self.attempt_timeout}s timeout",
                kind="timeout",
                model=client.model,
            ) from exc

    async def generate_text(self, prompt: str) -> str:
        """One plain-text call on the primary model, bounded by the attempt timeout."""
        return await self._call(self.client, prompt, None)

    async def generate_structured(
        self,
        prompt: str,
        validator: Validator[T],
        images: Sequence[ImageInput] | None = None,
        max_attempts: int | None = None,
        models: Sequence[str] | None = None,
    ) -> GenerationSuccess[T]:
        """
        Produce a validated value or raise GenerationExhaustedError.

        Parse, validation and transport failures are retried up to the
        attempt budget with backoff between attempts. ModelUnsupportedError
        moves on to the next entry of ``models`` with a fresh budget.
        """
        budget = max_attempts if max_attempts is not None else self.max_attempts
        if budget < 1:
            raise ValueError(f"max_attempts must be >= 1, got {budget}")
        candidates = list(models) if models else [self.client.model]

        started = time.monotonic()
        attempts: list[GenerationAttempt] = []
        models_tried: list[str] = []
        last_raw_output: str | None = None
        last_error: Exception | None = None

        for model in candidates:
            client = self.client if model == self.client.model else self.client.with_model(model)
            models_tried.append(model)
            previous: Exception | None = None
            skip_model = False

            for attempt in range(1, budget + 1):
                raw: str | None = None
                try:
                    raw = await self._call(client, self._prompt_for_attempt(prompt, attempt, previous), images)
                    value = validator(parse_json_response(raw))
                except ModelUnsupportedError as exc:
                    attempts.append(GenerationAttempt(attempt, model, None, exc.kind))
                    last_error = exc
                    logger.warning("[RETRY] Model %s is not supported: %s. Trying next candidate.", model, exc)
                    skip_model = True
                    break
                except (TransportError, ParseError, ValidationError) as exc:
                    if isinstance(exc, ValidationError) and exc.raw_output is None:
                        exc.raw_output = raw
                    attempts.append(GenerationAttempt(attempt, model, raw, _error_kind(exc)))
                    if raw is not None:
                        last_raw_output = raw
                    last_error = previous = exc
                    logger.warning(
                        "[RETRY] Attempt %d/%d on %s failed (%s): %s",
                        attempt, budget, model, _error_kind(exc), exc,
                    )
                    if attempt == budget:
                        break
                    delay = backoff_delay(attempt, self.base_delay, self.max_delay)
                    logger.warning("[RETRY] Retrying in %.1fs...", delay)
                    await asyncio.sleep(delay)
                    continue

                attempts.append(GenerationAttempt(attempt, model, raw, None))
                duration_ms = duration_ms_since(started)
                logger.debug("Generated structured output with %s in %d attempt(s), %dms", model, attempt, duration_ms)
                return GenerationSuccess(value=value, attempt_count=attempt, model=model, duration_ms=duration_ms)

            if not skip_model:
                break

        reason = _error_kind(last_error) if last_error is not None else "unknown"
        logger.error(
            "Structured generation exhausted after %d attempt(s) across %s (last: %s)",
            len(attempts), ", ".join(models_tried), reason,
        )
        raise GenerationExhaustedError(
            f"Failed to produce valid output after {len(attempts)} attempt(s): {last_error}",
            last_raw_output=last_raw_output,
            reason=reason,
            attempts=attempts,
            models_tried=models_tried,
            last_error=last_error,
        )

    async def attempt_structured(
        self,
        prompt: str,
        validator: Validator[T],
        images: Sequence[ImageInput] | None = None,
        max_attempts: int | None = None,
        models: Sequence[str] | None = None,
    ) -> GenerationOutcome[T]:
        """Like generate_structured, but exhaustion is returned instead of raised."""
        try:
            success = await self.generate_structured(
                prompt, validator, images=images, max_attempts=max_attempts, models=models
            )
        except GenerationExhaustedError as exc:
            return GenerationOutcome(error=exc)
        return GenerationOutcome(success=success)

