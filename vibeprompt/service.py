"""
Caller boundary: one entry point per generation use case.

Every call returns ``GenerationResponse(data, meta)``. ``data`` is always
schema-valid: a cached value, a fresh generation, or the registered fallback
when generation is exhausted. Fallbacks are never written to the cache.
Template and raw-prompt runs can also ask for plain text, which skips
parsing and has no fallback.
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from pydantic import BaseModel

from .cache import (
    DEFAULT_TTL_SECONDS,
    NullResponseCache,
    ResponseCache,
    make_cache_key,
    pair_cache_key,
    prompt_cache_key,
)
from .engine import StructuredGenerationEngine
from .errors import ValidationError
from .fallbacks import FALLBACKS, FallbackEntry, get_fallback
from .inputs import (
    AnalyzerRequest,
    CompatibilityRequest,
    GradeInteractionRequest,
    MatchMissionRequest,
    RawPromptRequest,
    RealtimeCoachRequest,
    TemplateRunRequest,
    UserSummaryRequest,
    VerifyIdentityRequest,
    VibeProfileRequest,
)
from .llm_clients import ImageInput
from .prompt_formatter import format_prompt
from .schemas import MissionPlanResult, Validator, any_json, schema_validator
from .templates import get_template, render_template

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationMeta:
    cached: bool
    used_fallback: bool
    duration_ms: int
    model: str | None = None
    attempt_count: int = 0


@dataclass(frozen=True)
class GenerationResponse:
    data: Any
    meta: GenerationMeta

    def to_dict(self) -> dict:
        return {
            "data": self.data,
            "meta": {
                "cached": self.meta.cached,
                "usedFallback": self.meta.used_fallback,
                "durationMs": self.meta.duration_ms,
                "model": self.meta.model,
                "attemptCount": self.meta.attempt_count,
            },
        }


def _to_data(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return value


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


class GenerationService:
    """Cache check, structured generation, then fallback on exhaustion."""

    def __init__(
        self,
        engine: StructuredGenerationEngine,
        cache: ResponseCache | None = None,
        default_ttl: int = DEFAULT_TTL_SECONDS,
        fallbacks: Mapping[str, FallbackEntry] = FALLBACKS,
        models: Sequence[str] | None = None,
    ):
        self.engine = engine
        self.cache = cache or NullResponseCache()
        self.default_ttl = default_ttl
        self.fallbacks = fallbacks
        self.models = list(models) if models else None

    async def perform(
        self,
        use_case: str,
        prompt: str,
        validator: Validator,
        images: Sequence[ImageInput] | None = None,
        cache_key: str | None = None,
        ttl: int | None = None,
        models: Sequence[str] | None = None,
    ) -> GenerationResponse:
        started = time.monotonic()

        if cache_key:
            cached = await self.cache.get(cache_key)
            if cached is not None:
                try:
                    data = json.loads(cached)
                except json.JSONDecodeError:
                    logger.warning("Discarding corrupt cache entry %s", cache_key)
                else:
                    logger.debug("Cache hit for %s (%s)", use_case, cache_key)
                    return GenerationResponse(
                        data=data,
                        meta=GenerationMeta(cached=True, used_fallback=False, duration_ms=_elapsed_ms(started)),
                    )

        outcome = await self.engine.attempt_structured(
            prompt, validator, images=images, models=models or self.models
        )

        if outcome.ok:
            success = outcome.success
            data = _to_data(success.value)
            if cache_key:
                await self.cache.set(cache_key, json.dumps(data), ttl or self.default_ttl)
            return GenerationResponse(
                data=data,
                meta=GenerationMeta(
                    cached=False,
                    used_fallback=False,
                    duration_ms=_elapsed_ms(started),
                    model=success.model,
                    attempt_count=success.attempt_count,
                ),
            )

        error = outcome.error
        fallback = get_fallback(use_case, self.fallbacks)
        if fallback is None:
            raise error

        logger.error("Serving fallback for %s after %d failed attempt(s): %s", use_case, error.attempt_count, error)
        return GenerationResponse(
            data=fallback,
            meta=GenerationMeta(
                cached=False,
                used_fallback=True,
                duration_ms=_elapsed_ms(started),
                attempt_count=error.attempt_count,
            ),
        )

    async def perform_text(
        self,
        use_case: str,
        prompt: str,
        cache_key: str | None = None,
        ttl: int | None = None,
    ) -> GenerationResponse:
        """Plain-text generation: no parsing, no validation, no fallback."""
        started = time.monotonic()

        if cache_key:
            cached = await self.cache.get(cache_key)
            if cached is not None:
                logger.debug("Cache hit for %s (%s)", use_case, cache_key)
                return GenerationResponse(
                    data=cached,
                    meta=GenerationMeta(cached=True, used_fallback=False, duration_ms=_elapsed_ms(started)),
                )

        text = await self.engine.generate_text(prompt)
        if cache_key:
            await self.cache.set(cache_key, text, ttl or self.default_ttl)
        return GenerationResponse(
            data=text,
            meta=GenerationMeta(
                cached=False,
                used_fallback=False,
                duration_ms=_elapsed_ms(started),
                model=self.engine.client.model,
                attempt_count=1,
            ),
        )

    def validator_for(self, use_case: str) -> Validator:
        """Schema validator registered for ``use_case``; any JSON when none is."""
        entry = self.fallbacks.get(use_case)
        return schema_validator(entry.schema) if entry is not None else any_json


# ── Use cases ───────────────────────────────────────────────────────

async def generate_vibe_profile(service: GenerationService, request: VibeProfileRequest) -> GenerationResponse:
    prompt = render_template("vibe-generation", request.to_template_input(exclude={"user_id", "images", "photo_urls"}))
    cache_key = make_cache_key(
        "vibe", request.user_id, ",".join(sorted(request.hint_tags)), request.extra_context[:50]
    )
    return await service.perform(
        "vibe-generation",
        prompt,
        service.validator_for("vibe-generation"),
        images=[image.to_image() for image in request.images],
        cache_key=cache_key,
    )


async def analyze_profile(service: GenerationService, request: AnalyzerRequest) -> GenerationResponse:
    prompt = render_template("profile-analyzer", request.to_template_input(exclude={"user_id", "images", "image_hash"}))
    city = request.environment_context.city if request.environment_context else "no-location"
    cache_key = make_cache_key(
        "analyzer",
        request.user_id,
        request.image_hash,
        len(request.images),
        ",".join(sorted(request.hint_tags)),
        city,
    )
    return await service.perform(
        "profile-analyzer",
        prompt,
        service.validator_for("profile-analyzer"),
        images=[image.to_image() for image in request.images],
        cache_key=cache_key,
    )


async def evaluate_compatibility(service: GenerationService, request: CompatibilityRequest) -> GenerationResponse:
    prompt = render_template("compatibility", request.to_template_input())
    return await service.perform(
        "compatibility",
        prompt,
        service.validator_for("compatibility"),
        cache_key=pair_cache_key("compat", request.profile_a.user_id, request.profile_b.user_id),
    )


def _requires_indoor(request: MatchMissionRequest) -> bool:
    # With no indoor candidate at all, rain cannot be honoured; any candidate will do.
    return request.is_raining and any(place.is_indoor for place in request.place_candidates)


def mission_validator(request: MatchMissionRequest) -> Validator[MissionPlanResult]:
    """Schema check plus: the venue is a candidate, and rain means indoors when an indoor candidate exists."""
    requires_indoor = _requires_indoor(request)
    validate_schema = schema_validator(MissionPlanResult)
    candidates = {place.place_id: place for place in request.place_candidates}

    def validate(value: Any) -> MissionPlanResult:
        plan = validate_schema(value)
        place = candidates.get(plan.mission.location_id)
        if place is None:
            raise ValidationError(
                f"mission.location_id '{plan.mission.location_id}' is not one of the place candidates"
            )
        if requires_indoor and not place.is_indoor:
            raise ValidationError(f"It is raining but '{place.name}' is not an indoor place")
        return plan

    return validate


def _fallback_location(request: MatchMissionRequest) -> str:
    if _requires_indoor(request):
        for place in request.place_candidates:
            if place.is_indoor:
                return place.place_id
    return request.place_candidates[0].place_id


async def plan_match_mission(service: GenerationService, request: MatchMissionRequest) -> GenerationResponse:
    prompt = render_template("match-mission", request.to_template_input())
    ids = sorted((request.profile_a.user_id, request.profile_b.user_id))
    weather = request.environment_context.weather.condition if request.is_raining else "Clear"
    cache_key = make_cache_key(
        "mission", *ids, ",".join(sorted(p.place_id for p in request.place_candidates)), weather
    )
    response = await service.perform("match-mission", prompt, mission_validator(request), cache_key=cache_key)
    if response.meta.used_fallback:
        response.data["mission"]["location_id"] = _fallback_location(request)
    return response


async def verify_identity(service: GenerationService, request: VerifyIdentityRequest) -> GenerationResponse:
    prompt = render_template("verify-identity", {"profile_photo": "image[0]", "fresh_selfie": "image[1]"})
    return await service.perform(
        "verify-identity",
        prompt,
        service.validator_for("verify-identity"),
        images=[request.profile_photo.to_image(), request.fresh_selfie.to_image()],
    )


async def grade_interaction(service: GenerationService, request: GradeInteractionRequest) -> GenerationResponse:
    prompt = render_template("grade-interaction", request.to_template_input(exclude={"user_id"}))
    return await service.perform("grade-interaction", prompt, service.validator_for("grade-interaction"))


async def summarize_user(service: GenerationService, request: UserSummaryRequest) -> GenerationResponse:
    prompt = render_template("user-summary-narrative", request.to_template_input(exclude={"user_id"}))
    return await service.perform(
        "user-summary-narrative", prompt, service.validator_for("user-summary-narrative")
    )


async def suggest_realtime(service: GenerationService, request: RealtimeCoachRequest) -> GenerationResponse:
    prompt = render_template("realtime-coach", request.to_template_input(exclude={"frame", "mime_type"}))
    return await service.perform(
        "realtime-coach",
        prompt,
        service.validator_for("realtime-coach"),
        images=[request.to_image()],
    )


def _prompt_key(service: GenerationService, prompt: str, parse_json: bool) -> str:
    # Text and JSON results for the same prompt are stored under different keys.
    model = service.engine.client.model
    return prompt_cache_key(prompt, model if parse_json else f"{model}|text")


async def _run_prompt(
    service: GenerationService, use_case: str, prompt: str, parse_json: bool, cache: bool
) -> GenerationResponse:
    cache_key = _prompt_key(service, prompt, parse_json) if cache else None
    if not parse_json:
        return await service.perform_text(use_case, prompt, cache_key=cache_key)
    return await service.perform(use_case, prompt, service.validator_for(use_case), cache_key=cache_key)


async def run_template(service: GenerationService, request: TemplateRunRequest) -> GenerationResponse:
    """Render any registered template and generate against its schema, if it has one."""
    template = get_template(request.template)
    prompt = template(request.input, request.context)
    return await _run_prompt(service, template.name, prompt, request.parse_json, request.cache)


async def run_raw_prompt(service: GenerationService, request: RawPromptRequest) -> GenerationResponse:
    """Format a caller-built prompt and generate from it. Structured output accepts any JSON."""
    prompt = format_prompt(request.to_prompt_spec())
    return await _run_prompt(service, "raw-prompt", prompt, request.parse_json, request.cache)
