"""
Response schemas for every generation use case.

Each schema is a pydantic model; ``schema_validator`` turns one into the
engine's validator contract (returns a typed value or raises
``vibeprompt.errors.ValidationError``).
"""

from __future__ import annotations

from typing import Any, Callable, Literal, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from .errors import ValidationError

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

Validator = Callable[[Any], T]

Energy = Literal["chill", "moderate", "high", "chaotic"]
PredictedStyle = Literal["direct", "playful", "intellectual", "shy", "adventurous"]


# ── Vibe generation ─────────────────────────────────────────────────

class VibeGenerationResult(BaseModel):
    vibeName: str = Field(min_length=1)
    vibeSummary: str = Field(min_length=1)
    energy: Energy
    moodTags: list[str]
    styleTags: list[str]
    interestTags: list[str]


# ── Profile analyzer ────────────────────────────────────────────────

class VibePrediction(BaseModel):
    confidence: float = Field(ge=0.0, le=1.0)
    dominantTrait: str
    secondaryTrait: str
    summary: str
    communicationTips: list[str]


class SuggestedMission(BaseModel):
    title: str = Field(min_length=1)
    description: str
    vibeMatch: float = Field(ge=0.0, le=1.0)
    estimatedCost: str
    duration: str
    placeName: str | None = None
    placeId: str | None = None
    whyThisSpot: str | None = None
    lat: float | None = None
    lng: float | None = None
    icebreakerQuestion: str | None = None
    followUpQuestions: list[str] = Field(default_factory=list)
    topicCues: list[str] = Field(default_factory=list)
    doTips: list[str] = Field(default_factory=list)
    avoidTips: list[str] = Field(default_factory=list)
    bestTimingCue: str | None = None


class AnalyzerResult(BaseModel):
    predictedStyle: PredictedStyle
    vibePrediction: VibePrediction
    conversationOpeners: list[str] = Field(min_length=8, max_length=8)
    suggestedMissions: list[SuggestedMission] = Field(min_length=1, max_length=3)


# ── Compatibility ───────────────────────────────────────────────────

class EnergyCompatibility(BaseModel):
    description: str
    score: float = Field(ge=0.0, le=1.0)


class InterestOverlap(BaseModel):
    shared: list[str]
    complementary: list[str]


class CompatibilityResult(BaseModel):
    score: float = Field(ge=0.0, le=1.0)
    narrative: str = Field(min_length=1)
    commonGround: list[str]
    energyCompatibility: EnergyCompatibility
    interestOverlap: InterestOverlap
    conversationStarter: str


# ── Match mission ───────────────────────────────────────────────────

class Mission(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1)
    task: str = Field(min_length=1)
    location_id: str = Field(min_length=1)


class MissionPlanResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    mission: Mission
    similarityScore: float = Field(ge=0.0, le=1.0)
    successProbability: int = Field(ge=0, le=100)
    narrative: str = Field(min_length=1)


# ── Identity verification ───────────────────────────────────────────

class VerificationIdentityResult(BaseModel):
    is_match: bool
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str = Field(min_length=1)


# ── Practice grading ────────────────────────────────────────────────

class SkillMetrics(BaseModel):
    model_config = ConfigDict(extra="forbid")

    initiation_delta: int = Field(ge=-20, le=20)
    empathy_delta: int = Field(ge=-20, le=20)
    planning_delta: int = Field(ge=-20, le=20)
    consistency_delta: int = Field(ge=-20, le=20)


class InteractionGradeResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    siq_delta: int = Field(ge=-80, le=80)
    feedback_summary: str = Field(min_length=24, max_length=700)
    skill_metrics: SkillMetrics


class UserSummaryNarrativeResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    narrative: str = Field(min_length=20, max_length=320)


# ── Realtime coach ──────────────────────────────────────────────────

class RealtimeCoachResult(BaseModel):
    suggestion: str = Field(min_length=1)
    visual_cue_detected: str = Field(min_length=1)
    confidence: float = Field(ge=0.0, le=1.0)


# ── General templates ───────────────────────────────────────────────

class SummaryResult(BaseModel):
    summary: str = Field(min_length=1)
    keyTakeaways: list[str]
    sentiment: Literal["positive", "neutral", "negative"]
    wordCount: int | None = None


def schema_validator(model: type[M]) -> Validator[M]:
    """Adapt a pydantic model into a validator raising vibeprompt's ValidationError."""

    def validate(value: Any) -> M:
        try:
            return model.model_validate(value)
        except pydantic.ValidationError as exc:
            raise ValidationError(
                f"Output does not match {model.__name__}: {exc.error_count()} error(s)",
                details=exc.errors(include_url=False),
            ) from exc

    validate.__name__ = f"validate_{model.__name__}"
    return validate


def any_json(value: Any) -> Any:
    """Validator for templates without a fixed schema: any parsed JSON passes."""
    return value
