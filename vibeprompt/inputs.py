"""
Typed request models for each generation use case.

Field names are snake_case in Python and camelCase on the wire, so payloads
from JSON clients validate as-is and ``to_template_input`` hands templates
the camelCase shape their prompts describe.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .llm_clients import ALLOWED_IMAGE_MIME_TYPES, ImageInput
from .prompt_formatter import PromptExample, PromptSpec

Energy = Literal["chill", "moderate", "high", "chaotic"]


class RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_template_input(self, exclude: set[str] | None = None) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude=exclude, exclude_none=True)


class ImagePayload(RequestModel):
    base64_data: str = Field(min_length=1, alias="base64")
    mime_type: str

    def to_image(self) -> ImageInput:
        return ImageInput(base64_data=self.base64_data, mime_type=self.mime_type)

    @field_validator("mime_type")
    @classmethod
    def check_mime_type(cls, value: str) -> str:
        if value not in ALLOWED_IMAGE_MIME_TYPES:
            allowed = ", ".join(sorted(ALLOWED_IMAGE_MIME_TYPES))
            raise ValueError(f"mimeType must be one of {allowed}")
        return value


class ProfileSummary(RequestModel):
    user_id: str = Field(min_length=1)
    vibe_name: str = Field(min_length=1)
    vibe_summary: str | None = None
    energy: Energy
    mood_tags: list[str] = Field(default_factory=list)
    style_tags: list[str] = Field(default_factory=list)
    interest_tags: list[str] = Field(default_factory=list)


class VibeProfileRequest(RequestModel):
    user_id: str = Field(min_length=1)
    images: list[ImagePayload] = Field(min_length=1, max_length=10)
    hint_tags: list[str] = Field(default_factory=list, max_length=10)
    extra_context: str = Field(default="", max_length=500)
    photo_urls: list[str] = Field(default_factory=list)


class NearbyPlace(RequestModel):
    name: str
    place_id: str
    vicinity: str
    rating: float | None = None
    types: list[str] = Field(default_factory=list)
    lat: float | None = None
    lng: float | None = None


class AnalyzerWeather(RequestModel):
    temp: float
    feels_like: float
    description: str
    humidity: float
    wind_speed: float


class AnalyzerEnvironment(RequestModel):
    city: str
    weather: AnalyzerWeather | None = None
    nearby_places: list[NearbyPlace] = Field(default_factory=list)


class AnalyzerRequest(RequestModel):
    user_id: str = Field(min_length=1)
    images: list[ImagePayload] = Field(min_length=1, max_length=10)
    image_hash: str = Field(min_length=1)
    hint_tags: list[str] = Field(default_factory=list, max_length=20)
    environment_context: AnalyzerEnvironment | None = None


class CompatibilityRequest(RequestModel):
    profile_a: ProfileSummary
    profile_b: ProfileSummary


class PlaceCandidate(RequestModel):
    name: str = Field(min_length=1)
    place_id: str = Field(min_length=1)
    district: str = Field(min_length=1)
    place_type: str = Field(min_length=1)
    types: list[str] = Field(default_factory=list)
    is_indoor: bool


class MatchWeather(RequestModel):
    condition: Literal["Rain", "Clear"]
    description: str = Field(min_length=1)
    temp: float


class MatchEnvironment(RequestModel):
    city: str = Field(min_length=1)
    weather: MatchWeather | None = None


class MatchMissionRequest(RequestModel):
    profile_a: ProfileSummary
    profile_b: ProfileSummary
    vector_similarity: float | None = Field(default=None, ge=0.0, le=1.0)
    environment_context: MatchEnvironment | None = None
    place_candidates: list[PlaceCandidate] = Field(min_length=1, max_length=5)

    @property
    def is_raining(self) -> bool:
        env = self.environment_context
        return bool(env and env.weather and env.weather.condition == "Rain")


class VerifyIdentityRequest(RequestModel):
    profile_photo: ImagePayload
    fresh_selfie: ImagePayload


class TranscriptTurn(RequestModel):
    role: Literal["me", "partner"]
    text: str = Field(min_length=1, max_length=500)


class TargetVibe(RequestModel):
    label: str = Field(min_length=2, max_length=80)
    interests: list[str] = Field(default_factory=list, max_length=10)


class MissionContext(RequestModel):
    mission_type: Literal["solo_practice", "live_quest"] | None = None
    mission_title: str | None = Field(default=None, max_length=120)


class GradeInteractionRequest(RequestModel):
    user_id: str = Field(min_length=1)
    transcript: list[TranscriptTurn] = Field(min_length=2, max_length=80)
    target_vibe: TargetVibe
    mission_context: MissionContext | None = None


class UserSummaryRequest(RequestModel):
    user_id: str = Field(min_length=1)
    vibe_label: str = Field(min_length=2, max_length=100)
    interests: str = ""
    siq_score: int = Field(ge=0, le=1000)
    initiation: int = Field(ge=0, le=100)
    empathy: int = Field(ge=0, le=100)
    planning: int = Field(ge=0, le=100)
    consistency: int = Field(ge=0, le=100)


class RealtimeCoachRequest(RequestModel):
    frame: str = Field(min_length=32, max_length=4_000_000)
    mime_type: str = "image/jpeg"
    target_vibe: str = Field(min_length=1, max_length=120)
    current_topic: str = Field(default="", max_length=200)
    language: str = Field(default="Respond in English.", max_length=100)

    def to_image(self) -> ImageInput:
        return ImageInput(base64_data=self.frame, mime_type=self.mime_type)


class TemplateRunRequest(RequestModel):
    template: str = Field(min_length=1)
    input: dict[str, Any]
    context: dict[str, Any] | None = None
    parse_json: bool = True
    cache: bool = True


class RawExample(RequestModel):
    input: dict[str, Any]
    output: Any = None


class RawPromptRequest(RequestModel):
    role: str = Field(min_length=1)
    task: str = Field(min_length=1)
    rules: list[str] = Field(default_factory=list)
    input: dict[str, Any]
    output: dict[str, Any] | str
    context: dict[str, Any] | None = None
    examples: list[RawExample] = Field(default_factory=list)
    parse_json: bool = True
    cache: bool = False

    def to_prompt_spec(self) -> PromptSpec:
        return PromptSpec(
            role=self.role,
            task=self.task,
            rules=tuple(self.rules),
            input=self.input,
            output=self.output,
            context=self.context,
            examples=tuple(PromptExample(example.input, example.output) for example in self.examples),
        )
