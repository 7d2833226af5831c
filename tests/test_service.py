"""Tests for the caller boundary: cache, generation, fallback, use-case wiring."""

import asyncio
import json
import os
from unittest.mock import AsyncMock, patch

import pytest

from vibeprompt.cache import FileResponseCache, pair_cache_key
from vibeprompt.engine import StructuredGenerationEngine
from vibeprompt.errors import GenerationExhaustedError
from vibeprompt.fallbacks import FALLBACKS, REALTIME_COACH_FALLBACK, get_fallback
from vibeprompt.inputs import (
    AnalyzerRequest,
    CompatibilityRequest,
    MatchMissionRequest,
    RawPromptRequest,
    RealtimeCoachRequest,
    TemplateRunRequest,
    VibeProfileRequest,
)
from vibeprompt.llm_clients import ClientConfig, GenerativeClient
from vibeprompt.schemas import any_json
from vibeprompt.service import (
    GenerationService,
    analyze_profile,
    evaluate_compatibility,
    generate_vibe_profile,
    plan_match_mission,
    run_raw_prompt,
    run_template,
    suggest_realtime,
)


class CountingClient(GenerativeClient):
    """Replays outputs in order, repeating the last one; calls are AsyncMocks."""

    def __init__(self, outputs, model="test-model"):
        self.config = ClientConfig(model=model)
        self.outputs = list(outputs)
        self.generate_text = AsyncMock(side_effect=self._next)
        self.generate_multimodal = AsyncMock(side_effect=self._next_multimodal)

    async def _next(self, prompt):
        return self.outputs.pop(0) if len(self.outputs) > 1 else self.outputs[0]

    async def _next_multimodal(self, prompt, images):
        return await self._next(prompt)

    async def generate_text(self, prompt):
        return await self._next(prompt)

    async def generate_multimodal(self, prompt, images):
        return await self._next_multimodal(prompt, images)


def _service(outputs, cache=None, max_attempts=2):
    client = CountingClient(outputs)
    engine = StructuredGenerationEngine(client, max_attempts=max_attempts)
    return GenerationService(engine, cache=cache), client


def _run(coro):
    with patch("vibeprompt.engine.asyncio.sleep", new_callable=AsyncMock):
        return asyncio.run(coro)


COMPAT_JSON = json.dumps({
    "score": 0.72,
    "narrative": "Both light up around late-night ideas.",
    "commonGround": ["philosophy"],
    "energyCompatibility": {"description": "Calm meets curious.", "score": 0.7},
    "interestOverlap": {"shared": ["books"], "complementary": ["jazz"]},
    "conversationStarter": "Which book changed your mind about something?",
})


def _profile(user_id, energy="chill"):
    return {"userId": user_id, "vibeName": f"Vibe {user_id}", "energy": energy}


def test_success_returns_data_and_meta():
    service, client = _service([COMPAT_JSON])
    request = CompatibilityRequest.model_validate({"profileA": _profile("u1"), "profileB": _profile("u2")})

    response = _run(evaluate_compatibility(service, request))

    assert response.data["score"] == 0.72
    assert response.meta.cached is False
    assert response.meta.used_fallback is False
    assert response.meta.model == "test-model"
    assert response.meta.attempt_count == 1
    assert client.generate_text.await_count == 1


def test_to_dict_uses_camel_case_meta():
    service, _ = _service([COMPAT_JSON])
    request = CompatibilityRequest.model_validate({"profileA": _profile("u1"), "profileB": _profile("u2")})

    payload = _run(evaluate_compatibility(service, request)).to_dict()

    assert set(payload) == {"data", "meta"}
    assert set(payload["meta"]) == {"cached", "usedFallback", "durationMs", "model", "attemptCount"}


def test_cache_hit_skips_adapter(tmp_path):
    """Second identical request is served from cache without calling the model."""
    cache = FileResponseCache(str(tmp_path))
    service, client = _service([COMPAT_JSON], cache=cache)
    request = CompatibilityRequest.model_validate({"profileA": _profile("u1"), "profileB": _profile("u2")})

    first = _run(evaluate_compatibility(service, request))
    second = _run(evaluate_compatibility(service, request))

    assert first.meta.cached is False
    assert second.meta.cached is True
    assert second.data == first.data
    assert client.generate_text.await_count == 1


def test_compatibility_cache_is_order_independent(tmp_path):
    cache = FileResponseCache(str(tmp_path))
    service, client = _service([COMPAT_JSON], cache=cache)
    forward = CompatibilityRequest.model_validate({"profileA": _profile("u1"), "profileB": _profile("u2")})
    reverse = CompatibilityRequest.model_validate({"profileA": _profile("u2"), "profileB": _profile("u1")})

    _run(evaluate_compatibility(service, forward))
    response = _run(evaluate_compatibility(service, reverse))

    assert response.meta.cached is True
    assert client.generate_text.await_count == 1
    assert asyncio.run(cache.get(pair_cache_key("compat", "u2", "u1"))) is not None


def test_exhaustion_serves_fallback_and_does_not_cache(tmp_path):
    """A fallback is returned with used_fallback=True and the next call tries the model again."""
    cache = FileResponseCache(str(tmp_path))
    service, client = _service(["not json"], cache=cache, max_attempts=2)
    request = CompatibilityRequest.model_validate({"profileA": _profile("u1"), "profileB": _profile("u2")})

    first = _run(evaluate_compatibility(service, request))
    second = _run(evaluate_compatibility(service, request))

    assert first.meta.used_fallback is True
    assert first.meta.cached is False
    assert first.meta.attempt_count == 2
    assert first.data["score"] == 0.5
    assert second.meta.used_fallback is True
    assert client.generate_text.await_count == 4


def test_fallback_copy_is_independent_of_registry():
    service, _ = _service(["not json"])
    request = RealtimeCoachRequest.model_validate({"frame": "A" * 64, "targetVibe": "The Foodie"})

    response = _run(suggest_realtime(service, request))
    response.data["suggestion"] = "mutated"

    assert FALLBACKS["realtime-coach"].value["suggestion"] == REALTIME_COACH_FALLBACK["suggestion"]
    assert REALTIME_COACH_FALLBACK["suggestion"] != "mutated"


def test_no_fallback_propagates_exhaustion():
    service, _ = _service(["not json"])

    with pytest.raises(GenerationExhaustedError):
        _run(service.perform("no-such-use-case", "PROMPT", any_json))


def test_realtime_coach_is_multimodal_and_uncached(tmp_path):
    cache = FileResponseCache(str(tmp_path))
    output = '{"suggestion": "Ask about the coffee.", "visual_cue_detected": "coffee on table", "confidence": 0.8}'
    service, client = _service([output], cache=cache)
    request = RealtimeCoachRequest.model_validate({"frame": "A" * 64, "targetVibe": "The Foodie"})

    _run(suggest_realtime(service, request))
    _run(suggest_realtime(service, request))

    assert client.generate_multimodal.await_count == 2
    assert client.generate_text.await_count == 0
    assert os.listdir(tmp_path) == []


def test_vibe_profile_cache_key_ignores_tag_order(tmp_path):
    cache = FileResponseCache(str(tmp_path))
    output = json.dumps({
        "vibeName": "The Night Owl",
        "vibeSummary": "Lives for late jazz.",
        "energy": "chill",
        "moodTags": ["dreamy"],
        "styleTags": ["vintage"],
        "interestTags": ["jazz"],
    })
    service, client = _service([output], cache=cache)
    image = {"base64": "aGVsbG8=", "mimeType": "image/png"}
    first = VibeProfileRequest.model_validate({"userId": "u1", "images": [image], "hintTags": ["a", "b"]})
    second = VibeProfileRequest.model_validate({"userId": "u1", "images": [image], "hintTags": ["b", "a"]})

    _run(generate_vibe_profile(service, first))
    response = _run(generate_vibe_profile(service, second))

    assert response.meta.cached is True
    assert client.generate_multimodal.await_count == 1


def _mission_request(raining=False):
    return MatchMissionRequest.model_validate({
        "profileA": _profile("u1"),
        "profileB": _profile("u2", "high"),
        "environmentContext": {
            "city": "Da Lat",
            "weather": {"condition": "Rain" if raining else "Clear", "description": "drizzle", "temp": 18},
        },
        "placeCandidates": [
            {"name": "Lake Path", "placeId": "p_out", "district": "D1", "placeType": "park", "isIndoor": False},
            {"name": "Brave Roasters", "placeId": "p_in", "district": "D1", "placeType": "cafe", "isIndoor": True},
        ],
    })


def _mission_json(location_id):
    return json.dumps({
        "mission": {"title": "Walk and Talk", "task": "Loop the lake once.", "location_id": location_id},
        "similarityScore": 0.6,
        "successProbability": 64,
        "narrative": "Easy pace, lots to talk about.",
    })


def test_mission_with_unknown_location_is_retried():
    service, client = _service([_mission_json("nowhere"), _mission_json("p_out")])

    response = _run(plan_match_mission(service, _mission_request()))

    assert response.data["mission"]["location_id"] == "p_out"
    assert response.meta.attempt_count == 2


def test_mission_rain_requires_indoor_place():
    service, _ = _service([_mission_json("p_out"), _mission_json("p_in")])

    response = _run(plan_match_mission(service, _mission_request(raining=True)))

    assert response.data["mission"]["location_id"] == "p_in"
    assert response.meta.attempt_count == 2


def test_mission_fallback_points_at_a_real_candidate():
    service, _ = _service(["not json"])

    response = _run(plan_match_mission(service, _mission_request(raining=True)))

    assert response.meta.used_fallback is True
    assert response.data["mission"]["location_id"] == "p_in"


def test_run_template_validates_against_registered_schema():
    output = '{"summary": "Greeting.", "keyTakeaways": ["hi"], "sentiment": "positive"}'
    service, _ = _service([output])
    request = TemplateRunRequest(template="summarize-text", input={"text": "Hello world"})

    response = _run(run_template(service, request))

    assert response.data["summary"] == "Greeting."
    assert response.data["wordCount"] is None


def test_run_template_without_schema_accepts_any_json():
    service, _ = _service(['{"palette": ["#fff"]}'])
    request = TemplateRunRequest(template="generate-theme-palette", input={"mood": "calm"}, cache=False)

    response = _run(run_template(service, request))

    assert response.data == {"palette": ["#fff"]}


def test_run_template_unknown_name():
    service, _ = _service(["{}"])

    with pytest.raises(ValueError, match="Unknown template 'nope'"):
        _run(run_template(service, TemplateRunRequest(template="nope", input={})))


def test_mission_rain_without_indoor_candidates_accepts_outdoor():
    """When no candidate is indoors, rain cannot be honoured and the first output is kept."""
    request = _mission_request(raining=True)
    request.place_candidates = request.place_candidates[:1]
    service, client = _service([_mission_json("p_out")])

    response = _run(plan_match_mission(service, request))

    assert response.meta.used_fallback is False
    assert response.data["mission"]["location_id"] == "p_out"
    assert client.generate_text.await_count == 1


def _analyzer_request(city):
    return AnalyzerRequest.model_validate({
        "userId": "u1",
        "images": [{"base64": "aGVsbG8=", "mimeType": "image/png"}],
        "imageHash": "hash-1",
        "hintTags": ["coffee"],
        "environmentContext": {"city": city},
    })


def test_analyzer_cache_is_scoped_to_city(tmp_path):
    cache = FileResponseCache(str(tmp_path))
    service, client = _service([json.dumps(get_fallback("profile-analyzer"))], cache=cache)

    _run(analyze_profile(service, _analyzer_request("Paris")))
    second = _run(analyze_profile(service, _analyzer_request("Tokyo")))
    third = _run(analyze_profile(service, _analyzer_request("Tokyo")))

    assert second.meta.cached is False
    assert third.meta.cached is True
    assert client.generate_multimodal.await_count == 2


def test_run_template_plain_text_skips_parsing(tmp_path):
    cache = FileResponseCache(str(tmp_path))
    service, client = _service(["Just a sentence, not JSON."], cache=cache)
    request = TemplateRunRequest.model_validate(
        {"template": "summarize-text", "input": {"text": "Hello"}, "parseJson": False}
    )

    first = _run(run_template(service, request))
    second = _run(run_template(service, request))

    assert first.data == "Just a sentence, not JSON."
    assert first.meta.cached is False
    assert second.data == first.data
    assert second.meta.cached is True
    assert client.generate_text.await_count == 1


def test_text_and_json_runs_use_separate_cache_entries(tmp_path):
    cache = FileResponseCache(str(tmp_path))
    output = '{"palette": ["#fff"]}'
    service, client = _service([output], cache=cache)
    as_text = TemplateRunRequest(template="generate-theme-palette", input={"mood": "calm"}, parse_json=False)
    as_json = TemplateRunRequest(template="generate-theme-palette", input={"mood": "calm"})

    text_response = _run(run_template(service, as_text))
    json_response = _run(run_template(service, as_json))

    assert text_response.data == output
    assert json_response.data == {"palette": ["#fff"]}
    assert json_response.meta.cached is False
    assert client.generate_text.await_count == 2


def _raw_request(**overrides):
    payload = {
        "role": "You are a concise naming assistant.",
        "task": "Name the cafe.",
        "rules": ["One name only"],
        "input": {"vibe": "cozy"},
        "output": {"name": "string"},
        "examples": [{"input": {"vibe": "loud"}, "output": {"name": "The Drum"}}],
    }
    payload.update(overrides)
    return RawPromptRequest.model_validate(payload)


def test_raw_prompt_formats_spec_and_parses_json():
    service, client = _service(['{"name": "Ember"}'])

    response = _run(run_raw_prompt(service, _raw_request()))

    assert response.data == {"name": "Ember"}
    prompt = client.generate_text.await_args.args[0]
    assert prompt.startswith("Role: You are a concise naming assistant.\nTask: Name the cafe.")
    assert "- One name only" in prompt
    assert "The Drum" in prompt


def test_raw_prompt_is_uncached_by_default(tmp_path):
    cache = FileResponseCache(str(tmp_path))
    service, client = _service(['{"name": "Ember"}'], cache=cache)

    _run(run_raw_prompt(service, _raw_request()))
    response = _run(run_raw_prompt(service, _raw_request()))

    assert response.meta.cached is False
    assert client.generate_text.await_count == 2
    assert os.listdir(tmp_path) == []


def test_raw_prompt_plain_text_with_cache(tmp_path):
    cache = FileResponseCache(str(tmp_path))
    service, client = _service(["Ember"], cache=cache)
    request = _raw_request(output="A single cafe name", parseJson=False, cache=True)

    _run(run_raw_prompt(service, request))
    response = _run(run_raw_prompt(service, request))

    assert response.data == "Ember"
    assert response.meta.cached is True
    assert client.generate_text.await_count == 1


def test_raw_prompt_exhaustion_propagates():
    service, _ = _service(["not json"])

    with pytest.raises(GenerationExhaustedError):
        _run(run_raw_prompt(service, _raw_request()))
