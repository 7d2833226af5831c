"""
Canned responses served when structured generation is exhausted.

Every value here validates against the schema it is registered with, so a
caller always receives data with the same shape as a real generation.
"""

import copy
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel

from .schemas import (
    AnalyzerResult,
    CompatibilityResult,
    InteractionGradeResult,
    MissionPlanResult,
    RealtimeCoachResult,
    SummaryResult,
    UserSummaryNarrativeResult,
    VerificationIdentityResult,
    VibeGenerationResult,
)


@dataclass(frozen=True)
class FallbackEntry:
    schema: type[BaseModel]
    value: Mapping[str, Any]


VIBE_GENERATION_FALLBACK = {
    "vibeName": "The Undiscovered",
    "vibeSummary": (
        "A mystery wrapped in potential. Your vibe is still loading. "
        "Try again and let the AI get a better read on your energy."
    ),
    "energy": "moderate",
    "moodTags": ["curious", "open"],
    "styleTags": ["eclectic"],
    "interestTags": ["exploring", "self-discovery"],
}

ANALYZER_FALLBACK = {
    "predictedStyle": "playful",
    "vibePrediction": {
        "confidence": 0.0,
        "dominantTrait": "unknown",
        "secondaryTrait": "unknown",
        "summary": (
            "The AI couldn't get a clear read this time. Try with a clearer "
            "screenshot or add more hint tags for better results."
        ),
        "communicationTips": [
            "Start with something light and observational",
            "Ask about something visible in their profile",
            "Keep it casual and genuine",
        ],
    },
    "conversationOpeners": [
        "What's the story behind your profile pic? I'm genuinely curious.",
        "Okay, I'm skipping 'hey'. What's the best thing that happened to you this week?",
        "If we had to pick a random activity right now, what are you hoping I say?",
        "What's one underrated place in your city you think more people should know?",
        "You get one spontaneous plan this weekend. What are we doing?",
        "What's your ideal first-date energy: cozy, playful, or a little chaotic?",
        "What's something people misunderstand about you from first impressions?",
        "What topic can you talk about for hours without getting bored?",
    ],
    "suggestedMissions": [
        {
            "title": "The Getting-to-Know-You Walk",
            "description": (
                "Pick a neighborhood neither of you knows. Walk, talk, and stop "
                "wherever looks interesting. No agenda, just vibes."
            ),
            "vibeMatch": 0.5,
            "estimatedCost": "Free",
            "duration": "1-2 hours",
            "icebreakerQuestion": "If we did this walk today, what kind of neighborhood vibe would you pick first?",
            "followUpQuestions": [
                "What kind of places make you instantly feel at home?",
                "Are you more spontaneous or do you secretly love a plan?",
            ],
            "topicCues": ["Neighborhood vibes", "Favorite local spots", "Weekend rituals"],
            "doTips": ["Keep it light and curious", "Offer two easy route options"],
            "avoidTips": ["Avoid over-planning every stop"],
            "bestTimingCue": "Suggest this after a few playful messages when both of you mention free time.",
        },
        {
            "title": "Coffee Roulette",
            "description": (
                "Each of you picks a random café, and you let a coin flip decide. "
                "Loser's pick, winner buys."
            ),
            "vibeMatch": 0.45,
            "estimatedCost": "$5-$15",
            "duration": "1-2 hours",
            "icebreakerQuestion": "What's your non-negotiable coffee order, and should I trust it?",
            "followUpQuestions": [
                "What café atmosphere helps you open up fastest?",
                "Are you team deep-talk coffee or quick espresso and chaos?",
            ],
            "topicCues": ["Coffee preferences", "Mood-setting places", "Playful bets"],
            "doTips": ["Frame it as fun, not high-stakes", "Keep the plan simple and specific"],
            "avoidTips": ["Avoid debating logistics too long"],
            "bestTimingCue": "Use when banter is already flowing and you want a low-pressure meetup.",
        },
        {
            "title": "Sunset & Snacks",
            "description": (
                "Grab street food or convenience store snacks, find a rooftop or "
                "park bench, and watch the sunset. Keep it simple."
            ),
            "vibeMatch": 0.5,
            "estimatedCost": "$5-$10",
            "duration": "1-2 hours",
            "icebreakerQuestion": "What's your go-to sunset snack combo that would instantly win me over?",
            "followUpQuestions": [
                "Are you more rooftop views or park-bench people watching?",
                "What kind of conversation do you love during golden hour?",
            ],
            "topicCues": ["Comfort foods", "Golden-hour spots", "Low-pressure first dates"],
            "doTips": ["Mention a specific time window", "Keep backup indoor option in mind"],
            "avoidTips": ["Avoid making it sound too romantic too soon"],
            "bestTimingCue": "Best after you both share evening routines or favorite city views.",
        },
    ],
}

COMPATIBILITY_FALLBACK = {
    "score": 0.5,
    "narrative": (
        "The AI couldn't fully analyze the compatibility right now, but that doesn't "
        "mean there isn't something there. Sometimes the best connections defy algorithms."
    ),
    "commonGround": ["You both showed up. That's a start!"],
    "energyCompatibility": {
        "description": "Energy compatibility couldn't be determined. Give it a shot and find out!",
        "score": 0.5,
    },
    "interestOverlap": {"shared": [], "complementary": []},
    "conversationStarter": (
        "You both swiped right on life. What's the most random thing you've said yes to recently?"
    ),
}

# location_id is a sentinel; callers replace it with a real candidate id.
MATCH_MISSION_FALLBACK = {
    "mission": {
        "title": "Coffee and a Question",
        "task": "Meet for a coffee and each share one thing you'd never put on a profile.",
        "location_id": "fallback",
    },
    "similarityScore": 0.5,
    "successProbability": 50,
    "narrative": "We couldn't tailor a mission this time, so here's a low-pressure classic that works for most pairs.",
}

VERIFY_IDENTITY_FALLBACK = {
    "is_match": False,
    "confidence": 0.0,
    "reasoning": "Automatic verification is temporarily unavailable. Please retry or request manual review.",
}

GRADE_INTERACTION_FALLBACK = {
    "siq_delta": 0,
    "feedback_summary": (
        "We couldn't grade this session right now. Your progress is unchanged; "
        "try another practice round in a moment."
    ),
    "skill_metrics": {
        "initiation_delta": 0,
        "empathy_delta": 0,
        "planning_delta": 0,
        "consistency_delta": 0,
    },
}

USER_SUMMARY_NARRATIVE_FALLBACK = {
    "narrative": "A curious, open-minded person who is still writing their story. Say hi and find out more.",
}

REALTIME_COACH_FALLBACK = {
    "suggestion": "Try this: 'I like your energy. What's been the highlight of your day so far?'",
    "visual_cue_detected": "LLM temporarily unavailable; using safe fallback",
    "confidence": 0.45,
}

SUMMARIZE_TEXT_FALLBACK = {
    "summary": "A summary is not available right now. Please try again shortly.",
    "keyTakeaways": [],
    "sentiment": "neutral",
    "wordCount": None,
}


FALLBACKS: Mapping[str, FallbackEntry] = MappingProxyType({
    "vibe-generation": FallbackEntry(VibeGenerationResult, VIBE_GENERATION_FALLBACK),
    "profile-analyzer": FallbackEntry(AnalyzerResult, ANALYZER_FALLBACK),
    "compatibility": FallbackEntry(CompatibilityResult, COMPATIBILITY_FALLBACK),
    "match-mission": FallbackEntry(MissionPlanResult, MATCH_MISSION_FALLBACK),
    "verify-identity": FallbackEntry(VerificationIdentityResult, VERIFY_IDENTITY_FALLBACK),
    "grade-interaction": FallbackEntry(InteractionGradeResult, GRADE_INTERACTION_FALLBACK),
    "user-summary-narrative": FallbackEntry(UserSummaryNarrativeResult, USER_SUMMARY_NARRATIVE_FALLBACK),
    "realtime-coach": FallbackEntry(RealtimeCoachResult, REALTIME_COACH_FALLBACK),
    "summarize-text": FallbackEntry(SummaryResult, SUMMARIZE_TEXT_FALLBACK),
})


def get_fallback(use_case: str, registry: Mapping[str, FallbackEntry] = FALLBACKS) -> dict | None:
    """Fresh copy of the fallback for ``use_case``, or None if none is registered."""
    entry = registry.get(use_case)
    if entry is None:
        return None
    return copy.deepcopy(dict(entry.value))
