"""
Free-form coaching templates.

These are assembled directly instead of through the formatter because the
transcript and skill readouts read better as plain lines than as JSON, but
they keep the same Role / Task / Rules / Input / Output order.
"""

from typing import Any

from .base import PromptTemplate


def _join_lines(sections: list[str]) -> str:
    return "\n".join(sections).strip()


def _interests(value: Any, limit: int = 8) -> list[str]:
    """Accept a comma-separated string or a list; trim, drop blanks, cap."""
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value or [])
    return [item.strip() for item in items if item and item.strip()][:limit]


# ── Interaction grading ─────────────────────────────────────────────

GRADE_INTERACTION_TASK = "Evaluate this practice conversation for social intelligence."


def render_grade_interaction(input: dict, context: dict | None = None) -> str:
    target = input.get("targetVibe") or {}
    mission = input.get("missionContext") or {}
    transcript = "\n".join(
        f"{i}. {turn['role'].upper()}: {turn['text']}"
        for i, turn in enumerate(input.get("transcript", []), start=1)
    )
    interests = ", ".join(_interests(target.get("interests"), limit=10)) or "not provided"

    return _join_lines([
        "Role: SIQ evaluator for a dating academy — supportive, academic, playful, and Valentine-themed.",
        f"Task: {GRADE_INTERACTION_TASK}",
        "",
        "Rules:",
        "- Return ONLY valid JSON",
        "- Stay constructive and coach-like (never shaming)",
        "- Keep feedback specific and actionable in 2-4 sentences",
        "- skill_metrics deltas should reflect transcript quality and stay realistic",
        "- siq_delta should roughly align with sum of skill deltas, but can be adjusted for overall performance",
        "- Scoring rubric: initiation (opening confidence, momentum, clear next step); "
        "empathy (emotional mirroring, curiosity, response quality); "
        "planning (concrete suggestion quality, feasibility, timing); "
        "consistency (tone stability, coherence, respectful pacing)",
        "",
        "Input:",
        f"- Target vibe label: {target.get('label', 'unknown')}",
        f"- Target interests: {interests}",
        f"- Mission type: {mission.get('missionType') or 'solo_practice'}",
        f"- Mission title: {mission.get('missionTitle') or 'Practice Chat'}",
        "",
        "Transcript:",
        transcript,
        "",
        "Output (JSON):",
        "{",
        '  "siq_delta": number,',
        '  "feedback_summary": string,',
        '  "skill_metrics": {',
        '    "initiation_delta": number,',
        '    "empathy_delta": number,',
        '    "planning_delta": number,',
        '    "consistency_delta": number',
        "  }",
        "}",
    ])


GRADE_INTERACTION = PromptTemplate(
    name="grade-interaction",
    task=GRADE_INTERACTION_TASK,
    description="SIQ delta and skill deltas for a practice chat transcript",
    render=render_grade_interaction,
    sample_input={
        "transcript": [
            {"role": "me", "text": "Your trail photos are unreal, where was the waterfall one?"},
            {"role": "partner", "text": "Haha thanks! That's Datanla, near Da Lat."},
        ],
        "targetVibe": {"label": "The Sunset Chaser", "interests": ["hiking", "photography"]},
    },
)


# ── User summary narrative ──────────────────────────────────────────

USER_SUMMARY_TASK = 'Write exactly 2 sentences that feel like a personalized "Love Report" summary.'


def render_user_summary(input: dict, context: dict | None = None) -> str:
    interests = ", ".join(_interests(input.get("interests"))) or "not provided"
    return _join_lines([
        "Role: Persona narrator for a dating academy. Tone must be supportive, witty, and academically playful.",
        f"Task: {USER_SUMMARY_TASK}",
        "",
        "Rules:",
        "- Exactly 2 sentences.",
        "- Mention one current strength and one growth edge.",
        "- Keep it uplifting and action-oriented.",
        "- No markdown, no bullet points.",
        "",
        "Input:",
        f"- Vibe label: {input.get('vibeLabel', '')}",
        f"- Interests: {interests}",
        f"- SIQ score: {input.get('siqScore', 0)}/1000",
        (
            f"- Skill levels: initiation {input.get('initiation', 0)}, "
            f"empathy {input.get('empathy', 0)}, planning {input.get('planning', 0)}, "
            f"consistency {input.get('consistency', 0)}"
        ),
        "",
        "Output (JSON):",
        '{ "narrative": "..." }',
    ])


USER_SUMMARY_NARRATIVE = PromptTemplate(
    name="user-summary-narrative",
    task=USER_SUMMARY_TASK,
    description="Two-sentence Love Report from SIQ score and skill levels",
    render=render_user_summary,
    sample_input={
        "vibeLabel": "The Urban Minimalist",
        "interests": "coffee, film photography, vinyl",
        "siqScore": 640,
        "initiation": 55,
        "empathy": 72,
        "planning": 40,
        "consistency": 61,
    },
)


# ── Realtime coach ──────────────────────────────────────────────────

REALTIME_COACH_TASK = "Analyze the camera frame and infer immediate social cues from person/environment."


def render_realtime_coach(input: dict, context: dict | None = None) -> str:
    topic = input.get("currentTopic") or "not provided"
    return _join_lines([
        "Role: Live dating coach with a warm, supportive wingman tone.",
        f"Task: {REALTIME_COACH_TASK}",
        "",
        "Rules:",
        "- Output STRICT JSON only with keys: suggestion, visual_cue_detected, confidence.",
        "- suggestion: one sentence the user can say right now, natural and specific. Must be in the specified language.",
        "- visual_cue_detected: short cue such as smiling, coffee on table, eye contact, posture.",
        "- confidence: number from 0 to 1.",
        "",
        "Input:",
        f"- Target vibe profile: {input.get('targetVibe', '')}",
        f"- Current topic in conversation: {topic}",
        f"- Language: {input.get('language') or 'Respond in English.'}",
        "",
        "Output (JSON):",
        '{ "suggestion": string, "visual_cue_detected": string, "confidence": number }',
    ])


REALTIME_COACH = PromptTemplate(
    name="realtime-coach",
    task=REALTIME_COACH_TASK,
    description="One-line live suggestion from a single camera frame",
    render=render_realtime_coach,
    sample_input={"targetVibe": "The High-Energy Foodie", "currentTopic": "street food"},
)


COACHING_TEMPLATES = (
    GRADE_INTERACTION,
    USER_SUMMARY_NARRATIVE,
    REALTIME_COACH,
)
