"""
Vibe pipeline templates.

1. Vibe Generation: photos + hint tags -> Vibe Card (multimodal)
2. Profile Analyzer: profile screenshots -> tactical advice (multimodal)
3. Compatibility: two profiles -> score and synergy narrative
4. Match Mission: two profiles + candidate venues -> one date mission
5. Identity Verification: profile photo + fresh selfie -> match verdict (multimodal)
"""

from ..prompt_formatter import PromptExample, create_prompt_template
from .base import PromptTemplate

JSON_ONLY = "Return ONLY valid JSON — no markdown, no explanation, no preamble"


# ── Vibe Generation ─────────────────────────────────────────────────

VIBE_GENERATION_TASK = (
    "Analyze the provided images along with optional hint tags and extra context "
    "to generate a high-fidelity 'Vibe Card' — a creative personality profile that "
    "goes far beyond a typical bio."
)

VIBE_GENERATION = PromptTemplate(
    name="vibe-generation",
    task=VIBE_GENERATION_TASK,
    description="Vibe Card from 1-10 photos, hint tags and free-text context",
    render=create_prompt_template(
        role=(
            "Expert personality analyst and creative branding strategist for a dating "
            "platform. You read visual cues from photos (clothing, scenery, lighting, "
            "body language) and synthesize them with user-provided hint tags and "
            "free-text context to create authentic, appealing dating profiles."
        ),
        task=VIBE_GENERATION_TASK,
        rules=[
            JSON_ONLY,
            "vibeName must be a creative 2-4 word title (e.g., 'The Urban Minimalist', 'The High-Energy Foodie')",
            "vibeSummary must be exactly 2 sentences — punchy, specific, and personality-driven",
            "energy must be exactly one of: 'chill', 'moderate', 'high', 'chaotic'",
            "moodTags: 3-5 single-word or hyphenated mood descriptors",
            "styleTags: 3-5 aesthetic/style descriptors derived from the photos",
            "interestTags: 4-6 specific interest keywords inferred from photos + hint tags + extra context",
            "If hint tags are provided, use them as strong signals for interests and lifestyle",
            "If extra context is provided, weave it naturally into the vibe summary and tags",
            "Even with no hint tags or context, photos alone should produce a compelling vibe",
            "Avoid generic descriptors — be specific and vivid",
        ],
        output={
            "vibeName": "string — creative 2-4 word vibe title",
            "vibeSummary": "string — exactly 2 punchy sentences",
            "energy": "chill | moderate | high | chaotic",
            "moodTags": ["string — 3-5 mood descriptors"],
            "styleTags": ["string — 3-5 aesthetic descriptors from photos"],
            "interestTags": ["string — 4-6 specific interests"],
        },
        examples=[
            PromptExample(
                input={
                    "hintTags": ["coffee-lover", "indie-music", "minimalist", "film-photography"],
                    "extraContext": "I spend most weekends exploring new cafés and shooting on my Contax T2.",
                },
                output={
                    "vibeName": "The Urban Minimalist",
                    "vibeSummary": (
                        "Clean lines, quiet cafés, and a perfectly curated playlist. You move "
                        "through the city like a well-edited film — intentional and effortlessly cool."
                    ),
                    "energy": "chill",
                    "moodTags": ["calm", "introspective", "content"],
                    "styleTags": ["minimalist", "monochrome", "clean"],
                    "interestTags": ["architecture", "specialty coffee", "vinyl records", "film photography"],
                },
            ),
        ],
    ),
    sample_input={"hintTags": ["bookworm", "night-owl"], "extraContext": "Jazz bars on Fridays."},
)


# ── Profile Analyzer ────────────────────────────────────────────────

PROFILE_ANALYZER_TASK = (
    "Analyze the provided 1-10 screenshots of a person's dating profile and generate "
    "tactical advice: a communication style prediction, exactly 8 context-aware "
    "conversation openers, and 3 gamified date ideas ('missions') with conversation scaffolding."
)

PROFILE_ANALYZER = PromptTemplate(
    name="profile-analyzer",
    task=PROFILE_ANALYZER_TASK,
    description="Tactical advice from dating-profile screenshots",
    render=create_prompt_template(
        role=(
            "Expert dating coach and behavioral psychologist specializing in digital "
            "communication patterns. You read personality cues from dating app "
            "screenshots and give tactical, specific advice. When location and weather "
            "context are available, you craft date ideas around the real environment."
        ),
        task=PROFILE_ANALYZER_TASK,
        rules=[
            JSON_ONLY,
            "predictedStyle must be exactly one of: 'direct', 'playful', 'intellectual', 'shy', 'adventurous'",
            "vibePrediction must include confidence (0.0 - 1.0), dominantTrait, secondaryTrait, summary and communicationTips",
            "conversationOpeners must be an array of exactly 8 strings — specific, non-boring, contextual to the profile",
            "Generate an array of exactly 3 suggestedMissions — each a unique gamified date idea",
            "Each suggestedMission must include: icebreakerQuestion, followUpQuestions (2-3), topicCues (2-4), doTips (2-3), avoidTips (1-2), and bestTimingCue",
            "estimatedCost must be a price range string like 'Free', '$10-$20', '$30-$50', '$50-$100', or '$100+'",
            "Keep all text concise: each opener/question/tip should be one sentence, preferably under 120 characters",
            "Do NOT use generic openers like 'Hey' or 'What's up'",
            "If multiple images are provided, cross-reference visual cues across all photos",
            "If weather data is in the context, factor it into date suggestions",
            "If nearbyPlaces are in the context, reference REAL venue names and fill placeName, placeId, whyThisSpot, lat and lng",
            "Without environmental context, generate location-agnostic suggestions",
        ],
        output={
            "predictedStyle": "direct | playful | intellectual | shy | adventurous",
            "vibePrediction": {
                "confidence": "number 0.0-1.0",
                "dominantTrait": "string — primary personality trait",
                "secondaryTrait": "string — secondary trait",
                "summary": "string — 2-sentence personality read",
                "communicationTips": ["string — 3 actionable communication tips"],
            },
            "conversationOpeners": ["string — 8 specific, context-aware conversation starters"],
            "suggestedMissions": [
                {
                    "title": "string — fun, gamified date idea title",
                    "description": "string — 2-sentence date plan",
                    "vibeMatch": "number 0.0-1.0",
                    "estimatedCost": "string — price range",
                    "duration": "string — estimated duration",
                    "placeName": "string | null",
                    "placeId": "string | null",
                    "whyThisSpot": "string | null",
                    "lat": "number | null",
                    "lng": "number | null",
                    "icebreakerQuestion": "string",
                    "followUpQuestions": ["string"],
                    "topicCues": ["string"],
                    "doTips": ["string"],
                    "avoidTips": ["string"],
                    "bestTimingCue": "string",
                }
            ],
        },
    ),
    sample_input={"hintTags": ["University student", "Loves hiking"]},
)


# ── Compatibility ───────────────────────────────────────────────────

COMPATIBILITY_TASK = (
    "Compare two user profiles and generate a compatibility assessment. Find genuine "
    "synergy — not just surface similarities."
)

COMPATIBILITY = PromptTemplate(
    name="compatibility",
    task=COMPATIBILITY_TASK,
    description="Compatibility score and synergy narrative for two vibe profiles",
    render=create_prompt_template(
        role=(
            "Expert relationship compatibility analyst. You find genuine connection "
            "points between two people based on their vibe profiles, interests, and "
            "communication styles, and write narratives that make people excited to meet."
        ),
        task=COMPATIBILITY_TASK,
        rules=[
            JSON_ONLY,
            "score must be a float between 0.0 and 1.0 — be honest, not everyone is compatible",
            "narrative should be 2-3 sentences and feel personal, not formulaic",
            "commonGround must list 3-5 specific shared traits or complementary qualities",
            "If score < 0.7, narrative should still be encouraging but realistic",
            "Consider complementary traits (e.g., 'chill' + 'chaotic' can work) — not just identical ones",
            "Factor in energy levels, interests, communication styles, and lifestyle compatibility",
        ],
        output={
            "score": "number 0.0-1.0 — overall compatibility score",
            "narrative": "string — 2-3 sentence synergy narrative explaining the match",
            "commonGround": ["string — 3-5 specific shared or complementary traits"],
            "energyCompatibility": {
                "description": "string — how their energy levels interact",
                "score": "number 0.0-1.0",
            },
            "interestOverlap": {
                "shared": ["string — interests they have in common"],
                "complementary": ["string — different interests that work well together"],
            },
            "conversationStarter": "string — a conversation starter based on their shared ground",
        },
    ),
    sample_input={
        "profileA": {"vibeName": "The Urban Minimalist", "energy": "chill", "interests": ["architecture"]},
        "profileB": {"vibeName": "The Night Owl Intellectual", "energy": "moderate", "interests": ["philosophy"]},
    },
)


# ── Match Mission ───────────────────────────────────────────────────

MATCH_MISSION_TASK = (
    "Compare two user profiles, estimate how well they match, and plan one playful "
    "first-date mission at exactly one of the provided candidate places."
)

MATCH_MISSION = PromptTemplate(
    name="match-mission",
    task=MATCH_MISSION_TASK,
    description="Similarity, success probability and a venue-bound date mission",
    render=create_prompt_template(
        role="Matchmaking strategist who turns compatible profiles into concrete first-date plans",
        task=MATCH_MISSION_TASK,
        rules=[
            JSON_ONLY,
            "similarityScore must be a float between 0.0 and 1.0",
            "successProbability must be an integer between 0 and 100",
            "mission.location_id must be the placeId of one of the placeCandidates in the input",
            "If the weather condition in the context is Rain, choose an indoor place",
            "mission.task must be one concrete, fun thing to do together at the venue",
            "narrative should be 2-3 sentences explaining why this pair and this place fit",
        ],
        output={
            "mission": {
                "title": "string — short mission title",
                "task": "string — what the pair does at the venue",
                "location_id": "string — placeId from placeCandidates",
            },
            "similarityScore": "number 0.0-1.0",
            "successProbability": "integer 0-100",
            "narrative": "string",
        },
    ),
    sample_input={
        "profileA": {"vibeName": "The Sunset Chaser", "energy": "high"},
        "profileB": {"vibeName": "The Cozy Homebody", "energy": "chill"},
        "placeCandidates": [{"name": "Brave Roasters", "placeId": "place_1", "isIndoor": True}],
    },
)


# ── Identity Verification ───────────────────────────────────────────

VERIFY_IDENTITY_TASK = "Determine whether both images are the same person and detect spoofing signals."

VERIFY_IDENTITY = PromptTemplate(
    name="verify-identity",
    task=VERIFY_IDENTITY_TASK,
    description="Same-person check between a profile photo and a fresh selfie",
    render=create_prompt_template(
        role="Facial identity verification specialist",
        task=VERIFY_IDENTITY_TASK,
        rules=[
            "Return strict JSON only.",
            "Compare facial structure, age cues, and stable attributes.",
            "Actively check spoofing signs: phone screen, printed photo, replay attack, heavy reflections, obvious tampering.",
            "If uncertain, set is_match=false and confidence <= 0.5.",
            "Confidence must be a float between 0 and 1.",
        ],
        output={
            "is_match": True,
            "confidence": 0.0,
            "reasoning": "Concise explanation of match result and spoofing checks.",
        },
    ),
    sample_input={"profile_photo": "image[0]", "fresh_selfie": "image[1]"},
)


VIBE_TEMPLATES = (
    VIBE_GENERATION,
    PROFILE_ANALYZER,
    COMPATIBILITY,
    MATCH_MISSION,
    VERIFY_IDENTITY,
)
