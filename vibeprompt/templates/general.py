"""General-purpose templates: summarization, review, rewriting, extraction, translation."""

from ..prompt_formatter import PromptExample, create_prompt_template
from .base import PromptTemplate

JSON_ONLY = "Return ONLY valid JSON — no markdown, no explanation"


THEME_PALETTE_TASK = "Generate a cohesive, accessible color palette for a web application theme"

GENERATE_THEME_PALETTE = PromptTemplate(
    name="generate-theme-palette",
    task=THEME_PALETTE_TASK,
    description="Light/dark color palette for a UI theme",
    render=create_prompt_template(
        role="Expert UI/UX designer specializing in color theory and design systems",
        task=THEME_PALETTE_TASK,
        rules=[
            JSON_ONLY,
            "All colors must be valid hex color codes",
            "Ensure primary/foreground pairs meet WCAG AA contrast ratio (4.5:1)",
            "Destructive color must clearly communicate danger/error",
            "Muted colors should be subtle variations of the background",
            "Dark mode should maintain the same hue family but adjust lightness",
        ],
        output={
            "light": {
                "background": "#hex",
                "foreground": "#hex",
                "primary": "#hex",
                "primary-foreground": "#hex",
                "secondary": "#hex",
                "muted": "#hex",
                "accent": "#hex",
                "destructive": "#hex",
                "border": "#hex",
            },
            "dark": {"...": "same shape as light"},
        },
        examples=[
            PromptExample(
                input={"mood": "calm", "baseColor": "#3b82f6"},
                output={
                    "light": {"background": "#f8fafc", "foreground": "#1e293b", "primary": "#3b82f6"},
                    "dark": {"background": "#0f172a", "foreground": "#e2e8f0", "primary": "#60a5fa"},
                },
            ),
        ],
    ),
    sample_input={"mood": "playful", "baseColor": "#ec4899"},
)


SUMMARIZE_TASK = "Produce a concise, accurate summary of the provided text"

SUMMARIZE_TEXT = PromptTemplate(
    name="summarize-text",
    task=SUMMARIZE_TASK,
    description="Summary, key takeaways and sentiment for a block of text",
    render=create_prompt_template(
        role="Expert content analyst with strong summarization skills",
        task=SUMMARIZE_TASK,
        rules=[
            JSON_ONLY,
            "Summary must be shorter than the original text",
            "Preserve the key facts, names, and numbers",
            "Use clear, simple language",
            "Include a list of key takeaways",
            "Identify the overall sentiment",
        ],
        output={
            "summary": "string — concise summary paragraph",
            "keyTakeaways": ["string — bullet point 1", "string — bullet point 2"],
            "sentiment": "positive | neutral | negative",
            "wordCount": "number — word count of summary",
        },
    ),
    sample_input={"text": "Hello world"},
)


REVIEW_CODE_TASK = "Analyze the provided code and give actionable review feedback"

REVIEW_CODE = PromptTemplate(
    name="review-code",
    task=REVIEW_CODE_TASK,
    description="Code review with severity-tagged issues",
    render=create_prompt_template(
        role="Senior software engineer and code reviewer",
        task=REVIEW_CODE_TASK,
        rules=[
            JSON_ONLY,
            "Focus on bugs, security issues, performance, and readability",
            "Assign a severity to each issue: critical, warning, or suggestion",
            "Provide a brief fix recommendation for each issue",
            "If the code is good, return an empty issues array with a positive comment",
        ],
        output={
            "overallScore": "number 1-10",
            "summary": "string — one sentence overview",
            "issues": [
                {
                    "severity": "critical | warning | suggestion",
                    "line": "number | null",
                    "description": "string",
                    "fix": "string",
                }
            ],
        },
    ),
    sample_input={"language": "python", "code": "def add(a, b):\n    return a - b\n"},
)


REWRITE_TASK = "Rewrite the provided text according to the specified tone and constraints"

REWRITE_CONTENT = PromptTemplate(
    name="rewrite-content",
    task=REWRITE_TASK,
    description="Tone-controlled rewrite with a change log",
    render=create_prompt_template(
        role="Professional content writer and editor",
        task=REWRITE_TASK,
        rules=[
            JSON_ONLY,
            "Preserve the original meaning and key information",
            "Match the requested tone precisely",
            "Keep approximately the same length unless told otherwise",
            "Fix any grammar or spelling errors in the original",
        ],
        output={
            "rewritten": "string — the rewritten text",
            "changes": ["string — brief description of each change made"],
            "tone": "string — the tone applied",
        },
    ),
    sample_input={"text": "we are gonna be late lol", "tone": "formal"},
)


EXTRACT_TASK = "Extract structured data from unstructured text into the requested schema"

EXTRACT_STRUCTURED_DATA = PromptTemplate(
    name="extract-structured-data",
    task=EXTRACT_TASK,
    description="Pull fields described by input.outputSchema out of free text",
    render=create_prompt_template(
        role="Data extraction specialist",
        task=EXTRACT_TASK,
        rules=[
            JSON_ONLY,
            "Only extract information that is explicitly present in the text",
            "Use null for fields where data cannot be found",
            "Do not infer or hallucinate data",
            "Normalize dates to ISO 8601 format when possible",
        ],
        output="{ ...schema provided in input.outputSchema }",
    ),
    sample_input={
        "text": "Meet Linh at Brave Roasters on 14 Feb 2026 at 7pm.",
        "outputSchema": {"person": "string", "place": "string", "date": "string"},
    },
)


TRANSLATE_TASK = "Translate the provided text to the target language"

TRANSLATE_TEXT = PromptTemplate(
    name="translate-text",
    task=TRANSLATE_TASK,
    description="Translation with detected source language and notes",
    render=create_prompt_template(
        role="Professional translator with expertise in technical and casual content",
        task=TRANSLATE_TASK,
        rules=[
            JSON_ONLY,
            "Preserve formatting, tone, and intent of the original",
            "Keep technical terms in their commonly accepted form in the target language",
            "If a term has no good translation, keep it in the original language with a note",
        ],
        output={
            "translated": "string — the translated text",
            "sourceLanguage": "string — detected source language",
            "targetLanguage": "string — target language",
            "notes": ["string — any translation notes or untranslatable terms"],
        },
    ),
    sample_input={"text": "See you at the café!", "targetLanguage": "Vietnamese"},
)


CRUSH_PROFILE_TASK = (
    "Analyze a dating profile to predict communication style and suggest "
    "conversation starters and date ideas"
)

ANALYZE_CRUSH_PROFILE = PromptTemplate(
    name="analyze-crush-profile",
    task=CRUSH_PROFILE_TASK,
    description="Text-only profile read: style, openers and date ideas",
    render=create_prompt_template(
        role="Expert dating coach and communication strategist",
        task=CRUSH_PROFILE_TASK,
        rules=[
            JSON_ONLY,
            "predictedStyle must be one of: direct, playful, intellectual, shy, adventurous",
            "Provide 3 unique conversation openers that match the predicted style",
            "Suggest 3 diverse date ideas with different price points",
            "All suggestions should feel authentic and not generic",
            "vibeMatch scores should reflect genuine compatibility with the predicted style",
        ],
        output={
            "predictedStyle": "direct | playful | intellectual | shy | adventurous",
            "vibePrediction": {
                "confidence": "number 0-1",
                "dominantTrait": "string",
                "secondaryTrait": "string",
                "summary": "string — 1-2 sentence vibe description",
                "communicationTips": ["string — tip 1", "string — tip 2", "string — tip 3"],
            },
            "conversationOpeners": ["string — opener 1", "string — opener 2", "string — opener 3"],
            "dateSuggestions": [
                {
                    "title": "string",
                    "description": "string",
                    "vibeMatch": "number 0-1",
                    "estimatedCost": "string — e.g. Free, $20-40, $50+",
                    "duration": "string — e.g. 2-3 hours",
                }
            ],
        },
    ),
    sample_input={"hintTags": ["university student", "loves hiking"]},
)


GENERAL_TEMPLATES = (
    GENERATE_THEME_PALETTE,
    SUMMARIZE_TEXT,
    REVIEW_CODE,
    REWRITE_CONTENT,
    EXTRACT_STRUCTURED_DATA,
    TRANSLATE_TEXT,
    ANALYZE_CRUSH_PROFILE,
)
