"""Tests for the prompt template registry."""

import pytest

from vibeprompt.templates import TEMPLATE_REGISTRY, get_template, list_templates, render_template

EXPECTED = {
    "generate-theme-palette",
    "summarize-text",
    "review-code",
    "rewrite-content",
    "extract-structured-data",
    "translate-text",
    "analyze-crush-profile",
    "vibe-generation",
    "profile-analyzer",
    "compatibility",
    "verify-identity",
    "match-mission",
    "grade-interaction",
    "user-summary-narrative",
    "realtime-coach",
}


def test_registry_contains_every_template():
    assert set(list_templates()) == EXPECTED
    assert list_templates() == sorted(list_templates())


def test_unknown_template_lists_available_names():
    with pytest.raises(ValueError) as exc_info:
        get_template("does-not-exist")

    message = str(exc_info.value)
    assert "Unknown template 'does-not-exist'" in message
    assert "summarize-text" in message


@pytest.mark.parametrize("name", sorted(EXPECTED))
def test_every_template_renders_its_sample(name):
    """Each template's sample input renders with its task and the standard section order."""
    template = get_template(name)

    prompt = template(template.sample_input)

    assert template.task in prompt
    role = prompt.find("Role:")
    task = prompt.find("Task:")
    output = prompt.find("Output (JSON):")
    assert 0 <= role < task < output


def test_summarize_text_scenario():
    prompt = render_template("summarize-text", {"text": "Hello world"})

    assert "Produce a concise, accurate summary of the provided text" in prompt
    assert '"text": "Hello world"' in prompt


def test_names_match_registry_keys():
    for name, template in TEMPLATE_REGISTRY.items():
        assert template.name == name


def test_grade_interaction_lists_transcript_turns():
    prompt = render_template("grade-interaction", {
        "transcript": [
            {"role": "me", "text": "Hi there"},
            {"role": "partner", "text": "Hello!"},
        ],
        "targetVibe": {"label": "The Bookworm", "interests": ["novels"]},
    })

    assert "1. ME: Hi there" in prompt
    assert "2. PARTNER: Hello!" in prompt
    assert "Target interests: novels" in prompt
    assert "Mission type: solo_practice" in prompt


def test_user_summary_trims_interests():
    prompt = render_template("user-summary-narrative", {
        "vibeLabel": "The Minimalist",
        "interests": " coffee ,, vinyl ",
        "siqScore": 500,
    })

    assert "Interests: coffee, vinyl" in prompt
    assert "SIQ score: 500/1000" in prompt
