from .base import PromptTemplate
from .coaching import COACHING_TEMPLATES
from .general import GENERAL_TEMPLATES
from .vibe import VIBE_TEMPLATES

TEMPLATE_REGISTRY: dict[str, PromptTemplate] = {
    template.name: template
    for template in (*GENERAL_TEMPLATES, *VIBE_TEMPLATES, *COACHING_TEMPLATES)
}


def get_template(name: str) -> PromptTemplate:
    """Look up a prompt template by name."""
    if name not in TEMPLATE_REGISTRY:
        available = ", ".join(sorted(TEMPLATE_REGISTRY.keys()))
        raise ValueError(f"Unknown template '{name}'. Available: {available}")
    return TEMPLATE_REGISTRY[name]


def list_templates() -> list[str]:
    return sorted(TEMPLATE_REGISTRY.keys())


def render_template(name: str, input: dict, context: dict | None = None) -> str:
    return get_template(name)(input, context)


__all__ = [
    "PromptTemplate",
    "TEMPLATE_REGISTRY",
    "get_template",
    "list_templates",
    "render_template",
]
