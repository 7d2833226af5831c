from dataclasses import dataclass, field
from typing import Any, Callable


@dataclass(frozen=True)
class PromptTemplate:
    """A named, registered prompt template."""

    # Identity
    name: str  # e.g., "summarize-text", "compatibility"
    task: str  # Literal task text present in every rendering
    description: str  # One-line description for listings

    # Rendering
    render: Callable[..., str]  # (input: dict, context: dict | None = None) -> prompt text

    # Valid sample args, used for docs and registry checks
    sample_input: dict[str, Any] = field(default_factory=dict)

    def __call__(self, input: dict, context: dict | None = None) -> str:
        return self.render(input, context)
