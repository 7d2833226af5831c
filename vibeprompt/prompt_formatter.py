"""
Prompt Formatter: deterministic structured prompt builder.

Every prompt follows the same layout so the model always gets its
instructions in the same place:

    Role: <role>
    Task: <task>

    Rules:
    - <rule>

    Input (JSON):
    { ... }

    Context (JSON):          (only when context is given)
    Examples:                (only when examples are given)

    Output (JSON):
    { ... }

Section order and heading text are relied on by downstream prompt
engineering, so treat them as part of the public contract.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Sequence

PromptTemplateFn = Callable[..., str]


@dataclass(frozen=True)
class PromptExample:
    """One input -> output pair shown to the model."""

    input: Any
    output: Any


@dataclass(frozen=True)
class PromptSpec:
    """Typed request description rendered once into prompt text."""

    role: str
    task: str
    rules: tuple[str, ...] = ()
    input: Any = field(default_factory=dict)
    output: Any = field(default_factory=dict)
    context: Mapping[str, Any] | None = None
    examples: tuple[PromptExample, ...] = ()

    def __post_init__(self):
        if not self.role or not self.role.strip():
            raise ValueError("PromptSpec.role must be non-empty")
        if not self.task or not self.task.strip():
            raise ValueError("PromptSpec.task must be non-empty")
        # Accept lists from callers but store tuples so a PromptSpec stays immutable.
        object.__setattr__(self, "rules", tuple(self.rules))
        object.__setattr__(
            self,
            "examples",
            tuple(
                ex if isinstance(ex, PromptExample) else PromptExample(ex["input"], ex["output"])
                for ex in self.examples
            ),
        )


def pretty_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def format_prompt(spec: PromptSpec) -> str:
    """Render a PromptSpec into prompt text. Pure: same spec, same bytes."""
    sections: list[str] = [
        f"Role: {spec.role}",
        f"Task: {spec.task}",
    ]

    if spec.rules:
        sections.extend(["", "Rules:", *(f"- {rule}" for rule in spec.rules)])

    sections.extend(["", "Input (JSON):", pretty_json(spec.input)])

    if spec.context:
        sections.extend(["", "Context (JSON):", pretty_json(dict(spec.context))])

    if spec.examples:
        sections.extend(["", "Examples:"])
        for i, example in enumerate(spec.examples, start=1):
            sections.extend([
                f"  Example {i}:",
                f"    Input: {pretty_json(example.input)}",
                f"    Output: {pretty_json(example.output)}",
            ])

    output = spec.output if isinstance(spec.output, str) else pretty_json(spec.output)
    sections.extend(["", "Output (JSON):", output])

    return "\n".join(sections).strip()


def create_prompt_template(
    role: str,
    task: str,
    rules: Sequence[str],
    output: Any,
    examples: Sequence[PromptExample | dict] = (),
) -> PromptTemplateFn:
    """Fix role/task/rules/output; only ``input`` and ``context`` vary per call."""
    fixed_rules = tuple(rules)
    fixed_examples = tuple(examples)

    def render(input: Mapping[str, Any], context: Mapping[str, Any] | None = None) -> str:
        return format_prompt(
            PromptSpec(
                role=role,
                task=task,
                rules=fixed_rules,
                input=dict(input),
                output=output,
                context=context,
                examples=fixed_examples,
            )
        )

    return render
