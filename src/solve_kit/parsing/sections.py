# src/solve_kit/parsing/sections.py

"""Section and step grouping over block tokens.

Model output is unreliable, so both groupers are tolerant folds: content
that arrives while no section (or no step) is open is dropped, never
guessed at.
"""

import re
from collections.abc import Iterable

from .models import ExplanationStep, Token
from .tokens import tokenize

SECTION_DEPTH = 3
STEP_DEPTH = 4

FALLBACK_STEP_TITLE = "Detailed Explanation"

# Whole-string match only; inner fences stay and become code tokens.
_FENCE_RE = re.compile(r"^```(?:[A-Za-z0-9_]+\s*)?\n?(.*)\n?```$", re.DOTALL)


def strip_fence(text: str) -> str:
    """Remove a single ``` wrapper around the whole text, if present."""
    stripped = text.strip()
    match = _FENCE_RE.fullmatch(stripped)
    return match.group(1).strip() if match else stripped


def group_sections(tokens: Iterable[Token]) -> dict[str, str]:
    """Group token source under the ### heading that precedes it.

    A repeated heading starts over: the later body replaces the earlier one.
    """
    sections: dict[str, list[str]] = {}
    current_key: str | None = None

    for token in tokens:
        if token.kind == "heading" and token.depth == SECTION_DEPTH:
            current_key = (token.text or "").strip() or None
            if current_key is not None:
                sections.pop(current_key, None)
                sections[current_key] = []
        elif current_key is not None:
            sections[current_key].append(token.raw)

    return {key: "".join(parts).strip() for key, parts in sections.items()}


def split_steps(text: str) -> list[ExplanationStep]:
    """Split an explanation into #### steps.

    Text before the first step heading is not part of any step. An
    explanation without step headings becomes one "Detailed Explanation"
    step.
    """
    if not text:
        return []

    steps: list[tuple[str, list[str]]] = []
    for token in tokenize(text):
        if token.kind == "heading" and token.depth == STEP_DEPTH:
            steps.append(((token.text or "").strip(), []))
        elif steps:
            steps[-1][1].append(token.raw)

    result = [
        ExplanationStep(title=title, content="".join(parts).strip())
        for title, parts in steps
    ]

    if not result and text.strip():
        return [ExplanationStep(title=FALLBACK_STEP_TITLE, content=text.strip())]

    return result
