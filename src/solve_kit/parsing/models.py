# src/solve_kit/parsing/models.py

from dataclasses import dataclass, field
from typing import Literal

TokenKind = Literal["heading", "paragraph", "list", "code", "other", "space"]


@dataclass(frozen=True)
class Token:
    """A top-level markdown block.

    `raw` is the verbatim source of the block. `depth` and `text` are set
    for headings only.
    """

    kind: TokenKind
    raw: str
    depth: int | None = None
    text: str | None = None


@dataclass(frozen=True)
class ExplanationStep:
    title: str
    content: str


@dataclass(frozen=True)
class ProblemSolution:
    """One solved problem.

    `steps` is always derived from `explanation`, never supplied on its own.
    """

    problem: str
    explanation: str
    answer: str
    steps: list[ExplanationStep] = field(default_factory=list)


@dataclass(frozen=True)
class SolveResponse:
    problems: list[ProblemSolution] = field(default_factory=list)


@dataclass(frozen=True)
class ImproveResult:
    improved_answer: str
    improved_explanation: str
    improved_steps: list[ExplanationStep] = field(default_factory=list)
