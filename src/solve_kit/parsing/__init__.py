# src/solve_kit/parsing/__init__.py

"""Section-segmentation parser for model answers.

Turns the markdown a model writes for one or more homework problems into
typed records:

    ### PROBLEM_TEXT
    ...
    ### EXPLANATION
    #### Step 1: ...
    ...
    ### ANSWER
    ...
    ---PROBLEM_SEPARATOR---
    (next problem)

Example:
    >>> from solve_kit.parsing import parse_solve_response
    >>> result = parse_solve_response(raw_text)
    >>> [p.answer for p in result.problems]
"""

from .models import (
    ExplanationStep,
    ImproveResult,
    ProblemSolution,
    SolveResponse,
    Token,
)
from .responses import (
    PROBLEM_SEPARATOR,
    ParseFailure,
    parse_improve_response,
    parse_sections,
    parse_solve_response,
)
from .sections import group_sections, split_steps, strip_fence
from .tokens import tokenize

__all__ = [
    # Entry points
    "parse_solve_response",
    "parse_improve_response",
    "ParseFailure",
    "PROBLEM_SEPARATOR",
    # Building blocks
    "tokenize",
    "strip_fence",
    "group_sections",
    "split_steps",
    "parse_sections",
    # Types
    "Token",
    "ExplanationStep",
    "ProblemSolution",
    "SolveResponse",
    "ImproveResult",
]
