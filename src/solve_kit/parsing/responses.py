# src/solve_kit/parsing/responses.py

import logging
from time import monotonic

from solve_kit.observability import names
from solve_kit.observability.base import MetricsHook, NoOpMetricsHook

from .models import ExplanationStep, ImproveResult, ProblemSolution, SolveResponse
from .sections import group_sections, split_steps, strip_fence
from .tokens import tokenize

logger = logging.getLogger(__name__)

PROBLEM_SEPARATOR = "---PROBLEM_SEPARATOR---"

PROBLEM_TEXT_KEY = "PROBLEM_TEXT"
EXPLANATION_KEY = "EXPLANATION"
ANSWER_KEY = "ANSWER"
IMPROVED_EXPLANATION_KEY = "IMPROVED_EXPLANATION"
IMPROVED_ANSWER_KEY = "IMPROVED_ANSWER"

ERROR_PROBLEM_TEXT = "Error parsing problem text"
ERROR_STEP_TITLE = "Error"


class ParseFailure(ValueError):
    """Raised when an improve response carries none of the expected sections."""


def parse_sections(text: str) -> dict[str, str]:
    """Fence-strip, tokenize and group one response (or chunk) by ### heading."""
    return group_sections(tokenize(strip_fence(text)))


def parse_solve_response(
    response: str,
    *,
    metrics_hook: MetricsHook = NoOpMetricsHook(),
) -> SolveResponse:
    """Parse a (possibly multi-problem) solve response.

    Never raises. A non-blank response with no usable sections comes back
    as a single "Error parsing problem text" record holding the whole input.
    """
    start = monotonic()
    chunks = response.split(PROBLEM_SEPARATOR)
    problems: list[ProblemSolution] = []
    dropped = 0

    for chunk in chunks:
        if not chunk.strip():
            continue

        sections = parse_sections(chunk)
        problem_text = sections.get(PROBLEM_TEXT_KEY, "")
        explanation = sections.get(EXPLANATION_KEY, "")
        answer = sections.get(ANSWER_KEY, "")

        if not (problem_text or explanation or answer):
            dropped += 1
            logger.debug("Dropping chunk without known sections: %s", list(sections))
            continue

        problems.append(
            ProblemSolution(
                problem=problem_text,
                explanation=explanation,
                answer=answer,
                steps=split_steps(explanation),
            )
        )

    if not problems and response.strip():
        logger.warning(
            "No problems parsed from %d chunk(s); returning raw response as fallback",
            len(chunks),
        )
        metrics_hook.increment(names.PARSE_FALLBACKS_TOTAL, labels={"mode": "solve"})
        problems = [
            ProblemSolution(
                problem=ERROR_PROBLEM_TEXT,
                explanation=response,
                answer="",
                steps=[ExplanationStep(title=ERROR_STEP_TITLE, content=response)],
            )
        ]
    else:
        logger.debug(
            "Parsed %d problem(s), dropped %d chunk(s)", len(problems), dropped
        )

    elapsed_ms = 1000 * (monotonic() - start)
    metrics_hook.record_latency(names.PARSE_SOLVE_DURATION, elapsed_ms)
    metrics_hook.increment(names.PARSE_PROBLEMS_EXTRACTED, len(problems))
    if dropped:
        metrics_hook.increment(names.PARSE_CHUNKS_DROPPED, dropped)
    return SolveResponse(problems=problems)


def parse_improve_response(
    response: str,
    *,
    metrics_hook: MetricsHook = NoOpMetricsHook(),
) -> ImproveResult:
    """Parse an improved-answer response.

    Raises:
        ParseFailure: If neither IMPROVED_EXPLANATION nor IMPROVED_ANSWER
            has any content.
    """
    start = monotonic()
    sections = parse_sections(response)

    improved_explanation = sections.get(IMPROVED_EXPLANATION_KEY, "")
    improved_answer = sections.get(IMPROVED_ANSWER_KEY, "")

    if not improved_explanation and not improved_answer:
        logger.error(
            "Failed to parse improve response keys; found sections: %s",
            list(sections),
        )
        metrics_hook.increment(names.PARSE_FAILURES_TOTAL, labels={"mode": "improve"})
        raise ParseFailure("Improve response has no IMPROVED_* sections")

    result = ImproveResult(
        improved_answer=improved_answer,
        improved_explanation=improved_explanation,
        improved_steps=split_steps(improved_explanation),
    )

    elapsed_ms = 1000 * (monotonic() - start)
    metrics_hook.record_latency(names.PARSE_IMPROVE_DURATION, elapsed_ms)
    return result
