# src/solve_kit/solver.py

import logging
from collections.abc import Sequence
from time import monotonic

from solve_kit.llms.base import DeltaCallback, ImageInput, LLMClient, Message, Role
from solve_kit.observability import names
from solve_kit.observability.base import MetricsHook, NoOpMetricsHook
from solve_kit.parsing import (
    ImproveResult,
    ProblemSolution,
    SolveResponse,
    parse_improve_response,
    parse_solve_response,
)
from solve_kit.prompts import PromptsLibrary

logger = logging.getLogger(__name__)

SOLVE_PROMPT = ("solve", "1")
IMPROVE_PROMPT = ("improve", "1")


class ProblemSolver:
    """Asks a model to solve or revise homework and parses what comes back.

    The model's answer is fully streamed before it is parsed; `on_delta`
    only sees the text as it arrives.
    """

    def __init__(
        self,
        client: LLMClient,
        prompts: PromptsLibrary | None = None,
        metrics_hook: MetricsHook = NoOpMetricsHook(),
    ) -> None:
        self.client = client
        self.prompts = prompts if prompts is not None else PromptsLibrary()
        self.metrics_hook = metrics_hook

    async def solve(
        self,
        images: Sequence[ImageInput],
        *,
        instructions: str = "",
        on_delta: DeltaCallback | None = None,
    ) -> SolveResponse:
        if not images:
            raise ValueError("solve needs at least one image")

        start = monotonic()
        system_prompt = self.prompts.get(*SOLVE_PROMPT).render(
            instructions=instructions
        )
        logger.debug("Solving %d image(s)", len(images))

        response = await self.client.complete(
            messages=[
                Message(role=Role.SYSTEM, content=system_prompt),
                Message(role=Role.USER, content="", images=tuple(images)),
            ],
            on_delta=on_delta,
        )
        result = parse_solve_response(
            response.content, metrics_hook=self.metrics_hook
        )

        self._record("solve", start)
        self.metrics_hook.record_gauge(names.SOLVER_IMAGES_PER_REQUEST, len(images))
        logger.info("Solved %d problem(s)", len(result.problems))
        return result

    async def improve(
        self,
        solution: ProblemSolution,
        feedback: str,
        *,
        on_delta: DeltaCallback | None = None,
    ) -> ImproveResult:
        """Revise one solution.

        Raises:
            ParseFailure: If the model's reply has no IMPROVED_* sections.
        """
        start = monotonic()
        prompt = self.prompts.get(*IMPROVE_PROMPT).render(
            problem=solution.problem,
            answer=solution.answer,
            explanation=solution.explanation,
            feedback=feedback,
        )

        response = await self.client.complete(
            messages=[Message(role=Role.USER, content=prompt)],
            on_delta=on_delta,
        )
        result = parse_improve_response(
            response.content, metrics_hook=self.metrics_hook
        )

        self._record("improve", start)
        return result

    def _record(self, mode: str, start: float) -> None:
        elapsed_ms = 1000 * (monotonic() - start)
        self.metrics_hook.record_latency(
            names.SOLVER_REQUEST_DURATION, elapsed_ms, labels={"mode": mode}
        )
        self.metrics_hook.increment(names.SOLVER_REQUESTS_TOTAL, labels={"mode": mode})
