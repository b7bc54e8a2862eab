import logging
from unittest.mock import MagicMock

import pytest

from solve_kit.observability import names
from solve_kit.parsing.models import ExplanationStep, ImproveResult, SolveResponse
from solve_kit.parsing.responses import (
    PROBLEM_SEPARATOR,
    ParseFailure,
    parse_improve_response,
    parse_solve_response,
)

WELL_FORMED = (
    "### PROBLEM_TEXT\nP\n"
    "### EXPLANATION\n#### Step 1: A\nC1\n#### Step 2: B\nC2\n"
    "### ANSWER\nX"
)


def _problem(n: int) -> str:
    return (
        f"### PROBLEM_TEXT\nProblem {n}\n\n"
        f"### EXPLANATION\n#### Step 1: Work\nWork {n}\n\n"
        f"### ANSWER\nAnswer {n}\n"
    )


class TestParseSolveResponse:
    def test_well_formed_single_problem(self) -> None:
        result = parse_solve_response(WELL_FORMED)

        assert len(result.problems) == 1
        problem = result.problems[0]
        assert problem.problem == "P"
        assert problem.answer == "X"
        assert problem.explanation == "#### Step 1: A\nC1\n#### Step 2: B\nC2"
        assert problem.steps == [
            ExplanationStep(title="Step 1: A", content="C1"),
            ExplanationStep(title="Step 2: B", content="C2"),
        ]

    def test_multiple_problems_keep_order(self) -> None:
        text = f"{_problem(1)}\n{PROBLEM_SEPARATOR}\n{_problem(2)}"

        result = parse_solve_response(text)

        assert [p.problem for p in result.problems] == ["Problem 1", "Problem 2"]
        assert [p.answer for p in result.problems] == ["Answer 1", "Answer 2"]
        assert result.problems[1].steps == [
            ExplanationStep(title="Step 1: Work", content="Work 2")
        ]

    def test_blank_chunks_are_skipped(self) -> None:
        text = f"{PROBLEM_SEPARATOR}\n\n{_problem(1)}{PROBLEM_SEPARATOR}   "

        result = parse_solve_response(text)

        assert len(result.problems) == 1

    def test_chunk_without_known_sections_is_dropped(self) -> None:
        text = f"### NOTES\nscratch\n{PROBLEM_SEPARATOR}\n{_problem(1)}"

        result = parse_solve_response(text)

        assert [p.problem for p in result.problems] == ["Problem 1"]

    def test_missing_sections_default_to_empty(self) -> None:
        result = parse_solve_response("### ANSWER\n7")

        problem = result.problems[0]
        assert problem.problem == ""
        assert problem.explanation == ""
        assert problem.answer == "7"
        assert problem.steps == []

    def test_explanation_without_steps_gets_single_step(self) -> None:
        result = parse_solve_response("### EXPLANATION\nAdd them.\n### ANSWER\n3")

        assert result.problems[0].steps == [
            ExplanationStep(title="Detailed Explanation", content="Add them.")
        ]

    def test_plain_text_falls_back_to_error_record(self) -> None:
        result = parse_solve_response("just plain text")

        assert len(result.problems) == 1
        problem = result.problems[0]
        assert problem.problem == "Error parsing problem text"
        assert problem.answer == ""
        assert problem.explanation == "just plain text"
        assert problem.steps == [ExplanationStep(title="Error", content="just plain text")]

    def test_fallback_keeps_original_untrimmed_input(self) -> None:
        text = "  ### NOTES\nnothing useful\n"

        result = parse_solve_response(text)

        assert result.problems[0].explanation == text
        assert result.problems[0].steps[0].content == text

    @pytest.mark.parametrize("text", ["", "   \n\t"])
    def test_blank_input_yields_no_problems(self, text: str) -> None:
        assert parse_solve_response(text) == SolveResponse(problems=[])

    @pytest.mark.parametrize("opening", ["```", "```markdown", "```text\n"])
    def test_fenced_input_parses_like_unwrapped(self, opening: str) -> None:
        fenced = f"{opening}\n{WELL_FORMED}\n```"

        assert parse_solve_response(fenced) == parse_solve_response(WELL_FORMED)

    def test_each_chunk_is_fence_stripped(self) -> None:
        text = f"```\n{_problem(1)}```\n{PROBLEM_SEPARATOR}\n```md\n{_problem(2)}```"

        result = parse_solve_response(text)

        assert [p.answer for p in result.problems] == ["Answer 1", "Answer 2"]

    def test_duplicate_answer_keeps_second_section(self) -> None:
        text = "### PROBLEM_TEXT\nP\n### ANSWER\nfirst\n### ANSWER\nsecond"

        result = parse_solve_response(text)

        assert result.problems[0].answer == "second"

    def test_steps_match_explanation(self) -> None:
        """Steps re-derived from the explanation are unchanged."""
        from solve_kit.parsing.sections import split_steps

        problem = parse_solve_response(WELL_FORMED).problems[0]

        assert split_steps(problem.explanation) == problem.steps

    def test_metrics_on_success(self) -> None:
        metrics_hook = MagicMock()

        parse_solve_response(WELL_FORMED, metrics_hook=metrics_hook)

        metrics_hook.record_latency.assert_called_once()
        assert metrics_hook.record_latency.call_args[0][0] == names.PARSE_SOLVE_DURATION
        metrics_hook.increment.assert_any_call(names.PARSE_PROBLEMS_EXTRACTED, 1)

    def test_metrics_and_warning_on_fallback(self, caplog: pytest.LogCaptureFixture) -> None:
        metrics_hook = MagicMock()

        with caplog.at_level(logging.WARNING, logger="solve_kit.parsing.responses"):
            parse_solve_response("plain", metrics_hook=metrics_hook)

        metrics_hook.increment.assert_any_call(
            names.PARSE_FALLBACKS_TOTAL, labels={"mode": "solve"}
        )
        assert "fallback" in caplog.text


class TestParseImproveResponse:
    def test_parses_both_sections(self) -> None:
        text = (
            "### IMPROVED_EXPLANATION\n#### Step 1: Recheck\nLooks right.\n"
            "### IMPROVED_ANSWER\n42"
        )

        result = parse_improve_response(text)

        assert result == ImproveResult(
            improved_answer="42",
            improved_explanation="#### Step 1: Recheck\nLooks right.",
            improved_steps=[ExplanationStep(title="Step 1: Recheck", content="Looks right.")],
        )

    def test_answer_only(self) -> None:
        result = parse_improve_response("### IMPROVED_ANSWER\n42")

        assert result.improved_answer == "42"
        assert result.improved_explanation == ""
        assert result.improved_steps == []

    def test_explanation_only(self) -> None:
        result = parse_improve_response("### IMPROVED_EXPLANATION\nBetter now.")

        assert result.improved_answer == ""
        assert result.improved_steps == [
            ExplanationStep(title="Detailed Explanation", content="Better now.")
        ]

    def test_fenced_input(self) -> None:
        result = parse_improve_response("```markdown\n### IMPROVED_ANSWER\n1\n```")

        assert result.improved_answer == "1"

    def test_separator_is_not_split(self) -> None:
        text = f"### IMPROVED_ANSWER\n1\n{PROBLEM_SEPARATOR}\n### IMPROVED_ANSWER\n2"

        result = parse_improve_response(text)

        assert result.improved_answer == "2"

    @pytest.mark.parametrize(
        "text",
        [
            "### UNRELATED\nfoo",
            "",
            "plain text",
            "### IMPROVED_ANSWER\n\n### IMPROVED_EXPLANATION\n",
        ],
    )
    def test_missing_sections_raise_parse_failure(self, text: str) -> None:
        with pytest.raises(ParseFailure):
            parse_improve_response(text)

    def test_failure_is_logged_and_counted(self, caplog: pytest.LogCaptureFixture) -> None:
        metrics_hook = MagicMock()

        with caplog.at_level(logging.ERROR, logger="solve_kit.parsing.responses"):
            with pytest.raises(ParseFailure):
                parse_improve_response("### UNRELATED\nfoo", metrics_hook=metrics_hook)

        assert "Failed to parse improve response keys" in caplog.text
        metrics_hook.increment.assert_called_once_with(
            names.PARSE_FAILURES_TOTAL, labels={"mode": "improve"}
        )

    def test_parse_failure_is_value_error(self) -> None:
        assert issubclass(ParseFailure, ValueError)
