import logging

import pytest

from solve_kit.observability import LoggingMetricsHook, NoOpMetricsHook, names


class TestNoOpMetricsHook:
    def test_accepts_all_calls(self) -> None:
        hook = NoOpMetricsHook()

        hook.record_latency(names.PARSE_SOLVE_DURATION, 1.5)
        hook.increment(names.PARSE_PROBLEMS_EXTRACTED, 3, labels={"mode": "solve"})
        hook.record_gauge(names.SOLVER_IMAGES_PER_REQUEST, 2)


class TestLoggingMetricsHook:
    def test_logs_each_metric_at_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        hook = LoggingMetricsHook()

        with caplog.at_level(logging.DEBUG, logger="solve_kit.observability.base"):
            hook.record_latency(names.PARSE_SOLVE_DURATION, 1.5)
            hook.increment(names.PARSE_FALLBACKS_TOTAL, labels={"mode": "solve"})
            hook.record_gauge(names.SOLVER_IMAGES_PER_REQUEST, 2)

        assert "latency parse_solve_duration=1.50ms" in caplog.text
        assert "counter parse_fallbacks_total+=1 labels={'mode': 'solve'}" in caplog.text
        assert "gauge solver_images_per_request=2" in caplog.text

    def test_uses_given_logger(self, caplog: pytest.LogCaptureFixture) -> None:
        hook = LoggingMetricsHook(logging.getLogger("metrics"))

        with caplog.at_level(logging.DEBUG, logger="metrics"):
            hook.increment(names.LLM_REQUESTS_TOTAL)

        assert caplog.records[0].name == "metrics"
