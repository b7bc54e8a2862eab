# src/solve_kit/observability/names.py

"""Standard metric names for solve-kit observability.

Use these constants instead of hardcoded strings for consistency
across the codebase.

Note: All duration metrics are in milliseconds by convention.
Units are handled by the metrics backend (e.g., converted to seconds in Prometheus).
"""

# ============================================================================
# Parsing Metrics
# ============================================================================

# Duration
PARSE_SOLVE_DURATION = "parse_solve_duration"
PARSE_IMPROVE_DURATION = "parse_improve_duration"

# Counters
PARSE_PROBLEMS_EXTRACTED = "parse_problems_extracted"
PARSE_CHUNKS_DROPPED = "parse_chunks_dropped"
PARSE_FALLBACKS_TOTAL = "parse_fallbacks_total"
PARSE_FAILURES_TOTAL = "parse_failures_total"


# ============================================================================
# LLM Metrics
# ============================================================================

# Duration
LLM_COMPLETION_DURATION = "llm_completion_duration"

# Counters
LLM_REQUESTS_TOTAL = "llm_requests_total"
LLM_ERRORS_TOTAL = "llm_errors_total"

# Counters (token usage - monotonic over time for cost/rate tracking)
LLM_TOKENS_PROMPT = "llm_tokens_prompt"
LLM_TOKENS_COMPLETION = "llm_tokens_completion"
LLM_TOKENS_TOTAL = "llm_tokens_total"


# ============================================================================
# Solver Metrics
# ============================================================================

# Duration
SOLVER_REQUEST_DURATION = "solver_request_duration"

# Counters
SOLVER_REQUESTS_TOTAL = "solver_requests_total"

# Gauges
SOLVER_IMAGES_PER_REQUEST = "solver_images_per_request"
