# LLM clients
from .llms import (
    ImageInput,
    LLMClient,
    LLMConfig,
    LLMResponse,
    LLMStreamError,
    Message,
    Role,
    create_llm_client,
)

# Observability
from .observability import LoggingMetricsHook, MetricsHook, NoOpMetricsHook

# Parsing
from .parsing import (
    PROBLEM_SEPARATOR,
    ExplanationStep,
    ImproveResult,
    ParseFailure,
    ProblemSolution,
    SolveResponse,
    parse_improve_response,
    parse_solve_response,
)

# Prompts
from .prompts import Prompt, PromptsLibrary

# Solver
from .solver import ProblemSolver

__all__ = [
    # LLM clients
    "ImageInput",
    "LLMClient",
    "LLMConfig",
    "LLMResponse",
    "LLMStreamError",
    "Message",
    "Role",
    "create_llm_client",
    # Observability
    "LoggingMetricsHook",
    "MetricsHook",
    "NoOpMetricsHook",
    # Parsing
    "PROBLEM_SEPARATOR",
    "ExplanationStep",
    "ImproveResult",
    "ParseFailure",
    "ProblemSolution",
    "SolveResponse",
    "parse_improve_response",
    "parse_solve_response",
    # Prompts
    "Prompt",
    "PromptsLibrary",
    # Solver
    "ProblemSolver",
]
