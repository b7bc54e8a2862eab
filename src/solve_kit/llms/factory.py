# src/solve_kit/llms/factory.py

from solve_kit.observability.base import MetricsHook, NoOpMetricsHook

from .base import LLMClient
from .config import LLMConfig


def create_llm_client(
    config: LLMConfig,
    metrics_hook: MetricsHook = NoOpMetricsHook(),
) -> LLMClient:
    """Create an LLM client from config.

    Args:
        config: LLM configuration specifying provider, model, etc.
        metrics_hook: Optional metrics hook for observability.

    Returns:
        Configured LLMClient implementation.

    Raises:
        ValueError: If provider is unknown.
    """
    kwargs = {
        "api_key": config.api_key,
        "model": config.model,
        "base_url": config.base_url,
        "timeout": config.timeout,
        "max_retries": config.max_retries,
        "max_stream_seconds": config.max_stream_seconds,
        "metrics_hook": metrics_hook,
    }

    if config.provider == "openai":
        from .openai import OpenAILLMClient

        return OpenAILLMClient(**kwargs)

    if config.provider == "anthropic":
        from .anthropic import AnthropicLLMClient

        return AnthropicLLMClient(**kwargs)

    raise ValueError(f"Unknown LLM provider: {config.provider}")
