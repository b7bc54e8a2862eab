# src/solve_kit/llms/__init__.py

"""LLM client layer for solve-kit.

Sends a prompt (optionally with images) to a model, streams the answer back
and hands callers the complete text.

Design principles:
- Stateless: Every call receives full message list
- Transport only: Retries only on network/rate-limit errors
- Complete text out: deltas go to a callback, the return value is final
- No leakage: Provider objects never escape the adapter

Example:
    >>> from solve_kit.llms import create_llm_client, LLMConfig, Message, Role
    >>>
    >>> config = LLMConfig(provider="openai", model="gpt-4.1-mini")
    >>> client = create_llm_client(config)
    >>>
    >>> response = await client.complete(
    ...     messages=[Message(role=Role.USER, content="Hello!")],
    ...     on_delta=lambda text: print(text, end=""),
    ... )
    >>> print(response.content)
"""

from .base import (
    ImageInput,
    LLMClient,
    LLMResponse,
    LLMStreamError,
    Message,
    ModelInfo,
    Role,
    Usage,
)
from .config import LLMConfig
from .factory import create_llm_client

__all__ = [
    # Factory
    "create_llm_client",
    # Protocol
    "LLMClient",
    # Config
    "LLMConfig",
    # Types
    "ImageInput",
    "Message",
    "Role",
    "LLMResponse",
    "ModelInfo",
    "Usage",
    # Errors
    "LLMStreamError",
]
