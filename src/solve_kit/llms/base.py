# src/solve_kit/llms/base.py

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Literal, Protocol

from solve_kit.observability.base import MetricsHook

DeltaCallback = Callable[[str], None]


class Role(str, Enum):
    """Message role in a conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ImageInput:
    """An inline image sent alongside a message.

    `data` is base64 without a data-URL prefix.
    """

    data: str
    mime_type: str
    detail: Literal["auto", "low", "high"] = "auto"

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


@dataclass(frozen=True)
class Message:
    """A single message in the conversation.

    Immutable. Stateless. Provider-agnostic.
    """

    role: Role
    content: str
    images: tuple[ImageInput, ...] = ()

    def is_empty(self) -> bool:
        return not self.content.strip() and not self.images


@dataclass(frozen=True)
class Usage:
    """Token usage for a completion."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass(frozen=True)
class LLMResponse:
    """Normalized, fully streamed LLM response.

    `content` is the concatenation of every streamed delta, trimmed.
    """

    content: str
    finish_reason: Literal["stop", "length", "error"]
    usage: Usage
    latency_ms: float


@dataclass(frozen=True)
class ModelInfo:
    name: str
    display_name: str


class LLMStreamError(RuntimeError):
    """The provider reported an error in the middle of a stream."""


class LLMClient(Protocol):
    """Protocol for LLM clients.

    Design principles:
    - Stateless: Every call receives full message list
    - Transport only: Retries only on network/rate-limit errors
    - Complete text out: deltas go to `on_delta`, callers get the whole answer
    - No leakage: Provider objects never escape the adapter
    """

    metrics_hook: MetricsHook

    async def complete(
        self,
        *,
        messages: list[Message],
        temperature: float = 0.0,
        max_tokens: int | None = None,
        on_delta: DeltaCallback | None = None,
    ) -> LLMResponse:
        """Single streamed completion. Stateless. Full message list required.

        Args:
            messages: Complete conversation history. Empty messages are skipped.
            temperature: Sampling temperature (0.0 = deterministic).
            max_tokens: Maximum tokens in response.
            on_delta: Called with each text delta, in order, as it arrives.

        Returns:
            Normalized LLMResponse. Provider details never leak.

        Raises:
            TimeoutError: If streaming outlives the configured deadline.
            LLMStreamError: If the provider reports an error mid-stream.
            Provider-specific errors after retry exhaustion.
        """
        ...

    async def list_models(self) -> list[ModelInfo]:
        """Models available to the configured account."""
        ...
