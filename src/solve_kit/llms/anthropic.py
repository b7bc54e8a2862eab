# src/solve_kit/llms/anthropic.py

import logging
from time import monotonic
from typing import Any, Literal

from anthropic import (
    NOT_GIVEN,
    APIConnectionError,
    APIError,
    AsyncAnthropic,
    InternalServerError,
    RateLimitError,
)
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from solve_kit.observability import names
from solve_kit.observability.base import MetricsHook, NoOpMetricsHook

from .base import (
    DeltaCallback,
    LLMClient,
    LLMResponse,
    LLMStreamError,
    Message,
    ModelInfo,
    Role,
    Usage,
)

logger = logging.getLogger(__name__)

# Retried when opening a stream; anything else (auth, bad request) fails at once.
TRANSPORT_ERRORS = (APIConnectionError, RateLimitError, InternalServerError)


class AnthropicLLMClient(LLMClient):
    """Anthropic LLM client.

    Stateless. Transport-only retries. Streams every completion.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "claude-sonnet-4-20250514",
        base_url: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        max_stream_seconds: float = 30.0,
        metrics_hook: MetricsHook = NoOpMetricsHook(),
    ):
        self._client = AsyncAnthropic(api_key=api_key, base_url=base_url, timeout=timeout)
        self._model = model
        self._max_retries = max_retries
        self._max_stream_seconds = max_stream_seconds
        self.metrics_hook = metrics_hook
        logger.info(
            "Initialized AnthropicLLMClient with model=%s, timeout=%s",
            model,
            timeout,
        )

    async def complete(
        self,
        *,
        messages: list[Message],
        temperature: float = 0.0,
        max_tokens: int | None = None,
        on_delta: DeltaCallback | None = None,
    ) -> LLMResponse:
        start = monotonic()

        # Extract system message (Anthropic handles it separately)
        system_content, non_system_messages = self._extract_system(messages)

        # Convert to provider format (internal only - never leaks)
        anthropic_messages = self._convert_messages(non_system_messages)

        logger.debug(
            "Calling Anthropic: model=%s, messages=%d",
            self._model,
            len(anthropic_messages),
        )

        labels = {"provider": "anthropic", "model": self._model}
        try:
            stream = await self._open_stream(
                system=system_content,
                messages=anthropic_messages,
                temperature=temperature,
                max_tokens=max_tokens or 4096,  # Anthropic requires max_tokens
            )
            response = await self._consume_stream(
                stream, start=start, stream_start=monotonic(), on_delta=on_delta
            )
        except Exception:
            self.metrics_hook.increment(names.LLM_ERRORS_TOTAL, labels=labels)
            raise

        # Metrics
        self.metrics_hook.record_latency(
            names.LLM_COMPLETION_DURATION, response.latency_ms
        )
        self.metrics_hook.increment(names.LLM_REQUESTS_TOTAL, labels=labels)
        self.metrics_hook.increment(names.LLM_TOKENS_TOTAL, response.usage.total_tokens)

        logger.info(
            "Anthropic completion: finish=%s, tokens=%d, latency=%.0fms",
            response.finish_reason,
            response.usage.total_tokens,
            response.latency_ms,
        )

        return response

    async def list_models(self) -> list[ModelInfo]:
        page = await self._client.models.list()
        return [
            ModelInfo(name=model.id, display_name=model.display_name)
            for model in page.data
        ]

    async def _open_stream(
        self,
        *,
        system: str | None,
        messages: list[dict[str, Any]],
        temperature: float,
        max_tokens: int,
    ) -> Any:
        """Open the message stream with transport-only retries."""
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._max_retries),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=10),
            retry=retry_if_exception_type(TRANSPORT_ERRORS),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                return await self._client.messages.create(
                    model=self._model,
                    messages=messages,  # type: ignore[arg-type]
                    temperature=temperature,
                    max_tokens=max_tokens,
                    system=system if system else NOT_GIVEN,
                    stream=True,
                )

    async def _consume_stream(
        self,
        stream: Any,
        *,
        start: float,
        stream_start: float,
        on_delta: DeltaCallback | None,
    ) -> LLMResponse:
        parts: list[str] = []
        stop_reason: str | None = None
        input_tokens = 0
        output_tokens = 0

        try:
            async for event in stream:
                if event.type == "message_start":
                    input_tokens = event.message.usage.input_tokens
                    output_tokens = event.message.usage.output_tokens
                elif event.type == "content_block_delta":
                    if event.delta.type == "text_delta" and event.delta.text:
                        parts.append(event.delta.text)
                        if on_delta is not None:
                            on_delta(event.delta.text)
                elif event.type == "message_delta":
                    stop_reason = event.delta.stop_reason
                    output_tokens = event.usage.output_tokens

                # Deadline covers streaming only, not connection retries.
                if monotonic() - stream_start > self._max_stream_seconds:
                    await stream.close()
                    raise TimeoutError("Anthropic response streaming timed out")
        except APIError as exc:
            raise LLMStreamError(str(exc) or "Anthropic streaming error") from exc

        # Map finish reason
        finish_reason: Literal["stop", "length", "error"]
        if stop_reason in ("end_turn", "stop_sequence"):
            finish_reason = "stop"
        elif stop_reason == "max_tokens":
            finish_reason = "length"
        else:
            finish_reason = "error"

        return LLMResponse(
            content="".join(parts).strip(),
            finish_reason=finish_reason,
            usage=Usage(
                prompt_tokens=input_tokens,
                completion_tokens=output_tokens,
                total_tokens=input_tokens + output_tokens,
            ),
            latency_ms=1000 * (monotonic() - start),
        )

    def _extract_system(
        self, messages: list[Message]
    ) -> tuple[str | None, list[Message]]:
        """Extract system message from message list.

        Anthropic requires system message as a separate parameter.
        """
        system_content = None
        non_system = []

        for m in messages:
            if m.role == Role.SYSTEM:
                if m.content.strip():
                    system_content = m.content.strip()
            else:
                non_system.append(m)

        return system_content, non_system

    def _convert_messages(self, messages: list[Message]) -> list[dict]:
        """Convert Message objects to Anthropic format.

        Internal only. Provider format never leaks outside.
        """
        result = []
        for m in messages:
            if m.is_empty():
                continue

            if not m.images:
                result.append({"role": m.role.value, "content": m.content.strip()})
                continue

            content: list[dict[str, Any]] = [
                {
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": image.mime_type,
                        "data": image.data,
                    },
                }
                for image in m.images
            ]
            if m.content.strip():
                content.append({"type": "text", "text": m.content.strip()})
            result.append({"role": m.role.value, "content": content})
        return result
