# src/solve_kit/llms/openai.py

import logging
from time import monotonic
from typing import Any, Literal

from openai import (
    NOT_GIVEN,
    APIConnectionError,
    APIError,
    AsyncOpenAI,
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
    Usage,
)

logger = logging.getLogger(__name__)

# Retried when opening a stream; anything else (auth, bad request) fails at once.
TRANSPORT_ERRORS = (APIConnectionError, RateLimitError, InternalServerError)

DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"


def normalize_base_url(base_url: str | None) -> str:
    return (base_url or DEFAULT_OPENAI_BASE_URL).rstrip("/")


class OpenAILLMClient(LLMClient):
    """OpenAI LLM client.

    Stateless. Transport-only retries. Streams every completion.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4.1-mini",
        base_url: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        max_stream_seconds: float = 30.0,
        metrics_hook: MetricsHook = NoOpMetricsHook(),
    ):
        self._client = AsyncOpenAI(
            api_key=api_key, base_url=normalize_base_url(base_url), timeout=timeout
        )
        self._model = model
        self._max_retries = max_retries
        self._max_stream_seconds = max_stream_seconds
        self.metrics_hook = metrics_hook
        logger.info(
            "Initialized OpenAILLMClient with model=%s, timeout=%s",
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

        # Convert to provider format (internal only - never leaks)
        openai_messages = self._convert_messages(messages)

        logger.debug(
            "Calling OpenAI: model=%s, messages=%d",
            self._model,
            len(openai_messages),
        )

        labels = {"provider": "openai", "model": self._model}
        try:
            stream = await self._open_stream(
                messages=openai_messages,
                temperature=temperature,
                max_tokens=max_tokens,
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
        self.metrics_hook.increment(
            names.LLM_TOKENS_PROMPT, response.usage.prompt_tokens
        )
        self.metrics_hook.increment(
            names.LLM_TOKENS_COMPLETION, response.usage.completion_tokens
        )
        self.metrics_hook.increment(names.LLM_TOKENS_TOTAL, response.usage.total_tokens)

        logger.info(
            "OpenAI completion: finish=%s, tokens=%d, latency=%.0fms",
            response.finish_reason,
            response.usage.total_tokens,
            response.latency_ms,
        )

        return response

    async def list_models(self) -> list[ModelInfo]:
        page = await self._client.models.list()
        return [ModelInfo(name=model.id, display_name=model.id) for model in page.data]

    async def _open_stream(
        self,
        *,
        messages: list[dict[str, Any]],
        temperature: float,
        max_tokens: int | None,
    ) -> Any:
        """Open the completion stream with transport-only retries."""
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._max_retries),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=10),
            retry=retry_if_exception_type(TRANSPORT_ERRORS),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                return await self._client.chat.completions.create(
                    model=self._model,
                    messages=messages,  # type: ignore[arg-type]
                    temperature=temperature,
                    max_tokens=max_tokens if max_tokens else NOT_GIVEN,
                    stream=True,
                    stream_options={"include_usage": True},
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
        raw_finish: str | None = None
        usage = Usage(prompt_tokens=0, completion_tokens=0, total_tokens=0)

        try:
            async for chunk in stream:
                if chunk.usage is not None:
                    usage = Usage(
                        prompt_tokens=chunk.usage.prompt_tokens,
                        completion_tokens=chunk.usage.completion_tokens,
                        total_tokens=chunk.usage.total_tokens,
                    )

                if chunk.choices:
                    choice = chunk.choices[0]
                    delta = choice.delta.content
                    if delta:
                        parts.append(delta)
                        if on_delta is not None:
                            on_delta(delta)
                    if choice.finish_reason:
                        raw_finish = choice.finish_reason

                # Deadline covers streaming only, not connection retries.
                if monotonic() - stream_start > self._max_stream_seconds:
                    await stream.close()
                    raise TimeoutError("OpenAI response streaming timed out")
        except APIError as exc:
            raise LLMStreamError(str(exc) or "OpenAI streaming error") from exc

        finish_reason: Literal["stop", "length", "error"]
        if raw_finish == "stop":
            finish_reason = "stop"
        elif raw_finish == "length":
            finish_reason = "length"
        else:
            finish_reason = "error"

        return LLMResponse(
            content="".join(parts).strip(),
            finish_reason=finish_reason,
            usage=usage,
            latency_ms=1000 * (monotonic() - start),
        )

    def _convert_messages(self, messages: list[Message]) -> list[dict]:
        """Convert Message objects to OpenAI format.

        Internal only. Provider format never leaks outside.
        """
        result = []
        for m in messages:
            if m.is_empty():
                continue

            if not m.images:
                result.append({"role": m.role.value, "content": m.content.strip()})
                continue

            content: list[dict[str, Any]] = []
            if m.content.strip():
                content.append({"type": "text", "text": m.content.strip()})
            for image in m.images:
                content.append(
                    {
                        "type": "image_url",
                        "image_url": {"url": image.data_url, "detail": image.detail},
                    }
                )
            result.append({"role": m.role.value, "content": content})
        return result
