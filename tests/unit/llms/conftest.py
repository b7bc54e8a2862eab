from collections.abc import Iterable
from typing import Any

import pytest


class FakeStream:
    """Async-iterable stand-in for a provider stream."""

    def __init__(self, events: Iterable[Any], error: Exception | None = None) -> None:
        self._events = list(events)
        self._error = error
        self.closed = False

    def __aiter__(self) -> "FakeStream":
        return self

    async def __anext__(self) -> Any:
        if self._events:
            return self._events.pop(0)
        if self._error is not None:
            error, self._error = self._error, None
            raise error
        raise StopAsyncIteration

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_stream() -> type[FakeStream]:
    return FakeStream
