"""Notifiers — reactive holders for the outcome of an operation.

Each notifier owns one state value from a closed variant family (see
states.py) and notifies its listeners on every transition. Listeners take
no arguments and read .value themselves.

- SyncNotifier runs a synchronous producer now and on every reload().
- AsyncNotifier publishes AsyncLoading, awaits a producer, publishes the result.
- StreamNotifier follows an EventStream of StreamState elements.

Producers are responsible for mapping their own failures into the Error
variant. A producer that raises instead is a contract violation, and the
exception propagates to the caller of reload() untouched.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from loadstate.observable import ChangeNotifier
from loadstate.states import (
    AsyncLoading,
    AsyncState,
    AsyncUnloaded,
    StreamComplete,
    StreamError,
    StreamLoaded,
    StreamState,
    StreamUnloaded,
    SyncState,
)
from loadstate.stream import EventStream, Subscription

T = TypeVar("T")
E = TypeVar("E")

logger = logging.getLogger("loadstate.notifiers")


class SyncNotifier(ChangeNotifier, Generic[T, E]):
    """Wraps a synchronous producer of SyncState.

    The producer runs once on construction and again on each reload().

    Usage:
        count = 0

        def next_count():
            nonlocal count
            count += 1
            return SyncLoaded(count)

        counter = SyncNotifier(next_count)   # value == SyncLoaded(1)
        counter.reload()                     # value == SyncLoaded(2)
        counter.value = SyncLoaded(10)       # direct write, also notifies
    """

    __slots__ = ("_producer", "_value")

    def __init__(self, producer: Callable[[], SyncState[T, E]]) -> None:
        super().__init__()
        self._producer = producer
        self.reload()

    @property
    def value(self) -> SyncState[T, E]:
        return self._value

    @value.setter
    def value(self, state: SyncState[T, E]) -> None:
        self._value = state
        self.notify_listeners()

    state = value

    def reload(self) -> None:
        """Run the producer again and notify. Producer exceptions propagate."""
        self.value = self._producer()

    def __repr__(self) -> str:
        return f"SyncNotifier({self._value!r})"


class AsyncNotifier(ChangeNotifier, Generic[T, E]):
    """Wraps a producer of an awaitable AsyncState.

    Construction inside a running event loop schedules the first reload.
    Outside of one, the notifier stays AsyncUnloaded until reload() is
    called from a coroutine.

    Overlapping reloads are not guarded: both run to completion and the
    state ends up as whichever settled last.

    Usage:
        async def fetch_user():
            try:
                return AsyncLoaded(await api.user())
            except ApiError as e:
                return AsyncError(str(e))

        user = AsyncNotifier(fetch_user)
        await user.reload()
    """

    __slots__ = ("_producer", "_value", "_tasks")

    def __init__(self, producer: Callable[[], Awaitable[AsyncState[T, E]]]) -> None:
        super().__init__()
        self._producer = producer
        self._value: AsyncState[T, E] = AsyncUnloaded()
        # strong refs, so fire-and-forget reloads are not garbage-collected
        self._tasks: set[asyncio.Task] = set()
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; initial load of %r deferred", producer)
        else:
            self.reload()

    @property
    def value(self) -> AsyncState[T, E]:
        return self._value

    state = value

    @property
    def pending(self) -> int:
        """Number of reloads that have not settled yet."""
        return len(self._tasks)

    def reload(self) -> asyncio.Task[None]:
        """Publish AsyncLoading, then settle on the producer's result.

        AsyncLoading is published and the producer invoked before this
        returns. The returned task completes once the result is published;
        awaiting it re-raises a producer failure.
        """
        loop = asyncio.get_running_loop()
        logger.debug("Reloading %r (%d already pending)", self, len(self._tasks))
        self._publish(AsyncLoading())
        awaitable = self._producer()
        task = loop.create_task(self._settle(awaitable))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _settle(self, awaitable: Awaitable[AsyncState[T, E]]) -> None:
        self._publish(await awaitable)

    def _publish(self, state: AsyncState[T, E]) -> None:
        self._value = state
        self.notify_listeners()

    def __repr__(self) -> str:
        return f"AsyncNotifier({self._value!r})"


class StreamNotifier(ChangeNotifier, Generic[T, E]):
    """Follows an EventStream whose elements are already StreamState values.

    Subscribes on construction. Every element becomes the current state.
    Stream errors become StreamError and the subscription carries on.
    Completion becomes StreamComplete with the last loaded payload.

    The owner must call dispose() when done with it; nothing cancels the
    subscription otherwise.

    Usage:
        ticks = EventStream()
        notifier = StreamNotifier(ticks.map(StreamLoaded))
        ticks.emit(1)      # value == StreamLoaded(1)
        ticks.close()      # value == StreamComplete(last_value=1)
        notifier.dispose()
    """

    __slots__ = ("_stream", "_subscription", "_value")

    def __init__(self, stream: EventStream[StreamState[T, E]]) -> None:
        super().__init__()
        self._stream = stream
        self._subscription: Optional[Subscription] = None
        self._value: StreamState[T, E] = StreamUnloaded()
        self._listen()

    @property
    def stream(self) -> EventStream[StreamState[T, E]]:
        return self._stream

    @property
    def value(self) -> StreamState[T, E]:
        return self._value

    state = value

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def _listen(self) -> None:
        self._cancel()
        self._publish(StreamUnloaded())
        logger.debug("Subscribing to %r", self._stream)
        self._subscription = self._stream.listen(
            self._on_value,
            on_error=self._on_error,
            on_done=self._on_done,
        )

    def _on_value(self, state: StreamState[T, E]) -> None:
        self._publish(state)

    def _on_error(self, exc: BaseException) -> None:
        self._publish(StreamError(exc, traceback=exc.__traceback__))

    def _on_done(self) -> None:
        last = self._value.value if isinstance(self._value, StreamLoaded) else None
        self._publish(StreamComplete(last_value=last))

    def _publish(self, state: StreamState[T, E]) -> None:
        self._value = state
        self.notify_listeners()

    def _cancel(self) -> None:
        if self._subscription is not None:
            logger.debug("Cancelling subscription to %r", self._stream)
            self._subscription.cancel()
            self._subscription = None

    def reload(self) -> None:
        """Cancel the current subscription and subscribe again from scratch."""
        logger.debug("Reloading stream notifier on %r", self._stream)
        self._listen()

    def dispose(self) -> None:
        """Cancel the subscription and release listeners. Idempotent."""
        logger.debug("Disposing stream notifier on %r", self._stream)
        self._cancel()
        super().dispose()

    def __repr__(self) -> str:
        return f"StreamNotifier({self._value!r})"
