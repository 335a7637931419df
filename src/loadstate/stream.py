"""Push-based event stream with error and completion channels.

A broadcast stream: emit values, raise errors, close it, and listen to it
any number of times. Errors do not end the stream; close() does. Each
listen() returns a Subscription that can be cancelled.

map/filter return derived streams (immutable chain) that forward errors
and completion. dispose() tears the chain down without signalling done.
"""

from __future__ import annotations

from typing import AsyncIterable, Callable, Generic, Optional, TypeVar

T = TypeVar("T")
U = TypeVar("U")

OnValue = Callable[[T], None]
OnError = Callable[[BaseException], None]
OnDone = Callable[[], None]
Disposer = Callable[[], None]


class Subscription(Generic[T]):
    """Handle for one listen() call. Once cancelled, it receives nothing."""

    __slots__ = ("_stream", "_on_value", "_on_error", "_on_done", "_active")

    def __init__(
        self,
        stream: EventStream[T],
        on_value: OnValue,
        on_error: Optional[OnError],
        on_done: Optional[OnDone],
    ) -> None:
        self._stream = stream
        self._on_value = on_value
        self._on_error = on_error
        self._on_done = on_done
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        """Stop delivery and detach from the stream. Idempotent."""
        if not self._active:
            return
        self._active = False
        self._stream._detach(self)


class EventStream(Generic[T]):
    """Broadcast event stream with operator chaining."""

    def __init__(self) -> None:
        self._subscriptions: list[Subscription[T]] = []
        self._children: list[EventStream] = []  # downstream streams for dispose
        self._closed = False
        self._disposed = False
        self._parent_disposer: Disposer | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    def listen(
        self,
        on_value: OnValue,
        *,
        on_error: Optional[OnError] = None,
        on_done: Optional[OnDone] = None,
    ) -> Subscription[T]:
        """Register callbacks. Listening to a closed stream gets on_done right away."""
        sub = Subscription(self, on_value, on_error, on_done)
        if self._closed or self._disposed:
            sub._active = False
            if self._closed and on_done is not None:
                on_done()
            return sub
        self._subscriptions.append(sub)
        return sub

    def emit(self, value: T) -> None:
        """Push a value to all active subscriptions."""
        if self._disposed:
            return
        if self._closed:
            raise RuntimeError("Cannot emit on a closed stream")
        for sub in list(self._subscriptions):
            # cancelled by an earlier callback in this pass
            if sub._active:
                sub._on_value(value)

    def error(self, exc: BaseException) -> None:
        """Push an error. The stream stays open.

        Every active subscription gets the error. If one has no on_error,
        or an on_error handler raises (e.g. a derived stream with its own
        unhandled listener), the first such exception is raised here once
        all of them have been called.
        """
        if self._disposed:
            return
        if self._closed:
            raise RuntimeError("Cannot add an error to a closed stream")
        first: BaseException | None = None
        for sub in list(self._subscriptions):
            if not sub._active:
                continue
            if sub._on_error is None:
                first = first or exc
                continue
            try:
                sub._on_error(exc)
            except Exception as raised:
                first = first or raised
        if first is not None:
            raise first

    def close(self) -> None:
        """Signal completion. Each subscription gets on_done once, then detaches."""
        if self._disposed or self._closed:
            return
        self._closed = True
        subs, self._subscriptions = self._subscriptions, []
        for sub in subs:
            if sub._active:
                sub._active = False
                if sub._on_done is not None:
                    sub._on_done()

    async def pump(self, source: AsyncIterable[T]) -> None:
        """Feed an async iterable into this stream, then close it.

        An exception raised by the iterable goes out on the error channel
        and ends the feed. Exceptions from listeners are not the source's:
        they propagate out of pump(). The stream is closed either way,
        including when the task running pump() is cancelled.

        Usage:
            asyncio.create_task(stream.pump(websocket_messages()))
        """
        iterator = aiter(source)
        try:
            while True:
                try:
                    value = await anext(iterator)
                except StopAsyncIteration:
                    break
                except Exception as exc:
                    self.error(exc)
                    break
                self.emit(value)
        finally:
            self.close()

    def map(self, fn: Callable[[T], U]) -> EventStream[U]:
        """Transform values through fn. Errors and completion pass through."""
        child: EventStream[U] = EventStream()
        child._parent_disposer = self._track_child(child)
        self.listen(lambda v: child.emit(fn(v)), on_error=child.error, on_done=child.close)
        return child

    def filter(self, fn: Callable[[T], bool]) -> EventStream[T]:
        """Only pass values where fn returns True."""
        child: EventStream[T] = EventStream()
        child._parent_disposer = self._track_child(child)
        self.listen(
            lambda v: child.emit(v) if fn(v) else None,
            on_error=child.error,
            on_done=child.close,
        )
        return child

    def dispose(self) -> None:
        """Tear down this stream and all downstream children. No done signal."""
        self._disposed = True
        for sub in self._subscriptions:
            sub._active = False
        self._subscriptions.clear()
        for child in list(self._children):
            child.dispose()
        self._children.clear()
        if self._parent_disposer is not None:
            self._parent_disposer()
            self._parent_disposer = None

    def _detach(self, sub: Subscription[T]) -> None:
        try:
            self._subscriptions.remove(sub)
        except ValueError:
            pass  # already gone (closed or disposed)

    def _track_child(self, child: EventStream) -> Disposer:
        """Register child for dispose propagation. Returns a disposer that removes it."""
        self._children.append(child)

        def _remove() -> None:
            try:
                self._children.remove(child)
            except ValueError:
                pass

        return _remove

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "closed" if self._closed else "open"
        return f"EventStream({len(self._subscriptions)} listeners, {state})"
