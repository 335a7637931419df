"""State variants for sync, async and stream operations.

Three closed families, one per notifier:

    SyncState   = SyncUnloaded | SyncLoaded | SyncError
    AsyncState  = AsyncUnloaded | AsyncLoading | AsyncLoaded | AsyncError
    StreamState = StreamUnloaded | StreamLoading | StreamLoaded | StreamError | StreamComplete

Variants are frozen dataclasses, so they compare by value and work with
structural pattern matching:

    match notifier.value:
        case AsyncLoaded(value):
            render(value)
        case AsyncError(error):
            show(error)
        case AsyncLoading() | AsyncUnloaded():
            spinner()

For a match that cannot forget a variant, use when(): every handler is a
required keyword argument.

    text = state.when(
        unloaded=lambda: "-",
        loading=lambda: "...",
        loaded=lambda v: str(v),
        error=lambda e: f"failed: {e}",
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import TracebackType
from typing import Callable, ClassVar, Generic, Optional, TypeVar

T = TypeVar("T")
E = TypeVar("E")
R = TypeVar("R")


# ─── Sync ────────────────────────────────────────────────────────────────────


class SyncState(Generic[T, E]):
    """Base of the synchronous family. Never instantiated directly."""

    __slots__ = ()

    is_loaded: ClassVar[bool] = False
    is_error: ClassVar[bool] = False

    def when(
        self,
        *,
        unloaded: Callable[[], R],
        loaded: Callable[[T], R],
        error: Callable[[E], R],
    ) -> R:
        raise NotImplementedError


@dataclass(frozen=True)
class SyncUnloaded(SyncState[T, E]):
    """The operation has not run yet."""

    def when(self, *, unloaded, loaded, error):
        return unloaded()


@dataclass(frozen=True)
class SyncLoaded(SyncState[T, E]):
    value: T

    is_loaded: ClassVar[bool] = True

    def when(self, *, unloaded, loaded, error):
        return loaded(self.value)


@dataclass(frozen=True)
class SyncError(SyncState[T, E]):
    error: E

    is_error: ClassVar[bool] = True

    def when(self, *, unloaded, loaded, error):
        return error(self.error)


# ─── Async ───────────────────────────────────────────────────────────────────


class AsyncState(Generic[T, E]):
    """Base of the asynchronous family. Never instantiated directly."""

    __slots__ = ()

    is_loaded: ClassVar[bool] = False
    is_error: ClassVar[bool] = False
    is_loading: ClassVar[bool] = False

    def when(
        self,
        *,
        unloaded: Callable[[], R],
        loading: Callable[[], R],
        loaded: Callable[[T], R],
        error: Callable[[E], R],
    ) -> R:
        raise NotImplementedError


@dataclass(frozen=True)
class AsyncUnloaded(AsyncState[T, E]):
    """No reload has started yet."""

    def when(self, *, unloaded, loading, loaded, error):
        return unloaded()


@dataclass(frozen=True)
class AsyncLoading(AsyncState[T, E]):
    """A reload is in flight."""

    is_loading: ClassVar[bool] = True

    def when(self, *, unloaded, loading, loaded, error):
        return loading()


@dataclass(frozen=True)
class AsyncLoaded(AsyncState[T, E]):
    value: T

    is_loaded: ClassVar[bool] = True

    def when(self, *, unloaded, loading, loaded, error):
        return loaded(self.value)


@dataclass(frozen=True)
class AsyncError(AsyncState[T, E]):
    error: E

    is_error: ClassVar[bool] = True

    def when(self, *, unloaded, loading, loaded, error):
        return error(self.error)


# ─── Stream ──────────────────────────────────────────────────────────────────


class StreamState(Generic[T, E]):
    """Base of the stream family. Never instantiated directly."""

    __slots__ = ()

    is_loaded: ClassVar[bool] = False
    is_error: ClassVar[bool] = False
    is_loading: ClassVar[bool] = False
    is_complete: ClassVar[bool] = False

    def when(
        self,
        *,
        unloaded: Callable[[], R],
        loading: Callable[[], R],
        loaded: Callable[[T], R],
        error: Callable[[E], R],
        complete: Callable[[Optional[T]], R],
    ) -> R:
        raise NotImplementedError


@dataclass(frozen=True)
class StreamUnloaded(StreamState[T, E]):
    """Not subscribed, or subscribed with nothing received yet."""

    def when(self, *, unloaded, loading, loaded, error, complete):
        return unloaded()


@dataclass(frozen=True)
class StreamLoading(StreamState[T, E]):
    is_loading: ClassVar[bool] = True

    def when(self, *, unloaded, loading, loaded, error, complete):
        return loading()


@dataclass(frozen=True)
class StreamLoaded(StreamState[T, E]):
    """One element emitted by the stream."""

    value: T

    is_loaded: ClassVar[bool] = True

    def when(self, *, unloaded, loading, loaded, error, complete):
        return loaded(self.value)


@dataclass(frozen=True)
class StreamError(StreamState[T, E]):
    """An error signalled by the stream. The subscription stays open.

    traceback is diagnostic context only and does not take part in equality.
    """

    error: E
    traceback: Optional[TracebackType] = field(default=None, compare=False, repr=False)

    is_error: ClassVar[bool] = True

    def when(self, *, unloaded, loading, loaded, error, complete):
        return error(self.error)


@dataclass(frozen=True)
class StreamComplete(StreamState[T, E]):
    """The stream is done. last_value is the payload of the last StreamLoaded, if any."""

    last_value: Optional[T] = None

    is_complete: ClassVar[bool] = True

    def when(self, *, unloaded, loading, loaded, error, complete):
        return complete(self.last_value)
