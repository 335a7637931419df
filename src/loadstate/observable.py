"""Observable values — a value cell that notifies listeners on every write.

ChangeNotifier is the listener half: an ordered set of zero-argument
callbacks invoked synchronously. Listeners read the new state themselves.

Observable adds a single value slot. There is no equality check: setting
the same value twice notifies twice.

Thread safety: call set_scheduler() once from the host loop's thread. After
that, any .set() from a background thread is auto-marshaled. Same-thread
.set() remains synchronous.
"""

from __future__ import annotations

import threading
from typing import Callable, Generic, TypeVar

T = TypeVar("T")

Listener = Callable[[], None]

# ─── Auto-marshal ────────────────────────────────────────────────────────────
_scheduler = None
_scheduler_thread = None


def set_scheduler(scheduler) -> None:
    """Set the global thread scheduler for cross-thread Observable writes.

    Call once from the host loop's thread:
        loadstate.set_scheduler(app.call_from_thread)

    Pass None to go back to direct delivery.
    """
    global _scheduler, _scheduler_thread
    _scheduler = scheduler
    _scheduler_thread = threading.current_thread() if scheduler is not None else None


class ChangeNotifier:
    """Holds listeners and calls them, in registration order, on notify."""

    __slots__ = ("_listeners", "_disposed")

    def __init__(self) -> None:
        # dict as an ordered set
        self._listeners: dict[Listener, None] = {}
        self._disposed = False

    @property
    def has_listeners(self) -> bool:
        return bool(self._listeners)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def add_listener(self, listener: Listener) -> None:
        self._listeners[listener] = None

    def remove_listener(self, listener: Listener) -> None:
        self._listeners.pop(listener, None)

    def notify_listeners(self) -> None:
        """Call every registered listener once. Exceptions propagate."""
        for listener in list(self._listeners):
            # removed by an earlier listener in this pass
            if listener in self._listeners:
                listener()

    def dispose(self) -> None:
        """Release all listeners. Safe to call more than once."""
        self._listeners.clear()
        self._disposed = True


class Observable(ChangeNotifier, Generic[T]):
    """A single observable value.

    Subclass it to give an app-level cell its own mutation methods:

        class ThemeMode(Observable[AsyncState[str, str]]):
            def change(self, mode: str) -> None:
                self.value = AsyncLoaded(mode)
    """

    __slots__ = ("_value",)

    def __init__(self, value: T) -> None:
        super().__init__()
        self._value = value

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        """Write a new value and notify. Auto-marshals from background threads."""
        if _scheduler is not None and threading.current_thread() != _scheduler_thread:
            _scheduler(lambda v=value: self._set_direct(v))
        else:
            self._set_direct(value)

    def _set_direct(self, value: T) -> None:
        self._value = value
        self.notify_listeners()

    @property
    def value(self) -> T:
        return self._value

    @value.setter
    def value(self, value: T) -> None:
        self.set(value)

    state = value

    def __repr__(self) -> str:
        return f"Observable({self._value!r})"
