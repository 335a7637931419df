"""Scope — explicit registry of shared notifiers.

App-wide state is built once per scope and handed to consumers
explicitly, instead of living in module-level globals. dispose() tears
every notifier down in reverse creation order.

Usage:
    with Scope() as scope:
        theme = scope.provide("theme", lambda: Observable(AsyncUnloaded()))
        feed = scope.provide("feed", lambda: StreamNotifier(source))
        run_app(scope)
    # feed disposed, then theme
"""

from __future__ import annotations

import logging
from typing import Callable, Iterator, TypeVar

N = TypeVar("N")

logger = logging.getLogger("loadstate.scope")


class Scope:
    """Key-based notifier container with dispose lifecycle."""

    def __init__(self) -> None:
        self._notifiers: dict[str, object] = {}

    def provide(self, key: str, factory: Callable[[], N]) -> N:
        """Return the notifier under key, building it with factory on first use."""
        if key not in self._notifiers:
            self._notifiers[key] = factory()
            logger.debug("Provided %r: %r", key, self._notifiers[key])
        return self._notifiers[key]

    def get(self, key: str) -> object:
        return self._notifiers.get(key)

    def override(self, key: str, notifier: object) -> None:
        """Replace whatever is under key. The old instance is disposed."""
        old = self._notifiers.pop(key, None)
        if old is not None and old is not notifier:
            _dispose(old)
        self._notifiers[key] = notifier

    def keys(self) -> Iterator[str]:
        return iter(list(self._notifiers))

    def __contains__(self, key: str) -> bool:
        return key in self._notifiers

    def dispose(self) -> None:
        """Dispose everything, newest first, and empty the scope.

        If a dispose() raises, the rest are still disposed and the first
        exception propagates afterwards.
        """
        count = len(self._notifiers)
        try:
            while self._notifiers:
                _key, notifier = self._notifiers.popitem()
                _dispose(notifier)
        finally:
            if self._notifiers:
                self.dispose()
        logger.debug("Scope disposed: %d notifiers", count)

    def __enter__(self) -> Scope:
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()


def _dispose(notifier: object) -> None:
    dispose = getattr(notifier, "dispose", None)
    if dispose is not None:
        dispose()
