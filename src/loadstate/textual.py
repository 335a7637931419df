"""Bridge from notifiers to a running Textual app. Opt-in — requires textual.

A bound effect renders notifier.value into widgets. It only runs while the
widget tree can be queried: the app is running and not paused for a
screen swap. A widget that has already been removed raises NoMatches,
which means there is nothing left to render into. Listener calls from a
worker thread are handed to the app's own thread.
"""

import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

# ids of apps currently inside pause(); kept here, never set on the app
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Hold back bound effects while widgets are being replaced."""
    _paused_apps.add(id(app))
    try:
        yield
    finally:
        _paused_apps.discard(id(app))


def is_safe(app) -> bool:
    """True when the app is running and not paused."""
    return app.is_running and id(app) not in _paused_apps


def bind(app, notifier, effect_fn, *, fire_immediately=False):
    """Call effect_fn(notifier.value) after every change of notifier.

    Returns a function that removes the binding.

    Usage:
        def render(state):
            app.query_one("#user", Static).update(
                state.when(
                    unloaded=lambda: "",
                    loading=lambda: "Loading...",
                    loaded=lambda user: user.name,
                    error=lambda e: f"Error: {e}",
                )
            )

        unbind = bind(app, user_notifier, render, fire_immediately=True)
    """
    owner = threading.get_ident()

    def _render():
        try:
            effect_fn(notifier.value)
        except NoMatches:
            pass  # widget gone

    def _on_change():
        if not is_safe(app):
            return
        if threading.get_ident() == owner:
            _render()
        else:
            app.call_from_thread(_render)

    notifier.add_listener(_on_change)
    if fire_immediately:
        _on_change()
    return lambda: notifier.remove_listener(_on_change)
