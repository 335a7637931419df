"""loadstate: reactive notifiers for sync, async and stream operation states."""

from importlib.metadata import version as _version

__version__ = _version("loadstate")

from loadstate.observable import ChangeNotifier, Observable, set_scheduler
from loadstate.states import (
    SyncState,
    SyncUnloaded,
    SyncLoaded,
    SyncError,
    AsyncState,
    AsyncUnloaded,
    AsyncLoading,
    AsyncLoaded,
    AsyncError,
    StreamState,
    StreamUnloaded,
    StreamLoading,
    StreamLoaded,
    StreamError,
    StreamComplete,
)
from loadstate.stream import EventStream, Subscription
from loadstate.notifiers import SyncNotifier, AsyncNotifier, StreamNotifier
from loadstate.scope import Scope
# textual NOT auto-imported — opt-in only

__all__ = [
    "ChangeNotifier",
    "Observable",
    "set_scheduler",
    "SyncState",
    "SyncUnloaded",
    "SyncLoaded",
    "SyncError",
    "AsyncState",
    "AsyncUnloaded",
    "AsyncLoading",
    "AsyncLoaded",
    "AsyncError",
    "StreamState",
    "StreamUnloaded",
    "StreamLoading",
    "StreamLoaded",
    "StreamError",
    "StreamComplete",
    "EventStream",
    "Subscription",
    "SyncNotifier",
    "AsyncNotifier",
    "StreamNotifier",
    "Scope",
]
