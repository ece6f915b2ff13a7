"""
Sync module for cytube-sorter.

    - notifications: Typed inbound events (snapshot, queue, delete, move, ...)
    - reconciler: Reconciler, the session state machine that keeps the
      remote playlist in round-robin order

Usage:
    from cytube_sorter.sync import Reconciler, ItemQueued

    reconciler = Reconciler(sink)
    reconciler.handle(ItemQueued(item=item, after=FRONT))
"""

from cytube_sorter.sync.notifications import (
    FATAL_ERROR_PHRASES,
    ItemDeleted,
    ItemMoved,
    ItemQueued,
    LoginResult,
    Notification,
    PlaylistSnapshot,
    RemoteErrorMessage,
    ResortRequested,
    SortModeChanged,
    is_fatal_error,
)
from cytube_sorter.sync.reconciler import (
    CommandSink,
    ReconcileStats,
    Reconciler,
    SessionState,
)

__all__ = [
    # Notifications
    "Notification",
    "PlaylistSnapshot",
    "ItemQueued",
    "ItemDeleted",
    "ItemMoved",
    "RemoteErrorMessage",
    "LoginResult",
    "ResortRequested",
    "SortModeChanged",
    "FATAL_ERROR_PHRASES",
    "is_fatal_error",
    # Reconciler
    "Reconciler",
    "ReconcileStats",
    "SessionState",
    "CommandSink",
]
