"""
Playlist reconciliation for cytube-sorter.

The Reconciler owns the local playlist mirror and the echo suppressor, and
turns each server notification into mirror updates and, when the order is
no longer fair, into move commands sent back to the server.

Session States:
    UNINITIALIZED: Waiting for login and the first playlist snapshot.
                   Incremental events are ignored since there is nothing
                   to apply them to.
    SYNCED: The mirror tracks the server playlist. Every change that did
            not come from this bot triggers a sort pass.
    TERMINATED: A fatal server error ended the session. The mirror and the
                pending echoes are dropped; further notifications raise
                SessionTerminated.

Sort Pass:
    1. Compute the round-robin order of the mirror
    2. Diff it against the mirror into move commands
    3. For each command: record it as a pending echo, apply it to the
       mirror, send it to the server

    The mirror is updated as commands are sent, so when the server echoes
    a move back it is recognised as ours and skipped without touching the
    mirror again.

Desync Handling:
    If an event references a uid the mirror doesn't have (ReferenceNotFound)
    the mirror has drifted. The pass is abandoned, no move is sent, and a
    fresh playlist is requested from the server.

    A manual re-sort (the chat sort command) also starts from a fresh
    playlist, so moves the server refused are not trusted forever.

Threading:
    handle() processes one notification completely before the next. It is
    guarded by a lock so that a caller delivering from several threads still
    gets strictly sequential processing.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from cytube_sorter.core.exceptions import (
    FatalRemoteError,
    PlaylistError,
    SessionTerminated,
)
from cytube_sorter.core.logger import get_logger, log_move_command
from cytube_sorter.playlist.diff import generate_moves
from cytube_sorter.playlist.echo import EchoSuppressor
from cytube_sorter.playlist.fairness import round_robin_sort
from cytube_sorter.playlist.mirror import QueueMirror
from cytube_sorter.playlist.models import MoveCommand, PlaylistItem
from cytube_sorter.sync.notifications import (
    ItemDeleted,
    ItemMoved,
    ItemQueued,
    LoginResult,
    Notification,
    PlaylistSnapshot,
    RemoteErrorMessage,
    ResortRequested,
    SortModeChanged,
)

logger = get_logger(__name__)


class SessionState(Enum):
    UNINITIALIZED = "uninitialized"
    SYNCED = "synced"
    TERMINATED = "terminated"


class CommandSink(Protocol):
    """Outbound side of the connection: the only two messages the sorter sends."""

    def move_media(self, command: MoveCommand) -> None:
        ...

    def request_playlist(self) -> None:
        ...


@dataclass
class ReconcileStats:
    """Counters for the end-of-session summary."""
    passes: int = 0
    commands_sent: int = 0
    echoes_suppressed: int = 0
    resyncs_requested: int = 0


class Reconciler:
    """
    Keeps the remote playlist in round-robin order.

    Args:
        sink: Where move commands and playlist requests are sent.
        sort_enabled: Whether sort passes run. When False, notifications
                      still update the mirror but nothing is sent.

    Example:
        reconciler = Reconciler(client, sort_enabled=config.sort.enabled)
        for notification in client.notifications():
            reconciler.handle(notification)
    """

    def __init__(self, sink: CommandSink, sort_enabled: bool = True) -> None:
        self._sink = sink
        self._sort_enabled = sort_enabled
        self._mirror = QueueMirror()
        self._echoes = EchoSuppressor()
        self._state = SessionState.UNINITIALIZED
        self._logged_in = False
        self._lock = threading.Lock()
        self.stats = ReconcileStats()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def sort_enabled(self) -> bool:
        return self._sort_enabled

    @property
    def logged_in(self) -> bool:
        return self._logged_in

    @property
    def pending_echoes(self) -> int:
        return len(self._echoes)

    def playlist(self) -> tuple[PlaylistItem, ...]:
        """Current mirror contents."""
        return self._mirror.snapshot()

    def handle(self, notification: Notification) -> list[MoveCommand]:
        """
        Process one notification.

        Returns:
            The move commands sent as a result (often empty).

        Raises:
            FatalRemoteError: On a fatal server error or failed login.
                              The session is terminated before raising.
            SessionTerminated: If the session already ended.
            TypeError: If notification is not a known variant.
        """
        with self._lock:
            if self._state is SessionState.TERMINATED:
                raise SessionTerminated(
                    "Session has ended; no further notifications are accepted",
                    details={"notification": type(notification).__name__}
                )

            if isinstance(notification, LoginResult):
                return self._on_login(notification)
            if isinstance(notification, PlaylistSnapshot):
                return self._on_snapshot(notification)
            if isinstance(notification, ItemQueued):
                return self._on_queued(notification)
            if isinstance(notification, ItemDeleted):
                return self._on_deleted(notification)
            if isinstance(notification, ItemMoved):
                return self._on_moved(notification)
            if isinstance(notification, ResortRequested):
                return self._on_resort(notification)
            if isinstance(notification, SortModeChanged):
                return self._on_sort_mode(notification)
            if isinstance(notification, RemoteErrorMessage):
                return self._on_error(notification)

            raise TypeError(f"Unknown notification type: {type(notification).__name__}")

    def terminate(self) -> None:
        """End the session and drop all local state."""
        with self._lock:
            self._terminate()

    def _on_login(self, notification: LoginResult) -> list[MoveCommand]:
        if not notification.success:
            self._terminate()
            raise FatalRemoteError(
                f"Invalid login: {notification.error or 'rejected by server'}",
                details={"source": "login"}
            )

        logger.info("Logged in, requesting playlist")
        self._logged_in = True
        self._sink.request_playlist()
        return []

    def _on_snapshot(self, notification: PlaylistSnapshot) -> list[MoveCommand]:
        if not self._logged_in:
            logger.debug("Ignoring playlist received before login")
            return []

        try:
            self._mirror.replace_all(notification.items)
        except PlaylistError as e:
            self._request_resync(e)
            return []

        # Anything still pending belongs to the playlist we just threw away
        self._echoes.clear()

        if self._state is SessionState.UNINITIALIZED:
            logger.info(f"Playlist synced: {len(self._mirror)} items")
        else:
            logger.debug(f"Playlist resynced: {len(self._mirror)} items")
        self._state = SessionState.SYNCED

        return self._reconcile()

    def _on_queued(self, notification: ItemQueued) -> list[MoveCommand]:
        if self._state is not SessionState.SYNCED:
            return []

        try:
            self._mirror.insert_after(notification.item, notification.after)
        except PlaylistError as e:
            self._request_resync(e)
            return []

        logger.debug(
            f"Queued {notification.item.uid} by {notification.item.queueby}: "
            f"{notification.item.title}"
        )
        return self._reconcile()

    def _on_deleted(self, notification: ItemDeleted) -> list[MoveCommand]:
        if self._state is not SessionState.SYNCED:
            return []

        try:
            item = self._mirror.remove(notification.uid)
        except PlaylistError as e:
            self._request_resync(e)
            return []

        logger.debug(f"Deleted {item.uid}: {item.title}")
        return self._reconcile()

    def _on_moved(self, notification: ItemMoved) -> list[MoveCommand]:
        if self._state is not SessionState.SYNCED:
            return []

        if self._echoes.consume_if_pending(notification.uid, notification.after):
            self.stats.echoes_suppressed += 1
            return []

        try:
            self._mirror.relocate(notification.uid, notification.after)
        except PlaylistError as e:
            self._request_resync(e)
            return []

        logger.debug(f"Moved {notification.uid} after {notification.after}")
        return self._reconcile()

    def _on_resort(self, notification: ResortRequested) -> list[MoveCommand]:
        if self._state is not SessionState.SYNCED:
            return []

        # Sort against a fresh snapshot; the mirror may hold moves the server refused
        logger.info(f"Re-sort requested by {notification.requested_by or 'unknown'}, requesting playlist")
        self.stats.resyncs_requested += 1
        self._sink.request_playlist()
        return []

    def _on_sort_mode(self, notification: SortModeChanged) -> list[MoveCommand]:
        was_enabled = self._sort_enabled
        self._sort_enabled = notification.enabled
        if was_enabled != notification.enabled:
            logger.info(f"Sorting {'enabled' if notification.enabled else 'disabled'}")

        if notification.enabled and not was_enabled and self._state is SessionState.SYNCED:
            return self._reconcile()
        return []

    def _on_error(self, notification: RemoteErrorMessage) -> list[MoveCommand]:
        if notification.fatal:
            self._terminate()
            raise FatalRemoteError(notification.msg, details={"source": "errorMsg"})

        logger.warning(f"Server error: {notification.msg}")
        return []

    def _reconcile(self) -> list[MoveCommand]:
        if not self._sort_enabled:
            return []

        self.stats.passes += 1
        current = self._mirror.snapshot()
        commands = generate_moves(current, round_robin_sort(current))

        sent: list[MoveCommand] = []
        for command in commands:
            try:
                title = self._mirror.get(command.uid).title
                self._mirror.relocate(command.uid, command.after)
            except PlaylistError as e:
                self._request_resync(e)
                break

            self._echoes.record(command)
            self._sink.move_media(command)
            log_move_command(logger, command.uid, command.after, title)
            sent.append(command)

        self.stats.commands_sent += len(sent)
        if sent:
            logger.info(f"Sorted playlist: {len(sent)} move(s) sent")
        return sent

    def _request_resync(self, error: PlaylistError) -> None:
        logger.warning(f"Playlist out of sync ({error.message}), requesting full playlist")
        self.stats.resyncs_requested += 1
        self._sink.request_playlist()

    def _terminate(self) -> None:
        self._state = SessionState.TERMINATED
        self._mirror = QueueMirror()
        self._echoes.clear()
        self._logged_in = False
