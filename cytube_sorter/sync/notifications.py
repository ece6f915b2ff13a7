"""
Inbound notifications handled by the reconciler.

Each CyTube event the sorter cares about is parsed into one of these
frozen dataclasses before it reaches the reconciler, so the reconciler
deals with typed values instead of raw socket.io payloads.

    playlist   -> PlaylistSnapshot
    queue      -> ItemQueued
    delete     -> ItemDeleted
    moveVideo  -> ItemMoved
    errorMsg   -> RemoteErrorMessage
    login      -> LoginResult
    chatMsg    -> ResortRequested (only for the sort command)

SortModeChanged has no wire event; the program hosting the reconciler
sends it to switch re-sorting on and off.
"""

from dataclasses import dataclass

from cytube_sorter.playlist.models import PlaylistItem


@dataclass(frozen=True)
class PlaylistSnapshot:
    """The complete playlist, in server order."""
    items: tuple[PlaylistItem, ...]


@dataclass(frozen=True)
class ItemQueued:
    """A new item was queued after `after` (a uid or FRONT)."""
    item: PlaylistItem
    after: int | str


@dataclass(frozen=True)
class ItemDeleted:
    uid: int


@dataclass(frozen=True)
class ItemMoved:
    """Item `uid` now sits right after `after` (a uid or FRONT)."""
    uid: int
    after: int | str


# errorMsg texts that mean the bot can't do its job in this channel
FATAL_ERROR_PHRASES = (
    "Invalid channel name",
    "blocked anonymous users",
    "Unable to join channel",
    "Channel could not be loaded",
    "Invalid login",
)


def is_fatal_error(msg: str) -> bool:
    """True if msg contains one of FATAL_ERROR_PHRASES, ignoring case."""
    lowered = msg.lower()
    return any(phrase.lower() in lowered for phrase in FATAL_ERROR_PHRASES)


@dataclass(frozen=True)
class RemoteErrorMessage:
    msg: str

    @property
    def fatal(self) -> bool:
        return is_fatal_error(self.msg)


@dataclass(frozen=True)
class LoginResult:
    success: bool
    error: str = ""


@dataclass(frozen=True)
class ResortRequested:
    requested_by: str = ""


@dataclass(frozen=True)
class SortModeChanged:
    enabled: bool


Notification = (
    PlaylistSnapshot
    | ItemQueued
    | ItemDeleted
    | ItemMoved
    | RemoteErrorMessage
    | LoginResult
    | ResortRequested
    | SortModeChanged
)
