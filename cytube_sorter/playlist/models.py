"""
Data models for CyTube playlist entities.

This module defines immutable dataclasses representing the items of a
channel playlist and the move commands the sorter sends back.

Design Decisions:
    - All dataclasses are frozen (immutable) so the mirror, the sorter and
      the diff generator can share item objects without copying them
    - Field names follow the CyTube wire format (uid, queueby, temp)
    - Media is carried around but never interpreted by the sorting code
    - MoveCommand is a plain value: two commands with the same uid and
      after are equal and hash the same, which is what echo suppression
      keys on

Usage:
    from cytube_sorter.playlist.models import PlaylistItem, MoveCommand, FRONT

    item = PlaylistItem.from_cytube(payload)
    command = MoveCommand(uid=item.uid, after=FRONT)
"""

from dataclasses import dataclass, field
from typing import Any

from cytube_sorter.core.exceptions import ProtocolError


# Wire value CyTube uses for "at the start of the playlist"
FRONT = "prepend"


@dataclass(frozen=True)
class Media:
    """
    Immutable description of a queued video.

    Attributes:
        id: Provider-specific media id.
            Example: "dQw4w9WgXcQ"
        title: Human-readable title.
        seconds: Duration in seconds (0 for livestreams).
        duration: Display duration string as sent by the server.
                  Example: "03:33"
        type: Provider code.
              Example: "yt" (YouTube), "vi" (Vimeo), "sc" (SoundCloud)
        meta: Provider-specific extra data, passed through untouched.
    """
    id: str
    title: str = ""
    seconds: int = 0
    duration: str = ""
    type: str = ""
    meta: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @classmethod
    def from_cytube(cls, data: dict[str, Any]) -> "Media":
        """
        Create a Media instance from a CyTube media object.

        Raises:
            ProtocolError: If data is not a dict or has no id.
        """
        if not isinstance(data, dict) or "id" not in data:
            raise ProtocolError(
                "Media object missing 'id'",
                details={"payload": data}
            )

        return cls(
            id=str(data["id"]),
            title=str(data.get("title") or ""),
            seconds=int(data.get("seconds") or 0),
            duration=str(data.get("duration") or ""),
            type=str(data.get("type") or ""),
            meta=dict(data.get("meta") or {}),
        )


@dataclass(frozen=True)
class PlaylistItem:
    """
    Immutable representation of one entry of a channel playlist.

    Attributes:
        uid: Server-assigned id, unique within the playlist for as long as
             the item exists. Move and delete events refer to items by uid.
        queueby: Name of the user who queued the item. Fairness ordering
                 groups by this field.
        media: The queued video.
        temp: Whether the item is temporary (removed after it plays).
    """
    uid: int
    queueby: str
    media: Media
    temp: bool = False

    @property
    def title(self) -> str:
        return self.media.title

    @classmethod
    def from_cytube(cls, data: dict[str, Any]) -> "PlaylistItem":
        """
        Create a PlaylistItem from a CyTube playlist item object.

        Args:
            data: Object of the form
                  {"uid": 12, "temp": false, "queueby": "alice", "media": {...}}

        Raises:
            ProtocolError: If uid or media is missing or uid is not an integer.
        """
        if not isinstance(data, dict):
            raise ProtocolError(
                "Playlist item must be an object",
                details={"payload": data}
            )

        uid = data.get("uid")
        if isinstance(uid, bool) or not isinstance(uid, int):
            raise ProtocolError(
                "Playlist item has no integer 'uid'",
                details={"payload": data}
            )

        return cls(
            uid=uid,
            queueby=str(data.get("queueby") or ""),
            media=Media.from_cytube(data.get("media")),
            temp=bool(data.get("temp", False)),
        )


@dataclass(frozen=True)
class MoveCommand:
    """
    Instruction to place one item immediately after another.

    Attributes:
        uid: uid of the item to move.
        after: uid of the item it should follow, or FRONT.

    Equality is structural, so a MoveCommand is its own fingerprint when
    matching the server's moveVideo echo against what was sent.
    """
    uid: int
    after: int | str

    @property
    def to_front(self) -> bool:
        return self.after == FRONT

    def to_cytube(self) -> dict[str, Any]:
        """Payload for the moveMedia event; the server keys the moved item as 'from'."""
        return {"from": self.uid, "after": self.after}
