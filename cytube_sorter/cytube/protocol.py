"""
CyTube socket.io event payloads.

Translates the raw event payloads the server sends into the typed
notifications the reconciler handles, and names the events the client
emits.

Inbound events:
    playlist   [item, ...]                     -> PlaylistSnapshot
    queue      {"item": item, "after": uid}    -> ItemQueued
    delete     {"uid": uid}                    -> ItemDeleted
    moveVideo  {"from": uid, "after": uid}     -> ItemMoved
    errorMsg   {"msg": str}                    -> RemoteErrorMessage
    login      {"success": bool, "error": str} -> LoginResult
    chatMsg    {"username": str, "msg": str}   -> ResortRequested (sort command only)

    `after` is either a uid or the string "prepend".

Outbound events:
    moveMedia            {"from": uid, "after": uid | "prepend"}
    requestPlaylist      no payload
    initChannelCallbacks no payload
    joinChannel          {"name": channel}
    login                {"name": username, "pw": password}
"""

from typing import Any

from cytube_sorter.core.exceptions import ProtocolError
from cytube_sorter.playlist.models import FRONT, PlaylistItem
from cytube_sorter.sync.notifications import (
    ItemDeleted,
    ItemMoved,
    ItemQueued,
    LoginResult,
    PlaylistSnapshot,
    RemoteErrorMessage,
    ResortRequested,
)


# Inbound
EVENT_PLAYLIST = "playlist"
EVENT_QUEUE = "queue"
EVENT_DELETE = "delete"
EVENT_MOVE_VIDEO = "moveVideo"
EVENT_ERROR_MSG = "errorMsg"
EVENT_LOGIN = "login"
EVENT_CHAT_MSG = "chatMsg"

# Outbound
EMIT_MOVE_MEDIA = "moveMedia"
EMIT_REQUEST_PLAYLIST = "requestPlaylist"
EMIT_INIT_CHANNEL_CALLBACKS = "initChannelCallbacks"
EMIT_JOIN_CHANNEL = "joinChannel"
EMIT_LOGIN = "login"


def _require_dict(event: str, payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ProtocolError(
            f"{event} payload must be an object",
            details={"event": event, "payload": payload}
        )
    return payload


def _parse_uid(event: str, payload: Any, value: Any) -> int:
    if isinstance(value, bool):
        value = None
    if isinstance(value, str) and value.isdigit():
        value = int(value)
    if not isinstance(value, int):
        raise ProtocolError(
            f"{event} payload has invalid uid: {value!r}",
            details={"event": event, "payload": payload}
        )
    return value


def _parse_after(event: str, payload: dict[str, Any]) -> int | str:
    if "after" not in payload:
        raise ProtocolError(
            f"{event} payload missing 'after'",
            details={"event": event, "payload": payload}
        )
    after = payload["after"]
    if after == FRONT:
        return FRONT
    return _parse_uid(event, payload, after)


def parse_playlist(payload: Any) -> PlaylistSnapshot:
    if not isinstance(payload, list):
        raise ProtocolError(
            "playlist payload must be a list",
            details={"event": EVENT_PLAYLIST, "payload": payload}
        )
    return PlaylistSnapshot(items=tuple(PlaylistItem.from_cytube(entry) for entry in payload))


def parse_queue(payload: Any) -> ItemQueued:
    data = _require_dict(EVENT_QUEUE, payload)
    if "item" not in data:
        raise ProtocolError(
            "queue payload missing 'item'",
            details={"event": EVENT_QUEUE, "payload": payload}
        )
    return ItemQueued(
        item=PlaylistItem.from_cytube(data["item"]),
        after=_parse_after(EVENT_QUEUE, data)
    )


def parse_delete(payload: Any) -> ItemDeleted:
    data = _require_dict(EVENT_DELETE, payload)
    return ItemDeleted(uid=_parse_uid(EVENT_DELETE, payload, data.get("uid")))


def parse_move(payload: Any) -> ItemMoved:
    data = _require_dict(EVENT_MOVE_VIDEO, payload)
    return ItemMoved(
        uid=_parse_uid(EVENT_MOVE_VIDEO, payload, data.get("from")),
        after=_parse_after(EVENT_MOVE_VIDEO, data)
    )


def parse_error(payload: Any) -> RemoteErrorMessage:
    if isinstance(payload, str):
        return RemoteErrorMessage(msg=payload)
    data = _require_dict(EVENT_ERROR_MSG, payload)
    return RemoteErrorMessage(msg=str(data.get("msg") or ""))


def parse_login(payload: Any) -> LoginResult:
    data = _require_dict(EVENT_LOGIN, payload)
    return LoginResult(
        success=bool(data.get("success", False)),
        error=str(data.get("error") or "")
    )


def parse_chat_command(payload: Any, command: str, bot_name: str) -> ResortRequested | None:
    """
    Turn a chat message into a ResortRequested if it is the sort command.

    Accepts the bare command ("!sort") or the command addressed to the bot
    ("sortbot: !sort"). Anything else returns None.
    """
    data = _require_dict(EVENT_CHAT_MSG, payload)
    msg = str(data.get("msg") or "").strip()

    addressed = f"{bot_name}: {command}"
    if msg != command and msg.lower() != addressed.lower():
        return None

    return ResortRequested(requested_by=str(data.get("username") or ""))
