"""
CyTube socket.io client for cytube-sorter.

This module wraps python-socketio's Client to:
    - locate the channel's socket server through the HTTP socketconfig endpoint
    - connect, join the channel and log in
    - parse incoming events into notifications and queue them
    - send move commands and playlist requests (the CommandSink protocol)

Threading:
    python-socketio delivers events on its own background thread. The
    handlers here only parse the payload and put the result on a FIFO
    queue; the reconciler runs on whichever thread iterates
    notifications(), one notification at a time, in arrival order.

Usage:
    client = CytubeClient(config.cytube, config.account, sort_command="!sort")
    reconciler = Reconciler(client)
    client.connect()
    run_session(client, reconciler)
"""

import queue
from typing import Any, Callable, Iterator

import requests
import socketio
from socketio.exceptions import BadNamespaceError
from socketio.exceptions import ConnectionError as SocketConnectionError

from cytube_sorter.core.config import AccountConfig, CytubeConfig
from cytube_sorter.core.exceptions import (
    FatalRemoteError,
    ProtocolError,
    RemoteConnectionError,
)
from cytube_sorter.core.logger import get_logger
from cytube_sorter.cytube import protocol
from cytube_sorter.playlist.models import MoveCommand
from cytube_sorter.sync.notifications import Notification
from cytube_sorter.sync.reconciler import Reconciler

logger = get_logger(__name__)


# Marks the end of the notification stream (disconnect or close())
_CLOSED = object()


def get_socket_server(base_url: str, channel: str, timeout: float = 10.0) -> str:
    """
    Look up the secure socket.io server for a channel.

    Args:
        base_url: CyTube base URL, e.g. "https://cytu.be".
        channel: Channel name.
        timeout: Request timeout in seconds.

    Returns:
        URL of the first server marked secure.

    Raises:
        RemoteConnectionError: On network/HTTP failure, a response that is
                               not JSON, or no secure server listed.

    Example:
        GET https://cytu.be/socketconfig/mychannel.json
        {"servers": [{"url": "https://cytu.be:443", "secure": true}]}
    """
    url = f"{base_url.rstrip('/')}/socketconfig/{channel}.json"

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except requests.RequestException as e:
        raise RemoteConnectionError(
            f"Failed to fetch socket config: {e}",
            details={"url": url, "original_error": str(e)}
        ) from e
    except ValueError as e:
        raise RemoteConnectionError(
            "Socket config response is not valid JSON",
            details={"url": url, "original_error": str(e)}
        ) from e

    servers = data.get("servers") if isinstance(data, dict) else None
    for server in servers or []:
        if isinstance(server, dict) and server.get("secure") is True and server.get("url"):
            return str(server["url"])

    raise RemoteConnectionError(
        f"No secure socket server listed for channel '{channel}'",
        details={"url": url, "servers": servers}
    )


class CytubeClient:
    """
    Connection to one CyTube channel.

    Attributes:
        cytube: Server and channel settings.
        account: Bot credentials.
        sort_command: Chat message that requests a re-sort.
    """

    def __init__(
        self,
        cytube: CytubeConfig,
        account: AccountConfig,
        sort_command: str = "!sort",
        sio: socketio.Client | None = None
    ) -> None:
        self.cytube = cytube
        self.account = account
        self.sort_command = sort_command
        self._sio = sio if sio is not None else socketio.Client(reconnection=False)
        self._queue: "queue.Queue[Any]" = queue.Queue()
        self._register_handlers()

    @property
    def connected(self) -> bool:
        return bool(self._sio.connected)

    def connect(self) -> None:
        """
        Connect to the channel's socket server, join the channel and log in.

        Raises:
            RemoteConnectionError: If the server cannot be found or reached.
        """
        server_url = get_socket_server(
            self.cytube.server, self.cytube.channel, self.cytube.timeout
        )
        logger.info(f"Connecting to {server_url}")

        try:
            self._sio.connect(
                server_url,
                transports=["websocket"],
                wait_timeout=self.cytube.timeout
            )
        except SocketConnectionError as e:
            raise RemoteConnectionError(
                f"Failed to connect to {server_url}: {e}",
                details={"url": server_url, "original_error": str(e)}
            ) from e

        self._sio.emit(protocol.EMIT_INIT_CHANNEL_CALLBACKS)
        self._sio.emit(protocol.EMIT_JOIN_CHANNEL, {"name": self.cytube.channel})
        self._sio.emit(
            protocol.EMIT_LOGIN,
            {"name": self.account.username, "pw": self.account.password}
        )
        logger.info(f"Joining channel '{self.cytube.channel}' as {self.account.username}")

    def move_media(self, command: MoveCommand) -> None:
        self._emit(protocol.EMIT_MOVE_MEDIA, command.to_cytube())

    def request_playlist(self) -> None:
        self._emit(protocol.EMIT_REQUEST_PLAYLIST)

    def notifications(self, poll_interval: float = 1.0) -> Iterator[Notification]:
        """
        Yield notifications in arrival order until the connection closes.

        Args:
            poll_interval: How often to wake up while idle, so that
                           KeyboardInterrupt is noticed promptly.
        """
        while True:
            try:
                item = self._queue.get(timeout=poll_interval)
            except queue.Empty:
                continue

            if item is _CLOSED:
                return
            yield item

    def close(self) -> None:
        """Disconnect and end the notification stream. Safe to call twice."""
        if self._sio.connected:
            self._sio.disconnect()
        self._queue.put(_CLOSED)

    def _emit(self, event: str, data: Any = None) -> None:
        """
        Send an event, dropping it once the connection is gone.

        Notifications queued before a disconnect are still handled after
        it, so sends can arrive here with no connection behind them.
        """
        if not self._sio.connected:
            logger.debug(f"Not connected, dropping '{event}'")
            return

        try:
            if data is None:
                self._sio.emit(event)
            else:
                self._sio.emit(event, data)
        except BadNamespaceError:
            logger.debug(f"Connection closed while sending '{event}', dropped")

    def _register_handlers(self) -> None:
        self._sio.on("connect", self._on_connect)
        self._sio.on("disconnect", self._on_disconnect)
        self._sio.on(protocol.EVENT_PLAYLIST, self._wrap(protocol.EVENT_PLAYLIST, protocol.parse_playlist))
        self._sio.on(protocol.EVENT_QUEUE, self._wrap(protocol.EVENT_QUEUE, protocol.parse_queue))
        self._sio.on(protocol.EVENT_DELETE, self._wrap(protocol.EVENT_DELETE, protocol.parse_delete))
        self._sio.on(protocol.EVENT_MOVE_VIDEO, self._wrap(protocol.EVENT_MOVE_VIDEO, protocol.parse_move))
        self._sio.on(protocol.EVENT_ERROR_MSG, self._wrap(protocol.EVENT_ERROR_MSG, protocol.parse_error))
        self._sio.on(protocol.EVENT_LOGIN, self._wrap(protocol.EVENT_LOGIN, protocol.parse_login))
        self._sio.on(protocol.EVENT_CHAT_MSG, self._wrap(protocol.EVENT_CHAT_MSG, self._parse_chat))

    def _wrap(self, event: str, parse: Callable[[Any], Notification | None]) -> Callable[[Any], None]:
        def handler(payload: Any = None) -> None:
            try:
                notification = parse(payload)
            except ProtocolError as e:
                logger.warning(f"Ignoring malformed '{event}' event: {e.message}")
                logger.debug(f"Payload: {e.details.get('payload')!r}")
                if event != protocol.EVENT_CHAT_MSG:
                    # A dropped playlist event leaves the mirror behind
                    self.request_playlist()
                return

            if notification is not None:
                self._queue.put(notification)

        return handler

    def _parse_chat(self, payload: Any) -> Notification | None:
        return protocol.parse_chat_command(payload, self.sort_command, self.account.username)

    def _on_connect(self) -> None:
        logger.debug("Socket connected")

    def _on_disconnect(self, *args: Any) -> None:
        logger.info("Disconnected from server")
        self._queue.put(_CLOSED)


def run_session(client: CytubeClient, reconciler: Reconciler) -> None:
    """
    Feed the client's notifications to the reconciler until disconnect.

    Raises:
        FatalRemoteError: If the server reports a fatal error or rejects
                          the login. The client is closed first.
    """
    try:
        for notification in client.notifications():
            reconciler.handle(notification)
    except FatalRemoteError:
        client.close()
        raise

    stats = reconciler.stats
    logger.info(
        f"Session ended: {stats.passes} sort passes, {stats.commands_sent} moves sent, "
        f"{stats.echoes_suppressed} echoes ignored, {stats.resyncs_requested} resyncs"
    )
