"""
Echo suppression for the sorter's own move commands.

CyTube broadcasts a moveVideo event for every move, including the ones
this bot sent. Without a way to recognise those, each correction would
look like a user reordering the playlist and trigger another sort.

Every command is recorded here before it is sent. When a moveVideo event
arrives, consume_if_pending() tells the caller whether it is one of ours.
Each recorded command is matched at most once.
"""

from cytube_sorter.playlist.models import MoveCommand


class EchoSuppressor:
    """Set of sent move commands whose moveVideo echo hasn't arrived yet."""

    def __init__(self) -> None:
        self._pending: set[MoveCommand] = set()

    def record(self, command: MoveCommand) -> None:
        """Remember a command that is about to be sent."""
        self._pending.add(command)

    def consume_if_pending(self, uid: int, after: int | str) -> bool:
        """
        Check a moveVideo event against the pending commands.

        Returns:
            True if (uid, after) was pending; it is removed and the event
            should be ignored. False if the move came from someone else.
        """
        key = MoveCommand(uid=uid, after=after)
        if key in self._pending:
            self._pending.discard(key)
            return True
        return False

    def clear(self) -> None:
        self._pending.clear()

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, command: object) -> bool:
        return command in self._pending
