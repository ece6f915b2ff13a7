"""
Local mirror of a CyTube channel playlist.

The server owns the playlist; this class keeps an ordered copy of it that
is updated from the server's playlist/queue/delete/moveVideo events and
from the sorter's own move commands.

Position matters: every insert and move on the wire is expressed as
"after uid X" (or at the front), so the mirror offers exactly those
operations and keeps a uid -> index map to resolve them.

The mirror does no I/O and no logging. Operations that reference an
unknown uid raise ReferenceNotFound and leave the mirror unchanged.
"""

from typing import Iterable, Iterator

from cytube_sorter.core.exceptions import DuplicateItemError, ReferenceNotFound
from cytube_sorter.playlist.models import FRONT, PlaylistItem


class QueueMirror:
    """
    Ordered, uid-indexed copy of the remote playlist.

    Example:
        mirror = QueueMirror(snapshot_items)
        mirror.insert_after(new_item, FRONT)
        mirror.relocate(new_item.uid, 17)
        items = mirror.snapshot()
    """

    def __init__(self, items: Iterable[PlaylistItem] = ()) -> None:
        self._items: list[PlaylistItem] = []
        self._index: dict[int, int] = {}
        self.replace_all(items)

    def replace_all(self, items: Iterable[PlaylistItem]) -> None:
        """
        Discard the current contents and install items as the new order.

        Raises:
            DuplicateItemError: If items contains the same uid twice.
                                The mirror is left unchanged.
        """
        new_items = list(items)
        new_index: dict[int, int] = {}
        for position, item in enumerate(new_items):
            if item.uid in new_index:
                raise DuplicateItemError(item.uid)
            new_index[item.uid] = position

        self._items = new_items
        self._index = new_index

    def insert_after(self, item: PlaylistItem, after: int | str) -> None:
        """
        Insert item right after the item with uid `after`, or first for FRONT.

        Raises:
            DuplicateItemError: If item.uid is already in the mirror.
            ReferenceNotFound: If `after` is a uid not in the mirror.
        """
        if item.uid in self._index:
            raise DuplicateItemError(item.uid)

        position = self._insert_position(after)
        self._items.insert(position, item)
        self._reindex()

    def remove(self, uid: int) -> PlaylistItem:
        """
        Delete the item with this uid and return it.

        Raises:
            ReferenceNotFound: If uid is not in the mirror.
        """
        position = self.index_of(uid)
        item = self._items.pop(position)
        self._reindex()
        return item

    def relocate(self, uid: int, after: int | str) -> None:
        """
        Move the item with uid to right after `after` (or to the front).

        Both references are checked before anything changes. Moving an
        item after itself leaves the order as it is.

        Raises:
            ReferenceNotFound: If uid or `after` is not in the mirror.
        """
        position = self.index_of(uid)
        if after != FRONT:
            self.index_of(after)
            if after == uid:
                return

        item = self._items.pop(position)
        self._reindex()
        self._items.insert(self._insert_position(after), item)
        self._reindex()

    def index_of(self, uid: int) -> int:
        """
        Position of the item with uid.

        Raises:
            ReferenceNotFound: If uid is not in the mirror.
        """
        try:
            return self._index[uid]
        except (KeyError, TypeError):
            raise ReferenceNotFound(uid) from None

    def get(self, uid: int) -> PlaylistItem:
        """Item with uid. Raises ReferenceNotFound if absent."""
        return self._items[self.index_of(uid)]

    def snapshot(self) -> tuple[PlaylistItem, ...]:
        """The full order as an immutable copy."""
        return tuple(self._items)

    def copy(self) -> "QueueMirror":
        return QueueMirror(self._items)

    def uids(self) -> list[int]:
        return [item.uid for item in self._items]

    def _insert_position(self, after: int | str) -> int:
        if after == FRONT:
            return 0
        return self.index_of(after) + 1

    def _reindex(self) -> None:
        self._index = {item.uid: position for position, item in enumerate(self._items)}

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, uid: object) -> bool:
        return uid in self._index

    def __iter__(self) -> Iterator[PlaylistItem]:
        return iter(self.snapshot())

    def __repr__(self) -> str:
        return f"QueueMirror(uids={self.uids()!r})"
