"""
Round-robin fairness ordering.

Given the playlist as it is, produce the order it should be in: users take
turns, in the order they first appear in the playlist, and each user's own
items keep their relative order.

    [a1, a2, a3, b1, c1, b2]  ->  [a1, b1, c1, a2, b2, a3]

Users with more items than everyone else end up with their extra items at
the tail, still interleaved with whoever else has items left.
"""

from typing import Sequence

from cytube_sorter.playlist.models import PlaylistItem


def group_by_submitter(items: Sequence[PlaylistItem]) -> dict[str, list[PlaylistItem]]:
    """
    Split items into per-user lists.

    The dict preserves the order in which users are first seen, and each
    list preserves the order of that user's items.
    """
    groups: dict[str, list[PlaylistItem]] = {}
    for item in items:
        groups.setdefault(item.queueby, []).append(item)
    return groups


def round_robin_sort(items: Sequence[PlaylistItem]) -> list[PlaylistItem]:
    """
    Interleave items by submitter, one item per user per round.

    Args:
        items: The playlist in its current order. Not modified.

    Returns:
        A new list containing exactly the same items. An empty input gives
        an empty list; a single-user playlist comes back in the same order.
    """
    queues = list(group_by_submitter(items).values())
    rounds = max((len(queue) for queue in queues), default=0)

    ordered: list[PlaylistItem] = []
    for turn in range(rounds):
        for queue in queues:
            if turn < len(queue):
                ordered.append(queue[turn])
    return ordered
