"""
Move command generation.

Turns "the playlist is in order A, it should be in order B" into a list of
moveMedia commands that the server can apply one by one.

Algorithm:
    Walk the target from position 1 to the end, keeping a working copy of
    the current order. If target[i] already comes somewhere after
    target[i - 1] in the working copy, leave it. Otherwise move target[i]
    to right after target[i - 1] and apply that move to the working copy.

    Moving one item never changes the relative order of the others, so
    every pair (target[j - 1], target[j]) handled earlier stays in order.
    Once all pairs are in order the working copy equals the target.

        [A, C, B] -> [A, B, C]    B is after A: skip. C is before B:
                                  move C after B. One command.

    This emits at most len(items) - 1 commands. It is not the minimum
    number of moves. The echo suppressor sees exactly the commands this
    produces, so the algorithm must stay as it is unless the consumers
    of its output are reviewed too.
"""

from collections import Counter
from typing import Iterable, Sequence

from cytube_sorter.core.exceptions import PlaylistError
from cytube_sorter.playlist.mirror import QueueMirror
from cytube_sorter.playlist.models import MoveCommand, PlaylistItem


def generate_moves(
    current: Sequence[PlaylistItem],
    target: Sequence[PlaylistItem]
) -> list[MoveCommand]:
    """
    Compute the move commands that turn `current` into `target`.

    Args:
        current: Playlist order as the server has it.
        target: Desired order; must hold the same uids as current.

    Returns:
        Commands to send in order. Empty when the orders already match.

    Raises:
        PlaylistError: If target is not a permutation of current.
    """
    _check_permutation(current, target)

    working = QueueMirror(current)
    commands: list[MoveCommand] = []

    for i in range(1, len(target)):
        previous, wanted = target[i - 1], target[i]
        if working.index_of(wanted.uid) > working.index_of(previous.uid):
            continue

        command = MoveCommand(uid=wanted.uid, after=previous.uid)
        working.relocate(command.uid, command.after)
        commands.append(command)

    return commands


def apply_moves(
    items: Sequence[PlaylistItem],
    commands: Iterable[MoveCommand]
) -> tuple[PlaylistItem, ...]:
    """
    Simulate commands on items with the mirror's relocation rules.

    Raises:
        ReferenceNotFound: If a command references a uid not in items.
    """
    working = QueueMirror(items)
    for command in commands:
        working.relocate(command.uid, command.after)
    return working.snapshot()


def _check_permutation(
    current: Sequence[PlaylistItem],
    target: Sequence[PlaylistItem]
) -> None:
    current_uids = Counter(item.uid for item in current)
    target_uids = Counter(item.uid for item in target)
    if current_uids != target_uids:
        raise PlaylistError(
            "Target order is not a permutation of the current order",
            details={
                "missing": sorted((current_uids - target_uids).elements()),
                "unexpected": sorted((target_uids - current_uids).elements()),
            }
        )
