"""
Playlist module for cytube-sorter.

Pure, I/O-free building blocks of the sorter:
    - models: PlaylistItem, Media, MoveCommand and the FRONT sentinel
    - mirror: QueueMirror, the local ordered copy of the remote playlist
    - fairness: round_robin_sort, the target ordering
    - diff: generate_moves, the move commands from current to target
    - echo: EchoSuppressor, recognising echoes of our own moves

Usage:
    from cytube_sorter.playlist import QueueMirror, round_robin_sort, generate_moves

    current = mirror.snapshot()
    commands = generate_moves(current, round_robin_sort(current))
"""

from cytube_sorter.playlist.diff import apply_moves, generate_moves
from cytube_sorter.playlist.echo import EchoSuppressor
from cytube_sorter.playlist.fairness import group_by_submitter, round_robin_sort
from cytube_sorter.playlist.mirror import QueueMirror
from cytube_sorter.playlist.models import FRONT, Media, MoveCommand, PlaylistItem

__all__ = [
    "FRONT",
    "Media",
    "PlaylistItem",
    "MoveCommand",
    "QueueMirror",
    "group_by_submitter",
    "round_robin_sort",
    "generate_moves",
    "apply_moves",
    "EchoSuppressor",
]
