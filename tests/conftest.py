"""Test configuration and fixtures"""

import pytest
import tempfile
from pathlib import Path

from cytube_sorter.playlist.models import Media, MoveCommand, PlaylistItem
from cytube_sorter.sync.notifications import LoginResult, PlaylistSnapshot
from cytube_sorter.sync.reconciler import Reconciler


def make_item(uid, queueby="alice", title=None):
    """Build a PlaylistItem with a throwaway media object"""
    return PlaylistItem(
        uid=uid,
        queueby=queueby,
        media=Media(id=f"vid{uid}", title=title or f"Video {uid}", seconds=60, type="yt"),
    )


def uids(items):
    return [item.uid for item in items]


class RecordingSink:
    """CommandSink that remembers what would have been sent"""

    def __init__(self):
        self.moves = []
        self.playlist_requests = 0

    def move_media(self, command: MoveCommand) -> None:
        self.moves.append(command)

    def request_playlist(self) -> None:
        self.playlist_requests += 1


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def reconciler(sink):
    return Reconciler(sink)


@pytest.fixture
def logged_in(reconciler, sink):
    """Reconciler that has seen a successful login"""
    reconciler.handle(LoginResult(success=True))
    sink.playlist_requests = 0
    return reconciler


@pytest.fixture
def synced(logged_in, sink):
    """Reconciler synced to an already fair playlist [1(a), 2(b), 3(a)]"""
    logged_in.handle(PlaylistSnapshot(items=(
        make_item(1, "alice"),
        make_item(2, "bob"),
        make_item(3, "alice"),
    )))
    assert sink.moves == []
    return logged_in


@pytest.fixture
def sample_playlist_payload():
    """playlist event payload as sent by a CyTube server"""
    return [
        {
            "uid": 10,
            "temp": False,
            "queueby": "alice",
            "media": {
                "id": "dQw4w9WgXcQ",
                "title": "Never Gonna Give You Up",
                "seconds": 213,
                "duration": "03:33",
                "type": "yt",
                "meta": {},
            },
        },
        {
            "uid": 11,
            "temp": True,
            "queueby": "bob",
            "media": {
                "id": "76979871",
                "title": "Some Vimeo Video",
                "seconds": 95,
                "duration": "01:35",
                "type": "vi",
                "meta": {"thumbnail": "x.jpg"},
            },
        },
    ]
