"""Test the reconciliation state machine"""

import pytest

from cytube_sorter.core.exceptions import FatalRemoteError, SessionTerminated
from cytube_sorter.playlist.models import FRONT, MoveCommand
from cytube_sorter.sync.notifications import (
    ItemDeleted,
    ItemMoved,
    ItemQueued,
    LoginResult,
    PlaylistSnapshot,
    RemoteErrorMessage,
    ResortRequested,
    SortModeChanged,
)
from cytube_sorter.sync.reconciler import Reconciler, SessionState

from conftest import make_item, uids


class TestSessionStartup:
    """Test the Uninitialized -> Synced transition"""

    def test_snapshot_before_login_is_ignored(self, reconciler, sink):
        """Test an untrusted snapshot doesn't sync the mirror"""
        reconciler.handle(PlaylistSnapshot(items=(make_item(1),)))
        assert reconciler.state is SessionState.UNINITIALIZED
        assert reconciler.playlist() == ()

    def test_login_requests_playlist(self, reconciler, sink):
        """Test a successful login asks for a fresh snapshot"""
        reconciler.handle(LoginResult(success=True))
        assert reconciler.logged_in
        assert sink.playlist_requests == 1
        assert reconciler.state is SessionState.UNINITIALIZED

    def test_failed_login_is_fatal(self, reconciler):
        """Test login failure terminates the session"""
        with pytest.raises(FatalRemoteError) as exc_info:
            reconciler.handle(LoginResult(success=False, error="Invalid username/password"))
        assert "Invalid username/password" in exc_info.value.message
        assert reconciler.state is SessionState.TERMINATED

    def test_first_snapshot_syncs_and_sorts(self, logged_in, sink):
        """Test the first trusted snapshot is sorted right away"""
        moves = logged_in.handle(PlaylistSnapshot(items=(
            make_item(1, "u1"),
            make_item(3, "u1"),
            make_item(2, "u2"),
        )))
        assert logged_in.state is SessionState.SYNCED
        assert moves == [MoveCommand(uid=3, after=2)]
        assert sink.moves == moves
        assert uids(logged_in.playlist()) == [1, 2, 3]

    def test_already_fair_snapshot_sends_nothing(self, synced, sink):
        """Test [A(u1), B(u2), C(u1)] needs no moves"""
        assert sink.moves == []
        assert uids(synced.playlist()) == [1, 2, 3]

    def test_incremental_events_before_sync_are_ignored(self, logged_in, sink):
        """Test queue/delete/move before the first snapshot do nothing"""
        logged_in.handle(ItemQueued(item=make_item(9), after=FRONT))
        logged_in.handle(ItemDeleted(uid=9))
        logged_in.handle(ItemMoved(uid=9, after=FRONT))
        logged_in.handle(ResortRequested(requested_by="alice"))
        assert logged_in.playlist() == ()
        assert sink.moves == []


class TestIncrementalUpdates:
    """Test queue, delete and move handling once synced"""

    def test_queue_triggers_sort(self, synced, sink):
        """Test alice queueing again lands behind bob's next turn"""
        # [1a, 2b, 3a] + 4a at the end, then 5b at the end
        synced.handle(ItemQueued(item=make_item(4, "alice"), after=3))
        assert sink.moves == []

        moves = synced.handle(ItemQueued(item=make_item(5, "bob"), after=4))
        # bob's second turn comes before alice's third
        assert moves == [MoveCommand(uid=4, after=5)]
        assert uids(synced.playlist()) == [1, 2, 3, 5, 4]

    def test_prepend_queue(self, synced, sink):
        """Test a new submitter at the front leads the rotation"""
        moves = synced.handle(ItemQueued(item=make_item(4, "carol"), after=FRONT))
        assert uids(synced.playlist()) == [4, 1, 2, 3]
        assert moves == []

    def test_delete_triggers_sort(self, synced, sink):
        """Test removing bob's only item leaves alice's in order"""
        moves = synced.handle(ItemDeleted(uid=2))
        assert moves == []
        assert uids(synced.playlist()) == [1, 3]

    def test_delete_keeps_fair_playlist_fair(self, logged_in, sink):
        """Test deleting from a fair playlist needs no moves"""
        logged_in.handle(PlaylistSnapshot(items=(
            make_item(1, "a"),
            make_item(2, "b"),
            make_item(3, "c"),
            make_item(4, "a"),
            make_item(5, "c"),
        )))
        assert sink.moves == []

        # [1a, 3c, 4a, 5c]
        assert logged_in.handle(ItemDeleted(uid=2)) == []

        # Deleting 1 makes c first-seen: [3c, 4a, 5c] is fair too
        assert logged_in.handle(ItemDeleted(uid=1)) == []
        assert uids(logged_in.playlist()) == [3, 4, 5]

    def test_external_move_is_applied_and_resorted(self, synced, sink):
        """Test a user's move is mirrored and then corrected"""
        moves = synced.handle(ItemMoved(uid=3, after=1))
        # [1a, 3a, 2b] -> move 3 back after 2
        assert moves == [MoveCommand(uid=3, after=2)]
        assert uids(synced.playlist()) == [1, 2, 3]

    def test_own_move_echo_is_suppressed(self, synced, sink):
        """Test the echo of our command is ignored, a repeat is not"""
        synced.handle(ItemMoved(uid=3, after=1))
        assert sink.moves == [MoveCommand(uid=3, after=2)]

        # Server echoes our move back
        assert synced.handle(ItemMoved(uid=3, after=2)) == []
        assert synced.stats.echoes_suppressed == 1
        assert synced.pending_echoes == 0
        assert uids(synced.playlist()) == [1, 2, 3]

        # The same move again is treated as external; it's a no-op on a fair list
        assert synced.handle(ItemMoved(uid=3, after=2)) == []
        assert synced.stats.echoes_suppressed == 1

    def test_echo_recorded_before_send(self):
        """Test commands are pending by the time the sink sees them"""
        pending_at_send = []

        class CheckingSink:
            def move_media(self, command):
                pending_at_send.append(reconciler.pending_echoes)

            def request_playlist(self):
                pass

        reconciler = Reconciler(CheckingSink())
        reconciler.handle(LoginResult(success=True))
        reconciler.handle(PlaylistSnapshot(items=(
            make_item(1, "u1"), make_item(3, "u1"), make_item(2, "u2"),
        )))
        assert pending_at_send == [1]

    def test_manual_resort_requests_playlist(self, synced, sink):
        """Test a resort request sorts from a fresh snapshot"""
        assert synced.handle(ResortRequested(requested_by="alice")) == []
        assert sink.playlist_requests == 1
        assert synced.stats.passes == 1

    def test_refused_move_repaired_by_resort(self, logged_in, sink):
        """Test a move the server refused is sent again after a resort"""
        items = (make_item(1, "u1"), make_item(3, "u1"), make_item(2, "u2"))
        logged_in.handle(PlaylistSnapshot(items=items))
        assert sink.moves == [MoveCommand(uid=3, after=2)]
        assert uids(logged_in.playlist()) == [1, 2, 3]

        # No echo comes back; the server refuses instead
        logged_in.handle(RemoteErrorMessage(msg="You don't have permission to move playlist items"))
        assert logged_in.state is SessionState.SYNCED
        assert logged_in.pending_echoes == 1

        logged_in.handle(ResortRequested(requested_by="alice"))
        assert sink.playlist_requests == 1

        # The server still has the unsorted order
        moves = logged_in.handle(PlaylistSnapshot(items=items))
        assert moves == [MoveCommand(uid=3, after=2)]
        assert sink.moves == [MoveCommand(uid=3, after=2), MoveCommand(uid=3, after=2)]
        assert logged_in.pending_echoes == 1


class TestDesync:
    """Test resync on references the mirror doesn't know"""

    def test_delete_unknown_uid(self, synced, sink):
        """Test deleting a missing uid requests the playlist, sends no moves"""
        moves = synced.handle(ItemDeleted(uid=42))
        assert moves == []
        assert sink.moves == []
        assert sink.playlist_requests == 1
        assert synced.stats.resyncs_requested == 1
        assert uids(synced.playlist()) == [1, 2, 3]

    def test_queue_after_unknown_uid(self, synced, sink):
        """Test queueing after a missing uid requests the playlist"""
        assert synced.handle(ItemQueued(item=make_item(4), after=42)) == []
        assert sink.playlist_requests == 1
        assert 4 not in uids(synced.playlist())

    def test_move_unknown_uid(self, synced, sink):
        """Test moving a missing uid requests the playlist"""
        assert synced.handle(ItemMoved(uid=42, after=1)) == []
        assert sink.playlist_requests == 1

    def test_resync_snapshot_replaces_mirror(self, synced, sink):
        """Test a later snapshot replaces everything and drops pending echoes"""
        synced.handle(ItemMoved(uid=3, after=1))
        assert synced.pending_echoes == 1

        moves = synced.handle(PlaylistSnapshot(items=(
            make_item(7, "x"), make_item(8, "x"), make_item(9, "y"),
        )))
        # Old echo dropped, only the new command is pending
        assert synced.pending_echoes == 1
        assert moves == [MoveCommand(uid=8, after=9)]
        assert uids(synced.playlist()) == [7, 9, 8]

    def test_snapshot_with_duplicate_uids(self, synced, sink):
        """Test a corrupt snapshot leaves the mirror and asks again"""
        synced.handle(PlaylistSnapshot(items=(make_item(5), make_item(5))))
        assert sink.playlist_requests == 1
        assert uids(synced.playlist()) == [1, 2, 3]


class TestSortMode:
    """Test disabling and enabling re-sorting"""

    def test_disabled_resort_only_mirrors(self, synced, sink):
        """Test notifications mutate the mirror but send nothing"""
        synced.handle(SortModeChanged(enabled=False))

        synced.handle(ItemQueued(item=make_item(4, "alice"), after=3))
        synced.handle(ItemQueued(item=make_item(5, "bob"), after=4))
        synced.handle(ItemMoved(uid=1, after=5))
        synced.handle(ItemDeleted(uid=2))
        synced.handle(ResortRequested(requested_by="alice"))

        assert sink.moves == []
        assert uids(synced.playlist()) == [3, 4, 5, 1]

    def test_reenabling_sorts_immediately(self, synced, sink):
        """Test switching sorting back on fixes the order"""
        synced.handle(SortModeChanged(enabled=False))
        synced.handle(ItemMoved(uid=3, after=1))
        assert sink.moves == []

        moves = synced.handle(SortModeChanged(enabled=True))
        assert moves == [MoveCommand(uid=3, after=2)]

    def test_start_disabled(self, sink):
        """Test a reconciler created with sorting off"""
        reconciler = Reconciler(sink, sort_enabled=False)
        reconciler.handle(LoginResult(success=True))
        reconciler.handle(PlaylistSnapshot(items=(
            make_item(1, "u1"), make_item(3, "u1"), make_item(2, "u2"),
        )))
        assert sink.moves == []
        assert uids(reconciler.playlist()) == [1, 3, 2]


class TestRemoteErrors:
    """Test fatal vs advisory server errors"""

    @pytest.mark.parametrize("msg", [
        "Invalid channel name",
        "This channel has blocked anonymous users",
        "Unable to join channel",
        "Channel could not be loaded",
        "invalid login: wrong password",
    ])
    def test_fatal_error_terminates(self, synced, msg):
        """Test fatal phrases end the session and drop state"""
        with pytest.raises(FatalRemoteError):
            synced.handle(RemoteErrorMessage(msg=msg))

        assert synced.state is SessionState.TERMINATED
        assert synced.playlist() == ()
        assert synced.pending_echoes == 0

        with pytest.raises(SessionTerminated):
            synced.handle(ResortRequested())

    def test_advisory_error_is_ignored(self, synced, sink):
        """Test other errors don't disturb the session"""
        assert synced.handle(RemoteErrorMessage(msg="You don't have permission to move")) == []
        assert synced.state is SessionState.SYNCED
        assert uids(synced.playlist()) == [1, 2, 3]

    def test_unknown_notification_type(self, synced):
        """Test dispatch rejects unknown variants"""
        with pytest.raises(TypeError):
            synced.handle(object())

    def test_terminate(self, synced):
        """Test explicit termination"""
        synced.terminate()
        assert synced.state is SessionState.TERMINATED
        with pytest.raises(SessionTerminated):
            synced.handle(ItemDeleted(uid=1))
