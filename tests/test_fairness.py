"""Test round-robin fairness ordering"""

import random
from collections import Counter

from cytube_sorter.playlist.fairness import group_by_submitter, round_robin_sort

from conftest import make_item, uids


def random_playlist(rng, size, users=("alice", "bob", "carol", "dave")):
    return [make_item(uid, rng.choice(users)) for uid in range(1, size + 1)]


class TestRoundRobinSort:
    """Test the fairness sorter"""

    def test_interleaves_by_first_seen_user(self):
        """Test users take turns in first-seen order"""
        items = [
            make_item(1, "alice"),
            make_item(2, "alice"),
            make_item(3, "alice"),
            make_item(4, "bob"),
            make_item(5, "carol"),
            make_item(6, "bob"),
        ]
        assert uids(round_robin_sort(items)) == [1, 4, 5, 2, 6, 3]

    def test_scenario_out_of_order(self):
        """Test [A(u1), C(u1), B(u2)] sorts to [A, B, C]"""
        items = [make_item(1, "u1"), make_item(3, "u1"), make_item(2, "u2")]
        assert uids(round_robin_sort(items)) == [1, 2, 3]

    def test_already_fair(self):
        """Test a fair playlist is unchanged"""
        items = [make_item(1, "u1"), make_item(2, "u2"), make_item(3, "u1")]
        assert uids(round_robin_sort(items)) == [1, 2, 3]

    def test_single_user_unchanged(self):
        """Test one submitter keeps their order"""
        items = [make_item(uid, "alice") for uid in (5, 2, 9, 1)]
        assert uids(round_robin_sort(items)) == [5, 2, 9, 1]

    def test_empty(self):
        """Test empty input"""
        assert round_robin_sort([]) == []

    def test_input_not_modified(self):
        """Test the input sequence is left alone"""
        items = [make_item(1, "a"), make_item(2, "a"), make_item(3, "b")]
        round_robin_sort(items)
        assert uids(items) == [1, 2, 3]

    def test_group_by_submitter(self):
        """Test grouping keeps first-seen user order and item order"""
        items = [make_item(1, "b"), make_item(2, "a"), make_item(3, "b")]
        groups = group_by_submitter(items)
        assert list(groups) == ["b", "a"]
        assert uids(groups["b"]) == [1, 3]

    def test_permutation_property(self):
        """Test output always holds exactly the input items"""
        rng = random.Random(1234)
        for size in range(0, 30):
            items = random_playlist(rng, size)
            result = round_robin_sort(items)
            assert Counter(uids(result)) == Counter(uids(items))

    def test_round_robin_property(self):
        """Test per-user order is kept and round k precedes round k+1"""
        rng = random.Random(99)
        for _ in range(50):
            items = random_playlist(rng, rng.randint(1, 25))
            result = round_robin_sort(items)

            first_seen = list(group_by_submitter(items))
            for user, user_items in group_by_submitter(items).items():
                assert [i for i in result if i.queueby == user] == user_items

            # Position of each item's round, then user, must be non-decreasing
            turn_of = {}
            for user_items in group_by_submitter(items).values():
                for turn, item in enumerate(user_items):
                    turn_of[item.uid] = turn
            keys = [(turn_of[i.uid], first_seen.index(i.queueby)) for i in result]
            assert keys == sorted(keys)

    def test_deterministic(self):
        """Test repeated runs give the same answer"""
        rng = random.Random(7)
        items = random_playlist(rng, 20)
        assert uids(round_robin_sort(items)) == uids(round_robin_sort(items))
