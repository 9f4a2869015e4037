"""Tests for due-window shuffling and sibling spreading."""

import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import pytest

from sprout.application.queue_order import (
    interleave,
    shuffle_with_parent_awareness,
    shuffle_within_time_window,
    split_into_windows,
)

NOW = datetime(2026, 2, 6, 12, 0, tzinfo=timezone.utc)
MINUTE = timedelta(minutes=1)


@dataclass(frozen=True)
class Item:
    id: str
    due: datetime
    parent_id: str | None = None


def ids(items):
    return [i.id for i in items]


@pytest.fixture
def spread_items():
    """Twelve cards due one minute apart."""
    return [Item(f"c{i:02d}", NOW + i * MINUTE) for i in range(12)]


class TestSplitIntoWindows:
    def test_windows_open_at_first_due(self):
        items = [
            Item("a", NOW),
            Item("b", NOW + 20 * MINUTE),
            Item("c", NOW + 30 * MINUTE),
            Item("d", NOW + 31 * MINUTE),
            Item("e", NOW + 50 * MINUTE),
        ]
        windows = split_into_windows(items, timedelta(minutes=30))

        assert [ids(w) for w in windows] == [["a", "b", "c"], ["d", "e"]]

    def test_sorts_by_due(self):
        items = [Item("late", NOW + 3 * MINUTE), Item("early", NOW)]
        windows = split_into_windows(items, timedelta(0))

        assert [ids(w) for w in windows] == [["early"], ["late"]]

    def test_empty(self):
        assert split_into_windows([]) == []


class TestShuffleWithinTimeWindow:
    @pytest.mark.parametrize("window", [timedelta(0), timedelta(minutes=30), timedelta(days=3650)])
    def test_is_a_permutation(self, spread_items, rng, window):
        result = shuffle_within_time_window(spread_items, window, rng)
        assert sorted(ids(result)) == sorted(ids(spread_items))

    def test_zero_window_keeps_due_order(self, spread_items, rng):
        shuffled_input = list(spread_items)
        random.Random(7).shuffle(shuffled_input)

        result = shuffle_within_time_window(shuffled_input, timedelta(0), rng)

        assert ids(result) == ids(spread_items)

    def test_distant_windows_stay_in_order(self, rng):
        morning = [Item(f"m{i}", NOW + i * MINUTE) for i in range(5)]
        evening = [Item(f"e{i}", NOW + timedelta(hours=8) + i * MINUTE) for i in range(5)]

        result = shuffle_within_time_window(evening + morning, timedelta(minutes=30), rng)

        assert set(ids(result[:5])) == set(ids(morning))
        assert set(ids(result[5:])) == set(ids(evening))

    def test_seeded_rng_is_reproducible(self, spread_items):
        window = timedelta(days=1)
        first = shuffle_within_time_window(spread_items, window, random.Random(99))
        second = shuffle_within_time_window(spread_items, window, random.Random(99))

        assert ids(first) == ids(second)

    def test_input_is_not_modified(self, spread_items, rng):
        before = list(spread_items)
        shuffle_within_time_window(spread_items, timedelta(days=1), rng)
        assert spread_items == before

    def test_trivial_inputs(self, rng):
        single = [Item("only", NOW)]
        assert shuffle_within_time_window([], rng=rng) == []
        assert shuffle_within_time_window(single, rng=rng) == single

    def test_custom_due_key(self, rng):
        rows = [("b", NOW + 2 * MINUTE), ("a", NOW)]
        result = shuffle_within_time_window(rows, timedelta(0), rng, due_key=lambda r: r[1])
        assert [r[0] for r in result] == ["a", "b"]


def test_interleave_round_robin():
    assert interleave([["a1", "a2", "a3"], ["b1"], ["c1", "c2"]]) == [
        "a1", "b1", "c1", "a2", "c2", "a3",
    ]


def test_interleave_empty():
    assert interleave([]) == []


class TestShuffleWithParentAwareness:
    def test_siblings_are_never_adjacent(self, rng):
        siblings = [Item(f"s{i}", NOW + i * MINUTE, parent_id="P") for i in range(10)]
        others = [Item(f"o{i}", NOW + i * MINUTE) for i in range(10)]

        result = shuffle_with_parent_awareness(siblings + others, timedelta(hours=1), rng)

        assert sorted(ids(result)) == sorted(ids(siblings + others))
        parents = [i.parent_id for i in result]
        for a, b in zip(parents, parents[1:]):
            assert not (a == "P" and b == "P")

    def test_two_parents_alternate(self, rng):
        items = [Item(f"a{i}", NOW, parent_id="A") for i in range(4)]
        items += [Item(f"b{i}", NOW, parent_id="B") for i in range(4)]

        result = shuffle_with_parent_awareness(items, timedelta(minutes=30), rng)
        parents = [i.parent_id for i in result]

        assert parents in (["A", "B"] * 4, ["B", "A"] * 4)

    def test_single_group_degrades_to_shuffle(self, rng):
        items = [Item(f"s{i}", NOW + i * MINUTE, parent_id="P") for i in range(8)]
        result = shuffle_with_parent_awareness(items, timedelta(hours=1), rng)

        assert sorted(ids(result)) == sorted(ids(items))

    def test_windows_respected(self, rng):
        first = [Item(f"f{i}", NOW, parent_id="P" if i % 2 else None) for i in range(6)]
        second = [Item(f"s{i}", NOW + timedelta(hours=5), parent_id="P") for i in range(3)]

        result = shuffle_with_parent_awareness(second + first, timedelta(minutes=30), rng)

        assert set(ids(result[:6])) == set(ids(first))
        assert set(ids(result[6:])) == set(ids(second))

    def test_seeded_rng_is_reproducible(self):
        items = [Item(f"c{i}", NOW, parent_id=f"P{i % 3}") for i in range(9)]
        first = shuffle_with_parent_awareness(items, rng=random.Random(5))
        second = shuffle_with_parent_awareness(items, rng=random.Random(5))

        assert ids(first) == ids(second)

    def test_custom_parent_key(self, rng):
        rows = [(f"x{i}", NOW, "X") for i in range(3)] + [(f"y{i}", NOW, None) for i in range(3)]
        result = shuffle_with_parent_awareness(
            rows,
            rng=rng,
            due_key=lambda r: r[1],
            parent_key=lambda r: r[2],
        )
        keys = [r[2] for r in result]

        assert keys in (["X", None] * 3, [None, "X"] * 3)
