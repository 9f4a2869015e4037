from datetime import datetime, timedelta, timezone

import pytest

from sprout.application.group_index import GroupCounts, GroupIndex
from sprout.application.lifecycle import suspend
from sprout.application.scope_filter import card_in_scope
from sprout.domain.models import CardRecord, CardStage, CardState, Scope

NOW = datetime(2026, 2, 6, 12, 0, tzinfo=timezone.utc)
DAY = timedelta(days=1)


@pytest.fixture
def cards():
    return [
        CardRecord("v1", groups=("Lang/Dutch/Verbs",)),
        CardRecord("v2", groups=("Lang/Dutch/Verbs", "Exam")),
        CardRecord("n1", groups=("Lang/Dutch/Nouns",)),
        CardRecord("f1", groups=("Lang/French",)),
        CardRecord("m1", groups="Math; Exam"),
        CardRecord("loose"),
        CardRecord("", groups=("Ghost",)),
    ]


@pytest.fixture
def index(cards):
    return GroupIndex().build(cards)


def test_all_groups_includes_every_prefix(index):
    assert index.all_groups() == [
        "Exam",
        "Lang",
        "Lang/Dutch",
        "Lang/Dutch/Nouns",
        "Lang/Dutch/Verbs",
        "Lang/French",
        "Math",
    ]


def test_ids_cover_subtree(index):
    assert index.ids("Lang") == {"v1", "v2", "n1", "f1"}
    assert index.ids("Lang/Dutch") == {"v1", "v2", "n1"}
    assert index.ids("/Lang/Dutch/Verbs/") == {"v1", "v2"}
    assert index.ids("Exam") == {"v2", "m1"}


def test_ids_unknown_or_blank(index):
    assert index.ids("Lang/German") == set()
    assert index.ids("") == set()
    assert index.ids("Ghost") == set()


def test_ids_returns_a_copy(index):
    index.ids("Lang").add("intruder")
    assert "intruder" not in index.ids("Lang")


def test_counts(index):
    states = {
        "v1": CardState.new("v1", NOW),
        "v2": CardState(
            id="v2", stage=CardStage.REVIEW, due=NOW + DAY, last_reviewed=NOW - DAY
        ),
        "n1": suspend(CardState.new("n1", NOW), NOW),
    }

    assert index.counts("Lang/Dutch", states, NOW) == GroupCounts(due=1, total=3)


def test_search_is_case_insensitive(index):
    assert index.search("dutch") == ["Lang/Dutch", "Lang/Dutch/Nouns", "Lang/Dutch/Verbs"]


def test_search_limit_and_blank_query(index):
    assert index.search("", limit=2) == ["Exam", "Lang"]
    assert index.search("a", limit=3) == ["Exam", "Lang", "Lang/Dutch"]


def test_rebuild_replaces_contents(index):
    index.build([CardRecord("x", groups=("Solo",))])

    assert index.all_groups() == ["Solo"]
    assert index.ids("Lang") == set()


def test_lookups_ignore_case(index):
    assert index.ids("lang/DUTCH") == index.ids("Lang/Dutch") == {"v1", "v2", "n1"}
    assert index.ids("exam") == {"v2", "m1"}


def test_ids_agree_with_group_scope(cards, index):
    states = {c.id: CardState.new(c.id, NOW) for c in cards if c.id}
    for key in ("lang", "LANG/dutch", "Exam"):
        in_scope = {c.id for c in cards if c.id and card_in_scope(Scope.group(key), c)}
        assert index.ids(key) == in_scope
        expected = GroupCounts(due=len(in_scope), total=len(in_scope))
        assert index.counts(key, states, NOW) == expected
