"""
Scope filtering for study and practice queues.

Decides which cards belong to a scope (vault, folder, note, group), which
cards are schedulable at all, and which are available right now.
"""

import math
from collections.abc import Collection, Iterable, Mapping
from datetime import datetime

from sprout.application.utils.groups import (
    coerce_groups,
    normalise_group_path,
    split_group_keys,
)
from sprout.application.utils.time import as_utc
from sprout.domain.constants import (
    CLOZE_PARENT_TYPES,
    IO_CHILD_ID_MARKER,
    IO_PARENT_TYPES,
    IO_TYPE,
)
from sprout.domain.models import CardRecord, CardStage, CardState, Scope, ScopeType


def normalise_path(path: str | None) -> str:
    """Vault-relative path with forward slashes and no leading "./"."""
    p = str(path or "").replace("\\", "/")
    return p[2:] if p.startswith("./") else p


def matches_group(scope_key: str, groups: Iterable[str] | str) -> bool:
    """
    Case-insensitive hierarchical membership: a card in "a/b/c" is in
    groups "a", "a/b" and "a/b/c".
    """
    keys = [k.lower() for k in split_group_keys(scope_key)]
    if not keys:
        return False

    for raw in coerce_groups(groups):
        group = normalise_group_path(raw)
        if not group:
            continue
        group = group.lower()
        if any(group == k or group.startswith(k + "/") for k in keys):
            return True
    return False


def matches_scope(scope: Scope, path: str, groups: Iterable[str] | str = ()) -> bool:
    p = normalise_path(path)

    if scope.type is ScopeType.VAULT:
        return True

    if scope.type is ScopeType.NOTE:
        return p == normalise_path(scope.key)

    if scope.type is ScopeType.FOLDER:
        folder = normalise_path(scope.key).rstrip("/")
        if not folder:
            return True
        parent = p.rsplit("/", 1)[0] if "/" in p else ""
        return parent == folder or parent.startswith(folder + "/")

    if scope.type is ScopeType.GROUP:
        return matches_group(scope.key, groups)

    # Unknown scope type: fail closed
    return False


def card_in_scope(scope: Scope, card: CardRecord) -> bool:
    return matches_scope(scope, card.source_note_path, card.groups)


def _has_io_child_key(card: CardRecord) -> bool:
    if card.group_key and card.group_key.strip():
        return True
    marker = card.id.rfind(IO_CHILD_ID_MARKER)
    return marker >= 0 and bool(card.id[marker + len(IO_CHILD_ID_MARKER) :].strip())


def is_schedulable(card: CardRecord) -> bool:
    """
    False for template records that only exist to generate child cards:
    cloze parents and image-occlusion parents/groups.
    """
    card_type = (card.type or "").strip().lower()
    if card_type in CLOZE_PARENT_TYPES or card_type in IO_PARENT_TYPES:
        return False
    if card_type == IO_TYPE:
        return _has_io_child_key(card)
    return True


def is_available_now(state: CardState | None, now: datetime) -> bool:
    """
    Eligible for a due-mode queue: new cards always; learning, relearning and
    review cards when due is unknown or not after `now`. Never suspended.
    """
    if state is None or state.is_suspended:
        return False
    if state.stage is CardStage.NEW:
        return True
    if state.due is None:
        return True
    return as_utc(state.due) <= as_utc(now)


def is_not_yet_due(state: CardState | None, now: datetime) -> bool:
    """Practice mode serves only material that is not due yet (unknown due counts)."""
    if state is None or state.due is None:
        return True
    return as_utc(state.due) > as_utc(now)


def _due_sort_value(state: CardState | None) -> float:
    if state is None or state.due is None:
        return math.inf
    return as_utc(state.due).timestamp()


def list_practice_cards(
    cards: Iterable[CardRecord],
    states: Mapping[str, CardState],
    scope: Scope,
    now: datetime,
    exclude_ids: Collection[str] | None = None,
) -> list[CardRecord]:
    """
    Cards for a practice session: in scope, schedulable, not excluded, not
    suspended, and not yet due.

    Returns:
        Cards sorted closest-to-due first, then by source path, then by id.
    """
    excluded = exclude_ids or ()
    out: list[CardRecord] = []

    for card in cards:
        if not card.id or card.id in excluded:
            continue
        if not is_schedulable(card):
            continue
        if not card_in_scope(scope, card):
            continue

        state = states.get(card.id)
        if state is not None and state.is_suspended:
            continue
        if not is_not_yet_due(state, now):
            continue

        out.append(card)

    out.sort(key=lambda c: (_due_sort_value(states.get(c.id)), c.source_note_path, c.id))
    return out


def count_practice_cards(
    cards: Iterable[CardRecord],
    states: Mapping[str, CardState],
    scope: Scope,
    now: datetime,
    exclude_ids: Collection[str] | None = None,
) -> int:
    return len(list_practice_cards(cards, states, scope, now, exclude_ids))
