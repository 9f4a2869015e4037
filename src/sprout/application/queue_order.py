"""
Queue ordering for study sessions.

Orders cards by due time while breaking up clusters:
1. Sorting by due and cutting the sequence into time windows
2. Shuffling within each window
3. Optionally interleaving sibling cards (same parent) round-robin

Windows are concatenated in time order, so randomisation never crosses a
window boundary. Every function returns a permutation of its input.
"""

import logging
import random
from collections.abc import Callable, Hashable, Iterable, Sequence
from datetime import datetime, timedelta
from typing import Any, TypeVar

from sprout.domain.constants import DEFAULT_SHUFFLE_WINDOW

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _due_attr(item: Any) -> datetime:
    return item.due


def _parent_attr(item: Any) -> Hashable | None:
    return getattr(item, "parent_id", None)


def split_into_windows(
    items: Iterable[T],
    window: timedelta = DEFAULT_SHUFFLE_WINDOW,
    due_key: Callable[[T], datetime] = _due_attr,
) -> list[list[T]]:
    """
    Sort by due and cut into windows.

    A window starts at its first card's due; a card more than `window` after
    that start opens the next window.
    """
    ordered = sorted(items, key=due_key)
    windows: list[list[T]] = []
    current: list[T] = []
    window_start: datetime | None = None

    for item in ordered:
        due = due_key(item)
        if window_start is not None and due - window_start <= window:
            current.append(item)
            continue
        if current:
            windows.append(current)
        window_start = due
        current = [item]

    if current:
        windows.append(current)
    return windows


def shuffle_within_time_window(
    items: Sequence[T],
    window: timedelta = DEFAULT_SHUFFLE_WINDOW,
    rng: random.Random | None = None,
    due_key: Callable[[T], datetime] = _due_attr,
) -> list[T]:
    """
    Uniformly shuffle cards inside each due-time window.
    """
    if len(items) <= 1:
        return list(items)

    rng = rng or random.Random()
    result: list[T] = []
    for bucket in split_into_windows(items, window, due_key):
        rng.shuffle(bucket)
        result.extend(bucket)
    return result


def interleave(groups: Sequence[Sequence[T]]) -> list[T]:
    """Round-robin: one from each group in turn, skipping exhausted groups."""
    result: list[T] = []
    longest = max((len(g) for g in groups), default=0)
    for i in range(longest):
        for group in groups:
            if i < len(group):
                result.append(group[i])
    return result


def _spread_siblings(
    bucket: list[T],
    rng: random.Random,
    parent_key: Callable[[T], Hashable | None],
) -> list[T]:
    parent_groups: dict[Hashable, list[T]] = {}
    ungrouped: list[T] = []
    for item in bucket:
        parent = parent_key(item)
        if parent:
            parent_groups.setdefault(parent, []).append(item)
        else:
            ungrouped.append(item)

    # A single sibling group with nothing to mix in degrades to a plain shuffle.
    if len(parent_groups) <= 1 and not ungrouped:
        rng.shuffle(bucket)
        return bucket

    groups = list(parent_groups.values())
    if ungrouped:
        groups.append(ungrouped)
    for group in groups:
        rng.shuffle(group)
    return interleave(groups)


def shuffle_with_parent_awareness(
    items: Sequence[T],
    window: timedelta = DEFAULT_SHUFFLE_WINDOW,
    rng: random.Random | None = None,
    due_key: Callable[[T], datetime] = _due_attr,
    parent_key: Callable[[T], Hashable | None] = _parent_attr,
) -> list[T]:
    """
    Shuffle within due-time windows while keeping siblings apart.

    Inside each window, cards are grouped by parent (cards without a parent
    form one extra group), each group is shuffled, and the groups are
    interleaved round-robin so siblings are maximally separated.

    Args:
        items: Cards to order; not modified.
        window: Window span measured from each window's first due.
        rng: Random source; inject a seeded `random.Random` for reproducible output.
        due_key: Due time of a card (default: `.due`).
        parent_key: Parent id of a card (default: `.parent_id`, if any).
    """
    if len(items) <= 1:
        return list(items)

    rng = rng or random.Random()
    windows = split_into_windows(items, window, due_key)
    logger.debug(f"[queue] {len(items)} cards in {len(windows)} window(s)")

    result: list[T] = []
    for bucket in windows:
        if len(bucket) <= 1:
            result.extend(bucket)
        else:
            result.extend(_spread_siblings(bucket, rng, parent_key))
    return result
