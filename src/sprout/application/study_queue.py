"""
Due-mode study queue.

Builds the queue for a normal review session:
1. Resolving schedulable cards in scope that are available now
2. Ordering due cards by time window, keeping siblings apart
3. Appending new cards in id order
4. Capping both parts by what is left of today's limits
"""

import logging
import random
from collections.abc import Hashable, Iterable, Mapping
from datetime import datetime, timedelta, timezone

from sprout.application.queue_order import shuffle_with_parent_awareness
from sprout.application.scope_filter import card_in_scope, is_available_now, is_schedulable
from sprout.application.utils.time import as_utc, start_of_day
from sprout.domain.constants import (
    CHILD_CARD_TYPES,
    CLOZE_CHILD_ID_MARKER,
    DEFAULT_SHUFFLE_WINDOW,
)
from sprout.domain.models import (
    CardRecord,
    CardStage,
    CardState,
    ReviewLogEntry,
    Scope,
    StudiedToday,
    StudyLimits,
)

logger = logging.getLogger(__name__)

# Unknown due dates sort first, as the most overdue.
_UNKNOWN_DUE = datetime.min.replace(tzinfo=timezone.utc)

_DUE_LIKE_STAGES = (CardStage.LEARNING, CardStage.RELEARNING, CardStage.REVIEW)


def parent_key(card: CardRecord) -> Hashable | None:
    """
    Sibling key used to keep generated cards apart: the parent id, else (for
    child card types) the cloze id prefix or the image-occlusion group key.
    """
    if card.parent_id:
        return card.parent_id
    if (card.type or "").lower() not in CHILD_CARD_TYPES:
        return None
    marker = card.id.find(CLOZE_CHILD_ID_MARKER)
    if marker > 0:
        return card.id[:marker]
    if card.group_key:
        return card.group_key
    return card.id


def count_studied_today(
    log: Iterable[ReviewLogEntry],
    card_ids: Iterable[str],
    now: datetime,
) -> StudiedToday:
    """
    Distinct cards reviewed today, split into new (first-ever review is
    today) and review (first review before today).
    """
    ids = set(card_ids)
    start = start_of_day(now)
    earliest: dict[str, datetime] = {}
    reviewed_today: set[str] = set()

    for entry in log:
        if entry.card_id not in ids:
            continue
        at = as_utc(entry.at)
        if entry.card_id not in earliest or at < earliest[entry.card_id]:
            earliest[entry.card_id] = at
        if at >= start:
            reviewed_today.add(entry.card_id)

    new_done = sum(1 for card_id in reviewed_today if earliest[card_id] >= start)
    return StudiedToday(new_done=new_done, review_done=len(reviewed_today) - new_done)


def _remaining(limit: int | None, done: int) -> int | None:
    if limit is None:
        return None
    return max(0, int(limit) - done)


def _take(items: list[CardRecord], remaining: int | None) -> list[CardRecord]:
    return items if remaining is None else items[:remaining]


def resolve_cards_in_scope(cards: Iterable[CardRecord], scope: Scope) -> list[CardRecord]:
    return [c for c in cards if c.id and is_schedulable(c) and card_in_scope(scope, c)]


def build_study_queue(
    cards: Iterable[CardRecord],
    states: Mapping[str, CardState],
    scope: Scope,
    now: datetime,
    limits: StudyLimits = StudyLimits(),
    log: Iterable[ReviewLogEntry] = (),
    rng: random.Random | None = None,
    window: timedelta = DEFAULT_SHUFFLE_WINDOW,
) -> list[CardRecord]:
    """
    Build the presentation order for a due-mode session.

    Args:
        cards: All card records.
        states: Current state per card id. Cards without a state are skipped.
        scope: Study scope.
        now: Session start time.
        limits: Daily new/review caps.
        log: Review history, used to subtract what was already studied today.
        rng: Random source for the within-window shuffle.
        window: Shuffle window for due cards.

    Returns:
        Due cards (shuffled within windows, siblings apart) followed by new cards.
    """
    in_scope = resolve_cards_in_scope(cards, scope)
    studied = count_studied_today(log, (c.id for c in in_scope), now)

    due_like: list[CardRecord] = []
    news: list[CardRecord] = []
    for card in in_scope:
        state = states.get(card.id)
        if not is_available_now(state, now):
            continue
        if state.stage is CardStage.NEW:
            news.append(card)
        else:
            due_like.append(card)

    def due_of(card: CardRecord) -> datetime:
        due = states[card.id].due
        return as_utc(due) if due is not None else _UNKNOWN_DUE

    ordered_due = shuffle_with_parent_awareness(
        due_like, window=window, rng=rng, due_key=due_of, parent_key=parent_key
    )
    news.sort(key=lambda c: c.id)

    due_take = _take(ordered_due, _remaining(limits.daily_review_limit, studied.review_done))
    new_take = _take(news, _remaining(limits.daily_new_limit, studied.new_done))

    logger.debug(
        f"[session] scope={scope.type.value}:{scope.key} in_scope={len(in_scope)} "
        f"due={len(due_take)}/{len(due_like)} new={len(new_take)}/{len(news)}"
    )
    return due_take + new_take


def next_due_in_scope(
    cards: Iterable[CardRecord],
    states: Mapping[str, CardState],
    scope: Scope,
    now: datetime,
) -> datetime | None:
    """Earliest future due among learning/relearning/review cards in scope."""
    now = as_utc(now)
    upcoming: datetime | None = None

    for card in resolve_cards_in_scope(cards, scope):
        state = states.get(card.id)
        if state is None or state.stage not in _DUE_LIKE_STAGES or state.due is None:
            continue
        due = as_utc(state.due)
        if due > now and (upcoming is None or due < upcoming):
            upcoming = due

    return upcoming
