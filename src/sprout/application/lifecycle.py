"""
Out-of-band card transitions: bury, suspend, unsuspend, reset.

Pure functions of (state, now). None of them consults the forgetting curve.
"""

import logging
from dataclasses import replace
from datetime import datetime

from sprout.application.codec import infer_memory_state, stage_for
from sprout.application.utils.time import as_utc, as_utc_or_none, far_future, start_of_next_day
from sprout.config import SchedulerSettings
from sprout.domain.models import CardStage, CardState, InternalCard, MemoryState

logger = logging.getLogger(__name__)


def bury(state: CardState, now: datetime) -> CardState:
    """
    Postpone a card to no earlier than the start of the next calendar day.

    The day boundary is taken in `now`'s time zone. Due dates only move forward.
    """
    tomorrow = start_of_next_day(now)
    due = as_utc_or_none(state.due)
    return replace(state, due=max(due, tomorrow) if due is not None else tomorrow)


def suspend(state: CardState, now: datetime) -> CardState:
    """
    Remove a card from due-based scheduling until unsuspended.

    Suspending an already-suspended card is a no-op, so the stored
    `suspended_due` is never replaced by the far-future sentinel.
    """
    if state.is_suspended:
        logger.debug(f"[lifecycle] {state.id}: already suspended; ignored")
        return state

    now = as_utc(now)
    prior_due = as_utc_or_none(state.due) or now
    return replace(
        state,
        stage=CardStage.SUSPENDED,
        memory_state=infer_memory_state(state),
        suspended_due=prior_due,
        due=far_future(now),
    )


def unsuspend(state: CardState, now: datetime) -> CardState:
    """
    Restore a suspended card's due date and stage. No-op for other cards.
    """
    if not state.is_suspended:
        return state

    due = as_utc_or_none(state.suspended_due) or as_utc(now)
    memory_state = state.memory_state if state.memory_state is not None else MemoryState.NEW
    return replace(
        state,
        stage=stage_for(MemoryState(memory_state)),
        due=due,
        suspended_due=None,
    )


def reset(state: CardState, now: datetime, settings: SchedulerSettings | None = None) -> CardState:
    """
    Discard all review history and return a fresh new-stage state.

    `settings` is accepted for symmetry with grading; a new card has nothing
    for it to parametrize.
    """
    empty = InternalCard.empty(as_utc(now))
    return CardState(
        id=state.id,
        stage=CardStage.NEW,
        due=empty.due,
        reps=0,
        lapses=0,
        learning_step_index=0,
        scheduled_days=0,
        stability_days=None,
        difficulty=None,
        last_reviewed=None,
        memory_state=MemoryState.NEW,
        suspended_due=None,
    )
