"""
Memory-state codec.

Maps between the persisted `CardState` and the `InternalCard` fed to the
forgetting-curve model. All legacy-data handling lives in `repair()`;
`decode()` and `encode()` assume a coherent state.
"""

import logging
import math
from dataclasses import replace
from datetime import datetime

from sprout.application.utils.time import (
    as_utc,
    as_utc_or_none,
    is_far_future,
    whole_days_between,
)
from sprout.domain.constants import (
    DEFAULT_DIFFICULTY,
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    MIN_STABILITY,
)
from sprout.domain.models import CardStage, CardState, InternalCard, MemoryState

logger = logging.getLogger(__name__)

STAGE_FOR_MEMORY_STATE: dict[MemoryState, CardStage] = {
    MemoryState.NEW: CardStage.NEW,
    MemoryState.LEARNING: CardStage.LEARNING,
    MemoryState.REVIEW: CardStage.REVIEW,
    MemoryState.RELEARNING: CardStage.RELEARNING,
}


def _finite(x: float | int | None) -> bool:
    return x is not None and math.isfinite(x)


def _non_negative_int(x: float | int | None) -> int:
    if not _finite(x):
        return 0
    return max(0, int(math.floor(x)))


def infer_memory_state(state: CardState) -> MemoryState:
    """
    Best-effort memory-state tag for a stored state.

    The stored tag wins when present. Legacy states without one are inferred
    from the stage, with lapses deciding between learning and relearning.
    """
    if state.memory_state is not None:
        return MemoryState(state.memory_state)

    if state.stage in (CardStage.SUSPENDED, CardStage.NEW):
        return MemoryState.NEW
    if state.stage is CardStage.REVIEW:
        return MemoryState.REVIEW
    if state.stage is CardStage.RELEARNING:
        return MemoryState.RELEARNING

    return MemoryState.RELEARNING if (state.lapses or 0) > 0 else MemoryState.LEARNING


def stage_for(memory_state: MemoryState) -> CardStage:
    return STAGE_FOR_MEMORY_STATE[memory_state]


def is_coherent(state: CardState, now: datetime) -> bool:
    """
    True iff (stage is new <=> no last_reviewed) and
    (stage is suspended <=> suspended_due is set and due is the far-future sentinel).
    """
    is_new = state.stage is CardStage.NEW
    if is_new != (state.last_reviewed is None):
        return False

    suspended_shape = state.suspended_due is not None and is_far_future(state.due, now)
    return state.is_suspended == suspended_shape


def repair(state: CardState, now: datetime) -> CardState:
    """
    Coerce a stored state into one the forgetting-curve model can trust.

    - A non-suspended state that fails `is_coherent` collapses to new, whatever
      its stored tag says.
    - A `last_reviewed` later than `now` is dropped (clock skew).
    - Otherwise the memory-state tag is resolved via `infer_memory_state`.
    - A non-new tag without review history collapses to new: stability,
      difficulty, scheduled days and step index are cleared, counters kept.
    - Non-suspended stages are realigned with the tag and lose any stray
      `suspended_due`. Suspended cards keep their stage; their tag is the
      one to restore.
    """
    now = as_utc(now)
    last_reviewed = as_utc_or_none(state.last_reviewed)
    if last_reviewed is not None and last_reviewed > now:
        logger.debug(f"[codec] {state.id}: last_reviewed {last_reviewed} is after now; dropped")
        last_reviewed = None

    if not state.is_suspended and not is_coherent(state, now):
        logger.debug(f"[codec] {state.id}: incoherent stored state; reset to NEW")
        memory_state = MemoryState.NEW
    else:
        memory_state = infer_memory_state(state)
    if memory_state is MemoryState.NEW:
        last_reviewed = None

    repaired = replace(state, last_reviewed=last_reviewed, memory_state=memory_state)

    if last_reviewed is None and memory_state is not MemoryState.NEW:
        logger.debug(f"[codec] {state.id}: {memory_state.name} without review history; reset to NEW")
        repaired = replace(
            repaired,
            memory_state=MemoryState.NEW,
            stability_days=None,
            difficulty=None,
            scheduled_days=0,
            learning_step_index=0,
        )
    elif memory_state is MemoryState.NEW:
        repaired = replace(
            repaired,
            stability_days=None,
            difficulty=None,
            scheduled_days=0,
            learning_step_index=0,
        )

    if not repaired.is_suspended:
        repaired = replace(
            repaired,
            stage=stage_for(repaired.memory_state),
            suspended_due=None,
        )

    return repaired


def decode(state: CardState, now: datetime) -> InternalCard:
    """
    Build the model's view of a stored state.

    Suspended cards decode as their retained memory state; the model has no
    notion of suspension.
    """
    now = as_utc(now)
    coherent = repair(state, now)
    memory_state = coherent.memory_state
    last_review = coherent.last_reviewed
    due = as_utc(coherent.due) if coherent.due is not None else now

    if memory_state is MemoryState.NEW:
        scheduled_days = 0
    else:
        scheduled_days = _non_negative_int(coherent.scheduled_days)

    if _finite(coherent.difficulty):
        difficulty = max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, float(coherent.difficulty)))
    else:
        difficulty = DEFAULT_DIFFICULTY

    if memory_state is MemoryState.NEW:
        stability = 0.0
    elif _finite(coherent.stability_days) and coherent.stability_days > 0:
        stability = max(MIN_STABILITY, float(coherent.stability_days))
    elif memory_state is MemoryState.REVIEW and scheduled_days > 0:
        stability = max(MIN_STABILITY, float(scheduled_days))
    else:
        stability = 0.0

    if last_review is not None and memory_state is not MemoryState.NEW:
        elapsed_days = whole_days_between(last_review, now)
    else:
        elapsed_days = 0

    return InternalCard(
        due=due,
        stability=stability,
        difficulty=difficulty,
        elapsed_days=elapsed_days,
        scheduled_days=scheduled_days,
        reps=_non_negative_int(coherent.reps),
        lapses=_non_negative_int(coherent.lapses),
        learning_steps=_non_negative_int(coherent.learning_step_index),
        state=memory_state,
        last_review=last_review,
    )


def encode(previous: CardState, card: InternalCard) -> CardState:
    """
    Fold the model's output back into a persisted state.

    A suspended `previous` is returned unchanged: only `unsuspend` lifts
    suspension.
    """
    if previous.is_suspended:
        return previous

    if card.state is MemoryState.NEW:
        return replace(
            previous,
            stage=CardStage.NEW,
            memory_state=MemoryState.NEW,
            due=as_utc(card.due),
            scheduled_days=0,
            reps=_non_negative_int(card.reps),
            lapses=_non_negative_int(card.lapses),
            learning_step_index=_non_negative_int(card.learning_steps),
            stability_days=None,
            difficulty=None,
            last_reviewed=None,
            suspended_due=None,
        )

    return replace(
        previous,
        stage=stage_for(card.state),
        memory_state=card.state,
        due=as_utc(card.due),
        scheduled_days=_non_negative_int(card.scheduled_days),
        reps=_non_negative_int(card.reps),
        lapses=_non_negative_int(card.lapses),
        learning_step_index=_non_negative_int(card.learning_steps),
        stability_days=card.stability if _finite(card.stability) else previous.stability_days,
        difficulty=card.difficulty if _finite(card.difficulty) else previous.difficulty,
        last_reviewed=as_utc(card.last_review) if card.last_review else previous.last_reviewed,
        suspended_due=None,
    )
