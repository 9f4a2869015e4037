"""
Grading engine.

Converts a rating into the next persisted state and a metrics report by
driving the forgetting-curve model through the codec.
"""

import logging
from datetime import datetime
from typing import Literal

from sprout.application.codec import decode, encode, infer_memory_state, repair
from sprout.application.factory import get_forgetting_curve
from sprout.application.utils.time import as_utc, days_between
from sprout.config import SchedulerSettings
from sprout.domain.errors import InvalidRatingError
from sprout.domain.models import (
    CardState,
    GradeMetrics,
    GradeResult,
    MemoryState,
    Rating,
)
from sprout.domain.ports import ForgettingCurveModel

logger = logging.getLogger(__name__)

PASS_RATINGS = (Rating.GOOD, Rating.EASY)


def coerce_rating(value: Rating | str) -> Rating:
    """
    Resolve a rating, failing loudly on anything outside again/hard/good/easy.

    Strings are matched case-insensitively. There is no default rating.
    """
    if isinstance(value, Rating):
        return value
    if isinstance(value, str):
        try:
            return Rating(value.strip().lower())
        except ValueError:
            raise InvalidRatingError(value) from None
    raise InvalidRatingError(value)


def _suspended_result(state: CardState) -> GradeResult:
    memory_state = infer_memory_state(state)
    return GradeResult(
        next_state=state,
        prev_due=state.due,
        next_due=state.due,
        metrics=GradeMetrics(
            retrievability_now=None,
            retrievability_target=None,
            elapsed_days=0,
            stability_days=float(state.stability_days or 0.0),
            difficulty=float(state.difficulty or 0.0),
            state_before=memory_state,
            state_after=memory_state,
        ),
    )


def grade(
    state: CardState,
    rating: Rating | str,
    now: datetime,
    settings: SchedulerSettings,
    model: ForgettingCurveModel | None = None,
) -> GradeResult:
    """
    Grade a card and compute its next state.

    Args:
        state: Stored state; may be legacy or incoherent (repaired on decode).
        rating: again/hard/good/easy.
        now: Review time.
        settings: Scheduler settings; only used to build the default model.
        model: Forgetting-curve model; defaults to FSRS for `settings`.

    Returns:
        GradeResult with the next state, previous/next due and metrics.
        Suspended cards come back unchanged.

    Raises:
        InvalidRatingError: If `rating` is not one of the four ratings.
    """
    rating = coerce_rating(rating)
    now = as_utc(now)

    if state.is_suspended:
        logger.debug(f"[grade] {state.id}: suspended; grading ignored")
        return _suspended_result(state)

    model = model or get_forgetting_curve(settings)

    coherent = repair(state, now)
    prev_card = decode(coherent, now)
    has_history = prev_card.last_review is not None and prev_card.state is not MemoryState.NEW

    retrievability_now = (
        model.retrievability(prev_card.elapsed_days, prev_card.stability)
        if has_history and prev_card.stability > 0
        else None
    )

    next_card = model.advance(prev_card, now, rating)
    next_state = encode(coherent, next_card)

    days_to_due = max(0.0, days_between(now, next_card.due))
    retrievability_target = (
        model.retrievability(days_to_due, next_card.stability)
        if next_card.stability > 0
        else None
    )

    return GradeResult(
        next_state=next_state,
        prev_due=state.due,
        next_due=next_state.due,
        metrics=GradeMetrics(
            retrievability_now=retrievability_now,
            retrievability_target=retrievability_target,
            elapsed_days=prev_card.elapsed_days,
            stability_days=float(next_state.stability_days or 0.0),
            difficulty=float(next_state.difficulty or 0.0),
            state_before=prev_card.state,
            state_after=next_card.state,
        ),
    )


def grade_pass_fail(
    state: CardState,
    outcome: Literal["pass", "fail"],
    now: datetime,
    settings: SchedulerSettings,
    pass_rating: Rating | Literal["good", "easy"] = Rating.GOOD,
    model: ForgettingCurveModel | None = None,
) -> GradeResult:
    """
    Two-button grading: fail is again, pass is good (or easy when configured).
    """
    pass_as = coerce_rating(pass_rating)
    if pass_as not in PASS_RATINGS:
        raise InvalidRatingError(pass_rating, allowed=("good", "easy"))

    if outcome == "pass":
        rating = pass_as
    elif outcome == "fail":
        rating = Rating.AGAIN
    else:
        raise InvalidRatingError(outcome, allowed=("pass", "fail"))

    return grade(state, rating, now, settings, model=model)
