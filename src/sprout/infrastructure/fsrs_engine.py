"""
FSRS adapter for the ForgettingCurveModel port.

Wraps the `fsrs` library's Scheduler. The library keeps no reps/lapses and
has no explicit "new" state (a new card is learning step 0 with no
stability), so this adapter supplies those around each review.
"""

import logging
from datetime import datetime, timedelta

from fsrs import Card as FsrsCard
from fsrs import Rating as FsrsRating
from fsrs import Scheduler
from fsrs import State as FsrsState

from sprout.application.utils.time import as_utc, whole_days_between
from sprout.config import SchedulerSettings
from sprout.domain.constants import DEFAULT_DECAY, MAXIMUM_INTERVAL_DAYS, MIN_STABILITY
from sprout.domain.models import InternalCard, MemoryState, Rating
from sprout.domain.ports import ForgettingCurveModel

logger = logging.getLogger(__name__)

FSRS_RATING: dict[Rating, FsrsRating] = {
    Rating.AGAIN: FsrsRating.Again,
    Rating.HARD: FsrsRating.Hard,
    Rating.GOOD: FsrsRating.Good,
    Rating.EASY: FsrsRating.Easy,
}

FSRS_STATE: dict[MemoryState, FsrsState] = {
    MemoryState.LEARNING: FsrsState.Learning,
    MemoryState.REVIEW: FsrsState.Review,
    MemoryState.RELEARNING: FsrsState.Relearning,
}

MEMORY_STATE: dict[FsrsState, MemoryState] = {v: k for k, v in FSRS_STATE.items()}

# Fixed id: the library otherwise derives one from the clock and sleeps 1ms.
_CARD_ID = 0


def _steps(minutes: tuple[float, ...]) -> tuple[timedelta, ...]:
    return tuple(timedelta(minutes=max(1, round(m))) for m in minutes)


class FsrsForgettingCurve(ForgettingCurveModel):
    """
    FSRS-6 forgetting curve configured from SchedulerSettings.

    Fuzzing is disabled so identical inputs always schedule identically.
    """

    def __init__(self, settings: SchedulerSettings):
        self.settings = settings
        self._scheduler = Scheduler(
            desired_retention=settings.request_retention,
            learning_steps=_steps(settings.learning_steps_minutes),
            relearning_steps=_steps(settings.relearning_steps_minutes),
            maximum_interval=MAXIMUM_INTERVAL_DAYS,
            enable_fuzzing=False,
        )

        params = tuple(self._scheduler.parameters)
        self._decay = -params[20] if len(params) > 20 else DEFAULT_DECAY
        self._factor = 0.9 ** (1 / self._decay) - 1

    def advance(self, card: InternalCard, now: datetime, rating: Rating) -> InternalCard:
        now = as_utc(now)
        fsrs_card = self._to_fsrs(card)
        updated, _ = self._scheduler.review_card(fsrs_card, FSRS_RATING[rating], review_datetime=now)

        lapsed = rating is Rating.AGAIN and card.state is MemoryState.REVIEW
        due = as_utc(updated.due)
        state = MEMORY_STATE[updated.state]

        logger.debug(
            f"[fsrs] {card.state.name}->{state.name} rating={rating.value} "
            f"S={updated.stability:.3f} D={updated.difficulty:.3f} due={due.isoformat()}"
        )

        return InternalCard(
            due=due,
            stability=float(updated.stability),
            difficulty=float(updated.difficulty),
            elapsed_days=card.elapsed_days,
            scheduled_days=whole_days_between(now, due),
            reps=card.reps + 1,
            lapses=card.lapses + (1 if lapsed else 0),
            learning_steps=updated.step or 0,
            state=state,
            last_review=as_utc(updated.last_review) if updated.last_review else now,
        )

    def retrievability(self, elapsed_days: float, stability: float) -> float:
        """FSRS power forgetting curve: R = (1 + factor * t / S) ** decay."""
        return (1 + self._factor * max(0.0, elapsed_days) / stability) ** self._decay

    def _to_fsrs(self, card: InternalCard) -> FsrsCard:
        due = as_utc(card.due)

        if card.state is MemoryState.NEW:
            # No stability and no difficulty: the library treats this as a first review.
            return FsrsCard(card_id=_CARD_ID, state=FsrsState.Learning, step=0, due=due)

        state = FSRS_STATE[card.state]
        step = None if state is FsrsState.Review else card.learning_steps
        last_review = as_utc(card.last_review) if card.last_review else None

        if card.stability <= 0:
            if state is FsrsState.Learning:
                return FsrsCard(
                    card_id=_CARD_ID, state=state, step=step, due=due, last_review=last_review
                )
            stability = MIN_STABILITY
        else:
            stability = card.stability

        return FsrsCard(
            card_id=_CARD_ID,
            state=state,
            step=step,
            stability=stability,
            difficulty=card.difficulty,
            due=due,
            last_review=last_review,
        )
