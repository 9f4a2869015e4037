"""
Structured one-line logging of grade events.

Produces lines such as:

    FSRS: card c1 | type=basic | rating=good | state=New→Learning | R_now=— |
    R_target=0.9731 | S=2.31d | D=5.11 | nextDue=2026-02-07T12:00:00+00:00
"""

import logging
from datetime import datetime

from sprout.domain.models import GradeResult, MemoryState, Rating

logger = logging.getLogger(__name__)

DASH = "—"


def state_name(state: MemoryState | None) -> str:
    if state is None:
        return DASH
    return MemoryState(state).name.capitalize()


def _probability(x: float | None) -> str:
    return DASH if x is None else f"{x:.4f}"


def _due(due: datetime | None) -> str:
    return DASH if due is None else due.isoformat()


def format_grade_event(
    card_id: str,
    rating: Rating | str,
    result: GradeResult,
    card_type: str = "",
) -> str:
    metrics = result.metrics
    rating_str = rating.value if isinstance(rating, Rating) else str(rating)
    card_type = (card_type or "").strip().lower() or "unknown"

    if metrics.state_before == metrics.state_after:
        states = f"state={state_name(metrics.state_after)}"
    else:
        states = f"state={state_name(metrics.state_before)}→{state_name(metrics.state_after)}"

    elapsed = "" if metrics.retrievability_now is None else f" | t={metrics.elapsed_days}d"

    return (
        f"FSRS: card {card_id} | type={card_type} | rating={rating_str} | "
        f"{states}{elapsed} | "
        f"R_now={_probability(metrics.retrievability_now)} | "
        f"R_target={_probability(metrics.retrievability_target)} | "
        f"S={metrics.stability_days:.2f}d | "
        f"D={metrics.difficulty:.2f} | "
        f"nextDue={_due(result.next_due)}"
    )


def log_grade(
    card_id: str,
    rating: Rating | str,
    result: GradeResult,
    card_type: str = "",
) -> str:
    """Emit the grade event at INFO and return the line."""
    line = format_grade_event(card_id, rating, result, card_type)
    logger.info(line)
    return line
