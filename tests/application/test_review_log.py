import logging
from datetime import datetime, timezone

from sprout.application.grading import grade
from sprout.application.review_log import format_grade_event, log_grade, state_name
from sprout.domain.models import (
    CardState,
    GradeMetrics,
    GradeResult,
    MemoryState,
    Rating,
)

NOW = datetime(2026, 2, 6, 12, 0, tzinfo=timezone.utc)
NEXT = datetime(2026, 2, 7, 12, 0, tzinfo=timezone.utc)


def make_result(**metrics) -> GradeResult:
    defaults = dict(
        retrievability_now=None,
        retrievability_target=0.97312,
        elapsed_days=0,
        stability_days=2.3065,
        difficulty=5.1123,
        state_before=MemoryState.NEW,
        state_after=MemoryState.LEARNING,
    )
    defaults.update(metrics)
    return GradeResult(
        next_state=CardState("c1", due=NEXT),
        prev_due=NOW,
        next_due=NEXT,
        metrics=GradeMetrics(**defaults),
    )


def test_state_name():
    assert state_name(MemoryState.RELEARNING) == "Relearning"
    assert state_name(None) == "—"


def test_format_first_review():
    line = format_grade_event("c1", Rating.GOOD, make_result(), card_type="Basic")

    assert line == (
        "FSRS: card c1 | type=basic | rating=good | state=New→Learning | "
        "R_now=— | R_target=0.9731 | S=2.31d | D=5.11 | "
        "nextDue=2026-02-07T12:00:00+00:00"
    )


def test_format_review_includes_elapsed_days():
    result = make_result(
        retrievability_now=0.9,
        elapsed_days=20,
        state_before=MemoryState.REVIEW,
        state_after=MemoryState.REVIEW,
    )
    line = format_grade_event("c9", "hard", result)

    assert "type=unknown" in line
    assert "state=Review | t=20d | R_now=0.9000" in line


def test_format_without_next_due():
    result = make_result()
    result = GradeResult(result.next_state, result.prev_due, None, result.metrics)

    assert format_grade_event("c1", Rating.AGAIN, result).endswith("nextDue=—")


def test_log_grade_emits_info(caplog):
    with caplog.at_level(logging.INFO, logger="sprout.application.review_log"):
        line = log_grade("c1", Rating.GOOD, make_result(), card_type="cloze-child")

    assert line in caplog.text
    assert caplog.records[-1].levelno == logging.INFO


def test_log_real_grade(caplog, new_state, settings):
    result = grade(new_state, Rating.GOOD, NOW, settings)

    with caplog.at_level(logging.INFO):
        line = log_grade(new_state.id, Rating.GOOD, result)

    assert line.startswith(f"FSRS: card {new_state.id} | type=unknown | rating=good")
    assert "state=New→Learning" in line
    assert "R_now=—" in line
