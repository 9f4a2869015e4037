"""
Sprout: spaced-repetition scheduling core.

Quick start:
    from sprout import CardState, Rating, SchedulerSettings, grade

    settings = SchedulerSettings()
    state = CardState.new("card-1", now)
    result = grade(state, Rating.GOOD, now, settings)
    store(result.next_state)
"""

from sprout.application.codec import decode, encode, infer_memory_state, is_coherent, repair
from sprout.application.grading import coerce_rating, grade, grade_pass_fail
from sprout.application.group_index import GroupCounts, GroupIndex
from sprout.application.lifecycle import bury, reset, suspend, unsuspend
from sprout.application.queue_order import (
    shuffle_with_parent_awareness,
    shuffle_within_time_window,
)
from sprout.application.review_log import format_grade_event, log_grade
from sprout.application.scope_filter import (
    count_practice_cards,
    is_available_now,
    list_practice_cards,
    matches_scope,
)
from sprout.application.study_queue import (
    build_study_queue,
    count_studied_today,
    next_due_in_scope,
)
from sprout.config import SchedulerSettings, resolve_settings
from sprout.domain import (
    CardRecord,
    CardStage,
    CardState,
    ForgettingCurveModel,
    GradeMetrics,
    GradeResult,
    InternalCard,
    InvalidRatingError,
    MemoryState,
    Rating,
    ReviewLogEntry,
    SchedulerError,
    Scope,
    ScopeType,
    StudiedToday,
    StudyLimits,
)

__all__ = [
    # Grading
    "grade",
    "grade_pass_fail",
    "coerce_rating",
    # Codec
    "decode",
    "encode",
    "repair",
    "is_coherent",
    "infer_memory_state",
    # Lifecycle
    "bury",
    "suspend",
    "unsuspend",
    "reset",
    # Queues and scopes
    "shuffle_within_time_window",
    "shuffle_with_parent_awareness",
    "matches_scope",
    "is_available_now",
    "list_practice_cards",
    "count_practice_cards",
    "build_study_queue",
    "count_studied_today",
    "next_due_in_scope",
    "GroupIndex",
    "GroupCounts",
    # Logging
    "format_grade_event",
    "log_grade",
    # Configuration
    "SchedulerSettings",
    "resolve_settings",
    # Models
    "CardRecord",
    "CardStage",
    "CardState",
    "ForgettingCurveModel",
    "GradeMetrics",
    "GradeResult",
    "InternalCard",
    "MemoryState",
    "Rating",
    "ReviewLogEntry",
    "Scope",
    "ScopeType",
    "StudiedToday",
    "StudyLimits",
    # Errors
    "SchedulerError",
    "InvalidRatingError",
]
