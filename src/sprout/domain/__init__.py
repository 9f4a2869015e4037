# Domain Package
from .errors import InvalidRatingError, SchedulerError
from .models import (
    CardRecord,
    CardStage,
    CardState,
    GradeMetrics,
    GradeResult,
    InternalCard,
    MemoryState,
    Rating,
    ReviewLogEntry,
    Scope,
    ScopeType,
    StudiedToday,
    StudyLimits,
)
from .ports import ForgettingCurveModel

__all__ = [
    "CardRecord",
    "CardStage",
    "CardState",
    "ForgettingCurveModel",
    "GradeMetrics",
    "GradeResult",
    "InternalCard",
    "InvalidRatingError",
    "MemoryState",
    "Rating",
    "ReviewLogEntry",
    "SchedulerError",
    "Scope",
    "ScopeType",
    "StudiedToday",
    "StudyLimits",
]
