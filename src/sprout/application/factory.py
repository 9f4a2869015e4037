"""
Forgetting-curve factory.
Centralizes the construction of the default ForgettingCurveModel.
"""

from functools import lru_cache

from sprout.config import SchedulerSettings
from sprout.domain.ports import ForgettingCurveModel
from sprout.infrastructure.fsrs_engine import FsrsForgettingCurve


@lru_cache(maxsize=16)
def get_forgetting_curve(settings: SchedulerSettings) -> ForgettingCurveModel:
    """
    Returns the FSRS model for the given settings.

    Settings are frozen and hashable, so one model is built per distinct configuration.
    """
    return FsrsForgettingCurve(settings)
