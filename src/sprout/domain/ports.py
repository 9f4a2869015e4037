"""
Ports (interfaces) for the forgetting-curve model.

These define the contract that infrastructure adapters must implement.
The grading engine depends on this abstraction, not on a concrete FSRS library.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from .models import InternalCard, Rating


class ForgettingCurveModel(ABC):
    """
    Port for the parametric forgetting curve that drives grading.

    Implementations:
        - FsrsForgettingCurve: FSRS-6 via the `fsrs` library.
    """

    @abstractmethod
    def advance(self, card: InternalCard, now: datetime, rating: Rating) -> InternalCard:
        """
        Apply one grading to a card.

        Args:
            card: The decoded card, with `state` already coherent with its history.
            now: Review time (UTC).
            rating: The validated rating.

        Returns:
            The updated card, including the new due time, stability, difficulty,
            counters and memory state.
        """
        pass

    @abstractmethod
    def retrievability(self, elapsed_days: float, stability: float) -> float:
        """
        Predicted recall probability after `elapsed_days` for a card of the given stability.

        Callers only ask for positive stability.
        """
        pass
