"""
Exception taxonomy for the scheduling core.

Only caller errors raise. Malformed stored data is repaired locally by the
codec and never surfaces here.
"""


class SchedulerError(Exception):
    """Base class for all scheduler errors."""


class InvalidRatingError(SchedulerError, ValueError):
    """A grade was requested with a rating outside again/hard/good/easy."""

    def __init__(self, value: object, allowed: tuple[str, ...] = ("again", "hard", "good", "easy")):
        self.value = value
        self.allowed = allowed
        super().__init__(f"Invalid rating {value!r}; expected one of: {', '.join(allowed)}")
