"""Centralized constants for the Sprout scheduler.

All magic numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

from datetime import timedelta

# ---------- Settings defaults ----------
DEFAULT_LEARNING_STEPS_MINUTES = (10.0, 1440.0)
DEFAULT_RELEARNING_STEPS_MINUTES = (10.0,)
FALLBACK_STEP_MINUTES = 10.0
DEFAULT_REQUEST_RETENTION = 0.9
MIN_REQUEST_RETENTION = 0.80
MAX_REQUEST_RETENTION = 0.97

# ---------- FSRS ----------
MAXIMUM_INTERVAL_DAYS = 36500
DEFAULT_DIFFICULTY = 5.0
MIN_DIFFICULTY = 1.0
MAX_DIFFICULTY = 10.0
MIN_STABILITY = 0.1  # days
DEFAULT_DECAY = -0.5  # FSRS-5 curve, used when the model has no decay weight

# ---------- Suspension ----------
SUSPEND_FAR_DAYS = 36500  # ~100 years
# A due date this far past "now" can only be the suspension sentinel.
FAR_FUTURE_THRESHOLD = timedelta(days=SUSPEND_FAR_DAYS // 2)

# ---------- Queue ordering ----------
DEFAULT_SHUFFLE_WINDOW = timedelta(minutes=30)

# ---------- Scope filtering ----------
CLOZE_PARENT_TYPES = frozenset({"cloze"})
IO_PARENT_TYPES = frozenset({"io-parent", "io_parent", "ioparent"})
IO_TYPE = "io"
CHILD_CARD_TYPES = frozenset({"cloze-child", "io-child"})
IO_CHILD_ID_MARKER = "::io::"
CLOZE_CHILD_ID_MARKER = "::cloze::"

# ---------- Group index ----------
GROUP_SEARCH_LIMIT = 80
GROUP_DELIMITERS = ",;|"
