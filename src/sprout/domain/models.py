"""
Domain models for the scheduling core.

These are pure data structures with no I/O or external dependencies.
Every operation in the application layer returns new instances; nothing
here is mutated in place.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, IntEnum


class CardStage(str, Enum):
    """Persisted lifecycle stage of a card."""

    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    RELEARNING = "relearning"
    SUSPENDED = "suspended"


class MemoryState(IntEnum):
    """
    Internal memory-state tag consumed by the forgetting-curve model.

    Numbering follows the FSRS convention. There is no suspended value:
    suspension is a scheduling concern, not a memory state.
    """

    NEW = 0
    LEARNING = 1
    REVIEW = 2
    RELEARNING = 3


class Rating(str, Enum):
    """Four-button recall outcome."""

    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"


@dataclass(frozen=True)
class CardState:
    """
    Persisted scheduling state for a single card.

    Attributes:
        id: Card identifier.
        stage: Lifecycle stage.
        due: Next due time; None when unknown. Forced far into the future while suspended.
        reps: Total number of gradings.
        lapses: Number of times a review card was forgotten.
        learning_step_index: Position in the learning/relearning step sequence.
        scheduled_days: Last computed interval in days; 0 for new cards.
        stability_days: FSRS stability; None for new cards.
        difficulty: FSRS difficulty; None for new cards.
        last_reviewed: Time of the last grading; None for new cards.
        memory_state: Internal tag; while suspended, the tag to restore.
        suspended_due: Due time to restore on unsuspend; only set while suspended.
    """

    id: str
    stage: CardStage = CardStage.NEW
    due: datetime | None = None
    reps: int = 0
    lapses: int = 0
    learning_step_index: int = 0
    scheduled_days: int = 0
    stability_days: float | None = None
    difficulty: float | None = None
    last_reviewed: datetime | None = None
    memory_state: MemoryState | None = None
    suspended_due: datetime | None = None

    @classmethod
    def new(cls, card_id: str, now: datetime) -> "CardState":
        return cls(id=card_id, stage=CardStage.NEW, due=now, memory_state=MemoryState.NEW)

    @property
    def is_suspended(self) -> bool:
        return self.stage is CardStage.SUSPENDED


@dataclass(frozen=True)
class InternalCard:
    """
    Card as seen by the forgetting-curve model.

    Stability is 0 (not None) when the model has nothing to work with.
    """

    due: datetime
    stability: float
    difficulty: float
    elapsed_days: int
    scheduled_days: int
    reps: int
    lapses: int
    learning_steps: int
    state: MemoryState
    last_review: datetime | None = None

    @classmethod
    def empty(cls, now: datetime) -> "InternalCard":
        """A never-reviewed card, due immediately."""
        return cls(
            due=now,
            stability=0.0,
            difficulty=0.0,
            elapsed_days=0,
            scheduled_days=0,
            reps=0,
            lapses=0,
            learning_steps=0,
            state=MemoryState.NEW,
            last_review=None,
        )


@dataclass(frozen=True)
class GradeMetrics:
    """
    Descriptive numbers for one grading event, for logging and analytics.

    Attributes:
        retrievability_now: Recall probability just before grading (None without history).
        retrievability_target: Recall probability at the newly scheduled due time.
        elapsed_days: Whole days since the previous grading.
        stability_days: Stability after grading.
        difficulty: Difficulty after grading.
        state_before: Memory state fed to the model.
        state_after: Memory state returned by the model.
    """

    retrievability_now: float | None
    retrievability_target: float | None
    elapsed_days: int
    stability_days: float
    difficulty: float
    state_before: MemoryState
    state_after: MemoryState


@dataclass(frozen=True)
class GradeResult:
    """Result of grading a card. Not persisted."""

    next_state: CardState
    prev_due: datetime | None
    next_due: datetime | None
    metrics: GradeMetrics


@dataclass(frozen=True)
class CardRecord:
    """
    Static description of a card, as supplied by storage.

    Attributes:
        id: Card identifier.
        type: Card type (basic, cloze, cloze-child, io, io-child, ...).
        source_note_path: Vault-relative path of the note defining the card.
        groups: Group/tag paths the card belongs to ("a/b/c").
        parent_id: Parent card for generated child cards.
        group_key: Image-occlusion group key; marks an io record as a child.
        cloze_children: Child ids of a cloze parent.
    """

    id: str
    type: str = "basic"
    source_note_path: str = ""
    groups: tuple[str, ...] = ()
    parent_id: str | None = None
    group_key: str | None = None
    cloze_children: tuple[str, ...] = ()


class ScopeType(str, Enum):
    VAULT = "vault"
    FOLDER = "folder"
    NOTE = "note"
    GROUP = "group"


@dataclass(frozen=True)
class Scope:
    """
    Study scope. `key` is a folder path, note path, or group key depending on `type`.
    """

    type: ScopeType
    key: str = ""
    name: str = ""

    @classmethod
    def vault(cls, name: str = "") -> "Scope":
        return cls(ScopeType.VAULT, "", name)

    @classmethod
    def folder(cls, path: str, name: str = "") -> "Scope":
        return cls(ScopeType.FOLDER, path, name)

    @classmethod
    def note(cls, path: str, name: str = "") -> "Scope":
        return cls(ScopeType.NOTE, path, name)

    @classmethod
    def group(cls, key: str, name: str = "") -> "Scope":
        return cls(ScopeType.GROUP, key, name)


@dataclass(frozen=True)
class ReviewLogEntry:
    """A single grading event, used for daily-limit accounting."""

    card_id: str
    at: datetime


@dataclass(frozen=True)
class StudyLimits:
    """Daily caps for a due-mode study queue. None means unlimited."""

    daily_new_limit: int | None = None
    daily_review_limit: int | None = None


@dataclass(frozen=True)
class StudiedToday:
    """Distinct cards already studied today, split by first-ever review date."""

    new_done: int = 0
    review_done: int = 0
