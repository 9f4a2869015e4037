import random
from datetime import datetime, timedelta, timezone

import pytest

from sprout.config import SchedulerSettings
from sprout.domain.models import CardStage, CardState, MemoryState

NOW = datetime(2026, 2, 6, 12, 0, tzinfo=timezone.utc)
DAY = timedelta(days=1)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keeps user config files and SPROUT_* variables out of every test."""
    import sprout.config

    monkeypatch.setattr(
        sprout.config,
        "CONFIG_FILES",
        [tmp_path / "config" / "config.toml", tmp_path / ".sprout.toml"],
    )
    for name in (
        "SPROUT_LEARNING_STEPS_MINUTES",
        "SPROUT_RELEARNING_STEPS_MINUTES",
        "SPROUT_REQUEST_RETENTION",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def settings():
    return SchedulerSettings(
        learning_steps_minutes=(10, 1440),
        relearning_steps_minutes=(10,),
        request_retention=0.9,
    )


@pytest.fixture
def rng():
    return random.Random(12345)


@pytest.fixture
def new_state():
    return CardState.new("card-001", NOW)


@pytest.fixture
def review_state():
    """A review card last seen 20 days ago with stability 20 and difficulty 5."""
    return CardState(
        id="card-review",
        stage=CardStage.REVIEW,
        due=NOW,
        reps=6,
        lapses=0,
        scheduled_days=20,
        stability_days=20.0,
        difficulty=5.0,
        last_reviewed=NOW - 20 * DAY,
        memory_state=MemoryState.REVIEW,
    )
