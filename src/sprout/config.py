import math
from pathlib import Path
from typing import Annotated, Any

from pydantic import ValidationInfo, field_validator
from pydantic_settings import (
    BaseSettings,
    NoDecode,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from sprout.domain.constants import (
    DEFAULT_LEARNING_STEPS_MINUTES,
    DEFAULT_RELEARNING_STEPS_MINUTES,
    DEFAULT_REQUEST_RETENTION,
    FALLBACK_STEP_MINUTES,
    MAX_REQUEST_RETENTION,
    MIN_REQUEST_RETENTION,
)

CONFIG_FILES = [
    Path.home() / ".config/sprout/config.toml",
    Path.home() / ".sprout.toml",
]

# Env values reach the validators as raw strings, not JSON
StepList = Annotated[tuple[float, ...], NoDecode]


def _coerce_steps(v: Any) -> tuple[float, ...]:
    if v is None:
        return ()
    if isinstance(v, str):
        v = v.strip().strip("[]()").split(",")
    elif isinstance(v, (int, float)):
        v = [v]

    steps: list[float] = []
    for raw in v:
        try:
            minutes = float(raw)
        except (TypeError, ValueError):
            continue
        if math.isfinite(minutes) and minutes > 0:
            steps.append(minutes)
    return tuple(steps)


class SchedulerSettings(BaseSettings):
    """
    Scheduler configuration, loaded once per session and read-only afterwards.

    Supports loading from:
    1. Config file (~/.config/sprout/config.toml or ~/.sprout.toml)
    2. Environment variables (SPROUT_*), lists comma separated or as JSON
    3. Keyword overrides

    Out-of-range values are coerced, never rejected.
    """

    model_config = SettingsConfigDict(
        env_prefix="SPROUT_",
        extra="ignore",
        frozen=True,
    )

    learning_steps_minutes: StepList = DEFAULT_LEARNING_STEPS_MINUTES
    relearning_steps_minutes: StepList = DEFAULT_RELEARNING_STEPS_MINUTES
    request_retention: float = DEFAULT_REQUEST_RETENTION

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # Find the first existing file
        toml_file = None
        for f in CONFIG_FILES:
            if f.exists():
                toml_file = f
                break

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (
            init_settings,
            env_settings,
        )

    @field_validator("learning_steps_minutes", mode="before")
    @classmethod
    def coerce_learning_steps(cls, v: Any) -> tuple[float, ...]:
        steps = _coerce_steps(v)
        return steps or (FALLBACK_STEP_MINUTES,)

    @field_validator("relearning_steps_minutes", mode="before")
    @classmethod
    def coerce_relearning_steps(cls, v: Any, info: ValidationInfo) -> tuple[float, ...]:
        steps = _coerce_steps(v)
        if steps:
            return steps
        learning = info.data.get("learning_steps_minutes") or (FALLBACK_STEP_MINUTES,)
        return (learning[0],)

    @field_validator("request_retention", mode="before")
    @classmethod
    def clamp_retention(cls, v: Any) -> float:
        try:
            retention = float(v)
        except (TypeError, ValueError):
            retention = DEFAULT_REQUEST_RETENTION
        if not math.isfinite(retention):
            retention = DEFAULT_REQUEST_RETENTION
        return max(MIN_REQUEST_RETENTION, min(MAX_REQUEST_RETENTION, retention))


def resolve_settings(overrides: dict[str, Any] | None = None) -> SchedulerSettings:
    """
    Multi-layered settings resolution.
    1. Defaults in SchedulerSettings
    2. ~/.config/sprout/config.toml (if exists)
    3. Environment variables (SPROUT_*)
    4. overrides (None values are ignored)
    """
    cleaned = {k: v for k, v in (overrides or {}).items() if v is not None}
    return SchedulerSettings(**cleaned)
