import os
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_database_url() -> str:
    """Get database URL, using absolute path for SQLite to avoid path resolution issues."""
    db_url = os.getenv("DATABASE_URL", "")
    if db_url:
        logger.info(f"Using DATABASE_URL from environment: {db_url}")
        return db_url

    db_path = Path(__file__).parent.parent.parent / "kaamyab.db"
    abs_path = db_path.resolve()
    db_url = f"sqlite:///{abs_path}"
    logger.info(f"Using default database path: {db_url}")
    return db_url


class SignalThresholds(BaseModel):
    """Tunable constants for the daily signal classification.

    These are heuristics, not derived values. The scheduling engine takes
    them as an argument so tests and callers can override them.

    Attributes:
        light_max_tasks: Today counts at or below this are a light day
        burnout_missed_tasks: Missed backlog at or above this is burnout risk
        burnout_today_tasks: Today counts at or above this are burnout risk
        stalled_missed_tasks: Missed backlog that, with zero recent completions, is burnout risk
        velocity_lookback_days: Window (days before today) for recent completion velocity
        focus_count_normal: Focus window on normal and light days
        focus_count_burnout: Focus window on burnout-risk days
        fallback_limit: Max tasks taken from the active week when nothing is scheduled
    """

    model_config = {"frozen": True}

    light_max_tasks: int = Field(default=2, ge=0)
    burnout_missed_tasks: int = Field(default=3, ge=1)
    burnout_today_tasks: int = Field(default=6, ge=1)
    stalled_missed_tasks: int = Field(default=2, ge=1)
    velocity_lookback_days: int = Field(default=2, ge=1)
    focus_count_normal: int = Field(default=3, ge=1)
    focus_count_burnout: int = Field(default=1, ge=1)
    fallback_limit: int = Field(default=3, ge=1, le=3)


class Settings(BaseSettings):
    database_url: str = Field(
        default_factory=get_database_url,
        validation_alias="DATABASE_URL",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")
    log_rotation: str = Field(default="10 MB", validation_alias="LOG_ROTATION")
    log_retention: str = Field(default="7 days", validation_alias="LOG_RETENTION")

    plan_service_url: str = Field(default="http://localhost:54321/functions/v1", validation_alias="PLAN_SERVICE_URL")
    plan_service_api_key: str = Field(default="", validation_alias="PLAN_SERVICE_API_KEY")
    plan_service_timeout_seconds: float = Field(default=90.0, validation_alias="PLAN_SERVICE_TIMEOUT_SECONDS")

    # Daily signal / focus window
    today_fallback_limit: int = Field(default=3, validation_alias="TODAY_FALLBACK_LIMIT")
    focus_count_normal: int = Field(default=3, validation_alias="FOCUS_COUNT_NORMAL")
    focus_count_burnout: int = Field(default=1, validation_alias="FOCUS_COUNT_BURNOUT")
    signal_light_max_tasks: int = Field(default=2, validation_alias="SIGNAL_LIGHT_MAX_TASKS")
    signal_burnout_missed_tasks: int = Field(default=3, validation_alias="SIGNAL_BURNOUT_MISSED_TASKS")
    signal_burnout_today_tasks: int = Field(default=6, validation_alias="SIGNAL_BURNOUT_TODAY_TASKS")
    signal_stalled_missed_tasks: int = Field(default=2, validation_alias="SIGNAL_STALLED_MISSED_TASKS")
    signal_velocity_lookback_days: int = Field(default=2, validation_alias="SIGNAL_VELOCITY_LOOKBACK_DAYS")

    # Whether reopening a task takes back the streak credit for its completion day
    streak_revoke_on_reopen: bool = Field(default=False, validation_alias="STREAK_REVOKE_ON_REOPEN")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported LOG_LEVEL: {value}")
        return level

    def signal_thresholds(self) -> SignalThresholds:
        """Build the frozen threshold set consumed by the scheduling engine."""
        return SignalThresholds(
            light_max_tasks=self.signal_light_max_tasks,
            burnout_missed_tasks=self.signal_burnout_missed_tasks,
            burnout_today_tasks=self.signal_burnout_today_tasks,
            stalled_missed_tasks=self.signal_stalled_missed_tasks,
            velocity_lookback_days=self.signal_velocity_lookback_days,
            focus_count_normal=self.focus_count_normal,
            focus_count_burnout=self.focus_count_burnout,
            fallback_limit=self.today_fallback_limit,
        )


settings = Settings()
