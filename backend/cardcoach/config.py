"""Scheduling and practice settings loaded from the environment."""

import logging
import os
from functools import lru_cache

from pydantic import BaseModel, Field, ValidationError

from cardcoach.models.card import MAX_DIFFICULTY, MIN_DIFFICULTY
from cardcoach.srs.scheduler import SchedulerConfig

logger = logging.getLogger(__name__)


class SchedulerSettings(BaseModel):
    """Settings for the SRS scheduler and practice sessions."""

    # Consecutive top-band successes before a card is mastered
    mastery_streak: int = Field(default=2, ge=1)
    # Highest difficulty band still listed as difficult
    difficult_threshold: int = Field(default=2, ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY)
    # Idle practice sessions expire after this
    session_ttl_seconds: int = Field(default=30 * 60, ge=1)

    def to_config(self) -> SchedulerConfig:
        """Build the scheduler policy object."""
        return SchedulerConfig(
            mastery_streak=self.mastery_streak,
            difficult_threshold=self.difficult_threshold,
        )


# Settings field -> environment variable
ENV_VARS = {
    "mastery_streak": "SRS_MASTERY_STREAK",
    "difficult_threshold": "SRS_DIFFICULT_THRESHOLD",
    "session_ttl_seconds": "PRACTICE_SESSION_TTL_SECONDS",
}


@lru_cache()
def get_scheduler_settings() -> SchedulerSettings:
    """Get cached scheduler settings from environment variables.

    Values that are not integers or are out of range are logged and replaced
    by the default, so a bad variable never stops the service.
    """
    values = {}
    for field_name, env_var in ENV_VARS.items():
        raw = os.getenv(env_var)
        if raw is not None and raw.strip():
            values[field_name] = raw.strip()

    try:
        return SchedulerSettings(**values)
    except ValidationError as e:
        for error in e.errors():
            field_name = error["loc"][0]
            logger.warning(
                "Ignoring %s=%r (%s), using the default",
                ENV_VARS[field_name],
                values.pop(field_name, None),
                error["msg"],
            )
        return SchedulerSettings(**values)


def get_scheduler_config() -> SchedulerConfig:
    """Scheduler policy for the running service."""
    return get_scheduler_settings().to_config()
