"""Runtime configuration for pgfluent.

Settings are resolved from explicit arguments first, then environment
variables, then defaults:

    PGFLUENT_CONSTRAINT_MATCHING   loose | strict   (default: loose)
    PGFLUENT_LOG_LEVEL             logging level name (default: WARNING)
"""

from __future__ import annotations

import logging
import os

from pydantic import BaseModel, Field

from pgfluent.core.types import ConstraintMatching
from pgfluent.exceptions import ConfigurationError

CONSTRAINT_MATCHING_ENV = "PGFLUENT_CONSTRAINT_MATCHING"
LOG_LEVEL_ENV = "PGFLUENT_LOG_LEVEL"

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseModel):
    """Resolved pgfluent settings."""

    constraint_matching: ConstraintMatching = Field(
        default=ConstraintMatching.LOOSE,
        description="How constraint flags are detected in `db` annotations",
    )
    log_level: str = Field(default="WARNING", description="Logging level for the CLI")

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)


def get_constraint_matching(matching: ConstraintMatching | str | None = None) -> ConstraintMatching:
    """Resolve the constraint matching mode.

    Priority:
    1. Explicit argument
    2. PGFLUENT_CONSTRAINT_MATCHING environment variable
    3. Default: loose

    Raises:
        ConfigurationError: If the value is not a known mode
    """
    if matching is None:
        matching = os.getenv(CONSTRAINT_MATCHING_ENV) or ConstraintMatching.LOOSE
    if isinstance(matching, ConstraintMatching):
        return matching
    try:
        return ConstraintMatching(matching.strip().lower())
    except ValueError:
        raise ConfigurationError(
            CONSTRAINT_MATCHING_ENV, matching, ConstraintMatching.values()
        ) from None


def get_log_level(level: str | None = None) -> str:
    """Resolve the log level name from argument, environment, or default."""
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV) or "WARNING"
    level = level.strip().upper()
    if level not in LOG_LEVELS:
        raise ConfigurationError(LOG_LEVEL_ENV, level, LOG_LEVELS)
    return level


def get_settings(
    constraint_matching: ConstraintMatching | str | None = None,
    log_level: str | None = None,
) -> Settings:
    """Build settings, filling unset values from the environment."""
    return Settings(
        constraint_matching=get_constraint_matching(constraint_matching),
        log_level=get_log_level(log_level),
    )
