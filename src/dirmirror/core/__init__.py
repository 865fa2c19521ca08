"""Core module - Job configuration and shared types."""

from dirmirror.core.config import (
    DEFAULT_TIMEOUT,
    ConfigError,
    JobConfig,
    JobSettings,
    SourceConfig,
    load_jobs,
    parse_jobs,
)
from dirmirror.core.types import JobState

__all__ = [
    # Config
    "DEFAULT_TIMEOUT",
    "ConfigError",
    "JobConfig",
    "JobSettings",
    "SourceConfig",
    "load_jobs",
    "parse_jobs",
    # Types
    "JobState",
]
