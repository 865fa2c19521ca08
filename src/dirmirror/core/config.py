"""Job configuration for dirmirror.

This module provides:
- SourceConfig: Connection settings for one remote directory index
- JobConfig: Immutable description of one backup job
- JobSettings: Pydantic schema for one entry of the JSON job list
- load_jobs / parse_jobs: Load and validate a job list
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class ConfigError(Exception):
    """Job configuration file is missing or malformed."""


@dataclass(frozen=True)
class SourceConfig:
    """Configuration for reaching a remote directory index.

    Attributes:
        source_url: Base URL of the directory index (no trailing slash).
        username: Optional HTTP Basic username.
        password: Optional HTTP Basic password.
        timeout: Request/connection timeout in seconds.
        verify_ssl: Whether to verify SSL certificates (default True).
    """

    source_url: str
    username: str | None = None
    password: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    verify_ssl: bool = True

    def __post_init__(self) -> None:
        """Normalize source URL."""
        object.__setattr__(self, "source_url", self.source_url.rstrip("/"))

    @property
    def auth(self) -> tuple[str, str] | None:
        """Get basic auth credentials.

        Returns:
            (username, password) when both are set, None otherwise.
        """
        if self.username and self.password:
            return (self.username, self.password)
        return None

    def file_url(self, filename: str) -> str:
        """Get the download URL of a file advertised by the index."""
        return f"{self.source_url}/{quote(filename)}"


@dataclass(frozen=True)
class JobConfig:
    """One backup job, owned by a single JobRunner for its lifetime.

    Attributes:
        source: Remote directory index settings.
        target_path: Local directory receiving the files.
        suffix: File suffix filter, without leading dot.
        interval_hours: Hours between cycles; 0 runs a single cycle.
        storage: Maximum number of retained files; <= 0 means unlimited.
        name: Label used in log lines.
    """

    source: SourceConfig
    target_path: Path
    suffix: str
    interval_hours: int = 0
    storage: int = 0
    name: str = ""

    @property
    def interval(self) -> timedelta:
        """Delay between two cycles."""
        return timedelta(hours=self.interval_hours)

    @property
    def one_shot(self) -> bool:
        """True if the job runs a single cycle."""
        return self.interval_hours == 0

    @property
    def unlimited(self) -> bool:
        """True if no retention cap applies."""
        return self.storage <= 0

    @property
    def label(self) -> str:
        """Name used in log lines."""
        return self.name or self.target_path.name or str(self.target_path)

    def __str__(self) -> str:
        storage = "unlimited" if self.unlimited else str(self.storage)
        interval = "once" if self.one_shot else f"every {self.interval_hours}h"
        auth = ", basic auth" if self.source.auth else ""
        return (
            f"{self.label}: {self.source.source_url} -> {self.target_path} "
            f"(*.{self.suffix}, {interval}, keep {storage}{auth})"
        )


class JobSettings(BaseModel):
    """Schema of one entry of the JSON job list.

    Unknown keys are kept in ``model_extra`` so they can be reported.
    """

    model_config = ConfigDict(extra="allow")

    source_addr: str
    target_path: str
    suffix: str
    internal: int = 0
    storage: int = 0
    username: str | None = None
    password: str | None = None
    name: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    verify_ssl: bool = True

    @field_validator("source_addr", "target_path")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value.strip()

    @field_validator("suffix")
    @classmethod
    def _normalize_suffix(cls, value: str) -> str:
        suffix = value.strip().lstrip(".")
        if not suffix:
            raise ValueError("must not be empty")
        return suffix

    @field_validator("internal")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("must be >= 0")
        return value

    @field_validator("timeout")
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be > 0")
        return value

    def to_job(self) -> JobConfig:
        """Build the immutable job configuration."""
        return JobConfig(
            source=SourceConfig(
                source_url=self.source_addr,
                username=self.username,
                password=self.password,
                timeout=self.timeout,
                verify_ssl=self.verify_ssl,
            ),
            target_path=Path(self.target_path).expanduser(),
            suffix=self.suffix,
            interval_hours=self.internal,
            storage=self.storage,
            name=self.name or "",
        )


def _describe(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        field = ".".join(str(loc) for loc in item["loc"]) or "entry"
        parts.append(f"{field}: {item['msg']}")
    return "; ".join(parts)


def parse_jobs(data: Any) -> list[JobConfig]:
    """Validate a decoded job list.

    Args:
        data: Decoded JSON document.

    Returns:
        One JobConfig per entry, in file order.

    Raises:
        ConfigError: If the document is not a list or an entry is invalid.
    """
    if not isinstance(data, list):
        raise ConfigError("Job list must be a JSON array")

    jobs = []
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise ConfigError(f"Job #{index} must be a JSON object")
        try:
            settings = JobSettings.model_validate(entry)
        except ValidationError as e:
            raise ConfigError(f"Job #{index} is invalid: {_describe(e)}") from e
        if settings.model_extra:
            logger.warning(
                f"Job #{index}: ignoring unknown key(s): {', '.join(sorted(settings.model_extra))}"
            )
        jobs.append(settings.to_job())
    return jobs


def load_jobs(path: Path | str) -> list[JobConfig]:
    """Load the job list from a JSON file.

    Args:
        path: Path to the configuration file.

    Returns:
        Validated job configurations.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    config_file = Path(path)
    try:
        text = config_file.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {config_file}: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {config_file}: {e}") from e

    return parse_jobs(data)
