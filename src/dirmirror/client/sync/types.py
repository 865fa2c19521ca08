"""Shared types and dataclasses for mirror operations.

This module provides:
- MirrorError, ListError, DownloadError: Exception classes
- TransferProgress: Progress tracking dataclass
- DownloadResult, TransferReport: Transfer result dataclasses
- CycleResult: Outcome of one backup cycle
- Type aliases for callbacks
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path


class MirrorError(Exception):
    """Base exception for mirror errors."""


class ListError(MirrorError):
    """Failed to list local or remote files."""


class DownloadError(MirrorError):
    """Failed to download a file."""

    def __init__(self, filename: str, reason: str) -> None:
        self.filename = filename
        self.reason = reason
        super().__init__(f"Failed to download {filename}: {reason}")


@dataclass
class TransferProgress:
    """Progress information for a file download."""

    filename: str
    bytes_transferred: int
    total_bytes: int | None

    @property
    def percent(self) -> float | None:
        """Get progress percentage, None if the size is unknown."""
        if not self.total_bytes:
            return None
        return (self.bytes_transferred / self.total_bytes) * 100


# Type alias for progress callback
ProgressCallback = Callable[[TransferProgress], None]


@dataclass
class DownloadResult:
    """Result of a file download operation."""

    filename: str
    local_path: Path
    size: int


@dataclass
class TransferReport:
    """Result of a batch download.

    Every requested file is attempted once; failures never stop the batch.
    """

    downloaded: list[DownloadResult] = field(default_factory=list)
    errors: list[DownloadError] = field(default_factory=list)

    @property
    def first_error(self) -> DownloadError | None:
        """Get the first failure of the batch, if any."""
        return self.errors[0] if self.errors else None

    @property
    def ok(self) -> bool:
        """True if every requested file was downloaded."""
        return not self.errors

    @property
    def failed(self) -> list[str]:
        """Filenames that could not be downloaded."""
        return [error.filename for error in self.errors]


@dataclass
class CycleResult:
    """Outcome of one list -> diff -> plan -> transfer -> evict cycle."""

    local: list[str] = field(default_factory=list)
    remote: list[str] = field(default_factory=list)
    incremental: list[str] = field(default_factory=list)
    downloaded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    evicted: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    eviction_skipped: bool = False
    errors: list[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if the cycle logged any error."""
        return bool(self.errors or self.failed)
