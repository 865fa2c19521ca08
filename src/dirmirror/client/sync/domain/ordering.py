"""Naming order for backup filenames.

Filenames are ordered by plain lexicographic comparison of their code
points. No locale or natural-number collation is applied: a name that sorts
greater is taken to be a file produced later, so remote naming must be
monotonic with creation time (e.g. ``YYYYMMDD`` prefixes).
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol


class FilenameComparator(Protocol):
    """Protocol for deciding which of two filenames is newer."""

    def is_newer(self, candidate: str, reference: str) -> bool:
        """Return True if candidate represents a later file than reference."""
        ...


class LexicographicComparator:
    """Compares filenames by code point order."""

    def is_newer(self, candidate: str, reference: str) -> bool:
        """Return True if candidate sorts strictly after reference."""
        return candidate > reference


def sort_filenames(filenames: Iterable[str]) -> list[str]:
    """Sort filenames oldest first."""
    return sorted(filenames)


def newest(filenames: list[str]) -> str | None:
    """Get the greatest filename of an ascending listing."""
    return filenames[-1] if filenames else None
