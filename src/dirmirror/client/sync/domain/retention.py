"""Retention planning for a capped target directory.

Given what is stored locally, what is new remotely and the storage cap,
decide which new files to fetch and which old files to evict so that the
directory never holds more than ``cap`` files, preferring the newest ones.

With L local files, I incremental files and cap C > 0, let
``cutoff = L + I - C``:

| cutoff        | fetch                       | evict                  |
|---------------|-----------------------------|------------------------|
| <= 0          | all I                       | nothing                |
| 0 < c <= L    | all I                       | oldest ``cutoff`` local |
| > L           | newest ``I - (cutoff - L)`` | all L local            |

A cap of zero or less disables retention: fetch everything, evict nothing.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field


@dataclass(frozen=True)
class RetentionPlan:
    """Outcome of retention planning for one cycle.

    Attributes:
        fetch: Incremental filenames to download, oldest first.
        evict: Local filenames to delete once every fetch succeeded.
        skipped: Incremental filenames dropped because they would be
            evicted again immediately to respect the cap.
    """

    fetch: list[str] = field(default_factory=list)
    evict: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True if the plan neither fetches nor evicts anything."""
        return not self.fetch and not self.evict


def compute_cutoff(local_count: int, incremental_count: int, cap: int) -> int:
    """Number of files to drop from local + incremental to respect the cap."""
    return local_count + incremental_count - cap


def plan_retention(
    local: Sequence[str],
    incremental: Sequence[str],
    cap: int,
) -> RetentionPlan:
    """Plan downloads and evictions for one cycle.

    Args:
        local: Ascending local filenames.
        incremental: Ascending incremental filenames (all newer than local).
        cap: Maximum number of retained files; <= 0 means unlimited.

    Returns:
        The RetentionPlan for this cycle.
    """
    if cap <= 0:
        return RetentionPlan(fetch=list(incremental))

    local_count = len(local)
    cutoff = compute_cutoff(local_count, len(incremental), cap)

    if cutoff <= 0:
        return RetentionPlan(fetch=list(incremental))

    if cutoff <= local_count:
        return RetentionPlan(fetch=list(incremental), evict=list(local[:cutoff]))

    overflow = cutoff - local_count
    return RetentionPlan(
        fetch=list(incremental[overflow:]),
        evict=list(local),
        skipped=list(incremental[:overflow]),
    )
