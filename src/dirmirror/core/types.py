"""Shared types for dirmirror.

This module defines enums used by the job runner and its callers.
"""

from __future__ import annotations

from enum import Enum


class JobState(str, Enum):
    """State of a backup job.

    A job walks LISTING -> DIFFING -> PLANNING -> TRANSFERRING -> EVICTING
    once per cycle, then either SLEEPING (and back to LISTING) or TERMINATED.
    """

    IDLE = "idle"
    LISTING = "listing"
    DIFFING = "diffing"
    PLANNING = "planning"
    TRANSFERRING = "transferring"
    EVICTING = "evicting"
    SLEEPING = "sleeping"
    TERMINATED = "terminated"
