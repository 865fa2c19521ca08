"""Domain modules for mirroring rules.

This package centralizes the pure decision logic of a backup cycle:
- ordering: filename order ("newer than")
- diff: incremental set between local and remote listings
- retention: fetch/evict plan under a storage cap

Architecture:
    domain/ contains pure logic without I/O.
    Listing, transfer and deletion stay in the sync package.
"""

from dirmirror.client.sync.domain.diff import compute_incremental
from dirmirror.client.sync.domain.ordering import (
    FilenameComparator,
    LexicographicComparator,
    newest,
    sort_filenames,
)
from dirmirror.client.sync.domain.retention import (
    RetentionPlan,
    compute_cutoff,
    plan_retention,
)

__all__ = [
    # ordering
    "FilenameComparator",
    "LexicographicComparator",
    "newest",
    "sort_filenames",
    # diff
    "compute_incremental",
    # retention
    "RetentionPlan",
    "compute_cutoff",
    "plan_retention",
]
