"""Mirror operations for one or more backup jobs.

Architecture:
    list_local_files + RemoteLister -> domain (diff, retention)
        -> TransferExecutor -> eviction, driven by JobRunner

Components:
- **Listing**: Local directory scan and remote index scraping
- **Domain**: Filename order, incremental diff, retention planning
- **FileDownloader / TransferExecutor**: Per-file and batch downloads
- **JobRunner**: Poll loop of a single job
- **JobSupervisor**: One thread per job

All public symbols are re-exported here.
"""

from dirmirror.client.sync.domain import (
    FilenameComparator,
    LexicographicComparator,
    RetentionPlan,
    compute_cutoff,
    compute_incremental,
    plan_retention,
    sort_filenames,
)
from dirmirror.client.sync.download import (
    PARTIAL_SUFFIX,
    FileDownloader,
    TransferExecutor,
)
from dirmirror.client.sync.listing import (
    IndexParser,
    RegexIndexParser,
    RemoteLister,
    list_local_files,
)
from dirmirror.client.sync.runner import JobRunner
from dirmirror.client.sync.supervisor import JobSupervisor, SupervisorState
from dirmirror.client.sync.types import (
    CycleResult,
    DownloadError,
    DownloadResult,
    ListError,
    MirrorError,
    ProgressCallback,
    TransferProgress,
    TransferReport,
)

__all__ = [
    # Domain
    "FilenameComparator",
    "LexicographicComparator",
    "RetentionPlan",
    "compute_cutoff",
    "compute_incremental",
    "plan_retention",
    "sort_filenames",
    # Listing
    "IndexParser",
    "RegexIndexParser",
    "RemoteLister",
    "list_local_files",
    # Transfer
    "PARTIAL_SUFFIX",
    "FileDownloader",
    "TransferExecutor",
    # Jobs
    "JobRunner",
    "JobSupervisor",
    "SupervisorState",
    # Types
    "CycleResult",
    "DownloadError",
    "DownloadResult",
    "ListError",
    "MirrorError",
    "ProgressCallback",
    "TransferProgress",
    "TransferReport",
]
