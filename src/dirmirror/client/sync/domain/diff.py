"""Incremental diff between local and remote listings."""

from __future__ import annotations

from collections.abc import Sequence

from dirmirror.client.sync.domain.ordering import (
    FilenameComparator,
    LexicographicComparator,
    newest,
    sort_filenames,
)

_DEFAULT_COMPARATOR = LexicographicComparator()


def compute_incremental(
    local: Sequence[str],
    remote: Sequence[str],
    comparator: FilenameComparator = _DEFAULT_COMPARATOR,
) -> list[str]:
    """Get the remote filenames that are newer than everything stored locally.

    The boundary is the greatest local filename. Remote files at or below the
    boundary are considered already mirrored (or deliberately dropped by
    retention) and are never fetched again.

    Args:
        local: Filenames present in the target directory.
        remote: Filenames advertised by the remote index.
        comparator: Order used for "newer than".

    Returns:
        Ascending list of remote filenames strictly newer than the boundary,
        or the whole remote listing when nothing is stored locally.
    """
    remote_sorted = sort_filenames(remote)
    boundary = newest(sort_filenames(local))
    if boundary is None:
        return remote_sorted
    return [name for name in remote_sorted if comparator.is_newer(name, boundary)]
