"""Local and remote file listings.

This module provides:
- list_local_files: Scan the target directory for matching files
- IndexParser / RegexIndexParser: Extract filenames from an index page
- RemoteLister: Fetch and parse the remote directory index

Both listings are returned sorted oldest first and are recomputed on every
cycle; nothing is cached between cycles.
"""

from __future__ import annotations

import html
import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import httpx

from dirmirror.client.api import APIError
from dirmirror.client.sync.domain.ordering import sort_filenames
from dirmirror.client.sync.types import ListError

if TYPE_CHECKING:
    from dirmirror.client.api import HTTPClient

logger = logging.getLogger(__name__)


def matches_suffix(filename: str, suffix: str) -> bool:
    """Check if a filename ends with ``"." + suffix``."""
    return filename.endswith("." + suffix)


def is_safe_filename(filename: str) -> bool:
    """Check that a filename stays inside the target directory."""
    if not filename or filename in (".", ".."):
        return False
    return "/" not in filename and "\\" not in filename and "\x00" not in filename


def list_local_files(target_path: Path, suffix: str) -> list[str]:
    """List files of the target directory matching the suffix.

    Subdirectories and non-matching entries are skipped.

    Args:
        target_path: Local directory to scan.
        suffix: Suffix filter, without leading dot.

    Returns:
        Ascending list of matching filenames.

    Raises:
        ListError: If the directory cannot be read.
    """
    try:
        names = [
            entry.name
            for entry in target_path.iterdir()
            if matches_suffix(entry.name, suffix) and entry.is_file()
        ]
    except OSError as e:
        raise ListError(f"Cannot list {target_path}: {e}") from e
    return sort_filenames(names)


class IndexParser(Protocol):
    """Protocol for extracting filenames from a directory index page."""

    def extract(self, page: str, suffix: str) -> list[str]:
        """Return the filenames of the page that end with ``"." + suffix``."""
        ...


class RegexIndexParser:
    """Extracts link texts of the form ``>name.suffix<``.

    Works with the autoindex pages of common static file servers, where
    each file appears as the text of an anchor.
    """

    def extract(self, page: str, suffix: str) -> list[str]:
        """Return unique filenames found in the page, unsorted."""
        pattern = re.compile(r">([^<>]*\." + re.escape(suffix) + r")<")
        found: dict[str, None] = {}
        for match in pattern.finditer(page):
            name = html.unescape(match.group(1)).strip()
            if not matches_suffix(name, suffix):
                continue
            if not is_safe_filename(name):
                logger.warning(f"Ignoring unsafe filename in index: {name!r}")
                continue
            found[name] = None
        return list(found)


class RemoteLister:
    """Lists the files advertised by a remote directory index."""

    def __init__(
        self,
        client: HTTPClient,
        suffix: str,
        parser: IndexParser | None = None,
    ) -> None:
        """Initialize the lister.

        Args:
            client: HTTP client bound to the remote source.
            suffix: Suffix filter, without leading dot.
            parser: Index page parser (defaults to RegexIndexParser).
        """
        self._client = client
        self._suffix = suffix
        self._parser = parser or RegexIndexParser()

    def list_files(self) -> list[str]:
        """Fetch the index and extract matching filenames.

        Returns:
            Ascending list of matching filenames (empty if none match).

        Raises:
            ListError: On connection failure, auth rejection or HTTP error.
        """
        try:
            page = self._client.get_index()
        except (APIError, httpx.HTTPError) as e:
            raise ListError(
                f"Cannot fetch index {self._client.config.source_url}: {e}"
            ) from e
        return sort_filenames(self._parser.extract(page, self._suffix))
