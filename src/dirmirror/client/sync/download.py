"""File download into the target directory.

This module provides:
- FileDownloader: Streams one file to disk with an atomic rename
- TransferExecutor: Downloads a batch, tolerating per-file failures
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

import httpx

from dirmirror.client.api import DOWNLOAD_CHUNK_SIZE, APIError
from dirmirror.client.sync.types import (
    DownloadError,
    DownloadResult,
    ProgressCallback,
    TransferProgress,
    TransferReport,
)

if TYPE_CHECKING:
    from dirmirror.client.api import HTTPClient

logger = logging.getLogger(__name__)

PARTIAL_SUFFIX = ".part"
PROGRESS_INTERVAL = 0.5  # seconds between progress reports


def remove_quietly(path: Path) -> None:
    """Delete a file, logging instead of raising if that fails."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not remove {path}: {e}")


class FileDownloader:
    """Downloads files from the remote index into the target directory."""

    def __init__(
        self,
        client: HTTPClient,
        target_path: Path,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        """Initialize the downloader.

        Args:
            client: HTTP client bound to the remote source.
            target_path: Local directory receiving the files.
            progress_callback: Optional callback for progress updates.
        """
        self._client = client
        self._target_path = target_path
        self._progress_callback = progress_callback

    def _report(self, progress: TransferProgress) -> None:
        percent = progress.percent
        if percent is None:
            logger.debug(
                f"Transferred {progress.filename}: {progress.bytes_transferred} bytes"
            )
        else:
            logger.debug(
                f"Transferred {progress.filename}: {progress.bytes_transferred} / "
                f"{progress.total_bytes} bytes ({percent:.2f}%)"
            )
        if self._progress_callback:
            self._progress_callback(progress)

    def download(self, filename: str) -> DownloadResult:
        """Download one file with atomic write.

        The body is streamed to ``<filename>.part`` and renamed onto the
        final path once complete. On failure neither the partial file nor a
        file at the destination path is left behind. The body is stored as
        sent on the wire: a Content-Encoding such as gzip is not decoded.

        Args:
            filename: Name of the file as advertised by the index.

        Returns:
            DownloadResult with the local path and size.

        Raises:
            DownloadError: If the transfer fails.
        """
        local_path = self._target_path / filename
        tmp_path = self._target_path / (filename + PARTIAL_SUFFIX)

        try:
            bytes_transferred = 0
            with self._client.stream_file(filename) as response:
                length = response.headers.get("Content-Length")
                total = int(length) if length and length.isdigit() else None
                last_report = time.monotonic()
                with open(tmp_path, "wb") as f:
                    for chunk in response.iter_raw(DOWNLOAD_CHUNK_SIZE):
                        f.write(chunk)
                        bytes_transferred += len(chunk)
                        now = time.monotonic()
                        if now - last_report >= PROGRESS_INTERVAL:
                            last_report = now
                            self._report(
                                TransferProgress(filename, bytes_transferred, total)
                            )

            if total is not None and bytes_transferred != total:
                raise DownloadError(
                    filename, f"incomplete body ({bytes_transferred}/{total} bytes)"
                )

            os.replace(tmp_path, local_path)
            self._report(TransferProgress(filename, bytes_transferred, total))
            return DownloadResult(
                filename=filename, local_path=local_path, size=bytes_transferred
            )

        except DownloadError:
            self._cleanup(tmp_path, local_path)
            raise
        except (APIError, httpx.HTTPError) as e:
            self._cleanup(tmp_path, local_path)
            raise DownloadError(filename, str(e) or type(e).__name__) from e
        except Exception as e:
            # Local I/O errors and anything unexpected from the stream
            self._cleanup(tmp_path, local_path)
            raise DownloadError(filename, f"{type(e).__name__}: {e}") from e

    def _cleanup(self, *paths: Path) -> None:
        for path in paths:
            remove_quietly(path)


class TransferExecutor:
    """Downloads a batch of files one at a time.

    A failed file is cleaned up, logged and skipped; the batch always
    attempts every requested file exactly once.
    """

    def __init__(self, downloader: FileDownloader) -> None:
        """Initialize the executor.

        Args:
            downloader: Downloader used for each file.
        """
        self._downloader = downloader

    def download_all(self, filenames: Sequence[str]) -> TransferReport:
        """Download files in order.

        Args:
            filenames: Filenames to fetch, oldest first.

        Returns:
            TransferReport; ``first_error`` gates eviction for the cycle.
        """
        report = TransferReport()
        for filename in filenames:
            logger.info(f"Start getting file {filename}")
            try:
                result = self._downloader.download(filename)
            except DownloadError as e:
                logger.error(f"Fail to get file {filename}: {e.reason}")
                report.errors.append(e)
                continue
            logger.info(f"Succeed to get file {filename} ({result.size} bytes)")
            report.downloaded.append(result)
        return report
