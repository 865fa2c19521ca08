"""Backup job runner.

A JobRunner drives one job through repeated cycles:

    LISTING -> DIFFING -> PLANNING -> TRANSFERRING -> EVICTING
        -> SLEEPING -> LISTING ...      (interval > 0)
        -> TERMINATED                   (interval == 0, or stop requested)

Errors never end the job: listing failures degrade to an empty listing,
download failures are logged per file and only suppress eviction, and the
poll interval itself is the retry delay.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from dirmirror.client.api import HTTPClient
from dirmirror.client.sync.domain import compute_incremental, plan_retention
from dirmirror.client.sync.download import FileDownloader, TransferExecutor
from dirmirror.client.sync.listing import RemoteLister, list_local_files
from dirmirror.client.sync.types import CycleResult, ListError
from dirmirror.core.types import JobState

if TYPE_CHECKING:
    from dirmirror.client.sync.listing import IndexParser
    from dirmirror.client.sync.types import ProgressCallback
    from dirmirror.core.config import JobConfig

logger = logging.getLogger(__name__)


class JobRunner:
    """Runs the poll loop of a single backup job.

    Usage:
        runner = JobRunner(job_config, stop_event=stop)
        runner.run()  # Blocks until the job terminates
    """

    def __init__(
        self,
        config: JobConfig,
        client: HTTPClient | None = None,
        stop_event: threading.Event | None = None,
        parser: IndexParser | None = None,
        progress_callback: ProgressCallback | None = None,
        once: bool = False,
    ) -> None:
        """Initialize the runner.

        Args:
            config: Job configuration, owned by this runner.
            client: HTTP client for the source. Created (and closed) by the
                runner when omitted.
            stop_event: Shared stop signal, checked between states.
            parser: Index page parser for the remote listing.
            progress_callback: Optional callback for download progress.
            once: Run a single cycle regardless of the configured interval.
        """
        self._config = config
        self._owns_client = client is None
        self._client = client if client is not None else HTTPClient(config.source)
        self._stop_event = stop_event or threading.Event()
        self._once = once
        self._remote = RemoteLister(self._client, config.suffix, parser)
        self._executor = TransferExecutor(
            FileDownloader(self._client, config.target_path, progress_callback)
        )
        self._state = JobState.IDLE
        self._cycles = 0
        self._last_result: CycleResult | None = None

    @property
    def config(self) -> JobConfig:
        """Get the job configuration."""
        return self._config

    @property
    def state(self) -> JobState:
        """Get current job state."""
        return self._state

    @property
    def cycles(self) -> int:
        """Number of cycles started so far."""
        return self._cycles

    @property
    def last_result(self) -> CycleResult | None:
        """Result of the most recent cycle."""
        return self._last_result

    def stop(self) -> None:
        """Request the job to stop at the next state boundary."""
        self._stop_event.set()

    def _enter(self, state: JobState) -> bool:
        """Move to a new state unless a stop was requested."""
        if self._stop_event.is_set():
            return False
        self._state = state
        logger.debug(f"{self._config.label}: {state.value}")
        return True

    def _list_local(self, result: CycleResult) -> list[str]:
        try:
            return list_local_files(self._config.target_path, self._config.suffix)
        except ListError as e:
            logger.error(str(e))
            result.errors.append(str(e))
            return []

    def _list_remote(self, result: CycleResult) -> list[str]:
        try:
            return self._remote.list_files()
        except ListError as e:
            logger.error(str(e))
            result.errors.append(str(e))
            return []

    def _evict(self, filenames: list[str]) -> list[str]:
        evicted = []
        for filename in filenames:
            path = self._config.target_path / filename
            try:
                path.unlink()
            except OSError as e:
                logger.error(f"Fail to delete file {filename}: {e}")
                continue
            logger.info(f"Deleted old file {filename}")
            evicted.append(filename)
        return evicted

    def run_cycle(self) -> CycleResult:
        """Run one list -> diff -> plan -> transfer -> evict pass.

        Returns:
            CycleResult describing what happened. A stop request ends the
            cycle early at the next state boundary.
        """
        self._cycles += 1
        result = CycleResult()
        self._last_result = result

        if not self._enter(JobState.LISTING):
            return result
        result.local = self._list_local(result)
        result.remote = self._list_remote(result)

        if not self._enter(JobState.DIFFING):
            return result
        result.incremental = compute_incremental(result.local, result.remote)

        if not self._enter(JobState.PLANNING):
            return result
        plan = plan_retention(result.local, result.incremental, self._config.storage)
        result.skipped = plan.skipped
        if plan.skipped:
            logger.warning(
                f"Storage cap {self._config.storage} leaves no room for "
                f"{len(plan.skipped)} new file(s), skipping: {', '.join(plan.skipped)}"
            )

        if not self._enter(JobState.TRANSFERRING):
            return result
        report = self._executor.download_all(plan.fetch)
        result.downloaded = [item.filename for item in report.downloaded]
        result.failed = report.failed

        if not self._enter(JobState.EVICTING):
            return result
        if report.first_error is not None:
            if plan.evict:
                logger.warning(
                    f"Skipping deletion of {len(plan.evict)} old file(s): "
                    f"{len(report.errors)} download(s) failed"
                )
            result.eviction_skipped = bool(plan.evict)
        else:
            result.evicted = self._evict(plan.evict)

        logger.info(
            f"Cycle {self._cycles} done: {len(result.incremental)} new, "
            f"{len(result.downloaded)} downloaded, {len(result.failed)} failed, "
            f"{len(result.evicted)} deleted"
        )
        return result

    def run(self) -> None:
        """Run cycles until the job terminates.

        A job terminates after its first cycle when the interval is zero
        (or ``once`` is set), or when the stop signal is set.
        """
        logger.info(f"Job started: {self._config}")
        try:
            while not self._stop_event.is_set():
                try:
                    self.run_cycle()
                except Exception:
                    logger.exception(f"Unexpected error in cycle {self._cycles}")

                if self._once or self._config.one_shot:
                    break
                if not self._enter(JobState.SLEEPING):
                    break
                if self._stop_event.wait(self._config.interval.total_seconds()):
                    break
        finally:
            self._state = JobState.TERMINATED
            if self._owns_client:
                self._client.close()
            logger.info(f"Job terminated after {self._cycles} cycle(s)")
