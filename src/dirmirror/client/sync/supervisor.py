"""Supervisor running every configured job concurrently.

This module provides:
- JobSupervisor: Starts one thread per job and waits for them
- SupervisorState: Lifecycle of the supervisor
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from enum import Enum, auto

from dirmirror.client.sync.runner import JobRunner
from dirmirror.core.config import JobConfig

logger = logging.getLogger(__name__)

# Seconds between liveness checks while waiting, so signals stay responsive
JOIN_POLL_INTERVAL = 1.0

RunnerFactory = Callable[[JobConfig, threading.Event], JobRunner]


class SupervisorState(Enum):
    """State of the supervisor."""

    STOPPED = auto()
    RUNNING = auto()
    STOPPING = auto()


def default_runner_factory(
    once: bool = False,
) -> RunnerFactory:
    """Build a factory creating a JobRunner per job."""

    def _factory(config: JobConfig, stop_event: threading.Event) -> JobRunner:
        return JobRunner(config, stop_event=stop_event, once=once)

    return _factory


class JobSupervisor:
    """Runs independent backup jobs, one thread each.

    Jobs share nothing but the stop signal: a failure in one job never
    affects another.

    Usage:
        supervisor = JobSupervisor(load_jobs(path))
        supervisor.start()
        supervisor.wait()  # Until every job terminates or stop() is called
    """

    def __init__(
        self,
        jobs: Sequence[JobConfig],
        runner_factory: RunnerFactory | None = None,
    ) -> None:
        """Initialize the supervisor.

        Args:
            jobs: Job configurations, one runner per entry.
            runner_factory: Creates the runner of a job (defaults to JobRunner).
        """
        self._jobs = list(jobs)
        self._runner_factory = runner_factory or default_runner_factory()
        self._stop_event = threading.Event()
        self._lock = threading.Lock()
        self._state = SupervisorState.STOPPED
        self._runners: list[JobRunner] = []
        self._threads: list[threading.Thread] = []

    @property
    def state(self) -> SupervisorState:
        """Get current supervisor state."""
        return self._state

    @property
    def runners(self) -> list[JobRunner]:
        """Runners started by this supervisor."""
        return list(self._runners)

    @property
    def alive_count(self) -> int:
        """Number of job threads still running."""
        return sum(1 for thread in self._threads if thread.is_alive())

    def _run_job(self, runner: JobRunner) -> None:
        try:
            runner.run()
        except Exception:
            logger.exception(f"Job {runner.config.label} crashed")

    def start(self) -> None:
        """Start one thread per job."""
        with self._lock:
            if self._state != SupervisorState.STOPPED:
                logger.warning("Supervisor already running")
                return

            self._state = SupervisorState.RUNNING
            self._stop_event.clear()
            self._runners.clear()
            self._threads.clear()

            for index, job in enumerate(self._jobs):
                runner = self._runner_factory(job, self._stop_event)
                thread = threading.Thread(
                    target=self._run_job,
                    args=(runner,),
                    name=f"job-{index}-{job.label}",
                    daemon=True,
                )
                self._runners.append(runner)
                self._threads.append(thread)
                thread.start()

            logger.info(f"Supervisor started {len(self._threads)} job(s)")

    def stop(self) -> None:
        """Signal every job to stop at its next state boundary."""
        with self._lock:
            if self._state != SupervisorState.RUNNING:
                return
            self._state = SupervisorState.STOPPING
        logger.info("Stopping jobs...")
        self._stop_event.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until every job thread has terminated.

        Args:
            timeout: Maximum seconds to wait, None to wait forever.

        Returns:
            True if all jobs terminated, False on timeout.
        """
        remaining = timeout
        while self.alive_count:
            step = JOIN_POLL_INTERVAL if remaining is None else min(JOIN_POLL_INTERVAL, remaining)
            for thread in self._threads:
                if thread.is_alive():
                    thread.join(timeout=step)
                    break
            if remaining is not None:
                remaining -= step
                if remaining <= 0:
                    break

        if self.alive_count:
            return False
        with self._lock:
            self._state = SupervisorState.STOPPED
        logger.info("All jobs terminated")
        return True
