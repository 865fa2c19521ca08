"""Run and check commands for dirmirror CLI.

Commands:
- run: Start every job of a configuration file
- check: Validate a configuration file
"""

from __future__ import annotations

import logging
import signal
import sys
from pathlib import Path
from types import FrameType

import click

from dirmirror.client.sync import JobSupervisor
from dirmirror.client.sync.supervisor import default_runner_factory
from dirmirror.core.config import ConfigError, JobConfig, load_jobs

LOG_FORMAT = "%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def setup_logging(level: int = logging.INFO, log_path: Path | None = None) -> None:
    """Configure logging to stdout and optionally to a file.

    Args:
        level: Level of the dirmirror logger.
        log_path: Optional path of a log file.
    """
    formatter = logging.Formatter(LOG_FORMAT)

    root_logger = logging.getLogger("dirmirror")
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    root_logger.addHandler(stdout_handler)

    if log_path is not None:
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def _load_or_exit(config_file: Path) -> list[JobConfig]:
    try:
        return load_jobs(config_file)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.command()
@click.argument("config_file", type=click.Path(path_type=Path))
@click.option("--verbose", "-v", is_flag=True, help="Log debug messages and download progress.")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write logs to this file.",
)
@click.option("--once", is_flag=True, help="Run a single cycle per job, then exit.")
def run(config_file: Path, verbose: bool, log_file: Path | None, once: bool) -> None:
    """Mirror remote directories as described in CONFIG_FILE.

    Runs every job concurrently until all of them terminate or the process
    receives SIGINT/SIGTERM.
    """
    jobs = _load_or_exit(config_file)
    setup_logging(logging.DEBUG if verbose else logging.INFO, log_file)

    if not jobs:
        logger.warning(f"No jobs configured in {config_file}")
        return

    for job in jobs:
        logger.info(f"Loaded job {job}")
        if not job.target_path.is_dir():
            logger.warning(f"Target directory {job.target_path} does not exist")

    supervisor = JobSupervisor(jobs, runner_factory=default_runner_factory(once=once))

    def _handle_signal(signum: int, frame: FrameType | None) -> None:
        logger.info(f"Received {signal.Signals(signum).name}")
        supervisor.stop()

    previous = {
        sig: signal.signal(sig, _handle_signal)
        for sig in (signal.SIGINT, signal.SIGTERM)
    }
    try:
        supervisor.start()
        supervisor.wait()
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


@click.command()
@click.argument("config_file", type=click.Path(path_type=Path))
def check(config_file: Path) -> None:
    """Validate CONFIG_FILE and list its jobs."""
    jobs = _load_or_exit(config_file)
    for job in jobs:
        click.echo(f"  {job}")
    click.echo(f"{len(jobs)} job(s) OK")
