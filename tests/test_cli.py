"""Tests for CLI commands - run, check."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from dirmirror.client.cli import cli

INDEX_PAGE = """<html><body><pre>
<a href="../">../</a>
<a href="20250101.tgz">20250101.tgz</a>
<a href="20250102.tgz">20250102.tgz</a>
</pre></body></html>"""


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Drop handlers installed by the run command."""
    yield
    logger = logging.getLogger("dirmirror")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


def write_config(path: Path, jobs: list[dict[str, Any]]) -> Path:
    """Write a job list to a JSON file."""
    path.write_text(json.dumps(jobs))
    return path


def make_entry(target: Path, **overrides: Any) -> dict[str, Any]:
    """Create a job entry for testing."""
    entry: dict[str, Any] = {
        "source_addr": "http://test/backups",
        "target_path": str(target),
        "suffix": "tgz",
        "internal": 0,
        "storage": 0,
    }
    entry.update(overrides)
    return entry


class TestCheckCommand:
    """Tests for 'dirmirror check' command."""

    def test_check_valid_config(self, runner: CliRunner, tmp_path: Path) -> None:
        """Should list every job."""
        config = write_config(
            tmp_path / "jobs.json",
            [make_entry(tmp_path / "a"), make_entry(tmp_path / "b", internal=6, storage=3)],
        )

        result = runner.invoke(cli, ["check", str(config)])

        assert result.exit_code == 0
        assert "2 job(s) OK" in result.output
        assert "every 6h" in result.output
        assert "keep 3" in result.output

    def test_check_missing_file(self, runner: CliRunner, tmp_path: Path) -> None:
        """Should fail with a clear error when the file is missing."""
        result = runner.invoke(cli, ["check", str(tmp_path / "missing.json")])

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_check_invalid_entry(self, runner: CliRunner, tmp_path: Path) -> None:
        """Should reject an entry without a source address."""
        entry = make_entry(tmp_path)
        del entry["source_addr"]
        config = write_config(tmp_path / "jobs.json", [entry])

        result = runner.invoke(cli, ["check", str(config)])

        assert result.exit_code == 1
        assert "source_addr" in result.output


class TestRunCommand:
    """Tests for 'dirmirror run' command."""

    def test_run_invalid_json(self, runner: CliRunner, tmp_path: Path) -> None:
        """Should exit with status 1 on malformed configuration."""
        config = tmp_path / "jobs.json"
        config.write_text("not json")

        result = runner.invoke(cli, ["run", str(config)])

        assert result.exit_code == 1
        assert "Invalid JSON" in result.output

    def test_run_no_jobs(self, runner: CliRunner, tmp_path: Path) -> None:
        """Should exit cleanly when no job is configured."""
        config = write_config(tmp_path / "jobs.json", [])

        with patch("dirmirror.client.cli.run.JobSupervisor") as supervisor_cls:
            result = runner.invoke(cli, ["run", str(config)])

        assert result.exit_code == 0
        supervisor_cls.assert_not_called()

    def test_run_starts_and_waits(self, runner: CliRunner, tmp_path: Path) -> None:
        """Should start the supervisor with every job and wait for it."""
        config = write_config(
            tmp_path / "jobs.json",
            [make_entry(tmp_path / "a"), make_entry(tmp_path / "b")],
        )

        with patch("dirmirror.client.cli.run.JobSupervisor") as supervisor_cls:
            result = runner.invoke(cli, ["run", str(config)])

        assert result.exit_code == 0
        jobs = supervisor_cls.call_args.args[0]
        assert [job.target_path.name for job in jobs] == ["a", "b"]
        supervisor_cls.return_value.start.assert_called_once()
        supervisor_cls.return_value.wait.assert_called_once()

    def test_run_mirrors_files(self, httpx_mock, runner: CliRunner, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
        """Should mirror the remote index into the target directory."""
        target = tmp_path / "target"
        target.mkdir()
        (target / "20250101.tgz").write_bytes(b"old")
        config = write_config(tmp_path / "jobs.json", [make_entry(target, internal=12)])
        httpx_mock.add_response(url="http://test/backups", text=INDEX_PAGE)
        httpx_mock.add_response(url="http://test/backups/20250102.tgz", content=b"new")

        result = runner.invoke(cli, ["run", str(config), "--once"])

        assert result.exit_code == 0
        assert sorted(p.name for p in target.iterdir()) == ["20250101.tgz", "20250102.tgz"]
        assert (target / "20250102.tgz").read_bytes() == b"new"
        assert "Succeed to get file 20250102.tgz" in result.output

    def test_run_writes_log_file(self, httpx_mock, runner: CliRunner, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
        """Should also write logs to --log-file."""
        target = tmp_path / "target"
        target.mkdir()
        config = write_config(tmp_path / "jobs.json", [make_entry(target)])
        log_file = tmp_path / "dirmirror.log"
        httpx_mock.add_response(url="http://test/backups", text="<html></html>")

        result = runner.invoke(cli, ["run", str(config), "--log-file", str(log_file)])

        assert result.exit_code == 0
        assert "Job terminated" in log_file.read_text(encoding="utf-8")
