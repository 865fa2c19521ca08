"""Tests for local and remote listings."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest

from dirmirror.client.api import AuthenticationError, HTTPClient
from dirmirror.client.sync.listing import (
    RegexIndexParser,
    RemoteLister,
    is_safe_filename,
    list_local_files,
    matches_suffix,
)
from dirmirror.client.sync.types import ListError
from dirmirror.core.config import SourceConfig

NGINX_INDEX = """<html>
<head><title>Index of /backups/</title></head>
<body>
<h1>Index of /backups/</h1><hr><pre><a href="../">../</a>
<a href="20250103.tgz">20250103.tgz</a>                                      03-Jan-2025 02:00    1048576
<a href="20250101.tgz">20250101.tgz</a>                                      01-Jan-2025 02:00    1048576
<a href="20250102.tgz">20250102.tgz</a>                                      02-Jan-2025 02:00    1048576
<a href="notes.txt">notes.txt</a>                                         01-Jan-2025 02:00    12
<a href="old/">old/</a>                                              01-Jan-2025 02:00    -
</pre><hr></body>
</html>"""


class TestHelpers:
    """Tests for filename helpers."""

    def test_matches_suffix(self) -> None:
        """Should require a dot before the suffix."""
        assert matches_suffix("a.tgz", "tgz") is True
        assert matches_suffix("atgz", "tgz") is False
        assert matches_suffix("a.tgz.part", "tgz") is False

    def test_is_safe_filename(self) -> None:
        """Should reject names that escape the target directory."""
        assert is_safe_filename("20250101.tgz") is True
        assert is_safe_filename("../etc.tgz") is False
        assert is_safe_filename("sub/a.tgz") is False
        assert is_safe_filename("..") is False
        assert is_safe_filename("") is False


class TestListLocalFiles:
    """Tests for list_local_files."""

    def test_lists_matching_files_sorted(self, tmp_path: Path) -> None:
        """Should list matching files in ascending order."""
        for name in ("b.tgz", "a.tgz", "c.tgz"):
            (tmp_path / name).write_bytes(b"x")

        assert list_local_files(tmp_path, "tgz") == ["a.tgz", "b.tgz", "c.tgz"]

    def test_skips_other_suffixes_and_directories(self, tmp_path: Path) -> None:
        """Should skip non-matching files, partial downloads and directories."""
        (tmp_path / "a.tgz").write_bytes(b"x")
        (tmp_path / "b.zip").write_bytes(b"x")
        (tmp_path / "c.tgz.part").write_bytes(b"x")
        (tmp_path / "dir.tgz").mkdir()

        assert list_local_files(tmp_path, "tgz") == ["a.tgz"]

    def test_empty_directory(self, tmp_path: Path) -> None:
        """Should return an empty list."""
        assert list_local_files(tmp_path, "tgz") == []

    def test_missing_directory(self, tmp_path: Path) -> None:
        """Should raise ListError when the directory does not exist."""
        with pytest.raises(ListError, match="Cannot list"):
            list_local_files(tmp_path / "missing", "tgz")

    @pytest.mark.skipif(
        os.name == "nt" or (hasattr(os, "geteuid") and os.geteuid() == 0),
        reason="Permission bits not enforced",
    )
    def test_unreadable_directory(self, tmp_path: Path) -> None:
        """Should raise ListError when the directory cannot be read."""
        locked = tmp_path / "locked"
        locked.mkdir()
        locked.chmod(0o000)
        try:
            with pytest.raises(ListError):
                list_local_files(locked, "tgz")
        finally:
            locked.chmod(0o755)


class TestRegexIndexParser:
    """Tests for RegexIndexParser."""

    def test_extracts_link_texts(self) -> None:
        """Should extract suffix-terminated link texts only."""
        parser = RegexIndexParser()
        assert sorted(parser.extract(NGINX_INDEX, "tgz")) == [
            "20250101.tgz",
            "20250102.tgz",
            "20250103.tgz",
        ]

    def test_no_matches(self) -> None:
        """Should return an empty list when nothing matches."""
        assert RegexIndexParser().extract(NGINX_INDEX, "zip") == []

    def test_suffix_is_literal(self) -> None:
        """Should not treat suffix characters as regex syntax."""
        page = '<a href="a.tar.gz">a.tar.gz</a><a href="b.tarXgz">b.tarXgz</a>'
        assert RegexIndexParser().extract(page, "tar.gz") == ["a.tar.gz"]

    def test_deduplicates(self) -> None:
        """Should report each filename once."""
        page = "<td>a.tgz</td><a>a.tgz</a>"
        assert RegexIndexParser().extract(page, "tgz") == ["a.tgz"]

    def test_unescapes_entities(self) -> None:
        """Should decode HTML entities in link text."""
        page = '<a href="a%26b.tgz">a&amp;b.tgz</a>'
        assert RegexIndexParser().extract(page, "tgz") == ["a&b.tgz"]

    def test_skips_unsafe_names(self) -> None:
        """Should ignore link texts containing path separators."""
        page = "<a>../../etc.tgz</a><a>ok.tgz</a>"
        assert RegexIndexParser().extract(page, "tgz") == ["ok.tgz"]


class TestRemoteLister:
    """Tests for RemoteLister."""

    def test_list_files_sorted(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should fetch the index and return matches in ascending order."""
        httpx_mock.add_response(url="http://test/backups", text=NGINX_INDEX)

        with HTTPClient(SourceConfig("http://test/backups/")) as client:
            lister = RemoteLister(client, "tgz")
            assert lister.list_files() == [
                "20250101.tgz",
                "20250102.tgz",
                "20250103.tgz",
            ]

    def test_connection_failure(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should wrap transport failures in ListError."""
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))

        with HTTPClient(SourceConfig("http://test/backups")) as client:
            with pytest.raises(ListError, match="Cannot fetch index"):
                RemoteLister(client, "tgz").list_files()

    def test_auth_rejected(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should wrap auth rejection in ListError."""
        httpx_mock.add_response(url="http://test/backups", status_code=401)

        with HTTPClient(SourceConfig("http://test/backups")) as client:
            with pytest.raises(ListError) as exc_info:
                RemoteLister(client, "tgz").list_files()
        assert isinstance(exc_info.value.__cause__, AuthenticationError)

    def test_custom_parser(self) -> None:
        """Should delegate extraction to the given parser."""
        client = MagicMock()
        client.get_index.return_value = "<page>"
        parser = MagicMock()
        parser.extract.return_value = ["b.tgz", "a.tgz"]

        lister = RemoteLister(client, "tgz", parser=parser)

        assert lister.list_files() == ["a.tgz", "b.tgz"]
        parser.extract.assert_called_once_with("<page>", "tgz")
