"""Tests for fetching the specification repository.

git is never executed: ``subprocess.run`` is patched throughout.
"""

from __future__ import annotations

import subprocess
from unittest.mock import patch

import pytest

from canon_docs.errors import SourceFetchError
from canon_docs.fetch import FetchOutcome, fetch_specs, require_local_copy

REPO = "https://github.com/canon-protocol/canon.git"


def _git_error(stderr: bytes = b"fatal: repository not found") -> subprocess.CalledProcessError:
    return subprocess.CalledProcessError(128, ["git"], stderr=stderr)


class TestFetchSpecs:
    """Tests for clone / pull selection and failure handling."""

    @patch("canon_docs.fetch.subprocess.run")
    def test_clone_when_missing(self, mock_run, tmp_path):
        dest = tmp_path / "canon-specs"
        assert fetch_specs(REPO, dest, branch="main") is FetchOutcome.CLONED

        args = mock_run.call_args.args[0]
        assert args[:2] == ["git", "clone"]
        assert REPO in args
        assert str(dest) in args
        assert "--branch" in args

    @patch("canon_docs.fetch.subprocess.run")
    def test_clone_failure_is_fatal(self, mock_run, tmp_path):
        mock_run.side_effect = _git_error()
        dest = tmp_path / "canon-specs"

        with pytest.raises(SourceFetchError) as exc_info:
            fetch_specs(REPO, dest)
        assert "repository not found" in exc_info.value.message
        assert exc_info.value.dest == dest

    @patch("canon_docs.fetch.subprocess.run")
    def test_missing_git_is_fatal(self, mock_run, tmp_path):
        mock_run.side_effect = FileNotFoundError("git")
        with pytest.raises(SourceFetchError):
            fetch_specs(REPO, tmp_path / "canon-specs")

    @patch("canon_docs.fetch.subprocess.run")
    def test_pull_existing_checkout(self, mock_run, tmp_path):
        (tmp_path / ".git").mkdir()
        assert fetch_specs(REPO, tmp_path) is FetchOutcome.PULLED

        args = mock_run.call_args.args[0]
        assert args[:2] == ["git", "pull"]
        assert mock_run.call_args.kwargs["cwd"] == str(tmp_path)

    @patch("canon_docs.fetch.subprocess.run")
    def test_pull_failure_uses_existing_copy(self, mock_run, tmp_path):
        (tmp_path / ".git").mkdir()
        mock_run.side_effect = _git_error(b"fatal: unable to access")
        assert fetch_specs(REPO, tmp_path) is FetchOutcome.STALE

    @patch("canon_docs.fetch.subprocess.run")
    def test_pull_timeout_uses_existing_copy(self, mock_run, tmp_path):
        (tmp_path / ".git").mkdir()
        mock_run.side_effect = subprocess.TimeoutExpired(["git", "pull"], 120)
        assert fetch_specs(REPO, tmp_path) is FetchOutcome.STALE

    @patch("canon_docs.fetch.subprocess.run")
    def test_plain_directory_used_as_is(self, mock_run, tmp_path):
        (tmp_path / "README.md").write_text("local\n", encoding="utf-8")
        assert fetch_specs(REPO, tmp_path) is FetchOutcome.LOCAL
        mock_run.assert_not_called()


class TestRequireLocalCopy:
    """Tests for offline mode."""

    def test_existing_directory(self, tmp_path):
        assert require_local_copy(REPO, tmp_path) is FetchOutcome.LOCAL

    def test_missing_directory(self, tmp_path):
        with pytest.raises(SourceFetchError):
            require_local_copy(REPO, tmp_path / "nope")
