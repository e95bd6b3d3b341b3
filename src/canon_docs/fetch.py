"""Fetch the upstream specification repository with git.

Stability: stable
Tier: none
Since: 0.1.0
Dependencies: git executable
Doc-Types: API_REFERENCE
Tags: git, fetch, source

Refresh an existing checkout with ``git pull``; clone when there is
none. A failed pull is a warning (the existing copy is still usable);
a failed clone is fatal because there is nothing to build from.

Usage::

    from canon_docs.fetch import fetch_specs

    fetch_specs(
        repo_url="https://github.com/canon-protocol/canon.git",
        dest=Path("canon-specs"),
    )
"""

from __future__ import annotations

import subprocess
from enum import Enum
from pathlib import Path

from canon_docs.errors import SourceFetchError
from canon_docs.logging import get_logger

logger = get_logger(__name__)

_CLONE_TIMEOUT = 300
_PULL_TIMEOUT = 120


class FetchOutcome(str, Enum):
    """What happened to the local checkout."""

    CLONED = "cloned"
    PULLED = "pulled"
    STALE = "stale"  # pull failed, existing copy used
    LOCAL = "local"  # not a git checkout, used as-is


def _run_git(args: list[str], *, cwd: Path | None, timeout: int) -> subprocess.CompletedProcess:
    return subprocess.run(
        ["git", *args],
        capture_output=True,
        cwd=str(cwd) if cwd else None,
        check=True,
        timeout=timeout,
    )


def _stderr(exc: Exception) -> str:
    if isinstance(exc, subprocess.CalledProcessError) and exc.stderr:
        return exc.stderr.decode("utf-8", errors="replace").strip()
    return str(exc)


def fetch_specs(repo_url: str, dest: Path, *, branch: str = "main") -> FetchOutcome:
    """Make ``dest`` hold a copy of the specification repository.

    Args:
        repo_url: Repository to clone.
        dest: Local checkout directory.
        branch: Branch to clone.

    Returns:
        The ``FetchOutcome`` describing which path was taken.

    Raises:
        SourceFetchError: If no local copy exists and cloning fails.
    """
    if (dest / ".git").exists():
        logger.info("fetch.pull", dest=str(dest))
        try:
            _run_git(["pull", "--ff-only"], cwd=dest, timeout=_PULL_TIMEOUT)
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, FileNotFoundError) as exc:
            logger.warning("fetch.pull_failed", dest=str(dest), error=_stderr(exc))
            return FetchOutcome.STALE
        return FetchOutcome.PULLED

    if dest.is_dir() and any(dest.iterdir()):
        logger.info("fetch.local_copy", dest=str(dest))
        return FetchOutcome.LOCAL

    logger.info("fetch.clone", repo_url=repo_url, dest=str(dest), branch=branch)
    dest.parent.mkdir(parents=True, exist_ok=True)
    try:
        _run_git(
            ["clone", "--depth", "1", "--branch", branch, repo_url, str(dest)],
            cwd=None,
            timeout=_CLONE_TIMEOUT,
        )
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired, FileNotFoundError) as exc:
        raise SourceFetchError(
            f"Could not clone {repo_url}: {_stderr(exc)}",
            repo_url=repo_url,
            dest=dest,
        ) from exc
    return FetchOutcome.CLONED


def require_local_copy(repo_url: str, dest: Path) -> FetchOutcome:
    """Offline mode: accept ``dest`` only if it already exists."""
    if not dest.is_dir():
        raise SourceFetchError(
            f"Specification directory {dest} does not exist and fetching is disabled",
            repo_url=repo_url,
            dest=dest,
        )
    return FetchOutcome.LOCAL
