"""Error types for the Canon documentation generator.

Stability: stable
Tier: none
Since: 0.1.0
Dependencies: stdlib-only
Doc-Types: API_REFERENCE
Tags: errors, exceptions

Two tiers of failure exist:

- **Fatal:** the specification source cannot be obtained at all.
  Raised as ``SourceFetchError`` and turned into a non-zero exit code.
- **Per-item:** one definition file has a bad path, bad content, or
  fails to render. Raised as ``SpecPathError``/``SpecParseError``,
  logged, and the file is left out of the generated site.

Hierarchy::

    CanonDocsError
      ├── SourceFetchError   ── clone failed and no local copy exists
      └── SpecError          ── base for per-item failures
            ├── SpecPathError    ── unexpected directory layout
            └── SpecParseError   ── unreadable or invalid definition file
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class CanonDocsError(Exception):
    """Base class for all generator errors.

    Attributes:
        message: Human-readable error message.
        context: Extra key/value pairs attached to log events.
    """

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.context = context
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured logging."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            **{k: str(v) for k, v in self.context.items()},
        }


class SourceFetchError(CanonDocsError):
    """Raised when the specification repository cannot be fetched."""

    def __init__(self, message: str, *, repo_url: str, dest: Path):
        self.repo_url = repo_url
        self.dest = dest
        super().__init__(message, repo_url=repo_url, dest=dest)


class SpecError(CanonDocsError):
    """Base for errors tied to a single definition file."""

    def __init__(self, message: str, *, path: Path, **context: Any):
        self.path = path
        super().__init__(message, path=path, **context)


class SpecPathError(SpecError):
    """Raised when a definition file is not at ``publisher/name/version/``."""


class SpecParseError(SpecError):
    """Raised when a definition file cannot be read or validated."""

    def __init__(self, message: str, *, path: Path, field: str | None = None):
        self.field = field
        super().__init__(message, path=path, field=field)
