"""Version ordering for specification records and groups.

Stability: stable
Tier: none
Since: 0.1.0
Dependencies: stdlib-only
Doc-Types: API_REFERENCE
Tags: semver, ordering, grouping

Versions are ``MAJOR.MINOR.PATCH[-PRERELEASE]``. Ordering is newest
first: numeric parts descending, a release before its prereleases,
prerelease tags compared lexicographically. Anything unparseable is
treated as ``0.0.0`` with the raw string as its prerelease tag, so it
always lands at the bottom.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from functools import cmp_to_key

from canon_docs.model import SpecGroup, SpecRecord

_SEMVER_RE = re.compile(
    r"^v?(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)"
    r"(?:-(?P<prerelease>[0-9A-Za-z.-]+))?"
    r"(?:\+[0-9A-Za-z.-]+)?$"
)


@dataclass(frozen=True)
class ParsedVersion:
    """Numeric parts plus optional prerelease tag."""

    major: int
    minor: int
    patch: int
    prerelease: str | None = None


def parse_version(version: str) -> ParsedVersion:
    """Parse a version string; unparseable input becomes ``0.0.0-<raw>``."""
    match = _SEMVER_RE.match(version.strip())
    if not match:
        return ParsedVersion(0, 0, 0, version)
    return ParsedVersion(
        int(match["major"]),
        int(match["minor"]),
        int(match["patch"]),
        match["prerelease"],
    )


def compare_versions(a: str, b: str) -> int:
    """Ascending comparison: negative if ``a`` is older than ``b``."""
    va, vb = parse_version(a), parse_version(b)
    for x, y in ((va.major, vb.major), (va.minor, vb.minor), (va.patch, vb.patch)):
        if x != y:
            return -1 if x < y else 1

    if va.prerelease == vb.prerelease:
        return 0
    # A release outranks any prerelease of the same numbers
    if va.prerelease is None:
        return 1
    if vb.prerelease is None:
        return -1
    return -1 if va.prerelease < vb.prerelease else 1


def sort_versions(versions: Iterable[str]) -> list[str]:
    """Sort version strings newest first.

    Examples:
        >>> sort_versions(["1.0.0", "1.0.0-beta", "2.0.0", "0.9.9"])
        ['2.0.0', '1.0.0', '1.0.0-beta', '0.9.9']
    """
    return sorted(versions, key=cmp_to_key(compare_versions), reverse=True)


def sort_records(records: Iterable[SpecRecord]) -> list[SpecRecord]:
    """Sort records of one family newest first."""
    return sorted(
        records,
        key=cmp_to_key(lambda a, b: compare_versions(a.version, b.version)),
        reverse=True,
    )


def is_stable(version: str) -> bool:
    """Stable means ``major > 0`` and no prerelease tag."""
    parsed = parse_version(version)
    return parsed.major > 0 and parsed.prerelease is None


def group_sort_key(group: SpecGroup) -> tuple[bool, int, str]:
    """Explicit ``page_order`` first (ascending), then by name."""
    order = group.page_order
    return (order is None, order if order is not None else 0, group.name)


def sort_groups(groups: Iterable[SpecGroup]) -> list[SpecGroup]:
    return sorted(groups, key=group_sort_key)


def group_records(records: Iterable[SpecRecord]) -> list[SpecGroup]:
    """Group records by name, sort versions within and groups across.

    Args:
        records: Every ingested record.

    Returns:
        Groups in navigation order, each with records newest first.
    """
    by_name: dict[str, list[SpecRecord]] = {}
    for record in records:
        by_name.setdefault(record.name, []).append(record)

    groups = [
        SpecGroup(name=name, records=sort_records(members))
        for name, members in by_name.items()
    ]
    return sort_groups(groups)
