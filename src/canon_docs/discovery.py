"""Discover and parse specification definition files.

Stability: stable
Tier: none
Since: 0.1.0
Dependencies: pyyaml, pydantic
Doc-Types: API_REFERENCE
Tags: discovery, parser, yaml, canon

Walks a checkout of the specification repository and turns every
``publisher/name/version/canon.yml`` into a ``SpecRecord``.

Failures are per file: a bad path or bad content is logged, recorded
as a ``SkippedSpec``, and the scan moves on.

Usage::

    from canon_docs.discovery import scan_specs

    records, skipped = scan_specs(Path("canon-specs"))
    for record in records:
        print(f"{record.name}@{record.version}")
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import yaml
from pydantic import ValidationError

from canon_docs.errors import SpecParseError, SpecPathError
from canon_docs.logging import get_logger
from canon_docs.model import (
    DEFINITION_FILENAMES,
    CanonDocument,
    SkippedSpec,
    SpecInfo,
    SpecRecord,
    TypeRef,
    parse_type_ref,
)

logger = get_logger(__name__)


def find_definition_files(root: Path) -> Iterator[Path]:
    """Yield every definition file under ``root`` in a stable order.

    Hidden directories (``.git``, ``.github``, ...) are not searched.
    """
    found: set[Path] = set()
    for filename in DEFINITION_FILENAMES:
        found.update(root.rglob(filename))

    for path in sorted(found):
        rel_dirs = path.relative_to(root).parts[:-1]
        if any(part.startswith(".") for part in rel_dirs):
            continue
        if path.is_file():
            yield path


def extract_spec_info(path: Path, root: Path) -> SpecInfo:
    """Derive ``(publisher, name, version)`` from the directory layout.

    The three directories directly above the definition file are used,
    so the repository may nest them under extra prefix directories.

    Raises:
        SpecPathError: If fewer than three directories separate the file
            from ``root``.
    """
    rel_dirs = path.relative_to(root).parts[:-1]
    if len(rel_dirs) < 3:
        raise SpecPathError(
            f"Expected publisher/name/version/{path.name}, got {'/'.join(rel_dirs) or '.'}/{path.name}",
            path=path,
        )
    publisher, name, version = rel_dirs[-3:]
    return SpecInfo(publisher=publisher, name=name, version=version, path=path)


def collect_source_files(directory: Path) -> dict[str, str]:
    """Read the text files next to a definition file, name → content."""
    files: dict[str, str] = {}
    for entry in sorted(directory.iterdir()):
        if not entry.is_file() or entry.name.startswith("."):
            continue
        try:
            files[entry.name] = entry.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            logger.debug("discovery.binary_source_file", path=str(entry))
        except OSError as exc:
            logger.warning("discovery.source_file_unreadable", path=str(entry), error=str(exc))
    return files


def _parse_refs(values: list[str], *, path: Path) -> tuple[TypeRef, ...]:
    refs: list[TypeRef] = []
    for value in values:
        ref = parse_type_ref(value)
        if ref is None:
            raise SpecParseError(
                f"Invalid type reference in includes: {value!r}",
                path=path,
                field="includes",
            )
        if ref not in refs:
            refs.append(ref)
    return tuple(refs)


def load_spec(info: SpecInfo) -> SpecRecord:
    """Read and validate one definition file.

    Args:
        info: Positional identity of the file.

    Returns:
        The parsed ``SpecRecord``.

    Raises:
        SpecParseError: If the file is unreadable, not YAML, or does not
            match the expected shape.
    """
    path = info.path
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecParseError(f"Cannot read {path}: {exc}", path=path) from exc

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise SpecParseError(f"Invalid YAML in {path}: {exc}", path=path) from exc

    if not isinstance(data, dict):
        raise SpecParseError(
            f"Expected a mapping, got {type(data).__name__}",
            path=path,
            field="root",
        )

    try:
        doc = CanonDocument.model_validate(data)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "root"
        raise SpecParseError(
            f"Invalid field {field!r}: {first['msg']}",
            path=path,
            field=field,
        ) from exc

    declared_type = None
    if doc.type is not None:
        declared_type = parse_type_ref(doc.type)
        if declared_type is None:
            raise SpecParseError(
                f"Invalid type reference: {doc.type!r}",
                path=path,
                field="type",
            )

    return SpecRecord(
        publisher=info.publisher,
        name=info.name,
        version=info.version,
        canon=doc.canon,
        declared_type=declared_type,
        includes=_parse_refs(doc.includes, path=path),
        metadata=dict(doc.metadata),
        schema_fields=dict(doc.schema_ or {}),
        content_fields=doc.content_fields,
        page_order=doc.page_order,
        source_files=collect_source_files(path.parent),
        source_path=path,
    )


def scan_specs(root: Path) -> tuple[list[SpecRecord], list[SkippedSpec]]:
    """Load every specification record under ``root``.

    Args:
        root: Checkout of the specification repository.

    Returns:
        Tuple of (records in discovery order, skipped files).
    """
    records: list[SpecRecord] = []
    skipped: list[SkippedSpec] = []
    seen: dict[str, Path] = {}

    for path in find_definition_files(root):
        try:
            record = load_spec(extract_spec_info(path, root))
        except SpecPathError as exc:
            logger.warning("discovery.unexpected_path", **exc.to_dict())
            skipped.append(SkippedSpec(path=path, reason=exc.message, stage="discovery"))
            continue
        except SpecParseError as exc:
            logger.warning("discovery.parse_failed", **exc.to_dict())
            skipped.append(SkippedSpec(path=path, reason=exc.message, stage="parse"))
            continue

        if record.key in seen:
            reason = f"Duplicate {record.key}, already loaded from {seen[record.key]}"
            logger.warning("discovery.duplicate", path=str(path), key=record.key)
            skipped.append(SkippedSpec(path=path, reason=reason, stage="discovery"))
            continue

        seen[record.key] = path
        records.append(record)
        logger.debug("discovery.loaded", key=record.key, path=str(path))

    logger.info("discovery.complete", root=str(root), loaded=len(records), skipped=len(skipped))
    return records, skipped
