"""Data models for the Canon documentation generator.

Stability: stable
Tier: none
Since: 0.1.0
Dependencies: pydantic
Doc-Types: API_REFERENCE
Tags: model, dataclass, canon, type-reference

Definition files are validated at the ingestion boundary by the
``CanonDocument`` pydantic model: known protocol keys are shape-checked,
everything else passes through untouched as extra data. Downstream code
only ever sees the frozen ``SpecRecord`` dataclass.

Type references (``publisher/name@version``) are split in exactly one
place, ``parse_type_ref``. Rendering, hierarchy resolution and field
attribution all work on the resulting ``TypeRef``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Keys defined by the protocol itself; never attributed to a type schema
RESERVED_FIELDS = frozenset({"canon", "type", "metadata", "includes", "schema"})

# Generator bookkeeping keys, also excluded from content display
BOOKKEEPING_FIELDS = frozenset({"page_order"})

DEFINITION_FILENAMES = ("canon.yml", "canon.yaml")

_TYPE_REF_RE = re.compile(r"^(?P<publisher>[^/@\s]+)/(?P<name>[^/@\s]+)@(?P<version>\S+)$")


# ---------------------------------------------------------------------------
# Type references
# ---------------------------------------------------------------------------


@dataclass(frozen=True, order=True)
class TypeRef:
    """A parsed ``publisher/name@version`` reference.

    Attributes:
        publisher: Owning namespace (e.g. ``canon-protocol.org``).
        name: Specification family (e.g. ``type``).
        version: Semantic version string.
    """

    publisher: str
    name: str
    version: str

    @property
    def key(self) -> str:
        """Hierarchy lookup key, ``name@version``."""
        return f"{self.name}@{self.version}"

    @property
    def base(self) -> str:
        """Reference without version, ``publisher/name``."""
        return f"{self.publisher}/{self.name}"

    @property
    def uri(self) -> str:
        return f"{self.publisher}/{self.name}@{self.version}"

    def __str__(self) -> str:
        return self.uri


def parse_type_ref(value: Any) -> TypeRef | None:
    """Parse a type reference string.

    Args:
        value: Raw value from a definition file.

    Returns:
        ``TypeRef``, or None when the value is not a well-formed reference.

    Examples:
        >>> parse_type_ref("canon-protocol.org/type@0.2.0")
        TypeRef(publisher='canon-protocol.org', name='type', version='0.2.0')
        >>> parse_type_ref("not a reference") is None
        True
    """
    if not isinstance(value, str):
        return None
    match = _TYPE_REF_RE.match(value.strip())
    if not match:
        return None
    return TypeRef(**match.groupdict())


# ---------------------------------------------------------------------------
# Ingestion boundary
# ---------------------------------------------------------------------------


class CanonDocument(BaseModel):
    """Validated top level of a ``canon.yml`` file.

    Unknown keys are kept in ``model_extra`` as the record's own data.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    canon: str
    type: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    includes: list[str] = Field(default_factory=list)
    schema_: dict[str, Any] | None = Field(default=None, alias="schema")
    page_order: int | None = None

    @field_validator("canon", mode="before")
    @classmethod
    def _stringify_canon(cls, value: Any) -> Any:
        # YAML reads `canon: 1.0` as a float
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("metadata", "includes", mode="before")
    @classmethod
    def _null_is_empty(cls, value: Any, info: Any) -> Any:
        if value is None:
            return {} if info.field_name == "metadata" else []
        return value

    @property
    def content_fields(self) -> dict[str, Any]:
        """Non-protocol top-level keys, minus ``_``-prefixed internals."""
        extra = self.model_extra or {}
        return {
            key: value
            for key, value in extra.items()
            if key not in RESERVED_FIELDS
            and key not in BOOKKEEPING_FIELDS
            and not key.startswith("_")
        }


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SpecInfo:
    """Positional identity of a definition file.

    Attributes:
        publisher: First of the three directory segments.
        name: Second segment, the specification family.
        version: Third segment.
        path: Path of the definition file itself.
    """

    publisher: str
    name: str
    version: str
    path: Path


@dataclass(frozen=True)
class SpecRecord:
    """One version of one named specification.

    Attributes:
        publisher: Owning namespace, from the directory layout.
        name: Specification family, from the directory layout.
        version: Version string, from the directory layout.
        canon: Protocol version tag of the definition file.
        declared_type: Base type this record derives from (None for the meta-type).
        includes: Composed types, in declaration order.
        metadata: Descriptive fields (title, description, license, ...).
        schema_fields: Schema this record defines, if it is a type.
        content_fields: The record's own data when it is an instance.
        page_order: Explicit navigation position.
        source_files: Sibling files of the definition file, name → text.
        source_path: Path of the definition file.
    """

    publisher: str
    name: str
    version: str
    canon: str = ""
    declared_type: TypeRef | None = None
    includes: tuple[TypeRef, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)
    schema_fields: dict[str, Any] = field(default_factory=dict)
    content_fields: dict[str, Any] = field(default_factory=dict)
    page_order: int | None = None
    source_files: dict[str, str] = field(default_factory=dict)
    source_path: Path | None = None

    @property
    def ref(self) -> TypeRef:
        return TypeRef(self.publisher, self.name, self.version)

    @property
    def key(self) -> str:
        return self.ref.key

    @property
    def doc_id(self) -> str:
        """Docusaurus document id, ``name/version``."""
        return f"{self.name}/{self.version}"

    @property
    def title(self) -> str:
        return str(self.metadata.get("title") or self.name)

    @property
    def description(self) -> str:
        return str(self.metadata.get("description") or "")

    def is_type_definition(self, meta_type: str) -> bool:
        """True when this record declares the meta-type as its type."""
        return self.declared_type is not None and self.declared_type.base == meta_type

    def is_meta_type(self, meta_type: str) -> bool:
        """True for the foundational meta-type record itself."""
        return self.declared_type is None or self.ref.base == meta_type


@dataclass
class SpecGroup:
    """All versions of one specification family, newest first.

    Attributes:
        name: Specification family name.
        records: Records sorted by version, descending.
    """

    name: str
    records: list[SpecRecord] = field(default_factory=list)

    @property
    def latest(self) -> SpecRecord:
        return self.records[0]

    @property
    def latest_stable(self) -> SpecRecord | None:
        """Newest record with a stable version, or None."""
        from canon_docs.versions import is_stable

        for record in self.records:
            if is_stable(record.version):
                return record
        return None

    @property
    def versions(self) -> list[str]:
        return [r.version for r in self.records]

    @property
    def page_order(self) -> int | None:
        return self.latest.page_order

    @property
    def title(self) -> str:
        return self.latest.title


@dataclass(frozen=True)
class SkippedSpec:
    """A definition file left out of the generated site.

    Attributes:
        path: Offending file.
        reason: Human-readable explanation.
        stage: Where it failed (``discovery``, ``parse``, ``render``).
    """

    path: Path
    reason: str
    stage: str = "parse"
