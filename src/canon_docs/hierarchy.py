"""Type relationships between specification records.

Stability: stable
Tier: none
Since: 0.1.0
Dependencies: stdlib-only
Doc-Types: API_REFERENCE, TECHNICAL_DESIGN
Tags: hierarchy, types, composition, attribution

Every record declares the type it derives from and may include other
types. ``TypeHierarchy`` indexes all records of one run so rendering can
answer three questions:

- What does this record derive from, all the way up? (``chain``)
- Which records derive from this type? (``derived_types``)
- Which type contributed each of an instance's fields? (``attribute_fields``)

Architecture::

    records ──► TypeHierarchy
                  ├── records:  name@version → SpecRecord
                  ├── parents:  name@version → declared TypeRef
                  └── children: name@version → [SpecRecord]

The index is rebuilt from scratch on every run and discarded after
rendering.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from canon_docs.model import SpecRecord, TypeRef
from canon_docs.schema import required_properties, schema_properties

# Hard stop for derivation chains, independent of cycle detection
MAX_CHAIN_DEPTH = 5


@dataclass(frozen=True)
class TypeChain:
    """A record's "derives from" chain, nearest parent first.

    Attributes:
        refs: References walked, in order.
        circular: The last reference was already visited.
        truncated: The walk hit ``MAX_CHAIN_DEPTH``.
    """

    refs: tuple[TypeRef, ...] = ()
    circular: bool = False
    truncated: bool = False


@dataclass
class FieldAttribution:
    """Which type each instance field comes from.

    Attributes:
        base_type: The record's declared type.
        base: Fields defined by the declared type's schema.
        composed: Fields per included type, in include order.
        unattributed: Fields no known schema defines.
    """

    base_type: TypeRef | None = None
    base: list[str] = field(default_factory=list)
    composed: dict[TypeRef, list[str]] = field(default_factory=dict)
    unattributed: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.base or self.composed or self.unattributed)


def _order_by_schema(fields: list[str], properties: dict[str, Any]) -> list[str]:
    position = {name: i for i, name in enumerate(properties)}
    return sorted(fields, key=lambda f: (position.get(f, len(position)), f))


class TypeHierarchy:
    """Lookup tables over all records of one generation run.

    Examples:
        >>> hierarchy = TypeHierarchy(records, meta_type="canon-protocol.org/type")
        >>> hierarchy.chain(blog_post).refs
        (TypeRef(publisher='canon-protocol.org', name='type', version='0.2.0'),)
    """

    def __init__(self, records: Iterable[SpecRecord], meta_type: str):
        self.meta_type = meta_type
        self.records: dict[str, SpecRecord] = {}
        self.parents: dict[str, TypeRef] = {}
        self.children: dict[str, list[SpecRecord]] = {}

        for record in records:
            self.records[record.key] = record
            if record.declared_type is not None:
                self.parents[record.key] = record.declared_type
                self.children.setdefault(record.declared_type.key, []).append(record)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def is_meta(self, ref: TypeRef) -> bool:
        return ref.base == self.meta_type

    def parent_of(self, ref: TypeRef) -> TypeRef | None:
        return self.parents.get(ref.key)

    def record_for(self, ref: TypeRef) -> SpecRecord | None:
        return self.records.get(ref.key)

    def schema_for(self, ref: TypeRef | None) -> dict[str, Any]:
        """Schema of the referenced type, empty if unknown."""
        if ref is None:
            return {}
        record = self.record_for(ref)
        return record.schema_fields if record else {}

    def field_schema(self, ref: TypeRef | None, field_name: str) -> dict[str, Any]:
        return schema_properties(self.schema_for(ref)).get(field_name, {})

    def required_fields(self, ref: TypeRef | None) -> set[str]:
        """Required field names of the referenced type, in either schema shape."""
        return required_properties(self.schema_for(ref))

    def derived_types(self, record: SpecRecord) -> list[SpecRecord]:
        """Records declaring ``record`` as their type, sorted by name."""
        return sorted(self.children.get(record.key, []), key=lambda r: (r.name, r.version))

    # ------------------------------------------------------------------
    # Derivation chain
    # ------------------------------------------------------------------

    def chain(self, record: SpecRecord) -> TypeChain:
        """Walk declared types upward until the meta-type.

        Stops at the meta-type, at a reference with no known record, on a
        repeated reference (circular), or after ``MAX_CHAIN_DEPTH`` hops.
        """
        refs: list[TypeRef] = []
        visited = {record.key}
        current = record.declared_type

        while current is not None:
            if len(refs) >= MAX_CHAIN_DEPTH:
                return TypeChain(tuple(refs), truncated=True)
            refs.append(current)
            if self.is_meta(current):
                break
            if current.key in visited:
                return TypeChain(tuple(refs), circular=True)
            visited.add(current.key)
            current = self.parent_of(current)

        return TypeChain(tuple(refs))

    # ------------------------------------------------------------------
    # Field attribution
    # ------------------------------------------------------------------

    def attribute_fields(self, record: SpecRecord) -> FieldAttribution:
        """Split an instance record's fields by the type that defines them.

        The declared type's schema wins; otherwise the first included type
        whose schema defines the field. Fields matching no schema stay
        unattributed.
        """
        base_props = schema_properties(self.schema_for(record.declared_type))
        include_props = [(ref, schema_properties(self.schema_for(ref))) for ref in record.includes]

        result = FieldAttribution(base_type=record.declared_type)
        for name in record.content_fields:
            if name in base_props:
                result.base.append(name)
                continue
            for ref, props in include_props:
                if name in props:
                    result.composed.setdefault(ref, []).append(name)
                    break
            else:
                result.unattributed.append(name)

        result.base = _order_by_schema(result.base, base_props)
        result.composed = {
            ref: _order_by_schema(result.composed[ref], props)
            for ref, props in include_props
            if ref in result.composed
        }
        return result
