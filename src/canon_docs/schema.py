"""Helpers for reading Canon type schemas.

Canon type definitions write their schema as a field map::

    schema:
      title:
        type: string
        required: true

JSON-Schema style objects (``type: object`` with ``properties`` and a
``required`` list) are accepted too. Both shapes are normalised here.
"""

from __future__ import annotations

from typing import Any


def is_object_schema(node: dict[str, Any]) -> bool:
    """True for a JSON-Schema style object node with ``properties``."""
    return node.get("type") == "object" and isinstance(node.get("properties"), dict)


def schema_properties(node: dict[str, Any] | None) -> dict[str, dict[str, Any]]:
    """Property name → property schema, in definition order."""
    if not node:
        return {}
    source = node["properties"] if is_object_schema(node) else node
    return {name: prop for name, prop in source.items() if isinstance(prop, dict)}


def required_properties(node: dict[str, Any] | None) -> set[str]:
    """Names marked required, by ``required`` list or per-field flag."""
    if not node:
        return set()
    required: set[str] = set()
    listed = node.get("required") if is_object_schema(node) else None
    if isinstance(listed, list):
        required.update(str(name) for name in listed)
    for name, prop in schema_properties(node).items():
        if prop.get("required") is True:
            required.add(name)
    return required
