"""Synthesize example values from schema nodes.

Stability: stable
Tier: none
Since: 0.1.0
Dependencies: pyyaml
Doc-Types: API_REFERENCE
Tags: examples, schema, synthesis

Produces one deterministic example value per schema node. No
randomness and no clock: ``format: date-time`` yields a fixed literal.

Precedence for each node:
    1. ``example`` (or the first of ``examples``)
    2. ``default``
    3. first ``oneOf``/``anyOf`` alternative
    4. type-driven synthesis (a string ``enum`` yields its first value)

Recursion stops at ``MAX_DEPTH``; below ``REQUIRED_ONLY_DEPTH`` objects
only get their required properties, which keeps self-referential
schemas small.
"""

from __future__ import annotations

from typing import Any

import yaml

from canon_docs.model import RESERVED_FIELDS, SpecRecord
from canon_docs.schema import required_properties, schema_properties

MAX_DEPTH = 5
REQUIRED_ONLY_DEPTH = 2

PLACEHOLDER_STRING = "example"

FORMAT_EXAMPLES: dict[str, str] = {
    "uri": "https://example.com",
    "url": "https://example.com",
    "email": "user@example.com",
    "date": "2024-01-01",
    "date-time": "2024-01-01T00:00:00Z",
}


def _node_type(node: dict[str, Any]) -> str | None:
    node_type = node.get("type")
    if isinstance(node_type, list):
        # ["string", "null"] style unions: first non-null wins
        node_type = next((t for t in node_type if t != "null"), None)
    if node_type is None and isinstance(node.get("properties"), dict):
        return "object"
    return node_type if isinstance(node_type, str) else None


def synthesize(node: Any, depth: int = 0) -> Any:
    """Return one example value for a schema node.

    Args:
        node: Schema node (a mapping); anything else yields None.
        depth: Current recursion depth.

    Returns:
        The example value, or None when nothing can be produced.

    Examples:
        >>> synthesize({"type": "string", "format": "email"})
        'user@example.com'
        >>> synthesize({"type": "array", "items": {"type": "integer", "minimum": 3}})
        [3]
    """
    if not isinstance(node, dict) or depth > MAX_DEPTH:
        return None

    if "example" in node:
        return node["example"]
    examples = node.get("examples")
    if isinstance(examples, list) and examples:
        return examples[0]
    if "default" in node:
        return node["default"]

    for key in ("oneOf", "anyOf"):
        alternatives = node.get(key)
        if isinstance(alternatives, list) and alternatives:
            return synthesize(alternatives[0], depth)

    node_type = _node_type(node)
    if node_type == "string":
        enum = node.get("enum")
        if isinstance(enum, list) and enum:
            return enum[0]
        return FORMAT_EXAMPLES.get(str(node.get("format", "")), PLACEHOLDER_STRING)
    if node_type in ("number", "integer"):
        for bound in ("minimum", "maximum"):
            if bound in node:
                return node[bound]
        return 1
    if node_type == "boolean":
        return True
    if node_type == "array":
        item = synthesize(node.get("items"), depth + 1)
        return [item] if item is not None else []
    if node_type == "object":
        return _synthesize_object(
            node.get("properties") if isinstance(node.get("properties"), dict) else {},
            required_properties(node),
            depth,
        )
    return None


def _synthesize_object(
    properties: dict[str, Any],
    required: set[str],
    depth: int,
) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for name, prop in properties.items():
        if depth > REQUIRED_ONLY_DEPTH and name not in required:
            continue
        value = synthesize(prop, depth + 1)
        if value is not None:
            result[name] = value
    return result


def synthesize_fields(schema: dict[str, Any]) -> dict[str, Any]:
    """Example values for every top-level field of a type schema."""
    return _synthesize_object(
        schema_properties(schema),
        required_properties(schema),
        depth=0,
    )


def example_document(record: SpecRecord) -> dict[str, Any]:
    """A complete ``canon.yml`` document that uses ``record`` as its type."""
    document: dict[str, Any] = {
        "canon": record.canon or "1.0",
        "type": record.ref.uri,
        "metadata": {
            "id": "my-specification",
            "version": "1.0.0",
            "publisher": "example.com",
            "title": "My Custom Specification",
        },
    }
    for name, value in synthesize_fields(record.schema_fields).items():
        if name not in RESERVED_FIELDS:
            document[name] = value
    return document


def dump_yaml(value: Any) -> str:
    """Deterministic block-style YAML."""
    return yaml.safe_dump(value, sort_keys=False, allow_unicode=True, default_flow_style=False)
