"""Markdown formatting for schemas, type references and field values.

Pure functions shared by the page renderers. Each returns a markdown
fragment and an empty string when there is nothing to show.
"""

from __future__ import annotations

import json
from typing import Any

from canon_docs.examples import dump_yaml
from canon_docs.model import TypeRef, parse_type_ref
from canon_docs.schema import is_object_schema, required_properties, schema_properties

BADGE_URL = "https://img.shields.io/badge"


def cell(value: Any) -> str:
    """Make a value safe inside a markdown table cell."""
    text = "" if value is None else str(value)
    return text.replace("|", "\\|").replace("\n", " ").strip()


def humanize(name: str) -> str:
    """``page_config`` → ``Page Config``."""
    return " ".join(word[:1].upper() + word[1:] for word in name.replace("-", "_").split("_") if word)


def doc_link(base_path: str, name: str, version: str) -> str:
    """Site route of a rendered specification page."""
    return f"{base_path.rstrip('/')}/{name}/{version}"


# ---------------------------------------------------------------------------
# Type references
# ---------------------------------------------------------------------------


def format_type_reference(
    ref: TypeRef | str | None,
    *,
    meta_type: str,
    base_path: str = "/",
    as_link: bool = False,
) -> str:
    """Render a type reference, marking the meta-type.

    Examples:
        >>> format_type_reference("canon-protocol.org/type@0.2.0", meta_type="canon-protocol.org/type")
        '`canon-protocol.org/type@0.2.0` (meta-type)'
    """
    if ref is None:
        return "N/A"
    parsed = ref if isinstance(ref, TypeRef) else parse_type_ref(ref)
    if parsed is None:
        return f"`{ref}`"

    is_meta = parsed.base == meta_type
    if as_link:
        label = f"{parsed.uri} (meta-type)" if is_meta else parsed.uri
        return f"[`{label}`]({doc_link(base_path, parsed.name, parsed.version)})"
    if is_meta:
        return f"`{parsed.uri}` (meta-type)"
    return f"`{parsed.uri}`"


def format_includes(
    includes: tuple[TypeRef, ...] | list[TypeRef],
    *,
    meta_type: str,
    base_path: str = "/",
    as_link: bool = False,
) -> str:
    return ", ".join(
        format_type_reference(ref, meta_type=meta_type, base_path=base_path, as_link=as_link)
        for ref in includes
    )


# ---------------------------------------------------------------------------
# Schema tables
# ---------------------------------------------------------------------------


def format_type(node: dict[str, Any]) -> str:
    """Compact type label for a schema node.

    Examples:
        >>> format_type({"type": "array", "items": {"type": "string", "format": "uri"}})
        'array<string (uri)>'
    """
    node_type = node.get("type")
    if node_type:
        if isinstance(node_type, list):
            label = " \\| ".join(str(t) for t in node_type)
        else:
            label = str(node_type)

        if node_type == "array" and isinstance(node.get("items"), dict):
            label = f"array<{format_type(node['items'])}>"
        if isinstance(node.get("enum"), list):
            label += " (" + " \\| ".join(f"`{value}`" for value in node["enum"]) + ")"
        if node.get("format"):
            label += f" ({node['format']})"
        if node.get("pattern"):
            label += f" (pattern: `{node['pattern']}`)"
        return label

    if isinstance(node.get("$ref"), str):
        ref_name = node["$ref"].rsplit("/", 1)[-1]
        return f"[{ref_name}](#{ref_name.lower()})"

    for key in ("oneOf", "anyOf"):
        if isinstance(node.get(key), list):
            return " \\| ".join(format_type(alt) for alt in node[key] if isinstance(alt, dict))

    return "any"


def properties_table(properties: dict[str, dict[str, Any]], required: set[str]) -> str:
    if not properties:
        return ""
    lines = [
        "| Property | Type | Required | Description |",
        "|----------|------|----------|-------------|",
    ]
    for name, prop in properties.items():
        mark = "✅" if name in required else "❌"
        lines.append(
            f"| `{name}` | {format_type(prop)} | {mark} | {cell(prop.get('description', ''))} |"
        )
    return "\n".join(lines) + "\n"


def _constraint_line(label: str, node: dict[str, Any], keys: list[tuple[str, str]]) -> str:
    parts = [f"{text}: {node[key]}" for key, text in keys if key in node]
    return f"**{label}:** {', '.join(parts)}\n\n" if parts else ""


def schema_description(node: dict[str, Any]) -> str:
    """Description, type, default, examples and constraints of a node."""
    out = ""
    if node.get("description"):
        out += f"{node['description']}\n\n"
    if node.get("type") and node.get("type") != "object":
        out += f"**Type:** {format_type(node)}\n\n"
    if "default" in node:
        out += f"**Default:** `{json.dumps(node['default'])}`\n\n"

    examples = node.get("examples")
    if isinstance(examples, list) and examples:
        out += "**Examples:**\n\n"
        for example in examples:
            body = dump_yaml(example) if isinstance(example, (dict, list)) else f"{example}\n"
            out += f"```yaml\n{body}```\n\n"

    out += _constraint_line("Constraints", node, [("minimum", "min"), ("maximum", "max")])
    out += _constraint_line("Length", node, [("minLength", "min length"), ("maxLength", "max length")])
    out += _constraint_line("Items", node, [("minItems", "min items"), ("maxItems", "max items")])
    return out


def schema_section(schema: dict[str, Any]) -> str:
    """``## Schema`` with a properties table and any ``definitions``."""
    if not schema:
        return ""

    out = "## Schema\n\n"
    # A string ``type`` means a single JSON-Schema node, not a field map
    if is_object_schema(schema) or not isinstance(schema.get("type"), str):
        out += properties_table(schema_properties(schema), required_properties(schema))
    else:
        out += schema_description(schema)

    definitions = schema.get("definitions") if is_object_schema(schema) else None
    if isinstance(definitions, dict) and definitions:
        out += "\n### Definitions\n\n"
        for name, definition in definitions.items():
            if not isinstance(definition, dict):
                continue
            out += f"#### {name}\n\n"
            out += schema_description(definition)
            if isinstance(definition.get("properties"), dict):
                out += properties_table(definition["properties"], required_properties(definition))
            out += "\n"
    return out


# ---------------------------------------------------------------------------
# Field values
# ---------------------------------------------------------------------------


def _is_url(value: str) -> bool:
    return value.startswith("http://") or value.startswith("https://")


def format_string_value(value: str) -> str:
    if _is_url(value):
        return f"[{value}]({value})\n\n"
    if value.endswith((".md", ".yml", ".yaml")) or "{" in value or "}" in value:
        return f"`{value}`\n\n"
    if "\n" in value:
        return f"```\n{value.rstrip()}\n```\n\n"
    return f"{value}\n\n"


def format_array_value(value: list[Any], node: dict[str, Any]) -> str:
    if not value:
        return "*Empty list*\n\n"

    items = node.get("items") if isinstance(node.get("items"), dict) else {}
    item_props = items.get("properties") if items.get("type") == "object" else None
    if isinstance(item_props, dict) and item_props:
        columns = list(item_props)
        lines = [
            "| " + " | ".join(cell(item_props[c].get("title") or c) for c in columns) + " |",
            "|" + "|".join("---" for _ in columns) + "|",
        ]
        for item in value:
            row = []
            for column in columns:
                entry = item.get(column) if isinstance(item, dict) else None
                if isinstance(entry, str) and _is_url(entry):
                    row.append(f"[{entry.split('://', 1)[1]}]({entry})")
                elif entry in (None, ""):
                    row.append("-")
                else:
                    row.append(cell(entry))
            lines.append("| " + " | ".join(row) + " |")
        return "\n".join(lines) + "\n\n"

    lines = []
    for item in value:
        if isinstance(item, str):
            lines.append(f"- `{item}`" if parse_type_ref(item) else f"- {item}")
        else:
            lines.append(f"- {json.dumps(item, default=str)}")
    return "\n".join(lines) + "\n\n"


def format_object_value(value: dict[str, Any], node: dict[str, Any]) -> str:
    properties = node.get("properties") if isinstance(node.get("properties"), dict) else {}
    out = ""
    for key, entry in value.items():
        prop = properties.get(key) if isinstance(properties.get(key), dict) else {}
        out += f"**{prop.get('title') or key}**: "
        if isinstance(entry, str):
            if _is_url(entry):
                out += f"[{entry}]({entry})"
            elif "{" in entry or "}" in entry:
                out += f"`{entry}`"
            else:
                out += entry
        elif isinstance(entry, (dict, list)):
            out += f"\n```yaml\n{dump_yaml(entry)}```"
        else:
            out += str(entry)
        out += "\n\n"
    return out


def format_value(value: Any, node: dict[str, Any]) -> str:
    """Format one instance value according to its schema node."""
    field_type = node.get("type") or "any"
    if value is None:
        return "*Not specified*\n\n"
    if isinstance(value, list) and field_type in ("array", "any"):
        return format_array_value(value, node)
    if isinstance(value, dict) and field_type in ("object", "any"):
        return format_object_value(value, node)
    if isinstance(value, str) and field_type in ("string", "any"):
        return format_string_value(value)
    if isinstance(value, (bool, int, float)):
        return f"`{json.dumps(value)}`\n\n"
    return f"```yaml\n{dump_yaml(value)}```\n\n"


def field_display(
    name: str,
    value: Any,
    node: dict[str, Any],
    *,
    required: bool | None = None,
    level: int = 4,
) -> str:
    """Heading, badges, formatted value and description of one field.

    ``required`` comes from the parent schema; when omitted the node's own
    ``required: true`` flag is used.
    """
    title = node.get("title") or humanize(name)
    field_type = node.get("type") if isinstance(node.get("type"), str) else "any"
    if required is None:
        required = node.get("required") is True

    out = f"{'#' * level} {title}\n\n"
    if required:
        out += f"![Required]({BADGE_URL}/required-red) "
    else:
        out += f"![Optional]({BADGE_URL}/optional-blue) "
    out += f"![Type: {field_type}]({BADGE_URL}/type-{field_type}-purple)\n\n"
    out += format_value(value, node)
    if node.get("description"):
        out += f"> {node['description']}\n\n"
    out += "---\n\n"
    return out
