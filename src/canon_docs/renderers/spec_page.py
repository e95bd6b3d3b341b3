"""
Specification page renderer.

Generates one markdown page per specification version: identity
header, version notice, type hierarchy, schema, attributed content,
example usage and the raw source files.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from canon_docs.examples import dump_yaml, example_document
from canon_docs.hierarchy import TypeHierarchy
from canon_docs.model import SpecGroup, SpecRecord
from canon_docs.renderers.base import BaseRenderer
from canon_docs.renderers.fields import (
    BADGE_URL,
    cell,
    field_display,
    format_includes,
    format_type_reference,
    humanize,
    schema_section,
)
from canon_docs.settings import CanonDocsSettings
from canon_docs.versions import is_stable

# Source files longer than this are shown as a preview
PREVIEW_THRESHOLD_LINES = 200
PREVIEW_LINES = 50

_LANGUAGES = {
    ".json": "json",
    ".md": "markdown",
    ".yml": "yaml",
    ".yaml": "yaml",
    ".js": "javascript",
    ".ts": "typescript",
}

# Metadata keys already shown in the header
_HEADER_METADATA = frozenset({"title", "description"})


class SpecPageRenderer(BaseRenderer):
    """Render the page for one specification version.

    Features:
        - Front matter with id, title, sidebar label and position
        - Version, latest and stability badges
        - Linked type and composition references
        - "Derives from" chain and known derived types
        - Schema table with definitions and constraints
        - Instance fields grouped by the type that defines them
        - Example ``canon.yml`` synthesized from the schema
        - Source files in tabs with GitHub and raw links

    Tags:
        - renderer
        - specification
        - markdown
    """

    template_name = "spec_page.md.j2"

    def __init__(
        self,
        record: SpecRecord,
        group: SpecGroup,
        hierarchy: TypeHierarchy,
        settings: CanonDocsSettings,
        template_dir: Path | None = None,
    ):
        super().__init__(settings, template_dir=template_dir)
        self.record = record
        self.group = group
        self.hierarchy = hierarchy

    @property
    def is_latest(self) -> bool:
        return self.group.latest.version == self.record.version

    def render(self) -> str:
        """Generate the page content.

        Returns:
            Markdown with front matter
        """
        sections = [
            self.render_header(),
            self.render_metadata(),
            self.render_version_notice(),
            self.render_meta_type_notice(),
            self.render_type_hierarchy(),
            schema_section(self.record.schema_fields),
            self.render_content(),
            self.render_example(),
            self.render_source_files(),
        ]
        return self._render_template(
            front_matter=self.front_matter(self._front_matter_data()),
            sections=[s.strip() for s in sections if s and s.strip()],
        )

    def _front_matter_data(self) -> dict[str, Any]:
        record = self.record
        return {
            "id": record.version,
            "title": f"{record.title} v{record.version}",
            "sidebar_label": record.title,
            "sidebar_position": 1 if self.is_latest else 2,
            "hide_table_of_contents": False,
            "custom_edit_url": None,
        }

    # ------------------------------------------------------------------
    # Header
    # ------------------------------------------------------------------

    def render_badges(self) -> str:
        version = self.record.version
        badge_version = version.replace("-", "--")
        badges = [f"![Version]({BADGE_URL}/version-{badge_version}-blue)"]
        if self.is_latest:
            badges.append(f"![Latest]({BADGE_URL}/latest-✓-green)")
        if is_stable(version):
            badges.append(f"![Stable]({BADGE_URL}/stability-stable-green)")
        else:
            badges.append(f"![Pre-release]({BADGE_URL}/stability-pre--release-orange)")
        return " ".join(badges)

    def render_header(self) -> str:
        record = self.record
        lines = [
            f"# {record.title}",
            "",
            self.render_badges(),
            "",
            f"**Publisher:** {record.publisher}  ",
            "**Type:** " + format_type_reference(
                record.declared_type,
                meta_type=self.meta_type,
                base_path=self.settings.route_base_path,
                as_link=True,
            ) + "  ",
        ]
        if record.includes:
            lines.append("**Composes:** " + format_includes(
                record.includes,
                meta_type=self.meta_type,
                base_path=self.settings.route_base_path,
                as_link=True,
            ) + "  ")
        if record.description:
            lines.extend(["", record.description])
        return "\n".join(lines)

    def render_metadata(self) -> str:
        extra = {k: v for k, v in self.record.metadata.items() if k not in _HEADER_METADATA}
        if not extra:
            return ""
        lines = ["## Metadata", "", "| Field | Value |", "|-------|-------|"]
        for key, value in extra.items():
            lines.append(f"| {cell(humanize(key))} | {_metadata_value(value)} |")
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Notices
    # ------------------------------------------------------------------

    def render_version_notice(self) -> str:
        record = self.record
        versions = self.group.versions
        if self.is_latest:
            others = [v for v in versions if v != record.version]
            lines = [":::tip Version Information", f"**Current:** v{record.version} (latest)"]
            if others:
                links = ", ".join(f"[v{v}]({self.link(record.name, v)})" for v in others)
                lines.extend(["", f"**Other versions:** {links}"])
            lines.append(":::")
            return "\n".join(lines)

        latest = versions[0]
        text = (
            "This is an older version. View the "
            f"[latest version ({latest})]({self.link(record.name, latest)})"
        )
        stable = self.group.latest_stable
        if stable is not None and stable.version not in (latest, record.version):
            text += (
                f" or the [latest stable version ({stable.version})]"
                f"({self.link(record.name, stable.version)})"
            )
        return f":::warning Older Version\n{text}.\n:::"

    def render_meta_type_notice(self) -> str:
        if self.record.ref.base != self.meta_type:
            return ""
        return (
            ":::info Meta-Type\n"
            "This is the foundational meta-type from which all other Canon Protocol types derive. "
            "It defines the structure and validation rules for creating new types.\n"
            ":::"
        )

    # ------------------------------------------------------------------
    # Type hierarchy
    # ------------------------------------------------------------------

    def _ref(self, ref) -> str:
        return format_type_reference(
            ref,
            meta_type=self.meta_type,
            base_path=self.settings.route_base_path,
            as_link=True,
        )

    def render_type_hierarchy(self) -> str:
        record = self.record
        lines: list[str] = []

        if record.ref.base != self.meta_type:
            chain = self.hierarchy.chain(record)
            if chain.refs:
                text = " → ".join(self._ref(ref) for ref in chain.refs)
                if chain.circular:
                    text += " ⚠️ *circular reference*"
                elif chain.truncated:
                    text += " → …"
                lines.append(f"**Derives from:** {text}")

        derived = self.hierarchy.derived_types(record)
        if derived:
            if lines:
                lines.append("")
            lines.append("**Known derived types:**")
            lines.append("")
            for child in derived:
                lines.append(f"- [{child.title} ({child.version})]({self.link(child.name, child.version)})")

        if not lines:
            return ""
        return "## Type Hierarchy\n\n" + "\n".join(lines)

    # ------------------------------------------------------------------
    # Instance content
    # ------------------------------------------------------------------

    def render_content(self) -> str:
        record = self.record
        if record.declared_type is None or record.is_type_definition(self.meta_type):
            return ""
        if not record.content_fields:
            return ""

        attribution = self.hierarchy.attribute_fields(record)
        out = "## Specification Content\n\n"
        out += ":::info\n"
        out += "This section displays the specification fields organized by their type definitions.\n"
        out += ":::\n\n"

        if attribution.base:
            out += "### Core Properties\n\n"
            out += f"*These properties are defined by the base type: `{record.declared_type.uri}`*\n\n"
            base_required = self.hierarchy.required_fields(record.declared_type)
            for name in attribution.base:
                node = self.hierarchy.field_schema(record.declared_type, name)
                out += field_display(
                    name, record.content_fields[name], node, required=name in base_required, level=4,
                )

        if attribution.composed:
            out += "### Composed Properties\n\n"
            out += "*These properties are added through type composition:*\n\n"
            for ref, names in attribution.composed.items():
                out += f"#### From {ref.name}\n\n"
                out += f"*Properties from `{ref.uri}`:*\n\n"
                ref_required = self.hierarchy.required_fields(ref)
                for name in names:
                    node = self.hierarchy.field_schema(ref, name)
                    out += field_display(
                        name, record.content_fields[name], node, required=name in ref_required, level=5,
                    )

        if attribution.unattributed:
            out += "### Additional Properties\n\n"
            for name in attribution.unattributed:
                out += field_display(name, record.content_fields[name], {}, level=4)

        return out

    # ------------------------------------------------------------------
    # Example usage
    # ------------------------------------------------------------------

    def render_example(self) -> str:
        record = self.record
        if not record.is_type_definition(self.meta_type) or record.ref.base == self.meta_type:
            return ""
        return (
            "## Example Usage\n\n"
            "This specification defines a type that can be used as a base for other specifications:\n\n"
            f"```yaml\n{dump_yaml(example_document(record))}```"
        )

    # ------------------------------------------------------------------
    # Source files
    # ------------------------------------------------------------------

    def render_source_files(self) -> str:
        files = {name: text for name, text in self.record.source_files.items() if text.strip()}
        if not files:
            return ""

        record = self.record
        definition = record.source_path.name if record.source_path else "canon.yml"
        names = sorted(files, key=lambda n: (n != definition, n))
        rel = f"{record.publisher}/{record.name}/{record.version}"
        web_base = f"{self.settings.source_web_url.rstrip('/')}/{rel}"
        raw_base = f"{self.settings.source_raw_url.rstrip('/')}/{rel}"

        out = "## Source Files\n\n"
        out += ":::info\n"
        out += "These are the source files from the Canon Protocol registry for this specification.\n"
        out += ":::\n\n"
        out += "import Tabs from '@theme/Tabs';\n"
        out += "import TabItem from '@theme/TabItem';\n\n"
        out += "<Tabs>\n"

        for name in names:
            content = files[name].strip()
            line_count = len(content.splitlines())
            language = _LANGUAGES.get(Path(name).suffix, "yaml")
            tab_value = re.sub(r"[^a-zA-Z0-9-]", "-", name)

            out += f'  <TabItem value="{tab_value}" label="{name}">\n\n'
            out += f"[View on GitHub]({web_base}/{name}) | [View Raw]({raw_base}/{name})\n\n"

            if line_count > PREVIEW_THRESHOLD_LINES:
                out += ":::note\n"
                out += f"This file contains {line_count} lines. Showing first {PREVIEW_LINES} lines as preview.\n"
                out += ":::\n\n"
                body = "\n".join(content.splitlines()[:PREVIEW_LINES]) + "\n..."
            else:
                body = content

            fence = "````" if "```" in body else "```"
            out += f"{fence}{language}\n{body}\n{fence}\n\n"
            out += "  </TabItem>\n"

        out += "</Tabs>"
        return out


def _metadata_value(value: Any) -> str:
    if isinstance(value, str):
        if value.startswith(("http://", "https://")):
            return f"[{cell(value)}]({value})"
        return cell(value)
    if isinstance(value, list):
        return cell(", ".join(_plain(v) for v in value))
    return cell(_plain(value))


def _plain(value: Any) -> str:
    if isinstance(value, dict):
        return ", ".join(f"{k}: {v}" for k, v in value.items())
    return str(value)
