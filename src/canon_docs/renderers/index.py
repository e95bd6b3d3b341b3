"""
Index page renderer.

Generates the specifications overview: one entry per specification
family with its latest version, latest stable version and links to
every version.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from canon_docs.model import SpecGroup
from canon_docs.renderers.base import BaseRenderer
from canon_docs.settings import CanonDocsSettings

INDEX_DOC_ID = "index"


class IndexRenderer(BaseRenderer):
    """Render the overview page listing every specification family.

    Features:
        - Families in navigation order
        - Latest and latest-stable versions
        - Links to all versions, newest first
        - Static introduction to the protocol

    Tags:
        - renderer
        - index
    """

    template_name = "index.md.j2"

    def __init__(
        self,
        groups: list[SpecGroup],
        settings: CanonDocsSettings,
        template_dir: Path | None = None,
    ):
        super().__init__(settings, template_dir=template_dir)
        self.groups = groups

    def render(self) -> str:
        """Generate the index page content."""
        front_matter = self.front_matter({
            "id": INDEX_DOC_ID,
            "title": "Canon Protocol Specifications",
            "sidebar_label": "Overview",
            "sidebar_position": 1,
        })
        return self._render_template(
            front_matter=front_matter,
            entries=[self._entry(group) for group in self.groups],
        )

    def _entry(self, group: SpecGroup) -> dict[str, Any]:
        latest = group.latest
        stable = group.latest_stable
        return {
            "name": group.name,
            "title": group.title,
            "description": latest.description,
            "latest": latest.version,
            "latest_link": self.link(group.name, latest.version),
            "latest_stable": stable.version if stable and stable.version != latest.version else None,
            "latest_stable_link": self.link(group.name, stable.version) if stable else None,
            "versions": [
                {"version": record.version, "link": self.link(group.name, record.version)}
                for record in group.records
            ],
        }
