"""
Navigation renderers.

Generates the sidebar structure and the per-family ``_category_.json``
files consumed by the site generator. Both are JSON, rebuilt in full
on every run.
"""

from __future__ import annotations

import json
from typing import Any

from canon_docs.model import SpecGroup
from canon_docs.renderers.index import INDEX_DOC_ID
from canon_docs.settings import CanonDocsSettings

SIDEBAR_NAME = "specSidebar"

OVERVIEW_ENTRY = {"type": "doc", "id": INDEX_DOC_ID, "label": "Overview"}


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


class SidebarRenderer:
    """Render the sidebar: Overview first, then each family's latest version.

    Examples:
        >>> SidebarRenderer(groups, settings).build()["specSidebar"][0]
        {'type': 'doc', 'id': 'index', 'label': 'Overview'}
    """

    def __init__(self, groups: list[SpecGroup], settings: CanonDocsSettings):
        self.settings = settings
        self.groups = groups

    def build(self) -> dict[str, list[dict[str, str]]]:
        items = [dict(OVERVIEW_ENTRY)]
        for group in self.groups:
            items.append({
                "type": "doc",
                "id": group.latest.doc_id,
                "label": group.title,
            })
        return {SIDEBAR_NAME: items}

    def render(self) -> str:
        return _to_json(self.build())


class CategoryRenderer:
    """Render ``<name>/_category_.json`` for one specification family."""

    def __init__(self, group: SpecGroup, position: int, settings: CanonDocsSettings):
        self.settings = settings
        self.group = group
        self.position = position

    def build(self) -> dict[str, Any]:
        group = self.group
        return {
            "label": group.title,
            "position": self.position,
            "link": {
                "type": "generated-index",
                "title": group.title,
                "description": group.latest.description or f"Specifications for {group.name}",
                "keywords": [group.name, "canon", "protocol", "specification"],
            },
        }

    def render(self) -> str:
        return _to_json(self.build())
