"""
Base renderer for documentation generation.

Provides common functionality for all page renderers: template
loading, front matter and site links.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import yaml
from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from canon_docs.renderers.fields import doc_link
from canon_docs.settings import CanonDocsSettings

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"


class BaseRenderer(ABC):
    """Base class for page renderers.

    Manifesto:
        Renderers turn in-memory records into site files. Sections are
        assembled in Python, where the formatting rules live; templates
        only lay the sections out. Every section degrades to an empty
        string, so a sparse record still yields a valid page.

    Architecture:
        ```
        SpecRecord / SpecGroup
                │
                ▼
        Renderer._sections()  ──►  list[str]
                │
                ▼
        Jinja2 Template (front matter + sections)
                │
                ▼
        Markdown for the site generator
        ```

    Tags:
        - renderer
        - template
        - jinja2
    """

    # Template file name
    template_name: str = ""

    def __init__(
        self,
        settings: CanonDocsSettings,
        template_dir: Path | None = None,
    ):
        """Initialize the renderer.

        Args:
            settings: Run settings (meta-type, link prefixes).
            template_dir: Directory containing templates.
        """
        self.settings = settings
        self.template_dir = Path(template_dir) if template_dir else TEMPLATE_DIR

        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    @abstractmethod
    def render(self) -> str:
        """Render the document.

        Returns:
            Rendered document content as string
        """

    @property
    def meta_type(self) -> str:
        return self.settings.meta_type

    def _get_template(self, template_name: str | None = None):
        return self.env.get_template(template_name or self.template_name)

    def _render_template(self, **context: Any) -> str:
        return self._get_template().render(**context).rstrip() + "\n"

    def link(self, name: str, version: str) -> str:
        return doc_link(self.settings.route_base_path, name, version)

    @staticmethod
    def front_matter(data: dict[str, Any]) -> str:
        """YAML front matter body (without the ``---`` fences)."""
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False).rstrip()
