"""
Renderers for the generated documentation site.

Provides renderers that turn specification records and groups into
markdown pages and navigation files.
"""

from canon_docs.renderers.base import BaseRenderer
from canon_docs.renderers.index import IndexRenderer
from canon_docs.renderers.navigation import CategoryRenderer, SidebarRenderer
from canon_docs.renderers.spec_page import SpecPageRenderer

__all__ = [
    "BaseRenderer",
    "SpecPageRenderer",
    "IndexRenderer",
    "SidebarRenderer",
    "CategoryRenderer",
]
