"""
canon-docs - documentation site generator for Canon Protocol specifications.

Fetches the specification repository, parses every
``publisher/name/version/canon.yml`` and renders one markdown page per
version, an index page and the sidebar navigation.

Usage:
    from canon_docs import CanonDocsSettings, generate_docs

    result = generate_docs(CanonDocsSettings(skip_fetch=True))
"""

from __future__ import annotations

from canon_docs.errors import (
    CanonDocsError,
    SourceFetchError,
    SpecError,
    SpecParseError,
    SpecPathError,
)
from canon_docs.generator import DocsGenerator, GenerationResult
from canon_docs.model import SpecGroup, SpecRecord, TypeRef, parse_type_ref
from canon_docs.settings import CanonDocsSettings

__version__ = "0.1.0"


def generate_docs(settings: CanonDocsSettings | None = None) -> GenerationResult:
    """Run the whole pipeline with ``settings`` (default: from environment)."""
    return DocsGenerator(settings or CanonDocsSettings().resolve_paths()).run()


__all__ = [
    "CanonDocsError",
    "CanonDocsSettings",
    "DocsGenerator",
    "GenerationResult",
    "SourceFetchError",
    "SpecError",
    "SpecGroup",
    "SpecParseError",
    "SpecPathError",
    "SpecRecord",
    "TypeRef",
    "generate_docs",
    "parse_type_ref",
    "__version__",
]
