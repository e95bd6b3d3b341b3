"""
Shared pytest fixtures for canon-docs tests.

This module provides:
- A small specification checkout written into ``tmp_path``
- Settings pointing every path at temporary directories
- Record builders for renderer and hierarchy tests

Layout of ``spec_root``::

    canon-specs/
      canon-protocol.org/type/0.2.0/canon.yml      meta-type
      example.com/blog-post/1.0.0/canon.yml        type definition
      example.com/taggable/1.0.0/canon.yml         type definition
      example.com/my-post/1.0.0/canon.yml          instance (+ README.md)
      example.com/my-post/2.0.0-beta/canon.yml     instance, prerelease
      example.com/broken/1.0.0/canon.yml           invalid YAML
      short/canon.yml                              too shallow
"""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from canon_docs.model import SpecRecord, TypeRef
from canon_docs.settings import DEFAULT_META_TYPE, CanonDocsSettings

META_TYPE_REF = "canon-protocol.org/type@0.2.0"


def write_spec(root: Path, rel_dir: str, body: str, filename: str = "canon.yml") -> Path:
    """Write a dedented definition file at ``root/rel_dir/filename``."""
    directory = root / rel_dir
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


# =============================================================================
# Specification tree
# =============================================================================


@pytest.fixture
def spec_root(tmp_path: Path) -> Path:
    """A populated specification checkout."""
    root = tmp_path / "canon-specs"

    write_spec(root, "canon-protocol.org/type/0.2.0", """
        canon: "1.0"
        metadata:
          title: Type
          description: The meta-type all types derive from.
        schema:
          schema:
            type: object
            required: true
            description: Field definitions of the type.
    """)

    write_spec(root, "example.com/blog-post/1.0.0", f"""
        canon: "1.0"
        type: {META_TYPE_REF}
        metadata:
          title: Blog Post
          description: A single blog article.
          license: MIT
        schema:
          title:
            type: string
            required: true
            description: Headline of the post.
          published:
            type: string
            format: date
          rating:
            type: integer
            minimum: 1
            maximum: 5
    """)

    write_spec(root, "example.com/taggable/1.0.0", f"""
        canon: "1.0"
        type: {META_TYPE_REF}
        metadata:
          title: Taggable
        schema:
          tags:
            type: array
            items:
              type: string
    """)

    for version in ("1.0.0", "2.0.0-beta"):
        write_spec(root, f"example.com/my-post/{version}", """
            canon: "1.0"
            type: example.com/blog-post@1.0.0
            includes:
              - example.com/taggable@1.0.0
            page_order: 1
            metadata:
              title: My Post
              description: Hello from Canon.
            title: Hello
            tags:
              - intro
              - news
            mood: happy
        """)
    (root / "example.com/my-post/1.0.0/README.md").write_text("# My Post\n", encoding="utf-8")

    write_spec(root, "example.com/broken/1.0.0", """
        canon: [unclosed
    """)

    write_spec(root, "short", """
        canon: "1.0"
    """)

    return root


@pytest.fixture
def settings(tmp_path: Path, spec_root: Path) -> CanonDocsSettings:
    """Settings rooted in ``tmp_path`` that never call git."""
    return CanonDocsSettings(
        _env_file=None,
        input_dir=spec_root,
        output_dir=tmp_path / "docs",
        sidebar_file=tmp_path / "sidebars.json",
        skip_fetch=True,
        clean_output=True,
    )


@pytest.fixture
def render_settings() -> CanonDocsSettings:
    """Settings for renderers that never touch the file system."""
    return CanonDocsSettings(_env_file=None)


# =============================================================================
# Record builders
# =============================================================================


def make_record(
    name: str,
    version: str = "1.0.0",
    *,
    publisher: str = "example.com",
    declared: str | None = None,
    includes: tuple[str, ...] = (),
    **kwargs,
) -> SpecRecord:
    """Build a ``SpecRecord`` from short string references."""
    def ref(value: str) -> TypeRef:
        base, ver = value.split("@")
        pub, nm = base.split("/")
        return TypeRef(pub, nm, ver)

    return SpecRecord(
        publisher=publisher,
        name=name,
        version=version,
        canon=kwargs.pop("canon", "1.0"),
        declared_type=ref(declared) if declared else None,
        includes=tuple(ref(i) for i in includes),
        **kwargs,
    )


@pytest.fixture
def meta_type() -> str:
    return DEFAULT_META_TYPE
