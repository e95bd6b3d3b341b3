"""Settings for the Canon documentation generator.

Every path the pipeline touches comes from here and is passed down
explicitly, so each stage can run against temporary directories.

Order of precedence (highest → lowest):
    1. Keyword arguments (tests, library callers)
    2. Environment variables (``CANON_DOCS_OUTPUT_DIR``, etc.)
    3. ``.env`` file
    4. Defaults below

Examples:
    >>> from canon_docs.settings import CanonDocsSettings
    >>> settings = CanonDocsSettings(input_dir="specs", skip_fetch=True)
    >>> settings.input_dir
    PosixPath('specs')
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_META_TYPE = "canon-protocol.org/type"


class CanonDocsSettings(BaseSettings):
    """Configuration for one generation run.

    Fields
    ──────
    input_dir        : Local checkout of the specification repository
    output_dir       : Generated markdown root (disposable, wiped per run)
    sidebar_file     : Generated sidebar JSON consumed by ``sidebars.ts``
    repo_url         : Upstream specification repository
    branch           : Branch to clone / pull
    skip_fetch       : Use ``input_dir`` as-is, never call git
    clean_output     : Remove ``output_dir`` before writing
    meta_type        : ``publisher/name`` of the foundational meta-type
    route_base_path  : URL prefix of the docs plugin (``routeBasePath``)
    source_web_url   : Browsable URL prefix for source file links
    source_raw_url   : Raw-content URL prefix for source file links
    log_level        : structlog level
    log_format       : ``console`` or ``json``
    """

    model_config = SettingsConfigDict(
        env_prefix="CANON_DOCS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Paths ────────────────────────────────────────────────────
    input_dir: Path = Field(default=Path("canon-specs"), description="Specification checkout")
    output_dir: Path = Field(default=Path("docs"), description="Generated docs root")
    sidebar_file: Path = Field(default=Path("sidebars.json"), description="Generated sidebar")

    # ── Source ───────────────────────────────────────────────────
    repo_url: str = "https://github.com/canon-protocol/canon.git"
    branch: str = "main"
    skip_fetch: bool = False
    clean_output: bool = True

    # ── Rendering ────────────────────────────────────────────────
    meta_type: str = DEFAULT_META_TYPE
    route_base_path: str = "/"
    source_web_url: str = "https://github.com/canon-protocol/canon/tree/main"
    source_raw_url: str = "https://raw.githubusercontent.com/canon-protocol/canon/main"

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"

    def resolve_paths(self, base: Path | None = None) -> CanonDocsSettings:
        """Return a copy with relative paths anchored at ``base`` (default: cwd)."""
        root = base or Path.cwd()
        return self.model_copy(update={
            "input_dir": _anchor(self.input_dir, root),
            "output_dir": _anchor(self.output_dir, root),
            "sidebar_file": _anchor(self.sidebar_file, root),
        })


def _anchor(path: Path, root: Path) -> Path:
    return path if path.is_absolute() else root / path
