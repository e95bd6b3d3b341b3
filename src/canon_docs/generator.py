"""Generate the specification documentation site.

Stability: stable
Tier: none
Since: 0.1.0
Dependencies: git, pyyaml, jinja2, structlog
Doc-Types: API_REFERENCE, TECHNICAL_DESIGN
Tags: generator, orchestrator, docusaurus

The main orchestrator: fetches the specification repository, scans it,
groups and orders records, renders every page and navigation file, and
writes them out. Rendering is total: the output directory is rebuilt
from the in-memory records on every run.

Architecture::

    ┌──────────────┐   ┌──────────────┐   ┌──────────────┐
    │  git fetch   │ ─►│  scan_specs  │ ─►│ group/order  │
    └──────────────┘   └──────────────┘   └──────┬───────┘
                                                 ▼
                                   ┌───────────────────────────┐
                                   │      DocsGenerator        │
                                   │  render() → write()       │
                                   └──┬────────┬────────┬──────┘
                                      ▼        ▼        ▼
                              <name>/<v>.md  index.md  sidebars.json
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path

from canon_docs.discovery import scan_specs
from canon_docs.fetch import FetchOutcome, fetch_specs, require_local_copy
from canon_docs.hierarchy import TypeHierarchy
from canon_docs.logging import get_logger
from canon_docs.model import SkippedSpec, SpecGroup, SpecRecord
from canon_docs.renderers import (
    CategoryRenderer,
    IndexRenderer,
    SidebarRenderer,
    SpecPageRenderer,
)
from canon_docs.settings import CanonDocsSettings
from canon_docs.versions import group_records

logger = get_logger(__name__)

INDEX_FILE = "index.md"
CATEGORY_FILE = "_category_.json"


@dataclass
class GenerationResult:
    """Summary of one generation run.

    Attributes:
        fetch: What happened to the specification checkout.
        groups: Rendered specification families, in navigation order.
        skipped: Files left out, with reasons.
        written: Absolute paths of every file written.
    """

    fetch: FetchOutcome | None = None
    groups: list[SpecGroup] = field(default_factory=list)
    skipped: list[SkippedSpec] = field(default_factory=list)
    written: list[Path] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return sum(len(g.records) for g in self.groups)


class DocsGenerator:
    """Orchestrates fetch, scan, render and write.

    Manifesto:
        The site is a pure function of the specification repository.
        One command fetches, renders and writes everything; the output
        directory is disposable and never merged with a previous run.

    Features:
        - Clone or refresh the specification repository
        - Per-file failure isolation during scan and render
        - One page per version, plus index, categories and sidebar
        - Explicit paths from settings, testable with temp directories

    Guardrails:
        - Do NOT write anything before the source is available
          ✅ Fetch failures raise before the output directory is touched
        - Do NOT abort the run for one bad file
          ✅ Log it, record it in ``skipped``, continue

    Tags:
        - generator
        - orchestrator
        - documentation

    Examples:
        >>> settings = CanonDocsSettings(input_dir=Path("canon-specs"), skip_fetch=True)
        >>> result = DocsGenerator(settings).run()
        >>> result.fetch
        <FetchOutcome.LOCAL: 'local'>
    """

    def __init__(self, settings: CanonDocsSettings):
        self.settings = settings

        # Populated during run()
        self.records: list[SpecRecord] = []
        self.skipped: list[SkippedSpec] = []
        self.groups: list[SpecGroup] = []
        self.hierarchy: TypeHierarchy | None = None

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def fetch(self) -> FetchOutcome:
        """Make the specification checkout available.

        Raises:
            SourceFetchError: If there is no usable local copy.
        """
        settings = self.settings
        if settings.skip_fetch:
            return require_local_copy(settings.repo_url, settings.input_dir)
        return fetch_specs(settings.repo_url, settings.input_dir, branch=settings.branch)

    def scan(self) -> list[SpecGroup]:
        """Load records, build the type hierarchy and group records."""
        self.records, self.skipped = scan_specs(self.settings.input_dir)
        self.hierarchy = TypeHierarchy(self.records, meta_type=self.settings.meta_type)
        self.groups = group_records(self.records)
        return self.groups

    def render(self) -> dict[Path, str]:
        """Render every output file.

        Returns:
            Mapping of path (relative to ``output_dir``, or absolute for
            the sidebar) to file content.
        """
        if self.hierarchy is None:
            self.scan()

        # Surviving pages must not link to a failed record
        while True:
            outputs, failed = self._render_pages()
            if not failed:
                break
            self.records = [r for r in self.records if r.key not in failed]
            self.hierarchy = TypeHierarchy(self.records, meta_type=self.settings.meta_type)
            self.groups = group_records(self.records)

        outputs[Path(INDEX_FILE)] = IndexRenderer(self.groups, self.settings).render()
        for position, group in enumerate(self.groups, start=2):
            outputs[Path(group.name) / CATEGORY_FILE] = CategoryRenderer(
                group, position, self.settings,
            ).render()
        # The sidebar lives outside output_dir
        outputs[self.settings.sidebar_file.absolute()] = SidebarRenderer(self.groups, self.settings).render()
        return outputs

    def _render_pages(self) -> tuple[dict[Path, str], set[str]]:
        pages: dict[Path, str] = {}
        failed: set[str] = set()
        for group in self.groups:
            for record in group.records:
                page = self._render_page(record, group)
                if page is None:
                    failed.add(record.key)
                else:
                    pages[Path(record.name) / f"{record.version}.md"] = page
        return pages, failed

    def _render_page(self, record: SpecRecord, group: SpecGroup) -> str | None:
        try:
            return SpecPageRenderer(record, group, self.hierarchy, self.settings).render()
        except Exception as exc:
            path = record.source_path or Path(record.doc_id)
            logger.exception("render.failed", path=str(path), key=record.key)
            self.skipped.append(SkippedSpec(path=path, reason=str(exc), stage="render"))
            return None

    def write(self, outputs: dict[Path, str]) -> list[Path]:
        """Write rendered files, replacing the output directory if configured."""
        output_dir = self.settings.output_dir
        if self.settings.clean_output and output_dir.exists():
            logger.info("write.clean", output_dir=str(output_dir))
            shutil.rmtree(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        written: list[Path] = []
        for rel_path, content in outputs.items():
            path = rel_path if rel_path.is_absolute() else output_dir / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
            written.append(path)
            logger.debug("write.file", path=str(path), bytes=len(content.encode("utf-8")))
        return written

    # ------------------------------------------------------------------
    # Full run
    # ------------------------------------------------------------------

    def run(self) -> GenerationResult:
        """Fetch, scan, render and write.

        Raises:
            SourceFetchError: If the specification source is unavailable.
        """
        outcome = self.fetch()
        logger.info("generate.source_ready", outcome=outcome.value, input_dir=str(self.settings.input_dir))

        self.scan()
        outputs = self.render()
        written = self.write(outputs)

        if self.skipped:
            logger.warning("generate.skipped", count=len(self.skipped))
        logger.info(
            "generate.complete",
            groups=len(self.groups),
            files=len(written),
            output_dir=str(self.settings.output_dir),
        )
        return GenerationResult(
            fetch=outcome,
            groups=list(self.groups),
            skipped=list(self.skipped),
            written=written,
        )
