"""
Command-line entry point for canon-docs.

A single command with no options: fetch the specification repository,
regenerate the documentation tree and print a summary. Everything is
configured through ``CANON_DOCS_*`` environment variables or ``.env``.

Exit codes:
    0  Site generated (individual files may have been skipped)
    1  Specification source unavailable
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from canon_docs.errors import SourceFetchError
from canon_docs.generator import DocsGenerator, GenerationResult
from canon_docs.logging import configure_logging
from canon_docs.settings import CanonDocsSettings

app = typer.Typer(
    name="canon-docs",
    help="Generate Canon Protocol specification docs.",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()
err_console = Console(stderr=True)


# ── Output helpers ───────────────────────────────────────────────────────


def _summary_table(result: GenerationResult) -> Table:
    table = Table(title="Generated specifications", show_lines=False)
    table.add_column("Specification", style="cyan")
    table.add_column("Latest")
    table.add_column("Stable")
    table.add_column("Versions", justify="right")
    for group in result.groups:
        stable = group.latest_stable
        table.add_row(
            group.name,
            group.latest.version,
            stable.version if stable else "-",
            str(len(group.records)),
        )
    return table


def _print_skipped(result: GenerationResult) -> None:
    if not result.skipped:
        return
    table = Table(title="Skipped files", title_style="yellow")
    table.add_column("Stage")
    table.add_column("Path", overflow="fold")
    table.add_column("Reason", overflow="fold")
    for item in result.skipped:
        table.add_row(item.stage, str(item.path), item.reason)
    console.print(table)


# ── Command ──────────────────────────────────────────────────────────────


@app.command()
def generate() -> None:
    """Fetch the specification repository and regenerate the docs."""
    settings = CanonDocsSettings().resolve_paths()
    configure_logging(level=settings.log_level, format=settings.log_format)

    try:
        result = DocsGenerator(settings).run()
    except SourceFetchError as e:
        err_console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(code=1) from e

    console.print(_summary_table(result))
    _print_skipped(result)
    console.print(
        f"[green]✓[/green] {result.page_count} pages, {len(result.written)} files "
        f"written to {settings.output_dir} (source: {result.fetch.value})"
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
