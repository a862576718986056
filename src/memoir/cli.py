"""Typer-based CLI for Memoir."""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .span_index import (
    RebuildCancelled,
    SpanIndex,
    extract_from_document,
    rebuild_index,
    write_index_json,
)
from .span_index.config import load_span_index_config
from .span_index.models import ExtractOptions

app = typer.Typer(
    name="memoir",
    help="Memoir - index of tagged ==emphasis== and {{custom}} spans in a Markdown vault",
    add_completion=False,
)

console = Console()


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def rebuild(
    vault_path: str = typer.Option(
        None,
        "--vault",
        "-v",
        help="Path to vault directory (default: .memoir/config.toml or MEMOIR_VAULT env)",
    ),
    out: str = typer.Option(
        None,
        "--out",
        "-o",
        help="Export path, relative to the vault unless absolute (default: meta/index.json)",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        "-w",
        help="Number of extraction worker threads",
    ),
    no_inner: bool = typer.Option(
        False,
        "--no-inner",
        help="Disable inner tagging of ==emphasis== spans",
    ),
    no_outer: bool = typer.Option(
        False,
        "--no-outer",
        help="Disable outer tagging after ==emphasis== spans",
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
):
    """Rebuild the span index for the whole vault and export it as JSON.

    Documents are scanned in path order, so rebuilding an unchanged vault
    always writes the same file.
    """
    _configure_logging(debug)

    try:
        cfg = load_span_index_config(
            cli_vault=vault_path,
            cli_export_path=out,
            cli_workers=workers,
            enable_inner=False if no_inner else None,
            enable_outer=False if no_outer else None,
        )
        index = SpanIndex()
        summary = rebuild_index(cfg, index)
        written = write_index_json(index, cfg.export_path)
    except (FileNotFoundError, ValueError, RebuildCancelled) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]Rebuilt span index[/green] for {cfg.vault_root}")
    console.print(f"  Documents scanned: {summary.scanned}")
    console.print(f"  Documents indexed: {summary.indexed}")
    if summary.skipped:
        console.print(f"  [yellow]Documents skipped: {summary.skipped}[/yellow]")
    console.print(f"  Tagged spans:      {summary.records}")
    console.print(f"  Export:            {written}")


@app.command()
def show(
    vault_path: str = typer.Option(
        None,
        "--vault",
        "-v",
        help="Path to vault directory (default: .memoir/config.toml or MEMOIR_VAULT env)",
    ),
    file: str = typer.Option(None, "--file", "-f", help="Only show spans from this document"),
    tag: str = typer.Option(None, "--tag", "-t", help="Only show spans carrying this tag"),
    limit: int = typer.Option(50, "--limit", "-n", help="Maximum number of rows"),
):
    """Scan the vault and display tagged spans as a table."""
    try:
        cfg = load_span_index_config(cli_vault=vault_path)
        index = SpanIndex()
        rebuild_index(cfg, index)
    except (FileNotFoundError, ValueError, RebuildCancelled) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    records = index.select(file=file or None, tag=tag or None)

    if not records:
        console.print("[dim]No tagged spans found[/dim]")
        return

    table = Table(title=f"{len(records)} Tagged Span(s)")
    table.add_column("File", style="cyan")
    table.add_column("Line", justify="right")
    table.add_column("Kind", style="magenta")
    table.add_column("Text")
    table.add_column("Tags", style="yellow")
    table.add_column("Attrs", style="dim")

    for record in records[:limit]:
        text = record.text if len(record.text) <= 40 else record.text[:37] + "..."
        attrs = ", ".join(f"{k}={v}" for k, v in record.attrs.items())
        table.add_row(
            record.file,
            str(record.line + 1),
            record.kind.value,
            text,
            " ".join(f"#{t}" for t in record.tags),
            attrs or "-",
        )

    console.print(table)
    if len(records) > limit:
        console.print(f"[dim]... {len(records) - limit} more (use --limit)[/dim]")


@app.command()
def scan(
    path: Path = typer.Argument(..., help="Markdown file to scan"),
    identifier: str = typer.Option(None, "--identifier", "-i", help="Document identifier (default: the path as given)"),
    inner: bool = typer.Option(True, "--inner/--no-inner", help="Enable inner tagging of ==emphasis== spans"),
    outer: bool = typer.Option(True, "--outer/--no-outer", help="Enable outer tagging after ==emphasis== spans"),
):
    """Print the tagged spans of a single document as JSON."""
    try:
        raw_text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error: cannot read {path}: {e}[/red]")
        raise typer.Exit(code=1)

    records = extract_from_document(
        identifier or path.as_posix(),
        raw_text,
        options=ExtractOptions(enable_inner=inner, enable_outer=outer),
    )
    typer.echo(json.dumps([r.to_json() for r in records], ensure_ascii=False, indent=2))


@app.command()
def version():
    """Show Memoir version."""
    from . import __version__
    console.print(f"Memoir v{__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
