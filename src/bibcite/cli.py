"""Command-line interface for rendering citations and reference lists.

Usage:
    bibcite render article.md -b references.json -o article.html --with-bibliography
    bibcite entries -s sources.yaml
    bibcite bibliography -b references.json

Exactly one bibliography source is used: an export file (``-b``) or a
YAML source configuration (``-s``, see ``bibcite.sources``).
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from bibcite.bibliography import BibRecord, list_entries
from bibcite.citations import NARRATIVE, PARENTHETICAL, replace_citations
from bibcite.config import prepare_output_path
from bibcite.formatting import EntryFormatter, detect_enhancer
from bibcite.sources import (
    SourceLevel,
    load_source_levels,
    resolve_bibliography,
)

console = Console()
err_console = Console(stderr=True)


def configure_logging(verbose: bool) -> None:
    """Route log records through rich; DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def load_blob(args: argparse.Namespace) -> str:
    """Resolve the bibliography blob selected on the command line."""
    if args.sources is not None:
        levels = load_source_levels(args.sources)
    else:
        levels = [SourceLevel(name="cli", bibfile=args.bibliography)]
    return resolve_bibliography(levels)


def write_output(html: str, output: Path | None, input_path: Path | None = None) -> None:
    if output is None:
        print(html)
        return
    prepare_output_path(output, input_path)
    output.write_text(html, encoding="utf-8")
    err_console.print(f"[bold green]Wrote[/bold green] {escape(str(output))}")


def print_entries(records: dict[str, BibRecord]) -> None:
    """Print loaded records as a table."""
    table = Table(title=f"{len(records)} bibliography entries")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Type")
    table.add_column("Author")
    table.add_column("Year", justify="right")
    for key, record in records.items():
        table.add_row(key, record.item_type, record.author, record.year)
    console.print(table)


def cmd_render(args: argparse.Namespace) -> None:
    text = args.text.read_text(encoding="utf-8")
    records = list_entries(load_blob(args))
    if not records:
        err_console.print("[yellow]No bibliography entries found; text left unchanged[/yellow]")
    html = replace_citations(text, records, bare_style=args.bare_style)
    if args.with_bibliography and records:
        html += "\n" + EntryFormatter(detect_enhancer()).render_list(records) + "\n"
    write_output(html, args.output, args.text)


def cmd_entries(args: argparse.Namespace) -> None:
    print_entries(list_entries(load_blob(args)))


def cmd_bibliography(args: argparse.Namespace) -> None:
    records = list_entries(load_blob(args))
    write_output(EntryFormatter(detect_enhancer()).render_list(records), args.output)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bibcite",
        description="Render @key citations and reference lists from a JSON bibliography",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_source_args(sub: argparse.ArgumentParser) -> None:
        source = sub.add_mutually_exclusive_group(required=True)
        source.add_argument(
            "-b", "--bibliography", type=Path, help="Better BibTeX JSON export file"
        )
        source.add_argument(
            "-s", "--sources", type=Path, help="YAML file listing bibliography levels"
        )

    render = subparsers.add_parser("render", help="Replace citation markers in a text file")
    render.add_argument("text", type=Path, help="Text file containing @key markers")
    add_source_args(render)
    render.add_argument("-o", "--output", type=Path, help="Output file (default: stdout)")
    render.add_argument(
        "--with-bibliography",
        action="store_true",
        help="Append the reference list after the text",
    )
    render.add_argument(
        "--narrative",
        dest="bare_style",
        action="store_const",
        const=NARRATIVE,
        default=PARENTHETICAL,
        help="Render bare @key as 'Author (Year)' instead of '(Author, Year)'",
    )
    render.set_defaults(func=cmd_render)

    entries = subparsers.add_parser("entries", help="List loaded bibliography entries")
    add_source_args(entries)
    entries.set_defaults(func=cmd_entries)

    bibliography = subparsers.add_parser("bibliography", help="Render the reference list")
    add_source_args(bibliography)
    bibliography.add_argument("-o", "--output", type=Path, help="Output file (default: stdout)")
    bibliography.set_defaults(func=cmd_bibliography)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the command line interface and return the exit status."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    try:
        args.func(args)
    except (OSError, ValueError) as e:
        err_console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
