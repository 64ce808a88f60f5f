"""
pdf-docgen CLI
===============
Command-line interface for the pdf-docgen encoder.

Commands:
    render      Build a PDF from a JSON document definition
    check       Preflight a document definition without building it
    inspect     Read a PDF back and summarize what it contains
    version     Show version information

Usage::

    pdf-docgen render invoice.json -o invoice.pdf
    pdf-docgen check invoice.json --strict
    pdf-docgen inspect invoice.pdf --format json
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .. import __version__

console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_definition(path: Path):
    from ..models.document import DocumentDefinition

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        return DocumentDefinition.model_validate(raw)
    except json.JSONDecodeError as e:
        console.print(f"[red]{path.name} is not valid JSON: {e}[/red]")
    except ValidationError as e:
        console.print(f"[red]{path.name} is not a valid document definition:[/red]\n{e}")
    sys.exit(2)


@click.group()
@click.version_option(version=__version__, prog_name="pdf-docgen")
def cli() -> None:
    """
    pdf-docgen – single-page PDF encoder.

    Turns a JSON document definition (header/footer images, text, columns,
    tables) into a PDF 1.4 file without any PDF-writing library.
    """


# ---------------------------------------------------------------------------
# render
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("definition_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Output path (default: definition name with .pdf)")
@click.option("--no-images", is_flag=True, help="Build without header/footer images")
@click.option("--timeout", type=float, default=30.0, show_default=True,
              help="Seconds allowed per image conversion (0 = no limit)")
@click.option("--verbose", "-v", is_flag=True, help="Log build details")
def render(
    definition_path: Path,
    output: Path | None,
    no_images: bool,
    timeout: float,
    verbose: bool,
) -> None:
    """Build a PDF from a JSON document definition."""
    from ..images.pipeline import NullRasterHost
    from ..models.settings import RenderSettings
    from ..pdf.writer import DirectorySaver, PdfDocument

    _setup_logging(verbose)
    definition = _load_definition(definition_path)

    output_path = output or definition_path.with_suffix(".pdf")
    settings = RenderSettings(image_timeout=timeout if timeout > 0 else None)
    document = PdfDocument(
        definition,
        settings=settings,
        raster_host=NullRasterHost() if no_images else None,
    )

    saved = document.save(output_path.name, DirectorySaver(output_path.parent))
    if saved is None:
        console.print(f"[red]✗ Unable to generate {output_path}[/red] (see log above)")
        sys.exit(1)

    console.print(f"[green]✓[/green] Wrote [bold]{saved}[/bold] ({saved.stat().st_size} bytes)")


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("definition_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--strict", is_flag=True, help="Exit with code 1 if any warnings")
@click.option("--json-output", is_flag=True, help="Output results as JSON")
def check(definition_path: Path, strict: bool, json_output: bool) -> None:
    """Preflight a document definition."""
    from ..validator.preflight import DocumentValidator, Severity

    definition = _load_definition(definition_path)
    result = DocumentValidator().validate(definition)

    if json_output:
        output = {
            "file": str(definition_path),
            "passed": result.passed,
            "line_count": result.line_count,
            "line_budget": result.line_budget,
            "dropped_lines": result.dropped_lines,
            "issues": [
                {"rule": i.rule_id, "severity": i.severity.value, "msg": i.message, "field": i.field}
                for i in result.issues
            ],
        }
        click.echo(json.dumps(output, indent=2))
    else:
        console.print()
        status_str = "[bold green]PASS[/bold green]" if result.passed else "[bold red]FAIL[/bold red]"
        console.print(Panel(
            f"[bold]{definition_path.name}[/bold]\n"
            f"Status: {status_str}  |  "
            f"Lines: {result.line_count}/{result.line_budget}  |  "
            f"Dropped: {result.dropped_lines}",
            title="pdf-docgen Preflight",
            border_style="blue",
        ))
        if result.issues:
            t = Table(box=box.SIMPLE)
            t.add_column("Rule", style="dim")
            t.add_column("Severity")
            t.add_column("Message")
            for issue in result.issues:
                color = {Severity.ERROR: "red", Severity.WARNING: "yellow"}.get(issue.severity, "blue")
                t.add_row(issue.rule_id, f"[{color}]{issue.severity.value}[/{color}]", issue.message)
            console.print(t)
        console.print()

    exit_code = 0
    if not result.passed:
        exit_code = 1
    elif strict and result.warnings:
        exit_code = 1
    sys.exit(exit_code)


# ---------------------------------------------------------------------------
# inspect
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("pdf_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--format", "output_format", type=click.Choice(["rich", "json"]), default="rich")
def inspect(pdf_path: Path, output_format: str) -> None:
    """Summarize the pages, resources and text of a PDF."""
    import pikepdf

    from ..pdf.inspect import PdfInspector

    try:
        with PdfInspector(pdf_path) as inspector:
            summary = inspector.summary()
    except (pikepdf.PdfError, ValueError) as e:
        console.print(f"[red]Unable to read {pdf_path.name}: {e}[/red]")
        sys.exit(1)

    if output_format == "json":
        click.echo(json.dumps({"file": str(pdf_path), **summary}, indent=2))
        return

    console.print()
    xref_str = "[green]✓ consistent[/green]" if summary["xref_ok"] else "[red]✗ offsets mismatch[/red]"
    console.print(Panel(
        f"[bold]{pdf_path.name}[/bold]  PDF {summary['version']}  |  "
        f"Pages: [cyan]{summary['page_count']}[/cyan]  |  "
        f"Size: {summary['size']} bytes  |  xref: {xref_str}",
        title="PDF Inspection",
        border_style="cyan",
    ))

    t = Table(title="Resources", box=box.ROUNDED)
    t.add_column("Name")
    t.add_column("Kind")
    t.add_column("Details")
    for name, base_font in summary["fonts"].items():
        t.add_row(name, "Font", base_font)
    for name, image in summary["images"].items():
        t.add_row(
            name,
            "Image",
            f"{image['width']}×{image['height']} {image['filter'] or 'raw'}, {image['data_length']} bytes",
        )
    console.print(t)

    if summary["text_lines"]:
        console.print(Panel(
            "\n".join(summary["text_lines"]),
            title=f"Text ({len(summary['text_lines'])} lines)",
            border_style="dim",
        ))
    console.print()


# ---------------------------------------------------------------------------
# version info
# ---------------------------------------------------------------------------


@cli.command("version")
def show_version() -> None:
    """Show detailed version information."""
    console.print(Panel(
        f"[bold cyan]pdf-docgen[/bold cyan] v{__version__}\n\n"
        "Single-page PDF 1.4 encoder for document definitions\n"
        "Output:   PDF 1.4, one page, Helvetica text, JPEG (DCTDecode) images\n"
        "Page:     A4 portrait, 595 × 842 pt",
        title="pdf-docgen",
        border_style="cyan",
    ))
