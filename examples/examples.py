"""
Examples for pdf-docgen
========================
Three complete examples: an expense invoice, a document that overflows its
single page, and a build without raster support.

Run:
    python examples/examples.py
"""

from __future__ import annotations

import base64
import io
import sys
import tempfile
from pathlib import Path

from PIL import Image, ImageDraw

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pdf_docgen import (
    DirectorySaver,
    DocumentBuilder,
    DocumentValidator,
    NullRasterHost,
    PdfDocument,
    PdfInspector,
    render_pdf,
)


def _letterhead() -> str:
    """A 1200×200 PNG letterhead as a data URI."""
    img = Image.new("RGBA", (1200, 200), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    draw.rectangle([0, 0, 1199, 199], outline=(20, 60, 140, 255), width=8)
    draw.text((40, 80), "ACME CLAIMS LTD", fill=(20, 60, 140, 255))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


# ---------------------------------------------------------------------------
# Example 1: Expense invoice
# ---------------------------------------------------------------------------


def example_invoice(out_dir: Path) -> None:
    """
    Example 1: An approved expense claim exported as an invoice.

    The definition has the shape a claims dashboard produces: a letterhead,
    a date/reference row, the line item table and the totals row.
    """
    print("\n" + "="*60)
    print("EXAMPLE 1: Expense Invoice")
    print("="*60)

    letterhead = _letterhead()
    items = [("Taxi", 1, 24.00), ("Hotel", 2, 120.00), ("Meals", 3, 18.50)]
    subtotal = sum(qty * price for _, qty, price in items)
    tax = round(subtotal * 0.1, 2)

    definition = (
        DocumentBuilder()
        .header_image(letterhead)
        .footer_image(letterhead)
        .text("Invoice INV-2024-001")
        .columns("Date: 2024-03-01", "Claim Reference: CLM-42")
        .text("Payee: Dana Smith")
        .table(
            [["Item", "Qty", "Price", "Line Total"]]
            + [[name, qty, f"${price:.2f}", f"${qty * price:.2f}"] for name, qty, price in items]
        )
        .columns(f"Subtotal: ${subtotal:.2f}", f"Tax: ${tax:.2f}", f"Total: ${subtotal + tax:.2f}")
        .text("Approved by Manager")
        .build()
    )
    print(f"  Definition: {definition}")

    result = DocumentValidator().validate(definition)
    print(f"  Preflight: {result}")

    path = PdfDocument(definition).save("invoice-INV-2024-001.pdf", DirectorySaver(out_dir))
    print(f"  Written to: {path}")

    with PdfInspector(path) as inspector:
        for name, image in inspector.images().items():
            print(f"  Image {name}: {image['width']}×{image['height']}, {image['data_length']} bytes")
        for line in inspector.text_lines():
            print(f"    | {line}")
    print("  ✓ Example 1 complete")


# ---------------------------------------------------------------------------
# Example 2: Page overflow
# ---------------------------------------------------------------------------


def example_overflow() -> None:
    """
    Example 2: More content than one page holds.

    Lines past the bottom limit are dropped silently. The preflight validator
    reports how many will be lost before anything is built.
    """
    print("\n" + "="*60)
    print("EXAMPLE 2: Page Overflow")
    print("="*60)

    builder = DocumentBuilder().text("Expense ledger")
    builder.table([[f"Entry {i}", i, f"${i * 3:.2f}"] for i in range(1, 50)])
    definition = builder.build()

    result = DocumentValidator().validate(definition)
    print(f"  Preflight: {result}")
    for issue in result.warnings:
        print(f"    [{issue.rule_id}] {issue.message}")

    data = render_pdf(definition)
    with PdfInspector(data) as inspector:
        lines = inspector.text_lines()
    print(f"  Drawn: {len(lines)} lines, last = {lines[-1]!r}")
    print("  ✓ Example 2 complete")


# ---------------------------------------------------------------------------
# Example 3: No raster support
# ---------------------------------------------------------------------------


def example_headless() -> None:
    """
    Example 3: Building where images cannot be decoded.

    With ``NullRasterHost`` the image references are ignored and the page
    carries text only; the resources have no ``/XObject`` entry.
    """
    print("\n" + "="*60)
    print("EXAMPLE 3: Headless Build")
    print("="*60)

    definition = {
        "header": {"image": "https://example.com/letterhead.png"},
        "content": [{"text": "Receipt RCP-7"}, {"text": "Paid in full (cash)"}],
    }
    data = render_pdf(definition, raster_host=NullRasterHost())
    with PdfInspector(data) as inspector:
        print(f"  XObjects: {inspector.has_xobjects()}")
        print(f"  Text: {inspector.text_lines()}")
    print(f"  Size: {len(data)} bytes")
    print("  ✓ Example 3 complete")


# ---------------------------------------------------------------------------
# Run all examples
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    with tempfile.TemporaryDirectory() as tmp:
        example_invoice(Path(tmp))
    example_overflow()
    example_headless()

    print("\n" + "="*60)
    print("All examples completed successfully.")
    print("="*60 + "\n")
