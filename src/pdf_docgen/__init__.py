"""
pdf-docgen – Single-Page PDF Encoder
=====================================
Builds a PDF 1.4 file by hand from a tree-shaped document definition:
header/footer raster images, paragraphs, column groups and tables. Objects,
the cross-reference table and the trailer are written byte by byte; no
PDF-writing library is used.

Quick Start::

    from pdf_docgen import DocumentBuilder, PdfDocument, PdfInspector, render_pdf

    definition = (
        DocumentBuilder()
        .header_image("https://example.com/letterhead.png")
        .text("Invoice INV-2024-001")
        .columns("Date: 2024-03-01", "Claim Reference: CLM-42")
        .table([
            ["Item", "Qty", "Price", "Line Total"],
            ["Taxi", 1, "$24.00", "$24.00"],
        ])
        .build()
    )

    # Bytes in memory
    pdf_bytes = render_pdf(definition)

    # Or export to a file; failures are logged and return None
    PdfDocument(definition).save("invoice-INV-2024-001.pdf")

    # Read back
    with PdfInspector(pdf_bytes) as inspector:
        print(inspector.text_lines())
"""

__version__ = "0.1.0"

# Core models
from .models.document import (
    Block,
    ColumnsBlock,
    DocumentDefinition,
    ImageSlot,
    TableBlock,
    TextBlock,
)
from .models.settings import DEFAULT_SETTINGS, RenderSettings

# Errors
from .errors import (
    ImageDecodeError,
    ImagePipelineError,
    ImageTimeoutError,
    ObjectStoreError,
    PdfDocgenError,
    RasterSurfaceError,
)

# Builders
from .builder.document_builder import DocumentBuilder

# Encoder components
from .layout.flatten import flatten
from .images.pipeline import (
    ImagePayload,
    ImagePipeline,
    NullRasterHost,
    PillowRasterHost,
    RasterCapability,
    RasterHost,
    convert_image,
)
from .pdf.content import ContentStreamBuilder, escape_text
from .pdf.store import PdfObject, PdfObjectStore

# PDF I/O
from .pdf.writer import (
    DirectorySaver,
    FileSaver,
    PdfDocument,
    build_pdf,
    create_pdf,
    render_pdf,
)
from .pdf.inspect import PdfInspector, read_xref, verify_offsets

# Validator
from .validator.preflight import (
    DocumentValidator,
    Severity,
    ValidationIssue,
    ValidationResult,
    line_budget,
)

__all__ = [
    # Models
    "Block",
    "ColumnsBlock",
    "DocumentDefinition",
    "ImageSlot",
    "TableBlock",
    "TextBlock",
    "DEFAULT_SETTINGS",
    "RenderSettings",
    # Errors
    "ImageDecodeError",
    "ImagePipelineError",
    "ImageTimeoutError",
    "ObjectStoreError",
    "PdfDocgenError",
    "RasterSurfaceError",
    # Builders
    "DocumentBuilder",
    # Encoder components
    "flatten",
    "ImagePayload",
    "ImagePipeline",
    "NullRasterHost",
    "PillowRasterHost",
    "RasterCapability",
    "RasterHost",
    "convert_image",
    "ContentStreamBuilder",
    "escape_text",
    "PdfObject",
    "PdfObjectStore",
    # PDF I/O
    "DirectorySaver",
    "FileSaver",
    "PdfDocument",
    "build_pdf",
    "create_pdf",
    "render_pdf",
    "PdfInspector",
    "read_xref",
    "verify_offsets",
    # Validation
    "DocumentValidator",
    "Severity",
    "ValidationIssue",
    "ValidationResult",
    "line_budget",
]
