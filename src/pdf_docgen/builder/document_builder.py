"""
Document Builder
=================
Fluent builder API for constructing ``DocumentDefinition`` objects.

Example::

    from pdf_docgen import DocumentBuilder

    definition = (
        DocumentBuilder()
        .header_image("https://example.com/letterhead.png")
        .text("Invoice INV-2024-001")
        .columns("Date: 2024-03-01", "Claim Reference: CLM-42")
        .table([["Item", "Qty", "Price"], ["Taxi", 1, "$24.00"]])
        .build()
    )
"""

from __future__ import annotations

from typing import Any

from ..models.document import (
    Block,
    ColumnsBlock,
    DocumentDefinition,
    ImageSlot,
    TableBlock,
    TextBlock,
)


class DocumentBuilder:
    """Fluent builder for DocumentDefinition objects."""

    def __init__(self) -> None:
        self._header_image: str | None = None
        self._footer_image: str | None = None
        self._content: list[Block | None] = []

    # ------------------------------------------------------------------
    # Header / footer
    # ------------------------------------------------------------------

    def header_image(self, reference: str | None) -> "DocumentBuilder":
        """URL, data URI, file path or raw base64 drawn centered at the top."""
        self._header_image = reference
        return self

    def footer_image(self, reference: str | None) -> "DocumentBuilder":
        """URL, data URI, file path or raw base64 drawn centered at the bottom."""
        self._footer_image = reference
        return self

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    def text(self, text: str | list[str]) -> "DocumentBuilder":
        self._content.append(TextBlock(text=text))
        return self

    def columns(self, *columns: str | TextBlock | None) -> "DocumentBuilder":
        """Columns are shown on one line, separated by four spaces."""
        self._content.append(ColumnsBlock(columns=list(columns)))
        return self

    def table(self, rows: list[list[Any]]) -> "DocumentBuilder":
        """Each row becomes one line with cells joined by ``" | "``."""
        self._content.append(TableBlock(rows=rows))
        return self

    def block(self, block: Block | dict[str, Any] | None) -> "DocumentBuilder":
        """Append an already built block, or a dict in the pdfmake-like input shape."""
        if isinstance(block, dict):
            block = DocumentDefinition.model_validate({"content": [block]}).content[0]
        self._content.append(block)
        return self

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def build(self) -> DocumentDefinition:
        return DocumentDefinition(
            header=ImageSlot(image=self._header_image),
            footer=ImageSlot(image=self._footer_image),
            content=list(self._content),
        )
