"""
Content Flattener
==================
Turns the block tree of a document definition into the ordered list of plain
text lines that the content stream builder draws, one line per entry.

Example::

    from pdf_docgen.layout.flatten import flatten
    from pdf_docgen.models.document import TableBlock, TextBlock

    flatten([TextBlock(text=["Invoice", "INV-001"]), TableBlock(rows=[["A", 1]])])
    # ['Invoice INV-001', 'A | 1']
"""

from __future__ import annotations

from typing import Iterable

from ..models.document import Block, Cell, ColumnsBlock, TableBlock, TextBlock, number_text

COLUMN_SEPARATOR = "    "
CELL_SEPARATOR = " | "


def flatten(blocks: Iterable[Block | None]) -> list[str]:
    """
    Flatten content blocks into text lines.

    - Absent blocks are skipped.
    - Text and Columns blocks yield at most one line and are dropped when blank.
    - Table blocks yield exactly one line per row, even for blank rows.
    """
    lines: list[str] = []
    for block in blocks or ():
        if not block:
            continue
        if isinstance(block, TextBlock):
            text = block.joined()
            if text:
                lines.append(text)
        elif isinstance(block, ColumnsBlock):
            text = COLUMN_SEPARATOR.join(_column_text(column) for column in block.columns)
            if text.strip():
                lines.append(text)
        elif isinstance(block, TableBlock):
            for row in block.rows:
                lines.append(CELL_SEPARATOR.join(_cell_text(cell) for cell in row))
        else:
            raise TypeError(f"Unsupported block type: {type(block).__name__}")
    return lines


def _column_text(column: TextBlock | str | None) -> str:
    if isinstance(column, str):
        return column
    if isinstance(column, TextBlock):
        return column.joined()
    return ""


def _cell_text(cell: Cell) -> str:
    if isinstance(cell, str):
        return cell
    if isinstance(cell, bool):
        return ""
    if isinstance(cell, (int, float)):
        return number_text(cell)
    if isinstance(cell, TextBlock):
        return cell.joined()
    return ""
