"""
Document Definition – Core Model
=================================
Pydantic models for the tree-shaped document definition consumed by the
encoder: optional header/footer image references plus an ordered list of
content blocks.

Blocks form a closed tagged union on the ``kind`` field:

- ``TextBlock``    – a paragraph (``text`` is a string or a list of strings)
- ``ColumnsBlock`` – a row of side-by-side text columns
- ``TableBlock``   – rows of cells (string, number, text or empty)

Plain dictionaries in the pdfmake-like shape produced by the dashboard are
tagged automatically, so both of these validate::

    DocumentDefinition.model_validate({
        "header": {"image": "https://example.com/logo.png"},
        "content": [
            {"text": "Invoice INV-001"},
            {"columns": [{"text": "Date: 2024-01-01"}, "Ref: CLM-9"]},
            {"table": {"body": [["Item", "Qty"], ["Taxi", 1]]}},
        ],
    })
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


class TextBlock(BaseModel):
    """A single paragraph of text (rendered as one line)."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    kind: Literal["text"] = "text"
    text: str | list[str] = Field("", description="Line text, or fragments joined with a space")

    @field_validator("text", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        """Numbers are shown by their decimal text form, like in the dashboard."""
        if v is None:
            return ""
        if isinstance(v, (list, tuple)):
            return [_scalar_text(item) for item in v]
        return _scalar_text(v)

    def joined(self) -> str:
        if isinstance(self.text, list):
            return " ".join(self.text)
        return self.text


Cell = Union[str, int, float, TextBlock, None]


class ColumnsBlock(BaseModel):
    """Side-by-side columns, flattened onto one line."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    kind: Literal["columns"] = "columns"
    columns: list[TextBlock | str | None] = Field(default_factory=list)

    @field_validator("columns", mode="before")
    @classmethod
    def coerce_columns(cls, v: Any) -> Any:
        if not isinstance(v, (list, tuple)):
            return v
        out: list[Any] = []
        for column in v:
            if isinstance(column, dict) and "text" not in column:
                # image-only or otherwise text-less column
                out.append(None)
            else:
                out.append(column)
        return out


class TableBlock(BaseModel):
    """A table; every row becomes one line with cells joined by ``" | "``."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    kind: Literal["table"] = "table"
    rows: list[list[Cell]] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def accept_table_body(cls, data: Any) -> Any:
        """Accept the pdfmake shape ``{"table": {"body": [...]}}``."""
        if isinstance(data, dict) and "rows" not in data and "table" in data:
            table = data.get("table") or {}
            data = {**data, "rows": table.get("body", []) if isinstance(table, dict) else []}
            data.pop("table", None)
        return data

    @field_validator("rows", mode="before")
    @classmethod
    def coerce_cells(cls, v: Any) -> Any:
        if not isinstance(v, (list, tuple)):
            return v
        return [
            [_coerce_cell(cell) for cell in row] if isinstance(row, (list, tuple)) else row
            for row in v
        ]


Block = Annotated[Union[TextBlock, ColumnsBlock, TableBlock], Field(discriminator="kind")]


# ---------------------------------------------------------------------------
# Header / footer
# ---------------------------------------------------------------------------


class ImageSlot(BaseModel):
    """Header or footer slot holding an optional image reference."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    image: str | None = Field(
        None,
        description="http(s) URL, data: URI, file:// URL, local path or raw base64 string",
    )

    @model_validator(mode="before")
    @classmethod
    def accept_column_image(cls, data: Any) -> Any:
        """Accept the dashboard footer shape ``{"columns": [{"image": ...}]}``."""
        if isinstance(data, str):
            return {"image": data}
        if isinstance(data, dict) and not data.get("image"):
            columns = data.get("columns")
            if isinstance(columns, list) and columns and isinstance(columns[0], dict):
                return {**data, "image": columns[0].get("image")}
        return data

    @field_validator("image", mode="before")
    @classmethod
    def blank_is_absent(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


# ---------------------------------------------------------------------------
# DocumentDefinition
# ---------------------------------------------------------------------------


class DocumentDefinition(BaseModel):
    """
    The abstract description of a one-page document.

    ``content`` may contain ``None`` entries; they are kept in place and
    skipped when the content is flattened.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    header: ImageSlot = Field(default_factory=ImageSlot)
    footer: ImageSlot = Field(default_factory=ImageSlot)
    content: list[Block | None] = Field(default_factory=list)

    @field_validator("header", "footer", mode="before")
    @classmethod
    def absent_slot(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("content", mode="before")
    @classmethod
    def tag_blocks(cls, v: Any) -> Any:
        if v is None:
            return []
        if not isinstance(v, (list, tuple)):
            return v
        return [_tag_block(block) for block in v]

    @property
    def header_image(self) -> str | None:
        return self.header.image

    @property
    def footer_image(self) -> str | None:
        return self.footer.image

    def has_images(self) -> bool:
        return bool(self.header.image or self.footer.image)

    def __repr__(self) -> str:
        return (
            f"DocumentDefinition(blocks={len(self.content)}, "
            f"header={self.header.image is not None}, footer={self.footer.image is not None})"
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _scalar_text(v: Any) -> Any:
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return number_text(v)
    return v


def number_text(value: int | float) -> str:
    """
    Decimal text form of a number, as the dashboard prints it.

    ``2`` -> ``"2"``, ``3.0`` -> ``"3"``, ``2.5`` -> ``"2.5"``,
    ``1e16`` -> ``"10000000000000000"``, ``1e-7`` -> ``"1e-7"``,
    ``nan`` -> ``"NaN"``, ``inf`` -> ``"Infinity"``.
    """
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    _, digit_tuple, exponent = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    k = len(digits)
    n = exponent + k  # position of the decimal point relative to the digits

    if k <= n <= 21:
        text = digits + "0" * (n - k)
    elif 0 < n <= 21:
        text = f"{digits[:n]}.{digits[n:]}"
    elif -6 < n <= 0:
        text = "0." + "0" * -n + digits
    else:
        e = n - 1
        mantissa = digits[0] + (f".{digits[1:]}" if k > 1 else "")
        text = f"{mantissa}e{'+' if e >= 0 else '-'}{abs(e)}"
    return sign + text


def _coerce_cell(cell: Any) -> Any:
    if isinstance(cell, bool):
        return None
    if cell is None or isinstance(cell, (str, int, float, TextBlock)):
        return cell
    if isinstance(cell, dict) and "text" in cell:
        return {**cell, "kind": "text"}
    return None


def _tag_block(block: Any) -> Any:
    """Attach the ``kind`` discriminator to untagged input blocks."""
    if isinstance(block, BaseModel):
        return block
    if not block:
        return None
    if isinstance(block, str):
        return {"kind": "text", "text": block}
    if isinstance(block, dict) and "kind" not in block:
        if "text" in block:
            return {**block, "kind": "text"}
        if "columns" in block:
            return {**block, "kind": "columns"}
        if "table" in block or "rows" in block:
            return {**block, "kind": "table"}
    return block
