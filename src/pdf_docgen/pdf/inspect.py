"""
PDF Inspector
==============
Reads a generated PDF back for verification.

Two layers:

- ``read_xref`` / ``verify_offsets`` parse the cross-reference table straight
  from the bytes and check that each recorded offset lands on its
  ``"<id> 0 obj"`` line.
- ``PdfInspector`` opens the file with pikepdf and summarizes the page:
  MediaBox, fonts, image XObjects and the text drawn by ``Tj`` operators.

Example::

    from pdf_docgen.pdf.inspect import PdfInspector

    with PdfInspector("invoice.pdf") as inspector:
        print(inspector.summary())
"""

from __future__ import annotations

import io
import re
from pathlib import Path
from typing import Any

import pikepdf

from .content import TEXT_ENCODING

_STARTXREF_RE = re.compile(rb"startxref\s+(\d+)\s+%%EOF\s*$")


# ---------------------------------------------------------------------------
# Cross-reference table
# ---------------------------------------------------------------------------


def read_xref(data: bytes) -> dict[int, int]:
    """
    Map object id -> byte offset for the in-use entries of the xref table.

    Only the classic single-section table written by ``PdfObjectStore`` is
    understood; anything else raises ValueError.
    """
    match = _STARTXREF_RE.search(data)
    if not match:
        raise ValueError("No startxref / %%EOF trailer found")
    start = int(match.group(1))
    lines = data[start:].split(b"\n")
    if not lines or lines[0].strip() != b"xref":
        raise ValueError(f"startxref {start} does not point at an xref section")

    try:
        first, count = (int(v) for v in lines[1].split())
    except ValueError as e:
        raise ValueError(f"Malformed xref subsection header: {lines[1]!r}") from e

    offsets: dict[int, int] = {}
    for index, line in enumerate(lines[2:2 + count]):
        parts = line.split()
        if len(parts) != 3:
            raise ValueError(f"Malformed xref entry: {line!r}")
        offset, _generation, kind = parts
        if kind == b"n":
            offsets[first + index] = int(offset)
    return offsets


def verify_offsets(data: bytes) -> list[int]:
    """Return the ids whose xref offset does not point at ``"<id> 0 obj"`` (empty if all match)."""
    bad: list[int] = []
    for obj_id, offset in read_xref(data).items():
        if not data.startswith(f"{obj_id} 0 obj".encode("ascii"), offset):
            bad.append(obj_id)
    return bad


# ---------------------------------------------------------------------------
# pikepdf read-back
# ---------------------------------------------------------------------------


class PdfInspector:
    """
    Context-manager-based reader for generated PDFs.

    Parameters
    ----------
    source:
        PDF bytes or a path to a PDF file.
    """

    def __init__(self, source: bytes | str | Path) -> None:
        if isinstance(source, (bytes, bytearray)):
            self._data = bytes(source)
        else:
            self._data = Path(source).read_bytes()
        self._pdf = pikepdf.open(io.BytesIO(self._data))

    def __enter__(self) -> "PdfInspector":
        return self

    def __exit__(self, *_: Any) -> None:
        self._pdf.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def page_count(self) -> int:
        return len(self._pdf.pages)

    def media_box(self, page: int = 1) -> list[float]:
        return [float(v) for v in self._page(page)["/MediaBox"]]

    def fonts(self, page: int = 1) -> dict[str, str]:
        """Resource name -> BaseFont."""
        fonts = self._resources(page).get("/Font")
        if fonts is None:
            return {}
        return {str(name).lstrip("/"): str(font.get("/BaseFont", "")).lstrip("/") for name, font in fonts.items()}

    def images(self, page: int = 1) -> dict[str, dict[str, Any]]:
        """Resource name -> width, height, filter and stored length of each image XObject."""
        xobjects = self._resources(page).get("/XObject")
        if xobjects is None:
            return {}
        out: dict[str, dict[str, Any]] = {}
        for name, xobj in xobjects.items():
            raw = xobj.read_raw_bytes()
            out[str(name).lstrip("/")] = {
                "width": int(xobj["/Width"]),
                "height": int(xobj["/Height"]),
                "filter": str(xobj.get("/Filter", "")).lstrip("/"),
                "length": int(xobj.get("/Length", len(raw))),
                "data_length": len(raw),
            }
        return out

    def has_xobjects(self, page: int = 1) -> bool:
        return "/XObject" in self._resources(page)

    def text_lines(self, page: int = 1) -> list[str]:
        """Strings shown by ``Tj`` operators, in drawing order."""
        lines: list[str] = []
        for instruction in pikepdf.parse_content_stream(self._pdf.pages[page - 1]):
            if str(instruction.operator) == "Tj" and instruction.operands:
                lines.append(bytes(instruction.operands[0]).decode(TEXT_ENCODING, errors="replace"))
        return lines

    def summary(self) -> dict[str, Any]:
        return {
            "size": len(self._data),
            "version": self._pdf.pdf_version,
            "page_count": self.page_count(),
            "media_box": self.media_box(),
            "fonts": self.fonts(),
            "images": self.images(),
            "text_lines": self.text_lines(),
            "xref_ok": not verify_offsets(self._data),
        }

    @property
    def pdf(self) -> pikepdf.Pdf:
        """Direct access to the underlying pikepdf.Pdf object."""
        return self._pdf

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _page(self, page: int) -> pikepdf.Dictionary:
        return self._pdf.pages[page - 1].obj

    def _resources(self, page: int) -> pikepdf.Dictionary:
        return self._page(page).get("/Resources", pikepdf.Dictionary())
