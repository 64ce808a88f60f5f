"""
PDF Writer
===========
Builds a complete single-page PDF 1.4 file from a ``DocumentDefinition``
using the hand-written object store – no PDF library is involved.

Object layout of every file::

    1          Font (Type1, built-in face)
    2..        Image XObjects (header ImH, footer ImF) when present
    n          Page content stream
    n+1        Page         (reserved, then filled in)
    n+2        Pages tree   (reserved, then filled in)
    n+3        Catalog      (reserved, then filled in; trailer /Root)

Example::

    from pdf_docgen import PdfDocument, render_pdf

    pdf_bytes = render_pdf({"content": [{"text": "Hello"}]})

    PdfDocument({"content": [{"text": "Hello"}]}).save("hello.pdf")
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from ..images.pipeline import ImagePayload, ImagePipeline, RasterHost
from ..layout.flatten import flatten
from ..models.document import DocumentDefinition
from ..models.settings import DEFAULT_SETTINGS, RenderSettings
from .content import ContentStreamBuilder
from .store import PdfObjectStore

logger = logging.getLogger(__name__)

HEADER_IMAGE_NAME = "ImH"
FOOTER_IMAGE_NAME = "ImF"


def _as_definition(doc: DocumentDefinition | dict[str, Any]) -> DocumentDefinition:
    if isinstance(doc, DocumentDefinition):
        return doc
    return DocumentDefinition.model_validate(doc)


def _image_dictionary(image: ImagePayload) -> str:
    return (
        f"<< /Type /XObject /Subtype /Image /Width {image.width} /Height {image.height} "
        f"/ColorSpace /DeviceRGB /BitsPerComponent 8 /Filter /DCTDecode /Length {image.length} >>"
    )


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


async def build_pdf(
    doc: DocumentDefinition | dict[str, Any],
    *,
    settings: RenderSettings | None = None,
    raster_host: RasterHost | None = None,
) -> bytes:
    """
    Encode a document definition as PDF bytes.

    Parameters
    ----------
    doc:
        A ``DocumentDefinition`` or a plain dict in the same shape.
    settings:
        Layout constants; ``DEFAULT_SETTINGS`` when omitted.
    raster_host:
        Image decoder. Defaults to Pillow; pass ``NullRasterHost()`` to build
        without images.

    Raises
    ------
    ImageDecodeError, RasterSurfaceError
        An image reference is present but cannot be converted.
    pydantic.ValidationError
        ``doc`` is a dict that does not describe a valid document.
    """
    definition = _as_definition(doc)
    s = settings or DEFAULT_SETTINGS
    store = PdfObjectStore()

    font_id = store.add_raw(
        f"<< /Type /Font /Subtype /Type1 /BaseFont /{s.base_font} /Encoding /WinAnsiEncoding >>\n"
    )

    pipeline = ImagePipeline(raster_host, s)
    header_image, footer_image = await asyncio.gather(
        pipeline.convert(definition.header_image, HEADER_IMAGE_NAME),
        pipeline.convert(definition.footer_image, FOOTER_IMAGE_NAME),
    )

    xobject_entries: list[str] = []
    for image in (header_image, footer_image):
        if image is not None:
            image_id = store.add_stream(_image_dictionary(image), image.data)
            xobject_entries.append(f"/{image.name} {image_id} 0 R")

    lines = flatten(definition.content)

    content = ContentStreamBuilder(s)
    if header_image is not None:
        content.draw_header(header_image)
    if footer_image is not None:
        content.draw_footer(footer_image)
    content.add_lines(lines)

    content_bytes = content.to_bytes()
    content_id = store.add_stream(f"<< /Length {len(content_bytes)} >>", content_bytes)

    resource_parts = [f"/Font << /{s.font_name} {font_id} 0 R >>"]
    if xobject_entries:
        resource_parts.append(f"/XObject << {' '.join(xobject_entries)} >>")
    resources = f"<< {' '.join(resource_parts)} >>"

    page_id = store.reserve()
    pages_id = store.reserve()
    catalog_id = store.reserve()

    store.update(
        page_id,
        f"<< /Type /Page /Parent {pages_id} 0 R /MediaBox [0 0 {s.page_width} {s.page_height}] "
        f"/Resources {resources} /Contents {content_id} 0 R >>\n",
    )
    store.update(pages_id, f"<< /Type /Pages /Kids [{page_id} 0 R] /Count 1 >>\n")
    store.update(catalog_id, f"<< /Type /Catalog /Pages {pages_id} 0 R >>\n")

    logger.debug(
        "Built document: %d line(s) drawn, %d dropped, %d image(s)",
        content.lines_drawn, content.lines_dropped, len(xobject_entries),
    )
    return store.build(catalog_id)


def render_pdf(
    doc: DocumentDefinition | dict[str, Any],
    *,
    settings: RenderSettings | None = None,
    raster_host: RasterHost | None = None,
) -> bytes:
    """Synchronous ``build_pdf`` for callers without an event loop."""
    return asyncio.run(build_pdf(doc, settings=settings, raster_host=raster_host))


# ---------------------------------------------------------------------------
# Saving
# ---------------------------------------------------------------------------


class FileSaver:
    """Receives the finished bytes of a document under a file name."""

    def save(self, filename: str, data: bytes) -> Path:
        raise NotImplementedError


class DirectorySaver(FileSaver):
    """
    Writes files into a directory.

    Data is written to a temporary file in the same directory and renamed
    into place, so an interrupted write never leaves a partial PDF.
    """

    def __init__(self, directory: str | Path | None = None) -> None:
        self.directory = Path(directory) if directory is not None else Path.cwd()

    def save(self, filename: str, data: bytes) -> Path:
        target = self.directory / filename
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=".pdf-docgen-", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        return target


# ---------------------------------------------------------------------------
# Export wrapper
# ---------------------------------------------------------------------------


class PdfDocument:
    """
    A document ready to be exported.

    ``download`` and ``save`` never raise: a failed build or write is logged
    and reported by returning None, and no file is produced.

    Usage::

        doc = PdfDocument(definition)
        path = doc.save("invoice-INV-001.pdf")
        if path is None:
            ...  # see the log for the reason
    """

    def __init__(
        self,
        definition: DocumentDefinition | dict[str, Any],
        *,
        settings: RenderSettings | None = None,
        raster_host: RasterHost | None = None,
    ) -> None:
        self.definition = definition
        self.settings = settings
        self.raster_host = raster_host

    async def get_bytes(self) -> bytes:
        """Build and return the PDF bytes; errors propagate."""
        return await build_pdf(self.definition, settings=self.settings, raster_host=self.raster_host)

    async def download(self, filename: str = "document.pdf", saver: FileSaver | None = None) -> Path | None:
        """Build the PDF and hand it to ``saver``; returns the saved path or None on failure."""
        try:
            data = await self.get_bytes()
            path = (saver or DirectorySaver()).save(filename, data)
        except Exception:
            logger.exception("Unable to generate PDF %s", filename)
            return None
        logger.info("Saved %s (%d bytes)", path, len(data))
        return path

    def save(self, filename: str = "document.pdf", saver: FileSaver | None = None) -> Path | None:
        """Synchronous ``download``. Inside a running event loop, await ``download`` instead."""
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.download(filename, saver))
        logger.error("Unable to generate PDF %s: save() called from a running event loop; use download()", filename)
        return None


def create_pdf(
    definition: DocumentDefinition | dict[str, Any],
    **kwargs: Any,
) -> PdfDocument:
    """Wrap a definition for export, e.g. ``create_pdf(doc).save("out.pdf")``."""
    return PdfDocument(definition, **kwargs)
