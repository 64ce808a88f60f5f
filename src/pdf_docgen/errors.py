"""
Exceptions
===========
Exception hierarchy for pdf-docgen.

Only the export wrapper (``PdfDocument.download`` / ``PdfDocument.save``)
catches these; everywhere else they propagate to the caller unchanged.
"""

from __future__ import annotations


class PdfDocgenError(Exception):
    """Base class for every error raised by pdf-docgen."""


class ObjectStoreError(PdfDocgenError):
    """Invalid use of the PDF object store (unknown id, unresolved placeholder, reuse)."""


class ImagePipelineError(PdfDocgenError):
    """An image reference could not be turned into an embeddable payload."""


class ImageDecodeError(ImagePipelineError):
    """The source raster could not be fetched, read or decoded."""


class ImageTimeoutError(ImageDecodeError):
    """Decoding did not finish within the configured time bound."""


class RasterSurfaceError(ImagePipelineError):
    """No RGB drawing surface or JPEG encoder is available for re-encoding."""
