"""
Image Pipeline
===============
Converts a header/footer image reference into a size-bounded JPEG payload
ready to be embedded as a ``/DCTDecode`` image XObject.

Accepted references:

- ``data:`` URIs (base64 or percent-encoded)
- ``http://`` / ``https://`` URLs (fetched with requests)
- ``file://`` URLs and existing local paths
- anything else is treated as a raw base64 string

Decoding, resizing and re-encoding are done by a *raster host*. The default
``PillowRasterHost`` uses Pillow; ``NullRasterHost`` stands in for an
environment without raster support, where every conversion resolves to
``None`` instead of failing.

Example::

    import asyncio
    from pdf_docgen.images.pipeline import ImagePipeline

    payload = asyncio.run(ImagePipeline().convert("https://example.com/logo.png", "ImH"))
    print(payload.width, payload.height, len(payload.data))
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import io
import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from urllib.parse import unquote_to_bytes, urlparse
from urllib.request import url2pathname

import requests
from PIL import Image, features

from ..errors import ImageDecodeError, ImageTimeoutError, RasterSurfaceError
from ..models.settings import DEFAULT_SETTINGS, RenderSettings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Payload and capability
# ---------------------------------------------------------------------------


class RasterCapability(str, Enum):
    """Outcome of a raster host capability check."""
    SUPPORTED = "supported"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class ImagePayload:
    """A re-encoded JPEG image and the resource name it is drawn under."""
    data: bytes
    width: int
    height: int
    name: str

    @property
    def length(self) -> int:
        return len(self.data)


def target_size(
    width: int | None,
    height: int | None,
    max_width: int,
) -> tuple[int, int]:
    """
    Output dimensions for a source raster, clamping the width to ``max_width``.

    Unknown (zero or missing) dimensions fall back to ``max_width`` for the
    width and ``max_width / 6`` for the height.
    """
    source_w = width or max_width
    source_h = height or max_width / 6
    scale = min(1.0, max_width / source_w)
    return max(1, round(source_w * scale)), max(1, round(source_h * scale))


# ---------------------------------------------------------------------------
# Raster hosts
# ---------------------------------------------------------------------------


class RasterHost:
    """
    Interface of an environment able to decode and re-encode rasters.

    Subclasses override ``capability``, ``open`` and ``render_jpeg``. Both
    ``open`` and ``render_jpeg`` are blocking and are run in a worker thread.
    ``cancel`` is set once the caller has stopped waiting; long-running hosts
    should check it and give up early.
    """

    def capability(self) -> RasterCapability:
        return RasterCapability.UNSUPPORTED

    def open(self, reference: str, cancel: threading.Event | None = None) -> Image.Image:
        raise NotImplementedError

    def render_jpeg(self, image: Image.Image, width: int, height: int, quality: int) -> bytes:
        raise NotImplementedError


class NullRasterHost(RasterHost):
    """A host without raster support; every conversion yields no image."""


class PillowRasterHost(RasterHost):
    """
    Raster host backed by Pillow, fetching remote references with requests.

    Without a ``session`` every fetch is a one-off ``requests.get``, so no
    connection pool outlives the build.
    """

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        timeout: float | None = DEFAULT_SETTINGS.image_timeout,
    ) -> None:
        self._session = session
        self._timeout = timeout

    def capability(self) -> RasterCapability:
        return RasterCapability.SUPPORTED

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def open(self, reference: str, cancel: threading.Event | None = None) -> Image.Image:
        raw = self.read_bytes(reference)
        _check_cancelled(cancel)
        try:
            image = Image.open(io.BytesIO(raw))
            image.load()
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            raise ImageDecodeError(f"Failed to decode image: {e}") from e
        logger.debug("Decoded %s image %dx%d (%s)", image.format, image.width, image.height, image.mode)
        return image

    def read_bytes(self, reference: str) -> bytes:
        """Resolve a reference to the encoded image bytes it points at."""
        ref = reference.strip()
        if ref.startswith("data:"):
            return self._read_data_uri(ref)
        if ref.startswith(("http://", "https://")):
            return self._fetch(ref)
        if ref.startswith("file://"):
            return self._read_file(url2pathname(urlparse(ref).path))
        if os.path.isfile(ref):
            return self._read_file(ref)
        return _b64decode(ref)

    def _read_data_uri(self, ref: str) -> bytes:
        header, sep, payload = ref.partition(",")
        if not sep:
            raise ImageDecodeError("Malformed data URI: missing ','")
        if header.endswith(";base64"):
            return _b64decode(payload)
        return unquote_to_bytes(payload)

    def _fetch(self, url: str) -> bytes:
        logger.debug("Fetching image %s", url)
        try:
            get = self._session.get if self._session is not None else requests.get
            response = get(url, timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ImageDecodeError(f"Failed to load image from {url}: {e}") from e
        return response.content

    @staticmethod
    def _read_file(path: str) -> bytes:
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as e:
            raise ImageDecodeError(f"Failed to read image file {path}: {e}") from e

    # ------------------------------------------------------------------
    # Re-encoding
    # ------------------------------------------------------------------

    def render_jpeg(self, image: Image.Image, width: int, height: int, quality: int) -> bytes:
        """Draw ``image`` scaled onto a white RGB surface and encode it as JPEG."""
        if not features.check("jpg"):
            raise RasterSurfaceError("Pillow was built without JPEG support")
        try:
            source = image.convert("RGBA").resize((width, height), Image.Resampling.LANCZOS)
            surface = Image.new("RGB", (width, height), "white")
            surface.paste(source, mask=source.getchannel("A"))
            buf = io.BytesIO()
            surface.save(buf, format="JPEG", quality=quality)
        except (OSError, ValueError) as e:
            raise RasterSurfaceError(f"Unable to rasterize image: {e}") from e
        return buf.getvalue()


def _check_cancelled(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise ImageTimeoutError("Image conversion cancelled after timeout")


def _b64decode(text: str) -> bytes:
    try:
        return base64.b64decode("".join(text.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Image reference is not valid base64: {e}") from e


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class ImagePipeline:
    """
    Converts image references to ``ImagePayload`` objects.

    Parameters
    ----------
    host:
        Raster host to decode with. Defaults to a ``PillowRasterHost``.
    settings:
        Supplies ``max_image_width``, ``jpeg_quality`` and ``image_timeout``.
    """

    def __init__(
        self,
        host: RasterHost | None = None,
        settings: RenderSettings | None = None,
    ) -> None:
        self.settings = settings or DEFAULT_SETTINGS
        self.host = host if host is not None else PillowRasterHost(timeout=self.settings.image_timeout)

    async def convert(self, reference: str | None, name: str) -> ImagePayload | None:
        """
        Convert one reference. Returns None when there is nothing to embed.

        Raises
        ------
        ImageDecodeError
            The source could not be loaded or decoded (or timed out).
        RasterSurfaceError
            The decoded raster could not be re-encoded.
        """
        if not reference:
            return None
        if self.host.capability() is RasterCapability.UNSUPPORTED:
            logger.debug("Raster host unsupported; skipping image %s", name)
            return None

        # Private executor: asyncio.run() joins only the loop's default one.
        cancel = threading.Event()
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"pdf-docgen-{name}")
        work = asyncio.get_running_loop().run_in_executor(
            executor, self._convert_blocking, reference, name, cancel
        )
        timeout = self.settings.image_timeout
        try:
            if timeout is None:
                return await work
            try:
                return await asyncio.wait_for(work, timeout)
            except asyncio.TimeoutError as e:
                raise ImageTimeoutError(f"Image {name} was not decoded within {timeout:g}s") from e
        finally:
            if not work.done() or work.cancelled():
                cancel.set()
                logger.debug("Abandoned conversion of image %s", name)
            executor.shutdown(wait=False, cancel_futures=True)

    def _convert_blocking(self, reference: str, name: str, cancel: threading.Event) -> ImagePayload:
        image = self.host.open(reference, cancel=cancel)
        _check_cancelled(cancel)
        width, height = target_size(image.width, image.height, self.settings.max_image_width)
        data = self.host.render_jpeg(image, width, height, self.settings.jpeg_quality)
        logger.debug(
            "Image %s: %dx%d -> %dx%d, %d bytes",
            name, image.width, image.height, width, height, len(data),
        )
        return ImagePayload(data=data, width=width, height=height, name=name)


async def convert_image(
    reference: str | None,
    name: str,
    *,
    host: RasterHost | None = None,
    settings: RenderSettings | None = None,
) -> ImagePayload | None:
    """Shortcut for ``ImagePipeline(host, settings).convert(reference, name)``."""
    return await ImagePipeline(host, settings).convert(reference, name)
