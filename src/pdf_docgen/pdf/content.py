"""
Content Stream Builder
=======================
Produces the page content stream: header/footer image placements followed by
one text-show operator per flattened line, top to bottom.

Lines that would push the text cursor below ``text_min_y`` are dropped
silently; the encoder never starts a second page.
"""

from __future__ import annotations

import logging

from ..images.pipeline import ImagePayload
from ..models.settings import DEFAULT_SETTINGS, RenderSettings

logger = logging.getLogger(__name__)

TEXT_ENCODING = "cp1252"


def escape_text(value: str) -> str:
    """
    Escape a string for use inside a PDF literal string ``( ... )``.

    Backslash and both parentheses get a preceding backslash. Apply exactly
    once: escaping already escaped text escapes the added backslashes again.
    """
    return value.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def _num(value: float) -> str:
    return f"{value:.2f}"


class ContentStreamBuilder:
    """Accumulates content stream operators for a single page."""

    def __init__(self, settings: RenderSettings | None = None) -> None:
        self.settings = settings or DEFAULT_SETTINGS
        self._parts: list[str] = []
        self.cursor_y = self.settings.text_start_y
        self.lines_drawn = 0
        self.lines_dropped = 0

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def draw_header(self, image: ImagePayload) -> None:
        """Centered horizontally, top edge ``image_margin`` below the page top."""
        s = self.settings
        y = s.page_height - image.height - s.image_margin
        self._draw_image(image, y)

    def draw_footer(self, image: ImagePayload) -> None:
        """Centered horizontally, bottom edge ``image_margin`` above the page bottom."""
        self._draw_image(image, self.settings.image_margin)

    def _draw_image(self, image: ImagePayload, y: float) -> None:
        x = (self.settings.page_width - image.width) / 2
        self._parts.append(
            f"q {image.width} 0 0 {image.height} {_num(x)} {_num(y)} cm /{image.name} Do Q"
        )

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def add_lines(self, lines: list[str]) -> None:
        """Draw lines from the current cursor down, dropping what does not fit."""
        s = self.settings
        for index, line in enumerate(lines):
            if not line:
                continue
            if self.cursor_y - s.line_height < s.text_min_y:
                self.lines_dropped = sum(1 for rest in lines[index:] if rest)
                logger.debug("Page full: %d line(s) dropped", self.lines_dropped)
                break
            self._parts.append(
                f"BT /{s.font_name} {s.font_size:g} Tf 1 0 0 1 {s.text_x:g} {_num(self.cursor_y)} Tm "
                f"({escape_text(line)}) Tj ET"
            )
            self.cursor_y -= s.line_height
            self.lines_drawn += 1

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def operators(self) -> list[str]:
        return list(self._parts)

    def to_bytes(self) -> bytes:
        """Encode the stream; characters outside WinAnsi become ``?``."""
        return "\n".join(self._parts).encode(TEXT_ENCODING, errors="replace")
