"""
Render Settings
================
Page geometry, text layout and image re-encoding constants used by the
encoder. All values are in PDF points unless stated otherwise.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, model_validator


class RenderSettings(BaseModel):
    """Immutable layout configuration for one build."""
    model_config = ConfigDict(frozen=True)

    # --- Page (A4 portrait) ---
    page_width: int = Field(595, gt=0)
    page_height: int = Field(842, gt=0)

    # --- Header / footer images ---
    image_margin: float = Field(20, ge=0, description="Gap between an image and the page edge")
    max_image_width: int = Field(520, gt=0, description="Images wider than this are scaled down")
    jpeg_quality: int = Field(92, ge=1, le=100, description="Pillow JPEG quality (0.92 on a 0–1 scale)")
    image_timeout: PositiveFloat | None = Field(
        30.0, description="Seconds allowed per image conversion; None waits forever"
    )

    # --- Text ---
    font_name: str = Field("F1", description="Resource name of the built-in font")
    base_font: str = Field("Helvetica", description="One of the standard 14 Type1 faces")
    font_size: float = Field(12, gt=0)
    text_x: float = 50
    text_start_y: float = 700
    line_height: float = Field(18, gt=0)
    text_min_y: float = Field(80, description="Lowest baseline a line may leave the cursor at")

    @model_validator(mode="after")
    def validate_text_area(self) -> "RenderSettings":
        if self.text_start_y > self.page_height:
            raise ValueError("text_start_y must lie on the page")
        if self.text_min_y > self.text_start_y:
            raise ValueError("text_min_y must not exceed text_start_y")
        return self

    def line_budget(self) -> int:
        """Maximum number of text lines that fit between the start cursor and the bottom limit."""
        return int((self.text_start_y - self.text_min_y) // self.line_height)


DEFAULT_SETTINGS = RenderSettings()
