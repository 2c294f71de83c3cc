# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
FilmFrame - Caption Models
Style, position and layout of the text overlay, plus the preset
catalogue offered to the caption editor.

Clampable numbers (font size percent, position percents) are clamped
silently here. Everything that cannot be clamped is checked by
filmframe.modules.caption.validator before rendering.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

FONT_SIZE_PERCENT_MIN = 1.0
FONT_SIZE_PERCENT_MAX = 10.0

# Stroke and shadow sizes in a CaptionStyle are authored for this font size
NOMINAL_FONT_PX = 32.0


def _clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, float(v)))


class FontStyle(str, Enum):
    NORMAL = "normal"
    ITALIC = "italic"


class TextAlignment(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class CaptionStyle(BaseModel):
    model_config = ConfigDict(frozen=True)

    font_family: str = "Arial, sans-serif"
    # Percentage of the target image width (1-10)
    font_size_percent: float = 4.0
    font_style: FontStyle = FontStyle.ITALIC
    color: str = "#FFEB3B"
    stroke_color: str = "#000000"
    stroke_width: float = 3.0
    shadow_color: str = "rgba(0, 0, 0, 0.8)"
    shadow_blur: float = 4.0
    shadow_offset_x: float = 2.0
    shadow_offset_y: float = 2.0
    line_height: float = 1.4

    @field_validator("font_size_percent")
    @classmethod
    def _clamp_font_size(cls, v: float) -> float:
        return _clamp(v, FONT_SIZE_PERCENT_MIN, FONT_SIZE_PERCENT_MAX)


class CaptionPosition(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Percentages of image width / height (0-100)
    x_percent: float = 50.0
    y_percent: float = 75.0
    alignment: TextAlignment = TextAlignment.CENTER

    @field_validator("x_percent", "y_percent")
    @classmethod
    def _clamp_percent(cls, v: float) -> float:
        return _clamp(v, 0.0, 100.0)


class CaptionPreset(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    style: CaptionStyle
    default_position: CaptionPosition


class Caption(BaseModel):
    """A positioned, styled text overlay. Text length is checked by the validator."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    text: str = ""
    style: CaptionStyle = Field(default_factory=CaptionStyle)
    position: CaptionPosition = Field(default_factory=CaptionPosition)

    @property
    def has_text(self) -> bool:
        return bool(self.text.strip())

    @classmethod
    def from_preset(
        cls,
        text: str,
        preset: Optional[CaptionPreset] = None,
        **overrides,
    ) -> "Caption":
        preset = preset or VINTAGE_MOVIE_PRESET
        return cls(
            text=text,
            style=preset.style,
            position=preset.default_position,
            **overrides,
        )


class CaptionLayout(BaseModel):
    """
    Output of CaptionLayoutEngine.layout.
    Each entry of `line_origins` is the (x, y) anchor of one line: x is the
    alignment anchor, y the vertical middle of the line.
    """
    lines: list[str]
    font_px: float
    line_height_px: float
    origin_x: float
    origin_y: float
    alignment: TextAlignment
    line_origins: list[tuple[float, float]] = Field(default_factory=list)
    line_widths: list[float] = Field(default_factory=list)

    @property
    def total_height(self) -> float:
        return len(self.lines) * self.line_height_px

    @property
    def scale_factor(self) -> float:
        """Font size relative to the nominal 32px the style values assume."""
        return self.font_px / NOMINAL_FONT_PX


# ─── Presets ─────────────────────────────────────────────────────────────────

VINTAGE_MOVIE_PRESET = CaptionPreset(
    name="Classic Movie",
    description="Light yellow text with black outline",
    style=CaptionStyle(),
    default_position=CaptionPosition(),
)

CAPTION_PRESETS: list[CaptionPreset] = [
    VINTAGE_MOVIE_PRESET,
    CaptionPreset(
        name="Purple Dream",
        description="Light purple with black outline",
        style=VINTAGE_MOVIE_PRESET.style.model_copy(update={"color": "#E1BEE7"}),
        default_position=VINTAGE_MOVIE_PRESET.default_position,
    ),
    CaptionPreset(
        name="Classic White",
        description="White text with black outline",
        style=VINTAGE_MOVIE_PRESET.style.model_copy(update={"color": "#FFFFFF"}),
        default_position=VINTAGE_MOVIE_PRESET.default_position,
    ),
]


def get_preset(name: str) -> CaptionPreset:
    for preset in CAPTION_PRESETS:
        if preset.name.lower() == name.lower():
            return preset
    raise KeyError(f"Unknown caption preset: {name}")
