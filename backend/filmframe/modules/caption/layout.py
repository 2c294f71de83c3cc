# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
FilmFrame - Caption Layout Engine
Turns caption text + style into positioned lines for a target canvas:

  1. Font size   - style.font_size_percent of the canvas width, clamped
                   to [12px, 10% of the width]
  2. Wrapping    - greedy word wrap at 80% of the canvas width, measured
                   with the resolved font; a single overlong word stays
                   alone on its line; explicit newlines always break
  3. Placement   - origin_y = y - block_height / 2 and line i has its
                   vertical middle at origin_y + i * line_height_px;
                   each line is anchored horizontally at x per alignment
"""

from __future__ import annotations

from typing import Optional

from PIL import ImageFont

from filmframe.models.caption import (
    CaptionLayout,
    CaptionPosition,
    CaptionStyle,
    TextAlignment,
)
from filmframe.modules.caption.fonts import FontResolver

MIN_FONT_PX = 12.0
MAX_FONT_WIDTH_RATIO = 0.1
WRAP_WIDTH_RATIO = 0.8


def resolve_font_px(style: CaptionStyle, target_width: int) -> float:
    """style.font_size_percent of the width, within [12px, 10% of width]."""
    calculated = style.font_size_percent / 100.0 * target_width
    max_px = target_width * MAX_FONT_WIDTH_RATIO
    return max(MIN_FONT_PX, min(calculated, max_px))


def wrap_text(
    text: str,
    font: ImageFont.FreeTypeFont,
    max_width: float,
) -> list[str]:
    """
    Greedy word wrap. Words are appended to the current line while the
    measured width stays ≤ max_width. Runs of whitespace collapse to a
    single space; each newline starts a new paragraph.
    """
    lines: list[str] = []
    for paragraph in text.split("\n"):
        current = ""
        for word in paragraph.split():
            candidate = f"{current} {word}" if current else word
            if current and font.getlength(candidate) > max_width:
                lines.append(current)
                current = word
            else:
                current = candidate
        if current:
            lines.append(current)
    return lines if lines else [text.strip()]


def line_left(anchor_x: float, line_width: float, alignment: TextAlignment) -> float:
    """Left edge of a line whose alignment anchor sits at anchor_x."""
    if alignment == TextAlignment.CENTER:
        return anchor_x - line_width / 2.0
    if alignment == TextAlignment.RIGHT:
        return anchor_x - line_width
    return anchor_x


class CaptionLayoutEngine:
    """Computes font size, wrapped lines and line origins for a caption."""

    def __init__(self, fonts: Optional[FontResolver] = None) -> None:
        self.fonts = fonts or FontResolver()

    def font_for(self, style: CaptionStyle, font_px: float) -> ImageFont.FreeTypeFont:
        return self.fonts.resolve(style.font_family, style.font_style, font_px)

    def layout(
        self,
        text: str,
        style: CaptionStyle,
        target_width: int,
        target_height: int,
        position: Optional[CaptionPosition] = None,
    ) -> CaptionLayout:
        position = position or CaptionPosition()

        font_px = resolve_font_px(style, target_width)
        font = self.font_for(style, font_px)

        lines = wrap_text(text, font, target_width * WRAP_WIDTH_RATIO)
        widths = [float(font.getlength(line)) for line in lines]

        line_height_px = font_px * style.line_height
        total_height = len(lines) * line_height_px

        x = position.x_percent / 100.0 * target_width
        y = position.y_percent / 100.0 * target_height
        origin_y = y - total_height / 2.0

        origins = [
            (x, origin_y + i * line_height_px)
            for i in range(len(lines))
        ]

        return CaptionLayout(
            lines=lines,
            font_px=font_px,
            line_height_px=line_height_px,
            origin_x=x,
            origin_y=origin_y,
            alignment=position.alignment,
            line_origins=origins,
            line_widths=widths,
        )
