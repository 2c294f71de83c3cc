# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
FilmFrame - Glyph Renderer
Draws laid-out caption lines onto an owned RasterImage in three passes,
bottom to top, so the layers can never invert:

  1. Shadow  - only if shadow_blur > 0: text filled with shadow_color,
               offset and Gaussian-blurred
  2. Stroke  - only if stroke_width > 0: round-joined outline in
               stroke_color, at least 3px wide
  3. Fill    - solid style.color

Shadow blur, shadow offset and stroke width are authored for a nominal
32px font and scaled by font_px / 32. Each pass is rendered on its own
transparent layer and alpha-composited onto the image.
"""

from __future__ import annotations

from typing import Optional

from PIL import Image, ImageDraw, ImageFilter, ImageFont

from filmframe.core.errors import DrawSurfaceError
from filmframe.models.caption import CaptionLayout, CaptionStyle
from filmframe.models.image import RasterImage
from filmframe.modules.caption.fonts import FontResolver
from filmframe.modules.caption.layout import line_left
from filmframe.utils.image_utils import parse_css_color, pil_to_rgba, rgba_to_pil
from filmframe.utils.logger import get_logger

log = get_logger(__name__)

MIN_STROKE_PX = 3.0
MIN_SHADOW_BLUR_PX = 1.0


def scaled_stroke_width(style: CaptionStyle, scale: float) -> float:
    """Outline width in px for a layout's scale_factor, minimum 3px."""
    return max(MIN_STROKE_PX, style.stroke_width * scale)


def scaled_shadow(style: CaptionStyle, scale: float) -> tuple[float, float, float]:
    """(blur, offset_x, offset_y) in px for a layout's scale_factor."""
    blur = max(MIN_SHADOW_BLUR_PX, style.shadow_blur * scale)
    return blur, style.shadow_offset_x * scale, style.shadow_offset_y * scale


class GlyphRenderer:
    """Renders CaptionLayouts onto RasterImages in place."""

    def __init__(self, fonts: Optional[FontResolver] = None) -> None:
        self.fonts = fonts or FontResolver()

    def _line_positions(
        self,
        layout: CaptionLayout,
        font: ImageFont.FreeTypeFont,
    ) -> list[tuple[float, float]]:
        """Top-left draw positions for each line, vertically centred on its origin."""
        ascent, descent = font.getmetrics()
        half_height = (ascent + descent) / 2.0
        return [
            (line_left(ox, width, layout.alignment), oy - half_height)
            for (ox, oy), width in zip(layout.line_origins, layout.line_widths)
        ]

    def _text_layer(
        self,
        size: tuple[int, int],
        layout: CaptionLayout,
        positions: list[tuple[float, float]],
        font: ImageFont.FreeTypeFont,
        fill: tuple[int, int, int, int],
        offset: tuple[float, float] = (0.0, 0.0),
        stroke_px: int = 0,
    ) -> Image.Image:
        layer = Image.new("RGBA", size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        for line, (x, y) in zip(layout.lines, positions):
            draw.text(
                (x + offset[0], y + offset[1]),
                line,
                font=font,
                fill=fill,
                stroke_width=stroke_px,
                stroke_fill=fill if stroke_px else None,
            )
        return layer

    def render(
        self,
        image: RasterImage,
        layout: CaptionLayout,
        style: CaptionStyle,
    ) -> None:
        """
        Draw every line of `layout` onto `image` (in place).

        Raises:
            DrawSurfaceError: if the drawing surface cannot be created.
        """
        if not layout.lines or not any(line.strip() for line in layout.lines):
            return

        try:
            surface = rgba_to_pil(image.pixels)
        except (ValueError, TypeError, MemoryError) as exc:
            raise DrawSurfaceError(f"Could not create drawing surface: {exc}") from exc

        font = self.fonts.resolve(style.font_family, style.font_style, layout.font_px)
        positions = self._line_positions(layout, font)
        size = surface.size

        if style.shadow_blur > 0:
            blur, dx, dy = scaled_shadow(style, layout.scale_factor)
            shadow = self._text_layer(
                size, layout, positions, font,
                fill=parse_css_color(style.shadow_color),
                offset=(dx, dy),
            )
            # shadow_blur is a blur extent; the Gaussian radius is half of it
            shadow = shadow.filter(ImageFilter.GaussianBlur(radius=blur / 2.0))
            surface = Image.alpha_composite(surface, shadow)

        if style.stroke_width > 0:
            # Pillow strokes outward only, so half the outline width straddles the glyph edge
            stroke_px = max(1, int(round(scaled_stroke_width(style, layout.scale_factor) / 2.0)))
            stroke = self._text_layer(
                size, layout, positions, font,
                fill=parse_css_color(style.stroke_color),
                stroke_px=stroke_px,
            )
            surface = Image.alpha_composite(surface, stroke)

        fill = self._text_layer(
            size, layout, positions, font,
            fill=parse_css_color(style.color),
        )
        surface = Image.alpha_composite(surface, fill)

        image.pixels[...] = pil_to_rgba(surface)

        log.debug(
            "caption_rendered",
            lines=len(layout.lines),
            font_px=round(layout.font_px, 2),
            shadow=style.shadow_blur > 0,
            stroke=style.stroke_width > 0,
        )
