# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
FilmFrame - Caption Validator
Checks caption values that cannot be clamped into range. Font size and
position percentages are clamped silently by the models and never
reach this module out of range.

Raises ValidationError (subclass of ValueError) on the first failure.
"""

import math
from typing import Optional

from filmframe.config import get_settings
from filmframe.core.errors import ValidationError
from filmframe.models.caption import Caption, CaptionStyle
from filmframe.utils.image_utils import parse_css_color


def _check_color(name: str, value: str) -> None:
    try:
        parse_css_color(value)
    except ValueError as exc:
        raise ValidationError(f"Caption {name} '{value}' is not a valid colour.") from exc


def validate_style(style: CaptionStyle) -> None:
    numeric = {
        "font_size_percent": style.font_size_percent,
        "stroke_width": style.stroke_width,
        "shadow_blur": style.shadow_blur,
        "shadow_offset_x": style.shadow_offset_x,
        "shadow_offset_y": style.shadow_offset_y,
        "line_height": style.line_height,
    }
    for name, value in numeric.items():
        if not math.isfinite(value):
            raise ValidationError(f"Caption {name} must be a finite number, got {value}.")

    if style.stroke_width < 0:
        raise ValidationError(
            f"Caption stroke_width must be ≥ 0, got {style.stroke_width}."
        )
    if style.shadow_blur < 0:
        raise ValidationError(
            f"Caption shadow_blur must be ≥ 0, got {style.shadow_blur}."
        )
    if style.line_height <= 0:
        raise ValidationError(
            f"Caption line_height must be > 0, got {style.line_height}."
        )
    if not style.font_family.strip():
        raise ValidationError("Caption font_family must not be empty.")

    _check_color("color", style.color)
    _check_color("stroke_color", style.stroke_color)
    _check_color("shadow_color", style.shadow_color)


def validate_caption(caption: Caption, max_chars: Optional[int] = None) -> None:
    """
    Validate one caption before layout.

    Raises:
        ValidationError: text longer than max_chars (settings.caption_max_chars
                         by default) or a style value outside its bounds.
    """
    limit = get_settings().caption_max_chars if max_chars is None else max_chars
    if len(caption.text) > limit:
        raise ValidationError(
            f"Caption text is {len(caption.text)} characters, which exceeds "
            f"the limit of {limit}."
        )
    validate_style(caption.style)
