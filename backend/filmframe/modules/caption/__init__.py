# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
FilmFrame - Caption Module
Public API for caption validation, layout and glyph rendering.
"""

from filmframe.modules.caption.fonts import FontResolver, parse_family_list
from filmframe.modules.caption.glyph_renderer import (
    GlyphRenderer,
    scaled_shadow,
    scaled_stroke_width,
)
from filmframe.modules.caption.layout import (
    CaptionLayoutEngine,
    line_left,
    resolve_font_px,
    wrap_text,
)
from filmframe.modules.caption.validator import validate_caption, validate_style

__all__ = [
    # Fonts
    "FontResolver",
    "parse_family_list",
    # Layout
    "CaptionLayoutEngine",
    "resolve_font_px",
    "wrap_text",
    "line_left",
    # Rendering
    "GlyphRenderer",
    "scaled_stroke_width",
    "scaled_shadow",
    # Validation
    "validate_caption",
    "validate_style",
]
