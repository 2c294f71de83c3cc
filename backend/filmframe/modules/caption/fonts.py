# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
FilmFrame - Font Resolver
Maps a CSS font-family list ("Arial, sans-serif") and a font style to a
scalable Pillow font. Lookup order:

  1. settings.font_path, when configured
  2. well-known TrueType file names for each family in the list, found
     by Pillow in the system font directories
  3. Pillow's bundled scalable default font

Loaded fonts are cached per (family list, style, pixel size).
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from PIL import ImageFont

from filmframe.config import get_settings
from filmframe.models.caption import FontStyle
from filmframe.utils.logger import get_logger

log = get_logger(__name__)

_SANS = {
    FontStyle.NORMAL: ["DejaVuSans.ttf", "LiberationSans-Regular.ttf", "arial.ttf"],
    FontStyle.ITALIC: ["DejaVuSans-Oblique.ttf", "LiberationSans-Italic.ttf", "ariali.ttf"],
}
_SERIF = {
    FontStyle.NORMAL: ["DejaVuSerif.ttf", "LiberationSerif-Regular.ttf", "times.ttf"],
    FontStyle.ITALIC: ["DejaVuSerif-Italic.ttf", "LiberationSerif-Italic.ttf", "timesi.ttf"],
}
_MONO = {
    FontStyle.NORMAL: ["DejaVuSansMono.ttf", "LiberationMono-Regular.ttf", "cour.ttf"],
    FontStyle.ITALIC: ["DejaVuSansMono-Oblique.ttf", "LiberationMono-Italic.ttf", "couri.ttf"],
}

# Family name (lower-case) → style → candidate file names, best first
FAMILY_FILES: dict[str, dict[FontStyle, list[str]]] = {
    "arial": {
        FontStyle.NORMAL: ["arial.ttf", "Arial.ttf", "LiberationSans-Regular.ttf"],
        FontStyle.ITALIC: ["ariali.ttf", "Arial Italic.ttf", "LiberationSans-Italic.ttf"],
    },
    "helvetica": {
        FontStyle.NORMAL: ["Helvetica.ttc", "LiberationSans-Regular.ttf", "arial.ttf"],
        FontStyle.ITALIC: ["LiberationSans-Italic.ttf", "ariali.ttf"],
    },
    "verdana": {
        FontStyle.NORMAL: ["verdana.ttf", "Verdana.ttf", "DejaVuSans.ttf"],
        FontStyle.ITALIC: ["verdanai.ttf", "Verdana Italic.ttf", "DejaVuSans-Oblique.ttf"],
    },
    "times new roman": {
        FontStyle.NORMAL: ["times.ttf", "Times New Roman.ttf", "LiberationSerif-Regular.ttf"],
        FontStyle.ITALIC: ["timesi.ttf", "Times New Roman Italic.ttf", "LiberationSerif-Italic.ttf"],
    },
    "georgia": {
        FontStyle.NORMAL: ["georgia.ttf", "Georgia.ttf", "DejaVuSerif.ttf"],
        FontStyle.ITALIC: ["georgiai.ttf", "Georgia Italic.ttf", "DejaVuSerif-Italic.ttf"],
    },
    "courier new": {
        FontStyle.NORMAL: ["cour.ttf", "Courier New.ttf", "LiberationMono-Regular.ttf"],
        FontStyle.ITALIC: ["couri.ttf", "Courier New Italic.ttf", "LiberationMono-Italic.ttf"],
    },
    "impact": {
        FontStyle.NORMAL: ["impact.ttf", "Impact.ttf"],
        FontStyle.ITALIC: ["impact.ttf", "Impact.ttf"],
    },
    "sans-serif": _SANS,
    "serif": _SERIF,
    "monospace": _MONO,
}
FAMILY_FILES["times"] = FAMILY_FILES["times new roman"]
FAMILY_FILES["courier"] = FAMILY_FILES["courier new"]


def parse_family_list(font_family: str) -> tuple[str, ...]:
    """'"Times New Roman", serif' → ('times new roman', 'serif')"""
    names = []
    for part in font_family.split(","):
        name = part.strip().strip("'\"").strip().lower()
        if name:
            names.append(name)
    return tuple(names)


@lru_cache(maxsize=64)
def _load_font(
    families: tuple[str, ...],
    style: FontStyle,
    size_px: int,
    font_path: Optional[str],
) -> ImageFont.FreeTypeFont:
    if font_path:
        try:
            return ImageFont.truetype(font_path, size_px)
        except OSError as exc:
            log.warning("font_path_unusable", font_path=font_path, error=str(exc))

    for family in families:
        for filename in FAMILY_FILES.get(family, {}).get(style, []):
            try:
                font = ImageFont.truetype(filename, size_px)
            except OSError:
                continue
            log.debug("font_resolved", family=family, file=filename, size_px=size_px)
            return font

    log.debug("font_fallback_default", families=families, size_px=size_px)
    return ImageFont.load_default(size=size_px)


class FontResolver:
    """Resolves caption fonts at a given pixel size."""

    def __init__(self, font_path: Optional[Path] = None) -> None:
        path = font_path if font_path is not None else get_settings().font_path
        self.font_path = str(path) if path else None

    def resolve(
        self,
        font_family: str,
        font_style: FontStyle,
        size_px: float,
    ) -> ImageFont.FreeTypeFont:
        size = max(1, int(round(size_px)))
        return _load_font(
            parse_family_list(font_family),
            FontStyle(font_style),
            size,
            self.font_path,
        )


def clear_font_cache() -> None:
    _load_font.cache_clear()
