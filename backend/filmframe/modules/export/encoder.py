# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
FilmFrame - Export Encoder
Serialises a CompositedImage to lossless PNG bytes and derives the
download filename from the transforms that were applied:

    photo.jpg + [cropped, captioned, classic] → photo_cropped_captioned_classic.png
    photo.jpg + []                            → photo.png

Transparent pixels are flattened onto white before encoding.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

import cv2

from filmframe.config import get_settings
from filmframe.core.errors import EncodeError
from filmframe.models.composition import (
    SUFFIX_ORDER,
    CompositedImage,
    ExportResult,
    SuffixToken,
)
from filmframe.utils.image_utils import flatten_onto, rgba_to_png_bytes
from filmframe.utils.logger import get_logger

log = get_logger(__name__)

_EXTENSION = re.compile(r"\.[^/.]+$")
_FLATTEN_BACKGROUND = (255, 255, 255)


def derive_filename(base_name: str, tokens: Iterable[SuffixToken]) -> str:
    """
    Strip the extension from base_name and append the applied tokens in
    canonical order (cropped, captioned, vintage), joined by underscores.
    """
    stem = _EXTENSION.sub("", base_name) or "image"
    present = {SuffixToken(t) for t in tokens}
    ordered = [t.value for t in SUFFIX_ORDER if t in present]
    if not ordered:
        return f"{stem}.png"
    return f"{stem}_{'_'.join(ordered)}.png"


class ExportEncoder:
    """Lossless PNG export for composited images."""

    media_type = "image/png"

    def __init__(self, compression: Optional[int] = None) -> None:
        level = get_settings().png_compression if compression is None else compression
        self.compression = max(0, min(9, int(level)))

    def encode(self, image: CompositedImage) -> bytes:
        """
        Flatten and encode to PNG.

        Raises:
            EncodeError: if the encoder produces no output.
        """
        try:
            flat = flatten_onto(image.image.pixels, _FLATTEN_BACKGROUND)
            data = rgba_to_png_bytes(flat, compression=self.compression)
        except (cv2.error, RuntimeError, ValueError) as exc:
            raise EncodeError(f"PNG encoding failed: {exc}") from exc
        if not data:
            raise EncodeError("PNG encoder returned no data.")
        return data

    def export(self, image: CompositedImage, base_name: Optional[str] = None) -> ExportResult:
        data = self.encode(image)
        filename = derive_filename(base_name or image.base_name, image.tokens)
        log.info(
            "export_complete",
            filename=filename,
            size_bytes=len(data),
            width=image.width,
            height=image.height,
        )
        return ExportResult(
            filename=filename,
            data=data,
            media_type=self.media_type,
            width=image.width,
            height=image.height,
        )
