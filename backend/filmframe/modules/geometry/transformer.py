# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
FilmFrame - Geometry Transformer
Applies rotation and crop extraction to a source RasterImage:

  1. Validate   - crop width/height against the configured minimum
  2. Rotate     - exact quarter turns use np.rot90 (90°/270° swap the
                  buffer's width and height); any other angle rotates
                  into a same-size buffer with bilinear sampling and a
                  background fill for samples outside the source
  3. Extract    - copy the {x, y, width, height} window of the rotated
                  buffer into a freshly allocated output buffer

The source buffer is never mutated.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from filmframe.config import get_settings
from filmframe.core.errors import InvalidCropSizeError, OutOfBoundsError
from filmframe.models.image import CropRegion, RasterImage
from filmframe.utils.geometry_utils import (
    quarter_turns,
    rect_within,
    rotate_image_90,
    rotate_image_same_size,
    rotated_size,
)
from filmframe.utils.image_utils import parse_css_color
from filmframe.utils.logger import get_logger

log = get_logger(__name__)


class GeometryTransformer:
    """
    Rotation + crop stage.

    Args:
        min_crop_size:   Minimum crop width and height in pixels
                         (defaults to settings.min_crop_size).
        background_fill: CSS colour for out-of-bounds samples after a free
                         rotation (defaults to settings.background_fill).
    """

    def __init__(
        self,
        min_crop_size: Optional[int] = None,
        background_fill: Optional[str] = None,
    ) -> None:
        settings = get_settings()
        self.min_crop_size = (
            settings.min_crop_size if min_crop_size is None else min_crop_size
        )
        self.background_fill = parse_css_color(
            background_fill or settings.background_fill
        )

    def validate(self, crop: CropRegion) -> None:
        if crop.width < self.min_crop_size or crop.height < self.min_crop_size:
            raise InvalidCropSizeError(
                f"Crop {crop.width}×{crop.height}px is below the minimum "
                f"crop size of {self.min_crop_size}×{self.min_crop_size}px."
            )

    def rotate(self, source: RasterImage, angle_deg: float) -> np.ndarray:
        """Rotate the full source clockwise about its centre. Returns a new array."""
        k = quarter_turns(angle_deg)
        if k == 0:
            return source.pixels
        if k is not None:
            return rotate_image_90(source.pixels, k)
        return rotate_image_same_size(source.pixels, angle_deg, self.background_fill)

    def apply(self, source: RasterImage, crop: CropRegion) -> RasterImage:
        """
        Rotate (if requested) and crop the source image.

        Returns:
            New RasterImage of exactly crop.width × crop.height.

        Raises:
            InvalidCropSizeError: crop smaller than the configured minimum.
            OutOfBoundsError:     crop rectangle outside the rotated source.
        """
        self.validate(crop)

        bounds_w, bounds_h = rotated_size(source.width, source.height, crop.rotation_deg)
        if not rect_within(crop.x, crop.y, crop.width, crop.height, bounds_w, bounds_h):
            raise OutOfBoundsError(
                f"Crop ({crop.x}, {crop.y}, {crop.width}×{crop.height}) does not fit "
                f"the {bounds_w}×{bounds_h}px image after {crop.rotation_deg:g}° rotation."
            )

        rotated = self.rotate(source, crop.rotation_deg) if crop.is_rotated else source.pixels
        window = rotated[crop.y:crop.y + crop.height, crop.x:crop.x + crop.width]
        out = np.array(window, dtype=np.uint8, copy=True, order="C")

        log.debug(
            "geometry_applied",
            source_size=source.size,
            rotation_deg=crop.rotation_deg,
            rotated_size=(bounds_w, bounds_h),
            crop=(crop.x, crop.y, crop.width, crop.height),
        )
        return RasterImage(pixels=out)
