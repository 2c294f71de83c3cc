# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
FilmFrame - Image Data Models
Raster buffers, crop regions and vintage modes as they flow through
the composition pipeline: decode → crop → grade → caption → export.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator


class RasterImage(BaseModel):
    """
    Owned 8-bit RGBA pixel buffer.
    `pixels` is a C-contiguous uint8 array of shape (height, width, 4);
    filters mutate it in place, geometry always allocates a new one.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    pixels: Any = Field(..., description="np.ndarray uint8 RGBA (H×W×4)")

    @field_validator("pixels")
    @classmethod
    def _check_buffer(cls, v: Any) -> np.ndarray:
        if not isinstance(v, np.ndarray):
            raise ValueError("pixels must be a numpy array")
        if v.dtype != np.uint8 or v.ndim != 3 or v.shape[2] != 4:
            raise ValueError(
                f"pixels must be uint8 with shape (H, W, 4), got {v.dtype} {v.shape}"
            )
        if v.shape[0] == 0 or v.shape[1] == 0:
            raise ValueError("pixels must have non-zero width and height")
        return np.ascontiguousarray(v)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "RasterImage":
        """Wrap an RGB or RGBA uint8 array. RGB gains an opaque alpha channel."""
        if arr.ndim == 3 and arr.shape[2] == 3:
            alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr.astype(np.uint8, copy=False), alpha], axis=2)
        return cls(pixels=arr)

    @classmethod
    def blank(cls, width: int, height: int, rgba=(255, 255, 255, 255)) -> "RasterImage":
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[:] = rgba
        return cls(pixels=pixels)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def copy(self) -> "RasterImage":
        return RasterImage(pixels=self.pixels.copy())

    def to_bytes(self) -> bytes:
        """Raw RGBA buffer, len == width * height * 4."""
        return self.pixels.tobytes()


class CropRegion(BaseModel):
    """
    Rectangular window in source-pixel coordinates with optional rotation.
    The window is expressed in the coordinate space of the image *after*
    the rotation has been applied.
    """
    x: int
    y: int
    width: int
    height: int
    rotation_deg: float = 0.0

    @field_validator("rotation_deg")
    @classmethod
    def _normalise_rotation(cls, v: float) -> float:
        v = float(v) % 360.0
        # -0.0 and float rounding at the upper edge
        return 0.0 if v >= 360.0 or v == 0 else v

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height if self.height > 0 else 0.0

    @property
    def is_rotated(self) -> bool:
        return self.rotation_deg != 0.0


class AspectRatio(BaseModel):
    """Crop aspect preset. value=None means free-form."""
    label: str
    value: Optional[float] = None
    display_ratio: Optional[str] = None


ASPECT_RATIOS: list[AspectRatio] = [
    AspectRatio(label="Free", value=None),
    AspectRatio(label="Square", value=1.0, display_ratio="1:1"),
    AspectRatio(label="Classic", value=4 / 3, display_ratio="4:3"),
    AspectRatio(label="Widescreen", value=16 / 9, display_ratio="16:9"),
    AspectRatio(label="Cinematic", value=1.85, display_ratio="1.85:1"),
]


def fit_crop_to_aspect(
    image_width: int,
    image_height: int,
    ratio: Optional[float],
    rotation_deg: float = 0.0,
) -> CropRegion:
    """
    Largest crop of the given width/height ratio centred inside an image.
    Quarter-turn rotations swap the usable dimensions first.
    ratio=None returns the whole (rotated) image.
    """
    rot = float(rotation_deg) % 360.0
    if rot in (90.0, 270.0):
        image_width, image_height = image_height, image_width

    if ratio is None or ratio <= 0:
        w, h = image_width, image_height
    elif image_width / image_height > ratio:
        h = image_height
        w = int(round(h * ratio))
    else:
        w = image_width
        h = int(round(w / ratio))

    w = min(w, image_width)
    h = min(h, image_height)
    return CropRegion(
        x=(image_width - w) // 2,
        y=(image_height - h) // 2,
        width=w,
        height=h,
        rotation_deg=rotation_deg,
    )


class VintageMode(str, Enum):
    OFF = "off"
    CLASSIC = "classic"
    FADED = "faded"
    WARM = "warm"
    BLACK_WHITE = "blackwhite"

    @property
    def filename_token(self) -> Optional[str]:
        """Suffix token used in export filenames. OFF has none."""
        return _VINTAGE_TOKENS.get(self)


_VINTAGE_TOKENS: dict[VintageMode, str] = {
    VintageMode.CLASSIC: "classic",
    VintageMode.FADED: "faded",
    VintageMode.WARM: "warm",
    VintageMode.BLACK_WHITE: "bw",
}
