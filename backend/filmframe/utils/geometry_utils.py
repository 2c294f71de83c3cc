# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
FilmFrame - Geometry Utilities
Rotation and rectangle helpers used by the geometry transformer.
Angles are in degrees, clockwise, matching how the crop tool
displays rotation on screen.
"""

import cv2
import numpy as np


# ─── Rotation ────────────────────────────────────────────────────────────────

QUARTER_TURNS: dict[float, int] = {90.0: 1, 180.0: 2, 270.0: 3}


def normalize_angle(angle_deg: float) -> float:
    """Map any angle into [0, 360)."""
    angle = float(angle_deg) % 360.0
    return 0.0 if angle >= 360.0 else angle


def quarter_turns(angle_deg: float) -> int | None:
    """
    Number of clockwise quarter turns for an exact multiple of 90°,
    or None for any other angle. 0° returns 0.
    """
    angle = normalize_angle(angle_deg)
    if angle == 0.0:
        return 0
    return QUARTER_TURNS.get(angle)


def rotate_image_90(img: np.ndarray, k: int) -> np.ndarray:
    """
    Rotate image by k * 90 degrees clockwise.
    k=1 and k=3 swap width and height. Lossless and contiguous.
    """
    return np.ascontiguousarray(np.rot90(img, k=-(k % 4)))


def rotate_image_same_size(
    img: np.ndarray,
    angle_deg: float,
    fill: tuple[int, ...],
) -> np.ndarray:
    """
    Rotate image clockwise by angle_deg around its centre into a buffer of
    the same size. Bilinear sampling; samples falling outside the source
    take the `fill` value.
    """
    h, w = img.shape[:2]
    cx, cy = (w - 1) / 2.0, (h - 1) / 2.0
    # OpenCV treats positive angles as counter-clockwise
    M = cv2.getRotationMatrix2D((cx, cy), -float(angle_deg), 1.0)
    return cv2.warpAffine(
        img, M, (w, h),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=tuple(int(c) for c in fill),
    )


def rotated_size(width: int, height: int, angle_deg: float) -> tuple[int, int]:
    """Size of the buffer a rotation produces: swapped for 90°/270°, else unchanged."""
    if quarter_turns(angle_deg) in (1, 3):
        return height, width
    return width, height


# ─── Rectangles ──────────────────────────────────────────────────────────────

def rect_within(
    x: int, y: int, w: int, h: int,
    bounds_w: int, bounds_h: int,
) -> bool:
    """True if the (x, y, w, h) rectangle lies fully inside [0, bounds_w) × [0, bounds_h)."""
    return x >= 0 and y >= 0 and w > 0 and h > 0 and x + w <= bounds_w and y + h <= bounds_h
