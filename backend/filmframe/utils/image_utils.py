# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
FilmFrame - Image I/O and Conversion Utilities
Shared helpers used across decoding, caption rendering and export.
All internal processing uses RGBA uint8 numpy arrays. OpenCV's BGR
order only appears at codec boundaries. Pillow reads EXIF orientation
on decode and otherwise only appears inside glyph rendering.
"""

import io
import re

import cv2
import numpy as np
from PIL import ExifTags, Image, ImageColor


# ─── Codec Boundaries ────────────────────────────────────────────────────────

def bytes_to_rgba(data: bytes) -> np.ndarray | None:
    """
    Decode raw image bytes to an RGBA uint8 array.
    Returns None if OpenCV cannot decode the bytes.
    Grayscale, BGR and BGRA sources are all normalised to RGBA;
    16-bit sources are scaled down to 8 bits. The EXIF Orientation tag
    is applied, so the array is upright as the photo is displayed.
    """
    arr = np.frombuffer(data, dtype=np.uint8)
    # IMREAD_UNCHANGED keeps alpha and bit depth but ignores EXIF orientation
    img = cv2.imdecode(arr, cv2.IMREAD_UNCHANGED)
    if img is None:
        return None
    img = apply_exif_orientation(img, exif_orientation(data))

    if img.dtype == np.uint16:
        img = (img // 257).astype(np.uint8)
    elif img.dtype != np.uint8:
        img = np.clip(img, 0, 255).astype(np.uint8)

    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    if img.shape[2] == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)
    if img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    return None


def exif_orientation(data: bytes) -> int:
    """
    EXIF Orientation tag (1-8) of encoded image bytes, or 1 when absent
    or unreadable.
    """
    try:
        with Image.open(io.BytesIO(data)) as im:
            value = im.getexif().get(ExifTags.Base.Orientation, 1)
    except (OSError, ValueError, Image.DecompressionBombError):
        return 1
    return value if isinstance(value, int) and 1 <= value <= 8 else 1


def apply_exif_orientation(img: np.ndarray, orientation: int) -> np.ndarray:
    """
    Transform a decoded array so it is displayed upright, with the same
    mapping as PIL.ImageOps.exif_transpose. Works for 2-D and channelled
    arrays alike.
    """
    if orientation == 2:
        out = img[:, ::-1]
    elif orientation == 3:
        out = img[::-1, ::-1]
    elif orientation == 4:
        out = img[::-1]
    elif orientation == 5:
        out = np.swapaxes(img, 0, 1)
    elif orientation == 6:
        out = np.rot90(img, k=-1)
    elif orientation == 7:
        out = np.swapaxes(img, 0, 1)[::-1, ::-1]
    elif orientation == 8:
        out = np.rot90(img, k=1)
    else:
        return img
    return np.ascontiguousarray(out)


def rgba_to_png_bytes(img: np.ndarray, compression: int = 9) -> bytes:
    """
    Encode an RGBA or RGB array to PNG bytes (lossless).
    Raises RuntimeError if OpenCV fails to encode.
    """
    if img.shape[2] == 4:
        bgr = cv2.cvtColor(img, cv2.COLOR_RGBA2BGRA)
    else:
        bgr = cv2.cvtColor(img, cv2.COLOR_RGB2BGR)
    success, buf = cv2.imencode(
        ".png", bgr, [cv2.IMWRITE_PNG_COMPRESSION, int(compression)]
    )
    if not success:
        raise RuntimeError("Failed to encode image to PNG bytes.")
    return buf.tobytes()


def rgba_to_jpeg_bytes(img: np.ndarray, quality: int = 92) -> bytes:
    """Encode an RGBA array as JPEG (alpha dropped). Used to build test fixtures."""
    bgr = cv2.cvtColor(img, cv2.COLOR_RGBA2BGR)
    success, buf = cv2.imencode(".jpg", bgr, [cv2.IMWRITE_JPEG_QUALITY, quality])
    if not success:
        raise RuntimeError("Failed to encode image to JPEG bytes.")
    return buf.tobytes()


# ─── Alpha ───────────────────────────────────────────────────────────────────

def flatten_onto(img: np.ndarray, background: tuple[int, int, int]) -> np.ndarray:
    """
    Composite an RGBA array over an opaque background colour.
    Returns an RGB uint8 array. Fully opaque inputs pass through unchanged.
    """
    rgb = img[:, :, :3]
    alpha = img[:, :, 3]
    if np.all(alpha == 255):
        return rgb.copy()

    a = alpha[:, :, np.newaxis].astype(np.float32) / 255.0
    bg = np.asarray(background, dtype=np.float32)
    out = rgb.astype(np.float32) * a + bg * (1.0 - a)
    return np.clip(np.rint(out), 0, 255).astype(np.uint8)


# ─── PIL Bridge ──────────────────────────────────────────────────────────────

def rgba_to_pil(img: np.ndarray) -> Image.Image:
    """Convert an RGBA numpy array to a PIL Image (RGBA mode). Copies the buffer."""
    return Image.fromarray(np.ascontiguousarray(img))


def pil_to_rgba(pil_img: Image.Image) -> np.ndarray:
    """Convert a PIL Image to an RGBA numpy array."""
    return np.array(pil_img.convert("RGBA"))


# ─── Color Parsing ───────────────────────────────────────────────────────────

_RGBA_FUNC = re.compile(
    r"^rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+%?)\s*)?\)$",
    re.IGNORECASE,
)


def parse_css_color(value: str) -> tuple[int, int, int, int]:
    """
    Parse a CSS colour into an (r, g, b, a) tuple of 0-255 ints.

    Handles the forms caption styles use: `#RGB`, `#RRGGBB`, `#RRGGBBAA`,
    named colours, `rgb(r, g, b)` and `rgba(r, g, b, a)` where `a` is the
    CSS float in [0, 1] (or a percentage). Everything else is delegated to
    PIL's ImageColor.

    Raises ValueError on unparseable input.
    """
    text = value.strip()
    m = _RGBA_FUNC.match(text)
    if m:
        r, g, b = (int(round(min(255.0, float(c)))) for c in m.group(1, 2, 3))
        alpha_raw = m.group(4)
        if alpha_raw is None:
            a = 255
        elif alpha_raw.endswith("%"):
            a = int(round(min(100.0, float(alpha_raw[:-1])) / 100.0 * 255))
        else:
            a = int(round(min(1.0, float(alpha_raw)) * 255))
        return r, g, b, a

    rgb = ImageColor.getrgb(text)
    if len(rgb) == 3:
        return rgb[0], rgb[1], rgb[2], 255
    return rgb[0], rgb[1], rgb[2], rgb[3]
