# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
FilmFrame - Image Decoder
Validates source image bytes and decodes them into an owned RGBA
RasterImage before they enter the pipeline. Checks size, format
(magic bytes), decodability and resolution.

Raises ImageDecodeError (subclass of ValueError) on any failure.
Decoding is the pipeline's only suspension point: decode_image runs
the codec in a worker thread and is awaited once per composition.
"""

import asyncio
from pathlib import Path

from filmframe.config import get_settings
from filmframe.core.errors import ImageDecodeError
from filmframe.models.image import RasterImage
from filmframe.utils.image_utils import bytes_to_rgba
from filmframe.utils.logger import get_logger

log = get_logger(__name__)

# Supported formats by magic bytes (first few bytes of file)
_MAGIC_BYTES: dict[str, bytes] = {
    "jpeg": b"\xff\xd8\xff",
    "png":  b"\x89PNG",
    "webp": b"RIFF",          # RIFF....WEBP, checked further below
}

# ISO-BMFF brands that identify HEIC/HEIF stills at bytes 8..12
_HEIC_BRANDS = {b"heic", b"heix", b"hevc", b"hevx", b"heim", b"heis", b"mif1", b"msf1"}

# Maximum acceptable resolution (prevents decompression bombs slipping
# past the file-size check due to very high compression ratios)
_MAX_DIMENSION_PX = 16_000


def detect_format(data: bytes) -> str | None:
    """
    Detect image format from magic bytes.
    Returns 'jpeg', 'png', 'webp', 'heic' or None if unrecognised.
    """
    if data[:3] == _MAGIC_BYTES["jpeg"]:
        return "jpeg"
    if data[:4] == _MAGIC_BYTES["png"]:
        return "png"
    # WebP: RIFF????WEBP
    if data[:4] == _MAGIC_BYTES["webp"] and data[8:12] == b"WEBP":
        return "webp"
    # HEIC: ????ftypheic
    if data[4:8] == b"ftyp" and data[8:12] in _HEIC_BRANDS:
        return "heic"
    return None


def decode_image_bytes(data: bytes, label: str = "image") -> RasterImage:
    """
    Validate raw image bytes and return a decoded RGBA RasterImage.

    Checks performed (in order):
      1. Non-empty bytes
      2. File size within configured limit
      3. Magic byte format detection (JPEG / PNG / WebP / HEIC)
      4. Codec decodability
      5. Maximum resolution guard

    Raises:
        ImageDecodeError: On any failure.
    """
    settings = get_settings()

    if not data:
        raise ImageDecodeError(f"The {label} is empty.")

    size_mb = len(data) / (1024 * 1024)
    if len(data) > settings.upload_max_bytes:
        raise ImageDecodeError(
            f"The {label} is {size_mb:.1f} MB, which exceeds the "
            f"maximum allowed size of {settings.upload_max_mb} MB."
        )

    fmt = detect_format(data)
    if fmt is None:
        raise ImageDecodeError(
            f"The {label} format is not supported. "
            "Please use a JPEG, PNG, WebP or HEIC image."
        )

    pixels = bytes_to_rgba(data)
    if pixels is None:
        if fmt == "heic":
            raise ImageDecodeError(
                f"The {label} is HEIC, which the installed image codec cannot decode."
            )
        raise ImageDecodeError(
            f"The {label} could not be decoded. "
            "The file may be corrupted or truncated."
        )

    h, w = pixels.shape[:2]
    if h > _MAX_DIMENSION_PX or w > _MAX_DIMENSION_PX:
        raise ImageDecodeError(
            f"The {label} resolution ({w}×{h}px) exceeds the maximum "
            f"allowed dimension of {_MAX_DIMENSION_PX}px."
        )

    log.debug(
        "image_decoded",
        label=label,
        format=fmt,
        width=w,
        height=h,
        size_mb=round(size_mb, 2),
    )
    return RasterImage(pixels=pixels)


def decode_image_file(path: Path, label: str = "image") -> RasterImage:
    """Read a file from disk and decode it. Missing files raise ImageDecodeError."""
    if not path.is_file():
        raise ImageDecodeError(f"The {label} file was not found at path: {path}")
    return decode_image_bytes(path.read_bytes(), label=label)


async def decode_image(data: bytes, label: str = "image") -> RasterImage:
    """Awaitable decode: runs the codec in a worker thread, single success/failure outcome."""
    return await asyncio.to_thread(decode_image_bytes, data, label)
