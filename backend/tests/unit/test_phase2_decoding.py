# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Phase 2 tests: source image decoding.
Fixtures are encoded in memory with OpenCV. No files on disk except
where the file-path entry point is tested.
"""

import cv2
import numpy as np
import pytest

# ─── Helpers ─────────────────────────────────────────────────────────────────

def _make_rgba(w: int = 64, h: int = 48, rgba=(200, 40, 10, 255)) -> np.ndarray:
    img = np.empty((h, w, 4), dtype=np.uint8)
    img[:] = rgba
    return img


def _make_png(w: int = 64, h: int = 48, rgba=(200, 40, 10, 255)) -> bytes:
    from filmframe.utils.image_utils import rgba_to_png_bytes
    return rgba_to_png_bytes(_make_rgba(w, h, rgba))


def _make_jpeg(w: int = 64, h: int = 48) -> bytes:
    from filmframe.utils.image_utils import rgba_to_jpeg_bytes
    return rgba_to_jpeg_bytes(_make_rgba(w, h), quality=95)


def _settings(**overrides):
    from filmframe.config import Settings
    return Settings(_env_file=None, **overrides)


# ─── Format Detection ────────────────────────────────────────────────────────

def test_detect_format_png_and_jpeg():
    from filmframe.modules.decoding import detect_format
    assert detect_format(_make_png()) == "png"
    assert detect_format(_make_jpeg()) == "jpeg"


def test_detect_format_webp_and_heic_headers():
    from filmframe.modules.decoding import detect_format
    assert detect_format(b"RIFF\x00\x00\x00\x00WEBPVP8 ") == "webp"
    assert detect_format(b"\x00\x00\x00\x18ftypheic\x00\x00\x00\x00") == "heic"
    assert detect_format(b"\x00\x00\x00\x18ftypmif1\x00\x00\x00\x00") == "heic"


def test_detect_format_unknown():
    from filmframe.modules.decoding import detect_format
    assert detect_format(b"GIF89a....") is None
    assert detect_format(b"RIFF\x00\x00\x00\x00WAVE") is None


# ─── Decoding ────────────────────────────────────────────────────────────────

def test_decode_png_is_exact():
    from filmframe.modules.decoding import decode_image_bytes
    img = decode_image_bytes(_make_png(rgba=(12, 34, 56, 255)))
    assert img.size == (64, 48)
    assert np.all(img.pixels == np.array([12, 34, 56, 255], dtype=np.uint8))


def test_decode_png_keeps_alpha():
    from filmframe.modules.decoding import decode_image_bytes
    img = decode_image_bytes(_make_png(rgba=(255, 0, 0, 100)))
    assert tuple(img.pixels[0, 0]) == (255, 0, 0, 100)


def test_decode_jpeg_is_opaque_rgba():
    from filmframe.modules.decoding import decode_image_bytes
    img = decode_image_bytes(_make_jpeg(32, 20))
    assert img.pixels.shape == (20, 32, 4)
    assert np.all(img.pixels[..., 3] == 255)
    # JPEG is lossy; colour survives approximately
    assert abs(int(img.pixels[10, 16, 0]) - 200) < 12


def test_decode_grayscale_png_expands_to_rgba():
    from filmframe.modules.decoding import decode_image_bytes
    gray = np.full((10, 10), 77, dtype=np.uint8)
    ok, buf = cv2.imencode(".png", gray)
    assert ok
    img = decode_image_bytes(buf.tobytes())
    assert tuple(img.pixels[5, 5]) == (77, 77, 77, 255)


# ─── EXIF Orientation ────────────────────────────────────────────────────────

def _with_orientation(pixels: np.ndarray, orientation: int, fmt: str) -> bytes:
    """Encode RGB pixels with Pillow, tagging them with an EXIF Orientation."""
    import io
    from PIL import Image
    exif = Image.Exif()
    exif[0x0112] = orientation
    buf = io.BytesIO()
    Image.fromarray(pixels, "RGB").save(buf, fmt, exif=exif)
    return buf.getvalue()


def test_decode_jpeg_applies_rotate_90_orientation():
    from filmframe.modules.decoding import decode_image_bytes

    # 40×20 stored landscape: left half red, right half blue
    stored = np.zeros((20, 40, 3), dtype=np.uint8)
    stored[:, :20] = (255, 0, 0)
    stored[:, 20:] = (0, 0, 255)

    img = decode_image_bytes(_with_orientation(stored, 6, "JPEG"))

    # Orientation 6 displays rotated 90° clockwise: the left half ends up on top
    assert img.size == (20, 40)
    top, bottom = img.pixels[5, 10], img.pixels[35, 10]
    assert top[0] > 200 and top[2] < 60
    assert bottom[2] > 200 and bottom[0] < 60


@pytest.mark.parametrize("orientation", range(1, 9))
def test_orientation_matches_pillow_exif_transpose(orientation):
    import io
    from PIL import Image, ImageOps
    from filmframe.utils.image_utils import bytes_to_rgba

    rng = np.random.default_rng(orientation)
    stored = rng.integers(0, 256, size=(3, 5, 3), dtype=np.uint8)
    data = _with_orientation(stored, orientation, "PNG")

    with Image.open(io.BytesIO(data)) as im:
        expected = np.array(ImageOps.exif_transpose(im).convert("RGBA"))

    assert np.array_equal(bytes_to_rgba(data), expected)


def test_missing_orientation_reads_as_upright():
    from filmframe.utils.image_utils import exif_orientation
    assert exif_orientation(_make_png()) == 1
    assert exif_orientation(b"not an image") == 1


def test_decode_empty_raises():
    from filmframe.core.errors import ImageDecodeError
    from filmframe.modules.decoding import decode_image_bytes
    with pytest.raises(ImageDecodeError, match="empty"):
        decode_image_bytes(b"")


def test_decode_unsupported_format_raises():
    from filmframe.core.errors import ImageDecodeError
    from filmframe.modules.decoding import decode_image_bytes
    with pytest.raises(ImageDecodeError, match="not supported"):
        decode_image_bytes(b"GIF89a" + b"\x00" * 64)


def test_decode_corrupt_png_raises():
    from filmframe.core.errors import ImageDecodeError
    from filmframe.modules.decoding import decode_image_bytes
    with pytest.raises(ImageDecodeError, match="could not be decoded"):
        decode_image_bytes(b"\x89PNG\r\n\x1a\n" + b"\x00garbage" * 16)


def test_decode_heic_without_codec_raises():
    from filmframe.core.errors import ImageDecodeError
    from filmframe.modules.decoding import decode_image_bytes
    with pytest.raises(ImageDecodeError, match="HEIC"):
        decode_image_bytes(b"\x00\x00\x00\x18ftypheic" + b"\x00" * 64)


def test_decode_oversized_raises(monkeypatch):
    from filmframe.core.errors import ImageDecodeError
    from filmframe.modules.decoding import image_decoder
    monkeypatch.setattr(image_decoder, "get_settings", lambda: _settings(upload_max_mb=0))
    with pytest.raises(ImageDecodeError, match="exceeds"):
        image_decoder.decode_image_bytes(_make_png())


def test_decode_image_file(tmp_path):
    from filmframe.modules.decoding import decode_image_file
    path = tmp_path / "photo.png"
    path.write_bytes(_make_png(16, 16))
    assert decode_image_file(path).size == (16, 16)


def test_decode_image_file_missing(tmp_path):
    from filmframe.core.errors import ImageDecodeError
    from filmframe.modules.decoding import decode_image_file
    with pytest.raises(ImageDecodeError, match="not found"):
        decode_image_file(tmp_path / "nope.png")


# ─── Async Entry Point ───────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_decode_image_async():
    from filmframe.modules.decoding import decode_image
    img = await decode_image(_make_png(20, 10))
    assert img.size == (20, 10)


@pytest.mark.asyncio
async def test_decode_image_async_propagates_error():
    from filmframe.core.errors import ImageDecodeError
    from filmframe.modules.decoding import decode_image
    with pytest.raises(ImageDecodeError):
        await decode_image(b"")
