# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
FilmFrame - Vintage Filter Engine
Per-pixel colour grades that emulate film stocks. Each mode is a chain
of pointwise steps on the R, G, B channels (alpha is never touched):

  Classic     - grain, blues toward cyan, cooled greens, warm nudge,
                gentle S-curve, natural saturation
  Faded       - grain, lifted blacks, compressed contrast, slight
                desaturation, 5% warm overlay tint
  Warm        - grain, reds toward orange, 40% sepia blend, strong
                S-curve, saturation boost, warm temperature shift
  BlackWhite  - orthochromatic luma, grain, strongest S-curve, zone
                separation, shadow-weighted extra grain

Every step clips channel values back into [0, 255]. The only source of
non-determinism is the grain term, drawn from an injected
numpy Generator so a seeded engine reproduces its output byte for byte.

Images are processed in horizontal tiles of _TILE_ROWS rows to bound
float64 working memory on large photos. Tiles are visited top to bottom
so the random stream is consumed in a fixed order.
"""

from __future__ import annotations

from typing import Callable, Optional

import numpy as np

from filmframe.models.image import RasterImage, VintageMode
from filmframe.utils.logger import get_logger

log = get_logger(__name__)

_TILE_ROWS = 512

# Peak-to-peak amplitude of the per-pixel grain term
GRAIN_AMPLITUDE = 25.0

# Rec.601 luma weights
_LUMA = (0.299, 0.587, 0.114)
# Green-heavy mix, like orthochromatic B&W film
_ORTHO_LUMA = (0.25, 0.65, 0.1)

# Faded overlay tint, rgba(139, 120, 93, 0.05)
_FADED_TINT = np.array([139.0, 120.0, 93.0])
_FADED_TINT_OPACITY = 0.05

FilterFn = Callable[[np.ndarray, np.random.Generator], np.ndarray]


# ─── Shared Helpers ──────────────────────────────────────────────────────────

def _clip(a: np.ndarray) -> np.ndarray:
    return np.clip(a, 0.0, 255.0, out=a)


def s_curve(value, strength: float):
    """
    Film-like contrast curve.
    Normalises value to [0, 1], applies smoothstep v²(3 - 2v), blends it
    with the input by `strength` (0 = identity, 1 = full smoothstep)
    and scales back to [0, 255]. Accepts scalars or arrays.
    """
    v = np.asarray(value, dtype=np.float64) / 255.0
    curve = v * v * (3.0 - 2.0 * v)
    return (v * (1.0 - strength) + curve * strength) * 255.0


def _grain(rng: np.random.Generator, shape: tuple[int, ...]) -> np.ndarray:
    """Uniform noise in [-GRAIN_AMPLITUDE/2, GRAIN_AMPLITUDE/2)."""
    return (rng.random(shape) - 0.5) * GRAIN_AMPLITUDE


def _luma(r: np.ndarray, g: np.ndarray, b: np.ndarray, weights=_LUMA) -> np.ndarray:
    return r * weights[0] + g * weights[1] + b * weights[2]


def _saturate(
    r: np.ndarray, g: np.ndarray, b: np.ndarray, factor: float
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Scale each channel's distance from luma by factor (<1 desaturates)."""
    gray = _luma(r, g, b)
    return (
        _clip(gray + (r - gray) * factor),
        _clip(gray + (g - gray) * factor),
        _clip(gray + (b - gray) * factor),
    )


def _overlay_blend(base: np.ndarray, tint: np.ndarray, opacity: float) -> np.ndarray:
    """
    Composite a flat colour over `base` with the 'overlay' blend mode at
    the given opacity. base is (..., 3) in [0, 255].
    """
    b = base / 255.0
    s = tint / 255.0
    blended = np.where(b <= 0.5, 2.0 * b * s, 1.0 - 2.0 * (1.0 - b) * (1.0 - s))
    return _clip(base * (1.0 - opacity) + blended * 255.0 * opacity)


def _add_grain(
    rgb: np.ndarray, rng: np.random.Generator
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """One noise sample per pixel, added equally to all three channels."""
    noise = _grain(rng, rgb.shape[:2])
    return (
        _clip(rgb[..., 0] + noise),
        _clip(rgb[..., 1] + noise),
        _clip(rgb[..., 2] + noise),
    )


# ─── Modes ───────────────────────────────────────────────────────────────────

def classic_filter(rgb: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    r, g, b = _add_grain(rgb, rng)

    # Blues push slightly toward cyan
    g = _clip(g + (b / 255.0) * 0.06 * 15.0)

    # Greens cool off
    b = _clip(b - (g / 255.0) * 8.0)
    g = _clip(g * 1.02)

    # Warm tones nudged toward red/orange
    warmth = np.maximum(r - b, 0.0) / 255.0
    r = _clip(r + warmth * 6.0)
    g = _clip(g + warmth * 3.0)

    r = _clip(s_curve(r, 0.05))
    g = _clip(s_curve(g, 0.05))
    b = _clip(s_curve(b, 0.05))

    r, g, b = _saturate(r, g, b, 0.98)
    return np.stack([r, g, b], axis=-1)


def faded_filter(rgb: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    r, g, b = _add_grain(rgb, rng)

    # Lift the black point, more in the shadows
    r = _clip(r + 25.0 * (1.0 - r / 255.0))
    g = _clip(g + 25.0 * (1.0 - g / 255.0))
    b = _clip(b + 25.0 * (1.0 - b / 255.0))

    # Compress dynamic range toward middle grey
    r = _clip(128.0 + (r - 128.0) * 0.85)
    g = _clip(128.0 + (g - 128.0) * 0.85)
    b = _clip(128.0 + (b - 128.0) * 0.85)

    # 15% toward luma
    r, g, b = _saturate(r, g, b, 0.85)

    return _overlay_blend(np.stack([r, g, b], axis=-1), _FADED_TINT, _FADED_TINT_OPACITY)


def warm_filter(rgb: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    r, g, b = _add_grain(rgb, rng)

    # Reds turn orange
    g = _clip(g + (r / 255.0) * 25.0)

    lum = _luma(r, g, b)
    sepia_r = np.minimum(255.0, lum * 1.4)
    sepia_g = np.minimum(255.0, lum * 1.2)
    sepia_b = np.minimum(255.0, lum * 0.9)
    r = _clip(r * 0.6 + sepia_r * 0.4)
    g = _clip(g * 0.6 + sepia_g * 0.4)
    b = _clip(b * 0.6 + sepia_b * 0.4)

    r = _clip(s_curve(r, 0.2))
    g = _clip(s_curve(g, 0.2))
    b = _clip(s_curve(b, 0.2))

    r, g, b = _saturate(r, g, b, 1.15)

    r = _clip(r * 1.05)
    b = _clip(b * 0.95)
    return np.stack([r, g, b], axis=-1)


def black_white_filter(rgb: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    v = _luma(rgb[..., 0], rgb[..., 1], rgb[..., 2], _ORTHO_LUMA)
    v = _clip(v + _grain(rng, v.shape))

    v = _clip(s_curve(v, 0.25))

    # Zone separation: brighter highlights, deeper shadows
    v = np.where(v > 180.0, v * 1.1, np.where(v < 75.0, v * 0.9, v))
    v = _clip(v)

    # Grain shows more in the shadows
    boost = (255.0 - v) / 255.0 * 0.3
    v = _clip(v + (rng.random(v.shape) - 0.5) * boost * 20.0)

    return np.stack([v, v, v], axis=-1)


_MODE_FILTERS: dict[VintageMode, FilterFn] = {
    VintageMode.CLASSIC: classic_filter,
    VintageMode.FADED: faded_filter,
    VintageMode.WARM: warm_filter,
    VintageMode.BLACK_WHITE: black_white_filter,
}


# ─── Engine ──────────────────────────────────────────────────────────────────

class VintageFilterEngine:
    """
    Applies one VintageMode to a RasterImage in place.

    Args:
        rng:  Grain source. Any numpy Generator; pass one built from a
              fixed seed for reproducible output.
        seed: Convenience alternative to `rng`; ignored when rng is given.
    """

    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def apply(self, image: RasterImage, mode: Optional[VintageMode]) -> None:
        if mode is None or mode == VintageMode.OFF:
            return

        fn = _MODE_FILTERS[VintageMode(mode)]
        pixels = image.pixels
        height = pixels.shape[0]

        for top in range(0, height, _TILE_ROWS):
            tile = pixels[top:top + _TILE_ROWS, :, :3]
            graded = fn(tile.astype(np.float64), self.rng)
            tile[...] = np.rint(_clip(graded)).astype(np.uint8)

        log.debug(
            "vintage_applied",
            mode=VintageMode(mode).value,
            width=image.width,
            height=height,
        )
