# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Phase 5 tests: caption validation, layout and glyph rendering.
Layout tests use a fixed-advance fake font so wrapping is exact;
rendering tests use whatever font Pillow resolves on the machine.
"""

import math

import numpy as np
import pytest

LONG_SENTENCE = (
    "It was the best of times, it was the worst of times, "
    "it was the age of wisdom, it was the age of foolishness"
)

# ─── Helpers ─────────────────────────────────────────────────────────────────

class _FixedAdvanceFont:
    """Every character is 10px wide."""

    def getlength(self, text: str) -> float:
        return 10.0 * len(text)


class _FixedFonts:
    def resolve(self, font_family, font_style, size_px):
        return _FixedAdvanceFont()


def _make_engine(fake: bool = True):
    from filmframe.modules.caption import CaptionLayoutEngine
    return CaptionLayoutEngine(_FixedFonts() if fake else None)


def _make_canvas(w: int = 800, h: int = 600, rgba=(128, 128, 128, 255)):
    from filmframe.models.image import RasterImage
    return RasterImage.blank(w, h, rgba)


def _style(**overrides):
    from filmframe.models.caption import CaptionStyle
    return CaptionStyle(**overrides)


# ─── Validation ──────────────────────────────────────────────────────────────

def test_validate_default_caption_passes():
    from filmframe.models.caption import Caption
    from filmframe.modules.caption import validate_caption
    validate_caption(Caption(text="THE END"))


def test_validate_text_too_long():
    from filmframe.core.errors import ValidationError
    from filmframe.models.caption import Caption
    from filmframe.modules.caption import validate_caption
    validate_caption(Caption(text="x" * 200))
    with pytest.raises(ValidationError, match="exceeds"):
        validate_caption(Caption(text="x" * 201))


@pytest.mark.parametrize("overrides", [
    {"stroke_width": -1.0},
    {"shadow_blur": -0.5},
    {"line_height": 0.0},
    {"shadow_offset_x": math.inf},
    {"stroke_width": math.nan},
    {"color": "not-a-colour"},
    {"shadow_color": "rgba(0, 0"},
    {"font_family": "   "},
])
def test_validate_style_rejects(overrides):
    from filmframe.core.errors import ValidationError
    from filmframe.modules.caption import validate_style
    with pytest.raises(ValidationError):
        validate_style(_style(**overrides))


# ─── Font Resolution ─────────────────────────────────────────────────────────

def test_parse_family_list():
    from filmframe.modules.caption import parse_family_list
    assert parse_family_list('"Times New Roman", serif') == ("times new roman", "serif")
    assert parse_family_list("Arial, , sans-serif") == ("arial", "sans-serif")


def test_font_resolver_always_returns_a_font():
    from filmframe.models.caption import FontStyle
    from filmframe.modules.caption import FontResolver
    font = FontResolver().resolve("NoSuchFamily, AlsoMissing", FontStyle.ITALIC, 24)
    assert font.getlength("abc") > 0


def test_font_resolver_bad_font_path_falls_back(tmp_path):
    from filmframe.models.caption import FontStyle
    from filmframe.modules.caption import FontResolver
    resolver = FontResolver(font_path=tmp_path / "missing.ttf")
    assert resolver.resolve("Arial", FontStyle.NORMAL, 20).getlength("a") > 0


# ─── Font Size ───────────────────────────────────────────────────────────────

def test_resolve_font_px_percent_of_width():
    from filmframe.modules.caption import resolve_font_px
    assert resolve_font_px(_style(font_size_percent=4), 800) == pytest.approx(32.0)


def test_resolve_font_px_minimum():
    from filmframe.modules.caption import resolve_font_px
    assert resolve_font_px(_style(font_size_percent=1), 400) == pytest.approx(12.0)


def test_resolve_font_px_maximum_is_ten_percent():
    from filmframe.modules.caption import resolve_font_px
    # Percent is clamped to 10 by the model, so 10% is the ceiling
    assert resolve_font_px(_style(font_size_percent=50), 1000) == pytest.approx(100.0)


# ─── Wrapping ────────────────────────────────────────────────────────────────

def test_wrap_greedy_fills_lines():
    from filmframe.modules.caption import wrap_text
    lines = wrap_text("aaa bbb ccc ddd", _FixedAdvanceFont(), 70)
    assert lines == ["aaa bbb", "ccc ddd"]


def test_wrap_overlong_word_stays_alone():
    from filmframe.modules.caption import wrap_text
    lines = wrap_text("hi supercalifragilistic yo", _FixedAdvanceFont(), 50)
    assert lines == ["hi", "supercalifragilistic", "yo"]


def test_wrap_respects_newlines():
    from filmframe.modules.caption import wrap_text
    assert wrap_text("THE\nEND", _FixedAdvanceFont(), 1000) == ["THE", "END"]


def test_wrap_collapses_whitespace():
    from filmframe.modules.caption import wrap_text
    assert wrap_text("a    b", _FixedAdvanceFont(), 1000) == ["a b"]


def test_long_sentence_wraps_within_eighty_percent():
    from filmframe.modules.caption import wrap_text
    lines = _make_engine(fake=False).layout(LONG_SENTENCE, _style(), 400, 300).lines
    font = _make_engine(fake=False).font_for(_style(), 16.0)
    assert len(lines) > 1
    for line in lines:
        assert font.getlength(line) <= 320
    assert " ".join(lines) == " ".join(LONG_SENTENCE.split())
    assert wrap_text(LONG_SENTENCE, font, 320) == lines


# ─── Layout ──────────────────────────────────────────────────────────────────

def test_layout_single_line_centred_on_position():
    layout = _make_engine().layout("THE END", _style(), 400, 300)

    assert layout.lines == ["THE END"]
    assert layout.font_px == pytest.approx(16.0)
    assert layout.line_height_px == pytest.approx(16.0 * 1.4)
    assert layout.line_widths == [70.0]
    x, y = layout.line_origins[0]
    assert x == pytest.approx(200.0)
    # Single line: its middle sits half a line above the requested y
    assert y == pytest.approx(225.0 - layout.line_height_px / 2.0)
    assert y == pytest.approx(layout.origin_y)


def test_layout_multi_line_block_centred_vertically():
    from filmframe.models.caption import CaptionPosition
    position = CaptionPosition(x_percent=50, y_percent=50)
    layout = _make_engine().layout("aaa\nbbb\nccc", _style(), 400, 300, position)

    lh = layout.line_height_px
    ys = [oy for _, oy in layout.line_origins]
    assert ys[0] == pytest.approx(layout.origin_y)
    assert ys[0] == pytest.approx(150.0 - 1.5 * lh)
    assert ys[1] == pytest.approx(150.0 - 0.5 * lh)
    assert ys[2] == pytest.approx(150.0 + 0.5 * lh)
    assert layout.total_height == pytest.approx(3 * lh)


def test_line_left_alignment():
    from filmframe.models.caption import TextAlignment
    from filmframe.modules.caption import line_left
    assert line_left(100, 40, TextAlignment.LEFT) == 100
    assert line_left(100, 40, TextAlignment.CENTER) == 80
    assert line_left(100, 40, TextAlignment.RIGHT) == 60


# ─── Effect Scaling ──────────────────────────────────────────────────────────

def test_layout_scale_factor_is_relative_to_32px():
    layout = _make_engine().layout("THE END", _style(font_size_percent=8), 800, 600)
    assert layout.font_px == pytest.approx(64.0)
    assert layout.scale_factor == pytest.approx(2.0)


def test_scaled_stroke_width_has_floor():
    from filmframe.modules.caption import scaled_stroke_width
    assert scaled_stroke_width(_style(stroke_width=3), 0.5) == pytest.approx(3.0)
    assert scaled_stroke_width(_style(stroke_width=3), 2.0) == pytest.approx(6.0)


def test_scaled_shadow():
    from filmframe.modules.caption import scaled_shadow
    blur, dx, dy = scaled_shadow(_style(), 2.0)
    assert (blur, dx, dy) == pytest.approx((8.0, 4.0, 4.0))
    blur, _, _ = scaled_shadow(_style(shadow_blur=0.1), 0.5)
    assert blur == pytest.approx(1.0)


# ─── Rendering ───────────────────────────────────────────────────────────────

def _render(text: str, style, canvas=None):
    from filmframe.modules.caption import GlyphRenderer
    canvas = canvas or _make_canvas()
    engine = _make_engine(fake=False)
    layout = engine.layout(text, style, canvas.width, canvas.height)
    GlyphRenderer(engine.fonts).render(canvas, layout, style)
    return canvas, layout


def test_render_draws_fill_colour_inside_band():
    canvas, layout = _render("THE END", _style(shadow_blur=0, stroke_width=0))
    px = canvas.pixels
    yellow = (px[..., 0] > 200) & (px[..., 1] > 180) & (px[..., 2] < 120)
    assert yellow.any()

    rows = np.nonzero(yellow.any(axis=1))[0]
    _, cy = layout.line_origins[0]
    assert abs(rows.mean() - cy) < layout.font_px


def test_render_leaves_pixels_outside_band_untouched():
    canvas, layout = _render("THE END", _style())
    band_top = int(layout.origin_y - 2 * layout.font_px)
    band_bottom = int(layout.origin_y + layout.total_height + layout.font_px)

    gray = np.array([128, 128, 128, 255], dtype=np.uint8)
    assert np.all(canvas.pixels[:band_top] == gray)
    assert np.all(canvas.pixels[band_bottom:] == gray)


def test_render_stroke_draws_outline_colour():
    canvas, _ = _render("THE END", _style(shadow_blur=0, stroke_width=6))
    px = canvas.pixels
    black = (px[..., 0] < 30) & (px[..., 1] < 30) & (px[..., 2] < 30)
    assert black.any()


def test_render_layers_fill_over_stroke_over_shadow():
    # Pure primaries so each layer's fully covered pixels are unambiguous;
    # the 20px shadow offset makes the shadow overlap stroke and fill.
    colours = dict(color="#00FF00", stroke_color="#FF0000", shadow_color="#0000FF")
    shadowed = dict(shadow_blur=0.1, shadow_offset_x=0, shadow_offset_y=20)

    fill_only, _ = _render("HI", _style(stroke_width=0, shadow_blur=0, **colours))
    stroked, _ = _render("HI", _style(stroke_width=6, shadow_blur=0, **colours))
    full, layout = _render("HI", _style(stroke_width=6, **shadowed, **colours))
    assert layout.scale_factor == pytest.approx(1.0)

    def _mask(px, channel, tol=5):
        others = [c for c in range(3) if c != channel]
        return (
            (px[..., channel] >= 255 - tol)
            & (px[..., others[0]] <= tol)
            & (px[..., others[1]] <= tol)
        )

    # Fully covered pixels only; antialiased edges legitimately blend
    fill_px = _mask(fill_only.pixels, 1, tol=1)
    stroke_px = _mask(stroked.pixels, 0, tol=1)
    assert fill_px.any()
    assert stroke_px.any()

    # The shadow is actually drawn and reaches beyond the glyphs
    assert _mask(full.pixels, 2).any()

    # Fill pixels are never overwritten by stroke or shadow colour
    assert np.all(_mask(full.pixels, 1)[fill_px])
    # Stroke pixels are never overwritten by shadow colour
    assert np.all(_mask(full.pixels, 0)[stroke_px])


def test_render_whitespace_only_is_noop():
    from filmframe.models.caption import CaptionLayout, TextAlignment
    from filmframe.modules.caption import GlyphRenderer
    canvas = _make_canvas(200, 200)
    before = canvas.pixels.copy()
    layout = CaptionLayout(
        lines=["   "], font_px=12, line_height_px=16.8,
        origin_x=100, origin_y=100, alignment=TextAlignment.CENTER,
        line_origins=[(100, 108.4)], line_widths=[0.0],
    )
    GlyphRenderer().render(canvas, layout, _style())
    assert np.array_equal(canvas.pixels, before)


def test_render_surface_failure_raises(monkeypatch):
    from filmframe.core.errors import DrawSurfaceError
    from filmframe.modules.caption import glyph_renderer

    def _boom(_):
        raise MemoryError("no surface")

    monkeypatch.setattr(glyph_renderer, "rgba_to_pil", _boom)
    with pytest.raises(DrawSurfaceError):
        _render("THE END", _style())
