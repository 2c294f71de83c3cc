# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
FilmFrame - Composition Pipeline
Wires all modules in a fixed order and wraps every stage failure in a
single CompositionError tagged with the failing stage.

Execution order:
  1. Decode     - awaited once when the request carries encoded bytes
  2. Geometry   - rotation + crop, only if a crop is requested
  3. Vintage    - colour grade, only if a mode other than OFF is requested
  4. Caption    - validate, lay out and render each caption with text

Vintage always runs before captions so caption text is never graded.
Stages 2-4 are CPU-bound and run together in a worker thread. Each run
works on its own buffer; nothing is kept after the run returns, and no
partially composited image is ever returned.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Any, Callable, Optional

import numpy as np
import structlog

from filmframe.config import get_settings
from filmframe.core.errors import CompositionError
from filmframe.models.caption import Caption
from filmframe.models.composition import (
    SUFFIX_ORDER,
    CompositedImage,
    CompositionRequest,
    CompositionStage,
    ExportResult,
    SuffixToken,
)
from filmframe.models.image import RasterImage, VintageMode
from filmframe.modules.caption.fonts import FontResolver
from filmframe.modules.caption.glyph_renderer import GlyphRenderer
from filmframe.modules.caption.layout import CaptionLayoutEngine
from filmframe.modules.caption.validator import validate_caption
from filmframe.modules.decoding.image_decoder import decode_image
from filmframe.modules.export.encoder import ExportEncoder
from filmframe.modules.geometry.transformer import GeometryTransformer
from filmframe.modules.vintage.filter_engine import VintageFilterEngine
from filmframe.utils.logger import get_logger

log = get_logger(__name__)

RngFactory = Callable[[Optional[int]], np.random.Generator]


class CompositionPipeline:
    """
    Orchestrates GeometryTransformer → VintageFilterEngine →
    CaptionLayoutEngine + GlyphRenderer.

    Args:
        geometry:      Crop/rotate stage (default: settings-driven).
        layout_engine: Caption layout stage.
        renderer:      Glyph renderer; shares the layout engine's fonts
                       when not given.
        rng_factory:   Builds the grain generator for one run from the
                       request seed. Defaults to numpy.random.default_rng.
        max_captions:  Captions composited per run (settings default 1).
    """

    def __init__(
        self,
        geometry: Optional[GeometryTransformer] = None,
        layout_engine: Optional[CaptionLayoutEngine] = None,
        renderer: Optional[GlyphRenderer] = None,
        rng_factory: RngFactory = np.random.default_rng,
        max_captions: Optional[int] = None,
    ) -> None:
        settings = get_settings()
        fonts = layout_engine.fonts if layout_engine is not None else FontResolver()
        self.geometry = geometry or GeometryTransformer()
        self.layout_engine = layout_engine or CaptionLayoutEngine(fonts)
        self.renderer = renderer or GlyphRenderer(fonts)
        self.rng_factory = rng_factory
        self.max_captions = (
            settings.max_captions_per_export if max_captions is None else max_captions
        )

    # ─── Stage Runner ────────────────────────────────────────────────────────

    def _run_stage(self, stage: CompositionStage, fn: Callable[..., Any], *args, **extra) -> Any:
        log.info("stage_start", stage=stage.value, **extra)
        try:
            result = fn(*args)
        except Exception as exc:
            log.error(
                "stage_failed",
                stage=stage.value,
                error=str(exc),
                exc_type=type(exc).__name__,
            )
            raise CompositionError(stage, exc) from exc
        log.info("stage_complete", stage=stage.value)
        return result

    # ─── Stages ──────────────────────────────────────────────────────────────

    async def _obtain_source(self, request: CompositionRequest) -> RasterImage:
        if isinstance(request.source, RasterImage):
            return request.source

        log.info("stage_start", stage=CompositionStage.DECODE.value, size_bytes=len(request.source))
        try:
            source = await decode_image(request.source, label="source image")
        except Exception as exc:
            log.error(
                "stage_failed",
                stage=CompositionStage.DECODE.value,
                error=str(exc),
                exc_type=type(exc).__name__,
            )
            raise CompositionError(CompositionStage.DECODE, exc) from exc
        log.info("stage_complete", stage=CompositionStage.DECODE.value)
        return source

    def _captions_to_render(self, captions: tuple[Caption, ...]) -> list[Caption]:
        with_text = [c for c in captions if c.has_text]
        if len(with_text) > self.max_captions:
            log.warning(
                "captions_dropped",
                requested=len(with_text),
                composited=self.max_captions,
            )
        return with_text[: self.max_captions]

    def render_caption(self, image: RasterImage, caption: Caption) -> None:
        """Validate, lay out and draw one caption onto image (in place)."""
        validate_caption(caption)
        layout = self.layout_engine.layout(
            caption.text,
            caption.style,
            image.width,
            image.height,
            caption.position,
        )
        self.renderer.render(image, layout, caption.style)

    def _render_captions(self, image: RasterImage, captions: list[Caption]) -> None:
        for caption in captions:
            self.render_caption(image, caption)

    # ─── Entry Points ────────────────────────────────────────────────────────

    def compose_decoded(
        self,
        request: CompositionRequest,
        source: RasterImage,
    ) -> CompositedImage:
        """Synchronous core of compose() for an already-decoded source."""
        applied: set[SuffixToken] = set()

        if request.crop is not None:
            image = self._run_stage(
                CompositionStage.GEOMETRY,
                self.geometry.apply, source, request.crop,
                rotation_deg=request.crop.rotation_deg,
            )
            applied.add(SuffixToken.CROPPED)
        else:
            image = source.copy()

        mode = request.vintage_mode
        if mode is not None and mode != VintageMode.OFF:
            engine = VintageFilterEngine(rng=self.rng_factory(request.seed))
            self._run_stage(
                CompositionStage.VINTAGE,
                engine.apply, image, mode,
                mode=mode.value,
            )
            applied.add(SuffixToken.for_vintage(mode))

        captions = self._captions_to_render(request.captions)
        if captions:
            self._run_stage(
                CompositionStage.CAPTION,
                self._render_captions, image, captions,
                count=len(captions),
            )
            applied.add(SuffixToken.CAPTIONED)

        return CompositedImage(
            image=image,
            tokens=[t for t in SUFFIX_ORDER if t in applied],
            base_name=request.base_name,
        )

    async def compose(self, request: CompositionRequest) -> CompositedImage:
        """
        Run one composition. Awaits the decode (if needed), then runs the
        CPU stages in a worker thread.

        Raises:
            CompositionError: wrapping the first stage that failed.
        """
        run_id = uuid.uuid4().hex[:12]
        structlog.contextvars.bind_contextvars(run_id=run_id)
        try:
            log.info(
                "composition_start",
                crop=request.crop is not None,
                vintage=request.vintage_mode.value if request.vintage_mode else None,
                captions=len(request.captions),
            )
            source = await self._obtain_source(request)
            result = await asyncio.to_thread(self.compose_decoded, request, source)
            log.info(
                "composition_complete",
                width=result.width,
                height=result.height,
                tokens=[t.value for t in result.tokens],
            )
            return result
        finally:
            structlog.contextvars.unbind_contextvars("run_id")

    async def export(
        self,
        request: CompositionRequest,
        encoder: Optional[ExportEncoder] = None,
    ) -> ExportResult:
        """compose() followed by lossless encoding and filename derivation."""
        composited = await self.compose(request)
        encoder = encoder or ExportEncoder()
        return await asyncio.to_thread(
            self._run_stage,
            CompositionStage.ENCODE,
            encoder.export, composited, request.base_name,
        )
