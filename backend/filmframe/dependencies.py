# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
FilmFrame - Shared Components
Singleton providers for the composition pipeline and export encoder.
init_components() is called once by the host at startup; it configures
logging and builds the shared objects. The font cache is warmed lazily
by the first caption render.
"""

from __future__ import annotations

from typing import Optional

from filmframe.config import get_settings
from filmframe.core.pipeline import CompositionPipeline
from filmframe.core.preview_scheduler import PreviewScheduler, ResultCallback
from filmframe.modules.caption.fonts import clear_font_cache
from filmframe.modules.export.encoder import ExportEncoder
from filmframe.utils.logger import configure_logging, get_logger

log = get_logger(__name__)

# ─── Singletons ──────────────────────────────────────────────────────────────

_pipeline: CompositionPipeline | None = None
_encoder: ExportEncoder | None = None


def init_components() -> None:
    global _pipeline, _encoder
    configure_logging()
    settings = get_settings()

    _pipeline = CompositionPipeline()
    _encoder = ExportEncoder()

    log.info(
        "filmframe_ready",
        min_crop_size=settings.min_crop_size,
        max_captions=settings.max_captions_per_export,
        preview_debounce_ms=settings.preview_debounce_ms,
        png_compression=settings.png_compression,
    )


def get_pipeline() -> CompositionPipeline:
    if _pipeline is None:
        raise RuntimeError(
            "Pipeline has not been initialised. "
            "Ensure init_components() is called at startup."
        )
    return _pipeline


def get_encoder() -> ExportEncoder:
    if _encoder is None:
        raise RuntimeError(
            "ExportEncoder has not been initialised. "
            "Ensure init_components() is called at startup."
        )
    return _encoder


def new_preview_scheduler(on_result: Optional[ResultCallback] = None) -> PreviewScheduler:
    """One scheduler per editing session, sharing the pipeline singleton."""
    return PreviewScheduler(get_pipeline(), on_result=on_result)


def reset_components() -> None:
    """Drop the singletons and the loaded fonts. Used by tests and on font_path changes."""
    global _pipeline, _encoder
    _pipeline = None
    _encoder = None
    clear_font_cache()
