# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
FilmFrame - Error Taxonomy
Every failure a composition can surface. Stage modules raise the specific
error; the pipeline wraps the first one in a CompositionError tagged with
the failing stage so callers handle a single exception type.
"""

from __future__ import annotations

from filmframe.models.composition import CompositionStage


class ImageDecodeError(ValueError):
    """Raised when source bytes are empty, corrupt, oversized or unsupported."""
    error_code = "IMAGE_DECODE_ERROR"


class InvalidCropSizeError(ValueError):
    """Raised when a crop is smaller than the configured minimum."""
    error_code = "INVALID_CROP_SIZE"


class OutOfBoundsError(ValueError):
    """Raised when a crop rectangle does not fit the (rotated) source."""
    error_code = "CROP_OUT_OF_BOUNDS"


class ValidationError(ValueError):
    """Raised when caption text or style values cannot be clamped into range."""
    error_code = "VALIDATION_ERROR"


class DrawSurfaceError(RuntimeError):
    """Raised when a drawing surface for glyph rendering cannot be created."""
    error_code = "DRAW_SURFACE_ERROR"


class EncodeError(RuntimeError):
    """Raised when the encoder fails to produce output bytes."""
    error_code = "ENCODE_ERROR"


class CompositionError(RuntimeError):
    """
    Single tagged error surfaced by CompositionPipeline.
    `stage` names the failing stage, `cause` is the underlying exception
    (also chained as __cause__).
    """
    error_code = "COMPOSITION_ERROR"

    def __init__(self, stage: CompositionStage, cause: BaseException) -> None:
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage.value} failed: {type(cause).__name__}: {cause}")

    @property
    def cause_code(self) -> str:
        return getattr(self.cause, "error_code", "INTERNAL_ERROR")

    def to_dict(self) -> dict:
        """Structured body in the same shape the log events use."""
        return {
            "error": {
                "code": self.error_code,
                "stage": self.stage.value,
                "cause": self.cause_code,
                "message": str(self.cause),
            }
        }
