# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
FilmFrame - Composition Models
Input and output records of one pipeline run, and the stage labels
used for logging and error tagging.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from filmframe.models.caption import Caption
from filmframe.models.image import CropRegion, RasterImage, VintageMode


class CompositionStage(str, Enum):
    """Pipeline stage labels, in execution order."""
    DECODE = "decode"
    GEOMETRY = "geometry"
    VINTAGE = "vintage"
    CAPTION = "caption"
    ENCODE = "encode"


class SuffixToken(str, Enum):
    """Filename tokens for applied transforms. Declaration order is output order."""
    CROPPED = "cropped"
    CAPTIONED = "captioned"
    CLASSIC = "classic"
    FADED = "faded"
    WARM = "warm"
    BW = "bw"

    @classmethod
    def for_vintage(cls, mode: VintageMode) -> Optional["SuffixToken"]:
        token = mode.filename_token
        return cls(token) if token else None


SUFFIX_ORDER: list[SuffixToken] = list(SuffixToken)


class CompositionRequest(BaseModel):
    """
    Immutable input to CompositionPipeline.
    `source` is either an already-decoded RasterImage or encoded image
    bytes that the pipeline decodes before processing.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    source: Union[RasterImage, bytes]
    crop: Optional[CropRegion] = None
    vintage_mode: Optional[VintageMode] = None
    captions: tuple[Caption, ...] = Field(default_factory=tuple)
    # Seeds the grain generator; None draws fresh entropy
    seed: Optional[int] = None
    base_name: str = "image"


class CompositedImage(BaseModel):
    """Final flattened raster plus the transforms that produced it."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    image: RasterImage
    tokens: list[SuffixToken] = Field(default_factory=list)
    base_name: str = "image"

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height


class ExportResult(BaseModel):
    """Bytes and filename handed to the download collaborator."""
    filename: str
    data: bytes
    media_type: str = "image/png"
    width: int
    height: int
