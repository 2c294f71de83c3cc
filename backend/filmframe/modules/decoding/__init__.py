# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
FilmFrame - Decoding Module
Public API for the source decode stage.
"""

from filmframe.modules.decoding.image_decoder import (
    decode_image,
    decode_image_bytes,
    decode_image_file,
    detect_format,
)

__all__ = [
    "decode_image",
    "decode_image_bytes",
    "decode_image_file",
    "detect_format",
]
