# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
FilmFrame - Geometry Module
Public API for the rotation + crop stage.
"""

from filmframe.modules.geometry.transformer import GeometryTransformer

__all__ = [
    "GeometryTransformer",
]
