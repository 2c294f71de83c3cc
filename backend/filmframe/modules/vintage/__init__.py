# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
FilmFrame - Vintage Module
Public API for the colour-grading stage.
"""

from filmframe.modules.vintage.filter_engine import (
    GRAIN_AMPLITUDE,
    VintageFilterEngine,
    black_white_filter,
    classic_filter,
    faded_filter,
    s_curve,
    warm_filter,
)

__all__ = [
    "VintageFilterEngine",
    "s_curve",
    "GRAIN_AMPLITUDE",
    # Per-mode filters
    "classic_filter",
    "faded_filter",
    "warm_filter",
    "black_white_filter",
]
