# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
FilmFrame - Export Module
Public API for the encode + naming stage.
"""

from filmframe.modules.export.encoder import ExportEncoder, derive_filename

__all__ = [
    "ExportEncoder",
    "derive_filename",
]
