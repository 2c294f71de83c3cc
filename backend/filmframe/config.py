# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
FilmFrame - Application Configuration
All settings are loaded from FILMFRAME_* environment variables with
defaults tuned for phone-camera photos. Override via backend/.env or
the environment.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FILMFRAME_",
        case_sensitive=False,
        extra="ignore",
    )

    # ─── Source Images ───────────────────────────────────────────────────────
    upload_max_mb: int = 10

    # ─── Geometry ────────────────────────────────────────────────────────────
    min_crop_size: int = 200
    # Fill for samples that fall outside the source after a free rotation
    background_fill: str = "#FFFFFF"

    # ─── Captions ────────────────────────────────────────────────────────────
    caption_max_chars: int = 200
    # Only one caption is composited per export
    max_captions_per_export: int = 1
    # Optional TrueType file used before any family lookup
    font_path: Optional[Path] = None

    # ─── Export ──────────────────────────────────────────────────────────────
    # 0-9, PNG is lossless at every level
    png_compression: int = 9

    # ─── Live Preview ────────────────────────────────────────────────────────
    preview_debounce_ms: int = 300

    # ─── Logging ─────────────────────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # ─── Derived helpers ─────────────────────────────────────────────────────
    @property
    def upload_max_bytes(self) -> int:
        return self.upload_max_mb * 1024 * 1024

    @property
    def preview_debounce_seconds(self) -> float:
        return self.preview_debounce_ms / 1000.0


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached singleton Settings instance."""
    return Settings()
