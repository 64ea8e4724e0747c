from __future__ import annotations

from enum import StrEnum
from typing import Literal


class SizePreset(StrEnum):
    """Pixel dimensions accepted by the image endpoint."""

    PORTRAIT = "1024x1536"  # near 9:16, phone wallpaper
    LANDSCAPE = "1536x1024"


Quality = Literal["low", "medium", "high", "auto"]
