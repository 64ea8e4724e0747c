from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field


def _utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision: ``2025-01-01T06:00:00.000Z``."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class LinkRecord(BaseModel):
    """One published wallpaper in data/links.json."""

    ts: str = Field(default_factory=_utc_timestamp)
    url: str
    size: str
    quality: str
