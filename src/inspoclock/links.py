"""Append-only log of published wallpaper URLs (data/links.json)."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import structlog

from inspoclock.models.links import LinkRecord

if TYPE_CHECKING:
    from pathlib import Path

log = structlog.get_logger()


def read_link_log(path: Path) -> list[dict]:
    """Return the existing records, or an empty list when missing or unreadable."""
    try:
        records = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return []
    except (OSError, ValueError):
        log.warning("link_log_unreadable", path=str(path), action="starting_fresh")
        return []

    if not isinstance(records, list):
        log.warning("link_log_unreadable", path=str(path), action="starting_fresh")
        return []
    return records


def append_link_log(path: Path, *, url: str, size: str, quality: str) -> LinkRecord:
    """Append one record, creating the file and its directory if needed.

    Corrupt prior content is discarded rather than treated as fatal.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    records = read_link_log(path)

    record = LinkRecord(url=url, size=size, quality=quality)
    records.append(record.model_dump())
    path.write_text(json.dumps(records, indent=2), encoding="utf-8")

    log.info("link_logged", path=str(path), url=url, total=len(records))
    return record
