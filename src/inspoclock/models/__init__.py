from __future__ import annotations

from inspoclock.models.image import Quality, SizePreset
from inspoclock.models.links import LinkRecord
from inspoclock.models.offline import CachedRequest, CachedResponse

__all__ = [
    # image
    "SizePreset",
    "Quality",
    # links
    "LinkRecord",
    # offline
    "CachedRequest",
    "CachedResponse",
]
