"""Offline cache manager, its storage backends and the ASGI mirror adapter."""

from __future__ import annotations

from inspoclock.offline.manager import OfflineCacheManager, is_html_request
from inspoclock.offline.network import HttpxNetwork
from inspoclock.offline.storage import InMemoryCacheStorage, SqliteCacheStorage

__all__ = [
    "OfflineCacheManager",
    "is_html_request",
    "HttpxNetwork",
    "InMemoryCacheStorage",
    "SqliteCacheStorage",
]
