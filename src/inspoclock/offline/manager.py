"""Offline cache manager: the page's service worker as a plain component.

Lifecycle is install → activate → fetch*, driven by whatever sits at the
environment boundary (see mirror.py). Routing never raises: transport
failures fall back to the current generation's store, or to the generic
network-error response when nothing is stored.

Routing policy:
- HTML (navigations, or Accept contains text/html): network-first, so newly
  published wallpapers appear on the next load.
- Everything else: cache-first. Assets only change on redeploy, which ships
  a new version key.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from inspoclock.errors import ErrorCode, InspoClockError, NetworkError, StorageError
from inspoclock.models.offline import CachedRequest, CachedResponse

if TYPE_CHECKING:
    from collections.abc import Sequence

    from inspoclock.protocols import CacheStorageProtocol, NetworkProtocol

log = structlog.get_logger()

HTML_MEDIA_TYPE = "text/html"


def is_html_request(request: CachedRequest) -> bool:
    """Return True for page navigations and requests that accept HTML."""
    return request.mode == "navigate" or HTML_MEDIA_TYPE in request.accept


def is_cacheable_asset_response(response: CachedResponse) -> bool:
    """Whether a cache-miss asset response may be stored.

    Opaque responses are accepted without inspection: cross-origin images
    (the uploaded wallpaper) expose neither status nor headers. An opaque
    error is indistinguishable from an opaque success and gets cached too.
    """
    return response.status == 200 or response.opaque


class OfflineCacheManager:
    """Keeps one generation's store alive and routes requests through it."""

    def __init__(
        self,
        storage: CacheStorageProtocol,
        network: NetworkProtocol,
        *,
        version: str,
        core_assets: Sequence[str],
        fetch_timeout: float | None = None,
    ) -> None:
        self._storage = storage
        self._network = network
        self.version = version
        self.core_assets = list(core_assets)
        self._fetch_timeout = fetch_timeout
        self.installed = False
        self.skip_waiting = False
        self.controls_clients = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def install(self) -> None:
        """Pre-cache the core asset set. All-or-nothing.

        Every asset is fetched before the generation is opened, so a single
        failed fetch leaves nothing behind. The generation is marked installed
        only after every entry is written.
        """
        self.skip_waiting = True
        log.info("offline_install_started", version=self.version, assets=len(self.core_assets))

        requests = [CachedRequest(url=url) for url in self.core_assets]
        try:
            responses = await asyncio.gather(*(self._network_fetch(req) for req in requests))
        except (NetworkError, TimeoutError) as exc:
            log.warning("offline_install_failed", version=self.version, reason=str(exc))
            raise InspoClockError(
                code=ErrorCode.INSTALL_FAILED,
                message=f"Installing {self.version} failed: {exc}",
                suggestion="Check that every core asset is reachable, then install again.",
                recoverable=True,
            ) from exc

        for req, res in zip(requests, responses, strict=True):
            if not res.ok:
                log.warning(
                    "offline_install_failed", version=self.version, url=req.url, status=res.status
                )
                raise InspoClockError(
                    code=ErrorCode.INSTALL_FAILED,
                    message=f"Installing {self.version} failed: HTTP {res.status} for {req.url}",
                    suggestion="Check that every core asset is reachable, then install again.",
                    recoverable=True,
                )

        try:
            await self._storage.open(self.version)
            for req, res in zip(requests, responses, strict=True):
                await self._storage.put(self.version, req, res)
            await self._storage.mark_installed(self.version)
        except StorageError as exc:
            log.warning("offline_install_failed", version=self.version, reason=str(exc))
            raise InspoClockError(
                code=ErrorCode.INSTALL_FAILED,
                message=f"Installing {self.version} failed: {exc}",
                suggestion="Check that the offline cache database is writable.",
                recoverable=True,
            ) from exc

        self.installed = True
        log.info("offline_install_complete", version=self.version)

    async def activate(self) -> None:
        """Purge every generation other than the current one, then claim clients."""
        if not self.installed:
            raise InspoClockError(
                code=ErrorCode.NOT_INSTALLED,
                message=f"Cannot activate {self.version} before it is installed.",
                suggestion="Run install() and wait for it to complete first.",
            )

        for name in await self._storage.keys():
            if name != self.version:
                await self._storage.delete(name)
                log.info("offline_generation_deleted", version=name)

        self.controls_clients = True
        log.info("offline_activated", version=self.version)

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    async def fetch(self, request: CachedRequest) -> CachedResponse:
        """Answer a request from the network, the store, or the error response."""
        if request.method != "GET":
            # The store only holds GET entries; anything else goes straight out.
            try:
                return await self._network_fetch(request)
            except (NetworkError, TimeoutError):
                log.debug("offline_passthrough_failed", url=request.url, method=request.method)
                return CachedResponse.error()

        if is_html_request(request):
            return await self._network_first(request)
        return await self._cache_first(request)

    async def _network_first(self, request: CachedRequest) -> CachedResponse:
        try:
            response = await self._network_fetch(request)
        except (NetworkError, TimeoutError):
            cached = await self._match(request)
            if cached is None:
                log.info("offline_network_first_miss", url=request.url)
                return CachedResponse.error()
            log.info("offline_network_first_fallback", url=request.url)
            return cached

        await self._remember(request, response)
        return response

    async def _cache_first(self, request: CachedRequest) -> CachedResponse:
        hit = await self._match(request)
        if hit is not None:
            log.debug("offline_cache_hit", url=request.url)
            return hit

        try:
            response = await self._network_fetch(request)
        except (NetworkError, TimeoutError):
            log.info("offline_cache_first_miss", url=request.url)
            return CachedResponse.error()

        if is_cacheable_asset_response(response):
            await self._remember(request, response)
        return response

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _network_fetch(self, request: CachedRequest) -> CachedResponse:
        if self._fetch_timeout is None:
            return await self._network.fetch(request)
        return await asyncio.wait_for(self._network.fetch(request), timeout=self._fetch_timeout)

    async def _match(self, request: CachedRequest) -> CachedResponse | None:
        try:
            return await self._storage.match(self.version, request)
        except StorageError:
            log.warning("offline_cache_read_error", url=request.url, exc_info=True)
            return None

    async def _remember(self, request: CachedRequest, response: CachedResponse) -> None:
        """Store a routed response. Non-fatal: the response is served regardless."""
        try:
            await self._storage.put(self.version, request, response)
        except StorageError:
            log.warning("offline_cache_write_error", url=request.url, exc_info=True)
