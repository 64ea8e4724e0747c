"""Local offline mirror: the environment boundary for the cache manager.

``OfflineMirror`` is a pure ASGI app that turns each HTTP request into a
``CachedRequest`` and answers it with ``OfflineCacheManager.fetch``. The
"network" is the upstream origin that hosts the published page, so the mirror
keeps serving the last known page and assets when that origin is unreachable.

``serve_mirror`` owns startup ordering: install, then activate, then uvicorn
starts routing. A failed install keeps the previous generation serving.
"""

from __future__ import annotations

from contextlib import AsyncExitStack
from pathlib import Path
from typing import TYPE_CHECKING, get_args

import aiosqlite
import structlog
import uvicorn
from starlette.datastructures import Headers
from starlette.responses import Response

from inspoclock.client import build_http_client
from inspoclock.errors import InspoClockError
from inspoclock.models.offline import CachedRequest, CachedResponse, RequestMode
from inspoclock.offline.manager import OfflineCacheManager
from inspoclock.offline.network import HttpxNetwork
from inspoclock.offline.storage import SqliteCacheStorage

if TYPE_CHECKING:
    from starlette.types import Receive, Scope, Send

    from inspoclock.config import Settings
    from inspoclock.protocols import CacheStorageProtocol, NetworkProtocol

log = structlog.get_logger()

_REQUEST_MODES = frozenset(get_args(RequestMode))

# Describe the upstream transfer, not the stored body.
_DROPPED_RESPONSE_HEADERS = frozenset(
    {"content-encoding", "content-length", "transfer-encoding", "connection"}
)


def request_from_scope(scope: Scope) -> CachedRequest:
    """Build the manager's view of an incoming HTTP request."""
    headers = Headers(scope=scope)
    path = scope.get("path", "/")
    query = scope.get("query_string", b"").decode("latin-1")
    mode = headers.get("sec-fetch-mode", "no-cors")
    return CachedRequest(
        url=f"{path}?{query}" if query else path,
        method=scope.get("method", "GET"),
        mode=mode if mode in _REQUEST_MODES else "no-cors",
        headers={k: v for k, v in headers.items() if k in ("accept", "accept-language")},
    )


def response_from_cached(cached: CachedResponse) -> Response:
    if cached.type == "error":
        return Response("Offline and not cached", status_code=503, media_type="text/plain")
    headers = {k: v for k, v in cached.headers.items() if k not in _DROPPED_RESPONSE_HEADERS}
    # Opaque responses carry no status; the bytes are all we have.
    status = 200 if cached.opaque else cached.status
    return Response(cached.body, status_code=status, headers=headers)


class OfflineMirror:
    """Pure ASGI app routing every HTTP request through the cache manager."""

    def __init__(self, manager: OfflineCacheManager) -> None:
        self.manager = manager

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return
        request = request_from_scope(scope)
        cached = await self.manager.fetch(request)
        log.info(
            "mirror_request",
            method=request.method,
            url=request.url,
            status=cached.status,
            type=cached.type,
        )
        await response_from_cached(cached)(scope, receive, send)


async def start_manager(
    storage: CacheStorageProtocol,
    network: NetworkProtocol,
    settings: Settings,
) -> OfflineCacheManager:
    """Install and activate the configured generation.

    When installation fails the newest completely installed generation keeps
    serving, as a browser keeps the old worker. That may be the configured
    version itself, left by an earlier run. With none the install error
    propagates.
    """
    manager = OfflineCacheManager(
        storage,
        network,
        version=settings.offline.version,
        core_assets=settings.offline.core_assets,
        fetch_timeout=settings.offline.fetch_timeout_seconds,
    )
    try:
        await manager.install()
    except InspoClockError:
        completed = await storage.installed()
        if not completed:
            raise
        log.warning("mirror_serving_previous_generation", version=completed[-1])
        fallback = OfflineCacheManager(
            storage,
            network,
            version=completed[-1],
            core_assets=settings.offline.core_assets,
            fetch_timeout=settings.offline.fetch_timeout_seconds,
        )
        fallback.installed = True
        return fallback

    await manager.activate()
    return manager


async def serve_mirror(settings: Settings) -> None:
    """Run the offline mirror under uvicorn until interrupted."""
    db_path = Path(settings.offline.db_path).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    async with AsyncExitStack() as stack:
        db = await stack.enter_async_context(aiosqlite.connect(str(db_path)))
        storage = SqliteCacheStorage(db)
        await storage.init_db()

        client = await stack.enter_async_context(
            build_http_client(settings.offline.fetch_timeout_seconds)
        )
        network = HttpxNetwork(client, settings.server.upstream)
        manager = await start_manager(storage, network, settings)

        log.info(
            "mirror_started",
            upstream=settings.server.upstream,
            version=manager.version,
            host=settings.server.host,
            port=settings.server.port,
        )
        config = uvicorn.Config(
            OfflineMirror(manager),
            host=settings.server.host,
            port=settings.server.port,
            lifespan="off",
            log_config=None,  # Disable uvicorn's default logging; structlog handles it
        )
        await uvicorn.Server(config).serve()
        log.info("mirror_stopping")
