"""httpx-backed network for the offline cache manager.

Responses are reduced to what a page could observe. A ``no-cors`` request
to another origin comes back opaque: status 0, no headers, body kept.
"""

from __future__ import annotations

from urllib.parse import urljoin, urlsplit

import httpx
import structlog

from inspoclock.errors import NetworkError
from inspoclock.models.offline import CachedRequest, CachedResponse

log = structlog.get_logger()

# Request headers worth forwarding upstream; cookies and the like stay local.
_FORWARDED_HEADERS = ("accept", "accept-language")


def _origin(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}".lower()


class HttpxNetwork:
    """NetworkProtocol implementation over a shared ``httpx.AsyncClient``."""

    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        self._client = client
        self._origin = _origin(base_url)
        self._base = base_url.rstrip("/") + "/"

    def resolve(self, url: str) -> str:
        """Resolve site-relative URLs against the upstream base, which may have a path."""
        if urlsplit(url).scheme:
            return url
        return urljoin(self._base, url.lstrip("/"))

    async def fetch(self, request: CachedRequest) -> CachedResponse:
        url = self.resolve(request.url)
        headers = {k: v for k, v in request.headers.items() if k in _FORWARDED_HEADERS}
        try:
            response = await self._client.request(request.method, url, headers=headers)
        except httpx.HTTPError as exc:
            raise NetworkError(url, str(exc) or type(exc).__name__) from exc

        cross_origin = _origin(url) != self._origin
        log.debug(
            "offline_network_fetch",
            url=url,
            status_code=response.status_code,
            cross_origin=cross_origin,
        )

        if cross_origin and request.mode == "no-cors":
            return CachedResponse(url=url, status=0, type="opaque", body=response.content)

        return CachedResponse(
            url=url,
            status=response.status_code,
            headers={k.lower(): v for k, v in response.headers.items()},
            body=response.content,
            type="cors" if cross_origin else "basic",
        )
