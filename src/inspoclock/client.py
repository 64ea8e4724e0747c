"""Shared httpx client construction.

One AsyncClient is created per run (or per mirror lifetime) and injected into
the generator, uploader and offline network; the caller owns its lifecycle.
"""

from __future__ import annotations

import httpx

from inspoclock import __version__


def build_http_client(
    timeout: float | None = 30.0,
    *,
    follow_redirects: bool = True,
) -> httpx.AsyncClient:
    """Create the shared httpx client. ``timeout=None`` disables timeouts."""
    return httpx.AsyncClient(
        follow_redirects=follow_redirects,
        timeout=httpx.Timeout(timeout),
        headers={"User-Agent": f"inspoclock/{__version__}"},
        limits=httpx.Limits(
            max_connections=10,
            max_keepalive_connections=5,
        ),
    )
