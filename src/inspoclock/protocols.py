"""Protocol interfaces for swappable components.

The offline cache manager references these protocols, not the concrete
implementations. This allows:
- Tests to use in-memory storage and a scripted network
- The on-disk SQLite store and the httpx network to be swapped in at the
  environment boundary without touching the routing policy
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from inspoclock.models.offline import CachedRequest, CachedResponse


class CacheStorageProtocol(Protocol):
    """Version-keyed request→response stores (the browser ``caches`` object).

    ``installed`` lists the generations whose install completed, oldest first.
    A generation that was opened but never marked stays out of that list.
    """

    async def open(self, name: str) -> None: ...

    async def keys(self) -> list[str]: ...

    async def delete(self, name: str) -> bool: ...

    async def match(self, name: str, request: CachedRequest) -> CachedResponse | None: ...

    async def put(self, name: str, request: CachedRequest, response: CachedResponse) -> None: ...

    async def mark_installed(self, name: str) -> None: ...

    async def installed(self) -> list[str]: ...


class NetworkProtocol(Protocol):
    """Interface for the network seen by the offline cache manager.

    Raises ``NetworkError`` when no response could be obtained at all.
    """

    async def fetch(self, request: CachedRequest) -> CachedResponse: ...
