"""Storage backends for the offline cache manager.

Both implement CacheStorageProtocol: a set of named generations, each a
mapping from (method, url) to a response snapshot. ``put`` overwrites.
Only GET requests can be stored, matching the browser Cache API.

SQLite failures are raised as ``StorageError`` so the manager decides what is
fatal: installation aborts, routing logs and carries on.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import aiosqlite
import structlog

from inspoclock.errors import StorageError
from inspoclock.models.offline import CachedResponse

if TYPE_CHECKING:
    from inspoclock.models.offline import CachedRequest

log = structlog.get_logger()


def _require_get(request: CachedRequest) -> None:
    if request.method != "GET":
        raise ValueError(f"Only GET requests can be cached, got {request.method} {request.url}")


class InMemoryCacheStorage:
    """Process-local storage. Contents vanish with the process."""

    def __init__(self) -> None:
        self._stores: dict[str, dict[tuple[str, str], CachedResponse]] = {}
        self._installed: dict[str, None] = {}

    async def open(self, name: str) -> None:
        self._stores.setdefault(name, {})

    async def keys(self) -> list[str]:
        return list(self._stores)

    async def delete(self, name: str) -> bool:
        self._installed.pop(name, None)
        return self._stores.pop(name, None) is not None

    async def match(self, name: str, request: CachedRequest) -> CachedResponse | None:
        store = self._stores.get(name)
        if store is None:
            return None
        return store.get(request.cache_key)

    async def put(self, name: str, request: CachedRequest, response: CachedResponse) -> None:
        _require_get(request)
        self._stores.setdefault(name, {})[request.cache_key] = response

    async def mark_installed(self, name: str) -> None:
        self._installed.pop(name, None)
        self._installed[name] = None

    async def installed(self) -> list[str]:
        return [name for name in self._installed if name in self._stores]

    def entries(self, name: str) -> dict[tuple[str, str], CachedResponse]:
        """Snapshot of one generation's entries, for inspection."""
        return dict(self._stores.get(name, {}))


_CREATE_GENERATIONS_TABLE = """
CREATE TABLE IF NOT EXISTS generations (
    name         TEXT PRIMARY KEY,
    created_at   TEXT NOT NULL,
    installed_at TEXT
)
"""

_CREATE_ENTRIES_TABLE = """
CREATE TABLE IF NOT EXISTS entries (
    generation TEXT NOT NULL REFERENCES generations(name) ON DELETE CASCADE,
    method     TEXT NOT NULL,
    url        TEXT NOT NULL,
    status     INTEGER NOT NULL,
    type       TEXT NOT NULL,
    headers    TEXT NOT NULL DEFAULT '{}',
    body       BLOB NOT NULL,
    stored_at  TEXT NOT NULL,
    PRIMARY KEY (generation, method, url)
)
"""


class SqliteCacheStorage:
    """SQLite-backed storage implementing CacheStorageProtocol.

    Generations and their install marks survive restarts, so a failed
    install leaves the last completely installed generation available to
    serve, even when it carries the same version key.
    """

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def init_db(self) -> None:
        """Create tables and set WAL mode. Called once at startup."""
        await self._db.execute("PRAGMA journal_mode = WAL")
        await self._db.execute("PRAGMA foreign_keys = ON")
        await self._db.execute(_CREATE_GENERATIONS_TABLE)
        await self._db.execute(_CREATE_ENTRIES_TABLE)
        cursor = await self._db.execute("PRAGMA table_info(generations)")
        columns = {row[1] for row in await cursor.fetchall()}
        if "installed_at" not in columns:
            # Databases written before install completion was recorded.
            await self._db.execute("ALTER TABLE generations ADD COLUMN installed_at TEXT")
        await self._db.commit()

    async def open(self, name: str) -> None:
        try:
            await self._db.execute(
                "INSERT OR IGNORE INTO generations (name, created_at) VALUES (?, ?)",
                (name, datetime.now(UTC).isoformat()),
            )
            await self._db.commit()
        except aiosqlite.Error as exc:
            raise StorageError(f"Cannot open generation {name!r}: {exc}") from exc

    async def keys(self) -> list[str]:
        try:
            cursor = await self._db.execute("SELECT name FROM generations ORDER BY created_at")
            return [row[0] for row in await cursor.fetchall()]
        except aiosqlite.Error as exc:
            raise StorageError(f"Cannot list generations: {exc}") from exc

    async def delete(self, name: str) -> bool:
        try:
            await self._db.execute("DELETE FROM entries WHERE generation = ?", (name,))
            cursor = await self._db.execute("DELETE FROM generations WHERE name = ?", (name,))
            deleted = cursor.rowcount > 0
            await self._db.commit()
            return deleted
        except aiosqlite.Error as exc:
            raise StorageError(f"Cannot delete generation {name!r}: {exc}") from exc

    async def match(self, name: str, request: CachedRequest) -> CachedResponse | None:
        try:
            cursor = await self._db.execute(
                "SELECT url, status, type, headers, body FROM entries "
                "WHERE generation = ? AND method = ? AND url = ?",
                (name, request.method, request.url),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise StorageError(f"Cannot read {request.url} from {name!r}: {exc}") from exc

        if row is None:
            return None
        return CachedResponse(
            url=row[0],
            status=row[1],
            type=row[2],
            headers=json.loads(row[3]),
            body=bytes(row[4]),
        )

    async def put(self, name: str, request: CachedRequest, response: CachedResponse) -> None:
        _require_get(request)
        try:
            await self._db.execute(
                "INSERT OR IGNORE INTO generations (name, created_at) VALUES (?, ?)",
                (name, datetime.now(UTC).isoformat()),
            )
            await self._db.execute(
                "INSERT OR REPLACE INTO entries "
                "(generation, method, url, status, type, headers, body, stored_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    name,
                    request.method,
                    request.url,
                    response.status,
                    response.type,
                    json.dumps(response.headers),
                    response.body,
                    datetime.now(UTC).isoformat(),
                ),
            )
            await self._db.commit()
        except aiosqlite.Error as exc:
            raise StorageError(f"Cannot write {request.url} to {name!r}: {exc}") from exc
        log.debug("offline_cache_put", generation=name, url=request.url, status=response.status)

    async def mark_installed(self, name: str) -> None:
        try:
            await self._db.execute(
                "UPDATE generations SET installed_at = ? WHERE name = ?",
                (datetime.now(UTC).isoformat(), name),
            )
            await self._db.commit()
        except aiosqlite.Error as exc:
            raise StorageError(f"Cannot mark generation {name!r} installed: {exc}") from exc

    async def installed(self) -> list[str]:
        try:
            cursor = await self._db.execute(
                "SELECT name FROM generations WHERE installed_at IS NOT NULL ORDER BY installed_at"
            )
            return [row[0] for row in await cursor.fetchall()]
        except aiosqlite.Error as exc:
            raise StorageError(f"Cannot list installed generations: {exc}") from exc
