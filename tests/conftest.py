"""Shared test fixtures for the inspoclock test suite."""

from __future__ import annotations

from typing import TYPE_CHECKING

import aiosqlite
import pytest

from inspoclock.config import Settings
from inspoclock.errors import NetworkError
from inspoclock.models.offline import CachedRequest, CachedResponse
from inspoclock.offline.storage import InMemoryCacheStorage, SqliteCacheStorage

if TYPE_CHECKING:
    from pathlib import Path

CORE_ASSETS = ["/", "/index.html", "/manifest.webmanifest"]


class FakeNetwork:
    """Scripted NetworkProtocol with an online switch and a call log.

    Unknown URLs answer 404; going offline makes every fetch raise.
    """

    def __init__(self, routes: dict[str, CachedResponse] | None = None) -> None:
        self.routes: dict[str, CachedResponse] = dict(routes or {})
        self.online = True
        self.calls: list[CachedRequest] = []

    @property
    def call_urls(self) -> list[str]:
        return [request.url for request in self.calls]

    async def fetch(self, request: CachedRequest) -> CachedResponse:
        self.calls.append(request)
        if not self.online:
            raise NetworkError(request.url, "offline")
        return self.routes.get(request.url, CachedResponse(url=request.url, status=404))


def page(body: bytes, url: str = "/") -> CachedResponse:
    return CachedResponse(url=url, status=200, headers={"content-type": "text/html"}, body=body)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer credentials and overrides out of the tests."""
    for name in ("OPENAI_API_KEY", "CATBOX_USERHASH", "IMG_QUALITY"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def core_routes() -> dict[str, CachedResponse]:
    return {
        "/": page(b"<html>shell</html>"),
        "/index.html": page(b"<html>index</html>", url="/index.html"),
        "/manifest.webmanifest": CachedResponse(
            url="/manifest.webmanifest",
            status=200,
            headers={"content-type": "application/manifest+json"},
            body=b'{"name": "Inspo Clock"}',
        ),
    }


@pytest.fixture()
def network(core_routes: dict[str, CachedResponse]) -> FakeNetwork:
    return FakeNetwork(core_routes)


@pytest.fixture()
def memory_storage() -> InMemoryCacheStorage:
    return InMemoryCacheStorage()


@pytest.fixture()
async def sqlite_storage() -> SqliteCacheStorage:
    async with aiosqlite.connect(":memory:") as db:
        storage = SqliteCacheStorage(db)
        await storage.init_db()
        yield storage


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings with every file path inside tmp_path."""
    return Settings(
        openai={"api_key": "sk-test"},
        catbox={"userhash": "", "album": "ou6aoj"},
        site={
            "template_path": str(tmp_path / "template.html"),
            "output_path": str(tmp_path / "index.html"),
            "image_path": str(tmp_path / "wallpaper.png"),
            "links_path": str(tmp_path / "data" / "links.json"),
        },
        offline={
            "version": "inspo-clock-v2",
            "core_assets": CORE_ASSETS,
            "db_path": str(tmp_path / "offline.db"),
        },
    )
