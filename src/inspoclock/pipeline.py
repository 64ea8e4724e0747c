"""The daily run: generate → upload → log → page.

Strictly sequential. Any step's InspoClockError propagates to the caller;
the link log and the page are only written once the upload has a URL.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from inspoclock.client import build_http_client
from inspoclock.generator import PROMPT, ImageGenerator
from inspoclock.links import append_link_log
from inspoclock.page import build_clock_page
from inspoclock.uploader import CatboxUploader

if TYPE_CHECKING:
    import httpx

    from inspoclock.config import Settings


async def run_daily(settings: Settings, *, client: httpx.AsyncClient | None = None) -> str:
    """Produce and publish today's wallpaper. Returns the public image URL."""
    if client is None:
        async with build_http_client(settings.openai.timeout_seconds) as owned_client:
            return await _run(settings, owned_client)
    return await _run(settings, client)


async def _run(settings: Settings, client: httpx.AsyncClient) -> str:
    log = structlog.get_logger().bind(
        size=str(settings.openai.size), quality=settings.openai.quality
    )
    generator = ImageGenerator(
        client,
        settings.openai.api_key,
        model=settings.openai.model,
        api_url=settings.openai.api_url,
        timeout=settings.openai.timeout_seconds,
    )
    image = await generator.generate(PROMPT, settings.openai.size, settings.openai.quality)

    image_path = Path(settings.site.image_path)
    image_path.parent.mkdir(parents=True, exist_ok=True)
    image_path.write_bytes(image)
    log.info("wallpaper_saved", path=str(image_path))

    uploader = CatboxUploader(
        client,
        api_url=settings.catbox.api_url,
        userhash=settings.catbox.userhash,
        album=settings.catbox.album,
    )
    url = await uploader.upload(image, filename=image_path.name)

    append_link_log(
        Path(settings.site.links_path),
        url=url,
        size=str(settings.openai.size),
        quality=settings.openai.quality,
    )
    build_clock_page(Path(settings.site.template_path), Path(settings.site.output_path), url)

    log.info("daily_run_complete", url=url)
    return url
