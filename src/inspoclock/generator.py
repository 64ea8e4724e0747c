"""Wallpaper generation through the OpenAI Images API.

A single POST to ``/v1/images/generations``; the PNG arrives base64-encoded
in ``data[0].b64_json``. Failures surface verbatim and are never retried.
"""

from __future__ import annotations

import base64
import binascii
from typing import TYPE_CHECKING

import httpx
import structlog

from inspoclock.errors import ErrorCode, InspoClockError

if TYPE_CHECKING:
    from inspoclock.models.image import Quality, SizePreset

log = structlog.get_logger()

PROMPT = """
First, generate a short, completely original sentence (under 12 words) that feels fresh, imaginative, and thought-provoking.
The wording must use only valid, correctly spelled English dictionary words.
Do not invent new words, merge words, or alter word forms unnaturally.
Avoid motivational clichés or overused phrases such as believe in yourself, follow your dreams, anything is possible, or similar.
Also avoid generic poster words like dream, journey, path, light, destiny, inspire, possible, hope, future, goal, or success unless combined in a surprising or unusual way.
The sentence should be clear, natural English but combine ideas in a slightly unexpected or poetic way that sparks curiosity or a new perspective.

Render this exact sentence on a vertical 9:16 wallpaper, without changing or distorting it.
Write it in plain, clear **uppercase letters (A–Z only, plus spaces and standard punctuation)**.
Use a clean sans-serif font with normal spacing (no compression or stretching).
Do not use decorative fonts, cursive, handwriting, ligatures, or stylized distortions.
Do not merge or alter letters. Do not omit or repeat letters.
The text must be fully legible, sharp, evenly spaced, and correctly spelled.

Keep the background directly behind the text simple so every letter is easy to read.
Place the text in the lower half of the image, centered, with generous margins.
Ensure the entire sentence is fully inside the frame, with no cropping or truncation.
Leave a clear empty margin below the text so no letter touches the image edge.
The lowest text baseline must sit at least 5% above the bottom edge.

Design a background in any creative visual style—this could be photorealistic nature, painterly realism, minimalist design, abstract surrealism, whimsical illustration, or bold typography-led art.
The imagery should symbolically or imaginatively resonate with the meaning of the sentence, without defaulting to overused motifs (like roads, horizons, or sunsets).

Keep the top-center third uncluttered for a digital clock overlay.
The final design should feel modern, evocative, surprising, and visually striking.
"""


class ImageGenerator:
    """Text-to-image client. Returns raw PNG bytes."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        *,
        model: str = "gpt-image-1",
        api_url: str = "https://api.openai.com/v1/images/generations",
        timeout: float | None = 300.0,
    ) -> None:
        self._client = client
        self._api_key = api_key
        self._model = model
        self._api_url = api_url
        self._timeout = timeout

    async def generate(self, prompt: str, size: SizePreset, quality: Quality) -> bytes:
        """Request one image and decode it.

        Raises InspoClockError on a missing key, transport errors, non-2xx
        responses and responses without an image payload.
        """
        if not self._api_key:
            raise InspoClockError(
                code=ErrorCode.MISSING_CREDENTIALS,
                message="No OpenAI API key configured.",
                suggestion="Set OPENAI_API_KEY or INSPOCLOCK__OPENAI__API_KEY.",
            )

        log.info("image_generation_started", model=self._model, size=str(size), quality=quality)
        try:
            response = await self._client.post(
                self._api_url,
                json={
                    "model": self._model,
                    "prompt": prompt,
                    "size": str(size),
                    "quality": quality,
                    "n": 1,
                },
                headers={"Authorization": f"Bearer {self._api_key}"},
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            raise InspoClockError(
                code=ErrorCode.IMAGE_GENERATION_FAILED,
                message=f"Network error calling the image API: {exc}",
                suggestion="The image API may be temporarily unavailable.",
                recoverable=True,
            ) from exc

        if not response.is_success:
            raise InspoClockError(
                code=ErrorCode.IMAGE_GENERATION_FAILED,
                message=f"Image API failed (status {response.status_code}): {response.text}",
                suggestion="Check the API key, model access and quality/size values.",
                recoverable=response.status_code >= 500,
            )

        try:
            b64 = response.json()["data"][0]["b64_json"]
            image = base64.b64decode(b64, validate=True)
        except (ValueError, KeyError, IndexError, TypeError, binascii.Error) as exc:
            raise InspoClockError(
                code=ErrorCode.IMAGE_GENERATION_FAILED,
                message=f"Unexpected image API response: {response.text[:500]}",
                suggestion="The API did not return a base64 image payload.",
            ) from exc

        log.info("image_generation_complete", bytes=len(image))
        return image
