"""Image upload to catbox.moe.

Uploads are authenticated when a userhash is configured and anonymous
otherwise. Authenticated uploads are also filed into the configured album;
a failed album add fails the run.
"""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from urllib.parse import urlparse

import httpx
import structlog

from inspoclock.errors import ErrorCode, InspoClockError

log = structlog.get_logger()

_URL_RE = re.compile(r"^https?://", re.IGNORECASE)
_ANON_PAUSED_RE = re.compile(r"Anon Uploads are temporarily paused", re.IGNORECASE)
_ERROR_RE = re.compile(r"ERROR", re.IGNORECASE)


class CatboxUploader:
    """Posts image bytes to the catbox user API and returns the public URL."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        api_url: str = "https://catbox.moe/user/api.php",
        userhash: str | None = None,
        album: str | None = None,
    ) -> None:
        self._client = client
        self._api_url = api_url
        self._userhash = (userhash or "").strip() or None
        self._album = album or None

    @property
    def authenticated(self) -> bool:
        return self._userhash is not None

    async def upload(self, image: bytes, filename: str = "wallpaper.png") -> str:
        """Upload ``image`` and, when authenticated, add it to the album."""
        data = {"reqtype": "fileupload"}
        if self._userhash:
            data["userhash"] = self._userhash
            log.info("catbox_upload_started", authenticated=True)
        else:
            log.info("catbox_upload_started", authenticated=False)

        response = await self._post(
            data,
            files={"fileToUpload": (filename, image, "image/png")},
            code=ErrorCode.UPLOAD_FAILED,
        )
        text = response.text.strip()

        if not (response.is_success and _URL_RE.match(text)):
            if _ANON_PAUSED_RE.search(text):
                raise InspoClockError(
                    code=ErrorCode.ANON_UPLOADS_PAUSED,
                    message=(
                        "Catbox upload failed: anonymous uploads are paused "
                        "and no valid userhash was used."
                    ),
                    suggestion="Set CATBOX_USERHASH to upload with an account.",
                    recoverable=True,
                )
            raise InspoClockError(
                code=ErrorCode.UPLOAD_FAILED,
                message=f"Catbox upload failed (status {response.status_code}): {text}",
                suggestion="The file host may be temporarily unavailable.",
                recoverable=response.status_code >= 500,
            )

        log.info("catbox_upload_complete", url=text)

        if self._userhash and self._album:
            await self.add_to_album(PurePosixPath(urlparse(text).path).name)
        elif not self._userhash:
            log.info("catbox_album_skipped", reason="no_userhash")
        else:
            log.info("catbox_album_skipped", reason="no_album")

        return text

    async def add_to_album(self, shortname: str) -> None:
        """File an uploaded file (e.g. ``abcdef.png``) into the configured album."""
        if not self._userhash or not self._album:
            raise InspoClockError(
                code=ErrorCode.MISSING_CREDENTIALS,
                message="Adding to an album needs both a userhash and an album short code.",
                suggestion="Set CATBOX_USERHASH and INSPOCLOCK__CATBOX__ALBUM.",
            )

        response = await self._post(
            {
                "reqtype": "addtoalbum",
                "userhash": self._userhash,
                "short": self._album,
                "files": shortname,  # space-separated list; one file here
            },
            code=ErrorCode.ALBUM_ADD_FAILED,
        )
        text = response.text.strip()
        if not response.is_success or _ERROR_RE.search(text):
            raise InspoClockError(
                code=ErrorCode.ALBUM_ADD_FAILED,
                message=f"addtoalbum failed ({response.status_code}): {text}",
                suggestion="Check that the album exists and belongs to the userhash.",
            )
        log.info("catbox_album_added", file=shortname, album=self._album)

    async def _post(
        self,
        data: dict[str, str],
        *,
        code: ErrorCode,
        files: dict | None = None,
    ) -> httpx.Response:
        try:
            return await self._client.post(self._api_url, data=data, files=files)
        except httpx.HTTPError as exc:
            raise InspoClockError(
                code=code,
                message=f"Network error calling catbox: {exc}",
                suggestion="The file host may be temporarily unavailable.",
                recoverable=True,
            ) from exc
