from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    MISSING_CREDENTIALS = "MISSING_CREDENTIALS"
    IMAGE_GENERATION_FAILED = "IMAGE_GENERATION_FAILED"
    UPLOAD_FAILED = "UPLOAD_FAILED"
    ANON_UPLOADS_PAUSED = "ANON_UPLOADS_PAUSED"
    ALBUM_ADD_FAILED = "ALBUM_ADD_FAILED"
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    INSTALL_FAILED = "INSTALL_FAILED"
    NOT_INSTALLED = "NOT_INSTALLED"


class InspoClockError(Exception):
    """Raised for every expected failure of a daily run or cache lifecycle step.

    The entrypoint catches it, logs the structured payload and exits non-zero.
    Business logic lets it propagate; nothing is retried.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.recoverable = recoverable

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "suggestion": self.suggestion,
                "recoverable": self.recoverable,
            }
        }


class NetworkError(Exception):
    """Transport-level failure seen by the offline cache manager.

    Equivalent to a rejected fetch in a browser: no response at all, as
    opposed to a response with an error status.
    """

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Network error fetching {url}: {reason}")
        self.url = url
        self.reason = reason


class StorageError(Exception):
    """Raised by offline cache storage backends when the store cannot be used."""
