from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator

RequestMode = Literal["navigate", "cors", "no-cors", "same-origin"]
ResponseType = Literal["basic", "cors", "opaque", "error"]


class CachedRequest(BaseModel):
    """A request as seen by the offline cache manager.

    Only ``method`` and ``url`` form the cache key; ``mode`` and the
    ``accept`` header drive classification.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    method: str = "GET"
    mode: RequestMode = "no-cors"
    headers: dict[str, str] = {}

    @field_validator("method")
    @classmethod
    def _upper_method(cls, v: str) -> str:
        return v.upper()

    @field_validator("headers")
    @classmethod
    def _lower_header_names(cls, v: dict[str, str]) -> dict[str, str]:
        return {k.lower(): val for k, val in v.items()}

    @property
    def accept(self) -> str:
        return self.headers.get("accept", "")

    @property
    def cache_key(self) -> tuple[str, str]:
        return (self.method, self.url)


class CachedResponse(BaseModel):
    """Snapshot of a response body and headers, immutable once stored."""

    model_config = ConfigDict(frozen=True)

    url: str = ""
    status: int = 200
    headers: dict[str, str] = {}
    body: bytes = b""
    type: ResponseType = "basic"

    @property
    def ok(self) -> bool:
        return 200 <= self.status <= 299

    @property
    def opaque(self) -> bool:
        return self.type == "opaque"

    @classmethod
    def error(cls) -> CachedResponse:
        """The generic network-error response (``Response.error()`` in a browser)."""
        return cls(status=0, type="error")
