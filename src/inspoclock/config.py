"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (INSPOCLOCK__OPENAI__QUALITY=high)
  2. inspoclock.yaml        (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The conventional OPENAI_API_KEY, CATBOX_USERHASH and IMG_QUALITY variables
are honoured as fallbacks when the namespaced values are left unset.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from inspoclock.models.image import Quality, SizePreset

_DEFAULT_DATA_DIR = platformdirs.user_data_dir("inspoclock")
_DEFAULT_DB_PATH = str(Path(_DEFAULT_DATA_DIR) / "offline-cache.db")

DEFAULT_CORE_ASSETS: list[str] = [
    "/",
    "/index.html",
    "/manifest.webmanifest",
    "/icons/icon-192.png",
    "/icons/icon-512.png",
]


def _find_config_file() -> str | None:
    """Return the path of the first inspoclock.yaml found, or None."""
    candidates = [
        Path("inspoclock.yaml"),
        Path(platformdirs.user_config_dir("inspoclock")) / "inspoclock.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class OpenAISettings(BaseModel):
    api_key: str = ""
    api_url: str = "https://api.openai.com/v1/images/generations"
    model: str = "gpt-image-1"
    size: SizePreset = SizePreset.PORTRAIT
    quality: Quality = "medium"
    timeout_seconds: float = 300.0


class CatboxSettings(BaseModel):
    api_url: str = "https://catbox.moe/user/api.php"
    userhash: str = ""
    album: str = "ou6aoj"


class SiteSettings(BaseModel):
    template_path: str = "template.html"
    output_path: str = "index.html"
    image_path: str = "wallpaper.png"
    links_path: str = "data/links.json"


class OfflineSettings(BaseModel):
    version: str = "inspo-clock-v1"
    core_assets: list[str] = DEFAULT_CORE_ASSETS
    db_path: str = _DEFAULT_DB_PATH
    # None keeps routing fetches unbounded, as a browser fetch() is.
    fetch_timeout_seconds: float | None = None


class ServerSettings(BaseModel):
    mode: Literal["generate", "serve"] = "generate"
    upstream: str = "http://localhost:8000"
    host: str = "127.0.0.1"
    port: int = 8080


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "text"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: INSPOCLOCK__SERVER__PORT=9090
        env_prefix="INSPOCLOCK__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    openai: OpenAISettings = OpenAISettings()
    catbox: CatboxSettings = CatboxSettings()
    site: SiteSettings = SiteSettings()
    offline: OfflineSettings = OfflineSettings()
    server: ServerSettings = ServerSettings()
    logging: LoggingSettings = LoggingSettings()

    @model_validator(mode="after")
    def _apply_conventional_env(self) -> Settings:
        if not self.openai.api_key:
            self.openai.api_key = os.environ.get("OPENAI_API_KEY", "")
        if not self.catbox.userhash:
            self.catbox.userhash = os.environ.get("CATBOX_USERHASH", "").strip()
        quality = os.environ.get("IMG_QUALITY")
        if quality and "quality" not in self.openai.model_fields_set:
            self.openai = OpenAISettings.model_validate(
                {**self.openai.model_dump(), "quality": quality}
            )
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
