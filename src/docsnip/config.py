"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (DOCSNIP__SITE__SOURCE=./site)
  2. docsnip.yaml           (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional; every field has a default.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_CACHE_TTL_SECONDS = 300


def _find_config_file() -> str | None:
    """Return the path of the first docsnip.yaml found, or None."""
    candidates = [
        Path("docsnip.yaml"),
        Path(platformdirs.user_config_dir("docsnip")) / "docsnip.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class DefaultsScope(BaseModel):
    path: str = ""


class FrontMatterDefault(BaseModel):
    """Front-matter values applied to every page under ``scope.path``."""

    scope: DefaultsScope = DefaultsScope()
    values: dict[str, Any] = Field(default_factory=dict)

    def applies_to(self, page_path: str) -> bool:
        scope_path = self.scope.path.strip("/")
        if not scope_path:
            return True
        page_path = page_path.lstrip("/")
        return page_path == scope_path or page_path.startswith(scope_path + "/")


class SiteSettings(BaseModel):
    source: str = "."
    encoding: str = "utf-8"
    # Documentation language used when a page does not set ``lang``
    lang: str | None = None
    defaults: list[FrontMatterDefault] = Field(default_factory=list)

    def page_defaults(self, page_path: str) -> dict[str, Any]:
        """Merge the default values of every scope covering ``page_path``.

        Later entries win over earlier ones, matching the order in the file.
        """
        merged: dict[str, Any] = {}
        for default in self.defaults:
            if default.applies_to(page_path):
                merged.update(default.values)
        return merged


class FetcherSettings(BaseModel):
    timeout_seconds: float = 30.0
    user_agent: str = "docsnip/1.0"


class CacheSettings(BaseModel):
    ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS


class EmailSettings(BaseModel):
    layouts: list[str] = Field(default_factory=lambda: ["email-course"])
    dot_color: str = "#1a1a1a"


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "text"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: DOCSNIP__CACHE__TTL_SECONDS=60
        env_prefix="DOCSNIP__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    site: SiteSettings = SiteSettings()
    fetcher: FetcherSettings = FetcherSettings()
    cache: CacheSettings = CacheSettings()
    email: EmailSettings = EmailSettings()
    logging: LoggingSettings = LoggingSettings()

    @property
    def source_root(self) -> Path:
        return Path(self.site.source).expanduser().resolve()

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
