"""
core/config.py – Settings loaded once at startup (.env + environment).

Nested sections use the `__` delimiter: API__BASE_URL, CORE__CACHE_CAPACITY, ...
The Settings object is frozen, so handlers can read it without locking.
"""
import logging
from functools import lru_cache
from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_NAME = "food-api"
VERSION = "1.0.0"


class ApiSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_url: str = "http://localhost:8099"
    static_url: str = "http://localhost:8099"
    search_max_limit: int = Field(default=50, ge=0)
    health_internet_check_urls: tuple[str, ...] = (
        "https://www.google.com",
        "https://cloudflare.com",
    )
    documentation_url: str = "http://localhost:8099/docs"
    source_code_url: Optional[str] = None
    host: str = "0.0.0.0"
    port: int = 8099


class CoreSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    cache_capacity: int = Field(default=1000, ge=1)
    cache_ttl_seconds: float = Field(default=600.0, gt=0)
    rate_limit_per_second: int = Field(default=5, ge=1)
    rate_limit_max_memory: int = Field(default=64 * 1024 * 1024, ge=1024)
    tracing_level: str = "info"
    database_url: str = "sqlite:///db/foods.sqlite"
    seed_dir: str = "db/foods"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        frozen=True,
    )

    api: ApiSettings = ApiSettings()
    core: CoreSettings = CoreSettings()

    @property
    def route_prefix(self) -> str:
        """Path part of api.base_url, e.g. http://host/api/v1 → /api/v1 ('' for root)."""
        return urlparse(self.api.base_url).path.rstrip("/")

    @property
    def log_level(self) -> int:
        name = self.core.tracing_level.strip().upper()
        if name == "TRACE":
            return logging.DEBUG
        level = logging.getLevelName(name)
        # Unknown names fall back to the most verbose level
        return level if isinstance(level, int) else logging.DEBUG


@lru_cache
def get_settings() -> Settings:
    return Settings()
