"""Configuration management for Movie Explorer."""

from functools import lru_cache
from typing import Literal
from urllib.parse import urlparse

from pydantic import Field, PositiveFloat, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.errors import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # TMDB
    tmdb_api_key: str = Field(min_length=1)
    tmdb_base_url: str = "https://api.themoviedb.org/3"
    language: str = "en-US"
    request_timeout: PositiveFloat | None = None  # None keeps the transport default

    # Catalog behaviour
    popular_movies_source: Literal["popular", "now_playing"] = "popular"
    trending_window: Literal["day", "week"] = "week"
    pagination_window: int = Field(default=7, ge=5, le=9)

    # Network settings
    # Proxy configuration in the format http://host:port or socks5://host:port
    proxy: str | None = None

    @field_validator("proxy")
    @classmethod
    def validate_proxy(cls, v: str | None) -> str | None:
        if v is None:
            return v

        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https", "socks4", "socks5", "socks5h"):
            raise ValueError(
                "Proxy must be a valid URL with scheme http/https/socks4/socks5/socks5h"
            )
        if not parsed.netloc:
            raise ValueError("Proxy must have a host and port")
        return v

    @field_validator("tmdb_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    # App settings
    debug: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


def load_settings() -> Settings:
    """Build settings, failing fast with a readable error.

    A missing TMDB_API_KEY would otherwise only surface as confusing
    401s on every request.
    """
    try:
        return Settings()
    except ValidationError as exc:
        missing_key = any(
            err["loc"] == ("tmdb_api_key",) for err in exc.errors()
        )
        if missing_key:
            raise ConfigurationError(
                "TMDB_API_KEY is not defined in environment variables. "
                "Set it in the environment or in a .env file."
            ) from exc
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return load_settings()
