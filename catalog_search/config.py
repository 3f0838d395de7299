"""Application configuration and constants."""
from __future__ import annotations

import os
from dataclasses import dataclass


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


def _get_flag(name: str, default: str) -> bool:
    return _get_env(name, default).lower() in {"1", "true", "yes"}


@dataclass(frozen=True)
class Settings:
    """Simple settings container with environment variable overrides."""

    catalog_path: str = _get_env("CATALOG_PATH", "data/products.json")
    synonyms_path: str = _get_env("SYNONYMS_PATH", "")
    corrections_path: str = _get_env("CORRECTIONS_PATH", "")
    static_dir: str = _get_env("STATIC_DIR", "static")
    redis_host: str = _get_env("REDIS_HOST", "localhost")
    redis_port: int = int(_get_env("REDIS_PORT", "6379"))
    cache_enabled: bool = _get_flag("CACHE_ENABLED", "true")
    cache_ttl_seconds: int = int(_get_env("CACHE_TTL_SECONDS", "300"))
    cache_max_entries: int = int(_get_env("CACHE_MAX_ENTRIES", "1024"))
    load_on_startup: bool = _get_flag("LOAD_ON_STARTUP", "true")
    min_query_length: int = int(_get_env("MIN_QUERY_LENGTH", "2"))
    environment: str = _get_env("APP_ENV", "development")
    log_level: str = _get_env("LOG_LEVEL", "INFO")

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


settings = Settings()
