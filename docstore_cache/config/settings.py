"""Settings loaded from environment variables via pydantic-settings.

Values are read from two sources, highest priority first:

  1. Environment variables prefixed with ``DOCSTORE_CACHE_``, e.g.
     ``DOCSTORE_CACHE_INDEX=app-cache``
  2. A ``.env`` file in the working directory

Field defaults apply when neither source sets a value.  ``APP_ENV`` is read
directly by :func:`docstore_cache.utils.logging.configure_logging`.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """docstore-cache settings."""

    model_config = SettingsConfigDict(
        env_prefix="DOCSTORE_CACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Document store ===
    store_backend: Literal["elasticsearch", "memory"] = "elasticsearch"
    elasticsearch_url: str = "http://localhost:9200"
    request_timeout: float = Field(default=10.0, gt=0)
    memory_max_size: int = Field(default=10_000, gt=0)

    # === Cache adapter ===
    # Empty = not configured; the cache provider refuses to start without it.
    index: str = ""
    schema_name: str = "cache-item"
    serializer: Literal["json", "pickle"] = "json"

    # === Logging ===
    log_level: str = "INFO"
