import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Values loaded from ``BOOK_MANAGER_*`` environment variables and .env files."""

    model_config = SettingsConfigDict(
        env_prefix="BOOK_MANAGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Backend; no base URL means the in-memory mock
    api_base_url: Optional[str] = Field(default=None)
    request_timeout: float = Field(default=15.0, gt=0)
    mock_delay: float = Field(default=0.3, ge=0)

    # Cache and paging
    list_ttl_seconds: float = Field(default=300.0, ge=0)
    page_size: int = Field(default=10, ge=1)

    log_level: str = Field(default="INFO")

    @property
    def uses_mock_backend(self) -> bool:
        return not self.api_base_url


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    settings = Settings()
    logger.debug(f"Loaded settings: backend={'mock' if settings.uses_mock_backend else settings.api_base_url}")
    return settings
