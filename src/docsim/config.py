"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings

from docsim.constants import (
    DEFAULT_BACKOFF_BASE,
    DEFAULT_EMBEDDING_MODEL,
    DEFAULT_LOCAL_EMBEDDING_MODEL,
    DEFAULT_MAX_DELAY,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
    OCR_MAX_POLLS,
    OCR_POLL_INTERVAL,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Keys
    openai_api_key: str = ""
    ocr_api_key: str = ""

    # Embedding Settings
    embedding_backend: Literal["openai", "sentence-transformers"] = "openai"
    embedding_model: str = DEFAULT_EMBEDDING_MODEL
    local_embedding_model: str = DEFAULT_LOCAL_EMBEDDING_MODEL
    embedding_max_retries: int = DEFAULT_MAX_RETRIES
    embedding_backoff_base: float = DEFAULT_BACKOFF_BASE
    embedding_max_delay: float = DEFAULT_MAX_DELAY

    # OCR Settings
    ocr_endpoint: str = ""
    ocr_poll_interval: float = OCR_POLL_INTERVAL
    ocr_max_polls: int = OCR_MAX_POLLS

    # Blob Storage
    blob_base_url: str = ""
    blob_dir: str = "."
    request_timeout: float = DEFAULT_TIMEOUT

    # App Settings
    debug: bool = False
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        frozen = True


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
