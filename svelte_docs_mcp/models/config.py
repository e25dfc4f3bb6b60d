"""Server configuration models."""

import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DOCS_URL = "https://svelte.dev/llms-full.txt"


class ServerSettings(BaseSettings):
    """MCP server configuration.

    Values come from keyword overrides (command-line options), then the
    environment / ``.env``, then the defaults below.
    """

    model_config = SettingsConfigDict(
        env_prefix="SVELTE_DOCS_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    # Direct environment variables (without prefix)
    openai_api_key: str | None = Field(default=None, alias="OPENAI_API_KEY")
    docs_url: str = Field(default=DEFAULT_DOCS_URL, alias="CUSTOM_DOCS_URL")

    # Vector store
    vector_store_name: str = "svelte5-documentation"
    docs_filename: str = "svelte5-docs.txt"
    docs_title: str = "Svelte 5"

    # Provider HTTP
    api_base_url: str = "https://api.openai.com/v1"
    request_timeout: float = Field(default=30.0, gt=0)
    download_timeout: float = Field(default=120.0, gt=0)
    ingestion_timeout: float = Field(default=300.0, ge=0)
    ingestion_poll_interval: float = Field(default=1.0, ge=0)

    # MCP server
    server_name: str = "svelte5-docs"
    enable_list_sources: bool = True
    eager_init: bool = False
    log_level: str = "INFO"
    log_file: Path | None = None

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a known logging level name."""
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("docs_url", "api_base_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate URL uses http(s)."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v.strip()

    @property
    def api_key_looks_valid(self) -> bool:
        """OpenAI secret keys start with ``sk-``."""
        return bool(self.openai_api_key) and self.openai_api_key.startswith("sk-")

    def __repr__(self) -> str:
        return (
            f"ServerSettings(vector_store_name='{self.vector_store_name}', "
            f"docs_url='{self.docs_url}')"
        )


__all__ = ["DEFAULT_DOCS_URL", "ServerSettings"]
