from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables or .env file."""

    # Storage settings
    db_path: str = Field("packeteer.duckdb", description="Path of the DNS transaction store")

    # Pipeline settings
    strict: bool = Field(
        False,
        description="Halt on empty packets and insert failures instead of skipping them",
    )
    max_packets: Optional[int] = Field(None, description="Stop reading a capture after this many packets")

    # Logging settings
    log_level: str = Field("INFO", description="Level for packeteer loggers")

    class Config:
        env_prefix = "PACKETEER_"
        env_file = ".env"


@lru_cache()
def get_settings() -> Settings:
    """Return a singleton settings instance."""
    return Settings()


settings = get_settings()
