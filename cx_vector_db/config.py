"""
Configuration for the cx-vector-db command-line workflows.

Uses Pydantic settings for type-safe configuration with environment variable
support.  Every setting can be overridden with a ``CXVDB_`` prefixed variable,
e.g. ``CXVDB_SIMILARITY_THRESHOLD=0.9``.  The library modules never read
settings; only the CLI does.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CXVDB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # Data
    # ==========================================================================
    data_path: str = Field(
        default="user_behavior_vectors.csv",
        description="Delimited table read by search and written by generate",
    )
    similarity_threshold: float = Field(default=0.8, ge=-1.0, le=1.0)

    # ==========================================================================
    # Generation
    # ==========================================================================
    n_users: int = Field(default=1000, ge=0)
    n_services: int = Field(default=100, ge=1)
    missing_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    seed: Optional[int] = Field(default=None, description="Seed for reproducible data")

    # ==========================================================================
    # Logging
    # ==========================================================================
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
