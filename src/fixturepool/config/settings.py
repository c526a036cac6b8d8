"""Application settings using pydantic-settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fixturepool import __version__


class Settings(BaseSettings):
    """FixturePool configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )

    # Application
    app_name: str = Field(default="FixturePool", description="Application name")
    app_version: str = Field(default=__version__, description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Log level"
    )

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=3001, ge=1, le=65535, description="Server port")

    # Pool store
    test_env: str = Field(default="qa", description="Active environment name")
    data_dir: Path = Field(
        default=Path("data/pools"), description="Directory holding pool store files"
    )
    results_path: Path = Field(
        default=Path("reports/test-results.json"),
        description="Append-only test result log",
    )

    # Store lock
    lock_retries: int = Field(
        default=10, ge=0, le=100, description="Lock retries after the first attempt"
    )
    lock_min_timeout: float = Field(
        default=0.1, gt=0, description="Initial wait between lock attempts (seconds)"
    )
    lock_max_timeout: float = Field(
        default=1.0, gt=0, description="Maximum wait between lock attempts (seconds)"
    )

    @field_validator("test_env")
    @classmethod
    def normalize_test_env(cls, v: str) -> str:
        """Environment codes are lower-case identifiers."""
        v = v.strip().lower()
        if not v:
            raise ValueError("TEST_ENV must not be empty")
        return v

    @model_validator(mode="after")
    def validate_lock_timeouts(self) -> "Settings":
        """Backoff ceiling cannot be below its floor."""
        if self.lock_max_timeout < self.lock_min_timeout:
            raise ValueError("lock_max_timeout must be >= lock_min_timeout")
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
