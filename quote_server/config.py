"""
Single source of truth for application configuration.
All settings are typed and loaded from environment variables.
"""
from functools import lru_cache
from pathlib import Path
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_MIGRATIONS_DIR = PACKAGE_DIR / "migrations"


class Settings(BaseSettings):
    """
    Application settings.

    All settings have sensible defaults for local development, so the
    server starts with no environment at all.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )

    # === Server ===
    HOST: str = Field(default="127.0.0.1", description="Bind address")
    PORT: int = Field(default=3000, ge=1, le=65535, description="Bind port")
    ALLOWED_ORIGINS: list[str] = Field(
        default=["*"],
        description="CORS allowed origins"
    )

    # === Database ===
    DATABASE_URL: str = Field(
        default="sqlite:///./db/quotes.db",
        description="SQLite database URI"
    )
    MIGRATIONS_DIR: Optional[Path] = Field(
        default=None,
        description="Directory of versioned SQL scripts (packaged scripts if unset)"
    )
    DB_POOL_SIZE: int = Field(default=5, ge=1, le=100)
    DB_MAX_OVERFLOW: int = Field(default=5, ge=0, le=100)
    DB_POOL_TIMEOUT: float = Field(
        default=30.0,
        gt=0,
        description="Seconds to wait for a pooled connection"
    )

    # === Import ===
    INIT_FROM: Optional[Path] = Field(
        default=None,
        description="JSON quote file imported before serving"
    )

    # === Logging ===
    LOG_LEVEL: str = Field(default="INFO")
    LOG_SQL: bool = Field(default=False, description="Log every SQL statement")

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def migrations_path(self) -> Path:
        """Migration scripts location, falling back to the packaged set."""
        return self.MIGRATIONS_DIR or DEFAULT_MIGRATIONS_DIR


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    The LRU cache ensures we only parse env vars once.
    """
    return Settings()


def reload_settings() -> Settings:
    """
    Force reload settings from environment.
    Useful for testing or when env vars change at runtime.
    """
    get_settings.cache_clear()
    return get_settings()
