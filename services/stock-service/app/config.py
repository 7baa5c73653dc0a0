"""
Configuration management for stock service.

Loads and validates environment variables for the application.
"""

from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Stock service configuration.

    All settings can be overridden via environment variables.
    """

    # Service configuration
    SERVICE_NAME: str = Field(default="stock-service")
    SERVICE_HOST: str = Field(default="0.0.0.0")
    SERVICE_PORT: int = Field(default=3000, ge=1, le=65535)
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )

    # Database
    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./db.sqlite")
    DATABASE_ECHO: bool = Field(default=False)

    # Redis
    REDIS_URL: str = Field(default="redis://localhost:6379/0")
    REDIS_MAX_CONNECTIONS: int = Field(default=50, ge=1)
    REDIS_SOCKET_TIMEOUT: int = Field(default=5, ge=1)
    REDIS_CONNECT_TIMEOUT: int = Field(default=5, ge=1)

    # Cache policy (seconds, applied to both read-populate and write-overwrite)
    CACHE_TTL_SECONDS: int = Field(default=60, ge=1)

    # Artificial delay before a cache-miss store read, for demonstrating the cache
    SIMULATED_STORE_LATENCY_MS: int = Field(default=0, ge=0)

    # First-run data
    SEED_ON_STARTUP: bool = Field(default=True)

    # CORS
    CORS_ORIGINS: str = Field(default="*")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    def get_cors_origins(self) -> List[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


# Global settings instance
settings = Settings()
