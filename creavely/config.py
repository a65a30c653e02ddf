# creavely/config.py — Pydantic settings (env vars)

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class Settings(BaseSettings):
    # HTTP server
    server_host: str = "0.0.0.0"
    server_port: int = 8080
    shutdown_grace_seconds: int = 10

    # MongoDB
    mongo_uri: str = "mongodb://localhost:27017"
    database_name: str = "creavely"
    database_timeout_seconds: int = 10

    # Logging
    log_level: str = "INFO"

    # CORS
    cors_allow_origins: list[str] = ["*"]

    # When set, InvalidID/NotFound map to 400/404 on write paths instead of 500.
    distinguish_write_errors: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    @field_validator("server_port")
    @classmethod
    def _validate_server_port(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise ValueError("SERVER_PORT must be between 1 and 65535")
        return value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        cleaned = value.strip().upper()
        if cleaned not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}")
        return cleaned


@lru_cache
def get_settings() -> Settings:
    return Settings()
