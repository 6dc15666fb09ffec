"""
Configuration settings for the inventory query layer.

Uses Pydantic Settings to load environment variables for the database
connection, pool sizing, statement tracing and logging.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("inventory", alias="DB_NAME")
    database_url: Optional[str] = Field(None, alias="POSTGRESQL_URL")
    db_driver: Literal["psycopg", "asyncpg"] = Field("psycopg", alias="DB_DRIVER")

    # Pool
    pool_min_size: int = Field(1, alias="DB_POOL_MIN_SIZE")
    pool_max_size: int = Field(10, alias="DB_POOL_MAX_SIZE")
    pool_max_idle_seconds: float = Field(10.0, alias="DB_POOL_MAX_IDLE_SECONDS")
    pool_max_lifetime_seconds: float = Field(30.0, alias="DB_POOL_MAX_LIFETIME_SECONDS")
    connect_attempts: int = Field(3, alias="DB_CONNECT_ATTEMPTS")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")
    query_trace: bool = Field(True, alias="QUERY_TRACE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
