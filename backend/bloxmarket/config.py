"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - Every knob has a working default for docker-compose; env vars / .env override
    - get_settings() is cached (lru_cache) — single instance per process
    - database_url always names an async driver (postgresql:// is rewritten)

Design Decisions:
    - Pool sizing lives here, not in the session manager: SQLite URLs get no pool
      options at all (aiosqlite uses a static/null pool)
"""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATABASE_URL = "postgresql+asyncpg://bloxmarket:bloxmarket@db:5432/bloxmarket"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore",
    )

    # Datastore
    database_url: str = DEFAULT_DATABASE_URL
    database_pool_size: int = Field(20, ge=1)
    database_max_overflow: int = Field(10, ge=0)
    database_pool_recycle_s: int = Field(3600, ge=0)

    # Compare-and-swap retries for roster, ban, trade and report writes
    cas_max_attempts: int = Field(5, ge=1)

    # HTTP surface
    cors_origins: list[str] = ["http://localhost:5173"]

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    @field_validator("database_url", mode="before")
    @classmethod
    def use_async_driver(cls, v: str) -> str:
        if isinstance(v, str) and v.startswith("postgresql://"):
            return "postgresql+asyncpg://" + v[len("postgresql://"):]
        return v

    @field_validator("log_level")
    @classmethod
    def known_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level '{v}'")
        return level

    @property
    def uses_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def engine_options(self) -> dict:
        """Keyword arguments for create_async_engine beyond the URL."""
        if self.uses_sqlite:
            return {}
        return {
            "pool_size": self.database_pool_size,
            "max_overflow": self.database_max_overflow,
            "pool_recycle": self.database_pool_recycle_s,
        }


@lru_cache
def get_settings() -> Settings:
    return Settings()
