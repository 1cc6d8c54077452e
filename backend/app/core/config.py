from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="BLOCKSCORE_", extra="ignore")

    app_name: str = "BlockScore API"
    app_version: str = "0.1.0"
    debug: bool = False

    api_prefix: str = "/api"

    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    indent_unit: str = Field(default="  ", min_length=1)


@lru_cache
def get_settings() -> Settings:
    return Settings()
