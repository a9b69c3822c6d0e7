from __future__ import annotations

from functools import cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    suretax_url: str
    suretax_cancel_url: str
    suretax_client_number: str
    suretax_validation_key: str
    suretax_timeout_seconds: float = Field(default=300.0, gt=0)
    suretax_idle_timeout_seconds: float = Field(default=10.0, gt=0)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@cache
def config() -> AppSettings:
    return AppSettings()  # type: ignore[call-arg]
