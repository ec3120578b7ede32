from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    bot_token: str = Field(..., alias="BOT_TOKEN")
    database_url: str = Field(..., alias="DATABASE_URL")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    group_code_length: int = Field(8, alias="GROUP_CODE_LENGTH", ge=5, le=32)
    group_code_attempts: int = Field(5, alias="GROUP_CODE_ATTEMPTS", ge=1)
    currency_label: str = Field("EUR", alias="CURRENCY_LABEL")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]
