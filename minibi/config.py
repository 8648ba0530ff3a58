from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env")

    database_url: str = "sqlite:///./minibi.db"

    # Page size for table blocks that don't set one
    default_page_size: int = 25

    # What a column filter with an unrecognised operator does to a row
    unknown_operator: Literal["exclude", "include"] = "exclude"

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
