"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Dayplan Backend"
    debug: bool = False
    log_level: str = "INFO"
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "dayplan"
    # Scheduling engine knobs
    buffer_from_now_min: int = 15
    late_night_hour: int = 21
    evening_review_offset_min: int = 5


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
