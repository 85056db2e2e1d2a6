from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env")

    database_url: str = "sqlite:///./tradefeed.db"

    # SnapTrade API credentials
    snaptrade_client_id: str = ""
    snaptrade_consumer_key: str = ""

    # Activity fetch paging (SnapTrade returns max 1000 per request)
    activity_page_size: int = 1000
    activity_max_pages: int = 50

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
