from functools import lru_cache
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    timer_tick_interval: float = 1.0
    timer_warn_after_seconds: int = 86_400
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_prefix": "",
        "extra": "ignore",
    }

@lru_cache()
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()
