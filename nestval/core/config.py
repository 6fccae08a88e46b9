from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

DEFAULT_MESSAGES_PATH = Path(__file__).resolve().parent.parent / "messages" / "errors.yml"


class Settings(BaseSettings):
    # Messages
    MESSAGES_BACKEND: str = "static"   # "static" or "i18n"
    MESSAGES_ROOT: str = "errors"
    DEFAULT_LOCALE: str = "en"
    MESSAGE_PATHS: list[Path] = [DEFAULT_MESSAGES_PATH]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # True for structured JSON, False for colored dev output

    class Config:
        env_prefix = "NESTVAL_"
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
