"""
Config Maker
"""

# pyright: basic

__all__ = ("settings",)

from typing import Literal

from pydantic_settings import BaseSettings

from app import __project__, __version__


class Settings(BaseSettings):
    PROJECT_NAME: str = __project__
    PROJECT_VERSION: str = __version__
    API_VERSION: int = 1
    DEBUG: bool = False
    LOG_MESSAGE_MAX_LEN: int = 2000

    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 8083
    APP_WORKERS: int = 1
    APP_AUTH_KEY: str
    TRANSPORT: Literal["stdio", "http", "sse", "streamable-http"] = "streamable-http"

    # Integrity limits
    MAX_UPLOAD_SIZE_MB: int = 100
    RECOMMENDED_SIZE_MB: int = 10

    # AR compatibility advice
    OPTIMAL_SIZE_MB: int = 5
    WARNING_SIZE_MB: int = 20
    ZIP_MAX_FILE_COUNT: int = 50

    class Config:
        env_file = ".env"
        env_prefix = "ARV_"
        env_file_encoding = "utf-8"
        extra = "ignore"
        case_sensitive = True


settings = Settings()  # type: ignore[call-arg]
