"""
Application configuration
"""
from typing import List, Union
from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "Realtime Chat API"
    APP_VERSION: str = "1.0"
    DEBUG: bool = False

    # Database
    DATABASE_URL: str = "sqlite:///./chat.db"

    # Connection Pool (ignored for SQLite)
    POOL_SIZE: int = 20
    MAX_OVERFLOW: int = 10
    POOL_TIMEOUT: int = 30
    POOL_RECYCLE: int = 3600
    SLOW_QUERY_SECONDS: float = 1.0

    # Redis
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    CACHE_ENABLED: bool = True
    HISTORY_CACHE_TTL: int = 60

    # WebSocket
    WS_OUTBOX_SIZE: int = 100
    WS_SEND_TIMEOUT: float = 5.0
    TYPING_TIMEOUT: float = 5.0

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    # CORS
    CORS_ORIGINS: Union[List[str], str] = ["*"]

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',')]
        return v

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = 'ignore'


# Global settings instance
settings = Settings()
