"""Application settings"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Environment-driven settings"""

    # Server
    MODE: str = "development"
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    API_VERSION: str = "v1"
    CORS_ORIGINS: List[str] = ["*"]

    # Database (SQLite by default, any SQLAlchemy URL otherwise)
    DATABASE_URL: str = "sqlite:///./detection.sqlite3"
    SQL_ECHO: bool = False

    # Redis cache for dashboard summaries
    CACHE_ENABLED: bool = False
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: Optional[str] = None
    CACHE_TTL_SECONDS: int = 30

    # Detection
    BOT_LOOKUP_TIMEOUT_SECONDS: float = 2.0
    NETWORK_MOCK_ENABLED: bool = False
    NETWORK_MOCK_SEED: Optional[int] = None

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

    @property
    def is_development(self) -> bool:
        return self.MODE.lower() == "development"

    @property
    def redis_url(self) -> str:
        """Redis URL"""
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/0"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/0"


settings = Settings()
