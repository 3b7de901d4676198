from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    # Application
    ENVIRONMENT: Literal["local", "test", "development", "production"] = "local"
    LOG_LEVEL: str = "INFO"
    TIMEZONE: str = "Asia/Kolkata"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./gymdesk.db"
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # Auth
    # Tokens are issued by the external identity provider; we only verify them.
    JWT_SECRET: str = "test-jwt-secret"
    JWT_ALGORITHM: str = "HS256"
    STAFF_ROLES: list[str] = ["admin", "staff", "service_role"]

    # Rate limiting for the public kiosk endpoints
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    KIOSK_RATE_LIMIT: str = "30/minute"

    # Ledger
    RECEIPT_PREFIX: str = "RCP"
    MEMBER_ID_PREFIX: str = "MEM"
    TRAINER_ID_PREFIX: str = "TRN"

    # External calls (AI commentary, weather)
    EXTERNAL_CALL_TIMEOUT_SECONDS: float = 30.0
    AI_INSIGHTS_CACHE_DAYS: int = 15
    AI_DEFAULT_MODEL: Optional[str] = None
    AI_API_KEY: Optional[str] = None
    OPENWEATHER_API_KEY: Optional[str] = None
    OPENWEATHER_URL: str = "https://api.openweathermap.org/data/2.5/weather"
    GYM_LOCATION: str = "Sodepur, West Bengal, India"
    GYM_LATITUDE: float = 22.87
    GYM_LONGITUDE: float = 88.39

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str]) -> str:
        if isinstance(v, str):
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+psycopg://", 1)
        return v

    @property
    def ai_configured(self) -> bool:
        return bool(self.AI_DEFAULT_MODEL and self.AI_API_KEY)


@lru_cache
def get_settings() -> Settings:
    """
    Return the global settings instance, cached.
    """
    return Settings()
