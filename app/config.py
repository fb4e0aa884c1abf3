"""
FastAPI Application Configuration
"""
import logging
import os
from functools import lru_cache
from typing import List, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from healthmonitor.auth import INSECURE_DEFAULT_SECRET
from healthmonitor.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_PASSWORD = "Admin@123"


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    model_config = SettingsConfigDict(
        env_file=os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), ".env"),
        case_sensitive=True,
        extra="ignore"
    )

    # App
    APP_NAME: str = "Health Monitor API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: Literal["development", "production", "test"] = "development"
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    TRUST_PROXY: bool = False
    SHUTDOWN_GRACE_SECONDS: int = 10

    # Security
    SESSION_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    TOKEN_EXPIRE_DAYS: int = 7
    BCRYPT_ROUNDS: int = 10
    PASSWORD_HASH_TIMEOUT_SECONDS: float = 10.0

    # Storage
    STORAGE_BACKEND: Literal["memory", "sql"] = "memory"
    DATABASE_URL: Optional[str] = None

    # Default admin account
    SEED_ADMIN: bool = True
    ADMIN_EMAIL: str = "admin@healthmonitor.com"
    ADMIN_PASSWORD: str = DEFAULT_ADMIN_PASSWORD

    # AI analysis
    GROQ_API_KEY: Optional[str] = None
    LLM_MODEL: str = "llama-3.3-70b-versatile"
    LLM_TIMEOUT_SECONDS: float = 60.0

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:5000", "http://localhost:5173"]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    def validate_for_startup(self) -> None:
        """Refuse configurations that are unsafe to serve in production."""
        if self.is_production:
            if not self.SESSION_SECRET or self.SESSION_SECRET == INSECURE_DEFAULT_SECRET:
                raise ConfigurationError(
                    "SESSION_SECRET must be set to a private value when ENVIRONMENT=production"
                )
            if self.SEED_ADMIN and self.ADMIN_PASSWORD == DEFAULT_ADMIN_PASSWORD:
                logger.warning("Seeding the admin account with the default password in production!")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
