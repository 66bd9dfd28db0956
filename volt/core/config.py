"""
Application configuration settings.
"""

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings
from loguru import logger


_DEFAULT_ACCESS_SECRET = "change-me-access-secret"
_DEFAULT_REFRESH_SECRET = "change-me-refresh-secret"


class Settings(BaseSettings):
    """Application settings."""

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./volt.db"

    # Application
    ENVIRONMENT: str = "production"  # development, production
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    WORKERS: int = 1
    API_V1_PREFIX: str = "/api/v1"

    # Security
    JWT_ACCESS_SECRET: str = _DEFAULT_ACCESS_SECRET
    JWT_REFRESH_SECRET: str = _DEFAULT_REFRESH_SECRET
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    RECOVERY_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_COOKIE_NAME: str = "refreshToken"
    COOKIE_SECURE: bool = False

    # Email delivery (HTTP email API)
    EMAIL_API_URL: str = "https://api.resend.com/emails"
    EMAIL_API_KEY: str = ""
    EMAIL_FROM: str = "Volt <no-reply@voltpassword.xyz>"
    EMAIL_TIMEOUT_SECONDS: float = 10.0
    FRONTEND_URL: str = "http://localhost:3000"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "./data/logs/volt.log"

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def validate_database_url(cls, v):
        if not v or v == "":
            raise ValueError("DATABASE_URL must be set")
        return v

    @field_validator("JWT_ACCESS_SECRET", "JWT_REFRESH_SECRET", mode="before")
    @classmethod
    def validate_jwt_secret(cls, v):
        if v in (_DEFAULT_ACCESS_SECRET, _DEFAULT_REFRESH_SECRET):
            logger.warning("Using a default JWT secret. Change this in production!")
        return v

    @model_validator(mode="after")
    def validate_distinct_secrets(self) -> "Settings":
        if self.JWT_ACCESS_SECRET == self.JWT_REFRESH_SECRET:
            raise ValueError("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must differ")
        return self

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()

# Configure logging
logger.remove()  # Remove default handler
logger.add(
    settings.LOG_FILE,
    level=settings.LOG_LEVEL,
    rotation="10 MB",
    retention="30 days",
    format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} | {message}"
)
logger.add(
    lambda msg: print(msg, end=""),
    level=settings.LOG_LEVEL,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | {message}"
)
