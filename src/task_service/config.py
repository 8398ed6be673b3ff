# src/task_service/config.py
"""
Configuration module for loading environment variables using pydantic-settings.
"""

from enum import Enum
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# HMAC algorithms accepted for bearer tokens. The verifier never takes the
# algorithm from the token header.
ALLOWED_JWT_ALGORITHMS = ("HS256", "HS384", "HS512")


class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    # General App settings
    ENVIRONMENT: Environment = Field(
        Environment.DEVELOPMENT, alias="TASK_SERVICE_ENVIRONMENT"
    )
    LOGGING_LEVEL: str = Field("INFO", alias="TASK_SERVICE_LOGGING_LEVEL")
    ROOT_PATH: str = Field("", alias="TASK_SERVICE_ROOT_PATH")

    # Database Configuration
    DATABASE_URL: str = Field(..., alias="TASK_SERVICE_DATABASE_URL")
    DB_POOL_SIZE: int = Field(10, alias="TASK_SERVICE_DB_POOL_SIZE")
    DB_MAX_OVERFLOW: int = Field(20, alias="TASK_SERVICE_DB_MAX_OVERFLOW")
    DB_STATEMENT_TIMEOUT_MS: int = Field(
        5000, alias="TASK_SERVICE_DB_STATEMENT_TIMEOUT_MS"
    )

    # JWT Configuration (tokens are minted by the external auth service)
    JWT_SECRET_KEY: str = Field(..., alias="TASK_SERVICE_JWT_SECRET_KEY")
    JWT_ALGORITHM: str = Field("HS256", alias="TASK_SERVICE_JWT_ALGORITHM")
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(
        60 * 24 * 7, alias="TASK_SERVICE_JWT_ACCESS_TOKEN_EXPIRE_MINUTES"
    )  # 7 days

    # CORS settings
    CORS_ALLOW_ORIGINS: List[str] = Field(
        default_factory=lambda: ["*"], alias="TASK_SERVICE_CORS_ALLOW_ORIGINS"
    )

    @field_validator("JWT_SECRET_KEY")
    def validate_jwt_secret_key(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("JWT secret key must not be empty")
        return v

    @field_validator("JWT_ALGORITHM")
    def validate_jwt_algorithm(cls, v: str) -> str:
        v = v.upper()
        if v not in ALLOWED_JWT_ALGORITHMS:
            raise ValueError(
                f"Unsupported JWT algorithm '{v}'. "
                f"Allowed: {', '.join(ALLOWED_JWT_ALGORITHMS)}"
            )
        return v

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    def is_production(self) -> bool:
        return self.ENVIRONMENT == Environment.PRODUCTION

    def is_development(self) -> bool:
        return self.ENVIRONMENT == Environment.DEVELOPMENT

    def is_testing(self) -> bool:
        return self.ENVIRONMENT == Environment.TESTING

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )


# Instantiate the settings
settings = Settings()
