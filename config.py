"""
Application settings for the Plantastic Care API.

Values come from environment variables (or a local ``.env`` file) and are
validated once at import time:

    >>> from config import settings
    >>> settings.database_name
    'plantastic_care'
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "change-me"


class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Environment = Field(Environment.DEVELOPMENT, description="Runtime environment")

    # Database
    mongo_url: str = Field("mongodb://127.0.0.1:27017", description="MongoDB connection string")
    database_name: str = Field("plantastic_care", description="MongoDB database name")

    # Auth
    jwt_secret: str = Field(DEFAULT_JWT_SECRET, description="HMAC secret used to sign access tokens")
    jwt_algorithm: str = Field("HS256", description="JWT signing algorithm")
    access_token_expire_minutes: int = Field(60, ge=1, description="Access token lifetime")
    auth_rate_limit: str = Field("10/minute", description="slowapi limit for auth endpoints")
    rate_limit_enabled: bool = Field(True, description="Toggle request rate limiting")

    # Plant catalog
    plants_data_path: Path = Field(Path("data/plants.json"), description="Plant dataset (JSON array)")

    # HTTP
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")

    # Logging
    log_level: str = Field("INFO", description="Minimum log level")
    log_json: bool = Field(False, description="Emit JSON log lines")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @model_validator(mode="after")
    def check_production_secret(self) -> "Settings":
        if self.is_production and self.jwt_secret == DEFAULT_JWT_SECRET:
            raise ValueError("JWT_SECRET must be set in production")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
