# app/core/config.py
from __future__ import annotations

import os
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

load_dotenv()

# Only used outside production when JWT_SECRET is unset.
DEV_FALLBACK_SECRET = "development-secret-change-me"

# bcrypt work factor floor for production deployments
MIN_PRODUCTION_BCRYPT_ROUNDS = 12

_TRUTHY = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


def _default_database_url() -> str:
    data_dir = os.path.abspath(os.getenv("DATA_DIR", "./data"))
    return os.getenv("DATABASE_URL", f"sqlite:///{os.path.join(data_dir, 'portal.db')}")


class Settings(BaseModel):
    """Process-wide configuration, built once at startup and never mutated."""

    model_config = ConfigDict(frozen=True, validate_default=True)

    ENVIRONMENT: str = Field(default_factory=lambda: os.getenv("ENVIRONMENT", "development"))
    DATABASE_URL: str = Field(default_factory=_default_database_url)

    JWT_SECRET: str = Field(default_factory=lambda: os.getenv("JWT_SECRET", ""))
    JWT_ALGORITHM: str = Field(default_factory=lambda: os.getenv("JWT_ALGORITHM", "HS256"))
    JWT_ACCESS_TTL_MINUTES: int = Field(default_factory=lambda: int(os.getenv("JWT_ACCESS_TTL_MINUTES", "15")), gt=0)
    JWT_REFRESH_TTL_DAYS: int = Field(default_factory=lambda: int(os.getenv("JWT_REFRESH_TTL_DAYS", "7")), gt=0)
    PASSWORD_RESET_TTL_MINUTES: int = Field(default_factory=lambda: int(os.getenv("PASSWORD_RESET_TTL_MINUTES", "30")), gt=0)
    BCRYPT_ROUNDS: int = Field(default_factory=lambda: int(os.getenv("BCRYPT_ROUNDS", "12")), ge=4, le=31)

    ALLOW_LEGACY_ADMIN_BYPASS: bool = Field(default_factory=lambda: _env_bool("ALLOW_LEGACY_ADMIN_BYPASS", "true"))
    AUTO_MIGRATE: bool = Field(default_factory=lambda: _env_bool("AUTO_MIGRATE", "true"))
    SEED_ADMIN_PASSWORD: str = Field(default_factory=lambda: os.getenv("SEED_ADMIN_PASSWORD", "ChangeMe123!"))

    LOG_LEVEL: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    LOG_JSON: bool = Field(default_factory=lambda: _env_bool("LOG_JSON", "true"))
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: _env_list("CORS_ORIGINS", "*"))

    @field_validator("ENVIRONMENT")
    @classmethod
    def _normalize_env(cls, v: str) -> str:
        return (v or "development").strip().lower()

    @model_validator(mode="after")
    def _check_production(self) -> "Settings":
        if not self.is_production:
            return self
        if not self.JWT_SECRET.strip():
            raise ValueError("JWT_SECRET must be set in production")
        if self.BCRYPT_ROUNDS < MIN_PRODUCTION_BCRYPT_ROUNDS:
            raise ValueError(f"BCRYPT_ROUNDS must be at least {MIN_PRODUCTION_BCRYPT_ROUNDS} in production")
        return self

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def signing_secret(self) -> str:
        return self.JWT_SECRET or DEV_FALLBACK_SECRET


settings = Settings()
