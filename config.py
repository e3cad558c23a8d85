import re
from datetime import timedelta
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DURATION_RE = re.compile(r"^(\d+)\s*([smhd]?)$")
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value: str) -> timedelta:
    """
    Parse a token lifetime such as "7d", "12h", "30m" or "3600"

    Args:
        value: Duration string, bare numbers are seconds

    Returns:
        The duration as a timedelta

    Raises:
        ValueError: If the string is not a recognised duration
    """
    match = _DURATION_RE.match(value.strip().lower())
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(seconds=int(amount) * _DURATION_UNITS[unit])


class Settings(BaseSettings):
    """Application configuration, read once from the environment and .env"""
    # Debug error detail is only sent when this is explicitly "development"
    environment: str = Field("production", alias="ENVIRONMENT")

    # Database
    database_url: str = Field(alias="DATABASE_URL")
    database_echo: bool = Field(False, alias="DATABASE_ECHO")

    # Sessions
    jwt_secret: str = Field(alias="JWT_SECRET")
    jwt_expires_in: timedelta = Field(timedelta(days=7), alias="JWT_EXPIRES_IN")
    cookie_expires_days: int = Field(7, alias="JWT_COOKIE_EXPIRES_IN")
    bcrypt_rounds: int = Field(10, ge=4, le=31, alias="BCRYPT_ROUNDS")

    # HTTP
    cors_origins_value: str = Field("http://localhost:3000", alias="CORS_ORIGINS")
    max_upload_size: int = Field(5 * 1024 * 1024, gt=0, alias="MAX_UPLOAD_SIZE")

    # Image host
    cloudinary_cloud_name: Optional[str] = Field(None, alias="CLOUDINARY_CLOUD_NAME")
    cloudinary_api_key: Optional[str] = Field(None, alias="CLOUDINARY_API_KEY")
    cloudinary_api_secret: Optional[str] = Field(None, alias="CLOUDINARY_API_SECRET")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    @field_validator("environment")
    @classmethod
    def _normalise_environment(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("log_level")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("jwt_expires_in", mode="before")
    @classmethod
    def _parse_jwt_expires_in(cls, value):
        if isinstance(value, str):
            return parse_duration(value)
        return value

    @field_validator(
        "cloudinary_cloud_name", "cloudinary_api_key", "cloudinary_api_secret", mode="before"
    )
    @classmethod
    def _blank_is_unset(cls, value):
        return value or None

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins_value.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def cookie_max_age(self) -> int:
        return self.cookie_expires_days * 24 * 60 * 60


@lru_cache
def get_settings() -> Settings:
    """Get application settings - used as FastAPI dependency"""
    return Settings()
