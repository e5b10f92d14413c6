"""
placement_api/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (DB URI, JWT secret, avatar limits, etc.)
- Validates configuration on startup
- Environment-specific settings
"""

from limits import parse
from pydantic import Field, field_validator, ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal, List


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # MongoDB
    MONGODB_URL: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    MONGODB_DB_NAME: str = Field(
        default="placement",
        description="MongoDB database name"
    )
    USERS_COLLECTION: str = Field(
        default="users",
        description="Collection holding user records"
    )

    # Avatar storage (GridFS)
    AVATAR_BUCKET_NAME: str = Field(
        default="uploads",
        description="GridFS bucket used for profile pictures"
    )
    AVATAR_MAX_BYTES: int = Field(
        default=5 * 1024 * 1024,
        description="Maximum accepted avatar size in bytes"
    )
    AVATAR_ALLOWED_CONTENT_TYPES: List[str] = Field(
        default=["image/jpeg", "image/png", "image/webp"],
        description="Content types accepted for avatar uploads"
    )

    # Listings
    DEFAULT_PAGE_SIZE: int = Field(
        default=10,
        description="Page size used when the limit query param is omitted"
    )
    EMPTY_LISTING_IS_NOT_FOUND: bool = Field(
        default=True,
        description="Answer empty listing pages with 404 instead of 200 and an empty list"
    )

    # Authentication
    JWT_SECRET_KEY: str = Field(
        default="change-me-in-production",
        description="Secret used to verify bearer tokens"
    )
    JWT_ALGORITHM: str = Field(
        default="HS256",
        description="Bearer token signing algorithm"
    )
    JWT_EXPIRE_MINUTES: int = Field(
        default=1440,
        description="Lifetime of tokens issued by create_access_token"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    API_PREFIX: str = Field(
        default="/api/v1",
        description="API route prefix"
    )
    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:5173"],
        description="Allowed CORS origins"
    )

    # HTTP hardening
    RATE_LIMIT_ENABLED: bool = Field(
        default=True,
        description="Limit requests per client address on API routes"
    )
    RATE_LIMIT: str = Field(
        default="100 per 15 minutes",
        description="Allowance per client address, in limits string notation"
    )
    TRUST_PROXY: bool = Field(
        default=True,
        description="Take the client address from X-Forwarded-For when sent by a trusted proxy"
    )
    FORWARDED_ALLOW_IPS: List[str] = Field(
        default=["127.0.0.1"],
        description="Proxy addresses whose forwarding headers are trusted"
    )
    GZIP_MINIMUM_SIZE: int = Field(
        default=1000,
        description="Responses smaller than this many bytes are sent uncompressed"
    )

    @field_validator("JWT_SECRET_KEY")
    @classmethod
    def validate_secret_key(cls, v: str, info: ValidationInfo) -> str:
        """Ensure the token secret is changed in production."""
        if info.data.get("ENVIRONMENT") == "production" and v == "change-me-in-production":
            raise ValueError("JWT_SECRET_KEY must be changed in production environment")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )


# Global settings instance
settings = Settings()


def validate_settings():
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    errors = []

    if not settings.MONGODB_URL:
        errors.append("MONGODB_URL is required")

    if not settings.MONGODB_DB_NAME:
        errors.append("MONGODB_DB_NAME is required")

    if settings.DEFAULT_PAGE_SIZE <= 0:
        errors.append("DEFAULT_PAGE_SIZE must be a positive integer")

    if settings.AVATAR_MAX_BYTES <= 0:
        errors.append("AVATAR_MAX_BYTES must be a positive integer")

    if settings.RATE_LIMIT_ENABLED:
        try:
            parse(settings.RATE_LIMIT)
        except ValueError:
            errors.append("RATE_LIMIT must use limits notation, e.g. '100 per 15 minutes'")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True
