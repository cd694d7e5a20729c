"""
Configuration module for Ledgerbooks backend.

Loads environment variables and validates required settings.
"""
import os
from typing import List
from dotenv import load_dotenv

# Load .env file
load_dotenv()

DEFAULT_JWT_SECRET = "dev-secret-change-me-in-every-deployment"


class Settings:
    """Application settings loaded from environment variables."""

    # Persistence
    # 'supabase' talks to PostgREST; 'memory' keeps everything in-process
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "supabase").lower()
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    # Server-side key: the backend scopes every query by user_id itself
    SUPABASE_SECRET_KEY: str = os.getenv("SUPABASE_SECRET_KEY", "")

    # Access tokens (minted by this backend, HS256)
    JWT_SECRET: str = os.getenv("JWT_SECRET", DEFAULT_JWT_SECRET)
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15"))

    # Refresh token cookie
    REFRESH_TOKEN_EXPIRE_DAYS: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))
    REFRESH_COOKIE_NAME: str = os.getenv("REFRESH_COOKIE_NAME", "refresh_token")

    # Application Settings
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS Settings (only consulted in production)
    CORS_ALLOWED_ORIGINS: List[str] = [
        origin.strip()
        for origin in os.getenv("CORS_ALLOWED_ORIGINS", "").split(",")
        if origin.strip()
    ]

    @property
    def COOKIE_SECURE(self) -> bool:
        """Send the refresh cookie over HTTPS only, except in local development."""
        raw = os.getenv("COOKIE_SECURE")
        if raw is not None:
            return raw.lower() == "true"
        return not (self.is_development() or self.ENVIRONMENT.lower() == "testing")

    @property
    def refresh_cookie_max_age(self) -> int:
        """Refresh cookie lifetime in seconds."""
        return self.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60

    @classmethod
    def validate(cls) -> None:
        """
        Validate that all required settings are configured.

        Raises:
            ValueError: If any required setting is missing.
        """
        if cls.STORAGE_BACKEND not in ("supabase", "memory"):
            raise ValueError(
                f"Unknown STORAGE_BACKEND '{cls.STORAGE_BACKEND}'. "
                "Use 'supabase' or 'memory'."
            )

        required_settings = {}
        if cls.STORAGE_BACKEND == "supabase":
            required_settings["SUPABASE_URL"] = cls.SUPABASE_URL
            required_settings["SUPABASE_SECRET_KEY"] = cls.SUPABASE_SECRET_KEY

        missing = [key for key, value in required_settings.items() if not value]

        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}. "
                "Please check your .env file."
            )

        if cls.is_production() and cls.JWT_SECRET == DEFAULT_JWT_SECRET:
            raise ValueError("JWT_SECRET must be set in production.")

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production environment."""
        return cls.ENVIRONMENT.lower() == "production"

    @classmethod
    def is_development(cls) -> bool:
        """Check if running in development environment."""
        return cls.ENVIRONMENT.lower() == "development"


# Create a singleton instance
settings = Settings()

# Validate settings on module import (will fail fast if misconfigured)
# Skip validation during tests or when importing for introspection
if os.getenv("VALIDATE_CONFIG", "true").lower() == "true":
    try:
        settings.validate()
    except ValueError as e:
        # In development, warn but don't crash
        if settings.is_development():
            print(f"Warning: {e}")
            print("   The app may not work correctly until you configure your .env file.")
        else:
            # In production or staging, fail immediately
            raise
