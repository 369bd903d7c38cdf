"""
DoctorWeb Backend - Application Configuration
===============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a module-level `settings` object.
Who:   Imported by the app factory, middleware, and exception handlers.
When:  Loaded once at module import time; validated before the app starts.

Every value has a development default, so a bare checkout serves the sample
content in ./data without any .env file.
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


DEFAULT_CORS_ORIGINS = ",".join(
    [
        "http://localhost:4200",
        "http://localhost:4006",
        "http://localhost:3000",
        "https://ankurgoswami.com",
    ]
)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes are grouped by concern. Production deployments should at least
    set ENVIRONMENT=production (hides internal error text) and CORS_ORIGINS.
    """

    # ── Content Storage ───────────────────────────────────────────────────
    # What: Directory holding one JSON file per collection (pages.json, ...)
    # Relative paths resolve against the process working directory.
    data_dir: str = Field(default="./data")

    # What: Reject create/update payloads whose slug is already taken in the
    # same collection. Existing duplicates on disk stay readable.
    enforce_unique_slugs: bool = Field(default=True)

    # What: On startup, write an empty unit ([] or {}) for every registered
    # collection whose file is missing.
    seed_missing_collections: bool = Field(default=True)

    # ── Request Limits ────────────────────────────────────────────────────
    # Default: 10MB
    max_body_size: int = Field(default=10_485_760, ge=1024, le=52_428_800)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs (split by cors_origins_list)
    cors_origins: str = Field(default=DEFAULT_CORS_ORIGINS)

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list, dropping blanks."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=3001, ge=1024, le=65535)

    # What: development | production | test
    # In development, 500 responses carry the exception text; otherwise a
    # generic message is returned and the detail is only logged.
    environment: str = Field(default="development")

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        valid = {"development", "production", "test"}
        lower = v.lower()
        if lower not in valid:
            raise ValueError(f"Invalid environment '{v}'. Must be one of: {valid}")
        return lower

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # DATA_DIR and data_dir both work
    }


# Imported throughout the application
settings = Settings()
