"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from environment
variables.  Defaults are provided for all fields so that the API can be
started locally without any setup.  In a production deployment you
should at least override ``SECRET_KEY``, ``ENVIRONMENT`` and
``CORS_ORIGINS``.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Event Manager API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    # All routers are mounted under this prefix, e.g. ``/api/events``.
    api_prefix: str = os.getenv("API_PREFIX", "/api")
    # ``development``, ``production`` or ``test``.  Production turns on
    # secure cookies and restricts CORS to ``cors_origins``.
    environment: str = os.getenv("ENVIRONMENT", "development")
    # When enabled, internal error responses include the stack trace.
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))
    algorithm: str = os.getenv("ALGORITHM", "HS256")

    # Path to the SQLite database file.  A relative path is resolved
    # against the project root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "event_manager.db")
    # Seconds a connection waits for a lock held by another writer.
    database_timeout: float = float(os.getenv("DATABASE_TIMEOUT", "10"))

    # Comma-separated list of origins allowed in production.
    cors_origins: str = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Because the dataclass
# computes values at class definition time, environment variables should
# be set before importing this module.
settings = Settings()
