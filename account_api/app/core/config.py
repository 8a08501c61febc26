"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields.  In a
production deployment you should at least override ``SECRET_KEY`` and
``COOKIE_SECURE`` via environment variables.
"""

import os
from dataclasses import dataclass
from typing import Optional

from fastapi import Request


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Account API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("LOG_FILE") or None
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))
    algorithm: str = os.getenv("ALGORITHM", "HS256")

    # Name of the cookie carrying the signed access token.  Clients that
    # cannot use cookies may send the same token as ``Authorization:
    # Bearer <token>`` instead.
    cookie_name: str = os.getenv("COOKIE_NAME", "token")
    cookie_secure: bool = os.getenv("COOKIE_SECURE", "false").lower() in {"1", "true", "yes"}

    # Path to the SQLite database file.  A relative path is resolved
    # relative to the ``account_api`` package directory by ``core.db``.
    database_url: str = os.getenv("DATABASE_URL", "accounts.db")


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Because the dataclass
# computes defaults at class creation time, environment variables should
# be set before importing this module.
settings = Settings()


def get_app_settings(request: Request) -> Settings:
    """Return the settings the running application was created with."""
    return getattr(request.app.state, "settings", settings)
