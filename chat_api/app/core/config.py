"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
API starts without any configuration; override them via environment
variables in a deployment.
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Chat API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("LOG_FILE") or None

    # Path to the SQLite database backing the user and message
    # collections.  Relative paths are resolved against the project root
    # by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "chat.db")

    # How stored passwords are produced and checked.  ``plain`` keeps
    # compatibility with existing records (plain text comparison);
    # ``pbkdf2`` stores salted PBKDF2 hashes.
    password_scheme: str = os.getenv("PASSWORD_SCHEME", "plain")

    # When true, a store failure while listing messages is logged and an
    # empty list is returned.  When false the failure is reported as a 500.
    suppress_message_list_errors: bool = os.getenv("SUPPRESS_MESSAGE_LIST_ERRORS", "true").lower() in {"1", "true", "yes"}

    # Seconds a real-time subscriber gets to accept an event before it
    # is dropped.
    notify_send_timeout: float = float(os.getenv("NOTIFY_SEND_TIMEOUT", "5"))

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables must
# be set before importing this module.
settings = Settings()
