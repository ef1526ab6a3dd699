"""
Application configuration module.

Configuration classes for the taskboard client (development, testing,
production).  The client keeps no database: it renders HTML and delegates
authentication and task persistence to the remote task API over HTTP, so
the settings here are mostly upstream URLs, timeouts and session-cookie
options.  Values are loaded from environment variables with sensible
defaults.
"""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent


def _load_optional_key(raw_env_var: str, path_env_var: str) -> str | None:
    """
    Load a PEM key from direct env content or from a path env variable.

    Unlike the upstream services, the client can run without a key: the
    bearer credential is then treated as opaque and only its ``exp`` claim
    (when present) is read.

    Returns:
        The PEM text, or ``None`` when neither variable is set.
    """
    raw_key = os.environ.get(raw_env_var, "").strip()
    if raw_key:
        return raw_key

    key_path = os.environ.get(path_env_var, "").strip()
    if key_path:
        try:
            return Path(key_path).read_text(encoding="utf-8")
        except OSError as exc:
            raise RuntimeError(
                f"Unable to read JWT key file at '{key_path}' from {path_env_var}."
            ) from exc

    return None


API_BASE_URL = os.environ.get("API_BASE_URL", "http://localhost:5000")


class Config:
    """Base configuration with default settings."""

    SECRET_KEY: str = os.environ.get(
        "SECRET_KEY", "taskboard-dev-secret-change-in-production"
    )

    API_BASE_URL: str = API_BASE_URL
    AUTH_SERVICE_URL: str = os.environ.get("AUTH_SERVICE_URL", API_BASE_URL)
    TASK_SERVICE_URL: str = os.environ.get("TASK_SERVICE_URL", API_BASE_URL)
    AUTH_SERVICE_TIMEOUT: int = int(os.environ.get("AUTH_SERVICE_TIMEOUT", "5"))
    TASK_SERVICE_TIMEOUT: int = int(os.environ.get("TASK_SERVICE_TIMEOUT", "5"))

    JWT_PUBLIC_KEY: str | None = _load_optional_key("JWT_PUBLIC_KEY", "JWT_PUBLIC_KEY_PATH")
    JWT_CLOCK_SKEW_SECONDS: int = int(os.environ.get("JWT_CLOCK_SKEW_SECONDS", "30"))

    # In-memory workspaces untouched for this long are discarded.
    WORKSPACE_IDLE_SECONDS: int = int(os.environ.get("WORKSPACE_IDLE_SECONDS", "3600"))

    DATE_DISPLAY_FORMAT: str = os.environ.get("DATE_DISPLAY_FORMAT", "%b %d, %Y")

    SESSION_COOKIE_HTTPONLY: bool = True
    SESSION_COOKIE_SAMESITE: str = os.environ.get("SESSION_COOKIE_SAMESITE", "Lax")
    SESSION_COOKIE_SECURE: bool = (
        os.environ.get("SESSION_COOKIE_SECURE", "false").strip().lower() == "true"
    )


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG: bool = True
    TESTING: bool = False


class TestingConfig(Config):
    """Testing environment configuration."""

    DEBUG: bool = True
    TESTING: bool = True

    AUTH_SERVICE_URL: str = os.environ.get("TEST_AUTH_SERVICE_URL", "http://task-api")
    TASK_SERVICE_URL: str = os.environ.get("TEST_TASK_SERVICE_URL", "http://task-api")
    AUTH_SERVICE_TIMEOUT: int = int(os.environ.get("TEST_AUTH_SERVICE_TIMEOUT", "1"))
    TASK_SERVICE_TIMEOUT: int = int(os.environ.get("TEST_TASK_SERVICE_TIMEOUT", "1"))

    # Tests opt in to signature verification explicitly.
    JWT_PUBLIC_KEY: str | None = _load_optional_key(
        "TEST_JWT_PUBLIC_KEY", "TEST_JWT_PUBLIC_KEY_PATH"
    )

    DATE_DISPLAY_FORMAT: str = "%Y-%m-%d"


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG: bool = False
    TESTING: bool = False
    SESSION_COOKIE_SECURE: bool = (
        os.environ.get("SESSION_COOKIE_SECURE", "true").strip().lower() == "true"
    )


# Configuration mapping for easy access
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Get the configuration class for the specified environment.

    Args:
        env: Environment name (development, testing, production).
             If None, uses FLASK_ENV environment variable.

    Returns:
        Configuration class for the specified environment.
    """
    if env is None:
        env = os.environ.get("FLASK_ENV", "development")
    return config.get(env, config["default"])
