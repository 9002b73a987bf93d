"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# Load .env in development (no-op when missing)
load_dotenv()

# Development-only signing secrets (base64, >= 256 bits). Never used in production.
_DEV_ACCESS_SECRET: Final[str] = (
    "ZGV2LWFjY2Vzcy1zZWNyZXQtZGV2LWFjY2Vzcy1zZWNyZXQtZGV2LWFjY2Vzcy1zZWNyZXQ="
)
_DEV_REFRESH_SECRET: Final[str] = (
    "ZGV2LXJlZnJlc2gtc2VjcmV0LWRldi1yZWZyZXNoLXNlY3JldC1kZXYtcmVmcmVzaC1zZWNyZXQ="
)


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer environment variable, falling back to ``default``."""
    val = os.getenv(name)
    return default if val is None or not val.strip() else int(val)


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret. Defaults to a development-safe placeholder and should be
        overridden in production.
    JWT_ACCESS_SECRET: str
        Base64 key (>= 256 bits) signing access tokens.
    JWT_REFRESH_SECRET: str
        Base64 key (>= 256 bits, distinct from the access key) signing
        refresh tokens.
    JWT_ACCESS_TTL_SECONDS: int
        Access token lifetime (5 minutes by default).
    JWT_REFRESH_TTL_SECONDS: int
        Refresh token lifetime (7 days by default).
    JWT_ALGORITHM: str
        HMAC algorithm shared by the signer and ``flask-jwt-extended``.
    USER_SERVICE_URL: str
        Base URL of the external user service.
    USER_SERVICE_TIMEOUT: float
        Per-request timeout (seconds) for user service calls.
    TOKEN_STORE_BACKEND: str
        ``"sqlalchemy"`` (default) or ``"memory"``.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    CORS_ORIGINS: str
        Comma-separated allowed origins for ``/api/*`` (blank means any).
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET", "")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "")
    JWT_ACCESS_TTL_SECONDS = env_int("JWT_ACCESS_TTL_SECONDS", 5 * 60)
    JWT_REFRESH_TTL_SECONDS = env_int("JWT_REFRESH_TTL_SECONDS", 7 * 24 * 60 * 60)
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

    # User service
    USER_SERVICE_URL = os.getenv("USER_SERVICE_URL", "http://localhost:8081/api/v1")
    USER_SERVICE_TIMEOUT = float(os.getenv("USER_SERVICE_TIMEOUT", "5.0"))

    # Token persistence
    TOKEN_STORE_BACKEND = os.getenv("TOKEN_STORE_BACKEND", "sqlalchemy")

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # HTTP edge
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")
    CORS_MAX_AGE = env_int("CORS_MAX_AGE", 600)
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and falls back to fixed development signing
    secrets when none are provided.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET", _DEV_ACCESS_SECRET)
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", _DEV_REFRESH_SECRET)


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Propagates exceptions so pytest can surface tracebacks directly.
    """

    TESTING = True
    DEBUG = False
    JWT_ACCESS_SECRET = _DEV_ACCESS_SECRET
    JWT_REFRESH_SECRET = _DEV_REFRESH_SECRET
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Signing secrets have no defaults: startup fails until both are provided.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
