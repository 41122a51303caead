"""Application configuration with environment-specific profiles.

Supports dev, staging, production and test environments via APP_ENV.
All values can be overridden by environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache


@dataclass(frozen=True)
class Settings:
    """Immutable application settings resolved from environment."""

    database_url: str
    app_env: str = "dev"
    log_level: str = "INFO"

    # Bearer tokens are issued by the external identity provider
    jwt_secret: str = "jwt-change-me"
    jwt_algorithm: str = "HS256"
    jwt_audience: str | None = None

    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:5173"])
    request_id_header_name: str = "X-Request-ID"

    rate_limit_enabled: bool = False
    rate_limit_storage_uri: str = "memory://"
    write_rate_limit: str = "60/minute"

    # Upper bound on a recurring assignment's date range (inclusive days)
    max_recurring_span_days: int = 366

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"


# -- Environment profiles --

_ENV_PROFILES: dict[str, dict] = {
    "dev": {
        "log_level": "DEBUG",
        "rate_limit_enabled": False,
    },
    "staging": {
        "log_level": "INFO",
        "rate_limit_enabled": True,
    },
    "production": {
        "log_level": "WARNING",
        "rate_limit_enabled": True,
        "write_rate_limit": "30/minute",
    },
    "test": {
        "log_level": "WARNING",
        "rate_limit_enabled": False,
    },
}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def get_database_url() -> str:
    """Resolve database URL from the environment, falling back to a local default."""
    env_url = os.getenv("DATABASE_URL")
    if env_url:
        return env_url
    return "postgresql+psycopg2://localhost:5432/coachboard"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build Settings by merging environment profile with env-var overrides."""
    app_env = os.getenv("APP_ENV", "dev")
    profile = _ENV_PROFILES.get(app_env, _ENV_PROFILES["dev"])

    origins = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    return Settings(
        database_url=get_database_url(),
        app_env=app_env,
        log_level=os.getenv("LOG_LEVEL", profile.get("log_level", "INFO")),
        jwt_secret=os.getenv("JWT_SECRET", "jwt-change-me"),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        jwt_audience=os.getenv("JWT_AUDIENCE") or None,
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        request_id_header_name=os.getenv("REQUEST_ID_HEADER_NAME", "X-Request-ID"),
        rate_limit_enabled=_env_bool("RATE_LIMIT_ENABLED", profile.get("rate_limit_enabled", False)),
        rate_limit_storage_uri=os.getenv("RATE_LIMIT_STORAGE_URI", "memory://"),
        write_rate_limit=os.getenv("WRITE_RATE_LIMIT", profile.get("write_rate_limit", "60/minute")),
        max_recurring_span_days=int(os.getenv("MAX_RECURRING_SPAN_DAYS", "366")),
    )
