"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for Gatekeeper happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. jwt_secret -> JWT_SECRET).

  @model_validator(mode="after"): Resolves the signing secret once all fields
      are loaded. An unset JWT_SECRET falls back to DEV_SECRET_KEY with a
      warning, or fails closed when STRICT_SECRET=true.

Layer rule: core/ is the kernel. This module may not import from api/ or auth/.
"""

import logging
from datetime import timedelta
from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("gatekeeper.config")

# Insecure, publicly known fallback. Only acceptable for local development.
DEV_SECRET_KEY = "dev-secret-key"  # noqa: S105

# Session lifetime. Fixed; there is no env var for it.
TOKEN_TTL = timedelta(hours=24)


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # None means "use the store default" (a SQLite file next to auth/store.py).
    database_url: str | None = None

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    # Empty string is the sentinel for "not configured".
    jwt_secret: str = ""
    # When true, a missing JWT_SECRET is a startup error instead of a warning.
    strict_secret: bool = False

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def resolve_jwt_secret(self) -> "Settings":
        """Apply the signing secret fallback policy.

        JWT_SECRET set: used as-is.
        JWT_SECRET unset, STRICT_SECRET=true: raise ValueError so the process
            refuses to start.
        JWT_SECRET unset otherwise: fall back to DEV_SECRET_KEY and log a
            warning. Anyone who knows the default can mint valid tokens, so
            this path must never be reached in production.
        """
        if not self.jwt_secret:
            if self.strict_secret:
                raise ValueError(
                    "JWT_SECRET is required when STRICT_SECRET=true. "
                    "Set JWT_SECRET in your environment or .env file."
                )
            logger.warning(
                "WARNING: JWT_SECRET is not set; using the insecure development default. "
                "Tokens can be forged by anyone who knows it."
            )
            self.jwt_secret = DEV_SECRET_KEY
        return self

    @property
    def uses_dev_secret(self) -> bool:
        return self.jwt_secret == DEV_SECRET_KEY


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
