"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for the API happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. database_url -> DATABASE_URL). Type coercion and validation are built in.

  Explicit settings objects: create_app() accepts a Settings instance, so
      tests build their own Settings(...) rather than mutating the cached one.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, users/, or db/.
"""

import logging
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("userauth.config")


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
    app_name: str = "User Auth API"
    app_version: str = "1.0.0"
    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    database_url: str = "sqlite:///data/database.sqlite"
    # Parent directory for per-test databases (see db.database.create_test_database).
    test_data_dir: str = "data/test"
    seed_demo_data: bool = False

    # ------------------------------------------------------------------
    # Sessions and passwords
    # ------------------------------------------------------------------

    session_ttl_seconds: int = Field(default=24 * 60 * 60, gt=0)
    # 0 disables the background sweep; expiry is still checked on every validation.
    session_purge_interval_seconds: int = Field(default=60 * 60, ge=0)
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    allowed_hosts: list[str] = ["*"]
    cors_origins: list[str] = ["http://localhost:3000"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def warn_on_demo_seed(self) -> "Settings":
        """Demo users carry well-known passwords; flag them outside debug mode."""
        if self.seed_demo_data and not self.debug:
            logger.warning("WARNING: SEED_DEMO_DATA is enabled with DEBUG=false. Demo accounts use public passwords.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: construct Settings(...) directly and pass it to create_app(),
    or call get_settings.cache_clear() after changing environment variables.
    """
    return Settings()
