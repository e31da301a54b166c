"""Toolchain settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. The ``TENANTDB_ENV`` variable selects an extra env file
(``.env.<env>``) that is layered over ``.env``, so one checkout can hold
development, test and production profiles side by side.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Root of the db package tree (src/db); seeds and versions live under migrations/
_PACKAGE_ROOT = Path(__file__).resolve().parent.parent


def get_environment_name() -> str:
    """Return the active configuration profile name."""
    return os.environ.get("TENANTDB_ENV", "development")


def get_env_files() -> tuple[str, ...]:
    """Return env files to load, most specific last."""
    return (".env", f".env.{get_environment_name()}")


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables:
        TENANTDB_DB_HOST: Database host (default: localhost)
        TENANTDB_DB_PORT: Database port (default: 5432)
        TENANTDB_DB_DATABASE: Database name (default: tenantdb)
        TENANTDB_DB_USERNAME: Database user (default: tenantdb)
        TENANTDB_DB_PASSWORD: Database password (required in production)
        TENANTDB_DB_POOL_MIN_CONNECTIONS: Minimum connections in pool (default: 1)
        TENANTDB_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 5)
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANTDB_DB_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="tenantdb", description="Database name")
    username: str = Field(default="tenantdb", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    pool_min_connections: int = Field(
        default=1,
        description="Minimum connections in pool",
        ge=1,
        le=100,
    )
    pool_max_connections: int = Field(
        default=5,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )

    @model_validator(mode="after")
    def validate_pool_settings(self) -> "DatabaseSettings":
        """Validate pool max >= min."""
        if self.pool_max_connections < self.pool_min_connections:
            raise ValueError(
                f"pool_max_connections ({self.pool_max_connections}) must be >= "
                f"pool_min_connections ({self.pool_min_connections})"
            )
        return self


class RedisSettings(BaseSettings):
    """Cache store connection settings.

    Environment variables:
        TENANTDB_REDIS_HOST: Redis host (default: localhost)
        TENANTDB_REDIS_PORT: Redis port (default: 6379)
        TENANTDB_REDIS_DB: Redis logical database (default: 0)
        TENANTDB_REDIS_PASSWORD: Redis password (optional)
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANTDB_REDIS_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Redis host")
    port: int = Field(default=6379, description="Redis port")
    db: int = Field(default=0, ge=0, description="Redis logical database")
    password: SecretStr | None = Field(default=None, description="Redis password")


class ToolchainSettings(BaseSettings):
    """Migration and seeding toolchain settings.

    Environment variables:
        TENANTDB_SEEDS_DIR: Fixture directory (default: migrations/seeds)
        TENANTDB_VERSIONS_DIR: Migration modules directory (default: migrations/versions)
        TENANTDB_BOOTSTRAP_MIGRATION: File kept by squash
        TENANTDB_DEMO_TENANT: Schema name of the demo tenant (default: demo)
        TENANTDB_TENANTS_CACHE_KEY: Cache key of the tenant allow-list
        TENANTDB_RECONNECT_ATTEMPT_LIMIT: Connection attempts before giving up (default: 5)
        TENANTDB_RECONNECT_DELAY_SECONDS: Delay between attempts (default: 15)
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANTDB_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    seeds_dir: Path = Field(default=_PACKAGE_ROOT / "migrations" / "seeds")
    versions_dir: Path = Field(default=_PACKAGE_ROOT / "migrations" / "versions")
    bootstrap_migration: str = Field(default="20200101000000_initial_seed.py")
    demo_tenant: str = Field(default="demo", min_length=1)
    tenants_cache_key: str = Field(default="tenants", min_length=1)
    reconnect_attempt_limit: int = Field(default=5, ge=1)
    reconnect_delay_seconds: float = Field(default=15.0, ge=0)


class AccountSecuritySettings(BaseSettings):
    """Login throttling settings.

    Environment variables:
        TENANTDB_ACCOUNT_ATTEMPTS_LIMIT: Failed logins allowed per e-mail (default: 5)
        TENANTDB_ACCOUNT_LOCKOUT_SECONDS: Lockout duration (default: 900)
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANTDB_ACCOUNT_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    attempts_limit: int = Field(default=5, ge=1)
    lockout_seconds: int = Field(default=900, ge=1)


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings."""
    return DatabaseSettings(_env_file=get_env_files())


@lru_cache
def get_redis_settings() -> RedisSettings:
    """Get cached cache-store settings."""
    return RedisSettings(_env_file=get_env_files())


@lru_cache
def get_toolchain_settings() -> ToolchainSettings:
    """Get cached toolchain settings."""
    return ToolchainSettings(_env_file=get_env_files())


@lru_cache
def get_account_security_settings() -> AccountSecuritySettings:
    """Get cached account security settings."""
    return AccountSecuritySettings(_env_file=get_env_files())
