"""Harness configuration using Pydantic Settings.

Settings are read once at startup and turned into one immutable
``ConnectionConfig`` per engine. Nothing below the entry point reads the
environment directly; the configs are passed down explicitly.
"""

from dataclasses import dataclass
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from isoprobe.core.constants import DATABASE_NAME
from isoprobe.core.exceptions import UnknownEngineError
from isoprobe.models.enums import Engine

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_LOG_FORMATS = ("text", "json")


@dataclass(frozen=True, slots=True)
class ConnectionConfig:
    """Everything needed to open a session to one engine."""

    engine: Engine
    host: str
    port: int
    user: str
    password: str | None
    database: str
    connect_timeout: float

    def __repr__(self) -> str:
        # Keep the password out of logs and tracebacks
        return (
            f"ConnectionConfig(engine={self.engine.value!r}, host={self.host!r}, "
            f"port={self.port}, user={self.user!r}, database={self.database!r})"
        )


class Settings(BaseSettings):
    """Harness settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # MySQL (lock-based engine)
    mysql_host: str = Field(
        default="localhost",
        description="MySQL server hostname",
    )
    mysql_port: int = Field(
        default=3306,
        ge=1,
        le=65535,
        description="MySQL server port",
    )
    mysql_user: str = Field(
        default="root",
        description="MySQL user",
    )
    mysql_password: str | None = Field(
        default=None,
        description="MySQL password",
    )

    # PostgreSQL (multi-version engine)
    pg_host: str = Field(
        default="localhost",
        description="PostgreSQL server hostname",
    )
    pg_port: int = Field(
        default=5432,
        ge=1,
        le=65535,
        description="PostgreSQL server port",
    )
    pg_user: str = Field(
        default="postgres",
        description="PostgreSQL user",
    )
    pg_password: str | None = Field(
        default=None,
        description="PostgreSQL password",
    )

    database_name: str = Field(
        default=DATABASE_NAME,
        description="Database holding the fixture table (same name on every engine)",
    )
    connect_timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        le=300.0,
        description="Timeout for establishing a session",
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    log_format: str = Field(
        default="text",
        description="Console log format: 'text' or 'json'",
    )
    log_file_path: str | None = Field(
        default=None,
        description="Path for rotating log file (disabled when unset)",
    )
    log_file_max_bytes: int = Field(
        default=10485760,  # 10MB
        description="Maximum size of each log file in bytes",
    )
    log_file_backup_count: int = Field(
        default=3,
        description="Number of backup log files to keep",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Invalid log level '{v}'. Expected one of {', '.join(_LOG_LEVELS)}")
        return level

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        fmt = v.lower()
        if fmt not in _LOG_FORMATS:
            raise ValueError(f"Invalid log format '{v}'. Expected 'text' or 'json'")
        return fmt

    def connection_config(self, engine: Engine) -> ConnectionConfig:
        """Build the connection config for one engine."""
        if engine is Engine.MYSQL:
            host, port, user, password = (
                self.mysql_host,
                self.mysql_port,
                self.mysql_user,
                self.mysql_password,
            )
        elif engine is Engine.POSTGRES:
            host, port, user, password = (
                self.pg_host,
                self.pg_port,
                self.pg_user,
                self.pg_password,
            )
        else:
            raise UnknownEngineError(
                str(engine), f"No connection settings for engine '{engine}'"
            )

        return ConnectionConfig(
            engine=engine,
            host=host,
            port=port,
            user=user,
            password=password,
            database=self.database_name,
            connect_timeout=self.connect_timeout_seconds,
        )

    def connection_configs(self) -> dict[Engine, ConnectionConfig]:
        """Connection configs for every known engine."""
        return {engine: self.connection_config(engine) for engine in Engine}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
