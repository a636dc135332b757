"""Configuration for the transaction risk monitor.

Values are read from environment variables (and an optional .env file).
"""

from enum import Enum
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppEnvironment(str, Enum):
    LOCAL = "local"
    TEST = "test"
    PROD = "prod"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    JSON = "json"
    CONSOLE = "console"


class Settings(BaseSettings):
    app_name: str = Field(default="transaction-risk-monitor")
    app_env: AppEnvironment = Field(default=AppEnvironment.LOCAL)
    version: str = Field(default="1.0.0")
    log_level: LogLevel = Field(default=LogLevel.INFO)
    log_format: LogFormat = Field(default=LogFormat.CONSOLE)

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)

    database_url: str = Field(default="sqlite:///./transactions.db")
    database_echo: bool = Field(default=False)

    cors_allowed_origins: List[str] = Field(default=["http://localhost:5173"])
    static_dir: Optional[str] = Field(default=None)
    seed_on_startup: bool = Field(default=False)

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v):
        if isinstance(v, LogLevel):
            return v
        return LogLevel(str(v).upper())

    @field_validator("log_format", mode="before")
    @classmethod
    def validate_log_format(cls, v):
        if isinstance(v, LogFormat):
            return v
        return LogFormat(str(v).lower())

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings (cached)."""
    return Settings()
