from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", alias="LOG_LEVEL")


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    env: str = Field(default="development", alias="APP_ENV")
    host: str = Field(default="0.0.0.0", alias="APP_HOST")
    port: int = Field(default=8000, alias="APP_PORT")
    # Zone used to render timestamps and to decide what "today" means.
    timezone: str = Field(default="Asia/Karachi", alias="PRIMARY_TIMEZONE")

    database_url: str = Field(default="sqlite:///./data/helpdesk.db", alias="DATABASE_URL")

    media_root: Path = Field(default=Path("./users_data"), alias="MEDIA_ROOT")
    media_base_url: str | None = Field(default=None, alias="MEDIA_BASE_URL")

    split_forbidden_errors: bool = Field(default=False, alias="SPLIT_FORBIDDEN_ERRORS")
    reminder_limit: int = Field(default=3, alias="REMINDER_LIMIT")
    admin_roles: list[str] = Field(default=["Super Admin", "Admin", "Management"], alias="ADMIN_ROLES")

    logging: LoggingConfig = Field(default_factory=LoggingConfig)


@lru_cache
def get_settings() -> AppConfig:
    return AppConfig()


def get_config_value(key: str, default: Any | None = None) -> Any:
    settings = get_settings()
    return getattr(settings, key, default)
