from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = Field(default="Trade Journal", description="Application title")

    db_path: str = Field(default="data/journal.db", description="SQLite database path")

    api_host: str = Field(default="0.0.0.0", description="HTTP bind address")
    api_port: int = Field(default=5000, description="HTTP port")

    trading_days_per_year: int = Field(default=252, description="Sharpe ratio annualization factor")

    log_level: str = Field(default="INFO", description="Logging level")
    log_file: str = Field(default="logs/journal.log", description="Log file path")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    global _settings
    _settings = Settings()
    return _settings
