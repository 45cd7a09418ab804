"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from retirement_backend.schemas.projection import MAX_HORIZON_YEARS

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]
DEFAULT_DB_PATH = Path(__file__).with_name("app.db")


class Settings(BaseModel):
    cors_origins: List[str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    log_level: str = "INFO"
    log_dir: Optional[Path] = None
    db_path: Path = DEFAULT_DB_PATH
    horizon_years: int = Field(default=55, ge=1, le=MAX_HORIZON_YEARS)

    # text generation (OpenAI-compatible chat completions)
    openai_api_key: Optional[str] = None
    summary_url: str = "https://api.openai.com/v1/chat/completions"
    summary_model: str = "gpt-4o-mini"
    summary_timeout: float = Field(default=10.0, gt=0)

    @field_validator("log_level")
    @classmethod
    def normalize_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level {value}")
        return value

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


_ENV_KEYS = {
    "cors_origins": "RETIREMENT_CORS_ORIGINS",
    "log_level": "RETIREMENT_LOG_LEVEL",
    "log_dir": "RETIREMENT_LOG_DIR",
    "db_path": "RETIREMENT_DB_PATH",
    "horizon_years": "RETIREMENT_HORIZON_YEARS",
    "openai_api_key": "OPENAI_API_KEY",
    "summary_url": "RETIREMENT_SUMMARY_URL",
    "summary_model": "RETIREMENT_SUMMARY_MODEL",
    "summary_timeout": "RETIREMENT_SUMMARY_TIMEOUT",
}


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from environment variables; unset keys keep their defaults."""
    environ = os.environ if environ is None else environ
    values = {field: environ[key] for field, key in _ENV_KEYS.items() if environ.get(key)}
    return Settings.model_validate(values)
