"""Environment-driven configuration with Pydantic v2."""

from typing import Literal, Optional
from pathlib import Path
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Settings read from MODEL_EXPIRES_* environment variables."""

    # Database Configuration
    database_url: str = Field(default="sqlite+aiosqlite:///./data/model_expires.db")
    database_echo: bool = Field(default=False)
    database_pool_size: int = Field(default=5, ge=1, le=100)
    database_max_overflow: int = Field(default=10, ge=0, le=100)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="json")
    log_file: Optional[str] = Field(default=None)

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v):
        """Ensure database directory exists for SQLite."""
        if v and v.startswith("sqlite"):
            if ":///" in v:
                db_path = v.split("///")[1]
                if db_path and db_path != ":memory:":
                    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    model_config = {
        "env_prefix": "MODEL_EXPIRES_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
        "env_parse_none_str": "none",
    }
