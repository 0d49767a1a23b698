"""
Configuration management using Pydantic Settings
"""
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# config.py is at: backend/contactbook/core/config.py
# Project root is: backend/contactbook/core/../../../
_current_file = Path(__file__).resolve()
_backend_dir = _current_file.parent.parent.parent
PROJECT_ROOT = _backend_dir.parent
ENV_FILE = PROJECT_ROOT / ".env"
# Fallback: try in backend/ directory if not found in project root
if not ENV_FILE.exists():
    ENV_FILE = _backend_dir / ".env"
if ENV_FILE.exists():
    load_dotenv(ENV_FILE, override=False)

DEFAULT_TEMPLATES_DIR = PROJECT_ROOT / "frontend" / "templates"


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = "ContactBook"
    app_env: str = Field(default="development", description="Application environment")
    log_level: str = Field(default="INFO", description="Logging level")
    secret_key: str = Field(
        default="change-me",
        min_length=8,
        description="Secret key used to sign the session cookie (flash messages)"
    )
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, ge=1, le=65535, description="API port")

    # Logging
    log_sqlalchemy: bool = Field(default=False, description="Enable SQLAlchemy query logging")
    log_uvicorn_access: bool = Field(default=False, description="Enable Uvicorn access logging")
    log_module_levels: Optional[str] = Field(
        default=None,
        description='Module-specific log levels (JSON string, e.g., {"contactbook.services": "DEBUG"})'
    )
    log_format: str = Field(
        default="json",
        description="Log format: 'json' for structured logging, 'text' for plain text"
    )
    log_file_enabled: bool = Field(default=False, description="Enable file logging")
    log_file_path: str = Field(
        default="logs/contactbook.log",
        description="Path to log file (relative to project root)"
    )
    log_file_rotation: str = Field(
        default="midnight",
        description="Log file rotation: 'midnight' or 'W0'..'W6' (weekly)"
    )
    log_file_retention: int = Field(
        default=30,
        ge=1,
        description="Number of rotated log files to keep"
    )
    log_sensitive_data: bool = Field(
        default=False,
        description="Disable masking of passwords and secrets in logs - NOT RECOMMENDED"
    )

    # Database
    database_url: Optional[str] = Field(
        default=None,
        description="Full SQLAlchemy URL; takes precedence over the POSTGRES_* fields"
    )
    postgres_host: Optional[str] = Field(default=None, description="PostgreSQL host")
    postgres_db: str = Field(default="contactbook", description="PostgreSQL database name")
    postgres_user: str = Field(default="contactbook", description="PostgreSQL user")
    postgres_password: str = Field(default="", description="PostgreSQL password")
    postgres_port: int = Field(default=5432, ge=1, le=65535, description="PostgreSQL port")
    database_pool_size: int = Field(default=5, ge=1, description="Database pool size")
    database_max_overflow: int = Field(default=10, ge=0, description="Database max overflow")
    database_connect_timeout: int = Field(default=5, ge=1, description="Connect timeout (seconds)")
    database_create_tables: bool = Field(
        default=False,
        description="Create missing tables at startup instead of relying on Alembic"
    )

    # Pages
    contacts_page_size: int = Field(default=5, ge=1, le=100, description="Contacts per list page")
    templates_dir: Path = Field(default=DEFAULT_TEMPLATES_DIR, description="Jinja2 templates directory")

    @field_validator("log_format")
    @classmethod
    def normalize_log_format(cls, v: str) -> str:
        """Only 'json' and 'text' are understood"""
        v = v.lower().strip()
        if v not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return v

    @property
    def sqlalchemy_url(self) -> str:
        """Construct database URL"""
        if self.database_url:
            return self.database_url
        if self.postgres_host:
            return (
                f"postgresql+psycopg://{self.postgres_user}:{self.postgres_password}"
                f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
            )
        return f"sqlite:///{PROJECT_ROOT / 'contactbook.db'}"

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
