# -*- coding: utf-8 -*-
"""App Engine server configuration file

This module uses pydantic-settings to manage the Flask server configuration and supports automatic loading from environment variables and .env files.
Engine behavior (URI scheme, authentication, logging) is configured in AppEngine/utils/config.py."""

from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import Field, ConfigDict
from typing import Optional


# Calculate .env priority: the current working directory first, followed by the project root directory
PROJECT_ROOT: Path = Path(__file__).resolve().parent
CWD_ENV: Path = Path.cwd() / ".env"
ENV_FILE: str = str(CWD_ENV if CWD_ENV.exists() else (PROJECT_ROOT / ".env"))


class Settings(BaseSettings):
    """Server configuration; supports automatic loading of .env and environment variables."""
    # ================== Flask server configuration ====================
    HOST: str = Field("0.0.0.0", description="Host address, such as 0.0.0.0 or 127.0.0.1")
    PORT: int = Field(5000, description="Flask server port number, default 5000")
    DEBUG: bool = Field(False, description="Run Flask in debug mode")
    SECRET_KEY: Optional[str] = Field(None, description="Flask secret key, random per process when not set")
    API_PREFIX: str = Field("/api/app", description="URL prefix of the App Engine blueprint")

    model_config = ConfigDict(
        env_file=ENV_FILE,
        env_prefix="",
        case_sensitive=False,
        extra="allow"
    )


# Create a global configuration instance
settings = Settings()


def reload_settings() -> Settings:
    """Reload configuration

    Reload configuration from .env files and environment variables, updating the global settings instance.

    Returns:
        Settings: newly created configuration instance"""

    global settings
    settings = Settings()
    return settings
