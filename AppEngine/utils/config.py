"""App Engine configuration module uniformly reads environment variables and provides type-safe access."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from loguru import logger


class Settings(BaseSettings):
    """App Engine configuration, environment variables and fields are all capitalized."""
    RESOURCE_URI_SCHEME: str = Field("ui", description="Scheme of packaged resource URIs, e.g. ui://survey/<id>")
    CHART_JS_CDN_URL: str = Field(
        "https://cdn.jsdelivr.net/npm/chart.js@4.4.0/dist/chart.umd.min.js",
        description="Chart.js script referenced by chart visualizations",
    )
    # Conditions outside the recognized patterns resolve to this value
    UNRECOGNIZED_CONDITION_DEFAULT: bool = Field(
        True, description="Result of a condition the evaluator cannot interpret"
    )
    PUBLIC_BASE_URL: Optional[str] = Field(
        None, description="Public host used for externalUrl resources (defaults to localhost:3000)"
    )
    API_KEY: Optional[str] = Field(None, description="Bearer token accepted by the render/dispatch endpoints")
    AUTH_REQUIRED: bool = Field(False, description="Whether render/dispatch endpoints require a bearer token")
    MIN_AGENT_RESPONSE_LENGTH: int = Field(
        10, description="Agent responses shorter than this are treated as 'no resource'"
    )
    LOG_FILE: str = Field("logs/app_engine.log", description="Log output file")
    LOG_LEVEL: str = Field("INFO", description="Minimum level written by the configured sinks")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="allow",
    )


settings = Settings()


def print_config(config: Settings):
    """Output the current configuration items to the log in human-readable format to facilitate troubleshooting.

    Parameters:
        config: Settings instance, usually global settings."""
    message = ""
    message += "\n=== App Engine Configuration ===\n"
    message += f"Resource URI scheme: {config.RESOURCE_URI_SCHEME}\n"
    message += f"Chart.js CDN: {config.CHART_JS_CDN_URL}\n"
    message += f"Unrecognized condition default: {config.UNRECOGNIZED_CONDITION_DEFAULT}\n"
    message += f"Public base URL: {config.PUBLIC_BASE_URL or '(localhost:3000)'}\n"
    message += f"Auth required: {config.AUTH_REQUIRED}\n"
    message += f"API Key: {'configured' if config.API_KEY else 'not configured'}\n"
    message += f"Log file: {config.LOG_FILE}\n"
    message += f"Log level: {config.LOG_LEVEL}\n"
    message += "=========================\n"
    logger.info(message)
