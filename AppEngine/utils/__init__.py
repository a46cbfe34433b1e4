"""Utility functions: settings, agent output parsing, request authentication."""

from .auth import extract_bearer_token, validate_auth_token, validate_request_auth
from .config import Settings, print_config, settings
from .json_parser import AgentOutputParser, JSONParseError, parse_config_text

__all__ = [
    "Settings",
    "settings",
    "print_config",
    "AgentOutputParser",
    "JSONParseError",
    "parse_config_text",
    "validate_auth_token",
    "extract_bearer_token",
    "validate_request_auth",
]
