"""Shared-key authentication for the HTTP surface."""

from __future__ import annotations

import hmac
from typing import Optional

from loguru import logger

from .config import settings

BEARER_SCHEME = "Bearer"


def validate_auth_token(token: Optional[str], api_key: Optional[str] = None) -> bool:
    """Compare a presented token with the configured API key.

    A missing token is rejected. A server without an API key rejects everything and logs a warning."""
    if not token:
        return False

    expected = api_key if api_key is not None else settings.API_KEY
    if not expected:
        logger.warning("API_KEY is not configured, rejecting authenticated request")
        return False

    return hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8"))


def extract_bearer_token(header_value: Optional[str]) -> Optional[str]:
    """Token part of an Authorization header; a value without the Bearer prefix is used as-is."""
    if not header_value:
        return None
    parts = header_value.strip().split(None, 1)
    if not parts:
        return None
    if parts[0] == BEARER_SCHEME:
        return parts[1].strip() if len(parts) > 1 else None
    return header_value.strip()


def validate_request_auth(header_value: Optional[str], api_key: Optional[str] = None) -> bool:
    return validate_auth_token(extract_bearer_token(header_value), api_key=api_key)


__all__ = ["validate_auth_token", "extract_bearer_token", "validate_request_auth"]
