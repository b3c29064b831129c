"""Verification of access tokens issued by the backend auth service."""

from typing import Any

from jose import JWTError, jwt
from loguru import logger

from blog.core.config import get_settings


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Decode and validate a backend-issued JWT access token."""
    settings = get_settings()
    try:
        return jwt.decode(
            token,
            settings.backend_jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
        )
    except JWTError as e:
        logger.debug(f"Rejected access token: {e}")
        return None
