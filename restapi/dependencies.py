"""
FastAPI dependencies for the credential services.

The hasher and token service are built once from ``settings`` and shared
by every request; both are safe for concurrent use.
"""

from datetime import timedelta
from functools import lru_cache

import structlog
from fastapi import Depends, Header, HTTPException

from restapi.config import settings
from restapi.services.hasher import Hasher
from restapi.services.token_service import TokenError, TokenService

logger = structlog.get_logger()


@lru_cache
def get_hasher() -> Hasher:
    return Hasher(settings.hash_parameters())


@lru_cache
def get_token_service() -> TokenService:
    return TokenService(
        settings.secret_key,
        lifetime=timedelta(days=settings.token_lifetime_days),
    )


def extract_bearer_token(authorization: str | None = Header(None)) -> str:
    """Extract token from Authorization header."""
    parts = (authorization or "").split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
        logger.info("missing_credentials")
        raise HTTPException(
            status_code=401,
            detail="An access token is required for accessing this data.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return parts[1]


def get_current_user_id(
    token: str = Depends(extract_bearer_token),
    tokens: TokenService = Depends(get_token_service),
) -> int:
    """Verify the bearer token and return the authenticated user id."""
    try:
        return tokens.check_token(token)
    except TokenError as e:
        logger.info("token_rejected", reason=type(e).__name__)
        raise HTTPException(
            status_code=401,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
