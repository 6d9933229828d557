"""
Signup and login flows.

Both end by minting a bearer token for the user's id. A wrong password or
unknown email is an ordinary negative outcome (InvalidCredentials), not a
server error.
"""

import structlog
from sqlalchemy.orm import Session

from restapi.models.user import User
from restapi.services.hasher import Hasher
from restapi.services.token_service import TokenService
from restapi.services.user_service import create_user, get_user_by_email

logger = structlog.get_logger()


class InvalidCredentials(Exception):
    pass


def signup(
    db: Session,
    hasher: Hasher,
    tokens: TokenService,
    email: str,
    username: str,
    password: str,
) -> tuple[User, str]:
    """Create the user and return it with a fresh token."""
    user = create_user(db, hasher, email=email, username=username, password=password)
    return user, tokens.create_token(user.id)


def login(
    db: Session,
    hasher: Hasher,
    tokens: TokenService,
    email: str,
    password: str,
) -> tuple[User, str]:
    """
    Verify credentials and return the user with a fresh token.

    Raises InvalidCredentials for an unknown email or a wrong password.
    HasherError propagates when the stored hash is unreadable.
    """
    user = get_user_by_email(db, email)
    if user is None:
        # Same Argon2 cost as a real check so timing does not reveal the account
        hasher.compare(password, hasher.dummy_hash)
        logger.info("login_failed", reason="unknown_email")
        raise InvalidCredentials("Invalid email or password.")

    if not hasher.compare(password, user.password):
        logger.info("login_failed", reason="wrong_password", user_id=user.id)
        raise InvalidCredentials("Invalid email or password.")

    logger.info("login_succeeded", user_id=user.id)
    return user, tokens.create_token(user.id)
