"""
Signed bearer tokens for authenticated users.

Tokens are HS256 JWTs with three claims: ``sub`` (integer user id), ``iat``
and ``exp`` (unix seconds). Nothing is stored server-side; a token is valid
while its signature checks out against the current secret and ``exp`` is in
the future.
"""

import time
from datetime import timedelta

import jwt
from pydantic import BaseModel, ConfigDict, StrictInt, ValidationError

ALGORITHM = "HS256"
DEFAULT_LIFETIME = timedelta(days=15)


class TokenError(Exception):
    """Base class for token service failures."""


class SigningError(TokenError):
    pass


class InvalidSignature(TokenError):
    pass


class TokenExpired(TokenError):
    pass


class MalformedToken(TokenError):
    pass


class TokenClaims(BaseModel):
    model_config = ConfigDict(frozen=True)

    sub: StrictInt
    iat: int
    exp: int


class TokenService:
    """Mints and checks tokens with a single process-wide secret."""

    def __init__(self, secret_key: str, lifetime: timedelta = DEFAULT_LIFETIME):
        if not secret_key:
            raise SigningError("Signing secret is not configured")
        self._secret_key = secret_key
        self.lifetime = lifetime

    def create_token(self, subject_id: int) -> str:
        """Create a signed token for ``subject_id``."""
        now = int(time.time())
        try:
            claims = TokenClaims(
                sub=subject_id,
                iat=now,
                exp=now + int(self.lifetime.total_seconds()),
            )
            return jwt.encode(claims.model_dump(), self._secret_key, algorithm=ALGORITHM)
        except (jwt.PyJWTError, TypeError, ValueError) as e:
            raise SigningError(f"Could not sign token: {e}") from e

    def check_token(self, token: str) -> int:
        """
        Verify a token and return its subject id.

        The signature (and algorithm) are verified before any claim is
        trusted. Raises InvalidSignature, TokenExpired or MalformedToken.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[ALGORITHM],
                # sub is an integer here, not the string PyJWT expects
                options={"require": ["sub", "iat", "exp"], "verify_sub": False},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpired("Token has expired") from e
        except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError) as e:
            raise InvalidSignature("Token signature is invalid") from e
        except jwt.InvalidTokenError as e:
            raise MalformedToken(f"Malformed token: {e}") from e

        try:
            claims = TokenClaims.model_validate(payload)
        except ValidationError as e:
            raise MalformedToken("Token claims are malformed") from e
        return claims.sub
