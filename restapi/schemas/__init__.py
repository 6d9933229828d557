from restapi.schemas.auth import LoginBody, SignupBody, TokenResponse
from restapi.schemas.user import PublicUser

__all__ = [
    "LoginBody",
    "PublicUser",
    "SignupBody",
    "TokenResponse",
]
