import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from restapi.config import settings
from restapi.database import get_db
from restapi.dependencies import get_hasher, get_token_service
from restapi.middleware.rate_limit import limiter
from restapi.schemas.auth import LoginBody, SignupBody, TokenResponse
from restapi.services import auth_service
from restapi.services.hasher import Hasher
from restapi.services.token_service import TokenService
from restapi.services.user_service import UserAlreadyExists

router = APIRouter()
logger = structlog.get_logger()


@router.post("/auth/login", response_model=TokenResponse)
@limiter.limit(settings.rate_limit_login)
async def login(
    request: Request,
    body: LoginBody,
    db: Session = Depends(get_db),
    hasher: Hasher = Depends(get_hasher),
    tokens: TokenService = Depends(get_token_service),
):
    """
    Exchange email and password for a bearer token.

    Argon2 verification is CPU and memory bound, so it runs in the threadpool.
    """
    try:
        _, token = await run_in_threadpool(
            auth_service.login, db, hasher, tokens, body.email, body.password
        )
    except auth_service.InvalidCredentials as e:
        raise HTTPException(
            status_code=401, detail=str(e), headers={"WWW-Authenticate": "Bearer"}
        ) from e

    return TokenResponse(message="Logged in successfully.", token=token)


@router.post("/auth/signup", response_model=TokenResponse)
@limiter.limit(settings.rate_limit_signup)
async def signup(
    request: Request,
    body: SignupBody,
    db: Session = Depends(get_db),
    hasher: Hasher = Depends(get_hasher),
    tokens: TokenService = Depends(get_token_service),
):
    """Create an account and return a bearer token for it."""
    try:
        _, token = await run_in_threadpool(
            auth_service.signup,
            db,
            hasher,
            tokens,
            body.email,
            body.username,
            body.password,
        )
    except UserAlreadyExists as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return TokenResponse(message="User signed-up successfully.", token=token)
