from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import inspect

from restapi.config import settings
from restapi.database import engine
from restapi.logging_config import setup_logging
from restapi.middleware.logging import CORRELATION_HEADER, LoggingMiddleware, current_correlation_id
from restapi.middleware.rate_limit import limiter
from restapi.routers import auth, users

REQUIRED_TABLES = {"users"}

logger = structlog.get_logger()


def check_signing_secret() -> None:
    """Refuse to start without a token signing secret."""
    if not settings.secret_key:
        raise RuntimeError("SECRET_KEY is not set. Configure it in the environment or .env file.")


def check_database_tables() -> None:
    """Refuse to start against a database that has not been migrated."""
    existing = set(inspect(engine).get_table_names())
    missing = REQUIRED_TABLES - existing
    if missing:
        raise RuntimeError(
            f"Database tables missing: {', '.join(sorted(missing))}. "
            "Run `alembic upgrade head` first."
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    check_signing_secret()
    check_database_tables()
    logger.info("application_started", host=settings.host, port=settings.port)
    yield
    logger.info("application_stopped")


app = FastAPI(
    title="restapi-template",
    description="REST API template with Argon2id credentials and bearer tokens",
    version="0.1.0",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(LoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _validation_message(error: dict) -> str:
    """User-facing message for a single pydantic error."""
    ctx = error.get("ctx") or {}
    error_type = error["type"]
    if error_type == "missing":
        return "This field is required."
    if error_type == "value_error":
        return str(ctx.get("error", error["msg"]))
    if error_type == "string_too_short":
        return f"This field should have at least {ctx.get('min_length')} characters."
    if error_type == "string_too_long":
        return f"This field should have at most {ctx.get('max_length')} characters."
    if error_type == "int_parsing":
        return "This field must be an int."
    return error["msg"]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        loc = error.get("loc", ())
        field = ".".join(str(part) for part in loc[1:]) or (str(loc[0]) if loc else "")
        errors.append({"field": field, "message": _validation_message(error)})
    return JSONResponse(status_code=400, content={"errors": errors})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    headers = {}
    correlation_id = current_correlation_id()
    if correlation_id:
        headers[CORRELATION_HEADER] = correlation_id
    return JSONResponse(
        status_code=500, content={"detail": "Internal Server Error"}, headers=headers
    )


# Routers
app.include_router(auth.router, prefix="/api/v1", tags=["auth"])
app.include_router(users.router, prefix="/api/v1", tags=["users"])


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
