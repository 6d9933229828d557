from pydantic import ConfigDict, field_validator
from pydantic_settings import BaseSettings

from restapi.services.hasher import HashParameters


class Settings(BaseSettings):
    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Database
    database_url: str = "sqlite:///./restapi.db"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Token signing (HS256). Empty aborts startup.
    secret_key: str = ""
    token_lifetime_days: int = 15

    # Argon2id
    argon2_memory_cost: int = 64 * 1024  # KiB
    argon2_time_cost: int = 3
    argon2_parallelism: int = 2
    argon2_salt_len: int = 16
    argon2_hash_len: int = 32

    # Logging
    log_level: str = "info"
    log_format: str = "console"  # "console" or "json"

    # Rate Limiting
    rate_limit_login: str = "10/minute"
    rate_limit_signup: str = "5/minute"
    trust_proxy_headers: bool = False

    # CORS
    cors_origins: list[str] | str = ["http://localhost:5173", "http://127.0.0.1:5173"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    def hash_parameters(self) -> HashParameters:
        """Argon2id parameters used for newly created hashes."""
        return HashParameters(
            memory=self.argon2_memory_cost,
            iterations=self.argon2_time_cost,
            parallelism=self.argon2_parallelism,
            salt_length=self.argon2_salt_len,
            key_length=self.argon2_hash_len,
        )


settings = Settings()
