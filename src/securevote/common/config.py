"""SecureVote configuration via pydantic-settings."""

import warnings
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

_INSECURE_DEFAULTS = {
    "jwt_secret": "insecure-jwt-secret-change-me",
}


class SecureVoteSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SECUREVOTE_")

    environment: str = "development"
    log_level: str = "INFO"

    # Auth
    jwt_secret: str = "insecure-jwt-secret-change-me"
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 1440  # 24 hours

    # Database
    db_url: str = "sqlite+aiosqlite:///./data/securevote.db"
    db_echo: bool = False
    db_retry_max: int = 3
    db_retry_base_delay: float = 0.3  # seconds, doubled per retry

    # Votes
    verification_code_length: int = 10
    verification_code_attempts: int = 5

    # API
    api_title: str = "SecureVote API"
    api_version: str = "0.1.0"
    api_prefix: str = "/api"
    host: str = "0.0.0.0"
    port: int = 8080
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Bootstrap admin, created by `securevote migrate` when both are set
    admin_email: str = ""
    admin_password: str = ""

    def validate_for_production(self) -> None:
        """Raise if insecure defaults are used in non-development environments."""
        insecure_fields = [
            field
            for field, default in _INSECURE_DEFAULTS.items()
            if getattr(self, field) == default
        ]

        if self.environment != "development" and insecure_fields:
            env_vars = ", ".join(f"SECUREVOTE_{f.upper()}" for f in insecure_fields)
            raise RuntimeError(
                f"Insecure default values detected in '{self.environment}' environment. "
                f"Set these environment variables to secure values: {env_vars}. "
                "Generate secrets with: python -c \"import secrets; print(secrets.token_urlsafe(48))\""
            )

        if insecure_fields:
            warnings.warn(
                "Using insecure default JWT secret, set SECUREVOTE_JWT_SECRET for production",
                UserWarning,
                stacklevel=2,
            )


@lru_cache
def get_settings() -> SecureVoteSettings:
    settings = SecureVoteSettings()
    settings.validate_for_production()
    return settings
