"""Application configuration and settings."""
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the marketplace API."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    database_url: str = "sqlite+aiosqlite:///./marketplace.db"

    # No default: the service must not run with a guessable signing key.
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    reset_token_expire_minutes: int = 60
    password_hash_rounds: int = 10

    frontend_base_url: str = "http://localhost:3000"

    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool = True
    mail_sender: str | None = None

    max_upload_bytes: int = 5 * 1024 * 1024
    allow_request_redecision: bool = False

    log_level: str = "INFO"

    @field_validator("jwt_secret_key")
    @classmethod
    def _secret_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("JWT_SECRET_KEY must be set to a non-empty value")
        return value

    @property
    def sender_address(self) -> str | None:
        return self.mail_sender or self.smtp_username


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()
