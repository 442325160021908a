# settings.py
from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Literal


DEV_JWT_SECRET = "dev-secret-change-me"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    ENV: Literal["dev", "test", "staging", "prod"] = "dev"
    LOG_LEVEL: str = "INFO"

    # -----------------------
    # DB
    # -----------------------
    DATABASE_URL: str = Field(default="")
    DB_POOL_MIN: int = Field(default=1, ge=1)
    DB_POOL_MAX: int = Field(default=10, ge=1)
    DB_STATEMENT_TIMEOUT_MS: int = Field(default=5000, ge=100)

    # -----------------------
    # JWT
    # -----------------------
    JWT_SECRET: str = Field(default=DEV_JWT_SECRET, min_length=16)
    JWT_ALG: str = Field(default="HS256")
    JWT_ACCESS_MINUTES: int = Field(default=60)

    # -----------------------
    # Ledger posting
    # -----------------------
    DEFAULT_CURRENCY: str = "INR"
    # any_book: post into the oldest book in the system when the user owns none
    # skip: accept the payout without a ledger entry
    # reject: refuse the acceptance, request stays pending
    PAYOUT_BOOK_FALLBACK: Literal["any_book", "skip", "reject"] = "any_book"
    ALLOW_NEGATIVE_WALLET_BALANCE: bool = True

    # -----------------------
    # Proof uploads
    # -----------------------
    UPLOAD_DIR: str = "uploads"
    MAX_PROOF_BYTES: int = Field(default=5 * 1024 * 1024, ge=1)

    # -----------------------
    # Roles
    # -----------------------
    ADMIN_ROLE_NAME: str = "admin"


settings = Settings()


def validate_env_settings() -> None:
    """
    Fail fast on unsafe config outside local development.
    """
    env = (settings.ENV or "dev").lower()
    if env not in {"staging", "prod"}:
        return

    missing: list[str] = []
    if not (settings.DATABASE_URL or "").strip():
        missing.append("DATABASE_URL")

    secret = settings.JWT_SECRET or ""
    if secret == DEV_JWT_SECRET or len(secret) < 32:
        missing.append("JWT_SECRET")

    if missing:
        raise RuntimeError(f"Invalid configuration for ENV={env}: " + ", ".join(missing))
