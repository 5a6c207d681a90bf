"""
Application Configuration — Environment & Settings
Centralizes all config from .env with Pydantic Settings for validation.
"""
from pathlib import Path
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve paths relative to backend/ directory
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # --- Core ---
    APP_NAME: str = "Neobank Business Banking API"
    APP_VERSION: str = "1.4.0"
    DEBUG: bool = False

    # --- Database ---
    DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'data' / 'neobank.db'}"

    # --- Demo identifiers (stand-ins for session-derived ids) ---
    DEMO_ORG_ID: str = "11111111-1111-1111-1111-111111111111"
    DEMO_ACCOUNT_ID: str = "22222222-2222-2222-2222-222222222222"
    DEMO_USER_ID: str = "33333333-3333-3333-3333-333333333333"
    DEMO_ORG_NAME: str = "TechServe Solutions LLC"
    DEFAULT_CURRENCY: str = "AED"

    # --- Blob storage ---
    STORAGE_DIR: str = str(BASE_DIR / "data" / "storage")
    STORAGE_PUBLIC_URL: str = "http://localhost:8000/storage"
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    # --- Onboarding ---
    DRAFT_DIR: str = str(BASE_DIR / "data" / "drafts")
    DEMO_AUTO_VALIDATE: bool = False     # uploaded -> validating -> accepted without a reviewer
    VALIDATION_STEP_SECONDS: float = 1.0
    ONBOARDING_SLA_TEXT: str = "We usually review applications within 2 business days"

    # --- Security ---
    CORS_ORIGINS: list[str] = ["*"]

    # --- Logging ---
    LOG_DIR: str = str(BASE_DIR / "logs")
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()
