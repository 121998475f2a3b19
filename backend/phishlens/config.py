# backend/phishlens/config.py
from pydantic_settings import BaseSettings
from typing import Optional
import os


class Settings(BaseSettings):
    APP_NAME: str = "phishlens"

    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")
    DEBUG: bool = os.environ.get("DEBUG", "False").lower() in ("1", "true", "yes")

    # Sessions (signed cookie). Left empty on purpose: an unset key is replaced
    # by a random per-process key at startup.
    SECRET_KEY: str = os.environ.get("SECRET_KEY", "")
    SESSION_COOKIE: str = os.environ.get("SESSION_COOKIE", "phishlens_session")
    SESSION_MAX_AGE: int = int(os.environ.get("SESSION_MAX_AGE", 24 * 60 * 60))
    SESSION_HTTPS_ONLY: bool = os.environ.get("SESSION_HTTPS_ONLY", "False").lower() in ("1", "true", "yes")

    # comma separated
    CORS_ORIGINS: str = os.environ.get("CORS_ORIGINS", "http://localhost:8080")

    # Providers. No key ships with a default.
    VIRUSTOTAL_API_KEY: str = os.environ.get("VIRUSTOTAL_API_KEY", "")
    VIRUSTOTAL_BASE_URL: str = os.environ.get("VIRUSTOTAL_BASE_URL", "https://www.virustotal.com/api/v3")
    URLSCAN_API_KEY: str = os.environ.get("URLSCAN_API_KEY", "")
    URLSCAN_BASE_URL: str = os.environ.get("URLSCAN_BASE_URL", "https://urlscan.io/api/v1")
    URLSCAN_VISIBILITY: str = os.environ.get("URLSCAN_VISIBILITY", "private")
    EXTERNAL_TIMEOUT: Optional[float] = None

    # History / extraction limits
    HISTORY_LIMIT: int = int(os.environ.get("HISTORY_LIMIT", 50))
    MAX_EMAIL_URLS: int = int(os.environ.get("MAX_EMAIL_URLS", 5))
    EMAIL_PREVIEW_CHARS: int = int(os.environ.get("EMAIL_PREVIEW_CHARS", 200))

    BCRYPT_ROUNDS: int = int(os.environ.get("BCRYPT_ROUNDS", 10))

    # "memory" or "database"
    STORE_BACKEND: str = os.environ.get("STORE_BACKEND", "memory")

    POSTGRES_USER: str = os.environ.get("POSTGRES_USER", "postgres")
    POSTGRES_PASSWORD: str = os.environ.get("POSTGRES_PASSWORD", "postgres")
    POSTGRES_DB: str = os.environ.get("POSTGRES_DB", "phishlens")
    POSTGRES_HOST: str = os.environ.get("POSTGRES_HOST", "db")
    POSTGRES_PORT: str = os.environ.get("POSTGRES_PORT", "5432")

    DATABASE_URL: str = os.environ.get(
        "DATABASE_URL",
        f"postgresql+asyncpg://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_HOST}:{POSTGRES_PORT}/{POSTGRES_DB}"
    )

    FRONTEND_DIR: str = os.environ.get("FRONTEND_DIR", "frontend")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
