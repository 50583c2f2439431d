from __future__ import annotations

from pydantic_settings import (  # type: ignore[import-not-found]
    BaseSettings,
    SettingsConfigDict,
)


class Settings(BaseSettings):
    """
    App settings.

    Loads from environment variables and an optional local `.env` file.
    `.env` is gitignored.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    API_TITLE: str = "BitLoot Sessions API"
    API_VERSION: str = "0.1.0"

    LOG_LEVEL: str = "INFO"

    # Database (Docker Compose)
    BITLOOT_DB_HOST: str = "localhost"
    BITLOOT_DB_PORT: int = 5432
    BITLOOT_DB_NAME: str = "bitloot"
    BITLOOT_DB_USER: str = "bitloot"
    BITLOOT_DB_PASSWORD: str = "bitloot"
    # Full SQLAlchemy URL; wins over the parts above when set.
    BITLOOT_DB_URL: str | None = None

    # Sessions
    SESSION_TTL_DAYS: int = 7
    SESSION_USER_AGENT_MAX_LENGTH: int = 500
    SESSIONS_PAGE_LIMIT_DEFAULT: int = 10
    SESSIONS_PAGE_LIMIT_MAX: int = 50
    ADMIN_SESSIONS_LIMIT_DEFAULT: int = 20
    SESSION_CLEANUP_INTERVAL_S: float = 3600.0

    # Auth (refresh token carried in an HTTP-only cookie or a bearer header)
    AUTH_COOKIE_NAME: str = "bitloot_refresh"
    AUTH_COOKIE_SECURE: bool = False
    AUTH_COOKIE_SAMESITE: str = "lax"  # lax|strict|none

    # CORS (storefront on :3000 calls the API on :8000 with cookies)
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"


settings = Settings()
