"""Application configuration loaded from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed settings exposed via dependency injection throughout the app."""

    # Read .env with BOM tolerance; case-sensitive keys
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8-sig",
        case_sensitive=True,
    )

    APP_NAME: str = "Correlativos API"
    ENV: str = "dev"  # dev | staging | prod
    DEBUG: bool = False

    # CORS
    CORS_ALLOWED_ORIGINS: list[str] = Field(default_factory=list)

    # DB
    DB_URL: str | None = None  # full SQLAlchemy URL, overrides the DB_* parts
    DB_HOST: str = "127.0.0.1"
    DB_PORT: int = 3306
    DB_USER: str = "appadmin"
    DB_PASSWORD: str = ""  # set via env/.env
    DB_NAME: str = "causas"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600
    DB_ISOLATION_LEVEL: str = "READ COMMITTED"
    DB_LOCK_TIMEOUT_SEC: int = 10
    DB_RETRY_ATTEMPTS: int = 3
    DB_RETRY_BASE_DELAY: float = 0.05
    DB_RETRY_JITTER: float = 0.025

    # Correlatives
    # Issued codes reset on January 1st of this timezone.
    CORRELATIVE_TIMEZONE: str = "America/Santiago"
    CORRELATIVE_CODE_WIDTH: int = 3
    CORRELATIVE_ALLOCATE_RATE: str = "60/minute"
    HISTORY_MAX_PAGE_SIZE: int = 100
    IDEMPOTENCY_KEY_MAX_LENGTH: int = 128

    RATE_LIMIT_ENABLED: bool = True
    MAX_REQUEST_BYTES: int = 64 * 1024

    @property
    def DATABASE_URL(self) -> str:
        if self.DB_URL:
            return self.DB_URL
        return (
            f"mysql+aiomysql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}?charset=utf8mb4"
        )


settings = Settings()
