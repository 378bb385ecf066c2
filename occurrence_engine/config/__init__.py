"""
Application Settings
Load from environment variables
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment"""

    # ======================
    # Database
    # ======================
    DATABASE_URL: str = "sqlite+aiosqlite:///./occurrence_engine.db"
    AUTO_CREATE_TABLES: bool = False

    # ======================
    # Application
    # ======================
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    QUIET_LOGGERS: list[str] = ["sqlalchemy.engine", "aiosqlite", "httpx"]
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # ======================
    # Timezone (server-side "today", API edge only)
    # ======================
    TIMEZONE: str = "UTC"

    # ======================
    # Projection
    # ======================
    DEFAULT_HORIZON_MONTHS: int = 3
    MAX_OCCURRENCES_PER_RULE: int = 100

    # ======================
    # Consumers
    # ======================
    UPCOMING_WINDOW_DAYS: int = 7
    UPCOMING_BILLS_LIMIT: int = 5
    DUE_SOON_DAYS: int = 2
    BILLS_PAGE_SIZE: int = 25

    # ======================
    # Pydantic v2 config
    # ======================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="forbid",
    )


settings = Settings()
