"""Application configuration module."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Database settings
    DATABASE_URL: str = "sqlite+aiosqlite:///./learnportal.db"
    SQL_ECHO: bool = False
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30

    # "sql" persists through SQLAlchemy, "memory" keeps everything in-process
    STORAGE_BACKEND: str = "sql"

    # Logging settings
    LOG_LEVEL: str = "INFO"

    # API settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "LearnPortal Assessments"


# Create global settings instance
settings = Settings()
