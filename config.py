"""Application configuration using pydantic-settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_path: str = Field(default="elenco.db", alias="DATABASE_PATH")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Player of the day
    max_wrong_attempts: int = Field(default=10, alias="MAX_WRONG_ATTEMPTS")
    close_feedback_similarity: float = Field(default=0.5, alias="CLOSE_FEEDBACK_SIMILARITY")

    # Player search
    player_search_limit: int = Field(default=10, alias="PLAYER_SEARCH_LIMIT")
    player_search_min_length: int = Field(default=2, alias="PLAYER_SEARCH_MIN_LENGTH")


# Global settings instance
settings = Settings()


class Config:
    """Uppercase config interface used across services."""

    DATABASE_PATH = settings.database_path
    LOG_LEVEL = settings.log_level.upper()
    MAX_WRONG_ATTEMPTS = settings.max_wrong_attempts
    CLOSE_FEEDBACK_SIMILARITY = settings.close_feedback_similarity
    PLAYER_SEARCH_LIMIT = settings.player_search_limit
    PLAYER_SEARCH_MIN_LENGTH = settings.player_search_min_length
