"""
Application configuration.
Settings come from GROUPTAB_* environment variables or a .env file at the project root.
"""
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).parent.parent


class Settings(BaseSettings):
    """
    Application settings.
    (Environment variables take precedence over the .env file)
    """
    PROJECT_NAME: str = "GroupTab"

    # Server
    PORT: int = 5000
    DEBUG: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = False

    # CORS (React frontend)
    CORS_ORIGINS: list[str] = ["*"]

    # Participants. An empty KNOWN_PARTICIPANTS list accepts anybody.
    KNOWN_PARTICIPANTS: list[str] = []
    DEFAULT_PARTICIPANTS: list[str] = []
    # What a record without a participants list means:
    #   "default" -> split among DEFAULT_PARTICIPANTS
    #   "none"    -> no split, the record adds no debt
    MISSING_PARTICIPANTS_POLICY: Literal["default", "none"] = "none"

    model_config = SettingsConfigDict(
        env_prefix="GROUPTAB_",
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


def get_settings() -> Settings:
    """Build a fresh Settings instance from the current environment."""
    return Settings()
