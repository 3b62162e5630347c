"""Project configuration and paths.

Loads settings from config/settings.yaml and environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

# === Paths ===
PROJECT_ROOT = Path(__file__).parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"
DATA_DIR = PROJECT_ROOT / "data"

# Load .env from project root
load_dotenv(PROJECT_ROOT / ".env")


class DatabaseSettings(BaseModel):
    """Database connection settings."""
    db_path: str = str(DATA_DIR / "affiliate_links.db")

    @property
    def db_abs_path(self) -> Path:
        """Resolve database path relative to project root."""
        p = Path(self.db_path)
        if p.is_absolute():
            return p
        return PROJECT_ROOT / p


class ServerSettings(BaseModel):
    """MCP server identity advertised during initialization."""
    name: str = "affiliate-links-mcp"
    version: str = "1.0.0"


class LoggingSettings(BaseModel):
    level: str = "INFO"


class Settings(BaseModel):
    """Top-level application settings."""
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def load(cls, settings_path: Path | None = None) -> Settings:
        """Load settings from config/settings.yaml, falling back to defaults.

        DATABASE_PATH and LOG_LEVEL from the environment win over the file.
        """
        settings_path = settings_path or CONFIG_DIR / "settings.yaml"
        data: dict = {}
        if settings_path.exists():
            with open(settings_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        loaded = cls(**data)

        if db_path := os.getenv("DATABASE_PATH"):
            loaded.database.db_path = db_path
        if level := os.getenv("LOG_LEVEL"):
            loaded.logging.level = level
        return loaded


# Singleton settings instance
settings = Settings.load()
