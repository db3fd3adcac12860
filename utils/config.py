"""
Configuration management for CulinariaLegacy application.

Handles environment variables, database settings, and application configuration.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# .env values never override variables already set in the environment
load_dotenv(override=False)


@dataclass
class Config:
    """Application configuration settings"""

    # Database settings
    database_type: str = "sqlite"
    database_path: str = "culinaria_legacy.db"
    database_url: Optional[str] = None

    # Authentication settings
    session_duration_hours: int = 24
    password_min_length: int = 8

    # Family invites
    invite_expiry_days: int = 7

    # Debugging
    debug_mode: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: str = "logs/culinaria_legacy.log"

    @classmethod
    def from_environment(cls) -> 'Config':
        """Create configuration from environment variables"""
        return cls(
            # Database
            database_type=os.getenv("CULINARIA_DB_TYPE", "sqlite").lower(),
            database_path=os.getenv("CULINARIA_DB_PATH", "culinaria_legacy.db"),
            database_url=os.getenv("DATABASE_URL"),

            # Authentication
            session_duration_hours=int(os.getenv("CULINARIA_SESSION_DURATION", "24")),
            password_min_length=int(os.getenv("CULINARIA_PASSWORD_MIN_LENGTH", "8")),

            # Invites
            invite_expiry_days=int(os.getenv("CULINARIA_INVITE_EXPIRY_DAYS", "7")),

            # Debugging
            debug_mode=os.getenv("CULINARIA_DEBUG", "false").lower() == "true",

            # Logging
            log_level=os.getenv("CULINARIA_LOG_LEVEL", "INFO"),
            log_file=os.getenv("CULINARIA_LOG_FILE", "logs/culinaria_legacy.log")
        )

    def ensure_directories(self):
        """Create necessary directories"""
        directories = [Path(self.log_file).parent]
        if self.database_path != ":memory:":
            directories.append(Path(self.database_path).parent)

        for directory in directories:
            if directory and directory != Path("."):
                directory.mkdir(parents=True, exist_ok=True)


# Global configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get global configuration instance"""
    global _config
    if _config is None:
        _config = Config.from_environment()
        _config.ensure_directories()
    return _config

