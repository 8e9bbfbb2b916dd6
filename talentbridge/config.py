"""Environment-driven settings and logging setup."""

import logging
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from talentbridge.constants import LOG_FILE_NAME

load_dotenv()


class Settings(BaseModel):
    """Runtime configuration.

    Attributes:
        supabase_url: Supabase project URL.
        supabase_key: Supabase service key.
        cors_origins: Origins allowed to call the API.
        log_dir: Directory for the error log file.
        log_level: Root level for talentbridge loggers.
    """
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    cors_origins: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    log_dir: str = "logs"
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Build Settings from environment variables (and a .env file, if present)."""
    values = {
        "supabase_url": os.environ.get("SUPABASE_URL"),
        "supabase_key": os.environ.get("SUPABASE_KEY"),
        "log_dir": os.environ.get("LOG_DIR", "logs"),
        "log_level": os.environ.get("LOG_LEVEL", "INFO"),
    }

    origins = os.environ.get("CORS_ORIGINS")
    if origins:
        values["cors_origins"] = [origin.strip() for origin in origins.split(",") if origin.strip()]

    return Settings(**values)


def setup_lifecycle_logger(settings: Settings) -> logging.Logger:
    """Configure and return the package logger.

    Creates the log directory if it doesn't exist and attaches a file
    handler that records errors.

    Args:
        settings: Settings providing log_dir and log_level.

    Returns:
        Configured logger instance.
    """
    logs_dir = Path(settings.log_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("talentbridge")
    logger.setLevel(settings.log_level.upper())

    # Avoid duplicate handlers if logger already configured
    if not logger.handlers:
        file_handler = logging.FileHandler(logs_dir / LOG_FILE_NAME)
        file_handler.setLevel(logging.ERROR)

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
