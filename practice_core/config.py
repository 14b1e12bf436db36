"""
Environment configuration for the practice engine.

Values are read from the process environment (and a local .env file).
"""

from __future__ import annotations

import os
import sys
from typing import Optional

from dotenv import load_dotenv
from loguru import logger

# Load environment
load_dotenv()

# Configuration
DEFAULT_DB_NAME = "practice"
DEFAULT_COLLECTION_NAME = "plans"
DEFAULT_SESSIONS_COLLECTION_NAME = "practice_sessions"
DEFAULT_TX_MAX_RETRIES = 5
DEFAULT_LOG_LEVEL = "INFO"


def get_mongo_uri() -> str:
    """
    Get the MongoDB connection string.

    Returns:
        Value of MONGO_URI

    Raises:
        ValueError: If MONGO_URI is not set
    """
    mongo_uri = os.getenv("MONGO_URI")
    if not mongo_uri:
        raise ValueError("MONGO_URI not found in environment variables")
    return mongo_uri


def get_db_name() -> str:
    return os.getenv("PRACTICE_DB_NAME", DEFAULT_DB_NAME)


def get_collection_name() -> str:
    return os.getenv("PLANS_COLLECTION", DEFAULT_COLLECTION_NAME)


def get_sessions_collection_name() -> str:
    return os.getenv("SESSIONS_COLLECTION", DEFAULT_SESSIONS_COLLECTION_NAME)


def get_tx_max_retries() -> int:
    """Retry budget for optimistic plan transactions (at least 1 attempt)."""
    raw = os.getenv("PLAN_TX_MAX_RETRIES", str(DEFAULT_TX_MAX_RETRIES))
    try:
        return max(1, int(raw))
    except ValueError:
        raise ValueError(f"PLAN_TX_MAX_RETRIES must be an integer, got {raw!r}") from None


def get_log_level() -> str:
    return os.getenv("PRACTICE_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()


def configure_logging(level: Optional[str] = None) -> None:
    """
    Replace loguru's default sink with a stderr sink at the configured level.

    Args:
        level: Explicit level name; defaults to PRACTICE_LOG_LEVEL
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=level or get_log_level(),
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
    )
