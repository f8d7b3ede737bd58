"""
Configuration for ehonsearch.

Settings are read from environment variables (optionally seeded from a
``.env`` file) and cached for the lifetime of the process.
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv


@dataclass
class Settings:
    """Application settings loaded from environment."""

    # Database
    database_url: str = "sqlite:///./ehonsearch.db"
    database_echo: bool = False

    # External APIs
    google_books_api_key: Optional[str] = None
    google_books_base_url: str = "https://www.googleapis.com/books/v1"
    http_timeout: float = 10.0

    # Search
    max_results: int = 20
    auto_accept_threshold: float = 0.5

    # Batch matching
    batch_entry_timeout: float = 10.0

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            database_url=os.getenv("EHONSEARCH_DATABASE_URL", cls.database_url),
            database_echo=os.getenv("EHONSEARCH_DATABASE_ECHO", "false").lower() == "true",
            google_books_api_key=os.getenv("GOOGLE_BOOKS_API_KEY") or None,
            google_books_base_url=os.getenv("GOOGLE_BOOKS_BASE_URL", cls.google_books_base_url),
            http_timeout=float(os.getenv("EHONSEARCH_HTTP_TIMEOUT", cls.http_timeout)),
            max_results=int(os.getenv("EHONSEARCH_MAX_RESULTS", cls.max_results)),
            auto_accept_threshold=float(
                os.getenv("EHONSEARCH_AUTO_ACCEPT_THRESHOLD", cls.auto_accept_threshold)
            ),
            batch_entry_timeout=float(os.getenv("EHONSEARCH_BATCH_TIMEOUT", cls.batch_entry_timeout)),
            log_level=os.getenv("EHONSEARCH_LOG_LEVEL", cls.log_level).upper(),
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    load_dotenv()
    return Settings.from_env()
