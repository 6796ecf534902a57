"""
Configuration for the ReviewHub client.

Settings are read from the environment (and a local .env file, if present).
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


# =============================================================================
# Settings
# =============================================================================

def _parse_timeout(value: Optional[str]) -> Optional[float]:
    """Parse a timeout in seconds; empty, "none" or non-positive means no timeout."""
    if value is None or value.strip().lower() in ("", "none", "0"):
        return None
    timeout = float(value)
    return timeout if timeout > 0 else None


@dataclass
class Settings:
    """Client settings loaded from environment."""

    # Backend
    api_url: str = "http://localhost:8000"
    request_timeout: Optional[float] = None  # seconds, None waits forever

    # Session persistence
    session_file: str = str(Path.home() / ".reviewhub" / "session.json")

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Environment
    environment: str = "development"

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        load_dotenv()
        return cls(
            api_url=os.getenv("REVIEWHUB_API_URL", cls.api_url).rstrip("/"),
            request_timeout=_parse_timeout(os.getenv("REVIEWHUB_TIMEOUT")),
            session_file=os.getenv("REVIEWHUB_SESSION_FILE", cls.session_file),
            log_level=os.getenv("REVIEWHUB_LOG_LEVEL", cls.log_level).upper(),
            log_json=os.getenv("REVIEWHUB_LOG_JSON", "false").lower() == "true",
            environment=os.getenv("REVIEWHUB_ENV", cls.environment),
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached client settings."""
    return Settings.from_env()
