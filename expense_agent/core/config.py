"""Environment-driven configuration for the expense agent service."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from functools import lru_cache
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file from project root
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


@dataclass(slots=True)
class Settings:
    """Top-level application configuration container."""

    expenses_path: Path
    default_provider: str
    log_level: str = "INFO"
    log_dir: Optional[Path] = None
    today: Optional[date] = None
    max_sessions: int = 100

    @classmethod
    def from_env(cls) -> "Settings":
        """Load configuration values from environment variables."""

        def _get_env(name: str, default: str) -> str:
            return os.getenv(name, default)

        def _parse_today(value: str) -> Optional[date]:
            value = value.strip()
            if not value:
                return None
            try:
                return date.fromisoformat(value)
            except ValueError as exc:
                raise ValueError(
                    f"AGENT_TODAY must be an ISO date (YYYY-MM-DD), got {value!r}"
                ) from exc

        def _parse_positive_int(name: str, default: int) -> int:
            raw = _get_env(name, str(default)).strip()
            try:
                value = int(raw)
            except ValueError as exc:
                raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
            if value < 1:
                raise ValueError(f"{name} must be at least 1, got {value}")
            return value

        log_dir = _get_env("LOG_DIR", "").strip()
        return cls(
            expenses_path=Path(_get_env("EXPENSES_PATH", "data/expenses.json")),
            default_provider=_get_env("LLM_PROVIDER", "claude-haiku-4.5"),
            log_level=_get_env("LOG_LEVEL", "INFO").upper(),
            log_dir=Path(log_dir) if log_dir else None,
            today=_parse_today(_get_env("AGENT_TODAY", "")),
            max_sessions=_parse_positive_int("AGENT_MAX_SESSIONS", 100),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached ``Settings`` instance."""

    settings = Settings.from_env()

    # Import locally to avoid circular dependencies during module import time.
    from .log import get_logger

    logger = get_logger(__name__)
    logger.debug(
        "Settings initialised",
        extra={
            "expenses_path": str(settings.expenses_path),
            "default_provider": settings.default_provider,
            "log_level": settings.log_level,
            "log_dir": str(settings.log_dir) if settings.log_dir else None,
            "today": settings.today.isoformat() if settings.today else None,
            "max_sessions": settings.max_sessions,
        },
    )
    return settings
