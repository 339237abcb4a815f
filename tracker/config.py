"""Client configuration.

Values come from the process environment, with a `.env` file in the working
directory loaded first. Nothing here imports the rest of the package.
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_API_URL = "http://localhost:5000/api"
DEFAULT_TIMEOUT = 10.0
DEFAULT_PAGE_SIZE = 10
DEFAULT_SESSION_FILE = Path.home() / ".finance-tracker" / "session.json"

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


@dataclass(frozen=True)
class Settings:
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    session_file: Path = DEFAULT_SESSION_FILE
    page_size: int = DEFAULT_PAGE_SIZE
    log_level: str = "INFO"


def _env_float(name: str, default: float) -> float:
    try:
        value = float(os.environ[name])
    except (KeyError, ValueError):
        return default
    return value if value > 0 else default


def _env_int(name: str, default: int) -> int:
    try:
        value = int(os.environ[name])
    except (KeyError, ValueError):
        return default
    return value if value > 0 else default


def load_settings(env_file: str | None = None) -> Settings:
    """Bad or missing values fall back to the defaults; never raises."""
    load_dotenv(env_file)
    session_file = os.environ.get("FINANCE_SESSION_FILE")
    return Settings(
        api_url=os.environ.get("FINANCE_API_URL", DEFAULT_API_URL).rstrip("/"),
        timeout=_env_float("FINANCE_API_TIMEOUT", DEFAULT_TIMEOUT),
        session_file=Path(session_file).expanduser() if session_file else DEFAULT_SESSION_FILE,
        page_size=_env_int("FINANCE_PAGE_SIZE", DEFAULT_PAGE_SIZE),
        log_level=os.environ.get("FINANCE_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        format=LOG_FORMAT,
        level=getattr(logging, level.upper(), logging.INFO),
    )
