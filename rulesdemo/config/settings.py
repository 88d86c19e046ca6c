"""Runtime settings read from the environment (and an optional .env file)."""
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional
import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Rule definition files shipped with the package
DEFAULT_RULES_DIR = Path(__file__).resolve().parent.parent / "workflows"


@dataclass(frozen=True)
class Settings:
    rules_dir: Path
    log_level: str
    current_date: Optional[date]


def get_settings() -> Settings:
    """
    Build settings from environment variables.

    - RULESDEMO_RULES_DIR: directory (or file) of workflow JSON definitions
    - RULESDEMO_LOG_LEVEL: logging level name (default INFO)
    - RULESDEMO_CURRENT_DATE: ISO date pinned as "today" for business logic
    """
    raw_date = os.getenv("RULESDEMO_CURRENT_DATE")
    try:
        current_date = date.fromisoformat(raw_date) if raw_date else None
    except ValueError as e:
        raise ValueError(f"RULESDEMO_CURRENT_DATE must be YYYY-MM-DD, got {raw_date!r}") from e

    return Settings(
        rules_dir=Path(os.getenv("RULESDEMO_RULES_DIR", str(DEFAULT_RULES_DIR))),
        log_level=os.getenv("RULESDEMO_LOG_LEVEL", "INFO").upper(),
        current_date=current_date,
    )
