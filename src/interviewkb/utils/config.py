import os
import logging
from pathlib import Path
from dataclasses import dataclass
from dotenv import load_dotenv
load_dotenv()

LOGGER = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[3]


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    KB_DATA_DIR: str = os.getenv("KB_DATA_DIR", f"{PROJECT_ROOT}/data")
    KB_STORE_FILENAME: str = os.getenv("KB_STORE_FILENAME", "knowledge-base.json")

    # Ingestion thresholds
    KB_MIN_CONFIDENCE: float = float(os.getenv("KB_MIN_CONFIDENCE", "30"))
    KB_DUPLICATE_THRESHOLD: float = float(os.getenv("KB_DUPLICATE_THRESHOLD", "0.6"))
    # refuse to ingest over a store file that exists but cannot be parsed
    KB_STRICT_LOAD: bool = _env_bool("KB_STRICT_LOAD", "true")

    # Read-side defaults
    KB_TRENDING_WINDOW_DAYS: int = int(os.getenv("KB_TRENDING_WINDOW_DAYS", "30"))
    KB_TOP_COMPANIES: int = int(os.getenv("KB_TOP_COMPANIES", "10"))


settings = Settings()

LOGGER.debug("[cfg] KB_DATA_DIR=%s", settings.KB_DATA_DIR)
