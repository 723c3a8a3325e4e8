# ecovoice/config.py
import logging
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = Path(os.environ.get("ECOVOICE_DATA_DIR", BASE_DIR / "data"))

DATABASE_URL = os.environ.get("DATABASE_URL", f"sqlite:///{DATA_DIR / 'ecovoice.db'}")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"

# speech recognition locale handed to the browser capability
VOICE_LANG = os.environ.get("VOICE_LANG", "en-US")

DAILY_TARGET_KG = float(os.environ.get("DAILY_TARGET_KG", 15.0))
DEFAULT_WEEKLY_GOAL = float(os.environ.get("DEFAULT_WEEKLY_GOAL", 50.0))

# local key-value store keys
ACTIVITIES_KEY = "carbonActivities"
WEEKLY_GOAL_KEY = "weeklyGoal"


def configure_logging(level: str = None):
    """Configure root logging once for the API process."""
    level_name = (level or LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
    )
