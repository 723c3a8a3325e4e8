# ecovoice/goals.py
import logging
import math

from .config import DEFAULT_WEEKLY_GOAL, WEEKLY_GOAL_KEY
from .errors import FormValidationError, PersistenceError, StorageCorruptError
from .storage import KeyValueStore

logger = logging.getLogger(__name__)


class WeeklyGoal:
    """User-set ceiling on weekly kg CO2, persisted apart from the activity log."""

    def __init__(self, store: KeyValueStore, key: str = WEEKLY_GOAL_KEY, default: float = DEFAULT_WEEKLY_GOAL):
        self.store = store
        self.key = key
        self.value = default

    def load(self) -> float:
        try:
            raw = self.store.get(self.key)
        except (UnicodeDecodeError, OSError) as exc:
            raise StorageCorruptError("Your saved weekly goal could not be read.") from exc
        if raw is None:
            return self.value
        try:
            value = float(raw)
        except ValueError as exc:
            raise StorageCorruptError("Your saved weekly goal could not be read.") from exc
        if not math.isfinite(value) or value <= 0:
            raise StorageCorruptError("Your saved weekly goal could not be read.")
        self.value = value
        return self.value

    def update(self, value) -> float:
        if value is None or not math.isfinite(value) or value <= 0:
            raise FormValidationError("Weekly goal must be a positive number of kg CO₂.", title="Invalid goal")
        self.value = float(value)
        logger.info("weekly goal set to %.2f kg", self.value)
        try:
            self.store.set(self.key, repr(self.value))
        except OSError as exc:
            logger.exception("could not persist weekly goal")
            raise PersistenceError("Your goal was updated but could not be saved.") from exc
        return self.value
