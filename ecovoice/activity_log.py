# ecovoice/activity_log.py
import logging
from datetime import datetime
from threading import Lock
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from . import estimator
from .config import ACTIVITIES_KEY
from .errors import FormValidationError, PersistenceError, StorageCorruptError
from .schemas import ActivityRecord, Category, EnergyIn, FoodIn, TransportIn, WasteIn
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

_records_adapter = TypeAdapter(List[ActivityRecord])


class ActivityLog:
    """Append-only, ordered list of activity records written through to a store."""

    def __init__(self, store: KeyValueStore, key: str = ACTIVITIES_KEY):
        self.store = store
        self.key = key
        self._records: List[ActivityRecord] = []
        # held across mutation and write so snapshots reach the store in order
        self._lock = Lock()

    def __len__(self):
        return len(self._records)

    def __iter__(self):
        return iter(self.records)

    @property
    def records(self):
        return tuple(self._records)

    def load_all(self):
        """Restore the log from the store.

        A missing key means an empty log. Unreadable content raises
        StorageCorruptError and leaves the in-memory log untouched.
        """
        try:
            raw = self.store.get(self.key)
        except (UnicodeDecodeError, OSError) as exc:
            logger.error("stored activity log under %r is unreadable: %s", self.key, exc)
            raise StorageCorruptError("Your saved activities could not be read.") from exc
        if raw is None:
            self._records = []
            return self.records
        try:
            records = _records_adapter.validate_json(raw)
        except ValidationError as exc:
            logger.error("stored activity log under %r is malformed: %s", self.key, exc.errors()[:1])
            raise StorageCorruptError("Your saved activities could not be read.") from exc
        self._records = list(records)
        logger.info("loaded %d activities", len(self._records))
        return self.records

    def append(self, record: ActivityRecord):
        # in-memory state is kept even if the write fails
        with self._lock:
            self._records.append(record)
            logger.info("logged %s/%s %.3f kg CO2", record.category.value, record.subtype, record.co2_kg)
            self._save()
        return record

    def reset(self):
        with self._lock:
            self._records = []
            self._save()

    def _save(self):
        payload = _records_adapter.dump_json(self._records).decode("utf-8")
        try:
            self.store.set(self.key, payload)
        except OSError as exc:
            logger.exception("could not persist activity log")
            raise PersistenceError("Your activity was recorded but could not be saved.") from exc


# -----------------
# Form intake
# -----------------
def _now(now):
    return now or datetime.now().astimezone()


def _require_non_negative(value, label):
    if value < 0:
        raise FormValidationError(f"{label} cannot be negative.")


def build_transport_record(form: TransportIn, now: Optional[datetime] = None) -> ActivityRecord:
    if not form.mode or form.distance is None:
        raise FormValidationError(title="Please fill all transport fields")
    _require_non_negative(form.distance, "Distance")
    co2 = estimator.calc_transport(form.mode, form.distance, form.fuel)
    return ActivityRecord(
        category=Category.transport, subtype=form.mode, quantity=form.distance,
        secondary_key=form.fuel, co2_kg=co2, timestamp=_now(now),
    )


def build_energy_record(form: EnergyIn, now: Optional[datetime] = None) -> ActivityRecord:
    if form.usage is None:
        raise FormValidationError(title="Please enter energy usage")
    _require_non_negative(form.usage, "Usage")
    co2 = estimator.calc_energy(form.usage, form.type)
    return ActivityRecord(
        category=Category.energy, subtype=form.type, quantity=form.usage,
        co2_kg=co2, timestamp=_now(now),
    )


def build_food_record(form: FoodIn, now: Optional[datetime] = None) -> ActivityRecord:
    if not form.type:
        raise FormValidationError(title="Please select food type")
    if form.portions is None:
        raise FormValidationError(title="Please enter the number of portions")
    _require_non_negative(form.portions, "Portions")
    co2 = estimator.calc_food(form.type, form.portions)
    return ActivityRecord(
        category=Category.food, subtype=form.type, quantity=form.portions,
        co2_kg=co2, timestamp=_now(now),
    )


def build_waste_record(form: WasteIn, now: Optional[datetime] = None) -> ActivityRecord:
    if not form.type or form.weight is None:
        raise FormValidationError(title="Please fill all waste fields")
    _require_non_negative(form.weight, "Weight")
    co2 = estimator.calc_waste(form.type, form.weight)
    return ActivityRecord(
        category=Category.waste, subtype=form.type, quantity=form.weight,
        co2_kg=co2, timestamp=_now(now),
    )


FORM_BUILDERS = {
    Category.transport: (TransportIn, build_transport_record),
    Category.energy: (EnergyIn, build_energy_record),
    Category.food: (FoodIn, build_food_record),
    Category.waste: (WasteIn, build_waste_record),
}
