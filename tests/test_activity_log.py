import threading
import time

import pytest
from pydantic import ValidationError

from conftest import FailingStore, local_dt, make_record
from ecovoice.activity_log import (
    ActivityLog,
    build_energy_record,
    build_food_record,
    build_transport_record,
    build_waste_record,
)
from ecovoice.config import ACTIVITIES_KEY, WEEKLY_GOAL_KEY
from ecovoice.errors import FormValidationError, PersistenceError, StorageCorruptError
from ecovoice.goals import WeeklyGoal
from ecovoice.schemas import Category, EnergyIn, FoodIn, TransportIn, WasteIn
from ecovoice.storage import JsonFileStore, MemoryStore


def test_empty_store_loads_empty_log(activity_log):
    assert activity_log.load_all() == ()
    assert len(activity_log) == 0


def test_append_keeps_insertion_order(activity_log):
    first = make_record(subtype="bus", when=local_dt(2026, 10, 19, 9))
    second = make_record(subtype="car", when=local_dt(2026, 10, 18, 9))
    activity_log.append(first)
    activity_log.append(second)
    assert activity_log.records == (first, second)


def test_round_trip_through_json_files(tmp_path):
    records = [
        make_record(Category.transport, "car", 15, 3.45, when=local_dt(2026, 10, 19, 8), secondary_key="petrol"),
        make_record(Category.energy, "gas", 4, 0.8, when=local_dt(2026, 10, 19, 9)),
        make_record(Category.food, "meat", 1, 2.5, when=local_dt(2026, 10, 19, 13), source="voice"),
        make_record(Category.waste, "plastic", 2, 6.8, when=local_dt(2026, 10, 19, 20)),
    ]
    log = ActivityLog(JsonFileStore(tmp_path))
    for r in records:
        log.append(r)

    reloaded = ActivityLog(JsonFileStore(tmp_path))
    assert list(reloaded.load_all()) == records
    assert (tmp_path / f"{ACTIVITIES_KEY}.json").exists()


def test_malformed_content_is_surfaced(store, activity_log):
    store.set(ACTIVITIES_KEY, "{not json")
    with pytest.raises(StorageCorruptError):
        activity_log.load_all()


def test_wrong_shape_is_surfaced(store, activity_log):
    store.set(ACTIVITIES_KEY, '[{"category": "plane"}]')
    with pytest.raises(StorageCorruptError):
        activity_log.load_all()


def test_undecodable_file_is_surfaced(tmp_path):
    (tmp_path / f"{ACTIVITIES_KEY}.json").write_bytes(b"\xff\xfe[garbage")
    with pytest.raises(StorageCorruptError):
        ActivityLog(JsonFileStore(tmp_path)).load_all()


class SlowFirstWriteStore(MemoryStore):
    """The first write stalls, letting a second append overlap it."""

    def __init__(self):
        super().__init__()
        self.writing = threading.Event()
        self._slow = True

    def set(self, key, value):
        if self._slow:
            self._slow = False
            self.writing.set()
            time.sleep(0.3)
        super().set(key, value)


def test_overlapping_appends_are_all_persisted():
    store = SlowFirstWriteStore()
    log = ActivityLog(store)
    first, second = make_record(subtype="bus"), make_record(subtype="train")

    worker = threading.Thread(target=log.append, args=(first,))
    worker.start()
    assert store.writing.wait(timeout=5)
    log.append(second)
    worker.join()

    assert ActivityLog(store).load_all() == (first, second)


def test_write_failure_keeps_record_in_memory():
    log = ActivityLog(FailingStore())
    record = make_record()
    with pytest.raises(PersistenceError):
        log.append(record)
    assert log.records == (record,)


def test_reset_clears_store(store, activity_log):
    activity_log.append(make_record())
    activity_log.reset()
    assert len(activity_log) == 0
    assert ActivityLog(store).load_all() == ()


def test_records_are_immutable():
    record = make_record()
    with pytest.raises(ValidationError):
        record.co2_kg = 0


# -----------------
# Form intake
# -----------------
def test_transport_form():
    record = build_transport_record(TransportIn(mode="car", distance=20, fuel="diesel"))
    assert record.category is Category.transport
    assert record.secondary_key == "diesel"
    assert record.co2_kg == 20 * 0.27
    assert record.source == "form"


@pytest.mark.parametrize("form", [TransportIn(distance=5), TransportIn(mode="car"), TransportIn(mode="")])
def test_transport_form_requires_mode_and_distance(form):
    with pytest.raises(FormValidationError) as err:
        build_transport_record(form)
    assert err.value.notice.title == "Please fill all transport fields"


def test_energy_form():
    record = build_energy_record(EnergyIn(usage=12, type="heating"))
    assert record.co2_kg == 12 * 0.3
    with pytest.raises(FormValidationError):
        build_energy_record(EnergyIn())


def test_food_form_defaults_to_one_portion():
    record = build_food_record(FoodIn(type="chicken"))
    assert record.quantity == 1
    assert record.co2_kg == 6.9
    with pytest.raises(FormValidationError):
        build_food_record(FoodIn(portions=2))


def test_waste_form():
    record = build_waste_record(WasteIn(type="paper", weight=3))
    assert record.co2_kg == 3 * 0.9
    with pytest.raises(FormValidationError):
        build_waste_record(WasteIn(type="paper"))


def test_negative_quantity_rejected():
    with pytest.raises(FormValidationError) as err:
        build_waste_record(WasteIn(type="glass", weight=-1))
    assert "negative" in err.value.description


# -----------------
# Weekly goal
# -----------------
def test_goal_defaults_to_fifty():
    assert WeeklyGoal(MemoryStore()).load() == 50


def test_goal_update_persists():
    store = MemoryStore()
    WeeklyGoal(store).update(35.5)
    assert WeeklyGoal(store).load() == 35.5


@pytest.mark.parametrize("value", [0, -3, None, float("nan")])
def test_goal_must_be_positive(value):
    goal = WeeklyGoal(MemoryStore())
    with pytest.raises(FormValidationError):
        goal.update(value)
    assert goal.value == 50


def test_malformed_goal_is_surfaced():
    with pytest.raises(StorageCorruptError):
        WeeklyGoal(MemoryStore({WEEKLY_GOAL_KEY: "lots"})).load()


def test_undecodable_goal_is_surfaced(tmp_path):
    (tmp_path / f"{WEEKLY_GOAL_KEY}.json").write_bytes(b"\xff\xfe42")
    with pytest.raises(StorageCorruptError):
        WeeklyGoal(JsonFileStore(tmp_path)).load()
