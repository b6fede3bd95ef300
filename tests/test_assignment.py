import pytest
import sys
from pathlib import Path
import tempfile
import json

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from shift_roster.data_manager import JsonFileStore, InMemoryStore, DataValidationError
from shift_roster.scheduler_logic import ShiftScheduler, AssignmentFailure

SHIFTS = [
    {"shiftId": "S001", "date": "2025-06-01", "startTime": "09:00", "endTime": "14:00"},
    {"shiftId": "S002", "date": "2025-06-01", "startTime": "15:00", "endTime": "18:00"},
    {"shiftId": "S003", "date": "2025-06-01", "startTime": "15:00", "endTime": "18:30"},
    {"shiftId": "S004", "date": "2025-06-02", "startTime": "22:00", "endTime": "06:00"},
    {"shiftId": "S005", "date": "2025-06-03", "startTime": "10:00", "endTime": "10:00"},
    {"shiftId": "S006", "date": "2025-06-01", "startTime": "9:00", "endTime": "10:00"},
    {"shiftId": "S007", "date": "2025-06-04", "startTime": "08:00", "endTime": "12:00"},
]

EMPLOYEES = [
    {"employeeId": "E001", "name": "Alice Tan", "phone": "555-0101"},
    {"employeeId": "E002", "name": "Bob Lim", "phone": "555-0102"},
]


@pytest.fixture
def data_dir():
    """Fixture for a seeded, isolated data directory for each test."""
    with tempfile.TemporaryDirectory() as temp_dir:
        path = Path(temp_dir)
        (path / "employees.json").write_text(json.dumps(EMPLOYEES), encoding="utf-8")
        (path / "shifts.json").write_text(json.dumps(SHIFTS), encoding="utf-8")
        (path / "assignments.json").write_text("[]", encoding="utf-8")
        (path / "config.json").write_text(json.dumps({"maxDailyHours": 8}), encoding="utf-8")
        yield path


@pytest.fixture
def scheduler(data_dir):
    """Fixture for a ShiftScheduler over the JSON store."""
    return ShiftScheduler(JsonFileStore(str(data_dir)))


def write_config(data_dir, config):
    (data_dir / "config.json").write_text(json.dumps(config), encoding="utf-8")


def test_successful_assignment_is_persisted(scheduler, data_dir):
    result = scheduler.assign_shift("E001", "S001")

    assert result.success
    assert result.reason is None
    assert result.message == "Shift Recorded"
    assert result.scheduled_hours == 5

    saved = json.loads((data_dir / "assignments.json").read_text(encoding="utf-8"))
    assert saved == [{"employeeId": "E001", "shiftId": "S001"}]

    schedule = scheduler.get_schedule("E001")
    assert [s.shift_id for s in schedule] == ["S001"]


def test_unknown_employee_fails_regardless_of_shift(scheduler):
    for shift_id in ["S001", "S006", "S999"]:
        result = scheduler.assign_shift("E999", shift_id)
        assert not result.success
        assert result.reason is AssignmentFailure.EMPLOYEE_NOT_FOUND
        assert result.message == "Employee does not exist"


def test_unknown_shift(scheduler):
    result = scheduler.assign_shift("E001", "S999")
    assert result.reason is AssignmentFailure.SHIFT_NOT_FOUND


def test_duplicate_assignment_leaves_assignments_unchanged(scheduler, data_dir):
    """
    Why this is important: a rejected attempt must not touch the store,
    so the duplicate check also guarantees idempotence on failure.
    """
    assert scheduler.assign_shift("E001", "S001").success
    before = (data_dir / "assignments.json").read_text(encoding="utf-8")

    result = scheduler.assign_shift("E001", "S001")

    assert result.reason is AssignmentFailure.ALREADY_ASSIGNED
    assert (data_dir / "assignments.json").read_text(encoding="utf-8") == before


def test_cap_reached_exactly_is_allowed(scheduler):
    assert scheduler.assign_shift("E001", "S001").success  # 5h
    result = scheduler.assign_shift("E001", "S002")  # 3h

    assert result.success
    assert result.scheduled_hours == 8


def test_cap_exceeded_is_rejected(scheduler):
    assert scheduler.assign_shift("E001", "S001").success  # 5h
    result = scheduler.assign_shift("E001", "S003")  # 3.5h

    assert not result.success
    assert result.reason is AssignmentFailure.DAILY_CAP_EXCEEDED
    assert [s.shift_id for s in scheduler.get_schedule("E001")] == ["S001"]


def test_cap_is_per_employee_and_per_date(scheduler):
    assert scheduler.assign_shift("E001", "S001").success
    # Other employee, same date
    assert scheduler.assign_shift("E002", "S003").success
    # Same employee, other date
    assert scheduler.assign_shift("E001", "S004").success


def test_invalid_config_values(scheduler, data_dir):
    for config in [{}, {"maxDailyHours": 0}, {"maxDailyHours": -4},
                   {"maxDailyHours": "lots"}, {"maxDailyHours": None}]:
        write_config(data_dir, config)
        result = scheduler.assign_shift("E001", "S001")
        assert result.reason is AssignmentFailure.INVALID_CONFIG


def test_config_is_read_on_every_attempt(scheduler, data_dir):
    write_config(data_dir, {"maxDailyHours": 4})
    assert scheduler.assign_shift("E001", "S001").reason is AssignmentFailure.DAILY_CAP_EXCEEDED

    write_config(data_dir, {"maxDailyHours": 6})
    assert scheduler.assign_shift("E001", "S001").success


def test_invalid_candidate_shift_time(scheduler):
    result = scheduler.assign_shift("E001", "S006")
    assert result.reason is AssignmentFailure.INVALID_SHIFT_TIME


def test_zero_length_candidate_is_rejected(scheduler):
    result = scheduler.assign_shift("E001", "S005")
    assert result.reason is AssignmentFailure.INVALID_SHIFT_TIME


def test_checks_run_in_order():
    """Duplicate detection comes before config validation."""
    store = InMemoryStore(
        employees=EMPLOYEES,
        shifts=SHIFTS,
        assignments=[{"employeeId": "E001", "shiftId": "S001"}],
        config={"maxDailyHours": "broken"},
    )
    scheduler = ShiftScheduler(store)

    assert scheduler.assign_shift("E001", "S001").reason is AssignmentFailure.ALREADY_ASSIGNED
    assert scheduler.assign_shift("E001", "S002").reason is AssignmentFailure.INVALID_CONFIG


def test_malformed_stored_shift_is_skipped_from_daily_sum():
    store = InMemoryStore(
        employees=EMPLOYEES,
        shifts=SHIFTS,
        assignments=[
            {"employeeId": "E001", "shiftId": "S006"},
            {"employeeId": "E001", "shiftId": "S001"},
        ],
        config={"maxDailyHours": 8},
    )
    scheduler = ShiftScheduler(store)

    result = scheduler.assign_shift("E001", "S002")

    assert result.success
    assert result.scheduled_hours == 8


def test_get_daily_hours():
    store = InMemoryStore(
        employees=EMPLOYEES,
        shifts=SHIFTS,
        assignments=[
            {"employeeId": "E001", "shiftId": "S001"},
            {"employeeId": "E001", "shiftId": "S002"},
            {"employeeId": "E001", "shiftId": "S004"},
            {"employeeId": "E001", "shiftId": "S006"},
        ],
    )
    scheduler = ShiftScheduler(store)

    assert scheduler.get_daily_hours("E001") == {"2025-06-01": 8.0, "2025-06-02": 8.0}


def test_schedule_of_unknown_employee_is_empty(scheduler):
    assert scheduler.get_schedule("E404") == []


def test_add_employee_through_scheduler(scheduler):
    employee = scheduler.add_employee("  Carol Ng ", " 555-0103 ")

    assert employee.employee_id == "E003"
    assert employee.name == "Carol Ng"
    assert employee.phone == "555-0103"
    assert [e.employee_id for e in scheduler.list_employees()] == ["E001", "E002", "E003"]


def test_add_employee_rejects_blank_name(scheduler):
    with pytest.raises(DataValidationError):
        scheduler.add_employee("   ", "555-0199")
    assert len(scheduler.list_employees()) == 2
