"""
Data Manager for Shift Roster

Defines the employee, shift, assignment and config records and the record
store they live in. The JSON store keeps one flat file per collection and
rewrites a file wholesale on every mutation.
"""

import copy
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Any

logger = logging.getLogger(__name__)

DEFAULT_MAX_DAILY_HOURS = 8


class DataManagerError(Exception):
    """Base exception for record store operations"""
    pass


class DataFileCorruptedError(DataManagerError):
    """Raised when a data file cannot be parsed or has the wrong shape"""
    pass


class DataFileNotFoundError(DataManagerError):
    """Raised when a data file is not found"""
    pass


class DataSaveError(DataManagerError):
    """Raised when saving data fails"""
    pass


class DataValidationError(DataManagerError):
    """Raised when data validation fails"""
    pass


@dataclass
class Employee:
    """Employee record keyed by an "E" + 3-digit id"""
    employee_id: str
    name: str
    phone: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "employeeId": self.employee_id,
            "name": self.name,
            "phone": self.phone
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Employee':
        return cls(
            employee_id=data["employeeId"],
            name=data.get("name", ""),
            phone=data.get("phone", "")
        )


@dataclass
class Shift:
    """Pre-seeded shift slot. Times are kept as raw "HH:MM" strings."""
    shift_id: str
    date: str
    start_time: Any
    end_time: Any

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shiftId": self.shift_id,
            "date": self.date,
            "startTime": self.start_time,
            "endTime": self.end_time
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Shift':
        return cls(
            shift_id=data["shiftId"],
            date=data.get("date", ""),
            start_time=data.get("startTime"),
            end_time=data.get("endTime")
        )


@dataclass
class Assignment:
    """Join record between one employee and one shift"""
    employee_id: str
    shift_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "employeeId": self.employee_id,
            "shiftId": self.shift_id
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Assignment':
        return cls(
            employee_id=data["employeeId"],
            shift_id=data["shiftId"]
        )


@dataclass
class Config:
    """Scheduling policy. max_daily_hours is kept raw; the validator checks it."""
    max_daily_hours: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {"maxDailyHours": self.max_daily_hours}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        return cls(max_daily_hours=data.get("maxDailyHours"))


def next_employee_id(employees: List[Employee]) -> str:
    """Return the id following the highest numeric suffix, "E001" when empty"""
    max_id = 0
    for emp in employees:
        suffix = emp.employee_id[1:]
        if suffix.isdigit():
            max_id = max(max_id, int(suffix))
    return f"E{max_id + 1:03d}"


def _build_records(raw_records: List[Any], record_cls, source: str) -> List[Any]:
    records = []
    for item in raw_records:
        try:
            records.append(record_cls.from_dict(item))
        except (KeyError, TypeError, AttributeError) as e:
            raise DataFileCorruptedError(f"Malformed record in {source}: {item!r}") from e
    return records


class RecordStore(ABC):
    """
    Abstract record store consumed by the scheduler.

    Subclasses provide raw reads and whole-collection writes; lookups, the
    assignment-to-shift join and id generation are shared here.
    """

    @abstractmethod
    def _load_collection(self, name: str) -> List[Dict[str, Any]]:
        """Return the raw records of 'employees', 'shifts' or 'assignments'"""

    @abstractmethod
    def _save_collection(self, name: str, records: List[Dict[str, Any]]) -> None:
        """Replace the raw records of a collection"""

    @abstractmethod
    def _load_config(self) -> Dict[str, Any]:
        """Return the raw config document"""

    # Employees
    def get_employees(self) -> List[Employee]:
        return _build_records(self._load_collection("employees"), Employee, "employees")

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        for emp in self.get_employees():
            if emp.employee_id == employee_id:
                return emp
        return None

    def append_employee(self, name: str, phone: str) -> Employee:
        """Add an employee under the next sequential id and return it"""
        records = self._load_collection("employees")
        employees = _build_records(records, Employee, "employees")
        employee = Employee(employee_id=next_employee_id(employees), name=name, phone=phone)
        records.append(employee.to_dict())
        self._save_collection("employees", records)
        return employee

    # Shifts
    def get_shifts(self) -> List[Shift]:
        return _build_records(self._load_collection("shifts"), Shift, "shifts")

    def get_shift(self, shift_id: str) -> Optional[Shift]:
        for shift in self.get_shifts():
            if shift.shift_id == shift_id:
                return shift
        return None

    # Assignments
    def get_assignments(self) -> List[Assignment]:
        return _build_records(self._load_collection("assignments"), Assignment, "assignments")

    def get_assignment(self, employee_id: str, shift_id: str) -> Optional[Assignment]:
        for assignment in self.get_assignments():
            if assignment.employee_id == employee_id and assignment.shift_id == shift_id:
                return assignment
        return None

    def append_assignment(self, employee_id: str, shift_id: str) -> Assignment:
        """Record an assignment. No validation happens here."""
        records = self._load_collection("assignments")
        assignment = Assignment(employee_id=employee_id, shift_id=shift_id)
        records.append(assignment.to_dict())
        self._save_collection("assignments", records)
        return assignment

    def get_shifts_for_employee(self, employee_id: str) -> List[Shift]:
        """Shifts assigned to an employee, in shift-file order"""
        shift_ids = {a.shift_id for a in self.get_assignments() if a.employee_id == employee_id}
        return [shift for shift in self.get_shifts() if shift.shift_id in shift_ids]

    # Config
    def get_config(self) -> Config:
        return Config.from_dict(self._load_config())


class JsonFileStore(RecordStore):
    """Record store backed by one JSON file per collection in a data directory"""

    FILES = {
        "employees": "employees.json",
        "shifts": "shifts.json",
        "assignments": "assignments.json",
        "config": "config.json",
    }

    def __init__(self, data_dir: str = "data"):
        self.data_dir = Path(data_dir)
        self._ensure_data_files()

    def path_for(self, name: str) -> Path:
        return self.data_dir / self.FILES[name]

    def _ensure_data_files(self):
        """Create the data directory and any missing file, recovering from .bak first"""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        for name in self.FILES:
            path = self.path_for(name)
            if path.exists():
                continue

            expected_type = dict if name == "config" else list
            if self._recover_from_backup(path, expected_type) is not None:
                continue

            logger.info(f"No {path.name} found in {self.data_dir}, creating default")
            default = {"maxDailyHours": DEFAULT_MAX_DAILY_HOURS} if name == "config" else []
            self._write_json(path, default)

    def _recover_from_backup(self, path: Path, expected_type: type) -> Optional[Any]:
        """Restore path from its .bak if that holds valid data; return the data or None"""
        backup_file = path.with_suffix('.bak')
        if not backup_file.exists():
            return None

        try:
            logger.info(f"Attempting recovery of {path.name} from backup {backup_file}")
            with open(backup_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError, IOError) as backup_e:
            logger.error(f"Backup file {backup_file} also unreadable: {backup_e}")
            return None

        if not isinstance(data, expected_type):
            logger.error(f"Backup file {backup_file} has the wrong shape, not restoring")
            return None

        backup_file.replace(path)
        logger.info(f"Successfully recovered {path.name} from backup")
        return data

    def _read_json(self, path: Path, expected_type: type) -> Any:
        if not path.exists():
            raise DataFileNotFoundError(f"Data file {path} does not exist")
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError, IOError) as e:
            logger.error(f"Error loading data file {path}: {e}")
            recovered = self._recover_from_backup(path, expected_type)
            if recovered is not None:
                return recovered
            raise DataFileCorruptedError(f"Data file {path} could not be read and no usable backup: {e}") from e

        if not isinstance(data, expected_type):
            raise DataFileCorruptedError(
                f"Data file {path} should hold a JSON {expected_type.__name__}, "
                f"found {type(data).__name__}"
            )
        return data

    def _write_json(self, path: Path, data: Any) -> None:
        """Rewrite a file atomically, keeping the previous version as .bak"""
        temp_file = path.with_suffix('.tmp')
        backup_file = path.with_suffix('.bak')

        try:
            if path.exists():
                path.replace(backup_file)

            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=4, ensure_ascii=False)

            temp_file.replace(path)

        except (IOError, OSError) as e:
            logger.error(f"I/O error while saving {path}: {e}", exc_info=True)
            if backup_file.exists() and not path.exists():
                try:
                    backup_file.replace(path)
                except OSError as restore_e:
                    logger.error(f"Failed to restore {path} from backup: {restore_e}", exc_info=True)
            raise DataSaveError(f"Failed to save {path}: {e}") from e

        finally:
            if temp_file.exists():
                try:
                    temp_file.unlink()
                except OSError as cleanup_e:
                    logger.error(f"Failed to clean up temporary file {temp_file}: {cleanup_e}")

    def _load_collection(self, name: str) -> List[Dict[str, Any]]:
        return self._read_json(self.path_for(name), list)

    def _save_collection(self, name: str, records: List[Dict[str, Any]]) -> None:
        self._write_json(self.path_for(name), records)

    def _load_config(self) -> Dict[str, Any]:
        return self._read_json(self.path_for("config"), dict)


class InMemoryStore(RecordStore):
    """Record store holding plain dict records in memory"""

    def __init__(self, employees: Optional[List[Dict[str, Any]]] = None,
                 shifts: Optional[List[Dict[str, Any]]] = None,
                 assignments: Optional[List[Dict[str, Any]]] = None,
                 config: Optional[Dict[str, Any]] = None):
        self.collections = {
            "employees": copy.deepcopy(employees or []),
            "shifts": copy.deepcopy(shifts or []),
            "assignments": copy.deepcopy(assignments or []),
        }
        if config is None:
            config = {"maxDailyHours": DEFAULT_MAX_DAILY_HOURS}
        self.config = copy.deepcopy(config)

    def _load_collection(self, name: str) -> List[Dict[str, Any]]:
        return copy.deepcopy(self.collections[name])

    def _save_collection(self, name: str, records: List[Dict[str, Any]]) -> None:
        self.collections[name] = copy.deepcopy(records)

    def _load_config(self) -> Dict[str, Any]:
        return copy.deepcopy(self.config)
