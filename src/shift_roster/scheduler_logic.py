"""
Scheduler Logic for Shift Roster

Computes shift durations and validates shift assignments against the
configured daily-hours cap before recording them.
"""

import logging
import math
import re
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Any

from .data_manager import RecordStore, Employee, Shift, Assignment, DataValidationError

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60

_CLOCK_TIME = re.compile(r"(\d\d):(\d\d)", re.ASCII)


class InvalidTimeFormat(ValueError):
    """Raised when a value is not a 24-hour "HH:MM" string"""
    pass


class AssignmentFailure(Enum):
    """Reasons an assignment is rejected, valued by their user-facing message"""
    EMPLOYEE_NOT_FOUND = "Employee does not exist"
    SHIFT_NOT_FOUND = "Shift does not exist"
    ALREADY_ASSIGNED = "Employee already assigned to shift"
    INVALID_CONFIG = "Invalid config: maxDailyHours must be a positive number"
    INVALID_SHIFT_TIME = "Invalid shift time format"
    DAILY_CAP_EXCEEDED = "Cannot assign shift: maxDailyHours limit would be exceeded."


@dataclass
class AssignmentResult:
    """Result of an assignment attempt"""
    success: bool
    reason: Optional[AssignmentFailure]
    message: str
    assignment: Optional[Assignment] = None
    scheduled_hours: Optional[float] = None

    @classmethod
    def rejected(cls, reason: AssignmentFailure) -> 'AssignmentResult':
        return cls(success=False, reason=reason, message=reason.value)


def parse_clock_time(value: Any) -> int:
    """Convert "HH:MM" into minutes since midnight"""
    if not isinstance(value, str):
        raise InvalidTimeFormat(f"Expected an HH:MM string, got {type(value).__name__}")

    match = _CLOCK_TIME.fullmatch(value)
    if not match:
        raise InvalidTimeFormat(f"Expected HH:MM, got {value!r}")

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise InvalidTimeFormat(f"Time out of range: {value!r}")

    return hour * 60 + minute


def compute_duration(start_time: Any, end_time: Any) -> Optional[float]:
    """
    Compute the length of a shift in decimal hours.

    An end time earlier than the start time means the shift crosses midnight.
    Equal times give a zero-length shift, not a full day.

    Returns:
        Hours as a float, or None if either time is not a valid "HH:MM".
    """
    try:
        start_minutes = parse_clock_time(start_time)
        end_minutes = parse_clock_time(end_time)
    except InvalidTimeFormat:
        return None

    if end_minutes < start_minutes:
        end_minutes += MINUTES_PER_DAY  # overnight

    return (end_minutes - start_minutes) / 60


def shift_duration(shift: Shift) -> Optional[float]:
    return compute_duration(shift.start_time, shift.end_time)


def parse_max_daily_hours(value: Any) -> Optional[float]:
    """Return the cap as a positive finite float, or None if it is unusable"""
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        hours = float(value)
    elif isinstance(value, str):
        try:
            hours = float(value.strip())
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(hours) or hours <= 0:
        return None
    return hours


class ShiftScheduler:
    """Employee and assignment operations over an injected record store"""

    def __init__(self, store: RecordStore):
        self.store = store

    def list_employees(self) -> List[Employee]:
        return self.store.get_employees()

    def add_employee(self, name: str, phone: str) -> Employee:
        """Add an employee under the next sequential id"""
        name = (name or "").strip()
        phone = (phone or "").strip()
        if not name:
            raise DataValidationError("Employee name must not be empty")

        employee = self.store.append_employee(name, phone)
        logger.info(f"Added employee {employee.employee_id} ({employee.name})")
        return employee

    def get_schedule(self, employee_id: str) -> List[Shift]:
        return self.store.get_shifts_for_employee(employee_id)

    def get_daily_hours(self, employee_id: str) -> Dict[str, float]:
        """Scheduled hours per date. Shifts with malformed times are left out."""
        totals = defaultdict(float)
        for shift in self.get_schedule(employee_id):
            hours = shift_duration(shift)
            if hours is None:
                continue
            totals[shift.date] += hours
        return dict(totals)

    def _hours_on_date(self, employee_id: str, date: str) -> float:
        total_hours = 0.0
        for shift in self.store.get_shifts_for_employee(employee_id):
            if shift.date != date:
                continue
            hours = shift_duration(shift)
            if hours is None:
                logger.warning(
                    f"Skipping shift {shift.shift_id} with malformed times "
                    f"{shift.start_time!r}-{shift.end_time!r} for {employee_id}"
                )
                continue
            total_hours += hours
        return total_hours

    def assign_shift(self, employee_id: str, shift_id: str) -> AssignmentResult:
        """
        Assign a shift to an employee if every rule holds.

        Checks run in order and stop at the first failure: employee exists,
        shift exists, not already assigned, config cap is valid, shift times
        are valid, and the day's total stays within the cap. Only a passing
        attempt writes to the store.
        """
        if self.store.get_employee(employee_id) is None:
            return self._reject(employee_id, shift_id, AssignmentFailure.EMPLOYEE_NOT_FOUND)

        shift = self.store.get_shift(shift_id)
        if shift is None:
            return self._reject(employee_id, shift_id, AssignmentFailure.SHIFT_NOT_FOUND)

        if self.store.get_assignment(employee_id, shift_id) is not None:
            return self._reject(employee_id, shift_id, AssignmentFailure.ALREADY_ASSIGNED)

        max_daily_hours = parse_max_daily_hours(self.store.get_config().max_daily_hours)
        if max_daily_hours is None:
            return self._reject(employee_id, shift_id, AssignmentFailure.INVALID_CONFIG)

        new_shift_hours = shift_duration(shift)
        if new_shift_hours is None or not math.isfinite(new_shift_hours) or new_shift_hours <= 0:
            return self._reject(employee_id, shift_id, AssignmentFailure.INVALID_SHIFT_TIME)

        total_hours = self._hours_on_date(employee_id, shift.date) + new_shift_hours
        if total_hours > max_daily_hours:
            logger.info(
                f"{employee_id} would work {total_hours:g}h on {shift.date}, "
                f"cap is {max_daily_hours:g}h"
            )
            return self._reject(employee_id, shift_id, AssignmentFailure.DAILY_CAP_EXCEEDED)

        assignment = self.store.append_assignment(employee_id, shift_id)
        logger.info(f"Assigned shift {shift_id} on {shift.date} to {employee_id}")

        return AssignmentResult(
            success=True,
            reason=None,
            message="Shift Recorded",
            assignment=assignment,
            scheduled_hours=total_hours
        )

    def _reject(self, employee_id: str, shift_id: str, reason: AssignmentFailure) -> AssignmentResult:
        logger.info(f"Rejected assignment of {shift_id} to {employee_id}: {reason.name}")
        return AssignmentResult.rejected(reason)
