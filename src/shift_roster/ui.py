"""
Text User Interface for Shift Roster

Numbered menu loop over the scheduler. All prompting and printing lives
here; the scheduler returns records and results only.
"""

from pathlib import Path
from typing import Callable, Optional
import logging

from .data_manager import DataValidationError
from .scheduler_logic import ShiftScheduler
from .reporting import ExportManager, format_employee_table, format_schedule_csv

logger = logging.getLogger(__name__)

MENU = """1. Show all employees
2. Add new employee
3. Assign employee to shift
4. View employee schedule
5. Export employee schedule
6. Exit"""

EXPORT_FORMATS = ("csv", "excel", "pdf")


class MainMenu:
    """Interactive menu bound to a scheduler and an export manager"""

    def __init__(self, scheduler: ShiftScheduler,
                 export_manager: Optional[ExportManager] = None,
                 input_func: Callable[[str], str] = input,
                 output_func: Callable[[str], None] = print,
                 export_dir: str = "exports"):
        self.scheduler = scheduler
        self.export_manager = export_manager or ExportManager(scheduler)
        self.input = input_func
        self.output = output_func
        self.export_dir = Path(export_dir)

        self.actions = {
            1: self.display_employees,
            2: self.add_new_employee,
            3: self.schedule_employee,
            4: self.show_employee_schedule,
            5: self.export_employee_schedule,
        }

    def prompt(self, label: str) -> str:
        return self.input(label).strip()

    def display_employees(self):
        self.output(format_employee_table(self.scheduler.list_employees()))

    def add_new_employee(self):
        name = self.prompt("Enter employee name: ")
        phone = self.prompt("Enter phone number: ")

        try:
            employee = self.scheduler.add_employee(name, phone)
        except DataValidationError as e:
            self.output(str(e))
            return
        self.output(f"Employee added... ({employee.employee_id})")

    def schedule_employee(self):
        employee_id = self.prompt("Enter employee ID: ")
        shift_id = self.prompt("Enter shift ID: ")

        result = self.scheduler.assign_shift(employee_id, shift_id)
        self.output(result.message)

    def show_employee_schedule(self):
        employee_id = self.prompt("Enter employee ID: ")
        shifts = self.scheduler.get_schedule(employee_id)

        self.output("")
        self.output(format_schedule_csv(shifts))

    def export_employee_schedule(self):
        employee_id = self.prompt("Enter employee ID: ")
        format_type = self.prompt(f"Format ({'/'.join(EXPORT_FORMATS)}): ").lower() or "csv"
        if format_type not in EXPORT_FORMATS:
            self.output(f"Unsupported format: {format_type}")
            return

        try:
            filename = self.export_manager.get_default_filename(employee_id, format_type)
        except ValueError as e:
            self.output(str(e))
            return

        self.export_dir.mkdir(parents=True, exist_ok=True)
        output_path = self.export_dir / filename

        if self.export_manager.export_schedule(employee_id, format_type, str(output_path)):
            self.output(f"Schedule exported to {output_path}")
        else:
            self.output("Export failed, see the log for details")

    def read_choice(self) -> Optional[int]:
        raw = self.prompt("What is your choice> ")
        try:
            return int(raw)
        except ValueError:
            return None

    def run(self):
        """Loop until the user exits or input ends"""
        while True:
            self.output(MENU)

            try:
                choice = self.read_choice()
                if choice == 6:
                    break

                action = self.actions.get(choice)
                if action is None:
                    self.output("Error in selection")
                    continue

                action()
                self.output("\n\n")

            except (EOFError, KeyboardInterrupt):
                logger.info("Input closed, leaving menu")
                break

        self.output("*** Goodbye!")
