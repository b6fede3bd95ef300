"""
Main Entry Point for Shift Roster

Wires the record store, scheduler, exports and menu together and provides
the console entry point with logging and error handling.
"""

import sys
import argparse
import logging
import traceback
from pathlib import Path
from datetime import datetime
from typing import List, Optional

from shift_roster.data_manager import JsonFileStore
from shift_roster.scheduler_logic import ShiftScheduler
from shift_roster.reporting import ExportManager
from shift_roster.ui import MainMenu


def setup_logging(level: str = "INFO", log_dir: str = "logs"):
    """Setup application logging"""
    log_path = Path(log_dir)
    log_path.mkdir(exist_ok=True)

    log_file = log_path / f"shift_roster_{datetime.now().strftime('%Y%m%d')}.log"

    # stdout belongs to the menu
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            console_handler
        ]
    )

    return logging.getLogger(__name__)


def check_dependencies():
    """Check if the export dependencies are available"""
    required_modules = [
        'pandas',
        'openpyxl',
        'reportlab',
    ]

    missing_modules = []

    for module in required_modules:
        try:
            __import__(module)
        except ImportError:
            missing_modules.append(module)

    if missing_modules:
        error_msg = f"Missing required dependencies: {', '.join(missing_modules)}\n"
        error_msg += "Please install them using: pip install -e ."
        raise ImportError(error_msg)


def default_data_dir() -> Path:
    """Data directory next to the executable when frozen, else next to the package"""
    if getattr(sys, 'frozen', False):
        base_path = Path(sys.executable).parent
    else:
        base_path = Path(__file__).parent.parent
    return base_path / "data"


def handle_exception(exc_type, exc_value, exc_traceback):
    """Global exception handler"""
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return

    logger = logging.getLogger(__name__)
    logger.error(
        "Uncaught exception",
        exc_info=(exc_type, exc_value, exc_traceback)
    )
    print(f"An unexpected error occurred: {exc_type.__name__}: {exc_value}", file=sys.stderr)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="shift-roster",
        description="Assign employees to shifts under a daily-hours cap."
    )
    parser.add_argument("--data-dir", default=None,
                        help="directory holding employees.json, shifts.json, "
                             "assignments.json and config.json")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


class ShiftRosterApp:
    """Main application class"""

    def __init__(self, data_dir: Optional[str] = None):
        self.logger = logging.getLogger(__name__)
        self.data_dir = Path(data_dir) if data_dir else default_data_dir()
        self.store = None
        self.scheduler = None
        self.export_manager = None
        self.menu = None

    def initialize(self) -> bool:
        """Initialize application components"""
        try:
            self.logger.info("Initializing Shift Roster")

            check_dependencies()
            self.logger.info("All dependencies available")

            self.store = JsonFileStore(str(self.data_dir))
            self.logger.info(f"Record store initialized in {self.data_dir}")

            self.scheduler = ShiftScheduler(self.store)
            self.export_manager = ExportManager(self.scheduler)
            self.menu = MainMenu(self.scheduler, self.export_manager)

            return True

        except Exception as e:
            self.logger.error(f"Failed to initialize application: {e}")
            self.logger.error(traceback.format_exc())
            return False

    def run(self) -> bool:
        """Run the interactive menu"""
        if not self.initialize():
            print(
                "Failed to initialize Shift Roster. Check that the dependencies are "
                f"installed and that {self.data_dir} is writable and holds valid JSON.",
                file=sys.stderr
            )
            return False

        try:
            self.menu.run()
            self.logger.info("Application closed normally")
            return True

        except Exception as e:
            self.logger.error(f"Application error: {e}")
            self.logger.error(traceback.format_exc())
            print(f"An error occurred: {type(e).__name__}: {e}", file=sys.stderr)
            return False


def main(argv: Optional[List[str]] = None):
    """Main entry point"""
    args = parse_args(argv)

    sys.excepthook = handle_exception

    logger = setup_logging(args.log_level)
    logger.info("=" * 50)
    logger.info("Starting Shift Roster")
    logger.info("=" * 50)

    app = ShiftRosterApp(args.data_dir)
    success = app.run()

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
