"""
Reporting and Export Module for Shift Roster

Formats the employee list and employee schedules for the console and
exports a schedule to CSV, Excel or PDF.
"""

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from datetime import datetime
from typing import List, Optional
import logging
import re

from .data_manager import Employee, Shift
from .scheduler_logic import ShiftScheduler, shift_duration, parse_max_daily_hours

logger = logging.getLogger(__name__)

SCHEDULE_COLUMNS = ["date", "start", "end", "hours"]

_SAFE_FILENAME_PART = re.compile(r"[A-Za-z0-9_-]+", re.ASCII)


def format_employee_table(employees: List[Employee]) -> str:
    """Fixed-width employee listing"""
    lines = [
        "Employee ID  Name                Phone",
        "-----------  ------------------- ---------",
    ]
    for emp in employees:
        lines.append(emp.employee_id.ljust(13) + emp.name.ljust(20) + emp.phone)
    return "\n".join(lines)


def format_schedule_csv(shifts: List[Shift]) -> str:
    lines = ["date,start,end"]
    for shift in shifts:
        lines.append(f"{shift.date},{shift.start_time},{shift.end_time}")
    return "\n".join(lines)


class ReportGenerator:
    """Builds schedule tables and writes export files"""

    def __init__(self, scheduler: ShiftScheduler):
        self.scheduler = scheduler
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        self.styles.add(ParagraphStyle(
            name='CustomTitle',
            parent=self.styles['Heading1'],
            fontSize=18,
            spaceAfter=20,
            alignment=1  # Center alignment
        ))

        self.styles.add(ParagraphStyle(
            name='CustomHeading',
            parent=self.styles['Heading2'],
            fontSize=14,
            spaceAfter=12
        ))

    def create_schedule_dataframe(self, employee_id: str) -> pd.DataFrame:
        """One row per assigned shift; hours is empty for malformed times"""
        data = []
        for shift in self.scheduler.get_schedule(employee_id):
            data.append({
                "date": shift.date,
                "start": shift.start_time,
                "end": shift.end_time,
                "hours": shift_duration(shift)
            })
        return pd.DataFrame(data, columns=SCHEDULE_COLUMNS)

    def create_daily_hours_dataframe(self, employee_id: str) -> pd.DataFrame:
        daily_hours = self.scheduler.get_daily_hours(employee_id)
        data = [{"date": day, "hours": hours} for day, hours in sorted(daily_hours.items())]
        return pd.DataFrame(data, columns=["date", "hours"])

    def _employee_label(self, employee_id: str) -> str:
        employee = self.scheduler.store.get_employee(employee_id)
        if employee is None:
            return f"{employee_id} (unknown employee)"
        return f"{employee.employee_id} - {employee.name}"

    def export_schedule_csv(self, employee_id: str, output_path: str) -> bool:
        """Export an employee's schedule to CSV format"""
        try:
            schedule_df = self.create_schedule_dataframe(employee_id)
            schedule_df.to_csv(output_path, index=False)
            return True

        except Exception as e:
            logger.error(f"Error exporting to CSV: {e}", exc_info=True)
            return False

    def export_schedule_excel(self, employee_id: str, output_path: str) -> bool:
        """Export an employee's schedule and daily totals to an Excel workbook"""
        try:
            with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
                schedule_df = self.create_schedule_dataframe(employee_id)
                schedule_df.to_excel(writer, sheet_name='Schedule', index=False)

                daily_df = self.create_daily_hours_dataframe(employee_id)
                daily_df.to_excel(writer, sheet_name='Daily Hours', index=False)

                self._format_excel_worksheets(writer)

            return True

        except Exception as e:
            logger.error(f"Error creating Excel file: {e}", exc_info=True)
            return False

    def _format_excel_worksheets(self, writer):
        """Widen columns to fit their content"""
        for worksheet in writer.sheets.values():
            for column in worksheet.columns:
                column_letter = column[0].column_letter
                max_length = max(len(str(cell.value or "")) for cell in column)
                worksheet.column_dimensions[column_letter].width = min(max_length + 2, 40)

    def export_schedule_pdf(self, employee_id: str, output_path: str) -> bool:
        """Export an employee's schedule to a one-page PDF"""
        try:
            doc = SimpleDocTemplate(
                output_path,
                pagesize=A4,
                rightMargin=0.75*inch,
                leftMargin=0.75*inch,
                topMargin=0.75*inch,
                bottomMargin=0.75*inch
            )

            story = []
            story.append(Paragraph("Shift Schedule", self.styles['CustomTitle']))
            story.append(Paragraph(self._employee_label(employee_id), self.styles['CustomHeading']))
            story.append(Spacer(1, 12))

            story.append(self._create_schedule_table(employee_id))
            story.append(Spacer(1, 20))

            story.append(Paragraph("Daily Hours", self.styles['CustomHeading']))
            story.append(self._create_daily_hours_table(employee_id))

            doc.build(story)
            return True

        except Exception as e:
            logger.error(f"Error creating PDF: {e}", exc_info=True)
            return False

    def _create_schedule_table(self, employee_id: str) -> Table:
        schedule_df = self.create_schedule_dataframe(employee_id)

        data = [["Date", "Start", "End", "Hours"]]
        for row in schedule_df.itertuples(index=False):
            hours = "invalid" if pd.isna(row.hours) else f"{row.hours:g}"
            data.append([str(row.date), str(row.start), str(row.end), hours])

        table = Table(data, colWidths=[1.8*inch, 1.2*inch, 1.2*inch, 1.0*inch])
        table.setStyle(self._table_style())
        return table

    def _create_daily_hours_table(self, employee_id: str) -> Table:
        config = self.scheduler.store.get_config()
        cap = parse_max_daily_hours(config.max_daily_hours)
        daily_df = self.create_daily_hours_dataframe(employee_id)

        data = [["Date", "Hours", "Cap"]]
        for row in daily_df.itertuples(index=False):
            data.append([str(row.date), f"{row.hours:g}", "-" if cap is None else f"{cap:g}"])

        table = Table(data, colWidths=[1.8*inch, 1.2*inch, 1.2*inch])
        table.setStyle(self._table_style())
        return table

    def _table_style(self) -> TableStyle:
        return TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.grey),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 10),
            ('BOTTOMPADDING', (0, 0), (-1, 0), 8),
            ('BACKGROUND', (0, 1), (-1, -1), colors.beige),
            ('GRID', (0, 0), (-1, -1), 1, colors.black),
        ])


class ExportManager:
    """Dispatches schedule exports by format"""

    FORMAT_EXTENSIONS = {'pdf': 'pdf', 'excel': 'xlsx', 'csv': 'csv'}

    def __init__(self, scheduler: ShiftScheduler):
        self.scheduler = scheduler
        self.report_generator = ReportGenerator(scheduler)

    def export_schedule(self, employee_id: str, format_type: str, output_path: str) -> bool:
        """Export an employee's schedule in the given format"""
        if format_type.lower() == 'pdf':
            return self.report_generator.export_schedule_pdf(employee_id, output_path)
        elif format_type.lower() == 'excel':
            return self.report_generator.export_schedule_excel(employee_id, output_path)
        elif format_type.lower() == 'csv':
            return self.report_generator.export_schedule_csv(employee_id, output_path)
        else:
            raise ValueError(f"Unsupported format: {format_type}")

    def get_default_filename(self, employee_id: str, format_type: str,
                             timestamp: Optional[datetime] = None) -> str:
        extension = self.FORMAT_EXTENSIONS.get(format_type.lower())
        if extension is None:
            raise ValueError(f"Unsupported format: {format_type}")
        if not _SAFE_FILENAME_PART.fullmatch(employee_id):
            raise ValueError(f"Employee ID not usable in a file name: {employee_id!r}")
        stamp = (timestamp or datetime.now()).strftime("%Y%m%d_%H%M%S")
        return f"schedule_{employee_id}_{stamp}.{extension}"
