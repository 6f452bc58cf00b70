"""PDF generation for week overviews.

This module creates printable week overviews showing:
- Closure and half-day banners per day
- Changed groups with their resolved staff and status
- Available support staff per unit, ambulant staff and absences
"""

from io import BytesIO
from pathlib import Path
from typing import Union

from schoolstaffing.domain.models import format_time
from schoolstaffing.output.text_generator import STATUS_LABELS, describe_entry
from schoolstaffing.resolution.aggregation import DayReport, WeekReport
from schoolstaffing.resolution.resolver import GroupStatus, UNGROUPED_LABEL

# Color definitions (RGB tuples, 0-1 scale)
COLORS = {
    GroupStatus.UNMANNED: (0.86, 0.15, 0.15),  # Red
    GroupStatus.OVERSTAFFED: (0.85, 0.47, 0.02),  # Orange
    GroupStatus.PARTIALLY_ABSENT: (0.79, 0.54, 0.02),  # Amber
    GroupStatus.MANNED: (0.09, 0.5, 0.24),  # Green
    "closed": (0.39, 0.45, 0.55),  # Slate
    "half_day": (0.15, 0.39, 0.92),  # Blue
    "heading_bg": (0.93, 0.95, 0.98),
    "text": (0, 0, 0),
}


class PDFReportGenerator:
    """Generates printable PDF week overviews.

    Each week starts on a new page; long weeks flow onto extra pages.

    Example:
        >>> generator = PDFReportGenerator()
        >>> generator.generate(reports, "week.pdf")
    """

    def __init__(
        self,
        page_width: float = 595,  # A4 portrait width
        page_height: float = 842,  # A4 portrait height
        margin: float = 40,
        line_height: float = 13,
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin
        self.line_height = line_height

    def generate(self, reports: list[WeekReport], output_path: Union[str, Path]) -> None:
        """Generate the PDF and save it to a file.

        Args:
            reports: Week reports, one or more consecutive weeks.
            output_path: Path to save the PDF.
        """
        try:
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        c = canvas.Canvas(str(output_path), pagesize=(self.page_width, self.page_height))
        self._draw_reports(c, reports)
        c.save()

    def generate_to_buffer(self, reports: list[WeekReport]) -> BytesIO:
        """Generate the PDF and return it as a bytes buffer."""
        try:
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=(self.page_width, self.page_height))
        self._draw_reports(c, reports)
        c.save()
        buffer.seek(0)
        return buffer

    def _draw_reports(self, c, reports: list[WeekReport]) -> None:
        c.setTitle("Weekoverzicht")
        for report in reports:
            self._y = self.page_height - self.margin
            self._page = 1
            self._draw_week_header(c, report)
            if report.is_unchanged and not any(d.closure or d.absent for d in report.days):
                self._text(c, "Geen wijzigingen deze week.", indent=0)
            else:
                for day in report.days:
                    self._draw_day(c, day)
            self._draw_footer(c)
            c.showPage()

    def _draw_week_header(self, c, report: WeekReport) -> None:
        c.setFont("Helvetica-Bold", 16)
        c.setFillColorRGB(*COLORS["text"])
        c.drawString(self.margin, self._y - 16, f"Weekoverzicht - Week {report.week_number}")
        c.setFont("Helvetica", 10)
        c.drawString(
            self.margin,
            self._y - 32,
            (
                f"{report.start_date.strftime('%d-%m-%Y')} t/m "
                f"{report.end_date.strftime('%d-%m-%Y')}"
            ),
        )
        self._y -= 50

    def _draw_day(self, c, day: DayReport) -> None:
        self._ensure_space(c, 3 * self.line_height)

        # Day heading bar
        c.setFillColorRGB(*COLORS["heading_bg"])
        c.rect(
            self.margin,
            self._y - self.line_height - 2,
            self.page_width - 2 * self.margin,
            self.line_height + 4,
            fill=1,
            stroke=0,
        )
        c.setFillColorRGB(*COLORS["text"])
        c.setFont("Helvetica-Bold", 11)
        c.drawString(
            self.margin + 4,
            self._y - self.line_height + 2,
            f"{day.weekday.label} {day.report_date.strftime('%d-%m-%Y')}",
        )
        self._y -= self.line_height + 8

        if day.note is not None:
            self._text(c, f"Notitie: {day.note.text}", font="Helvetica-Oblique")
        if day.is_closed:
            self._text(c, f"Gesloten: {day.closure.name}", color=COLORS["closed"], font="Helvetica-Bold")
            self._y -= 4
            return
        if day.half_day is not None:
            free_from = format_time(day.half_day.free_from) if day.half_day.free_from else "12:00"
            self._text(
                c,
                f"Halve dag: {day.half_day.name}, vrij vanaf {free_from}",
                color=COLORS["half_day"],
            )

        if day.is_unchanged and not day.absent:
            self._text(c, "Geen wijzigingen")

        for staffing in day.changed_groups:
            color = COLORS.get(staffing.status, COLORS["text"])
            self._text(
                c,
                f"{staffing.group.name}: {STATUS_LABELS[staffing.status]}",
                color=color,
                font="Helvetica-Bold",
            )
            for entry in staffing.entries:
                self._text(c, f"- {describe_entry(entry)}", indent=24)

        if not day.unit_support.is_empty():
            self._text(c, "Beschikbaar:", font="Helvetica-Bold")
            for support in day.unit_support.by_unit:
                names = ", ".join(s.name for s in support.staff)
                self._text(c, f"{support.unit.name}: {names}", indent=24)
            if day.unit_support.ungrouped:
                names = ", ".join(s.name for s in day.unit_support.ungrouped)
                self._text(c, f"{UNGROUPED_LABEL}: {names}", indent=24)

        if day.ambulant:
            self._text(c, f"Ambulant: {', '.join(s.name for s in day.ambulant)}")

        if day.absent:
            self._text(c, "Afwezig:", font="Helvetica-Bold")
            for member, absence in day.absent:
                self._text(c, f"- {member.name} ({absence.reason or 'Afwezig'})", indent=24)

        self._y -= 6

    def _text(
        self,
        c,
        text: str,
        indent: float = 12,
        font: str = "Helvetica",
        color: tuple = COLORS["text"],
    ) -> None:
        self._ensure_space(c, self.line_height)
        c.setFont(font, 9)
        c.setFillColorRGB(*color)
        c.drawString(self.margin + indent, self._y - self.line_height + 3, text[:110])
        c.setFillColorRGB(*COLORS["text"])
        self._y -= self.line_height

    def _ensure_space(self, c, needed: float) -> None:
        if self._y - needed >= self.margin + 20:
            return
        self._draw_footer(c)
        c.showPage()
        self._page += 1
        self._y = self.page_height - self.margin

    def _draw_footer(self, c) -> None:
        c.setFont("Helvetica", 8)
        c.setFillColorRGB(*COLORS["text"])
        c.drawCentredString(self.page_width / 2, self.margin - 10, f"Pagina {self._page}")
