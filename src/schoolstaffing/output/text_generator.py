"""Plain-text rendering of week reports.

The text layout follows the printed week overview: one section per school
day with closure banners, changed groups and their staff, available
support staff per unit, ambulant staff and the day's absences.
"""

from pathlib import Path
from typing import Union

from schoolstaffing.domain.models import format_time
from schoolstaffing.resolution.aggregation import DayReport, WeekReport
from schoolstaffing.resolution.resolver import GroupStatus, ResolvedStaff, UNGROUPED_LABEL

STATUS_LABELS = {
    GroupStatus.CLOSED: "gesloten",
    GroupStatus.INACTIVE: "geen les",
    GroupStatus.UNMANNED: "ONBEMAND",
    GroupStatus.OVERSTAFFED: "overbezet",
    GroupStatus.PARTIALLY_ABSENT: "afwezigheid",
    GroupStatus.MANNED: "bemand",
}

WIDTH = 80


def _date_str(d) -> str:
    return d.strftime("%d-%m-%Y")


def describe_entry(entry: ResolvedStaff) -> str:
    """One-line description of a resolved staff member with status tags."""
    tags = []
    if entry.is_replacement:
        if entry.replacement_window is None:
            tags.append("vervanging hele dag")
        else:
            tags.append(f"vervanging {entry.replacement_window}")
    if entry.absent:
        tags.append(f"afwezig ({entry.absence_reason or 'Afwezig'})")
    for ta in entry.time_absences:
        reason = f" ({ta.reason})" if ta.reason else ""
        tags.append(f"weg {ta.window}{reason}")
    suffix = f"  [{', '.join(tags)}]" if tags else ""
    return f"{entry.staff.name}{suffix}"


class TextReportGenerator:
    """Generates plain-text week overviews.

    Example:
        >>> generator = TextReportGenerator()
        >>> print(generator.generate_to_string([report]))
    """

    def generate(self, reports: list[WeekReport], output_path: Union[str, Path]) -> str:
        """Render week reports and save them to a text file.

        Returns:
            The generated text content.
        """
        content = self.generate_to_string(reports)
        Path(output_path).write_text(content, encoding="utf-8")
        return content

    def generate_to_string(self, reports: list[WeekReport]) -> str:
        lines: list[str] = []
        for report in reports:
            lines.extend(self._week_lines(report))
            lines.append("")
        return "\n".join(lines)

    def _week_lines(self, report: WeekReport) -> list[str]:
        lines = [
            "=" * WIDTH,
            (
                f"WEEKOVERZICHT - WEEK {report.week_number} "
                f"({_date_str(report.start_date)} t/m {_date_str(report.end_date)})"
            ),
            "=" * WIDTH,
        ]
        if report.is_unchanged and not any(d.closure or d.absent for d in report.days):
            lines.append("")
            lines.append("Geen wijzigingen deze week.")
            return lines
        for day in report.days:
            lines.append("")
            lines.extend(self._day_lines(day))
        return lines

    def _day_lines(self, day: DayReport) -> list[str]:
        lines = [
            f"{day.weekday.label} {_date_str(day.report_date)}",
            "-" * WIDTH,
        ]
        if day.note is not None:
            lines.append(f"  Notitie: {day.note.text}")
        if day.is_closed:
            lines.append(f"  GESLOTEN: {day.closure.name}")
            return lines
        if day.half_day is not None:
            free_from = format_time(day.half_day.free_from) if day.half_day.free_from else "12:00"
            lines.append(f"  Halve dag: {day.half_day.name}, vrij vanaf {free_from}")

        if day.is_unchanged and not day.absent:
            lines.append("  Geen wijzigingen")

        for staffing in day.changed_groups:
            lines.append(f"  {staffing.group.name}: {STATUS_LABELS[staffing.status]}")
            if not staffing.entries:
                lines.append("    (niemand ingeroosterd)")
            for entry in staffing.entries:
                lines.append(f"    - {describe_entry(entry)}")

        if not day.unit_support.is_empty():
            lines.append("  Beschikbaar:")
            for support in day.unit_support.by_unit:
                names = ", ".join(s.name for s in support.staff)
                lines.append(f"    {support.unit.name}: {names}")
            if day.unit_support.ungrouped:
                names = ", ".join(s.name for s in day.unit_support.ungrouped)
                lines.append(f"    {UNGROUPED_LABEL}: {names}")

        if day.ambulant:
            lines.append(f"  Ambulant: {', '.join(s.name for s in day.ambulant)}")

        if day.absent:
            lines.append("  Afwezig:")
            for member, absence in day.absent:
                lines.append(f"    - {member.name} ({absence.reason or 'Afwezig'})")
        return lines
