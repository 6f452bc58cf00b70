"""Command-line interface for the school staffing planner."""

import argparse
import json
import logging
import sys
from datetime import date, timedelta
from pathlib import Path
from typing import Optional

from schoolstaffing.config import PlannerConfig
from schoolstaffing.domain.calendar import is_school_day, week_window
from schoolstaffing.domain.models import (
    Absence,
    AmbulantSlot,
    ClosureType,
    DayNote,
    GradeLevelSchedule,
    Group,
    GroupSlot,
    NoSlot,
    Roster,
    SchoolClosure,
    Staff,
    StaffDateAssignment,
    StaffRole,
    TimeAbsence,
    TimeWindow,
    Unit,
    UnitSlot,
    Weekday,
    parse_time,
)
from schoolstaffing.domain.mutations import EntityType, Mutation, new_id
from schoolstaffing.errors import SchoolStaffingError
from schoolstaffing.output.pdf_generator import PDFReportGenerator
from schoolstaffing.output.text_generator import STATUS_LABELS, TextReportGenerator, describe_entry
from schoolstaffing.resolution.aggregation import StaffingReporter, sorted_groups
from schoolstaffing.resolution.candidates import ReplacementFinder
from schoolstaffing.store.cache import LocalCache
from schoolstaffing.store.codec import roster_from_dict
from schoolstaffing.store.store import RosterStore
from schoolstaffing.store.sync import InMemoryBackend

logger = logging.getLogger(__name__)


def create_sample_roster() -> Roster:
    """Create the sample school: 8 groups in 2 units and 11 staff members."""
    short_break = TimeWindow.from_strings("10:15", "10:30")
    lower_long = TimeWindow.from_strings("12:00", "12:45")
    upper_long = TimeWindow.from_strings("12:15", "13:00")
    colors = [
        "#f97316", "#eab308", "#22c55e", "#14b8a6",
        "#3b82f6", "#8b5cf6", "#ec4899", "#ef4444",
    ]

    groups = []
    for n in range(1, 9):
        lower = n <= 3
        groups.append(
            Group(
                id=f"g{n}",
                name=f"Groep {n}",
                grade_level=n,
                unit_id="u1" if lower else "u2",
                color=colors[n - 1],
                short_break=short_break,
                long_break=lower_long if lower else upper_long,
            )
        )

    units = [
        Unit(id="u1", name="Onderbouw", group_ids=["g1", "g2", "g3"]),
        Unit(id="u2", name="Bovenbouw", group_ids=["g4", "g5", "g6", "g7", "g8"]),
    ]

    def week(*slots) -> dict:
        return dict(zip(Weekday, slots))

    def g(group_id: str) -> GroupSlot:
        return GroupSlot(group_id)

    off = NoSlot()
    staff = [
        Staff("s1", "Anja de Vries", StaffRole.TEACHER, week(g("g1"), g("g1"), g("g1"), g("g1"), g("g1"))),
        Staff("s2", "Bert Smit", StaffRole.TEACHER, week(g("g2"), g("g2"), off, g("g2"), g("g2"))),
        Staff("s3", "Clara Jansen", StaffRole.TEACHER, week(g("g2"), off, g("g3"), off, g("g3"))),
        Staff("s4", "David Bakker", StaffRole.TEACHER, week(g("g3"), g("g3"), off, g("g3"), off)),
        Staff("s5", "Emma Visser", StaffRole.TEACHER, week(g("g4"), g("g4"), g("g4"), g("g4"), g("g4"))),
        Staff("s6", "Frank Mulder", StaffRole.TEACHER, week(g("g5"), g("g5"), g("g5"), off, g("g5"))),
        Staff("s7", "Gina Peters", StaffRole.TEACHER, week(g("g6"), g("g6"), g("g6"), g("g6"), g("g6"))),
        Staff("s8", "Hans de Groot", StaffRole.TEACHER, week(g("g7"), g("g7"), g("g7"), g("g7"), g("g7"))),
        Staff("s9", "Iris Wolters", StaffRole.TEACHER, week(g("g8"), g("g8"), g("g8"), g("g8"), g("g8"))),
        Staff(
            "s10", "Jan Koopmans", StaffRole.TEACHING_ASSISTANT,
            week(*(UnitSlot("u1") for _ in Weekday)),
        ),
        Staff(
            "s11", "Karen van Dam", StaffRole.INTERNAL_SUPERVISOR,
            week(UnitSlot("u2"), UnitSlot("u2"), off, UnitSlot("u2"), AmbulantSlot()),
        ),
    ]

    return Roster(
        groups=groups,
        units=units,
        staff=staff,
        grade_level_schedules=GradeLevelSchedule.create_defaults(),
    )


def demo_mutations(monday: date) -> list[Mutation]:
    """Sample events for the week starting ``monday``."""
    tuesday = monday + timedelta(days=1)
    friday = monday + timedelta(days=4)
    return [
        Mutation.add(EntityType.ABSENCE, Absence(new_id(), "s5", monday, "Ziek")),
        Mutation.add(
            EntityType.ASSIGNMENT,
            StaffDateAssignment(new_id(), "s10", "g4", monday, TimeWindow.from_strings("08:30", "12:00")),
        ),
        Mutation.add(EntityType.ABSENCE, Absence(new_id(), "s7", tuesday, "Nascholing")),
        Mutation.add(
            EntityType.TIME_ABSENCE,
            TimeAbsence(new_id(), "s8", tuesday, TimeWindow.from_strings("13:00", "14:00"), "Oudergesprek"),
        ),
        Mutation.upsert(EntityType.DAY_NOTE, DayNote(new_id(), tuesday, "Teamvergadering 15:30")),
        Mutation.add(
            EntityType.CLOSURE,
            SchoolClosure(
                new_id(), "Studiemiddag", ClosureType.HALF_DAY, friday, friday,
                free_from=parse_time("12:00"),
            ),
        ),
    ]


def _school_day(d: date) -> date:
    """Move a weekend date forward to the next Monday."""
    while not is_school_day(d):
        d += timedelta(days=1)
    return d


def load_roster(path: Optional[str], config: PlannerConfig) -> Roster:
    """Load a roster from a JSON file, or from the configured cache."""
    if path:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return roster_from_dict(data)
    if not config.cache_path:
        raise SchoolStaffingError("No --roster given and no cache_path configured")
    roster = LocalCache(config.cache_path).load()
    if roster is None:
        raise SchoolStaffingError(f"No usable cached roster at {config.cache_path}")
    return roster


def _store_for(roster: Roster, config: PlannerConfig) -> RosterStore:
    return RosterStore.from_config(config, roster=roster)


def run_demo(anchor: date, config: PlannerConfig, output_path: Optional[str] = None) -> None:
    """Run the sample school through one week."""
    monday = week_window(_school_day(anchor))[0]
    print(f"Sample school, week of {monday.isoformat()}")

    backend = InMemoryBackend()
    store = RosterStore(
        create_sample_roster(),
        backend=backend,
        organization_id=config.organization_id,
    )
    for mutation in demo_mutations(monday):
        store.dispatch(mutation)
    store.flush()
    print(f"  Synced {len(backend.records_for(config.organization_id))} change(s)")

    reporter = StaffingReporter(store.resolver)
    for d in week_window(monday):
        stats = reporter.day_stats(d)
        state = "OK" if stats.is_ok else f"{stats.unmanned_count} onbemand, {stats.absent_count} afwezig"
        print(f"  {d.isoformat()}: {state}")

    report = reporter.week_report(week_window(monday))
    print()
    print(TextReportGenerator().generate_to_string([report]))

    if output_path:
        _write_reports([report], output_path)
    store.close()


def run_day(roster: Roster, d: date, config: PlannerConfig) -> None:
    store = _store_for(roster, config)
    resolver = store.resolver
    reporter = StaffingReporter(resolver)

    print(f"{d.isoformat()}")
    closure = resolver.closure_on(d)
    if closure is not None:
        print(f"  Sluiting: {closure.name} ({closure.closure_type.value})")
    for group in sorted_groups(roster.groups):
        staffing = resolver.group_staffing(group.id, d)
        if staffing is None:
            continue
        print(f"  {group.name}: {STATUS_LABELS[staffing.status]}")
        for entry in staffing.entries:
            print(f"    - {describe_entry(entry)}")

    stats = reporter.day_stats(d)
    print(f"  Onbemand: {stats.unmanned_count}, afwezig: {stats.absent_count}")
    store.close()


def run_week(
    roster: Roster,
    anchor: date,
    config: PlannerConfig,
    weeks: int = 1,
    output_path: Optional[str] = None,
) -> None:
    store = _store_for(roster, config)
    reports = StaffingReporter(store.resolver).multi_week_report(anchor, weeks)
    if output_path:
        _write_reports(reports, output_path)
    else:
        print(TextReportGenerator().generate_to_string(reports))
    store.close()


def run_candidates(
    roster: Roster,
    group_id: str,
    d: date,
    config: PlannerConfig,
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> None:
    store = _store_for(roster, config)
    window = TimeWindow.from_strings(start, end) if start and end else None
    finder = ReplacementFinder(store.resolver)
    candidates = finder.candidates(group_id, d, window)

    gap = str(window) if window else "hele dag"
    print(f"Vervangers voor {group_id} op {d.isoformat()} ({gap}):")
    if not candidates:
        print("  Geen beschikbare vervangers")
    for candidate in candidates:
        hours = f" ({candidate.working_window})" if candidate.working_window else ""
        print(f"  - {candidate.staff.name}{hours}")
    store.close()


def _write_reports(reports, output_path: str) -> None:
    if output_path.lower().endswith(".pdf"):
        print(f"\nGenerating PDF: {output_path}")
        PDFReportGenerator().generate(reports, output_path)
        print("  PDF created successfully!")
    else:
        TextReportGenerator().generate(reports, output_path)
        print(f"Wrote {output_path}")


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="School staffing planner - daily group coverage",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s demo                                   Sample school, current week
  %(prog)s demo --output week.pdf                 Also write a PDF overview
  %(prog)s day --roster school.json --date 2024-01-15
  %(prog)s week --roster school.json --date 2024-01-15 --weeks 2
  %(prog)s candidates --roster school.json --group g4 --date 2024-01-15 --start 09:00 --end 10:00
        """,
    )
    parser.add_argument("--config", type=str, help="JSON config file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    demo_parser = subparsers.add_parser("demo", help="Run the sample school through one week")
    demo_parser.add_argument(
        "--date", "-d",
        type=date.fromisoformat,
        default=date.today(),
        help="Any date in the week to show (default: today)",
    )
    demo_parser.add_argument("--output", "-o", type=str, help="Output .pdf or .txt path")

    day_parser = subparsers.add_parser("day", help="Show group staffing for one day")
    day_parser.add_argument("--roster", "-r", type=str, help="Roster JSON file")
    day_parser.add_argument("--date", "-d", type=date.fromisoformat, required=True)

    week_parser = subparsers.add_parser("week", help="Week overview")
    week_parser.add_argument("--roster", "-r", type=str, help="Roster JSON file")
    week_parser.add_argument("--date", "-d", type=date.fromisoformat, required=True)
    week_parser.add_argument(
        "--weeks", "-w",
        type=int,
        default=1,
        help="Number of consecutive weeks (default: 1)",
    )
    week_parser.add_argument("--output", "-o", type=str, help="Output .pdf or .txt path")

    cand_parser = subparsers.add_parser("candidates", help="List replacement candidates")
    cand_parser.add_argument("--roster", "-r", type=str, help="Roster JSON file")
    cand_parser.add_argument("--group", "-g", type=str, required=True, help="Group id")
    cand_parser.add_argument("--date", "-d", type=date.fromisoformat, required=True)
    cand_parser.add_argument("--start", type=str, help="Gap start HH:MM")
    cand_parser.add_argument("--end", type=str, help="Gap end HH:MM")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = PlannerConfig.from_file(args.config) if args.config else PlannerConfig.from_env()
        if args.command == "demo":
            run_demo(args.date, config, args.output)
            return 0
        elif args.command == "day":
            run_day(load_roster(args.roster, config), args.date, config)
            return 0
        elif args.command == "week":
            run_week(load_roster(args.roster, config), args.date, config, args.weeks, args.output)
            return 0
        elif args.command == "candidates":
            if bool(args.start) != bool(args.end):
                parser.error("--start and --end must be given together")
            run_candidates(
                load_roster(args.roster, config),
                args.group,
                args.date,
                config,
                args.start,
                args.end,
            )
            return 0
        else:
            parser.print_help()
            return 1
    except (SchoolStaffingError, OSError, ValueError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
