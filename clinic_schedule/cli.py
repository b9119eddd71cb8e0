"""Command line tool for clinic scheduling.

Usage:
    clinic-schedule slots --doctor DOCTOR_ID --date 2025-01-15
    clinic-schedule schedules --doctor DOCTOR_ID
    clinic-schedule quick-create --nurse NURSE_ID --days 1,3 --shift "08:00-12:00=Ca sáng" --yes
    clinic-schedule delete SCHEDULE_ID

Connection settings come from the environment (.env supported):
CLINIC_API_BASE_URL, CLINIC_API_TOKEN, CLINIC_API_TIMEOUT, CLINIC_TIMEZONE.
"""
import argparse
import sys
from typing import List, Optional

from clinic_schedule import config
from clinic_schedule.availability import SlotAvailabilityResolver
from clinic_schedule.errors import BatchCreateError, ClinicScheduleError, ScheduleValidationError
from clinic_schedule.http_client import ApiClient
from clinic_schedule.logging_config import LOG_FORMATS, setup_structured_logging
from clinic_schedule.models import ShiftTemplate, WorkSchedule, owner_from
from clinic_schedule.quick_schedule import QuickScheduleForm, QuickScheduleGenerator
from clinic_schedule.services import AppointmentService, WorkScheduleService
from clinic_schedule.timeutils import day_label


def parse_days(value: str) -> List[int]:
    """Parse "1,3,5" into [1, 3, 5]."""
    try:
        return [int(part) for part in value.split(",") if part.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid day list {value!r}, expected e.g. 1,3,5")


def parse_shift(value: str) -> ShiftTemplate:
    """Parse "08:00-12:00=Ca sáng" into a ShiftTemplate; the note is optional."""
    bounds, _, note = value.partition("=")
    start, sep, end = bounds.partition("-")
    if not sep:
        raise argparse.ArgumentTypeError(f"Invalid shift {value!r}, expected HH:MM-HH:MM[=note]")
    try:
        return ShiftTemplate(start=start.strip(), end=end.strip(), note=note.strip())
    except ScheduleValidationError as e:
        raise argparse.ArgumentTypeError(str(e))


def confirm(prompt: str) -> bool:
    """Ask a yes/no question; a closed stdin counts as no."""
    try:
        answer = input(prompt)
    except EOFError:
        print()
        return False
    return answer.strip().lower() == "y"


def format_schedule(schedule: WorkSchedule) -> str:
    note = f"  {schedule.note}" if schedule.note else ""
    return (
        f"{schedule.id}  {day_label(schedule.day_of_week):<9} "
        f"{schedule.shift_start}-{schedule.shift_end}{note}"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="clinic-schedule", description="Clinic scheduling client")
    parser.add_argument("--base-url", default=None, help="Backend root (default: CLINIC_API_BASE_URL)")
    parser.add_argument("--token", default=None, help="Bearer token (default: CLINIC_API_TOKEN)")
    parser.add_argument("--log-level", default=config.LOG_LEVEL)
    parser.add_argument("--log-format", choices=LOG_FORMATS, default="console")
    commands = parser.add_subparsers(dest="command", required=True)

    slots = commands.add_parser("slots", help="Show a doctor's slots on a date")
    slots.add_argument("--doctor", required=True)
    slots.add_argument("--date", required=True, help="YYYY-MM-DD")

    schedules = commands.add_parser("schedules", help="List work schedules of a doctor or nurse")
    owner = schedules.add_mutually_exclusive_group(required=True)
    owner.add_argument("--doctor")
    owner.add_argument("--nurse")

    quick = commands.add_parser("quick-create", help="Create schedules for days x shifts")
    owner = quick.add_mutually_exclusive_group(required=True)
    owner.add_argument("--doctor")
    owner.add_argument("--nurse")
    quick.add_argument("--days", type=parse_days, required=True, help="Weekdays, 0 = Sunday, e.g. 1,3")
    quick.add_argument(
        "--shift", type=parse_shift, action="append", dest="shifts",
        help="HH:MM-HH:MM[=note], repeatable (default: morning and afternoon shifts)",
    )
    quick.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    quick.add_argument("--no-rollback", action="store_true", help="Keep created schedules if some fail")

    delete = commands.add_parser("delete", help="Delete one work schedule")
    delete.add_argument("schedule_id")
    return parser


def cmd_slots(client: ApiClient, args) -> int:
    resolver = SlotAvailabilityResolver(AppointmentService(client))
    slots = resolver.resolve(args.doctor, args.date)
    if not slots:
        print("No slots offered on this date.")
        return 0
    for slot in slots:
        status = "booked" if slot.is_booked else "free"
        print(f"{slot.time.strftime('%H:%M')}  {status}")
    return 0


def cmd_schedules(client: ApiClient, args) -> int:
    owner = owner_from(args.doctor, args.nurse)
    for schedule in WorkScheduleService(client).list_for_owner(owner):
        print(format_schedule(schedule))
    return 0


def cmd_quick_create(client: ApiClient, args) -> int:
    form = QuickScheduleForm()
    if args.doctor:
        form.select_doctor(args.doctor)
    else:
        form.select_nurse(args.nurse)
    for day in set(args.days):
        form.toggle_day(day)
    if args.shifts:
        form.shifts = list(args.shifts)
    request = form.build()

    print(
        f"{form.preview_count} schedules "
        f"({len(form.selected_days)} days x {len(form.shifts)} shifts)"
    )
    if not args.yes and not confirm("Create? [y/N] "):
        print("Cancelled.")
        return 1

    generator = QuickScheduleGenerator(WorkScheduleService(client), rollback_on_failure=not args.no_rollback)
    try:
        result = generator.submit(request)
    except BatchCreateError as e:
        print(f"Error: {e}", file=sys.stderr)
        for payload, error in e.failed:
            print(f"  failed: day {payload['dayOfWeek']} {payload['shiftStart']}-{payload['shiftEnd']}: {error}",
                  file=sys.stderr)
        for schedule in e.remaining:
            print(f"  still exists: {format_schedule(schedule)}", file=sys.stderr)
        return 1

    print(f"Created {result.created_count} schedules.")
    for schedule in result.schedules:
        print(format_schedule(schedule))
    return 0


def cmd_delete(client: ApiClient, args) -> int:
    WorkScheduleService(client).delete(args.schedule_id)
    print(f"Deleted {args.schedule_id}.")
    return 0


COMMANDS = {
    "slots": cmd_slots,
    "schedules": cmd_schedules,
    "quick-create": cmd_quick_create,
    "delete": cmd_delete,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_structured_logging(args.log_level, args.log_format)
    client = ApiClient(base_url=args.base_url, token=args.token)
    try:
        return COMMANDS[args.command](client, args)
    except ClinicScheduleError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
