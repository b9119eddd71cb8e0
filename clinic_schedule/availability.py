"""Slot availability for appointment booking.

Candidate slots come from the backend, already cut to the doctor's work
schedule. Booked status is derived locally from the appointment list:
an appointment books a slot when it is for the same doctor, falls inside
the local day window, and is not cancelled.
"""
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from typing import Iterable, List, Sequence, Union

from clinic_schedule import config
from clinic_schedule.errors import ScheduleValidationError
from clinic_schedule.logging_config import get_logger
from clinic_schedule.models import Appointment, TimeSlot
from clinic_schedule.services.appointments import AppointmentService
from clinic_schedule.timeutils import TimezoneLike, day_window, parse_date, to_local

logger = get_logger(__name__)


def booked_times(
    appointments: Iterable[Appointment],
    doctor_id: str,
    day: Union[str, date],
    tz: TimezoneLike = None,
) -> List[datetime]:
    """
    Booked set of a doctor on a date.

    Args:
        appointments: Appointments to scan (any doctor, any date)
        doctor_id: Doctor to keep
        day: Calendar date
        tz: Zone of the day window

    Returns:
        Distinct local timestamps, in ascending order
    """
    start, end = day_window(day, tz)
    booked = set()
    for appointment in appointments:
        if appointment.doctor_id != doctor_id:
            continue
        if appointment.status == config.CANCELLED_STATUS:
            continue
        moment = to_local(appointment.appointment_date, tz)
        if start <= moment <= end:
            booked.add(moment)
    return sorted(booked)


def mark_booked_slots(
    candidates: Sequence[TimeSlot],
    booked: Iterable[datetime],
    doctor_id: str,
    tz: TimezoneLike = None,
) -> List[TimeSlot]:
    """
    Annotate candidate slots with is_booked and add booked times not offered.

    A booked time missing from the candidates (e.g. an appointment created
    by staff outside the template) is appended once as a booked slot with no
    offered-slot metadata. The result is sorted by time; ties keep input
    order.
    """
    booked_set = {to_local(moment, tz) for moment in booked}
    offered = set()
    slots = []
    for candidate in candidates:
        moment = to_local(candidate.time, tz)
        offered.add(moment)
        slots.append(candidate.model_copy(update={"time": moment, "is_booked": moment in booked_set}))

    for moment in sorted(booked_set - offered):
        slots.append(TimeSlot(time=moment, doctor_id=doctor_id, is_booked=True))

    slots.sort(key=lambda slot: slot.time)
    return slots


class SlotAvailabilityResolver:
    """Resolve every slot of a doctor on a date with its booked status."""

    def __init__(self, appointments: AppointmentService, tz: TimezoneLike = None):
        """
        Args:
            appointments: Service used for both backend fetches
            tz: Zone of the day window (default: configured or system local)
        """
        self.appointments = appointments
        self.tz = tz

    def resolve(self, doctor_id: str, day: Union[str, date]) -> List[TimeSlot]:
        """
        Slots of a doctor on a date, sorted by time.

        The offered-slot fetch and the appointment fetch run concurrently.
        Either failing propagates to the caller; there is no retry here.

        Raises:
            ScheduleValidationError: If doctor_id is empty or the date is invalid
            ApiError: If either fetch fails
        """
        if not doctor_id:
            raise ScheduleValidationError("Doctor is required")
        day = parse_date(day)

        with ThreadPoolExecutor(max_workers=2) as pool:
            slots_future = pool.submit(self.appointments.get_doctor_available_slots, doctor_id, day)
            appointments_future = pool.submit(self.appointments.list_appointments)
            candidates = slots_future.result()
            appointments = appointments_future.result()

        booked = booked_times(appointments, doctor_id, day, self.tz)
        slots = mark_booked_slots(candidates, booked, doctor_id, self.tz)
        logger.info(
            "slots_resolved",
            doctor_id=doctor_id,
            date=day.isoformat(),
            offered=len(candidates),
            booked=len(booked),
            total=len(slots),
        )
        return slots
