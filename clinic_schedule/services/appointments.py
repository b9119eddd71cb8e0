"""Appointment endpoints (/appointments)."""
from datetime import date, datetime
from typing import List, Optional, Union

from clinic_schedule import config
from clinic_schedule.errors import ScheduleValidationError
from clinic_schedule.http_client import ApiClient
from clinic_schedule.logging_config import get_logger
from clinic_schedule.models import Appointment, TimeSlot
from clinic_schedule.responses import decode_many, decode_one, unwrap_envelope
from clinic_schedule.timeutils import parse_date

logger = get_logger(__name__)


def _timestamp(value: Union[str, datetime]) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class AppointmentService:
    """Appointment listing, slot lookup and status changes."""

    def __init__(self, client: ApiClient):
        self.client = client

    def list_appointments(self, status: Optional[str] = None) -> List[Appointment]:
        """
        Appointments visible to the current token.

        Args:
            status: Optional status filter applied server-side

        Returns:
            Decoded appointments
        """
        if status is not None and status not in config.APPOINTMENT_STATUSES:
            raise ScheduleValidationError(f"Unknown appointment status {status!r}")
        response = self.client.get("/appointments", params={"status": status})
        return decode_many(Appointment, response, key="appointments")

    def get_doctor_available_slots(self, doctor_id: str, day: Union[str, date]) -> List[TimeSlot]:
        """Candidate slots the clinic offers for a doctor on a date."""
        day = parse_date(day)
        response = self.client.get(
            "/appointments/doctors/available-slots",
            params={"doctorId": doctor_id, "date": day.isoformat()},
        )
        return decode_many(TimeSlot, response, key="slots")

    def get_available_slots(
        self,
        day: Union[str, date],
        doctor_id: Optional[str] = None,
        specialty: Optional[str] = None,
    ) -> List[TimeSlot]:
        """
        Free slots on a date across doctors, for booking without choosing one.

        Args:
            day: Calendar date
            doctor_id: Restrict to one doctor (optional)
            specialty: Restrict to doctors of a specialty (optional)

        Returns:
            Slots, each carrying the doctor that offers it
        """
        day = parse_date(day)
        response = self.client.get(
            "/appointments/slots",
            params={"date": day.isoformat(), "doctorId": doctor_id, "specialty": specialty},
        )
        return decode_many(TimeSlot, response, key="slots")

    def get_specialties(self) -> List[str]:
        return unwrap_envelope(self.client.get("/appointments/specialties"), list)

    def get_suggested_slots(self, appointment_id: str, limit: int = 5) -> List[TimeSlot]:
        """Alternative slots with the same doctor, offered after a cancellation or rejection."""
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ScheduleValidationError(f"limit must be a positive integer, got {limit!r}")
        response = self.client.get(
            f"/appointments/{appointment_id}/suggested-slots", params={"limit": limit}
        )
        return decode_many(TimeSlot, response, key="slots")

    def get_available_dates(self, doctor_id: str) -> List[date]:
        """Dates on which a doctor still has free slots."""
        response = self.client.get(
            "/appointments/doctors/available-dates", params={"doctorId": doctor_id}
        )
        return [parse_date(value[:10]) for value in unwrap_envelope(response, list)]

    def create_doctor_appointment(
        self,
        doctor_id: str,
        appointment_date: Union[str, datetime],
        note: Optional[str] = None,
        patient_id: Optional[str] = None,
    ) -> Appointment:
        """Book a slot with a specific doctor (patient_id only when booking for someone else)."""
        payload = {
            "doctorId": doctor_id,
            "appointmentDate": _timestamp(appointment_date),
            "note": note,
            "patientId": patient_id,
        }
        payload = {k: v for k, v in payload.items() if v is not None}
        appointment = decode_one(Appointment, self.client.post("/appointments/doctors", json=payload))
        logger.info("appointment_created", appointment_id=appointment.id, doctor_id=doctor_id)
        return appointment

    def auto_assign_appointment(
        self,
        appointment_date: Union[str, datetime],
        specialty: Optional[str] = None,
        note: Optional[str] = None,
        patient_id: Optional[str] = None,
    ) -> Appointment:
        """Book a time and let the backend pick a free doctor (of a specialty, if given)."""
        payload = {
            "appointmentDate": _timestamp(appointment_date),
            "specialty": specialty,
            "note": note,
            "patientId": patient_id,
        }
        payload = {k: v for k, v in payload.items() if v is not None}
        appointment = decode_one(Appointment, self.client.post("/appointments/auto-assign", json=payload))
        logger.info("appointment_auto_assigned", appointment_id=appointment.id, doctor_id=appointment.doctor_id)
        return appointment

    def confirm(self, appointment_id: str) -> Appointment:
        return decode_one(Appointment, self.client.post(f"/appointments/{appointment_id}/confirm"))

    def cancel(self, appointment_id: str) -> Appointment:
        appointment = decode_one(Appointment, self.client.post(f"/appointments/{appointment_id}/cancel"))
        logger.info("appointment_cancelled", appointment_id=appointment_id)
        return appointment

    def reject(self, appointment_id: str, reason: Optional[str] = None) -> Appointment:
        response = self.client.post(f"/appointments/{appointment_id}/reject", json={"reason": reason})
        logger.info("appointment_rejected", appointment_id=appointment_id)
        return decode_one(Appointment, response)

    def update(
        self,
        appointment_id: str,
        appointment_date: Union[str, datetime, None] = None,
        note: Optional[str] = None,
        doctor_id: Optional[str] = None,
    ) -> Appointment:
        payload = {
            "appointmentDate": _timestamp(appointment_date) if appointment_date else None,
            "note": note,
            "doctorId": doctor_id,
        }
        payload = {k: v for k, v in payload.items() if v is not None}
        if not payload:
            raise ScheduleValidationError("Nothing to update")
        return decode_one(Appointment, self.client.put(f"/appointments/{appointment_id}", json=payload))

    def delete(self, appointment_id: str) -> None:
        self.client.delete(f"/appointments/{appointment_id}")
        logger.info("appointment_deleted", appointment_id=appointment_id)
