"""Work schedule endpoints (/work-schedules)."""
from typing import Any, Dict, List, Union

from clinic_schedule.errors import ScheduleValidationError
from clinic_schedule.http_client import ApiClient
from clinic_schedule.logging_config import get_logger
from clinic_schedule.models import (
    CreateWorkScheduleRequest,
    DoctorOwner,
    NurseOwner,
    UpdateWorkScheduleRequest,
    WorkSchedule,
)
from clinic_schedule.responses import decode_many, decode_one, unwrap_envelope
from clinic_schedule.timeutils import parse_hhmm, validate_day

logger = get_logger(__name__)

STAFF_ROLES = ("doctor", "nurse")


class WorkScheduleService:
    """CRUD over the recurring weekly shifts of doctors and lab nurses."""

    def __init__(self, client: ApiClient):
        self.client = client

    def create(self, request: CreateWorkScheduleRequest) -> WorkSchedule:
        """Create one schedule (POST /work-schedules)."""
        response = self.client.post("/work-schedules", json=request.to_payload())
        schedule = decode_one(WorkSchedule, response)
        logger.info(
            "work_schedule_created",
            schedule_id=schedule.id,
            owner=request.owner.id,
            day_of_week=request.day_of_week,
        )
        return schedule

    def get_doctor_schedule(self, doctor_id: str) -> List[WorkSchedule]:
        return decode_many(WorkSchedule, self.client.get(f"/work-schedules/doctor/{doctor_id}"))

    def get_nurse_schedule(self, nurse_id: str) -> List[WorkSchedule]:
        return decode_many(WorkSchedule, self.client.get(f"/work-schedules/nurse/{nurse_id}"))

    def list_for_owner(self, owner: Union[DoctorOwner, NurseOwner]) -> List[WorkSchedule]:
        """Schedules of a doctor or nurse, ordered by weekday then shift start."""
        if isinstance(owner, DoctorOwner):
            schedules = self.get_doctor_schedule(owner.id)
        else:
            schedules = self.get_nurse_schedule(owner.id)
        return sorted(schedules, key=lambda s: (s.day_of_week, s.shift_start))

    def update(self, schedule_id: str, request: UpdateWorkScheduleRequest) -> WorkSchedule:
        """Replace the given fields of a schedule (PUT, last write wins)."""
        payload = request.to_payload()
        if not payload:
            raise ScheduleValidationError("Nothing to update")
        response = self.client.put(f"/work-schedules/{schedule_id}", json=payload)
        logger.info("work_schedule_updated", schedule_id=schedule_id, fields=sorted(payload))
        return decode_one(WorkSchedule, response)

    def delete(self, schedule_id: str) -> None:
        self.client.delete(f"/work-schedules/{schedule_id}")
        logger.info("work_schedule_deleted", schedule_id=schedule_id)

    def get_available_staff(self, day_of_week: int, time: str, role: str) -> List[Dict[str, Any]]:
        """
        Staff with a shift covering a weekday and time.

        Args:
            day_of_week: 0-6, Sunday = 0
            time: HH:MM
            role: "doctor" or "nurse"

        Returns:
            Raw staff records as sent by the backend
        """
        validate_day(day_of_week)
        parse_hhmm(time)
        if role not in STAFF_ROLES:
            raise ScheduleValidationError(f"Role must be one of {', '.join(STAFF_ROLES)}")
        response = self.client.get(
            "/work-schedules/available",
            params={"dayOfWeek": day_of_week, "time": time, "role": role},
        )
        return unwrap_envelope(response, list)
