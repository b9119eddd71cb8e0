"""Shared test fixtures."""
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from clinic_schedule.models import Appointment, TimeSlot

# Fixed UTC+7 so results do not depend on the machine's zone
ICT = timezone(timedelta(hours=7))


@pytest.fixture
def tz():
    return ICT


@pytest.fixture
def make_slot():
    """Create an offered slot for doctor D at HH:MM on 2025-01-15 (local)."""
    def _create(hhmm: str, doctor_id: str = "D", **extra) -> TimeSlot:
        hour, minute = map(int, hhmm.split(":"))
        return TimeSlot(
            time=datetime(2025, 1, 15, hour, minute, tzinfo=ICT),
            doctor_id=doctor_id,
            **extra
        )
    return _create


@pytest.fixture
def make_appointment():
    """Create an appointment on 2025-01-15 (local) at HH:MM."""
    counter = [0]

    def _create(hhmm: str, doctor_id="D", status="confirmed", day=15) -> Appointment:
        counter[0] += 1
        hour, minute = map(int, hhmm.split(":"))
        return Appointment.model_validate({
            "_id": f"apt-{counter[0]}",
            "doctorId": doctor_id,
            "patientId": "P",
            "appointmentDate": datetime(2025, 1, day, hour, minute, tzinfo=ICT).isoformat(),
            "status": status,
        })
    return _create


@pytest.fixture
def mock_response():
    """Create a mock requests.Response."""
    def _create(status_code: int = 200, body=None):
        response = Mock()
        response.status_code = status_code
        response.content = b"" if body is None else b"{}"
        if body is None:
            response.json.side_effect = ValueError("No JSON")
        else:
            response.json.return_value = body
        return response
    return _create
