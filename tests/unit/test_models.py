"""Test record decoding and request payloads."""
import pytest
from pydantic import ValidationError

from clinic_schedule.errors import ScheduleValidationError
from clinic_schedule.models import (
    Appointment,
    CreateWorkScheduleRequest,
    DoctorOwner,
    NurseOwner,
    QuickCreateRequest,
    ShiftTemplate,
    TimeSlot,
    UpdateWorkScheduleRequest,
    WorkSchedule,
    owner_from,
)


class TestWorkScheduleDecoding:
    """Test WorkSchedule accepts the backend's reference shapes."""

    def test_bare_doctor_id(self):
        schedule = WorkSchedule.model_validate({
            "_id": "ws-1",
            "doctorId": "doc-1",
            "dayOfWeek": 1,
            "shiftStart": "08:00",
            "shiftEnd": "12:00",
            "note": "Ca sáng",
        })
        assert schedule.id == "ws-1"
        assert schedule.owner == DoctorOwner(id="doc-1")
        assert schedule.day_of_week == 1
        assert schedule.shift_start == "08:00"

    def test_embedded_nurse(self):
        schedule = WorkSchedule.model_validate({
            "_id": "ws-2",
            "labNurseId": {"_id": "nurse-1", "fullName": "Lê Thị Cúc"},
            "dayOfWeek": 3,
            "shiftStart": "13:00",
            "shiftEnd": "17:00",
        })
        assert isinstance(schedule.owner, NurseOwner)
        assert schedule.owner.id == "nurse-1"
        assert schedule.note is None

    def test_both_owners_rejected(self):
        with pytest.raises(ValidationError):
            WorkSchedule.model_validate({
                "_id": "ws-3", "doctorId": "doc-1", "labNurseId": "nurse-1",
                "dayOfWeek": 1, "shiftStart": "08:00", "shiftEnd": "12:00",
            })

    def test_no_owner_rejected(self):
        with pytest.raises(ValidationError):
            WorkSchedule.model_validate({
                "_id": "ws-4", "dayOfWeek": 1, "shiftStart": "08:00", "shiftEnd": "12:00",
            })

    def test_day_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            WorkSchedule.model_validate({
                "_id": "ws-5", "doctorId": "doc-1",
                "dayOfWeek": 7, "shiftStart": "08:00", "shiftEnd": "12:00",
            })


class TestOwner:
    """Test the doctor XOR nurse owner."""

    def test_owner_from_doctor(self):
        assert owner_from(doctor_id="doc-1") == DoctorOwner(id="doc-1")

    def test_owner_from_nurse(self):
        assert owner_from(lab_nurse_id="nurse-1") == NurseOwner(id="nurse-1")

    def test_both_rejected(self):
        with pytest.raises(ScheduleValidationError):
            owner_from(doctor_id="doc-1", lab_nurse_id="nurse-1")

    def test_neither_rejected(self):
        with pytest.raises(ScheduleValidationError):
            owner_from()

    def test_non_string_id_rejected(self):
        with pytest.raises(ScheduleValidationError):
            owner_from(doctor_id=123)

    def test_wire_field(self):
        assert DoctorOwner(id="doc-1").to_payload() == {"doctorId": "doc-1"}
        assert NurseOwner(id="nurse-1").to_payload() == {"labNurseId": "nurse-1"}


class TestShiftTemplate:
    """Test shift bounds validation."""

    def test_valid_shift(self):
        shift = ShiftTemplate(start="08:00", end="12:00", note="Ca sáng")
        assert shift.note == "Ca sáng"

    def test_start_after_end_rejected(self):
        with pytest.raises(ScheduleValidationError):
            ShiftTemplate(start="13:00", end="12:00")

    def test_equal_bounds_rejected(self):
        with pytest.raises(ScheduleValidationError):
            ShiftTemplate(start="08:00", end="08:00")

    def test_bad_format_rejected(self):
        with pytest.raises(ScheduleValidationError):
            ShiftTemplate(start="8:00", end="12:00")


class TestCreatePayload:
    """Test POST /work-schedules body."""

    def test_doctor_payload(self):
        request = CreateWorkScheduleRequest(
            owner=DoctorOwner(id="doc-1"),
            day_of_week=1,
            shift_start="08:00",
            shift_end="12:00",
            note="Ca sáng",
        )
        assert request.to_payload() == {
            "doctorId": "doc-1",
            "dayOfWeek": 1,
            "shiftStart": "08:00",
            "shiftEnd": "12:00",
            "note": "Ca sáng",
        }

    def test_nurse_payload_has_no_doctor(self):
        payload = CreateWorkScheduleRequest(
            owner=NurseOwner(id="nurse-1"), day_of_week=0, shift_start="13:00", shift_end="17:00",
        ).to_payload()
        assert payload["labNurseId"] == "nurse-1"
        assert "doctorId" not in payload

    def test_invalid_day_rejected(self):
        with pytest.raises(ScheduleValidationError):
            CreateWorkScheduleRequest(
                owner=DoctorOwner(id="doc-1"), day_of_week=9, shift_start="08:00", shift_end="12:00",
            )

    def test_update_payload_only_set_fields(self):
        request = UpdateWorkScheduleRequest(shift_start="09:00", shift_end="11:00")
        assert request.to_payload() == {"shiftStart": "09:00", "shiftEnd": "11:00"}

    def test_update_rejects_reversed_shift(self):
        with pytest.raises(ScheduleValidationError):
            UpdateWorkScheduleRequest(shift_start="12:00", shift_end="09:00")


class TestQuickCreateRequest:

    def test_preview_count(self):
        request = QuickCreateRequest(
            owner=DoctorOwner(id="doc-1"),
            selected_days={1, 3, 5},
            shifts=(ShiftTemplate(start="08:00", end="12:00"), ShiftTemplate(start="13:00", end="17:00")),
        )
        assert request.preview_count == 6

    def test_day_out_of_range_rejected(self):
        with pytest.raises(ScheduleValidationError):
            QuickCreateRequest(selected_days={7})


class TestAppointmentDecoding:
    """Test Appointment and TimeSlot decoding."""

    def test_embedded_doctor_reduced_to_id(self):
        appointment = Appointment.model_validate({
            "_id": "apt-1",
            "doctorId": {"_id": "doc-1", "fullName": "BS. An"},
            "patientId": {"_id": "pat-1"},
            "appointmentDate": "2025-01-15T02:30:00.000Z",
            "status": "pending",
        })
        assert appointment.doctor_id == "doc-1"
        assert appointment.patient_id == "pat-1"
        assert appointment.appointment_date.tzinfo is not None

    def test_time_slot_keeps_extra_metadata(self):
        slot = TimeSlot.model_validate({
            "time": "2025-01-15T09:00:00",
            "doctorId": "doc-1",
            "room": "P.101",
        })
        assert slot.is_booked is False
        assert slot.doctor_id == "doc-1"
        assert slot.model_extra == {"room": "P.101"}
