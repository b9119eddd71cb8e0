"""Pydantic models for backend records and request payloads.

The backend speaks camelCase JSON with Mongo-style "_id" keys, and references
(doctorId, labNurseId, patientId) arrive either as a bare id or as an
embedded document. Models accept both and expose snake_case attributes.
"""
from datetime import datetime
from typing import Annotated, Any, ClassVar, Dict, FrozenSet, Literal, Optional, Tuple, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from clinic_schedule.errors import ScheduleValidationError
from clinic_schedule.timeutils import parse_hhmm, validate_day


def validated(model, **fields):
    """
    Build a model from user input, reporting bad input as ScheduleValidationError.

    Raises:
        ScheduleValidationError: If pydantic rejects a field
    """
    try:
        return model(**fields)
    except ValidationError as e:
        error = e.errors()[0]
        location = ".".join(str(part) for part in error["loc"]) or model.__name__
        raise ScheduleValidationError(f"Invalid {location}: {error['msg']}") from e


def ref_id(value: Any) -> Any:
    """Reduce an embedded document ({"_id": ...}) to its id; bare ids pass through."""
    if isinstance(value, dict):
        return value.get("_id") or value.get("id")
    return value


class ApiModel(BaseModel):
    """Base for records decoded from the backend."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


# ============= Owners =============

class DoctorOwner(BaseModel):
    """Schedule owned by a doctor."""

    WIRE_FIELD: ClassVar[str] = "doctorId"

    model_config = ConfigDict(frozen=True)

    kind: Literal["doctor"] = "doctor"
    id: str = Field(..., min_length=1)

    def to_payload(self) -> Dict[str, str]:
        return {self.WIRE_FIELD: self.id}


class NurseOwner(BaseModel):
    """Schedule owned by a lab nurse."""

    WIRE_FIELD: ClassVar[str] = "labNurseId"

    model_config = ConfigDict(frozen=True)

    kind: Literal["nurse"] = "nurse"
    id: str = Field(..., min_length=1)

    def to_payload(self) -> Dict[str, str]:
        return {self.WIRE_FIELD: self.id}


Owner = Annotated[Union[DoctorOwner, NurseOwner], Field(discriminator="kind")]


def owner_from(doctor_id: Optional[str] = None, lab_nurse_id: Optional[str] = None):
    """
    Build the owner of a schedule from the two wire fields.

    Raises:
        ScheduleValidationError: If both or neither id is given
    """
    if doctor_id and lab_nurse_id:
        raise ScheduleValidationError("A schedule belongs to a doctor or a nurse, not both")
    if doctor_id:
        return validated(DoctorOwner, id=doctor_id)
    if lab_nurse_id:
        return validated(NurseOwner, id=lab_nurse_id)
    raise ScheduleValidationError("Vui lòng chọn bác sĩ hoặc y tá")


# ============= Work schedules =============

class WorkSchedule(ApiModel):
    """A recurring weekly shift of one doctor or lab nurse."""

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    owner: Owner
    day_of_week: int = Field(ge=0, le=6)
    shift_start: str
    shift_end: str
    note: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def _owner_from_wire(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "owner" in data:
            return data
        data = dict(data)
        doctor = ref_id(data.pop("doctorId", None) or data.pop("doctor_id", None))
        nurse = ref_id(data.pop("labNurseId", None) or data.pop("lab_nurse_id", None))
        if doctor and nurse:
            raise ValueError("schedule has both doctorId and labNurseId")
        if doctor:
            data["owner"] = {"kind": "doctor", "id": str(doctor)}
        elif nurse:
            data["owner"] = {"kind": "nurse", "id": str(nurse)}
        else:
            raise ValueError("schedule has neither doctorId nor labNurseId")
        return data


class ShiftTemplate(BaseModel):
    """One shift of the quick-create form: start, end and label."""

    model_config = ConfigDict(frozen=True)

    start: str
    end: str
    note: str = ""

    @model_validator(mode="after")
    def _check_bounds(self) -> "ShiftTemplate":
        parse_hhmm(self.start)
        parse_hhmm(self.end)
        if not self.start < self.end:
            raise ScheduleValidationError(
                f"Shift start {self.start} must be before shift end {self.end}"
            )
        return self


class CreateWorkScheduleRequest(BaseModel):
    """Payload of POST /work-schedules."""

    model_config = ConfigDict(frozen=True)

    owner: Owner
    day_of_week: int
    shift_start: str
    shift_end: str
    note: str = ""

    @model_validator(mode="after")
    def _check_fields(self) -> "CreateWorkScheduleRequest":
        validate_day(self.day_of_week)
        ShiftTemplate(start=self.shift_start, end=self.shift_end)
        return self

    @property
    def key(self) -> Tuple[int, str, str]:
        return (self.day_of_week, self.shift_start, self.shift_end)

    def to_payload(self) -> Dict[str, Any]:
        payload = self.owner.to_payload()
        payload.update({
            "dayOfWeek": self.day_of_week,
            "shiftStart": self.shift_start,
            "shiftEnd": self.shift_end,
            "note": self.note,
        })
        return payload


class UpdateWorkScheduleRequest(BaseModel):
    """Payload of PUT /work-schedules/{id}; unset fields are left untouched."""

    owner: Optional[Owner] = None
    day_of_week: Optional[int] = None
    shift_start: Optional[str] = None
    shift_end: Optional[str] = None
    note: Optional[str] = None

    @model_validator(mode="after")
    def _check_fields(self) -> "UpdateWorkScheduleRequest":
        if self.day_of_week is not None:
            validate_day(self.day_of_week)
        if self.shift_start is not None:
            parse_hhmm(self.shift_start)
        if self.shift_end is not None:
            parse_hhmm(self.shift_end)
        if self.shift_start and self.shift_end and not self.shift_start < self.shift_end:
            raise ScheduleValidationError(
                f"Shift start {self.shift_start} must be before shift end {self.shift_end}"
            )
        return self

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.owner is not None:
            payload.update(self.owner.to_payload())
        fields = {
            "dayOfWeek": self.day_of_week,
            "shiftStart": self.shift_start,
            "shiftEnd": self.shift_end,
            "note": self.note,
        }
        payload.update({k: v for k, v in fields.items() if v is not None})
        return payload


class QuickCreateRequest(BaseModel):
    """Compact day x shift selection driving a quick-create batch."""

    model_config = ConfigDict(frozen=True)

    owner: Optional[Owner] = None
    selected_days: FrozenSet[int] = frozenset()
    shifts: Tuple[ShiftTemplate, ...] = ()

    @field_validator("selected_days")
    @classmethod
    def _check_days(cls, days: FrozenSet[int]) -> FrozenSet[int]:
        for day in days:
            validate_day(day)
        return days

    @property
    def preview_count(self) -> int:
        return len(self.selected_days) * len(self.shifts)


# ============= Appointments =============

class Appointment(ApiModel):
    """Appointment as listed by GET /appointments."""

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    doctor_id: Optional[str] = None
    patient_id: Optional[str] = None
    appointment_date: datetime
    status: str
    note: Optional[str] = None

    @field_validator("doctor_id", "patient_id", mode="before")
    @classmethod
    def _unwrap_refs(cls, value: Any) -> Any:
        return ref_id(value)


class TimeSlot(ApiModel):
    """
    A bookable point in time for a doctor.

    Offered slots keep whatever extra metadata the backend sent with them.
    """

    model_config = ConfigDict(extra="allow")

    time: datetime
    doctor_id: Optional[str] = None
    is_booked: bool = False


class StaffMember(ApiModel):
    """Doctor, lab nurse or staff member as listed by the directory endpoints."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    full_name: str = ""
    specialty: Optional[str] = None
    user_id: Optional[str] = None

    @field_validator("user_id", mode="before")
    @classmethod
    def _unwrap_user(cls, value: Any) -> Any:
        return ref_id(value)
