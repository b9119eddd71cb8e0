"""Quick-create of work schedules: selected weekdays x shift templates.

The form holds the selection (owner, days, shifts); the generator expands a
validated selection into one creation request per (day, shift) pair and
submits them concurrently.

Partial failure: creations are independent requests, so a batch can end
half-applied. By default the generator deletes whatever it created in the
failed batch before raising BatchCreateError; with rollback disabled the
error lists exactly which schedules now exist.
"""
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple

from clinic_schedule import config
from clinic_schedule.errors import BatchCreateError, ScheduleValidationError
from clinic_schedule.logging_config import get_logger
from clinic_schedule.models import (
    CreateWorkScheduleRequest,
    DoctorOwner,
    NurseOwner,
    QuickCreateRequest,
    ShiftTemplate,
    WorkSchedule,
    validated,
)
from clinic_schedule.services.work_schedules import WorkScheduleService
from clinic_schedule.timeutils import validate_day

logger = get_logger(__name__)


class QuickScheduleForm:
    """
    Editable quick-create selection.

    The owner is a single DoctorOwner or NurseOwner, so selecting a doctor
    replaces any nurse and vice versa. At least one shift always remains.
    """

    def __init__(self):
        self.owner = None
        self.selected_days: Set[int] = set()
        self.shifts: List[ShiftTemplate] = []
        self.reset()

    def reset(self):
        """Clear owner and days, restore the default morning/afternoon shifts."""
        self.owner = None
        self.selected_days = set()
        self.shifts = [ShiftTemplate(**shift) for shift in config.DEFAULT_SHIFTS]

    @property
    def doctor_id(self) -> Optional[str]:
        return self.owner.id if isinstance(self.owner, DoctorOwner) else None

    @property
    def lab_nurse_id(self) -> Optional[str]:
        return self.owner.id if isinstance(self.owner, NurseOwner) else None

    def select_doctor(self, doctor_id: Optional[str]):
        """Select a doctor (clears any nurse); an empty id clears the doctor."""
        if doctor_id:
            self.owner = validated(DoctorOwner, id=doctor_id)
        elif isinstance(self.owner, DoctorOwner):
            self.owner = None

    def select_nurse(self, lab_nurse_id: Optional[str]):
        """Select a lab nurse (clears any doctor); an empty id clears the nurse."""
        if lab_nurse_id:
            self.owner = validated(NurseOwner, id=lab_nurse_id)
        elif isinstance(self.owner, NurseOwner):
            self.owner = None

    def toggle_day(self, day_of_week: int):
        validate_day(day_of_week)
        if day_of_week in self.selected_days:
            self.selected_days.discard(day_of_week)
        else:
            self.selected_days.add(day_of_week)

    def add_shift(self, start: str = None, end: str = None, note: str = None) -> ShiftTemplate:
        shift = validated(
            ShiftTemplate,
            start=start or config.NEW_SHIFT["start"],
            end=end or config.NEW_SHIFT["end"],
            note=config.NEW_SHIFT["note"] if note is None else note,
        )
        self.shifts.append(shift)
        return shift

    def update_shift(self, index: int, **changes) -> ShiftTemplate:
        """Change start, end and/or note of one shift; the result is re-validated."""
        unknown = set(changes) - {"start", "end", "note"}
        if unknown:
            raise ScheduleValidationError(f"Unknown shift fields: {', '.join(sorted(unknown))}")
        current = self.shifts[index]
        shift = validated(ShiftTemplate, **{**current.model_dump(), **changes})
        self.shifts[index] = shift
        return shift

    def remove_shift(self, index: int):
        if len(self.shifts) <= 1:
            raise ScheduleValidationError("At least one shift is required")
        del self.shifts[index]

    @property
    def preview_count(self) -> int:
        """Number of schedules the current selection would create."""
        return len(self.selected_days) * len(self.shifts)

    def build(self) -> QuickCreateRequest:
        return validated(
            QuickCreateRequest,
            owner=self.owner,
            selected_days=frozenset(self.selected_days),
            shifts=tuple(self.shifts),
        )


def validate_request(request: QuickCreateRequest):
    """
    Reject a selection that cannot be submitted.

    Raises:
        ScheduleValidationError: No owner, no day, no shift, or the same
                                 start/end pair listed twice
    """
    if request.owner is None:
        raise ScheduleValidationError("Vui lòng chọn bác sĩ hoặc y tá")
    if not request.selected_days:
        raise ScheduleValidationError("Vui lòng chọn ít nhất một ngày")
    if not request.shifts:
        raise ScheduleValidationError("Vui lòng thêm ít nhất một ca")

    seen = set()
    for shift in request.shifts:
        bounds = (shift.start, shift.end)
        if bounds in seen:
            raise ScheduleValidationError(f"Shift {shift.start}-{shift.end} is listed twice")
        seen.add(bounds)


def generate_payloads(request: QuickCreateRequest) -> List[CreateWorkScheduleRequest]:
    """
    Expand a selection into one creation request per (day, shift).

    Days ascend; shifts keep their form order within a day.

    Returns:
        len(selected_days) * len(shifts) requests
    """
    validate_request(request)
    return [
        CreateWorkScheduleRequest(
            owner=request.owner,
            day_of_week=day,
            shift_start=shift.start,
            shift_end=shift.end,
            note=shift.note,
        )
        for day in sorted(request.selected_days)
        for shift in request.shifts
    ]


@dataclass
class QuickCreateResult:
    """Outcome of a fully successful batch."""
    created_count: int
    created: List[WorkSchedule] = field(default_factory=list)
    schedules: List[WorkSchedule] = field(default_factory=list)


class QuickScheduleGenerator:
    """Submit quick-create batches through the work schedule service."""

    def __init__(
        self,
        work_schedules: WorkScheduleService,
        max_workers: Optional[int] = None,
        rollback_on_failure: bool = True,
    ):
        """
        Args:
            work_schedules: Service used for creation, rollback and reload
            max_workers: Concurrent creation requests (default: QUICK_CREATE_MAX_WORKERS)
            rollback_on_failure: Delete this batch's schedules when any creation fails
        """
        self.work_schedules = work_schedules
        self.max_workers = max_workers or config.QUICK_CREATE_MAX_WORKERS
        self.rollback_on_failure = rollback_on_failure

    def submit(self, request: QuickCreateRequest) -> QuickCreateResult:
        """
        Create every schedule of the selection, then reload the owner's list.

        Raises:
            ScheduleValidationError: Before any request is sent
            BatchCreateError: If any creation failed (after rollback, if enabled)
            ApiError: If the reload after a successful batch fails
        """
        payloads = generate_payloads(request)
        logger.info("quick_create_started", owner=request.owner.id, kind=request.owner.kind, count=len(payloads))

        created, failed = self._create_all(payloads)

        if failed:
            rolled_back, rollback_failed = [], []
            if self.rollback_on_failure:
                rolled_back, rollback_failed = self._rollback(created)
            logger.error(
                "quick_create_failed",
                owner=request.owner.id,
                created=len(created),
                failed=len(failed),
                rolled_back=len(rolled_back),
                rollback_failed=len(rollback_failed),
            )
            raise BatchCreateError(created, failed, rolled_back, rollback_failed)

        schedules = self.work_schedules.list_for_owner(request.owner)
        logger.info("quick_create_completed", owner=request.owner.id, count=len(created))
        return QuickCreateResult(created_count=len(created), created=created, schedules=schedules)

    def _create_all(self, payloads: List[CreateWorkScheduleRequest]):
        created: List[WorkSchedule] = []
        failed: List[Tuple[dict, Exception]] = []
        workers = min(self.max_workers, len(payloads))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(self.work_schedules.create, payload) for payload in payloads]
            for payload, future in zip(payloads, futures):
                # Any failure is recorded against its payload; none aborts the batch
                try:
                    created.append(future.result())
                except Exception as e:
                    logger.warning("quick_create_item_failed", payload=payload.to_payload(), error=str(e))
                    failed.append((payload.to_payload(), e))
        return created, failed

    def _rollback(self, created: List[WorkSchedule]):
        rolled_back: List[str] = []
        rollback_failed: List[Tuple[str, Exception]] = []
        for schedule in created:
            try:
                self.work_schedules.delete(schedule.id)
                rolled_back.append(schedule.id)
            except Exception as e:
                logger.error("quick_create_rollback_failed", schedule_id=schedule.id, error=str(e))
                rollback_failed.append((schedule.id, e))
        return rolled_back, rollback_failed
