"""Backend service wrappers."""
from clinic_schedule.services.appointments import AppointmentService
from clinic_schedule.services.directory import DirectoryService
from clinic_schedule.services.work_schedules import WorkScheduleService

__all__ = ["AppointmentService", "DirectoryService", "WorkScheduleService"]
