"""Clinic scheduling client: slot availability and work schedule quick-create."""
from clinic_schedule.availability import SlotAvailabilityResolver
from clinic_schedule.http_client import ApiClient
from clinic_schedule.quick_schedule import QuickScheduleForm, QuickScheduleGenerator

__all__ = [
    "ApiClient",
    "QuickScheduleForm",
    "QuickScheduleGenerator",
    "SlotAvailabilityResolver",
]
