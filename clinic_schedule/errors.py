"""Exception hierarchy for the scheduling client.

- ScheduleValidationError: rejected before anything is sent
- ApiError: transport or backend failure (UnauthorizedError, ResponseShapeError)
- BatchCreateError: itemised outcome of a failed quick-create batch
"""
from typing import Any, Dict, List, Optional, Tuple

from clinic_schedule import config


class ClinicScheduleError(Exception):
    """Base class for all errors raised by this package."""
    pass


class ScheduleValidationError(ClinicScheduleError):
    """Raised when input is rejected client-side (no network call made)."""
    pass


class ApiError(ClinicScheduleError):
    """Raised when a backend call fails."""

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message or config.GENERIC_ERROR_MESSAGE)
        self.message = message or config.GENERIC_ERROR_MESSAGE
        self.status_code = status_code


class UnauthorizedError(ApiError):
    """Raised on HTTP 401 (missing, expired or revoked token)."""
    pass


class ResponseShapeError(ApiError):
    """Raised when a response does not match the expected schema."""
    pass


class BatchCreateError(ClinicScheduleError):
    """
    Raised when some creations of a quick-create batch failed.

    Attributes:
        created: Schedules the backend created in this batch
        failed: (payload, error) pairs for the requests that failed
        rolled_back: Ids of created schedules deleted again by compensation
        rollback_failed: (schedule id, error) pairs compensation could not delete
    """

    def __init__(
        self,
        created: List[Any],
        failed: List[Tuple[Dict[str, Any], Exception]],
        rolled_back: Optional[List[str]] = None,
        rollback_failed: Optional[List[Tuple[str, Exception]]] = None,
    ):
        self.created = created
        self.failed = failed
        self.rolled_back = rolled_back or []
        self.rollback_failed = rollback_failed or []
        total = len(created) + len(failed)
        message = f"{len(failed)} of {total} schedules could not be created"
        if self.rolled_back:
            message += f"; {len(self.rolled_back)} created schedules were rolled back"
        if self.rollback_failed:
            message += f"; {len(self.rollback_failed)} could not be rolled back"
        super().__init__(message)

    @property
    def remaining(self) -> List[Any]:
        """Schedules from this batch that still exist on the backend."""
        rolled_back = set(self.rolled_back)
        return [s for s in self.created if s.id not in rolled_back]
