"""Custom exception classes and handlers."""

import logging
from typing import Any

from fastapi import FastAPI, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class BusinessLogicError(Exception):
    """Raised for domain-specific validation errors."""

    code = "business_error"

    def __init__(self, detail: str, status_code: int = status.HTTP_422_UNPROCESSABLE_ENTITY):
        self.detail = detail
        self.status_code = status_code
        super().__init__(detail)

    def extra(self) -> dict[str, Any]:
        return {}


class InvalidRequestError(BusinessLogicError):
    """Malformed input, rejected before any availability check."""

    code = "invalid_request"


class AvailabilityConflictError(BusinessLogicError):
    """Candidate interval falls outside the practitioner's bookable time."""

    code = "availability_conflict"

    def __init__(self, reason, detail: str | None = None):
        self.reason = reason
        super().__init__(detail or f"Practitioner unavailable: {reason}", status.HTTP_409_CONFLICT)

    def extra(self) -> dict[str, Any]:
        return {"reason": str(self.reason)}


class BookingConflictError(BusinessLogicError):
    """Candidate interval overlaps an appointment already on the calendar."""

    code = "booking_conflict"

    def __init__(self, blocking_appointment_id: str | None, detail: str = "Slot already occupied"):
        self.blocking_appointment_id = blocking_appointment_id
        super().__init__(detail, status.HTTP_409_CONFLICT)

    def extra(self) -> dict[str, Any]:
        return {"reason": "overlaps_appointment", "blocking_appointment_id": self.blocking_appointment_id}


class TransitionError(BusinessLogicError):
    """Requested status change is not allowed from the current status."""

    code = "invalid_transition"

    def __init__(self, current, transition):
        self.current = current
        self.transition = transition
        super().__init__(f"Cannot {transition} an appointment that is {current}", status.HTTP_409_CONFLICT)

    def extra(self) -> dict[str, Any]:
        return {"current_status": str(self.current), "transition": str(self.transition)}


class AppointmentNotFoundError(BusinessLogicError):
    code = "appointment_not_found"

    def __init__(self, appointment_id: str):
        self.appointment_id = appointment_id
        super().__init__("Appointment not found", status.HTTP_404_NOT_FOUND)


class PractitionerNotFoundError(BusinessLogicError):
    code = "practitioner_not_found"

    def __init__(self, practitioner_id: str):
        self.practitioner_id = practitioner_id
        super().__init__("Practitioner not found", status.HTTP_404_NOT_FOUND)


class SeriesCreationError(BusinessLogicError):
    """No occurrence of a recurring series could be validated."""

    code = "series_rejected"

    def __init__(self, skipped: list):
        self.skipped = skipped
        super().__init__("No occurrence of the series could be booked", status.HTTP_409_CONFLICT)

    def extra(self) -> dict[str, Any]:
        return {
            "skipped": [
                {
                    "start_time": item.start_time.isoformat(),
                    "reason": str(item.reason),
                    "blocking_appointment_id": item.blocking_appointment_id,
                }
                for item in self.skipped
            ]
        }


class StorageUnavailableError(Exception):
    """The storage collaborator could not be reached; the outcome is indeterminate."""

    def __init__(self, detail: str = "Appointment storage unavailable"):
        self.detail = detail
        super().__init__(detail)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach shared exception handlers to the FastAPI app."""

    @app.exception_handler(BusinessLogicError)
    async def _business_error_handler(_: FastAPI, exc: BusinessLogicError):
        return JSONResponse(
            {"success": False, "message": exc.detail, "code": exc.code, **exc.extra()},
            status_code=exc.status_code,
        )

    @app.exception_handler(StorageUnavailableError)
    async def _storage_error_handler(_: FastAPI, exc: StorageUnavailableError):
        logger.error("Storage failure surfaced to client: %s", exc.detail)
        return JSONResponse(
            {"success": False, "message": exc.detail, "code": "storage_unavailable"},
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
