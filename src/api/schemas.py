from typing import Any

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from src.components.waitlist.models import Subscriber, WaitlistError

# --- Error code -> HTTP status ---
ERROR_STATUS: dict[str, int] = {
    "MISSING_FIELDS": status.HTTP_400_BAD_REQUEST,
    "EMPTY_NAME": status.HTTP_400_BAD_REQUEST,
    "INVALID_EMAIL": status.HTTP_400_BAD_REQUEST,
    "INVALID_ROLE": status.HTTP_400_BAD_REQUEST,
    "EMPTY_EMAIL": status.HTTP_400_BAD_REQUEST,
    "MISSING_BULK_FIELDS": status.HTTP_400_BAD_REQUEST,
    "DUPLICATE_EMAIL": status.HTTP_409_CONFLICT,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "EMAIL_NOT_CONFIGURED": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "EMAIL_FAILED": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "EMAIL_SERVICE_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "BULK_SEND_FAILED": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "UNEXPECTED": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(errors: list[WaitlistError]) -> int:
    """HTTP status for the first error; unknown codes are server errors."""
    if not errors:
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return ERROR_STATUS.get(errors[0].code, status.HTTP_500_INTERNAL_SERVER_ERROR)


def error_response(status_code: int, message: str, **extra: Any) -> JSONResponse:
    """Failure body shared by every waitlist endpoint."""
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, **extra},
    )


# --- Shared Models ---
class ErrorResponse(BaseModel):
    success: bool = False
    message: str


class SubscriberModel(BaseModel):
    """Subscriber as exposed on the wire."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    email: str
    role: str
    joined_at: str = Field(..., alias="joinedAt", description="ISO 8601 join time")

    @classmethod
    def from_entity(cls, subscriber: Subscriber) -> "SubscriberModel":
        return cls(
            name=subscriber.name,
            email=subscriber.email,
            role=subscriber.role.value,
            joined_at=subscriber.joined_at.isoformat(),
        )
