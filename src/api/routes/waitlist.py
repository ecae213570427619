"""
Public waitlist endpoints.

Endpoints:
- POST /api/waitlist/join - Join the waitlist
- GET /api/waitlist/count - Current number of subscribers
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.adapters.sqlite_db import SQLiteSubscriberRepo
from src.api.deps import get_email_adapter, get_subscriber_repo, get_waitlist_config
from src.api.schemas import ErrorResponse, error_response, status_for
from src.components.waitlist.component import run_count, run_join
from src.components.waitlist.models import CountInput, JoinInput, WaitlistConfig
from src.core.ports.email import EmailPort

router = APIRouter()


# --- Request/Response Models ---


class JoinRequest(BaseModel):
    """
    Request body for joining the waitlist.

    Fields are optional here so that missing values are reported
    by the waitlist rules rather than as a schema error.
    """

    name: str | None = Field(None, description="Entrant name")
    email: str | None = Field(None, description="Entrant email address")
    role: str | None = Field(None, description="customer or provider")


class JoinResponse(BaseModel):
    success: bool
    message: str
    count: int


class CountResponse(BaseModel):
    count: int


# --- Join Endpoint ---


@router.post(
    "/join",
    response_model=JoinResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        409: {"model": ErrorResponse, "description": "Email already on the waitlist"},
        500: {"model": ErrorResponse, "description": "Email or server failure"},
    },
    summary="Join the waitlist",
)
def join_waitlist(
    request_body: JoinRequest,
    repo: SQLiteSubscriberRepo = Depends(get_subscriber_repo),
    email_sender: EmailPort | None = Depends(get_email_adapter),
    config: WaitlistConfig = Depends(get_waitlist_config),
) -> JoinResponse | JSONResponse:
    """
    Admit a new subscriber and send the welcome email.

    400 on validation, 409 on duplicate email, 500 when the welcome
    email cannot be sent (see admission.notification_policy).
    """
    result = run_join(
        JoinInput(
            name=request_body.name,
            email=request_body.email,
            role=request_body.role,
        ),
        repo,
        email_sender=email_sender,
        config=config,
    )

    if not result.success:
        return error_response(status_for(result.errors), result.message)

    return JoinResponse(success=True, message=result.message, count=result.count or 0)


# --- Count Endpoint ---


@router.get(
    "/count",
    response_model=CountResponse,
    summary="Get waitlist count",
)
def get_waitlist_count(
    repo: SQLiteSubscriberRepo = Depends(get_subscriber_repo),
    config: WaitlistConfig = Depends(get_waitlist_config),
) -> CountResponse | JSONResponse:
    """Return the subscriber count. Store failures read as 0 unless configured otherwise."""
    result = run_count(CountInput(), repo)

    if not result.available and not config.degrade_count_on_error:
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Count unavailable", count=0
        )

    return CountResponse(count=result.count)
