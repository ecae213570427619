"""
Admin waitlist endpoints.

Authentication is handled outside this service (gateway / proxy).

Endpoints:
- GET /api/waitlist/subscribers - List all subscribers
- DELETE /api/waitlist/subscriber/{email} - Delete a subscriber
- POST /api/waitlist/bulk-email - Send an announcement to a list of emails
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.adapters.sqlite_db import SQLiteSubscriberRepo
from src.api.deps import get_email_adapter, get_subscriber_repo, get_waitlist_config
from src.api.schemas import ErrorResponse, SubscriberModel, error_response, status_for
from src.components.waitlist.component import run_bulk_email, run_delete, run_list
from src.components.waitlist.models import (
    BulkEmailInput,
    DeleteInput,
    ListInput,
    WaitlistConfig,
)
from src.core.ports.email import EmailPort

router = APIRouter()


# --- Request/Response Models ---


class SubscriberListResponse(BaseModel):
    subscribers: list[SubscriberModel]


class DeleteResponse(BaseModel):
    success: bool
    message: str


class BulkEmailRequest(BaseModel):
    subject: str | None = Field(None, description="Email subject")
    body: str | None = Field(None, description="Plain text body; newlines become <br/>")
    emails: list[str] = Field(default_factory=list, description="Recipients, in send order")


class BulkEmailResponse(BaseModel):
    success: bool
    message: str
    sent: list[str] = Field(default_factory=list, description="Recipients that were sent")
    failed: list[str] = Field(default_factory=list, description="Recipients that failed")


# --- Endpoints ---


@router.get(
    "/subscribers",
    response_model=SubscriberListResponse,
    response_model_by_alias=True,
    responses={500: {"model": ErrorResponse}},
    summary="List waitlist subscribers",
)
def list_subscribers(
    repo: SQLiteSubscriberRepo = Depends(get_subscriber_repo),
) -> SubscriberListResponse | JSONResponse:
    """List every subscriber, oldest first. No pagination."""
    result = run_list(ListInput(), repo)

    if not result.success:
        return error_response(
            status_for(result.errors), result.errors[0].message, subscribers=[]
        )

    return SubscriberListResponse(
        subscribers=[SubscriberModel.from_entity(s) for s in result.subscribers]
    )


@router.delete(
    "/subscriber/{email:path}",
    response_model=DeleteResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Delete subscriber",
    description="Permanently delete a subscriber by email. No undo.",
)
def delete_subscriber(
    email: str,
    repo: SQLiteSubscriberRepo = Depends(get_subscriber_repo),
) -> DeleteResponse | JSONResponse:
    result = run_delete(DeleteInput(email=email), repo)

    if not result.success:
        return error_response(status_for(result.errors), result.message)

    return DeleteResponse(success=True, message=result.message)


@router.post(
    "/bulk-email",
    response_model=BulkEmailResponse,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Send bulk email",
)
def send_bulk_email(
    request_body: BulkEmailRequest,
    email_sender: EmailPort | None = Depends(get_email_adapter),
    config: WaitlistConfig = Depends(get_waitlist_config),
) -> BulkEmailResponse | JSONResponse:
    """
    Send one announcement to every listed recipient.

    Any failed recipient makes the response a 500 naming exactly the
    failed addresses; the sent list shows what already went out.
    """
    result = run_bulk_email(
        BulkEmailInput(
            subject=request_body.subject,
            body=request_body.body,
            emails=request_body.emails,
        ),
        email_sender=email_sender,
        config=config,
    )

    if not result.success:
        extra = {"sent": result.sent, "failed": result.failed} if result.results else {}
        return error_response(status_for(result.errors), result.message, **extra)

    return BulkEmailResponse(
        success=True,
        message=result.message,
        sent=result.sent,
        failed=result.failed,
    )
