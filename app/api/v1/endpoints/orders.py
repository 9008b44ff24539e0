"""
Order verification and tracking endpoints.

Every response body is a typed outcome discriminated by ``kind``. Expected
conditions (order not found, verification required, no driver) are
returned with HTTP 200 and ``success: false``; missing or malformed input
is returned with HTTP 422.
"""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.core.dependencies import get_tracking_service
from app.schemas.chat import VerificationStatusResponse, VerifyRequest
from app.schemas.outcomes import (
    DriverLocationOutcome,
    InvalidInput,
    TrackingOutcome,
    VerifyIdentityOutcome,
)
from app.services.tracking import TrackingService

router = APIRouter()

SessionQuery = Annotated[Optional[str], Query(description="Verification session id")]


def _invalid(outcome: InvalidInput) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=jsonable_encoder(outcome),
    )


@router.get("/{order_id}/verification", response_model=VerificationStatusResponse)
async def check_verification(
    order_id: str,
    tracking: Annotated[TrackingService, Depends(get_tracking_service)],
    session_id: SessionQuery = None,
):
    """Report whether the session has already proven ownership of the order."""
    return VerificationStatusResponse(
        order_id=order_id,
        verified=tracking.check_verification(session_id, order_id),
    )


@router.post("/{order_id}/verify", response_model=VerifyIdentityOutcome)
async def verify_identity(
    order_id: str,
    request: VerifyRequest,
    tracking: Annotated[TrackingService, Depends(get_tracking_service)],
):
    """
    Verify ownership of an order for a session.

    The identifier may be a phone number (or its last 4 digits), the email
    address or its local part, or the customer's first, last or full name.
    Small typos in names are tolerated.

    A failed check returns ``success: false`` with the running count of
    failed attempts; the caller may try again.
    """
    outcome = await tracking.verify_identity(request.session_id, order_id, request.identifier)
    if isinstance(outcome, InvalidInput):
        return _invalid(outcome)
    return outcome


@router.get("/{order_id}/tracking", response_model=TrackingOutcome)
async def get_tracking(
    order_id: str,
    tracking: Annotated[TrackingService, Depends(get_tracking_service)],
    session_id: SessionQuery = None,
):
    """
    Get the live tracking snapshot of a verified order.

    Includes status, route progress, ETA and a directions link.
    Returns ``verification_required`` until the session is verified.
    """
    outcome = await tracking.get_tracking_snapshot(session_id, order_id)
    if isinstance(outcome, InvalidInput):
        return _invalid(outcome)
    return outcome


@router.get("/{order_id}/driver-location", response_model=DriverLocationOutcome)
async def get_driver_location(
    order_id: str,
    tracking: Annotated[TrackingService, Depends(get_tracking_service)],
    session_id: SessionQuery = None,
):
    """
    Get the live location of the driver carrying a verified order.

    Only available while the order is out for delivery.
    """
    outcome = await tracking.get_driver_location_for_order(session_id, order_id)
    if isinstance(outcome, InvalidInput):
        return _invalid(outcome)
    return outcome
