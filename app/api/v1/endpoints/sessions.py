"""Session issuing endpoint for app clients."""
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends

from app.core.dependencies import get_tracking_service
from app.models.enums import SessionKind
from app.schemas.chat import SessionResponse
from app.services.tracking import TrackingService

router = APIRouter()


@router.post("", response_model=SessionResponse, status_code=201)
async def create_session(
    tracking: Annotated[TrackingService, Depends(get_tracking_service)],
) -> SessionResponse:
    """Issue a mobile verification session (expires after 24 hours)."""
    session = tracking.issue_session(SessionKind.MOBILE)
    expires_at = None
    if session.expires_at is not None:
        expires_at = datetime.fromtimestamp(session.expires_at, tz=timezone.utc)

    return SessionResponse(
        session_id=session.session_id,
        kind=session.kind,
        expires_at=expires_at,
    )
