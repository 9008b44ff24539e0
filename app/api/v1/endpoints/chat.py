"""Chat endpoint for the support widget."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from app.core.dependencies import get_chat_service, get_tracking_service
from app.models.enums import SessionKind
from app.schemas.chat import ChatRequest, ChatResponse
from app.services.chat import ChatService
from app.services.tracking import TrackingService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    chat_service: Annotated[ChatService, Depends(get_chat_service)],
    tracking: Annotated[TrackingService, Depends(get_tracking_service)],
) -> ChatResponse:
    """
    Process one chat message.

    When ``session_id`` is omitted a new chat session is issued; the client
    must send it back with every following message so that verification
    carries over between turns.
    """
    session_id = request.session_id
    if not session_id or not session_id.strip():
        session_id = tracking.issue_session(SessionKind.CHAT).session_id

    logger.info(f"Chat message from session {session_id[:8]}...")
    reply = await chat_service.process_message(session_id, request.message)

    return ChatResponse(
        session_id=session_id,
        kind=reply.kind,
        response=reply.response,
    )
