"""
Chat and session request/response schemas.
"""
from datetime import datetime
from typing import Optional

from pydantic import Field

from app.models.enums import SessionKind
from app.schemas.base import BaseSchema


class ChatRequest(BaseSchema):
    """A chat message from the support widget."""
    message: str = Field("", max_length=2000)
    session_id: Optional[str] = Field(
        None,
        alias="sessionId",
        description="Chat session id; a new one is issued when omitted",
    )


class ChatReply(BaseSchema):
    """Reply to a chat message."""
    kind: str = Field(..., description="Which branch of the conversation produced the reply")
    response: str
    order_id: Optional[int] = None


class ChatResponse(BaseSchema):
    """Chat endpoint response."""
    success: bool = True
    session_id: str
    kind: str
    response: str


class VerifyRequest(BaseSchema):
    """Identity claim for a direct (non-chat) verification."""
    session_id: str = Field(..., min_length=1, alias="sessionId")
    identifier: str = Field(
        ...,
        description="Phone (or last 4 digits), email, first, last or full name",
    )


class SessionResponse(BaseSchema):
    """A newly issued verification session."""
    session_id: str
    kind: SessionKind
    expires_at: Optional[datetime] = None


class VerificationStatusResponse(BaseSchema):
    """Whether a session is verified for an order."""
    order_id: str
    verified: bool
