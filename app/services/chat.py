"""
Chat flow for the support widget.

A chat turn is either the answer to a pending verification prompt or a
new order query. Order data is only rendered after the session has proven
ownership of the order.
"""
import re
from typing import Optional

import logging

from app.core.config import Settings
from app.schemas.chat import ChatReply
from app.schemas.order import Order
from app.services.messages import (
    render_help,
    render_order_not_found,
    render_tracking_message,
    render_verification_failed,
    render_verification_prompt,
    render_verification_success,
)
from app.services.tracking import TrackingService

logger = logging.getLogger(__name__)

_BARE_ORDER_ID = re.compile(r"^\d{3,10}$")
_ORDER_KEYWORD_ID = re.compile(r"(?:order\s*(?:id|#|no)?:?\s*)(\d{4,10})", re.IGNORECASE)
_ANY_ORDER_ID = re.compile(r"\b(\d{4,10})\b")


def extract_order_id(message: str) -> Optional[str]:
    """
    Find an order id in free text.

    >>> extract_order_id("where is order #64531?")
    '64531'
    """
    text = message.strip()
    if _BARE_ORDER_ID.match(text):
        return text

    match = _ORDER_KEYWORD_ID.search(text)
    if match:
        return match.group(1)

    match = _ANY_ORDER_ID.search(text)
    if match:
        return match.group(1)

    return None


class ChatService:
    """Conversation handler on top of the tracking service."""

    def __init__(self, tracking: TrackingService, settings: Settings):
        self.tracking = tracking
        self.settings = settings

    async def process_message(self, session_id: str, message: Optional[str]) -> ChatReply:
        if not message or not message.strip():
            return ChatReply(kind="help", response=render_help())

        reply = await self._handle_verification(session_id, message)
        if reply is not None:
            return reply

        order_id = extract_order_id(message)
        if order_id is None:
            return ChatReply(kind="help", response=render_help())

        return await self._handle_order_query(session_id, order_id)

    async def _handle_verification(self, session_id: str, message: str) -> Optional[ChatReply]:
        """
        Treat *message* as the identity claim for the pending order.

        Returns None when nothing is pending, or when the claim fails and
        the message is really a query about a different order.
        """
        pending = self.tracking.sessions.get_pending(session_id)
        if pending is None:
            return None

        result = self.tracking.verify_order(session_id, pending.order, message.strip())
        if result.success:
            order = await self.tracking.cache.get_order_with_live_status(result.order_id)
            body = await self._render_order(order or pending.order)
            return ChatReply(
                kind="verification_success",
                response=render_verification_success(body),
                order_id=result.order_id,
            )

        # Bare digits are a phone number answer here, never a new order id
        match = _ORDER_KEYWORD_ID.search(message)
        if match and match.group(1) != pending.order_id:
            logger.info(f"Session {session_id[:8]}... switched to order #{match.group(1)}")
            return None

        return ChatReply(
            kind="verification_failed",
            response=render_verification_failed(pending.order_id, self.settings),
            order_id=result.order_id,
        )

    async def _handle_order_query(self, session_id: str, order_id: str) -> ChatReply:
        order = await self.tracking.cache.get_order_with_live_status(order_id)
        if order is None:
            return ChatReply(
                kind="order_not_found",
                response=render_order_not_found(order_id, self.settings),
            )

        if self.tracking.sessions.is_verified(session_id, order.order_id):
            return ChatReply(
                kind="tracking",
                response=await self._render_order(order),
                order_id=order.order_id,
            )

        self.tracking.sessions.set_pending(session_id, order.order_id, order)
        return ChatReply(
            kind="verification_required",
            response=render_verification_prompt(order.order_id, order),
            order_id=order.order_id,
        )

    async def _render_order(self, order: Order) -> str:
        tracking = await self.tracking.build_tracking_data(order)
        return render_tracking_message(tracking, self.settings, order)
