"""
Pydantic schemas for upstream records and API request/response validation.
"""

from app.schemas.base import BaseSchema, UpstreamRecord
from app.schemas.order import DriverLocation, MenuItem, Order
from app.schemas.tracking import (
    DeliveryEstimate,
    RouteAssignment,
    RouteProgress,
    RouteStop,
    TrackingData,
)
from app.schemas.outcomes import (
    DriverLocationOutcome,
    DriverLocationResult,
    InvalidInput,
    NoDriver,
    NotOutForDelivery,
    OrderNotFound,
    TrackingOutcome,
    VerificationRequired,
    VerificationResult,
    VerifyIdentityOutcome,
)
from app.schemas.chat import (
    ChatReply,
    ChatRequest,
    ChatResponse,
    SessionResponse,
    VerificationStatusResponse,
    VerifyRequest,
)

__all__ = [
    # Base
    "BaseSchema",
    "UpstreamRecord",
    # Upstream records
    "DriverLocation",
    "MenuItem",
    "Order",
    # Tracking
    "DeliveryEstimate",
    "RouteAssignment",
    "RouteProgress",
    "RouteStop",
    "TrackingData",
    # Outcomes
    "DriverLocationOutcome",
    "DriverLocationResult",
    "InvalidInput",
    "NoDriver",
    "NotOutForDelivery",
    "OrderNotFound",
    "TrackingOutcome",
    "VerificationRequired",
    "VerificationResult",
    "VerifyIdentityOutcome",
    # Chat / sessions
    "ChatReply",
    "ChatRequest",
    "ChatResponse",
    "SessionResponse",
    "VerificationStatusResponse",
    "VerifyRequest",
]
