"""
Enum type definitions for the order tracking agent.

Order statuses mirror the values emitted by the upstream order system.
"""
from enum import Enum


class OrderStatus(str, Enum):
    """
    Upstream order lifecycle status.

    PLACED -> STARTED (packing) -> COMPLETED (packed, ready)
    -> OUT_FOR_DELIVERY -> DELIVERED. CANCELLED may happen at any point.
    """
    PLACED = "PLACED"
    STARTED = "STARTED"
    COMPLETED = "COMPLETED"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    @property
    def step(self) -> int:
        """Position in the customer-facing progress timeline (0 = cancelled)."""
        return {
            OrderStatus.PLACED: 1,
            OrderStatus.STARTED: 2,
            OrderStatus.COMPLETED: 3,
            OrderStatus.OUT_FOR_DELIVERY: 4,
            OrderStatus.DELIVERED: 5,
            OrderStatus.CANCELLED: 0,
        }[self]


class VerificationState(str, Enum):
    """Verification state of a (session, order) pair."""
    UNVERIFIED = "UNVERIFIED"  # Never asked about in this session
    PENDING = "PENDING"        # Asked about, ownership not yet proven
    VERIFIED = "VERIFIED"      # Passed an identity check


class SessionKind(str, Enum):
    """
    Origin of a verification session.

    - CHAT: created implicitly by the chat widget, lives for the process
    - MOBILE: issued by the server to an app client, expires after a TTL
    """
    CHAT = "CHAT"
    MOBILE = "MOBILE"
