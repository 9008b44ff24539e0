"""
Typed outcomes of the tracking service.

Expected conditions (unknown order, missing verification, no driver) are
returned as values discriminated by ``kind``, never raised.
"""
from typing import Annotated, Literal, Optional, Union

from pydantic import Field

from app.schemas.base import BaseSchema
from app.schemas.order import DriverLocation
from app.schemas.tracking import TrackingData


class InvalidInput(BaseSchema):
    """A required argument was missing or malformed."""
    kind: Literal["invalid_input"] = "invalid_input"
    success: Literal[False] = False
    field: str
    error: str


class OrderNotFound(BaseSchema):
    """No order with this id exists in the current snapshot."""
    kind: Literal["order_not_found"] = "order_not_found"
    success: Literal[False] = False
    order_id: str
    error: str = "Order not found"


class VerificationRequired(BaseSchema):
    """
    The session has not proven ownership of the order.

    ``attempted`` is True when the session already tried and failed, so the
    caller can prompt "try again" instead of "please verify".
    """
    kind: Literal["verification_required"] = "verification_required"
    success: Literal[False] = False
    requires_verification: Literal[True] = True
    order_id: str
    attempted: bool = False
    error: str = "Please verify your identity in the chat first"


class VerificationResult(BaseSchema):
    """Result of an identity check. A failure invites a retry."""
    kind: Literal["verification"] = "verification"
    success: bool
    order_id: int
    failed_attempts: int = 0


class NotOutForDelivery(BaseSchema):
    """Driver location is only disclosed while the order is out for delivery."""
    kind: Literal["not_out_for_delivery"] = "not_out_for_delivery"
    success: Literal[False] = False
    order_id: int
    status: str
    error: str = "Order is not out for delivery"


class NoDriver(BaseSchema):
    """No live location is available for the order's driver."""
    kind: Literal["no_driver"] = "no_driver"
    success: Literal[False] = False
    order_id: int
    driver: Optional[str] = None
    error: str = "No driver location available"


class DriverLocationResult(BaseSchema):
    """Live location of the driver carrying a verified order."""
    kind: Literal["driver_location"] = "driver_location"
    success: Literal[True] = True
    order_id: int
    driver: str
    route: str
    location: DriverLocation


VerifyIdentityOutcome = Annotated[
    Union[VerificationResult, OrderNotFound, InvalidInput],
    Field(discriminator="kind"),
]

TrackingOutcome = Annotated[
    Union[TrackingData, VerificationRequired, OrderNotFound, InvalidInput],
    Field(discriminator="kind"),
]

DriverLocationOutcome = Annotated[
    Union[
        DriverLocationResult,
        NoDriver,
        NotOutForDelivery,
        VerificationRequired,
        OrderNotFound,
        InvalidInput,
    ],
    Field(discriminator="kind"),
]
