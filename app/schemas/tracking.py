"""
Tracking schemas: route progress, delivery estimates and the tracking
snapshot returned to verified callers.
"""
from typing import Literal, Optional

from pydantic import Field

from app.schemas.base import BaseSchema


class RouteAssignment(BaseSchema):
    """Display form of a route label such as ``giga-north-1.19.26``."""
    driver: str
    zone: str
    route: str


class RouteStop(BaseSchema):
    """One order on a route, in delivery sequence."""
    order_id: int
    seq: Optional[int]
    status: str
    address: Optional[str]
    customer_name: str


class RouteProgress(BaseSchema):
    """
    Live progress of a delivery run.

    Derived from the current order snapshot on every request; route
    composition changes as the upstream system reassigns orders.
    """
    route_id: str
    total_stops: int
    completed_stops: int
    pending_stops: int
    current_stop_seq: Optional[int] = Field(
        None,
        description="Sequence of the first non-delivered stop; total_stops when all are delivered",
    )
    current_stop_address: Optional[str] = None
    last_delivered_address: Optional[str] = Field(
        None,
        description="Address of the highest-sequence delivered stop",
    )
    progress_percent: int
    stops: list[RouteStop] = []


class DeliveryEstimate(BaseSchema):
    """Delivery-time estimate for a single order."""
    eta: str
    stops_away: Optional[int]
    estimated_minutes: Optional[int] = Field(
        None, description="Lower bound in minutes"
    )
    estimated_minutes_max: Optional[int] = Field(
        None, description="Upper bound in minutes"
    )
    imminent: bool = Field(
        False, description="Driver is heading to this stop now"
    )
    message: str


class TrackingData(BaseSchema):
    """Tracking snapshot for a verified order."""
    kind: Literal["tracking"] = "tracking"
    success: Literal[True] = True

    order_id: int
    status: str
    status_step: int
    address: Optional[str]
    store_address: Optional[str]
    store_name: Optional[str]

    # Route assignment
    driver: Optional[str] = None
    zone: Optional[str] = None
    route: Optional[str] = None
    delivery_seq: Optional[int] = None
    packed_by: Optional[str] = None

    scheduled_delivery: Optional[str] = None
    customer_name: str

    estimate: DeliveryEstimate
    route_progress: Optional[RouteProgress] = None
    directions_url: Optional[str] = None
