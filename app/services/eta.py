"""
Delivery-time estimation.

Estimates depend only on the order's status, its position in the route
and, when available, live route progress. They are stop-count heuristics,
not travel-time predictions.
"""
from typing import Optional

from app.models.enums import OrderStatus
from app.schemas.order import Order
from app.schemas.tracking import DeliveryEstimate, RouteProgress

AVG_MINUTES_PER_STOP = 12

# Dispatch buffer added to packed orders before the driver leaves (minutes)
DISPATCH_BUFFER_MIN = 15
DISPATCH_BUFFER_MAX = 30

# Lower bound once out for delivery, and the width of the ETA window
MIN_DELIVERY_MINUTES = 5
ETA_WINDOW_MINUTES = 15


class ETAEstimator:
    """Per-status delivery estimate policy."""

    def __init__(self, avg_minutes_per_stop: int = AVG_MINUTES_PER_STOP):
        self.avg_minutes_per_stop = avg_minutes_per_stop

    def stops_away(self, order: Order, route_progress: Optional[RouteProgress]) -> int:
        """Stops before this order; uses live progress when available."""
        delivery_seq = order.delivery_seq or 1
        if route_progress is None:
            return delivery_seq
        return max(0, delivery_seq - route_progress.completed_stops)

    def estimate(
        self,
        order: Order,
        route_progress: Optional[RouteProgress] = None,
    ) -> DeliveryEstimate:
        status = order.status

        if status == OrderStatus.DELIVERED:
            return DeliveryEstimate(
                eta="Delivered",
                stops_away=0,
                estimated_minutes=0,
                estimated_minutes_max=0,
                message="Your order has been delivered!",
            )

        if status == OrderStatus.CANCELLED:
            return DeliveryEstimate(
                eta="Cancelled",
                stops_away=0,
                estimated_minutes=0,
                estimated_minutes_max=0,
                message="This order was cancelled.",
            )

        if status == OrderStatus.PLACED:
            return DeliveryEstimate(
                eta="Pending",
                stops_away=None,
                message=(
                    "Your order is being processed. Delivery time will be "
                    "available once packing starts."
                ),
            )

        if status == OrderStatus.STARTED:
            return DeliveryEstimate(
                eta="Packing",
                stops_away=None,
                message=(
                    "Your order is being packed. Delivery estimate available "
                    "after driver assignment."
                ),
            )

        if status == OrderStatus.COMPLETED:
            stops = self.stops_away(order, route_progress)
            base = stops * self.avg_minutes_per_stop
            low = base + DISPATCH_BUFFER_MIN
            high = base + DISPATCH_BUFFER_MAX
            return DeliveryEstimate(
                eta="Ready for pickup",
                stops_away=stops,
                estimated_minutes=low,
                estimated_minutes_max=high,
                message=f"Ready! Estimated {low}-{high} minutes once driver starts route.",
            )

        if status == OrderStatus.OUT_FOR_DELIVERY:
            stops = self.stops_away(order, route_progress)
            low = max(stops * self.avg_minutes_per_stop, MIN_DELIVERY_MINUTES)
            high = low + ETA_WINDOW_MINUTES
            if stops == 0:
                message = f"Driver is heading to you now! Arriving in {low}-{high} minutes."
            else:
                plural = "s" if stops > 1 else ""
                message = (
                    f"{stops} stop{plural} before you. "
                    f"Estimated arrival: {low}-{high} minutes."
                )
            return DeliveryEstimate(
                eta=f"{low}-{high} min",
                stops_away=stops,
                estimated_minutes=low,
                estimated_minutes_max=high,
                imminent=stops == 0,
                message=message,
            )

        return DeliveryEstimate(
            eta="Calculating...",
            stops_away=None,
            message="Calculating delivery estimate...",
        )

