"""
Route labels and live route progress.

A route label such as ``giga-north-1.19.26`` groups every order on one
delivery run (driver ``giga``, zone ``north``, route version ``1.19.26``).
Upstream sometimes double-encodes the field, so labels arrive as ``""``
or wrapped in quotes; both normalize to the bare label.
"""
from typing import Optional, Sequence

from app.models.enums import OrderStatus
from app.schemas.order import Order
from app.schemas.tracking import RouteAssignment, RouteProgress, RouteStop
from app.services.cache import UpstreamDataCache


def normalize_route_label(label: Optional[str]) -> str:
    """Strip quote characters; an empty result means no route assigned."""
    if not label:
        return ""
    return label.replace('"', "").strip()


def parse_route_label(label: Optional[str]) -> Optional[RouteAssignment]:
    """
    Parse a route label for display.

    >>> parse_route_label('"giga-north-1.19.26"').driver
    'Giga'
    """
    cleaned = normalize_route_label(label)
    if not cleaned:
        return None

    parts = cleaned.split("-")
    if len(parts) >= 2:
        return RouteAssignment(
            driver=_capitalize(parts[0]),
            zone=_capitalize(parts[1]),
            route=cleaned,
        )
    return RouteAssignment(driver=cleaned, zone="N/A", route=cleaned)


def _capitalize(value: str) -> str:
    return value[:1].upper() + value[1:]


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def compute_route_progress(route_label: Optional[str], orders: Sequence[Order]) -> Optional[RouteProgress]:
    """
    Derive progress of one route from an order set.

    Stops are ordered by delivery sequence (missing sequence sorts first).
    The current stop is the first one not delivered; the last delivered
    stop is the highest-sequence delivered one, a sequence-based proxy for
    where the driver is.
    """
    target = normalize_route_label(route_label)
    if not target:
        return None

    route_orders = [o for o in orders if normalize_route_label(o.route_label) == target]
    if not route_orders:
        return None

    route_orders.sort(key=lambda o: o.delivery_seq or 0)

    delivered = [o for o in route_orders if o.status == OrderStatus.DELIVERED]
    total = len(route_orders)
    completed = len(delivered)

    current_stop = next((o for o in route_orders if o.status != OrderStatus.DELIVERED), None)
    last_delivered = delivered[-1] if delivered else None

    return RouteProgress(
        route_id=target,
        total_stops=total,
        completed_stops=completed,
        pending_stops=total - completed,
        current_stop_seq=current_stop.delivery_seq if current_stop else total,
        current_stop_address=current_stop.address if current_stop else None,
        last_delivered_address=last_delivered.address if last_delivered else None,
        progress_percent=_round_half_up(completed / total * 100),
        stops=[
            RouteStop(
                order_id=o.order_id,
                seq=o.delivery_seq,
                status=o.status,
                address=o.address,
                customer_name=o.customer_name,
            )
            for o in route_orders
        ],
    )


class RouteAggregator:
    """Computes route progress from the wide order snapshot on every call."""

    def __init__(self, cache: UpstreamDataCache):
        self.cache = cache

    async def route_progress(self, route_label: Optional[str]) -> Optional[RouteProgress]:
        if not normalize_route_label(route_label):
            return None
        orders = await self.cache.get_orders()
        return compute_route_progress(route_label, orders)
