"""
Time-bounded cache in front of the upstream order system.

Shields the slow, unreliable upstream from request storms while keeping
order status fresh enough for live delivery tracking. Availability wins
over freshness: when a refresh fails the previous snapshot is served.
"""
import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar, Union

import logging

from app.core.config import Settings
from app.schemas.order import DriverLocation, Order
from app.services.upstream import UpstreamClient, UpstreamUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], float]


def parse_order_id(value: Union[str, int, None]) -> Optional[int]:
    """Return the numeric order id, or None if *value* is not one."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text.isdigit():
        return None
    return int(text)


@dataclass(frozen=True)
class CacheSnapshot(Generic[T]):
    """Immutable capture of one upstream collection."""
    items: tuple[T, ...]
    fetched_at: float

    def is_fresh(self, now: float, ttl: float) -> bool:
        return now - self.fetched_at < ttl


class CachedCollection(Generic[T]):
    """
    A single upstream collection with its own TTL.

    Refreshes are serialized by a lock. While a refresh is in flight,
    callers holding a stale snapshot are served it immediately; callers
    with nothing cached wait for the refresh. A new snapshot replaces the
    old one in a single assignment, so readers never see a partial one.

    After a failed refresh the collection waits out its TTL before the
    next attempt.
    """

    def __init__(
        self,
        name: str,
        fetch: Callable[[], Awaitable[tuple[T, ...]]],
        ttl_seconds: float,
        clock: Clock = time.monotonic,
    ):
        self.name = name
        self.ttl_seconds = ttl_seconds
        self._fetch = fetch
        self._clock = clock
        self._snapshot: Optional[CacheSnapshot[T]] = None
        self._failed_at: Optional[float] = None
        self._refresh_lock = asyncio.Lock()

    @property
    def snapshot(self) -> Optional[CacheSnapshot[T]]:
        return self._snapshot

    def _cached_items(self) -> tuple[T, ...]:
        return self._snapshot.items if self._snapshot is not None else ()

    def _can_serve_without_fetch(self, now: float) -> bool:
        if self._snapshot is not None and self._snapshot.is_fresh(now, self.ttl_seconds):
            return True
        return self._failed_at is not None and now - self._failed_at < self.ttl_seconds

    async def get(self) -> tuple[T, ...]:
        if self._can_serve_without_fetch(self._clock()):
            logger.debug(f"[{self.name}] Returning {len(self._cached_items())} cached items")
            return self._cached_items()

        if self._snapshot is not None and self._refresh_lock.locked():
            logger.debug(f"[{self.name}] Refresh in flight, serving stale snapshot")
            return self._snapshot.items

        async with self._refresh_lock:
            started_at = self._clock()
            # Another caller may have refreshed while we waited for the lock
            if self._can_serve_without_fetch(started_at):
                return self._cached_items()

            try:
                items = await self._fetch()
            except UpstreamUnavailableError as e:
                self._failed_at = started_at
                logger.warning(
                    f"[{self.name}] Refresh failed, serving "
                    f"{len(self._cached_items())} cached items: {e}"
                )
                return self._cached_items()

            self._snapshot = CacheSnapshot(items=tuple(items), fetched_at=started_at)
            self._failed_at = None
            logger.info(f"[{self.name}] Fetched {len(items)} items")
            return self._snapshot.items

    def invalidate(self) -> None:
        self._snapshot = None
        self._failed_at = None


class UpstreamDataCache:
    """
    Cache of the upstream order system.

    - orders: the wide window (system of record), TTL 30s by default
    - today's orders: fresher status for live tracking, TTL 10s by default
    - driver locations: never cached, every call reflects live GPS

    Fetch failures are logged and never surfaced to callers.
    """

    def __init__(
        self,
        client: UpstreamClient,
        orders_ttl_seconds: float = 30.0,
        todays_orders_ttl_seconds: float = 10.0,
        clock: Clock = time.monotonic,
    ):
        self.client = client
        self.orders = CachedCollection(
            "orders", client.fetch_orders, orders_ttl_seconds, clock
        )
        self.todays_orders = CachedCollection(
            "todays-orders", client.fetch_todays_orders, todays_orders_ttl_seconds, clock
        )

    @classmethod
    def from_settings(
        cls,
        client: UpstreamClient,
        settings: Settings,
        clock: Clock = time.monotonic,
    ) -> "UpstreamDataCache":
        return cls(
            client,
            orders_ttl_seconds=settings.orders_cache_ttl_seconds,
            todays_orders_ttl_seconds=settings.todays_orders_cache_ttl_seconds,
            clock=clock,
        )

    async def get_orders(self) -> tuple[Order, ...]:
        return await self.orders.get()

    async def get_todays_orders(self) -> tuple[Order, ...]:
        return await self.todays_orders.get()

    async def get_driver_locations(self) -> tuple[DriverLocation, ...]:
        try:
            return await self.client.fetch_driver_locations()
        except UpstreamUnavailableError as e:
            logger.warning(f"[driver-locations] Fetch failed: {e}")
            return ()

    async def find_order_by_id(self, order_id: Union[str, int]) -> Optional[Order]:
        """Find an order in the wide snapshot."""
        numeric_id = parse_order_id(order_id)
        if numeric_id is None:
            return None

        orders = await self.get_orders()
        order = _find(orders, numeric_id)

        if order:
            logger.info(f"Found order #{numeric_id} - Status: {order.status}")
        else:
            logger.info(f"Order #{numeric_id} not found in {len(orders)} orders")
        return order

    async def get_order_with_live_status(self, order_id: Union[str, int]) -> Optional[Order]:
        """
        Find an order, preferring today's snapshot.

        Today's feed reflects route and packing assignments made in the last
        few hours; the wide feed is the system of record for older orders.
        """
        numeric_id = parse_order_id(order_id)
        if numeric_id is None:
            return None

        order = _find(await self.get_todays_orders(), numeric_id)
        if order is not None:
            return order
        return await self.find_order_by_id(numeric_id)

    def invalidate(self) -> None:
        """Drop both snapshots; the next read refetches."""
        self.orders.invalidate()
        self.todays_orders.invalidate()


def _find(orders: tuple[Order, ...], order_id: int) -> Optional[Order]:
    for order in orders:
        if order.order_id == order_id:
            return order
    return None
