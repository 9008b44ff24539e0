"""
Tracking service: the single entry point of the order tracking core.

Owns the upstream cache and the verification session store, and combines
them with the identity verifier, route aggregator and ETA estimator. One
instance is constructed per process and injected into request handlers.

Every operation returns a typed outcome for expected conditions; only
programmer errors propagate.
"""
from typing import Optional, Union

import logging

from app.core.config import Settings
from app.models.enums import OrderStatus, SessionKind
from app.schemas.order import Order
from app.schemas.outcomes import (
    DriverLocationResult,
    InvalidInput,
    NoDriver,
    NotOutForDelivery,
    OrderNotFound,
    VerificationRequired,
    VerificationResult,
)
from app.schemas.tracking import RouteProgress, TrackingData
from app.services.cache import UpstreamDataCache, parse_order_id
from app.services.eta import ETAEstimator
from app.services.identity import verify_customer_ownership
from app.services.messages import directions_url, status_step
from app.services.route_progress import RouteAggregator, normalize_route_label, parse_route_label
from app.services.sessions import VerificationSession, VerificationSessionStore
from app.services.upstream import UpstreamClient

logger = logging.getLogger(__name__)

OrderKey = Union[str, int]


def _require(value: Optional[str], field: str) -> Optional[InvalidInput]:
    if value is None or not str(value).strip():
        return InvalidInput(field=field, error=f"'{field}' is required")
    return None


def _validate_order_id(order_id: Optional[OrderKey]) -> Union[int, InvalidInput]:
    missing = _require(None if order_id is None else str(order_id), "order_id")
    if missing:
        return missing
    numeric_id = parse_order_id(order_id)
    if numeric_id is None:
        return InvalidInput(field="order_id", error="'order_id' must be numeric")
    return numeric_id


class TrackingService:
    """Order tracking core shared by the chat and direct API endpoints."""

    def __init__(
        self,
        cache: UpstreamDataCache,
        sessions: VerificationSessionStore,
        eta_estimator: Optional[ETAEstimator] = None,
    ):
        self.cache = cache
        self.sessions = sessions
        self.routes = RouteAggregator(cache)
        self.eta = eta_estimator or ETAEstimator()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client: Optional[UpstreamClient] = None,
    ) -> "TrackingService":
        client = client or UpstreamClient(settings)
        return cls(
            cache=UpstreamDataCache.from_settings(client, settings),
            sessions=VerificationSessionStore(
                mobile_ttl_seconds=settings.mobile_session_ttl_hours * 3600,
                sweep_threshold=settings.session_sweep_threshold,
            ),
            eta_estimator=ETAEstimator(settings.avg_minutes_per_stop),
        )

    async def aclose(self) -> None:
        await self.cache.client.aclose()

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def issue_session(self, kind: SessionKind = SessionKind.MOBILE) -> VerificationSession:
        session = self.sessions.issue_session(kind)
        logger.info(f"Issued {kind.value} session {session.session_id[:8]}...")
        return session

    def check_verification(self, session_id: Optional[str], order_id: Optional[OrderKey]) -> bool:
        numeric_id = _validate_order_id(order_id)
        if _require(session_id, "session_id") or isinstance(numeric_id, InvalidInput):
            return False
        return self.sessions.is_verified(session_id, numeric_id)

    def _verification_required(self, session_id: str, order_id: int) -> VerificationRequired:
        attempted = self.sessions.failed_attempts(session_id, order_id) > 0
        return VerificationRequired(order_id=str(order_id), attempted=attempted)

    # ------------------------------------------------------------------
    # Identity verification
    # ------------------------------------------------------------------

    def verify_order(self, session_id: str, order: Order, identifier: str) -> VerificationResult:
        """
        Check *identifier* against an already fetched order and update the
        session. The only path into the verified set.
        """
        if verify_customer_ownership(order, identifier):
            self.sessions.mark_verified(session_id, order.order_id)
            pending = self.sessions.get_pending(session_id)
            if pending is not None and pending.order_id == str(order.order_id):
                self.sessions.clear_pending(session_id)
            logger.info(f"Session {session_id[:8]}... verified for order #{order.order_id}")
            return VerificationResult(success=True, order_id=order.order_id)

        attempts = self.sessions.record_failed_attempt(session_id, order.order_id, order)
        logger.info(
            f"Session {session_id[:8]}... failed verification for order "
            f"#{order.order_id} (attempt {attempts})"
        )
        return VerificationResult(success=False, order_id=order.order_id, failed_attempts=attempts)

    async def verify_identity(
        self,
        session_id: Optional[str],
        order_id: Optional[OrderKey],
        identifier: Optional[str],
    ) -> Union[VerificationResult, OrderNotFound, InvalidInput]:
        invalid = _require(session_id, "session_id") or _require(identifier, "identifier")
        if invalid:
            return invalid
        numeric_id = _validate_order_id(order_id)
        if isinstance(numeric_id, InvalidInput):
            return numeric_id

        if self.sessions.is_verified(session_id, numeric_id):
            return VerificationResult(success=True, order_id=numeric_id)

        order = await self.cache.get_order_with_live_status(numeric_id)
        if order is None:
            return OrderNotFound(order_id=str(numeric_id))

        return self.verify_order(session_id, order, identifier)

    # ------------------------------------------------------------------
    # Tracking
    # ------------------------------------------------------------------

    async def get_route_progress(self, route_label: Optional[str]) -> Optional[RouteProgress]:
        return await self.routes.route_progress(route_label)

    async def build_tracking_data(self, order: Order) -> TrackingData:
        """Assemble tracking data for an order the caller may see."""
        assignment = parse_route_label(order.route_label)
        route_progress = None
        if assignment is not None:
            route_progress = await self.routes.route_progress(assignment.route)

        return TrackingData(
            order_id=order.order_id,
            status=order.status,
            status_step=status_step(order.status),
            address=order.address,
            store_address=order.store_address,
            store_name=order.store_name,
            driver=assignment.driver if assignment else None,
            zone=assignment.zone if assignment else None,
            route=assignment.route if assignment else None,
            delivery_seq=order.delivery_seq,
            packed_by=order.packing_associate,
            scheduled_delivery=order.scheduled_delivery,
            customer_name=order.customer_name,
            estimate=self.eta.estimate(order, route_progress),
            route_progress=route_progress,
            directions_url=directions_url(order.store_address, order.address),
        )

    async def get_tracking_snapshot(
        self,
        session_id: Optional[str],
        order_id: Optional[OrderKey],
    ) -> Union[TrackingData, VerificationRequired, OrderNotFound, InvalidInput]:
        invalid = _require(session_id, "session_id")
        if invalid:
            return invalid
        numeric_id = _validate_order_id(order_id)
        if isinstance(numeric_id, InvalidInput):
            return numeric_id

        if not self.sessions.is_verified(session_id, numeric_id):
            logger.info(f"Tracking denied for order #{numeric_id}: session not verified")
            return self._verification_required(session_id, numeric_id)

        order = await self.cache.get_order_with_live_status(numeric_id)
        if order is None:
            return OrderNotFound(order_id=str(numeric_id))

        return await self.build_tracking_data(order)

    async def get_driver_location_for_order(
        self,
        session_id: Optional[str],
        order_id: Optional[OrderKey],
    ) -> Union[
        DriverLocationResult,
        NoDriver,
        NotOutForDelivery,
        VerificationRequired,
        OrderNotFound,
        InvalidInput,
    ]:
        invalid = _require(session_id, "session_id")
        if invalid:
            return invalid
        numeric_id = _validate_order_id(order_id)
        if isinstance(numeric_id, InvalidInput):
            return numeric_id

        if not self.sessions.is_verified(session_id, numeric_id):
            return self._verification_required(session_id, numeric_id)

        order = await self.cache.get_order_with_live_status(numeric_id)
        if order is None:
            return OrderNotFound(order_id=str(numeric_id))

        if order.status != OrderStatus.OUT_FOR_DELIVERY:
            return NotOutForDelivery(order_id=numeric_id, status=order.status)

        assignment = parse_route_label(order.route_label)
        if assignment is None:
            return NoDriver(order_id=numeric_id)

        driver_key = assignment.driver.lower()
        route_key = normalize_route_label(order.route_label).lower()
        locations = await self.cache.get_driver_locations()
        for location in locations:
            if not location.is_active:
                continue
            name = location.driver_name.strip().lower()
            if name == driver_key or name == route_key:
                return DriverLocationResult(
                    order_id=numeric_id,
                    driver=assignment.driver,
                    route=assignment.route,
                    location=location,
                )

        return NoDriver(order_id=numeric_id, driver=assignment.driver)
