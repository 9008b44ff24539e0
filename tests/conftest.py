"""Root conftest.py -- shared fixtures for all test modules."""
import os

import pytest

# Set env vars BEFORE any app imports to keep tests away from the real upstream
os.environ.setdefault("ORDERS_API_URL", "http://upstream.test/api/orders-by-criteria")
os.environ.setdefault("TODAYS_ORDERS_API_URL", "http://upstream.test/api/todays-orders")
os.environ.setdefault("DRIVER_LOCATIONS_API_URL", "http://upstream.test/api/driver-locations")

from app.core.config import get_settings, Settings
from app.schemas.order import DriverLocation, Order
from app.services.cache import UpstreamDataCache
from app.services.sessions import VerificationSessionStore
from app.services.tracking import TrackingService
from app.services.upstream import UpstreamUnavailableError


# =========================================================================
# Settings
# =========================================================================
@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Clear LRU cache before each test to prevent stale settings."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def test_settings() -> Settings:
    return get_settings()


# =========================================================================
# Clock
# =========================================================================
class FakeClock:
    """Manually advanced clock for TTL and expiry tests."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# =========================================================================
# Upstream Data Factories
# =========================================================================
@pytest.fixture
def make_order():
    """Build an Order from an upstream-shaped (camelCase) record."""

    def _make(
        order_id: int = 64531,
        status: str = "OUT_FOR_DELIVERY",
        phone: str = "(201) 555-7788",
        email: str = "jane.doe@example.com",
        first_name: str = "Jane",
        last_name: str = "Doe",
        address: str = "12 Grove St, Jersey City, NJ 07302",
        route_label: str = "giga-north-1.19.26",
        delivery_seq=3,
        **extra,
    ) -> Order:
        record = {
            "customerOrderId": order_id,
            "orderStatus": status,
            "phone": phone,
            "email": email,
            "firstName": first_name,
            "lastName": last_name,
            "address": address,
            "deliveryAssociate": route_label,
            "deliverySeq": delivery_seq,
            "packingAssociate": "Ravi",
            "storeName": "iPerkz - Groceries",
            "storeAddress1": "100 Newark Ave, Jersey City, NJ",
            "totalSalePrice": 42.5,
            "tax": 1.2,
            "deliveryAmount": 4.99,
            "tipAmount": 3.0,
            "paymentMode": "CARD",
            "takeOut": 2,
            "menuList": [
                {"menuItemName": "Basmati Rice 10lb", "count": 1, "salePrice": 18.99},
                {"menuItemName": "Toor Dal 4lb", "count": 2, "salePrice": 7.49},
            ],
        }
        record.update(extra)
        return Order.model_validate(record)

    return _make


@pytest.fixture
def make_route(make_order):
    """Build the orders of one route with the given statuses, seq 1..n."""

    def _make(statuses: list[str], route_label: str = "giga-north-1.19.26", first_id: int = 70001):
        return [
            make_order(
                order_id=first_id + i,
                status=status,
                route_label=route_label,
                delivery_seq=i + 1,
                address=f"{i + 1} Route Ave",
                first_name=f"Customer{i + 1}",
                last_name="Test",
            )
            for i, status in enumerate(statuses)
        ]

    return _make


@pytest.fixture
def make_driver_location():
    def _make(driver_name: str = "giga", is_active: bool = True, **extra) -> DriverLocation:
        record = {
            "driverName": driver_name,
            "latitude": 40.7178,
            "longitude": -74.0431,
            "heading": 90.0,
            "speed": 22.5,
            "lastUpdated": "2026-01-19T15:04:05Z",
            "isActive": is_active,
        }
        record.update(extra)
        return DriverLocation.model_validate(record)

    return _make


# =========================================================================
# Fake Upstream
# =========================================================================
class FakeUpstream:
    """In-memory stand-in for UpstreamClient with call counters."""

    def __init__(self):
        self.orders: list[Order] = []
        self.todays_orders: list[Order] = []
        self.driver_locations: list[DriverLocation] = []
        self.fail_orders = False
        self.fail_todays_orders = False
        self.fail_driver_locations = False
        self.calls = {"orders": 0, "todays_orders": 0, "driver_locations": 0}
        self.closed = False

    async def fetch_orders(self) -> tuple[Order, ...]:
        self.calls["orders"] += 1
        if self.fail_orders:
            raise UpstreamUnavailableError("orders feed down")
        return tuple(self.orders)

    async def fetch_todays_orders(self) -> tuple[Order, ...]:
        self.calls["todays_orders"] += 1
        if self.fail_todays_orders:
            raise UpstreamUnavailableError("today's feed down")
        return tuple(self.todays_orders)

    async def fetch_driver_locations(self) -> tuple[DriverLocation, ...]:
        self.calls["driver_locations"] += 1
        if self.fail_driver_locations:
            raise UpstreamUnavailableError("driver feed down")
        return tuple(self.driver_locations)

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def cache(fake_upstream, clock) -> UpstreamDataCache:
    return UpstreamDataCache(fake_upstream, clock=clock)


@pytest.fixture
def session_store(clock) -> VerificationSessionStore:
    return VerificationSessionStore(clock=clock)


@pytest.fixture
def tracking_service(cache, session_store) -> TrackingService:
    return TrackingService(cache=cache, sessions=session_store)


# =========================================================================
# FastAPI Test Client
# =========================================================================
@pytest.fixture
def app():
    from app.main import app as fastapi_app
    return fastapi_app


@pytest.fixture
async def client(app, tracking_service, test_settings):
    """httpx.AsyncClient wired to a TrackingService over the fake upstream."""
    from httpx import AsyncClient, ASGITransport
    from app.core.dependencies import get_chat_service, get_tracking_service
    from app.services.chat import ChatService

    chat_service = ChatService(tracking_service, test_settings)

    app.dependency_overrides[get_tracking_service] = lambda: tracking_service
    app.dependency_overrides[get_chat_service] = lambda: chat_service

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
