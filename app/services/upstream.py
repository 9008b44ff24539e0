"""
Client for the upstream order system.

Three feeds are consumed:
- the order set for a store over an explicit date range (system of record)
- today's orders (fresher status, route and packing assignments)
- the live driver GPS feed
"""
from datetime import date, timedelta
from typing import Any, Optional, Type, TypeVar

import logging

import httpx
from pydantic import ValidationError

from app.core.config import Settings
from app.schemas.base import UpstreamRecord
from app.schemas.order import DriverLocation, Order

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=UpstreamRecord)

# Keys under which list payloads have been observed
_LIST_KEYS = ("items", "drivers", "locations")


class UpstreamUnavailableError(Exception):
    """Raised when an upstream feed cannot be fetched or parsed."""
    pass


def get_date_range(
    today: date,
    days_back: int = 60,
    days_forward: int = 7,
) -> tuple[str, str]:
    """Return the (start, end) ISO dates of the wide order window."""
    start = today - timedelta(days=days_back)
    end = today + timedelta(days=days_forward)
    return start.isoformat(), end.isoformat()


def parse_records(payload: Any, model: Type[RecordT], source: str) -> tuple[RecordT, ...]:
    """
    Parse a list payload into records.

    Accepts a bare list or an object holding the list under one of the
    known keys. Individual records that fail validation are skipped.

    Raises:
        UpstreamUnavailableError: If the payload has no list of records.
    """
    raw: Optional[list] = None
    if isinstance(payload, list):
        raw = payload
    elif isinstance(payload, dict):
        for key in _LIST_KEYS:
            if isinstance(payload.get(key), list):
                raw = payload[key]
                break

    if raw is None:
        raise UpstreamUnavailableError(f"Malformed {source} payload: no record list")

    records = []
    skipped = 0
    for item in raw:
        try:
            records.append(model.model_validate(item))
        except ValidationError:
            skipped += 1

    if skipped:
        logger.warning(f"Skipped {skipped} malformed {source} record(s)")

    return tuple(records)


class UpstreamClient:
    """
    Async HTTP client for the upstream order system.

    Every call is bounded by ``settings.upstream_timeout_seconds``. All
    failures (network, timeout, HTTP status, malformed JSON) surface as
    ``UpstreamUnavailableError``.
    """

    USER_AGENT = "iPerkzSupportAgent/1.0"

    def __init__(
        self,
        settings: Settings,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings
        self._client = http_client or httpx.AsyncClient(
            timeout=settings.upstream_timeout_seconds,
        )

    def _headers(self) -> dict[str, str]:
        headers = {
            "User-Agent": self.USER_AGENT,
            "Content-Type": "application/json",
        }
        if self.settings.upstream_api_key:
            headers["Authorization"] = f"Bearer {self.settings.upstream_api_key}"
        return headers

    async def _request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(
                method, url, headers=self._headers(), **kwargs
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(f"Upstream request to {url} failed: {e}")

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamUnavailableError(f"Upstream response from {url} is not JSON: {e}")

    async def fetch_orders(self, today: Optional[date] = None) -> tuple[Order, ...]:
        """Fetch every order of the store in the wide date window."""
        start_date, end_date = get_date_range(
            today or date.today(),
            days_back=self.settings.orders_days_back,
            days_forward=self.settings.orders_days_forward,
        )
        logger.info(f"Fetching orders from {start_date} to {end_date}")

        payload = await self._request_json(
            "POST",
            self.settings.orders_api_url,
            json={
                "storeId": self.settings.store_id,
                "startDate": start_date,
                "endDate": end_date,
            },
        )
        return parse_records(payload, Order, "order")

    async def fetch_todays_orders(self) -> tuple[Order, ...]:
        """Fetch today's orders."""
        logger.info("Fetching today's orders")
        payload = await self._request_json("GET", self.settings.todays_orders_api_url)
        return parse_records(payload, Order, "today's order")

    async def fetch_driver_locations(self) -> tuple[DriverLocation, ...]:
        """Fetch the live driver GPS feed."""
        payload = await self._request_json("GET", self.settings.driver_locations_api_url)
        return parse_records(payload, DriverLocation, "driver location")

    async def aclose(self) -> None:
        await self._client.aclose()
