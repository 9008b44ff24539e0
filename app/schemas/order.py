"""
Upstream order and driver-location schemas.

Orders are read-only snapshots of the upstream system; they are never
mutated, only re-fetched.
"""
from typing import Any, Optional

from pydantic import AliasChoices, Field, field_validator

from app.models.enums import OrderStatus
from app.schemas.base import UpstreamRecord


class MenuItem(UpstreamRecord):
    """A single line item on an order."""
    name: Optional[str] = Field(None, alias="menuItemName")
    count: Optional[int] = None
    sale_price: Optional[float] = Field(None, alias="salePrice")

    @property
    def quantity(self) -> int:
        return self.count or 1

    @property
    def line_total(self) -> float:
        return self.quantity * (self.sale_price or 0.0)


class Order(UpstreamRecord):
    """
    Order record as delivered by the upstream order system.

    ``status`` is kept as the raw upstream string so that unknown values
    survive parsing; compare it against ``OrderStatus`` members.
    """
    order_id: int = Field(..., alias="customerOrderId")
    status: str = Field("", alias="orderStatus")

    # Customer
    phone: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    address: Optional[str] = None

    # Route assignment
    route_label: Optional[str] = Field(None, alias="deliveryAssociate")
    delivery_seq: Optional[int] = Field(None, alias="deliverySeq")
    packing_associate: Optional[str] = Field(None, alias="packingAssociate")

    # Store
    store_name: Optional[str] = Field(None, alias="storeName")
    store_address: Optional[str] = Field(None, alias="storeAddress1")

    # Money
    total_sale_price: Optional[float] = Field(None, alias="totalSalePrice")
    tax: Optional[float] = None
    delivery_amount: Optional[float] = Field(None, alias="deliveryAmount")
    tip_amount: Optional[float] = Field(None, alias="tipAmount")
    transaction_fee: Optional[float] = Field(None, alias="transactionFee")
    discount: Optional[float] = None
    perkz_amount: Optional[float] = Field(None, alias="perkzAmt")
    payment_mode: Optional[str] = Field(None, alias="paymentMode")

    # Timestamps
    created_at: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("orderCreationTimeStr", "orderCreationTime", "created_at"),
    )
    scheduled_delivery: Optional[str] = Field(
        None,
        validation_alias=AliasChoices(
            "requestedDeliveryDateString",
            "requestedDeliveryDateStr",
            "scheduled_delivery",
        ),
    )

    # Misc
    take_out: Optional[int] = Field(None, alias="takeOut")
    company: Optional[str] = None
    delivery_instructions: Optional[str] = Field(None, alias="deliveryInstructions")
    special_instructions: Optional[str] = Field(None, alias="specialInstructions")
    image_url: Optional[str] = Field(None, alias="imageUrl")
    line_items: list[MenuItem] = Field(default_factory=list, alias="menuList")

    @field_validator("delivery_seq", "take_out", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("status", mode="before")
    @classmethod
    def _null_status(cls, value: Any) -> Any:
        return value if value is not None else ""

    @field_validator("line_items", mode="before")
    @classmethod
    def _null_items(cls, value: Any) -> Any:
        return value or []

    @property
    def customer_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    @property
    def is_delivered(self) -> bool:
        return self.status == OrderStatus.DELIVERED

    @property
    def known_status(self) -> Optional[OrderStatus]:
        """Status as an enum, or None for values we do not recognize."""
        try:
            return OrderStatus(self.status)
        except ValueError:
            return None


class DriverLocation(UpstreamRecord):
    """A single entry of the live driver GPS feed."""
    driver_name: str = Field(..., validation_alias=AliasChoices("driver_name", "driverName"))
    latitude: float
    longitude: float
    heading: Optional[float] = None
    speed: Optional[float] = None
    last_updated: Optional[str] = Field(
        None, validation_alias=AliasChoices("last_updated", "lastUpdated")
    )
    is_active: bool = Field(True, validation_alias=AliasChoices("is_active", "isActive"))
