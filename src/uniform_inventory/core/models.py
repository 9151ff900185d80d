"""
Snapshot records supplied by the item and order services.

The engine never writes these back. Models are frozen and lenient: a row
with a missing counter, a junk timestamp or an unknown status still
validates, with the bad field degraded to its default.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .parsers import (
    parse_line_items,
    parse_timestamp,
    to_bool,
    to_decimal,
    to_identifier,
    to_int,
    to_text,
)


class ItemStatus(str, Enum):
    """Stock band of an inventory row, as shown on the status badges."""

    ABOVE_THRESHOLD = "Above Threshold"
    AT_REORDER_POINT = "At Reorder Point"
    CRITICAL = "Critical"
    OUT_OF_STOCK = "Out of Stock"

    @classmethod
    def parse(cls, value: Any) -> "ItemStatus | None":
        """Match "At Reorder Point", "AtReorderPoint", "at_reorder_point", ..."""
        if isinstance(value, cls):
            return value
        if value is None:
            return None
        key = "".join(ch for ch in str(value).lower() if ch.isalnum())
        return _ITEM_STATUS_KEYS.get(key)


_ITEM_STATUS_KEYS = {
    "".join(ch for ch in s.value.lower() if ch.isalnum()): s for s in ItemStatus
}


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CLAIMED = "claimed"
    CANCELLED = "cancelled"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Any) -> "OrderStatus":
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        if text == "canceled":
            return cls.CANCELLED
        try:
            return cls(text)
        except ValueError:
            return cls.OTHER

    @property
    def is_unreleased(self) -> bool:
        return self in (OrderStatus.PENDING, OrderStatus.PROCESSING)

    @property
    def is_released(self) -> bool:
        return self in (OrderStatus.COMPLETED, OrderStatus.CLAIMED)


class ItemRecord(BaseModel):
    """One persisted inventory row (a single size of a named product)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str | int | None = None
    name: str | None = None
    item_type: str | None = Field(default=None, alias="itemType")
    education_level: str | None = Field(default=None, alias="educationLevel")
    category: str | None = None
    size: str | None = None
    material: str | None = None
    image: str | None = None
    stock: int = 0
    price: Decimal = Decimal("0")
    beginning_inventory: int = Field(default=0, alias="beginningInventory")
    purchases: int = 0
    returns: int = 0
    unit_price: Decimal = Field(default=Decimal("0"), alias="unitPrice")
    total_amount: Decimal = Field(default=Decimal("0"), alias="totalAmount")
    status: ItemStatus | None = None
    is_active: bool = Field(default=True, alias="isActive")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    note: Any = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> str | int | None:
        return to_identifier(value)

    @field_validator(
        "name", "item_type", "education_level", "category", "size",
        "material", "image", mode="before",
    )
    @classmethod
    def coerce_text(cls, value: Any) -> str | None:
        return to_text(value)

    @field_validator("stock", "beginning_inventory", "purchases", "returns", mode="before")
    @classmethod
    def coerce_counter(cls, value: Any) -> int:
        return to_int(value)

    @field_validator("price", "unit_price", "total_amount", mode="before")
    @classmethod
    def coerce_money(cls, value: Any) -> Decimal:
        return to_decimal(value)

    @field_validator("status", mode="before")
    @classmethod
    def coerce_status(cls, value: Any) -> ItemStatus | None:
        return ItemStatus.parse(value)

    @field_validator("is_active", mode="before")
    @classmethod
    def coerce_active(cls, value: Any) -> bool:
        return to_bool(value)

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def coerce_timestamp(cls, value: Any) -> datetime | None:
        return parse_timestamp(value)


class OrderLineItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    name: str | None = None
    size: str | None = None
    quantity: int = 1
    price: Decimal = Decimal("0")

    @field_validator("name", "size", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str | None:
        return to_text(value)

    @field_validator("quantity", mode="before")
    @classmethod
    def coerce_quantity(cls, value: Any) -> int:
        if value is None or value == "":
            return 1
        return to_int(value)

    @field_validator("price", mode="before")
    @classmethod
    def coerce_money(cls, value: Any) -> Decimal:
        return to_decimal(value)


class OrderRecord(BaseModel):
    """One customer order, as listed by the order service."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str | int | None = None
    order_number: str | None = Field(default=None, alias="orderNumber")
    status: OrderStatus = OrderStatus.OTHER
    items: list[OrderLineItem] = Field(default_factory=list)
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    completed_at: datetime | None = Field(default=None, alias="completedAt")
    claimed_date: datetime | None = Field(default=None, alias="claimedDate")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> str | int | None:
        return to_identifier(value)

    @field_validator("order_number", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str | None:
        return to_text(value)

    @field_validator("status", mode="before")
    @classmethod
    def coerce_status(cls, value: Any) -> OrderStatus:
        return OrderStatus.parse(value)

    @field_validator("items", mode="before")
    @classmethod
    def coerce_items(cls, value: Any) -> list[dict]:
        if isinstance(value, list):
            return [v for v in value if isinstance(v, (dict, OrderLineItem))]
        return parse_line_items(value)

    @field_validator("created_at", "updated_at", "completed_at", "claimed_date", mode="before")
    @classmethod
    def coerce_timestamp(cls, value: Any) -> datetime | None:
        return parse_timestamp(value)

    @property
    def completion_timestamp(self) -> datetime | None:
        return self.claimed_date or self.completed_at
