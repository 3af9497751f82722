"""
Pydantic Schemas for the POS Domain

Catalog entries, cart/order line items and confirmed orders. The same
models are used in memory and, via ``model_dump(mode="json")``, as the
documents written to the local key-value store.

Version: 1.0.0
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, Field, model_validator


# =============================================================================
# ENUMS
# =============================================================================

class PortionType(str, Enum):
    """How a product is sold: by the unit, or as a ration that can be halved."""
    UNIT = "unit"
    RATION = "ration"


class Variant(str, Enum):
    """Portion selected for a cart/order line."""
    FULL = "full"
    HALF = "half"


class OrderStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    MOBILE_TRANSFER = "mobile_transfer"


HALF_PORTION_LABEL = "(Media)"


# =============================================================================
# CATALOG
# =============================================================================

class Category(BaseModel):
    """Menu section shown as a tab in the terminal."""
    id: str = Field(..., min_length=1, examples=["arroces"])
    name: str = Field(..., min_length=1, max_length=100, examples=["Arroces y Paellas"])
    display_order: int = Field(default=0)


class Product(BaseModel):
    """
    Menu catalog entry.

    ``half_price`` only applies to ration products; it is dropped for
    unit products so a product switched back to ``unit`` cannot keep
    selling half portions.
    """
    id: str = Field(..., min_length=1, examples=["paella-mixta"])
    name: str = Field(..., min_length=1, max_length=100, examples=["Paella Mixta"])
    price: Decimal = Field(..., ge=0, examples=["12.00"])
    category: str = Field(..., min_length=1, examples=["arroces"])
    portion_type: PortionType = Field(default=PortionType.UNIT)
    half_price: Optional[Decimal] = Field(default=None, ge=0, examples=["7.00"])
    image: Optional[str] = Field(default=None)
    display_order: Optional[int] = Field(default=None)

    @model_validator(mode="after")
    def drop_half_price_for_units(self) -> "Product":
        if self.portion_type == PortionType.UNIT:
            self.half_price = None
        return self


# =============================================================================
# ORDERS
# =============================================================================

class OrderLineItem(BaseModel):
    """
    One cart/order line with a snapshot of the product at add time.

    Two lines for the same product but different variants are distinct;
    ``key`` is the aggregation identity.
    """
    product_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    variant: Variant = Field(default=Variant.FULL)
    image: Optional[str] = Field(default=None)
    category: Optional[str] = Field(default=None)

    @property
    def key(self) -> tuple[str, Variant]:
        return (self.product_id, self.variant)

    @property
    def is_half_portion(self) -> bool:
        return self.variant == Variant.HALF

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    @property
    def display_name(self) -> str:
        if self.is_half_portion:
            return f"{self.name} {HALF_PORTION_LABEL}"
        return self.name


def order_total(items: Iterable[OrderLineItem]) -> Decimal:
    """Sum of price x quantity over ``items``."""
    return sum((item.line_total for item in items), Decimal("0"))


class ConfirmedOrder(BaseModel):
    """A finalized order as persisted in the local store."""
    id: str = Field(..., min_length=1)
    order_number: int = Field(..., ge=1)
    items: list[OrderLineItem] = Field(..., min_length=1)
    total: Decimal = Field(..., ge=0)
    created_at: datetime
    status: OrderStatus = Field(default=OrderStatus.COMPLETED)
    payment_method: Optional[PaymentMethod] = Field(default=None)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)


# =============================================================================
# REPORTS
# =============================================================================

class SalesLine(BaseModel):
    """Units and revenue for one product/variant on a given day."""
    name: str
    quantity: int
    total: Decimal


class DailySalesSummary(BaseModel):
    day: date
    total_sales: Decimal
    total_orders: int
    total_products: int
    lines: list[SalesLine] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.total_orders == 0
