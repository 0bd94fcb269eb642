"""
Pydantic Schemas for Request/Response Validation

Wire format shared by the checkout pipeline and the orders service.
Payloads are camelCase JSON (``orderId``, ``catererId`` ...); Python code
uses the snake_case field names.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from orderflow.core import dates
from orderflow.core.config import get_settings


# =============================================================================
# ENUMS
# =============================================================================

class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    UPI = "upi"
    COD = "cod"


class FulfillmentType(str, Enum):
    DELIVERY = "delivery"
    TABLE = "table"


class SellerType(str, Enum):
    CATERER = "caterer"
    RESTAURANT = "restaurant"


class CamelModel(BaseModel):
    """Base schema speaking camelCase on the wire."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# BASKET
# =============================================================================

class CartLine(CamelModel):
    """
    One basket line. Immutable; the selection store replaces a line to
    change its quantity.

    ``category``, ``cuisine`` and ``meal_type`` are a display-only snapshot
    of the menu item at the time it was added.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        frozen=True,
    )

    item_id: int = Field(..., alias="id", ge=1, examples=[12])
    name: str = Field(..., min_length=1, max_length=100, examples=["Paneer Thali"])
    price: float = Field(..., ge=0, examples=[120.0])
    quantity: int = Field(default=1, ge=1, examples=[2])
    caterer_id: int = Field(..., ge=1, examples=[7])
    category: Optional[str] = Field(None, examples=["veg"])
    cuisine: Optional[str] = Field(None, examples=["North Indian"])
    meal_type: Optional[str] = Field(None, alias="type", examples=["lunch"])

    @property
    def line_total(self) -> float:
        return round(self.price * self.quantity, 2)


def basket_total(lines) -> float:
    """Sum of line totals, rounded to paise."""
    return round(sum(line.price * line.quantity for line in lines), 2)


def basket_item_count(lines) -> int:
    return sum(line.quantity for line in lines)


# =============================================================================
# ORDER REQUEST
# =============================================================================

class OrderCreate(CamelModel):
    """
    Order submission payload.

    A snapshot: frozen, with its lines held in a tuple. Cash orders with a
    blank transaction id get the configured sentinel; direct-transfer orders
    must carry a non-blank one.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        frozen=True,
    )

    order_id: str = Field(..., min_length=1, max_length=64, examples=["ORD-1770163200000-1A2B3C"])
    customer_id: int = Field(..., ge=1)
    caterer_id: int = Field(..., ge=1)
    items: tuple[CartLine, ...] = Field(..., min_length=1)
    total_amount: float = Field(..., ge=0)
    payment_method: PaymentMethod
    transaction_id: str = Field(..., max_length=100)
    proof_reference: Optional[str] = Field(None, max_length=500)
    delivery_address: Optional[str] = Field(None, max_length=255)
    table_number: Optional[int] = Field(None, ge=1)
    item_count: int = Field(..., ge=1)
    order_date: datetime
    delivery_date: Optional[str] = Field(None, examples=["2026-02-04"])
    status: OrderStatus = OrderStatus.PENDING

    @model_validator(mode="before")
    @classmethod
    def fill_cash_sentinel(cls, data):
        if not isinstance(data, dict):
            return data
        key = "transaction_id" if "transaction_id" in data else "transactionId"
        method = data.get("paymentMethod", data.get("payment_method"))
        txn = data.get(key)
        if isinstance(txn, str):
            txn = txn.strip()
        if method == PaymentMethod.COD and not txn:
            settings = get_settings()
            table = data.get("tableNumber", data.get("table_number"))
            sentinel = (
                settings.walk_in_transaction_sentinel if table
                else settings.cod_transaction_sentinel
            )
            data = {**data, key: sentinel}
        elif isinstance(txn, str):
            data = {**data, key: txn}
        return data

    @field_validator("delivery_date")
    @classmethod
    def validate_delivery_date(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return dates.to_iso_date(v)

    @model_validator(mode="after")
    def check_consistency(self) -> "OrderCreate":
        if self.payment_method == PaymentMethod.UPI and not self.transaction_id:
            raise ValueError("transactionId is required for UPI payments")
        if self.item_count != basket_item_count(self.items):
            raise ValueError("itemCount does not match the item quantities")
        if abs(self.total_amount - basket_total(self.items)) > 0.01:
            raise ValueError("totalAmount does not match the item prices")
        sellers = {line.caterer_id for line in self.items}
        if sellers - {self.caterer_id}:
            raise ValueError("All items must belong to the order's caterer")
        return self

    @property
    def fulfillment_type(self) -> FulfillmentType:
        if self.table_number is not None:
            return FulfillmentType.TABLE
        return FulfillmentType.DELIVERY

    def to_payload(self) -> dict:
        """JSON-ready camelCase body for the orders service."""
        return self.model_dump(by_alias=True, mode="json")


class StatusUpdate(CamelModel):
    """Seller-initiated status change."""
    status: OrderStatus


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class OrderResponse(CamelModel):
    """A stored order as returned by the orders service."""
    id: Optional[int] = None
    order_id: str
    customer_id: int
    caterer_id: int
    items: List[CartLine]
    total_amount: float
    payment_method: PaymentMethod
    transaction_id: str
    proof_reference: Optional[str] = None
    delivery_address: Optional[str] = None
    table_number: Optional[int] = None
    item_count: int
    order_date: datetime
    delivery_date: Optional[str] = None
    status: OrderStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def fulfillment_type(self) -> FulfillmentType:
        if self.table_number is not None:
            return FulfillmentType.TABLE
        return FulfillmentType.DELIVERY


class MenuItemResponse(CamelModel):
    """A menu item as served by the availability endpoint."""
    id: int
    seller_id: int = Field(..., alias="catererId")
    name: str
    description: Optional[str] = None
    price: float
    category: Optional[str] = None
    cuisine: Optional[str] = None
    meal_type: Optional[str] = Field(None, alias="type")
    available_dates: List[str] = Field(default_factory=list)
    in_stock: bool = True

    def to_cart_line(self, quantity: int = 1) -> CartLine:
        return CartLine(
            item_id=self.id,
            name=self.name,
            price=self.price,
            quantity=quantity,
            caterer_id=self.seller_id,
            category=self.category,
            cuisine=self.cuisine,
            meal_type=self.meal_type,
        )


class SellerResponse(CamelModel):
    """Public seller profile."""
    id: int
    name: str
    service_name: Optional[str] = None
    seller_type: SellerType = SellerType.CATERER
    address: Optional[str] = None
    payment_address: Optional[str] = None

    @property
    def accepts_upi(self) -> bool:
        return bool(self.payment_address and self.payment_address.strip())


class TableResponse(CamelModel):
    """A restaurant table and its scannable payload."""
    id: int
    seller_id: int = Field(..., alias="catererId")
    table_number: str
    qr_data: str
    is_active: bool = True


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    timestamp: datetime
