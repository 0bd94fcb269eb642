"""
SQLAlchemy Database Models

Durable side of the order pipeline:
- Sellers (caterers and restaurants) with their direct-transfer address
- Menu items with date-scoped availability and an on-hand flag
- Orders with an immutable line snapshot and a mutable status
- Restaurant tables for on-premise ordering
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from orderflow.database import Base
from orderflow.schemas import FulfillmentType, OrderStatus, PaymentMethod, SellerType


class Seller(Base):
    """A caterer or restaurant account whose menu and orders are acted upon."""
    __tablename__ = "sellers"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    service_name = Column(String(150), nullable=True)
    seller_type = Column(Enum(SellerType), default=SellerType.CATERER, nullable=False)
    address = Column(String(255), nullable=True)

    # UPI id or payment QR reference; None disables direct transfer
    payment_address = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Seller #{self.id} - {self.name}>"


class MenuItem(Base):
    """
    A menu item and its availability.

    Purchasable on a date iff the date is in ``available_dates`` and
    ``in_stock`` is set.
    """
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    seller_id = Column(Integer, ForeignKey("sellers.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    category = Column(String(20), nullable=True)  # veg / non-veg
    cuisine = Column(String(50), nullable=True)
    meal_type = Column(String(20), nullable=True)  # breakfast, lunch, ...
    available_dates = Column(JSON, nullable=False, default=list)
    in_stock = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def is_available_on(self, day: str) -> bool:
        return bool(self.in_stock) and day in (self.available_dates or [])

    def __repr__(self):
        return f"<MenuItem #{self.id} - {self.name}>"


class Order(Base):
    """
    Submitted order.

    ``items`` and ``total_amount`` are a snapshot taken at submission and are
    never updated; only ``status`` (and ``updated_at``) change afterwards.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(String(64), nullable=False, unique=True, index=True)

    customer_id = Column(Integer, nullable=False, index=True)
    caterer_id = Column(Integer, nullable=False, index=True)

    # =========================================================================
    # LINE SNAPSHOT
    # =========================================================================
    items = Column(JSON, nullable=False)
    total_amount = Column(Float, nullable=False)
    item_count = Column(Integer, nullable=False)

    # =========================================================================
    # PAYMENT
    # =========================================================================
    payment_method = Column(Enum(PaymentMethod), nullable=False)
    transaction_id = Column(String(100), nullable=False)
    proof_reference = Column(String(500), nullable=True)

    # =========================================================================
    # FULFILMENT
    # =========================================================================
    delivery_address = Column(String(255), nullable=True)
    table_number = Column(Integer, nullable=True)
    order_date = Column(DateTime(timezone=True), nullable=False)
    delivery_date = Column(String(10), nullable=True, index=True)

    status = Column(
        Enum(OrderStatus),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @property
    def fulfillment_type(self) -> FulfillmentType:
        if self.table_number is not None:
            return FulfillmentType.TABLE
        return FulfillmentType.DELIVERY

    def __repr__(self):
        return f"<Order {self.order_id} - seller {self.caterer_id} - {self.status.value}>"


class RestaurantTable(Base):
    """A physical table with a scannable code for on-premise orders."""
    __tablename__ = "restaurant_tables"
    __table_args__ = (UniqueConstraint("seller_id", "table_number"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    seller_id = Column(Integer, ForeignKey("sellers.id"), nullable=False, index=True)
    table_number = Column(String(20), nullable=False)
    qr_data = Column(Text, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<RestaurantTable {self.table_number} - seller {self.seller_id}>"
