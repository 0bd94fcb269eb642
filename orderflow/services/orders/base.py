"""
Order Gateway Abstract Base Class

Defines the interface contract for reaching the durable order store. Both
the in-memory gateway and the HTTP gateway implement these methods, so the
checkout, reorder and status flows run identically against either.

Error contract (all implementations):
    - create_order: OrderGatewayError on any remote failure
    - get_order / update_status: OrderNotFoundError for unknown ids
    - update_status: InvalidStatusTransitionError for illegal moves
"""

from abc import ABC, abstractmethod
from typing import Optional

from orderflow.schemas import (
    OrderCreate,
    OrderResponse,
    OrderStatus,
    SellerResponse,
    TableResponse,
)


class BaseOrderGateway(ABC):
    """Abstract base class for order gateways."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        pass

    @abstractmethod
    async def create_order(self, order: OrderCreate) -> OrderResponse:
        """
        Durably store a new order.

        Args:
            order: Frozen order snapshot with a client-generated order id

        Returns:
            OrderResponse: The stored order, including the store's timestamps
        """
        pass

    @abstractmethod
    async def get_order(self, order_id: str) -> OrderResponse:
        pass

    @abstractmethod
    async def list_customer_orders(self, customer_id: int) -> list[OrderResponse]:
        """Orders placed by a customer, newest first."""
        pass

    @abstractmethod
    async def list_seller_orders(
        self,
        seller_id: int,
        status: Optional[OrderStatus] = None,
        delivery_date: Optional[str] = None,
    ) -> list[OrderResponse]:
        """Orders received by a seller, newest first, optionally filtered."""
        pass

    @abstractmethod
    async def update_status(self, order_id: str, status: OrderStatus) -> OrderResponse:
        pass

    @abstractmethod
    async def get_seller(self, seller_id: int) -> Optional[SellerResponse]:
        """Seller profile, or None when the seller is unknown."""
        pass

    @abstractmethod
    async def list_tables(self, seller_id: int) -> list[TableResponse]:
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        pass
