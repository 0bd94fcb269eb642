"""
                        Services Module

Collaborators of the checkout pipeline. Remote-facing services have an
in-memory (development) and an HTTP (staging/production) implementation
behind a common base class, chosen by ENV_MODE.

Services:
    - availability: per-seller, per-date purchasable item lookup
    - orders: durable order store gateway
    - order_cache: file-locked local order history
    - basket_file: file-locked saved basket
    - payment: payment capture strategies (cash, UPI)
    - status_machine: allowed order status transitions
    - tables: table code parsing for on-premise orders
"""

from orderflow.services.basket_file import BasketFile
from orderflow.services.order_cache import OrderCache

__all__ = ["BasketFile", "OrderCache"]
