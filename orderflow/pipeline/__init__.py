"""
                        Order Placement Pipeline

Client-side flow from basket to submitted order. All components share one
``CheckoutSession``; remote collaborators come from the service factories.

Usage:
    from orderflow.pipeline import create_pipeline

    pipeline = create_pipeline(buyer_id=42)
    pipeline.session.selection.add(line)
    await pipeline.reconciler.change_date("2026-02-04")
    result = await pipeline.checkout.checkout(captured_payment)
"""

from dataclasses import dataclass
from typing import Optional

from orderflow.pipeline.checkout import (
    CheckoutOrchestrator,
    CheckoutOutcome,
    CheckoutResult,
    generate_order_id,
)
from orderflow.pipeline.reorder import ReorderFlow, ReorderOutcome, ReorderResult
from orderflow.pipeline.resolver import ResolvedSeller, SellerSource, require_seller, resolve_seller
from orderflow.pipeline.selection import SelectionStore
from orderflow.pipeline.session import CheckoutSession
from orderflow.pipeline.submission import OrderSubmitter
from orderflow.pipeline.validator import (
    BasketReconciler,
    CartValidator,
    DropNotice,
    ReconcileOutcome,
    ValidationResult,
)
from orderflow.services.availability import get_availability_index
from orderflow.services.availability.base import BaseAvailabilityIndex
from orderflow.services.basket_file import BasketFile
from orderflow.services.order_cache import OrderCache
from orderflow.services.orders import get_order_gateway
from orderflow.services.orders.base import BaseOrderGateway
from orderflow.services.status_machine import OrderStatusService


@dataclass
class Pipeline:
    """Components wired around one session."""
    session: CheckoutSession
    gateway: BaseOrderGateway
    validator: CartValidator
    reconciler: BasketReconciler
    checkout: CheckoutOrchestrator
    reorder: ReorderFlow
    status: OrderStatusService


def create_pipeline(
    buyer_id: Optional[int] = None,
    gateway: Optional[BaseOrderGateway] = None,
    availability: Optional[BaseAvailabilityIndex] = None,
    cache: Optional[OrderCache] = None,
    basket: Optional[BasketFile] = None,
) -> Pipeline:
    """
    Build a pipeline, defaulting collaborators to the configured services.

    Pass a ``BasketFile`` to restore the saved basket and keep it saved.
    """
    gateway = gateway or get_order_gateway()
    availability = availability or get_availability_index()
    cache = cache if cache is not None else OrderCache()

    selection = SelectionStore.restore(basket) if basket is not None else None
    session = CheckoutSession(buyer_id=buyer_id, selection=selection)
    validator = CartValidator(availability)
    return Pipeline(
        session=session,
        gateway=gateway,
        validator=validator,
        reconciler=BasketReconciler(session, validator),
        checkout=CheckoutOrchestrator(session, validator, OrderSubmitter(gateway, cache)),
        reorder=ReorderFlow(session, gateway, cache, validator),
        status=OrderStatusService(gateway),
    )


__all__ = [
    "create_pipeline",
    "Pipeline",
    "CheckoutSession",
    "SelectionStore",
    "SellerSource",
    "ResolvedSeller",
    "resolve_seller",
    "require_seller",
    "CartValidator",
    "BasketReconciler",
    "ValidationResult",
    "ReconcileOutcome",
    "DropNotice",
    "OrderSubmitter",
    "CheckoutOrchestrator",
    "CheckoutOutcome",
    "CheckoutResult",
    "generate_order_id",
    "ReorderFlow",
    "ReorderOutcome",
    "ReorderResult",
]
