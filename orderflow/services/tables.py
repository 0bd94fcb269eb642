"""
Table Context

Turns a scanned table code into the seller id and table number an
on-premise checkout needs. Table codes are JSON documents:

    {"catererId": 3, "tableNumber": "T5", "restaurantName": "Spice Route"}
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Optional

from orderflow.core.exceptions import InvalidTableCodeError

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"(\d+)\s*$")


@dataclass(frozen=True)
class TableContext:
    seller_id: int
    table_label: str
    table_number: int
    restaurant_name: Optional[str] = None

    @property
    def delivery_address(self) -> str:
        """Address line recorded on table orders."""
        return f"{self.restaurant_name or 'Restaurant'} - Table {self.table_label}"


def table_number_from_label(label) -> int:
    """
    Numeric table number from a label such as ``5``, ``"T5"`` or ``"Table 12"``.

    Raises:
        InvalidTableCodeError: If the label carries no positive number
    """
    if isinstance(label, int) and not isinstance(label, bool):
        number = label
    else:
        match = _DIGITS.search(str(label))
        if not match:
            raise InvalidTableCodeError(f"Table label '{label}' has no table number")
        number = int(match.group(1))
    if number < 1:
        raise InvalidTableCodeError(f"Table label '{label}' has no table number")
    return number


def parse_table_payload(payload: str) -> TableContext:
    """
    Parse a scanned table code.

    Raises:
        InvalidTableCodeError: If the payload is not JSON or lacks the seller
            or table fields
    """
    try:
        data = json.loads(payload)
    except (TypeError, ValueError):
        raise InvalidTableCodeError() from None

    if not isinstance(data, dict):
        raise InvalidTableCodeError()

    seller_id = data.get("catererId")
    label = data.get("tableNumber")
    if not seller_id or label in (None, ""):
        raise InvalidTableCodeError()

    try:
        seller_id = int(seller_id)
    except (TypeError, ValueError):
        raise InvalidTableCodeError() from None

    return TableContext(
        seller_id=seller_id,
        table_label=str(label),
        table_number=table_number_from_label(label),
        restaurant_name=data.get("restaurantName"),
    )


def build_table_payload(seller_id: int, table_label: str, restaurant_name: Optional[str] = None) -> str:
    """Serialize the code payload printed on a table's QR sticker."""
    return json.dumps(
        {"catererId": seller_id, "tableNumber": table_label, "restaurantName": restaurant_name}
    )


async def resolve_table_context(payload: str, gateway) -> TableContext:
    """
    Parse a table code and confirm the table exists and is active.

    Raises:
        InvalidTableCodeError: Malformed payload, unknown or inactive table
    """
    context = parse_table_payload(payload)
    tables = await gateway.list_tables(context.seller_id)
    table = next((t for t in tables if t.table_number == context.table_label), None)
    if table is None:
        logger.info(f"Unknown table {context.table_label} for seller {context.seller_id}")
        raise InvalidTableCodeError("This table is not registered. Please ask the staff for help.")
    if not table.is_active:
        raise InvalidTableCodeError("This table is not taking orders right now.")
    return context
