"""
Selection Store

The in-progress basket: an ordered collection of immutable ``CartLine``
values plus derived totals. It is owned by one ``CheckoutSession`` and only
changes through the methods below.

With a ``BasketFile`` attached, every change is written through to disk so
the basket outlives the process that built it.
"""

import logging
from typing import TYPE_CHECKING, Iterable, Iterator, Optional

from orderflow.core.exceptions import SellerMismatchError
from orderflow.schemas import CartLine, basket_item_count, basket_total

if TYPE_CHECKING:
    from orderflow.services.basket_file import BasketFile

logger = logging.getLogger(__name__)


class SelectionStore:
    """Mutable basket of cart lines, at most one line per item id."""

    def __init__(
        self,
        lines: Optional[Iterable[CartLine]] = None,
        storage: Optional["BasketFile"] = None,
    ):
        self._lines: list[CartLine] = []
        self.storage = storage
        if lines:
            self.replace(lines)

    @classmethod
    def restore(cls, storage: "BasketFile") -> "SelectionStore":
        """Load the saved basket; a basket spanning sellers is discarded."""
        store = cls(storage=storage)
        saved = storage.load()
        try:
            store.replace(saved)
        except SellerMismatchError:
            logger.warning(f"Saved basket at {storage.path} mixes sellers; starting empty")
            store.clear()
        if saved:
            logger.info(f"Restored basket with {len(store)} line(s)")
        return store

    def _changed(self) -> None:
        if self.storage is None:
            return
        try:
            self.storage.save(self._lines)
        except Exception:
            # The in-memory basket stays authoritative
            logger.exception(f"Could not save basket to {self.storage.path}")

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[CartLine]:
        return iter(tuple(self._lines))

    def __contains__(self, item_id: int) -> bool:
        return self._index(item_id) is not None

    @property
    def lines(self) -> tuple[CartLine, ...]:
        """Snapshot of the current lines."""
        return tuple(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def total_amount(self) -> float:
        return basket_total(self._lines)

    @property
    def item_count(self) -> int:
        return basket_item_count(self._lines)

    @property
    def seller_id(self) -> Optional[int]:
        """Seller of the first line, or None for an empty basket."""
        return self._lines[0].caterer_id if self._lines else None

    def _index(self, item_id: int) -> Optional[int]:
        for i, line in enumerate(self._lines):
            if line.item_id == item_id:
                return i
        return None

    def get(self, item_id: int) -> Optional[CartLine]:
        i = self._index(item_id)
        return self._lines[i] if i is not None else None

    def add(self, item: CartLine) -> CartLine:
        """
        Add one unit of ``item``: a new line with quantity 1, or +1 on the
        existing line.

        Raises:
            SellerMismatchError: If the basket holds another seller's items
        """
        if self._lines and item.caterer_id != self.seller_id:
            raise SellerMismatchError(self.seller_id, item.caterer_id)

        i = self._index(item.item_id)
        if i is None:
            line = item.model_copy(update={"quantity": 1})
            self._lines.append(line)
        else:
            line = self._lines[i].model_copy(update={"quantity": self._lines[i].quantity + 1})
            self._lines[i] = line
        self._changed()
        return line

    def decrement(self, item_id: int) -> Optional[CartLine]:
        """
        Remove one unit. The line disappears when its quantity would drop
        below 1.

        Returns:
            The updated line, or None if the line was removed or absent
        """
        i = self._index(item_id)
        if i is None:
            return None
        current = self._lines[i]
        if current.quantity <= 1:
            del self._lines[i]
            self._changed()
            return None
        line = current.model_copy(update={"quantity": current.quantity - 1})
        self._lines[i] = line
        self._changed()
        return line

    def remove(self, item_id: int) -> bool:
        i = self._index(item_id)
        if i is None:
            return False
        del self._lines[i]
        self._changed()
        return True

    def remove_many(self, item_ids: Iterable[int]) -> int:
        """Remove every line whose item id is in ``item_ids``; returns the count removed."""
        doomed = set(item_ids)
        before = len(self._lines)
        self._lines = [line for line in self._lines if line.item_id not in doomed]
        removed = before - len(self._lines)
        if removed:
            self._changed()
        return removed

    def subtract(self, lines: Iterable[CartLine]) -> None:
        """
        Take the quantities of ``lines`` out of the basket, dropping lines
        that reach zero. Units added after ``lines`` was read are kept.
        """
        taken: dict[int, int] = {}
        for line in lines:
            taken[line.item_id] = taken.get(line.item_id, 0) + line.quantity

        remaining = []
        for line in self._lines:
            left = line.quantity - taken.get(line.item_id, 0)
            if left >= line.quantity:
                remaining.append(line)
            elif left > 0:
                remaining.append(line.model_copy(update={"quantity": left}))
        self._lines = remaining
        self._changed()

    def clear(self) -> None:
        self._lines = []
        self._changed()

    def replace(self, lines: Iterable[CartLine]) -> None:
        """
        Replace the whole basket. Lines sharing an item id are merged by
        summing their quantities.

        Raises:
            SellerMismatchError: If the lines span more than one seller
        """
        merged: list[CartLine] = []
        positions: dict[int, int] = {}
        for line in lines:
            if merged and line.caterer_id != merged[0].caterer_id:
                raise SellerMismatchError(merged[0].caterer_id, line.caterer_id)
            if line.item_id in positions:
                i = positions[line.item_id]
                merged[i] = merged[i].model_copy(
                    update={"quantity": merged[i].quantity + line.quantity}
                )
            else:
                positions[line.item_id] = len(merged)
                merged.append(line)
        self._lines = merged
        self._changed()
        logger.debug(f"Basket replaced with {len(merged)} line(s)")
