"""
Capacity-bounded storage tiers (heater, cooler, shelf).
"""

from typing import Dict, List, Optional
import logging

from kitchen_types import StorageLocation
from .exceptions import CapacityExceeded
from .order import Order

logger = logging.getLogger(__name__)


class StorageTier:
    """A storage area holding up to ``capacity`` orders keyed by order id.

    Orders are kept in insertion order, so ``all_orders()`` lists the oldest
    arrival first. Not synchronized on its own; the engine lock covers it.
    """

    def __init__(self, name: str, location: StorageLocation, capacity: int):
        if capacity < 0:
            raise ValueError(f"capacity must be >= 0, got {capacity}")
        self._name = name
        self._location = location
        self._capacity = capacity
        self._orders: Dict[str, Order] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def location(self) -> StorageLocation:
        return self._location

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def available_capacity(self) -> int:
        return max(0, self._capacity - len(self._orders))

    def count(self) -> int:
        return len(self._orders)

    def has_space(self) -> bool:
        return len(self._orders) < self._capacity

    def add(self, order: Order) -> None:
        """Store ``order`` here and point its location at this tier."""
        if not self.has_space():
            raise CapacityExceeded(self._name, self._capacity)
        self._orders[order.id] = order
        order.current_location = self._location
        logger.debug(f"{order.id} stored in {self}")

    def remove(self, order_id: str) -> bool:
        return self._orders.pop(order_id, None) is not None

    def find(self, order_id: str) -> Optional[Order]:
        return self._orders.get(order_id)

    def all_orders(self) -> List[Order]:
        """Snapshot of the stored orders, oldest first."""
        return list(self._orders.values())

    def __contains__(self, order_id: object) -> bool:
        return order_id in self._orders

    def __len__(self) -> int:
        return len(self._orders)

    def __repr__(self) -> str:
        return f"{self._name} ({len(self._orders)}/{self._capacity})"
