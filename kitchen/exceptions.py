"""
Exceptions raised by the kitchen storage engine.
"""


class KitchenError(Exception):
    """Base class for kitchen errors."""


class CapacityExceeded(KitchenError):
    """An order was added to a storage tier that has no free slot."""

    def __init__(self, tier_name: str, capacity: int):
        super().__init__(f"{tier_name} is full (capacity {capacity})")
        self.tier_name = tier_name
        self.capacity = capacity


class InvalidOrder(KitchenError):
    """Raw order data could not be turned into a kitchen order."""
