"""
Kitchen order storage with freshness tracking and overflow handling.
"""

from .actions import ActionRecord
from .engine import KitchenEngine
from .eviction import EvictionPolicy, FreshnessEvictionPolicy
from .exceptions import CapacityExceeded, InvalidOrder, KitchenError
from .order import Order
from .storage import StorageTier

__all__ = [
    "ActionRecord",
    "KitchenEngine",
    "EvictionPolicy",
    "FreshnessEvictionPolicy",
    "CapacityExceeded",
    "InvalidOrder",
    "KitchenError",
    "Order",
    "StorageTier",
]
