"""
Policies choosing which stored order to sacrifice when storage overflows.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
import logging

from .order import Order
from .storage import StorageTier

logger = logging.getLogger(__name__)


class EvictionPolicy(ABC):
    """Picks the single order to discard from a full tier."""

    name: str = "base"

    @abstractmethod
    def select_candidate(self, tier: StorageTier, now: datetime) -> Optional[Order]:
        ...


class FreshnessEvictionPolicy(EvictionPolicy):
    """Discard the least fresh order; on a freshness tie, the cheaper one."""

    name = "freshness"

    def select_candidate(self, tier: StorageTier, now: datetime) -> Optional[Order]:
        orders = tier.all_orders()
        if not orders:
            logger.debug(f"No orders in {tier.name} to evict")
            return None

        for order in orders:
            logger.debug(
                f"Evaluating {order.id} in {tier.name}: "
                f"freshness {order.freshness_ratio(now):.4f}, price {order.price}"
            )

        victim = min(orders, key=lambda o: (o.freshness_ratio(now), o.price))
        logger.info(
            f"Selected {victim.id} for eviction from {tier.name} "
            f"(freshness {victim.freshness_ratio(now):.4f})"
        )
        return victim
