"""
Kitchen storage engine: placement, relocation, eviction and pickup of orders.
"""

from typing import Callable, Dict, List, Optional, Any, Set
from datetime import datetime, timezone
import threading
import logging

from config import Settings, get_settings
from kitchen_types import ActionKind, StorageLocation
from .actions import ActionRecord
from .eviction import EvictionPolicy, FreshnessEvictionPolicy
from .order import Order
from .storage import StorageTier

logger = logging.getLogger(__name__)

OVERFLOW_REASON = "overflow"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _empty_metrics() -> Dict[str, int]:
    return {
        "orders_placed": 0,
        "orders_moved": 0,
        "orders_picked_up": 0,
        "orders_discarded_expired": 0,
        "orders_discarded_overflow": 0,
        "placements_rejected": 0,
        "placements_stalled": 0,
    }


class KitchenEngine:
    """Holds orders in heater, cooler and shelf storage until they are picked up.

    Every public call runs under one lock, so a placement (which may touch
    several tiers and the log) is never interleaved with another placement or
    a pickup. The action log order is the order in which calls took the lock.

    `place` and `pickup` read `clock` once the lock is held unless the caller
    passes an explicit `now`, so action timestamps never run backwards in the
    log.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        eviction_policy: Optional[EvictionPolicy] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.settings = settings or get_settings()
        self.eviction_policy = eviction_policy or FreshnessEvictionPolicy()
        self.clock = clock

        storage = self.settings.storage
        self.heater = StorageTier("heater", StorageLocation.HEATER, storage.heater_capacity)
        self.cooler = StorageTier("cooler", StorageLocation.COOLER, storage.cooler_capacity)
        self.shelf = StorageTier("shelf", StorageLocation.SHELF, storage.shelf_capacity)
        self.tiers: Dict[StorageLocation, StorageTier] = {
            StorageLocation.HEATER: self.heater,
            StorageLocation.COOLER: self.cooler,
            StorageLocation.SHELF: self.shelf,
        }

        self._lock = threading.RLock()
        self._actions: List[ActionRecord] = []
        self._discarded: Set[str] = set()
        self._picked_up: Set[str] = set()
        self.metrics = _empty_metrics()

        logger.info(
            f"Kitchen engine initialized with {self.eviction_policy.name} eviction "
            f"({self.heater}, {self.cooler}, {self.shelf})"
        )

    # Public API

    def place(self, order: Order, now: Optional[datetime] = None) -> bool:
        """Store a new order.

        Returns False when the order could not be placed: its id was already
        seen, or no shelf slot could be freed. Neither case is recorded in the
        action log.
        """
        with self._lock:
            if now is None:
                now = self.clock()
            if self._is_known(order.id):
                self.metrics["placements_rejected"] += 1
                logger.warning(f"Rejected placement of {order.id}: id already handled by the kitchen")
                return False

            order.created_at = now
            ideal = self.tiers[order.ideal_location]
            logger.debug(f"Placing order {order.id} ({order.temperature.value})")

            if ideal.has_space():
                self._store(order, ideal, now)
                return True

            if self.shelf.has_space():
                self._store(order, self.shelf, now)
                return True

            if not self._relocate_from_shelf(now):
                self._evict_from_shelf(now)

            if self.shelf.has_space():
                self._store(order, self.shelf, now)
                return True

            order.created_at = None
            self.metrics["placements_stalled"] += 1
            logger.warning(
                f"Placement of {order.id} stalled: no space could be freed on the "
                f"shelf ({self.shelf})"
            )
            return False

    def pickup(self, order_id: str, now: Optional[datetime] = None) -> Optional[Order]:
        """Hand over a stored order, or None if it is gone or no longer fresh."""
        with self._lock:
            if now is None:
                now = self.clock()
            if order_id in self._discarded:
                logger.info(f"Pickup of {order_id} ignored: order was discarded")
                return None

            tier = self._find_tier(order_id)
            if tier is None:
                logger.warning(f"Pickup attempted: order {order_id} not found")
                return None

            order = tier.find(order_id)
            if order.has_expired(now):
                tier.remove(order_id)
                self._discarded.add(order_id)
                remaining = order.remaining_freshness(now)
                self._record(
                    now, order, ActionKind.DISCARD, tier.location,
                    reason=f"expired ({remaining:.1f}s freshness remaining)",
                )
                self.metrics["orders_discarded_expired"] += 1
                logger.warning(f"Pickup failed: order {order_id} expired in {tier.name}")
                return None

            tier.remove(order_id)
            self._picked_up.add(order_id)
            self._record(now, order, ActionKind.PICKUP, tier.location)
            self.metrics["orders_picked_up"] += 1
            return order

    def get_actions(self) -> List[ActionRecord]:
        """Snapshot of the action log in call order."""
        with self._lock:
            return list(self._actions)

    def snapshot(self) -> Dict[StorageLocation, List[Order]]:
        """Orders currently held by each tier."""
        with self._lock:
            return {location: tier.all_orders() for location, tier in self.tiers.items()}

    def find_order(self, order_id: str) -> Optional[Order]:
        with self._lock:
            tier = self._find_tier(order_id)
            return tier.find(order_id) if tier else None

    def get_tier_status(self, location: StorageLocation) -> Dict[str, Any]:
        """Get occupancy details of one storage tier."""
        with self._lock:
            tier = self.tiers[location]
            return {
                "name": tier.name,
                "location": location.value,
                "capacity": f"{tier.count()}/{tier.capacity}",
                "available_capacity": tier.available_capacity,
                "orders": [order.id for order in tier.all_orders()],
            }

    def get_kitchen_status(self) -> Dict[str, Any]:
        """Get overall kitchen status."""
        with self._lock:
            return {
                "eviction_policy": self.eviction_policy.name,
                "tiers": {
                    location.value: self.get_tier_status(location)
                    for location in self.tiers
                },
                "actions_recorded": len(self._actions),
                "metrics": self.metrics.copy(),
            }

    def reset_kitchen(self):
        """Drop every stored order, the action log and the counters."""
        with self._lock:
            logger.info("Resetting kitchen state")
            for tier in self.tiers.values():
                for order in tier.all_orders():
                    tier.remove(order.id)
            self._actions.clear()
            self._discarded.clear()
            self._picked_up.clear()
            self.metrics = _empty_metrics()

    # Internals, always called with the lock held

    def _is_known(self, order_id: str) -> bool:
        return (
            order_id in self._discarded
            or order_id in self._picked_up
            or self._find_tier(order_id) is not None
        )

    def _find_tier(self, order_id: str) -> Optional[StorageTier]:
        for tier in (self.heater, self.cooler, self.shelf):
            if order_id in tier:
                return tier
        return None

    def _store(self, order: Order, tier: StorageTier, now: datetime):
        tier.add(order)
        self._record(now, order, ActionKind.PLACE, tier.location)
        self.metrics["orders_placed"] += 1
        logger.debug(f"{tier} after placing {order.id}")

    def _relocate_from_shelf(self, now: datetime) -> bool:
        """Move the oldest movable shelf order into its own tier, if any."""
        for candidate in self.shelf.all_orders():
            target = self.tiers[candidate.ideal_location]
            if target is self.shelf or not target.has_space():
                continue
            if candidate.has_expired(now):
                continue

            self.shelf.remove(candidate.id)
            target.add(candidate)
            self._record(
                now, candidate, ActionKind.MOVE, target.location,
                reason="relocated from shelf to ideal storage",
            )
            self.metrics["orders_moved"] += 1
            return True
        return False

    def _evict_from_shelf(self, now: datetime) -> bool:
        victim = self.eviction_policy.select_candidate(self.shelf, now)
        if victim is None:
            return False

        self.shelf.remove(victim.id)
        self._discarded.add(victim.id)
        self._record(now, victim, ActionKind.DISCARD, self.shelf.location, reason=OVERFLOW_REASON)
        self.metrics["orders_discarded_overflow"] += 1
        logger.warning(f"Discarded {victim.id} from shelf to make room")
        return True

    def _record(
        self,
        now: datetime,
        order: Order,
        action: ActionKind,
        target: StorageLocation,
        reason: Optional[str] = None,
    ):
        record = ActionRecord(
            timestamp=now, order_id=order.id, action=action, target=target, reason=reason
        )
        self._actions.append(record)
        logger.info(str(record))
