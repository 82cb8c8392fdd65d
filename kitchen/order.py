"""
Kitchen orders and their freshness model.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional
import math

from kitchen_types import IDEAL_LOCATION, StorageLocation, Temperature

IDEAL_DECAY_RATE = 1.0
NON_IDEAL_DECAY_RATE = 2.0


@dataclass(eq=False)
class Order:
    """A cooked order waiting for pickup.

    Everything but ``created_at`` and ``current_location`` is fixed when the
    order is built. Those two are written by the engine and its storage tiers
    only.
    """
    id: str
    name: str
    temperature: Temperature
    price: Decimal
    shelf_life_seconds: int
    created_at: Optional[datetime] = field(default=None, repr=False)
    current_location: Optional[StorageLocation] = None

    @property
    def ideal_location(self) -> StorageLocation:
        return IDEAL_LOCATION[self.temperature]

    @property
    def is_placed(self) -> bool:
        return self.created_at is not None

    def decay_rate(self) -> float:
        """Freshness lost per elapsed second at the current location."""
        if self.current_location is None or self.current_location == self.ideal_location:
            return IDEAL_DECAY_RATE
        return NON_IDEAL_DECAY_RATE

    def age_seconds(self, now: datetime) -> int:
        """Whole seconds since placement (0 for an unplaced order)."""
        if self.created_at is None:
            return 0
        elapsed = (now - self.created_at).total_seconds()
        return max(0, math.floor(elapsed))

    def remaining_freshness(self, now: datetime) -> float:
        remaining = self.shelf_life_seconds - self.age_seconds(now) * self.decay_rate()
        return max(0.0, remaining)

    def freshness_ratio(self, now: datetime) -> float:
        """Remaining freshness as a fraction of shelf life, in [0, 1]."""
        if self.shelf_life_seconds <= 0:
            return 0.0
        ratio = self.remaining_freshness(now) / self.shelf_life_seconds
        return min(1.0, max(0.0, ratio))

    def has_expired(self, now: datetime) -> bool:
        return self.remaining_freshness(now) <= 0
