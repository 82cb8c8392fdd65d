"""
Scenario Execution Engine - drives order placement and courier pickups against the kitchen
"""
import logging
import random
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from config import SimulationConfig
from kitchen.actions import ActionRecord
from kitchen.engine import KitchenEngine
from kitchen.order import Order

logger = logging.getLogger(__name__)


@dataclass
class ScenarioConfig:
    """Placement cadence and pickup window for one run"""
    rate: timedelta = timedelta(milliseconds=500)
    pickup_min: timedelta = timedelta(seconds=4)
    pickup_max: timedelta = timedelta(seconds=20)
    seed: int = 0  # random if zero
    expiry_buffer: timedelta = timedelta(milliseconds=50)

    def __post_init__(self):
        if self.pickup_max < self.pickup_min:
            raise ValueError(
                f"pickup_max ({self.pickup_max}) must not be below pickup_min ({self.pickup_min})"
            )

    @classmethod
    def from_settings(cls, simulation: SimulationConfig) -> "ScenarioConfig":
        return cls(
            rate=timedelta(milliseconds=simulation.rate_ms),
            pickup_min=timedelta(seconds=simulation.pickup_min_s),
            pickup_max=timedelta(seconds=simulation.pickup_max_s),
            seed=simulation.seed,
            expiry_buffer=timedelta(milliseconds=simulation.expiry_buffer_ms),
        )


@dataclass
class ExecutionResult:
    """Results from a scenario execution"""
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_seconds: float = 0.0

    orders_total: int = 0
    orders_rejected: List[str] = field(default_factory=list)
    actions: List[ActionRecord] = field(default_factory=list)
    metrics: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        """Convert result to dictionary for storage"""
        return {
            'start_time': self.start_time.isoformat(),
            'end_time': self.end_time.isoformat() if self.end_time else None,
            'duration_seconds': self.duration_seconds,
            'orders_total': self.orders_total,
            'orders_rejected': list(self.orders_rejected),
            'actions': [record.to_dict() for record in self.actions],
            'metrics': dict(self.metrics),
        }


class ScenarioExecutor:
    """Places orders at a fixed rate and schedules a pickup for each one.

    Placement happens on the calling thread; every pickup fires from its own
    timer thread after a random delay, so placements and pickups contend for
    the engine the way a real kitchen and its couriers would.
    """

    def __init__(
        self,
        kitchen_engine: KitchenEngine,
        config: Optional[ScenarioConfig] = None,
        sleep: Callable[[float], Any] = time.sleep,
    ):
        self.kitchen_engine = kitchen_engine
        self.config = config or ScenarioConfig()
        self.sleep = sleep
        self.rng = random.Random(self.config.seed) if self.config.seed else random.Random()

    def run(self, orders: List[Order]) -> ExecutionResult:
        """Run every order through the kitchen and wait for all pickups."""
        result = ExecutionResult(start_time=self.kitchen_engine.clock(), orders_total=len(orders))
        started = time.monotonic()
        logger.info(
            f"Starting simulation: {len(orders)} orders, rate={self.config.rate.total_seconds() * 1000:.0f}ms, "
            f"pickup={self.config.pickup_min.total_seconds()}-{self.config.pickup_max.total_seconds()}s"
        )

        timers: List[threading.Timer] = []
        cumulative = timedelta(0)
        try:
            for order in orders:
                if not self.kitchen_engine.place(order):
                    result.orders_rejected.append(order.id)
                else:
                    delay = self.pickup_delay(order, cumulative)
                    timer = threading.Timer(delay, self._pickup, args=(order.id,))
                    timer.name = f"pickup-{order.id}"
                    timer.daemon = True
                    timer.start()
                    timers.append(timer)

                self.sleep(self.config.rate.total_seconds())
                cumulative += self.config.rate
        finally:
            for timer in timers:
                timer.join()

        result.end_time = self.kitchen_engine.clock()
        result.duration_seconds = time.monotonic() - started
        result.actions = self.kitchen_engine.get_actions()
        result.metrics = self.kitchen_engine.metrics.copy()
        logger.info(
            f"Simulation produced {len(result.actions)} actions in {result.duration_seconds:.2f}s"
        )
        return result

    def pickup_delay(self, order: Order, cumulative: timedelta) -> float:
        """Random pickup delay in seconds, capped so it lands before the order expires.

        When the order would expire before the minimum delay, the minimum is
        used and the pickup is expected to find it expired.
        """
        shelf_life = timedelta(seconds=order.shelf_life_seconds)
        latest_safe = max(
            timedelta(milliseconds=1),
            shelf_life - cumulative - self.config.expiry_buffer,
        )
        upper = min(latest_safe, self.config.pickup_max)
        lower = self.config.pickup_min
        if upper < lower:
            upper = lower
        return self.rng.uniform(lower.total_seconds(), upper.total_seconds())

    def _pickup(self, order_id: str):
        picked = self.kitchen_engine.pickup(order_id)
        if picked is None:
            logger.debug(f"Courier left without {order_id}")
