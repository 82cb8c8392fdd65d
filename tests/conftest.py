"""Pytest fixtures for the kitchen storage engine."""

import itertools
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from config import Settings, SimulationConfig, StorageConfig
from kitchen.engine import KitchenEngine
from kitchen.order import Order
from kitchen_types import Temperature


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def ticking_clock(now):
    """Clock that moves one second forward on every read."""
    ticks = itertools.count()

    def _clock() -> datetime:
        return now + timedelta(seconds=next(ticks))

    return _clock


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        data_dir=tmp_path,
        storage=StorageConfig(heater_capacity=6, cooler_capacity=6, shelf_capacity=12),
        simulation=SimulationConfig(rate_ms=0, pickup_min_s=0, pickup_max_s=0, seed=7),
    )


@pytest.fixture
def engine(settings) -> KitchenEngine:
    return KitchenEngine(settings=settings)


@pytest.fixture
def make_order():
    def _make(
        order_id: str,
        temperature: Temperature = Temperature.HOT,
        price: str = "10.00",
        shelf_life: int = 300,
        name: str = "",
    ) -> Order:
        return Order(
            id=order_id,
            name=name or f"dish-{order_id}",
            temperature=temperature,
            price=Decimal(price),
            shelf_life_seconds=shelf_life,
        )

    return _make
