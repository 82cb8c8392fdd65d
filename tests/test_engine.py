"""Tests for placement, relocation, eviction and pickup in the kitchen engine."""
import logging
import threading
from datetime import timedelta

import pytest

from config import Settings, StorageConfig
from kitchen.engine import KitchenEngine
from kitchen_types import ActionKind, StorageLocation, Temperature


def _actions_for(engine, order_id):
    return [a for a in engine.get_actions() if a.order_id == order_id]


def _kinds(actions):
    return [(a.action, a.target) for a in actions]


def _fill(engine, make_order, prefix, count, temperature, now, **kwargs):
    orders = [make_order(f"{prefix}{i}", temperature, **kwargs) for i in range(count)]
    for order in orders:
        assert engine.place(order, now)
    return orders


def test_hot_order_placed_in_heater(engine, make_order, now):
    order = make_order("h1", Temperature.HOT, shelf_life=300)

    assert engine.place(order, now) is True

    actions = _actions_for(engine, "h1")
    assert _kinds(actions) == [(ActionKind.PLACE, StorageLocation.HEATER)]
    assert order.current_location == StorageLocation.HEATER
    assert order.created_at == now
    assert actions[0].timestamp == now


def test_cold_and_room_orders_go_to_ideal_tier(engine, make_order, now):
    cold = make_order("c1", Temperature.COLD)
    room = make_order("r1", Temperature.ROOM)
    engine.place(cold, now)
    engine.place(room, now)

    assert cold.current_location == StorageLocation.COOLER
    assert room.current_location == StorageLocation.SHELF


def test_full_heater_overflows_to_shelf(engine, make_order, now):
    _fill(engine, make_order, "h", 6, Temperature.HOT, now)
    extra = make_order("extra", Temperature.HOT)

    assert engine.place(extra, now)
    assert _kinds(_actions_for(engine, "extra")) == [(ActionKind.PLACE, StorageLocation.SHELF)]
    assert extra.decay_rate() == 2.0


def test_full_shelf_relocates_before_placing(engine, make_order, now):
    _fill(engine, make_order, "h", 6, Temperature.HOT, now)
    _fill(engine, make_order, "c", 6, Temperature.COLD, now)
    stray = make_order("stray-cold", Temperature.COLD)
    engine.place(stray, now)
    _fill(engine, make_order, "r", 11, Temperature.ROOM, now)
    assert not engine.shelf.has_space()

    assert engine.pickup("c0", now) is not None
    new = make_order("new-hot", Temperature.HOT)
    assert engine.place(new, now)

    tail = engine.get_actions()[-2:]
    assert (tail[0].action, tail[0].order_id, tail[0].target) == (
        ActionKind.MOVE, "stray-cold", StorageLocation.COOLER)
    assert (tail[1].action, tail[1].order_id, tail[1].target) == (
        ActionKind.PLACE, "new-hot", StorageLocation.SHELF)
    assert stray.current_location == StorageLocation.COOLER
    assert engine.metrics["orders_moved"] == 1
    assert engine.metrics["orders_discarded_overflow"] == 0


def test_full_shelf_relocates_hot_order_to_heater(engine, make_order, now):
    _fill(engine, make_order, "h", 6, Temperature.HOT, now)
    _fill(engine, make_order, "c", 6, Temperature.COLD, now)
    stray = make_order("stray-hot", Temperature.HOT)
    engine.place(stray, now)
    _fill(engine, make_order, "r", 11, Temperature.ROOM, now)
    assert stray.current_location == StorageLocation.SHELF
    assert not engine.shelf.has_space()

    assert engine.pickup("h0", now) is not None
    new = make_order("new-cold", Temperature.COLD)
    assert engine.place(new, now)

    tail = engine.get_actions()[-2:]
    assert (tail[0].action, tail[0].order_id, tail[0].target) == (
        ActionKind.MOVE, "stray-hot", StorageLocation.HEATER)
    assert (tail[1].action, tail[1].order_id, tail[1].target) == (
        ActionKind.PLACE, "new-cold", StorageLocation.SHELF)
    assert stray.current_location == StorageLocation.HEATER
    assert stray.decay_rate() == 1.0
    assert engine.metrics["orders_moved"] == 1


def test_full_shelf_without_relocation_evicts(engine, make_order, now):
    _fill(engine, make_order, "h", 6, Temperature.HOT, now)
    for i in range(12):
        engine.place(make_order(f"r{i}", Temperature.ROOM, price=f"{10 + i}.00"), now)

    new = make_order("new-hot", Temperature.HOT)
    assert engine.place(new, now + timedelta(seconds=1))

    tail = engine.get_actions()[-2:]
    assert (tail[0].action, tail[0].order_id, tail[0].target, tail[0].reason) == (
        ActionKind.DISCARD, "r0", StorageLocation.SHELF, "overflow")
    assert (tail[1].action, tail[1].order_id) == (ActionKind.PLACE, "new-hot")
    assert engine.shelf.count() == 12
    assert engine.pickup("r0", now + timedelta(seconds=2)) is None


def test_relocation_takes_oldest_eligible_shelf_order(engine, make_order, now):
    _fill(engine, make_order, "h", 6, Temperature.HOT, now)
    _fill(engine, make_order, "c", 6, Temperature.COLD, now)
    engine.place(make_order("room-first", Temperature.ROOM), now)
    engine.place(make_order("cold-old", Temperature.COLD, price="1.00"), now)
    engine.place(make_order("cold-young", Temperature.COLD, price="99.00"), now)
    _fill(engine, make_order, "r", 9, Temperature.ROOM, now)

    engine.pickup("c0", now)
    engine.place(make_order("new-hot", Temperature.HOT), now)

    moves = [a for a in engine.get_actions() if a.action == ActionKind.MOVE]
    assert [a.order_id for a in moves] == ["cold-old"]
    assert "cold-young" in engine.shelf


def test_expired_shelf_order_is_not_relocated(engine, make_order, now):
    _fill(engine, make_order, "h", 6, Temperature.HOT, now)
    _fill(engine, make_order, "c", 6, Temperature.COLD, now)
    stale = make_order("stale-cold", Temperature.COLD, shelf_life=1)
    engine.place(stale, now)
    _fill(engine, make_order, "r", 11, Temperature.ROOM, now)

    engine.pickup("c0", now)
    later = now + timedelta(seconds=5)
    assert engine.place(make_order("new-hot", Temperature.HOT), later)

    stale_actions = _actions_for(engine, "stale-cold")
    assert _kinds(stale_actions) == [
        (ActionKind.PLACE, StorageLocation.SHELF),
        (ActionKind.DISCARD, StorageLocation.SHELF),
    ]
    assert stale_actions[-1].reason == "overflow"
    assert engine.cooler.count() == 5


def test_expired_pickup_is_discarded(engine, make_order, now):
    order = make_order("short", Temperature.HOT, shelf_life=2)
    engine.place(order, now)

    assert engine.pickup("short", now + timedelta(seconds=3)) is None

    last = _actions_for(engine, "short")[-1]
    assert last.action == ActionKind.DISCARD
    assert last.target == StorageLocation.HEATER
    assert last.reason.startswith("expired")
    assert engine.heater.count() == 0
    assert engine.metrics["orders_discarded_expired"] == 1


def test_immediate_pickup_returns_order(engine, make_order, now):
    order = make_order("quick", Temperature.COLD)
    engine.place(order, now)
    before = engine.cooler.count()

    assert engine.pickup("quick", now) is order

    assert _kinds(_actions_for(engine, "quick")) == [
        (ActionKind.PLACE, StorageLocation.COOLER),
        (ActionKind.PICKUP, StorageLocation.COOLER),
    ]
    assert engine.cooler.count() == before - 1


def test_repeated_pickup_is_idempotent(engine, make_order, now):
    engine.place(make_order("gone", shelf_life=1), now)
    engine.place(make_order("taken"), now)

    engine.pickup("gone", now + timedelta(seconds=5))
    engine.pickup("taken", now)
    count = len(engine.get_actions())

    for _ in range(2):
        assert engine.pickup("gone", now + timedelta(seconds=6)) is None
        assert engine.pickup("taken", now + timedelta(seconds=6)) is None
    assert len(engine.get_actions()) == count


def test_unknown_pickup_returns_none(engine, now):
    assert engine.pickup("nope", now) is None
    assert engine.get_actions() == []


def test_duplicate_or_finished_ids_are_rejected(engine, make_order, now):
    engine.place(make_order("dup"), now)
    assert engine.place(make_order("dup"), now) is False

    engine.pickup("dup", now)
    assert engine.place(make_order("dup"), now) is False

    assert engine.metrics["placements_rejected"] == 2
    assert len(_actions_for(engine, "dup")) == 2


def test_stalled_placement_is_reported(make_order, now, tmp_path):
    settings = Settings(
        data_dir=tmp_path,
        storage=StorageConfig(heater_capacity=0, cooler_capacity=0, shelf_capacity=0),
    )
    engine = KitchenEngine(settings=settings)
    order = make_order("stuck")

    assert engine.place(order, now) is False
    assert engine.get_actions() == []
    assert engine.metrics["placements_stalled"] == 1
    assert order.current_location is None
    assert engine.find_order("stuck") is None


def test_action_log_snapshot_is_detached(engine, make_order, now):
    engine.place(make_order("a"), now)
    snapshot = engine.get_actions()
    engine.place(make_order("b"), now)

    assert len(snapshot) == 1
    assert len(engine.get_actions()) == 2


def test_kitchen_status_and_reset(engine, make_order, now):
    engine.place(make_order("h1"), now)
    engine.place(make_order("r1", Temperature.ROOM), now)

    status = engine.get_kitchen_status()
    assert status["eviction_policy"] == "freshness"
    assert status["tiers"]["heater"]["capacity"] == "1/6"
    assert status["tiers"]["shelf"]["orders"] == ["r1"]
    assert status["metrics"]["orders_placed"] == 2

    engine.reset_kitchen()
    assert engine.get_actions() == []
    assert all(not orders for orders in engine.snapshot().values())
    assert engine.metrics["orders_placed"] == 0


def _assert_invariants(engine):
    snapshot = engine.snapshot()
    seen = set()
    for location, orders in snapshot.items():
        assert len(orders) <= engine.tiers[location].capacity
        for order in orders:
            assert order.id not in seen
            seen.add(order.id)


def test_capacity_and_uniqueness_hold_under_overflow(engine, make_order, now):
    temps = [Temperature.HOT, Temperature.COLD, Temperature.ROOM]
    for i in range(60):
        engine.place(make_order(f"o{i}", temps[i % 3], shelf_life=30 + i), now + timedelta(seconds=i))
        _assert_invariants(engine)
        if i % 4 == 0:
            engine.pickup(f"o{i // 2}", now + timedelta(seconds=i))
            _assert_invariants(engine)


def test_concurrent_place_and_pickup(engine, make_order, now):
    temps = [Temperature.HOT, Temperature.COLD, Temperature.ROOM]
    errors = []
    stop = threading.Event()

    def producer(worker):
        for i in range(40):
            order = make_order(f"w{worker}-{i}", temps[(worker + i) % 3])
            engine.place(order, now)
            if i % 2:
                engine.pickup(f"w{worker}-{i - 1}", now)

    def watcher():
        while not stop.is_set():
            try:
                _assert_invariants(engine)
            except AssertionError as e:
                errors.append(e)
                return

    check = threading.Thread(target=watcher)
    check.start()
    workers = [threading.Thread(target=producer, args=(w,)) for w in range(6)]
    for t in workers:
        t.start()
    for t in workers:
        t.join()
    stop.set()
    check.join()

    assert errors == []
    _assert_invariants(engine)

    actions = engine.get_actions()
    placed = [a for a in actions if a.action == ActionKind.PLACE]
    assert len(placed) == engine.metrics["orders_placed"] == 240
    terminal = [a.order_id for a in actions if a.action in (ActionKind.PICKUP, ActionKind.DISCARD)]
    assert len(terminal) == len(set(terminal))


@pytest.mark.parametrize("temperature,location", [
    (Temperature.HOT, StorageLocation.HEATER),
    (Temperature.COLD, StorageLocation.COOLER),
    (Temperature.ROOM, StorageLocation.SHELF),
])
def test_pickup_reports_holding_tier(engine, make_order, now, temperature, location):
    engine.place(make_order("x", temperature), now)
    engine.pickup("x", now)
    assert _actions_for(engine, "x")[-1].target == location


def test_calls_without_now_read_the_engine_clock(settings, make_order, ticking_clock, now):
    engine = KitchenEngine(settings=settings, clock=ticking_clock)
    order = make_order("h1")

    assert engine.place(order)
    assert engine.pickup("h1") is order

    assert [a.timestamp for a in engine.get_actions()] == [now, now + timedelta(seconds=1)]
    assert order.created_at == now


def test_placement_logs_one_info_line(engine, make_order, now, caplog):
    with caplog.at_level(logging.INFO, logger="kitchen.engine"):
        engine.place(make_order("h1"), now)

    info = [r for r in caplog.records if r.name == "kitchen.engine" and r.levelno == logging.INFO]
    assert len(info) == 1
    assert "h1" in info[0].getMessage()
