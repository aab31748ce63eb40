"""Tests du registre des cuves / Tank ledger tests."""

import asyncio

import pytest
from sqlalchemy import update
from sqlalchemy.exc import OperationalError

from fleetfuel.exceptions import (
    CapacityExceededError,
    InsufficientStockError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from fleetfuel.models.tank import MovementDirection, Tank
from fleetfuel.models.vehicle import FuelType
from fleetfuel.services.tank_ledger import TankLedger, check_movement

IN = MovementDirection.INBOUND
OUT = MovementDirection.OUTBOUND


@pytest.fixture
async def ledger(db):
    return TankLedger(db)


@pytest.fixture
async def tank(ledger):
    return await ledger.create_tank("Main diesel", FuelType.DIESEL, capacity=1000, initial_level=200)


def test_check_movement_bounds():
    assert check_movement(1, 200, 1000, IN, 500) == 700
    assert check_movement(1, 200, 1000, OUT, 200) == 0
    assert check_movement(1, 200, 1000, IN, 800) == 1000
    with pytest.raises(InsufficientStockError) as exc:
        check_movement(1, 10, 100, OUT, 20)
    assert exc.value.details == {"tank_id": 1, "level": 10, "capacity": 100, "requested": 20}
    with pytest.raises(CapacityExceededError):
        check_movement(1, 900, 1000, IN, 200)
    with pytest.raises(ValidationError):
        check_movement(1, 10, 100, IN, 0)


async def test_inbound_then_rejected_outbound(ledger, tank):
    movement = await ledger.apply_movement(tank.id, IN, 500, 1, "Ada Admin", value=2500)
    assert movement.level_after == 700
    assert movement.value == 2500

    with pytest.raises(InsufficientStockError) as exc:
        await ledger.apply_movement(tank.id, OUT, 900, 1, "Ada Admin")
    assert exc.value.details["level"] == 700

    refreshed = await ledger.read_tank(tank.id)
    assert refreshed.current_level == 700
    total, items = await ledger.history(tank.id)
    assert total == 1
    assert [m.id for m in items] == [movement.id]


async def test_overflow_rejected_without_clamping(ledger, tank):
    with pytest.raises(CapacityExceededError):
        await ledger.apply_movement(tank.id, IN, 801, 1, "Ada Admin")
    assert (await ledger.read_tank(tank.id)).current_level == 200


async def test_drain_to_zero_and_fill_to_capacity(ledger, tank):
    out = await ledger.apply_movement(tank.id, OUT, 200, 1, "Ada Admin")
    assert out.level_after == 0
    full = await ledger.apply_movement(tank.id, IN, 1000, 1, "Ada Admin")
    assert full.level_after == 1000


async def test_outbound_value_is_dropped(ledger, tank):
    movement = await ledger.apply_movement(tank.id, OUT, 50, 1, "Ada Admin", value=99)
    assert movement.value is None


async def test_unknown_tank(ledger):
    with pytest.raises(NotFoundError):
        await ledger.apply_movement(999, IN, 10, 1, "Ada Admin")


async def test_invalid_inputs(ledger, tank):
    with pytest.raises(ValidationError):
        await ledger.apply_movement(tank.id, IN, -5, 1, "Ada Admin")
    with pytest.raises(ValidationError):
        await ledger.apply_movement(tank.id, IN, 5, 1, "  ")
    with pytest.raises(ValueError):
        await ledger.apply_movement(tank.id, "SIDEWAYS", 5, 1, "Ada Admin")


async def test_request_id_replay_is_applied_once(ledger, tank):
    first = await ledger.apply_movement(tank.id, IN, 100, 1, "Ada Admin", request_id="req-1")
    again = await ledger.apply_movement(tank.id, IN, 100, 1, "Ada Admin", request_id="req-1")
    assert again.id == first.id
    assert (await ledger.read_tank(tank.id)).current_level == 300
    total, _ = await ledger.history(tank.id)
    assert total == 1


async def test_history_is_chronological(ledger, tank):
    quantities = [10, 20, 30]
    for quantity in quantities:
        await ledger.apply_movement(tank.id, IN, quantity, 1, "Ada Admin")
    total, items = await ledger.history(tank.id)
    assert total == 3
    assert [m.quantity_liters for m in items] == quantities
    assert [m.level_after for m in items] == [210, 230, 260]


async def test_create_tank_validates_initial_level(ledger):
    with pytest.raises(ValidationError):
        await ledger.create_tank("Overfilled", FuelType.DIESEL, capacity=100, initial_level=150)
    with pytest.raises(ValidationError):
        await ledger.create_tank("Empty cap", FuelType.DIESEL, capacity=0)


async def test_capacity_edit_cannot_go_below_level(ledger, tank):
    with pytest.raises(ValidationError):
        await ledger.update_tank(tank.id, capacity=150)
    updated = await ledger.update_tank(tank.id, name="Backup diesel", capacity=400)
    assert updated.name == "Backup diesel"
    assert updated.capacity_liters == 400
    assert updated.current_level == 200


# ── Litres decimaux / Decimal litre amounts ─────────────────────────


def test_check_movement_rounds_to_stored_scale():
    assert check_movement(1, 0.1, 0.3, IN, 0.2) == 0.3
    assert check_movement(1, 0.9999999999999999, 1000, OUT, 1.0) == 0


async def test_ten_small_fills_then_exact_drain(ledger):
    tank = await ledger.create_tank("Jerrycan", FuelType.DIESEL, capacity=1000)
    for _ in range(10):
        await ledger.apply_movement(tank.id, IN, 0.1, 1, "Ada Admin")
    assert (await ledger.read_tank(tank.id)).current_level == 1.0
    drained = await ledger.apply_movement(tank.id, OUT, 1.0, 1, "Ada Admin")
    assert drained.level_after == 0


async def test_fill_to_exact_decimal_capacity(ledger):
    tank = await ledger.create_tank("Small", FuelType.DIESEL, capacity=0.3, initial_level=0.1)
    movement = await ledger.apply_movement(tank.id, IN, 0.2, 1, "Ada Admin")
    assert movement.level_after == 0.3
    updated = await ledger.update_tank(tank.id, capacity=0.3)
    assert updated.capacity_liters == 0.3


async def test_quantity_is_stored_at_litre_scale(ledger, tank):
    movement = await ledger.apply_movement(tank.id, IN, 45.37049, 1, "Ada Admin")
    assert movement.quantity_liters == 45.37
    assert movement.level_after == 245.37


# ── Concurrence et atomicite / Concurrency and atomicity ────────────


@pytest.fixture
async def committed_tank(session_factory):
    async with session_factory() as session:
        tank = await TankLedger(session).create_tank("Shared", FuelType.DIESEL, capacity=100, initial_level=50)
        await session.commit()
        return tank.id


async def test_concurrent_outbounds_never_go_negative(session_factory, committed_tank):
    async def drain(name):
        async with session_factory() as session:
            try:
                await TankLedger(session).apply_movement(committed_tank, OUT, 40, 1, name)
            except InsufficientStockError:
                await session.rollback()
                return "rejected"
            await session.commit()
            return "ok"

    results = await asyncio.gather(drain("Driver A"), drain("Driver B"))
    assert sorted(results) == ["ok", "rejected"]

    async with session_factory() as session:
        ledger = TankLedger(session)
        assert (await ledger.read_tank(committed_tank)).current_level == 10
        total, _ = await ledger.history(committed_tank)
        assert total == 1


async def test_failed_insert_rolls_back_level(session_factory, committed_tank, monkeypatch):
    async with session_factory() as session:
        async def broken_flush(*args, **kwargs):
            raise OperationalError("INSERT INTO tank_movements", {}, Exception("disk I/O error"))

        monkeypatch.setattr(session, "flush", broken_flush)
        with pytest.raises(PersistenceError):
            await TankLedger(session).apply_movement(committed_tank, OUT, 30, 1, "Ada Admin")
        await session.rollback()

    async with session_factory() as session:
        ledger = TankLedger(session)
        assert (await ledger.read_tank(committed_tank)).current_level == 50
        total, _ = await ledger.history(committed_tank)
        assert total == 0


async def test_guard_miss_that_now_fits_asks_for_retry(ledger, tank, monkeypatch):
    reread = ledger.read_tank

    async def level_moved_meanwhile(tank_id):
        await ledger.db.execute(update(Tank).where(Tank.id == tank_id).values(current_level=900))
        return await reread(tank_id)

    monkeypatch.setattr(ledger, "read_tank", level_moved_meanwhile)
    with pytest.raises(PersistenceError) as exc:
        await ledger.apply_movement(tank.id, OUT, 500, 1, "Ada Admin")
    assert exc.value.details == {"tank_id": tank.id}


async def test_request_id_reused_on_another_tank(ledger, tank):
    other = await ledger.create_tank("Petrol", FuelType.GASOLINE, capacity=500)
    await ledger.apply_movement(tank.id, IN, 10, 1, "Ada Admin", request_id="req-7")
    with pytest.raises(ValidationError):
        await ledger.apply_movement(other.id, IN, 10, 1, "Ada Admin", request_id="req-7")
    assert (await ledger.read_tank(other.id)).current_level == 0
    total, _ = await ledger.history(other.id)
    assert total == 0
