"""Tests du registre des pleins / Fueling record store tests."""

import pytest

from fleetfuel.exceptions import NotFoundError, ValidationError
from fleetfuel.models.vehicle import FuelType, Vehicle
from fleetfuel.services.fueling_store import FuelingStore, compute_distances


def payload(day, odometer, liters=20.0, amount=100.0, plate="abc1d23", station="Shell Centro"):
    return {
        "date": day,
        "vehicle_name": "Truck 1",
        "plate": plate,
        "driver_name": "Joao Silva",
        "driver_registration": "M-001",
        "liters": liters,
        "amount": amount,
        "odometer": odometer,
        "station": station,
    }


@pytest.fixture
async def store(db):
    return FuelingStore(db)


async def test_derived_period_fields(store):
    record = await store.create({**payload("2024-12-30", 1000), "week": 40, "year": 1999})
    assert record.plate == "ABC1D23"
    assert (record.week, record.month, record.year) == (1, 12, 2024)


async def test_distance_chain_is_recomputed_in_date_order(store):
    await store.create(payload("2024-07-08", 1300, liters=30))
    await store.create(payload("2024-07-01", 1000))
    await store.create(payload("2024-07-15", 1500, liters=25))

    records = await store.query_records(plate="ABC1D23")
    assert [r.date for r in records] == ["2024-07-01", "2024-07-08", "2024-07-15"]
    assert [r.km_driven for r in records] == [None, 300, 200]
    assert [r.km_per_liter for r in records] == [None, 10.0, 8.0]

    await store.delete(records[1].id)
    records = await store.query_records(plate="ABC1D23")
    assert records[1].km_driven == 500
    assert records[1].km_per_liter == 20.0


async def test_edit_recomputes_period_and_distance(store):
    first = await store.create(payload("2024-07-01", 1000))
    second = await store.create(payload("2024-07-08", 1300))
    updated = await store.update(second.id, {"odometer": 1400, "date": "2024-08-05", "km_driven": 1})
    assert updated.month == 8
    assert updated.km_driven == 400
    assert updated.km_per_liter == 20.0
    assert first.km_driven is None


async def test_plate_change_recomputes_both_plates(store):
    await store.create(payload("2024-07-01", 1000))
    moved = await store.create(payload("2024-07-08", 1300))
    await store.create(payload("2024-07-15", 1600))

    await store.update(moved.id, {"plate": "xyz9z99"})
    old = await store.query_records(plate="ABC1D23")
    assert [r.km_driven for r in old] == [None, 600]
    new = await store.query_records(plate="XYZ9Z99")
    assert new[0].km_driven is None


async def test_backwards_odometer_yields_no_distance(store):
    await store.create(payload("2024-07-01", 1000))
    second = await store.create(payload("2024-07-08", 900))
    assert second.km_driven is None
    assert second.km_per_liter is None


@pytest.mark.parametrize("field, value", [("liters", 0), ("amount", -1), ("driver_name", " ")])
async def test_invalid_input_rejected(store, field, value):
    with pytest.raises(ValidationError):
        await store.create({**payload("2024-07-01", 1000), field: value})


async def test_missing_record(store):
    with pytest.raises(NotFoundError):
        await store.update(42, {"liters": 10})
    with pytest.raises(NotFoundError):
        await store.delete(42)


async def test_query_filters_and_stations(db, store):
    db.add(Vehicle(name="Truck 1", year=2020, plate="ABC1D23", fuel_type=FuelType.DIESEL))
    await store.create(payload("2024-07-01", 1000, station="Shell Centro"))
    await store.create(payload("2024-07-15", 1200, station="Ipiranga Sul"))
    await store.create(payload("2024-07-16", 500, plate="GAS0A00", station="Shell Centro"))

    assert len(await store.query_records(year=2024, month=7)) == 3
    assert len(await store.query_records(year=2024, month=7, week=29)) == 2
    assert len(await store.query_records(station="Ipiranga Sul")) == 1
    assert len(await store.query_fleet_records(2024, fuel_type=FuelType.DIESEL)) == 2
    assert len(await store.query_records(search="gas0")) == 1
    assert await store.count_records(year=2024, plate="abc1d23") == 2
    newest = await store.query_records(newest_first=True, limit=1)
    assert newest[0].date == "2024-07-16"
    assert await store.stations() == ["Ipiranga Sul", "Shell Centro"]


def test_compute_distances_on_plain_objects():
    class Row:
        def __init__(self, odometer, liters):
            self.odometer, self.liters = odometer, liters
            self.km_driven = self.km_per_liter = None

    rows = [Row(100, 10), Row(None, 10), Row(250, 0), Row(400, 15)]
    compute_distances(rows)
    assert [r.km_driven for r in rows] == [None, None, 150, 150]
    assert [r.km_per_liter for r in rows] == [None, None, None, 10.0]


async def test_week_filter_without_month_skips_neighbour_iso_year(store):
    await store.create(payload("2024-01-02", 1000))
    await store.create(payload("2024-12-30", 2000))

    january = await store.query_records(year=2024, week=1)
    assert [r.date for r in january] == ["2024-01-02"]
    december = await store.query_records(year=2024, month=12, week=1)
    assert [r.date for r in december] == ["2024-12-30"]
