"""Tests du rapport vehicule / Vehicle report tests."""

from types import SimpleNamespace

import pytest

from fleetfuel.exceptions import ValidationError
from fleetfuel.models.vehicle import FuelType, Vehicle
from fleetfuel.services.aggregation import AggregationScope
from fleetfuel.services.fueling_store import FuelingStore
from fleetfuel.services.period_classifier import classify
from fleetfuel.services.report_composer import (
    NotFoundResult,
    ReportDocument,
    ReportVehicle,
    compose,
    compose_vehicle_report,
)


def record(record_id, day, odometer, liters, amount, km=None, kpl=None):
    period = classify(day)
    return SimpleNamespace(
        id=record_id, date=day, odometer=odometer, liters=liters, amount=amount, station="Posto 1",
        driver_name="Maria", km_driven=km, km_per_liter=kpl, plate="ABC1D23", vehicle_name="Truck 1",
        week=period.week, month=period.month, year=period.year,
    )


VEHICLE = ReportVehicle(plate="ABC1D23", name="Truck 1", fuel_type="DIESEL")


def test_compose_found_document():
    records = [
        record(2, "2024-07-15", 1300, 30, 180, km=300, kpl=10.0),
        record(1, "2024-07-01", 1000, 20, 120),
    ]
    doc = compose(VEHICLE, records, AggregationScope(year=2024, month=7))
    assert isinstance(doc, ReportDocument)
    assert doc.found is True
    assert doc.scope_description == "July 2024"
    assert doc.initial_odometer == 1000
    assert [line.date for line in doc.lines] == ["2024-07-01", "2024-07-15"]
    assert doc.kpis.total_liters == 50
    assert doc.kpis.total_spend == 300
    assert doc.kpis.average_cost_per_liter == 6.0
    assert doc.kpis.distance_covered == 300
    assert doc.kpis.average_efficiency == 10.0


def test_compose_unknown_vehicle():
    result = compose(None, [], AggregationScope(year=2024))
    assert isinstance(result, NotFoundResult)
    assert result.found is False
    assert result.reason == "Vehicle not found"
    assert result.plate == ""


def test_compose_empty_period():
    records = [record(1, "2024-07-01", 1000, 20, 120)]
    result = compose(VEHICLE, records, AggregationScope(year=2024, month=8))
    assert isinstance(result, NotFoundResult)
    assert result.reason == "No data for the selected period"
    assert result.scope_description == "August 2024"


async def test_vehicle_report_from_registry(db):
    db.add(Vehicle(name="Registered truck", year=2021, plate="ABC1D23", fuel_type=FuelType.DIESEL))
    store = FuelingStore(db)
    for day, odometer in (("2024-07-01", 1000), ("2024-07-15", 1250)):
        await store.create({
            "date": day, "vehicle_name": "Typed name", "plate": "ABC1D23", "driver_name": "Maria",
            "driver_registration": "M-9", "liters": 25, "amount": 150, "odometer": odometer,
        })

    doc = await compose_vehicle_report(db, "abc1d23", year=2024, month=7, week=29)
    assert doc.found is True
    assert doc.vehicle.name == "Registered truck"
    assert doc.vehicle.fuel_type == "DIESEL"
    assert len(doc.lines) == 1
    assert doc.lines[0].km_driven == 250
    assert doc.kpis.average_efficiency == 10.0
    assert doc.scope_description == "Week 29 - July 2024"


async def test_vehicle_report_falls_back_to_records(db):
    await FuelingStore(db).create({
        "date": "2024-03-03", "vehicle_name": "Loader", "plate": "MAQ0001", "driver_name": "Rui",
        "driver_registration": "R-1", "liters": 40, "amount": 240, "odometer": 5000,
    })
    doc = await compose_vehicle_report(db, "MAQ0001", year=2024)
    assert doc.found is True
    assert doc.vehicle.name == "Loader"
    assert doc.vehicle.fuel_type is None


async def test_vehicle_report_unknown_plate(db):
    result = await compose_vehicle_report(db, "ZZZ9999", year=2024)
    assert result.found is False
    assert result.reason == "Vehicle not found"
    assert result.plate == "ZZZ9999"


async def test_vehicle_report_rejects_bad_scope(db):
    with pytest.raises(ValidationError):
        await compose_vehicle_report(db, "ABC1D23", year=2024, month=13)
