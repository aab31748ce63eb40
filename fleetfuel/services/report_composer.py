"""
Composition du rapport vehicule / Vehicle report composition.

Assemble l'identite du vehicule, les KPI de la periode et la liste
chronologique des pleins dans un document imprimable.
Builds vehicle identity, scope KPIs and the chronological record list
into a printable document model.
"""

from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetfuel.models.vehicle import Vehicle
from fleetfuel.services.aggregation import AggregateReport, AggregationScope, aggregate, record_efficiency
from fleetfuel.services.fueling_store import FuelingStore, normalize_plate


@dataclass(frozen=True)
class ReportVehicle:
    plate: str
    name: str
    fuel_type: str | None = None


@dataclass(frozen=True)
class ReportLine:
    """Ligne du rapport / One report row."""
    date: str
    odometer: int | None
    liters: float
    amount: float
    station: str | None
    driver_name: str | None
    km_driven: float | None
    km_per_liter: float | None


@dataclass(frozen=True)
class ReportDocument:
    vehicle: ReportVehicle
    scope: AggregationScope
    scope_description: str
    kpis: AggregateReport
    initial_odometer: int | None
    lines: tuple[ReportLine, ...]
    found: bool = True


@dataclass(frozen=True)
class NotFoundResult:
    """Etat vide attendu, pas une erreur / Expected empty state, not an error."""
    plate: str
    scope: AggregationScope
    scope_description: str
    reason: str
    found: bool = False


def compose(
    vehicle: ReportVehicle | None,
    records: list[Any],
    scope: AggregationScope,
) -> ReportDocument | NotFoundResult:
    """Composer le document / Compose the report document (pure)."""
    if vehicle is None:
        return NotFoundResult("", scope, scope.describe(), "Vehicle not found")
    plate = vehicle.plate

    kpis = aggregate(records, scope)
    if kpis.record_count == 0:
        return NotFoundResult(plate, scope, scope.describe(), "No data for the selected period")

    ordered = sorted(kpis.records, key=lambda r: (r.date, r.id or 0))
    lines = tuple(
        ReportLine(
            date=r.date,
            odometer=r.odometer,
            liters=float(r.liters),
            amount=float(r.amount),
            station=r.station,
            driver_name=r.driver_name,
            km_driven=float(r.km_driven) if r.km_driven is not None else None,
            km_per_liter=record_efficiency(r),
        )
        for r in ordered
    )
    initial_odometer = next((r.odometer for r in ordered if r.odometer is not None), None)
    return ReportDocument(
        vehicle=vehicle,
        scope=scope,
        scope_description=scope.describe(),
        kpis=kpis,
        initial_odometer=initial_odometer,
        lines=lines,
    )


async def resolve_vehicle(db: AsyncSession, plate: str) -> ReportVehicle | None:
    """Identite par plaque : registre d'abord, puis pleins / Identity by plate: registry, then records."""
    plate = normalize_plate(plate)
    vehicle = await db.scalar(select(Vehicle).where(Vehicle.plate == plate))
    if vehicle is not None:
        return ReportVehicle(plate=vehicle.plate, name=vehicle.name, fuel_type=vehicle.fuel_type.value)
    latest = await FuelingStore(db).query_records(plate=plate, newest_first=True, limit=1)
    if latest:
        return ReportVehicle(plate=plate, name=latest[0].vehicle_name)
    return None


async def compose_vehicle_report(
    db: AsyncSession,
    plate: str,
    year: int,
    month: int | None = None,
    week: int | None = None,
) -> ReportDocument | NotFoundResult:
    """Rapport d'un vehicule sur une periode / Vehicle report for a scope."""
    scope = AggregationScope(year=year, month=month, week=week)
    vehicle = await resolve_vehicle(db, plate)
    if vehicle is None:
        return NotFoundResult(normalize_plate(plate), scope, scope.describe(), "Vehicle not found")
    records = await FuelingStore(db).query_records(plate=vehicle.plate, year=year, month=month, week=week)
    return compose(vehicle, records, scope)
