"""
Registre des pleins / Fueling record store.

Semaine/mois/annee sont recalcules a chaque ecriture depuis la date ; la
distance et la consommation sont recalculees pour toute la plaque concernee.
Week/month/year are recomputed from the date on every write; distance and
efficiency are recomputed for every record of the affected plate.
"""

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fleetfuel.exceptions import NotFoundError, PersistenceError, ValidationError
from fleetfuel.models.fueling import FuelingRecord
from fleetfuel.models.vehicle import FuelType, Vehicle
from fleetfuel.services.period_classifier import classify, parse_date

log = logging.getLogger(__name__)

# Champs derives, jamais acceptes en entree / Derived fields, never accepted as input
DERIVED_FIELDS = {"week", "month", "year", "km_driven", "km_per_liter", "id", "created_at"}

EDITABLE_FIELDS = {
    "date",
    "vehicle_name",
    "plate",
    "fuel_card",
    "driver_name",
    "driver_registration",
    "liters",
    "amount",
    "odometer",
    "station",
}


def normalize_plate(plate: str) -> str:
    return (plate or "").strip().upper()


def compute_distances(records: Iterable[Any]) -> None:
    """Recalculer km parcourus et km/L sur une plaque / Recompute distance and km/L for one plate.

    Les enregistrements doivent etre tries par (date, id). La distance est
    l'ecart avec le releve precedent ; un ecart nul/negatif ou absent ne donne rien.
    Records must be sorted by (date, id).
    """
    previous_odometer = None
    for record in records:
        km = None
        if record.odometer is not None and previous_odometer is not None:
            diff = record.odometer - previous_odometer
            if diff > 0:
                km = float(diff)
        record.km_driven = km
        liters = float(record.liters or 0)
        record.km_per_liter = round(km / liters, 4) if km is not None and liters > 0 else None
        if record.odometer is not None:
            previous_odometer = record.odometer


def _validate(values: dict[str, Any]) -> None:
    """Regles de saisie / Input rules."""
    for field in ("vehicle_name", "plate", "driver_name", "driver_registration"):
        if field in values and not (values[field] or "").strip():
            raise ValidationError(f"{field} is required", {"field": field})
    for field in ("liters", "amount"):
        if field in values and (values[field] is None or values[field] <= 0):
            raise ValidationError(f"{field} must be positive", {"field": field, "value": values[field]})
    if values.get("odometer") is not None and values["odometer"] < 1:
        raise ValidationError("odometer must be a positive number", {"field": "odometer"})


class FuelingStore:
    """CRUD et requetes des pleins / Fueling record CRUD and queries."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, record_id: int) -> FuelingRecord:
        record = await self.db.get(FuelingRecord, record_id)
        if record is None:
            raise NotFoundError("Fueling record", record_id)
        return record

    async def create(self, data: dict[str, Any]) -> FuelingRecord:
        """Creer un plein / Create a fueling record."""
        values = {k: v for k, v in data.items() if k in EDITABLE_FIELDS}
        for field in ("date", "vehicle_name", "plate", "driver_name", "driver_registration", "liters", "amount"):
            if values.get(field) is None:
                raise ValidationError(f"{field} is required", {"field": field})
        _validate(values)
        values["plate"] = normalize_plate(values["plate"])
        values["date"] = parse_date(values["date"]).isoformat()

        period = classify(values["date"])
        record = FuelingRecord(
            **values,
            week=period.week,
            month=period.month,
            year=period.year,
            created_at=datetime.now(timezone.utc).isoformat(timespec="seconds"),
        )
        try:
            self.db.add(record)
            await self.db.flush()
            await self._recompute_plate(record.plate)
            await self.db.refresh(record)
        except SQLAlchemyError as exc:
            log.exception("Fueling record creation failed")
            raise PersistenceError("Could not save fueling record") from exc
        return record

    async def update(self, record_id: int, changes: dict[str, Any]) -> FuelingRecord:
        """Modifier un plein / Edit a fueling record. Les champs derives sont ignores."""
        record = await self.get(record_id)
        values = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
        # Champs obligatoires : None ne les efface pas / Required fields: None does not clear them
        for field in ("date", "vehicle_name", "plate", "driver_name", "driver_registration", "liters", "amount"):
            if field in values and values[field] is None:
                del values[field]
        _validate(values)
        if "plate" in values:
            values["plate"] = normalize_plate(values["plate"])
        old_plate = record.plate

        for key, value in values.items():
            setattr(record, key, value)
        if "date" in values:
            record.date = parse_date(values["date"]).isoformat()
            period = classify(record.date)
            record.week, record.month, record.year = period.week, period.month, period.year

        try:
            await self.db.flush()
            await self._recompute_plate(record.plate)
            if old_plate != record.plate:
                await self._recompute_plate(old_plate)
            await self.db.refresh(record)
        except SQLAlchemyError as exc:
            log.exception("Fueling record %s update failed", record_id)
            raise PersistenceError("Could not update fueling record") from exc
        return record

    async def delete(self, record_id: int) -> None:
        record = await self.get(record_id)
        plate = record.plate
        try:
            await self.db.delete(record)
            await self.db.flush()
            await self._recompute_plate(plate)
        except SQLAlchemyError as exc:
            log.exception("Fueling record %s deletion failed", record_id)
            raise PersistenceError("Could not delete fueling record") from exc

    async def _recompute_plate(self, plate: str) -> None:
        result = await self.db.execute(
            select(FuelingRecord)
            .where(FuelingRecord.plate == plate)
            .order_by(FuelingRecord.date, FuelingRecord.id)
        )
        compute_distances(result.scalars().all())
        await self.db.flush()

    def _filtered(
        self,
        plate: str | None = None,
        year: int | None = None,
        month: int | None = None,
        week: int | None = None,
        station: str | None = None,
        fuel_type: FuelType | str | None = None,
        search: str | None = None,
    ):
        query = select(FuelingRecord)
        if plate:
            query = query.where(FuelingRecord.plate == normalize_plate(plate))
        if year is not None:
            query = query.where(FuelingRecord.year == year)
        if month is not None:
            query = query.where(FuelingRecord.month == month)
        if week is not None:
            query = query.where(FuelingRecord.week == week)
            # Sans mois : exclure les jours de la semaine ISO d'une annee voisine
            if month is None and week == 1:
                query = query.where(FuelingRecord.month != 12)
            elif month is None and week >= 52:
                query = query.where(FuelingRecord.month != 1)
        if station:
            query = query.where(FuelingRecord.station == station)
        if fuel_type:
            plates = select(Vehicle.plate).where(Vehicle.fuel_type == FuelType(fuel_type))
            query = query.where(FuelingRecord.plate.in_(plates))
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(or_(
                FuelingRecord.plate.ilike(pattern),
                FuelingRecord.vehicle_name.ilike(pattern),
                FuelingRecord.driver_name.ilike(pattern),
            ))
        return query

    async def query_records(
        self,
        plate: str | None = None,
        year: int | None = None,
        month: int | None = None,
        week: int | None = None,
        station: str | None = None,
        fuel_type: FuelType | str | None = None,
        search: str | None = None,
        newest_first: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[FuelingRecord]:
        """Requete filtree / Filtered query (queryFuelingRecords)."""
        query = self._filtered(plate, year, month, week, station, fuel_type, search)
        if newest_first:
            query = query.order_by(FuelingRecord.date.desc(), FuelingRecord.id.desc())
        else:
            query = query.order_by(FuelingRecord.date, FuelingRecord.id)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count_records(self, **filters) -> int:
        subquery = self._filtered(**filters).subquery()
        return await self.db.scalar(select(func.count()).select_from(subquery)) or 0

    async def query_fleet_records(
        self,
        year: int,
        fuel_type: FuelType | str | None = None,
        plate: str | None = None,
        station: str | None = None,
    ) -> list[FuelingRecord]:
        """Tous les vehicules pour une annee / All vehicles for a year (queryFleetRecords)."""
        return await self.query_records(plate=plate, year=year, station=station, fuel_type=fuel_type)

    async def stations(self) -> list[str]:
        """Stations distinctes / Distinct station names."""
        result = await self.db.execute(
            select(FuelingRecord.station)
            .where(FuelingRecord.station.is_not(None), FuelingRecord.station != "")
            .distinct()
            .order_by(FuelingRecord.station)
        )
        return [row[0] for row in result.all()]
