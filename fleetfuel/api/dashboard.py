"""Routes Dashboard / Fleet dashboard routes."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, union
from sqlalchemy.ext.asyncio import AsyncSession

from fleetfuel.config import settings
from fleetfuel.database import get_db
from fleetfuel.models.fueling import FuelingRecord
from fleetfuel.models.user import User
from fleetfuel.models.vehicle import FuelType, Vehicle
from fleetfuel.schemas.report import DashboardResponse, FilterOptions
from fleetfuel.services.aggregation import fleet_kpis
from fleetfuel.services.fueling_store import FuelingStore
from fleetfuel.api.deps import require_permission

router = APIRouter()


@router.get("/", response_model=DashboardResponse)
async def fleet_dashboard(
    year: int | None = Query(default=None, ge=1900, le=9999),
    fuel_type: FuelType | None = None,
    plate: str | None = None,
    station: str | None = None,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("dashboard", "read")),
):
    """KPI flotte de l'annee (annee courante par defaut) / Fleet KPIs for a year (current year by default)."""
    year = year or date.today().year
    records = await FuelingStore(db).query_fleet_records(year, fuel_type=fuel_type, plate=plate, station=station)
    return DashboardResponse.model_validate(fleet_kpis(records, year, top_n=settings.DASHBOARD_TOP_VEHICLES))


@router.get("/options", response_model=FilterOptions)
async def dashboard_options(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("dashboard", "read")),
):
    """Valeurs disponibles pour les filtres / Available filter values."""
    plates = await db.execute(union(select(Vehicle.plate), select(FuelingRecord.plate)))
    return FilterOptions(
        plates=sorted(row[0] for row in plates.all()),
        stations=await FuelingStore(db).stations(),
        fuel_types=[f.value for f in FuelType],
    )
