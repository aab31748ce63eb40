"""
Routes Pleins / Fueling record routes.
Vue mensuelle avec sous-totaux hebdomadaires, saisie, export.
Month view with weekly sub-totals, entry and export.
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from fleetfuel.database import get_db
from fleetfuel.models.user import User
from fleetfuel.schemas.fueling import FuelingCreate, FuelingListResponse, FuelingRead, FuelingUpdate
from fleetfuel.services.aggregation import AggregationScope, aggregate, weekly_rollup
from fleetfuel.services.export_service import FUELING_FIELDS, ExportService
from fleetfuel.services.fueling_store import FuelingStore
from fleetfuel.api.deps import Pagination, require_permission

router = APIRouter()


@router.get("/", response_model=FuelingListResponse)
async def list_fueling(
    year: int = Query(..., ge=1900, le=9999),
    month: int | None = Query(default=None, ge=1, le=12),
    week: int | None = Query(default=None, ge=1, le=53),
    plate: str | None = None,
    station: str | None = None,
    search: str | None = None,
    pagination: Pagination = Depends(),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("fueling", "read")),
):
    """Pleins de la periode, plus recents d'abord / Records of the period, newest first.

    Les sous-totaux portent sur toute la periode filtree, pas sur la page.
    Sub-totals cover the whole filtered period, not just the page.
    """
    store = FuelingStore(db)
    filters = dict(plate=plate, year=year, month=month, week=week, station=station, search=search)
    records = await store.query_records(**filters)
    page = await store.query_records(
        **filters, newest_first=True, limit=pagination.page_size, offset=pagination.offset
    )
    totals = aggregate(records, AggregationScope(year=year, month=month, week=week))
    return FuelingListResponse(
        total=totals.record_count,
        items=page,
        weekly_totals=weekly_rollup(records, year, month),
        period_liters=totals.total_liters,
        period_spend=totals.total_spend,
    )


@router.get("/stations", response_model=list[str])
async def list_stations(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("fueling", "read")),
):
    """Stations deja utilisees / Station names already in use."""
    return await FuelingStore(db).stations()


@router.get("/export")
async def export_fueling(
    year: int = Query(..., ge=1900, le=9999),
    month: int | None = Query(default=None, ge=1, le=12),
    week: int | None = Query(default=None, ge=1, le=53),
    plate: str | None = None,
    format: str = Query(default="xlsx", pattern="^(csv|xlsx)$"),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("fueling", "read")),
):
    """Exporter les pleins / Export fueling records to CSV or XLSX."""
    records = await FuelingStore(db).query_records(plate=plate, year=year, month=month, week=week)
    rows = [ExportService.model_to_dict(r, FUELING_FIELDS) for r in records]
    suffix = f"{year}" + (f"-{month:02d}" if month else "") + (f"-w{week:02d}" if week else "")
    filename = f"fueling_{suffix}.{format}"

    if format == "csv":
        content = ExportService.to_csv(rows, FUELING_FIELDS)
        media_type = "text/csv; charset=utf-8"
    else:
        content = ExportService.to_xlsx(rows, FUELING_FIELDS, sheet_name="Fueling")
        media_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

    return StreamingResponse(
        iter([content]),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{record_id}", response_model=FuelingRead)
async def get_fueling(
    record_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("fueling", "read")),
):
    return await FuelingStore(db).get(record_id)


@router.post("/", response_model=FuelingRead, status_code=201)
async def create_fueling(
    data: FuelingCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("fueling", "create")),
):
    """Enregistrer un plein / Record a fueling."""
    return await FuelingStore(db).create(data.model_dump())


@router.put("/{record_id}", response_model=FuelingRead)
async def update_fueling(
    record_id: int,
    data: FuelingUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("fueling", "update")),
):
    """Modifier un plein ; periode et distances recalculees / Edit a record; period and distances recomputed."""
    return await FuelingStore(db).update(record_id, data.model_dump(exclude_unset=True))


@router.delete("/{record_id}", status_code=204)
async def delete_fueling(
    record_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("fueling", "delete")),
):
    await FuelingStore(db).delete(record_id)
