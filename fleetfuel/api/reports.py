"""
Routes Rapports / Report routes.
Rapport vehicule sur une annee, un mois ou une semaine, en JSON ou en fichier.
Vehicle report over a year, month or week, as JSON or as a file.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from fleetfuel.database import get_db
from fleetfuel.models.user import User
from fleetfuel.schemas.report import (
    KpiBlock,
    ReportLineRead,
    ReportVehicleRead,
    ScopeRead,
    VehicleReportResponse,
)
from fleetfuel.services.export_service import REPORT_FIELDS, ExportService
from fleetfuel.services.report_composer import NotFoundResult, ReportDocument, compose_vehicle_report
from fleetfuel.api.deps import require_permission

router = APIRouter()


def to_response(result: ReportDocument | NotFoundResult) -> VehicleReportResponse:
    """Document ou etat vide vers JSON / Document or empty state to JSON."""
    scope = ScopeRead.model_validate(result.scope)
    if isinstance(result, NotFoundResult):
        return VehicleReportResponse(
            found=False,
            plate=result.plate,
            scope=scope,
            scope_description=result.scope_description,
            reason=result.reason,
        )
    return VehicleReportResponse(
        found=True,
        plate=result.vehicle.plate,
        scope=scope,
        scope_description=result.scope_description,
        vehicle=ReportVehicleRead.model_validate(result.vehicle),
        kpis=KpiBlock.model_validate(result.kpis),
        initial_odometer=result.initial_odometer,
        lines=[ReportLineRead.model_validate(line) for line in result.lines],
    )


@router.get("/vehicles/{plate}", response_model=VehicleReportResponse)
async def vehicle_report(
    plate: str,
    year: int = Query(..., ge=1900, le=9999),
    month: int | None = Query(default=None),
    week: int | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("reports", "read")),
):
    """Rapport d'un vehicule / Vehicle report.

    Vehicule inconnu ou periode vide : 200 avec found=false.
    Unknown vehicle or empty period: 200 with found=false.
    """
    result = await compose_vehicle_report(db, plate, year=year, month=month, week=week)
    return to_response(result)


@router.get("/vehicles/{plate}/export")
async def export_vehicle_report(
    plate: str,
    year: int = Query(..., ge=1900, le=9999),
    month: int | None = Query(default=None),
    week: int | None = Query(default=None),
    format: str = Query(default="xlsx", pattern="^(csv|xlsx)$"),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("reports", "read")),
):
    """Exporter le rapport pour impression / Export the report for printing."""
    result = await compose_vehicle_report(db, plate, year=year, month=month, week=week)
    if isinstance(result, NotFoundResult):
        raise HTTPException(status_code=404, detail=result.reason)

    rows = ExportService.report_rows(result)
    suffix = f"{year}" + (f"-{month:02d}" if month else "") + (f"-w{week:02d}" if week else "")
    filename = f"report_{result.vehicle.plate}_{suffix}.{format}"

    if format == "csv":
        content = ExportService.to_csv(rows, REPORT_FIELDS)
        media_type = "text/csv; charset=utf-8"
    else:
        content = ExportService.to_xlsx(
            rows, REPORT_FIELDS, sheet_name=result.vehicle.plate, header_lines=ExportService.report_header(result)
        )
        media_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

    return StreamingResponse(
        iter([content]),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
