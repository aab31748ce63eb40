"""Routes Vehicules et engins / Vehicle and machinery API routes."""

from fastapi import APIRouter, Depends
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetfuel.database import get_db
from fleetfuel.exceptions import ConflictError, NotFoundError
from fleetfuel.models.user import User
from fleetfuel.models.vehicle import Vehicle, VehicleKind, VehicleStatus
from fleetfuel.schemas.vehicle import VehicleCreate, VehiclePage, VehicleRead, VehicleSummary, VehicleUpdate
from fleetfuel.api.deps import Pagination, get_or_404, require_permission

router = APIRouter()


async def _plate_taken(db: AsyncSession, plate: str, exclude_id: int | None = None) -> bool:
    query = select(Vehicle.id).where(Vehicle.plate == plate)
    if exclude_id is not None:
        query = query.where(Vehicle.id != exclude_id)
    return await db.scalar(query) is not None


@router.get("/", response_model=VehiclePage)
async def list_vehicles(
    kind: VehicleKind | None = None,
    status: VehicleStatus | None = None,
    search: str | None = None,
    pagination: Pagination = Depends(),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("vehicles", "read")),
):
    """Lister les vehicules, recherche par plaque ou nom / List vehicles, search by plate or name."""
    query = select(Vehicle)
    if kind is not None:
        query = query.where(Vehicle.kind == kind)
    if status is not None:
        query = query.where(Vehicle.status == status)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(Vehicle.plate.ilike(pattern), Vehicle.name.ilike(pattern)))

    total = await db.scalar(select(func.count()).select_from(query.subquery())) or 0
    result = await db.execute(
        query.order_by(Vehicle.plate).offset(pagination.offset).limit(pagination.page_size)
    )
    return VehiclePage(total=total, items=result.scalars().all())


@router.get("/summary", response_model=list[VehicleSummary])
async def list_vehicles_summary(
    kind: VehicleKind | None = None,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("vehicles", "read")),
):
    """Liste simplifiee pour la saisie des pleins / Summary list for fueling entry."""
    query = select(Vehicle).order_by(Vehicle.plate)
    if kind is not None:
        query = query.where(Vehicle.kind == kind)
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/by-plate/{plate}", response_model=VehicleRead)
async def get_vehicle_by_plate(
    plate: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("vehicles", "read")),
):
    vehicle = await db.scalar(select(Vehicle).where(Vehicle.plate == plate.strip().upper()))
    if vehicle is None:
        raise NotFoundError("Vehicle", plate)
    return vehicle


@router.get("/{vehicle_id}", response_model=VehicleRead)
async def get_vehicle(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("vehicles", "read")),
):
    """Voir un vehicule / Get vehicle detail."""
    vehicle = await get_or_404(db, Vehicle, vehicle_id, "Vehicle")
    return vehicle


@router.post("/", response_model=VehicleRead, status_code=201)
async def create_vehicle(
    data: VehicleCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("vehicles", "create")),
):
    """Creer un vehicule / Create vehicle."""
    if await _plate_taken(db, data.plate):
        raise ConflictError(f"Plate {data.plate} already registered", {"plate": data.plate})
    vehicle = Vehicle(**data.model_dump())
    db.add(vehicle)
    await db.flush()
    await db.refresh(vehicle)
    return vehicle


@router.put("/{vehicle_id}", response_model=VehicleRead)
async def update_vehicle(
    vehicle_id: int,
    data: VehicleUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("vehicles", "update")),
):
    """Modifier un vehicule / Update vehicle."""
    vehicle = await get_or_404(db, Vehicle, vehicle_id, "Vehicle")

    updates = data.model_dump(exclude_unset=True)
    if updates.get("plate") and await _plate_taken(db, updates["plate"], exclude_id=vehicle_id):
        raise ConflictError(f"Plate {updates['plate']} already registered", {"plate": updates["plate"]})

    for key, value in updates.items():
        if value is not None or key in ("fuel_card", "notes"):
            setattr(vehicle, key, value)

    await db.flush()
    await db.refresh(vehicle)
    return vehicle


@router.delete("/{vehicle_id}", status_code=204)
async def delete_vehicle(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("vehicles", "delete")),
):
    """Supprimer un vehicule / Delete vehicle. Les pleins historiques sont conserves."""
    vehicle = await get_or_404(db, Vehicle, vehicle_id, "Vehicle")
    await db.delete(vehicle)
