"""
Routes Cuves / Tank administration routes.
Le niveau ne change que par les mouvements ; le responsable est l'utilisateur connecte.
Level only changes through movements; the responsible party is the current user.
"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from fleetfuel.config import settings
from fleetfuel.database import get_db
from fleetfuel.models.user import User
from fleetfuel.schemas.tank import MovementCreate, MovementPage, MovementRead, TankCreate, TankRead, TankUpdate
from fleetfuel.services.tank_ledger import TankLedger
from fleetfuel.rate_limit import limiter
from fleetfuel.api.deps import require_permission

router = APIRouter()


@router.get("/", response_model=list[TankRead])
async def list_tanks(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("tanks", "read")),
):
    """Lister les cuves avec taux de remplissage / List tanks with fill percentage."""
    return await TankLedger(db).list_tanks()


@router.get("/{tank_id}", response_model=TankRead)
async def get_tank(
    tank_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("tanks", "read")),
):
    return await TankLedger(db).read_tank(tank_id)


@router.post("/", response_model=TankRead, status_code=201)
async def create_tank(
    data: TankCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("tanks", "create")),
):
    """Creer une cuve / Create a tank."""
    return await TankLedger(db).create_tank(
        name=data.name,
        fuel_type=data.fuel_type,
        capacity=data.capacity_liters,
        initial_level=data.initial_level,
    )


@router.put("/{tank_id}", response_model=TankRead)
async def update_tank(
    tank_id: int,
    data: TankUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("tanks", "update")),
):
    """Modifier nom, carburant ou capacite / Edit name, fuel type or capacity."""
    return await TankLedger(db).update_tank(
        tank_id,
        name=data.name,
        fuel_type=data.fuel_type,
        capacity=data.capacity_liters,
    )


@router.get("/{tank_id}/movements", response_model=MovementPage)
async def tank_history(
    tank_id: int,
    limit: int = Query(default=500, ge=1, le=5000),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("tanks", "read")),
):
    """Historique chronologique / Chronological movement history."""
    total, items = await TankLedger(db).history(tank_id, limit=limit, offset=offset)
    return MovementPage(total=total, items=items)


@router.post("/{tank_id}/movements", response_model=MovementRead, status_code=201)
@limiter.limit(settings.RATE_LIMIT_DEFAULT)
async def apply_movement(
    request: Request,
    tank_id: int,
    data: MovementCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("tanks", "create")),
):
    """Entree ou sortie de carburant / Fuel inbound or outbound movement.

    Refus (stock insuffisant, capacite depassee) : 409 avec la valeur limitante.
    Rejections (insufficient stock, capacity exceeded): 409 with the limiting value.
    """
    return await TankLedger(db).apply_movement(
        tank_id,
        direction=data.direction,
        quantity=data.quantity_liters,
        responsible_id=user.id,
        responsible_name=user.display_name,
        value=data.value,
        note=data.note,
        request_id=data.request_id,
    )
