"""Routes Chauffeurs / Driver roster routes. Le PIN n'est jamais renvoye."""

from fastapi import APIRouter, Depends
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetfuel.database import get_db
from fleetfuel.exceptions import ConflictError
from fleetfuel.models.driver import Driver
from fleetfuel.models.user import User
from fleetfuel.schemas.driver import DriverCreate, DriverPage, DriverRead, DriverUpdate
from fleetfuel.api.deps import Pagination, get_or_404, require_permission
from fleetfuel.utils.auth import hash_password

router = APIRouter()


async def _registration_taken(db: AsyncSession, registration: str, exclude_id: int | None = None) -> bool:
    query = select(Driver.id).where(Driver.registration == registration)
    if exclude_id is not None:
        query = query.where(Driver.id != exclude_id)
    return await db.scalar(query) is not None


@router.get("/", response_model=DriverPage)
async def list_drivers(
    search: str | None = None,
    pagination: Pagination = Depends(),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("drivers", "read")),
):
    """Lister les chauffeurs / List drivers."""
    query = select(Driver)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(Driver.name.ilike(pattern), Driver.registration.ilike(pattern)))
    total = await db.scalar(select(func.count()).select_from(query.subquery())) or 0
    result = await db.execute(query.order_by(Driver.name).offset(pagination.offset).limit(pagination.page_size))
    return DriverPage(total=total, items=result.scalars().all())


@router.get("/{driver_id}", response_model=DriverRead)
async def get_driver(
    driver_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("drivers", "read")),
):
    driver = await get_or_404(db, Driver, driver_id, "Driver")
    return driver


@router.post("/", response_model=DriverRead, status_code=201)
async def create_driver(
    data: DriverCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("drivers", "create")),
):
    """Creer un chauffeur / Create driver."""
    registration = data.registration.strip()
    if await _registration_taken(db, registration):
        raise ConflictError(f"Registration {registration} already exists", {"registration": registration})
    driver = Driver(name=data.name.strip(), registration=registration, hashed_pin=hash_password(data.pin))
    db.add(driver)
    await db.flush()
    await db.refresh(driver)
    return driver


@router.put("/{driver_id}", response_model=DriverRead)
async def update_driver(
    driver_id: int,
    data: DriverUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("drivers", "update")),
):
    """Modifier un chauffeur / Update driver."""
    driver = await get_or_404(db, Driver, driver_id, "Driver")

    if data.registration is not None:
        registration = data.registration.strip()
        if await _registration_taken(db, registration, exclude_id=driver_id):
            raise ConflictError(f"Registration {registration} already exists", {"registration": registration})
        driver.registration = registration
    if data.name is not None:
        driver.name = data.name.strip()
    if data.pin is not None:
        driver.hashed_pin = hash_password(data.pin)

    await db.flush()
    await db.refresh(driver)
    return driver


@router.delete("/{driver_id}", status_code=204)
async def delete_driver(
    driver_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("drivers", "delete")),
):
    driver = await get_or_404(db, Driver, driver_id, "Driver")
    await db.delete(driver)
