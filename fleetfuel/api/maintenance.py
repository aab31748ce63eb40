"""
Routes Entretien / Maintenance ticket routes.
Un ticket passe a DONE recoit une date de fin s'il n'en a pas.
A ticket moved to DONE gets a completion date when it has none.
"""

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetfuel.database import get_db
from fleetfuel.models.maintenance import MaintenanceStatus, MaintenanceTicket
from fleetfuel.models.user import User
from fleetfuel.schemas.maintenance import MaintenanceCreate, MaintenancePage, MaintenanceRead, MaintenanceUpdate
from fleetfuel.api.deps import Pagination, get_or_404, require_permission

router = APIRouter()

REQUIRED_FIELDS = {"plate", "vehicle_kind", "vehicle_name", "problem_description", "status", "registered_date"}


def _stamp_completion(ticket: MaintenanceTicket) -> None:
    if ticket.status == MaintenanceStatus.DONE and not ticket.completed_date:
        ticket.completed_date = date.today().isoformat()


@router.get("/", response_model=MaintenancePage)
async def list_tickets(
    status: MaintenanceStatus | None = None,
    plate: str | None = None,
    search: str | None = None,
    pagination: Pagination = Depends(),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("maintenance", "read")),
):
    """Lister les tickets, plus recents d'abord / List tickets, newest first."""
    query = select(MaintenanceTicket)
    if status is not None:
        query = query.where(MaintenanceTicket.status == status)
    if plate:
        query = query.where(MaintenanceTicket.plate == plate.strip().upper())
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(
            MaintenanceTicket.vehicle_name.ilike(pattern),
            MaintenanceTicket.problem_description.ilike(pattern),
            MaintenanceTicket.plate.ilike(pattern),
        ))
    total = await db.scalar(select(func.count()).select_from(query.subquery())) or 0
    result = await db.execute(
        query.order_by(MaintenanceTicket.registered_date.desc(), MaintenanceTicket.id.desc())
        .offset(pagination.offset)
        .limit(pagination.page_size)
    )
    return MaintenancePage(total=total, items=result.scalars().all())


@router.get("/{ticket_id}", response_model=MaintenanceRead)
async def get_ticket(
    ticket_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("maintenance", "read")),
):
    ticket = await get_or_404(db, MaintenanceTicket, ticket_id, "Maintenance ticket")
    return ticket


@router.post("/", response_model=MaintenanceRead, status_code=201)
async def create_ticket(
    data: MaintenanceCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("maintenance", "create")),
):
    """Ouvrir un ticket / Open a ticket."""
    dump = data.model_dump()
    dump["plate"] = dump["plate"].strip().upper()
    ticket = MaintenanceTicket(**dump)
    _stamp_completion(ticket)
    db.add(ticket)
    await db.flush()
    await db.refresh(ticket)
    return ticket


@router.put("/{ticket_id}", response_model=MaintenanceRead)
async def update_ticket(
    ticket_id: int,
    data: MaintenanceUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("maintenance", "update")),
):
    """Modifier un ticket / Update a ticket."""
    ticket = await get_or_404(db, MaintenanceTicket, ticket_id, "Maintenance ticket")

    updates = data.model_dump(exclude_unset=True)
    if updates.get("plate"):
        updates["plate"] = updates["plate"].strip().upper()
    for key, value in updates.items():
        if value is None and key in REQUIRED_FIELDS:
            continue
        setattr(ticket, key, value)
    _stamp_completion(ticket)

    await db.flush()
    await db.refresh(ticket)
    return ticket


@router.delete("/{ticket_id}", status_code=204)
async def delete_ticket(
    ticket_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("maintenance", "delete")),
):
    ticket = await get_or_404(db, MaintenanceTicket, ticket_id, "Maintenance ticket")
    await db.delete(ticket)
