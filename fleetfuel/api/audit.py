"""Journal d'audit / Audit trail routes (superadmin only)."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fleetfuel.database import get_db
from fleetfuel.models.user import User
from fleetfuel.schemas.audit import AuditPage
from fleetfuel.services.accounts import AccountService
from fleetfuel.api.deps import Pagination, require_superadmin

router = APIRouter()

_ISO_DATE = r"^\d{4}-\d{2}-\d{2}$"


@router.get("/", response_model=AuditPage)
async def list_audit_entries(
    action: str | None = None,
    actor: str | None = None,
    entity_type: str | None = None,
    since: str | None = Query(default=None, pattern=_ISO_DATE),
    until: str | None = Query(default=None, pattern=_ISO_DATE),
    pagination: Pagination = Depends(),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_superadmin),
):
    total, items = await AccountService(db).audit_entries(
        action=action,
        actor=actor,
        entity_type=entity_type,
        since=since,
        until=until,
        limit=pagination.page_size,
        offset=pagination.offset,
    )
    return AuditPage(total=total, items=items)
