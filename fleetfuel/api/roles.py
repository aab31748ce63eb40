"""Roles et permissions / Role and permission routes, gated by "roles" permissions."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from fleetfuel.database import get_db
from fleetfuel.models.user import User
from fleetfuel.schemas.user import RoleCreate, RoleRead, RoleUpdate
from fleetfuel.services.accounts import AccountService
from fleetfuel.utils.auth import ACTIONS, RESOURCES
from fleetfuel.api.deps import require_permission

router = APIRouter()


@router.get("/", response_model=list[RoleRead])
async def list_roles(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("roles", "read")),
):
    return await AccountService(db).list_roles()


@router.get("/catalog")
async def permission_catalog(user: User = Depends(require_permission("roles", "read"))):
    """Ressources et actions attribuables / Grantable resources and actions."""
    return {"resources": RESOURCES, "actions": ACTIONS}


@router.post("/", response_model=RoleRead, status_code=status.HTTP_201_CREATED)
async def create_role(
    data: RoleCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("roles", "create")),
):
    return await AccountService(db).create_role(data.name, data.description, data.permissions)


@router.put("/{role_id}", response_model=RoleRead)
async def update_role(
    role_id: int,
    data: RoleUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("roles", "update")),
):
    """Modifier un role ; la liste de permissions fournie remplace l'ancienne / Given permissions replace the old set."""
    return await AccountService(db).update_role(role_id, data.name, data.description, data.permissions)


@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(
    role_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("roles", "delete")),
):
    """409 tant que le role est attribue / 409 while the role is still assigned."""
    await AccountService(db).delete_role(role_id)
