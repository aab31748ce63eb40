"""Comptes utilisateurs / User account routes, gated by "users" permissions."""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from fleetfuel.database import get_db
from fleetfuel.models.user import User
from fleetfuel.rate_limit import client_key
from fleetfuel.schemas.user import RoleAssign, UserCreate, UserRead, UserUpdate
from fleetfuel.services.accounts import AccountService
from fleetfuel.api.deps import require_permission

router = APIRouter()


@router.get("/", response_model=list[UserRead])
async def list_users(
    search: str | None = None,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("users", "read")),
):
    return await AccountService(db).list_users(search)


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("users", "read")),
):
    return await AccountService(db).get_user(user_id)


@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("users", "create")),
):
    """Creer un compte / Create an account. 409 si username ou email pris."""
    return await AccountService(db).create_user(**data.model_dump())


@router.put("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: int,
    data: UserUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("users", "update")),
):
    return await AccountService(db).update_user(user_id, data.model_dump(exclude_unset=True))


@router.put("/{user_id}/role", response_model=UserRead)
async def assign_role(
    user_id: int,
    data: RoleAssign,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("users", "update")),
):
    """Changer le role (admin, coordinator, user) / Switch the account to one named role."""
    return await AccountService(db).assign_role(user_id, data.role)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("users", "delete")),
):
    """Supprimer un compte, journalise / Delete an account, audited."""
    await AccountService(db).delete_user(user_id, actor=user, ip=client_key(request))
