"""
Dependances communes des routeurs / Shared router dependencies.

Jeton Bearer -> utilisateur -> permission "ressource:action".
Bearer token -> user -> "resource:action" permission.
"""

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from fleetfuel.config import settings
from fleetfuel.database import get_db
from fleetfuel.exceptions import NotFoundError
from fleetfuel.models.user import User
from fleetfuel.services.accounts import flat_permissions
from fleetfuel.utils.auth import ACCESS, decode_token

bearer = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer),
    db: AsyncSession = Depends(get_db),
) -> User:
    claims = decode_token(credentials.credentials, ACCESS)
    if claims is None:
        raise _unauthorized("Invalid or expired token")
    user = await db.get(User, int(claims["sub"]))
    if user is None or not user.is_active:
        raise _unauthorized("User not found or inactive")
    return user


def has_permission(user: User, resource: str, action: str) -> bool:
    granted = flat_permissions(user)
    return "*:*" in granted or f"{resource}:{action}" in granted


def require_permission(resource: str, action: str):
    """Dependance qui exige une permission / Dependency requiring one permission.

    Le superadmin passe toujours / Superadmins always pass.
    """

    async def _guard(user: User = Depends(get_current_user)) -> User:
        if not has_permission(user, resource, action):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission required: {resource}:{action}",
            )
        return user

    return _guard


async def require_superadmin(user: User = Depends(get_current_user)) -> User:
    if not user.is_superadmin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Superadmin only")
    return user


class Pagination:
    """?page=&page_size= avec les bornes de la configuration / bounded by settings."""

    def __init__(
        self,
        page: int = Query(1, ge=1),
        page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    ):
        self.page = page
        self.page_size = page_size

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


async def get_or_404(db: AsyncSession, model, object_id: int, label: str):
    """Charger par cle primaire ou lever NotFoundError / Load by primary key or raise NotFoundError."""
    obj = await db.get(model, object_id)
    if obj is None:
        raise NotFoundError(label, object_id)
    return obj
