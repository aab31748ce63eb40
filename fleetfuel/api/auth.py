"""
Routes d'authentification / Authentication routes.
Chaque tentative de connexion est journalisee / Every login attempt is audited.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from fleetfuel.config import settings
from fleetfuel.database import get_db
from fleetfuel.models.user import User
from fleetfuel.rate_limit import client_key, limiter
from fleetfuel.schemas.auth import LoginRequest, RefreshRequest, TokenResponse
from fleetfuel.schemas.user import UserMe
from fleetfuel.services.accounts import AccountService, flat_permissions
from fleetfuel.utils.auth import REFRESH, create_access_token, create_refresh_token, decode_token
from fleetfuel.api.deps import get_current_user

router = APIRouter()


def _tokens(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(user.id),
        refresh_token=create_refresh_token(user.id),
    )


@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.RATE_LIMIT_LOGIN)
async def login(request: Request, data: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Connexion / Login. 401 sur identifiants faux ou compte desactive."""
    user = await AccountService(db).authenticate(data.username, data.password, client_key(request))
    if user is None or not user.is_active:
        # L'echec reste journalise malgre le rollback de get_db / Keep the audit row despite get_db rollback
        await db.commit()
        detail = "Account disabled" if user is not None else "Invalid credentials"
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)
    return _tokens(user)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(data: RefreshRequest, db: AsyncSession = Depends(get_db)):
    payload = decode_token(data.refresh_token, REFRESH)
    if payload is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")
    user = await db.get(User, int(payload["sub"]))
    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found or inactive")
    return _tokens(user)


@router.get("/me", response_model=UserMe)
async def me(user: User = Depends(get_current_user)):
    """Profil courant / Current profile with flat permissions."""
    return UserMe(
        id=user.id,
        username=user.username,
        email=user.email,
        full_name=user.full_name,
        is_superadmin=user.is_superadmin,
        roles=user.roles,
        permissions=flat_permissions(user),
    )
