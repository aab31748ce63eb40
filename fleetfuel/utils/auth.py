"""
Mots de passe, PIN et jetons JWT / Passwords, PINs and JWT tokens.
"""

from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from fleetfuel.config import settings

# Ressources protegeables, une par routeur / Protectable resources, one per router
RESOURCES = [
    "dashboard",
    "vehicles",
    "drivers",
    "fueling",
    "tanks",
    "maintenance",
    "reports",
    "users",
    "roles",
]
ACTIONS = ["read", "create", "update", "delete"]

ACCESS = "access"
REFRESH = "refresh"


def hash_password(secret: str) -> str:
    """bcrypt pour les mots de passe comme pour les PIN chauffeur / bcrypt for passwords and driver PINs."""
    return bcrypt.hashpw(secret.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(secret: str, hashed: str) -> bool:
    return bcrypt.checkpw(secret.encode("utf-8"), hashed.encode("utf-8"))


def _issue(user_id: int, kind: str, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    claims = {"sub": str(user_id), "type": kind, "iat": now, "exp": now + lifetime}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(user_id: int) -> str:
    return _issue(user_id, ACCESS, timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))


def create_refresh_token(user_id: int) -> str:
    return _issue(user_id, REFRESH, timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS))


def decode_token(token: str, kind: str | None = None) -> dict | None:
    """Claims du jeton, ou None s'il est invalide, expire ou du mauvais type.

    Returns None for a bad signature, an expired token or a token of another kind.
    """
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
    if kind is not None and claims.get("type") != kind:
        return None
    return claims
