"""
Schemas comptes et roles / Account and role schemas.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from fleetfuel.utils.auth import ACTIONS, RESOURCES

ACTION_PATTERN = "^(" + "|".join(ACTIONS) + ")$"


class PermissionInput(BaseModel):
    """Couple ressource/action / Resource and action pair, e.g. tanks:update."""

    resource: str
    action: str = Field(pattern=ACTION_PATTERN)

    @field_validator("resource")
    @classmethod
    def known_resource(cls, value: str) -> str:
        if value not in RESOURCES:
            raise ValueError(f"unknown resource {value!r}")
        return value


class PermissionRead(PermissionInput):
    model_config = ConfigDict(from_attributes=True)

    id: int


class RoleCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    description: str | None = None
    permissions: list[PermissionInput] = []


class RoleUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=50)
    description: str | None = None
    permissions: list[PermissionInput] | None = None


class RoleBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class RoleRead(RoleBrief):
    description: str | None
    permissions: list[PermissionRead]
    created_at: datetime


class RoleAssign(BaseModel):
    """Attribution d'un role par son nom / Assign a single role by name."""

    role: str = Field(min_length=1, max_length=50)


def _clean_username(value: str | None) -> str | None:
    return value.strip() if value is not None else None


class UserCreate(BaseModel):
    username: str = Field(min_length=1, max_length=50)
    email: EmailStr
    full_name: str | None = Field(default=None, max_length=150)
    password: str = Field(min_length=4)
    is_active: bool = True
    is_superadmin: bool = False
    role_ids: list[int] = []

    normalize_username = field_validator("username")(_clean_username)


class UserUpdate(BaseModel):
    """Champs absents ou null : inchanges / Missing or null fields stay as they are."""

    username: str | None = Field(default=None, min_length=1, max_length=50)
    email: EmailStr | None = None
    full_name: str | None = Field(default=None, max_length=150)
    password: str | None = Field(default=None, min_length=4)
    is_active: bool | None = None
    is_superadmin: bool | None = None
    role_ids: list[int] | None = None

    normalize_username = field_validator("username")(_clean_username)


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    full_name: str | None = None
    display_name: str
    is_active: bool
    is_superadmin: bool
    roles: list[RoleBrief]
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class UserMe(BaseModel):
    """Profil courant, permissions aplaties / Current profile with flat "resource:action" strings."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    full_name: str | None = None
    is_superadmin: bool
    roles: list[RoleBrief]
    permissions: list[str]
