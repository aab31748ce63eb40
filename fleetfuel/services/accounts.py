"""
Comptes, roles et journal d'audit / Accounts, roles and audit trail.

Le commit reste a la charge de l'appelant, comme pour le registre des cuves.
Committing is the caller's job, as for the tank ledger.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetfuel.exceptions import ConflictError, NotFoundError, ValidationError
from fleetfuel.models.audit import AuditLog
from fleetfuel.models.user import Permission, Role, User, user_roles
from fleetfuel.utils.auth import RESOURCES, hash_password, verify_password

log = logging.getLogger(__name__)


def record_audit(
    db: AsyncSession,
    action: str,
    entity_type: str,
    entity_id: int | None = None,
    actor: str | None = None,
    ip: str | None = None,
    details: dict[str, Any] | None = None,
) -> AuditLog:
    entry = AuditLog(
        occurred_at=datetime.now(timezone.utc).isoformat(timespec="seconds"),
        action=action,
        actor=actor,
        entity_type=entity_type,
        entity_id=entity_id,
        ip_address=ip,
        details=details,
    )
    db.add(entry)
    return entry


def flat_permissions(user: User) -> list[str]:
    """Permissions "ressource:action" / Flattened "resource:action" strings, "*:*" for superadmin."""
    if user.is_superadmin:
        return ["*:*"]
    return sorted({f"{p.resource}:{p.action}" for role in user.roles for p in role.permissions})


def _permission_pairs(permissions) -> list[tuple[str, str]]:
    pairs = sorted({(p.resource, p.action) for p in permissions})
    unknown = sorted({resource for resource, _ in pairs} - set(RESOURCES))
    if unknown:
        raise ValidationError(f"Unknown resource: {', '.join(unknown)}", {"field": "permissions", "value": unknown})
    return pairs


class AccountService:
    """Utilisateurs et roles sur une session / Users and roles over a session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ── Connexion / Login ───────────────────────────────────────────

    async def authenticate(self, username: str, password: str, ip: str | None = None) -> User | None:
        """Verifier les identifiants et journaliser / Check credentials and audit the attempt.

        Retourne None si les identifiants sont faux ; un compte desactive est
        retourne tel quel, a l'appelant de le refuser.
        Returns None on bad credentials; a disabled account is returned as is.
        """
        user = await self.db.scalar(select(User).where(User.username == username))
        if user is None or not verify_password(password, user.hashed_password):
            record_audit(self.db, "LOGIN_FAILED", "auth", actor=username, ip=ip)
            log.warning("Failed login for %r from %s", username, ip)
            return None
        if not user.is_active:
            record_audit(self.db, "LOGIN_DISABLED", "user", user.id, actor=username, ip=ip)
            return user
        user.last_login_at = datetime.now(timezone.utc)
        record_audit(self.db, "LOGIN", "user", user.id, actor=username, ip=ip)
        return user

    # ── Utilisateurs / Users ────────────────────────────────────────

    async def get_user(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def list_users(self, search: str | None = None) -> list[User]:
        query = select(User).order_by(User.username)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(or_(
                User.username.ilike(pattern),
                User.email.ilike(pattern),
                User.full_name.ilike(pattern),
            ))
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def _check_unique(self, username: str | None, email: str | None, exclude_id: int | None = None) -> None:
        clauses = []
        if username:
            clauses.append(User.username == username)
        if email:
            clauses.append(User.email == email)
        if not clauses:
            return
        query = select(User.id).where(or_(*clauses))
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        if await self.db.scalar(query) is not None:
            raise ConflictError("Username or email already in use", {"username": username, "email": email})

    async def _roles(self, role_ids: list[int]) -> list[Role]:
        if not role_ids:
            return []
        result = await self.db.execute(select(Role).where(Role.id.in_(role_ids)))
        roles = list(result.scalars().all())
        missing = sorted(set(role_ids) - {r.id for r in roles})
        if missing:
            raise ValidationError("Unknown role id", {"field": "role_ids", "value": missing})
        return roles

    async def create_user(
        self,
        username: str,
        email: str,
        password: str,
        full_name: str | None = None,
        is_active: bool = True,
        is_superadmin: bool = False,
        role_ids: list[int] | None = None,
    ) -> User:
        await self._check_unique(username, email)
        user = User(
            username=username,
            email=email,
            full_name=full_name,
            hashed_password=hash_password(password),
            is_active=is_active,
            is_superadmin=is_superadmin,
        )
        user.roles = await self._roles(role_ids or [])
        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)
        log.info("User %s created", username)
        return user

    async def update_user(self, user_id: int, changes: dict[str, Any]) -> User:
        """Modifier un compte / Edit an account. Les valeurs None sont ignorees."""
        user = await self.get_user(user_id)
        changes = {k: v for k, v in changes.items() if v is not None}
        await self._check_unique(changes.get("username"), changes.get("email"), exclude_id=user_id)

        if "password" in changes:
            user.hashed_password = hash_password(changes.pop("password"))
        if "role_ids" in changes:
            user.roles = await self._roles(changes.pop("role_ids"))
        for key in ("username", "email", "full_name", "is_active", "is_superadmin"):
            if key in changes:
                setattr(user, key, changes[key])

        await self.db.flush()
        await self.db.refresh(user)
        return user

    async def assign_role(self, user_id: int, role_name: str) -> User:
        """Remplacer les roles par un seul role nomme / Replace roles with a single named role."""
        user = await self.get_user(user_id)
        role = await self.db.scalar(select(Role).where(Role.name == role_name))
        if role is None:
            raise NotFoundError("Role", role_name)
        user.roles = [role]
        await self.db.flush()
        await self.db.refresh(user)
        log.info("User %s now has role %s", user.username, role_name)
        return user

    async def delete_user(self, user_id: int, actor: User, ip: str | None = None) -> None:
        user = await self.get_user(user_id)
        if user.is_superadmin:
            raise ValidationError("Superadmin accounts cannot be deleted", {"id": user_id})
        if user.id == actor.id:
            raise ValidationError("You cannot delete your own account", {"id": user_id})
        record_audit(
            self.db, "USER_DELETED", "user", user.id,
            actor=actor.username, ip=ip, details={"username": user.username, "email": user.email},
        )
        await self.db.delete(user)
        await self.db.flush()
        log.info("User %s deleted by %s", user.username, actor.username)

    # ── Roles ───────────────────────────────────────────────────────

    async def get_role(self, role_id: int) -> Role:
        role = await self.db.get(Role, role_id)
        if role is None:
            raise NotFoundError("Role", role_id)
        return role

    async def list_roles(self) -> list[Role]:
        result = await self.db.execute(select(Role).order_by(Role.name))
        return list(result.scalars().all())

    async def create_role(self, name: str, description: str | None, permissions) -> Role:
        if await self.db.scalar(select(Role.id).where(Role.name == name)) is not None:
            raise ConflictError(f"Role {name} already exists", {"name": name})
        role = Role(name=name, description=description)
        role.permissions = [Permission(resource=r, action=a) for r, a in _permission_pairs(permissions)]
        self.db.add(role)
        await self.db.flush()
        await self.db.refresh(role)
        return role

    async def update_role(self, role_id: int, name: str | None = None, description: str | None = None,
                          permissions=None) -> Role:
        role = await self.get_role(role_id)
        if name is not None and name != role.name:
            if await self.db.scalar(select(Role.id).where(Role.name == name)) is not None:
                raise ConflictError(f"Role {name} already exists", {"name": name})
            role.name = name
        if description is not None:
            role.description = description
        if permissions is not None:
            pairs = _permission_pairs(permissions)
            # Vider d'abord : la contrainte unique verrait sinon les anciennes lignes / flush deletes before re-insert
            role.permissions = []
            await self.db.flush()
            role.permissions = [Permission(resource=r, action=a) for r, a in pairs]
        await self.db.flush()
        await self.db.refresh(role)
        return role

    async def delete_role(self, role_id: int) -> None:
        role = await self.get_role(role_id)
        holders = await self.db.scalar(
            select(func.count()).select_from(user_roles).where(user_roles.c.role_id == role_id)
        )
        if holders:
            raise ConflictError(f"Role {role.name} is still assigned to {holders} user(s)", {"users": holders})
        # Pas de chargement de role.users en async : suppression SQL directe / no async lazy load of role.users
        self.db.expunge(role)
        await self.db.execute(delete(Permission).where(Permission.role_id == role_id))
        await self.db.execute(delete(Role).where(Role.id == role_id))

    # ── Audit ───────────────────────────────────────────────────────

    async def audit_entries(
        self,
        action: str | None = None,
        actor: str | None = None,
        entity_type: str | None = None,
        since: str | None = None,
        until: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[int, list[AuditLog]]:
        """Journal filtre, plus recent d'abord / Filtered trail, newest first.

        since/until sont des dates ISO, bornes incluses / ISO dates, inclusive bounds.
        """
        query = select(AuditLog)
        if action:
            query = query.where(AuditLog.action == action)
        if actor:
            query = query.where(AuditLog.actor == actor)
        if entity_type:
            query = query.where(AuditLog.entity_type == entity_type)
        if since:
            query = query.where(AuditLog.occurred_at >= since)
        if until:
            query = query.where(func.substr(AuditLog.occurred_at, 1, 10) <= until)
        total = await self.db.scalar(select(func.count()).select_from(query.subquery())) or 0
        result = await self.db.execute(
            query.order_by(AuditLog.occurred_at.desc(), AuditLog.id.desc()).offset(offset).limit(limit)
        )
        return total, list(result.scalars().all())
