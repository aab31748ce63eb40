"""
Seed initial / Initial seeding.
Crée le superadmin et les rôles par défaut au premier démarrage.
Creates the superadmin and default roles on first startup.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetfuel.config import settings
from fleetfuel.models.user import Permission, Role, User
from fleetfuel.utils.auth import ACTIONS, RESOURCES, hash_password

log = logging.getLogger(__name__)

# Rôles par défaut / Default roles
#   admin       : tout / everything
#   coordinator : tout sauf administration des comptes / all but account admin
#   user        : lecture + saisie des pleins et mouvements / read + fueling and movements entry
DEFAULT_ROLES: dict[str, list[tuple[str, str]]] = {
    "admin": [(r, a) for r in RESOURCES for a in ACTIONS],
    "coordinator": [(r, a) for r in RESOURCES if r not in ("users", "roles") for a in ACTIONS],
    "user": (
        [(r, "read") for r in RESOURCES if r not in ("users", "roles")]
        + [("fueling", "create"), ("tanks", "create"), ("maintenance", "create")]
    ),
}


async def seed_roles(session: AsyncSession) -> None:
    """Créer les rôles manquants / Create missing default roles."""
    existing = set((await session.execute(select(Role.name))).scalars().all())
    for name, perms in DEFAULT_ROLES.items():
        if name in existing:
            continue
        role = Role(name=name, description=f"Default {name} role")
        role.permissions = [Permission(resource=r, action=a) for r, a in perms]
        session.add(role)
        log.info("Role %s created", name)
    await session.commit()


async def seed_superadmin(session: AsyncSession) -> None:
    """Créer le superadmin si aucun utilisateur n'existe / Create superadmin if no users exist."""
    count = await session.scalar(select(func.count(User.id)))

    if count == 0:
        admin = User(
            username=settings.ADMIN_USERNAME,
            email=settings.ADMIN_EMAIL,
            full_name="Administrator",
            hashed_password=hash_password(settings.ADMIN_PASSWORD),
            is_active=True,
            is_superadmin=True,
        )
        session.add(admin)
        await session.commit()
        log.info("Superadmin created: %s", settings.ADMIN_USERNAME)
    else:
        log.info("%s existing user(s), superadmin seed skipped", count)
