"""
Registre des cuves / Tank ledger.

Seul ecrivain de `Tank.current_level` : chaque mouvement est applique par un
UPDATE conditionnel (bornes verifiees en SQL) suivi de l'INSERT du mouvement,
dans la meme transaction.
Sole writer of `Tank.current_level`: each movement is a bounded conditional
UPDATE followed by the movement INSERT, in the same transaction.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Numeric, cast, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fleetfuel.exceptions import (
    CapacityExceededError,
    InsufficientStockError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from fleetfuel.models.tank import MovementDirection, Tank, TankMovement
from fleetfuel.models.vehicle import FuelType

log = logging.getLogger(__name__)

# Echelle des colonnes de litres (Numeric(12, 3)) / Scale of the litre columns
LITRE_SCALE = 3


def litres(value: float | None) -> float | None:
    """Ramener a l'echelle stockee / Round to the stored scale, so 0.1 + 0.2 is 0.3."""
    return None if value is None else round(float(value), LITRE_SCALE)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def check_movement(
    tank_id: int,
    level: float,
    capacity: float,
    direction: MovementDirection,
    quantity: float,
) -> float:
    """Verifier un mouvement et retourner le nouveau niveau / Check a movement, return the new level.

    Aucun ecretage : un mouvement hors bornes est refuse.
    No clamping: an out-of-bounds movement is rejected.
    """
    quantity = litres(quantity)
    if quantity is None or quantity <= 0:
        raise ValidationError("Quantity must be positive", {"field": "quantity", "value": quantity})
    level, capacity = litres(level), litres(capacity)
    delta = quantity if direction == MovementDirection.INBOUND else -quantity
    new_level = litres(level + delta)
    details = {"tank_id": tank_id, "level": level, "capacity": capacity, "requested": quantity}
    if direction == MovementDirection.OUTBOUND and new_level < 0:
        raise InsufficientStockError(
            f"Only {level:g} L available in tank {tank_id}, cannot remove {quantity:g} L", details
        )
    if direction == MovementDirection.INBOUND and new_level > capacity:
        raise CapacityExceededError(
            f"Tank {tank_id} can take {capacity - level:g} L more, cannot add {quantity:g} L", details
        )
    return new_level


class TankLedger:
    """Operations du registre sur une session / Ledger operations over a session.

    Le commit reste a la charge de l'appelant (get_db en HTTP).
    Committing is the caller's job (get_db over HTTP).
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def read_tank(self, tank_id: int) -> Tank:
        """Relire une cuve depuis la base / Re-read a tank from the database."""
        result = await self.db.execute(
            select(Tank).where(Tank.id == tank_id).execution_options(populate_existing=True)
        )
        tank = result.scalar_one_or_none()
        if tank is None:
            raise NotFoundError("Tank", tank_id)
        return tank

    async def list_tanks(self) -> list[Tank]:
        result = await self.db.execute(select(Tank).order_by(Tank.name))
        return list(result.scalars().all())

    async def create_tank(
        self,
        name: str,
        fuel_type: FuelType | str,
        capacity: float,
        initial_level: float = 0.0,
    ) -> Tank:
        """Creer une cuve / Create a tank. Le niveau initial n'est fixe qu'ici."""
        capacity, initial_level = litres(capacity), litres(initial_level)
        if not name or not name.strip():
            raise ValidationError("Tank name is required", {"field": "name"})
        if capacity is None or capacity <= 0:
            raise ValidationError("Capacity must be positive", {"field": "capacity_liters", "value": capacity})
        if initial_level is None or initial_level < 0 or initial_level > capacity:
            raise ValidationError(
                f"Initial level must be between 0 and {capacity:g} L",
                {"field": "initial_level", "value": initial_level, "capacity": capacity},
            )

        tank = Tank(
            name=name.strip(),
            fuel_type=FuelType(fuel_type),
            capacity_liters=capacity,
            current_level=initial_level,
            created_at=_now(),
        )
        try:
            self.db.add(tank)
            await self.db.flush()
            await self.db.refresh(tank)
        except SQLAlchemyError as exc:
            log.exception("Tank creation failed")
            raise PersistenceError("Could not create tank") from exc
        log.info("Tank %s created: %s L / %s L", tank.id, initial_level, capacity)
        return tank

    async def update_tank(
        self,
        tank_id: int,
        name: str | None = None,
        fuel_type: FuelType | str | None = None,
        capacity: float | None = None,
    ) -> Tank:
        """Modifier une cuve / Edit a tank. Le niveau n'est jamais modifiable ici.

        Une nouvelle capacite doit rester >= niveau courant, verifie en SQL.
        A new capacity must stay >= the current level, checked in SQL.
        """
        tank = await self.read_tank(tank_id)
        if name is not None:
            if not name.strip():
                raise ValidationError("Tank name is required", {"field": "name"})
            tank.name = name.strip()
        if fuel_type is not None:
            tank.fuel_type = FuelType(fuel_type)

        capacity = litres(capacity)
        try:
            if capacity is not None:
                if capacity <= 0:
                    raise ValidationError(
                        "Capacity must be positive", {"field": "capacity_liters", "value": capacity}
                    )
                result = await self.db.execute(
                    update(Tank)
                    .where(Tank.id == tank_id, func.round(Tank.current_level, LITRE_SCALE) <= capacity)
                    .values(capacity_liters=capacity)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    current = await self.read_tank(tank_id)
                    raise ValidationError(
                        f"Capacity {capacity:g} L is below current level {current.current_level:g} L",
                        {"field": "capacity_liters", "value": capacity, "level": current.current_level},
                    )
            await self.db.flush()
        except SQLAlchemyError as exc:
            log.exception("Tank %s update failed", tank_id)
            raise PersistenceError("Could not update tank") from exc
        return await self.read_tank(tank_id)

    async def apply_movement(
        self,
        tank_id: int,
        direction: MovementDirection | str,
        quantity: float,
        responsible_id: int | None,
        responsible_name: str,
        value: float | None = None,
        note: str | None = None,
        request_id: str | None = None,
    ) -> TankMovement:
        """Appliquer une entree ou une sortie / Apply an inbound or outbound movement.

        Leve NotFoundError, ValidationError, InsufficientStockError,
        CapacityExceededError ou PersistenceError ; en cas d'erreur rien n'est ecrit.
        """
        direction = MovementDirection(direction)
        quantity = litres(quantity)
        if quantity is None or quantity <= 0:
            raise ValidationError("Quantity must be positive", {"field": "quantity", "value": quantity})
        if not responsible_name or not responsible_name.strip():
            raise ValidationError("Responsible name is required", {"field": "responsible_name"})
        if value is not None and value < 0:
            raise ValidationError("Value cannot be negative", {"field": "value", "value": value})
        if direction == MovementDirection.OUTBOUND:
            value = None

        # Rejeu idempotent / Idempotent replay
        if request_id:
            existing = await self.db.scalar(
                select(TankMovement).where(TankMovement.request_id == request_id)
            )
            if existing is not None:
                if existing.tank_id != tank_id:
                    raise ValidationError(
                        "request_id already used for another tank", {"field": "request_id"}
                    )
                log.info("Movement replay %s ignored (already applied as %s)", request_id, existing.id)
                return existing

        delta = quantity if direction == MovementDirection.INBOUND else -quantity
        # Arrondi en SQL : les floats accumules ne font pas rejeter un plein exact
        # Rounded in SQL so accumulated float error never rejects an exact fill or drain
        step = cast(Decimal(str(delta)), Numeric(12, LITRE_SCALE))
        new_level = func.round(Tank.current_level + step, LITRE_SCALE)

        try:
            result = await self.db.execute(
                update(Tank)
                .where(Tank.id == tank_id, new_level >= 0, new_level <= Tank.capacity_liters)
                .values(current_level=new_level)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                tank = await self.read_tank(tank_id)
                try:
                    check_movement(tank_id, tank.current_level, tank.capacity_liters, direction, quantity)
                except (InsufficientStockError, CapacityExceededError):
                    log.warning(
                        "Movement rejected on tank %s: %s %s L (level %s / %s)",
                        tank_id, direction.value, quantity, tank.current_level, tank.capacity_liters,
                    )
                    raise
                # Le niveau a change entre l'UPDATE et la relecture / Level moved between UPDATE and re-read
                raise PersistenceError("Tank level changed concurrently, retry", {"tank_id": tank_id})

            tank = await self.read_tank(tank_id)
            movement = TankMovement(
                tank_id=tank_id,
                direction=direction,
                quantity_liters=quantity,
                value=value,
                level_after=tank.current_level,
                responsible_id=responsible_id,
                responsible_name=responsible_name.strip(),
                note=note,
                timestamp=_now(),
                request_id=request_id,
            )
            self.db.add(movement)
            await self.db.flush()
            await self.db.refresh(movement)
        except SQLAlchemyError as exc:
            log.exception("Movement on tank %s failed", tank_id)
            raise PersistenceError("Could not record movement") from exc

        log.info(
            "Movement %s on tank %s: %s %s L -> level %s",
            movement.id, tank_id, direction.value, quantity, movement.level_after,
        )
        return movement

    async def history(self, tank_id: int, limit: int = 500, offset: int = 0) -> tuple[int, list[TankMovement]]:
        """Historique chronologique / Chronological movement history."""
        await self.read_tank(tank_id)
        total = await self.db.scalar(
            select(func.count(TankMovement.id)).where(TankMovement.tank_id == tank_id)
        ) or 0
        result = await self.db.execute(
            select(TankMovement)
            .where(TankMovement.tank_id == tank_id)
            .order_by(TankMovement.timestamp, TankMovement.id)
            .offset(offset)
            .limit(limit)
        )
        return total, list(result.scalars().all())
