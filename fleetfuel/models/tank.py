"""Modeles cuve et mouvements / Fuel tank and movement models.

Le niveau courant n'est ecrit que par le registre des mouvements.
Current level is only written by the movement ledger.
"""

import enum

from sqlalchemy import Enum, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleetfuel.database import Base
from fleetfuel.models.vehicle import FuelType


class MovementDirection(str, enum.Enum):
    """Sens du mouvement / Movement direction."""
    INBOUND = "INBOUND"
    OUTBOUND = "OUTBOUND"


class Tank(Base):
    """Cuve de stockage / Storage tank."""
    __tablename__ = "tanks"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    fuel_type: Mapped[FuelType] = mapped_column(Enum(FuelType), nullable=False)
    capacity_liters: Mapped[float] = mapped_column(Numeric(12, 3, asdecimal=False), nullable=False)
    current_level: Mapped[float] = mapped_column(Numeric(12, 3, asdecimal=False), nullable=False, default=0)
    created_at: Mapped[str | None] = mapped_column(String(32))  # ISO 8601

    # Relations
    movements: Mapped[list["TankMovement"]] = relationship(
        back_populates="tank", order_by="TankMovement.timestamp"
    )

    @property
    def fill_percent(self) -> float:
        if not self.capacity_liters:
            return 0.0
        return round(float(self.current_level) / float(self.capacity_liters) * 100, 1)

    def __repr__(self) -> str:
        return f"<Tank {self.name} {self.current_level}/{self.capacity_liters}L>"


class TankMovement(Base):
    """Ecriture du registre, immuable / Immutable ledger entry."""
    __tablename__ = "tank_movements"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tank_id: Mapped[int] = mapped_column(ForeignKey("tanks.id"), nullable=False, index=True)
    direction: Mapped[MovementDirection] = mapped_column(Enum(MovementDirection), nullable=False)
    quantity_liters: Mapped[float] = mapped_column(Numeric(12, 3, asdecimal=False), nullable=False)
    value: Mapped[float | None] = mapped_column(Numeric(12, 2, asdecimal=False))  # entrees uniquement / inbound only
    level_after: Mapped[float] = mapped_column(Numeric(12, 3, asdecimal=False), nullable=False)
    responsible_id: Mapped[int | None] = mapped_column()
    responsible_name: Mapped[str] = mapped_column(String(150), nullable=False)
    note: Mapped[str | None] = mapped_column(Text)
    timestamp: Mapped[str] = mapped_column(String(32), nullable=False)  # ISO 8601
    # Identifiant client pour rejouer sans doublon / Client id for safe retries
    request_id: Mapped[str | None] = mapped_column(String(64), unique=True)

    # Relations
    tank: Mapped["Tank"] = relationship(back_populates="movements")

    def __repr__(self) -> str:
        return f"<TankMovement {self.direction.value} {self.quantity_liters}L - tank {self.tank_id}>"
