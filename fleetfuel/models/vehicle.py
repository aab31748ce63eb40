"""Modele Vehicule / Vehicle model.

Un seul registre pour les vehicules routiers et les engins.
One registry for road vehicles and machinery, told apart by `kind`.
"""

import enum

from sqlalchemy import Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from fleetfuel.database import Base


class VehicleKind(str, enum.Enum):
    """Nature du vehicule / Vehicle kind."""
    VEHICLE = "VEHICLE"
    MACHINERY = "MACHINERY"


class VehicleStatus(str, enum.Enum):
    """Statut du vehicule / Vehicle status."""
    OPERATIONAL = "OPERATIONAL"
    INOPERATIVE = "INOPERATIVE"
    IN_MAINTENANCE = "IN_MAINTENANCE"
    IN_REPAIR = "IN_REPAIR"
    RESERVE = "RESERVE"


class FuelType(str, enum.Enum):
    """Type de carburant / Fuel type."""
    GASOLINE = "GASOLINE"
    DIESEL = "DIESEL"
    ETHANOL = "ETHANOL"
    CNG = "CNG"
    ELECTRIC = "ELECTRIC"


class Vehicle(Base):
    """Vehicule ou engin du parc / Fleet vehicle or machine."""
    __tablename__ = "vehicles"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    kind: Mapped[VehicleKind] = mapped_column(Enum(VehicleKind), nullable=False, default=VehicleKind.VEHICLE)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    plate: Mapped[str] = mapped_column(String(7), unique=True, nullable=False)
    fuel_card: Mapped[str | None] = mapped_column(String(50))
    status: Mapped[VehicleStatus] = mapped_column(Enum(VehicleStatus), default=VehicleStatus.OPERATIONAL)
    fuel_type: Mapped[FuelType] = mapped_column(Enum(FuelType), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)

    def __repr__(self) -> str:
        return f"<Vehicle {self.plate} - {self.name}>"
