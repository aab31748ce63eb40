"""Modele abastecimento / Fueling record model."""

from sqlalchemy import Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from fleetfuel.database import Base


class FuelingRecord(Base):
    """Plein d'un vehicule / One vehicle refueling event.

    Vehicule et chauffeur sont denormalises (pas de cle etrangere).
    Vehicle and driver are denormalized, the plate is the vehicle identity.
    week/month/year sont derives de `date` a l'ecriture.
    """
    __tablename__ = "fueling_records"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    date: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD
    vehicle_name: Mapped[str] = mapped_column(String(150), nullable=False)
    plate: Mapped[str] = mapped_column(String(7), nullable=False, index=True)
    fuel_card: Mapped[str | None] = mapped_column(String(50))
    driver_name: Mapped[str] = mapped_column(String(150), nullable=False)
    driver_registration: Mapped[str] = mapped_column(String(30), nullable=False)
    liters: Mapped[float] = mapped_column(Numeric(10, 3, asdecimal=False), nullable=False)
    amount: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    station: Mapped[str | None] = mapped_column(String(100))

    # Derives de la date / Derived from date
    week: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    # Kilometrage / Mileage
    odometer: Mapped[int | None] = mapped_column(Integer)
    km_driven: Mapped[float | None] = mapped_column(Numeric(10, 1, asdecimal=False))
    km_per_liter: Mapped[float | None] = mapped_column(Numeric(8, 4, asdecimal=False))

    created_at: Mapped[str | None] = mapped_column(String(32))  # ISO 8601

    def __repr__(self) -> str:
        return f"<FuelingRecord {self.date} - {self.liters}L - {self.plate}>"
