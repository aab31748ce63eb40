"""Modele Chauffeur / Driver model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from fleetfuel.database import Base


class Driver(Base):
    """Chauffeur du roster / Rostered driver."""
    __tablename__ = "drivers"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    registration: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    hashed_pin: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<Driver {self.registration} - {self.name}>"
