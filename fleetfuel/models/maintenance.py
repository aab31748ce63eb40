"""Modele ticket d'entretien / Maintenance ticket model."""

import enum

from sqlalchemy import JSON, Enum, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from fleetfuel.database import Base
from fleetfuel.models.vehicle import VehicleKind


class MaintenanceStatus(str, enum.Enum):
    """Statut entretien / Maintenance status."""
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"
    CANCELLED = "CANCELLED"


class MaintenanceTicket(Base):
    """Ticket d'entretien / Maintenance ticket."""
    __tablename__ = "maintenance_tickets"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    plate: Mapped[str] = mapped_column(String(7), nullable=False, index=True)
    vehicle_kind: Mapped[VehicleKind] = mapped_column(Enum(VehicleKind), nullable=False)
    vehicle_name: Mapped[str] = mapped_column(String(150), nullable=False)
    problem_description: Mapped[str] = mapped_column(Text, nullable=False)
    parts_needed: Mapped[list[str] | None] = mapped_column(JSON)
    part_links: Mapped[list[str] | None] = mapped_column(JSON)
    status: Mapped[MaintenanceStatus] = mapped_column(
        Enum(MaintenanceStatus), default=MaintenanceStatus.PENDING
    )

    # Dates
    registered_date: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD
    completed_date: Mapped[str | None] = mapped_column(String(10))

    # Couts / Costs
    estimated_cost: Mapped[float | None] = mapped_column(Numeric(10, 2, asdecimal=False))
    actual_cost: Mapped[float | None] = mapped_column(Numeric(10, 2, asdecimal=False))

    # Facture / Invoice
    invoice_number: Mapped[str | None] = mapped_column(String(50))
    invoice_date: Mapped[str | None] = mapped_column(String(10))
    invoice_supplier: Mapped[str | None] = mapped_column(String(150))

    notes: Mapped[str | None] = mapped_column(Text)

    def __repr__(self) -> str:
        return f"<MaintenanceTicket {self.status.value} - {self.plate}>"
