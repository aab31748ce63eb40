"""Modele journal d'audit / Audit trail model.

Connexions et suppressions de comptes ; une ligne par evenement, jamais modifiee.
Logins and account deletions; one row per event, never updated.
"""

from sqlalchemy import JSON, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from fleetfuel.database import Base


class AuditLog(Base):
    __tablename__ = "audit_log"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    occurred_at: Mapped[str] = mapped_column(String(32), nullable=False, index=True)  # ISO 8601
    action: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    actor: Mapped[str | None] = mapped_column(String(100))
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[int | None] = mapped_column(Integer)
    ip_address: Mapped[str | None] = mapped_column(String(45))
    details: Mapped[dict | None] = mapped_column(JSON)

    def __repr__(self) -> str:
        return f"<AuditLog {self.occurred_at} {self.action} by {self.actor}>"
