"""Schémas journal d'audit / Audit trail schemas."""

from pydantic import BaseModel, ConfigDict


class AuditEntryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    occurred_at: str
    action: str
    actor: str | None = None
    entity_type: str
    entity_id: int | None = None
    ip_address: str | None = None
    details: dict | None = None


class AuditPage(BaseModel):
    total: int
    items: list[AuditEntryRead]
