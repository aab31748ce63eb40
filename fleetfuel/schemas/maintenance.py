"""Schémas entretien / Maintenance ticket schemas."""

from pydantic import BaseModel, ConfigDict, Field

from fleetfuel.models.maintenance import MaintenanceStatus
from fleetfuel.models.vehicle import VehicleKind


class MaintenanceCreate(BaseModel):
    plate: str = Field(min_length=1, max_length=7)
    vehicle_kind: VehicleKind
    vehicle_name: str = Field(min_length=1, max_length=150)
    problem_description: str = Field(min_length=5)
    parts_needed: list[str] | None = None
    part_links: list[str] | None = None
    status: MaintenanceStatus = MaintenanceStatus.PENDING
    registered_date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    completed_date: str | None = Field(default=None, pattern=r"^\d{4}-\d{2}-\d{2}$")
    estimated_cost: float | None = Field(default=None, ge=0)
    actual_cost: float | None = Field(default=None, ge=0)
    invoice_number: str | None = None
    invoice_date: str | None = Field(default=None, pattern=r"^\d{4}-\d{2}-\d{2}$")
    invoice_supplier: str | None = None
    notes: str | None = None


class MaintenanceUpdate(BaseModel):
    plate: str | None = Field(default=None, min_length=1, max_length=7)
    vehicle_kind: VehicleKind | None = None
    vehicle_name: str | None = None
    problem_description: str | None = Field(default=None, min_length=5)
    parts_needed: list[str] | None = None
    part_links: list[str] | None = None
    status: MaintenanceStatus | None = None
    registered_date: str | None = Field(default=None, pattern=r"^\d{4}-\d{2}-\d{2}$")
    completed_date: str | None = Field(default=None, pattern=r"^\d{4}-\d{2}-\d{2}$")
    estimated_cost: float | None = Field(default=None, ge=0)
    actual_cost: float | None = Field(default=None, ge=0)
    invoice_number: str | None = None
    invoice_date: str | None = Field(default=None, pattern=r"^\d{4}-\d{2}-\d{2}$")
    invoice_supplier: str | None = None
    notes: str | None = None


class MaintenanceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    plate: str
    vehicle_kind: VehicleKind
    vehicle_name: str
    problem_description: str
    parts_needed: list[str] | None = None
    part_links: list[str] | None = None
    status: MaintenanceStatus
    registered_date: str
    completed_date: str | None = None
    estimated_cost: float | None = None
    actual_cost: float | None = None
    invoice_number: str | None = None
    invoice_date: str | None = None
    invoice_supplier: str | None = None
    notes: str | None = None


class MaintenancePage(BaseModel):
    total: int
    items: list[MaintenanceRead]
