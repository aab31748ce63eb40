"""Schémas cuves et mouvements / Tank and movement schemas."""

from pydantic import BaseModel, ConfigDict, Field

from fleetfuel.models.tank import MovementDirection
from fleetfuel.models.vehicle import FuelType


class TankCreate(BaseModel):
    name: str = Field(min_length=3, max_length=100)
    fuel_type: FuelType = FuelType.DIESEL
    capacity_liters: float = Field(gt=0)
    initial_level: float = Field(default=0, ge=0)


class TankUpdate(BaseModel):
    """Pas de niveau ici : seuls les mouvements le modifient / No level here, only movements change it."""
    name: str | None = Field(default=None, min_length=3, max_length=100)
    fuel_type: FuelType | None = None
    capacity_liters: float | None = Field(default=None, gt=0)


class TankRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    fuel_type: FuelType
    capacity_liters: float
    current_level: float
    fill_percent: float
    created_at: str | None = None


class MovementCreate(BaseModel):
    direction: MovementDirection
    quantity_liters: float = Field(gt=0)
    value: float | None = Field(default=None, ge=0)
    note: str | None = None
    request_id: str | None = Field(default=None, max_length=64)


class MovementRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    tank_id: int
    direction: MovementDirection
    quantity_liters: float
    value: float | None = None
    level_after: float
    responsible_id: int | None = None
    responsible_name: str
    note: str | None = None
    timestamp: str
    request_id: str | None = None


class MovementPage(BaseModel):
    total: int
    items: list[MovementRead]
