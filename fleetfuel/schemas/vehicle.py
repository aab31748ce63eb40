"""Schémas Véhicule / Vehicle schemas."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fleetfuel.models.vehicle import FuelType, VehicleKind, VehicleStatus


def _check_year(value: int | None) -> int | None:
    if value is not None and not 1950 <= value <= date.today().year + 1:
        raise ValueError("Invalid year")
    return value


class VehicleBase(BaseModel):
    kind: VehicleKind = VehicleKind.VEHICLE
    name: str = Field(min_length=3, max_length=150)
    year: int
    plate: str = Field(min_length=7, max_length=7)
    fuel_card: str | None = None
    status: VehicleStatus = VehicleStatus.OPERATIONAL
    fuel_type: FuelType
    notes: str | None = None

    @field_validator("year")
    @classmethod
    def year_in_range(cls, value: int) -> int:
        return _check_year(value)

    @field_validator("plate")
    @classmethod
    def upper_plate(cls, value: str) -> str:
        return value.strip().upper()


class VehicleCreate(VehicleBase):
    pass


class VehicleUpdate(BaseModel):
    kind: VehicleKind | None = None
    name: str | None = Field(default=None, min_length=3, max_length=150)
    year: int | None = None
    plate: str | None = Field(default=None, min_length=7, max_length=7)
    fuel_card: str | None = None
    status: VehicleStatus | None = None
    fuel_type: FuelType | None = None
    notes: str | None = None

    @field_validator("year")
    @classmethod
    def year_in_range(cls, value: int | None) -> int | None:
        return _check_year(value)

    @field_validator("plate")
    @classmethod
    def upper_plate(cls, value: str | None) -> str | None:
        return value.strip().upper() if value else value


class VehicleRead(VehicleBase):
    model_config = ConfigDict(from_attributes=True)
    id: int


class VehicleSummary(BaseModel):
    """Pour les listes deroulantes / For select lists."""
    model_config = ConfigDict(from_attributes=True)
    plate: str
    name: str
    fuel_card: str | None = None
    kind: VehicleKind


class VehiclePage(BaseModel):
    total: int
    items: list[VehicleRead]
