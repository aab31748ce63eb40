"""Schémas pleins / Fueling record schemas.

week/month/year et km/L sont calculés côté serveur, jamais saisis.
week/month/year and km/L are server-computed, never client-supplied.
"""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field


class FuelingCreate(BaseModel):
    date: dt.date
    vehicle_name: str = Field(min_length=1, max_length=150)
    plate: str = Field(min_length=1, max_length=7)
    fuel_card: str | None = None
    driver_name: str = Field(min_length=1, max_length=150)
    driver_registration: str = Field(min_length=1, max_length=30)
    liters: float = Field(gt=0)
    amount: float = Field(gt=0)
    odometer: int | None = Field(default=None, ge=1)
    station: str | None = None


class FuelingUpdate(BaseModel):
    date: dt.date | None = None
    vehicle_name: str | None = Field(default=None, min_length=1, max_length=150)
    plate: str | None = Field(default=None, min_length=1, max_length=7)
    fuel_card: str | None = None
    driver_name: str | None = Field(default=None, min_length=1, max_length=150)
    driver_registration: str | None = Field(default=None, min_length=1, max_length=30)
    liters: float | None = Field(default=None, gt=0)
    amount: float | None = Field(default=None, gt=0)
    odometer: int | None = Field(default=None, ge=1)
    station: str | None = None


class FuelingRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    date: str
    vehicle_name: str
    plate: str
    fuel_card: str | None = None
    driver_name: str
    driver_registration: str
    liters: float
    amount: float
    station: str | None = None
    week: int
    month: int
    year: int
    odometer: int | None = None
    km_driven: float | None = None
    km_per_liter: float | None = None


class WeekTotalRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    week: int
    week_year: int | None = None
    total_liters: float
    total_spend: float
    record_count: int


class FuelingListResponse(BaseModel):
    """Vue mensuelle : pleins + sous-totaux / Month view: records and sub-totals."""
    total: int
    items: list[FuelingRead]
    weekly_totals: list[WeekTotalRead]
    period_liters: float
    period_spend: float
