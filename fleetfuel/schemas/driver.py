"""Schémas Chauffeur / Driver schemas."""

from pydantic import BaseModel, ConfigDict, Field


class DriverCreate(BaseModel):
    name: str = Field(min_length=3, max_length=150)
    registration: str = Field(min_length=1, max_length=30)
    pin: str = Field(min_length=4, max_length=100)


class DriverUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=3, max_length=150)
    registration: str | None = Field(default=None, min_length=1, max_length=30)
    pin: str | None = Field(default=None, min_length=4, max_length=100)


class DriverRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    registration: str


class DriverPage(BaseModel):
    total: int
    items: list[DriverRead]
