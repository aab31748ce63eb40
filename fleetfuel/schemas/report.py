"""Schémas rapports et dashboard / Report and dashboard schemas."""

from pydantic import BaseModel, ConfigDict


class ScopeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    year: int
    month: int | None = None
    week: int | None = None


class KpiBlock(BaseModel):
    """KPI d'une periode / Scope KPIs. None = non applicable."""
    model_config = ConfigDict(from_attributes=True)
    record_count: int
    total_liters: float
    total_spend: float
    average_cost_per_liter: float | None = None
    distance_covered: float
    average_efficiency: float | None = None


class ReportVehicleRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    plate: str
    name: str
    fuel_type: str | None = None


class ReportLineRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    date: str
    odometer: int | None = None
    liters: float
    amount: float
    station: str | None = None
    driver_name: str | None = None
    km_driven: float | None = None
    km_per_liter: float | None = None


class VehicleReportResponse(BaseModel):
    """Document du rapport ou etat vide / Report document or empty state."""
    found: bool
    plate: str
    scope: ScopeRead
    scope_description: str
    reason: str | None = None
    vehicle: ReportVehicleRead | None = None
    kpis: KpiBlock | None = None
    initial_odometer: int | None = None
    lines: list[ReportLineRead] = []


class MonthTotalRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    month: int
    month_name: str
    total_liters: float
    total_spend: float
    record_count: int


class SpendItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    key: str
    name: str
    total: float


class DashboardResponse(BaseModel):
    """Donnees du dashboard flotte / Fleet dashboard data."""
    model_config = ConfigDict(from_attributes=True)
    year: int
    record_count: int
    total_spend: float
    total_liters: float
    average_cost_per_liter: float | None = None
    average_efficiency: float | None = None
    monthly: list[MonthTotalRead]
    spend_by_vehicle: list[SpendItemRead]
    spend_by_station: list[SpendItemRead]


class FilterOptions(BaseModel):
    """Valeurs des filtres du dashboard / Dashboard filter values."""
    plates: list[str]
    stations: list[str]
    fuel_types: list[str]
