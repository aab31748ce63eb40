"""
Moteur d'agregation / Aggregation engine.

Fonctions pures sur des pleins deja charges : aucun etat cache, resultat
identique pour les memes entrees. Les divisions par zero donnent None.
Pure functions over already-queried fueling records: same input, same output.
Divisions by zero resolve to None ("not applicable"), never to an error.

Un enregistrement est tout objet exposant liters, amount, week, month, year,
plate, vehicle_name, station, km_driven, km_per_liter.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from fleetfuel.exceptions import ValidationError
from fleetfuel.services.period_classifier import week_year

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


# ── Types ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class AggregationScope:
    """Filtre (annee, mois?, semaine?) / Aggregation scope.

    La semaine est la semaine ISO de l'annee ; sans mois elle porte sur l'annee entiere,
    limitee aux jours de la semaine ISO de cette annee qui tombent dans l'annee civile.
    Week is the global ISO week of the year; without a month it spans the whole year,
    restricted to the days of that year's ISO week inside the calendar year.
    """
    year: int
    month: int | None = None
    week: int | None = None

    def __post_init__(self):
        if self.year is None:
            raise ValidationError("year is required", {"field": "year"})
        if self.month is not None and not 1 <= self.month <= 12:
            raise ValidationError("month must be between 1 and 12", {"field": "month", "value": self.month})
        if self.week is not None and not 1 <= self.week <= 53:
            raise ValidationError("week must be between 1 and 53", {"field": "week", "value": self.week})

    def matches(self, record: Any) -> bool:
        if record.year != self.year:
            return False
        if self.month is not None and record.month != self.month:
            return False
        if self.week is not None:
            if record.week != self.week:
                return False
            # Sans mois, fin decembre "semaine 1" appartient a l'annee suivante
            if self.month is None and week_year(record.year, record.month, record.week) != self.year:
                return False
        return True

    def describe(self) -> str:
        """Libelle de la periode / Human-readable period label."""
        label = f"Year {self.year}"
        if self.month is not None:
            label = f"{MONTH_NAMES[self.month - 1]} {self.year}"
        if self.week is not None:
            label = f"Week {self.week} - {label}"
        return label


@dataclass(frozen=True)
class AggregateReport:
    """Projection lecture seule sur un ensemble filtre / Read-only projection over a filtered set."""
    scope: AggregationScope
    record_count: int
    total_liters: float
    total_spend: float
    average_cost_per_liter: float | None
    distance_covered: float
    average_efficiency: float | None          # km/L
    records: tuple[Any, ...] = field(default=(), compare=False)


@dataclass(frozen=True)
class WeekTotal:
    week: int
    total_liters: float
    total_spend: float
    record_count: int
    week_year: int | None = None    # annee ISO de la semaine / ISO basis year


@dataclass(frozen=True)
class MonthTotal:
    month: int
    month_name: str
    total_liters: float
    total_spend: float
    record_count: int


@dataclass(frozen=True)
class SpendItem:
    """Depense par cle (plaque, station) / Spend per key (plate, station)."""
    key: str
    name: str
    total: float


@dataclass(frozen=True)
class FleetKpis:
    """Indicateurs flotte pour une annee / Fleet-wide KPIs for a year."""
    year: int
    record_count: int
    total_spend: float
    total_liters: float
    average_cost_per_liter: float | None
    average_efficiency: float | None
    monthly: tuple[MonthTotal, ...]
    spend_by_vehicle: tuple[SpendItem, ...]
    spend_by_station: tuple[SpendItem, ...]


# ── Formules ─────────────────────────────────────────────────────────


def record_efficiency(record: Any) -> float | None:
    """km/L d'un plein, None si non defini / Per-record km/L, None when undefined."""
    liters = float(record.liters or 0)
    if liters <= 0:
        return None
    if record.km_per_liter is not None:
        return float(record.km_per_liter)
    if record.km_driven is not None:
        return float(record.km_driven) / liters
    return None


def average_cost_per_liter(total_spend: float, total_liters: float) -> float | None:
    if total_liters <= 0:
        return None
    return round(total_spend / total_liters, 4)


def average_efficiency(records: Iterable[Any]) -> float | None:
    """Moyenne des km/L definis / Mean of the defined per-record efficiencies.

    Les pleins sans km/L valide sont exclus du numerateur et du denominateur.
    """
    values = [e for e in (record_efficiency(r) for r in records) if e is not None]
    if not values:
        return None
    return round(sum(values) / len(values), 4)


def _sum(records: Sequence[Any], attr: str) -> float:
    return sum(float(getattr(r, attr) or 0) for r in records)


def filter_records(records: Iterable[Any], scope: AggregationScope) -> list[Any]:
    return [r for r in records if scope.matches(r)]


def aggregate(records: Iterable[Any], scope: AggregationScope) -> AggregateReport:
    """Totaux sur la periode / Totals over the scope."""
    selected = filter_records(records, scope)
    total_liters = round(_sum(selected, "liters"), 3)
    total_spend = round(_sum(selected, "amount"), 2)
    return AggregateReport(
        scope=scope,
        record_count=len(selected),
        total_liters=total_liters,
        total_spend=total_spend,
        average_cost_per_liter=average_cost_per_liter(total_spend, total_liters),
        distance_covered=round(_sum(selected, "km_driven"), 1),
        average_efficiency=average_efficiency(selected),
        records=tuple(selected),
    )


def weekly_rollup(records: Iterable[Any], year: int, month: int | None = None) -> list[WeekTotal]:
    """Sous-totaux par semaine ISO, ordre chronologique / Per-ISO-week sub-totals, chronological.

    Cle (annee ISO, semaine) : le 30 decembre "semaine 1" ne fusionne jamais
    avec la semaine 1 de janvier.
    Keyed by (ISO year, week) so late December never merges with early January.
    """
    scope = AggregationScope(year=year, month=month)
    buckets: dict[tuple[int, int], list[Any]] = defaultdict(list)
    for record in filter_records(records, scope):
        buckets[(week_year(record.year, record.month, record.week), record.week)].append(record)
    return [
        WeekTotal(
            week=week,
            total_liters=round(_sum(items, "liters"), 3),
            total_spend=round(_sum(items, "amount"), 2),
            record_count=len(items),
            week_year=iso_year,
        )
        for (iso_year, week), items in sorted(buckets.items())
    ]


def monthly_rollup(records: Iterable[Any], year: int) -> list[MonthTotal]:
    """12 mois, completes a zero / 12 monthly buckets, zero-filled."""
    buckets: dict[int, list[Any]] = defaultdict(list)
    for record in filter_records(records, AggregationScope(year=year)):
        buckets[record.month].append(record)
    return [
        MonthTotal(
            month=month,
            month_name=MONTH_NAMES[month - 1],
            total_liters=round(_sum(buckets[month], "liters"), 3),
            total_spend=round(_sum(buckets[month], "amount"), 2),
            record_count=len(buckets[month]),
        )
        for month in range(1, 13)
    ]


def _spend_by(records: Iterable[Any], key_attr: str, name_attr: str) -> list[SpendItem]:
    totals: dict[str, float] = defaultdict(float)
    names: dict[str, str] = {}
    for record in records:
        key = getattr(record, key_attr)
        if not key:
            continue
        totals[key] += float(record.amount or 0)
        names[key] = getattr(record, name_attr) or key
    items = [SpendItem(key=k, name=names[k], total=round(v, 2)) for k, v in totals.items()]
    return sorted(items, key=lambda item: (-item.total, item.name))


def fleet_kpis(records: Iterable[Any], year: int, top_n: int | None = 5) -> FleetKpis:
    """KPI flotte pour le dashboard / Fleet KPIs for the dashboard."""
    selected = filter_records(records, AggregationScope(year=year))
    total_liters = round(_sum(selected, "liters"), 3)
    total_spend = round(_sum(selected, "amount"), 2)
    by_vehicle = _spend_by(selected, "plate", "vehicle_name")
    if top_n is not None:
        by_vehicle = by_vehicle[:top_n]
    return FleetKpis(
        year=year,
        record_count=len(selected),
        total_spend=total_spend,
        total_liters=total_liters,
        average_cost_per_liter=average_cost_per_liter(total_spend, total_liters),
        average_efficiency=average_efficiency(selected),
        monthly=tuple(monthly_rollup(selected, year)),
        spend_by_vehicle=tuple(by_vehicle),
        spend_by_station=tuple(_spend_by(selected, "station", "station")),
    )
