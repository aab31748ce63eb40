"""
Classement par periode / Time-period classification.
Derive semaine ISO, mois et annee d'une date, sans etat.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from fleetfuel.exceptions import ValidationError


@dataclass(frozen=True)
class PeriodBucket:
    """Semaine/mois/annee d'une date / Week, month and year of a date."""
    week: int       # semaine ISO 8601, 1..53
    month: int      # mois calendaire, 1..12
    year: int       # annee calendaire
    iso_year: int   # annee de base de la semaine ISO (peut differer en fin/debut d'annee)


def parse_date(value: date | datetime | str) -> date:
    """Normaliser en `date` / Normalize to a `date` (accepts YYYY-MM-DD strings)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f"Invalid date: {value!r}", {"field": "date", "value": str(value)})


def iso_week(day: date) -> tuple[int, int]:
    """Semaine ISO et son annee de base / ISO week and its basis year.

    Decaler au jeudi de la semaine (lundi = debut), puis compter les semaines
    depuis le 1er janvier de l'annee de ce jeudi.
    Shift to the Thursday of the (Monday-start) week, then count weeks from
    Jan 1 of that Thursday's year.
    """
    thursday = day + timedelta(days=3 - day.weekday())
    year_start = date(thursday.year, 1, 1)
    days_since = (thursday - year_start).days
    return (days_since + 1 + 6) // 7, thursday.year


def classify(value: date | datetime | str) -> PeriodBucket:
    """Classer une date / Classify a date into (week, month, year)."""
    day = parse_date(value)
    week, iso_year = iso_week(day)
    return PeriodBucket(week=week, month=day.month, year=day.year, iso_year=iso_year)


def week_year(year: int, month: int, week: int) -> int:
    """Annee ISO deduite des champs stockes / ISO basis year from the stored fields.

    La semaine 1 ne deborde que sur fin decembre, les semaines 52-53 que sur debut janvier.
    Week 1 only spills into late December, weeks 52-53 only into early January.
    """
    if month == 12 and week == 1:
        return year + 1
    if month == 1 and week >= 52:
        return year - 1
    return year
