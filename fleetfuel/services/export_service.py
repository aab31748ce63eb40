"""
Service d'export CSV/Excel / CSV/Excel export service.
Génère des fichiers CSV et XLSX à partir de listes de dictionnaires.
"""

import csv
import io
from typing import Any

from openpyxl import Workbook

from fleetfuel.services.report_composer import ReportDocument

REPORT_FIELDS = ["date", "odometer", "liters", "amount", "station", "driver_name", "km_driven", "km_per_liter"]

FUELING_FIELDS = [
    "date", "week", "month", "year", "vehicle_name", "plate", "fuel_card", "driver_name",
    "driver_registration", "liters", "amount", "station", "odometer", "km_driven", "km_per_liter",
]


class ExportService:
    """Export de données vers CSV/XLSX / Data export to CSV/XLSX."""

    @staticmethod
    def model_to_dict(obj: Any, fields: list[str]) -> dict[str, Any]:
        """Extraire les attributs d'un objet / Extract object attributes to dict."""
        return {f: getattr(obj, f, None) for f in fields}

    @staticmethod
    def to_csv(rows: list[dict], fields: list[str]) -> bytes:
        """Générer un CSV UTF-8 BOM avec séparateur ';' / Generate UTF-8 BOM CSV with ';' separator."""
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=fields, delimiter=";", extrasaction="ignore")
        writer.writeheader()
        for row in rows:
            writer.writerow({f: row.get(f, "") for f in fields})
        return ("\ufeff" + output.getvalue()).encode("utf-8")

    @staticmethod
    def to_xlsx(
        rows: list[dict],
        fields: list[str],
        sheet_name: str = "Data",
        header_lines: list[tuple[str, Any]] | None = None,
    ) -> bytes:
        """Générer un fichier Excel / Generate an Excel file.

        `header_lines` : paires (libellé, valeur) écrites au-dessus du tableau.
        """
        wb = Workbook()
        ws = wb.active
        ws.title = sheet_name[:31]

        first_row = 1
        for label, value in header_lines or []:
            cell = ws.cell(row=first_row, column=1, value=label)
            cell.font = cell.font.copy(bold=True)
            ws.cell(row=first_row, column=2, value=value)
            first_row += 1
        if header_lines:
            first_row += 1

        # En-têtes / Headers
        for col_idx, field in enumerate(fields, 1):
            cell = ws.cell(row=first_row, column=col_idx, value=field)
            cell.font = cell.font.copy(bold=True)

        # Données / Data rows
        for row_idx, row in enumerate(rows, first_row + 1):
            for col_idx, field in enumerate(fields, 1):
                ws.cell(row=row_idx, column=col_idx, value=row.get(field))

        buf = io.BytesIO()
        wb.save(buf)
        return buf.getvalue()

    @staticmethod
    def report_header(document: ReportDocument) -> list[tuple[str, Any]]:
        """Bloc d'en-tête + KPI du rapport / Report header and KPI block."""
        kpis = document.kpis
        return [
            ("Vehicle", document.vehicle.name),
            ("Plate", document.vehicle.plate),
            ("Fuel type", document.vehicle.fuel_type or "N/A"),
            ("Period", document.scope_description),
            ("Initial odometer", document.initial_odometer),
            ("Total spend", kpis.total_spend),
            ("Total liters", kpis.total_liters),
            ("Average cost per liter", kpis.average_cost_per_liter),
            ("Distance covered (km)", kpis.distance_covered),
            ("Average km/L", kpis.average_efficiency),
        ]

    @staticmethod
    def report_rows(document: ReportDocument) -> list[dict[str, Any]]:
        return [ExportService.model_to_dict(line, REPORT_FIELDS) for line in document.lines]
