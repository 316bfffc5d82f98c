"""Export-Modul: Excel (openpyxl) und PDF (fpdf2) für Ausbildungsnachweise."""

from export.excel_export import ReportExcelExporter
from export.pdf_export import ReportPdfExporter

__all__ = ["ReportExcelExporter", "ReportPdfExporter"]
