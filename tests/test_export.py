"""Tests für Excel-/PDF-Export und den Excel-Import von Arbeitszeiten."""

from datetime import date, time
from pathlib import Path

import pytest

from data.excel_import import (
    ExcelImportError,
    ExcelImporter,
    SHEET_ACTIVITIES,
    SHEET_WORKING_TIMES,
    generate_template,
    import_from_excel,
)
from data.fake_data import FakeDataGenerator
from data.store import RecordStore
from export.excel_export import ReportExcelExporter
from export.helpers import fmt_hours, hex_to_rgb
from export.pdf_export import ReportPdfExporter, _pdf_safe
from models.records import DateRange
from planner.service import TrainingPlanService

TODAY = date(2025, 3, 14)
PERIOD = DateRange(start=date(2025, 2, 1), end=TODAY)


@pytest.fixture(scope="module")
def report_and_compliance():
    data = FakeDataGenerator(seed=42, today=TODAY).generate()
    svc = TrainingPlanService(RecordStore(data))
    trainee_id = data.trainees[0].id
    return (svc.assemble_report(trainee_id, PERIOD),
            svc.check_compliance(trainee_id, TODAY))


def _write_rows(path: Path, sheet: str, rows: list[list]) -> None:
    """Schreibt Datenzeilen ab Zeile 3 in eine erzeugte Vorlage."""
    import openpyxl
    wb = openpyxl.load_workbook(path)
    ws = wb[sheet]
    for r, values in enumerate(rows, 3):
        for c, v in enumerate(values, 1):
            ws.cell(row=r, column=c, value=v)
    wb.save(path)


# ─── HILFSFUNKTIONEN ──────────────────────────────────────────────────────────

class TestHelpers:
    def test_hex_to_rgb(self):
        assert hex_to_rgb("4472C4") == (0x44, 0x72, 0xC4)

    def test_fmt_hours(self):
        assert fmt_hours(4.5) == "4:30"
        assert fmt_hours(8) == "8:00"

    def test_pdf_safe(self):
        assert _pdf_safe("1.9.–5.9. → 682€") == "1.9.-5.9. -> 682EUR"


# ─── EXCEL-EXPORT ─────────────────────────────────────────────────────────────

class TestExcelExport:
    def test_creates_all_sheets(self, report_and_compliance, tmp_path: Path):
        import openpyxl
        report, compliance = report_and_compliance
        out = tmp_path / "bericht.xlsx"
        ReportExcelExporter(report, compliance, "Muster GmbH").export(out)
        assert out.exists()
        wb = openpyxl.load_workbook(out)
        assert wb.sheetnames == ["Übersicht", "Lernfelder", "Prüfungen", "Tätigkeiten",
                                 "Berufsschule", "Arbeitszeiten", "Compliance"]

    def test_plan_rows(self, report_and_compliance, tmp_path: Path):
        import openpyxl
        report, _ = report_and_compliance
        out = tmp_path / "bericht.xlsx"
        ReportExcelExporter(report).export(out)
        ws = openpyxl.load_workbook(out)["Lernfelder"]
        rows = list(ws.iter_rows(values_only=True))
        assert len(rows) == len(report.plan.units) + 1
        assert rows[1][1] == report.plan.units[0].unit_id

    def test_without_compliance_no_sheet(self, report_and_compliance, tmp_path: Path):
        import openpyxl
        report, _ = report_and_compliance
        out = tmp_path / "bericht.xlsx"
        ReportExcelExporter(report).export(out)
        assert "Compliance" not in openpyxl.load_workbook(out).sheetnames


# ─── PDF-EXPORT ───────────────────────────────────────────────────────────────

class TestPdfExport:
    def test_creates_pdf(self, report_and_compliance, tmp_path: Path):
        report, compliance = report_and_compliance
        out = tmp_path / "sub" / "bericht.pdf"
        ReportPdfExporter(report, compliance, "Muster GmbH").export(out)
        assert out.exists()
        assert out.read_bytes().startswith(b"%PDF")


# ─── EXCEL-IMPORT ─────────────────────────────────────────────────────────────

class TestExcelImport:
    def test_template_sheets(self, tmp_path: Path):
        import openpyxl
        path = tmp_path / "vorlage.xlsx"
        generate_template(path, ["azubi-001"])
        wb = openpyxl.load_workbook(path)
        assert SHEET_WORKING_TIMES in wb.sheetnames
        assert SHEET_ACTIVITIES in wb.sheetnames
        assert wb[SHEET_WORKING_TIMES]["A2"].value == "azubi-001"

    def test_example_row_is_skipped(self, tmp_path: Path):
        path = tmp_path / "vorlage.xlsx"
        generate_template(path)
        result = import_from_excel(path)
        assert result.working_times == []
        assert result.activities == []

    def test_import_working_times(self, tmp_path: Path):
        path = tmp_path / "vorlage.xlsx"
        generate_template(path)
        _write_rows(path, SHEET_WORKING_TIMES, [
            ["azubi-001", date(2025, 3, 10), time(8, 0), time(16, 0)],
            ["azubi-001", "11.03.2025", "08:00", "12:30"],
        ])
        _write_rows(path, SHEET_ACTIVITIES, [
            ["azubi-001", "2025-03-10", "Code-Review", "4,5", "lf5"],
        ])
        result = import_from_excel(path, {"azubi-001"})
        assert [w.hours for w in result.working_times] == [8.0, 4.5]
        assert result.working_times[1].date == date(2025, 3, 11)
        assert result.activities[0].hours == 4.5
        assert result.activities[0].unit_id == "lf5"
        assert result.warnings == []

    def test_unknown_trainee_warns(self, tmp_path: Path):
        path = tmp_path / "vorlage.xlsx"
        generate_template(path)
        _write_rows(path, SHEET_WORKING_TIMES, [["azubi-999", "10.03.2025", "08:00", "16:00"]])
        result = import_from_excel(path, {"azubi-001"})
        assert len(result.working_times) == 1
        assert "azubi-999" in result.warnings[0]

    def test_invalid_rows_collected(self, tmp_path: Path):
        path = tmp_path / "vorlage.xlsx"
        generate_template(path)
        _write_rows(path, SHEET_WORKING_TIMES, [
            ["azubi-001", "31.02.2025", "08:00", "16:00"],
            ["azubi-001", "10.03.2025", "16:00", "08:00"],
            ["", "10.03.2025", "08:00", "16:00"],
        ])
        with pytest.raises(ExcelImportError) as exc:
            import_from_excel(path)
        assert "3 Fehlern" in str(exc.value)

    def test_workbook_closed_after_import(self, tmp_path: Path):
        path = tmp_path / "vorlage.xlsx"
        generate_template(path)
        importer = ExcelImporter(path)
        importer.import_all()
        assert importer._wb is None
        path.unlink()
        assert not path.exists()

    def test_workbook_closed_after_failed_import(self, tmp_path: Path):
        path = tmp_path / "vorlage.xlsx"
        generate_template(path)
        _write_rows(path, SHEET_WORKING_TIMES, [["azubi-001", "31.02.2025", "08:00", "16:00"]])
        importer = ExcelImporter(path)
        with pytest.raises(ExcelImportError):
            importer.import_all()
        assert importer._wb is None

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ExcelImportError):
            import_from_excel(tmp_path / "fehlt.xlsx")

    def test_missing_sheet(self, tmp_path: Path):
        import openpyxl
        path = tmp_path / "leer.xlsx"
        openpyxl.Workbook().save(path)
        with pytest.raises(ExcelImportError):
            import_from_excel(path)
