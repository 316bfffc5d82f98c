"""Excel-Export für Ausbildungsnachweise (openpyxl)."""

import logging
from pathlib import Path
from typing import Optional

from analysis.compliance_checker import ComplianceReport
from analysis.report_assembler import TrainingRecordReport

from export.helpers import COLORS, fmt_date, fmt_hours, fmt_time, status_color, today_str

logger = logging.getLogger(__name__)


class ReportExcelExporter:
    """Exportiert einen TrainingRecordReport in eine Excel-Datei mit einem Blatt je Bereich."""

    ROW_HEADER_H = 22

    def __init__(
        self,
        report: TrainingRecordReport,
        compliance: Optional[ComplianceReport] = None,
        organisation: str = "",
    ):
        self.report = report
        self.compliance = compliance
        self.organisation = organisation

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(self, output_path: Path) -> None:
        """Erstellt die Excel-Datei mit allen Blättern."""
        from openpyxl import Workbook
        wb = Workbook()
        wb.remove(wb.active)   # Leeres Standard-Sheet entfernen

        self._sheet_uebersicht(wb)
        if self.report.plan is not None:
            self._sheet_plan(wb)
            self._sheet_pruefungen(wb)
        self._sheet_taetigkeiten(wb)
        self._sheet_berufsschule(wb)
        self._sheet_arbeitszeiten(wb)
        if self.compliance is not None:
            self._sheet_compliance(wb)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)
        logger.info(f"Excel-Bericht gespeichert: {output_path}")

    # ─── Style-Helpers ────────────────────────────────────────────────────────

    def _fill(self, hex_color: str):
        from openpyxl.styles import PatternFill
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _thin_border(self):
        from openpyxl.styles import Border, Side
        s = Side(border_style="thin", color="BBBBBB")
        return Border(left=s, right=s, top=s, bottom=s)

    def _write_table(
        self,
        ws,
        headers: list[str],
        widths: list[int],
        rows: list[list],
        row_colors: Optional[list[Optional[str]]] = None,
    ) -> None:
        """Kopfzeile + Datenzeilen; optional eine Hintergrundfarbe je Zeile."""
        from openpyxl.styles import Alignment, Font
        from openpyxl.utils import get_column_letter

        fill = self._fill(COLORS["header"])
        border = self._thin_border()
        for col, (text, width) in enumerate(zip(headers, widths), 1):
            cell = ws.cell(row=1, column=col, value=text)
            cell.fill = fill
            cell.font = Font(bold=True, color="FFFFFF", size=10)
            cell.alignment = Alignment(horizontal="center", vertical="center")
            cell.border = border
            ws.column_dimensions[get_column_letter(col)].width = width
        ws.row_dimensions[1].height = self.ROW_HEADER_H
        ws.freeze_panes = "A2"

        for r, values in enumerate(rows, 2):
            color = row_colors[r - 2] if row_colors else None
            for col, val in enumerate(values, 1):
                cell = ws.cell(row=r, column=col, value=val)
                cell.border = border
                cell.alignment = Alignment(vertical="center", wrap_text=True)
                if color:
                    cell.fill = self._fill(color)

    # ─── Blätter ──────────────────────────────────────────────────────────────

    def _sheet_uebersicht(self, wb) -> None:
        from openpyxl.styles import Font
        rep = self.report
        ws = wb.create_sheet("Übersicht")
        ws.column_dimensions["A"].width = 28
        ws.column_dimensions["B"].width = 50

        ws.cell(row=1, column=1, value=f"Ausbildungsnachweis {self.organisation}".strip()).font = \
            Font(bold=True, size=14)
        rows = [
            ("Azubi", rep.trainee.get("name", "")),
            ("Azubi-ID", rep.trainee.get("id", "")),
            ("E-Mail", rep.trainee.get("email", "")),
            ("Zeitraum", str(rep.period)),
            ("Ausbilder/in", rep.trainer.name if rep.trainer else ""),
            ("Ausbildungsplan", rep.plan.id if rep.plan else "kein Plan"),
            ("Fortschritt", f"{rep.plan.progress_percent():.1f} %" if rep.plan else ""),
            ("Betriebliche Tätigkeiten (h)", rep.totals.activity_hours),
            ("Berufsschule (h)", rep.totals.school_hours),
            ("Berufsschultage", rep.totals.school_days),
            ("Erfasste Arbeitszeit (h)", rep.totals.working_hours),
            ("Wochennachweise", rep.totals.weekly_reports),
            ("davon unterschrieben", rep.totals.signed_reports),
            ("Erstellt am", today_str()),
        ]
        for r, (key, value) in enumerate(rows, 3):
            ws.cell(row=r, column=1, value=key).font = Font(bold=True)
            ws.cell(row=r, column=2, value=value)

    def _sheet_plan(self, wb) -> None:
        plan = self.report.plan
        ws = wb.create_sheet("Lernfelder")
        self._write_table(
            ws,
            ["Nr.", "ID", "Lernfeld", "Beginn", "Ende", "Stunden", "Jahr", "Status"],
            [6, 8, 50, 12, 12, 10, 6, 14],
            [[su.unit.sequence, su.unit.id, su.unit.title, fmt_date(su.start_date),
              fmt_date(su.end_date), su.unit.allotted_hours, su.unit.target_year,
              su.status.value] for su in plan.units],
            [status_color(su.status) for su in plan.units],
        )

    def _sheet_pruefungen(self, wb) -> None:
        plan = self.report.plan
        ws = wb.create_sheet("Prüfungen")
        self._write_table(
            ws,
            ["Prüfung", "Termin", "Anmeldung", "Abgelegt", "Status", "Versuche", "Punkte"],
            [26, 12, 12, 12, 16, 10, 10],
            [[e.exam_type.value, fmt_date(e.target_date), fmt_date(e.registration_date),
              fmt_date(e.sat_date), e.state.value, e.attempts,
              e.last_result.overall_score if e.last_result else None]
             for e in plan.examinations],
            [status_color(e.state) for e in plan.examinations],
        )

    def _sheet_taetigkeiten(self, wb) -> None:
        ws = wb.create_sheet("Tätigkeiten")
        self._write_table(
            ws,
            ["Datum", "Tätigkeit", "Stunden", "Lernfeld"],
            [12, 50, 10, 10],
            [[fmt_date(a.date), a.description, a.hours, a.unit_id or ""]
             for a in self.report.activities],
        )

    def _sheet_berufsschule(self, wb) -> None:
        ws = wb.create_sheet("Berufsschule")
        self._write_table(
            ws,
            ["Datum", "Stunden", "Fächer"],
            [12, 10, 50],
            [[fmt_date(s.date), s.hours, ", ".join(s.subjects)]
             for s in self.report.school_days],
        )

    def _sheet_arbeitszeiten(self, wb) -> None:
        ws = wb.create_sheet("Arbeitszeiten")
        self._write_table(
            ws,
            ["Datum", "Beginn", "Ende", "Dauer"],
            [12, 10, 10, 10],
            [[fmt_date(w.date), fmt_time(w.start), fmt_time(w.end), fmt_hours(w.hours)]
             for w in self.report.working_times],
        )

    def _sheet_compliance(self, wb) -> None:
        ws = wb.create_sheet("Compliance")
        comp = self.compliance
        rows = [[v.severity.upper(), v.category.value, v.description] for v in comp.violations]
        colors = [COLORS[v.severity] for v in comp.violations]
        if comp.compliant:
            rows = [["OK", "", "Keine Verstöße festgestellt."]]
            colors = [COLORS["ok"]]
        rows += [["Empfehlung", "", r] for r in comp.recommendations]
        colors += [None] * len(comp.recommendations)
        self._write_table(ws, ["Typ", "Kategorie", "Beschreibung"], [12, 22, 80], rows, colors)
