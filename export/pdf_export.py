"""PDF-Export für Ausbildungsnachweise (fpdf2)."""

import logging
from pathlib import Path
from typing import Optional

from fpdf.enums import XPos, YPos

from analysis.compliance_checker import ComplianceReport
from analysis.report_assembler import TrainingRecordReport

from export.helpers import COLORS, fmt_date, fmt_hours, fmt_time, hex_to_rgb, status_color, today_str

logger = logging.getLogger(__name__)


def _pdf_safe(text: str) -> str:
    """Ersetzt nicht-latin-1-fähige Zeichen für fpdf2-Built-in-Fonts."""
    return (
        text
        .replace("—", " - ")   # em dash
        .replace("–", "-")      # en dash
        .replace("→", "->")     # Pfeil
        .replace("•", "-")      # Aufzählungspunkt
        .replace("€", "EUR")    # Euro
        .replace("≤", "<=")
        .replace("≥", ">=")
    )


# ─── A4-Hochformat ────────────────────────────────────────────────────────────
# 210 × 297 mm, Margin 12 links+rechts → nutzbare Breite 186 mm

_USABLE_W    = 186
_ROW_H       = 6     # mm
_FONT_TITLE  = 12    # pt
_FONT_HEADER = 8     # pt
_FONT_BODY   = 8     # pt


class _ReportPdf:
    """Interner Wrapper um fpdf.FPDF für Berichtsseiten."""

    def __init__(self, organisation: str, title: str):
        from fpdf import FPDF

        class _Pdf(FPDF):
            def __init__(inner, org, ttl):
                super().__init__(orientation="P", unit="mm", format="A4")
                inner._organisation = org
                inner._title = ttl
                inner.alias_nb_pages()
                inner.set_auto_page_break(auto=True, margin=18)
                inner.set_margins(left=12, top=22, right=12)

            def header(inner):
                inner.set_font("Helvetica", "B", 10)
                inner.set_xy(12, 8)
                inner.cell(100, 7, _pdf_safe(inner._organisation), border=0, align="L")
                inner.cell(0, 7, _pdf_safe(inner._title), border=0, align="R")
                inner.set_draw_color(150, 150, 150)
                inner.line(12, 17, inner.w - 12, 17)
                inner.set_y(22)

            def footer(inner):
                inner.set_y(-14)
                inner.set_font("Helvetica", "I", 7)
                inner.cell(
                    0, 8,
                    f"{today_str()}  |  Seite {inner.page_no()}/{{nb}}",
                    border=0, align="C",
                )

        self._pdf = _Pdf(organisation, title)
        self._pdf.add_page()

    def save(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self._pdf.output(str(path))

    # ─── Bausteine ────────────────────────────────────────────────────────────

    def heading(self, text: str) -> None:
        pdf = self._pdf
        pdf.ln(3)
        pdf.set_font("Helvetica", "B", _FONT_TITLE)
        pdf.cell(0, 8, _pdf_safe(text), border=0, align="L")
        pdf.ln(9)

    def key_values(self, rows: list[tuple[str, str]]) -> None:
        pdf = self._pdf
        for key, value in rows:
            pdf.set_font("Helvetica", "B", _FONT_BODY)
            pdf.cell(45, _ROW_H, _pdf_safe(key), border=0)
            pdf.set_font("Helvetica", "", _FONT_BODY)
            pdf.cell(0, _ROW_H, _pdf_safe(value), border=0)
            pdf.ln(_ROW_H)

    def table(
        self,
        headers: list[str],
        widths: list[float],
        rows: list[list[str]],
        row_colors: Optional[list[Optional[str]]] = None,
    ) -> None:
        """Tabelle mit Kopfzeile; optional je Zeile eine Hintergrundfarbe."""
        pdf = self._pdf
        r, g, b = hex_to_rgb(COLORS["header"])
        pdf.set_font("Helvetica", "B", _FONT_HEADER)
        pdf.set_fill_color(r, g, b)
        pdf.set_text_color(255, 255, 255)
        pdf.set_draw_color(180, 180, 180)
        for h, w in zip(headers, widths):
            pdf.cell(w, _ROW_H, _pdf_safe(h), border=1, align="C", fill=True)
        pdf.ln(_ROW_H)
        pdf.set_text_color(0, 0, 0)
        pdf.set_font("Helvetica", "", _FONT_BODY)

        for i, row in enumerate(rows):
            color = row_colors[i] if row_colors else None
            if color:
                pdf.set_fill_color(*hex_to_rgb(color))
            for val, w in zip(row, widths):
                # Grobe Kürzung auf die Spaltenbreite (~1.6 mm pro Zeichen bei 8pt)
                max_chars = max(int(w / 1.6), 4)
                text = _pdf_safe(str(val))
                if len(text) > max_chars:
                    text = text[: max_chars - 1] + "."
                pdf.cell(w, _ROW_H, text, border=1, align="L", fill=bool(color))
            pdf.ln(_ROW_H)

    def paragraph(self, text: str) -> None:
        pdf = self._pdf
        pdf.set_font("Helvetica", "", _FONT_BODY)
        pdf.multi_cell(0, 5, _pdf_safe(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)


class ReportPdfExporter:
    """Exportiert einen TrainingRecordReport (optional mit Compliance) als PDF."""

    def __init__(
        self,
        report: TrainingRecordReport,
        compliance: Optional[ComplianceReport] = None,
        organisation: str = "",
    ):
        self.report = report
        self.compliance = compliance
        self.organisation = organisation

    def export(self, output_path: Path) -> None:
        rep = self.report
        pdf = _ReportPdf(
            self.organisation,
            f"Ausbildungsnachweis {rep.trainee.get('name', '')}",
        )

        pdf.heading("Übersicht")
        overview = [
            ("Azubi", f"{rep.trainee.get('name', '')} ({rep.trainee.get('id', '')})"),
            ("Zeitraum", str(rep.period)),
        ]
        if rep.trainer:
            overview.append(("Ausbilder/in", rep.trainer.name))
        if rep.plan:
            overview.append(("Ausbildungsplan", f"{rep.plan.id} ({rep.plan.occupation_id})"))
            overview.append(("Fortschritt", f"{rep.plan.progress_percent():.1f} %"))
        t = rep.totals
        overview += [
            ("Betriebliche Tätigkeiten", f"{t.activity_hours:.1f} h"),
            ("Berufsschule", f"{t.school_hours:.1f} h an {t.school_days} Tagen"),
            ("Erfasste Arbeitszeit", f"{t.working_hours:.1f} h"),
            ("Wochennachweise", f"{t.weekly_reports} ({t.signed_reports} unterschrieben)"),
        ]
        pdf.key_values(overview)

        if rep.plan:
            pdf.heading("Lernfelder")
            pdf.table(
                ["Nr.", "Lernfeld", "Beginn", "Ende", "Std.", "Status"],
                [12, 86, 22, 22, 14, 30],
                [[str(su.unit.sequence), su.unit.title, fmt_date(su.start_date),
                  fmt_date(su.end_date), f"{su.unit.allotted_hours:g}", su.status.value]
                 for su in rep.plan.units],
                [status_color(su.status) for su in rep.plan.units],
            )
            pdf.heading("Prüfungen")
            pdf.table(
                ["Prüfung", "Termin", "Status", "Versuche", "Punkte"],
                [60, 28, 44, 24, 30],
                [[e.exam_type.value, fmt_date(e.target_date), e.state.value,
                  str(e.attempts),
                  f"{e.last_result.overall_score:.1f}" if e.last_result else ""]
                 for e in rep.plan.examinations],
                [status_color(e.state) for e in rep.plan.examinations],
            )

        if rep.activities:
            pdf.heading("Betriebliche Tätigkeiten")
            pdf.table(
                ["Datum", "Tätigkeit", "Std.", "Lernfeld"],
                [24, 120, 18, 24],
                [[fmt_date(a.date), a.description, fmt_hours(a.hours), a.unit_id or ""]
                 for a in rep.activities],
            )

        if rep.school_days:
            pdf.heading("Berufsschule")
            pdf.table(
                ["Datum", "Std.", "Fächer"],
                [24, 18, 144],
                [[fmt_date(s.date), fmt_hours(s.hours), ", ".join(s.subjects)]
                 for s in rep.school_days],
            )

        if rep.working_times:
            pdf.heading("Arbeitszeiten")
            pdf.table(
                ["Datum", "Beginn", "Ende", "Dauer"],
                [40, 40, 40, 66],
                [[fmt_date(w.date), fmt_time(w.start), fmt_time(w.end), fmt_hours(w.hours)]
                 for w in rep.working_times],
            )

        if self.compliance is not None:
            pdf.heading("Compliance")
            if self.compliance.compliant:
                pdf.paragraph("Keine Verstöße festgestellt.")
            else:
                pdf.table(
                    ["Typ", "Kategorie", "Beschreibung"],
                    [18, 38, 130],
                    [[v.severity.upper(), v.category.value, v.description]
                     for v in self.compliance.violations],
                    [COLORS[v.severity] for v in self.compliance.violations],
                )
            for rec in self.compliance.recommendations:
                pdf.paragraph(f"- {rec}")

        pdf.save(output_path)
        logger.info(f"PDF-Bericht gespeichert: {output_path}")
