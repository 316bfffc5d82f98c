"""Excel-Import und Template-Generator für Arbeitszeiten und Tätigkeiten.

Template-Generator: Leere Excel-Vorlage mit Beispielzeilen.
Import-Funktion:    Excel → WorkingTimeRecord/ActivityRecord mit zeilenweiser Validierung.
"""

import logging
from datetime import date, datetime, time
from pathlib import Path
from typing import Iterable, Optional

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from models.records import ActivityRecord, WorkingTimeRecord

logger = logging.getLogger(__name__)


class ExcelImportError(Exception):
    """Fehler beim Excel-Import."""


SHEET_WORKING_TIMES = "Arbeitszeiten"
SHEET_ACTIVITIES = "Tätigkeiten"

_WT_HEADERS = ["Azubi-ID", "Datum", "Beginn", "Ende"]
_ACT_HEADERS = ["Azubi-ID", "Datum", "Tätigkeit", "Stunden", "Lernfeld"]


class ImportResult(BaseModel):
    """Ergebnis eines Excel-Imports."""

    working_times: list[WorkingTimeRecord] = []
    activities: list[ActivityRecord] = []
    warnings: list[str] = []


# ─── Zellwerte parsen ─────────────────────────────────────────────────────────

def _parse_date(raw) -> date:
    """Akzeptiert Excel-Datum, 'TT.MM.JJJJ' oder ISO 'JJJJ-MM-TT'."""
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    text = str(raw).strip()
    for fmt in ("%d.%m.%Y", "%Y-%m-%d", "%d.%m.%y"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"ungültiges Datum '{text}'")


def _parse_time(raw) -> time:
    """Akzeptiert Excel-Uhrzeit, Tagesbruchteil (0.5 = 12:00) oder 'HH:MM'."""
    if isinstance(raw, datetime):
        return raw.time()
    if isinstance(raw, time):
        return raw
    if isinstance(raw, (int, float)) and 0 <= raw < 1:
        minutes = round(raw * 24 * 60)
        return time(minutes // 60, minutes % 60)
    text = str(raw).strip()
    for fmt in ("%H:%M", "%H:%M:%S", "%H.%M"):
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"ungültige Uhrzeit '{text}'")


def _parse_hours(raw) -> float:
    if isinstance(raw, (int, float)):
        return float(raw)
    return float(str(raw).strip().replace(",", "."))


def _is_empty(values: Iterable) -> bool:
    return all(v is None or str(v).strip() == "" for v in values)


# ─── TEMPLATE-GENERATOR ───────────────────────────────────────────────────────

def generate_template(path: Path, trainee_ids: Optional[list[str]] = None) -> None:
    """Erzeugt eine leere Excel-Vorlage.

    Blätter:
      - Arbeitszeiten: Azubi-ID, Datum, Beginn, Ende (eine Zeile je Zeitblock)
      - Tätigkeiten:   Azubi-ID, Datum, Tätigkeit, Stunden, Lernfeld
    """
    import openpyxl
    from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
    from openpyxl.utils import get_column_letter
    from openpyxl.worksheet.datavalidation import DataValidation

    wb = openpyxl.Workbook()

    hdr_font = Font(bold=True, color="FFFFFF", size=11)
    hdr_fill = PatternFill("solid", fgColor="2E6DA4")
    ex_font = Font(italic=True, color="888888")
    ex_fill = PatternFill("solid", fgColor="F5F5F5")
    center = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="BBBBBB")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)

    def style_header(cell):
        cell.font = hdr_font
        cell.fill = hdr_fill
        cell.alignment = center
        cell.border = border

    def style_example(cell):
        cell.font = ex_font
        cell.fill = ex_fill
        cell.border = border

    def write_sheet(ws, headers: list[str], widths: list[int], example: list) -> None:
        for col, h in enumerate(headers, 1):
            style_header(ws.cell(row=1, column=col, value=h))
        for col, w in enumerate(widths, 1):
            ws.column_dimensions[get_column_letter(col)].width = w
        for col, val in enumerate(example, 1):
            style_example(ws.cell(row=2, column=col, value=val))
        ws.freeze_panes = "A2"

    example_id = trainee_ids[0] if trainee_ids else "azubi-001"

    # ── Blatt 1: Arbeitszeiten ────────────────────────────────────────────────
    ws_wt = wb.active
    ws_wt.title = SHEET_WORKING_TIMES
    write_sheet(ws_wt, _WT_HEADERS, [14, 14, 10, 10],
                [example_id, "01.09.2025", "08:00", "16:00"])

    # ── Blatt 2: Tätigkeiten ──────────────────────────────────────────────────
    ws_act = wb.create_sheet(SHEET_ACTIVITIES)
    write_sheet(ws_act, _ACT_HEADERS, [14, 14, 40, 10, 12],
                [example_id, "01.09.2025", "Einführung Entwicklungsumgebung", 6, "lf1"])
    dv_hours = DataValidation(
        type="decimal", operator="between", formula1="0", formula2="24",
        allow_blank=True,
    )
    dv_hours.sqref = "D3:D1000"
    ws_act.add_data_validation(dv_hours)

    if trainee_ids:
        dv_ids = DataValidation(
            type="list", formula1='"' + ",".join(trainee_ids) + '"', allow_blank=False,
        )
        dv_ids.sqref = "A3:A1000"
        ws_wt.add_data_validation(dv_ids)

    # Hinweis-Blatt
    ws_info = wb.create_sheet("Hinweise")
    ws_info["A1"] = "Zeile 2 jedes Blatts ist eine Beispielzeile und wird beim Import übersprungen."
    ws_info["A2"] = "Mehrere Zeitblöcke am selben Tag werden zur Tagesarbeitszeit addiert."
    ws_info["A3"] = "Beginn und Ende müssen am selben Kalendertag liegen."
    ws_info.column_dimensions["A"].width = 90

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(str(path))
    logger.info(f"Import-Vorlage erzeugt: {path}")


# ─── IMPORT ───────────────────────────────────────────────────────────────────

class ExcelImporter:
    """Importiert Arbeitszeiten und Tätigkeiten aus einer Excel-Vorlage."""

    def __init__(self, path: Path, known_trainee_ids: Optional[set[str]] = None) -> None:
        self.path = Path(path)
        self.known_trainee_ids = known_trainee_ids
        self._wb = None
        self._errors: list[str] = []
        self._warnings: list[str] = []

    def _open(self):
        import openpyxl
        try:
            self._wb = openpyxl.load_workbook(str(self.path), read_only=True, data_only=True)
        except FileNotFoundError:
            raise ExcelImportError(f"Datei nicht gefunden: {self.path}")
        except Exception as e:
            raise ExcelImportError(f"Fehler beim Öffnen der Excel-Datei: {e}")

    def close(self) -> None:
        """Schließt die Arbeitsmappe (read_only hält den Dateihandle offen)."""
        if self._wb is not None:
            self._wb.close()
            self._wb = None

    def _get_sheet(self, name: str):
        if self._wb is None:
            self._open()
        for sn in self._wb.sheetnames:
            if sn.strip().lower() == name.strip().lower():
                return self._wb[sn]
        return None

    def _data_rows(self, sheet) -> list[tuple[int, tuple]]:
        """(Zeilennummer, Werte) ab Zeile 3; Kopf und Beispielzeile entfallen."""
        rows = []
        for idx, row in enumerate(sheet.iter_rows(values_only=True), 1):
            if idx < 3 or _is_empty(row):
                continue
            rows.append((idx, row))
        return rows

    def _check_trainee(self, trainee_id: str, row_id: str) -> None:
        if self.known_trainee_ids is not None and trainee_id not in self.known_trainee_ids:
            self._warnings.append(f"{row_id}: Azubi '{trainee_id}' ist nicht im Datensatz.")

    # ── Arbeitszeiten ───────────────────────────────────────────────────────

    def import_working_times(self) -> list[WorkingTimeRecord]:
        sheet = self._get_sheet(SHEET_WORKING_TIMES)
        if sheet is None:
            raise ExcelImportError(f"Blatt '{SHEET_WORKING_TIMES}' fehlt.")
        records = []
        for idx, row in self._data_rows(sheet):
            row_id = f"{SHEET_WORKING_TIMES} Zeile {idx}"
            values = list(row) + [None] * (len(_WT_HEADERS) - len(row))
            trainee_id, raw_date, raw_start, raw_end = values[:4]
            if trainee_id is None or str(trainee_id).strip() == "":
                self._errors.append(f"{row_id}: Azubi-ID fehlt.")
                continue
            trainee_id = str(trainee_id).strip()
            try:
                rec = WorkingTimeRecord(
                    trainee_id=trainee_id,
                    date=_parse_date(raw_date),
                    start=_parse_time(raw_start),
                    end=_parse_time(raw_end),
                )
            except (ValueError, PydanticValidationError) as e:
                self._errors.append(f"{row_id}: {e}")
                continue
            self._check_trainee(trainee_id, row_id)
            records.append(rec)
        return records

    # ── Tätigkeiten ─────────────────────────────────────────────────────────

    def import_activities(self) -> list[ActivityRecord]:
        """Blatt 'Tätigkeiten' ist optional."""
        sheet = self._get_sheet(SHEET_ACTIVITIES)
        if sheet is None:
            return []
        records = []
        for idx, row in self._data_rows(sheet):
            row_id = f"{SHEET_ACTIVITIES} Zeile {idx}"
            values = list(row) + [None] * (len(_ACT_HEADERS) - len(row))
            trainee_id, raw_date, description, raw_hours, unit_id = values[:5]
            if not trainee_id or not description:
                self._errors.append(f"{row_id}: Azubi-ID und Tätigkeit sind Pflichtfelder.")
                continue
            try:
                rec = ActivityRecord(
                    trainee_id=str(trainee_id).strip(),
                    date=_parse_date(raw_date),
                    description=str(description).strip(),
                    hours=_parse_hours(raw_hours),
                    unit_id=str(unit_id).strip() if unit_id else None,
                )
            except (ValueError, PydanticValidationError) as e:
                self._errors.append(f"{row_id}: {e}")
                continue
            self._check_trainee(rec.trainee_id, row_id)
            records.append(rec)
        return records

    # ── Vollständiger Import ───────────────────────────────────────────────

    def import_all(self) -> ImportResult:
        self._open()
        self._errors = []
        self._warnings = []

        try:
            working_times = self.import_working_times()
            activities = self.import_activities()
        finally:
            self.close()

        if self._errors:
            raise ExcelImportError(
                f"Import mit {len(self._errors)} Fehlern:\n"
                + "\n".join(f"  • {e}" for e in self._errors)
            )
        logger.info(
            f"Excel-Import {self.path.name}: {len(working_times)} Arbeitszeiten, "
            f"{len(activities)} Tätigkeiten"
        )
        return ImportResult(
            working_times=working_times,
            activities=activities,
            warnings=self._warnings,
        )


def import_from_excel(path: Path, known_trainee_ids: Optional[set[str]] = None) -> ImportResult:
    """Importiert Arbeitszeiten und Tätigkeiten aus einer Excel-Vorlage.

    Raises:
        ExcelImportError: Bei fehlender Datei, fehlendem Blatt oder fehlerhaften Zeilen.
    """
    return ExcelImporter(path, known_trainee_ids).import_all()
