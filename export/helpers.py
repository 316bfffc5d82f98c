"""Gemeinsame Hilfsfunktionen für Excel- und PDF-Export."""

from datetime import date, time
from typing import Optional

from models.plan import ExamState, UnitStatus
from models.records import fmt_hours

# ─── Farbpalette (RRGGBB, ohne #) ─────────────────────────────────────────────

COLORS: dict[str, str] = {
    "geplant":         "E0E0E0",
    "aktiv":           "B3D4FF",
    "abgeschlossen":   "B3FFB3",
    "überfällig":      "FF9999",
    "bestanden":       "B3FFB3",
    "nicht bestanden": "FF9999",
    "angemeldet":      "FFF2B3",
    "abgelegt":        "FFD4B3",
    "nicht angemeldet": "F5F5F5",
    "error":           "FF9999",
    "warning":         "FFF2B3",
    "ok":              "B3FFB3",
    "header":          "4472C4",
}


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Wandelt RRGGBB-String in (r, g, b)-Tupel um."""
    h = hex_color.lstrip("#")
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def today_str() -> str:
    """Gibt das heutige Datum als DD.MM.YYYY zurück."""
    return date.today().strftime("%d.%m.%Y")


def status_color(status) -> str:
    """Farbe für UnitStatus, ExamState oder Schweregrad."""
    if isinstance(status, (UnitStatus, ExamState)):
        status = status.value
    return COLORS.get(status, COLORS["geplant"])


# ─── Formatierung ─────────────────────────────────────────────────────────────

def fmt_date(day: Optional[date]) -> str:
    return day.strftime("%d.%m.%Y") if day else ""


def fmt_time(t: time) -> str:
    return t.strftime("%H:%M")
