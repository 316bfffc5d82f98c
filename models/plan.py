"""Ausbildungsplan eines Azubis: geplante Lernfelder und Prüfungen (Pydantic v2)."""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, model_validator

from models.curriculum import CurriculumUnit, ExamSection, ExamType
from models.errors import NotFoundError


class UnitStatus(str, Enum):
    PLANNED = "geplant"
    ACTIVE = "aktiv"
    COMPLETED = "abgeschlossen"
    OVERDUE = "überfällig"


class ExamState(str, Enum):
    NOT_SCHEDULED = "nicht angemeldet"
    REGISTERED = "angemeldet"
    SAT = "abgelegt"
    PASSED = "bestanden"
    FAILED = "nicht bestanden"


class ScheduledUnit(BaseModel):
    """Ein Lernfeld mit konkretem Zeitfenster [start_date, end_date)."""

    unit: CurriculumUnit
    start_date: date
    end_date: date                 # exklusiv: erster Tag NACH dem Lernfeld
    status: UnitStatus = UnitStatus.PLANNED

    @property
    def unit_id(self) -> str:
        return self.unit.id

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days

    @model_validator(mode="after")
    def _check_window(self):
        if self.end_date < self.start_date:
            raise ValueError(
                f"Lernfeld {self.unit.id}: Ende {self.end_date} liegt vor Beginn {self.start_date}"
            )
        return self


class ExamResult(BaseModel):
    """Ergebnis eines Prüfungsversuchs (Punkte 0–100)."""

    attempt: int
    overall_score: float
    section_scores: dict[str, float]
    passed: bool
    recorded_on: Optional[date] = None


class Examination(BaseModel):
    """Eine Prüfung im Ausbildungsplan inklusive Workflow-Zustand."""

    id: str                                   # "AP-…-AP1"
    exam_type: ExamType
    target_date: date
    duration_minutes: int
    sections: list[ExamSection]
    weight: float
    state: ExamState = ExamState.NOT_SCHEDULED
    registration_date: Optional[date] = None
    sat_date: Optional[date] = None
    attempts: int = 0
    results: list[ExamResult] = []

    @property
    def last_result(self) -> Optional[ExamResult]:
        return self.results[-1] if self.results else None


class TrainingPlan(BaseModel):
    """Konkreter, datierter Ausbildungsplan für einen Azubi.

    Invariante: Die Zeitfenster der Lernfelder sind lückenlos, überlappungsfrei
    und nach Lernfeld-Nummer geordnet; das erste beginnt am Ausbildungsbeginn.
    """

    id: str
    trainee_id: str
    occupation_id: str
    trainer_id: str
    start_date: date
    end_date: date
    catalog_version: str = ""
    units: list[ScheduledUnit] = []
    examinations: list[Examination] = []

    @model_validator(mode="after")
    def _check_windows(self):
        if self.end_date < self.start_date:
            raise ValueError(f"Plan {self.id}: Ende liegt vor Beginn")
        cursor = self.start_date
        last_seq = 0
        for su in self.units:
            if su.start_date != cursor:
                raise ValueError(
                    f"Plan {self.id}: Lernfeld {su.unit.id} beginnt am {su.start_date}, "
                    f"erwartet {cursor} (Lücke oder Überlappung)"
                )
            if su.unit.sequence <= last_seq:
                raise ValueError(f"Plan {self.id}: Lernfelder nicht nach Nummer geordnet")
            cursor = su.end_date
            last_seq = su.unit.sequence
        return self

    # ─── Zugriff ───

    def get_unit(self, unit_id: str) -> ScheduledUnit:
        for su in self.units:
            if su.unit.id == unit_id:
                return su
        raise NotFoundError("Lernfeld", unit_id)

    def get_examination(self, key) -> Examination:
        """Sucht eine Prüfung per ID, ExamType oder Typ-Bezeichnung."""
        for exam in self.examinations:
            if exam.id == key or exam.exam_type == key or exam.exam_type.code == key:
                return exam
        raise NotFoundError("Prüfung", getattr(key, "value", str(key)))

    def units_with_status(self, status: UnitStatus) -> list[ScheduledUnit]:
        return [su for su in self.units if su.status == status]

    def contains(self, day: date) -> bool:
        """True wenn der Tag in die Ausbildungszeit [start, end) fällt."""
        return self.start_date <= day < self.end_date

    def training_year(self, day: date) -> int:
        """Ausbildungsjahr (1-basiert) am angegebenen Tag."""
        months = (day.year - self.start_date.year) * 12 + (day.month - self.start_date.month)
        if day.day < self.start_date.day:
            months -= 1
        return max(1, months // 12 + 1)

    def progress_percent(self) -> float:
        """Anteil abgeschlossener Lernfelder in Prozent (nach Zeitrichtwert)."""
        total = sum(su.unit.allotted_hours for su in self.units)
        if total == 0:
            return 0.0
        done = sum(su.unit.allotted_hours for su in self.units
                   if su.status == UnitStatus.COMPLETED)
        return round(done / total * 100, 1)
