"""Datenspeicher: Azubis, Ausbilder, Pläne und Nachweise als JSON (Pydantic v2).

Der Kern besitzt diese Daten nicht; der Store bietet typisierte Zugriffe mit
Datumsfilter. Gleichzeitige Schreibzugriffe: last write wins.
"""

import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from models.errors import NotFoundError, PersistenceError
from models.plan import TrainingPlan
from models.records import (
    ActivityRecord,
    DateRange,
    Notification,
    SchoolAttendance,
    TraineeProfile,
    Trainer,
    TrainerCertification,
    WeeklyReport,
    WorkingTimeRecord,
)

logger = logging.getLogger(__name__)


class TrainingDataset(BaseModel):
    """Vollständiger Datensatz eines Ausbildungsbetriebs."""

    trainees: list[TraineeProfile] = []
    trainers: list[Trainer] = []
    certifications: list[TrainerCertification] = []
    plans: list[TrainingPlan] = []
    working_times: list[WorkingTimeRecord] = []
    activities: list[ActivityRecord] = []
    school_attendance: list[SchoolAttendance] = []
    weekly_reports: list[WeeklyReport] = []
    notifications: list[Notification] = []
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    data_version: str = "1.0"

    def summary(self) -> str:
        """Kurze Übersicht über den Datensatz."""
        lines = [
            f"Azubis: {len(self.trainees)}",
            f"Ausbilder: {len(self.trainers)} "
            f"({len(self.certifications)} Qualifikationsnachweise)",
            f"Ausbildungspläne: {len(self.plans)}",
            f"Arbeitszeit-Einträge: {len(self.working_times)}",
            f"Tätigkeiten: {len(self.activities)}",
            f"Berufsschultage: {len(self.school_attendance)}",
            f"Wochennachweise: {len(self.weekly_reports)}",
        ]
        return "\n".join(lines)

    # ─── Persistenz ────────────────────────────────────────────────────────

    def save_json(self, path: Path) -> None:
        """Speichert den kompletten Datensatz als JSON-Datei."""
        path = Path(path)
        now = datetime.now(timezone.utc)
        updated = self.model_copy(update={
            "modified_at": now,
            "created_at": self.created_at or now,
        })
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(updated.model_dump_json(indent=2))
        except OSError as e:
            raise PersistenceError(f"Datensatz konnte nicht gespeichert werden: {path}: {e}") from e

    @classmethod
    def load_json(cls, path: Path) -> "TrainingDataset":
        """Lädt einen Datensatz aus einer JSON-Datei."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"JSON-Datei nicht gefunden: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                return cls.model_validate_json(f.read())
        except OSError as e:
            raise PersistenceError(f"Datensatz nicht lesbar: {path}: {e}") from e
        except PydanticValidationError as e:
            raise PersistenceError(f"Datensatz ungültig: {path}\n{e}") from e


class RecordStore:
    """Typisierte Lese-/Schreibzugriffe auf einen TrainingDataset."""

    def __init__(self, dataset: Optional[TrainingDataset] = None,
                 path: Optional[Path] = None) -> None:
        self.dataset = dataset or TrainingDataset()
        self.path = Path(path) if path else None

    @classmethod
    def open(cls, path: Path) -> "RecordStore":
        """Öffnet einen Store aus einer JSON-Datei."""
        return cls(TrainingDataset.load_json(path), path)

    def save(self, path: Optional[Path] = None) -> None:
        target = Path(path) if path else self.path
        if target is None:
            raise PersistenceError("Kein Speicherpfad für den Datensatz angegeben.")
        self.dataset.save_json(target)
        self.path = target
        logger.info(f"Datensatz gespeichert: {target}")

    # ─── Stammdaten ────────────────────────────────────────────────────────

    def get_trainee(self, trainee_id: str) -> TraineeProfile:
        for t in self.dataset.trainees:
            if t.id == trainee_id:
                return t
        raise NotFoundError("Azubi", trainee_id)

    def get_trainer(self, trainer_id: str) -> Trainer:
        for t in self.dataset.trainers:
            if t.id == trainer_id:
                return t
        raise NotFoundError("Ausbilder", trainer_id)

    def certification_for(
        self, trainer_id: str, certification_type: str = "AEVO"
    ) -> Optional[TrainerCertification]:
        """Neuester Nachweis des Typs (größtes valid_until) oder None."""
        wanted = certification_type.strip().upper()
        matches = [
            c for c in self.dataset.certifications
            if c.trainer_id == trainer_id and c.certification_type == wanted
        ]
        return max(matches, key=lambda c: c.valid_until) if matches else None

    # ─── Ausbildungspläne ──────────────────────────────────────────────────

    def get_plan(self, plan_id: str) -> TrainingPlan:
        for p in self.dataset.plans:
            if p.id == plan_id:
                return p
        raise NotFoundError("Ausbildungsplan", plan_id)

    def plans_for_trainee(self, trainee_id: str) -> list[TrainingPlan]:
        """Alle Pläne eines Azubis, nach Ausbildungsbeginn sortiert."""
        return sorted(
            (p for p in self.dataset.plans if p.trainee_id == trainee_id),
            key=lambda p: (p.start_date, p.id),
        )

    def active_plan(self, trainee_id: str, day: date) -> TrainingPlan:
        """Maßgeblicher Plan am Stichtag.

        Bei mehreren Plänen gewinnt der Plan, der den Tag enthält und am
        spätesten begonnen hat; sonst der zuletzt vor dem Tag begonnene.
        """
        plans = self.plans_for_trainee(trainee_id)
        if not plans:
            raise NotFoundError("Ausbildungsplan für Azubi", trainee_id)
        running = [p for p in plans if p.contains(day)]
        if running:
            return running[-1]
        started = [p for p in plans if p.start_date <= day]
        if started:
            return started[-1]
        raise NotFoundError(
            "Ausbildungsplan für Azubi", f"{trainee_id} am {day:%d.%m.%Y}"
        )

    def save_plan(self, plan: TrainingPlan) -> None:
        """Fügt einen Plan ein oder ersetzt einen Plan gleicher ID."""
        self.dataset.plans = [p for p in self.dataset.plans if p.id != plan.id]
        self.dataset.plans.append(plan)

    # ─── Nachweise (Datumsfilter) ──────────────────────────────────────────

    def working_times(self, trainee_id: str, period: DateRange) -> list[WorkingTimeRecord]:
        return sorted(
            (w for w in self.dataset.working_times
             if w.trainee_id == trainee_id and period.contains(w.date)),
            key=lambda w: (w.date, w.start),
        )

    def activities(self, trainee_id: str, period: DateRange) -> list[ActivityRecord]:
        return sorted(
            (a for a in self.dataset.activities
             if a.trainee_id == trainee_id and period.contains(a.date)),
            key=lambda a: (a.date, a.description),
        )

    def school_attendance(self, trainee_id: str, period: DateRange) -> list[SchoolAttendance]:
        return sorted(
            (s for s in self.dataset.school_attendance
             if s.trainee_id == trainee_id and period.contains(s.date)),
            key=lambda s: s.date,
        )

    def weekly_reports(self, trainee_id: str, period: DateRange) -> list[WeeklyReport]:
        return sorted(
            (r for r in self.dataset.weekly_reports
             if r.trainee_id == trainee_id and period.contains(r.week_start)),
            key=lambda r: r.week_start,
        )

    def add_working_times(self, records: list[WorkingTimeRecord]) -> int:
        """Übernimmt Arbeitszeiten; identische Einträge werden nicht doppelt gespeichert."""
        existing = {(w.trainee_id, w.date, w.start, w.end) for w in self.dataset.working_times}
        added = 0
        for rec in records:
            key = (rec.trainee_id, rec.date, rec.start, rec.end)
            if key in existing:
                continue
            self.dataset.working_times.append(rec)
            existing.add(key)
            added += 1
        return added

    # ─── Benachrichtigungen ────────────────────────────────────────────────

    def add_notification(self, notification: Notification) -> None:
        self.dataset.notifications.append(notification)

    def notifications_for(self, recipient_id: str) -> list[Notification]:
        return [n for n in self.dataset.notifications if n.recipient_id == recipient_id]
