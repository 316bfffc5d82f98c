"""Ausbildungsnachweis-Bericht: Plan, Nachweise und Ausbilder in einem Zeitraum.

Reine Aggregation ohne Geschäftsregeln. Sensible Profilfelder werden entfernt,
der Bericht enthält keinen Zeitstempel und ist bei gleichen Daten identisch.
"""

import logging
from typing import Optional

from pydantic import BaseModel

from data.store import RecordStore
from models.errors import NotFoundError, ValidationError
from models.plan import TrainingPlan
from models.records import (
    ActivityRecord,
    DateRange,
    SchoolAttendance,
    Trainer,
    WeeklyReport,
    WorkingTimeRecord,
)

logger = logging.getLogger(__name__)


class ReportTotals(BaseModel):
    activity_hours: float = 0.0
    school_hours: float = 0.0
    working_hours: float = 0.0
    school_days: int = 0
    weekly_reports: int = 0
    signed_reports: int = 0


class TrainingRecordReport(BaseModel):
    """Zusammengestellter Ausbildungsnachweis eines Azubis."""

    trainee: dict                       # ohne sensible Felder
    trainer: Optional[Trainer] = None
    plan: Optional[TrainingPlan] = None
    period: DateRange
    activities: list[ActivityRecord] = []
    school_days: list[SchoolAttendance] = []
    working_times: list[WorkingTimeRecord] = []
    weekly_reports: list[WeeklyReport] = []
    totals: ReportTotals = ReportTotals()

    def print_rich(self) -> None:
        """Gibt den Bericht formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        head = [
            f"Azubi: [bold]{self.trainee.get('name', '')}[/bold] ({self.trainee.get('id', '')})",
            f"Zeitraum: {self.period}",
        ]
        if self.trainer:
            head.append(f"Ausbilder: {self.trainer.name}")
        if self.plan:
            head.append(
                f"Plan: {self.plan.id} ({self.plan.occupation_id}), "
                f"Fortschritt {self.plan.progress_percent():.1f}%"
            )
        console.print(Panel("\n".join(head), title="Ausbildungsnachweis", border_style="cyan"))

        t = self.totals
        table = Table(box=box.SIMPLE, show_header=False)
        table.add_column("Kennzahl", style="cyan")
        table.add_column("Wert", justify="right")
        table.add_row("Betriebliche Tätigkeiten", f"{t.activity_hours:.1f}h")
        table.add_row("Berufsschule", f"{t.school_hours:.1f}h an {t.school_days} Tagen")
        table.add_row("Erfasste Arbeitszeit", f"{t.working_hours:.1f}h")
        table.add_row("Wochennachweise", f"{t.weekly_reports} ({t.signed_reports} unterschrieben)")
        console.print(table)


class ReportAssembler:
    """Liest die Datensätze eines Azubis und baut den Bericht zusammen."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def assemble_report(self, trainee_id: str, period: DateRange) -> TrainingRecordReport:
        if not period.is_valid:
            raise ValidationError(
                f"Ungültiger Zeitraum: Ende {period.end} liegt vor Beginn {period.start}"
            )
        profile = self.store.get_trainee(trainee_id)

        try:
            plan = self.store.active_plan(trainee_id, period.end)
        except NotFoundError:
            plan = None
        trainer = self.store.get_trainer(plan.trainer_id) if plan else None

        activities = self.store.activities(trainee_id, period)
        school = self.store.school_attendance(trainee_id, period)
        working = self.store.working_times(trainee_id, period)
        reports = self.store.weekly_reports(trainee_id, period)

        totals = ReportTotals(
            activity_hours=round(sum(a.hours for a in activities), 2),
            school_hours=round(sum(s.hours for s in school), 2),
            working_hours=round(sum(w.hours for w in working), 2),
            school_days=len({s.date for s in school}),
            weekly_reports=len(reports),
            signed_reports=sum(1 for r in reports if r.is_signed),
        )
        logger.info(
            f"Bericht für {trainee_id} ({period}): {len(activities)} Tätigkeiten, "
            f"{len(working)} Arbeitszeit-Einträge"
        )
        return TrainingRecordReport(
            trainee=profile.sanitized(),
            trainer=trainer,
            plan=plan,
            period=period,
            activities=activities,
            school_days=school,
            working_times=working,
            weekly_reports=reports,
            totals=totals,
        )
