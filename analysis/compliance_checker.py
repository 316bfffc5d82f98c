"""BBiG-/JArbSchG-Compliance-Prüfung eines Ausbildungsplans.

Prüft unabhängig voneinander:
  1. Arbeitszeiten (Jugendschutz ≤ 8h, gesetzliche Obergrenze ≤ 10h pro Tag)
  2. Ausbildereignung (gültiger AEVO-Nachweis)
  3. Prüfungsanmeldungen (Termin verstrichen ohne Anmeldung)
  4. Mindestvergütung je Ausbildungsjahr
  5. Ausbildungsnachweise (nur wenn Nachweise übergeben werden)

Die Prüfung hat keine Seiteneffekte und ist bei gleichen Eingaben deterministisch.
"""

import logging
from collections import defaultdict
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, Literal, Optional

from pydantic import BaseModel, model_validator

from config.schema import PolicyConfig
from models.plan import ExamState, TrainingPlan
from models.records import (
    TrainerCertification,
    WeeklyReport,
    WorkingTimeRecord,
    age_on,
    fmt_hours,
)

logger = logging.getLogger(__name__)


class ViolationCategory(str, Enum):
    WORKING_TIME = "Arbeitszeit"
    TRAINER_CERTIFICATION = "Ausbildereignung"
    EXAM_REGISTRATION = "Prüfungsanmeldung"
    MINIMUM_WAGE = "Mindestvergütung"
    RECORD_KEEPING = "Ausbildungsnachweis"


_SEVERITY: dict[ViolationCategory, str] = {
    ViolationCategory.WORKING_TIME: "error",
    ViolationCategory.TRAINER_CERTIFICATION: "error",
    ViolationCategory.EXAM_REGISTRATION: "error",
    ViolationCategory.MINIMUM_WAGE: "error",
    ViolationCategory.RECORD_KEEPING: "warning",
}


class ComplianceViolation(BaseModel):
    """Ein einzelner Verstoß; der Schweregrad ergibt sich aus der Kategorie."""

    category: ViolationCategory
    description: str

    @property
    def severity(self) -> Literal["error", "warning"]:
        return _SEVERITY[self.category]


class ComplianceReport(BaseModel):
    """Ergebnis der Compliance-Prüfung."""

    compliant: bool          # True genau dann, wenn keine Verstöße vorliegen
    violations: list[ComplianceViolation]
    recommendations: list[str]

    @model_validator(mode='after')
    def _compliant_matches_violations(self):
        if self.compliant != (len(self.violations) == 0):
            raise ValueError("compliant muss genau dann True sein, wenn keine Verstöße vorliegen")
        return self

    def by_category(self, category: ViolationCategory) -> list[ComplianceViolation]:
        return [v for v in self.violations if v.category == category]

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        status = (
            "[bold green]✓ KONFORM[/bold green]"
            if self.compliant
            else "[bold red]✗ VERSTÖSSE GEFUNDEN[/bold red]"
        )
        console.print(Panel(
            f"{status}\nVerstöße: {len(self.violations)}",
            title="BBiG-Compliance", border_style="cyan",
        ))

        if self.violations:
            table = Table(box=box.ROUNDED, show_lines=True)
            table.add_column("Typ", width=8)
            table.add_column("Kategorie", width=20)
            table.add_column("Beschreibung")
            for v in self.violations:
                color = "red" if v.severity == "error" else "yellow"
                table.add_row(
                    f"[{color}]{v.severity.upper()}[/{color}]",
                    v.category.value,
                    v.description,
                )
            console.print(table)

        if self.recommendations:
            console.print("\n[bold]Empfehlungen:[/bold]")
            for r in self.recommendations:
                console.print(f"  [cyan]• {r}[/cyan]")


class ComplianceChecker:
    """Führt alle Compliance-Regeln gegen die aktuellen Datensätze aus."""

    def __init__(self, policy: Optional[PolicyConfig] = None) -> None:
        self.policy = policy or PolicyConfig()

    def check(
        self,
        plan: TrainingPlan,
        current_date: date,
        date_of_birth: Optional[date] = None,
        working_times: Iterable[WorkingTimeRecord] = (),
        certification: Optional[TrainerCertification] = None,
        compensation: Optional[float] = None,
        weekly_reports: Optional[Iterable[WeeklyReport]] = None,
    ) -> ComplianceReport:
        """Führt alle Prüfungen durch und gibt einen ComplianceReport zurück.

        compensation=None überspringt die Vergütungsprüfung,
        weekly_reports=None die Nachweisprüfung (keine Daten verfügbar).
        """
        violations: list[ComplianceViolation] = []
        recommendations: list[str] = []

        for found, recs in (
            self._check_working_time(working_times, date_of_birth, current_date),
            self._check_trainer_certification(plan, certification, current_date),
            self._check_exam_registration(plan, current_date),
            self._check_minimum_wage(plan, compensation, current_date),
            self._check_record_keeping(weekly_reports, current_date),
        ):
            violations.extend(found)
            for r in recs:
                if r not in recommendations:
                    recommendations.append(r)

        report = ComplianceReport(
            compliant=not violations,
            violations=violations,
            recommendations=recommendations,
        )
        if violations:
            logger.warning(
                f"Plan {plan.id}: {len(violations)} Compliance-Verstoß/-Verstöße am {current_date}"
            )
        else:
            logger.info(f"Plan {plan.id}: konform am {current_date}")
        return report

    # ── Einzelne Prüfungen ────────────────────────────────────────────────────

    def _is_minor(self, date_of_birth: Optional[date], reference: date) -> bool:
        if date_of_birth is None:
            return False
        return age_on(date_of_birth, reference) < self.policy.working_time.age_of_majority

    def _check_working_time(
        self,
        records: Iterable[WorkingTimeRecord],
        date_of_birth: Optional[date],
        current_date: date,
    ) -> tuple[list[ComplianceViolation], list[str]]:
        """Tägliche Arbeitszeit: Jugendschutz und gesetzliche Obergrenze."""
        wt = self.policy.working_time
        window_start = current_date - timedelta(days=wt.lookback_days)

        # Mehrere Einträge am selben Tag werden zur Tagesarbeitszeit addiert
        per_day: dict[date, timedelta] = defaultdict(timedelta)
        for rec in records:
            if window_start <= rec.date <= current_date:
                per_day[rec.date] += rec.duration

        youth_limit = timedelta(hours=wt.youth_max_hours_per_day)
        cap = timedelta(hours=wt.statutory_max_hours_per_day)
        violations: list[ComplianceViolation] = []
        recs: list[str] = []

        for day in sorted(per_day):
            worked = per_day[day]
            hours = f"{fmt_hours(worked.total_seconds() / 3600)}h"
            if self._is_minor(date_of_birth, day) and worked > youth_limit:
                violations.append(ComplianceViolation(
                    category=ViolationCategory.WORKING_TIME,
                    description=(
                        f"Jugendschutz verletzt: {hours} am {day:%d.%m.%Y} "
                        f"(max. {wt.youth_max_hours_per_day:g}h, JArbSchG §8)."
                    ),
                ))
                rec = (f"Arbeitszeiten Minderjähriger auf "
                       f"{wt.youth_max_hours_per_day:g}h pro Tag begrenzen")
                if rec not in recs:
                    recs.append(rec)
            if worked > cap:
                violations.append(ComplianceViolation(
                    category=ViolationCategory.WORKING_TIME,
                    description=(
                        f"Arbeitszeit überschritten: {hours} am {day:%d.%m.%Y} "
                        f"(max. {wt.statutory_max_hours_per_day:g}h)."
                    ),
                ))
                rec = "Schichtplanung prüfen und Mehrarbeit ausgleichen"
                if rec not in recs:
                    recs.append(rec)
        return violations, recs

    def _check_trainer_certification(
        self,
        plan: TrainingPlan,
        certification: Optional[TrainerCertification],
        current_date: date,
    ) -> tuple[list[ComplianceViolation], list[str]]:
        """Ausbilder braucht einen gültigen Eignungsnachweis."""
        required = self.policy.trainer.required_certification.upper()
        if (
            certification is not None
            and certification.trainer_id == plan.trainer_id
            and certification.certification_type == required
            and certification.is_valid_on(current_date)
        ):
            return [], []

        if certification is None or certification.trainer_id != plan.trainer_id:
            detail = f"kein {required}-Nachweis vorhanden"
        elif certification.certification_type != required:
            detail = f"Nachweis '{certification.certification_type}' statt {required}"
        else:
            detail = f"{required}-Nachweis abgelaufen am {certification.valid_until:%d.%m.%Y}"
        return (
            [ComplianceViolation(
                category=ViolationCategory.TRAINER_CERTIFICATION,
                description=f"Ausbilder {plan.trainer_id}: {detail}.",
            )],
            [f"{required}-Rezertifizierung für Ausbilder {plan.trainer_id} einplanen"],
        )

    def _check_exam_registration(
        self, plan: TrainingPlan, current_date: date
    ) -> tuple[list[ComplianceViolation], list[str]]:
        """Prüfungstermin verstrichen, aber nie angemeldet."""
        violations = [
            ComplianceViolation(
                category=ViolationCategory.EXAM_REGISTRATION,
                description=(
                    f"{exam.exam_type.value}: Termin {exam.target_date:%d.%m.%Y} "
                    f"verstrichen ohne Anmeldung."
                ),
            )
            for exam in plan.examinations
            if exam.target_date < current_date and exam.state == ExamState.NOT_SCHEDULED
        ]
        recs = (
            [f"Prüfungsanmeldung bei der {self.policy.chamber} nachholen"]
            if violations else []
        )
        return violations, recs

    def _check_minimum_wage(
        self,
        plan: TrainingPlan,
        compensation: Optional[float],
        current_date: date,
    ) -> tuple[list[ComplianceViolation], list[str]]:
        """Vergütung ≥ Mindestvergütung des aktuellen Ausbildungsjahres (BBiG §17)."""
        if compensation is None:
            return [], []
        year = plan.training_year(current_date)
        minimum = self.policy.minimum_wage.minimum_for_year(year)
        if compensation >= minimum:
            return [], []
        return (
            [ComplianceViolation(
                category=ViolationCategory.MINIMUM_WAGE,
                description=(
                    f"Vergütung unter Mindestvergütung im {year}. Ausbildungsjahr: "
                    f"{compensation:.2f}€ < {minimum:.2f}€."
                ),
            )],
            [f"Ausbildungsvergütung auf mindestens {minimum:.2f}€ anheben"],
        )

    def _check_record_keeping(
        self,
        weekly_reports: Optional[Iterable[WeeklyReport]],
        current_date: date,
    ) -> tuple[list[ComplianceViolation], list[str]]:
        """Mindestens ein Ausbildungsnachweis im letzten Berichtsintervall."""
        if weekly_reports is None:
            return [], []
        interval = self.policy.record_keeping.report_interval_days
        since = current_date - timedelta(days=interval)
        recent = [r for r in weekly_reports if since <= r.week_start <= current_date]
        if recent:
            return [], []
        return (
            [ComplianceViolation(
                category=ViolationCategory.RECORD_KEEPING,
                description=(
                    f"Ausbildungsnachweis unvollständig: kein Nachweis seit "
                    f"{since:%d.%m.%Y}."
                ),
            )],
            ["Wöchentliche Nachweise digital erfassen"],
        )
