"""Zeitliche Planung der Lernfelder und Prüfungstermine.

Architektur:
  - Der Katalog wird im Konstruktor übergeben (keine globale Nachschlagetabelle)
  - Lernfelder werden lückenlos hintereinander geplant:
      Dauer = ceil(Zeitrichtwert / Stunden pro Tag) Kalendertage
  - Planende = Ausbildungsbeginn + Ausbildungsdauer in Monaten
  - Prüfungstermine = Ausbildungsbeginn + Monats-Offset der Prüfungsvorlage
"""

import logging
import math
from datetime import date, timedelta

from dateutil.relativedelta import relativedelta

from models.curriculum import CurriculumCatalog, CurriculumUnit, Occupation
from models.plan import Examination, ScheduledUnit, TrainingPlan, UnitStatus

logger = logging.getLogger(__name__)


def add_months(day: date, months: int) -> date:
    """Addiert Kalendermonate; Monatsende wird auf den letzten gültigen Tag gekürzt."""
    return day + relativedelta(months=months)


def plan_id_for(trainee_id: str, start_date: date) -> str:
    """Stabile Plan-ID aus Azubi und Ausbildungsbeginn."""
    return f"AP-{trainee_id}-{start_date:%Y%m%d}"


class SchedulePlanner:
    """Projiziert die Lernfelder eines Berufs auf den Kalender."""

    def __init__(self, catalog: CurriculumCatalog, hours_per_day: float = 8.0) -> None:
        if hours_per_day <= 0:
            raise ValueError("hours_per_day muss > 0 sein.")
        self.catalog = catalog
        self.hours_per_day = hours_per_day

    # ─── Reine Planung ────────────────────────────────────────────────────────

    def unit_days(self, unit: CurriculumUnit) -> int:
        """Kalendertage eines Lernfelds (angebrochene Tage zählen voll)."""
        return math.ceil(unit.allotted_hours / self.hours_per_day)

    def schedule_units(self, occupation: Occupation, start_date: date) -> list[ScheduledUnit]:
        """Plant alle Lernfelder lückenlos ab start_date in Katalog-Reihenfolge."""
        scheduled: list[ScheduledUnit] = []
        cursor = start_date
        for unit in sorted(occupation.units, key=lambda u: u.sequence):
            end = cursor + timedelta(days=self.unit_days(unit))
            scheduled.append(ScheduledUnit(unit=unit, start_date=cursor, end_date=end))
            cursor = end
        return scheduled

    def plan_examinations(
        self, occupation: Occupation, start_date: date, plan_id: str
    ) -> list[Examination]:
        """Erzeugt die Prüfungen mit Zielterminen relativ zum Ausbildungsbeginn."""
        exams = []
        for tpl in sorted(occupation.examinations, key=lambda e: e.offset_months):
            exams.append(Examination(
                id=f"{plan_id}-{tpl.exam_type.code}",
                exam_type=tpl.exam_type,
                target_date=add_months(start_date, tpl.offset_months),
                duration_minutes=tpl.duration_minutes,
                sections=list(tpl.sections),
                weight=tpl.weight,
            ))
        return exams

    def create_plan(
        self,
        trainee_id: str,
        occupation_id: str,
        start_date: date,
        trainer_id: str,
    ) -> TrainingPlan:
        """Erstellt einen Ausbildungsplan. Wirft NotFoundError bei unbekanntem Beruf."""
        occupation = self.catalog.get(occupation_id)
        plan_id = plan_id_for(trainee_id, start_date)
        end_date = add_months(start_date, occupation.duration_months)
        units = self.schedule_units(occupation, start_date)

        if units and units[-1].end_date > end_date:
            logger.warning(
                f"Plan {plan_id}: Lernfelder enden am {units[-1].end_date}, "
                f"nach dem Ausbildungsende {end_date}"
            )

        plan = TrainingPlan(
            id=plan_id,
            trainee_id=trainee_id,
            occupation_id=occupation.id,
            trainer_id=trainer_id,
            start_date=start_date,
            end_date=end_date,
            catalog_version=occupation.version,
            units=units,
            examinations=self.plan_examinations(occupation, start_date, plan_id),
        )
        logger.info(
            f"Plan {plan_id} erstellt: {occupation.name}, {len(units)} Lernfelder, "
            f"{start_date} – {end_date}"
        )
        return plan

    # ─── Fortschritt ──────────────────────────────────────────────────────────

    def refresh_statuses(self, plan: TrainingPlan, today: date) -> TrainingPlan:
        """Berechnet den Status aller nicht abgeschlossenen Lernfelder neu.

        geplant: today < Beginn, aktiv: Beginn ≤ today < Ende,
        überfällig: today ≥ Ende. Abgeschlossene Lernfelder bleiben unverändert.
        """
        for su in plan.units:
            if su.status == UnitStatus.COMPLETED:
                continue
            if today < su.start_date:
                su.status = UnitStatus.PLANNED
            elif today < su.end_date:
                su.status = UnitStatus.ACTIVE
            else:
                su.status = UnitStatus.OVERDUE
        overdue = len(plan.units_with_status(UnitStatus.OVERDUE))
        if overdue:
            logger.info(f"Plan {plan.id}: {overdue} Lernfeld(er) überfällig am {today}")
        return plan

    def complete_unit(self, plan: TrainingPlan, unit_id: str) -> ScheduledUnit:
        """Markiert ein Lernfeld als abgeschlossen."""
        su = plan.get_unit(unit_id)
        su.status = UnitStatus.COMPLETED
        logger.info(f"Plan {plan.id}: Lernfeld {unit_id} abgeschlossen")
        return su
