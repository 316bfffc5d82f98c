"""Fassade über Planung, Prüfungs-Workflow, Compliance und Berichte.

Liest und schreibt über den RecordStore; speichert nicht selbst auf Platte
(das übernimmt der Aufrufer mit store.save()).
"""

import logging
from datetime import date, timedelta
from typing import Literal, Optional

from pydantic import BaseModel

from analysis.compliance_checker import ComplianceChecker, ComplianceReport
from analysis.report_assembler import ReportAssembler, TrainingRecordReport
from config.defaults import default_catalog
from config.schema import PolicyConfig
from data.store import RecordStore
from models.curriculum import CurriculumCatalog
from models.errors import InvalidTransitionError, ValidationError
from models.plan import ExamResult, ExamState, Examination, ScheduledUnit, TrainingPlan
from models.records import DateRange, Notification
from planner.examination_workflow import ExaminationWorkflow
from planner.schedule_planner import SchedulePlanner

logger = logging.getLogger(__name__)

# Aktionen für manage_examination (deutsch oder englisch)
EXAM_ACTIONS: dict[str, str] = {
    "anmelden": "register",
    "register": "register",
    "ablegen": "sit",
    "sit": "sit",
    "bewerten": "evaluate",
    "evaluate": "evaluate",
    "wiederholen": "retake",
    "retake": "retake",
}


class QualificationStatus(BaseModel):
    """Stand der Ausbildereignung eines Ausbilders."""

    trainer_id: str
    status: Literal["gueltig", "erforderlich"]
    certification_type: str
    valid_until: Optional[date] = None
    next_refresher: Optional[date] = None


class TrainingPlanService:
    """Anwendungsfälle rund um Ausbildungspläne eines Betriebs."""

    def __init__(
        self,
        store: RecordStore,
        catalog: Optional[CurriculumCatalog] = None,
        policy: Optional[PolicyConfig] = None,
    ) -> None:
        self.store = store
        self.catalog = catalog or default_catalog()
        self.policy = policy or PolicyConfig()
        self.planner = SchedulePlanner(self.catalog, self.policy.planning.hours_per_day)
        self.workflow = ExaminationWorkflow(self.policy.examinations)
        self.checker = ComplianceChecker(self.policy)
        self.assembler = ReportAssembler(store)

    # ─── Ausbildungsplan ──────────────────────────────────────────────────────

    def create_plan(
        self,
        trainee_id: str,
        occupation_id: str,
        start_date: date,
        trainer_id: str,
    ) -> TrainingPlan:
        """Erstellt und speichert einen Plan und benachrichtigt Azubi und Ausbilder."""
        trainee = self.store.get_trainee(trainee_id)
        trainer = self.store.get_trainer(trainer_id)

        if self.policy.trainer.enforce_on_plan_creation:
            required = self.policy.trainer.required_certification
            cert = self.store.certification_for(trainer_id, required)
            if cert is None or not cert.is_valid_on(start_date):
                raise ValidationError(
                    f"Ausbilder {trainer.name} hat am {start_date:%d.%m.%Y} "
                    f"keinen gültigen {required.upper()}-Nachweis."
                )

        plan = self.planner.create_plan(trainee_id, occupation_id, start_date, trainer_id)
        self.store.save_plan(plan)

        occupation = self.catalog.get(occupation_id)
        self._notify(trainee_id, start_date, "ausbildungsplan",
                     f"Ausbildungsplan {occupation.name} erstellt",
                     f"Beginn {plan.start_date:%d.%m.%Y}, Ende {plan.end_date:%d.%m.%Y}.")
        self._notify(trainer_id, start_date, "ausbildungsplan",
                     f"Neuer Azubi: {trainee.name}",
                     f"Plan {plan.id} ({occupation.name}).")

        age = trainee.age_on(start_date)
        if age is not None and age < self.policy.working_time.age_of_majority:
            limit = self.policy.working_time.youth_max_hours_per_day
            self._notify(trainer_id, start_date, "jugendschutz",
                         f"Jugendarbeitsschutz für {trainee.name}",
                         f"Azubi ist bei Beginn {age} Jahre alt: "
                         f"max. {limit:g}h pro Tag (JArbSchG).")
        return plan

    def get_plan(self, trainee_id: str, on: date) -> TrainingPlan:
        return self.store.active_plan(trainee_id, on)

    def refresh_plan(self, trainee_id: str, today: date) -> TrainingPlan:
        plan = self.planner.refresh_statuses(self.store.active_plan(trainee_id, today), today)
        self.store.save_plan(plan)
        return plan

    def complete_unit(self, trainee_id: str, unit_id: str, on: date) -> ScheduledUnit:
        plan = self.store.active_plan(trainee_id, on)
        su = self.planner.complete_unit(plan, unit_id)
        self.store.save_plan(plan)
        return su

    # ─── Prüfungen ────────────────────────────────────────────────────────────

    def manage_examination(
        self,
        trainee_id: str,
        exam_type,
        action: str,
        on: date,
        scores: Optional[dict[str, float]] = None,
        target_date: Optional[date] = None,
    ) -> Examination:
        """Führt einen Workflow-Schritt für eine Prüfung aus und speichert den Plan.

        action: anmelden/register, ablegen/sit, bewerten/evaluate,
        wiederholen/retake (Anmeldung nach 'nicht bestanden'). Für die
        Wiederholung legt target_date den neuen Prüfungstermin fest, sonst gilt
        der Abstand resit_interval_days der Policy.
        """
        step = EXAM_ACTIONS.get(action.strip().lower())
        if step is None:
            raise ValidationError(
                f"Unbekannte Prüfungsaktion '{action}'. "
                f"Erlaubt: {', '.join(sorted(set(EXAM_ACTIONS)))}"
            )
        plan = self.store.active_plan(trainee_id, on)
        exam = plan.get_examination(exam_type)

        if step == "register":
            self.workflow.register(exam, on)
        elif step == "retake":
            if exam.state != ExamState.FAILED:
                raise InvalidTransitionError(
                    f"{exam.exam_type.value} (Wiederholung)", exam.state, ExamState.REGISTERED
                )
            self.workflow.register(exam, on, target_date=target_date)
        elif step == "sit":
            self.workflow.mark_sat(exam, on)
        else:
            if scores is None:
                raise ValidationError(f"{exam.exam_type.value}: keine Punktzahlen angegeben.")
            result: ExamResult = self.workflow.record_result(exam, scores, recorded_on=on)
            verdict = "bestanden" if result.passed else "nicht bestanden"
            self._notify(trainee_id, on, "pruefung",
                         f"{exam.exam_type.value}: {verdict}",
                         f"{result.overall_score:.1f} Punkte (Versuch {result.attempt}).")

        self.store.save_plan(plan)
        return exam

    # ─── Compliance & Berichte ────────────────────────────────────────────────

    def check_compliance(
        self,
        trainee_id: str,
        today: date,
        include_records: bool = True,
    ) -> ComplianceReport:
        """Sammelt die Daten des Prüfzeitraums und führt den ComplianceChecker aus."""
        trainee = self.store.get_trainee(trainee_id)
        plan = self.store.active_plan(trainee_id, today)
        window = DateRange(
            start=today - timedelta(days=self.policy.working_time.lookback_days),
            end=today,
        )
        cert = self.store.certification_for(
            plan.trainer_id, self.policy.trainer.required_certification
        )
        weekly = None
        if include_records:
            weekly = self.store.weekly_reports(trainee_id, window)
            # Im ersten Berichtsintervall nach Beginn ist noch kein Nachweis fällig
            if today - plan.start_date < timedelta(
                days=self.policy.record_keeping.report_interval_days
            ):
                weekly = None
        return self.checker.check(
            plan,
            today,
            date_of_birth=trainee.date_of_birth,
            working_times=self.store.working_times(trainee_id, window),
            certification=cert,
            compensation=trainee.monthly_compensation,
            weekly_reports=weekly,
        )

    def assemble_report(self, trainee_id: str, period: DateRange) -> TrainingRecordReport:
        return self.assembler.assemble_report(trainee_id, period)

    # ─── Ausbildereignung ─────────────────────────────────────────────────────

    def trainer_qualification_status(self, trainer_id: str, today: date) -> QualificationStatus:
        """Prüft den Eignungsnachweis; bei Bedarf wird eine Erinnerung angelegt.

        'erforderlich' gilt, wenn kein Nachweis existiert, er abgelaufen ist oder
        innerhalb der Vorlaufzeit (refresher_notice_days) abläuft.
        """
        trainer = self.store.get_trainer(trainer_id)
        tp = self.policy.trainer
        required = tp.required_certification.upper()
        cert = self.store.certification_for(trainer_id, required)
        notice = timedelta(days=tp.refresher_notice_days)

        if cert is not None and cert.valid_until - notice >= today:
            return QualificationStatus(
                trainer_id=trainer_id,
                status="gueltig",
                certification_type=required,
                valid_until=cert.valid_until,
                next_refresher=cert.valid_until - notice,
            )

        if cert is None:
            detail = f"Kein {required}-Nachweis hinterlegt."
        elif cert.valid_until < today:
            detail = f"{required}-Nachweis abgelaufen am {cert.valid_until:%d.%m.%Y}."
        else:
            detail = f"{required}-Nachweis läuft am {cert.valid_until:%d.%m.%Y} ab."
        self._notify(trainer_id, today, "aevo",
                     f"{required}-Auffrischung für {trainer.name} erforderlich", detail)
        logger.warning(f"Ausbilder {trainer_id}: {detail}")
        return QualificationStatus(
            trainer_id=trainer_id,
            status="erforderlich",
            certification_type=required,
            valid_until=cert.valid_until if cert else None,
            next_refresher=today,
        )

    # ─── intern ───────────────────────────────────────────────────────────────

    def _notify(self, recipient_id: str, on: date, category: str,
                subject: str, message: str = "") -> None:
        self.store.add_notification(Notification(
            recipient_id=recipient_id,
            created_on=on,
            category=category,
            subject=subject,
            message=message,
        ))
