"""Planung: Ausbildungsplan, Prüfungs-Workflow und Service-Fassade."""

from .schedule_planner import SchedulePlanner, add_months, plan_id_for
from .examination_workflow import ExaminationWorkflow
from .service import TrainingPlanService, QualificationStatus

__all__ = [
    "SchedulePlanner",
    "add_months",
    "plan_id_for",
    "ExaminationWorkflow",
    "TrainingPlanService",
    "QualificationStatus",
]
