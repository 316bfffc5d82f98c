"""Tests für Planung der Lernfelder und den Prüfungs-Workflow."""

from datetime import date, timedelta

import pytest

from config.defaults import default_catalog
from config.schema import ExaminationPolicy
from models.curriculum import (
    CurriculumCatalog,
    CurriculumUnit,
    ExamModality,
    ExamSection,
    ExamType,
    ExaminationTemplate,
    Occupation,
)
from models.errors import InvalidTransitionError, NotFoundError, ValidationError
from models.plan import ExamState, Examination, TrainingPlan, UnitStatus
from planner.examination_workflow import ExaminationWorkflow
from planner.schedule_planner import SchedulePlanner, add_months, plan_id_for


# ─── Testdaten-Hilfsfunktionen ────────────────────────────────────────────────

def _make_occupation(hours: list[int], exams: bool = True) -> Occupation:
    units = [
        CurriculumUnit(id=f"lf{i}", sequence=i, title=f"Lernfeld {i}",
                       allotted_hours=h, target_year=1)
        for i, h in enumerate(hours, 1)
    ]
    examinations = []
    if exams:
        examinations = [
            ExaminationTemplate(
                exam_type=ExamType.FINAL_PART_1, offset_months=18, duration_minutes=90,
                sections=[ExamSection(name="Teil 1", modality=ExamModality.WRITTEN,
                                      duration_minutes=90, weight=1)],
                weight=20,
            ),
            ExaminationTemplate(
                exam_type=ExamType.FINAL_PART_2, offset_months=36, duration_minutes=240,
                sections=[
                    ExamSection(name="Projekt", modality=ExamModality.PRACTICAL,
                                duration_minutes=0, weight=50),
                    ExamSection(name="Schriftlich", modality=ExamModality.WRITTEN,
                                duration_minutes=180, weight=30),
                    ExamSection(name="WiSo", modality=ExamModality.WRITTEN,
                                duration_minutes=60, weight=20),
                ],
                weight=80,
            ),
        ]
    return Occupation(id="test", name="Testberuf", duration_months=36, version="T1",
                      units=units, examinations=examinations)


def _make_planner(hours: list[int], exams: bool = True) -> SchedulePlanner:
    return SchedulePlanner(CurriculumCatalog(occupations=[_make_occupation(hours, exams)]))


def _make_plan(start: date = date(2024, 9, 1)) -> TrainingPlan:
    return _make_planner([40, 80]).create_plan("azubi-1", "test", start, "ausbilder-1")


def _exam(plan: TrainingPlan, code: str = "AP2") -> Examination:
    return plan.get_examination(code)


# ─── PLANUNG ──────────────────────────────────────────────────────────────────

class TestSchedulePlanner:
    def test_two_units_scenario(self):
        """40h + 80h ab 01.09.2024 → [01.09., 06.09.) und [06.09., 16.09.)."""
        plan = _make_plan()
        lf1, lf2 = plan.units
        assert (lf1.start_date, lf1.end_date) == (date(2024, 9, 1), date(2024, 9, 6))
        assert (lf2.start_date, lf2.end_date) == (date(2024, 9, 6), date(2024, 9, 16))
        assert all(su.status == UnitStatus.PLANNED for su in plan.units)

    def test_two_units_from_new_year(self):
        plan = _make_plan(date(2024, 1, 1))
        assert [(su.start_date, su.end_date) for su in plan.units] == [
            (date(2024, 1, 1), date(2024, 1, 6)),
            (date(2024, 1, 6), date(2024, 1, 16)),
        ]
        assert [su.duration_days for su in plan.units] == [5, 10]

    def test_plan_end_is_start_plus_duration(self):
        plan = _make_plan()
        assert plan.end_date == date(2027, 9, 1)

    def test_examinations_at_month_offsets(self):
        plan = _make_plan()
        assert _exam(plan, "AP1").target_date == date(2026, 3, 1)
        assert _exam(plan, "AP2").target_date == date(2027, 9, 1)
        assert all(e.state == ExamState.NOT_SCHEDULED for e in plan.examinations)

    def test_windows_contiguous_and_ordered(self):
        """Jedes Fenster beginnt genau am Ende des vorherigen, Nummern aufsteigend."""
        catalog = default_catalog()
        planner = SchedulePlanner(catalog)
        for occ_id in catalog.ids():
            plan = planner.create_plan("a", occ_id, date(2025, 8, 1), "t")
            assert plan.units[0].start_date == plan.start_date
            for prev, nxt in zip(plan.units, plan.units[1:]):
                assert nxt.start_date == prev.end_date
                assert nxt.unit.sequence > prev.unit.sequence

    def test_partial_day_rounds_up(self):
        """12h bei 8h/Tag → 2 Kalendertage."""
        plan = _make_planner([12]).create_plan("a", "test", date(2025, 1, 1), "t")
        assert plan.units[0].duration_days == 2

    def test_zero_units_gives_empty_plan(self):
        plan = _make_planner([], exams=False).create_plan("a", "test", date(2025, 1, 1), "t")
        assert plan.units == []
        assert plan.examinations == []
        assert plan.end_date == date(2028, 1, 1)

    def test_zero_hour_unit_has_empty_window(self):
        plan = _make_planner([0, 8]).create_plan("a", "test", date(2025, 1, 1), "t")
        assert plan.units[0].start_date == plan.units[0].end_date == date(2025, 1, 1)
        assert plan.units[1].start_date == date(2025, 1, 1)

    def test_unknown_occupation_raises(self):
        with pytest.raises(NotFoundError):
            _make_planner([40]).create_plan("a", "gibt-es-nicht", date(2025, 1, 1), "t")

    def test_plan_id_deterministic(self):
        assert _make_plan().id == plan_id_for("azubi-1", date(2024, 9, 1))
        assert _make_plan().id == "AP-azubi-1-20240901"

    def test_invalid_hours_per_day(self):
        with pytest.raises(ValueError):
            SchedulePlanner(default_catalog(), hours_per_day=0)

    def test_add_months_clamps_month_end(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)

    def test_gap_in_plan_rejected(self):
        plan = _make_plan()
        data = plan.model_dump()
        data["units"][1]["start_date"] = date(2024, 9, 7)
        data["units"][1]["end_date"] = date(2024, 9, 17)
        with pytest.raises(ValueError):
            TrainingPlan.model_validate(data)


class TestPlanProgress:
    def test_refresh_statuses(self):
        planner = _make_planner([40, 80])
        plan = planner.create_plan("a", "test", date(2024, 9, 1), "t")
        planner.refresh_statuses(plan, date(2024, 9, 8))
        assert plan.units[0].status == UnitStatus.OVERDUE
        assert plan.units[1].status == UnitStatus.ACTIVE

    def test_completed_stays_completed(self):
        planner = _make_planner([40, 80])
        plan = planner.create_plan("a", "test", date(2024, 9, 1), "t")
        planner.complete_unit(plan, "lf1")
        planner.refresh_statuses(plan, date(2025, 1, 1))
        assert plan.units[0].status == UnitStatus.COMPLETED
        assert plan.units[1].status == UnitStatus.OVERDUE

    def test_before_start_all_planned(self):
        planner = _make_planner([40, 80])
        plan = planner.create_plan("a", "test", date(2024, 9, 1), "t")
        planner.refresh_statuses(plan, date(2024, 8, 1))
        assert plan.units_with_status(UnitStatus.PLANNED) == plan.units

    def test_complete_unknown_unit_raises(self):
        planner = _make_planner([40])
        plan = planner.create_plan("a", "test", date(2024, 9, 1), "t")
        with pytest.raises(NotFoundError):
            planner.complete_unit(plan, "lf99")

    def test_progress_percent_weighted_by_hours(self):
        planner = _make_planner([40, 80])
        plan = planner.create_plan("a", "test", date(2024, 9, 1), "t")
        planner.complete_unit(plan, "lf1")
        assert plan.progress_percent() == pytest.approx(33.3)

    def test_training_year(self):
        plan = _make_plan()
        assert plan.training_year(date(2024, 9, 1)) == 1
        assert plan.training_year(date(2025, 8, 31)) == 1
        assert plan.training_year(date(2025, 9, 1)) == 2
        assert plan.training_year(date(2024, 1, 1)) == 1


# ─── PRÜFUNGS-WORKFLOW ────────────────────────────────────────────────────────

class TestExaminationWorkflow:
    def test_happy_path(self):
        plan = _make_plan()
        exam = _exam(plan)
        wf = ExaminationWorkflow()
        wf.register(exam, date(2027, 3, 1))
        assert exam.state == ExamState.REGISTERED
        wf.mark_sat(exam, date(2027, 9, 1))
        assert exam.state == ExamState.SAT
        assert exam.attempts == 1
        result = wf.record_result(exam, {"Projekt": 80, "Schriftlich": 70, "WiSo": 60})
        assert result.overall_score == pytest.approx(73.0)
        assert result.passed
        assert exam.state == ExamState.PASSED

    def test_registration_after_deadline_rejected(self):
        exam = _exam(_make_plan())
        wf = ExaminationWorkflow(ExaminationPolicy(registration_lead_days=90))
        deadline = exam.target_date - timedelta(days=90)
        with pytest.raises(ValidationError):
            wf.register(exam, deadline + timedelta(days=1))
        assert exam.state == ExamState.NOT_SCHEDULED
        wf.register(exam, deadline)
        assert exam.state == ExamState.REGISTERED

    @pytest.mark.parametrize("state", [ExamState.NOT_SCHEDULED, ExamState.REGISTERED,
                                       ExamState.PASSED, ExamState.FAILED])
    def test_record_result_requires_sat(self, state):
        exam = _exam(_make_plan())
        exam.state = state
        with pytest.raises(InvalidTransitionError) as exc:
            ExaminationWorkflow().record_result(exam, {"Projekt": 50, "Schriftlich": 50,
                                                       "WiSo": 50})
        assert exc.value.current == state
        assert exam.state == state
        assert exam.results == []

    def test_sit_without_registration_rejected(self):
        exam = _exam(_make_plan())
        with pytest.raises(InvalidTransitionError):
            ExaminationWorkflow().mark_sat(exam, date(2027, 9, 1))

    def test_register_twice_rejected(self):
        exam = _exam(_make_plan())
        wf = ExaminationWorkflow()
        wf.register(exam, date(2027, 1, 1))
        with pytest.raises(InvalidTransitionError):
            wf.register(exam, date(2027, 1, 2))

    def test_passed_is_final(self):
        exam = _exam(_make_plan())
        wf = ExaminationWorkflow()
        wf.register(exam, date(2027, 1, 1))
        wf.mark_sat(exam, date(2027, 9, 1))
        wf.record_result(exam, {"Projekt": 90, "Schriftlich": 90, "WiSo": 90})
        with pytest.raises(InvalidTransitionError):
            wf.register(exam, date(2027, 1, 2))

    def _failed_exam(self, wf: ExaminationWorkflow) -> Examination:
        exam = _exam(_make_plan())
        wf.register(exam, date(2027, 3, 1))
        wf.mark_sat(exam, date(2027, 9, 1))
        result = wf.record_result(exam, {"Projekt": 30, "Schriftlich": 40, "WiSo": 50})
        assert not result.passed
        assert exam.state == ExamState.FAILED
        return exam

    def test_failed_then_retake(self):
        """Nicht bestanden → Anmeldung nach dem Prüfungstag, neuer Termin, zweiter Versuch."""
        wf = ExaminationWorkflow(ExaminationPolicy(registration_lead_days=90,
                                                   resit_interval_days=180))
        exam = self._failed_exam(wf)

        wf.register(exam, date(2027, 10, 1))
        assert exam.state == ExamState.REGISTERED
        assert exam.target_date == date(2027, 9, 1) + timedelta(days=180)

        wf.mark_sat(exam, exam.target_date)
        second = wf.record_result(exam, {"Projekt": 60, "Schriftlich": 60, "WiSo": 60})
        assert second.attempt == 2
        assert second.passed
        assert len(exam.results) == 2
        assert exam.sat_date == date(2027, 9, 1) + timedelta(days=180)

    def test_retake_with_explicit_date(self):
        wf = ExaminationWorkflow()
        exam = self._failed_exam(wf)
        wf.register(exam, date(2027, 9, 20), target_date=date(2028, 1, 15))
        assert exam.target_date == date(2028, 1, 15)
        assert wf.registration_deadline(exam) == date(2028, 1, 15) - timedelta(days=90)

    def test_retake_date_before_last_sitting_rejected(self):
        wf = ExaminationWorkflow()
        exam = self._failed_exam(wf)
        with pytest.raises(ValidationError):
            wf.register(exam, date(2027, 5, 1), target_date=date(2027, 9, 1))
        assert exam.state == ExamState.FAILED
        assert exam.target_date == date(2027, 9, 1)

    def test_retake_registration_checks_lead_time_of_new_date(self):
        wf = ExaminationWorkflow(ExaminationPolicy(registration_lead_days=90))
        exam = self._failed_exam(wf)
        new_target = date(2027, 12, 1)
        with pytest.raises(ValidationError):
            wf.register(exam, new_target - timedelta(days=89), target_date=new_target)
        assert exam.state == ExamState.FAILED
        wf.register(exam, new_target - timedelta(days=90), target_date=new_target)
        assert exam.state == ExamState.REGISTERED

    def test_retake_sitting_must_follow_previous_sitting(self):
        wf = ExaminationWorkflow()
        exam = self._failed_exam(wf)
        wf.register(exam, date(2027, 9, 1))
        with pytest.raises(ValidationError):
            wf.mark_sat(exam, date(2027, 9, 1))
        assert exam.state == ExamState.REGISTERED
        assert exam.attempts == 1

    def test_passing_score_boundary(self):
        exam = _exam(_make_plan(), "AP1")
        wf = ExaminationWorkflow(ExaminationPolicy(passing_score=50))
        wf.register(exam, date(2025, 11, 1))
        wf.mark_sat(exam, date(2026, 3, 1))
        assert wf.record_result(exam, {"Teil 1": 50}).passed

    def test_unknown_section_rejected(self):
        exam = _exam(_make_plan(), "AP1")
        with pytest.raises(ValidationError):
            ExaminationWorkflow().weighted_score(exam, {"Teil 1": 50, "Extra": 10})

    def test_missing_section_rejected(self):
        exam = _exam(_make_plan())
        with pytest.raises(ValidationError):
            ExaminationWorkflow().weighted_score(exam, {"Projekt": 50})

    def test_score_out_of_range_rejected(self):
        exam = _exam(_make_plan(), "AP1")
        with pytest.raises(ValidationError):
            ExaminationWorkflow().weighted_score(exam, {"Teil 1": 101})

    def test_sat_before_registration_rejected(self):
        exam = _exam(_make_plan())
        wf = ExaminationWorkflow()
        wf.register(exam, date(2027, 1, 1))
        with pytest.raises(ValidationError):
            wf.mark_sat(exam, date(2026, 12, 31))

    def test_get_examination_unknown(self):
        with pytest.raises(NotFoundError):
            _make_plan().get_examination("ZP")
