"""Prüfungs-Workflow (IHK/HWK): Anmeldung, Teilnahme, Bewertung, Wiederholung.

Zustände:
    nicht angemeldet → angemeldet → abgelegt → {bestanden | nicht bestanden}
    nicht bestanden  → angemeldet              (Wiederholung, unbegrenzt)

Jeder Wechsel aus einem unzulässigen Zustand wirft InvalidTransitionError.
"""

import logging
from datetime import date, timedelta
from typing import Optional

from config.schema import ExaminationPolicy
from models.errors import InvalidTransitionError, ValidationError
from models.plan import ExamResult, ExamState, Examination

logger = logging.getLogger(__name__)

# Zielzustand → erlaubte Ausgangszustände
_ALLOWED_FROM: dict[ExamState, set[ExamState]] = {
    ExamState.REGISTERED: {ExamState.NOT_SCHEDULED, ExamState.FAILED},
    ExamState.SAT: {ExamState.REGISTERED},
    ExamState.PASSED: {ExamState.SAT},
    ExamState.FAILED: {ExamState.SAT},
}


class ExaminationWorkflow:
    """Zustandsautomat für Prüfungen eines Ausbildungsplans."""

    def __init__(self, policy: Optional[ExaminationPolicy] = None) -> None:
        self.policy = policy or ExaminationPolicy()

    def _ensure_transition(self, exam: Examination, target: ExamState) -> None:
        if exam.state not in _ALLOWED_FROM[target]:
            logger.warning(
                f"Prüfung {exam.id}: Wechsel {exam.state.value} → {target.value} abgelehnt"
            )
            raise InvalidTransitionError(exam.exam_type.value, exam.state, target)

    def registration_deadline(self, exam: Examination, target_date: Optional[date] = None) -> date:
        """Letzter zulässiger Anmeldetag (für den aktuellen oder einen neuen Termin)."""
        lead = timedelta(days=self.policy.registration_lead_days)
        return (target_date or exam.target_date) - lead

    def resit_date(self, exam: Examination) -> date:
        """Vorgeschlagener Wiederholungstermin nach dem letzten Prüfungstag."""
        last = exam.sat_date or exam.target_date
        return last + timedelta(days=self.policy.resit_interval_days)

    # ─── Übergänge ────────────────────────────────────────────────────────────

    def register(
        self,
        exam: Examination,
        registration_date: date,
        target_date: Optional[date] = None,
    ) -> Examination:
        """Meldet zur Prüfung an (auch Wiederholung nach 'nicht bestanden').

        Bei einer Wiederholung erhält die Prüfung einen neuen Termin: target_date
        oder, falls nicht angegeben, resit_date(). Der Anmeldeschluss bezieht sich
        immer auf den (neuen) Termin.
        """
        self._ensure_transition(exam, ExamState.REGISTERED)
        if exam.state == ExamState.FAILED:
            new_target = target_date or self.resit_date(exam)
            if exam.sat_date and new_target <= exam.sat_date:
                raise ValidationError(
                    f"{exam.exam_type.value}: Wiederholungstermin {new_target:%d.%m.%Y} "
                    f"liegt nicht nach dem letzten Prüfungstag {exam.sat_date:%d.%m.%Y}."
                )
        else:
            new_target = target_date or exam.target_date

        deadline = self.registration_deadline(exam, new_target)
        if registration_date > deadline:
            raise ValidationError(
                f"{exam.exam_type.value}: Anmeldung am {registration_date:%d.%m.%Y} "
                f"nach Anmeldeschluss {deadline:%d.%m.%Y} "
                f"({self.policy.registration_lead_days} Tage vor {new_target:%d.%m.%Y})."
            )
        if new_target != exam.target_date:
            logger.info(
                f"Prüfung {exam.id}: Termin {exam.target_date} → {new_target}"
            )
            exam.target_date = new_target
        exam.state = ExamState.REGISTERED
        exam.registration_date = registration_date
        logger.info(f"Prüfung {exam.id}: angemeldet am {registration_date}")
        return exam

    def mark_sat(self, exam: Examination, sat_date: date) -> Examination:
        """Vermerkt die Teilnahme an der Prüfung."""
        self._ensure_transition(exam, ExamState.SAT)
        if exam.registration_date and sat_date < exam.registration_date:
            raise ValidationError(
                f"{exam.exam_type.value}: Prüfungstag {sat_date:%d.%m.%Y} liegt vor "
                f"der Anmeldung am {exam.registration_date:%d.%m.%Y}."
            )
        # sat_date enthält bis hierher den Tag des vorigen Versuchs
        if exam.sat_date and sat_date <= exam.sat_date:
            raise ValidationError(
                f"{exam.exam_type.value}: Prüfungstag {sat_date:%d.%m.%Y} liegt nicht "
                f"nach dem vorigen Versuch am {exam.sat_date:%d.%m.%Y}."
            )
        exam.state = ExamState.SAT
        exam.sat_date = sat_date
        exam.attempts += 1
        logger.info(f"Prüfung {exam.id}: abgelegt am {sat_date} (Versuch {exam.attempts})")
        return exam

    def record_result(
        self,
        exam: Examination,
        section_scores: dict[str, float],
        recorded_on: Optional[date] = None,
    ) -> ExamResult:
        """Bewertet eine abgelegte Prüfung.

        Gesamtpunktzahl = nach Prüfungsbereichen gewichteter Durchschnitt.
        Bestanden, wenn Gesamtpunktzahl ≥ Bestehensgrenze der Policy.
        Bei Nichtbestehen wird KEIN Folgetermin gesetzt; erneut register() aufrufen.
        """
        if exam.state != ExamState.SAT:
            # Ziel hängt vom Ergebnis ab; für die Fehlermeldung genügt "bestanden"
            self._ensure_transition(exam, ExamState.PASSED)

        overall = self.weighted_score(exam, section_scores)
        passed = overall >= self.policy.passing_score
        result = ExamResult(
            attempt=exam.attempts,
            overall_score=overall,
            section_scores={s.name: float(section_scores[s.name]) for s in exam.sections},
            passed=passed,
            recorded_on=recorded_on,
        )
        exam.results.append(result)
        exam.state = ExamState.PASSED if passed else ExamState.FAILED
        logger.info(
            f"Prüfung {exam.id}: {overall:.1f} Punkte → {exam.state.value}"
        )
        return result

    def weighted_score(self, exam: Examination, section_scores: dict[str, float]) -> float:
        """Gewichteter Durchschnitt der Bereichsergebnisse (0–100 Punkte)."""
        if not exam.sections:
            raise ValidationError(f"{exam.exam_type.value}: keine Prüfungsbereiche definiert.")
        known = {s.name for s in exam.sections}
        unknown = sorted(set(section_scores) - known)
        if unknown:
            raise ValidationError(
                f"{exam.exam_type.value}: unbekannte Prüfungsbereiche {', '.join(unknown)}."
            )
        missing = [s.name for s in exam.sections if s.name not in section_scores]
        if missing:
            raise ValidationError(
                f"{exam.exam_type.value}: Ergebnis fehlt für {', '.join(missing)}."
            )
        for name, score in section_scores.items():
            if not 0 <= score <= 100:
                raise ValidationError(
                    f"{exam.exam_type.value}: Punktzahl {score} für '{name}' außerhalb 0–100."
                )
        total_weight = sum(s.weight for s in exam.sections)
        weighted = sum(section_scores[s.name] * s.weight for s in exam.sections)
        return round(weighted / total_weight, 2)
