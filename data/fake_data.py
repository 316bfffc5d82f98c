"""Testdaten-Generator für Ausbildungspläne.

Erzeugt einen realistischen Datensatz eines Ausbildungsbetriebs mit
absichtlichen Verstößen, damit die Compliance-Prüfung etwas zu finden hat.

Absichtliche Verstöße:
  1. Jugendschutz: Der minderjährige Azubi arbeitet an einem Tag 8:45h
  2. Höchstarbeitszeit: Ein volljähriger Azubi arbeitet an einem Tag 10:30h
  3. AEVO: Der Nachweis des dritten Ausbilders ist gestern abgelaufen
  4. Mindestvergütung: Ein Azubi liegt unter der Mindestvergütung
  5. Prüfungsanmeldung: Die AP1 eines Azubis im 3. Jahr wurde nie angemeldet
  6. Nachweise: Ein Azubi hat seit mehreren Wochen keinen Wochennachweis
"""

import random
from datetime import date, time, timedelta
from typing import Optional

from config.defaults import default_catalog
from config.schema import PolicyConfig
from data.store import TrainingDataset
from models.curriculum import CurriculumCatalog
from models.plan import ExamState, TrainingPlan, UnitStatus
from models.records import (
    ActivityRecord,
    SchoolAttendance,
    TraineeProfile,
    Trainer,
    TrainerCertification,
    WeeklyReport,
    WorkingTimeRecord,
)
from planner.schedule_planner import SchedulePlanner

# ─── Namens-Listen ────────────────────────────────────────────────────────────

_FIRST_NAMES = [
    "Anna", "Ben", "Clara", "David", "Elif", "Finn", "Greta", "Hannes",
    "Ida", "Jonas", "Kira", "Leon", "Mia", "Noah", "Paula", "Yusuf",
]

_LAST_NAMES = [
    "Müller", "Schmidt", "Schneider", "Fischer", "Weber", "Meyer",
    "Wagner", "Becker", "Schulz", "Hoffmann", "Koch", "Richter",
    "Klein", "Wolf", "Neumann", "Braun", "Krüger", "Hartmann",
]

_ACTIVITIES = [
    "Code-Review im Team",
    "Unit-Tests geschrieben",
    "Fehleranalyse im Ticketsystem",
    "Datenbankabfragen optimiert",
    "Kundengespräch vorbereitet",
    "Dokumentation aktualisiert",
    "Angebot erstellt",
    "Rechnungen geprüft",
    "Besprechung protokolliert",
]

_SCHOOL_SUBJECTS = ["Lernfeld", "Deutsch", "Englisch", "Politik", "Wirtschaft"]


def _slug(name: str) -> str:
    return (
        name.lower().replace(" ", ".")
        .replace("ä", "ae").replace("ö", "oe").replace("ü", "ue").replace("ß", "ss")
    )


class FakeDataGenerator:
    """Generiert einen vollständigen Datensatz relativ zu einem Stichtag."""

    def __init__(
        self,
        policy: Optional[PolicyConfig] = None,
        catalog: Optional[CurriculumCatalog] = None,
        seed: Optional[int] = None,
        today: Optional[date] = None,
        num_trainees: int = 6,
    ) -> None:
        if num_trainees < 4:
            raise ValueError("Mindestens 4 Azubis nötig, um alle Verstoß-Fälle abzubilden.")
        self.policy = policy or PolicyConfig()
        self.catalog = catalog or default_catalog()
        self.rng = random.Random(seed)
        self.today = today or date.today()
        self.num_trainees = num_trainees
        self.planner = SchedulePlanner(self.catalog, self.policy.planning.hours_per_day)

    def _name(self) -> str:
        return f"{self.rng.choice(_FIRST_NAMES)} {self.rng.choice(_LAST_NAMES)}"

    def _cohort_start(self, years_ago: int) -> date:
        """1. August des Ausbildungsjahrgangs (vor dem Stichtag)."""
        year = self.today.year - years_ago
        if date(self.today.year, 8, 1) > self.today:
            year -= 1
        return date(year, 8, 1)

    # ─── Ausbilder ────────────────────────────────────────────────────────────

    def _generate_trainers(self) -> tuple[list[Trainer], list[TrainerCertification]]:
        trainers = []
        certs = []
        notice = self.policy.trainer.refresher_notice_days
        required = self.policy.trainer.required_certification
        valid_untils = [
            self.today + timedelta(days=2 * 365),           # gültig
            self.today + timedelta(days=max(notice // 2, 1)),  # läuft bald ab
            self.today - timedelta(days=1),                 # gestern abgelaufen
        ]
        for i, valid_until in enumerate(valid_untils, 1):
            name = self._name()
            trainer = Trainer(id=f"ausbilder-{i:02d}", name=name,
                              email=f"{_slug(name)}@example.com")
            trainers.append(trainer)
            certs.append(TrainerCertification(
                trainer_id=trainer.id, certification_type=required, valid_until=valid_until,
            ))
        return trainers, certs

    # ─── Azubis und Pläne ─────────────────────────────────────────────────────

    def _generate_trainee(self, idx: int, occupation_id: str, start: date,
                          age_at_start: int) -> TraineeProfile:
        name = self._name()
        birthday = date(start.year - age_at_start, self.rng.randint(1, 7), self.rng.randint(1, 28))
        return TraineeProfile(
            id=f"azubi-{idx:03d}",
            name=name,
            email=f"{_slug(name)}@example.com",
            date_of_birth=birthday,
            occupation_id=occupation_id,
            tax_id=f"{self.rng.randint(10**10, 10**11 - 1)}",
            iban=f"DE{self.rng.randint(10**19, 10**20 - 1)}",
        )

    def _progress_plan(self, plan: TrainingPlan, skip_exam: bool) -> TrainingPlan:
        """Bringt einen Plan auf den Stand des Stichtags."""
        self.planner.refresh_statuses(plan, self.today)
        for su in plan.units:
            if su.end_date <= self.today and self.rng.random() < 0.85:
                su.status = UnitStatus.COMPLETED
        lead = timedelta(days=self.policy.examinations.registration_lead_days)
        for exam in plan.examinations:
            if exam.target_date >= self.today:
                continue
            if skip_exam:
                continue
            exam.state = ExamState.PASSED
            exam.registration_date = exam.target_date - lead - timedelta(days=14)
            exam.sat_date = exam.target_date
            exam.attempts = 1
        return plan

    # ─── Nachweise ────────────────────────────────────────────────────────────

    def _working_days(self, days_back: int) -> list[date]:
        start = self.today - timedelta(days=days_back)
        return [start + timedelta(days=i) for i in range(days_back + 1)
                if (start + timedelta(days=i)).weekday() < 5]

    def _generate_records(self, trainee: TraineeProfile, overtime: Optional[time],
                          report_gap: bool) -> dict:
        days = self._working_days(self.policy.working_time.lookback_days - 1)
        school_weekday = self.rng.choice([0, 2])
        working, activities, school = [], [], []
        work_days = [d for d in days if d.weekday() != school_weekday]
        overtime_day = work_days[len(work_days) // 2] if work_days else None

        for d in days:
            if d.weekday() == school_weekday:
                school.append(SchoolAttendance(
                    trainee_id=trainee.id, date=d, hours=6.0,
                    subjects=self.rng.sample(_SCHOOL_SUBJECTS, 3),
                ))
                continue
            end = overtime if (overtime and d == overtime_day) else time(16, 0)
            working.append(WorkingTimeRecord(trainee_id=trainee.id, date=d,
                                             start=time(7, 30), end=time(11, 30)))
            working.append(WorkingTimeRecord(trainee_id=trainee.id, date=d,
                                             start=time(12, 0), end=end))
            activities.append(ActivityRecord(
                trainee_id=trainee.id, date=d,
                description=self.rng.choice(_ACTIVITIES),
                hours=round(self.rng.uniform(3, 7), 1),
            ))

        reports = []
        week = self.today - timedelta(days=self.today.weekday())
        first_week = 4 if report_gap else 0
        for w in range(first_week, 8):
            ws = week - timedelta(weeks=w)
            reports.append(WeeklyReport(
                trainee_id=trainee.id, week_start=ws,
                summary=f"Woche ab {ws:%d.%m.%Y}",
                signed_by_trainee=ws + timedelta(days=4),
                signed_by_trainer=ws + timedelta(days=6) if w > 0 else None,
            ))
        return {"working": working, "activities": activities,
                "school": school, "reports": reports}

    # ─── Gesamt ───────────────────────────────────────────────────────────────

    def generate(self) -> TrainingDataset:
        """Erzeugt den vollständigen Datensatz."""
        trainers, certs = self._generate_trainers()
        occupations = self.catalog.ids()
        dataset = TrainingDataset(trainers=trainers, certifications=certs)

        for idx in range(1, self.num_trainees + 1):
            years_ago = (idx - 1) % 3
            start = self._cohort_start(years_ago)
            occupation_id = occupations[(idx - 1) % len(occupations)]
            # Azubi 1 minderjährig, alle anderen volljährig
            age_at_start = 16 if idx == 1 else self.rng.randint(18, 23)
            if idx == 1:
                start = self._cohort_start(0)
            trainee = self._generate_trainee(idx, occupation_id, start, age_at_start)

            plan = self.planner.create_plan(
                trainee.id, occupation_id, start, trainers[(idx - 1) % len(trainers)].id,
            )
            skip_exam = idx == 3 and any(e.target_date < self.today for e in plan.examinations)
            self._progress_plan(plan, skip_exam=skip_exam)

            year = plan.training_year(self.today)
            minimum = self.policy.minimum_wage.minimum_for_year(year)
            compensation = minimum - 50 if idx == 4 else minimum + self.rng.randint(20, 250)
            trainee = trainee.model_copy(update={"monthly_compensation": float(compensation)})

            if idx == 1:
                overtime = time(16, 45)          # 4h + 4:45h = 8:45h
            elif idx == 2:
                overtime = time(18, 30)          # 4h + 6:30h = 10:30h
            else:
                overtime = None
            records = self._generate_records(trainee, overtime, report_gap=idx == 5)

            dataset.trainees.append(trainee)
            dataset.plans.append(plan)
            dataset.working_times.extend(records["working"])
            dataset.activities.extend(records["activities"])
            dataset.school_attendance.extend(records["school"])
            dataset.weekly_reports.extend(records["reports"])
        return dataset

    def print_summary(self, data: TrainingDataset) -> None:
        """Gibt eine Rich-Tabelle mit Übersicht der erzeugten Daten aus."""
        from rich.console import Console
        from rich.table import Table
        from rich import box

        console = Console()
        table = Table(title="Erzeugte Testdaten", box=box.ROUNDED)
        table.add_column("Kategorie", style="bold cyan")
        table.add_column("Anzahl", justify="right")
        table.add_column("Details")

        minors = sum(
            1 for t in data.trainees
            if t.date_of_birth and t.age_on(self.today) < self.policy.working_time.age_of_majority
        )
        expired = sum(1 for c in data.certifications if not c.is_valid_on(self.today))
        table.add_row("Azubis", str(len(data.trainees)), f"{minors} minderjährig")
        table.add_row("Ausbilder", str(len(data.trainers)), f"{expired} ohne gültigen Nachweis")
        table.add_row("Ausbildungspläne", str(len(data.plans)),
                      ", ".join(sorted({p.occupation_id for p in data.plans})))
        table.add_row("Arbeitszeit-Einträge", str(len(data.working_times)), "")
        table.add_row("Tätigkeiten", str(len(data.activities)), "")
        table.add_row("Berufsschultage", str(len(data.school_attendance)), "")
        table.add_row("Wochennachweise", str(len(data.weekly_reports)), "")
        console.print(table)
