from pydantic import BaseModel, Field, model_validator


# ─── PLANUNG ───

class PlanningPolicy(BaseModel):
    """Parameter für die zeitliche Planung der Lernfelder."""
    # Nominale Ausbildungsstunden pro Kalendertag (Zeitrichtwert / Wert = Tage)
    hours_per_day: float = Field(8.0, gt=0, le=24,
        description="Nominale Stunden pro Tag für die Lernfeld-Planung")


# ─── ARBEITSZEIT (JArbSchG / ArbZG) ───

class WorkingTimePolicy(BaseModel):
    """Grenzwerte für tägliche Arbeitszeiten."""
    # JArbSchG §8: Jugendliche max. 8 Stunden pro Tag
    youth_max_hours_per_day: float = Field(8.0, gt=0, le=24,
        description="Max. Stunden/Tag für Minderjährige")
    # ArbZG §3: max. 10 Stunden pro Tag (mit Ausgleich)
    statutory_max_hours_per_day: float = Field(10.0, gt=0, le=24,
        description="Gesetzliche Obergrenze Stunden/Tag")
    # Ab diesem Alter gilt der Jugendschutz nicht mehr
    age_of_majority: int = Field(18, ge=14, le=21)
    # Rückblick-Fenster der Arbeitszeitprüfung in Tagen
    lookback_days: int = Field(30, ge=1, le=366,
        description="Prüfzeitraum Arbeitszeiten (Tage)")

    @model_validator(mode='after')
    def _check_limits(self):
        if self.youth_max_hours_per_day > self.statutory_max_hours_per_day:
            raise ValueError(
                f"Jugendschutz-Grenze ({self.youth_max_hours_per_day}h) > "
                f"gesetzliche Obergrenze ({self.statutory_max_hours_per_day}h)"
            )
        return self


# ─── PRÜFUNGEN ───

class ExaminationPolicy(BaseModel):
    """Kammer-Vorgaben für Prüfungsanmeldung und Bestehen."""
    # Anmeldung muss spätestens so viele Tage vor dem Prüfungstermin erfolgen
    registration_lead_days: int = Field(90, ge=0, le=365,
        description="Mindestvorlauf der Anmeldung (Tage)")
    # Bestehensgrenze in Punkten (0–100, IHK: 50 = ausreichend)
    passing_score: float = Field(50.0, ge=0, le=100,
        description="Bestehensgrenze (Punkte)")
    # Wiederholungstermin nach nicht bestandener Prüfung (Abstand zum letzten Prüfungstag)
    resit_interval_days: int = Field(180, ge=1, le=730,
        description="Abstand Wiederholungsprüfung (Tage)")


# ─── MINDESTVERGÜTUNG (BBiG §17) ───

class MinimumWagePolicy(BaseModel):
    """Monatliche Mindestvergütung je Ausbildungsjahr (Euro brutto)."""
    # Werte für Ausbildungsbeginn 2025
    monthly_minimum: dict[int, float] = Field(
        default={1: 682.0, 2: 805.0, 3: 921.0, 4: 955.0},
        description="Mindestvergütung je Ausbildungsjahr")

    @model_validator(mode='after')
    def _check_table(self):
        if not self.monthly_minimum:
            raise ValueError("Mindestvergütungstabelle ist leer")
        for year, amount in self.monthly_minimum.items():
            if not 1 <= year <= 4:
                raise ValueError(f"Ungültiges Ausbildungsjahr {year} (1–4 erlaubt)")
            if amount < 0:
                raise ValueError(f"Negative Mindestvergütung für Jahr {year}")
        return self

    def minimum_for_year(self, training_year: int) -> float:
        """Mindestbetrag; bei fehlendem Jahr gilt das höchste definierte Jahr ≤ training_year."""
        years = sorted(y for y in self.monthly_minimum if y <= training_year)
        if not years:
            years = [min(self.monthly_minimum)]
        return self.monthly_minimum[years[-1]]


# ─── AUSBILDER ───

class TrainerPolicy(BaseModel):
    """Anforderungen an die Ausbildereignung (BBiG §28-30, AEVO)."""
    # Erforderlicher Qualifikationsnachweis
    required_certification: str = Field("AEVO")
    # Vorlauf der Auffrischungs-Erinnerung vor Ablauf (Tage)
    refresher_notice_days: int = Field(90, ge=0, le=730)
    # Planerstellung nur mit gültigem Nachweis
    enforce_on_plan_creation: bool = Field(True)


# ─── AUSBILDUNGSNACHWEIS (BBiG §13) ───

class RecordKeepingPolicy(BaseModel):
    """Intervall für schriftliche Ausbildungsnachweise."""
    # Spätestens alle N Tage muss ein Nachweis vorliegen
    report_interval_days: int = Field(7, ge=1, le=31)


# ─── GESAMT-CONFIG ───

class PolicyConfig(BaseModel):
    """Gesamtkonfiguration des Ausbildungsbetriebs."""
    # Name des Ausbildungsbetriebs
    organisation_name: str = Field("Muster GmbH")
    # Zuständige Stelle (IHK, HWK, ...)
    chamber: str = Field("IHK")
    planning: PlanningPolicy = Field(default_factory=PlanningPolicy)
    working_time: WorkingTimePolicy = Field(default_factory=WorkingTimePolicy)
    examinations: ExaminationPolicy = Field(default_factory=ExaminationPolicy)
    minimum_wage: MinimumWagePolicy = Field(default_factory=MinimumWagePolicy)
    trainer: TrainerPolicy = Field(default_factory=TrainerPolicy)
    record_keeping: RecordKeepingPolicy = Field(default_factory=RecordKeepingPolicy)
