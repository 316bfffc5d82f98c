"""Externe Datensätze: Azubis, Ausbilder, Qualifikationen, Zeiterfassung, Nachweise.

Diese Datensätze gehören nicht dem Kern; sie werden an der Grenze validiert
und danach nur gelesen.
"""

from datetime import date, datetime, time, timedelta
from typing import ClassVar, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


def age_on(date_of_birth: date, day: date) -> int:
    """Alter in vollendeten Lebensjahren am Stichtag."""
    age = day.year - date_of_birth.year
    if (day.month, day.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def fmt_hours(hours: float) -> str:
    """4.5 → '4:30'"""
    minutes = round(hours * 60)
    return f"{minutes // 60}:{minutes % 60:02d}"


class DateRange(BaseModel):
    """Geschlossener Datumsbereich [start, end]."""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def is_valid(self) -> bool:
        return self.start <= self.end

    def __str__(self) -> str:
        return f"{self.start:%d.%m.%Y} – {self.end:%d.%m.%Y}"


class TraineeProfile(BaseModel):
    """Stammdaten eines Azubis."""

    SENSITIVE_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {"date_of_birth", "tax_id", "iban", "password_hash"}
    )

    id: str
    name: str
    email: str = ""
    date_of_birth: Optional[date] = None
    occupation_id: Optional[str] = None
    monthly_compensation: Optional[float] = Field(None, ge=0)   # Euro brutto
    tax_id: Optional[str] = None
    iban: Optional[str] = None
    password_hash: Optional[str] = None

    def age_on(self, day: date) -> Optional[int]:
        """Alter in vollendeten Lebensjahren am Stichtag (None wenn unbekannt)."""
        if self.date_of_birth is None:
            return None
        return age_on(self.date_of_birth, day)

    def sanitized(self) -> dict:
        """Profil ohne sensible Felder (für Berichte)."""
        return self.model_dump(mode="json", exclude=set(self.SENSITIVE_FIELDS))


class Trainer(BaseModel):
    """Ausbilder/in."""

    id: str
    name: str
    email: str = ""


class TrainerCertification(BaseModel):
    """Qualifikationsnachweis eines Ausbilders (z.B. AEVO)."""

    trainer_id: str
    certification_type: str = "AEVO"
    valid_until: date

    @field_validator("certification_type")
    @classmethod
    def normalize_type(cls, v: str) -> str:
        return v.strip().upper()

    def is_valid_on(self, day: date) -> bool:
        return self.valid_until >= day


class WorkingTimeRecord(BaseModel):
    """Arbeitszeit-Eintrag eines Tages (Beginn/Ende am selben Kalendertag)."""

    trainee_id: str = ""
    date: date
    start: time
    end: time

    @model_validator(mode="after")
    def _check_order(self):
        if self.end <= self.start:
            raise ValueError(
                f"Arbeitszeit am {self.date}: Ende {self.end} liegt nicht nach Beginn {self.start}"
            )
        return self

    @property
    def duration(self) -> timedelta:
        return datetime.combine(self.date, self.end) - datetime.combine(self.date, self.start)

    @property
    def hours(self) -> float:
        return self.duration.total_seconds() / 3600


class ActivityRecord(BaseModel):
    """Betriebliche Ausbildungstätigkeit."""

    trainee_id: str
    date: date
    description: str
    hours: float = Field(ge=0)
    unit_id: Optional[str] = None


class SchoolAttendance(BaseModel):
    """Berufsschulzeit."""

    trainee_id: str
    date: date
    hours: float = Field(ge=0)
    subjects: list[str] = []


class WeeklyReport(BaseModel):
    """Wöchentlicher Ausbildungsnachweis mit Unterschriften."""

    trainee_id: str
    week_start: date
    summary: str = ""
    signed_by_trainee: Optional[date] = None
    signed_by_trainer: Optional[date] = None

    @property
    def is_signed(self) -> bool:
        return self.signed_by_trainee is not None and self.signed_by_trainer is not None


class Notification(BaseModel):
    """Benachrichtigung an Azubi oder Ausbilder."""

    recipient_id: str
    created_on: date
    category: str            # "ausbildungsplan", "jugendschutz", "aevo"
    subject: str
    message: str = ""
