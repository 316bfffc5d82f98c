"""Rahmenlehrplan-Katalog: Berufe, Lernfelder und Prüfungsvorlagen (Pydantic v2).

Der Katalog ist unveränderliche Referenzdaten und wird dem Planer explizit
übergeben (kein globaler Zustand).
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from models.errors import NotFoundError


class CompetencyArea(str, Enum):
    FACH = "Fachkompetenz"
    METHODE = "Methodenkompetenz"
    SOZIAL = "Sozialkompetenz"
    PERSONAL = "Personalkompetenz"


class ExamType(str, Enum):
    INTERIM = "Zwischenprüfung"
    FINAL_PART_1 = "Abschlussprüfung Teil 1"
    FINAL_PART_2 = "Abschlussprüfung Teil 2"

    @property
    def code(self) -> str:
        """Kurzbezeichner für IDs ("ZP", "AP1", "AP2")."""
        return {"Zwischenprüfung": "ZP",
                "Abschlussprüfung Teil 1": "AP1",
                "Abschlussprüfung Teil 2": "AP2"}[self.value]


class ExamModality(str, Enum):
    WRITTEN = "schriftlich"
    PRACTICAL = "praktisch"
    ORAL = "mündlich"


class CurriculumUnit(BaseModel):
    """Ein Lernfeld mit Zeitrichtwert."""

    model_config = ConfigDict(frozen=True)

    id: str                                 # "lf1", "lf10a"
    sequence: int = Field(ge=1)             # Reihenfolge im Ausbildungsverlauf
    title: str
    allotted_hours: int = Field(ge=0)       # Zeitrichtwert in Stunden
    target_year: int = Field(ge=1, le=4)    # Ausbildungsjahr
    objectives: list[str] = []
    topics: list[str] = []
    competencies: list[CompetencyArea] = []


class ExamSection(BaseModel):
    """Prüfungsbereich innerhalb einer Prüfung."""

    model_config = ConfigDict(frozen=True)

    name: str
    modality: ExamModality
    duration_minutes: int = Field(ge=0)
    weight: float = Field(gt=0)             # Gewichtung innerhalb der Prüfung
    topics: list[str] = []


class ExaminationTemplate(BaseModel):
    """Prüfungsvorlage eines Berufs; Termin relativ zum Ausbildungsbeginn."""

    model_config = ConfigDict(frozen=True)

    exam_type: ExamType
    offset_months: int = Field(ge=0)        # z.B. 18 = Mitte 2. Ausbildungsjahr
    duration_minutes: int = Field(ge=0)
    sections: list[ExamSection]
    weight: float = Field(ge=0, le=100)     # Anteil am Gesamtergebnis in Prozent


class Occupation(BaseModel):
    """Ein Ausbildungsberuf mit fester Dauer und geordneten Lernfeldern."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    duration_months: int = Field(ge=1, le=48)
    version: str = ""
    units: list[CurriculumUnit] = []
    examinations: list[ExaminationTemplate] = []

    @model_validator(mode="after")
    def _check_sequence(self):
        numbers = [u.sequence for u in self.units]
        if numbers != sorted(numbers):
            raise ValueError(f"Lernfelder von '{self.id}' sind nicht nach Nummer sortiert")
        if len(set(numbers)) != len(numbers):
            raise ValueError(f"Doppelte Lernfeld-Nummern in '{self.id}'")
        ids = [u.id for u in self.units]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Doppelte Lernfeld-IDs in '{self.id}'")
        types = [e.exam_type for e in self.examinations]
        if len(set(types)) != len(types):
            raise ValueError(f"Prüfungstyp mehrfach definiert in '{self.id}'")
        return self

    @property
    def total_hours(self) -> int:
        return sum(u.allotted_hours for u in self.units)


class CurriculumCatalog(BaseModel):
    """Sammlung aller bekannten Berufe."""

    model_config = ConfigDict(frozen=True)

    occupations: list[Occupation] = []

    @model_validator(mode="after")
    def _unique_ids(self):
        ids = [o.id for o in self.occupations]
        if len(set(ids)) != len(ids):
            raise ValueError("Beruf-IDs im Katalog sind nicht eindeutig")
        return self

    def get(self, occupation_id: str) -> Occupation:
        """Gibt den Beruf zurück oder wirft NotFoundError."""
        for occ in self.occupations:
            if occ.id == occupation_id or occ.name == occupation_id:
                return occ
        raise NotFoundError("Rahmenlehrplan für Beruf", occupation_id)

    def ids(self) -> list[str]:
        return [o.id for o in self.occupations]
