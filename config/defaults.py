from config.schema import PolicyConfig
from models.curriculum import (
    CompetencyArea,
    CurriculumCatalog,
    CurriculumUnit,
    ExamModality,
    ExamSection,
    ExamType,
    ExaminationTemplate,
    Occupation,
)

_F = CompetencyArea.FACH
_M = CompetencyArea.METHODE
_S = CompetencyArea.SOZIAL
_P = CompetencyArea.PERSONAL


def default_policy() -> PolicyConfig:
    """Standard-Vorgaben: 8h-Tag, JArbSchG/ArbZG-Grenzen, IHK-Bestehensgrenze."""
    return PolicyConfig()


def _lf(num: int, uid: str, title: str, hours: int, year: int,
        objectives: list[str] | None = None, topics: list[str] | None = None,
        competencies: list[CompetencyArea] | None = None) -> CurriculumUnit:
    return CurriculumUnit(
        id=uid, sequence=num, title=title, allotted_hours=hours, target_year=year,
        objectives=objectives or [], topics=topics or [],
        competencies=competencies or [_F],
    )


def fachinformatiker_anwendungsentwicklung() -> Occupation:
    """Fachinformatiker/-in Anwendungsentwicklung (Rahmenlehrplan 2020).

    Lernfelder 1–12 mit 880h Zeitrichtwert, gestreckte Abschlussprüfung:
    Teil 1 in der Mitte des 2. Ausbildungsjahres (20 %),
    Teil 2 am Ende der Ausbildung (80 %).
    """
    units = [
        _lf(1, "lf1", "Das Unternehmen und die eigene Rolle im Betrieb beschreiben", 40, 1,
            ["Betriebsstrukturen verstehen", "Arbeitsabläufe einordnen"],
            ["Unternehmensformen", "Geschäftsprozesse", "Qualitätsmanagement"],
            [_F, _S]),
        _lf(2, "lf2", "Arbeitsplätze nach Kundenwunsch ausstatten", 80, 1,
            ["Kundenanforderungen erfassen"], ["Hardware", "Betriebssysteme"], [_F, _M]),
        _lf(3, "lf3", "Clients in Netzwerke einbinden", 80, 1,
            topics=["Netzwerktopologien", "IP-Adressierung"]),
        _lf(4, "lf4", "Schutzbedarfsanalyse im eigenen Arbeitsbereich durchführen", 40, 1,
            topics=["IT-Grundschutz", "Datenschutz"], competencies=[_F, _M]),
        _lf(5, "lf5", "Software zur Verwaltung von Daten anpassen", 80, 1,
            topics=["Datenstrukturen", "Programmierung"]),
        _lf(6, "lf6", "Serviceanfragen bearbeiten", 40, 2,
            topics=["Ticketsysteme", "Kundenkommunikation"], competencies=[_F, _S]),
        _lf(7, "lf7", "Cyber-physische Systeme ergänzen", 80, 2,
            topics=["Sensorik", "Schnittstellen"]),
        _lf(8, "lf8", "Daten systemübergreifend bereitstellen", 80, 2,
            topics=["Datenbanken", "Datenaustauschformate"]),
        _lf(9, "lf9", "Netzwerke und Dienste bereitstellen", 80, 2,
            topics=["Netzwerkdienste", "Virtualisierung"]),
        _lf(10, "lf10a", "Benutzerschnittstellen gestalten und entwickeln", 80, 3,
            topics=["Usability", "Barrierefreiheit"], competencies=[_F, _M]),
        _lf(11, "lf11a", "Funktionalität in Anwendungen realisieren", 80, 3,
            topics=["Algorithmen", "Testverfahren"]),
        _lf(12, "lf12a", "Kundenspezifische Anwendungsentwicklung durchführen", 120, 3,
            topics=["Projektmanagement", "Dokumentation"], competencies=[_F, _M, _S, _P]),
    ]
    exams = [
        ExaminationTemplate(
            exam_type=ExamType.FINAL_PART_1, offset_months=18, duration_minutes=90,
            sections=[
                ExamSection(name="Einrichten eines IT-gestützten Arbeitsplatzes",
                            modality=ExamModality.WRITTEN, duration_minutes=90,
                            weight=100, topics=["Hardware", "Software", "Netzwerke"]),
            ],
            weight=20,
        ),
        ExaminationTemplate(
            exam_type=ExamType.FINAL_PART_2, offset_months=36, duration_minutes=270,
            sections=[
                ExamSection(name="Planen eines Softwareproduktes",
                            modality=ExamModality.WRITTEN, duration_minutes=90, weight=10),
                ExamSection(name="Entwicklung und Umsetzung von Algorithmen",
                            modality=ExamModality.WRITTEN, duration_minutes=90, weight=10),
                ExamSection(name="Wirtschafts- und Sozialkunde",
                            modality=ExamModality.WRITTEN, duration_minutes=60, weight=10),
                ExamSection(name="Betriebliche Projektarbeit",
                            modality=ExamModality.PRACTICAL, duration_minutes=30, weight=50),
            ],
            weight=80,
        ),
    ]
    return Occupation(
        id="fiae",
        name="Fachinformatiker Anwendungsentwicklung",
        duration_months=36,
        version="2020",
        units=units,
        examinations=exams,
    )


def kaufmann_bueromanagement() -> Occupation:
    """Kaufmann/-frau für Büromanagement (Rahmenlehrplan 2013)."""
    titles = [
        ("Die eigene Rolle im Betrieb mitgestalten und den Betrieb präsentieren", 40, 1),
        ("Büroprozesse gestalten und Arbeitsvorgänge organisieren", 80, 1),
        ("Aufträge bearbeiten", 40, 1),
        ("Sachgüter und Dienstleistungen beschaffen und Verträge schließen", 80, 1),
        ("Kunden akquirieren und binden", 80, 2),
        ("Werteströme erfassen und beurteilen", 80, 2),
        ("Gesamtwirtschaftliche Einflüsse auf das Unternehmen analysieren", 40, 2),
        ("Personalwirtschaftliche Aufgaben wahrnehmen", 80, 2),
        ("Liquidität sichern und Finanzierung planen", 80, 3),
        ("Wertschöpfungsprozesse erfolgsorientiert steuern", 80, 3),
        ("Geschäftsprozesse darstellen und optimieren", 80, 3),
        ("Veranstaltungen und Geschäftsreisen organisieren", 40, 3),
        ("Ein Projekt planen und durchführen", 60, 3),
    ]
    units = [
        _lf(i, f"lf{i}", title, hours, year)
        for i, (title, hours, year) in enumerate(titles, 1)
    ]
    exams = [
        ExaminationTemplate(
            exam_type=ExamType.FINAL_PART_1, offset_months=18, duration_minutes=120,
            sections=[
                ExamSection(name="Informationstechnisches Büromanagement",
                            modality=ExamModality.WRITTEN, duration_minutes=120, weight=100),
            ],
            weight=25,
        ),
        ExaminationTemplate(
            exam_type=ExamType.FINAL_PART_2, offset_months=36, duration_minutes=230,
            sections=[
                ExamSection(name="Kundenbeziehungsprozesse",
                            modality=ExamModality.WRITTEN, duration_minutes=150, weight=30),
                ExamSection(name="Fachaufgabe in der Wahlqualifikation",
                            modality=ExamModality.ORAL, duration_minutes=20, weight=35),
                ExamSection(name="Wirtschafts- und Sozialkunde",
                            modality=ExamModality.WRITTEN, duration_minutes=60, weight=10),
            ],
            weight=75,
        ),
    ]
    return Occupation(
        id="kfbm",
        name="Kaufmann für Büromanagement",
        duration_months=36,
        version="2013",
        units=units,
        examinations=exams,
    )


def default_catalog() -> CurriculumCatalog:
    """Standard-Katalog mit allen mitgelieferten Berufen."""
    return CurriculumCatalog(occupations=[
        fachinformatiker_anwendungsentwicklung(),
        kaufmann_bueromanagement(),
    ])
