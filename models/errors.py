"""Fehlerklassen des Ausbildungsplan-Kerns.

Compliance-Verstöße sind KEINE Fehler, sondern reguläres Ergebnis einer Prüfung.
"""


class TrainingPlanError(Exception):
    """Basisklasse aller Fehler; steht auch für unerwartete interne Fehler."""


class NotFoundError(TrainingPlanError):
    """Referenzierter Beruf, Plan, Azubi, Ausbilder oder Prüfung existiert nicht."""

    def __init__(self, resource: str, key: str = "") -> None:
        self.resource = resource
        self.key = key
        suffix = f" '{key}'" if key else ""
        super().__init__(f"{resource}{suffix} nicht gefunden")


class ValidationError(TrainingPlanError):
    """Ungültiger Zustandswechsel, ungültiger Zeitraum oder Fristverletzung."""


class InvalidTransitionError(ValidationError):
    """Zustandswechsel einer Prüfung ist aus dem aktuellen Zustand nicht erlaubt."""

    def __init__(self, subject: str, current, attempted) -> None:
        self.current = current
        self.attempted = attempted
        super().__init__(
            f"{subject}: Wechsel von '{_label(current)}' nach "
            f"'{_label(attempted)}' nicht erlaubt."
        )


class PersistenceError(TrainingPlanError):
    """Datenspeicher konnte nicht gelesen oder geschrieben werden."""


def _label(state) -> str:
    return getattr(state, "value", str(state))
