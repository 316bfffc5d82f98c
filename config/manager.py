"""Konfigurationsmanager: Laden, Speichern und Validieren der Betriebsvorgaben.

Nutzt ruamel.yaml für YAML-Serialisierung mit Kommentaren. Rahmenlehrpläne
können zusätzlich als YAML- oder JSON-Datei geladen werden.
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.schema import PolicyConfig
from models.curriculum import CurriculumCatalog

logger = logging.getLogger(__name__)

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML-KOMMENTAR-AUFBAU ───

_YAML_HEADER = f"""\
# ============================================
# Ausbildungsplan — Betriebsvorgaben
# Erstellt: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "planning": (
        "Planung",
        "Zeitrichtwert eines Lernfelds / hours_per_day = Dauer in Kalendertagen.",
    ),
    "working_time": (
        "Arbeitszeit",
        "JArbSchG §8 (Jugendliche) und ArbZG §3 (Obergrenze).",
    ),
    "examinations": (
        "Prüfungen",
        "Anmeldefrist vor dem Prüfungstermin und Bestehensgrenze in Punkten.",
    ),
    "minimum_wage": (
        "Mindestvergütung",
        "BBiG §17: Euro brutto pro Monat je Ausbildungsjahr.",
    ),
    "trainer": (
        "Ausbilder",
        None,
    ),
    "record_keeping": (
        "Ausbildungsnachweis",
        None,
    ),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "policy.yaml"

    def first_run_check(self) -> bool:
        """Gibt True zurück wenn noch keine Config existiert (Erstaufruf)."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None) -> PolicyConfig:
        """Lade Config aus YAML. Validiert automatisch via Pydantic."""
        target = Path(path) if path else self.DEFAULT_CONFIG
        if not target.exists():
            raise FileNotFoundError(
                f"Konfigurationsdatei nicht gefunden: {target}\n"
                f"Führen Sie 'python main.py init' aus, um die Vorgaben anzulegen."
            )
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        try:
            config = PolicyConfig.model_validate(dict(raw or {}))
        except PydanticValidationError as e:
            raise ValueError(
                f"Konfigurationsdatei ungültig: {target}\n"
                f"Pydantic-Fehler: {e}"
            ) from e
        logger.info(f"Konfiguration geladen: {target}")
        return config

    def load_or_default(self, path: Optional[Path] = None) -> PolicyConfig:
        """Wie load(), aber Standardvorgaben falls keine Datei existiert."""
        target = Path(path) if path else self.DEFAULT_CONFIG
        if not target.exists():
            logger.info(f"Keine Konfiguration unter {target} – verwende Standardvorgaben")
            return PolicyConfig()
        return self.load(target)

    # ─── Speichern ───

    def save(self, config: PolicyConfig, path: Optional[Path] = None) -> None:
        """Speichere Config als YAML mit deutschen Kommentaren."""
        target = Path(path) if path else self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)

        console.print(f"[green]✓[/green] Konfiguration gespeichert: {target}")

    def _build_commented_yaml(self, config: PolicyConfig) -> CommentedMap:
        """Baut die YAML-Struktur mit Kommentaren auf."""
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )

        # Jahres-Schlüssel der Mindestvergütung als Zahlen ausgeben
        wage = CommentedMap(
            (int(year), amount) for year, amount in raw["minimum_wage"]["monthly_minimum"].items()
        )
        cm["minimum_wage"] = CommentedMap({"monthly_minimum": wage})
        return cm

    # ─── Rahmenlehrpläne ───

    def load_catalog(self, path: Path) -> CurriculumCatalog:
        """Lädt einen Katalog aus YAML (.yaml/.yml) oder JSON."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Katalog-Datei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                raw = yaml.load(f)
                raw = json.loads(json.dumps(raw, default=str))
            else:
                raw = json.load(f)
        try:
            catalog = CurriculumCatalog.model_validate(raw)
        except PydanticValidationError as e:
            raise ValueError(f"Katalog ungültig: {path}\nPydantic-Fehler: {e}") from e
        logger.info(f"Katalog geladen: {path} ({len(catalog.occupations)} Berufe)")
        return catalog

    def save_catalog(self, catalog: CurriculumCatalog, path: Path) -> None:
        """Speichert einen Katalog als YAML."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        raw = json.loads(catalog.model_dump_json())
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(raw, f)
