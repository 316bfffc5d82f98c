"""Tests für Konfiguration, Katalog, Datenmodelle und CLI."""

from datetime import date, time
from pathlib import Path

import pytest

from config.defaults import (
    default_catalog,
    default_policy,
    fachinformatiker_anwendungsentwicklung,
    kaufmann_bueromanagement,
)
from config.manager import ConfigManager
from config.schema import (
    ExaminationPolicy,
    MinimumWagePolicy,
    PolicyConfig,
    WorkingTimePolicy,
)
from models.curriculum import CurriculumCatalog, CurriculumUnit, ExamType, Occupation
from models.errors import InvalidTransitionError, NotFoundError, TrainingPlanError, ValidationError
from models.plan import ExamState
from models.records import TraineeProfile, WorkingTimeRecord, age_on


# ─── DEFAULT-KONFIGURATION ────────────────────────────────────────────────────

class TestDefaultConfig:
    def test_default_policy_values(self):
        policy = default_policy()
        assert policy.planning.hours_per_day == 8.0
        assert policy.working_time.youth_max_hours_per_day == 8
        assert policy.working_time.statutory_max_hours_per_day == 10
        assert policy.examinations.registration_lead_days == 90
        assert policy.examinations.resit_interval_days == 180
        assert policy.minimum_wage.minimum_for_year(1) == 682.0

    def test_default_catalog_occupations(self):
        catalog = default_catalog()
        assert catalog.ids() == ["fiae", "kfbm"]

    def test_fiae_curriculum(self):
        occ = fachinformatiker_anwendungsentwicklung()
        assert occ.duration_months == 36
        assert len(occ.units) == 12
        assert occ.total_hours == 880
        codes = [e.exam_type.code for e in occ.examinations]
        assert codes == ["AP1", "AP2"]
        assert sum(e.weight for e in occ.examinations) == 100

    def test_kfbm_curriculum(self):
        occ = kaufmann_bueromanagement()
        assert len(occ.units) == 13
        assert sum(e.weight for e in occ.examinations) == 100

    def test_catalog_lookup_by_name(self):
        catalog = default_catalog()
        occ = catalog.get("fiae")
        assert catalog.get(occ.name).id == "fiae"

    def test_catalog_unknown(self):
        with pytest.raises(NotFoundError) as exc:
            default_catalog().get("xyz")
        assert exc.value.key == "xyz"


class TestPydanticValidation:
    def test_youth_limit_above_statutory_raises(self):
        with pytest.raises(ValueError):
            WorkingTimePolicy(youth_max_hours_per_day=11, statutory_max_hours_per_day=10)

    def test_passing_score_range(self):
        with pytest.raises(ValueError):
            ExaminationPolicy(passing_score=120)

    def test_resit_interval_must_be_positive(self):
        with pytest.raises(ValueError):
            ExaminationPolicy(resit_interval_days=0)

    def test_wage_table_invalid_year(self):
        with pytest.raises(ValueError):
            MinimumWagePolicy(monthly_minimum={5: 1000.0})

    def test_wage_table_empty(self):
        with pytest.raises(ValueError):
            MinimumWagePolicy(monthly_minimum={})

    def test_units_must_be_sorted(self):
        units = [
            CurriculumUnit(id="b", sequence=2, title="B", allotted_hours=8, target_year=1),
            CurriculumUnit(id="a", sequence=1, title="A", allotted_hours=8, target_year=1),
        ]
        with pytest.raises(ValueError):
            Occupation(id="x", name="X", duration_months=24, units=units)

    def test_duplicate_occupation_ids(self):
        occ = kaufmann_bueromanagement()
        with pytest.raises(ValueError):
            CurriculumCatalog(occupations=[occ, occ])

    def test_catalog_is_immutable(self):
        occ = kaufmann_bueromanagement()
        with pytest.raises(ValueError):
            occ.duration_months = 12

    def test_negative_hours_rejected(self):
        with pytest.raises(ValueError):
            CurriculumUnit(id="a", sequence=1, title="A", allotted_hours=-1, target_year=1)


# ─── YAML SPEICHERN / LADEN ───────────────────────────────────────────────────

class TestConfigManager:
    def test_save_and_load_roundtrip(self, tmp_path: Path):
        """Vorgaben speichern, laden und validieren — vollständiger Roundtrip."""
        policy = default_policy().model_copy(update={"organisation_name": "Test AG"})
        mgr = ConfigManager()
        mgr.CONFIG_DIR = tmp_path
        mgr.DEFAULT_CONFIG = tmp_path / "policy.yaml"

        mgr.save(policy)
        assert mgr.DEFAULT_CONFIG.exists()
        text = mgr.DEFAULT_CONFIG.read_text(encoding="utf-8")
        assert "Mindestvergütung" in text

        loaded = mgr.load(mgr.DEFAULT_CONFIG)
        assert loaded == policy
        assert loaded.minimum_wage.monthly_minimum[3] == 921.0

    def test_first_run_check(self, tmp_path: Path):
        mgr = ConfigManager()
        mgr.DEFAULT_CONFIG = tmp_path / "policy.yaml"
        assert mgr.first_run_check() is True
        mgr.save(default_policy())
        assert mgr.first_run_check() is False

    def test_load_nonexistent_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            ConfigManager().load(tmp_path / "not_there.yaml")

    def test_load_or_default(self, tmp_path: Path):
        assert ConfigManager().load_or_default(tmp_path / "fehlt.yaml") == PolicyConfig()

    def test_load_invalid_raises_value_error(self, tmp_path: Path):
        path = tmp_path / "policy.yaml"
        path.write_text("working_time:\n  youth_max_hours_per_day: 12\n", encoding="utf-8")
        with pytest.raises(ValueError):
            ConfigManager().load(path)

    @pytest.mark.parametrize("suffix", [".yaml", ".json"])
    def test_catalog_roundtrip(self, tmp_path: Path, suffix: str):
        catalog = default_catalog()
        path = tmp_path / f"katalog{suffix}"
        mgr = ConfigManager()
        if suffix == ".json":
            path.write_text(catalog.model_dump_json(), encoding="utf-8")
        else:
            mgr.save_catalog(catalog, path)
        assert mgr.load_catalog(path) == catalog


# ─── MODELLE ──────────────────────────────────────────────────────────────────

class TestModels:
    def test_age_on_birthday(self):
        assert age_on(date(2007, 3, 14), date(2025, 3, 13)) == 17
        assert age_on(date(2007, 3, 14), date(2025, 3, 14)) == 18

    def test_sanitized_profile(self):
        profile = TraineeProfile(id="a", name="A", date_of_birth=date(2000, 1, 1),
                                 tax_id="1", iban="DE1", password_hash="h")
        data = profile.sanitized()
        assert set(data) & TraineeProfile.SENSITIVE_FIELDS == set()
        assert data["id"] == "a"

    def test_working_time_end_before_start(self):
        with pytest.raises(ValueError):
            WorkingTimeRecord(date=date(2025, 1, 1), start=time(16, 0), end=time(8, 0))

    def test_working_time_hours(self):
        rec = WorkingTimeRecord(date=date(2025, 1, 1), start=time(8, 0), end=time(12, 30))
        assert rec.hours == 4.5

    def test_exam_type_codes(self):
        assert ExamType.INTERIM.code == "ZP"
        assert ExamType.FINAL_PART_2.code == "AP2"

    def test_error_hierarchy(self):
        err = InvalidTransitionError("AP1", ExamState.NOT_SCHEDULED, ExamState.SAT)
        assert isinstance(err, ValidationError)
        assert isinstance(err, TrainingPlanError)
        assert "nicht angemeldet" in str(err)
        assert isinstance(NotFoundError("Azubi", "x"), TrainingPlanError)


# ─── MAIN.PY CLI ──────────────────────────────────────────────────────────────

class TestCli:
    def test_help(self):
        from click.testing import CliRunner
        from main import cli
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Usage" in result.output

    @pytest.mark.parametrize("command", [
        ["init"], ["config", "show"], ["catalog", "list"], ["generate"],
        ["plan", "create"], ["plan", "show"], ["plan", "complete"], ["exam"],
        ["check"], ["report"], ["trainer", "status"], ["template"], ["import"],
    ])
    def test_command_registered(self, command):
        from click.testing import CliRunner
        from main import cli
        result = CliRunner().invoke(cli, command + ["--help"])
        assert result.exit_code == 0, result.output

    def test_catalog_show(self):
        from click.testing import CliRunner
        from main import cli
        result = CliRunner().invoke(cli, ["catalog", "show", "fiae"])
        assert result.exit_code == 0
        assert "Lernfeld" in result.output or "lf1" in result.output

    def test_catalog_show_unknown(self):
        from click.testing import CliRunner
        from main import cli
        result = CliRunner().invoke(cli, ["catalog", "show", "xyz"])
        assert result.exit_code == 1

    def test_check_without_dataset(self):
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["check", "azubi-001"])
            assert result.exit_code == 1
            assert "Kein Datensatz" in result.output

    def test_generate_then_check(self):
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["--data", "daten.json", "generate",
                                         "--today", "2025-03-14"])
            assert result.exit_code == 0, result.output
            assert Path("daten.json").exists()

            result = runner.invoke(cli, ["--data", "daten.json", "check", "--all",
                                         "--on", "2025-03-14"])
            # Der Demo-Datensatz enthält absichtliche Verstöße
            assert result.exit_code == 1
            assert "Jugendschutz" in result.output

    def test_init_writes_policy(self):
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["--config", "vorgaben.yaml", "init"])
            assert result.exit_code == 0, result.output
            assert Path("vorgaben.yaml").exists()
