"""Ausbildungsplan — Haupt-CLI.

Verwendung:
  python main.py init                                 Vorgaben (policy.yaml) anlegen
  python main.py config show                          Vorgaben anzeigen
  python main.py catalog list                         Berufe im Katalog
  python main.py catalog show fiae                    Lernfelder und Prüfungen eines Berufs
  python main.py generate                             Demo-Datensatz erzeugen
  python main.py plan create <azubi> <beruf> --start 2025-08-01 --trainer <id>
  python main.py plan show <azubi>                    Plan mit Status anzeigen
  python main.py plan complete <azubi> <lernfeld>     Lernfeld abschließen
  python main.py exam anmelden <azubi> AP1            Prüfungs-Workflow
  python main.py check <azubi>                        Compliance-Prüfung
  python main.py report <azubi> --from … --to …       Ausbildungsnachweis (Excel/PDF)
  python main.py trainer status <id>                  AEVO-Status eines Ausbilders
  python main.py template                             Excel-Import-Vorlage erzeugen
  python main.py import <datei.xlsx>                  Arbeitszeiten importieren
"""

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

from models.errors import TrainingPlanError

console = Console()

# Standard-Pfad für den gespeicherten Datensatz
DEFAULT_DATA_JSON = Path("output/ausbildung.json")

_DATE = click.DateTime(formats=["%Y-%m-%d", "%d.%m.%Y"])


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


def _day(value) -> date:
    """click.DateTime liefert datetime; None bedeutet heute."""
    return value.date() if value is not None else date.today()


def _abort(message: str) -> None:
    console.print(f"[red bold]Fehler:[/red bold] {message}")
    sys.exit(1)


def _load_policy(ctx: click.Context):
    from config.manager import ConfigManager
    try:
        return ConfigManager().load_or_default(ctx.obj["config"])
    except ValueError as e:
        _abort(str(e))


def _load_catalog(ctx: click.Context):
    from config.defaults import default_catalog
    from config.manager import ConfigManager
    path = ctx.obj["catalog"]
    if path is None:
        return default_catalog()
    try:
        return ConfigManager().load_catalog(path)
    except (FileNotFoundError, ValueError) as e:
        _abort(str(e))


def _open_store(ctx: click.Context):
    """Lädt den Datensatz oder bricht mit Fehlermeldung ab."""
    from data.store import RecordStore
    path = ctx.obj["data"]
    if not path.exists():
        _abort(
            f"Kein Datensatz gefunden: {path}\n"
            "Verwenden Sie [bold]python main.py generate[/bold] oder --data."
        )
    try:
        return RecordStore.open(path)
    except TrainingPlanError as e:
        _abort(str(e))


def _service(ctx: click.Context):
    from planner.service import TrainingPlanService
    return TrainingPlanService(_open_store(ctx), _load_catalog(ctx), _load_policy(ctx))


# ─── INIT ─────────────────────────────────────────────────────────────────────

@click.command("init")
@click.option("--catalog-out", type=click.Path(path_type=Path), default=None,
              help="Zusätzlich den Standard-Katalog als YAML speichern.")
@click.pass_context
def cmd_init(ctx: click.Context, catalog_out: Optional[Path]):
    """Legt die Vorgaben (policy.yaml) mit Standardwerten an."""
    from config.defaults import default_catalog, default_policy
    from config.manager import ConfigManager

    mgr = ConfigManager()
    target = ctx.obj["config"] or mgr.DEFAULT_CONFIG
    if target.exists() and not click.confirm(
        f"{target} existiert bereits. Überschreiben?", default=False
    ):
        return
    mgr.save(default_policy(), target)
    if catalog_out is not None:
        mgr.save_catalog(default_catalog(), catalog_out)
        console.print(f"[green]✓[/green] Katalog gespeichert: {catalog_out}")


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Vorgaben anzeigen."""


@cmd_config.command("show")
@click.pass_context
def config_show(ctx: click.Context):
    """Zeigt die aktuellen Vorgaben an."""
    policy = _load_policy(ctx)

    console.print(Panel(
        f"[bold]{policy.organisation_name}[/bold]  |  Kammer: {policy.chamber}",
        title="Vorgaben",
        border_style="cyan",
    ))

    wt = policy.working_time
    table = Table(title="Arbeitszeit", box=box.ROUNDED)
    table.add_column("Regel")
    table.add_column("Wert", justify="right")
    table.add_row("Jugendliche max. pro Tag", f"{wt.youth_max_hours_per_day:g}h")
    table.add_row("Gesetzliche Obergrenze pro Tag", f"{wt.statutory_max_hours_per_day:g}h")
    table.add_row("Volljährig ab", f"{wt.age_of_majority} Jahren")
    table.add_row("Prüfzeitraum", f"{wt.lookback_days} Tage")
    console.print(table)

    wage = Table(title="Mindestvergütung (BBiG §17)", box=box.ROUNDED)
    wage.add_column("Ausbildungsjahr")
    wage.add_column("€/Monat", justify="right")
    for year, amount in sorted(policy.minimum_wage.monthly_minimum.items()):
        wage.add_row(str(year), f"{amount:.2f}")
    console.print(wage)

    ex = policy.examinations
    console.print(
        f"\n[bold]Prüfungen:[/bold] Anmeldung {ex.registration_lead_days} Tage vorher | "
        f"Bestehensgrenze {ex.passing_score:g} Punkte | "
        f"Wiederholung {ex.resit_interval_days} Tage nach dem letzten Termin"
    )
    tp = policy.trainer
    console.print(
        f"[bold]Ausbilder:[/bold] {tp.required_certification} erforderlich | "
        f"Auffrischung {tp.refresher_notice_days} Tage vor Ablauf"
    )


# ─── CATALOG ──────────────────────────────────────────────────────────────────

@click.group("catalog")
def cmd_catalog():
    """Rahmenlehrpläne anzeigen."""


@cmd_catalog.command("list")
@click.pass_context
def catalog_list(ctx: click.Context):
    """Listet alle Berufe im Katalog auf."""
    catalog = _load_catalog(ctx)
    table = Table(title="Ausbildungsberufe", box=box.ROUNDED)
    table.add_column("ID", style="bold")
    table.add_column("Beruf")
    table.add_column("Dauer", justify="right")
    table.add_column("Lernfelder", justify="right")
    table.add_column("Stunden", justify="right")
    for occ in catalog.occupations:
        table.add_row(occ.id, occ.name, f"{occ.duration_months} Monate",
                      str(len(occ.units)), f"{occ.total_hours:g}")
    console.print(table)


@cmd_catalog.command("show")
@click.argument("occupation")
@click.pass_context
def catalog_show(ctx: click.Context, occupation: str):
    """Zeigt Lernfelder und Prüfungen eines Berufs."""
    catalog = _load_catalog(ctx)
    try:
        occ = catalog.get(occupation)
    except TrainingPlanError as e:
        _abort(str(e))

    table = Table(title=f"{occ.name} (Stand {occ.version})", box=box.ROUNDED)
    table.add_column("Nr.", justify="right")
    table.add_column("ID")
    table.add_column("Lernfeld")
    table.add_column("Std.", justify="right")
    table.add_column("Jahr", justify="right")
    for u in occ.units:
        table.add_row(str(u.sequence), u.id, u.title, f"{u.allotted_hours:g}", str(u.target_year))
    console.print(table)

    for tpl in occ.examinations:
        sections = ", ".join(f"{s.name} ({s.weight:g})" for s in tpl.sections)
        console.print(
            f"[bold]{tpl.exam_type.value}[/bold] nach {tpl.offset_months} Monaten, "
            f"Gewicht {tpl.weight:g}%: {sections}"
        )


# ─── GENERATE ─────────────────────────────────────────────────────────────────

@click.command("generate")
@click.option("--seed", default=42, help="Zufalls-Seed für reproduzierbare Daten.")
@click.option("--trainees", default=6, help="Anzahl Azubis (mind. 4).")
@click.option("--today", type=_DATE, default=None, help="Stichtag (Standard: heute).")
@click.pass_context
def cmd_generate(ctx: click.Context, seed: int, trainees: int, today):
    """Erzeugt einen Demo-Datensatz mit absichtlichen Verstößen."""
    from data.fake_data import FakeDataGenerator

    console.print("[bold]Testdaten werden generiert...[/bold]")
    gen = FakeDataGenerator(_load_policy(ctx), _load_catalog(ctx), seed=seed,
                            today=_day(today), num_trainees=trainees)
    data = gen.generate()
    gen.print_summary(data)

    out_path = ctx.obj["data"]
    try:
        data.save_json(out_path)
    except TrainingPlanError as e:
        _abort(str(e))
    console.print(f"[green]✓[/green] Datensatz gespeichert: {out_path}")


# ─── PLAN ─────────────────────────────────────────────────────────────────────

@click.group("plan")
def cmd_plan():
    """Ausbildungspläne erstellen und pflegen."""


@cmd_plan.command("create")
@click.argument("trainee")
@click.argument("occupation")
@click.option("--start", type=_DATE, required=True, help="Ausbildungsbeginn.")
@click.option("--trainer", required=True, help="ID des verantwortlichen Ausbilders.")
@click.pass_context
def plan_create(ctx: click.Context, trainee: str, occupation: str, start, trainer: str):
    """Erstellt einen Ausbildungsplan für einen Azubi."""
    service = _service(ctx)
    try:
        plan = service.create_plan(trainee, occupation, _day(start), trainer)
        service.store.save()
    except TrainingPlanError as e:
        _abort(str(e))
    console.print(
        f"[green]✓[/green] Plan [bold]{plan.id}[/bold] erstellt: "
        f"{len(plan.units)} Lernfelder, {plan.start_date:%d.%m.%Y} – {plan.end_date:%d.%m.%Y}"
    )


@cmd_plan.command("show")
@click.argument("trainee")
@click.option("--on", "on_", type=_DATE, default=None, help="Stichtag (Standard: heute).")
@click.pass_context
def plan_show(ctx: click.Context, trainee: str, on_):
    """Zeigt den Plan eines Azubis mit aktuellem Status."""
    service = _service(ctx)
    today = _day(on_)
    try:
        plan = service.refresh_plan(trainee, today)
        service.store.save()
    except TrainingPlanError as e:
        _abort(str(e))

    colors = {"geplant": "dim", "aktiv": "cyan", "abgeschlossen": "green", "überfällig": "red"}
    table = Table(
        title=f"{plan.id}  |  {plan.progress_percent():.1f}% abgeschlossen",
        box=box.ROUNDED,
    )
    table.add_column("Nr.", justify="right")
    table.add_column("Lernfeld")
    table.add_column("Beginn")
    table.add_column("Ende")
    table.add_column("Status")
    for su in plan.units:
        c = colors[su.status.value]
        table.add_row(str(su.unit.sequence), su.unit.title, f"{su.start_date:%d.%m.%Y}",
                      f"{su.end_date:%d.%m.%Y}", f"[{c}]{su.status.value}[/{c}]")
    console.print(table)

    exams = Table(title="Prüfungen", box=box.ROUNDED)
    exams.add_column("Prüfung")
    exams.add_column("Termin")
    exams.add_column("Status")
    exams.add_column("Punkte", justify="right")
    for e in plan.examinations:
        score = f"{e.last_result.overall_score:.1f}" if e.last_result else ""
        exams.add_row(e.exam_type.value, f"{e.target_date:%d.%m.%Y}", e.state.value, score)
    console.print(exams)


@cmd_plan.command("complete")
@click.argument("trainee")
@click.argument("unit")
@click.option("--on", "on_", type=_DATE, default=None, help="Stichtag (Standard: heute).")
@click.pass_context
def plan_complete(ctx: click.Context, trainee: str, unit: str, on_):
    """Markiert ein Lernfeld als abgeschlossen."""
    service = _service(ctx)
    try:
        su = service.complete_unit(trainee, unit, _day(on_))
        service.store.save()
    except TrainingPlanError as e:
        _abort(str(e))
    console.print(f"[green]✓[/green] {su.unit.title} abgeschlossen.")


# ─── EXAM ─────────────────────────────────────────────────────────────────────

@click.command("exam")
@click.argument("action", type=click.Choice(
    ["anmelden", "ablegen", "bewerten", "wiederholen"], case_sensitive=False))
@click.argument("trainee")
@click.argument("exam")
@click.option("--on", "on_", type=_DATE, default=None, help="Datum (Standard: heute).")
@click.option("--termin", "target", type=_DATE, default=None,
              help="Neuer Prüfungstermin bei 'wiederholen'.")
@click.option("--score", "scores", multiple=True,
              help="Punkte je Prüfungsbereich, z.B. --score 'Fachgespräch=72'.")
@click.pass_context
def cmd_exam(ctx: click.Context, action: str, trainee: str, exam: str, on_, target, scores):
    """Prüfungs-Workflow: anmelden, ablegen, bewerten, wiederholen.

    EXAM ist die Prüfungs-ID oder ein Kürzel (ZP, AP1, AP2).
    """
    parsed: dict[str, float] = {}
    for raw in scores:
        name, sep, value = raw.rpartition("=")
        if not sep or not name.strip():
            _abort(f"Ungültige Angabe '{raw}', erwartet 'Bereich=Punkte'.")
        try:
            parsed[name.strip()] = float(value.replace(",", "."))
        except ValueError:
            _abort(f"Ungültige Punktzahl in '{raw}'.")

    service = _service(ctx)
    try:
        result = service.manage_examination(
            trainee, exam.upper() if len(exam) <= 3 else exam, action, _day(on_),
            scores=parsed or None, target_date=target.date() if target else None,
        )
        service.store.save()
    except TrainingPlanError as e:
        _abort(str(e))

    line = f"[green]✓[/green] {result.exam_type.value}: {result.state.value}"
    if result.last_result and action.lower() == "bewerten":
        line += f" ({result.last_result.overall_score:.1f} Punkte)"
    console.print(line)


# ─── CHECK ────────────────────────────────────────────────────────────────────

@click.command("check")
@click.argument("trainee", required=False)
@click.option("--all", "check_all", is_flag=True, default=False, help="Alle Azubis prüfen.")
@click.option("--on", "on_", type=_DATE, default=None, help="Stichtag (Standard: heute).")
@click.pass_context
def cmd_check(ctx: click.Context, trainee: Optional[str], check_all: bool, on_):
    """BBiG-/JArbSchG-Compliance-Prüfung."""
    service = _service(ctx)
    today = _day(on_)
    if check_all:
        ids = [t.id for t in service.store.dataset.trainees]
    elif trainee:
        ids = [trainee]
    else:
        _abort("Azubi-ID oder --all angeben.")

    all_ok = True
    for tid in ids:
        console.print(f"\n[bold]Azubi {tid}[/bold]")
        try:
            report = service.check_compliance(tid, today)
        except TrainingPlanError as e:
            console.print(f"[red]{e}[/red]")
            all_ok = False
            continue
        report.print_rich()
        all_ok = all_ok and report.compliant

    sys.exit(0 if all_ok else 1)


# ─── REPORT ───────────────────────────────────────────────────────────────────

@click.command("report")
@click.argument("trainee")
@click.option("--from", "date_from", type=_DATE, required=True, help="Beginn des Zeitraums.")
@click.option("--to", "date_to", type=_DATE, required=True, help="Ende des Zeitraums.")
@click.option("--excel", type=click.Path(path_type=Path), default=None,
              help="Bericht als Excel speichern.")
@click.option("--pdf", type=click.Path(path_type=Path), default=None,
              help="Bericht als PDF speichern.")
@click.option("--compliance/--no-compliance", default=True,
              help="Compliance-Ergebnis zum Ende des Zeitraums anhängen.")
@click.pass_context
def cmd_report(ctx: click.Context, trainee: str, date_from, date_to,
               excel: Optional[Path], pdf: Optional[Path], compliance: bool):
    """Erstellt den Ausbildungsnachweis eines Azubis."""
    from models.records import DateRange

    service = _service(ctx)
    period = DateRange(start=_day(date_from), end=_day(date_to))
    try:
        report = service.assemble_report(trainee, period)
        comp = service.check_compliance(trainee, period.end) if compliance else None
    except TrainingPlanError as e:
        _abort(str(e))

    report.print_rich()
    if excel:
        from export.excel_export import ReportExcelExporter
        ReportExcelExporter(report, comp, service.policy.organisation_name).export(excel)
        console.print(f"[green]✓[/green] Excel gespeichert: {excel}")
    if pdf:
        from export.pdf_export import ReportPdfExporter
        ReportPdfExporter(report, comp, service.policy.organisation_name).export(pdf)
        console.print(f"[green]✓[/green] PDF gespeichert: {pdf}")


# ─── TRAINER ──────────────────────────────────────────────────────────────────

@click.group("trainer")
def cmd_trainer():
    """Ausbilder und Ausbildereignung."""


@cmd_trainer.command("status")
@click.argument("trainer", required=False)
@click.option("--on", "on_", type=_DATE, default=None, help="Stichtag (Standard: heute).")
@click.pass_context
def trainer_status(ctx: click.Context, trainer: Optional[str], on_):
    """Zeigt den Stand der Ausbildereignung (alle Ausbilder ohne ID)."""
    service = _service(ctx)
    today = _day(on_)
    ids = [trainer] if trainer else [t.id for t in service.store.dataset.trainers]

    table = Table(title=f"Ausbildereignung am {today:%d.%m.%Y}", box=box.ROUNDED)
    table.add_column("Ausbilder", style="bold")
    table.add_column("Nachweis")
    table.add_column("Gültig bis")
    table.add_column("Auffrischung ab")
    table.add_column("Status")
    try:
        for tid in ids:
            st = service.trainer_qualification_status(tid, today)
            color = "green" if st.status == "gueltig" else "red"
            table.add_row(
                tid, st.certification_type,
                f"{st.valid_until:%d.%m.%Y}" if st.valid_until else "-",
                f"{st.next_refresher:%d.%m.%Y}" if st.next_refresher else "-",
                f"[{color}]{st.status}[/{color}]",
            )
        service.store.save()
    except TrainingPlanError as e:
        _abort(str(e))
    console.print(table)


# ─── TEMPLATE ─────────────────────────────────────────────────────────────────

@click.command("template")
@click.option("--output", "-o", default="output/arbeitszeiten_vorlage.xlsx",
              help="Ausgabepfad für die Excel-Vorlage.")
@click.pass_context
def cmd_template(ctx: click.Context, output: str):
    """Erzeugt eine leere Excel-Vorlage für Arbeitszeiten und Tätigkeiten."""
    from data.excel_import import generate_template
    from data.store import TrainingDataset

    trainee_ids = None
    path = ctx.obj["data"]
    if path.exists():
        try:
            trainee_ids = [t.id for t in TrainingDataset.load_json(path).trainees]
        except TrainingPlanError as e:
            _abort(str(e))

    out_path = Path(output)
    console.print("[bold]Excel-Vorlage wird erzeugt...[/bold]")
    generate_template(out_path, trainee_ids)
    console.print(f"[green]✓[/green] Vorlage gespeichert: {out_path}")
    console.print(
        "\nBlätter in der Vorlage:\n"
        "  [cyan]Arbeitszeiten[/cyan] – Azubi-ID, Datum, Beginn, Ende\n"
        "  [cyan]Tätigkeiten[/cyan]   – Azubi-ID, Datum, Tätigkeit, Stunden, Lernfeld"
    )


# ─── IMPORT ───────────────────────────────────────────────────────────────────

@click.command("import")
@click.argument("datei", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def cmd_import(ctx: click.Context, datei: Path):
    """Importiert Arbeitszeiten und Tätigkeiten aus einer Excel-Datei."""
    from data.excel_import import ExcelImportError, import_from_excel

    store = _open_store(ctx)
    console.print(f"[bold]Importiere:[/bold] {datei}")
    try:
        result = import_from_excel(datei, {t.id for t in store.dataset.trainees})
    except ExcelImportError as e:
        console.print(f"[red bold]Import fehlgeschlagen:[/red bold]\n{e}")
        sys.exit(1)

    added = store.add_working_times(result.working_times)
    store.dataset.activities.extend(result.activities)
    for w in result.warnings:
        console.print(f"[yellow]⚠ {w}[/yellow]")
    try:
        store.save()
    except TrainingPlanError as e:
        _abort(str(e))
    console.print(
        f"[green]✓[/green] {added} Arbeitszeiten "
        f"({len(result.working_times) - added} Duplikate übersprungen), "
        f"{len(result.activities)} Tätigkeiten importiert."
    )


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--data", "data_path", type=click.Path(path_type=Path),
              default=str(DEFAULT_DATA_JSON), show_default=True,
              help="Pfad zum Datensatz (JSON).")
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None,
              help="Pfad zu den Vorgaben (Standard: config/policy.yaml).")
@click.option("--catalog", "catalog_path", type=click.Path(path_type=Path), default=None,
              help="Eigener Katalog (YAML/JSON) statt der eingebauten Berufe.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Ausführliche Log-Ausgabe.")
@click.pass_context
def cli(ctx: click.Context, data_path: Path, config_path: Optional[Path],
        catalog_path: Optional[Path], verbose: bool):
    """Ausbildungsplanung und BBiG-Compliance für Ausbildungsbetriebe.

    Starten Sie mit: python main.py generate
    """
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["data"] = Path(data_path)
    ctx.obj["config"] = config_path
    ctx.obj["catalog"] = catalog_path


def main():
    """Einstiegspunkt."""
    cli(obj={})


# Befehle registrieren
cli.add_command(cmd_init)
cli.add_command(cmd_config)
cli.add_command(cmd_catalog)
cli.add_command(cmd_generate)
cli.add_command(cmd_plan)
cli.add_command(cmd_exam)
cli.add_command(cmd_check)
cli.add_command(cmd_report)
cli.add_command(cmd_trainer)
cli.add_command(cmd_template)
cli.add_command(cmd_import)


if __name__ == "__main__":
    main()
