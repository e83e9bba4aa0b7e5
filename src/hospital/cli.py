from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .census import compute_metrics, team_caseload, ward_census
from .config import SETUP_FILE, SNAPSHOT_FILE, HospitalConfig
from .coordinator import HospitalCoordinator, get_hospital
from .exceptions import InvariantViolationError, NotInTeamError, PersistenceError
from .models import Name, Sex, parse_date
from .visualize import plot_occupancy

console = Console()
app = typer.Typer(add_completion=False, no_args_is_help=True)


@app.callback()
def main_options(
    ctx: typer.Context,
    setup_file: Path = typer.Option(Path(SETUP_FILE), help="Seed file used when no snapshot exists."),
    snapshot_file: Path = typer.Option(Path(SNAPSHOT_FILE), help="Snapshot of the hospital state."),
) -> None:
    ctx.obj = HospitalConfig(setup_file=setup_file, snapshot_file=snapshot_file)


def _hospital(ctx: typer.Context) -> HospitalCoordinator:
    try:
        return get_hospital(ctx.obj)
    except PersistenceError as exc:
        console.log(f"Problem storing state of hospital: {exc}", style="bold red")
        raise typer.Exit(code=1)


def _save(hospital: HospitalCoordinator) -> None:
    try:
        hospital.save()
    except PersistenceError as exc:
        console.log(f"Problem storing state of hospital: {exc}", style="bold red")
        raise typer.Exit(code=1)


@app.command("demo")
def demo(ctx: typer.Context) -> None:
    """Walk through singleton access, an admission and a save."""
    hospital1 = _hospital(ctx)
    hospital2 = _hospital(ctx)
    if hospital1 is hospital2:
        console.print("hospital1 and hospital2 reference the same object.")
    else:
        console.print("hospital1 and hospital2 reference different objects.")

    console.print("Initial details of hospital1:", str(hospital1), markup=False)
    console.print("Initial details of hospital2:", str(hospital2), markup=False)
    console.print("Initial patient details:", _names(hospital1), markup=False)

    teams = hospital1.get_teams()
    if not teams:
        console.log("No teams to admit under", style="bold red")
        raise typer.Exit(code=1)
    console.print("Admitting a patient to hospital1...")
    ward = hospital1.admit(Name("Ms", "Bet", "Lynch"), Sex.F, parse_date("23/05/78"), teams[0])
    console.print(f"Admitted to {ward.name}" if ward else "No free bed available")

    console.print("Final patient details of hospital1:", _names(hospital1), markup=False)
    console.print("Final patient details of hospital2:", _names(hospital2), markup=False)
    _save(hospital1)


@app.command("wards")
def wards(
    ctx: typer.Context,
    png_out: Optional[Path] = typer.Option(None, help="Save an occupancy chart to this path."),
) -> None:
    """Show every ward with its occupancy."""
    census = ward_census(_hospital(ctx))
    table = Table(title="Wards", show_header=True, header_style="bold magenta")
    for column in census.columns:
        table.add_column(column)
    for row in census.itertuples(index=False):
        table.add_row(*(f"{v:0.2f}" if isinstance(v, float) else str(v) for v in row))
    console.print(table)
    if png_out:
        plot_occupancy(census, outfile=png_out)
        console.log(f"Saved occupancy chart to {png_out}")


@app.command("patients")
def patients(
    ctx: typer.Context,
    ward: Optional[str] = typer.Option(None, help="Only list patients on this ward."),
) -> None:
    """List admitted patients with their ward, team and consultant."""
    hospital = _hospital(ctx)
    try:
        selected = hospital.get_patients(hospital.find_ward(ward) if ward else None)
    except KeyError:
        raise typer.BadParameter(f"No ward named {ward}", param_hint="--ward")
    table = Table(title="Patients", show_header=True, header_style="bold magenta")
    for column in ("Patient", "Sex", "Born", "Ward", "Team", "Consultant", "Treated by"):
        table.add_column(column)
    for p in selected:
        table.add_row(
            str(p.name),
            p.sex.name,
            p.date_of_birth.isoformat(),
            p.ward.name,
            p.team.code,
            str(hospital.get_consultant_doctor(p)),
            ", ".join(str(d) for d in hospital.get_doctors(p)),
        )
    console.print(table)


@app.command("admit")
def admit(
    ctx: typer.Context,
    title: str,
    given: str,
    family: str,
    sex: str = typer.Argument(..., help="M or F."),
    dob: str = typer.Argument(..., help="Date of birth as dd/mm/yy."),
    team: str = typer.Option(..., help="Code of the admitting team."),
) -> None:
    """Admit a patient to the ward of the right type with most free beds."""
    hospital = _hospital(ctx)
    try:
        the_team = hospital.find_team(team)
    except KeyError:
        raise typer.BadParameter(f"No team with code {team}", param_hint="--team")
    try:
        the_sex = Sex.parse(sex)
        born = parse_date(dob, ctx.obj.date_format)
    except ValueError as exc:
        raise typer.BadParameter(str(exc))
    ward = hospital.admit(Name(title, given, family), the_sex, born, the_team)
    if ward is None:
        console.log(f"No free {the_sex.name} bed; {given} {family} not admitted", style="bold")
        return
    console.log(f"Admitted {title} {given} {family} to {ward.name} under {the_team.code}")
    _save(hospital)


@app.command("discharge")
def discharge(ctx: typer.Context, given: str, family: str) -> None:
    """Discharge a patient, freeing their bed."""
    hospital = _hospital(ctx)
    try:
        patient = hospital.find_patient(given, family)
    except KeyError:
        raise typer.BadParameter(f"No admitted patient named {given} {family}")
    ward = patient.ward
    hospital.discharge(patient)
    console.log(f"Discharged {patient} from {ward.name}")
    _save(hospital)


@app.command("treat")
def treat(
    ctx: typer.Context,
    given: str,
    family: str,
    doctor: str = typer.Option(..., help="Family name of a doctor in the patient's team."),
) -> None:
    """Record that a doctor from the patient's team has treated them."""
    hospital = _hospital(ctx)
    try:
        patient = hospital.find_patient(given, family)
    except KeyError:
        raise typer.BadParameter(f"No admitted patient named {given} {family}")
    matches = [d for t in hospital.get_teams() for d in t.doctors if d.name.family == doctor]
    if not matches:
        raise typer.BadParameter(f"No doctor named {doctor}", param_hint="--doctor")
    # prefer a doctor from the patient's own team when names are shared
    chosen = next((d for d in matches if patient.team.contains(d)), matches[0])
    try:
        hospital.record_treatment(patient, chosen)
    except (NotInTeamError, InvariantViolationError) as exc:
        console.log(str(exc), style="bold red")
        raise typer.Exit(code=2)
    console.log(f"Recorded treatment of {patient} by {chosen}")
    _save(hospital)


@app.command("census")
def census(ctx: typer.Context) -> None:
    """Summarise bed usage and team caseload."""
    hospital = _hospital(ctx)
    _print_metrics(compute_metrics(ward_census(hospital)))
    caseload = team_caseload(hospital)
    table = Table(title="Team caseload", show_header=True, header_style="bold magenta")
    for column in caseload.columns:
        table.add_column(column)
    for row in caseload.itertuples(index=False):
        table.add_row(*(str(v) for v in row))
    console.print(table)


def _names(hospital: HospitalCoordinator) -> str:
    return "[" + ", ".join(str(p) for p in hospital.get_patients()) + "]"


def _print_metrics(metrics: dict) -> None:
    table = Table(title="Bed KPIs", show_header=True, header_style="bold magenta")
    table.add_column("Metric")
    table.add_column("Value")
    for key, val in metrics.items():
        table.add_row(key, f"{val:0.3f}" if isinstance(val, float) else str(val))
    console.print(table)
