"""
The hospital coordinator: owner of the ward/team graph and entry point for
admit, discharge and treatment workflows.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from rich.console import Console

from .config import DATE_FORMAT, SNAPSHOT_FILE, HospitalConfig
from .exceptions import InvariantViolationError, PersistenceError
from .models import ConsultantDoctor, Doctor, Name, Patient, Sex, Team, Ward
from .setup_loader import read_hospital_details
from .snapshot import read_snapshot, write_snapshot

console = Console()

_hospital: Optional["HospitalCoordinator"] = None


class HospitalCoordinator:
    """
    Aggregate root for wards, teams and (through them) patients and doctors.

    Wards and teams are held in insertion order, which makes ward selection in
    :meth:`admit` deterministic: among wards with the most free beds the first
    one added wins.
    """

    def __init__(self, snapshot_file: Path = Path(SNAPSHOT_FILE)):
        self._wards: Dict[str, Ward] = {}
        self._teams: Dict[str, Team] = {}
        self.snapshot_file = Path(snapshot_file)

    @classmethod
    def bootstrap(
        cls,
        setup_file: Path,
        snapshot_file: Path = Path(SNAPSHOT_FILE),
        date_format: str = DATE_FORMAT,
    ) -> "HospitalCoordinator":
        """Build a coordinator seeded from the wards, teams and patients in ``setup_file``."""
        hospital = cls(snapshot_file)
        read_hospital_details(hospital, setup_file, date_format)
        return hospital

    # ---------------- Setup ----------------

    def add_ward(self, ward: Ward) -> None:
        if ward.name in self._wards:
            raise InvariantViolationError(f"Duplicate ward {ward.name}")
        self._wards[ward.name] = ward

    def add_team(self, team: Team) -> None:
        if team.code in self._teams:
            raise InvariantViolationError(f"Duplicate team {team.code}")
        self._teams[team.code] = team

    # ---------------- Workflows ----------------

    def admit(self, name: Name, sex: Sex, date_of_birth: date, team: Team) -> Optional[Ward]:
        """
        Admit a new patient under ``team`` to the ward of type ``sex`` with the
        most free beds. Returns that ward, or None (with nothing changed) when
        no ward of the right type has a free bed.
        """
        if not isinstance(team, Team) or self._teams.get(team.code) is not team:
            raise InvariantViolationError(f"Team {team!r} is not part of this hospital")

        best: Optional[Ward] = None
        best_free = 0
        for ward in self._wards.values():
            if ward.type is not sex:
                continue
            free = ward.free_beds
            if free > best_free:
                best, best_free = ward, free

        if best is None:
            return None
        patient = Patient(name=name, sex=sex, date_of_birth=date_of_birth)
        patient.admit(best, team)
        return best

    def discharge(self, patient: Patient) -> None:
        patient.discharge()

    def record_treatment(self, patient: Patient, doctor: Doctor) -> None:
        patient.record_treatment_by(doctor)

    # ---------------- Queries ----------------

    def get_wards(self) -> Tuple[Ward, ...]:
        return tuple(self._wards.values())

    def get_teams(self) -> Tuple[Team, ...]:
        return tuple(self._teams.values())

    def get_patients(self, ward: Optional[Ward] = None) -> Tuple[Patient, ...]:
        if ward is not None:
            return tuple(ward.patients)
        return tuple(p for w in self._wards.values() for p in w.patients)

    def get_doctors(self, owner: Union[Team, Patient]) -> Tuple[Doctor, ...]:
        if isinstance(owner, Team):
            return tuple(owner.doctors)
        if isinstance(owner, Patient):
            return tuple(owner.treated_by)
        raise TypeError(f"Expected a Team or Patient, got {type(owner).__name__}")

    def get_consultant_doctor(self, patient: Patient) -> Optional[ConsultantDoctor]:
        return patient.consultant_doctor

    def get_team(self, patient: Patient) -> Optional[Team]:
        return patient.team

    def get_patients_and_wards(self, team: Team) -> Dict[Patient, Optional[Ward]]:
        return team.get_patients_and_wards()

    def find_ward(self, name: str) -> Ward:
        return self._wards[name]

    def find_team(self, code: str) -> Team:
        return self._teams[code]

    def find_patient(self, given: str, family: str) -> Patient:
        for patient in self.get_patients():
            if (patient.name.given, patient.name.family) == (given, family):
                return patient
        raise KeyError(f"{given} {family}")

    # ---------------- Persistence ----------------

    def save(self, path: Optional[Path] = None) -> None:
        target = Path(path) if path is not None else self.snapshot_file
        write_snapshot(self, target)
        console.log(f"Saved hospital to {target}")

    def __str__(self) -> str:
        teams = "[" + ", ".join(str(t) for t in self._teams.values()) + "]"
        wards = "[" + ", ".join(str(w) for w in self._wards.values()) + "]"
        return teams + wards


def get_hospital(config: Optional[HospitalConfig] = None) -> HospitalCoordinator:
    """
    Return the process-wide coordinator, restoring it from the snapshot file on
    first use or, failing that, bootstrapping from the setup file and saving.
    """
    global _hospital
    if _hospital is None:
        cfg = config or HospitalConfig()
        try:
            hospital = read_snapshot(cfg.snapshot_file, HospitalCoordinator)
            hospital.snapshot_file = Path(cfg.snapshot_file)
        except PersistenceError as exc:
            console.log(str(exc), markup=False)
            console.log("Hospital will be initialised to default state")
            hospital = HospitalCoordinator.bootstrap(cfg.setup_file, cfg.snapshot_file, cfg.date_format)
            hospital.save()
        _hospital = hospital
    return _hospital


def reset_hospital() -> None:
    """Forget the process-wide coordinator, as a process restart would."""
    global _hospital
    _hospital = None
