"""Shared fixtures for the hospital tests."""

from datetime import date
from pathlib import Path

import pytest

from hospital import HospitalCoordinator, Name, Sex, reset_hospital

SEED = """\
Ward,Nightingale,F,4
Ward,Seacole,M,2
Team,T1
Consultant,Dr,John,Smith
Junior,Dr,Carol,Jones,ONE
Junior,Dr,Ravi,Patel,TWO
Team,T2
Consultant,Dr,Mary,Khan
Junior,Dr,Tom,Brown,ONE
"""


@pytest.fixture(autouse=True)
def _fresh_singleton():
    reset_hospital()
    yield
    reset_hospital()


@pytest.fixture
def seed_file(tmp_path: Path) -> Path:
    path = tmp_path / "hospital.csv"
    path.write_text(SEED, encoding="utf-8")
    return path


@pytest.fixture
def snapshot_file(tmp_path: Path) -> Path:
    return tmp_path / "Hospital.data"


@pytest.fixture
def hospital(seed_file: Path, snapshot_file: Path) -> HospitalCoordinator:
    return HospitalCoordinator.bootstrap(seed_file, snapshot_file)


@pytest.fixture
def bet() -> tuple:
    return Name("Ms", "Bet", "Lynch"), Sex.F, date(1978, 5, 23)


def _assert_invariants(hospital: HospitalCoordinator) -> None:
    for ward in hospital.get_wards():
        assert len(ward.patients) <= ward.capacity
        for p in ward.patients:
            assert p.sex is ward.type
            assert p.ward is ward
    for team in hospital.get_teams():
        assert team.consultant_doctor in team.doctors
        for p in team.patients:
            assert p.team is team
            assert p.consultant_doctor == team.consultant_doctor
    for p in hospital.get_patients():
        assert p in p.ward.patients
        assert p in p.team.patients
        assert all(p.team.contains(d) for d in p.treated_by)


@pytest.fixture
def check_invariants():
    """Assert the cross-entity invariants that must hold after every operation."""
    return _assert_invariants
