"""Tests for the Typer driver."""

import pytest
from typer.testing import CliRunner

import hospital.coordinator as coordinator
from hospital import HospitalCoordinator, PersistenceError, reset_hospital
from hospital.cli import app
from hospital.snapshot import read_snapshot

runner = CliRunner()


@pytest.fixture
def invoke(seed_file, snapshot_file):
    def _invoke(*args):
        reset_hospital()  # each CLI run is a fresh process
        return runner.invoke(
            app, ["--setup-file", str(seed_file), "--snapshot-file", str(snapshot_file), *args]
        )

    return _invoke


def _saved(snapshot_file) -> HospitalCoordinator:
    return read_snapshot(snapshot_file, HospitalCoordinator)


class TestDemo:
    """Tests for the illustrative driver command."""

    def test_demo_admits_and_saves(self, invoke, snapshot_file):
        result = invoke("demo")

        assert result.exit_code == 0, result.output
        assert "same object" in result.output
        assert "Nightingale" in result.output
        saved = _saved(snapshot_file)
        assert saved.find_patient("Bet", "Lynch").ward.name == "Nightingale"

    def test_demo_save_failure_exits_1(self, invoke, monkeypatch):
        def _fail(obj, path):
            raise PersistenceError("disk full")

        monkeypatch.setattr(coordinator, "write_snapshot", _fail)
        result = invoke("demo")
        assert result.exit_code == 1


class TestCommands:
    """Tests for the admit, discharge, treat and listing commands."""

    def test_admit_then_list(self, invoke, snapshot_file):
        result = invoke("admit", "Mr", "Stan", "Ogden", "M", "08/11/38", "--team", "T2")
        assert result.exit_code == 0, result.output
        assert _saved(snapshot_file).find_patient("Stan", "Ogden").team.code == "T2"

        listing = invoke("patients", "--ward", "Seacole")
        assert listing.exit_code == 0, listing.output
        assert "Ogden" in listing.output

    def test_admit_unknown_team(self, invoke):
        result = invoke("admit", "Mr", "Stan", "Ogden", "M", "08/11/38", "--team", "T9")
        assert result.exit_code == 2

    def test_admit_bad_sex(self, invoke):
        result = invoke("admit", "Mr", "Stan", "Ogden", "Q", "08/11/38", "--team", "T1")
        assert result.exit_code == 2

    def test_admit_without_bed_does_not_save_patient(self, invoke, snapshot_file):
        for n in range(3):
            invoke("admit", "Mr", "P", str(n), "M", "01/01/80", "--team", "T1")
        saved = _saved(snapshot_file)
        assert len(saved.get_patients(saved.find_ward("Seacole"))) == 2

    def test_discharge(self, invoke, snapshot_file):
        invoke("admit", "Ms", "Bet", "Lynch", "F", "23/05/78", "--team", "T1")
        result = invoke("discharge", "Bet", "Lynch")
        assert result.exit_code == 0, result.output
        assert _saved(snapshot_file).find_ward("Nightingale").free_beds == 4

    def test_discharge_unknown_patient(self, invoke):
        assert invoke("discharge", "No", "One").exit_code == 2

    def test_treat_in_team(self, invoke, snapshot_file):
        invoke("admit", "Ms", "Bet", "Lynch", "F", "23/05/78", "--team", "T1")
        result = invoke("treat", "Bet", "Lynch", "--doctor", "Jones")
        assert result.exit_code == 0, result.output
        patient = _saved(snapshot_file).find_patient("Bet", "Lynch")
        assert [d.name.family for d in patient.treated_by] == ["Jones"]

    def test_treat_out_of_team(self, invoke, snapshot_file):
        invoke("admit", "Ms", "Bet", "Lynch", "F", "23/05/78", "--team", "T1")
        result = invoke("treat", "Bet", "Lynch", "--doctor", "Brown")
        assert result.exit_code == 2
        assert _saved(snapshot_file).find_patient("Bet", "Lynch").treated_by == []

    def test_wards_and_census(self, invoke, tmp_path):
        png = tmp_path / "wards.png"
        result = invoke("wards", "--png-out", str(png))
        assert result.exit_code == 0, result.output
        assert "Seacole" in result.output
        assert png.exists()

        census = invoke("census")
        assert census.exit_code == 0, census.output
        assert "total_beds" in census.output
