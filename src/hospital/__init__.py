"""
In-memory hospital model: wards, teams, doctors and patients behind a single
coordinator, with setup-file bootstrap and whole-graph snapshots.
"""

from .cli import app
from .config import HospitalConfig
from .coordinator import HospitalCoordinator, get_hospital, reset_hospital
from .exceptions import (
    HospitalError,
    InvariantViolationError,
    NotInTeamError,
    PersistenceError,
    SetupParseError,
)
from .models import (
    ConsultantDoctor,
    Doctor,
    Grade,
    JuniorDoctor,
    Name,
    Patient,
    PatientState,
    Sex,
    Team,
    Ward,
    parse_date,
)


def main() -> None:
    # Delegate to Typer app so `uv run hospital ...` works.
    app()
