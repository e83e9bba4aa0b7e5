"""
Seed a hospital from the line-oriented setup file.

Each record starts with a tag (case-insensitive): Ward, Team, Consultant,
Junior or Patient. Team records open a new team; the doctors and patients that
follow belong to it until the next Team record or end of file. Loading is
best-effort: a record that cannot be used is reported and skipped.
"""

from __future__ import annotations

import csv
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Tuple

import pandas as pd
from rich.console import Console

from .config import DATE_FORMAT, RECORD_TAGS
from .exceptions import InvariantViolationError, SetupParseError
from .models import ConsultantDoctor, Doctor, Grade, JuniorDoctor, Name, Sex, Team, Ward, parse_date

if TYPE_CHECKING:
    from .coordinator import HospitalCoordinator

console = Console()

MAX_FIELDS = 8  # widest record is Patient: tag + 5 fields
TEAM_MEMBER_TAGS = RECORD_TAGS[2:]
UNDECODABLE = "\ufffd"


@dataclass
class _TeamDraft:
    code: str
    consultant: Optional[ConsultantDoctor] = None
    doctors: List[Doctor] = field(default_factory=list)
    patients: List[Tuple[Name, Sex, date]] = field(default_factory=list)


def _read_records(setup_file: Path) -> List[List[str]]:
    def _skip_bad_line(fields: List[str]) -> None:
        console.log(f"{','.join(fields)}: too many fields, record skipped", markup=False)
        return None

    try:
        frame = pd.read_csv(
            setup_file,
            header=None,
            names=list(range(MAX_FIELDS)),
            dtype=str,
            keep_default_na=False,
            quoting=csv.QUOTE_NONE,
            skip_blank_lines=True,
            encoding="utf-8",
            encoding_errors="replace",
            engine="python",
            on_bad_lines=_skip_bad_line,
        )
    except pd.errors.EmptyDataError:
        return []
    frame = frame.fillna("")
    records = []
    for row in frame.itertuples(index=False):
        fields = [str(v).strip() for v in row]
        while fields and not fields[-1]:
            fields.pop()
        if fields:
            records.append(fields)
    return records


def _fields(record: List[str], count: int) -> List[str]:
    values = record[1:]
    if len(values) < count:
        raise SetupParseError(f"{record[0]} record needs {count} fields, got {len(values)}")
    if any(not v for v in values[:count]):
        raise SetupParseError(f"{record[0]} record has an empty field")
    return values[:count]


def _flush(hospital: "HospitalCoordinator", draft: Optional[_TeamDraft]) -> None:
    if draft is None:
        return
    try:
        team = Team(draft.code, draft.doctors, draft.consultant)
        hospital.add_team(team)
    except InvariantViolationError as exc:
        console.log(f"{exc}: team {draft.code} and its patients skipped", markup=False)
        return
    for name, sex, dob in draft.patients:
        if hospital.admit(name, sex, dob, team) is None:
            console.log(f"No free {sex.name} bed for {name}; patient not admitted", markup=False)


def read_hospital_details(
    hospital: "HospitalCoordinator", setup_file: Path, date_format: str = DATE_FORMAT
) -> None:
    """Populate ``hospital`` with the wards, teams, doctors and patients in ``setup_file``."""
    try:
        records = _read_records(Path(setup_file))
    except (OSError, pd.errors.ParserError) as exc:
        console.log(f"Error reading setup file {setup_file}: {exc}", markup=False)
        return

    draft: Optional[_TeamDraft] = None
    for record in records:
        tag = record[0].lower()
        try:
            if UNDECODABLE in "".join(record):
                raise SetupParseError("Record is not valid UTF-8")
            if tag not in RECORD_TAGS:
                raise SetupParseError(f"Unknown record tag {record[0]!r}")
            if tag == "ward":
                name, sex, capacity = _fields(record, 3)
                hospital.add_ward(Ward(name, Sex.parse(sex), int(capacity)))
            elif tag == "team":
                _flush(hospital, draft)
                # members up to the next usable Team record are skipped
                draft = None
                (code,) = _fields(record, 1)
                draft = _TeamDraft(code)
            elif draft is None and tag in TEAM_MEMBER_TAGS:
                raise SetupParseError(f"{record[0]} record is not inside a valid Team record")
            elif tag == "consultant":
                if draft.consultant is not None:
                    raise SetupParseError(f"Team {draft.code} already has a consultant")
                draft.consultant = ConsultantDoctor(Name(*_fields(record, 3)))
                draft.doctors.append(draft.consultant)
            elif tag == "junior":
                title, given, family, grade = _fields(record, 4)
                draft.doctors.append(JuniorDoctor(Name(title, given, family), Grade.parse(grade)))
            else:
                title, given, family, sex, dob = _fields(record, 5)
                draft.patients.append(
                    (Name(title, given, family), Sex.parse(sex), parse_date(dob, date_format))
                )
        except (SetupParseError, InvariantViolationError, ValueError, KeyError, IndexError) as exc:
            console.log(f"{exc}: data corrupted, record {','.join(record)} skipped", markup=False)

    _flush(hospital, draft)
