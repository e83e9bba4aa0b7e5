"""
Entities of the hospital graph: wards, teams, doctors and patients.

Links between patients and their ward/team are bidirectional. Patient is the
single authoritative mutator: ``Patient.admit`` and ``Patient.discharge`` update
both sides, and the ward/team helpers they call are not meant for other callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional

from .config import DATE_FORMAT
from .exceptions import InvariantViolationError, NotInTeamError


class Sex(Enum):
    M = "M"
    F = "F"

    @classmethod
    def parse(cls, text: str) -> "Sex":
        try:
            return cls[text.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown sex {text!r}; expected M or F") from None


class Grade(Enum):
    ONE = 1
    TWO = 2
    THREE = 3

    @classmethod
    def parse(cls, text: str) -> "Grade":
        token = text.strip().upper()
        if token.isdigit():
            return cls(int(token))
        try:
            return cls[token]
        except KeyError:
            raise ValueError(f"Unknown grade {text!r}") from None

    @classmethod
    def lowest(cls) -> "Grade":
        return min(cls, key=lambda g: g.value)


@dataclass(frozen=True)
class Name:
    title: str
    given: str
    family: str

    def __str__(self) -> str:
        return f"{self.title} {self.given} {self.family}"


def parse_date(text: str, fmt: str = DATE_FORMAT) -> date:
    """Parse a ``dd/MM/yy`` date as found in the setup file."""
    return datetime.strptime(text.strip(), fmt).date()


# ---------- Doctors ----------


@dataclass(frozen=True)
class Doctor:
    name: Name

    def __str__(self) -> str:
        return str(self.name)


@dataclass(frozen=True)
class ConsultantDoctor(Doctor):
    pass


@dataclass(frozen=True)
class JuniorDoctor(Doctor):
    grade: Grade = Grade.ONE

    def __str__(self) -> str:
        return f"{self.name} ({self.grade.name})"


# ---------- Wards & teams ----------


@dataclass(eq=False, repr=False)
class Ward:
    name: str
    type: Sex
    capacity: int
    patients: List["Patient"] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.capacity <= 0:
            raise InvariantViolationError(
                f"Ward {self.name} must have a positive capacity, got {self.capacity}"
            )

    @property
    def free_beds(self) -> int:
        return self.capacity - len(self.patients)

    def add_patient(self, patient: "Patient") -> None:
        # capacity is checked by the caller
        if patient not in self.patients:
            self.patients.append(patient)

    def remove_patient(self, patient: "Patient") -> None:
        if patient in self.patients:
            self.patients.remove(patient)

    def __str__(self) -> str:
        return f"{self.name}: {self.type.name}: {self.capacity}: {_listing(self.patients)}"

    __repr__ = __str__


@dataclass(eq=False, repr=False)
class Team:
    """
    A medical team headed by one consultant.

    The roster always holds the consultant and at least one junior doctor of
    the lowest grade.
    """

    code: str
    doctors: List[Doctor]
    consultant_doctor: ConsultantDoctor
    patients: List["Patient"] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not isinstance(self.consultant_doctor, ConsultantDoctor):
            raise InvariantViolationError(f"Team {self.code} has no consultant doctor")
        roster: List[Doctor] = []
        for doctor in [self.consultant_doctor, *self.doctors]:
            if doctor not in roster:
                roster.append(doctor)
        self.doctors = roster
        lowest = Grade.lowest()
        if not any(isinstance(d, JuniorDoctor) and d.grade is lowest for d in roster):
            raise InvariantViolationError(
                f"Team {self.code} needs at least one junior doctor of grade {lowest.name}"
            )

    def contains(self, doctor: Doctor) -> bool:
        return doctor in self.doctors

    def get_patients_and_wards(self) -> Dict["Patient", Optional[Ward]]:
        return {patient: patient.ward for patient in self.patients}

    def add_patient(self, patient: "Patient") -> None:
        if patient not in self.patients:
            self.patients.append(patient)

    def remove_patient(self, patient: "Patient") -> None:
        if patient in self.patients:
            self.patients.remove(patient)

    def __str__(self) -> str:
        return f"{self.code}: {_listing(self.doctors)}:{_listing(self.patients)}"

    __repr__ = __str__


# ---------- Patients ----------


class PatientState(Enum):
    CREATED = "created"
    ADMITTED = "admitted"
    DISCHARGED = "discharged"


@dataclass(eq=False, repr=False)
class Patient:
    name: Name
    sex: Sex
    date_of_birth: date
    ward: Optional[Ward] = None
    team: Optional[Team] = None
    consultant_doctor: Optional[ConsultantDoctor] = None
    treated_by: List[Doctor] = field(default_factory=list)
    state: PatientState = PatientState.CREATED

    @property
    def admitted(self) -> bool:
        return self.state is PatientState.ADMITTED

    def age_on(self, day: date) -> int:
        dob = self.date_of_birth
        return day.year - dob.year - ((day.month, day.day) < (dob.month, dob.day))

    def admit(self, ward: Ward, team: Team) -> None:
        if self.state is not PatientState.CREATED:
            raise InvariantViolationError(f"{self.name} has already been {self.state.value}")
        if ward.type is not self.sex:
            raise InvariantViolationError(
                f"{self.name} ({self.sex.name}) cannot go on {ward.type.name} ward {ward.name}"
            )
        if ward.free_beds <= 0:
            raise InvariantViolationError(f"Ward {ward.name} has no free beds")

        self.ward = ward
        self.team = team
        self.consultant_doctor = team.consultant_doctor
        self.treated_by = []
        ward.add_patient(self)
        team.add_patient(self)
        self.state = PatientState.ADMITTED

    def discharge(self) -> None:
        if not self.admitted:
            return
        self.ward.remove_patient(self)
        self.team.remove_patient(self)
        self.ward = None
        self.team = None
        self.consultant_doctor = None
        self.treated_by = []
        self.state = PatientState.DISCHARGED

    def record_treatment_by(self, doctor: Doctor) -> None:
        if not self.admitted:
            raise InvariantViolationError(f"{self.name} is not currently admitted")
        if not self.team.contains(doctor):
            raise NotInTeamError(self, doctor)
        if doctor not in self.treated_by:
            self.treated_by.append(doctor)

    def __str__(self) -> str:
        return str(self.name)

    __repr__ = __str__


def _listing(items: List[object]) -> str:
    return "[" + ", ".join(str(i) for i in items) + "]"
