"""Hospital coordinator exception hierarchy."""

from __future__ import annotations


class HospitalError(Exception):
    """Base exception for all hospital errors."""

    pass


class InvariantViolationError(HospitalError):
    """Raised when an operation would break a model invariant.

    Examples:
        - Admitting under a team the hospital does not know
        - Placing a patient on a ward of the wrong type
        - Admitting a patient twice
    """

    pass


class NotInTeamError(HospitalError):
    """Raised when a treatment is recorded for a doctor outside the patient's team."""

    def __init__(self, patient: object, doctor: object):
        self.patient = patient
        self.doctor = doctor
        super().__init__(f"{doctor} is not in the team caring for {patient}")


class SetupParseError(HospitalError):
    """Raised for a setup file record that cannot be understood."""

    pass


class PersistenceError(HospitalError):
    """Raised when a snapshot cannot be read or written."""

    pass
