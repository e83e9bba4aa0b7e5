"""
Centralized hospital defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


SETUP_FILE = "hospital.csv"
SNAPSHOT_FILE = "Hospital.data"
DATE_FORMAT = "%d/%m/%y"  # dd/MM/yy
RECORD_TAGS = ("ward", "team", "consultant", "junior", "patient")


@dataclass
class HospitalConfig:
    setup_file: Path = Path(SETUP_FILE)
    snapshot_file: Path = Path(SNAPSHOT_FILE)
    date_format: str = DATE_FORMAT
