"""
Tabular views of the hospital for reporting: ward occupancy and team caseload.
"""

from __future__ import annotations

from typing import Dict

import pandas as pd

from .coordinator import HospitalCoordinator
from .models import Sex

CENSUS_COLUMNS = ["ward", "type", "capacity", "occupied", "free_beds", "occupancy"]


def ward_census(hospital: HospitalCoordinator) -> pd.DataFrame:
    records = []
    for ward in hospital.get_wards():
        occupied = len(hospital.get_patients(ward))
        records.append(
            {
                "ward": ward.name,
                "type": ward.type.name,
                "capacity": ward.capacity,
                "occupied": occupied,
                "free_beds": ward.free_beds,
                "occupancy": occupied / ward.capacity,
            }
        )
    return pd.DataFrame.from_records(records, columns=CENSUS_COLUMNS)


def team_caseload(hospital: HospitalCoordinator) -> pd.DataFrame:
    records = []
    for team in hospital.get_teams():
        records.append(
            {
                "team": team.code,
                "consultant": str(team.consultant_doctor),
                "doctors": len(hospital.get_doctors(team)),
                "patients": len(hospital.get_patients_and_wards(team)),
            }
        )
    return pd.DataFrame.from_records(records, columns=["team", "consultant", "doctors", "patients"])


def compute_metrics(census: pd.DataFrame) -> Dict[str, float]:
    metrics: Dict[str, float] = {}
    total = int(census["capacity"].sum())
    metrics["total_beds"] = total
    metrics["occupied_beds"] = int(census["occupied"].sum())
    metrics["free_beds"] = int(census["free_beds"].sum())
    metrics["occupancy_rate"] = metrics["occupied_beds"] / total if total else 0.0
    for sex in Sex:
        metrics[f"free_beds_{sex.name}"] = int(census.loc[census["type"] == sex.name, "free_beds"].sum())
    return metrics
