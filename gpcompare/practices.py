"""
Practice records: workforce rows joined with registrations and QOF.

Every record carries identity, hierarchy membership, raw metrics and the two
derived metrics (patients per GP, estimated income). Rows with a malformed
practice code or no patients are dropped and counted.
"""

from __future__ import annotations

import logging
from typing import Dict, Tuple

import pandas as pd

from .income import NHS_RATES, estimate_income
from .utils import round_half_up

logger = logging.getLogger(__name__)

MIN_CODE_LENGTH = 5

PRACTICE_COLUMNS = [
    "code", "name", "postcode",
    "pcnCode", "pcnName", "icbCode", "icbName", "regionCode", "regionName",
    "listSize", "wteGPs", "wteNurses", "wteAdmin", "wteDPC",
    "qofPoints", "qofMaxPoints", "appointments", "dnaRate",
    "patientsPerGP", "estimatedIncome",
]

LOOKUP_COLUMNS = ["code", "name", "postcode"]


def patients_per_gp(list_size: float, wte_gps: float) -> int:
    if not wte_gps > 0:
        return 0
    return int(round_half_up(list_size / wte_gps, 0))


def join_practices(
    workforce: pd.DataFrame,
    patients: Dict[str, float],
    max_points: Dict[str, float],
    achievement: Dict[str, float],
) -> Tuple[pd.DataFrame, int]:
    """
    Build the practice table from the normalised workforce frame and the
    code-keyed maps. Returns (practices, skipped_rows).
    """
    wf = workforce.copy()

    valid_code = wf["code"].str.len() >= MIN_CODE_LENGTH
    # Registration count wins unless it is missing or zero
    registered = wf["code"].map(patients).fillna(0.0)
    wf["listSize"] = registered.where(registered != 0, wf["workforcePatients"])

    keep = valid_code & (wf["listSize"] != 0)
    skipped = int((~keep).sum())
    wf = wf[keep].copy()
    # Patient counts are published as whole numbers
    if (wf["listSize"] % 1 == 0).all():
        wf["listSize"] = wf["listSize"].astype("int64")

    raw_points = wf["code"].map(achievement).fillna(0.0)
    ceiling = wf["code"].map(max_points).fillna(0.0)
    wf["qofMaxPoints"] = ceiling.where(ceiling != 0, NHS_RATES["qof_max_points"])
    wf["qofPoints"] = raw_points.map(lambda v: round_half_up(v, 0))

    # Not published in any current extract
    wf["appointments"] = 0
    wf["dnaRate"] = 0.0

    wf["patientsPerGP"] = [
        patients_per_gp(ls, gps) for ls, gps in zip(wf["listSize"], wf["wteGPs"])
    ]
    wf["estimatedIncome"] = [
        estimate_income(ls, pts) for ls, pts in zip(wf["listSize"], raw_points)
    ]

    practices = wf[PRACTICE_COLUMNS].reset_index(drop=True)
    logger.info("Valid practices: %s", f"{len(practices):,}")
    logger.info("Skipped: %s", f"{skipped:,}")
    return practices, skipped


def build_lookup(practices: pd.DataFrame) -> list[dict]:
    """Minimal {code, name, postcode} projection used for client-side search."""
    return practices[LOOKUP_COLUMNS].to_dict(orient="records")
