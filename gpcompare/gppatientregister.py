"""
GP Patient Registers – practice list sizes
Purpose:
    Reduce the "Patients Registered at a GP Practice" extract
    (gp-reg-pat-prac-all.csv) to a single list size per practice.

Notes:
    - The extract holds one row per practice / sex / age band; only the
      SEX=ALL, AGE=ALL row carries the practice total.
    - The file is optional: when it's absent the workforce TOTAL_PATIENTS
      column is used instead.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict

from .utils import read_csv, require_cols, to_numeric


logger = logging.getLogger(__name__)

# ----------------------------
# Configuration
# ----------------------------
FILE_PATTERN = "gp-reg-pat-prac-all"

# Expected schema (subset we actually use)
USECOLS = [
    "CODE",                  # practice code (e.g., A84002)
    "SEX",                   # ALL / MALE / FEMALE
    "AGE",                   # ALL / single year / band
    "NUMBER_OF_PATIENTS",    # integer, may carry thousands separators
]


def load_registration_map(path: Path | None) -> Dict[str, float]:
    """
    Return {practice code: registered patients} from the SEX=ALL, AGE=ALL rows.
    A later row for the same code replaces an earlier one.
    """
    if path is None:
        logger.info("Patients: no registration file found; using workforce list sizes.")
        return {}

    logger.info("Patients: %s", path.name)
    df = read_csv(path)
    require_cols(df, USECOLS, path.name)

    totals = df[(df["SEX"] == "ALL") & (df["AGE"] == "ALL")].copy()
    totals["NUMBER_OF_PATIENTS"] = to_numeric(totals["NUMBER_OF_PATIENTS"])
    totals = totals.drop_duplicates("CODE", keep="last")

    patients = dict(zip(totals["CODE"], totals["NUMBER_OF_PATIENTS"]))
    logger.info("Practices with patient data: %s", f"{len(patients):,}")
    return patients
