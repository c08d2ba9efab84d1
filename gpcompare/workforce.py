r"""
General Practice Workforce – practice-level detailed extract

Reads the "GP Workforce ... Practice Level - Detailed" CSV, the one source
every practice record starts from. It supplies practice identity, hierarchy
membership (PCN / ICB or sub-ICB / region) and FTE staffing totals.

Output columns:
    code, name, postcode, pcnCode, pcnName, icbCode, icbName,
    regionCode, regionName, workforcePatients,
    wteGPs, wteNurses, wteAdmin, wteDPC
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

import pandas as pd

from .utils import column, read_csv, to_numeric


logger = logging.getLogger(__name__)

# ------------------------------------------------------------
# Configuration
# ------------------------------------------------------------
FILE_PATTERN = "Practice Level - Detailed"

FTE_COLUMNS = {
    "wteGPs": "TOTAL_GP_FTE",
    "wteNurses": "TOTAL_NURSES_FTE",
    "wteAdmin": "TOTAL_ADMIN_FTE",
    "wteDPC": "TOTAL_DPC_FTE",
}


def format_uk_postcode(pc: str) -> str:
    """
    Normalize UK postcode to 'OUTCODE INCODE' (upper, single space).
    Blank stays blank.
    """
    s = re.sub(r"\s+", "", pc.upper())
    if len(s) >= 5:
        return s[:-3] + " " + s[-3:]
    return s


def _with_fallback(primary: pd.Series, fallback: pd.Series) -> pd.Series:
    """Primary value, or fallback where primary is blank."""
    return primary.where(primary != "", fallback)


def load_workforce(path: Path | None) -> pd.DataFrame:
    """Load and normalise the workforce extract. It is required."""
    if path is None:
        logger.error("Could not find workforce CSV file (expected a name containing %r).", FILE_PATTERN)
        raise FileNotFoundError(f"No workforce file matching '{FILE_PATTERN}'")

    logger.info("Workforce: %s", path.name)
    raw = read_csv(path)
    logger.info("Workforce rows: %s | cols: %s", f"{len(raw):,}", f"{len(raw.columns)}")

    names = column(raw, "PRAC_NAME")
    wf = pd.DataFrame({
        "code": column(raw, "PRAC_CODE"),
        "name": names.where(names != "", "Unknown"),
        "postcode": column(raw, "POSTCODE").map(format_uk_postcode),
        "pcnCode": column(raw, "PCN_CODE"),
        "pcnName": column(raw, "PCN_NAME"),
        "icbCode": _with_fallback(column(raw, "ICB_CODE"), column(raw, "SUB_ICB_CODE")),
        "icbName": _with_fallback(column(raw, "ICB_NAME"), column(raw, "SUB_ICB_NAME")),
        "regionCode": column(raw, "REGION_CODE"),
        "regionName": column(raw, "REGION_NAME"),
        "workforcePatients": to_numeric(column(raw, "TOTAL_PATIENTS")),
    })
    for out_name, src in FTE_COLUMNS.items():
        wf[out_name] = to_numeric(column(raw, src))

    wf["pcnName"] = wf["pcnName"].replace("", "Unknown PCN")
    wf["icbName"] = wf["icbName"].replace("", "Unknown ICB")
    wf["regionName"] = wf["regionName"].replace("", "Unknown Region")

    missing_fte = [src for src in FTE_COLUMNS.values() if src not in raw.columns]
    if missing_fte:
        logger.warning("Workforce file has no %s; those FTE values are 0.", missing_fte)
    logger.debug("Sample workforce rows:\n%s", wf.head(3).to_string(index=False))
    return wf
