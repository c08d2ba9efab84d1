#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
QOF – achieved points and maximum achievable points at practice level
- Ceiling: ORGANISATION_REFERENCE.csv (PRACTICE_CODE -> REVISED_MAX_POINTS)
- Achievement: ACHIEVEMENT_<region>.csv, one file per NHS region,
  summed over every ACHIEVED_POINTS row for the practice
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable

import pandas as pd

from .utils import read_csv, require_cols, to_numeric

logger = logging.getLogger(__name__)

# ------------------ CONFIG ------------------
ORG_REFERENCE_PATTERN = "ORGANISATION_REFERENCE"
ACHIEVEMENT_GLOB = "ACHIEVEMENT_*.csv"
ACHIEVED_POINTS = "ACHIEVED_POINTS"
# --------------------------------------------


def load_max_points_map(path: Path | None) -> Dict[str, float]:
    """{practice code: revised maximum QOF points}; empty if the file is absent."""
    if path is None:
        logger.info("QOF Org Reference: not found; default ceiling applies.")
        return {}

    logger.info("QOF Org Reference: %s", path.name)
    df = read_csv(path)
    require_cols(df, ["PRACTICE_CODE", "REVISED_MAX_POINTS"], path.name)
    df["REVISED_MAX_POINTS"] = to_numeric(df["REVISED_MAX_POINTS"])
    df = df.drop_duplicates("PRACTICE_CODE", keep="last")

    max_points = dict(zip(df["PRACTICE_CODE"], df["REVISED_MAX_POINTS"]))
    logger.info("Practices with max points: %s", f"{len(max_points):,}")
    return max_points


def find_achievement_files(folder: Path) -> list[Path]:
    return sorted(folder.glob(ACHIEVEMENT_GLOB)) if folder.is_dir() else []


def load_achievement_map(files: Iterable[Path]) -> Dict[str, float]:
    """
    Sum ACHIEVED_POINTS per practice across all regional achievement files.
    Other measures (e.g. REGISTER, DENOMINATOR) are ignored.
    """
    parts = []
    for f in files:
        logger.info("Reading %s", f.name)
        df = read_csv(f)
        require_cols(df, ["PRACTICE_CODE", "MEASURE", "VALUE"], f.name)
        df = df[df["MEASURE"] == ACHIEVED_POINTS]
        parts.append(pd.DataFrame({
            "PRACTICE_CODE": df["PRACTICE_CODE"],
            "VALUE": to_numeric(df["VALUE"]),
        }))

    if not parts:
        logger.info("QOF Achievement: no files found; points default to 0.")
        return {}

    combined = pd.concat(parts, ignore_index=True)
    totals = combined.groupby("PRACTICE_CODE", sort=False)["VALUE"].sum()
    logger.info("QOF Achievement files: %d | practices: %s", len(parts), f"{len(totals):,}")
    return totals.to_dict()
