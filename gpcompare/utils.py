#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Shared helpers for reading NHS Digital extracts.

- Logger setup for the command-line entry points
- CSV loading with trimmed headers/cells and an encoding fallback
- Filename discovery by substring inside the raw-data folder
- Total numeric parsing: redacted, blank or malformed values become 0
"""

from __future__ import annotations

import logging
import math
import sys
from pathlib import Path
from typing import List

import pandas as pd


logger = logging.getLogger(__name__)

# Placeholder NHS Digital uses for suppressed/unpublished cells
REDACTED = "*"


# ----------------------------- Logging ---------------------------------
def setup_logger(verbosity: int = 1) -> logging.Logger:
    """
    verbosity: 0=WARNING, 1=INFO, 2=DEBUG
    """
    level = logging.WARNING if verbosity <= 0 else logging.INFO if verbosity == 1 else logging.DEBUG
    root = logging.getLogger("gpcompare")
    root.setLevel(level)
    if not root.handlers:
        ch = logging.StreamHandler(sys.stdout)
        ch.setLevel(level)
        fmt = logging.Formatter("[%(asctime)s] %(levelname)s: %(message)s", "%Y-%m-%d %H:%M:%S")
        ch.setFormatter(fmt)
        root.addHandler(ch)
    return root


# ----------------------------- Numbers ---------------------------------
def to_number(value) -> float:
    """
    Parse a CSV cell to a float without ever raising.

    '' / None / '*' / NaN / non-numeric text -> 0.0
    '12,345' -> 12345.0
    """
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return 0.0 if math.isnan(value) else float(value)
    s = str(value).replace(",", "").strip()
    if not s or s == REDACTED:
        return 0.0
    try:
        num = float(s)
    except ValueError:
        return 0.0
    return 0.0 if math.isnan(num) else num


def to_numeric(series: pd.Series) -> pd.Series:
    """to_number applied to every cell of an extract column."""
    return series.map(to_number).astype(float)


def round_half_up(value: float, decimals: int = 1) -> float:
    """Round halves towards +inf, e.g. 2.45 -> 2.5 and -2.5 -> -2."""
    factor = 10 ** decimals
    return math.floor(value * factor + 0.5) / factor


# ----------------------------- Files -----------------------------------
def read_csv(path: Path) -> pd.DataFrame:
    """Read CSV with trimmed column names and string dtypes; blanks stay ''."""
    if not path.exists():
        logger.error("Missing file: %s", path)
        raise FileNotFoundError(f"Missing file: {path}")
    kwargs = dict(dtype=str, keep_default_na=False, low_memory=False)
    try:
        df = pd.read_csv(path, encoding="utf-8-sig", **kwargs)
    except UnicodeDecodeError:
        # NHS Digital workforce files are frequently Windows-1252
        logger.warning("UTF-8 decoding failed for %s. Trying cp1252.", path.name)
        df = pd.read_csv(path, encoding="cp1252", **kwargs)
    df = df.rename(columns=lambda c: c.strip() if isinstance(c, str) else c)
    for c in df.columns:
        df[c] = df[c].str.strip()
    return df


def find_file(folder: Path, pattern: str) -> Path | None:
    """First file in folder whose name contains pattern (case-insensitive)."""
    if not folder.is_dir():
        return None
    needle = pattern.lower()
    for f in sorted(folder.iterdir()):
        if f.is_file() and needle in f.name.lower():
            return f
    return None


def column(df: pd.DataFrame, name: str) -> pd.Series:
    """Column as strings, or a blank column when the extract doesn't carry it."""
    if name in df.columns:
        return df[name].fillna("").astype(str)
    return pd.Series("", index=df.index, dtype=object)


def require_cols(df: pd.DataFrame, need: List[str], df_name: str) -> None:
    """Check if a dataframe contains all required columns."""
    missing = [c for c in need if c not in df.columns]
    if missing:
        logger.error("%s is missing columns: %s", df_name, missing)
        raise ValueError(f"{df_name} is missing columns: {missing}")
