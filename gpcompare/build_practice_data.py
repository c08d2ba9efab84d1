#!/usr/bin/env python
# -*- coding: utf-8 -*-
r"""
NHS extracts -> practices.json for the GP practice comparison tool
- Finds the workforce, registration, QOF reference and QOF achievement CSVs
  in the raw-data folder by filename
- Joins them into one record per practice and derives patients per GP and
  estimated income
- Builds national / region / ICB / PCN aggregates with metric distributions
- Writes a single JSON document (nothing is written if the workforce file is missing)

Usage:
  python -m gpcompare.build_practice_data \
    --raw-dir raw-data \
    --out data/practices.json \
    --data-date "November 2025"
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

import numpy as np
import pandas as pd

from . import gppatientregister, qof, workforce
from .aggregates import build_aggregates
from .practices import build_lookup, join_practices
from .utils import find_file, setup_logger


logger = logging.getLogger(__name__)

# ----------------------------- Defaults --------------------------------
DEFAULT_RAW_DIR = "raw-data"
DEFAULT_OUT = "data/practices.json"
DEFAULT_DATA_DATE = "November 2025"


# ----------------------------- Helpers ---------------------------------
def iso_timestamp(now: datetime | None = None) -> str:
    """UTC timestamp like 2025-11-30T09:15:02.123Z."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _json_default(obj):
    if isinstance(obj, np.generic):
        return obj.item()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def build_document(practices: pd.DataFrame, aggregates: dict, data_date: str,
                   generated_at: str | None = None) -> dict:
    return {
        "generatedAt": generated_at or iso_timestamp(),
        "dataDate": data_date,
        "practiceCount": len(practices),
        "practices": practices.to_dict(orient="records"),
        "aggregates": {
            "national": aggregates["national"].to_dict(),
            "regions": [a.to_dict() for a in aggregates["regions"]],
            "icbs": [a.to_dict() for a in aggregates["icbs"]],
            "pcns": [a.to_dict() for a in aggregates["pcns"]],
        },
        "lookup": build_lookup(practices),
    }


def write_document(doc: dict, out_file: Path) -> None:
    out_file.parent.mkdir(parents=True, exist_ok=True)
    with open(out_file, "w", encoding="utf-8") as f:
        json.dump(doc, f, indent=2, default=_json_default)
    size_mb = out_file.stat().st_size / (1024 * 1024)
    logger.info("Wrote output: %s (%.2f MB)", out_file, size_mb)


# ----------------------------- Core Logic ------------------------------
def run(raw_dir: Path, out_file: Path, data_date: str = DEFAULT_DATA_DATE) -> dict:
    logger.info("Reading data files from %s", raw_dir)

    wf = workforce.load_workforce(find_file(raw_dir, workforce.FILE_PATTERN))
    patients = gppatientregister.load_registration_map(find_file(raw_dir, gppatientregister.FILE_PATTERN))
    max_points = qof.load_max_points_map(find_file(raw_dir, qof.ORG_REFERENCE_PATTERN))
    achievement = qof.load_achievement_map(qof.find_achievement_files(raw_dir))

    logger.info("Processing practices...")
    practices, _ = join_practices(wf, patients, max_points, achievement)

    logger.info("Building aggregates...")
    aggregates = build_aggregates(practices)

    doc = build_document(practices, aggregates, data_date)
    write_document(doc, out_file)

    logger.info("=== Summary ===")
    logger.info("Practices: %s", f"{doc['practiceCount']:,}")
    logger.info("PCNs: %d | ICBs: %d | Regions: %d",
                len(aggregates["pcns"]), len(aggregates["icbs"]), len(aggregates["regions"]))
    logger.info("National median patients/GP: %s",
                aggregates["national"].metrics["patientsPerGP"].median)
    return doc


# ----------------------------- CLI -------------------------------------
def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Build practices.json from NHS Digital CSV extracts")
    p.add_argument("--raw-dir", type=str, default=DEFAULT_RAW_DIR, help="Folder holding the downloaded CSVs")
    p.add_argument("--out", type=str, default=DEFAULT_OUT, help="Path to write the JSON document")
    p.add_argument("--data-date", type=str, default=DEFAULT_DATA_DATE, help="Label for the source data month")
    p.add_argument("-v", "--verbose", action="count", default=1,
                   help="Verbosity: -v=INFO (default), -vv=DEBUG, none=WARNING")
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logger(args.verbose)
    try:
        run(Path(args.raw_dir), Path(args.out), args.data_date)
    except Exception as e:
        logger.exception("Failed: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
