#!/usr/bin/env python
# -*- coding: utf-8 -*-
r"""
Compare one GP practice against its PCN, ICB, region or England.

Usage:
  python -m gpcompare.compare_practice --data data/practices.json --code A81001 --level pcn
  python -m gpcompare.compare_practice --search "riverside"
  python -m gpcompare.compare_practice --code A81001 --wte-gps 5.5
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
from pathlib import Path

from .build_practice_data import DEFAULT_OUT
from .income import income_breakdown
from .formatting import format_currency
from .practice_data import (
    LEVELS,
    PracticeDataError,
    compare_practice,
    find_practice,
    get_aggregate,
    load_practice_data,
    search_practices,
)
from .utils import setup_logger


logger = logging.getLogger(__name__)


def run(data_file: Path, code: str, level: str, wte_gps: float | None = None) -> int:
    data = load_practice_data(data_file)

    practice = find_practice(data["practices"], code)
    if practice is None:
        logger.error("No practice with code %s", code)
        return 2

    aggregate = get_aggregate(practice, level, data["aggregates"])
    if aggregate is None:
        logger.error("No %s aggregate for %s (group too small); try a wider level.", level.upper(), code)
        return 3

    print(f"{practice['name']} ({practice['code']}), {practice['postcode']}")
    print(f"Comparing against {aggregate.practice_count:,} practices in {aggregate.name} ({data['dataDate']})")
    print()
    for c in compare_practice(practice, aggregate, level, wte_gps):
        print(f"  {c.label:<30} {c.formatted_value:>12}  {c.percentile:5.0f}th  [{c.assessment.label}]")
        print(f"      {c.assessment.message}")

    parts = income_breakdown(practice["listSize"], practice["qofPoints"])
    print()
    print("Income estimate (2025/26 rates):")
    print(f"  Global Sum                {format_currency(parts['globalSum']):>12}")
    print(f"  QOF                       {format_currency(parts['qof']):>12}")
    print(f"  Enhanced Services (est.)  {format_currency(parts['enhancedServices']):>12}")
    return 0


def positive_wte(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {text!r}")
    if not math.isfinite(value) or value <= 0:
        raise argparse.ArgumentTypeError(f"WTE must be a positive number, got {text!r}")
    return value


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Compare a GP practice with its peer group")
    p.add_argument("--data", type=str, default=DEFAULT_OUT, help="Path to practices.json")
    target = p.add_mutually_exclusive_group(required=True)
    target.add_argument("--code", type=str, help="Practice ODS code, e.g. A81001")
    target.add_argument("--search", type=str, help="Find practices by code or name")
    p.add_argument("--level", choices=LEVELS, default="pcn", help="Comparison group")
    p.add_argument("--wte-gps", type=positive_wte, default=None, help="Use your own WTE GP figure")
    p.add_argument("-v", "--verbose", action="count", default=0,
                   help="Verbosity: none=WARNING (default), -v=INFO, -vv=DEBUG")
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logger(args.verbose)
    try:
        if args.search is not None:
            data = load_practice_data(Path(args.data))
            for p in search_practices(data["lookup"], args.search):
                print(f"{p['code']}  {p['name']}  {p['postcode']}")
            return
        status = run(Path(args.data), args.code, args.level, args.wte_gps)
    except PracticeDataError as e:
        logger.error("%s", e)
        sys.exit(1)
    if status:
        sys.exit(status)


if __name__ == "__main__":
    main()
