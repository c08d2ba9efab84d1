"""
Read side of practices.json: loading, practice search and per-metric
comparison of one practice against a peer group.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .aggregates import Aggregate, HIERARCHY, NATIONAL_CODE
from .calculations import Assessment, AssessmentStrategy, metric_assessment, value_to_percentile
from .formatting import format_currency, format_number, format_percent, format_wte
from .practices import patients_per_gp

logger = logging.getLogger(__name__)

LEVELS = ("pcn", "icb", "region", "national")

COMPARISON_LABELS = {
    "pcn": "PCN median",
    "icb": "ICB median",
    "region": "regional median",
    "national": "national median",
}

MIN_QUERY_LENGTH = 2
MAX_SEARCH_RESULTS = 10

# document path -> parsed document, kept for the life of the process
_cache: Dict[str, dict] = {}


class PracticeDataError(Exception):
    """practices.json could not be loaded."""


@dataclass(frozen=True)
class MetricComparison:
    metric: str
    label: str
    value: float
    formatted_value: str
    percentile: float
    assessment: Assessment
    comparison_value: float
    comparison_label: str


def load_practice_data(path: Path) -> dict:
    key = str(Path(path).resolve())
    if key in _cache:
        return _cache[key]
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise PracticeDataError(f"Failed to load practice data from {path}: {e}") from e
    _cache[key] = data
    logger.info("Loaded %s practices (data date: %s)", f"{data.get('practiceCount', 0):,}", data.get("dataDate"))
    return data


def clear_cache() -> None:
    _cache.clear()


def search_practices(lookup: List[dict], query: str) -> List[dict]:
    """Case-insensitive match on code or name, first 10 hits."""
    q = query.lower().strip()
    if len(q) < MIN_QUERY_LENGTH:
        return []
    hits = [p for p in lookup if q in p["code"].lower() or q in p["name"].lower()]
    return hits[:MAX_SEARCH_RESULTS]


def find_practice(practices: List[dict], code: str) -> Optional[dict]:
    return next((p for p in practices if p["code"] == code), None)


def get_aggregate(practice: dict, level: str, aggregates: dict) -> Optional[Aggregate]:
    """
    The practice's peer group at level, or None when that group was
    suppressed for being too small.
    """
    if level == NATIONAL_CODE:
        return Aggregate.from_dict(aggregates["national"])
    if level not in HIERARCHY:
        raise ValueError(f"Unknown comparison level: {level!r}")
    code_col, _, _, key = HIERARCHY[level]
    code = practice.get(code_col, "")
    match = next((a for a in aggregates[key] if a["code"] == code), None)
    return Aggregate.from_dict(match) if match else None


def qof_ratio(practice: dict) -> float:
    return practice["qofPoints"] / practice["qofMaxPoints"] if practice["qofMaxPoints"] > 0 else 0.0


def compare_practice(
    practice: dict,
    aggregate: Aggregate,
    level: str,
    wte_gps: float | None = None,
) -> List[MetricComparison]:
    """
    Key-metric comparisons for the comparison page. wte_gps replaces the
    published WTE GP figure (and so patients per GP) when given.
    """
    adjusted = wte_gps is not None
    effective_wte = wte_gps if adjusted else practice["wteGPs"]
    effective_ppg = patients_per_gp(practice["listSize"], effective_wte)
    suffix = " (adjusted)" if adjusted else ""

    rows: List[tuple[str, str, float, AssessmentStrategy, Callable[[float], str]]] = [
        ("listSize", "List Size", practice["listSize"], AssessmentStrategy.NEUTRAL, format_number),
        ("patientsPerGP", "Patients per GP" + suffix, effective_ppg, AssessmentStrategy.LOWER_IS_BETTER,
         format_number),
        ("wteGPs", "WTE GPs" + suffix, effective_wte, AssessmentStrategy.NEUTRAL, format_wte),
        ("qofAchievement", "QOF Achievement", qof_ratio(practice), AssessmentStrategy.ABSOLUTE_THRESHOLD,
         format_percent),
        ("wteNurses", "WTE Nurses", practice["wteNurses"], AssessmentStrategy.NEUTRAL, format_wte),
        ("estimatedIncome", "Estimated Income", practice["estimatedIncome"], AssessmentStrategy.NEUTRAL,
         format_currency),
    ]

    comparison_label = COMPARISON_LABELS[level]
    out = []
    for metric, label, value, strategy, fmt in rows:
        distribution = aggregate.metrics[metric]
        percentile = value_to_percentile(value, distribution)
        assessment = metric_assessment(label, value, percentile, distribution.median,
                                       comparison_label, strategy, fmt)
        formatted = fmt(value)
        if metric == "qofAchievement" and practice["qofMaxPoints"] <= 0:
            formatted = "N/A"
        out.append(MetricComparison(
            metric=metric,
            label=label,
            value=value,
            formatted_value=formatted,
            percentile=percentile,
            assessment=assessment,
            comparison_value=distribution.median,
            comparison_label=comparison_label,
        ))
    return out
