"""
Peer-group aggregates at region, ICB, PCN and national level.

Practices are grouped by their hierarchy code; a blank code means no
membership at that level. Groups smaller than the level's minimum size are
dropped. The national aggregate always covers every practice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List

import pandas as pd

from .distribution import MetricDistribution, calculate_distribution

logger = logging.getLogger(__name__)

# ------------------------------------------------------------
# Configuration
# ------------------------------------------------------------
NATIONAL_CODE = "national"
NATIONAL_NAME = "England"

# level -> (code column, name column, minimum practices, output key)
HIERARCHY = {
    "region": ("regionCode", "regionName", 5, "regions"),
    "icb": ("icbCode", "icbName", 3, "icbs"),
    "pcn": ("pcnCode", "pcnName", 2, "pcns"),
}

METRICS = [
    "listSize", "wteGPs", "wteNurses", "patientsPerGP",
    "qofAchievement", "dnaRate", "estimatedIncome",
]


@dataclass(frozen=True)
class Aggregate:
    code: str
    name: str
    type: str
    practice_count: int
    metrics: Dict[str, MetricDistribution] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "name": self.name,
            "type": self.type,
            "practiceCount": self.practice_count,
            "metrics": {k: v.to_dict() for k, v in self.metrics.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Aggregate":
        return cls(
            code=data["code"],
            name=data["name"],
            type=data["type"],
            practice_count=int(data["practiceCount"]),
            metrics={k: MetricDistribution.from_dict(v) for k, v in data["metrics"].items()},
        )


def qof_achievement(practices: pd.DataFrame) -> pd.Series:
    """points / ceiling for practices with a positive ceiling."""
    has_ceiling = practices[practices["qofMaxPoints"] > 0]
    return has_ceiling["qofPoints"] / has_ceiling["qofMaxPoints"]


def create_aggregate(practices: pd.DataFrame, code: str, name: str, level: str) -> Aggregate:
    metrics = {}
    for metric in METRICS:
        if metric == "qofAchievement":
            metrics[metric] = calculate_distribution(qof_achievement(practices), high_precision=True)
        else:
            metrics[metric] = calculate_distribution(practices[metric])
    return Aggregate(code=code, name=name, type=level, practice_count=len(practices), metrics=metrics)


def group_aggregates(practices: pd.DataFrame, level: str) -> List[Aggregate]:
    """One aggregate per sufficiently large group at this level, in first-seen order."""
    code_col, name_col, min_size, _ = HIERARCHY[level]
    members = practices[practices[code_col].fillna("") != ""]

    out = []
    suppressed = 0
    for code, group in members.groupby(code_col, sort=False):
        if len(group) < min_size:
            suppressed += 1
            continue
        out.append(create_aggregate(group, code, group[name_col].iloc[0], level))

    logger.info("%s aggregates: %d (suppressed %d under %d practices)",
                level.upper(), len(out), suppressed, min_size)
    return out


def build_aggregates(practices: pd.DataFrame) -> dict:
    """{'national': Aggregate, 'regions': [...], 'icbs': [...], 'pcns': [...]}"""
    aggregates = {
        NATIONAL_CODE: create_aggregate(practices, NATIONAL_CODE, NATIONAL_NAME, NATIONAL_CODE),
    }
    for level, (_, _, _, key) in HIERARCHY.items():
        aggregates[key] = group_aggregates(practices, level)
    return aggregates
