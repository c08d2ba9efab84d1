"""
Percentile position and assessment of a practice's value against a stored
distribution.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from .distribution import MetricDistribution

logger = logging.getLogger(__name__)

FALLBACK_PERCENTILE = 50.0


class AssessmentLevel(str, Enum):
    GOOD = "good"
    STRETCHED = "stretched"
    CONCERNING = "concerning"
    NEUTRAL = "neutral"


class AssessmentStrategy(str, Enum):
    HIGHER_IS_BETTER = "higher-better"
    LOWER_IS_BETTER = "lower-better"
    NEUTRAL = "neutral"
    # QOF achievement ratio against fixed targets, ignores the peer group
    ABSOLUTE_THRESHOLD = "qof-absolute"


DEFAULT_LABELS = {
    AssessmentLevel.GOOD: "On track",
    AssessmentLevel.STRETCHED: "Stretched",
    AssessmentLevel.CONCERNING: "Needs attention",
    AssessmentLevel.NEUTRAL: "Note",
}

STRATEGY_LABELS = {
    AssessmentStrategy.HIGHER_IS_BETTER: DEFAULT_LABELS,
    AssessmentStrategy.LOWER_IS_BETTER: {
        AssessmentLevel.GOOD: "Good",
        AssessmentLevel.STRETCHED: "High",
        AssessmentLevel.CONCERNING: "Very high",
        AssessmentLevel.NEUTRAL: "Info",
    },
    AssessmentStrategy.NEUTRAL: {level: "Info" for level in AssessmentLevel},
    AssessmentStrategy.ABSOLUTE_THRESHOLD: {
        AssessmentLevel.GOOD: "Excellent",
        AssessmentLevel.NEUTRAL: "Good",
        AssessmentLevel.STRETCHED: "Average",
        AssessmentLevel.CONCERNING: "Below average",
    },
}

# (minimum achievement ratio, level), checked top down
QOF_THRESHOLDS = [
    (0.95, AssessmentLevel.GOOD),
    (0.90, AssessmentLevel.NEUTRAL),
    (0.85, AssessmentLevel.STRETCHED),
]


@dataclass(frozen=True)
class Assessment:
    level: AssessmentLevel
    label: str
    title: str = ""
    message: str = ""


def value_to_percentile(value: float, distribution: MetricDistribution) -> float:
    """
    Percentile (0-100) of value, interpolating linearly between the stored
    min, p10, p25, median, p75, p90 and max.

    Falls back to 50 when no anchor pair brackets the value, which only
    happens for a malformed distribution (e.g. a NaN anchor).
    """
    d = distribution
    if value <= d.min:
        return 0.0
    if value >= d.max:
        return 100.0

    points = [
        (0, d.min), (10, d.p10), (25, d.p25), (50, d.median),
        (75, d.p75), (90, d.p90), (100, d.max),
    ]
    for (lower_pct, lower_val), (upper_pct, upper_val) in zip(points, points[1:]):
        if lower_val <= value <= upper_val:
            span = upper_val - lower_val
            if span == 0:
                return float(lower_pct)
            ratio = (value - lower_val) / span
            return lower_pct + ratio * (upper_pct - lower_pct)

    logger.warning("No percentile anchors bracket %s in %s; using %s", value, d, FALLBACK_PERCENTILE)
    return FALLBACK_PERCENTILE


def assessment_level(percentile: float, higher_is_better: bool = True) -> AssessmentLevel:
    if higher_is_better:
        if percentile >= 50:
            return AssessmentLevel.GOOD
        if percentile >= 25:
            return AssessmentLevel.STRETCHED
        return AssessmentLevel.CONCERNING
    if percentile <= 50:
        return AssessmentLevel.GOOD
    if percentile <= 75:
        return AssessmentLevel.STRETCHED
    return AssessmentLevel.CONCERNING


def qof_assessment_level(achievement: float) -> AssessmentLevel:
    for threshold, level in QOF_THRESHOLDS:
        if achievement >= threshold:
            return level
    return AssessmentLevel.CONCERNING


def classify(value: float, percentile: float, strategy: AssessmentStrategy) -> Assessment:
    """Tier and badge label for a value/percentile under the given strategy."""
    strategy = AssessmentStrategy(strategy)
    if strategy is AssessmentStrategy.ABSOLUTE_THRESHOLD:
        level = qof_assessment_level(value)
    elif strategy is AssessmentStrategy.HIGHER_IS_BETTER:
        level = assessment_level(percentile, higher_is_better=True)
    elif strategy is AssessmentStrategy.LOWER_IS_BETTER:
        level = assessment_level(percentile, higher_is_better=False)
    else:
        level = AssessmentLevel.NEUTRAL
    return Assessment(level=level, label=STRATEGY_LABELS[strategy][level])


def metric_assessment(
    metric_name: str,
    value: float,
    percentile: float,
    comparison_median: float,
    comparison_label: str,
    strategy: AssessmentStrategy = AssessmentStrategy.HIGHER_IS_BETTER,
    format_value: Callable[[float], str] = lambda v: f"{v:,}",
) -> Assessment:
    """classify() plus a title and a one-line explanation against the group median."""
    base = classify(value, percentile, strategy)
    lower_is_better = AssessmentStrategy(strategy) is AssessmentStrategy.LOWER_IS_BETTER
    if lower_is_better:
        comparison = "below" if value <= comparison_median else "above"
    else:
        comparison = "above" if value >= comparison_median else "below"

    shown = format_value(value)
    median = format_value(comparison_median)
    rank = f"{int(math.floor(percentile + 0.5))}th"

    if base.level is AssessmentLevel.GOOD:
        message = (f"Your {metric_name} of {shown} is {comparison} the {comparison_label} of {median}. "
                   f"You're in the {rank} percentile.")
    elif base.level is AssessmentLevel.STRETCHED:
        message = (f"Your {metric_name} of {shown} is {comparison} the {comparison_label} of {median}. "
                   f"This puts you in the {rank} percentile.")
    elif base.level is AssessmentLevel.NEUTRAL:
        message = (f"Your {metric_name} of {shown} is {comparison} the {comparison_label} of {median} "
                   f"({rank} percentile).")
    else:
        message = (f"Your {metric_name} of {shown} is notably {comparison} the {comparison_label} of {median}. "
                   f"You're in the {rank} percentile - worth reviewing.")

    return Assessment(level=base.level, label=base.label,
                      title=DEFAULT_LABELS[base.level],
                      message=message)
