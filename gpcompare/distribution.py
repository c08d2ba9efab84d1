"""
Metric distributions: mean, median, p10/p25/p75/p90, min and max over the
strictly positive values of a sample.

Zero or negative values mean "not reported" and are left out of every
statistic. Percentiles interpolate linearly between the closest ranks
(index = p/100 * (n - 1)), which is numpy's default ``linear`` method.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Iterable

import numpy as np

from .utils import round_half_up

PERCENTILES = (10, 25, 50, 75, 90)
DEFAULT_DECIMALS = 1
# QOF achievement is a 0-1 ratio
HIGH_PRECISION_DECIMALS = 4


@dataclass(frozen=True)
class MetricDistribution:
    mean: float = 0.0
    median: float = 0.0
    p10: float = 0.0
    p25: float = 0.0
    p75: float = 0.0
    p90: float = 0.0
    min: float = 0.0
    max: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, float]) -> "MetricDistribution":
        return cls(**{k: float(data.get(k, 0.0)) for k in cls.__dataclass_fields__})


ZERO_DISTRIBUTION = MetricDistribution()


def _positive(values: Iterable[float]) -> np.ndarray:
    arr = np.asarray(list(values), dtype=float)
    # NaN > 0 is False, so NaN is dropped too
    return arr[arr > 0]


def sample_percentile(values: Iterable[float], percentile: float) -> float:
    """Percentile of the raw sample (no filtering, no rounding); 0 for an empty sample."""
    arr = np.asarray(list(values), dtype=float)
    if arr.size == 0:
        return 0.0
    return float(np.percentile(arr, percentile, method="linear"))


def calculate_distribution(values: Iterable[float], high_precision: bool = False) -> MetricDistribution:
    """Distribution of the values > 0; all zeros when none qualify."""
    filtered = np.sort(_positive(values))
    if filtered.size == 0:
        return ZERO_DISTRIBUTION

    decimals = HIGH_PRECISION_DECIMALS if high_precision else DEFAULT_DECIMALS
    p10, p25, p50, p75, p90 = np.percentile(filtered, PERCENTILES, method="linear")

    def r(v) -> float:
        return round_half_up(float(v), decimals)

    return MetricDistribution(
        mean=r(filtered.mean()),
        median=r(p50),
        p10=r(p10),
        p25=r(p25),
        p75=r(p75),
        p90=r(p90),
        min=r(filtered[0]),
        max=r(filtered[-1]),
    )
