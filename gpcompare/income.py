#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Indicative practice income from list size and QOF points.

income = list_size * global sum rate
       + qof_points * QOF point value
       + list_size * typical enhanced services rate

Rates are the NHS 2025/26 GMS contract figures.
"""

from __future__ import annotations

from typing import Dict

from .utils import round_half_up

# ------------------ CONFIG ------------------
NHS_RATES = {
    "global_sum_per_patient": 121.79,            # £ per weighted patient
    "qof_point_value": 225.49,                   # £ per point
    "qof_max_points": 564,                       # default QOF ceiling
    "typical_enhanced_services_per_patient": 25,  # £ per patient, estimated average
}
# --------------------------------------------


def income_breakdown(list_size: float, qof_points: float) -> Dict[str, float]:
    """Unrounded income components, keyed the way the comparison page shows them."""
    return {
        "globalSum": list_size * NHS_RATES["global_sum_per_patient"],
        "qof": qof_points * NHS_RATES["qof_point_value"],
        "enhancedServices": list_size * NHS_RATES["typical_enhanced_services_per_patient"],
    }


def estimate_income(list_size: float, qof_points: float) -> int:
    """Estimated annual income rounded to the nearest pound."""
    total = sum(income_breakdown(list_size, qof_points).values())
    return int(round_half_up(total, 0))
