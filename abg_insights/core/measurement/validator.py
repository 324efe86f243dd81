"""
Measurement Validator

Pure range checks. A measurement is either usable as a whole or rejected;
there is no partial validity.
"""
from __future__ import annotations

import math
from typing import List

from .models import Measurement, MEASUREMENT_RANGES


def _in_range(value, low: float, high: float) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if math.isnan(value):
        return False
    return low <= value <= high


def out_of_range_fields(measurement: Measurement) -> List[str]:
    """Names of the fields lying outside their closed interval, in field order."""
    return [
        name
        for name, (low, high) in MEASUREMENT_RANGES.items()
        if not _in_range(getattr(measurement, name, None), low, high)
    ]


def validate(measurement: Measurement) -> bool:
    """True iff every field lies within its closed physiologic range."""
    return not out_of_range_fields(measurement)
