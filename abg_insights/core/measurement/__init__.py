"""
Measurement Module

The ABG value record and its physiologic range validator.
"""
from .models import Measurement, MEASUREMENT_RANGES, MEASUREMENT_UNITS
from .validator import validate, out_of_range_fields

__all__ = [
    "Measurement",
    "MEASUREMENT_RANGES",
    "MEASUREMENT_UNITS",
    "validate",
    "out_of_range_fields",
]
