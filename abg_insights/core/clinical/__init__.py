"""
Clinical Rules Layer

Deterministic acid-base and oxygenation classification of an ABG.

Usage:
    from abg_insights.core.clinical import assess

    assessment = assess(measurement)
    print(assessment.summary())
"""
from .acid_base import (
    assess,
    classify_oxygenation,
    AbgAssessment,
    AcidBaseStatus,
    CompensationStatus,
    OxygenationStatus,
)

__all__ = [
    "assess",
    "classify_oxygenation",
    "AbgAssessment",
    "AcidBaseStatus",
    "CompensationStatus",
    "OxygenationStatus",
]
