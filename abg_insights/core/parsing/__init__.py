"""
Reply Parsing Module
"""
from .sections import (
    AnalysisSections,
    parse_sections,
    INTERPRETATION_FALLBACK,
    CONDITIONS_FALLBACK,
    TREATMENT_FALLBACK,
)

__all__ = [
    "AnalysisSections",
    "parse_sections",
    "INTERPRETATION_FALLBACK",
    "CONDITIONS_FALLBACK",
    "TREATMENT_FALLBACK",
]
