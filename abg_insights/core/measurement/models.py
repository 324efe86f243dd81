"""
Measurement domain model.

Defines the immutable five-value arterial blood-gas reading and the
physiologic bounds each value must fall within to be analysed.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Dict, Tuple


# ── Physiologic bounds (closed intervals) ─────────────────────────────────────
MEASUREMENT_RANGES: Dict[str, Tuple[float, float]] = {
    "ph":   (6.8, 7.8),
    "pco2": (10.0, 100.0),
    "hco3": (5.0, 50.0),
    "pao2": (40.0, 600.0),
    "be":   (-30.0, 30.0),
}

MEASUREMENT_UNITS: Dict[str, str] = {
    "ph":   "",
    "pco2": "mmHg",
    "hco3": "mEq/L",
    "pao2": "mmHg",
    "be":   "mEq/L",
}

MEASUREMENT_LABELS: Dict[str, str] = {
    "ph":   "pH",
    "pco2": "pCO2",
    "hco3": "HCO3",
    "pao2": "PaO2",
    "be":   "BE",
}


@dataclass(frozen=True)
class Measurement:
    """
    One arterial blood-gas reading.

    Attributes:
        ph: Acidity index.
        pco2: Carbon-dioxide partial pressure (mmHg).
        hco3: Bicarbonate concentration (mEq/L).
        pao2: Oxygen partial pressure (mmHg).
        be: Base excess (mEq/L).
    """
    ph: float
    pco2: float
    hco3: float
    pao2: float
    be: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    def describe(self) -> str:
        """Bullet list of the values with units, as written into prompts."""
        lines = []
        for name, value in self.to_dict().items():
            unit = MEASUREMENT_UNITS[name]
            suffix = f" {unit}" if unit else ""
            lines.append(f"- {MEASUREMENT_LABELS[name]}: {value}{suffix}")
        return "\n".join(lines)
