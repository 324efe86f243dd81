"""
Acid-Base Classification Rules

Deterministic first-pass reading of an ABG. It names the primary disorder,
the compensation state and the oxygenation grade; it is used for mock-mode
replies and the assessment endpoint, never in place of the model's
interpretation.

Values consumed:
    ph     normal: 7.35-7.45
    pco2  (mmHg)   normal: 35-45
    hco3  (mEq/L)  normal: 22-26
    pao2  (mmHg)   normal: ≥ 80

Rule ordering:
    1. pH outside range  → the system moving in the same direction is primary;
                           both → mixed; opposite system moving against it
                           → partially compensated.
    2. pH inside range   → both systems abnormal in opposite directions
                           → fully compensated, primary by side of 7.40;
                           exactly one abnormal or both in the same
                           direction → mixed.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from abg_insights.core.measurement import Measurement

# ── Thresholds ────────────────────────────────────────────────────────────────

PH_LOW = 7.35
PH_HIGH = 7.45
PH_MIDPOINT = 7.40

PCO2_LOW = 35.0
PCO2_HIGH = 45.0

HCO3_LOW = 22.0
HCO3_HIGH = 26.0

PAO2_NORMAL = 80.0
PAO2_MILD = 60.0
PAO2_MODERATE = 40.0


class AcidBaseStatus(str, Enum):
    NORMAL = "normal"
    METABOLIC_ACIDOSIS = "metabolic_acidosis"
    METABOLIC_ALKALOSIS = "metabolic_alkalosis"
    RESPIRATORY_ACIDOSIS = "respiratory_acidosis"
    RESPIRATORY_ALKALOSIS = "respiratory_alkalosis"
    MIXED_DISORDER = "mixed_disorder"


class CompensationStatus(str, Enum):
    UNCOMPENSATED = "uncompensated"
    PARTIALLY_COMPENSATED = "partially_compensated"
    FULLY_COMPENSATED = "fully_compensated"


class OxygenationStatus(str, Enum):
    NORMAL = "normal"
    HYPOXEMIA_MILD = "hypoxemia_mild"
    HYPOXEMIA_MODERATE = "hypoxemia_moderate"
    HYPOXEMIA_SEVERE = "hypoxemia_severe"


class _Trend(int, Enum):
    """Direction a value pushes pH."""
    ACID = -1
    NONE = 0
    BASE = 1


@dataclass
class AbgAssessment:
    """Result of the rule-based classification of one measurement."""
    acid_base: AcidBaseStatus
    compensation: Optional[CompensationStatus]
    oxygenation: OxygenationStatus
    notes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "acid_base": self.acid_base.value,
            "compensation": self.compensation.value if self.compensation else None,
            "oxygenation": self.oxygenation.value,
            "notes": self.notes,
        }

    def summary(self) -> str:
        disorder = self.acid_base.value.replace("_", " ")
        if self.compensation is not None:
            disorder = f"{self.compensation.value.replace('_', ' ')} {disorder}"
        oxygenation = self.oxygenation.value.replace("_", " ")
        return f"{disorder.capitalize()}; oxygenation {oxygenation}"


# ── Helpers ───────────────────────────────────────────────────────────────────

def _respiratory_trend(pco2: float) -> _Trend:
    # CO2 retention acidifies
    if pco2 > PCO2_HIGH:
        return _Trend.ACID
    if pco2 < PCO2_LOW:
        return _Trend.BASE
    return _Trend.NONE


def _metabolic_trend(hco3: float) -> _Trend:
    if hco3 < HCO3_LOW:
        return _Trend.ACID
    if hco3 > HCO3_HIGH:
        return _Trend.BASE
    return _Trend.NONE


def _primary(trend: _Trend, respiratory: bool) -> AcidBaseStatus:
    if respiratory:
        return (AcidBaseStatus.RESPIRATORY_ACIDOSIS if trend is _Trend.ACID
                else AcidBaseStatus.RESPIRATORY_ALKALOSIS)
    return (AcidBaseStatus.METABOLIC_ACIDOSIS if trend is _Trend.ACID
            else AcidBaseStatus.METABOLIC_ALKALOSIS)


def classify_oxygenation(pao2: float) -> OxygenationStatus:
    if pao2 >= PAO2_NORMAL:
        return OxygenationStatus.NORMAL
    if pao2 >= PAO2_MILD:
        return OxygenationStatus.HYPOXEMIA_MILD
    if pao2 >= PAO2_MODERATE:
        return OxygenationStatus.HYPOXEMIA_MODERATE
    return OxygenationStatus.HYPOXEMIA_SEVERE


def _classify_abnormal_ph(ph_trend: _Trend, resp: _Trend, metab: _Trend, notes: List[str]):
    resp_primary = resp is ph_trend
    metab_primary = metab is ph_trend

    if resp_primary and metab_primary:
        notes.append("Respiratory and metabolic components both drive the pH shift")
        return AcidBaseStatus.MIXED_DISORDER, None

    if not resp_primary and not metab_primary:
        notes.append("pH is abnormal but neither pCO2 nor HCO3 explains it; recheck the sample")
        return AcidBaseStatus.MIXED_DISORDER, None

    if resp_primary:
        primary = _primary(ph_trend, respiratory=True)
        compensating = metab is not _Trend.NONE
    else:
        primary = _primary(ph_trend, respiratory=False)
        compensating = resp is not _Trend.NONE

    compensation = (CompensationStatus.PARTIALLY_COMPENSATED if compensating
                    else CompensationStatus.UNCOMPENSATED)
    return primary, compensation


def _classify_normal_ph(ph: float, resp: _Trend, metab: _Trend, notes: List[str]):
    if resp is _Trend.NONE and metab is _Trend.NONE:
        return AcidBaseStatus.NORMAL, None

    if resp is not _Trend.NONE and metab is not _Trend.NONE and resp is not metab:
        side = _Trend.ACID if ph < PH_MIDPOINT else _Trend.BASE
        primary = _primary(side, respiratory=resp is side)
        return primary, CompensationStatus.FULLY_COMPENSATED

    notes.append("pH is within range despite abnormal pCO2/HCO3")
    return AcidBaseStatus.MIXED_DISORDER, None


def assess(measurement: Measurement) -> AbgAssessment:
    """
    Classify one measurement.

    The measurement is assumed to have passed range validation.
    """
    notes: List[str] = []
    resp = _respiratory_trend(measurement.pco2)
    metab = _metabolic_trend(measurement.hco3)

    if measurement.ph < PH_LOW:
        acid_base, compensation = _classify_abnormal_ph(_Trend.ACID, resp, metab, notes)
    elif measurement.ph > PH_HIGH:
        acid_base, compensation = _classify_abnormal_ph(_Trend.BASE, resp, metab, notes)
    else:
        acid_base, compensation = _classify_normal_ph(measurement.ph, resp, metab, notes)

    return AbgAssessment(
        acid_base=acid_base,
        compensation=compensation,
        oxygenation=classify_oxygenation(measurement.pao2),
        notes=notes,
    )
