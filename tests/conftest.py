"""
Pytest Configuration and Fixtures

Shared fixtures for the ABG analysis tests.
"""
import os
import sys
from pathlib import Path

import pytest

# Never reach the real provider from tests
os.environ.pop("GEMINI_API_KEY", None)
os.environ.pop("GOOGLE_API_KEY", None)

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from abg_insights.core.measurement import Measurement


FULL_REPLY = """## INTERPRETATION
- Primary disorder: metabolic acidosis
- Partially compensated by respiratory alkalosis

## SUGGESTED CONDITIONS
- Diabetic ketoacidosis
- Lactic acidosis

## TREATMENT RECOMMENDATIONS
- Fluid resuscitation
- Repeat ABG in 2 hours
"""


class StubAnalyzer:
    """Collaborator returning a fixed reply, or raising a fixed error."""

    def __init__(self, reply: str = FULL_REPLY, error: Exception = None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def perform_full_analysis(self, measurement: Measurement) -> str:
        self.calls.append(measurement)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def full_reply() -> str:
    return FULL_REPLY


@pytest.fixture
def normal_measurement() -> Measurement:
    """Textbook normal ABG."""
    return Measurement(ph=7.40, pco2=40.0, hco3=24.0, pao2=95.0, be=0.0)


@pytest.fixture
def acidotic_measurement() -> Measurement:
    """Partially compensated metabolic acidosis."""
    return Measurement(ph=7.28, pco2=30.0, hco3=14.0, pao2=88.0, be=-10.0)


@pytest.fixture
def invalid_measurement() -> Measurement:
    """pH just below the accepted range."""
    return Measurement(ph=6.79, pco2=40.0, hco3=24.0, pao2=95.0, be=0.0)


@pytest.fixture
def stub_analyzer() -> StubAnalyzer:
    return StubAnalyzer()


@pytest.fixture
def make_analyzer():
    """Factory for StubAnalyzer with a custom reply or error."""
    return StubAnalyzer
