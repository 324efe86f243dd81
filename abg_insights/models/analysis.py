"""
Request and response models for the ABG Insights API.
"""
from typing import List, Optional

from pydantic import BaseModel, Field

from abg_insights.core.measurement import Measurement


class MeasurementInput(BaseModel):
    """ABG values as submitted. Range checks happen in the orchestrator."""
    ph: float = Field(..., description="Acidity index, accepted 6.8 to 7.8")
    pco2: float = Field(..., description="pCO2 in mmHg, accepted 10 to 100")
    hco3: float = Field(..., description="HCO3 in mEq/L, accepted 5 to 50")
    pao2: float = Field(..., description="PaO2 in mmHg, accepted 40 to 600")
    be: float = Field(..., description="Base excess in mEq/L, accepted -30 to 30")

    def to_measurement(self) -> Measurement:
        return Measurement(ph=self.ph, pco2=self.pco2, hco3=self.hco3, pao2=self.pao2, be=self.be)


class AnalysisRecordResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    measurement: MeasurementInput
    interpretation: str = ""
    suggested_conditions: str = ""
    treatment_recommendations: str = ""
    timestamp: str
    is_loading: bool
    error: Optional[str] = None
    status: str


class SessionResponse(BaseModel):
    session_id: str
    current: Optional[AnalysisRecordResponse] = None
    history: List[AnalysisRecordResponse] = Field(default_factory=list)
    is_loading: bool = False
    error: Optional[str] = None
    error_code: Optional[str] = None


class HistoryResponse(BaseModel):
    session_id: str
    count: int
    analyses: List[AnalysisRecordResponse]


class ClearHistoryResponse(BaseModel):
    session_id: str
    removed: int


class AssessmentResponse(BaseModel):
    acid_base: str
    compensation: Optional[str] = None
    oxygenation: str
    notes: List[str] = Field(default_factory=list)
    summary: str


class ErrorResponse(BaseModel):
    error: str
    message: str
    session: Optional[SessionResponse] = None


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: str
    uptime_seconds: float
    ai_mode: str
    analysis_mode: str = "full"
    sessions: int
