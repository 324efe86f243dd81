from .analysis import (
    MeasurementInput,
    AnalysisRecordResponse,
    SessionResponse,
    HistoryResponse,
    ClearHistoryResponse,
    AssessmentResponse,
    ErrorResponse,
    HealthResponse,
)

__all__ = [
    "MeasurementInput",
    "AnalysisRecordResponse",
    "SessionResponse",
    "HistoryResponse",
    "ClearHistoryResponse",
    "AssessmentResponse",
    "ErrorResponse",
    "HealthResponse",
]
