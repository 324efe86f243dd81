"""
Utilities Package - Logging and Exception Handling
"""
from .logging import get_logger, setup_logging, session_context, current_session_id
from .exceptions import (
    AbgInsightsError,
    MeasurementValidationError,
    ConcurrentRequestError,
    AnalysisProviderError,
    AnalysisFailure,
    SessionNotFoundError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "session_context",
    "current_session_id",
    "AbgInsightsError",
    "MeasurementValidationError",
    "ConcurrentRequestError",
    "AnalysisProviderError",
    "AnalysisFailure",
    "SessionNotFoundError",
]
