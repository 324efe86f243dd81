"""
Exception Hierarchy

Every error the package knows about carries a stable machine-readable code
and a details dict, so the session layer and the API can surface it as data.
"""
from typing import Optional, Dict, Any, List


class AbgInsightsError(Exception):
    """Base exception for all ABG Insights errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class MeasurementValidationError(AbgInsightsError):
    """A measurement has one or more values outside physiologic bounds."""

    def __init__(
        self,
        message: str = "Invalid ABG values. Please check your inputs.",
        fields: Optional[List[str]] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details={"fields": list(fields or []), **(details or {})}
        )
        self.fields = list(fields or [])


class ConcurrentRequestError(AbgInsightsError):
    """An analysis was requested while another one is still in flight."""

    def __init__(
        self,
        message: str = "An analysis is already in progress.",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="CONCURRENT_REQUEST",
            details=details
        )


class AnalysisProviderError(AbgInsightsError):
    """The language-model provider failed or returned nothing usable."""

    def __init__(
        self,
        message: str,
        provider: str = "gemini",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="PROVIDER_ERROR",
            details={"provider": provider, **(details or {})}
        )
        self.provider = provider


class AnalysisFailure(AbgInsightsError):
    """An accepted analysis did not produce a usable reply."""

    DEFAULT_MESSAGE = "An error occurred during analysis"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message or self.DEFAULT_MESSAGE,
            code="ANALYSIS_FAILED",
            details=details
        )

    @classmethod
    def from_exception(cls, exc: BaseException) -> "AnalysisFailure":
        """Wrap whatever the collaborator raised, keeping its message."""
        if isinstance(exc, AbgInsightsError):
            message = exc.message
        else:
            message = str(exc)
        return cls(
            message=message or None,
            details={"cause": type(exc).__name__}
        )


class SessionNotFoundError(AbgInsightsError):
    """No session is registered under the requested id."""

    def __init__(self, session_id: str):
        super().__init__(
            message=f"Session {session_id} not found",
            code="SESSION_NOT_FOUND",
            details={"session_id": session_id}
        )
        self.session_id = session_id
