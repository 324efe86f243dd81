"""
Session State

Analysis records and the per-session state that owns them: the current
record, the most-recent-first history, the in-flight flag and the last error.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from abg_insights.core.measurement import Measurement
from abg_insights.core.parsing import AnalysisSections
from abg_insights.utils import AbgInsightsError


class AnalysisStatus(str, Enum):
    """Lifecycle state of one analysis attempt."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class AnalysisRecord:
    """
    One analysis attempt.

    Created pending (``is_loading`` true, text empty); transitions exactly
    once to completed or failed through :meth:`completed` / :meth:`failed`,
    each of which returns a new record with the same id.
    """
    id: str
    measurement: Measurement
    user_id: Optional[str] = None
    interpretation: str = ""
    suggested_conditions: str = ""
    treatment_recommendations: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    is_loading: bool = False
    error: Optional[str] = None

    @classmethod
    def pending(cls, measurement: Measurement) -> "AnalysisRecord":
        return cls(
            id=str(uuid.uuid4()),
            measurement=measurement,
            is_loading=True,
        )

    @property
    def status(self) -> AnalysisStatus:
        if self.is_loading:
            return AnalysisStatus.PENDING
        if self.error is not None:
            return AnalysisStatus.FAILED
        return AnalysisStatus.COMPLETED

    def completed(self, sections: AnalysisSections) -> "AnalysisRecord":
        return replace(
            self,
            interpretation=sections.interpretation,
            suggested_conditions=sections.conditions,
            treatment_recommendations=sections.treatment,
            is_loading=False,
            error=None,
        )

    def failed(self, reason: str) -> "AnalysisRecord":
        return replace(self, is_loading=False, error=reason)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "measurement": self.measurement.to_dict(),
            "interpretation": self.interpretation,
            "suggested_conditions": self.suggested_conditions,
            "treatment_recommendations": self.treatment_recommendations,
            "timestamp": self.timestamp.isoformat(),
            "is_loading": self.is_loading,
            "error": self.error,
            "status": self.status.value,
        }


@dataclass
class SessionState:
    """
    Mutable state of one user session.

    Only the orchestrator writes to it. ``current`` and ``history`` are
    independent views: clearing one never clears the other, except that
    deleting a record from history also drops it as current.
    """
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    current: Optional[AnalysisRecord] = None
    history: List[AnalysisRecord] = field(default_factory=list)
    is_loading: bool = False
    error: Optional[str] = None
    error_code: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # -------------------------------------------------
    # Error field
    # -------------------------------------------------
    def set_error(self, exc: AbgInsightsError) -> None:
        self.error = exc.message
        self.error_code = exc.code

    def reset_error(self) -> None:
        self.error = None
        self.error_code = None

    # -------------------------------------------------
    # History store
    # -------------------------------------------------
    def find(self, record_id: str) -> Optional[AnalysisRecord]:
        for record in self.history:
            if record.id == record_id:
                return record
        return None

    def prepend(self, record: AnalysisRecord) -> None:
        """Insert at the front, replacing any record already holding this id."""
        self.history = [record] + [r for r in self.history if r.id != record.id]

    def remove(self, record_id: str) -> bool:
        remaining = [r for r in self.history if r.id != record_id]
        removed = len(remaining) != len(self.history)
        self.history = remaining
        return removed

    def latest(self, n: Optional[int] = None) -> List[AnalysisRecord]:
        if n is None:
            return list(self.history)
        return self.history[:max(n, 0)]

    def snapshot(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "current": self.current.to_dict() if self.current else None,
            "history": [r.to_dict() for r in self.history],
            "is_loading": self.is_loading,
            "error": self.error,
            "error_code": self.error_code,
        }
