"""
Session Module

Analysis records, per-session state with its history store, the
orchestrator that mutates them, and the in-memory session registry.

Usage:
    from abg_insights.core.session import AnalysisOrchestrator, SessionState

    orchestrator = AnalysisOrchestrator(analyzer)
    session = SessionState()
    record = await orchestrator.start_analysis(session, measurement)
"""
from .state import AnalysisRecord, AnalysisStatus, SessionState
from .orchestrator import AnalysisOrchestrator, AnalysisCollaborator
from .registry import SessionRegistry

__all__ = [
    "AnalysisRecord",
    "AnalysisStatus",
    "SessionState",
    "AnalysisOrchestrator",
    "AnalysisCollaborator",
    "SessionRegistry",
]
