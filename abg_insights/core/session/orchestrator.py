"""
Analysis Orchestrator

Drives one ABG analysis through its lifecycle against an injected
SessionState:

    Idle -> Pending -> {Completed, Failed} -> Idle

At most one request is in flight per session. Every error is recovered
here and written to the session (and, for collaborator failures, to the
record) instead of being raised to the caller. Nothing is retried; a
failed analysis must be resubmitted. A cancelled request ends Failed and
the session returns to Idle.

Usage:
    orchestrator = AnalysisOrchestrator(AbgAnalyzer())
    session = SessionState()
    record = await orchestrator.start_analysis(session, measurement)
"""
from __future__ import annotations

import asyncio
from typing import Optional, Protocol

from abg_insights.core.measurement import Measurement, validate, out_of_range_fields
from abg_insights.core.parsing import parse_sections
from abg_insights.utils import (
    get_logger,
    session_context,
    AnalysisFailure,
    ConcurrentRequestError,
    MeasurementValidationError,
)
from .state import AnalysisRecord, SessionState

logger = get_logger(__name__)

CANCELLED_MESSAGE = "Analysis was cancelled before a reply arrived"


class AnalysisCollaborator(Protocol):
    """Anything that can turn a measurement into a three-section reply."""

    async def perform_full_analysis(self, measurement: Measurement) -> str:
        ...


class AnalysisOrchestrator:
    """
    Coordinates validation, the single outbound analysis call, reply parsing
    and history bookkeeping for a session.

    Stateless apart from the collaborator; all state lives in the
    SessionState passed to each operation.
    """

    def __init__(self, analyzer: AnalysisCollaborator):
        self.analyzer = analyzer

    # -----------------------------
    # Starting an analysis
    # -----------------------------
    def _accept(self, session: SessionState, measurement: Measurement) -> Optional[AnalysisRecord]:
        """
        Gate a request and, if accepted, move the session into Pending.

        Runs without suspending, so a second caller always observes the
        in-flight flag set by the first.
        """
        if not validate(measurement):
            fields = out_of_range_fields(measurement)
            session.set_error(MeasurementValidationError(fields=fields))
            logger.warning(f"Rejected measurement, out of range: {fields}")
            return None

        if session.is_loading:
            session.set_error(ConcurrentRequestError())
            logger.warning("Rejected analysis: request already in flight")
            return None

        record = AnalysisRecord.pending(measurement)
        session.current = record
        session.is_loading = True
        session.reset_error()
        logger.info(f"Analysis {record.id} accepted: {measurement.to_dict()}")
        return record

    def _fail(self, session: SessionState, pending: AnalysisRecord, failure: AnalysisFailure) -> AnalysisRecord:
        failed = pending.failed(failure.message)
        session.current = failed
        session.set_error(failure)
        logger.error(f"Analysis {pending.id} failed: {failure.message}")
        return failed

    def _settle_cancelled(self, session: SessionState, pending: AnalysisRecord) -> None:
        """Close out a request whose task was cancelled; the session becomes Idle."""
        failure = AnalysisFailure(CANCELLED_MESSAGE, details={"cause": "CancelledError"})
        if session.current is not None and session.current.id == pending.id:
            session.current = pending.failed(failure.message)
        session.set_error(failure)
        session.is_loading = False
        logger.warning(f"Analysis {pending.id} cancelled")

    async def _run(self, session: SessionState, pending: AnalysisRecord) -> AnalysisRecord:
        try:
            raw_text = await self.analyzer.perform_full_analysis(pending.measurement)
        except asyncio.CancelledError:
            self._settle_cancelled(session, pending)
            raise
        except Exception as e:
            return self._fail(session, pending, AnalysisFailure.from_exception(e))
        finally:
            session.is_loading = False

        completed = pending.completed(parse_sections(raw_text))
        session.current = completed
        session.prepend(completed)
        logger.info(f"Analysis {pending.id} completed")
        return completed

    async def start_analysis(
        self,
        session: SessionState,
        measurement: Measurement
    ) -> Optional[AnalysisRecord]:
        """
        Validate, run and record one analysis.

        Returns:
            The completed or failed record, or None when the request was
            rejected (invalid measurement or one already in flight).
        """
        with session_context(session.session_id):
            pending = self._accept(session, measurement)
            if pending is None:
                return None
            return await self._run(session, pending)

    def submit_analysis(
        self,
        session: SessionState,
        measurement: Measurement
    ) -> Optional["asyncio.Task[AnalysisRecord]"]:
        """
        Fire-and-forget variant of :meth:`start_analysis`.

        Must be called from within a running event loop. The session is
        Pending when this returns; the task applies the outcome whether or
        not anyone awaits it. Cancelling the task, even before it first
        runs, fails the pending record and returns the session to Idle.
        """
        with session_context(session.session_id):
            pending = self._accept(session, measurement)
            if pending is None:
                return None
            task = asyncio.get_running_loop().create_task(self._run(session, pending))

        def _on_done(done: "asyncio.Task[AnalysisRecord]") -> None:
            # A task cancelled before its first step never enters _run
            if not done.cancelled() or not session.is_loading:
                return
            if session.current is None or session.current.id == pending.id:
                with session_context(session.session_id):
                    self._settle_cancelled(session, pending)

        task.add_done_callback(_on_done)
        return task

    # -----------------------------
    # Current record / error
    # -----------------------------
    def clear_current(self, session: SessionState) -> None:
        session.current = None
        session.reset_error()

    def clear_error(self, session: SessionState) -> None:
        session.reset_error()

    # -----------------------------
    # History
    # -----------------------------
    def load_from_history(self, session: SessionState, record_id: str) -> Optional[AnalysisRecord]:
        """Make a past record current. Unknown ids leave the session untouched."""
        record = session.find(record_id)
        if record is None:
            with session_context(session.session_id):
                logger.debug(f"History lookup miss: {record_id}")
            return None
        session.current = record
        return record

    def delete_from_history(self, session: SessionState, record_id: str) -> bool:
        """Remove a record from history; an id not in history is a no-op."""
        removed = session.remove(record_id)
        if not removed:
            return False
        if session.current is not None and session.current.id == record_id:
            session.current = None
        with session_context(session.session_id):
            logger.info(f"Deleted analysis {record_id} from history")
        return True

    def clear_history(self, session: SessionState) -> int:
        count = len(session.history)
        session.history = []
        with session_context(session.session_id):
            logger.info(f"Cleared {count} analyses from history")
        return count
