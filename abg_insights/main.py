"""
ABG Insights - FastAPI Application

HTTP facade over the analysis orchestrator:
- Session lifecycle (in-memory, per user context)
- ABG analysis submission (awaited or fire-and-forget)
- Current record, error and history management
- Rule-based acid-base assessment
"""
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional
import asyncio

from fastapi import FastAPI, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from abg_insights.config import APP_TITLE, APP_VERSION, settings
from abg_insights.core.clinical import assess
from abg_insights.core.llm import AbgAnalyzer
from abg_insights.core.measurement import validate, out_of_range_fields
from abg_insights.core.session import (
    AnalysisOrchestrator,
    AnalysisStatus,
    SessionRegistry,
    SessionState,
)
from abg_insights.models import (
    MeasurementInput,
    AnalysisRecordResponse,
    SessionResponse,
    HistoryResponse,
    ClearHistoryResponse,
    AssessmentResponse,
    ErrorResponse,
    HealthResponse,
)
from abg_insights.utils import get_logger, setup_logging, SessionNotFoundError

logger = get_logger(__name__)

# Session error code -> HTTP status for rejected or failed analyses
_ERROR_STATUS = {
    "VALIDATION_ERROR": 422,
    "CONCURRENT_REQUEST": 409,
    "ANALYSIS_FAILED": 502,
}


# ---- Application Lifespan ----

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level, settings.log_file)
    logger.info(f"{APP_TITLE} {APP_VERSION} ready to accept requests")
    yield
    pending = list(app.state.pending_tasks)
    if pending:
        logger.info(f"Waiting for {len(pending)} in-flight analyses before shutdown")
        await asyncio.gather(*pending, return_exceptions=True)
    logger.info(f"{APP_TITLE} shut down.")


# ---- FastAPI Application ----

app = FastAPI(
    title=APP_TITLE,
    description="Arterial blood-gas interpretation with AI-generated clinical insights",
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---- In-memory state (lost on restart) ----
app.state.registry = SessionRegistry()
app.state.orchestrator = AnalysisOrchestrator(AbgAnalyzer())
app.state.pending_tasks = set()
START_TIME = datetime.now()


# ---- Utility Functions ----

def _get_session(request: Request, session_id: str) -> SessionState:
    try:
        return request.app.state.registry.get(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


def _orchestrator(request: Request) -> AnalysisOrchestrator:
    return request.app.state.orchestrator


def _rejection(session: SessionState) -> JSONResponse:
    status_code = _ERROR_STATUS.get(session.error_code or "", 400)
    return JSONResponse(
        status_code=status_code,
        content={
            "error": session.error_code or "UNKNOWN_ERROR",
            "message": session.error or "",
            "session": session.snapshot(),
        },
    )


# ---- Health ----

def _health(request: Request) -> HealthResponse:
    analyzer = request.app.state.orchestrator.analyzer
    return HealthResponse(
        status="healthy",
        version=APP_VERSION,
        timestamp=datetime.now().isoformat(),
        uptime_seconds=(datetime.now() - START_TIME).total_seconds(),
        ai_mode="mock" if getattr(analyzer, "mock_mode", False) else "gemini",
        analysis_mode=getattr(analyzer, "analysis_mode", "full"),
        sessions=len(request.app.state.registry),
    )


@app.get("/", response_model=HealthResponse, tags=["Health"])
async def root(request: Request):
    """API root - health check."""
    return _health(request)


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(request: Request):
    """Health check endpoint."""
    return _health(request)


# ---- Sessions ----

@app.post("/api/v1/sessions", response_model=SessionResponse, status_code=201, tags=["Sessions"])
async def create_session(request: Request):
    """Open a new analysis session."""
    session = request.app.state.registry.create()
    return session.snapshot()


@app.get("/api/v1/sessions/{session_id}", response_model=SessionResponse, tags=["Sessions"])
async def get_session(session_id: str, request: Request):
    """Current record, history, in-flight flag and last error."""
    return _get_session(request, session_id).snapshot()


# ---- Analysis ----

@app.post(
    "/api/v1/sessions/{session_id}/analyses",
    response_model=AnalysisRecordResponse,
    responses={
        202: {"model": AnalysisRecordResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        502: {"model": AnalysisRecordResponse},
    },
    tags=["Analysis"],
)
async def start_analysis(
    session_id: str,
    payload: MeasurementInput,
    request: Request,
    wait: bool = Query(True, description="Wait for the analysis to finish"),
):
    """
    Submit an ABG for analysis.

    With ``wait=true`` the completed (200) or failed (502) record is returned.
    With ``wait=false`` the pending record is returned (202) and the outcome
    is applied to the session when it arrives.
    """
    session = _get_session(request, session_id)
    orchestrator = _orchestrator(request)
    measurement = payload.to_measurement()

    if wait:
        record = await orchestrator.start_analysis(session, measurement)
        if record is None:
            return _rejection(session)
        if record.status is AnalysisStatus.FAILED:
            return JSONResponse(status_code=502, content=record.to_dict())
        return record.to_dict()

    task = orchestrator.submit_analysis(session, measurement)
    if task is None:
        return _rejection(session)
    pending_tasks = request.app.state.pending_tasks
    pending_tasks.add(task)
    task.add_done_callback(pending_tasks.discard)
    return JSONResponse(status_code=202, content=session.current.to_dict())


@app.delete("/api/v1/sessions/{session_id}/current", response_model=SessionResponse, tags=["Analysis"])
async def clear_current(session_id: str, request: Request):
    """Drop the current record and error; history is kept."""
    session = _get_session(request, session_id)
    _orchestrator(request).clear_current(session)
    return session.snapshot()


@app.delete("/api/v1/sessions/{session_id}/error", response_model=SessionResponse, tags=["Analysis"])
async def clear_error(session_id: str, request: Request):
    session = _get_session(request, session_id)
    _orchestrator(request).clear_error(session)
    return session.snapshot()


# ---- History ----

@app.get("/api/v1/sessions/{session_id}/history", response_model=HistoryResponse, tags=["History"])
async def list_history(
    session_id: str,
    request: Request,
    limit: Optional[int] = Query(None, ge=0, description="Return only the latest N analyses"),
):
    """Completed analyses, most recent first."""
    session = _get_session(request, session_id)
    records = session.latest(limit)
    return HistoryResponse(
        session_id=session.session_id,
        count=len(session.history),
        analyses=[r.to_dict() for r in records],
    )


@app.post(
    "/api/v1/sessions/{session_id}/history/{record_id}/load",
    response_model=AnalysisRecordResponse,
    tags=["History"],
)
async def load_from_history(session_id: str, record_id: str, request: Request):
    """Make a past analysis the current one."""
    session = _get_session(request, session_id)
    record = _orchestrator(request).load_from_history(session, record_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Analysis {record_id} not found in history")
    return record.to_dict()


@app.delete("/api/v1/sessions/{session_id}/history/{record_id}", status_code=204, tags=["History"])
async def delete_from_history(session_id: str, record_id: str, request: Request):
    """Delete one analysis. Unknown ids are accepted and ignored."""
    session = _get_session(request, session_id)
    _orchestrator(request).delete_from_history(session, record_id)
    return Response(status_code=204)


@app.delete(
    "/api/v1/sessions/{session_id}/history",
    response_model=ClearHistoryResponse,
    tags=["History"],
)
async def clear_history(session_id: str, request: Request):
    session = _get_session(request, session_id)
    removed = _orchestrator(request).clear_history(session)
    return ClearHistoryResponse(session_id=session.session_id, removed=removed)


# ---- Rule-based assessment ----

@app.post("/api/v1/abg/assess", response_model=AssessmentResponse, tags=["Assessment"])
async def assess_abg(payload: MeasurementInput):
    """
    Deterministic acid-base and oxygenation classification.

    Out-of-range measurements are rejected with 422 and the offending fields.
    """
    measurement = payload.to_measurement()
    if not validate(measurement):
        fields = out_of_range_fields(measurement)
        raise HTTPException(
            status_code=422,
            detail={"error": "VALIDATION_ERROR", "fields": fields},
        )

    assessment = assess(measurement)
    return AssessmentResponse(
        **assessment.to_dict(),
        summary=assessment.summary(),
    )


# ---- Run with uvicorn ----
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
