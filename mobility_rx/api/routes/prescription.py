"""Prescription recalibration, re-scaling and editing-session endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field, model_validator

from mobility_rx.models.patient import AcuityClass, PatientContext
from mobility_rx.models.prescription import (
    BaselineRecommendation,
    GoalEntry,
    PrescriptionField,
    PrescriptionParameters,
)
from mobility_rx.prescription.acuity import classify_acuity
from mobility_rx.prescription.advisories import OverrideAdvisory
from mobility_rx.prescription.recalibration import recalibrate
from mobility_rx.prescription.rescaler import RescaleResult, rescale
from mobility_rx.prescription.session import (
    PrescriptionCommit,
    PrescriptionEvent,
    PrescriptionSession,
    SessionMode,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/prescription", tags=["prescription"])

# In-process store; a session lives only while one editor has it open
_sessions: dict[str, PrescriptionSession] = {}


class PrescriptionView(BaseModel):
    """Prescription parameters with the derived daily energy."""

    power_watts: float
    duration_minutes: float
    resistance_level: int
    sessions_per_day: int
    total_daily_energy: float

    @classmethod
    def from_parameters(cls, parameters: PrescriptionParameters) -> "PrescriptionView":
        return cls(
            **parameters.model_dump(),
            total_daily_energy=parameters.total_daily_energy,
        )


class RecalibrateRequest(BaseModel):
    current: PrescriptionParameters
    changed_field: PrescriptionField
    new_value: float
    target_energy: float
    patient: PatientContext = Field(default_factory=PatientContext)


class RecalibrateResponse(BaseModel):
    acuity: AcuityClass
    prescription: PrescriptionView


class RescaleRequest(BaseModel):
    baseline: BaselineRecommendation
    new_target_energy: float = Field(gt=0)
    patient: PatientContext = Field(default_factory=PatientContext)


class RescaleResponse(BaseModel):
    prescription: PrescriptionView
    result: RescaleResult


class SessionCreate(BaseModel):
    """Seed a session from a fresh baseline or from stored goals."""

    baseline: Optional[BaselineRecommendation] = None
    goals: Optional[list[GoalEntry]] = None
    patient: PatientContext = Field(default_factory=PatientContext)
    maintain_energy: bool = False

    @model_validator(mode="after")
    def _one_source(self) -> "SessionCreate":
        if self.baseline is None and not self.goals:
            raise ValueError("provide a baseline or previously stored goals")
        return self


class SessionResponse(BaseModel):
    session_id: str
    mode: SessionMode
    acuity: AcuityClass
    target_daily_energy: float
    prescription: PrescriptionView
    baseline: BaselineRecommendation
    advisories: list[OverrideAdvisory] = Field(default_factory=list)


class CommitRequest(BaseModel):
    acknowledge_overrides: bool = False


def _session_response(session: PrescriptionSession) -> SessionResponse:
    return SessionResponse(
        session_id=session.session_id,
        mode=session.mode,
        acuity=session.acuity,
        target_daily_energy=session.target_daily_energy,
        prescription=PrescriptionView.from_parameters(session.parameters),
        baseline=session.state.baseline,
        advisories=session.advisories,
    )


def _get_session(session_id: str) -> PrescriptionSession:
    session = _sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.post("/recalibrate", response_model=RecalibrateResponse)
async def recalibrate_prescription(request: RecalibrateRequest) -> RecalibrateResponse:
    """Recompute a prescription after one field changed, preserving energy."""
    acuity = classify_acuity(request.patient)
    parameters = recalibrate(
        request.current,
        request.changed_field,
        request.new_value,
        request.target_energy,
        acuity,
    )
    return RecalibrateResponse(
        acuity=acuity, prescription=PrescriptionView.from_parameters(parameters)
    )


@router.post("/rescale", response_model=RescaleResponse)
async def rescale_prescription(request: RescaleRequest) -> RescaleResponse:
    """Re-scale the AI baseline onto a new daily energy target (Auto-Optimize)."""
    result = rescale(request.baseline, request.new_target_energy, request.patient)
    return RescaleResponse(
        prescription=PrescriptionView.from_parameters(result.parameters),
        result=result,
    )


@router.post("/sessions", response_model=SessionResponse, status_code=201)
async def create_session(request: SessionCreate) -> SessionResponse:
    """Open an editing session."""
    if request.baseline is not None:
        session = PrescriptionSession(
            request.baseline, request.patient, maintain_energy=request.maintain_energy
        )
    else:
        session = PrescriptionSession.from_goal_entries(
            request.goals, request.patient, maintain_energy=request.maintain_energy
        )
    _sessions[session.session_id] = session
    logger.info(f"Opened prescription session {session.session_id} ({session.acuity.value})")
    return _session_response(session)


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str) -> SessionResponse:
    return _session_response(_get_session(session_id))


@router.post("/sessions/{session_id}/events", response_model=SessionResponse)
async def dispatch_event(session_id: str, event: PrescriptionEvent) -> SessionResponse:
    """Apply one editor interaction."""
    session = _get_session(session_id)
    session.dispatch(event)
    return _session_response(session)


@router.post("/sessions/{session_id}/commit", response_model=PrescriptionCommit)
async def commit_session(session_id: str, request: CommitRequest) -> PrescriptionCommit:
    """Finalize goals; held with 409 until override advisories are acknowledged."""
    session = _get_session(session_id)
    commit = session.finalize(acknowledge_overrides=request.acknowledge_overrides)
    if not commit.accepted:
        raise HTTPException(
            status_code=409,
            detail={
                "error": "Override acknowledgement required",
                "advisories": [a.model_dump(mode="json") for a in commit.advisories],
            },
        )
    _sessions.pop(session_id, None)
    return commit


@router.delete("/sessions/{session_id}", status_code=204)
async def discard_session(session_id: str) -> None:
    """Close the editor without saving."""
    _get_session(session_id)
    _sessions.pop(session_id, None)
    logger.info(f"Discarded prescription session {session_id}")
