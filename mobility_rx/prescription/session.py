"""Prescription session: authoritative editing state and its pure reducer.

A session is seeded from a baseline recommendation (fresh risk assessment
or previously stored goals), mutated by edit events, and discarded once
the goal store commits the finalized prescription or the editor closes
without saving.
"""
from __future__ import annotations

import logging
import uuid
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, Field, model_validator

from mobility_rx.config import Settings, get_settings
from mobility_rx.models.patient import AcuityClass, PatientContext
from mobility_rx.models.prescription import (
    BaselineRecommendation,
    GoalEntry,
    PrescriptionField,
    PrescriptionParameters,
)
from mobility_rx.prescription.acuity import classify_acuity
from mobility_rx.prescription.advisories import OverrideAdvisory, check_overrides
from mobility_rx.prescription.bounds import clamp
from mobility_rx.prescription.goals import baseline_from_goal_entries, to_goal_entries
from mobility_rx.prescription.recalibration import recalibrate
from mobility_rx.prescription.rescaler import rescale

logger = logging.getLogger(__name__)


class SessionMode(str, Enum):
    FREE = "free"
    ENERGY_LOCKED = "energy_locked"


class EventType(str, Enum):
    EDIT = "edit"
    SET_MAINTAIN_ENERGY = "set_maintain_energy"
    RETARGET = "retarget"
    RESET = "reset"


class PrescriptionEvent(BaseModel):
    """A UI interaction against the session."""

    type: EventType
    field: Optional[PrescriptionField] = None
    value: Optional[float] = None
    enabled: Optional[bool] = None

    @model_validator(mode="after")
    def _check_payload(self) -> "PrescriptionEvent":
        if self.type is EventType.EDIT and (self.field is None or self.value is None):
            raise ValueError("edit events need a field and a value")
        if self.type is EventType.RETARGET and self.value is None:
            raise ValueError("retarget events need a value")
        if self.type is EventType.SET_MAINTAIN_ENERGY and self.enabled is None:
            raise ValueError("set_maintain_energy events need enabled")
        return self


class SessionState(BaseModel):
    parameters: PrescriptionParameters
    baseline: BaselineRecommendation
    patient: PatientContext = Field(default_factory=PatientContext)
    mode: SessionMode = SessionMode.FREE
    target_daily_energy: float

    @property
    def acuity(self) -> AcuityClass:
        return classify_acuity(self.patient)

    @property
    def maintain_energy(self) -> bool:
        return self.mode is SessionMode.ENERGY_LOCKED


def baseline_parameters(baseline: BaselineRecommendation) -> PrescriptionParameters:
    return PrescriptionParameters(
        power_watts=baseline.watt_goal,
        duration_minutes=baseline.duration_min_per_session,
        resistance_level=baseline.effective_resistance,
        sessions_per_day=baseline.sessions_per_day,
    )


def initial_state(
    baseline: BaselineRecommendation,
    patient: Optional[PatientContext] = None,
    maintain_energy: bool = False,
) -> SessionState:
    parameters = baseline_parameters(baseline)
    # A locked session holds the dose its parameters actually deliver
    target = parameters.total_daily_energy if maintain_energy else baseline.total_daily_energy
    return SessionState(
        parameters=parameters,
        baseline=baseline,
        patient=patient or PatientContext(),
        mode=SessionMode.ENERGY_LOCKED if maintain_energy else SessionMode.FREE,
        target_daily_energy=target,
    )


def _edit(state: SessionState, field: PrescriptionField, value: float) -> SessionState:
    acuity = state.acuity

    if state.maintain_energy:
        parameters = recalibrate(
            state.parameters, field, value, state.target_daily_energy, acuity
        )
        target = state.target_daily_energy
        if field is PrescriptionField.ENERGY:
            target = clamp(PrescriptionField.ENERGY, value, acuity)
        return state.model_copy(update={"parameters": parameters, "target_daily_energy": target})

    if field is PrescriptionField.ENERGY:
        return state.model_copy(
            update={"target_daily_energy": clamp(PrescriptionField.ENERGY, value, acuity)}
        )

    attribute = {
        PrescriptionField.POWER: "power_watts",
        PrescriptionField.DURATION: "duration_minutes",
        PrescriptionField.RESISTANCE: "resistance_level",
        PrescriptionField.SESSIONS: "sessions_per_day",
    }[field]
    parameters = state.parameters.model_copy(update={attribute: clamp(field, value, acuity)})
    return state.model_copy(update={"parameters": parameters})


def reduce(
    state: SessionState, event: PrescriptionEvent, settings: Optional[Settings] = None
) -> SessionState:
    """Pure state transition: returns a new state, ``state`` is untouched."""
    if event.type is EventType.EDIT:
        return _edit(state, event.field, event.value)

    if event.type is EventType.SET_MAINTAIN_ENERGY:
        if event.enabled and not state.maintain_energy:
            return state.model_copy(
                update={
                    "mode": SessionMode.ENERGY_LOCKED,
                    "target_daily_energy": state.parameters.total_daily_energy,
                }
            )
        if not event.enabled:
            return state.model_copy(update={"mode": SessionMode.FREE})
        return state

    if event.type is EventType.RETARGET:
        target = clamp(PrescriptionField.ENERGY, event.value, state.acuity)
        result = rescale(state.baseline, target, state.patient, settings)
        return state.model_copy(
            update={"parameters": result.parameters, "target_daily_energy": target}
        )

    if event.type is EventType.RESET:
        seeded = initial_state(state.baseline, state.patient, state.maintain_energy)
        return state.model_copy(
            update={
                "parameters": seeded.parameters,
                "target_daily_energy": seeded.target_daily_energy,
            }
        )

    return state


class PrescriptionCommit(BaseModel):
    """Outcome of finalizing a session through the override gate."""

    accepted: bool
    goals: list[GoalEntry] = Field(default_factory=list)
    advisories: list[OverrideAdvisory] = Field(default_factory=list)
    total_daily_energy: float


class PrescriptionSession:
    """Holds the current prescription and routes edit events.

    Usage:
        session = PrescriptionSession(baseline, patient)
        session.toggle_maintain_energy(True)
        session.edit(PrescriptionField.RESISTANCE, 9)
        commit = session.finalize(acknowledge_overrides=True)
    """

    def __init__(
        self,
        baseline: BaselineRecommendation,
        patient: Optional[PatientContext] = None,
        maintain_energy: bool = False,
        settings: Optional[Settings] = None,
        session_id: Optional[str] = None,
    ):
        self.session_id = session_id or str(uuid.uuid4())
        self.settings = settings or get_settings()
        self.state = initial_state(baseline, patient, maintain_energy)

    @classmethod
    def from_goal_entries(
        cls,
        goals: Iterable[GoalEntry],
        patient: Optional[PatientContext] = None,
        maintain_energy: bool = False,
        settings: Optional[Settings] = None,
    ) -> "PrescriptionSession":
        """Seed a session from goals previously stored for the patient."""
        return cls(
            baseline_from_goal_entries(goals),
            patient=patient,
            maintain_energy=maintain_energy,
            settings=settings,
        )

    @property
    def parameters(self) -> PrescriptionParameters:
        return self.state.parameters

    @property
    def target_daily_energy(self) -> float:
        return self.state.target_daily_energy

    @property
    def mode(self) -> SessionMode:
        return self.state.mode

    @property
    def acuity(self) -> AcuityClass:
        return self.state.acuity

    def dispatch(self, event: PrescriptionEvent) -> SessionState:
        logger.debug(f"Session {self.session_id}: {event.model_dump(exclude_none=True)}")
        self.state = reduce(self.state, event, self.settings)
        return self.state

    def edit(self, field: PrescriptionField, value: float) -> SessionState:
        return self.dispatch(PrescriptionEvent(type=EventType.EDIT, field=field, value=value))

    def toggle_maintain_energy(self, enabled: bool) -> SessionState:
        return self.dispatch(PrescriptionEvent(type=EventType.SET_MAINTAIN_ENERGY, enabled=enabled))

    def retarget(self, target_energy: float) -> SessionState:
        return self.dispatch(PrescriptionEvent(type=EventType.RETARGET, value=target_energy))

    def reset(self) -> SessionState:
        return self.dispatch(PrescriptionEvent(type=EventType.RESET))

    @property
    def advisories(self) -> list[OverrideAdvisory]:
        return check_overrides(
            self.state.parameters,
            self.state.target_daily_energy,
            self.state.baseline,
            self.settings,
        )

    @property
    def requires_acknowledgement(self) -> bool:
        return bool(self.advisories)

    def finalize(self, acknowledge_overrides: bool = False) -> PrescriptionCommit:
        """Produce goal entries unless unacknowledged advisories remain."""
        advisories = self.advisories
        energy = self.state.parameters.total_daily_energy
        if advisories and not acknowledge_overrides:
            logger.info(
                f"Session {self.session_id} held for clinician acknowledgement "
                f"({len(advisories)} advisories)"
            )
            return PrescriptionCommit(
                accepted=False, advisories=advisories, total_daily_energy=energy
            )

        logger.info(f"Session {self.session_id} finalized at {energy:.1f} W-min/day")
        return PrescriptionCommit(
            accepted=True,
            goals=to_goal_entries(self.state.parameters),
            advisories=advisories,
            total_daily_energy=energy,
        )
