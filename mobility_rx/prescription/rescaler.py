"""Evidence-based re-scaling of the AI baseline onto a new daily energy target.

Ordering: prefer intensity, fall back to frequency, then fine-tune
duration. Frail patients (ICU, bedbound or age >= 80) take larger dose
increases as extra short sessions rather than higher single-session
power.
"""
from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from mobility_rx.config import Settings, get_settings
from mobility_rx.models.patient import PatientContext
from mobility_rx.models.prescription import (
    BaselineRecommendation,
    PrescriptionField,
    PrescriptionParameters,
)
from mobility_rx.prescription.acuity import classify_acuity
from mobility_rx.prescription.bounds import BoundsProfile, clamp, get_bounds, round_half_up
from mobility_rx.prescription.device import power_to_resistance

logger = logging.getLogger(__name__)


class ScalingStrategy(str, Enum):
    """Which branch of the scaling policy produced the prescription."""

    UNCHANGED = "unchanged"
    RAISE_INTENSITY = "raise_intensity"
    ADD_SESSIONS = "add_sessions"
    REDUCE_INTENSITY = "reduce_intensity"
    REDUCE_SESSIONS = "reduce_sessions"


class EvidenceBasis(BaseModel):
    """How the result relates to the AI recommendation."""

    ai_base_energy: float
    energy_ratio: float
    ai_watts: float
    ai_duration: float
    ai_sessions: int


class RescaleResult(BaseModel):
    parameters: PrescriptionParameters
    evidence_basis: EvidenceBasis
    strategy: ScalingStrategy
    reconciled: bool = False


def rescale(
    baseline: BaselineRecommendation,
    new_target_energy: float,
    patient: PatientContext,
    settings: Optional[Settings] = None,
) -> RescaleResult:
    """Build a full replacement prescription hitting ``new_target_energy``.

    Works from the baseline recommendation, never from the prescription
    currently being edited.
    """
    settings = settings or get_settings()
    acuity = classify_acuity(patient)
    bounds = get_bounds(acuity, BoundsProfile.EVIDENCE)
    power_floor, power_ceiling = bounds.power_range
    sessions_ceiling = int(bounds.sessions_range[1])

    base_watts = baseline.watt_goal
    base_duration = baseline.duration_min_per_session
    base_sessions = baseline.sessions_per_day

    ai_target_energy = base_watts * base_duration * base_sessions
    ratio = new_target_energy / ai_target_energy

    watts = base_watts
    duration = base_duration
    sessions = base_sessions
    strategy = ScalingStrategy.UNCHANGED

    if ratio > 1.0:
        strategy = ScalingStrategy.RAISE_INTENSITY
        if not acuity.is_frail:
            watts = min(power_ceiling, base_watts * math.sqrt(ratio))
            duration = new_target_energy / (watts * base_sessions)
        elif ratio <= settings.modest_increase_ratio:
            watts = min(power_ceiling, base_watts * ratio)
            if watts >= power_ceiling:
                duration = new_target_energy / (power_ceiling * base_sessions)
        else:
            strategy = ScalingStrategy.ADD_SESSIONS
            sessions = min(sessions_ceiling, round_half_up(base_sessions * math.sqrt(ratio)))
            watts = min(power_ceiling, new_target_energy / (base_duration * sessions))

    elif ratio < 1.0:
        strategy = ScalingStrategy.REDUCE_INTENSITY
        watts = max(power_floor, base_watts * ratio)
        if watts <= power_floor:
            strategy = ScalingStrategy.REDUCE_SESSIONS
            watts = max(power_floor, base_watts * settings.decrease_fallback_factor)
            sessions = max(1, round_half_up(new_target_energy / (watts * base_duration)))

    sessions = clamp(PrescriptionField.SESSIONS, sessions, acuity, BoundsProfile.EVIDENCE)
    duration = clamp(PrescriptionField.DURATION, duration, acuity, BoundsProfile.EVIDENCE)
    watts = clamp(PrescriptionField.POWER, watts, acuity, BoundsProfile.EVIDENCE)

    reconciled = False
    if abs(watts * duration * sessions - new_target_energy) > settings.energy_tolerance_wm:
        reconciled = True
        duration = clamp(
            PrescriptionField.DURATION,
            new_target_energy / (watts * sessions),
            acuity,
            BoundsProfile.EVIDENCE,
        )

    parameters = PrescriptionParameters(
        power_watts=watts,
        duration_minutes=duration,
        resistance_level=clamp(
            PrescriptionField.RESISTANCE, power_to_resistance(watts), acuity
        ),
        sessions_per_day=sessions,
    )

    logger.info(
        f"Rescaled baseline {ai_target_energy:.0f} -> {new_target_energy:.0f} W-min "
        f"(ratio {ratio:.2f}, {acuity.value}, {strategy.value}): "
        f"{watts:.1f} W x {duration:.1f} min x {sessions}"
    )

    return RescaleResult(
        parameters=parameters,
        evidence_basis=EvidenceBasis(
            ai_base_energy=ai_target_energy,
            energy_ratio=round(ratio, 2),
            ai_watts=base_watts,
            ai_duration=base_duration,
            ai_sessions=base_sessions,
        ),
        strategy=strategy,
        reconciled=reconciled,
    )
