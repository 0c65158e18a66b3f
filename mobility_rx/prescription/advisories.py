"""Override advisories raised when a prescription exceeds AI recommendations.

Advisories are a confirmation gate for the clinician, never a rejection.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from mobility_rx.config import Settings, get_settings
from mobility_rx.models.prescription import (
    BaselineRecommendation,
    PrescriptionField,
    PrescriptionParameters,
)

logger = logging.getLogger(__name__)


class AdvisoryBasis(str, Enum):
    FIXED = "fixed"
    BASELINE = "baseline"


class OverrideAdvisory(BaseModel):
    """A single value above what the AI recommends for this patient."""

    field: PrescriptionField
    value: float
    threshold: float
    basis: AdvisoryBasis
    message: str


def check_fixed_thresholds(
    parameters: PrescriptionParameters,
    target_energy: float,
    settings: Optional[Settings] = None,
) -> list[OverrideAdvisory]:
    """Compare against the fixed AI-recommendation ceilings."""
    settings = settings or get_settings()
    advisories: list[OverrideAdvisory] = []

    def _flag(field: PrescriptionField, value: float, threshold: float, message: str) -> None:
        if value > threshold:
            advisories.append(
                OverrideAdvisory(
                    field=field,
                    value=value,
                    threshold=threshold,
                    basis=AdvisoryBasis.FIXED,
                    message=message,
                )
            )

    duration = parameters.duration_minutes
    power = parameters.power_watts
    _flag(
        PrescriptionField.DURATION,
        duration,
        settings.override_max_duration,
        f"Duration ({duration:.1f} min) exceeds AI recommendation of "
        f"{settings.override_max_duration:g} min",
    )
    _flag(
        PrescriptionField.POWER,
        power,
        settings.override_max_power,
        f"Power ({power:.1f}W) exceeds AI recommendation of {settings.override_max_power:g}W",
    )
    _flag(
        PrescriptionField.RESISTANCE,
        parameters.resistance_level,
        settings.override_max_resistance,
        f"Resistance (Level {parameters.resistance_level}) exceeds AI recommendation of "
        f"Level {settings.override_max_resistance:g}",
    )
    _flag(
        PrescriptionField.ENERGY,
        target_energy,
        settings.override_max_energy,
        f"Total energy ({target_energy:.0f} Watt-Min) exceeds AI recommendation of "
        f"{settings.override_max_energy:g} Watt-Min",
    )
    return advisories


def check_baseline_thresholds(
    parameters: PrescriptionParameters,
    target_energy: float,
    baseline: BaselineRecommendation,
    settings: Optional[Settings] = None,
) -> list[OverrideAdvisory]:
    """Compare against multiples of the patient's own AI baseline."""
    settings = settings or get_settings()
    checks = [
        (
            PrescriptionField.ENERGY,
            target_energy,
            baseline.total_daily_energy * settings.baseline_energy_override_ratio,
            "Total energy target",
            "watt-min/day",
        ),
        (
            PrescriptionField.POWER,
            parameters.power_watts,
            baseline.watt_goal * settings.baseline_power_override_ratio,
            "Power",
            "W",
        ),
        (
            PrescriptionField.DURATION,
            parameters.duration_minutes,
            baseline.duration_min_per_session * settings.baseline_duration_override_ratio,
            "Duration",
            "min",
        ),
        (
            PrescriptionField.SESSIONS,
            parameters.sessions_per_day,
            baseline.sessions_per_day + settings.baseline_sessions_override_margin,
            "Sessions per day",
            "sessions",
        ),
    ]

    advisories = []
    for field, value, threshold, name, unit in checks:
        if value > threshold:
            advisories.append(
                OverrideAdvisory(
                    field=field,
                    value=value,
                    threshold=threshold,
                    basis=AdvisoryBasis.BASELINE,
                    message=(
                        f"{name} ({value:.1f} {unit}) exceeds this patient's AI baseline "
                        f"limit of {threshold:.1f} {unit}"
                    ),
                )
            )
    return advisories


def check_overrides(
    parameters: PrescriptionParameters,
    target_energy: float,
    baseline: Optional[BaselineRecommendation] = None,
    settings: Optional[Settings] = None,
) -> list[OverrideAdvisory]:
    """All advisories for a prescription, fixed thresholds first."""
    advisories = check_fixed_thresholds(parameters, target_energy, settings)
    if baseline is not None:
        advisories.extend(check_baseline_thresholds(parameters, target_energy, baseline, settings))
    if advisories:
        logger.warning(
            f"Prescription exceeds AI recommendations: "
            f"{', '.join(sorted({a.field.value for a in advisories}))}"
        )
    return advisories
