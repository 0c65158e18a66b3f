"""Energy-preserving recalibration of a prescription after a single-field edit.

Editing duration, resistance or power reshapes intensity: power floats so
the daily dose holds. Editing the session count or the energy target
changes the dose split: power and resistance stay fixed and duration
absorbs the change.

Derived values that leave their bounds are clamped and the dose is
allowed to drift; there is no iteration to reconverge.
"""
from __future__ import annotations

import logging
from typing import Union

from mobility_rx.models.patient import AcuityClass
from mobility_rx.models.prescription import PrescriptionField, PrescriptionParameters
from mobility_rx.prescription.bounds import BoundsProfile, clamp
from mobility_rx.prescription.device import power_to_resistance, resistance_to_power

logger = logging.getLogger(__name__)


def _clamped(field: PrescriptionField, value: float, acuity: AcuityClass) -> Union[int, float]:
    return clamp(field, value, acuity, BoundsProfile.EDITOR)


def recalibrate(
    current: PrescriptionParameters,
    changed_field: PrescriptionField,
    new_value: float,
    target_energy: float,
    acuity: AcuityClass,
) -> PrescriptionParameters:
    """Return a new prescription consistent with ``target_energy``.

    Args:
        current: Prescription before the edit. Not modified.
        changed_field: Field the clinician edited.
        new_value: Raw value entered for that field.
        target_energy: Daily dose (watt-minutes) to preserve. Ignored when
            ``changed_field`` is the energy target itself.
        acuity: Patient acuity class selecting the bounds.
    """
    changed_field = PrescriptionField(changed_field)
    power = current.power_watts
    duration = current.duration_minutes
    resistance = current.resistance_level
    sessions = current.sessions_per_day

    if changed_field is PrescriptionField.DURATION:
        duration = _clamped(PrescriptionField.DURATION, new_value, acuity)
        required_power = (target_energy / sessions) / duration
        power = _clamped(PrescriptionField.POWER, required_power, acuity)
        resistance = _clamped(
            PrescriptionField.RESISTANCE, power_to_resistance(required_power), acuity
        )

    elif changed_field is PrescriptionField.RESISTANCE:
        resistance = _clamped(PrescriptionField.RESISTANCE, new_value, acuity)
        device_power = resistance_to_power(resistance)
        power = _clamped(PrescriptionField.POWER, device_power, acuity)
        duration = _clamped(
            PrescriptionField.DURATION, (target_energy / sessions) / device_power, acuity
        )

    elif changed_field is PrescriptionField.POWER:
        power = _clamped(PrescriptionField.POWER, new_value, acuity)
        resistance = _clamped(PrescriptionField.RESISTANCE, power_to_resistance(power), acuity)
        duration = _clamped(
            PrescriptionField.DURATION, (target_energy / sessions) / power, acuity
        )

    elif changed_field is PrescriptionField.SESSIONS:
        sessions = _clamped(PrescriptionField.SESSIONS, new_value, acuity)
        duration = _clamped(
            PrescriptionField.DURATION, (target_energy / sessions) / power, acuity
        )

    elif changed_field is PrescriptionField.ENERGY:
        target_energy = _clamped(PrescriptionField.ENERGY, new_value, acuity)
        duration = _clamped(
            PrescriptionField.DURATION, (target_energy / sessions) / power, acuity
        )

    result = PrescriptionParameters(
        power_watts=power,
        duration_minutes=duration,
        resistance_level=resistance,
        sessions_per_day=sessions,
    )

    drift = result.total_daily_energy - target_energy
    if abs(drift) > 1.0:
        logger.info(
            f"Recalibration of {changed_field.value} hit a bound: "
            f"energy {result.total_daily_energy:.1f} vs target {target_energy:.1f} W-min"
        )
    else:
        logger.debug(f"Recalibrated {changed_field.value}={new_value} -> {result.model_dump()}")

    return result
