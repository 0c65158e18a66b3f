"""Safe numeric ranges per prescription field and acuity class.

Two bound tables exist:

- ``editor``: used when a clinician edits one field, with or without
  energy maintenance. Only critical patients get shorter sessions.
- ``evidence``: used when a whole prescription is re-scaled from the AI
  baseline. All frail patients get shorter sessions and up to four of
  them; standard patients get a minimum therapeutic session of 8 minutes
  and at most three sessions.

Out-of-range values are clamped silently. Integral fields round half-up
after clamping.
"""
from __future__ import annotations

import math
from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict

from mobility_rx.models.patient import AcuityClass
from mobility_rx.models.prescription import PrescriptionField

Range = tuple[float, float]

POWER_RANGE: Range = (25.0, 70.0)
RESISTANCE_RANGE: Range = (1.0, 9.0)
ENERGY_RANGE: Range = (300.0, 3000.0)

INTEGRAL_FIELDS = frozenset({PrescriptionField.RESISTANCE, PrescriptionField.SESSIONS})


class BoundsProfile(str, Enum):
    EDITOR = "editor"
    EVIDENCE = "evidence"


class ClinicalBounds(BaseModel):
    """Closed ranges for every prescription field."""

    model_config = ConfigDict(frozen=True)

    duration_range: Range
    power_range: Range = POWER_RANGE
    resistance_range: Range = RESISTANCE_RANGE
    sessions_range: Range = (1.0, 4.0)
    energy_range: Range = ENERGY_RANGE

    def range_for(self, field: PrescriptionField) -> Range:
        return {
            PrescriptionField.POWER: self.power_range,
            PrescriptionField.DURATION: self.duration_range,
            PrescriptionField.RESISTANCE: self.resistance_range,
            PrescriptionField.SESSIONS: self.sessions_range,
            PrescriptionField.ENERGY: self.energy_range,
        }[field]


_SHORT_SESSIONS = ClinicalBounds(duration_range=(5.0, 20.0))
_GENERAL_SESSIONS = ClinicalBounds(duration_range=(5.0, 45.0))
_STANDARD_EVIDENCE = ClinicalBounds(duration_range=(8.0, 45.0), sessions_range=(1.0, 3.0))

_BOUNDS: dict[BoundsProfile, dict[AcuityClass, ClinicalBounds]] = {
    BoundsProfile.EDITOR: {
        AcuityClass.CRITICAL: _SHORT_SESSIONS,
        AcuityClass.FRAIL: _GENERAL_SESSIONS,
        AcuityClass.STANDARD: _GENERAL_SESSIONS,
    },
    BoundsProfile.EVIDENCE: {
        AcuityClass.CRITICAL: _SHORT_SESSIONS,
        AcuityClass.FRAIL: _SHORT_SESSIONS,
        AcuityClass.STANDARD: _STANDARD_EVIDENCE,
    },
}


def get_bounds(
    acuity: AcuityClass, profile: BoundsProfile = BoundsProfile.EDITOR
) -> ClinicalBounds:
    """Look up the bounds for an acuity class."""
    return _BOUNDS[BoundsProfile(profile)][AcuityClass(acuity)]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp(
    field: PrescriptionField,
    value: float,
    acuity: AcuityClass,
    profile: BoundsProfile = BoundsProfile.EDITOR,
) -> Union[int, float]:
    """Clamp ``value`` into the closed range for ``field``.

    Returns an ``int`` for resistance and session count, a ``float``
    otherwise.
    """
    field = PrescriptionField(field)
    low, high = get_bounds(acuity, profile).range_for(field)
    clamped = max(low, min(high, float(value)))
    if field in INTEGRAL_FIELDS:
        return round_half_up(clamped)
    return clamped
