"""Exercise-prescription recalibration engine."""

from mobility_rx.prescription.acuity import classify_acuity
from mobility_rx.prescription.advisories import OverrideAdvisory, check_overrides
from mobility_rx.prescription.bounds import BoundsProfile, ClinicalBounds, clamp, get_bounds
from mobility_rx.prescription.device import power_to_resistance, resistance_to_power
from mobility_rx.prescription.goals import parameters_from_goal_entries, to_goal_entries
from mobility_rx.prescription.recalibration import recalibrate
from mobility_rx.prescription.rescaler import RescaleResult, ScalingStrategy, rescale
from mobility_rx.prescription.session import (
    EventType,
    PrescriptionCommit,
    PrescriptionEvent,
    PrescriptionSession,
    SessionMode,
    SessionState,
    reduce,
)

__all__ = [
    "BoundsProfile",
    "ClinicalBounds",
    "EventType",
    "OverrideAdvisory",
    "PrescriptionCommit",
    "PrescriptionEvent",
    "PrescriptionSession",
    "RescaleResult",
    "ScalingStrategy",
    "SessionMode",
    "SessionState",
    "check_overrides",
    "clamp",
    "classify_acuity",
    "get_bounds",
    "parameters_from_goal_entries",
    "power_to_resistance",
    "recalibrate",
    "reduce",
    "rescale",
    "resistance_to_power",
    "to_goal_entries",
]
