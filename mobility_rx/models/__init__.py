"""Data models for Mobility-Rx."""

from mobility_rx.models.patient import AcuityClass, PatientContext
from mobility_rx.models.prescription import (
    BaselineRecommendation,
    GoalEntry,
    PrescriptionField,
    PrescriptionParameters,
)

__all__ = [
    "AcuityClass",
    "BaselineRecommendation",
    "GoalEntry",
    "PatientContext",
    "PrescriptionField",
    "PrescriptionParameters",
]
