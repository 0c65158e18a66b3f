"""Acuity classification from patient-context flags."""

from mobility_rx.models.patient import AcuityClass, PatientContext

CRITICAL_LEVELS_OF_CARE = frozenset({"icu"})
CRITICAL_MOBILITY = frozenset({"bedbound"})
FRAIL_AGE = 80


def classify_acuity(context: PatientContext) -> AcuityClass:
    """Map level of care, mobility status and age onto one acuity class."""
    if (
        context.level_of_care in CRITICAL_LEVELS_OF_CARE
        or context.mobility_status in CRITICAL_MOBILITY
    ):
        return AcuityClass.CRITICAL
    if context.age is not None and context.age >= FRAIL_AGE:
        return AcuityClass.FRAIL
    return AcuityClass.STANDARD
