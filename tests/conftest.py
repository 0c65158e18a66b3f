"""Pytest configuration and fixtures."""

import pytest

from mobility_rx.config import Settings
from mobility_rx.models.patient import PatientContext
from mobility_rx.models.prescription import BaselineRecommendation, PrescriptionParameters


@pytest.fixture
def settings():
    """Settings with the shipped defaults, independent of any .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def baseline():
    """AI baseline: 35 W x 15 min x 2 sessions = 1050 watt-minutes."""
    return BaselineRecommendation(watt_goal=35, duration_min_per_session=15, sessions_per_day=2)


@pytest.fixture
def ward_patient():
    """Non-frail ward patient."""
    return PatientContext(level_of_care="ward", mobility_status="ambulatory", age=62)


@pytest.fixture
def icu_patient():
    return PatientContext(level_of_care="ICU", mobility_status="chair", age=58)


@pytest.fixture
def elderly_patient():
    """Frail by age only."""
    return PatientContext(level_of_care="ward", mobility_status="ambulatory", age=86)


@pytest.fixture
def baseline_parameters():
    return PrescriptionParameters(
        power_watts=35.0, duration_minutes=15.0, resistance_level=5, sessions_per_day=2
    )
