"""Goal entries: the record shape the goal-persistence API stores.

One entry per field (energy, duration, power, sessions, resistance),
values as strings, camelCase keys when serialized with ``by_alias=True``.
"""
from __future__ import annotations

import math
from typing import Iterable, Optional, Union

from mobility_rx.models.prescription import (
    BaselineRecommendation,
    GoalEntry,
    PrescriptionField,
    PrescriptionParameters,
)
from mobility_rx.prescription.bounds import round_half_up

GOAL_UNITS: dict[PrescriptionField, str] = {
    PrescriptionField.ENERGY: "Watt-Min",
    PrescriptionField.DURATION: "minutes",
    PrescriptionField.POWER: "watts",
    PrescriptionField.SESSIONS: "sessions",
    PrescriptionField.RESISTANCE: "level",
}

GOAL_LABELS: dict[PrescriptionField, str] = {
    PrescriptionField.ENERGY: "Total Daily Energy Target",
    PrescriptionField.DURATION: "Recommended Duration",
    PrescriptionField.POWER: "Target Power Output",
    PrescriptionField.SESSIONS: "Daily Exercise Frequency",
    PrescriptionField.RESISTANCE: "Resistance Setting",
}

GOAL_PERIODS: dict[PrescriptionField, str] = {
    PrescriptionField.ENERGY: "daily",
    PrescriptionField.DURATION: "session",
    PrescriptionField.POWER: "session",
    PrescriptionField.SESSIONS: "daily",
    PrescriptionField.RESISTANCE: "session",
}


def format_goal_value(value: Union[int, float], decimals: Optional[int] = None) -> str:
    """Render a number the way the goal store expects: no trailing ``.0``."""
    number = float(value)
    if decimals is not None:
        number = round(number, decimals)
    if number.is_integer():
        return str(int(number))
    return repr(number)


def to_goal_entries(parameters: PrescriptionParameters) -> list[GoalEntry]:
    """Serialize a finalized prescription as goal entries."""
    energy = format_goal_value(parameters.total_daily_energy)
    duration = format_goal_value(parameters.duration_minutes, 1)
    power = format_goal_value(parameters.power_watts, 1)
    sessions = format_goal_value(parameters.sessions_per_day)
    resistance = format_goal_value(parameters.resistance_level)

    values = {
        PrescriptionField.ENERGY: (energy, "Comprehensive mobility recommendation"),
        PrescriptionField.DURATION: (duration, f"{duration} minutes per session"),
        PrescriptionField.POWER: (power, f"{power} watts average"),
        PrescriptionField.SESSIONS: (sessions, f"{sessions} sessions per day"),
        PrescriptionField.RESISTANCE: (resistance, f"Level {resistance} resistance"),
    }

    return [
        GoalEntry(
            goal_type=field,
            target_value=value,
            unit=GOAL_UNITS[field],
            label=GOAL_LABELS[field],
            subtitle=subtitle,
            period=GOAL_PERIODS[field],
        )
        for field, (value, subtitle) in values.items()
    ]


def _goal_map(entries: Iterable[GoalEntry]) -> dict[PrescriptionField, float]:
    goal_map: dict[PrescriptionField, float] = {}
    for entry in entries:
        if not entry.is_active:
            continue
        try:
            value = float(entry.target_value)
        except ValueError:
            continue
        if not math.isfinite(value) or value <= 0:
            continue
        goal_map[entry.goal_type] = value
    return goal_map


def baseline_from_goal_entries(entries: Iterable[GoalEntry]) -> BaselineRecommendation:
    """Rebuild a baseline from previously stored goals.

    Missing, unparsable or non-positive goals fall back to the baseline
    defaults.
    """
    goal_map = _goal_map(entries)
    data: dict[str, float] = {}
    if PrescriptionField.POWER in goal_map:
        data["watt_goal"] = goal_map[PrescriptionField.POWER]
    if PrescriptionField.DURATION in goal_map:
        data["duration_min_per_session"] = goal_map[PrescriptionField.DURATION]
    if PrescriptionField.SESSIONS in goal_map:
        data["sessions_per_day"] = max(1, round_half_up(goal_map[PrescriptionField.SESSIONS]))
    if PrescriptionField.RESISTANCE in goal_map:
        data["resistance_level"] = min(max(round_half_up(goal_map[PrescriptionField.RESISTANCE]), 1), 9)
    if PrescriptionField.ENERGY in goal_map:
        data["total_daily_energy"] = goal_map[PrescriptionField.ENERGY]
    return BaselineRecommendation(**data)


def parameters_from_goal_entries(entries: Iterable[GoalEntry]) -> PrescriptionParameters:
    """Working prescription for previously stored goals."""
    baseline = baseline_from_goal_entries(entries)
    return PrescriptionParameters(
        power_watts=baseline.watt_goal,
        duration_minutes=baseline.duration_min_per_session,
        resistance_level=baseline.effective_resistance,
        sessions_per_day=baseline.sessions_per_day,
    )
