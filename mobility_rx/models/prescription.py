"""Prescription parameter, baseline and goal-entry models."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Brake setting used when a baseline does not name one
DEFAULT_RESISTANCE_LEVEL = 5


class PrescriptionField(str, Enum):
    """Editable prescription fields, named as goal types on the wire."""

    POWER = "power"
    DURATION = "duration"
    RESISTANCE = "resistance"
    SESSIONS = "sessions"
    ENERGY = "energy"


class PrescriptionParameters(BaseModel):
    """Mutable working state of a bed-cycle prescription."""

    power_watts: float = Field(gt=0, description="Average mechanical power target (W)")
    duration_minutes: float = Field(gt=0, description="Minutes per session")
    resistance_level: int = Field(ge=1, le=9, description="Ergometer brake setting 1-9")
    sessions_per_day: int = Field(ge=1, description="Sessions per day")

    @property
    def total_daily_energy(self) -> float:
        """Daily dose in watt-minutes; always derived, never stored."""
        return self.power_watts * self.duration_minutes * self.sessions_per_day


class BaselineRecommendation(BaseModel):
    """AI-baseline prescription returned by the risk service."""

    model_config = ConfigDict(frozen=True)

    watt_goal: float = Field(default=35.0, gt=0)
    duration_min_per_session: float = Field(default=15.0, gt=0)
    sessions_per_day: int = Field(default=2, ge=1)
    resistance_level: Optional[int] = Field(default=None, ge=1, le=9)
    total_daily_energy: Optional[float] = Field(default=None, gt=0)

    @model_validator(mode="before")
    @classmethod
    def _fill_energy(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("total_daily_energy") is None:
            data = dict(data)
            watts = data.get("watt_goal") or 35.0
            duration = data.get("duration_min_per_session") or 15.0
            sessions = data.get("sessions_per_day") or 2
            data["total_daily_energy"] = float(watts) * float(duration) * int(sessions)
        return data

    @property
    def effective_resistance(self) -> int:
        return self.resistance_level or DEFAULT_RESISTANCE_LEVEL


class GoalEntry(BaseModel):
    """One persisted goal; camelCase aliases are the persistence wire format."""

    model_config = ConfigDict(populate_by_name=True)

    goal_type: PrescriptionField = Field(alias="goalType")
    target_value: str = Field(alias="targetValue")
    current_value: str = Field(default="0", alias="currentValue")
    unit: str
    label: str
    subtitle: str = ""
    period: str
    is_active: bool = Field(default=True, alias="isActive")
