"""Patient context flags supplied by the risk assessment."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class AcuityClass(str, Enum):
    """Coarse patient-risk bucket driving safety bounds."""

    CRITICAL = "critical"  # ICU or bedbound
    FRAIL = "frail"  # age >= 80, not critical
    STANDARD = "standard"

    @property
    def is_frail(self) -> bool:
        """Frail patients get shorter, more frequent sessions."""
        return self is not AcuityClass.STANDARD


class PatientContext(BaseModel):
    """Patient flags used only to select an acuity class."""

    level_of_care: str = Field(default="ward", description="e.g. icu, step_down, ward")
    mobility_status: str = Field(
        default="bedbound", description="e.g. bedbound, chair, standing, ambulatory"
    )
    age: Optional[int] = Field(default=75, ge=0, le=130)

    @field_validator("level_of_care", "mobility_status", mode="before")
    @classmethod
    def _normalize(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return str(value).strip().lower()
