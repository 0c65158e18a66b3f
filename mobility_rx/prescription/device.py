"""Electromechanical model of the bed-cycle ergometer.

Resistance maps linearly onto brake force (30-50 lb over levels 1-9) and
power scales with force at a fixed assumed cadence of 35 RPM on a 9-inch
flywheel, normalised so that 37.5 lb delivers 35 W. These constants
describe the device, not the patient.
"""

MIN_RESISTANCE = 1.0
MAX_RESISTANCE = 9.0

MIN_FORCE_LB = 30.0
MAX_FORCE_LB = 50.0
BASELINE_FORCE_LB = 37.5
BASELINE_POWER_W = 35.0

ASSUMED_RPM = 35
FLYWHEEL_DIAMETER_IN = 9

_LEVEL_SPAN = MAX_RESISTANCE - MIN_RESISTANCE
_FORCE_SPAN = MAX_FORCE_LB - MIN_FORCE_LB


def _clamp_level(level: float) -> float:
    return max(MIN_RESISTANCE, min(MAX_RESISTANCE, level))


def resistance_to_force(resistance: float) -> float:
    """Brake force in pounds for a resistance level."""
    level = _clamp_level(resistance)
    return MIN_FORCE_LB + (level - MIN_RESISTANCE) / _LEVEL_SPAN * _FORCE_SPAN


def force_to_power(force_lb: float) -> float:
    return BASELINE_POWER_W * (force_lb / BASELINE_FORCE_LB)


def resistance_to_power(resistance: float) -> float:
    """Mechanical power in watts at the assumed cadence."""
    return force_to_power(resistance_to_force(resistance))


def power_to_resistance(watts: float) -> float:
    """Unrounded resistance level delivering ``watts``, clamped to 1-9."""
    force = watts / BASELINE_POWER_W * BASELINE_FORCE_LB
    level = MIN_RESISTANCE + (force - MIN_FORCE_LB) / _FORCE_SPAN * _LEVEL_SPAN
    return _clamp_level(level)
