"""
Linear battery aging.

Capacity fades linearly with both equivalent full cycles and calendar
age; the worse of the two mechanisms governs.  End of life is reached at
80 % of nominal capacity, when either the rated cycle count or the rated
calendar life is used up.
"""

from __future__ import annotations

import math

from pvsim.battery.parameters import BatteryParameters
from pvsim.core.errors import InvalidParameterError

END_OF_LIFE_FADE: float = 0.20


def aging_fraction(
    battery: BatteryParameters,
    equivalent_full_cycles: float,
    age_years: float,
) -> float:
    """Fraction of rated life consumed, capped at 1.0."""
    if equivalent_full_cycles < 0 or age_years < 0:
        raise InvalidParameterError("cycles and age must be >= 0")
    cycle_aging = min(1.0, equivalent_full_cycles / battery.cycle_life)
    calendar_aging = min(1.0, age_years / battery.calendar_life_years)
    return max(cycle_aging, calendar_aging)


def capacity_factor(
    battery: BatteryParameters,
    equivalent_full_cycles: float,
    age_years: float,
) -> float:
    """Remaining capacity as a fraction of nominal, in [0.8, 1.0]."""
    return 1.0 - END_OF_LIFE_FADE * aging_fraction(battery, equivalent_full_cycles, age_years)


def battery_lifespan_years(battery: BatteryParameters, cycles_per_day: float) -> float:
    """Years until either cycle or calendar life runs out."""
    if cycles_per_day <= 0:
        return float(battery.calendar_life_years)
    return min(battery.cycle_life / (cycles_per_day * 365.0), battery.calendar_life_years)


def replacement_years(lifespan_years: float, horizon_years: int) -> list[int]:
    """Years (1-based, strictly inside the horizon) when the pack is replaced."""
    if lifespan_years <= 0:
        raise InvalidParameterError(f"lifespan_years must be positive, got {lifespan_years}")
    years: list[int] = []
    for i in range(1, math.floor(horizon_years / lifespan_years) + 1):
        year = math.floor(lifespan_years * i + 0.5)
        if 0 < year < horizon_years:
            years.append(year)
    return years
