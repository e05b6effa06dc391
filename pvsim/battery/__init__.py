"""Battery storage engine -- ratings and presets, SOC tracking, and degradation."""

from .parameters import BatteryChemistry, BatteryParameters, lfp, lithium_ion
from .soc_tracker import SOCTracker
from .degradation import (
    aging_fraction,
    battery_lifespan_years,
    capacity_factor,
    replacement_years,
)

__all__ = [
    "BatteryChemistry",
    "BatteryParameters",
    "lithium_ion",
    "lfp",
    "SOCTracker",
    "aging_fraction",
    "battery_lifespan_years",
    "capacity_factor",
    "replacement_years",
]
