"""Battery advisor: tuned dispatch policies and capacity sizing."""

from .battery_optimizer import (
    BatterySizeOptimization,
    PeakShavingOptimization,
    PolicyComparison,
    TimeOfUseOptimization,
    compare_policies,
    max_useful_capacity,
    optimize_battery_size,
    optimize_peak_shaving,
    optimize_time_of_use,
)

__all__ = [
    "TimeOfUseOptimization",
    "PeakShavingOptimization",
    "BatterySizeOptimization",
    "PolicyComparison",
    "optimize_time_of_use",
    "optimize_peak_shaving",
    "optimize_battery_size",
    "compare_policies",
    "max_useful_capacity",
]
