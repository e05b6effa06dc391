"""Battery dispatch: tariffs, control policies and the hourly dispatch loop."""

from .tariff import FlatTariff, TariffBase, TimeOfUseTariff, TOUPeriod
from .policies import (
    ControlPolicy,
    HourContext,
    PeakShavingPolicy,
    SelfConsumptionPolicy,
    TimeOfUsePolicy,
)
from .simulator import (
    DispatchResult,
    MultiDayDispatchResult,
    baseline_daily_cost,
    simulate_days,
    simulate_dispatch,
)

__all__ = [
    # tariff
    "TariffBase",
    "FlatTariff",
    "TOUPeriod",
    "TimeOfUseTariff",
    # policies
    "HourContext",
    "ControlPolicy",
    "SelfConsumptionPolicy",
    "TimeOfUsePolicy",
    "PeakShavingPolicy",
    # simulator
    "DispatchResult",
    "MultiDayDispatchResult",
    "simulate_dispatch",
    "simulate_days",
    "baseline_daily_cost",
]
