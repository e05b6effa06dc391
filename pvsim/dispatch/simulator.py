"""Single-day battery dispatch simulation.

Walks the 24 hours of a day once, in order, with no look-ahead.  Each
hour the PV/load balance is served through a fixed cascade:

**Surplus:** PV -> load -> battery (if the policy allows) -> grid export
(up to the export limit) -> curtailment

**Deficit:** PV -> load, battery (if the policy allows) -> grid import
(up to the import limit) -> unserved load

Energy is in kWh per 1-hour step, so kW and kWh are interchangeable.
Identical inputs always produce identical results.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pvsim.battery.degradation import capacity_factor
from pvsim.battery.parameters import BatteryParameters
from pvsim.battery.soc_tracker import SOCTracker
from pvsim.core.errors import InvalidParameterError
from pvsim.dispatch.policies import ControlPolicy, HourContext, SelfConsumptionPolicy
from pvsim.dispatch.tariff import FlatTariff, TariffBase

logger = logging.getLogger(__name__)

HOURS_PER_DAY: int = 24
DAYS_PER_YEAR: float = 365.0


# ======================================================================
# Result records
# ======================================================================

@dataclass(frozen=True)
class DispatchResult:
    """Hourly flows and daily aggregates of one dispatch run.

    Every hourly series has 24 entries.  ``soc_kwh`` is the state of
    charge at the end of each hour.
    """

    charge_kwh: tuple[float, ...]
    discharge_kwh: tuple[float, ...]
    soc_kwh: tuple[float, ...]
    grid_import_kwh: tuple[float, ...]
    grid_export_kwh: tuple[float, ...]
    pv_to_load_kwh: tuple[float, ...]
    pv_to_battery_kwh: tuple[float, ...]
    pv_to_grid_kwh: tuple[float, ...]
    battery_to_load_kwh: tuple[float, ...]
    grid_to_load_kwh: tuple[float, ...]
    curtailed_kwh: tuple[float, ...]
    unserved_kwh: tuple[float, ...]
    cost: tuple[float, ...]
    initial_soc_kwh: float
    usable_capacity_kwh: float
    total_production_kwh: float
    total_load_kwh: float
    self_consumption_rate: float
    self_sufficiency_rate: float
    daily_cost: float
    cycle_equivalent: float

    @property
    def final_soc_kwh(self) -> float:
        return self.soc_kwh[-1]

    @property
    def total_grid_import_kwh(self) -> float:
        return math.fsum(self.grid_import_kwh)

    @property
    def total_grid_export_kwh(self) -> float:
        return math.fsum(self.grid_export_kwh)

    @property
    def total_curtailed_kwh(self) -> float:
        return math.fsum(self.curtailed_kwh)

    @property
    def total_unserved_kwh(self) -> float:
        return math.fsum(self.unserved_kwh)

    @property
    def equivalent_full_cycles(self) -> float:
        """Full charge-plus-discharge cycles (half of ``cycle_equivalent``)."""
        return self.cycle_equivalent / 2.0

    @property
    def soc_percent(self) -> tuple[float, ...]:
        return tuple(100.0 * s / self.usable_capacity_kwh for s in self.soc_kwh)


@dataclass(frozen=True)
class MultiDayDispatchResult:
    days: tuple[DispatchResult, ...]
    capacity_factors: tuple[float, ...]

    @property
    def total_cost(self) -> float:
        return math.fsum(d.daily_cost for d in self.days)

    @property
    def equivalent_full_cycles(self) -> float:
        return math.fsum(d.equivalent_full_cycles for d in self.days)

    @property
    def final_capacity_factor(self) -> float:
        return self.capacity_factors[-1]


# ======================================================================
# Input validation
# ======================================================================

def _day_profile(values: ArrayLike, name: str) -> NDArray[np.float64]:
    arr = np.asarray(values, dtype=np.float64).ravel()
    if arr.size != HOURS_PER_DAY:
        raise InvalidParameterError(f"{name} must have {HOURS_PER_DAY} hourly values, got {arr.size}")
    if not np.all(np.isfinite(arr)):
        raise InvalidParameterError(f"{name} contains non-finite values")
    if np.any(arr < 0):
        raise InvalidParameterError(f"{name} must be non-negative")
    return arr


def _limit(value: Optional[float], name: str) -> float:
    if value is None:
        return math.inf
    if value < 0:
        raise InvalidParameterError(f"{name} must be >= 0, got {value}")
    return float(value)


# ======================================================================
# Single day
# ======================================================================

def simulate_dispatch(
    production_kw: ArrayLike,
    load_kw: ArrayLike,
    battery: BatteryParameters,
    policy: Optional[ControlPolicy] = None,
    tariff: Optional[TariffBase] = None,
    grid_import_limit_kw: Optional[float] = None,
    grid_export_limit_kw: Optional[float] = None,
    initial_soc_kwh: Optional[float] = None,
    month: int = 1,
) -> DispatchResult:
    """Simulate one day of battery operation.

    Parameters
    ----------
    production_kw, load_kw : array_like, shape (24,)
        Hourly PV output and site load (kW, non-negative).
    battery : BatteryParameters
        Battery ratings; usable capacity is ``capacity * depth_of_discharge``.
    policy : ControlPolicy, optional
        Charge/discharge rule.  Defaults to :class:`SelfConsumptionPolicy`.
    tariff : TariffBase, optional
        Import/export prices.  Defaults to a :class:`FlatTariff`.
    grid_import_limit_kw, grid_export_limit_kw : float, optional
        Grid connection limits.  ``None`` means unlimited.
    initial_soc_kwh : float, optional
        Starting SOC; defaults to 50 % of usable capacity.
    month : int
        Month passed to the tariff.

    Returns
    -------
    DispatchResult
    """
    production = _day_profile(production_kw, "production_kw")
    load = _day_profile(load_kw, "load_kw")
    import_limit = _limit(grid_import_limit_kw, "grid_import_limit_kw")
    export_limit = _limit(grid_export_limit_kw, "grid_export_limit_kw")
    policy = policy if policy is not None else SelfConsumptionPolicy()
    tariff = tariff if tariff is not None else FlatTariff()

    tracker = SOCTracker(battery, initial_soc_kwh)
    initial_soc = tracker.soc_kwh
    average_rate = tariff.average_buy_price(month)

    flows = {
        key: np.zeros(HOURS_PER_DAY, dtype=np.float64)
        for key in (
            "charge", "discharge", "soc", "grid_import", "grid_export",
            "pv_to_load", "pv_to_battery", "pv_to_grid", "battery_to_load",
            "grid_to_load", "curtailed", "unserved", "cost",
        )
    }
    peak_import = 0.0

    for hour in range(HOURS_PER_DAY):
        pv = float(production[hour])
        demand = float(load[hour])
        balance = pv - demand
        buy = tariff.buy_price(hour, month)
        sell = tariff.sell_price(hour, month)

        projected_import = max(-balance, 0.0)
        peak_import = max(peak_import, projected_import)
        ctx = HourContext(
            hour=hour,
            month=month,
            import_rate=buy,
            average_import_rate=average_rate,
            projected_import_kw=projected_import,
            peak_import_kw=peak_import,
            soc_kwh=tracker.soc_kwh,
            usable_capacity_kwh=tracker.usable_kwh,
        )

        charge = discharge = grid_import = grid_export = 0.0
        curtailed = unserved = 0.0

        if balance > 0:
            flows["pv_to_load"][hour] = demand
            if policy.should_charge(ctx):
                charge = tracker.charge(balance)
            remaining = balance - charge
            grid_export = min(remaining, export_limit)
            curtailed = remaining - grid_export
        else:
            flows["pv_to_load"][hour] = pv
            deficit = -balance
            if deficit > 0 and policy.should_discharge(ctx):
                discharge = tracker.discharge(deficit)
            remaining = deficit - discharge
            grid_import = min(remaining, import_limit)
            unserved = remaining - grid_import

        flows["charge"][hour] = charge
        flows["discharge"][hour] = discharge
        flows["soc"][hour] = tracker.soc_kwh
        flows["grid_import"][hour] = grid_import
        flows["grid_export"][hour] = grid_export
        flows["pv_to_battery"][hour] = charge
        flows["pv_to_grid"][hour] = grid_export
        flows["battery_to_load"][hour] = discharge
        flows["grid_to_load"][hour] = grid_import
        flows["curtailed"][hour] = curtailed
        flows["unserved"][hour] = unserved
        flows["cost"][hour] = grid_import * buy - grid_export * sell

    total_production = float(production.sum())
    total_load = float(load.sum())
    self_consumed = float(flows["pv_to_load"].sum() + flows["pv_to_battery"].sum())
    total_import = float(flows["grid_import"].sum())

    result = DispatchResult(
        charge_kwh=tuple(flows["charge"].tolist()),
        discharge_kwh=tuple(flows["discharge"].tolist()),
        soc_kwh=tuple(flows["soc"].tolist()),
        grid_import_kwh=tuple(flows["grid_import"].tolist()),
        grid_export_kwh=tuple(flows["grid_export"].tolist()),
        pv_to_load_kwh=tuple(flows["pv_to_load"].tolist()),
        pv_to_battery_kwh=tuple(flows["pv_to_battery"].tolist()),
        pv_to_grid_kwh=tuple(flows["pv_to_grid"].tolist()),
        battery_to_load_kwh=tuple(flows["battery_to_load"].tolist()),
        grid_to_load_kwh=tuple(flows["grid_to_load"].tolist()),
        curtailed_kwh=tuple(flows["curtailed"].tolist()),
        unserved_kwh=tuple(flows["unserved"].tolist()),
        cost=tuple(flows["cost"].tolist()),
        initial_soc_kwh=initial_soc,
        usable_capacity_kwh=tracker.usable_kwh,
        total_production_kwh=total_production,
        total_load_kwh=total_load,
        self_consumption_rate=self_consumed / total_production if total_production > 0 else 0.0,
        self_sufficiency_rate=(total_load - total_import) / total_load if total_load > 0 else 0.0,
        daily_cost=float(flows["cost"].sum()),
        cycle_equivalent=(
            tracker.charge_throughput_kwh + tracker.discharge_throughput_kwh
        ) / battery.capacity_kwh,
    )

    unserved_total = result.total_unserved_kwh
    if unserved_total > 0:
        logger.warning(
            "Dispatch left %.2f kWh of load unserved (import limit %.1f kW)",
            unserved_total, import_limit,
        )
    logger.debug(
        "Dispatch (%s): cost %.2f, self-consumption %.1f%%, final SOC %.2f kWh",
        policy.name, result.daily_cost, result.self_consumption_rate * 100.0,
        result.final_soc_kwh,
    )
    return result


# ======================================================================
# Multi-day with aging
# ======================================================================

def simulate_days(
    production_days: Sequence[ArrayLike],
    load_days: Sequence[ArrayLike],
    battery: BatteryParameters,
    policy: Optional[ControlPolicy] = None,
    tariff: Optional[TariffBase] = None,
    grid_import_limit_kw: Optional[float] = None,
    grid_export_limit_kw: Optional[float] = None,
    initial_soc_kwh: Optional[float] = None,
    months: Optional[Sequence[int]] = None,
) -> MultiDayDispatchResult:
    """Run consecutive days, carrying SOC and capacity fade between them.

    After each day the battery ages by its equivalent full cycles and by
    one calendar day; the next day runs on the derated capacity with the
    previous final SOC clipped to the new usable capacity.
    """
    if len(production_days) != len(load_days):
        raise InvalidParameterError(
            f"got {len(production_days)} production days but {len(load_days)} load days"
        )
    if months is not None and len(months) != len(production_days):
        raise InvalidParameterError("months must have one entry per day")

    days: list[DispatchResult] = []
    factors: list[float] = []
    cycles = 0.0
    soc = initial_soc_kwh
    current = battery

    for i, (production, load) in enumerate(zip(production_days, load_days)):
        day = simulate_dispatch(
            production, load, current,
            policy=policy,
            tariff=tariff,
            grid_import_limit_kw=grid_import_limit_kw,
            grid_export_limit_kw=grid_export_limit_kw,
            initial_soc_kwh=soc,
            month=months[i] if months is not None else 1,
        )
        days.append(day)

        # Cycles are counted against the nominal capacity.
        cycles += day.equivalent_full_cycles * current.capacity_kwh / battery.capacity_kwh
        factor = capacity_factor(battery, cycles, (i + 1) / DAYS_PER_YEAR)
        factors.append(factor)
        current = battery.derated(factor)
        soc = min(day.final_soc_kwh, current.usable_capacity_kwh)

    return MultiDayDispatchResult(days=tuple(days), capacity_factors=tuple(factors))


# ======================================================================
# Baseline without storage
# ======================================================================

def baseline_daily_cost(
    production_kw: ArrayLike,
    load_kw: ArrayLike,
    tariff: Optional[TariffBase] = None,
    grid_import_limit_kw: Optional[float] = None,
    grid_export_limit_kw: Optional[float] = None,
    month: int = 1,
) -> float:
    """Net grid cost of the same day with PV but no battery."""
    production = _day_profile(production_kw, "production_kw")
    load = _day_profile(load_kw, "load_kw")
    import_limit = _limit(grid_import_limit_kw, "grid_import_limit_kw")
    export_limit = _limit(grid_export_limit_kw, "grid_export_limit_kw")
    tariff = tariff if tariff is not None else FlatTariff()

    grid_import = np.minimum(np.maximum(load - production, 0.0), import_limit)
    grid_export = np.minimum(np.maximum(production - load, 0.0), export_limit)
    buy = np.array([tariff.buy_price(h, month) for h in range(HOURS_PER_DAY)])
    sell = np.array([tariff.sell_price(h, month) for h in range(HOURS_PER_DAY)])
    return float(np.sum(grid_import * buy - grid_export * sell))
