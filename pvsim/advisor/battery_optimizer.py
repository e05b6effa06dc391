"""
Battery operating-strategy and sizing advisor.

Searches the control-policy parameters and the battery capacity that
work best for a typical day, using the dispatch simulator as the model.

Time-of-use thresholds
----------------------
On a single day a threshold only matters through which tariff rates lie
below or above it.  Candidate thresholds are therefore placed between
consecutive distinct rates (plus one below the cheapest and one above
the dearest), and every charge/discharge pair is simulated.  The search
is exhaustive over all distinct behaviours.

Peak-shaving fraction
---------------------
``PeakShavingPolicy.peak_fraction`` is swept over a fixed grid from 50 %
to 95 %.  A candidate is valued per month: the demand charge avoided on
the reduced import peak plus thirty days of energy-cost savings.

Battery size
------------
Capacities up to a ceiling derived from the day's shiftable energy are
priced with :func:`pvsim.economics.battery.battery_economics`; the
largest NPV wins, and no battery is recommended when none is positive.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Optional

import numpy as np
from numpy.typing import ArrayLike

from pvsim.battery.parameters import BatteryParameters
from pvsim.core.errors import InvalidParameterError
from pvsim.dispatch.policies import ControlPolicy, PeakShavingPolicy, SelfConsumptionPolicy, TimeOfUsePolicy
from pvsim.dispatch.simulator import (
    HOURS_PER_DAY,
    DispatchResult,
    baseline_daily_cost,
    simulate_dispatch,
)
from pvsim.dispatch.tariff import FlatTariff, TariffBase
from pvsim.economics.battery import BatteryEconomics, battery_economics

logger = logging.getLogger(__name__)

DAYS_PER_MONTH: int = 30
DAYS_PER_YEAR: int = 365
MONTHS_PER_YEAR: int = 12

PEAK_FRACTION_MIN: float = 0.5
PEAK_FRACTION_MAX: float = 0.95
PEAK_FRACTION_STEPS: int = 21

SIZE_STEPS: int = 10
SIZE_MARGIN: float = 1.2
SIZE_C_RATE: float = 0.5


# ======================================================================
# Result records
# ======================================================================

@dataclass(frozen=True)
class TimeOfUseOptimization:
    policy: TimeOfUsePolicy
    daily_savings: float
    dispatch: DispatchResult
    candidates_tried: int


@dataclass(frozen=True)
class PeakShavingCandidate:
    peak_fraction: float
    peak_import_kw: float
    monthly_savings: float


@dataclass(frozen=True)
class PeakShavingOptimization:
    """Best peak-shaving fraction and the sweep behind it.

    ``monthly_savings`` is the demand charge avoided on the import peak
    plus :data:`DAYS_PER_MONTH` days of energy-cost savings.
    """

    policy: PeakShavingPolicy
    baseline_peak_kw: float
    peak_import_kw: float
    monthly_savings: float
    dispatch: DispatchResult
    candidates: tuple[PeakShavingCandidate, ...]


@dataclass(frozen=True)
class BatterySizeOptimization:
    """Recommended capacity, ``0.0`` when no size pays back.

    ``candidates`` holds ``(capacity_kwh, npv)`` for every size priced.
    """

    capacity_kwh: float
    npv: float
    economics: Optional[BatteryEconomics]
    candidates: tuple[tuple[float, float], ...]


@dataclass(frozen=True)
class PolicyComparison:
    annual_savings: dict[str, float]
    recommended: ControlPolicy


# ======================================================================
# Helpers
# ======================================================================

def _daily_rates(tariff: TariffBase, month: int) -> list[float]:
    return sorted({tariff.buy_price(h, month) for h in range(HOURS_PER_DAY)})


def _threshold_candidates(rates: list[float]) -> list[float]:
    """Thresholds separating every pair of neighbouring distinct rates."""
    margin = max(rates[-1] - rates[0], 1.0) * 0.5
    between = [(lo + hi) / 2.0 for lo, hi in zip(rates, rates[1:])]
    return [rates[0] - margin] + between + [rates[-1] + margin]


def _import_peak(production_kw: ArrayLike, load_kw: ArrayLike) -> float:
    net = np.asarray(load_kw, dtype=np.float64) - np.asarray(production_kw, dtype=np.float64)
    return float(max(net.max(), 0.0))


def max_useful_capacity(
    production_kw: ArrayLike,
    load_kw: ArrayLike,
    round_trip_efficiency: float,
) -> float:
    """Upper bound on capacity worth considering for one day.

    The energy that can be shifted is the smaller of the day's PV surplus
    and its deficit; a 20 % margin is added and the efficiency loss
    compensated.
    """
    if not 0 < round_trip_efficiency <= 1.0:
        raise InvalidParameterError(
            f"round_trip_efficiency must be in (0, 1], got {round_trip_efficiency}"
        )
    net = np.asarray(production_kw, dtype=np.float64) - np.asarray(load_kw, dtype=np.float64)
    surplus = float(np.maximum(net, 0.0).sum())
    deficit = float(np.maximum(-net, 0.0).sum())
    return min(surplus, deficit) * SIZE_MARGIN / math.sqrt(round_trip_efficiency)


# ======================================================================
# Time-of-use thresholds
# ======================================================================

def optimize_time_of_use(
    production_kw: ArrayLike,
    load_kw: ArrayLike,
    battery: BatteryParameters,
    tariff: TariffBase,
    grid_import_limit_kw: Optional[float] = None,
    grid_export_limit_kw: Optional[float] = None,
    month: int = 1,
) -> TimeOfUseOptimization:
    """Charge and discharge thresholds with the lowest daily cost.

    Parameters
    ----------
    production_kw, load_kw : array_like, shape (24,)
        Typical day PV output and load (kW).
    battery : BatteryParameters
        Battery being operated.
    tariff : TariffBase
        Prices the thresholds are searched against.
    grid_import_limit_kw, grid_export_limit_kw : float, optional
        Grid connection limits.
    month : int
        Month passed to the tariff.

    Returns
    -------
    TimeOfUseOptimization
        The best policy and its savings against the same day without a
        battery.  Ties keep the first pair found, lowest thresholds first.
    """
    baseline = baseline_daily_cost(
        production_kw, load_kw, tariff,
        grid_import_limit_kw=grid_import_limit_kw,
        grid_export_limit_kw=grid_export_limit_kw,
        month=month,
    )
    thresholds = _threshold_candidates(_daily_rates(tariff, month))

    best: Optional[tuple[float, TimeOfUsePolicy, DispatchResult]] = None
    for charge_at in thresholds:
        for discharge_at in thresholds:
            policy = TimeOfUsePolicy(charge_threshold=charge_at, discharge_threshold=discharge_at)
            day = simulate_dispatch(
                production_kw, load_kw, battery,
                policy=policy,
                tariff=tariff,
                grid_import_limit_kw=grid_import_limit_kw,
                grid_export_limit_kw=grid_export_limit_kw,
                month=month,
            )
            savings = baseline - day.daily_cost
            if best is None or savings > best[0]:
                best = (savings, policy, day)

    savings, policy, day = best
    logger.info(
        "TOU thresholds: charge below %.4f, discharge above %.4f, saves %.2f/day",
        policy.charge_threshold, policy.discharge_threshold, savings,
        extra={"stage": "optimize"},
    )
    return TimeOfUseOptimization(
        policy=policy,
        daily_savings=savings,
        dispatch=day,
        candidates_tried=len(thresholds) ** 2,
    )


# ======================================================================
# Peak-shaving fraction
# ======================================================================

def optimize_peak_shaving(
    production_kw: ArrayLike,
    load_kw: ArrayLike,
    battery: BatteryParameters,
    demand_charge_rate: float,
    tariff: Optional[TariffBase] = None,
    month: int = 1,
) -> PeakShavingOptimization:
    """Peak-shaving fraction with the highest monthly savings.

    Parameters
    ----------
    production_kw, load_kw : array_like, shape (24,)
        Typical day PV output and load (kW).
    battery : BatteryParameters
        Battery being operated.
    demand_charge_rate : float
        Monthly charge per kW of peak grid import ($/kW).
    tariff : TariffBase, optional
        Energy prices; a :class:`FlatTariff` by default.
    month : int
        Month passed to the tariff.
    """
    if demand_charge_rate < 0:
        raise InvalidParameterError(f"demand_charge_rate must be >= 0, got {demand_charge_rate}")
    tariff = tariff if tariff is not None else FlatTariff()

    baseline_cost = baseline_daily_cost(production_kw, load_kw, tariff, month=month)
    baseline_peak = _import_peak(production_kw, load_kw)

    candidates: list[PeakShavingCandidate] = []
    best: Optional[tuple[PeakShavingCandidate, DispatchResult]] = None
    for fraction in np.linspace(PEAK_FRACTION_MIN, PEAK_FRACTION_MAX, PEAK_FRACTION_STEPS):
        policy = PeakShavingPolicy(peak_fraction=float(fraction))
        day = simulate_dispatch(production_kw, load_kw, battery, policy=policy, tariff=tariff, month=month)
        peak = max(day.grid_import_kwh)
        monthly = (
            demand_charge_rate * (baseline_peak - peak)
            + DAYS_PER_MONTH * (baseline_cost - day.daily_cost)
        )
        candidate = PeakShavingCandidate(float(fraction), peak, monthly)
        candidates.append(candidate)
        if best is None or monthly > best[0].monthly_savings:
            best = (candidate, day)

    chosen, day = best
    logger.info(
        "Peak shaving: fraction %.3f cuts import peak %.2f -> %.2f kW, saves %.2f/month",
        chosen.peak_fraction, baseline_peak, chosen.peak_import_kw, chosen.monthly_savings,
        extra={"stage": "optimize"},
    )
    return PeakShavingOptimization(
        policy=PeakShavingPolicy(peak_fraction=chosen.peak_fraction),
        baseline_peak_kw=baseline_peak,
        peak_import_kw=chosen.peak_import_kw,
        monthly_savings=chosen.monthly_savings,
        dispatch=day,
        candidates=tuple(candidates),
    )


# ======================================================================
# Battery size
# ======================================================================

def optimize_battery_size(
    production_kw: ArrayLike,
    load_kw: ArrayLike,
    template: BatteryParameters,
    policy: Optional[ControlPolicy] = None,
    tariff: Optional[TariffBase] = None,
    years: Optional[int] = None,
    discount_rate: Optional[float] = None,
    price_inflation: Optional[float] = None,
    max_capacity_kwh: Optional[float] = None,
) -> BatterySizeOptimization:
    """Capacity with the highest battery NPV over the analysis horizon.

    Every candidate copies *template* (chemistry, efficiency, depth of
    discharge, life and cost per kWh) with the capacity replaced and
    power limits at 0.5C.  Ten evenly spaced sizes up to
    *max_capacity_kwh* (default :func:`max_useful_capacity`) are priced.

    Raises
    ------
    InvalidParameterError
        If the template carries no cost per kWh.
    """
    if template.cost_per_kwh <= 0:
        raise InvalidParameterError("template battery needs a positive cost_per_kwh")

    ceiling = (
        max_useful_capacity(production_kw, load_kw, template.round_trip_efficiency)
        if max_capacity_kwh is None else max_capacity_kwh
    )
    if ceiling <= 0:
        logger.info("No shiftable energy; battery not recommended")
        return BatterySizeOptimization(capacity_kwh=0.0, npv=0.0, economics=None, candidates=())

    candidates: list[tuple[float, float]] = []
    best: Optional[BatteryEconomics] = None
    best_capacity = 0.0
    for capacity in np.linspace(ceiling / SIZE_STEPS, ceiling, SIZE_STEPS):
        capacity = float(capacity)
        battery = replace(
            template,
            capacity_kwh=capacity,
            max_charge_kw=capacity * SIZE_C_RATE,
            max_discharge_kw=capacity * SIZE_C_RATE,
        )
        result = battery_economics(
            battery, production_kw, load_kw,
            policy=policy,
            tariff=tariff,
            years=years,
            discount_rate=discount_rate,
            price_inflation=price_inflation,
        )
        candidates.append((capacity, result.metrics.npv))
        if result.metrics.npv > 0 and (best is None or result.metrics.npv > best.metrics.npv):
            best, best_capacity = result, capacity

    if best is None:
        logger.info("No battery size up to %.1f kWh has a positive NPV", ceiling)
        return BatterySizeOptimization(
            capacity_kwh=0.0, npv=0.0, economics=None, candidates=tuple(candidates),
        )

    logger.info(
        "Battery size: %.1f kWh, NPV %.0f", best_capacity, best.metrics.npv,
        extra={"stage": "optimize"},
    )
    return BatterySizeOptimization(
        capacity_kwh=best_capacity,
        npv=best.metrics.npv,
        economics=best,
        candidates=tuple(candidates),
    )


# ======================================================================
# Strategy comparison
# ======================================================================

def compare_policies(
    production_kw: ArrayLike,
    load_kw: ArrayLike,
    battery: BatteryParameters,
    tariff: TariffBase,
    demand_charge_rate: float = 0.0,
    month: int = 1,
) -> PolicyComparison:
    """Annual savings of self-consumption and the tuned TOU and peak-shaving policies.

    Energy savings are counted on every day of the year and the demand
    charge reduction in every month.  The policy with the highest total
    is recommended; ties keep the order self-consumption, time-of-use,
    peak-shaving.
    """
    baseline_cost = baseline_daily_cost(production_kw, load_kw, tariff, month=month)
    baseline_peak = _import_peak(production_kw, load_kw)

    def annual(day: DispatchResult) -> float:
        peak_cut = baseline_peak - max(day.grid_import_kwh)
        return (
            DAYS_PER_YEAR * (baseline_cost - day.daily_cost)
            + MONTHS_PER_YEAR * demand_charge_rate * peak_cut
        )

    self_consumption = SelfConsumptionPolicy()
    tou = optimize_time_of_use(production_kw, load_kw, battery, tariff, month=month)
    peak = optimize_peak_shaving(production_kw, load_kw, battery, demand_charge_rate, tariff, month)
    options: list[tuple[ControlPolicy, DispatchResult]] = [
        (
            self_consumption,
            simulate_dispatch(production_kw, load_kw, battery, policy=self_consumption,
                              tariff=tariff, month=month),
        ),
        (tou.policy, tou.dispatch),
        (peak.policy, peak.dispatch),
    ]

    savings: dict[str, float] = {}
    recommended = options[0][0]
    for policy, day in options:
        savings[policy.name] = annual(day)
        if savings[policy.name] > savings[recommended.name]:
            recommended = policy

    return PolicyComparison(annual_savings=savings, recommended=recommended)
