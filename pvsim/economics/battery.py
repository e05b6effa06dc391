"""
Battery storage economics layered on an existing PV system.

Savings are the difference between a typical day's grid bill without
and with the battery, scaled to a year and escalated with electricity
prices.  The pack is replaced whenever its cycle or calendar life runs
out inside the horizon, at a price that falls 5 % per year.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from numpy.typing import ArrayLike

from pvsim.battery.degradation import battery_lifespan_years, replacement_years
from pvsim.battery.parameters import BatteryParameters
from pvsim.config import settings
from pvsim.dispatch.policies import ControlPolicy
from pvsim.dispatch.simulator import DispatchResult, baseline_daily_cost, simulate_dispatch
from pvsim.dispatch.tariff import TariffBase
from pvsim.economics.metrics import FinancialMetrics, compute_financial_metrics

logger = logging.getLogger(__name__)

DAYS_PER_YEAR: int = 365
BATTERY_OM_FRACTION: float = 0.01
REPLACEMENT_COST_DECLINE: float = 0.05


@dataclass(frozen=True)
class BatteryEconomics:
    dispatch: DispatchResult
    baseline_daily_cost: float
    annual_savings: float
    lifespan_years: float
    replacement_costs: tuple[tuple[int, float], ...]
    metrics: FinancialMetrics


def battery_economics(
    battery: BatteryParameters,
    production_kw: ArrayLike,
    load_kw: ArrayLike,
    policy: Optional[ControlPolicy] = None,
    tariff: Optional[TariffBase] = None,
    years: Optional[int] = None,
    discount_rate: Optional[float] = None,
    price_inflation: Optional[float] = None,
    om_fraction: float = BATTERY_OM_FRACTION,
    grid_import_limit_kw: Optional[float] = None,
    grid_export_limit_kw: Optional[float] = None,
    month: int = 1,
    dispatch: Optional[DispatchResult] = None,
) -> BatteryEconomics:
    """Project the economics of adding *battery* to a PV system.

    Parameters
    ----------
    battery : BatteryParameters
        Battery with cost fields populated (``total_cost > 0``).
    production_kw, load_kw : array_like, shape (24,)
        A typical day's PV output and load.
    policy, tariff : optional
        Dispatch policy and tariff for the typical day.
    years, discount_rate, price_inflation : optional
        Settings defaults when omitted.
    om_fraction : float
        Yearly O&M as a fraction of the battery cost.
    grid_import_limit_kw, grid_export_limit_kw : float, optional
        Grid connection limits applied to both the baseline and the
        battery day.  ``None`` means unlimited.
    month : int
        Month passed to the tariff.
    dispatch : DispatchResult, optional
        An already simulated battery day for the same inputs.  Reused
        as-is instead of dispatching again.

    Returns
    -------
    BatteryEconomics
    """
    years = settings.analysis_years if years is None else years
    inflation = settings.price_inflation if price_inflation is None else price_inflation

    baseline = baseline_daily_cost(
        production_kw, load_kw, tariff,
        grid_import_limit_kw=grid_import_limit_kw,
        grid_export_limit_kw=grid_export_limit_kw,
        month=month,
    )
    day = dispatch
    if day is None:
        day = simulate_dispatch(
            production_kw, load_kw, battery,
            policy=policy,
            tariff=tariff,
            grid_import_limit_kw=grid_import_limit_kw,
            grid_export_limit_kw=grid_export_limit_kw,
            month=month,
        )
    annual_savings = (baseline - day.daily_cost) * DAYS_PER_YEAR

    lifespan = battery_lifespan_years(battery, day.equivalent_full_cycles)
    replacements = tuple(
        (year, battery.total_cost * (1.0 - REPLACEMENT_COST_DECLINE) ** year)
        for year in replacement_years(lifespan, years)
    )
    replacement_by_year = dict(replacements)
    om = battery.total_cost * om_fraction

    metrics = compute_financial_metrics(
        battery.total_cost,
        lambda year: annual_savings * (1.0 + inflation) ** (year - 1),
        annual_maintenance=om,
        years=years,
        discount_rate=discount_rate,
        annual_energy_kwh=sum(day.discharge_kwh) * DAYS_PER_YEAR,
        extra_cash_flow=lambda year: -replacement_by_year.get(year, 0.0),
    )
    logger.info(
        "Battery %s: saves %.0f/yr, lifespan %.1f yr, %d replacements",
        battery.model or f"{battery.capacity_kwh:g} kWh", annual_savings, lifespan,
        len(replacements),
    )
    return BatteryEconomics(
        dispatch=day,
        baseline_daily_cost=baseline,
        annual_savings=annual_savings,
        lifespan_years=lifespan,
        replacement_costs=replacements,
        metrics=metrics,
    )
