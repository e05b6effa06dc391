"""Simulation orchestrator for PV + storage sizing studies.

``SimulationRunner`` wires the production, dispatch and economics
modules into one end-to-end run: annual production and its degradation
forecast, a typical-day battery dispatch against the site load, PV
investment metrics and, when a battery is present, storage economics.

:func:`simulate` is a pure function of a frozen :class:`SimulationInputs`;
:func:`simulate_cached` memoises it on those inputs.
"""

from __future__ import annotations

import functools
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np
from numpy.typing import NDArray

from pvsim.battery.parameters import BatteryParameters
from pvsim.config import settings
from pvsim.core.errors import InvalidParameterError
from pvsim.core.logging import simulation_run
from pvsim.dispatch.policies import ControlPolicy, SelfConsumptionPolicy
from pvsim.dispatch.simulator import DispatchResult, simulate_dispatch
from pvsim.dispatch.tariff import FlatTariff, TariffBase
from pvsim.economics.battery import BatteryEconomics, battery_economics
from pvsim.economics.financing import Incentives, Loan
from pvsim.economics.investment import analyze_pv_investment
from pvsim.economics.metrics import FinancialMetrics, RevenueModel
from pvsim.load.load_model import daily_load_profile, self_consumption_ratio
from pvsim.production.aggregator import AnnualResult, YearForecast, forecast_production, simulate_year
from pvsim.solar.pv_system import PVSystem
from pvsim.weather.data import WeatherData

logger = logging.getLogger(__name__)

# ======================================================================
# Inputs and results
# ======================================================================

@dataclass(frozen=True)
class EconomicInputs:
    """Prices and financing terms of the PV purchase."""

    system_cost: float
    electricity_rate: float = 0.15
    feed_in_tariff: float = 0.05
    srec_price_per_mwh: float = 0.0
    self_consumption_rate: float = 0.3
    incentives: Optional[Incentives] = None
    maintenance_fraction: Optional[float] = None
    loan: Optional[Loan] = None
    include_depreciation: bool = False
    years: Optional[int] = None
    discount_rate: Optional[float] = None
    price_inflation: Optional[float] = None


@dataclass(frozen=True)
class SimulationInputs:
    """Everything a run depends on.  Hashable, so usable as a cache key.

    ``self_consumption_rate`` in *economics* is only used when no site
    load is given; otherwise it is derived from the typical-day flows.
    """

    system: PVSystem
    weather: WeatherData
    representative_day: bool = True
    daily_load_kwh: Optional[float] = None
    load_profile: str = "residential"
    battery: Optional[BatteryParameters] = None
    policy: ControlPolicy = SelfConsumptionPolicy()
    tariff: TariffBase = FlatTariff()
    grid_import_limit_kw: Optional[float] = None
    grid_export_limit_kw: Optional[float] = None
    economics: Optional[EconomicInputs] = None
    forecast_years: Optional[int] = None


@dataclass(frozen=True)
class SimulationResult:
    production: AnnualResult
    forecast: tuple[YearForecast, ...]
    typical_day_production_kw: tuple[float, ...]
    self_consumption_rate: float
    dispatch: Optional[DispatchResult] = None
    pv_financials: Optional[FinancialMetrics] = None
    battery_financials: Optional[BatteryEconomics] = None


# ======================================================================
# Runner
# ======================================================================

class SimulationRunner:
    """End-to-end PV + storage simulation.

    Parameters
    ----------
    inputs : SimulationInputs
        Frozen description of the system, site, load, battery and prices.
    progress_callback : callable or None
        Optional ``callback(step: str, fraction: float)`` invoked at each
        major stage.  *fraction* ranges from 0.0 to 1.0.
    """

    def __init__(
        self,
        inputs: SimulationInputs,
        progress_callback: Callable[[str, float], None] | None = None,
    ) -> None:
        self.inputs = inputs
        self._progress = progress_callback

        if inputs.battery is not None and inputs.daily_load_kwh is None:
            raise InvalidParameterError("a battery study needs daily_load_kwh")

    # ------------------------------------------------------------------
    # Progress reporting
    # ------------------------------------------------------------------

    def _report(self, step: str, fraction: float) -> None:
        """Fire the progress callback if one was provided."""
        if self._progress is not None:
            try:
                self._progress(step, fraction)
            except Exception:
                logger.warning("Progress callback failed at %s", step, exc_info=True)
        logger.debug("Simulation step: %s (%.0f %%)", step, fraction * 100)

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    @staticmethod
    def _typical_day(annual: AnnualResult) -> NDArray[np.float64]:
        """Day-weighted mean hourly output over the year (kW)."""
        total_days = sum(m.day_count for m in annual.monthly)
        profile = np.zeros(24, dtype=np.float64)
        for month in annual.monthly:
            profile += np.asarray(month.daily_profile) * month.day_count
        return profile / total_days

    def run(self) -> SimulationResult:
        inputs = self.inputs
        started = time.perf_counter()

        self._report("production", 0.0)
        annual = simulate_year(
            inputs.system,
            inputs.weather,
            representative_day=inputs.representative_day,
            progress_callback=lambda _step, frac: self._report("production", 0.6 * frac),
        )
        years = inputs.forecast_years or (
            inputs.economics.years if inputs.economics and inputs.economics.years
            else settings.analysis_years
        )
        forecast = forecast_production(annual, years)
        typical_pv = self._typical_day(annual)

        dispatch: Optional[DispatchResult] = None
        load: Optional[NDArray[np.float64]] = None
        self_consumption = (
            inputs.economics.self_consumption_rate if inputs.economics is not None else 0.0
        )
        if inputs.daily_load_kwh is not None:
            load = daily_load_profile(inputs.daily_load_kwh, inputs.load_profile)
            self_consumption = self_consumption_ratio(typical_pv, load)

        if inputs.battery is not None and load is not None:
            self._report("dispatch", 0.7)
            dispatch = simulate_dispatch(
                typical_pv,
                load,
                inputs.battery,
                policy=inputs.policy,
                tariff=inputs.tariff,
                grid_import_limit_kw=inputs.grid_import_limit_kw,
                grid_export_limit_kw=inputs.grid_export_limit_kw,
            )
            self_consumption = dispatch.self_consumption_rate

        pv_financials: Optional[FinancialMetrics] = None
        battery_financials: Optional[BatteryEconomics] = None
        econ = inputs.economics
        if econ is not None:
            self._report("economics", 0.85)
            revenue = RevenueModel(
                annual_production_kwh=annual.total_energy_kwh,
                electricity_rate=econ.electricity_rate,
                self_consumption_rate=min(max(self_consumption, 0.0), 1.0),
                feed_in_tariff=econ.feed_in_tariff,
                srec_price_per_mwh=econ.srec_price_per_mwh,
                price_inflation=econ.price_inflation,
                degradation_rate=annual.degradation_rate,
            )
            pv_financials = analyze_pv_investment(
                econ.system_cost,
                revenue,
                incentives=econ.incentives,
                maintenance_fraction=econ.maintenance_fraction,
                loan=econ.loan,
                include_depreciation=econ.include_depreciation,
                years=years,
                discount_rate=econ.discount_rate,
            )
            if inputs.battery is not None and load is not None and inputs.battery.total_cost > 0:
                battery_financials = battery_economics(
                    inputs.battery,
                    typical_pv,
                    load,
                    policy=inputs.policy,
                    tariff=inputs.tariff,
                    years=years,
                    discount_rate=econ.discount_rate,
                    price_inflation=econ.price_inflation,
                    grid_import_limit_kw=inputs.grid_import_limit_kw,
                    grid_export_limit_kw=inputs.grid_export_limit_kw,
                    dispatch=dispatch,
                )

        self._report("done", 1.0)
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        logger.info(
            "Simulation finished in %.0f ms", elapsed_ms,
            extra={"stage": "done", "duration_ms": round(elapsed_ms, 1)},
        )
        return SimulationResult(
            production=annual,
            forecast=forecast,
            typical_day_production_kw=tuple(typical_pv.tolist()),
            self_consumption_rate=self_consumption,
            dispatch=dispatch,
            pv_financials=pv_financials,
            battery_financials=battery_financials,
        )


# ======================================================================
# Functional entry points
# ======================================================================

def simulate(
    inputs: SimulationInputs,
    progress_callback: Callable[[str, float], None] | None = None,
) -> SimulationResult:
    """Run the full pipeline for *inputs*."""
    with simulation_run():
        return SimulationRunner(inputs, progress_callback).run()


@functools.lru_cache(maxsize=settings.cache_size)
def simulate_cached(inputs: SimulationInputs) -> SimulationResult:
    """Memoised :func:`simulate`; identical inputs return the same result object."""
    return simulate(inputs)
