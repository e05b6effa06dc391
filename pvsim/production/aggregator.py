"""
Production aggregation: hourly power to daily, monthly, annual and
multi-year energy.

A year can be swept either hour by hour over every recorded day, or over
one representative (hour-by-hour average) day per month whose energy is
scaled by the number of days in that month.  The second mode is about
30x cheaper and is what interactive sizing uses.

Energy bookkeeping uses 1-hour steps, so the sum of hourly W divided by
1000 is kWh.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np
from numpy.typing import NDArray

from pvsim.core.errors import InvalidParameterError
from pvsim.solar.module import degradation_factor
from pvsim.solar.pv_system import HourlySimulationResult, PVSystem, simulate_hour, simulate_hours
from pvsim.weather.data import HOURS_PER_DAY, DailyWeather, MonthlyWeather, WeatherData

logger = logging.getLogger(__name__)

_HOURS = np.arange(HOURS_PER_DAY, dtype=np.float64)


# ======================================================================
# Result records
# ======================================================================

@dataclass(frozen=True)
class MonthlyResult:
    """Aggregated production for one month.

    ``daily_profile`` holds the average day's AC energy per hour (kWh).
    ``lit_hours`` counts hours with non-zero POA irradiance (scaled by
    day count in representative-day mode) and weights the annual mean
    performance ratio.
    """

    month: int
    energy_ac_kwh: float
    energy_dc_kwh: float
    daily_profile: tuple[float, ...]
    ghi_kwh_m2: float
    poa_kwh_m2: float
    avg_ambient_temp: float
    avg_cell_temp: float
    performance_ratio: float
    specific_yield: float
    clipping_loss_kwh: float
    day_count: int
    lit_hours: float


@dataclass(frozen=True)
class AnnualResult:
    total_energy_kwh: float
    energy_dc_kwh: float
    dc_rating_kwp: float
    specific_yield: float
    performance_ratio: float
    clipping_loss_kwh: float
    degradation_rate: float
    monthly: tuple[MonthlyResult, ...]

    @property
    def monthly_energy(self) -> tuple[float, ...]:
        return tuple(m.energy_ac_kwh for m in self.monthly)


@dataclass(frozen=True)
class YearForecast:
    year: int
    degradation_factor: float
    energy_kwh: float
    specific_yield: float


# ======================================================================
# Daily
# ======================================================================

def simulate_day(system: PVSystem, day: DailyWeather) -> tuple[HourlySimulationResult, ...]:
    """Hourly model results for the 24 hours of *day*."""
    return tuple(simulate_hour(system, day.hour(h)) for h in range(HOURS_PER_DAY))


def daily_production_kw(system: PVSystem, day: DailyWeather) -> NDArray[np.float64]:
    """AC output of *day* as a 24-element array in kW."""
    out = simulate_hours(
        system,
        np.full(HOURS_PER_DAY, day.date.month),
        _HOURS,
        day.array("ghi"),
        day.array("dhi"),
        day.array("temperature"),
    )
    return out["ac_power"] / 1000.0


# ======================================================================
# Monthly
# ======================================================================

def simulate_month(
    system: PVSystem,
    weather: MonthlyWeather,
    representative_day: bool = False,
) -> MonthlyResult:
    """Aggregate one month of hourly output.

    Parameters
    ----------
    system : PVSystem
        System to simulate.
    weather : MonthlyWeather
        The month's daily records.
    representative_day : bool
        If True, simulate the hour-by-hour average day once and scale by
        ``weather.day_count``.

    Returns
    -------
    MonthlyResult
    """
    days = weather.day_count
    if representative_day:
        ghi = weather.average_day("ghi")
        dhi = weather.average_day("dhi")
        temp = weather.average_day("temperature")
        hours = _HOURS
        scale = float(days)
    else:
        ghi = weather.stacked("ghi").ravel()
        dhi = weather.stacked("dhi").ravel()
        temp = weather.stacked("temperature").ravel()
        hours = np.tile(_HOURS, days)
        scale = 1.0

    out = simulate_hours(system, np.full(hours.size, weather.month), hours, ghi, dhi, temp)
    ac = out["ac_power"]
    poa = out["poa"]
    lit = poa > 0.0

    energy_ac = float(np.sum(ac)) * scale / 1000.0
    energy_dc = float(np.sum(out["dc_power"])) * scale / 1000.0
    profile = ac.reshape(-1, HOURS_PER_DAY).mean(axis=0) / 1000.0

    lit_count = int(np.count_nonzero(lit))
    pr = float(np.mean(out["performance_ratio"][lit])) if lit_count else 0.0
    cell_temp = float(np.mean(out["cell_temp"][lit])) if lit_count else float(np.mean(temp))

    return MonthlyResult(
        month=weather.month,
        energy_ac_kwh=energy_ac,
        energy_dc_kwh=energy_dc,
        daily_profile=tuple(float(v) for v in profile),
        ghi_kwh_m2=float(np.sum(ghi)) * scale / 1000.0,
        poa_kwh_m2=float(np.sum(poa)) * scale / 1000.0,
        avg_ambient_temp=float(np.mean(temp)),
        avg_cell_temp=cell_temp,
        performance_ratio=pr,
        specific_yield=energy_ac / system.dc_rating_kwp,
        clipping_loss_kwh=float(np.sum(out["clipped_power"])) * scale / 1000.0,
        day_count=days,
        lit_hours=lit_count * scale,
    )


# ======================================================================
# Annual
# ======================================================================

def simulate_year(
    system: PVSystem,
    weather: WeatherData,
    representative_day: bool = False,
    progress_callback: Optional[Callable[[str, float], None]] = None,
) -> AnnualResult:
    """Simulate all twelve months and roll them up.

    Raises
    ------
    MissingWeatherDataError
        If any month is absent from *weather*.
    """
    weather.require_months()

    monthly: list[MonthlyResult] = []
    for month in range(1, 13):
        monthly.append(simulate_month(system, weather.month(month), representative_day))
        if progress_callback is not None:
            progress_callback("production", month / 12.0)

    total_ac = sum(m.energy_ac_kwh for m in monthly)
    lit_hours = sum(m.lit_hours for m in monthly)
    avg_pr = (
        sum(m.performance_ratio * m.lit_hours for m in monthly) / lit_hours
        if lit_hours > 0
        else 0.0
    )

    result = AnnualResult(
        total_energy_kwh=total_ac,
        energy_dc_kwh=sum(m.energy_dc_kwh for m in monthly),
        dc_rating_kwp=system.dc_rating_kwp,
        specific_yield=total_ac / system.dc_rating_kwp,
        performance_ratio=avg_pr,
        clipping_loss_kwh=sum(m.clipping_loss_kwh for m in monthly),
        degradation_rate=system.module.annual_degradation,
        monthly=tuple(monthly),
    )
    logger.info(
        "Annual production: %.0f kWh (%.0f kWh/kWp, PR %.1f%%)",
        result.total_energy_kwh, result.specific_yield, result.performance_ratio * 100.0,
        extra={"stage": "production", "energy_kwh": round(result.total_energy_kwh, 1)},
    )
    if result.clipping_loss_kwh > 0.01 * total_ac:
        logger.warning(
            "Inverter clipping removes %.0f kWh/yr (DC/AC ratio %.2f)",
            result.clipping_loss_kwh, system.dc_ac_ratio,
        )
    return result


# ======================================================================
# Multi-year forecast
# ======================================================================

def forecast_production(
    annual: AnnualResult,
    years: int,
    degradation_rate: Optional[float] = None,
) -> tuple[YearForecast, ...]:
    """Project annual energy over *years* with compounding degradation.

    Year ``y`` energy is ``E1 * (1 - d)^(y - 1)`` where ``d`` defaults to
    the module technology's rate recorded on *annual*.
    """
    if years < 1:
        raise InvalidParameterError(f"years must be >= 1, got {years}")
    rate = annual.degradation_rate if degradation_rate is None else degradation_rate
    if not 0.0 <= rate < 1.0:
        raise InvalidParameterError(f"degradation_rate must be in [0, 1), got {rate}")

    forecast = []
    for year in range(1, years + 1):
        factor = degradation_factor(rate, year)
        energy = annual.total_energy_kwh * factor
        forecast.append(
            YearForecast(
                year=year,
                degradation_factor=factor,
                energy_kwh=energy,
                specific_yield=energy / annual.dc_rating_kwp,
            )
        )
    return tuple(forecast)
