"""Deterministic synthetic weather for demonstrations and tests.

Builds a full calendar year of hourly samples from a clear-sky envelope
scaled by a random daily clearness, with a seasonal and diurnal
temperature cycle.  Seeded, so identical arguments give identical data.
"""

from __future__ import annotations

import calendar
import datetime as dt
import logging

import numpy as np

from pvsim.solar.geometry import solar_position
from pvsim.solar.irradiance import decompose_ghi, extraterrestrial_irradiance
from pvsim.weather.data import DailyWeather, Location, MonthlyWeather, WeatherData

logger = logging.getLogger(__name__)

_HOURS = np.arange(24, dtype=np.float64)


def synthetic_weather(
    location: Location,
    year: int = 2023,
    seed: int = 42,
    mean_temperature: float = 15.0,
    seasonal_swing: float = 10.0,
    diurnal_swing: float = 5.0,
    min_clearness: float = 0.45,
    max_clearness: float = 0.80,
) -> WeatherData:
    """Generate a year of synthetic hourly weather.

    Parameters
    ----------
    location : Location
        Site; its latitude drives the clear-sky envelope.
    year : int
        Calendar year of the generated dates.
    seed : int
        Random seed.
    mean_temperature, seasonal_swing, diurnal_swing : float
        Temperature model (degC).  The seasonal peak follows the local
        summer in either hemisphere.
    min_clearness, max_clearness : float
        Range of the daily clearness index.

    Returns
    -------
    WeatherData
        Twelve months with every day populated.
    """
    rng = np.random.default_rng(seed)
    hemisphere = 1.0 if location.latitude >= 0 else -1.0
    months: list[MonthlyWeather] = []

    for month in range(1, 13):
        sun = solar_position(location.latitude, month, _HOURS)
        elevation = np.asarray(sun.elevation, dtype=np.float64)
        zenith = 90.0 - elevation
        cos_zenith = np.maximum(np.sin(np.radians(elevation)), 0.0)
        season = hemisphere * np.sin(2.0 * np.pi * (month - 4) / 12.0)

        days: list[DailyWeather] = []
        for day in range(1, calendar.monthrange(year, month)[1] + 1):
            date = dt.date(year, month, day)
            doy = date.timetuple().tm_yday
            clearness = rng.uniform(min_clearness, max_clearness)

            ghi = extraterrestrial_irradiance(doy) * cos_zenith * clearness
            ghi = np.clip(ghi + rng.normal(0.0, 10.0, 24) * (cos_zenith > 0), 0.0, None)
            ghi = np.where(cos_zenith > 0, ghi, 0.0)
            dhi = np.asarray(decompose_ghi(ghi, doy, zenith), dtype=np.float64)

            temperature = (
                mean_temperature
                + seasonal_swing * season
                + diurnal_swing * np.sin(2.0 * np.pi * (_HOURS - 9.0) / 24.0)
                + rng.normal(0.0, 1.0, 24)
            )
            wind = 2.0 + rng.exponential(1.5, 24)
            humidity = np.clip(70.0 - 20.0 * np.sin(2.0 * np.pi * (_HOURS - 9.0) / 24.0)
                               + rng.normal(0.0, 5.0, 24), 10.0, 100.0)

            days.append(
                DailyWeather(
                    date=date,
                    ghi=tuple(np.round(ghi, 2)),
                    dhi=tuple(np.round(dhi, 2)),
                    temperature=tuple(np.round(temperature, 2)),
                    wind_speed=tuple(np.round(wind, 2)),
                    humidity=tuple(np.round(humidity, 1)),
                )
            )
        months.append(MonthlyWeather(year=year, month=month, days=tuple(days)))

    logger.debug("Generated synthetic weather for %s (%d, seed=%d)", location, year, seed)
    return WeatherData(location=location, months=tuple(months))
