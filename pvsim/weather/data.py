"""
Immutable weather records consumed by the production model.

A :class:`WeatherData` holds, for one location, a set of months; each
month holds daily records; each day holds exactly 24 hourly samples of
GHI, DHI, ambient temperature, wind speed and relative humidity.

Records are validated on construction.  A day with fewer than 24
samples, or with a NaN sample, raises :class:`MissingWeatherDataError`
instead of being padded, and looking up an absent month or day raises
the same error.
"""

from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np
from numpy.typing import NDArray

from pvsim.core.errors import InvalidParameterError, MissingWeatherDataError

HOURS_PER_DAY: int = 24

_SERIES = ("ghi", "dhi", "temperature", "wind_speed", "humidity")


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float
    address: str = ""
    time_zone: str = "UTC"
    elevation: float = 0.0

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise InvalidParameterError(f"latitude must be within [-90, 90], got {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise InvalidParameterError(
                f"longitude must be within [-180, 180], got {self.longitude}"
            )


@dataclass(frozen=True)
class HourlyWeather:
    """A single hourly weather sample."""

    timestamp: dt.datetime
    ghi: float
    dhi: float
    temperature: float
    wind_speed: float = 1.0
    humidity: float = 50.0

    @property
    def month(self) -> int:
        return self.timestamp.month

    @property
    def hour(self) -> int:
        return self.timestamp.hour


@dataclass(frozen=True)
class DailyWeather:
    """24 hourly samples for one calendar day.

    Sequences are stored as tuples of floats so the record is hashable.
    """

    date: dt.date
    ghi: tuple[float, ...]
    dhi: tuple[float, ...]
    temperature: tuple[float, ...]
    wind_speed: tuple[float, ...]
    humidity: tuple[float, ...]

    def __post_init__(self) -> None:
        for name in _SERIES:
            values = tuple(float(v) for v in getattr(self, name))
            if len(values) < HOURS_PER_DAY:
                raise MissingWeatherDataError(
                    f"{self.date}: {name} has {len(values)} of {HOURS_PER_DAY} hourly samples"
                )
            if len(values) > HOURS_PER_DAY:
                raise InvalidParameterError(
                    f"{self.date}: {name} has {len(values)} samples, expected {HOURS_PER_DAY}"
                )
            missing = [h for h, v in enumerate(values) if math.isnan(v)]
            if missing:
                raise MissingWeatherDataError(
                    f"{self.date}: {name} is missing hours {missing}"
                )
            object.__setattr__(self, name, values)

    @property
    def day_of_year(self) -> int:
        return self.date.timetuple().tm_yday

    def hour(self, hour: int) -> HourlyWeather:
        if not 0 <= hour < HOURS_PER_DAY:
            raise MissingWeatherDataError(f"{self.date}: no sample for hour {hour}")
        return HourlyWeather(
            timestamp=dt.datetime.combine(self.date, dt.time(hour)),
            ghi=self.ghi[hour],
            dhi=self.dhi[hour],
            temperature=self.temperature[hour],
            wind_speed=self.wind_speed[hour],
            humidity=self.humidity[hour],
        )

    def array(self, name: str) -> NDArray[np.float64]:
        return np.asarray(getattr(self, name), dtype=np.float64)


@dataclass(frozen=True)
class MonthlyWeather:
    year: int
    month: int
    days: tuple[DailyWeather, ...]

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise InvalidParameterError(f"month must be in 1..12, got {self.month}")
        object.__setattr__(self, "days", tuple(self.days))
        if not self.days:
            raise MissingWeatherDataError(f"{self.year}-{self.month:02d} has no daily records")
        for day in self.days:
            if (day.date.year, day.date.month) != (self.year, self.month):
                raise InvalidParameterError(
                    f"{day.date} does not belong to {self.year}-{self.month:02d}"
                )

    @property
    def day_count(self) -> int:
        return len(self.days)

    def day(self, day_of_month: int) -> DailyWeather:
        for record in self.days:
            if record.date.day == day_of_month:
                return record
        raise MissingWeatherDataError(
            f"{self.year}-{self.month:02d}-{day_of_month:02d} is absent"
        )

    def stacked(self, name: str) -> NDArray[np.float64]:
        """Return series *name* as an array of shape (days, 24)."""
        return np.asarray([getattr(d, name) for d in self.days], dtype=np.float64)

    def average_day(self, name: str) -> NDArray[np.float64]:
        """Hour-by-hour mean of series *name* across the month."""
        return self.stacked(name).mean(axis=0)


@dataclass(frozen=True)
class WeatherData:
    """Location-tagged weather record keyed by month (1 -- 12)."""

    location: Location
    months: tuple[MonthlyWeather, ...]

    def __post_init__(self) -> None:
        months = tuple(sorted(self.months, key=lambda m: m.month))
        seen = [m.month for m in months]
        if len(seen) != len(set(seen)):
            raise InvalidParameterError(f"duplicate months in weather record: {seen}")
        object.__setattr__(self, "months", months)

    @classmethod
    def from_days(cls, location: Location, days: Iterable[DailyWeather]) -> "WeatherData":
        """Group daily records into months."""
        grouped: dict[tuple[int, int], list[DailyWeather]] = {}
        for day in sorted(days, key=lambda d: d.date):
            grouped.setdefault((day.date.year, day.date.month), []).append(day)
        return cls(
            location=location,
            months=tuple(
                MonthlyWeather(year=y, month=m, days=tuple(d))
                for (y, m), d in grouped.items()
            ),
        )

    @property
    def available_months(self) -> tuple[int, ...]:
        return tuple(m.month for m in self.months)

    def month(self, month: int) -> MonthlyWeather:
        for record in self.months:
            if record.month == month:
                return record
        raise MissingWeatherDataError(
            f"no weather data for month {month} at {self.location.address or self.location.latitude}"
        )

    def require_months(self, months: Sequence[int] = tuple(range(1, 13))) -> None:
        missing = [m for m in months if m not in self.available_months]
        if missing:
            raise MissingWeatherDataError(f"weather data missing months {missing}")
