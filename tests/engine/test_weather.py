"""Tests for pvsim.weather: record validation, lookup and synthetic data."""

from __future__ import annotations

import datetime as dt
import math

import numpy as np
import pytest

from pvsim.core.errors import InvalidParameterError, MissingWeatherDataError
from pvsim.weather import DailyWeather, Location, MonthlyWeather, WeatherData, synthetic_weather


def _day(date: dt.date, ghi_peak: float = 800.0, n: int = 24) -> DailyWeather:
    hours = np.arange(n)
    ghi = np.clip(ghi_peak * np.sin(np.pi * (hours - 6) / 12), 0.0, None)
    return DailyWeather(
        date=date,
        ghi=tuple(ghi),
        dhi=tuple(0.3 * ghi),
        temperature=tuple(np.full(n, 20.0)),
        wind_speed=tuple(np.full(n, 2.0)),
        humidity=tuple(np.full(n, 60.0)),
    )


class TestLocation:
    def test_valid(self, location):
        assert location.latitude == 37.77

    @pytest.mark.parametrize("lat,lon", [(95.0, 0.0), (0.0, 190.0)])
    def test_out_of_range(self, lat, lon):
        with pytest.raises(InvalidParameterError):
            Location(latitude=lat, longitude=lon)


class TestDailyWeather:
    """Tests for DailyWeather validation."""

    def test_values_stored_as_float_tuples(self):
        day = _day(dt.date(2023, 6, 1))
        assert isinstance(day.ghi, tuple)
        assert len(day.ghi) == 24
        assert all(isinstance(v, float) for v in day.ghi)
        assert day.day_of_year == 152

    def test_short_day_is_missing_data(self):
        """23 samples are not padded."""
        with pytest.raises(MissingWeatherDataError):
            _day(dt.date(2023, 6, 1), n=23)

    def test_long_day_is_invalid(self):
        with pytest.raises(InvalidParameterError):
            _day(dt.date(2023, 6, 1), n=25)

    def test_nan_sample_is_missing_data(self):
        ghi = [0.0] * 24
        ghi[12] = math.nan
        with pytest.raises(MissingWeatherDataError, match="12"):
            DailyWeather(
                date=dt.date(2023, 6, 1),
                ghi=ghi,
                dhi=[0.0] * 24,
                temperature=[20.0] * 24,
                wind_speed=[1.0] * 24,
                humidity=[50.0] * 24,
            )

    def test_hour_lookup(self):
        day = _day(dt.date(2023, 6, 1))
        sample = day.hour(12)
        assert sample.timestamp == dt.datetime(2023, 6, 1, 12)
        assert sample.month == 6
        assert sample.hour == 12
        assert sample.ghi == pytest.approx(800.0)
        with pytest.raises(MissingWeatherDataError):
            day.hour(24)


class TestMonthlyAndAnnual:
    """Tests for MonthlyWeather and WeatherData lookup."""

    def test_average_day(self):
        month = MonthlyWeather(
            year=2023, month=6,
            days=(_day(dt.date(2023, 6, 1), 600.0), _day(dt.date(2023, 6, 2), 1000.0)),
        )
        assert month.day_count == 2
        assert month.average_day("ghi")[12] == pytest.approx(800.0)
        assert month.stacked("ghi").shape == (2, 24)

    def test_day_from_other_month_rejected(self):
        with pytest.raises(InvalidParameterError):
            MonthlyWeather(year=2023, month=6, days=(_day(dt.date(2023, 7, 1)),))

    def test_missing_day(self):
        month = MonthlyWeather(year=2023, month=6, days=(_day(dt.date(2023, 6, 1)),))
        with pytest.raises(MissingWeatherDataError):
            month.day(15)

    def test_from_days_groups_months(self, location):
        days = [_day(dt.date(2023, 7, 2)), _day(dt.date(2023, 6, 1)), _day(dt.date(2023, 7, 1))]
        weather = WeatherData.from_days(location, days)
        assert weather.available_months == (6, 7)
        assert weather.month(7).day_count == 2
        assert weather.month(7).days[0].date == dt.date(2023, 7, 1)

    def test_missing_month(self, location):
        weather = WeatherData.from_days(location, [_day(dt.date(2023, 6, 1))])
        with pytest.raises(MissingWeatherDataError):
            weather.month(5)
        with pytest.raises(MissingWeatherDataError):
            weather.require_months()

    def test_duplicate_months_rejected(self, location):
        june = MonthlyWeather(year=2023, month=6, days=(_day(dt.date(2023, 6, 1)),))
        with pytest.raises(InvalidParameterError):
            WeatherData(location=location, months=(june, june))

    def test_missing_data_is_lookup_error(self):
        assert issubclass(MissingWeatherDataError, LookupError)


class TestSyntheticWeather:
    """Tests for synthetic_weather()."""

    def test_full_year(self, weather):
        assert weather.available_months == tuple(range(1, 13))
        assert sum(m.day_count for m in weather.months) == 365

    def test_deterministic(self, location, weather):
        assert synthetic_weather(location, year=2023, seed=42) == weather

    def test_seed_changes_data(self, location, weather):
        assert synthetic_weather(location, year=2023, seed=7) != weather

    def test_dark_at_night_and_dhi_bounded(self, weather):
        ghi = weather.month(6).stacked("ghi")
        dhi = weather.month(6).stacked("dhi")
        assert np.all(ghi[:, 0] == 0.0)
        assert np.all(dhi <= ghi + 1e-6)
        assert ghi[:, 12].min() > 0.0

    def test_summer_warmer_than_winter(self, weather):
        assert weather.month(7).average_day("temperature").mean() > weather.month(1).average_day("temperature").mean()
