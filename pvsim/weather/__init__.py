"""Weather inputs: location, hourly/daily/monthly records and a synthetic year."""

from .data import (
    DailyWeather,
    HourlyWeather,
    Location,
    MonthlyWeather,
    WeatherData,
)
from .synthetic import synthetic_weather

__all__ = [
    "DailyWeather",
    "HourlyWeather",
    "Location",
    "MonthlyWeather",
    "WeatherData",
    "synthetic_weather",
]
