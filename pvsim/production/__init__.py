"""Monthly, annual and multi-year production aggregation."""

from .aggregator import (
    AnnualResult,
    MonthlyResult,
    YearForecast,
    daily_production_kw,
    forecast_production,
    simulate_day,
    simulate_month,
    simulate_year,
)

__all__ = [
    "AnnualResult",
    "MonthlyResult",
    "YearForecast",
    "daily_production_kw",
    "forecast_production",
    "simulate_day",
    "simulate_month",
    "simulate_year",
]
