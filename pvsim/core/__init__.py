"""Shared error hierarchy and logging setup."""

from .errors import (
    PVSimError,
    InvalidParameterError,
    IncompatibleComponentsError,
    MissingWeatherDataError,
)
from .logging import JSONFormatter, setup_logging, simulation_run

__all__ = [
    "PVSimError",
    "InvalidParameterError",
    "IncompatibleComponentsError",
    "MissingWeatherDataError",
    "JSONFormatter",
    "setup_logging",
    "simulation_run",
]
