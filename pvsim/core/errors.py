"""Exception hierarchy for the simulation engine.

Validation errors derive from :class:`ValueError` so callers that only
guard against bad arguments keep working; missing weather samples derive
from :class:`LookupError`.
"""

from __future__ import annotations


class PVSimError(Exception):
    """Base class for all engine errors."""


class InvalidParameterError(PVSimError, ValueError):
    """A caller-supplied value is outside its permitted range."""


class IncompatibleComponentsError(PVSimError, ValueError):
    """Module strings cannot be matched to the inverter's MPPT window."""


class MissingWeatherDataError(PVSimError, LookupError):
    """A requested month, day or hourly sample is absent from the weather record."""
