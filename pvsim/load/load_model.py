"""Typical daily load and PV profiles for dispatch studies.

Templates give relative hourly consumption (24 values) for residential,
commercial and industrial sites; they are scaled to a requested daily
energy.  A clear-day PV bell curve is provided for quick dispatch runs
without a full production simulation.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pvsim.core.errors import InvalidParameterError

# ======================================================================
# Built-in hourly shape templates (24 values, relative kW)
# ======================================================================

# Residential: low overnight, breakfast bump, strong evening peak.
_RESIDENTIAL_HOURLY = np.array(
    [
        0.3, 0.2, 0.2, 0.2, 0.2, 0.3,  # 00-05
        0.5, 0.7, 0.9, 0.7, 0.6, 0.6,  # 06-11
        0.7, 0.7, 0.6, 0.6, 0.7, 1.0,  # 12-17
        1.2, 1.0, 0.8, 0.6, 0.4, 0.3,  # 18-23
    ],
    dtype=np.float64,
)

# Commercial: business-hours plateau.
_COMMERCIAL_HOURLY = np.array(
    [
        0.3, 0.3, 0.3, 0.3, 0.3, 0.4,  # 00-05
        0.5, 1.0, 1.5, 1.8, 1.9, 2.0,  # 06-11
        2.0, 2.0, 1.9, 1.8, 1.7, 1.5,  # 12-17
        1.0, 0.8, 0.6, 0.5, 0.4, 0.3,  # 18-23
    ],
    dtype=np.float64,
)

# Industrial: single-shift operation with base load overnight.
_INDUSTRIAL_HOURLY = np.array(
    [
        0.6, 0.6, 0.6, 0.6, 0.6, 0.8,  # 00-05
        1.5, 2.0, 2.2, 2.2, 2.2, 2.2,  # 06-11
        2.2, 2.2, 2.2, 2.2, 2.0, 1.5,  # 12-17
        1.0, 0.8, 0.7, 0.7, 0.6, 0.6,  # 18-23
    ],
    dtype=np.float64,
)

_PROFILES = {
    "residential": _RESIDENTIAL_HOURLY,
    "commercial": _COMMERCIAL_HOURLY,
    "industrial": _INDUSTRIAL_HOURLY,
}


# ======================================================================
# Public API
# ======================================================================

def daily_load_profile(
    daily_kwh: float,
    profile_type: str = "residential",
) -> NDArray[np.float64]:
    """Create a 24-element hourly load profile.

    Parameters
    ----------
    daily_kwh : float
        Energy consumed over the day (kWh).
    profile_type : str
        One of ``'residential'``, ``'commercial'`` or ``'industrial'``.

    Returns
    -------
    NDArray[np.float64]
        Shape ``(24,)`` hourly loads in kW summing to *daily_kwh*.

    Raises
    ------
    InvalidParameterError
        If *profile_type* is not recognised or *daily_kwh* is negative.
    """
    if daily_kwh < 0:
        raise InvalidParameterError(f"daily_kwh must be >= 0, got {daily_kwh}")

    profile_type = profile_type.lower()
    if profile_type not in _PROFILES:
        raise InvalidParameterError(
            f"Unknown profile_type '{profile_type}'. "
            f"Choose from: {sorted(_PROFILES.keys())}"
        )

    shape = _PROFILES[profile_type]
    return shape * (daily_kwh / shape.sum())


def daily_pv_profile(daily_kwh: float, sunrise: int = 6, sunset: int = 18) -> NDArray[np.float64]:
    """Clear-day PV output (kW per hour) as a half-sine between sunrise and sunset."""
    if daily_kwh < 0:
        raise InvalidParameterError(f"daily_kwh must be >= 0, got {daily_kwh}")
    if not 0 <= sunrise < sunset <= 24:
        raise InvalidParameterError(f"Need 0 <= sunrise < sunset <= 24, got {sunrise}, {sunset}")

    hours = np.arange(24, dtype=np.float64)
    shape = np.where(
        (hours >= sunrise) & (hours <= sunset),
        np.sin(np.pi * (hours - sunrise) / (sunset - sunrise)),
        0.0,
    )
    total = shape.sum()
    if total <= 0:
        return np.zeros(24, dtype=np.float64)
    return shape * (daily_kwh / total)


def self_consumption_ratio(production: ArrayLike, load: ArrayLike) -> float:
    """Share of PV energy consumed on site without storage."""
    production = np.asarray(production, dtype=np.float64)
    load = np.asarray(load, dtype=np.float64)
    total = float(production.sum())
    if total <= 0:
        return 0.0
    return float(np.minimum(production, load).sum()) / total


def self_sufficiency_ratio(production: ArrayLike, load: ArrayLike) -> float:
    """Share of load covered directly by PV without storage."""
    production = np.asarray(production, dtype=np.float64)
    load = np.asarray(load, dtype=np.float64)
    total = float(load.sum())
    if total <= 0:
        return 0.0
    return float(np.minimum(production, load).sum()) / total


def available_profiles() -> Sequence[str]:
    return sorted(_PROFILES)
