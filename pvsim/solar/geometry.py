"""
Solar geometry: sun position from latitude, month and hour of day.

Uses a monthly-resolution declination approximation and a solar-time
hour angle, which is adequate for yield estimation and shading checks
(accuracy of a few degrees).  All functions accept scalars or numpy
arrays and broadcast their arguments.

Angle conventions
-----------------
* Elevation is measured from the horizon, positive above it.
* Azimuth is measured clockwise from north in [0, 360), so 180 is due
  south.

References
----------
- Cooper P.I., "The absorption of radiation in solar stills",
  Solar Energy, 12(3):333-346, 1969.
- Duffie J.A., Beckman W.A., "Solar Engineering of Thermal Processes",
  4th ed., Wiley, 2013, ch. 1.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pvsim.core.errors import InvalidParameterError

MAX_DECLINATION_DEG: float = 23.45
DEGREES_PER_HOUR: float = 15.0


def _as_output(arr: NDArray[np.float64]) -> NDArray[np.float64] | float:
    """Collapse 0-d arrays to plain floats."""
    if arr.ndim == 0:
        return float(arr)
    return arr


# ---------------------------------------------------------------------------
# Sun position
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SunPosition:
    """Sun position in degrees (scalar or array-valued)."""

    elevation: NDArray[np.float64] | float
    azimuth: NDArray[np.float64] | float

    @property
    def zenith(self) -> NDArray[np.float64] | float:
        return _as_output(90.0 - np.asarray(self.elevation, dtype=np.float64))

    @property
    def is_up(self) -> NDArray[np.bool_] | bool:
        up = np.asarray(self.elevation, dtype=np.float64) > 0.0
        if up.ndim == 0:
            return bool(up)
        return up


def declination(month: ArrayLike) -> NDArray[np.float64] | float:
    """Solar declination in degrees for a month index (1 -- 12).

    ``23.45 * sin(2*pi*(month - 3)/12)``: zero at the March equinox and
    +23.45 deg in June.
    """
    m = np.asarray(month, dtype=np.float64)
    if np.any((m < 1) | (m > 12)):
        raise InvalidParameterError(f"month must be in 1..12, got {month}")
    return _as_output(MAX_DECLINATION_DEG * np.sin(2.0 * np.pi * (m - 3.0) / 12.0))


def hour_angle(hour: ArrayLike) -> NDArray[np.float64] | float:
    """Hour angle in degrees: 15 deg per hour from solar noon."""
    h = np.asarray(hour, dtype=np.float64)
    return _as_output((h - 12.0) * DEGREES_PER_HOUR)


def solar_position(
    latitude: ArrayLike,
    month: ArrayLike,
    hour: ArrayLike,
) -> SunPosition:
    """Compute the sun's elevation and azimuth.

    Parameters
    ----------
    latitude : float or array_like
        Site latitude in degrees, positive north, within [-90, 90].
    month : int or array_like
        Month of year, 1 -- 12.
    hour : float or array_like
        Hour of day in solar time, 0 -- 24.

    Returns
    -------
    SunPosition
        Elevation in [-90, 90] and azimuth in [0, 360).  An elevation at
        or below zero means the sun is below the horizon.
    """
    lat_deg = np.asarray(latitude, dtype=np.float64)
    if np.any(np.abs(lat_deg) > 90.0):
        raise InvalidParameterError(f"latitude must be within [-90, 90], got {latitude}")

    lat = np.radians(lat_deg)
    decl = np.radians(np.asarray(declination(month), dtype=np.float64))
    ha = np.radians(np.asarray(hour_angle(hour), dtype=np.float64))

    sin_elev = np.sin(lat) * np.sin(decl) + np.cos(lat) * np.cos(decl) * np.cos(ha)
    elevation = np.degrees(np.arcsin(np.clip(sin_elev, -1.0, 1.0)))

    # Both terms share the positive factor 1/cos(elevation), which atan2
    # does not need.
    y = -np.cos(decl) * np.sin(ha)
    x = np.sin(decl) * np.cos(lat) - np.cos(decl) * np.sin(lat) * np.cos(ha)
    azimuth = np.mod(np.degrees(np.arctan2(y, x)), 360.0)

    return SunPosition(elevation=_as_output(elevation), azimuth=_as_output(azimuth))


def angle_of_incidence(
    surface_tilt: ArrayLike,
    surface_azimuth: ArrayLike,
    sun_zenith: ArrayLike,
    sun_azimuth: ArrayLike,
) -> NDArray[np.float64] | float:
    """Angle between the sun and the surface normal, in degrees [0, 180].

    Values above 90 mean the sun is behind the plane of the array.
    """
    tilt = np.radians(np.asarray(surface_tilt, dtype=np.float64))
    zen = np.radians(np.asarray(sun_zenith, dtype=np.float64))
    delta_az = np.radians(
        np.asarray(sun_azimuth, dtype=np.float64)
        - np.asarray(surface_azimuth, dtype=np.float64)
    )
    cos_aoi = np.cos(zen) * np.cos(tilt) + np.sin(zen) * np.sin(tilt) * np.cos(delta_az)
    return _as_output(np.degrees(np.arccos(np.clip(cos_aoi, -1.0, 1.0))))
