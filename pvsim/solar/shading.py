"""
Obstruction shading against the sun's path.

Two obstruction kinds are supported:

* :class:`PointObstruction` -- a discrete object (tree, pole, building)
  at a known distance and bearing.  Its angular height is
  ``atan(height / distance)``; its angular half-width is
  ``atan(width / (2 * distance))`` when a width is given, otherwise a
  fixed 2 deg for narrow objects.
* :class:`HorizonProfile` -- a far-field horizon segment (ridge line,
  mountain range) with a constant elevation angle over an azimuth span.

A sun position is shaded when its elevation is at or below an
obstruction's angular height *and* its azimuth lies inside the
obstruction's span.  Several obstructions combine with logical OR.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pvsim.core.errors import InvalidParameterError
from pvsim.solar.geometry import SunPosition, solar_position

logger = logging.getLogger(__name__)

NARROW_OBJECT_HALF_WIDTH_DEG: float = 2.0

DAYS_IN_MONTH: tuple[int, ...] = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)

# Representative daylight hours used for the annual loss estimate.
_DAYLIGHT_HOURS = np.arange(6, 19, dtype=np.float64)


# ======================================================================
# Obstruction variants
# ======================================================================

@dataclass(frozen=True)
class PointObstruction:
    """A discrete obstruction seen from the array.

    Parameters
    ----------
    height : float
        Height above the array plane in metres (>= 0).
    distance : float
        Horizontal distance from the array in metres (> 0).
    azimuth : float
        Bearing of the object's centre, degrees clockwise from north.
    width : float, optional
        Horizontal extent in metres.  ``None`` for narrow objects.
    """

    height: float
    distance: float
    azimuth: float
    width: Optional[float] = None

    def __post_init__(self) -> None:
        if self.distance <= 0:
            raise InvalidParameterError(f"distance must be positive, got {self.distance}")
        if self.height < 0:
            raise InvalidParameterError(f"height must be >= 0, got {self.height}")
        if self.width is not None and self.width <= 0:
            raise InvalidParameterError(f"width must be positive, got {self.width}")

    @property
    def elevation_angle(self) -> float:
        return float(np.degrees(np.arctan(self.height / self.distance)))

    @property
    def half_width(self) -> float:
        if self.width is None:
            return NARROW_OBJECT_HALF_WIDTH_DEG
        return float(np.degrees(np.arctan(self.width / (2.0 * self.distance))))

    @property
    def azimuth_span(self) -> tuple[float, float]:
        return (self.azimuth - self.half_width, self.azimuth + self.half_width)


@dataclass(frozen=True)
class HorizonProfile:
    """A horizon segment with constant elevation between two bearings.

    The span runs clockwise from ``azimuth_start`` to ``azimuth_end`` and
    may wrap through north (e.g. 330 -> 30).
    """

    elevation_angle: float
    azimuth_start: float
    azimuth_end: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.elevation_angle < 90.0:
            raise InvalidParameterError(
                f"elevation_angle must be in [0, 90), got {self.elevation_angle}"
            )

    @property
    def azimuth_span(self) -> tuple[float, float]:
        return (self.azimuth_start, self.azimuth_end)


Obstruction = Union[PointObstruction, HorizonProfile]


# ======================================================================
# Shading test
# ======================================================================

def _azimuth_in_span(
    azimuth: NDArray[np.float64], start: float, end: float
) -> NDArray[np.bool_]:
    """Return True where *azimuth* lies on the clockwise arc start -> end."""
    if end - start >= 360.0:
        return np.ones_like(azimuth, dtype=bool)
    lo = start % 360.0
    hi = end % 360.0
    az = np.mod(azimuth, 360.0)
    if lo <= hi:
        return (az >= lo) & (az <= hi)
    return (az >= lo) | (az <= hi)


def _shaded_by(
    obstruction: Obstruction,
    elevation: NDArray[np.float64],
    azimuth: NDArray[np.float64],
) -> NDArray[np.bool_]:
    if not isinstance(obstruction, (PointObstruction, HorizonProfile)):
        raise TypeError(f"Unsupported obstruction type: {type(obstruction).__name__}")
    start, end = obstruction.azimuth_span
    return (elevation <= obstruction.elevation_angle) & _azimuth_in_span(azimuth, start, end)


def is_shaded(
    sun: SunPosition,
    obstructions: Iterable[Obstruction],
) -> NDArray[np.bool_] | bool:
    """Return whether the sun is hidden behind any obstruction.

    Positions with the sun below the horizon are never reported as
    shaded; the power model already yields zero there.
    """
    elevation = np.asarray(sun.elevation, dtype=np.float64)
    azimuth = np.asarray(sun.azimuth, dtype=np.float64)

    shaded = np.zeros(np.broadcast(elevation, azimuth).shape, dtype=bool)
    for obstruction in obstructions:
        shaded |= _shaded_by(obstruction, elevation, azimuth)
    shaded &= elevation > 0.0

    if shaded.ndim == 0:
        return bool(shaded)
    return shaded


def annual_shading_loss(
    latitude: float,
    obstructions: Sequence[Obstruction],
) -> float:
    """Estimate the annual fraction of clear-sky beam energy lost to shading.

    One representative day per month is swept over hours 6 -- 18.  Each
    sunlit hour is weighted by ``sin(elevation) * days_in_month`` as a
    proxy for clear-sky beam energy on a horizontal plane.

    Returns
    -------
    float
        Loss fraction in [0, 1]; 0.0 when there are no obstructions.
    """
    if not obstructions:
        return 0.0

    months = np.repeat(np.arange(1, 13, dtype=np.float64), _DAYLIGHT_HOURS.size)
    hours = np.tile(_DAYLIGHT_HOURS, 12)
    days = np.repeat(np.asarray(DAYS_IN_MONTH, dtype=np.float64), _DAYLIGHT_HOURS.size)

    sun = solar_position(latitude, months, hours)
    elevation = np.asarray(sun.elevation, dtype=np.float64)
    weight = np.where(elevation > 0.0, np.sin(np.radians(elevation)) * days, 0.0)

    potential = float(np.sum(weight))
    if potential <= 0.0:
        return 0.0

    shaded = np.asarray(is_shaded(sun, obstructions), dtype=bool)
    loss = float(np.sum(weight[shaded])) / potential
    logger.debug(
        "Annual shading loss at lat %.2f with %d obstructions: %.2f%%",
        latitude, len(obstructions), loss * 100.0,
    )
    return loss
