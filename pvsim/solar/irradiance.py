"""
Irradiance transposition from horizontal to plane-of-array (POA).

Uses the isotropic-sky (Liu-Jordan) model: beam irradiance is projected
onto the tilted plane via the angle of incidence, the sky diffuse
component is weighted by the view factor to the sky, and the
ground-reflected component by the view factor to the ground.

Also provides the Erbs diffuse-fraction correlation for splitting GHI
into beam and diffuse parts when only GHI is known.

References
----------
- Liu B.Y.H., Jordan R.C., "The long-term average performance of
  flat-plate solar-energy collectors", Solar Energy, 7(2):53-74, 1963.
- Erbs D.G., Klein S.A., Duffie J.A., "Estimation of the diffuse
  radiation fraction for hourly, daily and monthly-average global
  radiation", Solar Energy, 28(4):293-302, 1982.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pvsim.config import settings
from pvsim.solar.geometry import angle_of_incidence

SOLAR_CONSTANT: float = 1367.0  # W/m^2

# Zenith angles beyond this are treated as 85 deg when converting
# horizontal beam to normal beam.
MAX_BEAM_ZENITH_DEG: float = 85.0


@dataclass(frozen=True)
class POAIrradiance:
    """Plane-of-array irradiance components in W/m^2."""

    beam: NDArray[np.float64] | float
    sky_diffuse: NDArray[np.float64] | float
    ground_reflected: NDArray[np.float64] | float

    @property
    def total(self) -> NDArray[np.float64] | float:
        total = (
            np.asarray(self.beam, dtype=np.float64)
            + np.asarray(self.sky_diffuse, dtype=np.float64)
            + np.asarray(self.ground_reflected, dtype=np.float64)
        )
        return float(total) if total.ndim == 0 else total


def _out(arr: NDArray[np.float64]) -> NDArray[np.float64] | float:
    return float(arr) if arr.ndim == 0 else arr


# ---------------------------------------------------------------------------
# Isotropic transposition
# ---------------------------------------------------------------------------

def poa_irradiance(
    ghi: ArrayLike,
    dhi: ArrayLike,
    sun_zenith: ArrayLike,
    sun_azimuth: ArrayLike,
    surface_tilt: float,
    surface_azimuth: float,
    albedo: float | None = None,
    beam_blocked: ArrayLike = False,
) -> POAIrradiance:
    """Transpose horizontal irradiance to the array plane.

    Parameters
    ----------
    ghi, dhi : array_like
        Global and diffuse horizontal irradiance (W/m^2).
    sun_zenith, sun_azimuth : array_like
        Sun position in degrees.
    surface_tilt : float
        Array tilt from horizontal, degrees.
    surface_azimuth : float
        Array azimuth, degrees clockwise from north.
    albedo : float, optional
        Ground reflectance.  Defaults to ``settings.ground_albedo``.
    beam_blocked : bool or array_like of bool
        Where True, an obstruction hides the sun and the beam component
        is dropped.

    Returns
    -------
    POAIrradiance
        All components are zero where the sun is below the horizon.
    """
    if albedo is None:
        albedo = settings.ground_albedo

    ghi = np.maximum(np.asarray(ghi, dtype=np.float64), 0.0)
    dhi = np.clip(np.asarray(dhi, dtype=np.float64), 0.0, ghi)
    zenith = np.asarray(sun_zenith, dtype=np.float64)
    sun_up = zenith < 90.0

    cos_zenith = np.maximum(np.cos(np.radians(zenith)), np.cos(np.radians(MAX_BEAM_ZENITH_DEG)))
    beam_normal = (ghi - dhi) / cos_zenith

    aoi = np.asarray(
        angle_of_incidence(surface_tilt, surface_azimuth, zenith, sun_azimuth),
        dtype=np.float64,
    )
    beam = beam_normal * np.maximum(np.cos(np.radians(aoi)), 0.0)
    beam = np.where(np.asarray(beam_blocked, dtype=bool), 0.0, beam)

    cos_tilt = np.cos(np.radians(surface_tilt))
    sky_diffuse = dhi * (1.0 + cos_tilt) / 2.0
    ground = ghi * albedo * (1.0 - cos_tilt) / 2.0

    return POAIrradiance(
        beam=_out(np.where(sun_up, beam, 0.0)),
        sky_diffuse=_out(np.where(sun_up, sky_diffuse, 0.0)),
        ground_reflected=_out(np.where(sun_up, ground, 0.0)),
    )


# ---------------------------------------------------------------------------
# GHI decomposition helpers
# ---------------------------------------------------------------------------

def extraterrestrial_irradiance(day_of_year: ArrayLike) -> NDArray[np.float64] | float:
    """Extraterrestrial normal irradiance (W/m^2) for a day of year."""
    doy = np.asarray(day_of_year, dtype=np.float64)
    return _out(SOLAR_CONSTANT * (1.0 + 0.033 * np.cos(2.0 * np.pi * doy / 365.0)))


def clearness_index(
    ghi: ArrayLike,
    day_of_year: ArrayLike,
    sun_zenith: ArrayLike,
) -> NDArray[np.float64] | float:
    """Ratio of GHI to extraterrestrial horizontal irradiance, clipped to [0, 1]."""
    ghi = np.asarray(ghi, dtype=np.float64)
    cos_zenith = np.cos(np.radians(np.asarray(sun_zenith, dtype=np.float64)))
    e0h = np.asarray(extraterrestrial_irradiance(day_of_year), dtype=np.float64) * cos_zenith
    kt = np.divide(ghi, e0h, out=np.zeros(np.broadcast(ghi, e0h).shape), where=e0h > 0.0)
    return _out(np.clip(kt, 0.0, 1.0))


def erbs_diffuse_fraction(kt: ArrayLike) -> NDArray[np.float64] | float:
    """Erbs et al. (1982) diffuse fraction as a function of clearness index."""
    kt = np.asarray(kt, dtype=np.float64)
    mid = 0.9511 - 0.1604 * kt + 4.388 * kt**2 - 16.638 * kt**3 + 12.336 * kt**4
    kd = np.where(kt <= 0.22, 1.0 - 0.09 * kt, np.where(kt <= 0.80, mid, 0.165))
    return _out(kd)


def decompose_ghi(
    ghi: ArrayLike,
    day_of_year: ArrayLike,
    sun_zenith: ArrayLike,
) -> NDArray[np.float64] | float:
    """Estimate DHI from GHI with the Erbs correlation."""
    kt = clearness_index(ghi, day_of_year, sun_zenith)
    dhi = np.asarray(ghi, dtype=np.float64) * np.asarray(erbs_diffuse_fraction(kt))
    return _out(dhi)
