"""
Hourly PV power model.

Chains sun position, obstruction shading, isotropic transposition, NOCT
cell temperature, the temperature-corrected module model, DC losses and
the clipping inverter into plane-of-array irradiance, DC power and AC
power for each weather sample.

All arithmetic is vectorised over hours; :func:`simulate_hour` is a thin
wrapper for a single sample.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pvsim.solar.array import ArrayConfiguration
from pvsim.solar.geometry import solar_position
from pvsim.solar.inverter import Inverter, inverter_output
from pvsim.solar.irradiance import poa_irradiance
from pvsim.solar.module import STC_IRRADIANCE, SolarModule, cell_temperature, module_power
from pvsim.solar.shading import Obstruction, is_shaded
from pvsim.weather.data import HourlyWeather, Location


# ---------------------------------------------------------------------------
# System and result records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PVSystem:
    """A complete grid-connected PV system at a site."""

    location: Location
    module: SolarModule
    inverter: Inverter
    array: ArrayConfiguration
    obstructions: tuple[Obstruction, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "obstructions", tuple(self.obstructions))

    @property
    def dc_rating_w(self) -> float:
        return self.array.dc_rating_w(self.module)

    @property
    def dc_rating_kwp(self) -> float:
        return self.dc_rating_w / 1000.0

    @property
    def total_module_area(self) -> float:
        return self.module.area * self.array.module_count

    @property
    def dc_ac_ratio(self) -> float:
        return self.dc_rating_w / self.inverter.rated_power_ac


@dataclass(frozen=True)
class HourlySimulationResult:
    """Model output for one hour.  Powers in W, irradiance in W/m^2."""

    timestamp: dt.datetime
    ghi: float
    poa_irradiance: float
    ambient_temp: float
    cell_temp: float
    dc_power: float
    ac_power: float
    efficiency: float
    performance_ratio: float
    sun_elevation: float = 0.0
    sun_azimuth: float = 0.0
    shaded: bool = False
    clipped_power: float = 0.0


# ---------------------------------------------------------------------------
# Vectorised model
# ---------------------------------------------------------------------------

def simulate_hours(
    system: PVSystem,
    month: ArrayLike,
    hour: ArrayLike,
    ghi: ArrayLike,
    dhi: ArrayLike,
    temperature: ArrayLike,
) -> dict[str, NDArray[Any]]:
    """Run the power model over arrays of hourly samples.

    Parameters
    ----------
    system : PVSystem
        Site, components and array layout.
    month, hour : array_like
        Month (1 -- 12) and hour of day (0 -- 23) of each sample.
    ghi, dhi : array_like
        Global and diffuse horizontal irradiance (W/m^2).
    temperature : array_like
        Ambient temperature (degC).

    Returns
    -------
    dict
        Arrays keyed by ``elevation``, ``azimuth``, ``shaded``, ``poa``,
        ``cell_temp``, ``dc_power``, ``ac_power``, ``clipped_power``,
        ``efficiency`` and ``performance_ratio``.  Where the sun is
        below the horizon or irradiance is zero every power is exactly 0.
    """
    ghi = np.asarray(ghi, dtype=np.float64)
    dhi = np.asarray(dhi, dtype=np.float64)
    temperature = np.asarray(temperature, dtype=np.float64)
    arr = system.array

    sun = solar_position(system.location.latitude, month, hour)
    elevation = np.atleast_1d(np.asarray(sun.elevation, dtype=np.float64))
    azimuth = np.atleast_1d(np.asarray(sun.azimuth, dtype=np.float64))
    shaded = np.atleast_1d(np.asarray(is_shaded(sun, system.obstructions), dtype=bool))

    poa = np.asarray(
        poa_irradiance(
            ghi, dhi, 90.0 - elevation, azimuth,
            surface_tilt=arr.tilt,
            surface_azimuth=arr.azimuth,
            albedo=arr.ground_albedo,
            beam_blocked=shaded,
        ).total,
        dtype=np.float64,
    )
    poa = np.where(elevation > 0.0, poa, 0.0)

    t_cell = cell_temperature(poa, temperature, system.module.noct)
    p_dc = module_power(system.module, poa, t_cell) * arr.module_count * arr.dc_loss_factor
    p_ac, clipped = inverter_output(
        system.inverter,
        p_dc,
        ac_wiring_loss=arr.ac_wiring_loss,
        availability_loss=arr.availability_loss,
    )

    lit = poa > 0.0
    area = system.total_module_area
    efficiency = np.divide(p_ac, poa * area, out=np.zeros_like(p_ac), where=lit)
    pr = np.divide(
        p_ac / system.dc_rating_w, poa / STC_IRRADIANCE,
        out=np.zeros_like(p_ac), where=lit,
    )

    return {
        "elevation": elevation,
        "azimuth": azimuth,
        "shaded": shaded,
        "poa": poa,
        "cell_temp": t_cell,
        "dc_power": p_dc,
        "ac_power": p_ac,
        "clipped_power": clipped,
        "efficiency": efficiency,
        "performance_ratio": pr,
    }


def simulate_hour(system: PVSystem, sample: HourlyWeather) -> HourlySimulationResult:
    """Run the power model for a single weather sample."""
    out = simulate_hours(
        system,
        np.array([sample.month]),
        np.array([sample.hour]),
        np.array([sample.ghi]),
        np.array([sample.dhi]),
        np.array([sample.temperature]),
    )
    return HourlySimulationResult(
        timestamp=sample.timestamp,
        ghi=float(sample.ghi),
        poa_irradiance=float(out["poa"][0]),
        ambient_temp=float(sample.temperature),
        cell_temp=float(out["cell_temp"][0]),
        dc_power=float(out["dc_power"][0]),
        ac_power=float(out["ac_power"][0]),
        efficiency=float(out["efficiency"][0]),
        performance_ratio=float(out["performance_ratio"][0]),
        sun_elevation=float(out["elevation"][0]),
        sun_azimuth=float(out["azimuth"][0]),
        shaded=bool(out["shaded"][0]),
        clipped_power=float(out["clipped_power"][0]),
    )
