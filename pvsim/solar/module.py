"""
PV module record and temperature-corrected power model.

Power at operating conditions is the STC rating scaled linearly with
plane-of-array irradiance and corrected for cell temperature through the
module's power temperature coefficient.  Cell temperature follows the
NOCT model.

References
----------
- Ross R.G., "Interface design considerations for terrestrial solar cell
  modules", 12th IEEE PVSC, 1976 (NOCT model).
- Jordan D.C., Kurtz S.R., "Photovoltaic Degradation Rates -- an
  Analytical Review", Prog. Photovolt., 21(1):12-29, 2013.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pvsim.core.errors import InvalidParameterError

STC_IRRADIANCE: float = 1000.0  # W/m^2
STC_TEMPERATURE: float = 25.0   # degC
NOCT_IRRADIANCE: float = 800.0  # W/m^2
NOCT_AMBIENT: float = 20.0      # degC


class ModuleTechnology(str, enum.Enum):
    MONOCRYSTALLINE = "monocrystalline"
    POLYCRYSTALLINE = "polycrystalline"
    THIN_FILM = "thin_film"
    AMORPHOUS = "amorphous"
    BIFACIAL = "bifacial"
    CIGS = "cigs"
    CDTE = "cdte"

    @property
    def default_degradation_rate(self) -> float:
        """Typical annual power degradation as a fraction per year."""
        if self is ModuleTechnology.THIN_FILM:
            return 0.007
        return 0.005


@dataclass(frozen=True)
class SolarModule:
    """Datasheet parameters of a PV module.

    Parameters
    ----------
    manufacturer, model : str
        Catalogue identity.
    power_rating : float
        Maximum power at STC (W).
    efficiency : float
        STC conversion efficiency as a fraction (0, 1].
    length, width : float
        Physical dimensions (m).
    technology : ModuleTechnology
        Cell technology; selects the default degradation rate.
    temperature_coefficient : float
        Power temperature coefficient in %/degC (typically negative).
    noct : float
        Nominal Operating Cell Temperature (degC).
    voc, vmp : float
        Open-circuit and maximum-power voltage at STC (V).
    voc_temp_coefficient, vmp_temp_coefficient : float
        Fractional voltage change per degC.
    degradation_rate : float, optional
        Overrides the technology default annual degradation.
    """

    manufacturer: str
    model: str
    power_rating: float
    efficiency: float
    length: float
    width: float
    technology: ModuleTechnology = ModuleTechnology.MONOCRYSTALLINE
    temperature_coefficient: float = -0.35
    noct: float = 45.0
    voc: float = 40.0
    vmp: float = 33.0
    voc_temp_coefficient: float = -0.0035
    vmp_temp_coefficient: float = -0.004
    degradation_rate: Optional[float] = None

    def __post_init__(self) -> None:
        if self.power_rating <= 0:
            raise InvalidParameterError(f"power_rating must be positive, got {self.power_rating}")
        if not 0 < self.efficiency <= 1.0:
            raise InvalidParameterError(f"efficiency must be in (0, 1], got {self.efficiency}")
        if self.length <= 0 or self.width <= 0:
            raise InvalidParameterError(
                f"module dimensions must be positive, got {self.length} x {self.width}"
            )
        if self.degradation_rate is not None and not 0 <= self.degradation_rate < 1:
            raise InvalidParameterError(
                f"degradation_rate must be in [0, 1), got {self.degradation_rate}"
            )

    @property
    def area(self) -> float:
        return self.length * self.width

    @property
    def annual_degradation(self) -> float:
        if self.degradation_rate is not None:
            return self.degradation_rate
        return self.technology.default_degradation_rate


# ---------------------------------------------------------------------------
# Temperature and power
# ---------------------------------------------------------------------------

def cell_temperature(
    poa: ArrayLike,
    t_amb: ArrayLike,
    noct: float = 45.0,
) -> NDArray[np.float64]:
    """Estimate cell temperature using the NOCT model.

    Parameters
    ----------
    poa : array_like
        Plane-of-array irradiance (W/m^2).
    t_amb : array_like
        Ambient (dry-bulb) temperature (degC).
    noct : float
        Nominal Operating Cell Temperature (degC).

    Returns
    -------
    ndarray
        Cell temperature (degC).
    """
    poa = np.asarray(poa, dtype=np.float64)
    t_amb = np.asarray(t_amb, dtype=np.float64)
    return t_amb + (noct - NOCT_AMBIENT) / NOCT_IRRADIANCE * poa


def temperature_factor(module: SolarModule, cell_temp: ArrayLike) -> NDArray[np.float64]:
    """Multiplicative power correction ``1 + coeff/100 * (Tc - 25)``."""
    delta = np.asarray(cell_temp, dtype=np.float64) - STC_TEMPERATURE
    return 1.0 + module.temperature_coefficient / 100.0 * delta


def module_power(
    module: SolarModule,
    poa: ArrayLike,
    cell_temp: ArrayLike,
) -> NDArray[np.float64]:
    """DC power of a single module (W), floored at zero."""
    poa = np.asarray(poa, dtype=np.float64)
    power = module.power_rating * (poa / STC_IRRADIANCE) * temperature_factor(module, cell_temp)
    return np.maximum(power, 0.0)


def module_efficiency(module: SolarModule, cell_temp: ArrayLike) -> NDArray[np.float64]:
    """Temperature-corrected conversion efficiency (fraction)."""
    return module.efficiency * temperature_factor(module, cell_temp)


def string_voltages(module: SolarModule, cell_temp: float) -> tuple[float, float]:
    """Return ``(voc, vmp)`` of one module at *cell_temp* (degC)."""
    delta = cell_temp - STC_TEMPERATURE
    voc = module.voc * (1.0 + module.voc_temp_coefficient * delta)
    vmp = module.vmp * (1.0 + module.vmp_temp_coefficient * delta)
    return voc, vmp


def degradation_factor(rate: float, year: int) -> float:
    """Remaining output fraction in operating *year* (1-based): ``(1 - rate)^(year - 1)``."""
    if year < 1:
        raise InvalidParameterError(f"year must be >= 1, got {year}")
    return (1.0 - rate) ** (year - 1)
