"""
PV array configuration and string sizing against an inverter.

String voltages are checked at the design temperature extremes: the
highest open-circuit voltage occurs at the coldest cell temperature and
must stay below the inverter's maximum MPPT voltage, while the lowest
MPP voltage occurs at the hottest cell temperature and must stay above
the minimum MPPT voltage.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from pvsim.config import settings
from pvsim.core.errors import IncompatibleComponentsError, InvalidParameterError
from pvsim.solar.inverter import Inverter
from pvsim.solar.module import SolarModule, string_voltages

logger = logging.getLogger(__name__)

MAX_LOSS_FRACTION: float = 0.99
DESIGN_MIN_CELL_TEMP: float = -10.0  # degC
DESIGN_MAX_CELL_TEMP: float = 75.0   # degC
TARGET_DC_AC_RATIO: float = 1.2

_LOSS_FIELDS = (
    "soiling_loss",
    "shading_loss",
    "mismatch_loss",
    "dc_wiring_loss",
    "ac_wiring_loss",
    "availability_loss",
)


# ======================================================================
# Array configuration
# ======================================================================

@dataclass(frozen=True)
class ArrayConfiguration:
    """Electrical layout, orientation and loss budget of a PV array.

    Loss fractions are each in [0, 0.99].  ``availability_loss`` is the
    fraction of time the system is unavailable (0.02 = 98 % availability).
    """

    modules_in_series: int
    strings_in_parallel: int
    tilt: float = 30.0
    azimuth: float = 180.0
    soiling_loss: float = 0.02
    shading_loss: float = 0.03
    mismatch_loss: float = 0.02
    dc_wiring_loss: float = 0.02
    ac_wiring_loss: float = 0.01
    availability_loss: float = 0.02
    albedo: Optional[float] = None

    def __post_init__(self) -> None:
        if self.modules_in_series <= 0:
            raise InvalidParameterError(
                f"modules_in_series must be positive, got {self.modules_in_series}"
            )
        if self.strings_in_parallel <= 0:
            raise InvalidParameterError(
                f"strings_in_parallel must be positive, got {self.strings_in_parallel}"
            )
        if not 0.0 <= self.tilt <= 90.0:
            raise InvalidParameterError(f"tilt must be in [0, 90], got {self.tilt}")
        for name in _LOSS_FIELDS:
            value = getattr(self, name)
            if not 0.0 <= value <= MAX_LOSS_FRACTION:
                raise InvalidParameterError(
                    f"{name} must be in [0, {MAX_LOSS_FRACTION}], got {value}"
                )
        if self.albedo is not None and not 0.0 <= self.albedo <= 1.0:
            raise InvalidParameterError(f"albedo must be in [0, 1], got {self.albedo}")

    @property
    def module_count(self) -> int:
        return self.modules_in_series * self.strings_in_parallel

    @property
    def ground_albedo(self) -> float:
        return settings.ground_albedo if self.albedo is None else self.albedo

    @property
    def dc_loss_factor(self) -> float:
        """Product of ``(1 - loss)`` over the DC-side loss categories."""
        return (
            (1.0 - self.soiling_loss)
            * (1.0 - self.shading_loss)
            * (1.0 - self.mismatch_loss)
            * (1.0 - self.dc_wiring_loss)
        )

    def dc_rating_w(self, module: SolarModule) -> float:
        """Nameplate DC rating (W) = module power x series x parallel."""
        return module.power_rating * self.module_count


# ======================================================================
# Inverter matching
# ======================================================================

@dataclass(frozen=True)
class ArraySizingResult:
    modules_in_series: int
    strings_in_parallel: int
    total_modules: int
    array_dc_power: float
    max_array_voltage: float
    min_array_voltage: float
    dc_ac_ratio: float
    voltage_in_range: bool
    power_in_range: bool

    @property
    def is_valid(self) -> bool:
        return self.voltage_in_range and self.power_in_range


def check_inverter_compatibility(
    module: SolarModule,
    inverter: Inverter,
    modules_in_series: int,
    strings_in_parallel: int,
    min_temp: float = DESIGN_MIN_CELL_TEMP,
    max_temp: float = DESIGN_MAX_CELL_TEMP,
) -> ArraySizingResult:
    """Evaluate a string layout against the inverter's limits.

    Parameters
    ----------
    module, inverter : SolarModule, Inverter
        Components to match.
    modules_in_series, strings_in_parallel : int
        Proposed layout.
    min_temp, max_temp : float
        Design cell-temperature extremes (degC).

    Returns
    -------
    ArraySizingResult
        Voltages, DC/AC ratio and the two range checks.
    """
    if modules_in_series <= 0 or strings_in_parallel <= 0:
        raise InvalidParameterError(
            f"module counts must be positive, got {modules_in_series} x {strings_in_parallel}"
        )

    total = modules_in_series * strings_in_parallel
    dc_power = module.power_rating * total

    voc_cold, _ = string_voltages(module, min_temp)
    _, vmp_hot = string_voltages(module, max_temp)
    max_voltage = voc_cold * modules_in_series
    min_voltage = vmp_hot * modules_in_series

    return ArraySizingResult(
        modules_in_series=modules_in_series,
        strings_in_parallel=strings_in_parallel,
        total_modules=total,
        array_dc_power=dc_power,
        max_array_voltage=max_voltage,
        min_array_voltage=min_voltage,
        dc_ac_ratio=dc_power / inverter.rated_power_ac,
        voltage_in_range=(
            min_voltage >= inverter.min_mpp_voltage
            and max_voltage <= inverter.max_mpp_voltage
        ),
        power_in_range=dc_power <= inverter.max_dc_power,
    )


def optimal_modules_in_series(
    module: SolarModule,
    inverter: Inverter,
    min_temp: float = DESIGN_MIN_CELL_TEMP,
    max_temp: float = DESIGN_MAX_CELL_TEMP,
) -> int:
    """Midpoint of the feasible series-count window.

    Raises
    ------
    IncompatibleComponentsError
        If no series count keeps the string inside the MPPT window.
    """
    voc_cold, _ = string_voltages(module, min_temp)
    _, vmp_hot = string_voltages(module, max_temp)

    max_modules = math.floor(inverter.max_mpp_voltage / voc_cold)
    min_modules = math.ceil(inverter.min_mpp_voltage / vmp_hot)

    if min_modules > max_modules:
        raise IncompatibleComponentsError(
            f"{module.model} cannot be strung for {inverter.model}: needs at least "
            f"{min_modules} modules for the MPPT minimum but at most {max_modules} "
            f"fit under the MPPT maximum"
        )
    return math.floor((min_modules + max_modules) / 2.0 + 0.5)


def optimal_strings_in_parallel(
    module: SolarModule,
    inverter: Inverter,
    modules_in_series: int,
) -> int:
    """Strings for a 1.2 DC/AC ratio, capped by the inverter's max DC power."""
    string_power = module.power_rating * modules_in_series
    target = math.floor(inverter.rated_power_ac * TARGET_DC_AC_RATIO / string_power + 0.5)
    limit = math.floor(inverter.max_dc_power / string_power)
    return min(target, limit)


def auto_size_array(
    module: SolarModule,
    inverter: Inverter,
    modules_in_series: Optional[int] = None,
) -> ArraySizingResult:
    """Pick a string layout for *module* on *inverter*.

    When *modules_in_series* is given it is validated instead of chosen.

    Raises
    ------
    IncompatibleComponentsError
        If the string voltage falls outside the MPPT window or a single
        string already exceeds the inverter's DC power limit.
    """
    if modules_in_series is None:
        modules_in_series = optimal_modules_in_series(module, inverter)

    strings = optimal_strings_in_parallel(module, inverter, modules_in_series)
    if strings < 1:
        raise IncompatibleComponentsError(
            f"one string of {modules_in_series} x {module.power_rating:.0f} W exceeds "
            f"the {inverter.max_dc_power:.0f} W DC limit of {inverter.model}"
        )

    result = check_inverter_compatibility(module, inverter, modules_in_series, strings)
    if not result.voltage_in_range:
        raise IncompatibleComponentsError(
            f"string voltage {result.min_array_voltage:.0f}-{result.max_array_voltage:.0f} V "
            f"is outside the MPPT window {inverter.min_mpp_voltage:.0f}-"
            f"{inverter.max_mpp_voltage:.0f} V of {inverter.model}"
        )

    logger.info(
        "Sized array: %d x %d modules, %.1f kWp, DC/AC %.2f",
        result.modules_in_series, result.strings_in_parallel,
        result.array_dc_power / 1000.0, result.dc_ac_ratio,
    )
    return result
