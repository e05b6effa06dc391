"""
Inverter record and fixed-efficiency DC-to-AC conversion with clipping.

The conversion applies the nameplate efficiency, AC wiring loss and
availability loss, then enforces the rated AC output as a hard ceiling.
DC power above what the inverter can deliver is lost (clipped).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pvsim.core.errors import InvalidParameterError


class InverterType(str, enum.Enum):
    STRING = "string"
    CENTRAL = "central"
    MICROINVERTER = "microinverter"
    HYBRID = "hybrid"


@dataclass(frozen=True)
class Inverter:
    """Inverter datasheet parameters.

    Parameters
    ----------
    rated_power_ac : float
        Maximum AC output (W).
    max_dc_power : float
        Maximum DC input power (W).
    efficiency : float
        Conversion efficiency as a fraction (0, 1].
    min_mpp_voltage, max_mpp_voltage : float
        MPPT voltage window (V).
    mppt_count : int
        Number of independent MPP trackers.
    """

    manufacturer: str
    model: str
    rated_power_ac: float
    max_dc_power: float
    efficiency: float
    min_mpp_voltage: float
    max_mpp_voltage: float
    mppt_count: int = 1
    inverter_type: InverterType = InverterType.STRING

    def __post_init__(self) -> None:
        if self.rated_power_ac <= 0:
            raise InvalidParameterError(f"rated_power_ac must be positive, got {self.rated_power_ac}")
        if self.max_dc_power <= 0:
            raise InvalidParameterError(f"max_dc_power must be positive, got {self.max_dc_power}")
        if not 0 < self.efficiency <= 1.0:
            raise InvalidParameterError(f"efficiency must be in (0, 1], got {self.efficiency}")
        if not 0 < self.min_mpp_voltage < self.max_mpp_voltage:
            raise InvalidParameterError(
                f"Need 0 < min_mpp_voltage < max_mpp_voltage, got "
                f"{self.min_mpp_voltage}..{self.max_mpp_voltage}"
            )
        if self.mppt_count < 1:
            raise InvalidParameterError(f"mppt_count must be >= 1, got {self.mppt_count}")


def inverter_output(
    inverter: Inverter,
    p_dc: ArrayLike,
    ac_wiring_loss: float = 0.0,
    availability_loss: float = 0.0,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Convert DC power to AC power.

    Parameters
    ----------
    inverter : Inverter
        Inverter parameters.
    p_dc : array_like
        DC input power (W).  Negative values are treated as zero.
    ac_wiring_loss, availability_loss : float
        Loss fractions applied after conversion.

    Returns
    -------
    p_ac : ndarray
        AC output (W), never above ``inverter.rated_power_ac``.
    clipped_dc : ndarray
        DC-equivalent power discarded by clipping (W).
    """
    p_dc = np.maximum(np.asarray(p_dc, dtype=np.float64), 0.0)
    derate = inverter.efficiency * (1.0 - ac_wiring_loss) * (1.0 - availability_loss)
    unclipped = p_dc * derate
    p_ac = np.minimum(unclipped, inverter.rated_power_ac)
    if derate > 0:
        clipped_dc = (unclipped - p_ac) / derate
    else:
        clipped_dc = np.zeros_like(p_dc)
    return p_ac, clipped_dc


def clipping_loss(inverter: Inverter, p_dc: ArrayLike) -> NDArray[np.float64]:
    """DC power above the inverter's AC rating (W), zero below it."""
    p_dc = np.asarray(p_dc, dtype=np.float64)
    return np.maximum(p_dc - inverter.rated_power_ac, 0.0)


def inverter_losses(inverter: Inverter, p_dc: float) -> dict[str, float]:
    """Break down inverter losses for a single DC operating point.

    Returns a dict with keys: conversion_loss, clipping_loss, total_loss,
    ac_power, effective_efficiency.
    """
    p_dc = max(float(p_dc), 0.0)
    clipped = float(clipping_loss(inverter, p_dc))
    converted_in = p_dc - clipped
    ac_power = converted_in * inverter.efficiency
    conversion = converted_in - ac_power
    return {
        "conversion_loss": conversion,
        "clipping_loss": clipped,
        "total_loss": conversion + clipped,
        "ac_power": ac_power,
        "effective_efficiency": ac_power / p_dc if p_dc > 0 else 0.0,
    }
