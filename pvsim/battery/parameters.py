"""Battery storage parameters and chemistry presets."""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace

from pvsim.core.errors import InvalidParameterError


class BatteryChemistry(str, enum.Enum):
    LITHIUM_ION = "lithium_ion"
    LFP = "lfp"
    LEAD_ACID = "lead_acid"
    FLOW = "flow"
    SODIUM_ION = "sodium_ion"


@dataclass(frozen=True)
class BatteryParameters:
    """Nameplate ratings of a battery system.

    Parameters
    ----------
    capacity_kwh : float
        Nominal energy capacity (kWh).
    max_charge_kw, max_discharge_kw : float
        Power limits (kW).  With 1-hour steps these are also the
        per-hour energy limits in kWh.
    round_trip_efficiency : float
        Fraction in (0, 1], applied on the charge side.
    depth_of_discharge : float
        Usable fraction of the nominal capacity, in (0, 1].
    cycle_life : int
        Equivalent full cycles to end of life.
    calendar_life_years : float
        Years to end of life when idle.
    cost_per_kwh, installation_cost : float
        Capital cost components ($).
    """

    capacity_kwh: float
    max_charge_kw: float
    max_discharge_kw: float
    round_trip_efficiency: float = 0.92
    depth_of_discharge: float = 0.9
    cycle_life: int = 4000
    calendar_life_years: float = 10.0
    chemistry: BatteryChemistry = BatteryChemistry.LITHIUM_ION
    cost_per_kwh: float = 0.0
    installation_cost: float = 0.0
    manufacturer: str = ""
    model: str = ""

    def __post_init__(self) -> None:
        if self.capacity_kwh <= 0:
            raise InvalidParameterError(f"capacity_kwh must be positive, got {self.capacity_kwh}")
        if self.max_charge_kw < 0 or self.max_discharge_kw < 0:
            raise InvalidParameterError(
                f"power limits must be >= 0, got charge={self.max_charge_kw}, "
                f"discharge={self.max_discharge_kw}"
            )
        if not 0 < self.round_trip_efficiency <= 1.0:
            raise InvalidParameterError(
                f"round_trip_efficiency must be in (0, 1], got {self.round_trip_efficiency}"
            )
        if not 0 < self.depth_of_discharge <= 1.0:
            raise InvalidParameterError(
                f"depth_of_discharge must be in (0, 1], got {self.depth_of_discharge}"
            )
        if self.cycle_life <= 0:
            raise InvalidParameterError(f"cycle_life must be positive, got {self.cycle_life}")
        if self.calendar_life_years <= 0:
            raise InvalidParameterError(
                f"calendar_life_years must be positive, got {self.calendar_life_years}"
            )
        if self.cost_per_kwh < 0 or self.installation_cost < 0:
            raise InvalidParameterError("battery costs must be >= 0")

    @property
    def usable_capacity_kwh(self) -> float:
        return self.capacity_kwh * self.depth_of_discharge

    @property
    def total_cost(self) -> float:
        return self.capacity_kwh * self.cost_per_kwh + self.installation_cost

    def derated(self, capacity_factor: float) -> "BatteryParameters":
        """Copy with capacity scaled by *capacity_factor* (aging)."""
        if not 0 < capacity_factor <= 1.0:
            raise InvalidParameterError(
                f"capacity_factor must be in (0, 1], got {capacity_factor}"
            )
        return replace(self, capacity_kwh=self.capacity_kwh * capacity_factor)


# ======================================================================
# Presets
# ======================================================================

def lithium_ion(capacity_kwh: float) -> BatteryParameters:
    """NMC lithium-ion pack: 0.5C, 92 % RTE, 90 % DoD, 4000 cycles, 10 years."""
    return BatteryParameters(
        capacity_kwh=capacity_kwh,
        max_charge_kw=capacity_kwh * 0.5,
        max_discharge_kw=capacity_kwh * 0.5,
        round_trip_efficiency=0.92,
        depth_of_discharge=0.9,
        cycle_life=4000,
        calendar_life_years=10.0,
        chemistry=BatteryChemistry.LITHIUM_ION,
        cost_per_kwh=500.0,
        installation_cost=1000.0,
        manufacturer="Generic",
        model=f"Li-ion {capacity_kwh:g} kWh",
    )


def lfp(capacity_kwh: float) -> BatteryParameters:
    """Lithium iron phosphate pack: 0.3C charge, 0.5C discharge, 94 % RTE, 6000 cycles."""
    return BatteryParameters(
        capacity_kwh=capacity_kwh,
        max_charge_kw=capacity_kwh * 0.3,
        max_discharge_kw=capacity_kwh * 0.5,
        round_trip_efficiency=0.94,
        depth_of_discharge=0.95,
        cycle_life=6000,
        calendar_life_years=15.0,
        chemistry=BatteryChemistry.LFP,
        cost_per_kwh=450.0,
        installation_cost=1000.0,
        manufacturer="Generic",
        model=f"LFP {capacity_kwh:g} kWh",
    )
