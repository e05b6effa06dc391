"""
State of charge (SOC) tracker in energy units.

SOC is held in kWh over ``[0, usable_capacity]``.  Round-trip losses are
booked entirely on the charge side: of ``E`` kWh drawn from the PV
surplus only ``E * rte`` is stored, while discharging ``E`` kWh to the
load removes exactly ``E`` from storage.
"""

from __future__ import annotations

from pvsim.battery.parameters import BatteryParameters
from pvsim.core.errors import InvalidParameterError


class SOCTracker:
    """Energy-counting SOC tracker with power and capacity limits.

    Parameters
    ----------
    battery : BatteryParameters
        Ratings of the battery.
    initial_soc_kwh : float, optional
        Starting SOC in kWh.  Defaults to half the usable capacity.
    """

    def __init__(
        self,
        battery: BatteryParameters,
        initial_soc_kwh: float | None = None,
    ) -> None:
        self.battery: BatteryParameters = battery
        self.usable_kwh: float = battery.usable_capacity_kwh

        if initial_soc_kwh is None:
            initial_soc_kwh = 0.5 * self.usable_kwh
        if not 0.0 <= initial_soc_kwh <= self.usable_kwh:
            raise InvalidParameterError(
                f"initial_soc_kwh must be in [0, {self.usable_kwh}], got {initial_soc_kwh}"
            )

        self._soc: float = float(initial_soc_kwh)
        self._initial_soc: float = self._soc
        self.charge_throughput_kwh: float = 0.0
        self.discharge_throughput_kwh: float = 0.0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def charge(self, energy_kwh: float) -> float:
        """Offer *energy_kwh* of surplus for one hour.

        Returns the energy actually drawn (before efficiency losses):
        ``min(offer, max_charge_kw, usable - soc)``.
        """
        if energy_kwh <= 0:
            return 0.0
        room = self.usable_kwh - self._soc
        accepted = max(min(energy_kwh, self.battery.max_charge_kw, room), 0.0)
        self._soc = min(self._soc + accepted * self.battery.round_trip_efficiency, self.usable_kwh)
        self.charge_throughput_kwh += accepted
        return accepted

    def discharge(self, energy_kwh: float) -> float:
        """Request *energy_kwh* for one hour; returns the energy delivered."""
        if energy_kwh <= 0:
            return 0.0
        delivered = max(min(energy_kwh, self.battery.max_discharge_kw, self._soc), 0.0)
        self._soc = max(self._soc - delivered, 0.0)
        self.discharge_throughput_kwh += delivered
        return delivered

    @property
    def soc_kwh(self) -> float:
        return self._soc

    @property
    def soc_fraction(self) -> float:
        """SOC as a fraction of usable capacity."""
        return self._soc / self.usable_kwh

    @property
    def is_full(self) -> bool:
        return self._soc >= self.usable_kwh

    @property
    def is_empty(self) -> bool:
        return self._soc <= 0.0

    def reset(self) -> None:
        """Reset SOC and throughput counters to their initial values."""
        self._soc = self._initial_soc
        self.charge_throughput_kwh = 0.0
        self.discharge_throughput_kwh = 0.0

    def __repr__(self) -> str:
        return (
            f"SOCTracker(usable_kwh={self.usable_kwh}, "
            f"rte={self.battery.round_trip_efficiency}, soc={self._soc:.4f})"
        )
