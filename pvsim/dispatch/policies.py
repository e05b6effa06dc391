"""
Battery control policies.

A policy only answers two questions for the current hour: may the
battery charge from the PV surplus, and may it discharge into the
deficit.  How much energy moves is decided by the dispatch loop from
power and capacity limits, so every policy shares the same energy
accounting.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar, Optional

from pvsim.config import settings
from pvsim.core.errors import InvalidParameterError


@dataclass(frozen=True)
class HourContext:
    """What a policy may look at when deciding one hour.

    ``projected_import_kw`` is the grid import the hour would need
    without the battery; ``peak_import_kw`` is the highest such value
    seen so far in the day, this hour included.
    """

    hour: int
    month: int
    import_rate: float
    average_import_rate: float
    projected_import_kw: float
    peak_import_kw: float
    soc_kwh: float
    usable_capacity_kwh: float


class ControlPolicy(ABC):
    """Interface for charge/discharge decision rules."""

    name: ClassVar[str] = "policy"

    @abstractmethod
    def should_charge(self, ctx: HourContext) -> bool:
        """Whether surplus PV may be stored this hour."""

    @abstractmethod
    def should_discharge(self, ctx: HourContext) -> bool:
        """Whether stored energy may serve the deficit this hour."""


@dataclass(frozen=True)
class SelfConsumptionPolicy(ControlPolicy):
    """Store every surplus and cover every deficit while energy remains."""

    name: ClassVar[str] = "self_consumption"

    def should_charge(self, ctx: HourContext) -> bool:
        return ctx.soc_kwh < ctx.usable_capacity_kwh

    def should_discharge(self, ctx: HourContext) -> bool:
        return ctx.soc_kwh > 0.0


@dataclass(frozen=True)
class TimeOfUsePolicy(ControlPolicy):
    """Arbitrage against the import price.

    Charges when the import rate is below ``charge_threshold`` and
    discharges when it is above ``discharge_threshold``.  Either
    threshold defaults to the tariff's average daily import rate.
    """

    charge_threshold: Optional[float] = None
    discharge_threshold: Optional[float] = None
    name: ClassVar[str] = "time_of_use"

    def should_charge(self, ctx: HourContext) -> bool:
        threshold = ctx.average_import_rate if self.charge_threshold is None else self.charge_threshold
        return ctx.import_rate < threshold and ctx.soc_kwh < ctx.usable_capacity_kwh

    def should_discharge(self, ctx: HourContext) -> bool:
        threshold = (
            ctx.average_import_rate if self.discharge_threshold is None else self.discharge_threshold
        )
        return ctx.import_rate > threshold and ctx.soc_kwh > 0.0


@dataclass(frozen=True)
class PeakShavingPolicy(ControlPolicy):
    """Hold energy for the day's demand peaks.

    Always charges from surplus; discharges only when the hour's
    projected import exceeds ``peak_fraction`` of the running daily peak
    import (default 70 %).
    """

    peak_fraction: Optional[float] = None
    name: ClassVar[str] = "peak_shaving"

    def __post_init__(self) -> None:
        if self.peak_fraction is not None and not 0.0 < self.peak_fraction <= 1.0:
            raise InvalidParameterError(
                f"peak_fraction must be in (0, 1], got {self.peak_fraction}"
            )

    @property
    def fraction(self) -> float:
        if self.peak_fraction is None:
            return settings.peak_shaving_fraction
        return self.peak_fraction

    def should_charge(self, ctx: HourContext) -> bool:
        return ctx.soc_kwh < ctx.usable_capacity_kwh

    def should_discharge(self, ctx: HourContext) -> bool:
        if ctx.soc_kwh <= 0.0 or ctx.projected_import_kw <= 0.0:
            return False
        return ctx.projected_import_kw > self.fraction * ctx.peak_import_kw
