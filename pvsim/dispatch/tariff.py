"""Electricity tariff structures used to price grid imports and exports.

All tariffs are immutable so they can be part of cached simulation
inputs.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from pvsim.core.errors import InvalidParameterError

HOURS_PER_DAY: int = 24


# ======================================================================
# Abstract base
# ======================================================================

class TariffBase(ABC):
    """Interface that every tariff structure must implement."""

    @abstractmethod
    def buy_price(self, hour: int, month: int = 1) -> float:
        """Return the cost to *buy* (import) 1 kWh at the given time.

        Parameters
        ----------
        hour : int
            Hour of day, 0 -- 23.
        month : int
            Month of year, 1 -- 12.

        Returns
        -------
        float
            Import price in $/kWh.
        """

    @abstractmethod
    def sell_price(self, hour: int, month: int = 1) -> float:
        """Return the revenue for *selling* (exporting) 1 kWh at the given time."""

    def average_buy_price(self, month: int = 1) -> float:
        """Hour-weighted mean import price over a day."""
        return sum(self.buy_price(h, month) for h in range(HOURS_PER_DAY)) / HOURS_PER_DAY


# ======================================================================
# Flat tariff
# ======================================================================

@dataclass(frozen=True)
class FlatTariff(TariffBase):
    """Fixed $/kWh rates that do not vary with time.

    Parameters
    ----------
    buy_rate : float
        Cost to import energy ($/kWh).
    sell_rate : float
        Feed-in compensation for exported energy ($/kWh).
    """

    buy_rate: float = 0.15
    sell_rate: float = 0.05

    def __post_init__(self) -> None:
        if self.buy_rate < 0:
            raise InvalidParameterError(f"buy_rate must be >= 0, got {self.buy_rate}")
        if self.sell_rate < 0:
            raise InvalidParameterError(f"sell_rate must be >= 0, got {self.sell_rate}")

    def buy_price(self, hour: int, month: int = 1) -> float:  # noqa: D401
        return self.buy_rate

    def sell_price(self, hour: int, month: int = 1) -> float:  # noqa: D401
        return self.sell_rate


# ======================================================================
# Time-of-Use tariff
# ======================================================================

@dataclass(frozen=True)
class TOUPeriod:
    """A daily pricing window ``[start_hour, end_hour)``.

    A window with ``end_hour <= start_hour`` wraps past midnight
    (e.g. 22 -> 6).
    """

    name: str
    start_hour: int
    end_hour: int
    rate: float
    sell_rate: Optional[float] = None

    def __post_init__(self) -> None:
        if not (0 <= self.start_hour < HOURS_PER_DAY and 0 <= self.end_hour <= HOURS_PER_DAY):
            raise InvalidParameterError(
                f"TOU period '{self.name}' hours out of range: "
                f"{self.start_hour}-{self.end_hour}"
            )
        if self.rate < 0:
            raise InvalidParameterError(f"TOU period '{self.name}' rate must be >= 0")

    def covers(self, hour: int) -> bool:
        if self.start_hour < self.end_hour:
            return self.start_hour <= hour < self.end_hour
        return hour >= self.start_hour or hour < self.end_hour


@dataclass(frozen=True)
class TimeOfUseTariff(TariffBase):
    """Time-of-use tariff built from daily pricing windows.

    The first period covering an hour wins.  Hours not covered by any
    period are billed at ``default_buy_rate``; exports are paid
    ``sell_rate`` unless the covering period overrides it.

    Example
    -------
    >>> tariff = TimeOfUseTariff(periods=(
    ...     TOUPeriod("off-peak", 22, 7, 0.08),
    ...     TOUPeriod("peak", 16, 21, 0.35),
    ... ))
    """

    periods: tuple[TOUPeriod, ...] = ()
    default_buy_rate: float = 0.15
    sell_rate: float = 0.05

    def __post_init__(self) -> None:
        object.__setattr__(self, "periods", tuple(self.periods))
        if self.default_buy_rate < 0 or self.sell_rate < 0:
            raise InvalidParameterError("tariff rates must be >= 0")

    def _period(self, hour: int) -> Optional[TOUPeriod]:
        for period in self.periods:
            if period.covers(hour):
                return period
        return None

    def buy_price(self, hour: int, month: int = 1) -> float:  # noqa: D401
        period = self._period(hour)
        return self.default_buy_rate if period is None else period.rate

    def sell_price(self, hour: int, month: int = 1) -> float:  # noqa: D401
        period = self._period(hour)
        if period is None or period.sell_rate is None:
            return self.sell_rate
        return period.sell_rate
