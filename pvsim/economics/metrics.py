"""
Investment metrics for PV and storage projects.

Builds a yearly cash-flow series from a net (post-incentive) investment
and a per-year net cash flow, then derives simple and discounted
payback, Net Present Value (NPV), Internal Rate of Return (IRR), Return
on Investment (ROI) and Levelised Cost of Energy (LCOE).

Conventions
-----------
* Year 0 is the investment year; operating years run 1..N.
* Cash flows are discounted with ``1 / (1 + r) ** year``.
* All monetary values are in the project currency, energy in kWh.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Union

import numpy as np
from numpy.typing import NDArray

from pvsim.config import settings
from pvsim.core.errors import InvalidParameterError

logger = logging.getLogger(__name__)

# ======================================================================
# Internal helpers
# ======================================================================

def _discount_factor(rate: float, year: int) -> float:
    """Return ``1 / (1 + rate) ** year``."""
    return 1.0 / (1.0 + rate) ** year


def _check_discount_rate(rate: float) -> None:
    if not -1.0 < rate <= 1.0:
        raise InvalidParameterError(f"discount_rate must be in (-1, 1], got {rate}")


def _check_years(years: int) -> None:
    if years < 1:
        raise InvalidParameterError(f"analysis horizon must be >= 1 year, got {years}")


# ======================================================================
# Revenue
# ======================================================================

@dataclass(frozen=True)
class RevenueModel:
    """Yearly revenue of a PV system.

    Self-consumed energy avoids the retail electricity rate, exported
    energy earns the feed-in tariff, and all production earns SREC
    income per MWh.  Prices escalate with ``price_inflation`` and
    production decays with ``degradation_rate``.
    """

    annual_production_kwh: float
    electricity_rate: float
    self_consumption_rate: float = 0.3
    feed_in_tariff: float = 0.05
    srec_price_per_mwh: float = 0.0
    price_inflation: Optional[float] = None
    degradation_rate: float = 0.0

    def __post_init__(self) -> None:
        if self.annual_production_kwh < 0:
            raise InvalidParameterError(
                f"annual_production_kwh must be >= 0, got {self.annual_production_kwh}"
            )
        if not 0.0 <= self.self_consumption_rate <= 1.0:
            raise InvalidParameterError(
                f"self_consumption_rate must be in [0, 1], got {self.self_consumption_rate}"
            )
        if not 0.0 <= self.degradation_rate < 1.0:
            raise InvalidParameterError(
                f"degradation_rate must be in [0, 1), got {self.degradation_rate}"
            )

    @property
    def inflation(self) -> float:
        return settings.price_inflation if self.price_inflation is None else self.price_inflation

    def production(self, year: int) -> float:
        """Energy produced in operating *year* (1-based), kWh."""
        return self.annual_production_kwh * (1.0 - self.degradation_rate) ** (year - 1)

    def breakdown(self, year: int = 1) -> dict[str, float]:
        """Revenue components for *year*: savings, feed_in, srec."""
        energy = self.production(year)
        escalation = (1.0 + self.inflation) ** (year - 1)
        self_consumed = energy * self.self_consumption_rate
        exported = energy - self_consumed
        return {
            "savings": self_consumed * self.electricity_rate * escalation,
            "feed_in": exported * self.feed_in_tariff * escalation,
            "srec": energy / 1000.0 * self.srec_price_per_mwh * escalation,
        }

    def __call__(self, year: int) -> float:
        return sum(self.breakdown(year).values())


RevenueFn = Union[RevenueModel, Callable[[int], float]]


# ======================================================================
# Cash-flow series
# ======================================================================

@dataclass(frozen=True)
class CashFlowSeries:
    """Per-year cash flows; index 0 is the investment year.

    ``cumulative[0] == -net_system_cost`` always holds.
    """

    cash_flow: tuple[float, ...]
    cumulative: tuple[float, ...]
    discounted: tuple[float, ...]
    discounted_cumulative: tuple[float, ...]

    @property
    def years(self) -> tuple[int, ...]:
        return tuple(range(len(self.cash_flow)))

    @property
    def horizon(self) -> int:
        return len(self.cash_flow) - 1


def cash_flow_series(
    net_cost: float,
    yearly_cash_flows: Sequence[float],
    discount_rate: float,
) -> CashFlowSeries:
    """Assemble nominal and discounted cumulative cash flows.

    Parameters
    ----------
    net_cost : float
        Investment at year 0 (positive number).
    yearly_cash_flows : sequence of float
        Net cash flow for operating years 1..N.
    discount_rate : float
        Annual discount rate in (-1, 1].
    """
    _check_discount_rate(discount_rate)
    flows = [-float(net_cost)] + [float(cf) for cf in yearly_cash_flows]
    discounted = [cf * _discount_factor(discount_rate, y) for y, cf in enumerate(flows)]
    return CashFlowSeries(
        cash_flow=tuple(flows),
        cumulative=tuple(np.cumsum(flows).tolist()),
        discounted=tuple(discounted),
        discounted_cumulative=tuple(np.cumsum(discounted).tolist()),
    )


# ======================================================================
# Metrics
# ======================================================================

def simple_payback(net_cost: float, first_year_revenue: float, annual_maintenance: float) -> float:
    """Years to recover *net_cost* from first-year net income; ``inf`` if never."""
    net_income = first_year_revenue - annual_maintenance
    if net_income <= 0:
        return math.inf
    return net_cost / net_income


def discounted_payback(series: CashFlowSeries) -> float:
    """Fractional year at which the discounted cumulative cash flow turns non-negative.

    The crossing year is linearly interpolated between the last negative
    and first non-negative cumulative values.  Returns ``inf`` if the
    cumulative never crosses within the horizon.
    """
    cum = series.discounted_cumulative
    for year in range(1, len(cum)):
        y1, y2 = cum[year - 1], cum[year]
        if y1 < 0 <= y2:
            return (year - 1) + (-y1) / (y2 - y1)
    return math.inf


def npv(net_cost: float, yearly_cash_flows: Sequence[float], discount_rate: float) -> float:
    """``-net_cost + sum(cf_y / (1 + r) ** y)`` over years 1..N."""
    _check_discount_rate(discount_rate)
    return -net_cost + sum(
        cf * _discount_factor(discount_rate, y)
        for y, cf in enumerate(yearly_cash_flows, start=1)
    )


def _npv_grid(
    net_cost: float, flows: NDArray[np.float64], rates: NDArray[np.float64]
) -> NDArray[np.float64]:
    years = np.arange(1, flows.size + 1, dtype=np.float64)
    factors = (1.0 + rates[:, None]) ** -years[None, :]
    return -net_cost + factors @ flows


def irr_scan(
    net_cost: float,
    yearly_cash_flows: Sequence[float],
    min_rate: Optional[float] = None,
    max_rate: Optional[float] = None,
    step: Optional[float] = None,
    tolerance: Optional[float] = None,
) -> Optional[float]:
    """Internal rate of return by a bounded fixed-step scan.

    Rates from *min_rate* to *max_rate* are visited in increasing order.
    The first grid rate with ``|NPV| < tolerance`` is returned; rates
    between grid points are never tried.  When NPV falls faster than
    ``tolerance`` per step near its root, no grid rate qualifies and the
    result is ``None`` even though a root exists.  Cash flows with
    several sign changes report only the lowest qualifying rate.

    Returns
    -------
    float or None
        The rate, or ``None`` when no rate in the range qualifies.
    """
    min_rate = settings.irr_min_rate if min_rate is None else min_rate
    max_rate = settings.irr_max_rate if max_rate is None else max_rate
    step = settings.irr_step if step is None else step
    tolerance = settings.irr_tolerance if tolerance is None else tolerance
    if min_rate <= -1.0 or max_rate <= min_rate or step <= 0:
        raise InvalidParameterError(
            f"invalid IRR scan range {min_rate}..{max_rate} step {step}"
        )

    flows = np.asarray(yearly_cash_flows, dtype=np.float64)
    if flows.size == 0:
        return None

    n_steps = int(math.floor((max_rate - min_rate) / step + 1e-9))
    rates = min_rate + step * np.arange(n_steps + 1, dtype=np.float64)
    values = _npv_grid(net_cost, flows, rates)

    hits = np.flatnonzero(np.abs(values) < tolerance)
    if hits.size == 0:
        return None
    return float(rates[hits[0]])


def lcoe(
    net_cost: float,
    annual_maintenance: float,
    annual_energy_kwh: float,
    years: int,
    discount_rate: float,
    degradation_rate: float = 0.0,
) -> float:
    """Levelised cost of energy ($/kWh).

    ``(net_cost + sum(discounted O&M)) / sum(discounted energy)`` with
    energy decremented yearly by *degradation_rate*.  ``inf`` when no
    energy is produced.
    """
    _check_years(years)
    _check_discount_rate(discount_rate)
    costs = net_cost
    energy = 0.0
    for year in range(1, years + 1):
        df = _discount_factor(discount_rate, year)
        costs += annual_maintenance * df
        energy += annual_energy_kwh * (1.0 - degradation_rate) ** (year - 1) * df
    if energy <= 0:
        return math.inf
    return costs / energy


# ======================================================================
# Main entry point
# ======================================================================

@dataclass(frozen=True)
class FinancialMetrics:
    net_system_cost: float
    payback_period: float
    discounted_payback_period: float
    npv: float
    irr: Optional[float]
    roi: float
    lcoe: float
    annual_revenue: float
    annual_maintenance: float
    cash_flows: CashFlowSeries


def compute_financial_metrics(
    net_cost: float,
    revenue: RevenueFn,
    annual_maintenance: float = 0.0,
    years: Optional[int] = None,
    discount_rate: Optional[float] = None,
    annual_energy_kwh: Optional[float] = None,
    degradation_rate: Optional[float] = None,
    extra_cash_flow: Optional[Callable[[int], float]] = None,
) -> FinancialMetrics:
    """Compute investment metrics for a project.

    Parameters
    ----------
    net_cost : float
        Post-incentive investment at year 0 (> 0).
    revenue : RevenueModel or callable
        Revenue for operating year ``y`` (1-based).
    annual_maintenance : float
        O&M cost per year.
    years : int, optional
        Analysis horizon; defaults to ``settings.analysis_years``.
    discount_rate : float, optional
        Defaults to ``settings.discount_rate``.
    annual_energy_kwh, degradation_rate : float, optional
        First-year energy and its yearly decay for LCOE.  Taken from
        *revenue* when it is a :class:`RevenueModel`.
    extra_cash_flow : callable, optional
        Additional signed cash flow per year (loan payments, tax
        benefits, replacements).

    Returns
    -------
    FinancialMetrics
    """
    years = settings.analysis_years if years is None else years
    discount_rate = settings.discount_rate if discount_rate is None else discount_rate
    _check_years(years)
    _check_discount_rate(discount_rate)
    if net_cost <= 0:
        raise InvalidParameterError(f"net system cost must be positive, got {net_cost}")

    if isinstance(revenue, RevenueModel):
        if annual_energy_kwh is None:
            annual_energy_kwh = revenue.annual_production_kwh
        if degradation_rate is None:
            degradation_rate = revenue.degradation_rate
    annual_energy_kwh = 0.0 if annual_energy_kwh is None else annual_energy_kwh
    degradation_rate = 0.0 if degradation_rate is None else degradation_rate

    flows = []
    for year in range(1, years + 1):
        cf = revenue(year) - annual_maintenance
        if extra_cash_flow is not None:
            cf += extra_cash_flow(year)
        flows.append(cf)

    series = cash_flow_series(net_cost, flows, discount_rate)
    project_npv = series.discounted_cumulative[-1]
    first_revenue = revenue(1)

    irr = irr_scan(net_cost, flows)
    if irr is None:
        logger.warning(
            "IRR undefined: no rate in [%.1f%%, %.1f%%] brings NPV within %.2f",
            settings.irr_min_rate * 100.0, settings.irr_max_rate * 100.0,
            settings.irr_tolerance,
        )

    metrics = FinancialMetrics(
        net_system_cost=net_cost,
        payback_period=simple_payback(net_cost, first_revenue, annual_maintenance),
        discounted_payback_period=discounted_payback(series),
        npv=project_npv,
        irr=irr,
        roi=project_npv / net_cost,
        lcoe=lcoe(net_cost, annual_maintenance, annual_energy_kwh, years, discount_rate,
                  degradation_rate),
        annual_revenue=first_revenue,
        annual_maintenance=annual_maintenance,
        cash_flows=series,
    )
    logger.info(
        "Financials: NPV %.0f, IRR %s, payback %.1f yr",
        metrics.npv,
        "n/a" if irr is None else f"{irr * 100:.1f}%",
        metrics.payback_period,
        extra={"stage": "economics", "irr": irr},
    )
    return metrics
