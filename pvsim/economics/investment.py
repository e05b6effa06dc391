"""PV investment analysis: incentives, maintenance, financing and tax
benefits layered onto the core cash-flow metrics."""

from __future__ import annotations

import logging
from typing import Optional

from pvsim.config import settings
from pvsim.economics.financing import (
    CORPORATE_TAX_RATE,
    Incentives,
    Loan,
    depreciation_benefit,
    net_system_cost,
)
from pvsim.economics.metrics import FinancialMetrics, RevenueModel, compute_financial_metrics

logger = logging.getLogger(__name__)


def analyze_pv_investment(
    system_cost: float,
    revenue: RevenueModel,
    incentives: Optional[Incentives] = None,
    maintenance_fraction: Optional[float] = None,
    loan: Optional[Loan] = None,
    include_depreciation: bool = False,
    tax_rate: float = CORPORATE_TAX_RATE,
    years: Optional[int] = None,
    discount_rate: Optional[float] = None,
) -> FinancialMetrics:
    """Financial metrics of a PV system purchase.

    Parameters
    ----------
    system_cost : float
        Gross installed price.
    revenue : RevenueModel
        Yearly revenue model.
    incentives : Incentives, optional
        Tax credits and rebate deducted from *system_cost* at year 0.
    maintenance_fraction : float, optional
        Yearly O&M as a fraction of *system_cost*; defaults to
        ``settings.maintenance_fraction``.
    loan : Loan, optional
        Loan whose annual payments are deducted during its term.
    include_depreciation : bool
        Add MACRS 5-year depreciation tax savings.
    tax_rate : float
        Tax rate for the depreciation benefit.
    years, discount_rate : optional
        Analysis horizon and discount rate (settings defaults).
    """
    fraction = settings.maintenance_fraction if maintenance_fraction is None else maintenance_fraction
    net_cost = net_system_cost(system_cost, incentives)
    maintenance = system_cost * fraction

    def financing_flow(year: int) -> float:
        flow = 0.0
        if loan is not None:
            flow -= loan.payment_in_year(year)
        if include_depreciation:
            flow += depreciation_benefit(system_cost, year, tax_rate)
        return flow

    logger.debug(
        "PV investment: gross %.0f, net %.0f, O&M %.0f/yr", system_cost, net_cost, maintenance
    )
    return compute_financial_metrics(
        net_cost,
        revenue,
        annual_maintenance=maintenance,
        years=years,
        discount_rate=discount_rate,
        extra_cash_flow=financing_flow,
    )
