"""Economic analysis module."""

from .metrics import FinancialMetrics, RevenueModel, compute_financial_metrics, irr_scan, lcoe, npv
from .financing import Incentives, Loan, loan_amortization, net_system_cost
from .investment import analyze_pv_investment
from .battery import BatteryEconomics, battery_economics

__all__ = [
    "FinancialMetrics",
    "RevenueModel",
    "compute_financial_metrics",
    "irr_scan",
    "lcoe",
    "npv",
    "Incentives",
    "Loan",
    "loan_amortization",
    "net_system_cost",
    "analyze_pv_investment",
    "BatteryEconomics",
    "battery_economics",
]
