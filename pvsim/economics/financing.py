"""Financing and incentive terms: tax credits, rebates, loans and depreciation.

Extends the base metrics module with the pieces that turn a gross
system price into a net investment and a stream of financing cash
flows.
"""
from __future__ import annotations

from dataclasses import dataclass

from pvsim.core.errors import InvalidParameterError

# MACRS 5-year schedule (half-year convention, six tax years).
MACRS_5_YEAR: tuple[float, ...] = (0.20, 0.32, 0.192, 0.1152, 0.1152, 0.0576)
CORPORATE_TAX_RATE: float = 0.21


@dataclass(frozen=True)
class Incentives:
    """Upfront incentives; credits are fractions of the gross system cost."""

    federal_tax_credit: float = 0.30
    state_tax_credit: float = 0.0
    rebate: float = 0.0

    def __post_init__(self) -> None:
        for name in ("federal_tax_credit", "state_tax_credit"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise InvalidParameterError(f"{name} must be in [0, 1], got {value}")
        if self.rebate < 0:
            raise InvalidParameterError(f"rebate must be >= 0, got {self.rebate}")


def net_system_cost(system_cost: float, incentives: Incentives | None = None) -> float:
    """Gross cost minus federal and state credits and the cash rebate."""
    if system_cost <= 0:
        raise InvalidParameterError(f"system_cost must be positive, got {system_cost}")
    if incentives is None:
        return system_cost
    return (
        system_cost
        - system_cost * incentives.federal_tax_credit
        - system_cost * incentives.state_tax_credit
        - incentives.rebate
    )


@dataclass(frozen=True)
class Loan:
    principal: float
    annual_rate: float = 0.05
    term_years: int = 10

    def __post_init__(self) -> None:
        if self.principal < 0:
            raise InvalidParameterError(f"principal must be >= 0, got {self.principal}")
        if self.annual_rate < 0:
            raise InvalidParameterError(f"annual_rate must be >= 0, got {self.annual_rate}")
        if self.term_years <= 0:
            raise InvalidParameterError(f"term_years must be positive, got {self.term_years}")

    @property
    def monthly_payment(self) -> float:
        return loan_payment(self.principal, self.annual_rate, self.term_years)

    @property
    def annual_payment(self) -> float:
        return self.monthly_payment * 12

    def payment_in_year(self, year: int) -> float:
        """Loan outflow in operating *year* (zero after the term)."""
        return self.annual_payment if 1 <= year <= self.term_years else 0.0


def loan_payment(principal: float, annual_rate: float, term_years: int) -> float:
    """Fixed monthly payment of a monthly-compounded loan."""
    n = term_years * 12
    if principal <= 0 or n <= 0:
        return 0.0
    r = annual_rate / 12.0
    if r == 0:
        return principal / n
    return principal * r * (1 + r) ** n / ((1 + r) ** n - 1)


def loan_amortization(
    principal: float,
    annual_rate: float,
    term_years: int,
) -> list[dict[str, float]]:
    """Generate a yearly loan amortization schedule.

    Payments are monthly; each entry sums one year of them.

    Returns a list of dicts with keys: year, payment, principal_payment,
    interest_payment, remaining_balance.
    """
    if term_years <= 0 or principal <= 0:
        return []

    monthly = loan_payment(principal, annual_rate, term_years)
    r = annual_rate / 12.0
    balance = principal
    schedule = []
    for yr in range(1, term_years + 1):
        interest_sum = 0.0
        principal_sum = 0.0
        for _ in range(12):
            interest = balance * r
            principal_pmt = monthly - interest
            balance -= principal_pmt
            interest_sum += interest
            principal_sum += principal_pmt
        schedule.append({
            "year": yr,
            "payment": round(monthly * 12, 2),
            "principal_payment": round(principal_sum, 2),
            "interest_payment": round(interest_sum, 2),
            "remaining_balance": round(max(balance, 0.0), 2),
        })

    return schedule


def depreciation_benefit(
    system_cost: float,
    year: int,
    tax_rate: float = CORPORATE_TAX_RATE,
) -> float:
    """Tax saving from MACRS 5-year depreciation in operating *year*."""
    if 1 <= year <= len(MACRS_5_YEAR):
        return system_cost * MACRS_5_YEAR[year - 1] * tax_rate
    return 0.0
