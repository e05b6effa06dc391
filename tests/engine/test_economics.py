"""Tests for pvsim.economics.metrics: revenue, cash flows, NPV, IRR, payback, LCOE."""

from __future__ import annotations

import math

import pytest

from pvsim.config import settings
from pvsim.core.errors import InvalidParameterError
from pvsim.economics.metrics import (
    RevenueModel,
    _discount_factor,
    cash_flow_series,
    compute_financial_metrics,
    discounted_payback,
    irr_scan,
    lcoe,
    npv,
    simple_payback,
)


# ======================================================================
# Discount factor
# ======================================================================


class TestDiscountFactor:
    """Tests for _discount_factor()."""

    def test_year_zero(self):
        """DF at year 0 is always 1.0."""
        assert _discount_factor(0.08, 0) == 1.0

    def test_known_value(self):
        """8% rate, year 5: 1/(1.08)^5."""
        assert abs(_discount_factor(0.08, 5) - 1.0 / 1.08**5) < 1e-10

    def test_zero_rate(self):
        """Zero discount rate: DF is always 1.0."""
        assert _discount_factor(0.0, 10) == 1.0


# ======================================================================
# Revenue
# ======================================================================


class TestRevenueModel:
    """Tests for RevenueModel."""

    def test_first_year_breakdown(self):
        """30 % of 10 MWh avoids 0.20/kWh, the rest earns 0.05, plus 10/MWh SREC."""
        revenue = RevenueModel(
            annual_production_kwh=10_000.0, electricity_rate=0.20,
            self_consumption_rate=0.3, feed_in_tariff=0.05,
            srec_price_per_mwh=10.0, price_inflation=0.0,
        )
        parts = revenue.breakdown(1)
        assert parts["savings"] == pytest.approx(600.0)
        assert parts["feed_in"] == pytest.approx(350.0)
        assert parts["srec"] == pytest.approx(100.0)
        assert revenue(1) == pytest.approx(1_050.0)

    def test_degradation_and_inflation(self):
        revenue = RevenueModel(
            annual_production_kwh=10_000.0, electricity_rate=0.20, self_consumption_rate=1.0,
            feed_in_tariff=0.0, price_inflation=0.03, degradation_rate=0.01,
        )
        assert revenue.production(2) == pytest.approx(9_900.0)
        assert revenue(2) == pytest.approx(9_900.0 * 0.20 * 1.03)

    def test_default_inflation_from_settings(self):
        revenue = RevenueModel(annual_production_kwh=1.0, electricity_rate=0.1)
        assert revenue.inflation == settings.price_inflation

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"annual_production_kwh": -1.0},
            {"self_consumption_rate": 1.2},
            {"degradation_rate": 1.0},
        ],
    )
    def test_invalid(self, kwargs):
        base = {"annual_production_kwh": 1_000.0, "electricity_rate": 0.1}
        base.update(kwargs)
        with pytest.raises(InvalidParameterError):
            RevenueModel(**base)


# ======================================================================
# Cash flows and payback
# ======================================================================


class TestCashFlows:
    """Tests for cash_flow_series() and the payback metrics."""

    def test_year_zero_is_investment(self):
        series = cash_flow_series(10_000.0, [2_000.0] * 10, 0.05)
        assert series.cumulative[0] == -10_000.0
        assert series.discounted_cumulative[0] == -10_000.0
        assert series.horizon == 10
        assert series.years == tuple(range(11))

    def test_simple_payback_scenario(self):
        """10,000 net cost and 2,000 per year pays back in exactly 5 years."""
        assert simple_payback(10_000.0, 2_000.0, 0.0) == 5.0

    def test_no_net_income_never_pays_back(self):
        assert simple_payback(10_000.0, 500.0, 500.0) == math.inf

    def test_discounted_payback_zero_rate(self):
        series = cash_flow_series(10_000.0, [2_000.0] * 25, 0.0)
        assert discounted_payback(series) == pytest.approx(5.0)

    def test_discounted_payback_interpolates(self):
        series = cash_flow_series(1_000.0, [400.0] * 5, 0.0)
        assert discounted_payback(series) == pytest.approx(2.5)

    def test_discounted_payback_within_first_year(self):
        series = cash_flow_series(100.0, [400.0] * 3, 0.0)
        assert discounted_payback(series) == pytest.approx(0.25)

    def test_discounted_payback_crossing_property(self):
        """Cumulative discounted cash is negative before and non-negative after the crossing."""
        series = cash_flow_series(10_000.0, [1_200.0] * 25, 0.06)
        dpp = discounted_payback(series)
        assert math.isfinite(dpp)
        cum = series.discounted_cumulative
        for year, value in enumerate(cum):
            if year < dpp:
                assert value < 0
            else:
                assert value >= 0

    def test_discounted_payback_never(self):
        series = cash_flow_series(10_000.0, [100.0] * 25, 0.05)
        assert discounted_payback(series) == math.inf

    def test_invalid_discount_rate(self):
        with pytest.raises(InvalidParameterError):
            cash_flow_series(1_000.0, [100.0], -1.0)


# ======================================================================
# NPV and IRR
# ======================================================================


def _priced_at(flows, rate):
    """Investment whose yearly *flows* return exactly *rate*."""
    return sum(cf / (1.0 + rate) ** y for y, cf in enumerate(flows, start=1))


class TestNPVAndIRR:
    """Tests for npv() and irr_scan()."""

    def test_npv_zero_rate(self):
        assert npv(1_000.0, [300.0] * 5, 0.0) == pytest.approx(500.0)

    def test_npv_known(self):
        assert npv(100.0, [110.0], 0.10) == pytest.approx(0.0)

    def test_irr_single_period(self):
        assert irr_scan(100_000.0, [110_000.0]) == pytest.approx(0.10, abs=1e-4)

    def test_npv_at_irr_within_tolerance(self):
        """Cost priced so the flows return exactly 20 %, a grid rate."""
        flows = [2_000.0] * 25
        cost = _priced_at(flows, 0.20)
        irr = irr_scan(cost, flows)
        assert irr is not None
        assert abs(npv(cost, flows, irr)) < settings.irr_tolerance
        assert irr == pytest.approx(0.20, abs=1e-9)

    def test_irr_negative_rate(self):
        """Cash flows that never repay the investment give a negative IRR."""
        flows = [300.0] * 10
        cost = _priced_at(flows, -0.10)
        assert cost > sum(flows)
        irr = irr_scan(cost, flows)
        assert irr == pytest.approx(-0.10, abs=1e-9)
        assert abs(npv(cost, flows, irr)) < settings.irr_tolerance

    def test_only_grid_rates_reported(self):
        """A root between grid rates is not refined."""
        flows = [130_000.0] * 25
        rates = [settings.irr_min_rate + settings.irr_step * i for i in range(1500)]
        assert not [r for r in rates if abs(npv(1_000_000.0, flows, r)) < settings.irr_tolerance]
        assert irr_scan(1_000_000.0, flows) is None

    def test_coarse_step_returns_first_grid_hit(self):
        """With a 5 % step the first rate within tolerance is 15 %, not the 19.9 % root."""
        irr = irr_scan(10_000.0, [2_000.0] * 25, step=0.05, tolerance=5_000.0)
        assert irr == pytest.approx(0.15)

    def test_irr_undefined(self):
        """Non-positive flows never bring NPV to zero."""
        assert irr_scan(1_000.0, [-10.0] * 10) is None

    def test_irr_empty_flows(self):
        assert irr_scan(1_000.0, []) is None

    def test_irr_invalid_range(self):
        with pytest.raises(InvalidParameterError):
            irr_scan(1_000.0, [100.0], min_rate=0.5, max_rate=0.1)


# ======================================================================
# LCOE
# ======================================================================


class TestLCOE:
    def test_known_value(self):
        assert lcoe(1_000.0, 0.0, 100.0, 1, 0.0) == pytest.approx(10.0)

    def test_maintenance_and_degradation_raise_cost(self):
        base = lcoe(10_000.0, 0.0, 5_000.0, 25, 0.04)
        assert lcoe(10_000.0, 100.0, 5_000.0, 25, 0.04) > base
        assert lcoe(10_000.0, 0.0, 5_000.0, 25, 0.04, degradation_rate=0.01) > base

    def test_no_energy_is_infinite(self):
        assert lcoe(1_000.0, 10.0, 0.0, 25, 0.04) == math.inf

    def test_invalid_years(self):
        with pytest.raises(InvalidParameterError):
            lcoe(1_000.0, 0.0, 100.0, 0, 0.04)


# ======================================================================
# Full computation
# ======================================================================


class TestComputeFinancialMetrics:
    """Tests for compute_financial_metrics()."""

    def test_payback_scenario(self):
        """Flat 2,000/yr on 10,000 with no discounting pays back in 5.0 years."""
        metrics = compute_financial_metrics(10_000.0, lambda year: 2_000.0, years=25, discount_rate=0.0)
        assert metrics.payback_period == 5.0
        assert metrics.discounted_payback_period == pytest.approx(5.0)
        assert metrics.npv == pytest.approx(40_000.0)
        assert metrics.roi == pytest.approx(4.0)
        assert metrics.annual_revenue == 2_000.0

    def test_cash_flow_series_attached(self):
        metrics = compute_financial_metrics(10_000.0, lambda year: 2_000.0, annual_maintenance=200.0,
                                            years=10, discount_rate=0.05)
        assert metrics.cash_flows.cash_flow[0] == -10_000.0
        assert metrics.cash_flows.cash_flow[1] == pytest.approx(1_800.0)
        assert metrics.npv == pytest.approx(metrics.cash_flows.discounted_cumulative[-1])
        assert metrics.npv == pytest.approx(npv(10_000.0, [1_800.0] * 10, 0.05))

    def test_irr_consistent_with_npv(self):
        cost = _priced_at([1_500.0] * 25, 0.12)
        metrics = compute_financial_metrics(cost, lambda year: 1_560.0, annual_maintenance=60.0, years=25)
        assert metrics.irr == pytest.approx(0.12, abs=1e-9)
        flows = [c for c in metrics.cash_flows.cash_flow[1:]]
        assert abs(npv(cost, flows, metrics.irr)) < settings.irr_tolerance

    def test_lcoe_from_revenue_model(self):
        revenue = RevenueModel(annual_production_kwh=10_000.0, electricity_rate=0.2)
        metrics = compute_financial_metrics(10_000.0, revenue, years=20, discount_rate=0.05)
        assert metrics.lcoe == pytest.approx(lcoe(10_000.0, 0.0, 10_000.0, 20, 0.05))

    def test_lcoe_without_energy(self):
        metrics = compute_financial_metrics(1_000.0, lambda year: 100.0, years=5)
        assert metrics.lcoe == math.inf

    def test_undefined_irr_logs_warning(self, caplog):
        with caplog.at_level("WARNING", logger="pvsim.economics.metrics"):
            metrics = compute_financial_metrics(10_000.0, lambda year: 0.0, annual_maintenance=100.0, years=10)
        assert metrics.irr is None
        assert metrics.payback_period == math.inf
        assert "IRR undefined" in caplog.text

    def test_extra_cash_flow(self):
        base = compute_financial_metrics(10_000.0, lambda y: 2_000.0, years=10, discount_rate=0.05)
        with_extra = compute_financial_metrics(10_000.0, lambda y: 2_000.0, years=10, discount_rate=0.05,
                                               extra_cash_flow=lambda y: -500.0 if y == 3 else 0.0)
        assert with_extra.npv == pytest.approx(base.npv - 500.0 / 1.05**3)

    def test_non_positive_cost_rejected(self):
        with pytest.raises(InvalidParameterError):
            compute_financial_metrics(0.0, lambda y: 100.0)
