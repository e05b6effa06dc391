"""Tests for pvsim.battery: parameters, SOC tracking and aging."""

from __future__ import annotations

import pytest

from pvsim.battery.degradation import (
    aging_fraction,
    battery_lifespan_years,
    capacity_factor,
    replacement_years,
)
from pvsim.battery.parameters import BatteryChemistry, BatteryParameters, lfp, lithium_ion
from pvsim.battery.soc_tracker import SOCTracker
from pvsim.core.errors import InvalidParameterError


# ======================================================================
# Parameters
# ======================================================================


class TestBatteryParameters:
    """Tests for BatteryParameters and presets."""

    def test_usable_capacity(self, battery):
        assert battery.usable_capacity_kwh == pytest.approx(9.0)

    def test_total_cost(self, battery):
        assert battery.total_cost == pytest.approx(6_000.0)

    def test_derated(self, battery):
        aged = battery.derated(0.8)
        assert aged.capacity_kwh == pytest.approx(8.0)
        assert aged.usable_capacity_kwh == pytest.approx(7.2)
        assert battery.capacity_kwh == 10.0

    def test_presets(self):
        li = lithium_ion(13.5)
        phosphate = lfp(10.0)
        assert li.max_charge_kw == pytest.approx(6.75)
        assert phosphate.chemistry is BatteryChemistry.LFP
        assert phosphate.cycle_life > li.cycle_life

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"capacity_kwh": 0.0},
            {"max_charge_kw": -1.0},
            {"round_trip_efficiency": 1.2},
            {"depth_of_discharge": 0.0},
            {"cycle_life": 0},
            {"cost_per_kwh": -5.0},
        ],
    )
    def test_invalid(self, kwargs):
        base = {"capacity_kwh": 10.0, "max_charge_kw": 5.0, "max_discharge_kw": 5.0}
        base.update(kwargs)
        with pytest.raises(InvalidParameterError):
            BatteryParameters(**base)


# ======================================================================
# SOC tracker
# ======================================================================


class TestSOCTracker:
    """Tests for SOCTracker energy accounting."""

    def test_default_initial_soc(self, battery):
        tracker = SOCTracker(battery)
        assert tracker.soc_kwh == pytest.approx(4.5)
        assert tracker.soc_fraction == pytest.approx(0.5)

    def test_charge_applies_efficiency(self, battery):
        tracker = SOCTracker(battery)
        accepted = tracker.charge(2.0)
        assert accepted == 2.0
        assert tracker.soc_kwh == pytest.approx(4.5 + 2.0 * 0.92)
        assert tracker.charge_throughput_kwh == 2.0

    def test_charge_power_limit(self, battery):
        tracker = SOCTracker(battery, initial_soc_kwh=0.0)
        assert tracker.charge(8.0) == 5.0

    def test_charge_capacity_limit(self, battery):
        tracker = SOCTracker(battery, initial_soc_kwh=8.5)
        accepted = tracker.charge(3.0)
        assert accepted == pytest.approx(0.5)
        assert tracker.soc_kwh <= battery.usable_capacity_kwh

    def test_discharge_limited_by_soc(self, battery):
        tracker = SOCTracker(battery, initial_soc_kwh=1.0)
        assert tracker.discharge(3.0) == pytest.approx(1.0)
        assert tracker.is_empty

    def test_discharge_power_limit(self, battery):
        tracker = SOCTracker(battery, initial_soc_kwh=9.0)
        assert tracker.is_full
        assert tracker.discharge(7.0) == 5.0
        assert tracker.soc_kwh == pytest.approx(4.0)

    def test_non_positive_requests(self, battery):
        tracker = SOCTracker(battery)
        assert tracker.charge(0.0) == 0.0
        assert tracker.discharge(-1.0) == 0.0
        assert tracker.soc_kwh == pytest.approx(4.5)

    def test_reset(self, battery):
        tracker = SOCTracker(battery, initial_soc_kwh=2.0)
        tracker.charge(3.0)
        tracker.discharge(1.0)
        tracker.reset()
        assert tracker.soc_kwh == 2.0
        assert tracker.charge_throughput_kwh == 0.0
        assert tracker.discharge_throughput_kwh == 0.0

    @pytest.mark.parametrize("soc", [-0.1, 9.5])
    def test_invalid_initial_soc(self, battery, soc):
        with pytest.raises(InvalidParameterError):
            SOCTracker(battery, initial_soc_kwh=soc)


# ======================================================================
# Aging
# ======================================================================


class TestDegradation:
    """Tests for linear aging and replacement timing."""

    def test_new_battery(self, battery):
        assert capacity_factor(battery, 0.0, 0.0) == 1.0

    def test_end_of_life_floor(self, battery):
        assert capacity_factor(battery, 10_000.0, 0.0) == pytest.approx(0.8)
        assert capacity_factor(battery, 0.0, 30.0) == pytest.approx(0.8)

    def test_worse_mechanism_governs(self, battery):
        """2000 of 4000 cycles beats 1 of 10 calendar years."""
        assert aging_fraction(battery, 2_000.0, 1.0) == pytest.approx(0.5)
        assert aging_fraction(battery, 400.0, 5.0) == pytest.approx(0.5)

    def test_lifespan(self, battery):
        """One cycle a day wears out 4000 cycles in 10.96 years; calendar life caps it at 10."""
        assert battery_lifespan_years(battery, 1.0) == pytest.approx(10.0)
        assert battery_lifespan_years(battery, 2.0) == pytest.approx(4000 / 730)
        assert battery_lifespan_years(battery, 0.0) == 10.0

    def test_replacement_years(self):
        assert replacement_years(10.0, 25) == [10, 20]
        assert replacement_years(8.5, 25) == [9, 17]
        assert replacement_years(25.0, 25) == []
        assert replacement_years(30.0, 25) == []

    def test_invalid_aging_inputs(self, battery):
        with pytest.raises(InvalidParameterError):
            aging_fraction(battery, -1.0, 0.0)
        with pytest.raises(InvalidParameterError):
            replacement_years(0.0, 25)
