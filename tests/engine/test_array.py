"""Tests for pvsim.solar.array: configuration, losses and inverter matching."""

from __future__ import annotations

import pytest

from pvsim.config import settings
from pvsim.core.errors import IncompatibleComponentsError, InvalidParameterError
from pvsim.solar.array import (
    ArrayConfiguration,
    auto_size_array,
    check_inverter_compatibility,
    optimal_modules_in_series,
    optimal_strings_in_parallel,
)
from pvsim.solar.inverter import Inverter


class TestArrayConfiguration:
    """Tests for ArrayConfiguration validation and derived values."""

    def test_dc_rating(self, array, module):
        """360 W x 10 x 4 = 14,400 W."""
        assert array.module_count == 40
        assert array.dc_rating_w(module) == 14_400.0

    def test_dc_loss_factor(self, array):
        assert array.dc_loss_factor == pytest.approx(0.98 * 0.97 * 0.98 * 0.98)

    def test_default_albedo_from_settings(self, array):
        assert array.ground_albedo == settings.ground_albedo

    def test_albedo_override(self):
        snowy = ArrayConfiguration(modules_in_series=10, strings_in_parallel=2, albedo=0.7)
        assert snowy.ground_albedo == 0.7

    def test_zero_losses_allowed(self):
        lossless = ArrayConfiguration(
            modules_in_series=1, strings_in_parallel=1,
            soiling_loss=0.0, shading_loss=0.0, mismatch_loss=0.0, dc_wiring_loss=0.0,
        )
        assert lossless.dc_loss_factor == 1.0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"modules_in_series": 0},
            {"strings_in_parallel": -1},
            {"tilt": 95.0},
            {"soiling_loss": 1.0},
            {"availability_loss": -0.1},
            {"albedo": 1.5},
        ],
    )
    def test_invalid(self, kwargs):
        base = {"modules_in_series": 10, "strings_in_parallel": 4}
        base.update(kwargs)
        with pytest.raises(InvalidParameterError):
            ArrayConfiguration(**base)


class TestInverterMatching:
    """Tests for string sizing against the MPPT window."""

    def test_compatible_layout(self, module, inverter):
        result = check_inverter_compatibility(module, inverter, 10, 4)
        assert result.is_valid
        assert result.array_dc_power == 14_400.0
        assert result.dc_ac_ratio == pytest.approx(1.44)
        assert result.max_array_voltage == pytest.approx(10 * 40.0 * (1 + 0.0035 * 35))
        assert result.min_array_voltage == pytest.approx(10 * 33.0 * (1 - 0.004 * 50))

    def test_too_many_in_series(self, module, inverter):
        result = check_inverter_compatibility(module, inverter, 20, 1)
        assert not result.voltage_in_range
        assert not result.is_valid

    def test_too_much_dc_power(self, module, inverter):
        result = check_inverter_compatibility(module, inverter, 10, 5)
        assert result.voltage_in_range
        assert not result.power_in_range

    def test_optimal_series_count(self, module, inverter):
        """Feasible window is 8..17 modules; the midpoint rounds up to 13."""
        assert optimal_modules_in_series(module, inverter) == 13

    def test_optimal_strings(self, module, inverter):
        assert optimal_strings_in_parallel(module, inverter, 13) == 3

    def test_auto_size(self, module, inverter):
        result = auto_size_array(module, inverter)
        assert (result.modules_in_series, result.strings_in_parallel) == (13, 3)
        assert result.is_valid

    def test_auto_size_with_fixed_series(self, module, inverter):
        result = auto_size_array(module, inverter, modules_in_series=10)
        assert result.modules_in_series == 10
        assert result.strings_in_parallel == 3

    def test_narrow_window_is_incompatible(self, module):
        picky = Inverter("X", "Narrow", 5_000.0, 6_000.0, 0.96, min_mpp_voltage=500.0, max_mpp_voltage=520.0)
        with pytest.raises(IncompatibleComponentsError):
            optimal_modules_in_series(module, picky)

    def test_string_exceeds_dc_limit(self, module):
        tiny = Inverter("X", "Tiny", 1_000.0, 1_200.0, 0.96, min_mpp_voltage=100.0, max_mpp_voltage=800.0)
        with pytest.raises(IncompatibleComponentsError):
            auto_size_array(module, tiny, modules_in_series=10)

    def test_incompatible_is_value_error(self):
        assert issubclass(IncompatibleComponentsError, ValueError)
