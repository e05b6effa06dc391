"""Tests for pvsim.solar.geometry: declination, hour angle, sun position."""

from __future__ import annotations

import numpy as np
import pytest

from pvsim.core.errors import InvalidParameterError
from pvsim.solar.geometry import (
    MAX_DECLINATION_DEG,
    SunPosition,
    angle_of_incidence,
    declination,
    hour_angle,
    solar_position,
)


# ======================================================================
# Declination and hour angle
# ======================================================================


class TestDeclination:
    """Tests for declination()."""

    def test_equinox_is_zero(self):
        """March has zero declination."""
        assert declination(3) == pytest.approx(0.0, abs=1e-12)

    def test_june_is_maximum(self):
        """June reaches +23.45 deg."""
        assert declination(6) == pytest.approx(MAX_DECLINATION_DEG)

    def test_december_is_minimum(self):
        """December reaches -23.45 deg."""
        assert declination(12) == pytest.approx(-MAX_DECLINATION_DEG)

    def test_vectorised(self):
        """Arrays in, arrays out."""
        out = declination(np.arange(1, 13))
        assert out.shape == (12,)
        assert np.all(np.abs(out) <= MAX_DECLINATION_DEG + 1e-9)

    @pytest.mark.parametrize("month", [0, 13, -1])
    def test_out_of_range_month(self, month):
        """Months outside 1..12 are rejected."""
        with pytest.raises(InvalidParameterError):
            declination(month)


class TestHourAngle:
    """Tests for hour_angle()."""

    def test_solar_noon(self):
        assert hour_angle(12) == 0.0

    def test_fifteen_degrees_per_hour(self):
        """Morning is negative, afternoon positive."""
        assert hour_angle(9) == -45.0
        assert hour_angle(18) == 90.0


# ======================================================================
# Sun position
# ======================================================================


class TestSolarPosition:
    """Tests for solar_position()."""

    def test_san_francisco_june_noon(self):
        """Latitude 37.77, June, noon: sun is above 70 deg."""
        sun = solar_position(37.77, 6, 12)
        assert sun.elevation > 70.0
        assert sun.elevation == pytest.approx(90.0 - 37.77 + MAX_DECLINATION_DEG, abs=1e-6)

    def test_noon_azimuth_is_south(self):
        """Northern mid-latitude sun culminates due south."""
        sun = solar_position(37.77, 6, 12)
        assert sun.azimuth == pytest.approx(180.0, abs=1e-6)

    def test_southern_hemisphere_noon_azimuth_is_north(self):
        """South of the subsolar point the noon sun is due north."""
        sun = solar_position(-33.9, 6, 12)
        assert sun.azimuth % 360.0 == pytest.approx(0.0, abs=1e-6)

    def test_morning_sun_in_east(self):
        """Before noon the azimuth lies between north and south via east."""
        sun = solar_position(37.77, 6, 9)
        assert 0.0 < sun.azimuth < 180.0

    def test_afternoon_sun_in_west(self):
        sun = solar_position(37.77, 6, 15)
        assert 180.0 < sun.azimuth < 360.0

    def test_midnight_below_horizon(self):
        """Elevation is negative at midnight away from the poles."""
        sun = solar_position(37.77, 6, 0)
        assert sun.elevation < 0.0
        assert not sun.is_up

    def test_equator_equinox_zenith(self):
        """Equator at the equinox: sun overhead at noon."""
        sun = solar_position(0.0, 3, 12)
        assert sun.elevation == pytest.approx(90.0)
        assert sun.zenith == pytest.approx(0.0, abs=1e-9)

    def test_azimuth_range(self):
        """Azimuth is normalised to [0, 360) for every hour and month."""
        months = np.repeat(np.arange(1, 13), 24)
        hours = np.tile(np.arange(24), 12)
        sun = solar_position(37.77, months, hours)
        assert sun.azimuth.shape == (288,)
        assert np.all((sun.azimuth >= 0.0) & (sun.azimuth < 360.0))
        assert np.all((sun.elevation >= -90.0) & (sun.elevation <= 90.0))

    def test_morning_afternoon_symmetry(self):
        """Elevation is symmetric about solar noon."""
        am = solar_position(37.77, 4, 10)
        pm = solar_position(37.77, 4, 14)
        assert am.elevation == pytest.approx(pm.elevation)
        assert am.azimuth + pm.azimuth == pytest.approx(360.0)

    def test_invalid_latitude(self):
        with pytest.raises(InvalidParameterError):
            solar_position(91.0, 6, 12)

    def test_is_up_vectorised(self):
        sun = SunPosition(elevation=np.array([-1.0, 0.0, 5.0]), azimuth=np.array([90.0, 90.0, 90.0]))
        assert sun.is_up.tolist() == [False, False, True]


# ======================================================================
# Angle of incidence
# ======================================================================


class TestAngleOfIncidence:
    """Tests for angle_of_incidence()."""

    def test_horizontal_surface_equals_zenith(self):
        """A flat panel sees the sun at its zenith angle."""
        assert angle_of_incidence(0.0, 180.0, 35.0, 120.0) == pytest.approx(35.0)

    def test_surface_facing_sun(self):
        """Tilt equal to zenith and azimuth equal to sun azimuth gives 0."""
        assert angle_of_incidence(40.0, 200.0, 40.0, 200.0) == pytest.approx(0.0, abs=1e-6)

    def test_sun_behind_panel(self):
        """A vertical south face sees a northern sun beyond 90 deg."""
        assert angle_of_incidence(90.0, 180.0, 60.0, 0.0) > 90.0
