"""Tests for pvsim.solar.irradiance: transposition and GHI decomposition."""

from __future__ import annotations

import numpy as np
import pytest

from pvsim.solar.irradiance import (
    SOLAR_CONSTANT,
    clearness_index,
    decompose_ghi,
    erbs_diffuse_fraction,
    extraterrestrial_irradiance,
    poa_irradiance,
)


class TestPOAIrradiance:
    """Tests for poa_irradiance()."""

    def test_horizontal_surface_recovers_ghi(self):
        """On a flat panel beam + diffuse add back up to GHI."""
        poa = poa_irradiance(800.0, 200.0, 30.0, 180.0, surface_tilt=0.0, surface_azimuth=180.0)
        assert poa.total == pytest.approx(800.0)
        assert poa.ground_reflected == pytest.approx(0.0)

    def test_sun_below_horizon_is_zero(self):
        poa = poa_irradiance(50.0, 50.0, 95.0, 270.0, surface_tilt=30.0, surface_azimuth=180.0)
        assert poa.total == 0.0

    def test_tilted_surface_gains_in_winter(self):
        """A south-tilted panel collects more than horizontal under a low sun."""
        flat = poa_irradiance(500.0, 100.0, 60.0, 180.0, surface_tilt=0.0, surface_azimuth=180.0)
        tilted = poa_irradiance(500.0, 100.0, 60.0, 180.0, surface_tilt=40.0, surface_azimuth=180.0)
        assert tilted.total > flat.total

    def test_blocked_beam(self):
        """A shaded hour keeps only diffuse and reflected light."""
        poa = poa_irradiance(
            800.0, 200.0, 30.0, 180.0, surface_tilt=30.0, surface_azimuth=180.0, beam_blocked=True
        )
        assert poa.beam == 0.0
        assert poa.total == pytest.approx(poa.sky_diffuse + poa.ground_reflected)
        assert poa.total > 0.0

    def test_albedo_override(self):
        dark = poa_irradiance(800.0, 200.0, 30.0, 180.0, 30.0, 180.0, albedo=0.0)
        snow = poa_irradiance(800.0, 200.0, 30.0, 180.0, 30.0, 180.0, albedo=0.8)
        assert dark.ground_reflected == 0.0
        assert snow.total > dark.total

    def test_dhi_clipped_to_ghi(self):
        """DHI larger than GHI never produces negative beam."""
        poa = poa_irradiance(100.0, 300.0, 30.0, 180.0, 30.0, 180.0)
        assert poa.beam == pytest.approx(0.0)

    def test_vectorised(self):
        ghi = np.array([0.0, 400.0, 900.0])
        dhi = np.array([0.0, 150.0, 120.0])
        zen = np.array([100.0, 50.0, 20.0])
        poa = poa_irradiance(ghi, dhi, zen, 180.0, 30.0, 180.0)
        total = poa.total
        assert total.shape == (3,)
        assert total[0] == 0.0
        assert total[2] > total[1] > 0.0


class TestDecomposition:
    """Tests for the Erbs correlation helpers."""

    def test_extraterrestrial_range(self):
        e0 = extraterrestrial_irradiance(np.arange(1, 366))
        assert np.all(e0 > SOLAR_CONSTANT * 0.96)
        assert np.all(e0 < SOLAR_CONSTANT * 1.04)

    def test_overcast_is_mostly_diffuse(self):
        assert erbs_diffuse_fraction(0.1) == pytest.approx(0.991)

    def test_clear_sky_floor(self):
        assert erbs_diffuse_fraction(0.9) == pytest.approx(0.165)

    def test_clearness_index_zero_at_night(self):
        assert clearness_index(0.0, 172, 100.0) == 0.0

    def test_decomposed_dhi_below_ghi(self):
        ghi = np.array([100.0, 500.0, 900.0])
        dhi = decompose_ghi(ghi, 172, np.array([70.0, 40.0, 20.0]))
        assert np.all(dhi <= ghi)
        assert np.all(dhi > 0.0)
