"""Shared test fixtures for the pvsim engine tests."""

from __future__ import annotations

import numpy as np
import pytest
from numpy.typing import NDArray

from pvsim.battery.parameters import BatteryParameters
from pvsim.solar.array import ArrayConfiguration
from pvsim.solar.inverter import Inverter
from pvsim.solar.module import ModuleTechnology, SolarModule
from pvsim.solar.pv_system import PVSystem
from pvsim.weather.data import Location, WeatherData
from pvsim.weather.synthetic import synthetic_weather

HOURS_PER_DAY = 24

SAN_FRANCISCO = Location(latitude=37.77, longitude=-122.42, address="San Francisco, CA",
                         time_zone="America/Los_Angeles")


# ======================================================================
# Site and weather fixtures
# ======================================================================

@pytest.fixture
def location() -> Location:
    """Mid-latitude northern-hemisphere site."""
    return SAN_FRANCISCO


@pytest.fixture(scope="session")
def weather() -> WeatherData:
    """One deterministic synthetic year for San Francisco."""
    return synthetic_weather(SAN_FRANCISCO, year=2023, seed=42)


# ======================================================================
# Component fixtures
# ======================================================================

@pytest.fixture
def module() -> SolarModule:
    """360 W monocrystalline module."""
    return SolarModule(
        manufacturer="Acme Solar",
        model="AS-360M",
        power_rating=360.0,
        efficiency=0.21,
        length=1.7,
        width=1.0,
        technology=ModuleTechnology.MONOCRYSTALLINE,
        temperature_coefficient=-0.35,
        noct=45.0,
        voc=40.0,
        vmp=33.0,
    )


@pytest.fixture
def inverter() -> Inverter:
    """10 kW string inverter with a 200-800 V MPPT window."""
    return Inverter(
        manufacturer="Acme Power",
        model="AP-10K",
        rated_power_ac=10_000.0,
        max_dc_power=15_000.0,
        efficiency=0.97,
        min_mpp_voltage=200.0,
        max_mpp_voltage=800.0,
        mppt_count=2,
    )


@pytest.fixture
def array() -> ArrayConfiguration:
    """10 modules in series, 4 strings, south-facing at 30 deg."""
    return ArrayConfiguration(modules_in_series=10, strings_in_parallel=4, tilt=30.0, azimuth=180.0)


@pytest.fixture
def system(location, module, inverter, array) -> PVSystem:
    """14.4 kWp system on a 10 kW inverter."""
    return PVSystem(location=location, module=module, inverter=inverter, array=array)


@pytest.fixture
def battery() -> BatteryParameters:
    """10 kWh pack, 5 kW both ways, 90 % depth of discharge."""
    return BatteryParameters(
        capacity_kwh=10.0,
        max_charge_kw=5.0,
        max_discharge_kw=5.0,
        round_trip_efficiency=0.92,
        depth_of_discharge=0.9,
        cycle_life=4000,
        calendar_life_years=10.0,
        cost_per_kwh=500.0,
        installation_cost=1000.0,
    )


# ======================================================================
# Daily profile fixtures
# ======================================================================

@pytest.fixture
def flat_load() -> NDArray[np.float64]:
    """Constant 1 kW load."""
    return np.full(HOURS_PER_DAY, 1.0, dtype=np.float64)


@pytest.fixture
def no_pv() -> NDArray[np.float64]:
    return np.zeros(HOURS_PER_DAY, dtype=np.float64)
