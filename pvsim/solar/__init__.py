"""
Solar PV engine module.

Provides sun geometry, isotropic-sky transposition with Erbs
decomposition, NOCT cell temperature, inverter efficiency and clipping,
obstruction shading, array sizing and the hourly system model.
"""

from .geometry import SunPosition, angle_of_incidence, solar_position
from .irradiance import POAIrradiance, decompose_ghi, poa_irradiance
from .module import ModuleTechnology, SolarModule, cell_temperature, module_power
from .inverter import Inverter, InverterType, inverter_output
from .shading import HorizonProfile, PointObstruction, annual_shading_loss, is_shaded
from .array import ArrayConfiguration, auto_size_array, check_inverter_compatibility
from .pv_system import HourlySimulationResult, PVSystem, simulate_hour, simulate_hours

__all__ = [
    # geometry
    "SunPosition",
    "solar_position",
    "angle_of_incidence",
    # irradiance
    "POAIrradiance",
    "poa_irradiance",
    "decompose_ghi",
    # module
    "ModuleTechnology",
    "SolarModule",
    "cell_temperature",
    "module_power",
    # inverter
    "Inverter",
    "InverterType",
    "inverter_output",
    # shading
    "PointObstruction",
    "HorizonProfile",
    "is_shaded",
    "annual_shading_loss",
    # array
    "ArrayConfiguration",
    "auto_size_array",
    "check_inverter_compatibility",
    # pv_system
    "PVSystem",
    "HourlySimulationResult",
    "simulate_hour",
    "simulate_hours",
]
