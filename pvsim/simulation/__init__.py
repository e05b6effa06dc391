"""End-to-end simulation: PV production, battery dispatch and economics."""

from .runner import (
    EconomicInputs,
    SimulationInputs,
    SimulationResult,
    SimulationRunner,
    simulate,
    simulate_cached,
)

__all__ = [
    "EconomicInputs",
    "SimulationInputs",
    "SimulationResult",
    "SimulationRunner",
    "simulate",
    "simulate_cached",
]
