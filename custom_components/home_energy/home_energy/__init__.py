"""Home Energy Core Module."""

from .battery import Battery
from .energy_flow import EnergyFlowCalculator, FlowEdge, attribute_flows
from .ev import EVController
from .payload import parse_live_payload
from .self_test import CheckResult, run_self_tests
from .series import SeriesBuffer, seed_series
from .session import MODE_LIVE, MODE_SIMULATED, SimulationSession
from .simulator import HomeEnergySimulator
from .sources import BaseLoad, HeatPump, PVSystem
from .state import SimulationState

__all__ = [
    "Battery",
    "PVSystem",
    "BaseLoad",
    "HeatPump",
    "EVController",
    "EnergyFlowCalculator",
    "FlowEdge",
    "attribute_flows",
    "HomeEnergySimulator",
    "SimulationState",
    "SeriesBuffer",
    "seed_series",
    "CheckResult",
    "run_self_tests",
    "parse_live_payload",
    "SimulationSession",
    "MODE_SIMULATED",
    "MODE_LIVE",
]
