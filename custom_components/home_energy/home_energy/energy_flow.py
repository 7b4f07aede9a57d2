"""Energy Flow Calculator for the Home Energy simulator."""

from typing import Dict, List, NamedTuple

from .battery import Battery
from .state import SimulationState

NODE_PV = "PV"
NODE_HOUSE = "House"
NODE_BATTERY = "Battery"
NODE_GRID = "Grid"
NODE_HEAT_PUMP = "HeatPump"
NODE_EV = "EV"

NODES = (NODE_PV, NODE_HOUSE, NODE_BATTERY, NODE_GRID, NODE_HEAT_PUMP, NODE_EV)

# Edges at or below this magnitude are display noise
FLOW_THRESHOLD_KW = 0.05


class FlowEdge(NamedTuple):
    """Directed power flow between two nodes."""

    source: str
    sink: str
    power_kw: float


class EnergyFlowCalculator:
    """Balances PV generation against consumption using battery and grid."""

    def __init__(self, battery: Battery):
        """Initialize the energy flow calculator.

        Args:
            battery: Battery instance providing the rate limits
        """
        self.battery = battery

    def calculate_power_balance(
        self,
        pv_kw: float,
        load_base_kw: float,
        heat_pump_kw: float,
        ev_power_kw: float,
        battery_soc_percent: float,
    ) -> Dict[str, float]:
        """Resolve battery and grid power for one sample.

        EV discharge offsets household consumption before the balance is
        struck. The grid absorbs whatever the battery cannot, so a sample
        either imports or exports, never both.

        Args:
            pv_kw: PV generation in kW
            load_base_kw: Household base load in kW
            heat_pump_kw: Heat pump draw in kW
            ev_power_kw: EV power in kW (positive charging, negative V2H)
            battery_soc_percent: Battery SOC at the start of the step

        Returns:
            Dictionary with load_total_kw, surplus_kw, battery_power_kw, grid_kw
        """
        load_total_kw = load_base_kw + heat_pump_kw + max(0.0, ev_power_kw)
        effective_load_kw = load_total_kw + min(0.0, ev_power_kw)
        surplus_kw = pv_kw - effective_load_kw

        if surplus_kw > 0:
            flows = self._handle_surplus(surplus_kw, battery_soc_percent)
        else:
            flows = self._handle_deficit(-surplus_kw, battery_soc_percent)

        flows.update({"load_total_kw": load_total_kw, "surplus_kw": surplus_kw})
        return flows

    def _handle_surplus(self, surplus_kw: float, soc_percent: float) -> Dict[str, float]:
        """Charge the battery from surplus and export the rest."""
        can_charge_kw = self.battery.max_charge_power_kw(soc_percent)
        battery_power_kw = min(surplus_kw, can_charge_kw)
        return {
            "battery_power_kw": battery_power_kw,
            "grid_kw": -max(0.0, surplus_kw - battery_power_kw),
        }

    def _handle_deficit(self, deficit_kw: float, soc_percent: float) -> Dict[str, float]:
        """Cover a deficit from the battery first, then import."""
        can_discharge_kw = self.battery.max_discharge_power_kw(soc_percent)
        discharge_kw = min(deficit_kw, can_discharge_kw)
        return {
            "battery_power_kw": -discharge_kw,
            "grid_kw": deficit_kw - discharge_kw,
        }


def calculate_flow_edges(state: SimulationState) -> List[FlowEdge]:
    """Decompose a sample into all labeled source -> sink edges.

    This is a presentation heuristic. Per-node inflow and outflow are not
    guaranteed to balance.
    """
    house_kw = state.loadBase + state.heatPump
    edges = [
        FlowEdge(NODE_PV, NODE_HOUSE, min(state.pv, max(0.0, house_kw))),
        FlowEdge(NODE_PV, NODE_BATTERY, max(0.0, state.batteryPower)),
        FlowEdge(NODE_PV, NODE_GRID, max(0.0, -min(0.0, state.grid))),
        FlowEdge(NODE_BATTERY, NODE_HOUSE, max(0.0, -state.batteryPower)),
        FlowEdge(NODE_GRID, NODE_HOUSE, max(0.0, state.grid)),
        FlowEdge(NODE_HOUSE, NODE_HEAT_PUMP, max(0.0, state.heatPump)),
        FlowEdge(NODE_PV, NODE_EV, max(0.0, state.evPower)),
        FlowEdge(
            NODE_BATTERY,
            NODE_EV,
            max(0.0, state.evPower - max(0.0, state.pv - house_kw)),
        ),
        FlowEdge(NODE_EV, NODE_HOUSE, max(0.0, -state.evPower)),
        FlowEdge(
            NODE_EV,
            NODE_GRID,
            max(0.0, -state.evPower - max(0.0, house_kw - state.pv)),
        ),
    ]
    return edges


def attribute_flows(
    state: SimulationState, threshold_kw: float = FLOW_THRESHOLD_KW
) -> List[FlowEdge]:
    """Return the edges worth displaying.

    Args:
        state: Sample to decompose
        threshold_kw: Edges with power at or below this value are dropped

    Returns:
        List of flow edges in a fixed order
    """
    return [
        edge for edge in calculate_flow_edges(state) if edge.power_kw > threshold_kw
    ]


def primary_pv_flows(state: SimulationState) -> List[float]:
    """Return the unfiltered PV->House, PV->Battery and PV->Grid powers."""
    return [edge.power_kw for edge in calculate_flow_edges(state)[:3]]
