"""Simulator module for the Home Energy system."""

import random
from datetime import tzinfo
from typing import Any, Dict, Optional

from .battery import Battery
from .energy_flow import EnergyFlowCalculator
from .ev import EVController
from .sources import BaseLoad, HeatPump, PVSystem, hour_of_day, sun_factor
from .state import SimulationState

MS_PER_HOUR = 3_600_000

# Step length assumed for the first sample of a run
BOOTSTRAP_STEP_HOURS = 1.0 / 60.0


class HomeEnergySimulator:
    """Generator of household energy samples.

    ``step`` is a pure transition: the next sample depends only on the
    previous sample, the timestamp and the random source passed in.
    """

    def __init__(self, config: Dict[str, Any] = None, tz: Optional[tzinfo] = None):
        """Initialize the simulator.

        Args:
            config: Configuration dictionary (uses defaults if None)
            tz: Time zone used to derive the local hour of day
        """
        if config is None:
            config = {}

        self.config = config
        self.tz = tz
        self.pv_system = PVSystem(config)
        self.base_load = BaseLoad(config)
        self.heat_pump = HeatPump(config)
        self.ev = EVController(config)
        self.battery = Battery(
            {
                "capacity_kwh": config.get("battery_capacity_kwh", 10.0),
                "max_power_kw": config.get("battery_max_power_kw", 4.0),
                "initial_soc_percent": config.get("battery_initial_soc_percent", 60.0),
            }
        )
        self.energy_flow = EnergyFlowCalculator(self.battery)

    def step(
        self,
        prev: Optional[SimulationState],
        time_ms: int,
        rng: random.Random,
    ) -> SimulationState:
        """Derive the sample at ``time_ms`` from the previous one.

        Args:
            prev: Previous sample, or None to bootstrap a new run
            time_ms: Timestamp of the new sample in milliseconds
            rng: Random source for all noise terms

        Returns:
            New simulation state
        """
        hour = hour_of_day(time_ms, self.tz)
        sun = sun_factor(hour)

        pv = self.pv_system.power_kw(sun, rng)
        load_base = self.base_load.power_kw(time_ms, rng)
        heat_pump = self.heat_pump.power_kw(time_ms, rng)

        if prev is None:
            ev_soc = self.ev.initial_soc(rng)
            battery_soc = self.battery.initial_soc_percent
            dt_h = BOOTSTRAP_STEP_HOURS
        else:
            ev_soc = prev.evSoc
            battery_soc = prev.batterySoc
            dt_h = max(0.0, (time_ms - prev.time) / MS_PER_HOUR)

        ev_power = self.ev.decide(hour, sun, ev_soc, rng)
        balance = self.energy_flow.calculate_power_balance(
            pv, load_base, heat_pump, ev_power, battery_soc
        )
        battery_power = balance["battery_power_kw"]
        grid = balance["grid_kw"]

        return SimulationState(
            time=int(time_ms),
            pv=pv,
            loadBase=load_base,
            heatPump=heat_pump,
            evPower=ev_power,
            evSoc=self.ev.next_soc(ev_soc, ev_power, dt_h),
            batterySoc=self.battery.next_soc(battery_soc, battery_power, dt_h),
            batteryPower=battery_power,
            grid=grid,
            **integrate_energy(prev, pv, grid, ev_power, dt_h),
        )


def integrate_energy(
    prev: Optional[SimulationState],
    pv: float,
    grid: float,
    ev_power: float,
    dt_h: float,
) -> Dict[str, float]:
    """Advance the cumulative energy counters by one step.

    Every increment is non-negative, so counters never decrease.

    Args:
        prev: Previous sample holding the running totals (None starts at 0)
        pv: PV generation in kW
        grid: Grid power in kW (positive import)
        ev_power: EV power in kW (positive charging)
        dt_h: Step length in hours

    Returns:
        Dictionary of the five counters in kWh
    """
    dt_h = max(0.0, dt_h)
    return {
        "pvEnergy": (prev.pvEnergy if prev else 0.0) + max(0.0, pv) * dt_h,
        "gridImportEnergy": (prev.gridImportEnergy if prev else 0.0)
        + max(0.0, grid) * dt_h,
        "gridExportEnergy": (prev.gridExportEnergy if prev else 0.0)
        + max(0.0, -grid) * dt_h,
        "evChargeEnergy": (prev.evChargeEnergy if prev else 0.0)
        + max(0.0, ev_power) * dt_h,
        "evDischargeEnergy": (prev.evDischargeEnergy if prev else 0.0)
        + max(0.0, -ev_power) * dt_h,
    }
