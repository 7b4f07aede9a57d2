"""Electric vehicle module for the Home Energy simulator."""

import random
from typing import Any, Dict

from .battery import Battery


class EVController:
    """Rule-based charge / vehicle-to-home controller.

    Rules are evaluated in a fixed order and a later matching rule replaces
    the decision of an earlier one:

    1. Day charge while the sun is up and the car is below its target.
    2. Evening V2H while the car still holds more than its reserve.
    """

    def __init__(self, config: Dict[str, Any] = None):
        """Initialize the EV controller.

        Args:
            config: Dictionary containing EV configuration
        """
        if config is None:
            config = {}
        self.day_charge_target_percent = config.get("ev_day_charge_target_percent", 90.0)
        self.day_charge_min_sun = config.get("ev_day_charge_min_sun", 0.2)
        self.max_charge_power_kw = config.get("ev_max_charge_power_kw", 7.0)
        self.v2h_start_hour = config.get("ev_v2h_start_hour", 18.0)
        self.v2h_end_hour = config.get("ev_v2h_end_hour", 22.0)
        self.v2h_reserve_percent = config.get("ev_v2h_reserve_percent", 40.0)
        self.max_v2h_power_kw = config.get("ev_max_v2h_power_kw", 3.0)
        self.battery = Battery(
            {
                "capacity_kwh": config.get("ev_capacity_kwh", 60.0),
                "max_power_kw": self.max_charge_power_kw,
            }
        )

        self._validate_config()

    def _validate_config(self) -> None:
        """Validate EV configuration parameters."""
        if self.max_charge_power_kw < 0 or self.max_v2h_power_kw < 0:
            raise ValueError("EV power limits must be non-negative")
        if not 0 <= self.v2h_start_hour <= self.v2h_end_hour <= 24:
            raise ValueError("V2H window must satisfy 0 <= start <= end <= 24")
        if not 0 <= self.v2h_reserve_percent <= 100:
            raise ValueError("V2H reserve must be between 0 and 100%")

    def initial_soc(self, rng: random.Random) -> float:
        """Draw a starting SOC for a new run."""
        return 50.0 + rng.uniform(0.0, 20.0)

    def decide(self, hour: float, sun: float, ev_soc: float, rng: random.Random) -> float:
        """Return the EV power for this step.

        Args:
            hour: Fractional local hour of day
            sun: Sun factor in [0, 1]
            ev_soc: EV state of charge at the start of the step in percent
            rng: Random source for the V2H power draw

        Returns:
            EV power in kW, positive when charging, negative for V2H
        """
        power_kw = 0.0
        if sun > self.day_charge_min_sun and ev_soc < self.day_charge_target_percent:
            power_kw = min(self.max_charge_power_kw, 1.0 + sun * 6.0)
        if self.v2h_start_hour <= hour <= self.v2h_end_hour and ev_soc > self.v2h_reserve_percent:
            power_kw = -min(self.max_v2h_power_kw, 1.5 + rng.uniform(0.0, 1.0))
        return power_kw

    def next_soc(self, ev_soc: float, power_kw: float, dt_h: float) -> float:
        """Integrate EV power over a step and return the clamped SOC."""
        return self.battery.next_soc(ev_soc, power_kw, dt_h)
