"""Battery module for the Home Energy simulator."""

from typing import Any, Dict

from .state import SOC_MAX_PERCENT, SOC_MIN_PERCENT, clamp


class Battery:
    """Represents a battery storage system with a SOC-proportional rate limit."""

    def __init__(self, config: Dict[str, Any] = None):
        """Initialize the battery with configuration parameters.

        Args:
            config: Dictionary containing battery configuration
        """
        if config is None:
            config = {}
        self.capacity_kwh = config.get("capacity_kwh", 10.0)
        self.max_power_kw = config.get("max_power_kw", 4.0)
        self.min_soc_percent = config.get("min_soc_percent", SOC_MIN_PERCENT)
        self.max_soc_percent = config.get("max_soc_percent", SOC_MAX_PERCENT)
        self.initial_soc_percent = config.get("initial_soc_percent", 60.0)

        self._validate_config()

    def _validate_config(self) -> None:
        """Validate battery configuration parameters."""
        if self.capacity_kwh <= 0:
            raise ValueError("Battery capacity must be positive")
        if self.max_power_kw < 0:
            raise ValueError("Battery power limit must be non-negative")
        if not 0 <= self.min_soc_percent <= 100:
            raise ValueError("Min SOC must be between 0 and 100%")
        if not 0 <= self.max_soc_percent <= 100:
            raise ValueError("Max SOC must be between 0 and 100%")
        if self.min_soc_percent >= self.max_soc_percent:
            raise ValueError("Min SOC must be less than max SOC")

    def max_charge_power_kw(self, soc_percent: float) -> float:
        """Get the charge rate available at a given SOC.

        The rate shrinks linearly with the remaining headroom, so a full
        battery accepts nothing.

        Args:
            soc_percent: Current state of charge in percent

        Returns:
            Maximum charge power in kW
        """
        return max(0.0, self.max_power_kw * (1.0 - soc_percent / 100.0))

    def max_discharge_power_kw(self, soc_percent: float) -> float:
        """Get the discharge rate available at a given SOC.

        Args:
            soc_percent: Current state of charge in percent

        Returns:
            Maximum discharge power in kW
        """
        return max(0.0, self.max_power_kw * (soc_percent / 100.0))

    def next_soc(self, soc_percent: float, power_kw: float, dt_h: float) -> float:
        """Integrate power over a step and return the clamped SOC.

        Args:
            soc_percent: SOC at the start of the step in percent
            power_kw: Positive for charging, negative for discharging
            dt_h: Step length in hours

        Returns:
            SOC at the end of the step in percent
        """
        soc = soc_percent + (power_kw * 100.0 * dt_h) / self.capacity_kwh
        return clamp(soc, self.min_soc_percent, self.max_soc_percent)

    def get_config(self) -> Dict[str, Any]:
        """Get current battery configuration."""
        return {
            "capacity_kwh": self.capacity_kwh,
            "max_power_kw": self.max_power_kw,
            "min_soc_percent": self.min_soc_percent,
            "max_soc_percent": self.max_soc_percent,
            "initial_soc_percent": self.initial_soc_percent,
        }
