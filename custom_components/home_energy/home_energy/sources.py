"""Source and load models for the Home Energy simulator.

All models are evaluated from the absolute timestamp of the sample, so the
same timestamp and random stream always give the same values.
"""

import math
import random
from datetime import datetime, tzinfo
from typing import Any, Dict, Optional

from .state import clamp

MS_PER_MINUTE = 60_000


def hour_of_day(time_ms: int, tz: Optional[tzinfo] = None) -> float:
    """Return the fractional local hour (hour + minute / 60) of a timestamp.

    Args:
        time_ms: Timestamp in milliseconds since the epoch
        tz: Time zone for the local hour (system local time if None)

    Returns:
        Hour of day in [0, 24)
    """
    local = datetime.fromtimestamp(time_ms / 1000.0, tz)
    return local.hour + local.minute / 60.0


def sun_factor(hour: float) -> float:
    """Return the sun elevation factor: 0 outside 06:00-18:00, 1 at noon."""
    return max(0.0, math.sin(((hour - 6.0) / 12.0) * math.pi))


class PVSystem:
    """Photovoltaic generator driven by the sun factor."""

    def __init__(self, config: Dict[str, Any] = None):
        """Initialize the PV system.

        Args:
            config: Dictionary containing PV configuration
        """
        if config is None:
            config = {}
        self.peak_power_kw = config.get("pv_peak_power_kw", 6.0)
        self.exponent = config.get("pv_sun_exponent", 1.4)
        self.noise_min = config.get("pv_noise_min", 0.85)
        self.noise_max = config.get("pv_noise_max", 1.15)

        self._validate_config()

    def _validate_config(self) -> None:
        """Validate PV configuration parameters."""
        if self.peak_power_kw < 0:
            raise ValueError("PV peak power must be non-negative")
        if self.exponent <= 0:
            raise ValueError("Sun exponent must be positive")
        if not 0 <= self.noise_min <= self.noise_max:
            raise ValueError("PV noise bounds must satisfy 0 <= min <= max")

    def power_kw(self, sun: float, rng: random.Random) -> float:
        """Return PV generation in kW for a given sun factor."""
        noise = rng.uniform(self.noise_min, self.noise_max)
        return (sun**self.exponent) * self.peak_power_kw * noise


class BaseLoad:
    """Household baseline consumption with a slow oscillation."""

    def __init__(self, config: Dict[str, Any] = None):
        if config is None:
            config = {}
        self.mean_kw = config.get("base_load_mean_kw", 0.6)
        self.amplitude_kw = config.get("base_load_amplitude_kw", 0.2)
        self.period_minutes = config.get("base_load_period_minutes", 15.0)
        self.noise_kw = config.get("base_load_noise_kw", 0.05)
        self.floor_kw = config.get("base_load_floor_kw", 0.3)

        if self.period_minutes <= 0:
            raise ValueError("Base load period must be positive")
        if self.floor_kw < 0:
            raise ValueError("Base load floor must be non-negative")

    def power_kw(self, time_ms: int, rng: random.Random) -> float:
        """Return the base load in kW, never below the floor."""
        phase = 2.0 * math.pi * time_ms / (self.period_minutes * MS_PER_MINUTE)
        load = (
            self.mean_kw
            + self.amplitude_kw * math.sin(phase)
            + rng.uniform(-self.noise_kw, self.noise_kw)
        )
        return max(self.floor_kw, load)


class HeatPump:
    """Heat pump with a duty-cycle-like draw clamped to device limits."""

    def __init__(self, config: Dict[str, Any] = None):
        if config is None:
            config = {}
        self.offset_kw = config.get("heat_pump_offset_kw", 0.5)
        self.cycle_kw = config.get("heat_pump_cycle_kw", 1.2)
        self.cycle_depth = config.get("heat_pump_cycle_depth", 0.6)
        self.period_minutes = config.get("heat_pump_period_minutes", 8.0)
        self.noise_kw = config.get("heat_pump_noise_kw", 0.1)
        self.min_power_kw = config.get("heat_pump_min_power_kw", 0.3)
        self.max_power_kw = config.get("heat_pump_max_power_kw", 2.4)

        if self.period_minutes <= 0:
            raise ValueError("Heat pump period must be positive")
        if not 0 <= self.min_power_kw <= self.max_power_kw:
            raise ValueError("Heat pump limits must satisfy 0 <= min <= max")

    def power_kw(self, time_ms: int, rng: random.Random) -> float:
        """Return the heat pump draw in kW."""
        phase = 2.0 * math.pi * time_ms / (self.period_minutes * MS_PER_MINUTE)
        cycle = 1.0 + self.cycle_depth * math.sin(phase)
        draw = (
            self.offset_kw
            + cycle * self.cycle_kw
            + rng.uniform(-self.noise_kw, self.noise_kw)
        )
        return clamp(draw, self.min_power_kw, self.max_power_kw)
