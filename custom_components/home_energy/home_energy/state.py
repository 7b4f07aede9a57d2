"""State model for the Home Energy simulator."""

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict

SOC_MIN_PERCENT = 5.0
SOC_MAX_PERCENT = 100.0

POWER_PRECISION = 2
ENERGY_PRECISION = 1

POWER_FIELDS = (
    "pv",
    "loadBase",
    "heatPump",
    "evPower",
    "evSoc",
    "batterySoc",
    "batteryPower",
    "grid",
    "loadTotal",
)
ENERGY_FIELDS = (
    "pvEnergy",
    "gridImportEnergy",
    "gridExportEnergy",
    "evChargeEnergy",
    "evDischargeEnergy",
)


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp value into [lower, upper]."""
    return max(lower, min(upper, value))


def round_half_up(value: float, digits: int) -> float:
    """Round to a fixed number of decimals, halves away from -inf.

    Rounding a value that already has the target precision returns it
    unchanged.
    """
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


@dataclass(frozen=True)
class SimulationState:
    """One immutable sample of the household energy system.

    Powers are in kW, SOC values in percent, energy counters in kWh and
    ``time`` in milliseconds of the simulated clock. Values are kept at
    full precision; ``as_record`` applies display rounding.
    """

    time: int
    pv: float
    loadBase: float
    heatPump: float
    evPower: float
    evSoc: float
    batterySoc: float
    batteryPower: float
    grid: float
    pvEnergy: float = 0.0
    gridImportEnergy: float = 0.0
    gridExportEnergy: float = 0.0
    evChargeEnergy: float = 0.0
    evDischargeEnergy: float = 0.0
    loadTotal: float = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "loadTotal",
            self.loadBase + self.heatPump + max(0.0, self.evPower),
        )

    @property
    def grid_direction(self) -> str:
        """Return "import", "export" or "neutral" from the grid sign."""
        if self.grid > 0:
            return "import"
        if self.grid < 0:
            return "export"
        return "neutral"

    def is_finite(self) -> bool:
        """Return True if every numeric field is finite."""
        return all(math.isfinite(value) for value in asdict(self).values())

    def as_record(self) -> Dict[str, Any]:
        """Return the flat output record with display rounding applied."""
        record: Dict[str, Any] = {"time": int(self.time)}
        for name in POWER_FIELDS:
            record[name] = round_half_up(getattr(self, name), POWER_PRECISION)
        for name in ENERGY_FIELDS:
            record[name] = round_half_up(getattr(self, name), ENERGY_PRECISION)
        return record
