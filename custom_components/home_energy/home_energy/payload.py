"""Parsing of live-feed messages into simulation states."""

import json
import logging
import math
from typing import Any, Dict, Optional

from .simulator import BOOTSTRAP_STEP_HOURS, MS_PER_HOUR, integrate_energy
from .state import ENERGY_FIELDS, SOC_MAX_PERCENT, SOC_MIN_PERCENT, SimulationState, clamp

_LOGGER = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "pv",
    "loadBase",
    "heatPump",
    "evPower",
    "evSoc",
    "batterySoc",
    "batteryPower",
    "grid",
)


def _as_number(value: Any) -> Optional[float]:
    """Return value as a finite float, or None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


def parse_live_payload(
    text: str,
    previous: Optional[SimulationState],
    now_ms: int,
) -> Optional[SimulationState]:
    """Turn one live-feed text message into a state.

    Malformed messages and messages whose values overflow yield None
    instead of raising.

    Args:
        text: UTF-8 JSON message
        previous: Last accepted state, used to continue the energy counters
        now_ms: Receive time, used when the message carries no timestamp

    Returns:
        Parsed state, or None if the message is malformed
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError, RecursionError) as err:
        _LOGGER.debug("Discarding unparsable live payload: %s", err)
        return None

    if not isinstance(data, dict):
        _LOGGER.debug("Discarding live payload that is not an object")
        return None

    values: Dict[str, float] = {}
    for key in REQUIRED_FIELDS:
        number = _as_number(data.get(key))
        if number is None:
            _LOGGER.debug("Discarding live payload with invalid %s: %r", key, data.get(key))
            return None
        values[key] = number

    time_value = _as_number(data.get("time"))
    time_ms = int(time_value) if time_value is not None else int(now_ms)

    if previous is None:
        dt_h = BOOTSTRAP_STEP_HOURS
    else:
        dt_h = (time_ms - previous.time) / MS_PER_HOUR
    counters = integrate_energy(
        previous, values["pv"], values["grid"], values["evPower"], dt_h
    )
    for key in ENERGY_FIELDS:
        reported = _as_number(data.get(key))
        floor = getattr(previous, key) if previous else 0.0
        if reported is not None and reported >= floor:
            counters[key] = reported

    values["evSoc"] = clamp(values["evSoc"], SOC_MIN_PERCENT, SOC_MAX_PERCENT)
    values["batterySoc"] = clamp(values["batterySoc"], SOC_MIN_PERCENT, SOC_MAX_PERCENT)

    state = SimulationState(time=time_ms, **values, **counters)
    if not state.is_finite():
        _LOGGER.debug("Discarding live payload that overflows at time=%d", time_ms)
        return None
    return state
