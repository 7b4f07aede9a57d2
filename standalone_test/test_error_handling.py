#!/usr/bin/env python3
"""
Error handling and edge case testing for the Home Energy simulator.

Invalid configuration is rejected when components are built; bad runtime
input is reported or dropped without raising.
"""

import json
import logging
import random
import sys
from datetime import timezone
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "custom_components" / "home_energy"))

from home_energy import (
    Battery,
    BaseLoad,
    EVController,
    HeatPump,
    HomeEnergySimulator,
    PVSystem,
    SeriesBuffer,
    SimulationSession,
    SimulationState,
    parse_live_payload,
)

sys.path.insert(0, str(Path(__file__).resolve().parent))
import home_energy_cli

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@pytest.mark.parametrize(
    "factory, config",
    [
        (Battery, {"capacity_kwh": 0.0}),
        (Battery, {"capacity_kwh": -5.0}),
        (Battery, {"max_power_kw": -1.0}),
        (Battery, {"min_soc_percent": 80.0, "max_soc_percent": 50.0}),
        (Battery, {"max_soc_percent": 120.0}),
        (PVSystem, {"pv_peak_power_kw": -1.0}),
        (PVSystem, {"pv_sun_exponent": 0.0}),
        (PVSystem, {"pv_noise_min": 1.2, "pv_noise_max": 1.0}),
        (BaseLoad, {"base_load_period_minutes": 0.0}),
        (HeatPump, {"heat_pump_min_power_kw": 3.0, "heat_pump_max_power_kw": 2.0}),
        (EVController, {"ev_v2h_start_hour": 22.0, "ev_v2h_end_hour": 18.0}),
        (EVController, {"ev_capacity_kwh": 0.0}),
        (HomeEnergySimulator, {"battery_capacity_kwh": 0.0}),
    ],
)
def test_invalid_configurations(factory, config):
    """Invalid configuration values raise ValueError."""
    logger.info("Testing %s with %s", factory.__name__, config)
    with pytest.raises(ValueError):
        factory(config)


def test_default_configuration_is_valid():
    simulator = HomeEnergySimulator()
    assert simulator.battery.get_config()["capacity_kwh"] == 10.0
    assert simulator.ev.battery.get_config()["capacity_kwh"] == 60.0


def test_invalid_session_arguments():
    with pytest.raises(ValueError):
        SimulationSession(step_ms=0)
    with pytest.raises(ValueError):
        SeriesBuffer(capacity=0)


def test_backwards_time_does_not_reduce_counters():
    """A timestamp before the previous sample integrates nothing."""
    simulator = HomeEnergySimulator(tz=timezone.utc)
    rng = random.Random(12)
    prev = simulator.step(None, 1_750_000_000_000, rng)
    state = simulator.step(prev, prev.time - 3_600_000, rng)

    assert state.pvEnergy == prev.pvEnergy
    assert state.gridImportEnergy == prev.gridImportEnergy
    assert state.batterySoc == prev.batterySoc


def test_payload_errors_do_not_raise():
    for text in ("", "null", "{}", "not json", "{\"pv\": 1}"):
        assert parse_live_payload(text, None, 0) is None


def test_extreme_inputs_are_clamped():
    battery = Battery()
    assert battery.next_soc(50.0, 1e9, 1.0) == 100.0
    assert battery.next_soc(50.0, -1e9, 1.0) == 5.0
    assert battery.max_discharge_power_kw(-10.0) == 0.0
    assert battery.max_charge_power_kw(150.0) == 0.0


def test_deeply_nested_payload_is_discarded():
    """Nesting beyond the parser's recursion limit is a malformed message."""
    assert parse_live_payload("[" * 200000 + "]" * 200000, None, 0) is None
    assert parse_live_payload('{"pv": ' + "[" * 200000, None, 0) is None


def test_overflowing_payload_is_discarded():
    """Finite but extreme values that integrate to infinity are dropped."""
    fields = {
        "loadBase": 0.5,
        "heatPump": 1.0,
        "evPower": 0.0,
        "evSoc": 60.0,
        "batterySoc": 50.0,
        "batteryPower": 0.0,
        "grid": 0.0,
    }
    previous = SimulationState(time=0, pv=1.0, **fields)
    text = json.dumps({"time": 1000 * 3_600_000, "pv": 1e308, **fields})
    assert parse_live_payload(text, previous, 0) is None

    text = json.dumps({"pv": 0.0, **dict(fields, loadBase=1e308, heatPump=1e308)})
    assert parse_live_payload(text, None, 0) is None

    text = json.dumps({"time": 60_000, "pv": 2.0, **fields})
    state = parse_live_payload(text, previous, 0)
    assert state is not None
    assert state.is_finite()


def test_cli_runs_seeded_session(capsys):
    argv = ["--seed", "1", "--start-time", "2025-06-08T12:00:00", "--steps", "5", "--verbose"]
    assert home_energy_cli.main(argv) == 0
    output = capsys.readouterr().out
    assert "SIMULATED SAMPLES" in output
    assert "Samples in series: 65" in output


@pytest.mark.parametrize("last", ["0", "-3"])
def test_cli_rejects_empty_table(last, capsys):
    assert home_energy_cli.main(["--seed", "1", "--last", last]) == 1
    assert "SIMULATED SAMPLES" not in capsys.readouterr().out


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
