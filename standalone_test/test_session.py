#!/usr/bin/env python3
"""Standalone tests for the Home Energy session, self-test and live payloads."""

import json
import random
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add the home_energy module to the path
sys.path.insert(0, str(Path(__file__).parent.parent / "custom_components" / "home_energy"))

from home_energy import (
    MODE_LIVE,
    MODE_SIMULATED,
    HomeEnergySimulator,
    SimulationSession,
    SimulationState,
    parse_live_payload,
    run_self_tests,
)
from home_energy.self_test import NO_DATA, all_passed

NOW_MS = int(datetime(2025, 6, 8, 12, 0, tzinfo=timezone.utc).timestamp() * 1000)
STEP_MS = 60_000


def _session(seed=1, **kwargs):
    return SimulationSession(
        simulator=HomeEnergySimulator(tz=timezone.utc),
        rng=random.Random(seed),
        **kwargs,
    )


def _state(time_ms, **overrides):
    values = {
        "time": time_ms,
        "pv": 2.0,
        "loadBase": 0.6,
        "heatPump": 1.0,
        "evPower": 0.0,
        "evSoc": 70.0,
        "batterySoc": 50.0,
        "batteryPower": 0.4,
        "grid": 0.0,
    }
    values.update(overrides)
    return SimulationState(**values)


def _payload(**overrides):
    data = {
        "time": NOW_MS,
        "pv": 3.0,
        "loadBase": 0.5,
        "heatPump": 1.0,
        "evPower": 0.0,
        "evSoc": 70.0,
        "batterySoc": 40.0,
        "batteryPower": 1.5,
        "grid": 0.0,
    }
    data.update(overrides)
    return json.dumps(data)


def test_start_seeds_one_hour():
    session = _session()
    session.start(now_ms=NOW_MS)

    assert session.running
    assert session.mode == MODE_SIMULATED
    assert len(session.series()) == 60
    assert session.current.time == NOW_MS
    assert session.current is session.series()[-1]


def test_tick_advances_clock():
    session = _session()
    session.start(now_ms=NOW_MS)

    state = session.tick()
    assert state.time == NOW_MS + STEP_MS
    assert session.current is state
    assert len(session.series()) == 61


def test_stopped_session_does_not_tick():
    session = _session()
    assert session.tick() is None

    session.start(now_ms=NOW_MS)
    session.stop()
    assert session.tick() is None
    assert session.current.time == NOW_MS

    # Restart resumes without reseeding
    session.start(now_ms=NOW_MS + 10 * STEP_MS)
    assert len(session.series()) == 60
    assert session.tick().time == NOW_MS + STEP_MS


def test_long_session_is_bounded():
    session = _session()
    session.start(now_ms=NOW_MS)
    for _ in range(400):
        session.tick()

    series = session.series()
    assert len(series) == 360
    assert series[-1].time == NOW_MS + 400 * STEP_MS
    assert series[0].time == NOW_MS + 41 * STEP_MS
    assert all_passed(session.self_test())


def test_same_seed_same_session():
    first = _session(seed=3)
    second = _session(seed=3)
    first.start(now_ms=NOW_MS)
    second.start(now_ms=NOW_MS)
    for _ in range(30):
        first.tick()
        second.tick()
    assert first.series() == second.series()


def test_switch_to_live_clears_history():
    session = _session()
    session.start(now_ms=NOW_MS)
    session.use_simulation(False)

    assert session.mode == MODE_LIVE
    assert session.series() == ()
    assert session.current is None
    assert session.tick() is None


def test_ingest_only_in_live_mode():
    session = _session()
    session.start(now_ms=NOW_MS)
    assert not session.ingest(_state(NOW_MS + STEP_MS))

    session.use_simulation(False)
    assert session.ingest(_state(NOW_MS))
    assert not session.ingest(_state(NOW_MS))
    assert not session.ingest(_state(NOW_MS - STEP_MS))
    assert session.ingest(_state(NOW_MS + 1000))
    assert len(session.series()) == 2
    assert session.current.time == NOW_MS + 1000


def test_switch_back_reseeds():
    session = _session(use_simulation=False)
    session.start(now_ms=NOW_MS)
    assert session.series() == ()

    later = NOW_MS + 3_600_000
    session.use_simulation(True, now_ms=later)
    assert session.mode == MODE_SIMULATED
    assert len(session.series()) == 60
    assert session.current.time == later


def test_switch_to_same_mode_keeps_history():
    session = _session()
    session.start(now_ms=NOW_MS)
    session.use_simulation(True, now_ms=NOW_MS + 3_600_000)
    assert session.current.time == NOW_MS


def test_snapshot():
    session = _session()
    empty = session.snapshot()
    assert empty["point"] is None
    assert empty["series"] == []
    assert empty["flows"] == []

    session.start(now_ms=NOW_MS)
    snapshot = session.snapshot()
    assert snapshot["mode"] == MODE_SIMULATED
    assert snapshot["running"] is True
    assert snapshot["point"]["time"] == NOW_MS
    assert len(snapshot["series"]) == 60
    assert len(snapshot["self_test"]) == 7
    assert all(result["pass"] for result in snapshot["self_test"])
    for edge in snapshot["flows"]:
        assert set(edge) == {"source", "sink", "power_kw"}
        assert edge["power_kw"] > 0.05


def test_self_test_without_data():
    results = run_self_tests([])
    assert [result.name for result in results] == [
        "Battery SOC within 5..100%",
        "EV SOC within 5..100%",
        "No NaN values",
        "Series length > 10",
        "Flows >= 0",
        "Energy counters non-decreasing",
        "Series time ascending",
    ]
    assert results[0].message == NO_DATA
    assert not results[0].passed
    assert not results[3].passed
    assert results[3].message == "len=0"
    assert not all_passed(results)


def test_self_test_reports_failures():
    series = [_state(NOW_MS + index * STEP_MS) for index in range(12)]
    assert all_passed(run_self_tests(series))

    results = run_self_tests(series, _state(NOW_MS, batterySoc=120.0))
    assert not results[0].passed
    assert results[1].passed

    results = run_self_tests(series, _state(NOW_MS, pv=float("nan")))
    assert not results[2].passed
    assert "pv" in results[2].message

    short = run_self_tests(series[:5])
    assert not short[3].passed


def test_self_test_detects_order_and_counters():
    series = [
        _state(NOW_MS, pvEnergy=2.0),
        _state(NOW_MS + STEP_MS, pvEnergy=1.0),
        _state(NOW_MS, pvEnergy=3.0),
    ]
    results = run_self_tests(series)
    assert not results[5].passed
    assert not results[6].passed


def test_self_test_as_dict():
    result = run_self_tests([])[3]
    assert result.as_dict() == {
        "name": "Series length > 10",
        "pass": False,
        "message": "len=0",
    }


def test_parse_valid_payload():
    state = parse_live_payload(_payload(), None, NOW_MS + 5000)

    assert state.time == NOW_MS
    assert state.pv == 3.0
    assert state.loadTotal == pytest.approx(1.5)
    assert state.pvEnergy == pytest.approx(3.0 / 60.0)
    assert state.gridImportEnergy == 0.0


def test_parse_payload_defaults_time():
    text = json.dumps({key: value for key, value in json.loads(_payload()).items() if key != "time"})
    state = parse_live_payload(text, None, NOW_MS + 5000)
    assert state.time == NOW_MS + 5000


def test_parse_payload_continues_counters():
    previous = _state(NOW_MS - 3_600_000, pvEnergy=10.0, gridImportEnergy=4.0)

    state = parse_live_payload(_payload(pvEnergy=5.0), previous, NOW_MS)
    assert state.pvEnergy == pytest.approx(13.0)
    assert state.gridImportEnergy == pytest.approx(4.0)

    state = parse_live_payload(_payload(pvEnergy=12.5), previous, NOW_MS)
    assert state.pvEnergy == 12.5


def test_parse_payload_clamps_soc():
    state = parse_live_payload(_payload(batterySoc=150.0, evSoc=-3.0), None, NOW_MS)
    assert state.batterySoc == 100.0
    assert state.evSoc == 5.0


@pytest.mark.parametrize(
    "text",
    [
        "{",
        "[1, 2, 3]",
        '"text"',
        json.dumps({"pv": 1.0}),
    ],
)
def test_parse_malformed_payload(text):
    assert parse_live_payload(text, None, NOW_MS) is None


def test_parse_payload_rejects_bad_values():
    assert parse_live_payload(_payload().replace('"pv": 3.0', '"pv": NaN'), None, NOW_MS) is None
    assert parse_live_payload(_payload(grid="1.0"), None, NOW_MS) is None
    assert parse_live_payload(_payload(evPower=True), None, NOW_MS) is None
    assert parse_live_payload(_payload(heatPump=None), None, NOW_MS) is None


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
