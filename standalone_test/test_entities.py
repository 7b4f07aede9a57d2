#!/usr/bin/env python3
"""Tests for the Home Energy sensor entities."""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

pytest.importorskip("homeassistant")

# Add the repository root to the path for the integration package
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from custom_components.home_energy.sensor import (
    SENSOR_DESCRIPTIONS,
    HomeEnergyFlowSensor,
    HomeEnergyRecordSensor,
)


def _config_entry():
    entry = MagicMock()
    entry.entry_id = "entry1"
    return entry


def _coordinator(point=None, **data):
    coordinator = MagicMock()
    coordinator.last_update_success = True
    coordinator.data = {"point": point, **data}
    return coordinator


def test_record_sensor_names_and_ids():
    description = SENSOR_DESCRIPTIONS[0]
    sensor = HomeEnergyRecordSensor(_coordinator(), _config_entry(), description)

    assert sensor.name == "Home Energy PV Power"
    assert sensor.unique_id == "entry1_pv"
    assert sensor.entity_description is description


def test_record_sensor_value():
    point = {"pv": 2.34, "gridImportEnergy": 1.2}
    descriptions = {description.key: description for description in SENSOR_DESCRIPTIONS}

    pv = HomeEnergyRecordSensor(_coordinator(point), _config_entry(), descriptions["pv"])
    energy = HomeEnergyRecordSensor(
        _coordinator(point), _config_entry(), descriptions["gridImportEnergy"]
    )
    assert pv.native_value == 2.34
    assert energy.native_value == 1.2

    missing = HomeEnergyRecordSensor(_coordinator(), _config_entry(), descriptions["pv"])
    assert not missing.available
    assert missing.native_value is None


def test_flow_sensor_reports_direction():
    coordinator = _coordinator(
        {"grid": -1.8},
        grid_direction="export",
        flows=[{"source": "PV", "sink": "Grid", "power_kw": 1.8}],
        mode="simulated",
        last_update=None,
    )
    sensor = HomeEnergyFlowSensor(coordinator, _config_entry())

    assert sensor.name == "Home Energy Energy Flow"
    assert sensor.native_value == "export"
    assert sensor.extra_state_attributes["flows"][0]["sink"] == "Grid"
    assert sensor.extra_state_attributes["mode"] == "simulated"


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
