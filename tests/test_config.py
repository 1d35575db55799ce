"""Tests for the parameter dataclasses and their JSON presets."""

import sys
import os
import json

import pytest

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from agent import AgentKind
from config import WorldParameters, PredatorParameters, PreyParameters
from exceptions import ConfigurationError, SimulationError
from utils import BoundaryMode


def test_defaults_are_valid():
    """Test that the default configuration validates."""
    params = WorldParameters()
    params.validate()

    assert params.width == 800.0 and params.height == 600.0
    assert params.boundary_mode is BoundaryMode.TOROIDAL
    assert params.predator.initial_count == 10
    assert params.prey.initial_count == 50
    assert params.max_agents == 1000
    assert params.dt == 1.0
    assert params.max_sense_radius == 60.0
    print("✓ test_defaults_are_valid passed")


def test_params_for_kind():
    """Test per-kind parameter lookup."""
    params = WorldParameters()
    assert params.params_for(AgentKind.PREDATOR) is params.predator
    assert params.params_for(AgentKind.PREY) is params.prey
    assert params.predator.sense_radius == params.predator.perception_radius
    assert params.prey.sense_radius == params.prey.detection_radius


@pytest.mark.parametrize("field,value", [
    ("width", 0.0),
    ("height", -10.0),
    ("width", float('inf')),
    ("max_agents", -1),
    ("dt", 0.0),
    ("statistics_capacity", 0),
    ("boundary_mode", "sphere"),
])
def test_invalid_world_fields_rejected(field, value):
    params = WorldParameters()
    setattr(params, field, value)
    with pytest.raises(ConfigurationError):
        params.validate()


def test_invalid_kind_parameters_rejected():
    """Negative rates and radii fail validation."""
    params = WorldParameters(predator=PredatorParameters(max_speed=0.0))
    with pytest.raises(ConfigurationError):
        params.validate()

    params = WorldParameters(prey=PreyParameters(detection_radius=-1.0))
    with pytest.raises(ConfigurationError):
        params.validate()

    params = WorldParameters(prey=PreyParameters(initial_energy=200.0, max_energy=150.0))
    with pytest.raises(ConfigurationError, match="max_energy"):
        params.validate()


def test_initial_population_must_fit():
    """Initial counts above max_agents are a configuration error."""
    params = WorldParameters(max_agents=20)
    with pytest.raises(ConfigurationError, match="max_agents"):
        params.validate()

    params.prey.initial_count = 10
    params.validate()


def test_configuration_error_is_simulation_error():
    assert issubclass(ConfigurationError, SimulationError)


def test_json_round_trip():
    """Test serialization and deserialization."""
    params = WorldParameters(width=400, height=300, boundary_mode=BoundaryMode.BOUNDED, max_agents=250)
    params.predator.capture_distance = 8.0
    params.prey.flee_distance = 25.0

    restored = WorldParameters.from_json(params.to_json())
    assert restored == params
    assert restored.boundary_mode is BoundaryMode.BOUNDED
    assert isinstance(restored.predator, PredatorParameters)

    data = json.loads(params.to_json())
    assert data['boundary_mode'] == 'bounded'
    print("✓ test_json_round_trip passed")


def test_partial_preset_uses_defaults():
    params = WorldParameters.from_dict({'width': 300, 'prey': {'initial_count': 5}})
    assert params.width == 300
    assert params.height == 600.0
    assert params.prey.initial_count == 5
    assert params.prey.max_speed == 2.5


def test_unknown_keys_rejected():
    with pytest.raises(ConfigurationError, match="unknown"):
        WorldParameters.from_dict({'widht': 300})

    with pytest.raises(ConfigurationError):
        WorldParameters.from_dict({'predator': {'speed': 3.0}})


def test_bad_values_rejected():
    with pytest.raises(ConfigurationError):
        WorldParameters.from_dict({'boundary_mode': 'sphere'})

    with pytest.raises(ConfigurationError):
        WorldParameters.from_json("{not json")


@pytest.mark.parametrize("data", [
    {"width": "800"},
    {"max_agents": "1000"},
    {"max_agents": 10.5},
    {"enable_reproduction": "yes"},
    {"prey": {"initial_count": 5.0}},
    {"predator": {"max_speed": None}},
])
def test_wrongly_typed_values_rejected(data):
    """Values of the wrong type fail validation with ConfigurationError."""
    params = WorldParameters.from_dict(data)
    with pytest.raises(ConfigurationError, match="must be"):
        params.validate()


def test_save_and_load(tmp_path):
    """Presets survive a trip through a file."""
    path = tmp_path / "preset.json"
    params = WorldParameters(width=320, height=240)
    params.save(path)

    loaded = WorldParameters.load(path)
    assert loaded == params


def test_load_validates(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({'width': -5}))
    with pytest.raises(ConfigurationError):
        WorldParameters.load(path)

    path.write_text(json.dumps({"width": "800"}))
    with pytest.raises(ConfigurationError):
        WorldParameters.load(path)


def test_same_topology():
    a = WorldParameters()
    b = WorldParameters(max_agents=50, prey=PreyParameters(initial_count=10))
    assert a.same_topology(b)
    assert not a.same_topology(WorldParameters(width=100))
    assert not a.same_topology(WorldParameters.default_bounded())
