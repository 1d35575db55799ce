"""Configuration system for the predator/prey simulation.

This module provides the dataclass-based parameter set the engine runs on:
- Per-kind behavior parameters for predators and prey
- World dimensions and boundary mode (toroidal vs bounded)
- Population capacity and statistics history size
- JSON serialization so the host can save/load presets

The engine only ever receives a WorldParameters instance; reading and
writing files is left to the host.
"""

import json
import math
import numbers
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Union

from agent import AgentKind
from exceptions import ConfigurationError
from utils import BoundaryMode


def _require(condition: bool, message: str):
    if not condition:
        raise ConfigurationError(message)


def _require_types(params, label: str):
    """Raise ConfigurationError for a scalar field holding the wrong type."""
    for f in fields(params):
        value = getattr(params, f.name)
        if f.type is bool:
            ok = isinstance(value, bool)
        elif f.type is int:
            ok = isinstance(value, numbers.Integral) and not isinstance(value, bool)
        elif f.type is float:
            ok = isinstance(value, numbers.Real) and not isinstance(value, bool)
        else:
            continue
        _require(ok, f"{label} {f.name} must be {f.type.__name__}, got {value!r}")


@dataclass
class PredatorParameters:
    """Behavior parameters for predators."""
    initial_energy: float = 100.0
    max_speed: float = 2.0
    perception_radius: float = 50.0
    capture_distance: float = 5.0
    energy_per_tick: float = 0.5
    energy_gain_from_prey: float = 50.0
    reproduction_threshold: float = 150.0
    reproduction_cost: float = 80.0
    initial_count: int = 10
    wander_strength: float = 0.3

    @property
    def sense_radius(self) -> float:
        return self.perception_radius

    def validate(self):
        _require_types(self, "predator")
        _require(self.initial_energy > 0, "predator initial_energy must be positive")
        _require(self.max_speed > 0, "predator max_speed must be positive")
        _require(self.perception_radius >= 0, "predator perception_radius must be non-negative")
        _require(self.capture_distance >= 0, "predator capture_distance must be non-negative")
        _require(self.energy_per_tick >= 0, "predator energy_per_tick must be non-negative")
        _require(self.energy_gain_from_prey >= 0, "predator energy_gain_from_prey must be non-negative")
        _require(self.reproduction_threshold >= 0, "predator reproduction_threshold must be non-negative")
        _require(self.reproduction_cost >= 0, "predator reproduction_cost must be non-negative")
        _require(self.initial_count >= 0, "predator initial_count must be non-negative")
        _require(self.wander_strength >= 0, "predator wander_strength must be non-negative")


@dataclass
class PreyParameters:
    """Behavior parameters for prey."""
    initial_energy: float = 80.0
    max_speed: float = 2.5
    detection_radius: float = 60.0
    flee_distance: float = 40.0
    energy_regeneration: float = 0.3
    energy_loss_fleeing: float = 0.2
    max_energy: float = 150.0
    reproduction_threshold: float = 120.0
    reproduction_cost: float = 60.0
    initial_count: int = 50
    wander_strength: float = 0.3

    @property
    def sense_radius(self) -> float:
        return self.detection_radius

    def validate(self):
        _require_types(self, "prey")
        _require(self.initial_energy > 0, "prey initial_energy must be positive")
        _require(self.max_speed > 0, "prey max_speed must be positive")
        _require(self.detection_radius >= 0, "prey detection_radius must be non-negative")
        _require(self.flee_distance >= 0, "prey flee_distance must be non-negative")
        _require(self.energy_regeneration >= 0, "prey energy_regeneration must be non-negative")
        _require(self.energy_loss_fleeing >= 0, "prey energy_loss_fleeing must be non-negative")
        _require(self.max_energy >= self.initial_energy, "prey max_energy must be >= initial_energy")
        _require(self.reproduction_threshold >= 0, "prey reproduction_threshold must be non-negative")
        _require(self.reproduction_cost >= 0, "prey reproduction_cost must be non-negative")
        _require(self.initial_count >= 0, "prey initial_count must be non-negative")
        _require(self.wander_strength >= 0, "prey wander_strength must be non-negative")


@dataclass
class WorldParameters:
    """Complete simulation configuration."""
    width: float = 800.0
    height: float = 600.0
    boundary_mode: BoundaryMode = BoundaryMode.TOROIDAL
    predator: PredatorParameters = field(default_factory=PredatorParameters)
    prey: PreyParameters = field(default_factory=PreyParameters)
    max_agents: int = 1000
    enable_reproduction: bool = True
    dt: float = 1.0  # Default tick duration used by the host
    statistics_capacity: int = 1000
    use_spatial_index: bool = True

    def validate(self):
        """Raise ConfigurationError if the parameters cannot build a world."""
        _require(isinstance(self.predator, PredatorParameters), "predator must be PredatorParameters")
        _require(isinstance(self.prey, PreyParameters), "prey must be PreyParameters")
        _require_types(self, "world")
        _require(math.isfinite(self.width) and self.width > 0, "world width must be positive")
        _require(math.isfinite(self.height) and self.height > 0, "world height must be positive")
        _require(isinstance(self.boundary_mode, BoundaryMode),
                 f"unknown boundary mode: {self.boundary_mode!r}")
        _require(self.max_agents >= 0, "max_agents must be non-negative")
        _require(math.isfinite(self.dt) and self.dt > 0, "dt must be positive")
        _require(self.statistics_capacity > 0, "statistics_capacity must be positive")

        self.predator.validate()
        self.prey.validate()

        initial_total = self.predator.initial_count + self.prey.initial_count
        _require(initial_total <= self.max_agents,
                 f"initial population {initial_total} exceeds max_agents {self.max_agents}")

    def params_for(self, kind: AgentKind) -> Union[PredatorParameters, PreyParameters]:
        """Get the behavior parameter block for an agent kind."""
        if kind is AgentKind.PREDATOR:
            return self.predator
        return self.prey

    @property
    def max_sense_radius(self) -> float:
        return max(self.predator.perception_radius, self.prey.detection_radius)

    def same_topology(self, other: 'WorldParameters') -> bool:
        return (self.width == other.width and self.height == other.height
                and self.boundary_mode is other.boundary_mode)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data['boundary_mode'] = self.boundary_mode.value
        return data

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict) -> 'WorldParameters':
        """Create from dictionary.

        Unknown keys are rejected so that typos in presets surface as
        ConfigurationError instead of silently using defaults.
        """
        data = dict(data)
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        _require(not unknown, f"unknown world parameters: {sorted(unknown)}")

        try:
            if 'boundary_mode' in data:
                data['boundary_mode'] = BoundaryMode(data['boundary_mode'])
            if 'predator' in data:
                data['predator'] = PredatorParameters(**data['predator'])
            if 'prey' in data:
                data['prey'] = PreyParameters(**data['prey'])
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"invalid world parameters: {e}") from e

        return cls(**data)

    @classmethod
    def from_json(cls, json_str: str) -> 'WorldParameters':
        """Create from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"invalid JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'WorldParameters':
        """Load and validate parameters from a JSON file."""
        params = cls.from_json(Path(path).read_text())
        params.validate()
        return params

    def save(self, path: Union[str, Path]):
        """Write parameters to a JSON file."""
        Path(path).write_text(self.to_json())

    @classmethod
    def default_bounded(cls) -> 'WorldParameters':
        """Create config with bounded (walled) world instead of toroidal."""
        return cls(boundary_mode=BoundaryMode.BOUNDED)
